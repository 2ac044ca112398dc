"""Transposition and retuning of fretted notes.

Frets move by per-string semitone deltas. A fret pushed below zero wraps
up an octave and one pushed past the highest fret wraps down an octave, so
every result stays a playable fret.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from tabmode import constants
from tabmode.base import RegionSpansMultipleStaves
from tabmode.cell import NoteCell, cell_at, parse_line, render_line, replace_cell
from tabmode.cursor import TabContext
from tabmode.document import Staff, TabDocument, cell_column, cell_index
from tabmode.tuning import Tuning, learn_tuning, parse_note_name, unique_prefix


def wrap_fret(fret: int) -> int:
    """Bring a transposed fret back into 0..MAX_FRET by whole octaves."""
    while fret < 0:
        fret += constants.OCTAVE
    while fret > constants.MAX_FRET:
        fret -= constants.OCTAVE
    return fret


def nearest_shift(semitones: int) -> int:
    """Normalize a semitone difference into (-6, 6]."""
    shift = semitones % constants.OCTAVE
    if shift > constants.OCTAVE // 2:
        shift -= constants.OCTAVE
    return shift


def retune_deltas(source: Tuning, target: Tuning) -> List[int]:
    """Per-string fret shifts that keep pitches when moving between tunings."""
    return [
        nearest_shift(old - new) for old, new in zip(source.pitches, target.pitches)
    ]


class Transposer:
    """Rewrites fret numbers and string prefixes in a document."""

    def __init__(self, document: TabDocument) -> None:
        self._document = document

    def _region_staff(self, begin: TabContext, end: TabContext) -> Staff:
        if begin.staff_index != end.staff_index:
            raise RegionSpansMultipleStaves(begin, end)
        return self._document.staff(begin.staff_index)

    def transpose(
        self, begin: TabContext, end: TabContext, deltas: Sequence[int]
    ) -> int:
        """Shift every note between two columns by a per-string delta.

        Args:
            begin: One corner of the region.
            end: The other corner; must be in the same staff.
            deltas: Semitones to add on each string, high string first.

        Returns:
            The number of notes rewritten.

        Raises:
            RegionSpansMultipleStaves: If the corners are in different staves.
        """
        assert len(deltas) == constants.NUM_STRINGS
        staff = self._region_staff(begin, end)
        start = cell_index(min(begin.column, end.column))
        stop = cell_index(max(begin.column, end.column))
        changed = 0
        new_lines: List[str] = []
        for string_index, line in enumerate(self._document.string_lines(staff)):
            delta = deltas[string_index]
            if delta == 0:
                new_lines.append(line)
                continue
            row = parse_line(line)
            for index in range(start, min(stop + 1, len(row.cells))):
                cell = row.cells[index]
                if isinstance(cell, NoteCell):
                    row = row.with_cell(index, cell.with_fret(wrap_fret(cell.fret + delta)))
                    changed += 1
            new_lines.append(render_line(line, row))
        self._document.set_string_lines(staff, new_lines)
        logging.debug(
            "transposed %d notes in staff %d by %s", changed, staff.index, list(deltas)
        )
        return changed

    def transpose_uniform(self, begin: TabContext, end: TabContext, delta: int) -> int:
        return self.transpose(begin, end, [delta] * constants.NUM_STRINGS)

    def octave_shift(self, context: TabContext, up: bool) -> bool:
        """Move the note at the cursor up or down twelve frets.

        Up applies only at fret 12 or below and down only at fret 12 or
        above; anything else is left alone.

        Returns:
            True if the note changed.
        """
        staff = self._document.staff(context.staff_index)
        line_index = staff.line_of(context.string_index)
        line = self._document.line(line_index)
        cell = cell_at(line, context.column)
        if not isinstance(cell, NoteCell):
            return False
        if up and cell.fret <= constants.OCTAVE:
            fret = cell.fret + constants.OCTAVE
        elif not up and cell.fret >= constants.OCTAVE:
            fret = cell.fret - constants.OCTAVE
        else:
            return False
        self._document.set_line(line_index, replace_cell(line, context.column, cell.with_fret(fret)))
        return True

    def retune_string(self, context: TabContext, name: str) -> Tuning:
        """Relabel one string on every staff and re-learn the tuning.

        The name is validated before anything changes.

        Args:
            context: A position whose string is retuned; its staff is
                the one the tuning is learned from afterwards.
            name: A note letter with an optional ``#`` or ``b``.

        Returns:
            The tuning learned from the context's staff.

        Raises:
            InvalidTuningName: If the name is not a single note, or every
                spelling of it clashes with another string's prefix.
        """
        letter, accidental = parse_note_name(name)
        # The prefix must stay distinct on every staff it is written to
        others = [
            p
            for staff in self._document.staves()
            for i, p in enumerate(self._document.prefixes(staff))
            if i != context.string_index
        ]
        prefix = unique_prefix(letter, accidental, others)
        for other in self._document.staves():
            line_index = other.line_of(context.string_index)
            line = self._document.line(line_index)
            self._document.set_line(line_index, prefix + line[constants.PREFIX_WIDTH :])
        tuning = learn_tuning(self._document.prefixes(self._document.staff(context.staff_index)))
        logging.info("retuned string %d to %s", context.string_index, prefix)
        return tuning

    def copy_retune(self, context: TabContext, current: Tuning) -> TabContext:
        """Copy a staff into the current tuning, keeping the sounding pitches.

        The copy goes below the first blank line after the source staff (or
        at the end of the document), labeled with the current tuning's
        prefixes, with each string shifted by the nearest semitone distance
        between the source and current open-string pitches.

        Returns:
            The same string and column on the new staff.
        """
        source = self._document.staff(context.staff_index)
        source_tuning = learn_tuning(self._document.prefixes(source))
        deltas = retune_deltas(source_tuning, current)
        copied = [
            prefix + line[constants.PREFIX_WIDTH :]
            for prefix, line in zip(current.prefixes, self._document.string_lines(source))
        ]
        insert_at = self._after_first_blank(source.bottom + 1)
        following = (
            self._document.line(insert_at)
            if insert_at < self._document.num_lines()
            else None
        )
        if following is not None and following.strip():
            copied.append("")
        self._document.insert_lines(insert_at, copied)
        new_staff = self._document.staff_at_line(insert_at)
        assert new_staff is not None and new_staff.top == insert_at
        first = TabContext(staff_index=new_staff.index, string_index=0, column=cell_column(0))
        last = replace(first, column=new_staff.last_column)
        self.transpose(first, last, deltas)
        logging.info(
            "copied staff %d to staff %d with shifts %s", source.index, new_staff.index, deltas
        )
        return TabContext(
            staff_index=new_staff.index,
            string_index=context.string_index,
            column=min(context.column, new_staff.last_column),
        )

    def _after_first_blank(self, start: int) -> int:
        for index in range(start, self._document.num_lines()):
            if not self._document.line(index).strip():
                return index + 1
        self._document.insert_lines(self._document.num_lines(), [""])
        return self._document.num_lines()
