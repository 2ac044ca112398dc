"""Staff editing: creating staves and changing columns of cells.

Every column edit applies to all six string-lines of one staff at once so
the strings stay aligned. String-lines never change width: insertions crop
whatever is pushed past the right edge, and deletions pad the right edge
with dashes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence

from tabmode import constants
from tabmode.base import RegionSpansMultipleStaves
from tabmode.cell import Cell, EmbKind, NoteCell, cell_at, replace_cell
from tabmode.cursor import TabContext
from tabmode.document import Staff, TabDocument, cell_column, is_string_line


@dataclass(frozen=True)
class Clipboard:
    """A rectangle of tablature: the same column span on all six strings."""

    rows: List[str]
    """Text of the rectangle, one row per string, high string first."""

    def __post_init__(self) -> None:
        assert len(self.rows) == constants.NUM_STRINGS
        assert len({len(r) for r in self.rows}) == 1

    @property
    def width(self) -> int:
        return len(self.rows[0])


def blank_string_line(prefix: str, width: int) -> str:
    """A new string-line: prefix, margin, then dashes up to the width."""
    head = prefix + constants.MARGIN
    return head + "-" * (width - len(head))


def _crop(line: str, width: int) -> str:
    return line[:width]


def _pad(line: str, width: int) -> str:
    return line + "-" * (width - len(line))


class StaffEditor:
    """Applies structural edits to the staves of a document."""

    def __init__(self, document: TabDocument) -> None:
        self._document = document

    def _staff(self, context: TabContext) -> Staff:
        return self._document.staff(context.staff_index)

    def _map_lines(self, staff: Staff, fn: Callable[[str], str]) -> None:
        lines = self._document.string_lines(staff)
        self._document.set_string_lines(staff, [fn(line) for line in lines])

    def make_staff(
        self, line_index: int, prefixes: Sequence[str], width: int, gap: int
    ) -> TabContext:
        """Insert a blank staff with a blank label line above it.

        The staff goes directly below the nearest staff starting at or above
        the line, or ``gap`` lines below the line when there is none. It
        never lands inside a following staff: the insertion point is held
        at that staff's top, and a blank line separates the two.

        Args:
            line_index: The cursor line.
            prefixes: The six tuning prefixes, high string first.
            width: Width of each new string-line.
            gap: Lines between the cursor and the new staff when no staff precedes.

        Returns:
            The position of the first cell on the new staff's top string.
        """
        assert len(prefixes) == constants.NUM_STRINGS
        preceding = self._document.preceding_staff(line_index)
        if preceding is not None:
            insert_at = preceding.bottom + 1
        else:
            insert_at = line_index + gap
            staves = self._document.staves()
            if staves:
                insert_at = min(insert_at, staves[0].top)
            missing = insert_at - self._document.num_lines()
            if missing > 0:
                self._document.insert_lines(self._document.num_lines(), [""] * missing)
        new_lines = [""] + [blank_string_line(p, width) for p in prefixes]
        if insert_at < self._document.num_lines() and is_string_line(
            self._document.line(insert_at)
        ):
            new_lines.append("")
        self._document.insert_lines(insert_at, new_lines)
        staff = self._document.staff_at_line(insert_at + 1)
        assert staff is not None and staff.top == insert_at + 1
        logging.info("created staff %d at line %d", staff.index, staff.top)
        return TabContext(
            staff_index=staff.index, string_index=0, column=cell_column(0)
        )

    def insert_columns(self, context: TabContext, count: int) -> None:
        """Insert blank cells at the cursor column, cropping at the right edge."""
        assert count >= 0
        staff = self._staff(context)
        dashes = "-" * (constants.CELL_WIDTH * count)
        column = context.column
        self._map_lines(
            staff, lambda line: _crop(line[:column] + dashes + line[column:], len(line))
        )

    def delete_cells(self, context: TabContext, count: int, forward: bool) -> TabContext:
        """Delete whole cells forward or backward from the cursor.

        Backward deletion stops at the first cell. The right edge is padded
        with dashes so every string-line keeps its width.

        Returns:
            The cursor position after the deletion.
        """
        assert count >= 0
        staff = self._staff(context)
        if forward:
            start = context.column
            end = start + constants.CELL_WIDTH * count
        else:
            count = min(count, context.cell_index)
            end = context.column
            start = end - constants.CELL_WIDTH * count
        self._map_lines(staff, lambda line: _pad(line[:start] + line[end:], len(line)))
        return TabContext(
            staff_index=context.staff_index,
            string_index=context.string_index,
            column=start,
        )

    def toggle_barline(self, context: TabContext, advance: bool) -> int:
        """Flip the cursor column between a barline and a blank on all strings.

        Returns:
            The new cursor column: the next cell when ``advance`` and one
            remains, two characters further at the last cell, else unchanged.
        """
        staff = self._staff(context)
        current = cell_at(self._document.line(staff.line_of(context.string_index)), context.column)
        cell: Cell = Cell.blank() if current == Cell.barline() else Cell.barline()
        self._map_lines(staff, lambda line: replace_cell(line, context.column, cell))
        if not advance:
            return context.column
        if context.cell_index + 1 < staff.num_cells:
            return cell_column(context.cell_index + 1)
        return context.column + 2

    def kill_region(
        self, begin: TabContext, end: TabContext, delete: bool
    ) -> Clipboard:
        """Copy (and optionally delete) the rectangle between two positions.

        The rectangle covers every string and the column span from the
        leftmost to the rightmost of the two cells, inclusive.

        Raises:
            RegionSpansMultipleStaves: If the positions are in different staves.
        """
        if begin.staff_index != end.staff_index:
            raise RegionSpansMultipleStaves(begin, end)
        staff = self._staff(begin)
        start = min(begin.column, end.column)
        stop = max(begin.column, end.column) + constants.CELL_WIDTH
        lines = self._document.string_lines(staff)
        clipboard = Clipboard(rows=[_pad(line[start:stop], stop - start) for line in lines])
        if delete:
            self._map_lines(
                staff, lambda line: _pad(line[:start] + line[stop:], len(line))
            )
        logging.debug(
            "%s columns %d..%d of staff %d",
            "killed" if delete else "copied",
            start,
            stop,
            staff.index,
        )
        return clipboard

    def yank(self, context: TabContext, clipboard: Clipboard) -> None:
        """Insert a rectangle at the cursor, shifting content right and cropping."""
        staff = self._staff(context)
        lines = self._document.string_lines(staff)
        column = context.column
        self._document.set_string_lines(
            staff,
            [
                _crop(line[:column] + row + line[column:], len(line))
                for line, row in zip(lines, clipboard.rows)
            ],
        )

    def cell(self, context: TabContext) -> Cell:
        staff = self._staff(context)
        found = cell_at(self._document.line(staff.line_of(context.string_index)), context.column)
        assert found is not None
        return found

    def set_cell(self, context: TabContext, cell: Cell) -> None:
        staff = self._staff(context)
        line_index = staff.line_of(context.string_index)
        self._document.set_line(
            line_index, replace_cell(self._document.line(line_index), context.column, cell)
        )

    def write_fret(
        self, context: TabContext, fret: int, emb: EmbKind = EmbKind.Normal
    ) -> None:
        self.set_cell(context, Cell.note(fret, emb))

    def erase_cell(self, context: TabContext) -> None:
        self.set_cell(context, Cell.blank())

    def toggle_embellishment(self, context: TabContext, emb: EmbKind) -> bool:
        """Set a note's embellishment, or reset it to Normal if already set.

        Returns:
            True if the cell held a note and was changed.
        """
        current = self.cell(context)
        if not isinstance(current, NoteCell):
            return False
        target = EmbKind.Normal if current.emb == emb else emb
        self.set_cell(context, current.with_emb(target))
        return True
