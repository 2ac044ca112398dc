"""Chord recognition for a column of tablature.

A chord is the set of notes in one column of a staff. Its pitch classes
are reduced to intervals above a chosen root, and the ascending list of
distinct intervals is looked up in an ordered pattern table. The table is
scanned in declaration order and the first match wins, so where two
entries share an interval list the earlier one is the name that is shown.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from tabmode import constants
from tabmode.base import ChordLabelOutOfSequence, NoNotesInChord
from tabmode.cell import NoteCell, cell_at
from tabmode.cursor import TabContext
from tabmode.document import Staff, TabDocument
from tabmode.tuning import Tuning, note_name

DEGREE_LABELS: List[str] = [
    "rt",
    "b2",
    "2",
    "b3",
    "3",
    "4",
    "b5",
    "5",
    "b6",
    "6",
    "7",
    "maj7",
]
"""Scale-degree label of each interval above the root."""

UNKNOWN_CHORD = "??"


@dataclass(frozen=True)
class ChordPattern:
    """One entry of the chord table."""

    intervals: List[int]
    """Ascending distinct semitones above the root (1-11); empty matches anything."""
    name: str
    """Suffix appended to the root name, e.g. "m7"."""
    disclaimer: str = ""
    """Note about omitted chord tones, e.g. ",no5"."""
    degrees: Dict[int, str] = field(default_factory=dict)
    """Spelling labels that replace the defaults for this chord."""

    def __post_init__(self) -> None:
        assert self.intervals == sorted(set(self.intervals))
        assert all(0 < i < constants.OCTAVE for i in self.intervals)

    @property
    def count(self) -> int:
        return len(self.intervals) + 1

    def matches(self, intervals: Sequence[int]) -> bool:
        return not self.intervals or self.intervals == list(intervals)


_NINTH = {2: "9"}

CHORD_PATTERNS: Dict[int, List[ChordPattern]] = {
    1: [
        ChordPattern([], "", " (single note)"),
    ],
    2: [
        ChordPattern([7], "5"),
        ChordPattern([4], "", ",no5"),
        ChordPattern([3], "m", ",no5"),
        ChordPattern([5], "sus4", ",no5"),
        ChordPattern([2], "sus2", ",no5"),
        ChordPattern([10], "7", ",no3,no5"),
        ChordPattern([11], "maj7", ",no3,no5"),
        ChordPattern([9], "6", ",no3,no5"),
        # Disclaimer kept without its leading comma as the table always had it
        ChordPattern([6], "(b5)", "no3"),
        ChordPattern([8], "aug", ",no3"),
        ChordPattern([1], "(b9)", ",no3,no5", {1: "b9"}),
    ],
    3: [
        ChordPattern([4, 7], ""),
        ChordPattern([3, 7], "m"),
        ChordPattern([3, 6], "dim"),
        ChordPattern([4, 8], "aug", "", {8: "#5"}),
        ChordPattern([5, 7], "sus4"),
        ChordPattern([2, 7], "sus2"),
        ChordPattern([4, 10], "7", ",no5"),
        ChordPattern([3, 10], "m7", ",no5"),
        ChordPattern([4, 11], "maj7", ",no5"),
        ChordPattern([3, 11], "m(maj7)", ",no5"),
        ChordPattern([7, 10], "7", ",no3"),
        ChordPattern([7, 11], "maj7", ",no3"),
        ChordPattern([4, 9], "6", ",no5"),
        ChordPattern([3, 9], "m6", ",no5"),
        ChordPattern([7, 9], "6", ",no3"),
        ChordPattern([5, 10], "7sus4", ",no5"),
        ChordPattern([2, 4], "add9", ",no5", _NINTH),
        ChordPattern([2, 3], "m(add9)", ",no5", _NINTH),
        ChordPattern([2, 10], "9", ",no3,no5", _NINTH),
        ChordPattern([4, 6], "(b5)"),
        ChordPattern([6, 10], "m7b5", ",no3"),
    ],
    4: [
        ChordPattern([4, 7, 10], "7"),
        ChordPattern([3, 7, 10], "m7"),
        ChordPattern([4, 7, 11], "maj7"),
        ChordPattern([3, 6, 10], "m7b5"),
        ChordPattern([3, 6, 9], "dim7", "", {9: "bb7"}),
        ChordPattern([4, 7, 9], "6"),
        ChordPattern([3, 7, 9], "m6"),
        ChordPattern([3, 7, 11], "m(maj7)"),
        ChordPattern([4, 8, 10], "7#5", "", {8: "#5"}),
        ChordPattern([4, 6, 10], "7b5"),
        ChordPattern([4, 8, 11], "maj7#5", "", {8: "#5"}),
        ChordPattern([5, 7, 10], "7sus4"),
        # Same shape as 7sus4 above, which takes precedence
        ChordPattern([5, 7, 10], "11", ",no3,no9", {5: "11"}),
        ChordPattern([2, 7, 10], "7sus2"),
        ChordPattern([2, 4, 7], "add9", "", _NINTH),
        ChordPattern([2, 3, 7], "m(add9)", "", _NINTH),
        ChordPattern([4, 5, 7], "add11", "", {5: "11"}),
        ChordPattern([2, 5, 7], "sus4(add9)", "", _NINTH),
        ChordPattern([2, 4, 10], "9", ",no5", _NINTH),
        ChordPattern([2, 3, 10], "m9", ",no5", _NINTH),
        ChordPattern([2, 4, 11], "maj9", ",no5", _NINTH),
        ChordPattern([1, 4, 10], "7b9", ",no5", {1: "b9"}),
        ChordPattern([3, 4, 10], "7#9", ",no5", {3: "#9"}),
        ChordPattern([4, 9, 10], "13", ",no5,no9", {9: "13"}),
    ],
    5: [
        ChordPattern([2, 4, 7, 10], "9", "", _NINTH),
        ChordPattern([2, 3, 7, 10], "m9", "", _NINTH),
        ChordPattern([2, 4, 7, 11], "maj9", "", _NINTH),
        ChordPattern([2, 4, 7, 9], "6/9", "", _NINTH),
        ChordPattern([2, 3, 7, 9], "m6/9", "", _NINTH),
        ChordPattern([1, 4, 7, 10], "7b9", "", {1: "b9"}),
        ChordPattern([3, 4, 7, 10], "7#9", "", {3: "#9"}),
        ChordPattern([4, 6, 7, 10], "7#11", "", {6: "#11"}),
        ChordPattern([4, 7, 9, 10], "13", ",no9", {9: "13"}),
        ChordPattern([2, 5, 7, 10], "11", ",no3", {2: "9", 5: "11"}),
        # Shadowed by the 11 above
        ChordPattern([2, 5, 7, 10], "9sus4", "", _NINTH),
        ChordPattern([3, 5, 7, 10], "m11", ",no9", {5: "11"}),
        ChordPattern([2, 4, 6, 10], "9b5", "", _NINTH),
        ChordPattern([2, 4, 8, 10], "9#5", "", {2: "9", 8: "#5"}),
    ],
    6: [
        ChordPattern([2, 4, 5, 7, 10], "11", "", {2: "9", 5: "11"}),
        ChordPattern([2, 3, 5, 7, 10], "m11", "", {2: "9", 5: "11"}),
        ChordPattern([2, 4, 7, 9, 10], "13", ",no11", {2: "9", 9: "13"}),
        ChordPattern([2, 3, 7, 9, 10], "m13", ",no11", {2: "9", 9: "13"}),
        ChordPattern([2, 4, 7, 9, 11], "maj13", ",no11", {2: "9", 9: "13"}),
        ChordPattern([2, 4, 6, 7, 10], "9#11", "", {2: "9", 6: "#11"}),
    ],
}
"""Chord patterns by note count, in precedence order."""


def match_pattern(intervals: Sequence[int]) -> Optional[ChordPattern]:
    """Find the first pattern for this interval list, in table order."""
    for pattern in CHORD_PATTERNS.get(len(intervals) + 1, []):
        if pattern.matches(intervals):
            return pattern
    return None


@dataclass(frozen=True)
class ChordResult:
    """A named chord, waiting to be written above its staff."""

    staff_index: int
    column: int
    root_string: int
    root_name: str
    name: str
    disclaimer: str
    spelling: str

    @property
    def chord_name(self) -> str:
        return self.root_name + self.name


def column_frets(document: TabDocument, staff: Staff, column: int) -> List[Optional[int]]:
    """The fret on each string at a column (None where there is no note)."""
    frets: List[Optional[int]] = []
    for line in document.string_lines(staff):
        cell = cell_at(line, column)
        frets.append(cell.fret if isinstance(cell, NoteCell) else None)
    return frets


def find_root_string(frets: Sequence[Optional[int]], start: int) -> Optional[int]:
    """First string at or after ``start`` (wrapping) that holds a note."""
    for step in range(constants.NUM_STRINGS):
        string_index = (start + step) % constants.NUM_STRINGS
        if frets[string_index] is not None:
            return string_index
    return None


def _intervals(pitches: Sequence[Optional[int]], root: int, skip: Optional[int]) -> List[int]:
    found = {
        (p - root) % constants.OCTAVE
        for p in pitches
        if p is not None and p != root and p != skip
    }
    return sorted(found)


def name_chord(
    frets: Sequence[Optional[int]],
    tuning: Tuning,
    root_string: int,
    twelve_tone: bool = False,
) -> ChordResult:
    """Name the chord formed by a column of frets.

    Args:
        frets: Fret per string (high string first), None for no note.
        tuning: The open-string pitch classes.
        root_string: The string whose note is the root; must hold a note.
        twelve_tone: Append raw intervals (low string first) to the spelling.

    Returns:
        A ChordResult with no staff position (staff_index and column are -1).
    """
    assert len(frets) == constants.NUM_STRINGS
    pitches: List[Optional[int]] = [
        None if f is None else (f + tuning.pitches[s]) % constants.OCTAVE
        for s, f in enumerate(frets)
    ]
    root = pitches[root_string]
    assert root is not None
    counts: Counter[int] = Counter()
    bass: Optional[int] = None
    for pitch in pitches:
        if pitch is not None:
            counts[pitch] += 1
            bass = pitch
    intervals = _intervals(pitches, root, None)
    pattern = match_pattern(intervals)
    suffix = ""
    if pattern is None and bass is not None and bass != root and counts[bass] == 1:
        pattern = match_pattern(_intervals(pitches, root, bass))
        if pattern is not None:
            suffix = "/" + note_name(bass)
    if pattern is None:
        logging.debug("no chord pattern for intervals %s", intervals)
        name, disclaimer, degrees = UNKNOWN_CHORD, "", {}
    else:
        logging.debug("intervals %s matched %r", intervals, pattern.name)
        name, disclaimer, degrees = pattern.name + suffix, pattern.disclaimer, pattern.degrees
    relative = [None if p is None else (p - root) % constants.OCTAVE for p in pitches]
    spelling = " ".join(
        "x" if i is None else degrees.get(i, DEGREE_LABELS[i]) for i in relative
    )
    if twelve_tone:
        raw = " ".join("x" if i is None else str(i) for i in reversed(relative))
        spelling = f"{spelling} ({raw})"
    return ChordResult(
        staff_index=-1,
        column=-1,
        root_string=root_string,
        root_name=note_name(root),
        name=name,
        disclaimer=disclaimer,
        spelling=spelling,
    )


class ChordAnalyzer:
    """Names chords under the cursor and writes the names above the staff.

    The analyzer keeps the most recent result until it is labeled or
    forgotten. Repeating an analysis on the same column moves the root to
    the next string that holds a note.
    """

    def __init__(self, twelve_tone: bool = False) -> None:
        self._twelve_tone = twelve_tone
        self._pending: Optional[ChordResult] = None

    @property
    def pending(self) -> Optional[ChordResult]:
        return self._pending

    def forget(self) -> None:
        self._pending = None

    def analyze(
        self,
        document: TabDocument,
        context: TabContext,
        tuning: Tuning,
        repeat: bool,
    ) -> ChordResult:
        """Name the chord in the cursor's column.

        Args:
            document: The document holding the staff.
            context: The cursor position.
            tuning: The current tuning.
            repeat: Whether this directly repeats the previous analysis.

        Returns:
            The analysis, also kept as the pending result.

        Raises:
            NoNotesInChord: If no string in the column holds a note.
        """
        staff = document.staff(context.staff_index)
        frets = column_frets(document, staff, context.column)
        previous = self._pending
        self._pending = None
        if (
            repeat
            and previous is not None
            and previous.staff_index == context.staff_index
            and previous.column == context.column
        ):
            start = previous.root_string + 1
        else:
            start = context.string_index
        root_string = find_root_string(frets, start)
        if root_string is None:
            raise NoNotesInChord(context.column)
        named = name_chord(frets, tuning, root_string, self._twelve_tone)
        result = ChordResult(
            staff_index=context.staff_index,
            column=context.column,
            root_string=named.root_string,
            root_name=named.root_name,
            name=named.name,
            disclaimer=named.disclaimer,
            spelling=named.spelling,
        )
        logging.debug("analyzed %s%s: %s", result.chord_name, result.disclaimer, result.spelling)
        self._pending = result
        return result

    def label(self, document: TabDocument) -> int:
        """Write the pending chord name on the line above its staff.

        Existing label text starting at the root column is blanked, then the
        name is written there. A label line is added when the staff has none.

        Returns:
            The line index of the label line.

        Raises:
            ChordLabelOutOfSequence: If there is no pending analysis.
        """
        result = self._pending
        if result is None:
            raise ChordLabelOutOfSequence()
        staff = document.staff(result.staff_index)
        line_index = document.label_line(staff)
        if line_index is None:
            document.insert_lines(staff.top, [""])
            line_index = staff.top
        line = document.line(line_index)
        document.set_line(line_index, write_label(line, result.column, result.chord_name))
        self._pending = None
        return line_index


def write_label(line: str, column: int, name: str) -> str:
    """Replace the label starting at a column with a new name.

    Non-space characters from the column up to the next space become
    spaces; the name is then written from the column, padding the line
    with spaces only as far as the name reaches.
    """
    chars = list(line.ljust(column))
    index = column
    while index < len(chars) and chars[index] != " ":
        chars[index] = " "
        index += 1
    end = column + len(name)
    if len(chars) < end:
        chars.extend(" " * (end - len(chars)))
    chars[column:end] = list(name)
    return "".join(chars)
