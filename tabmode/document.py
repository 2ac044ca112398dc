"""The tablature document: lines of text with staves found inside them.

The document stores plain lines exactly as the host supplied them. A line
is a string-line when it starts with a tuning prefix (a note letter, an
accidental or dash, and a bar). Consecutive string-lines form runs, and
each run is split six lines at a time from its top into staves. A short
group left at the bottom of a run is not a staff, and neither is a group
where two prefixes start with the same character.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from tabmode import constants

STRING_LINE_PATTERN = re.compile(r"^[A-Ga-g][-#b]\|")
"""Matches the prefix that marks a line as a string-line."""


def is_string_line(line: str) -> bool:
    """Check whether a line begins with a tuning prefix."""
    return STRING_LINE_PATTERN.match(line) is not None


def has_distinct_prefixes(lines: List[str]) -> bool:
    """Check that no two string-lines start with the same character."""
    firsts = [line[0] for line in lines]
    return len(set(firsts)) == len(firsts)


@dataclass(frozen=True)
class Staff:
    """A block of six string-lines within a document.

    Staves are views: they name lines by index and are recomputed from the
    text after every edit, so they never go stale across commands.
    """

    index: int
    """Position of this staff among all staves (0-based, top to bottom)."""
    top: int
    """Line index of string 0 (the highest pitch)."""
    width: int
    """Length of the staff's string-lines."""

    @property
    def bottom(self) -> int:
        """Line index of string 5 (the lowest pitch)."""
        return self.top + constants.NUM_STRINGS - 1

    @property
    def num_cells(self) -> int:
        """Number of whole cells that fit in the staff width."""
        return max(0, (self.width - constants.FIRST_CELL_COLUMN) // constants.CELL_WIDTH)

    @property
    def last_column(self) -> int:
        """Column of the last whole cell."""
        return cell_column(max(0, self.num_cells - 1))

    def line_of(self, string_index: int) -> int:
        assert 0 <= string_index < constants.NUM_STRINGS
        return self.top + string_index

    def contains_line(self, line_index: int) -> bool:
        return self.top <= line_index <= self.bottom


def cell_column(cell_index: int) -> int:
    """Column of a cell within a string-line."""
    return constants.FIRST_CELL_COLUMN + constants.CELL_WIDTH * cell_index


def cell_index(column: int) -> int:
    """Index of the cell containing a column (columns before cell 0 map to 0)."""
    if column < constants.FIRST_CELL_COLUMN:
        return 0
    return (column - constants.FIRST_CELL_COLUMN) // constants.CELL_WIDTH


class TabDocument:
    """An ordered sequence of lines, some of which form staves."""

    def __init__(self, lines: Optional[List[str]] = None) -> None:
        self._lines: List[str] = list(lines) if lines is not None else []
        self._staves: Optional[List[Staff]] = None

    @classmethod
    def from_text(cls, text: str) -> TabDocument:
        return cls(text.split("\n")) if text else cls()

    def text(self) -> str:
        return "\n".join(self._lines)

    def copy(self) -> TabDocument:
        return TabDocument(self._lines)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TabDocument) and self._lines == other._lines

    def __repr__(self) -> str:
        return f"TabDocument({self._lines!r})"

    # Lines

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def num_lines(self) -> int:
        return len(self._lines)

    def line(self, index: int) -> str:
        return self._lines[index]

    def set_line(self, index: int, text: str) -> None:
        assert "\n" not in text
        self._lines[index] = text
        self._staves = None

    def insert_lines(self, index: int, lines: List[str]) -> None:
        """Insert lines before a line index (index may equal num_lines)."""
        assert 0 <= index <= len(self._lines)
        self._lines[index:index] = lines
        self._staves = None

    def insert_text(self, offset: int, text: str) -> int:
        """Insert plain text at a raw offset.

        Returns:
            The offset just after the inserted text.
        """
        if not self._lines:
            self._lines = [""]
        line_index, column = self.point_of(offset)
        line = self._lines[line_index]
        pieces = (line[:column] + text + line[column:]).split("\n")
        self._lines[line_index : line_index + 1] = pieces
        self._staves = None
        return self.offset_of(line_index, column) + len(text)

    # Offsets

    def point_of(self, offset: int) -> Tuple[int, int]:
        """Convert a raw offset into a (line, column) pair.

        Offsets past the end of the text clamp to the end of the last line.
        """
        if not self._lines:
            return 0, 0
        remaining = max(0, offset)
        for index, line in enumerate(self._lines):
            if remaining <= len(line):
                return index, remaining
            remaining -= len(line) + 1
        last = len(self._lines) - 1
        return last, len(self._lines[last])

    def offset_of(self, line_index: int, column: int) -> int:
        """Convert a (line, column) pair into a raw offset."""
        assert 0 <= line_index <= len(self._lines)
        offset = sum(len(line) + 1 for line in self._lines[:line_index])
        return offset + column

    # Staves

    def staves(self) -> List[Staff]:
        """Find all complete staves, top to bottom."""
        if self._staves is None:
            self._staves = self._find_staves()
        return list(self._staves)

    def _find_staves(self) -> List[Staff]:
        staves: List[Staff] = []
        run_start: Optional[int] = None
        for index in range(len(self._lines) + 1):
            in_run = index < len(self._lines) and is_string_line(self._lines[index])
            if in_run and run_start is None:
                run_start = index
            elif not in_run and run_start is not None:
                run_length = index - run_start
                for top in range(
                    run_start,
                    run_start + run_length - constants.NUM_STRINGS + 1,
                    constants.NUM_STRINGS,
                ):
                    group = self._lines[top : top + constants.NUM_STRINGS]
                    if has_distinct_prefixes(group):
                        staves.append(
                            Staff(index=len(staves), top=top, width=len(self._lines[top]))
                        )
                run_start = None
        return staves

    def staff(self, index: int) -> Staff:
        return self.staves()[index]

    def staff_at_line(self, line_index: int) -> Optional[Staff]:
        """Find the staff containing a line, if any."""
        for staff in self.staves():
            if staff.contains_line(line_index):
                return staff
        return None

    def preceding_staff(self, line_index: int) -> Optional[Staff]:
        """Find the last staff that starts at or above a line."""
        found: Optional[Staff] = None
        for staff in self.staves():
            if staff.top <= line_index:
                found = staff
            else:
                break
        return found

    def string_lines(self, staff: Staff) -> List[str]:
        return self._lines[staff.top : staff.bottom + 1]

    def set_string_lines(self, staff: Staff, lines: List[str]) -> None:
        assert len(lines) == constants.NUM_STRINGS
        for string_index, text in enumerate(lines):
            self.set_line(staff.line_of(string_index), text)

    def label_line(self, staff: Staff) -> Optional[int]:
        """Index of the line directly above a staff, unless it is tab."""
        above = staff.top - 1
        if above < 0 or is_string_line(self._lines[above]):
            return None
        return above

    def prefixes(self, staff: Staff) -> List[str]:
        return [
            line[: constants.PREFIX_WIDTH] for line in self.string_lines(staff)
        ]

    def barline_columns(self, staff: Staff) -> Dict[int, int]:
        """Count, per column, how many strings carry a barline there."""
        counts: Dict[int, int] = {}
        for line in self.string_lines(staff):
            for column in range(
                constants.FIRST_CELL_COLUMN,
                len(line) - constants.CELL_WIDTH + 1,
                constants.CELL_WIDTH,
            ):
                if line[column : column + constants.CELL_WIDTH] == constants.BARLINE_CELL:
                    counts[column] = counts.get(column, 0) + 1
        return counts
