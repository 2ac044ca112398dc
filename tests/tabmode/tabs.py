"""Tablature fixtures shared by the tabmode tests."""

from typing import List, Optional, Sequence

from tabmode.cell import Cell, replace_cell
from tabmode.document import cell_column

STANDARD_PREFIXES = ["e-|", "B-|", "G-|", "D-|", "A-|", "E-|"]
WHOLE_STEP_DOWN_NAMES = ["D", "A", "F", "C", "G", "D"]
WHOLE_STEP_DOWN_PREFIXES = ["d-|", "A-|", "F-|", "C-|", "G-|", "D-|"]

WIDTH = 29  # Eight whole cells
LINE_STRIDE = WIDTH + 1  # Offset distance between consecutive string-lines


def blank_staff(
    prefixes: Sequence[str] = STANDARD_PREFIXES, width: int = WIDTH
) -> List[str]:
    return [p + "-" * (width - len(p)) for p in prefixes]


def chord_frets(shape: str) -> List[Optional[int]]:
    """Frets high string first from a shape written low string first, e.g. "x02220"."""
    return [None if c == "x" else int(c) for c in reversed(shape)]


def staff_with_column(
    frets: Sequence[Optional[int]],
    cell: int = 0,
    prefixes: Sequence[str] = STANDARD_PREFIXES,
) -> List[str]:
    """A blank staff with one column of notes."""
    column = cell_column(cell)
    return [
        line if fret is None else replace_cell(line, column, Cell.note(fret))
        for line, fret in zip(blank_staff(prefixes), frets)
    ]


def staff_offset(string_index: int, cell: int = 0) -> int:
    """Raw offset of a cell in a staff that starts on the first line."""
    return string_index * LINE_STRIDE + cell_column(cell)
