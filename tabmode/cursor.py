"""Cursor resolution: from a raw text offset to a position in the tab grid.

This is the single place that decides whether a position is "in tab".
Everything above it receives either a validated TabContext or None, and
None always means the host should insert the triggering key literally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from tabmode import constants
from tabmode.document import Staff, TabDocument, cell_column, cell_index


@dataclass(frozen=True)
class TabContext:
    """A normalized position inside a staff.

    The column always lands on a cell boundary: the first cell is at
    column 5 and subsequent cells follow every 3 columns.
    """

    staff_index: int
    """Index of the staff within the document (0-based, top to bottom)."""
    string_index: int
    """String within the staff (0 is the highest pitch, 5 the lowest)."""
    column: int
    """Column of the cell start within the string-line."""

    @property
    def cell_index(self) -> int:
        return cell_index(self.column)


class CursorModel:
    """Maps raw offsets to tab positions and moves between them.

    The model reads the document it was built with; build a new one (or
    call with the current document) after edits that add or remove lines.
    """

    def __init__(self, document: TabDocument) -> None:
        self._document = document

    def staff(self, context: TabContext) -> Staff:
        return self._document.staff(context.staff_index)

    def resolve(self, offset: int) -> Optional[TabContext]:
        """Resolve a raw offset to a tab position.

        Args:
            offset: Raw character offset into the document text.

        Returns:
            The snapped position, or None when the offset is not on a
            string-line of a complete staff with at least one whole cell.
        """
        line_index, column = self._document.point_of(offset)
        staff = self._document.staff_at_line(line_index)
        if staff is None or staff.num_cells == 0:
            logging.debug("offset %d (line %d) is not in tab", offset, line_index)
            return None
        context = TabContext(
            staff_index=staff.index,
            string_index=line_index - staff.top,
            column=_snap(staff, column),
        )
        logging.debug("offset %d resolved to %s", offset, context)
        return context

    def to_offset(self, context: TabContext) -> int:
        """Convert a position back into a raw offset."""
        staff = self.staff(context)
        return self._document.offset_of(staff.line_of(context.string_index), context.column)

    def advance(self, context: TabContext, delta_cells: int) -> TabContext:
        """Move along the string by whole cells, staying within the staff."""
        staff = self.staff(context)
        target = context.cell_index + delta_cells
        target = max(0, min(target, staff.num_cells - 1))
        return replace(context, column=cell_column(target))

    def move_strings(self, context: TabContext, delta_strings: int) -> TabContext:
        """Move across strings of the same staff.

        Raises:
            IndexError: If the move would leave the staff's six strings.
        """
        target = context.string_index + delta_strings
        if target < 0 or target >= constants.NUM_STRINGS:
            raise IndexError(f"String {target} is outside the staff")
        return replace(context, string_index=target)

    def next_string_wrapping(self, context: TabContext, step: int = 1) -> TabContext:
        """Move across strings, wrapping from string 5 back to string 0."""
        target = (context.string_index + step) % constants.NUM_STRINGS
        return replace(context, string_index=target)

    def move_staff(self, context: TabContext, direction: int) -> Optional[TabContext]:
        """Move to the same string of the next or previous staff.

        Args:
            context: The current position.
            direction: Positive to move down the document, negative to move up.

        Staves too narrow to hold a cell are passed over.

        Returns:
            The position in the neighbouring staff, or None if there is none.
        """
        assert direction != 0
        staves = self._document.staves()
        step = 1 if direction > 0 else -1
        target = context.staff_index + step
        while 0 <= target < len(staves) and staves[target].num_cells == 0:
            target += step
        if target < 0 or target >= len(staves):
            return None
        staff = staves[target]
        return TabContext(
            staff_index=target,
            string_index=context.string_index,
            column=_snap(staff, context.column),
        )


def _snap(staff: Staff, column: int) -> int:
    index = min(cell_index(column), max(0, staff.num_cells - 1))
    return cell_column(index)
