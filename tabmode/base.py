"""Base exception types and the error taxonomy for tabmode.

Every failure a command can report derives from TabError so the host can
catch one type and report the message. None of them is fatal: each
command either applies completely or leaves the document untouched.
"""

from __future__ import annotations

from typing import Any


class MatchException(Exception):
    """Exception raised when pattern matching fails."""

    def __init__(self, value: Any) -> None:
        """Initialize a MatchException with the unmatched value.

        Args:
            value: The value that failed to match any pattern.
        """
        super().__init__(f"Failed to match value: {value}")


class TabError(Exception):
    """Base class for recoverable tablature command failures."""


class NotInTabContext(TabError):
    """The position is not on a string-line of a complete staff.

    Commands treat this as a signal to fall back to inserting the
    triggering key literally.
    """

    def __init__(self, offset: int) -> None:
        super().__init__(f"Not in tab at offset {offset}")
        self.offset = offset


class RegionSpansMultipleStaves(TabError):
    """A region's endpoints resolve to different staves (or not to tab)."""

    def __init__(self, begin: Any, end: Any) -> None:
        super().__init__(f"Region spans multiple staves: {begin} .. {end}")
        self.begin = begin
        self.end = end


class InvalidTuningName(TabError):
    """A tuning name is not a note letter with an optional accidental."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid tuning name: {name!r}")
        self.name = name


class NoNotesInChord(TabError):
    """No string of the chord column holds a fretted note."""

    def __init__(self, column: int) -> None:
        super().__init__(f"No notes in chord at column {column}")
        self.column = column


class ChordLabelOutOfSequence(TabError):
    """Labeling was requested without a directly preceding analysis."""

    def __init__(self) -> None:
        super().__init__("Chord label must immediately follow chord analysis")
