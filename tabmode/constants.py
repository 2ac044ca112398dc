"""Grid geometry and musical constants for tabmode."""

from typing import Dict, List

NUM_STRINGS = 6
"""Number of string-lines in every staff."""

PREFIX_WIDTH = 3
"""Width of the tuning prefix at the start of a string-line (e.g. ``e-|``)."""

MARGIN = "--"
"""Rule margin between the prefix and the first cell."""

FIRST_CELL_COLUMN = PREFIX_WIDTH + len(MARGIN)
"""Column of the first cell within a string-line."""

CELL_WIDTH = 3
"""Width of one tablature cell."""

BLANK_CELL = "---"
BARLINE_CELL = "--|"

DEFAULT_STAFF_WIDTH = 77
"""Default total width of a string-line (prefix, margin and 24 cells)."""

DEFAULT_STAFF_GAP = 3
"""Lines between the cursor and a new staff when no staff precedes it."""

MAX_FRET = 24
"""Highest fret a note cell can hold."""

OCTAVE = 12
"""Semitones in an octave, also the fret distance of an octave shift."""

LETTER_PITCHES: Dict[str, int] = {
    "E": 0,
    "F": 1,
    "G": 3,
    "A": 5,
    "B": 7,
    "C": 8,
    "D": 10,
}
"""Pitch classes of the natural note letters, relative to E."""

NOTE_NAMES: List[str] = [
    "E",
    "F",
    "F#",
    "G",
    "Ab",
    "A",
    "Bb",
    "B",
    "C",
    "C#",
    "D",
    "Eb",
]
"""Display name of each pitch class relative to E."""

STANDARD_TUNING_NAMES: List[str] = ["E", "B", "G", "D", "A", "E"]
"""Standard tuning, high string first."""
