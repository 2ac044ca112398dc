"""Tunings: open-string pitch classes and the prefixes that label them.

Pitch classes are counted in semitones up from E, so standard tuning (high
string first) is ``[0, 7, 3, 10, 5, 0]``. Each string-line starts with a
3-character prefix naming its open note, for example ``e-|`` or ``F#|``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from lark import Lark
from lark.exceptions import LarkError

from tabmode import constants
from tabmode.base import InvalidTuningName

NOTE_NAME_GRAMMAR = r"""
start: LETTER ACCIDENTAL?

LETTER: /[A-Ga-g]/
ACCIDENTAL: /[#b]/
"""

# The contextual lexer tells "b" the letter from "b" the flat by position.
_NOTE_NAME_PARSER = Lark(NOTE_NAME_GRAMMAR, parser="lalr")


def parse_note_name(name: str) -> Tuple[str, str]:
    """Split a note name into its letter and accidental.

    Args:
        name: A note letter optionally followed by ``#`` or ``b``.

    Returns:
        The letter (case preserved) and the accidental ("" if natural).

    Raises:
        InvalidTuningName: If the name is not a single note.
    """
    try:
        tree = _NOTE_NAME_PARSER.parse(name.strip())
    except LarkError:
        raise InvalidTuningName(name)
    tokens = [str(t) for t in tree.children]
    return tokens[0], tokens[1] if len(tokens) > 1 else ""


def pitch_class(letter: str, accidental: str) -> int:
    """Pitch class of a note relative to E."""
    pitch = constants.LETTER_PITCHES[letter.upper()]
    if accidental == "#":
        pitch += 1
    elif accidental == "b":
        pitch -= 1
    return pitch % constants.OCTAVE


def note_name(pitch: int) -> str:
    """Display name of a pitch class relative to E."""
    return constants.NOTE_NAMES[pitch % constants.OCTAVE]


def make_prefix(letter: str, accidental: str) -> str:
    return letter + (accidental or "-") + "|"


def spellings(letter: str, accidental: str) -> List[Tuple[str, str]]:
    """The note as written, then its other single-accidental spellings.

    For example ``E`` is followed by ``Fb``, and ``F#`` by ``Gb``.
    """
    pitch = pitch_class(letter, accidental)
    found = [(letter.upper(), accidental)]
    for other in constants.LETTER_PITCHES:
        for other_accidental in ("", "#", "b"):
            spelling = (other, other_accidental)
            if spelling not in found and pitch_class(other, other_accidental) == pitch:
                found.append(spelling)
    return found


def unique_prefix(letter: str, accidental: str, others: Sequence[str]) -> str:
    """Build a prefix whose first character differs from the other prefixes.

    The letter is upper case unless another string already starts with the
    upper-case letter, in which case the lower-case form is used. When both
    are taken the note is respelled, so a third ``E`` becomes ``Fb|``.

    Raises:
        InvalidTuningName: If every spelling clashes with another prefix.
    """
    taken = {p[0] for p in others if p}
    for upper, spelled in spellings(letter, accidental):
        for chosen in (upper, upper.lower()):
            if chosen not in taken:
                return make_prefix(chosen, spelled)
    raise InvalidTuningName(letter + accidental)


def prefixes_for_names(names: Sequence[str]) -> List[str]:
    """Build six prefixes for note names given high string first.

    Lower strings claim the upper-case letter first, so standard tuning
    yields ``e-|`` on the high string and ``E-|`` on the low one.

    Raises:
        InvalidTuningName: If a name is not a note, or the six prefixes
            cannot all start with different characters.
    """
    assert len(names) == constants.NUM_STRINGS
    prefixes: List[str] = [""] * constants.NUM_STRINGS
    for string_index in reversed(range(constants.NUM_STRINGS)):
        letter, accidental = parse_note_name(names[string_index])
        prefixes[string_index] = unique_prefix(letter, accidental, prefixes)
    return prefixes


@dataclass(frozen=True)
class Tuning:
    """Six open-string pitch classes with their line prefixes, high string first."""

    pitches: List[int]
    """Pitch class (0-11, relative to E) of each open string."""
    prefixes: List[str]
    """The 3-character prefix that starts each string-line."""

    def __post_init__(self) -> None:
        assert len(self.pitches) == constants.NUM_STRINGS
        assert len(self.prefixes) == constants.NUM_STRINGS
        assert all(0 <= p < constants.OCTAVE for p in self.pitches)
        assert all(len(p) == constants.PREFIX_WIDTH for p in self.prefixes)

    @classmethod
    def from_names(cls, names: Sequence[str]) -> Tuning:
        return learn_tuning(prefixes_for_names(names))

    @classmethod
    def standard(cls) -> Tuning:
        return cls.from_names(constants.STANDARD_TUNING_NAMES)

    @property
    def names(self) -> List[str]:
        return [note_name(p) for p in self.pitches]


def learn_tuning(prefixes: Sequence[str]) -> Tuning:
    """Read a tuning from the six prefixes of a staff, high string first.

    Args:
        prefixes: The first three characters of each string-line.

    Returns:
        The tuning those prefixes declare.
    """
    assert len(prefixes) == constants.NUM_STRINGS
    pitches: List[int] = []
    for prefix in prefixes:
        accidental = prefix[1] if prefix[1] in "#b" else ""
        pitches.append(pitch_class(prefix[0], accidental))
    tuning = Tuning(pitches=pitches, prefixes=list(prefixes))
    logging.debug("learned tuning %s from %s", tuning.names, list(prefixes))
    return tuning
