from typing import List

import pytest

from tabmode.base import ChordLabelOutOfSequence, NoNotesInChord
from tabmode.chords import (
    CHORD_PATTERNS,
    ChordAnalyzer,
    find_root_string,
    match_pattern,
    name_chord,
    write_label,
)
from tabmode.cursor import TabContext
from tabmode.document import TabDocument
from tabmode.tuning import Tuning
from tests.tabmode.tabs import blank_staff, chord_frets, staff_with_column

STANDARD = Tuning.standard()


def test_pattern_table_shape() -> None:
    for count, patterns in CHORD_PATTERNS.items():
        for pattern in patterns:
            assert pattern.count == count or not pattern.intervals


@pytest.mark.parametrize(
    "shape, root_string, chord_name, disclaimer, spelling",
    [
        ("x02220", 4, "A", "", "5 3 rt 5 rt x"),
        ("x02210", 4, "Am", "", "5 b3 rt 5 rt x"),
        ("022100", 5, "E", "", "rt 5 3 rt 5 rt"),
        ("x32010", 4, "C", "", "3 rt 5 3 rt x"),
        ("320003", 5, "G", "", "rt 3 rt 5 3 rt"),
        ("x02020", 4, "A7", "", "5 3 7 5 rt x"),
        ("xx0232", 3, "D", "", "3 rt 5 rt x x"),
        ("x0xxxx", 4, "A", " (single note)", "x x x x rt x"),
        ("355xxx", 5, "G5", "", "x x x rt 5 rt"),
    ],
)
def test_name_chord(
    shape: str, root_string: int, chord_name: str, disclaimer: str, spelling: str
) -> None:
    result = name_chord(chord_frets(shape), STANDARD, root_string)
    assert result.chord_name == chord_name
    assert result.disclaimer == disclaimer
    assert result.spelling == spelling


def test_name_chord_twelve_tone() -> None:
    result = name_chord(chord_frets("x02220"), STANDARD, 4, twelve_tone=True)
    assert result.spelling == "5 3 rt 5 rt x (x 0 7 0 4 7)"


def test_name_chord_unknown() -> None:
    result = name_chord(chord_frets("x02220"), STANDARD, 0)
    assert result.chord_name == "E??"
    assert result.disclaimer == ""
    assert result.spelling == "rt 6 4 rt 4 x"


def test_name_chord_bass_fallback() -> None:
    frets = [0, 2, 2, 2, 0, 11]
    result = name_chord(frets, STANDARD, 4)
    assert result.chord_name == "A/Eb"
    assert result.spelling == "5 3 rt 5 rt b5"


def test_name_chord_bass_fallback_needs_single_bass() -> None:
    # Two Ebs in the bass: no slash chord
    frets = [None, 2, 2, 2, 6, 11]
    result = name_chord(frets, STANDARD, 3)
    assert result.root_name == "E"
    assert result.chord_name == "E??"


def test_tritone_disclaimer_has_no_comma() -> None:
    result = name_chord([None, None, None, 1, 0, None], STANDARD, 4)
    assert result.chord_name == "A(b5)"
    assert result.disclaimer == "no3"


def test_degree_overrides() -> None:
    result = name_chord(chord_frets("x32030"), STANDARD, 4)
    assert result.chord_name == "Cadd9"
    assert result.spelling == "3 9 5 3 rt x"


@pytest.mark.parametrize(
    "intervals, name, disclaimer",
    [
        ([4, 7], "", ""),
        ([6], "(b5)", "no3"),
        ([5, 7, 10], "7sus4", ""),
        ([2, 5, 7, 10], "11", ",no3"),
        ([3, 6, 9], "dim7", ""),
        ([], "", " (single note)"),
    ],
)
def test_match_pattern_order(intervals: List[int], name: str, disclaimer: str) -> None:
    pattern = match_pattern(intervals)
    assert pattern is not None
    assert pattern.name == name
    assert pattern.disclaimer == disclaimer


def test_match_pattern_missing() -> None:
    assert match_pattern([1, 2]) is None
    assert match_pattern([1, 2, 3, 4, 5, 6]) is None


def test_find_root_string() -> None:
    frets = chord_frets("x02220")
    assert find_root_string(frets, 4) == 4
    assert find_root_string(frets, 5) == 0
    assert find_root_string([None] * 6, 2) is None


def test_analyze_repeat_advances_root() -> None:
    document = TabDocument(staff_with_column(chord_frets("x02220")))
    analyzer = ChordAnalyzer()
    context = TabContext(0, 4, 5)
    first = analyzer.analyze(document, context, STANDARD, False)
    assert (first.chord_name, first.root_string) == ("A", 4)
    second = analyzer.analyze(document, context, STANDARD, True)
    assert (second.chord_name, second.root_string) == ("E??", 0)
    third = analyzer.analyze(document, context, STANDARD, True)
    assert (third.chord_name, third.root_string) == ("C#??", 1)
    fresh = analyzer.analyze(document, context, STANDARD, False)
    assert fresh.root_string == 4


def test_analyze_from_empty_string() -> None:
    document = TabDocument(staff_with_column(chord_frets("x02220")))
    result = ChordAnalyzer().analyze(document, TabContext(0, 5, 5), STANDARD, False)
    assert result.root_string == 0


def test_analyze_empty_column() -> None:
    document = TabDocument(blank_staff())
    analyzer = ChordAnalyzer()
    with pytest.raises(NoNotesInChord):
        analyzer.analyze(document, TabContext(0, 0, 5), STANDARD, False)
    assert analyzer.pending is None


def test_label_adds_line() -> None:
    document = TabDocument(staff_with_column(chord_frets("x02210"), cell=2))
    analyzer = ChordAnalyzer()
    analyzer.analyze(document, TabContext(0, 4, 11), STANDARD, False)
    assert analyzer.label(document) == 0
    assert document.line(0) == " " * 11 + "Am"
    assert document.staff(0).top == 1
    assert analyzer.pending is None
    with pytest.raises(ChordLabelOutOfSequence):
        analyzer.label(document)


def test_label_replaces_existing() -> None:
    document = TabDocument(["     G7   D"] + staff_with_column(chord_frets("x02220")))
    analyzer = ChordAnalyzer()
    analyzer.analyze(document, TabContext(0, 4, 5), STANDARD, False)
    assert analyzer.label(document) == 0
    assert document.line(0) == "     A    D"


@pytest.mark.parametrize(
    "line, column, name, result",
    [
        ("", 5, "Am", "     Am"),
        ("     Am7  G", 5, "A", "     A    G"),
        ("     A  G", 5, "Cmaj7", "     Cmaj7"),
        ("ab", 5, "E", "ab   E"),
    ],
)
def test_write_label(line: str, column: int, name: str, result: str) -> None:
    assert write_label(line, column, name) == result
