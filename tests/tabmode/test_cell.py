import pytest
from hypothesis import given
from hypothesis import strategies as st

from tabmode.cell import (
    Cell,
    EmbKind,
    NoteCell,
    OtherCell,
    cell_at,
    parse_line,
    parse_row,
    render_line,
    replace_cell,
)
from tests.tabmode.hypo import configure_hypo

configure_hypo()


@pytest.mark.parametrize(
    "text, cell",
    [
        ("---", Cell.blank()),
        ("--|", Cell.barline()),
        ("--5", Cell.note(5)),
        ("-12", Cell.note(12)),
        ("h-7", Cell.note(7, EmbKind.Hammer)),
        ("p10", Cell.note(10, EmbKind.Pull)),
        ("b-2", Cell.note(2, EmbKind.Bend)),
        ("r-2", Cell.note(2, EmbKind.Release)),
        ("/-3", Cell.note(3, EmbKind.SlideUp)),
        ("\\-3", Cell.note(3, EmbKind.SlideDown)),
        ("~24", Cell.note(24, EmbKind.Vibrato)),
        ("(-0", Cell.note(0, EmbKind.Ghost)),
        ("X-9", Cell.note(9, EmbKind.Muffled)),
        ("-05", OtherCell("-05")),
        ("-25", OtherCell("-25")),
        ("-5-", OtherCell("-5-")),
        ("abc", OtherCell("abc")),
    ],
)
def test_parse_cell(text: str, cell: Cell) -> None:
    assert Cell.parse(text) == cell
    assert cell.render() == text


def test_note_render_widths() -> None:
    assert Cell.note(7).render() == "--7"
    assert Cell.note(17, EmbKind.Hammer).render() == "h17"
    with pytest.raises(AssertionError):
        Cell.note(25)


def test_note_updates() -> None:
    note = Cell.note(3, EmbKind.Bend)
    assert note.with_fret(15) == NoteCell(emb=EmbKind.Bend, fret=15)
    assert note.with_emb(EmbKind.Normal) == Cell.note(3)


def test_parse_row() -> None:
    row = parse_row("---h12--|-5-ab")
    assert row.cells == [
        Cell.blank(),
        Cell.note(12, EmbKind.Hammer),
        Cell.barline(),
        OtherCell("-5-"),
    ]
    assert row.tail == "ab"
    assert row.render() == "---h12--|-5-ab"


def test_parse_empty_row() -> None:
    row = parse_row("")
    assert row.cells == []
    assert row.tail == ""


@given(st.text(alphabet="-0123456789hpbr/\\~(X|a ", max_size=40))
def test_row_round_trip(body: str) -> None:
    assert parse_row(body).render() == body


def test_cell_at() -> None:
    line = "e-|--h12--|-"
    assert cell_at(line, 5) == Cell.note(12, EmbKind.Hammer)
    assert cell_at(line, 8) == Cell.barline()
    assert cell_at(line, 11) is None


def test_replace_cell() -> None:
    assert replace_cell("e-|-----", 5, Cell.note(4)) == "e-|----4"
    assert replace_cell("e-|--", 8, Cell.note(3)) == "e-|--" + "---" + "--3"
    assert replace_cell("e-|--h12---", 5, Cell.blank()) == "e-|--------"


def test_parse_line() -> None:
    line = "e-|--h12--|-"
    row = parse_line(line)
    assert row.cells == [Cell.note(12, EmbKind.Hammer), Cell.barline()]
    assert row.tail == "-"
    changed = row.with_cell(0, Cell.note(3))
    assert render_line(line, changed) == "e-|----3--|-"
    assert render_line(line, row) == line
    assert row.cells[0] == Cell.note(12, EmbKind.Hammer)
    assert parse_line("e-|").cells == []
    assert render_line("e-|", parse_line("e-|")) == "e-|"


@given(st.text(alphabet="-0123456789hp|x", max_size=30))
def test_parse_line_matches_cell_at(body: str) -> None:
    line = "e-|--" + body
    cells = parse_line(line).cells
    for index, cell in enumerate(cells):
        assert cell_at(line, 5 + 3 * index) == cell
    assert cell_at(line, 5 + 3 * len(cells)) is None
