from typing import Optional

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tabmode.cursor import CursorModel, TabContext
from tabmode.document import TabDocument
from tests.tabmode.hypo import configure_hypo
from tests.tabmode.tabs import LINE_STRIDE, blank_staff

configure_hypo()

ONE_STAFF = TabDocument(blank_staff())
TWO_STAVES = TabDocument(blank_staff() + ["", "words"] + blank_staff())


@pytest.mark.parametrize(
    "offset, context",
    [
        (0, TabContext(0, 0, 5)),
        (4, TabContext(0, 0, 5)),
        (5, TabContext(0, 0, 5)),
        (7, TabContext(0, 0, 5)),
        (8, TabContext(0, 0, 8)),
        (LINE_STRIDE + 12, TabContext(0, 1, 11)),
        (5 * LINE_STRIDE + 26, TabContext(0, 5, 26)),
        (5 * LINE_STRIDE + 28, TabContext(0, 5, 26)),
        (5 * LINE_STRIDE + 29, TabContext(0, 5, 26)),
    ],
)
def test_resolve(offset: int, context: Optional[TabContext]) -> None:
    assert CursorModel(ONE_STAFF).resolve(offset) == context


def test_resolve_outside_tab() -> None:
    cursor = CursorModel(TWO_STAVES)
    assert cursor.resolve(6 * LINE_STRIDE) is None
    assert cursor.resolve(6 * LINE_STRIDE + 2) is None
    assert cursor.resolve(6 * LINE_STRIDE + 7) == TabContext(1, 0, 5)
    assert CursorModel(TabDocument.from_text("no tab here")).resolve(3) is None
    assert CursorModel(TabDocument()).resolve(0) is None


@given(st.integers(min_value=0, max_value=6 * LINE_STRIDE - 1))
def test_resolve_idempotent(offset: int) -> None:
    cursor = CursorModel(ONE_STAFF)
    context = cursor.resolve(offset)
    assert context is not None
    assert cursor.resolve(cursor.to_offset(context)) == context


def test_to_offset() -> None:
    cursor = CursorModel(TWO_STAVES)
    assert cursor.to_offset(TabContext(0, 2, 11)) == 2 * LINE_STRIDE + 11
    assert cursor.to_offset(TabContext(1, 0, 5)) == 6 * LINE_STRIDE + 7 + 5


def test_advance_clamps() -> None:
    cursor = CursorModel(ONE_STAFF)
    start = TabContext(0, 3, 8)
    assert cursor.advance(start, 2) == TabContext(0, 3, 14)
    assert cursor.advance(start, -5) == TabContext(0, 3, 5)
    assert cursor.advance(start, 50) == TabContext(0, 3, 26)


def test_move_strings() -> None:
    cursor = CursorModel(ONE_STAFF)
    assert cursor.move_strings(TabContext(0, 2, 8), 3) == TabContext(0, 5, 8)
    with pytest.raises(IndexError):
        cursor.move_strings(TabContext(0, 5, 8), 1)
    with pytest.raises(IndexError):
        cursor.move_strings(TabContext(0, 0, 8), -1)


def test_next_string_wrapping() -> None:
    cursor = CursorModel(ONE_STAFF)
    assert cursor.next_string_wrapping(TabContext(0, 5, 8)) == TabContext(0, 0, 8)
    assert cursor.next_string_wrapping(TabContext(0, 0, 8), -1) == TabContext(0, 5, 8)


def test_move_staff() -> None:
    document = TabDocument(blank_staff() + [""] + [line[:14] for line in blank_staff()])
    cursor = CursorModel(document)
    assert cursor.move_staff(TabContext(0, 4, 26), 1) == TabContext(1, 4, 11)
    assert cursor.move_staff(TabContext(1, 4, 11), -1) == TabContext(0, 4, 11)
    assert cursor.move_staff(TabContext(1, 4, 8), 1) is None
    assert cursor.move_staff(TabContext(0, 4, 8), -1) is None


def test_staff_without_cells() -> None:
    prefixes_only = [line[:3] for line in blank_staff()]
    document = TabDocument(prefixes_only)
    assert len(document.staves()) == 1
    assert CursorModel(document).resolve(0) is None
    assert CursorModel(document).resolve(4 * 4 + 3) is None


def test_move_staff_passes_staff_without_cells() -> None:
    narrow = [line[:6] for line in blank_staff()]
    document = TabDocument(blank_staff() + [""] + narrow + [""] + blank_staff())
    cursor = CursorModel(document)
    assert document.staff(1).num_cells == 0
    assert cursor.move_staff(TabContext(0, 2, 8), 1) == TabContext(2, 2, 8)
    assert cursor.move_staff(TabContext(2, 2, 8), -1) == TabContext(0, 2, 8)
