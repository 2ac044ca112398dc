"""Tablature cells and the string-line row parser.

A string-line is a 3-character prefix, a 2-character margin and then a row
of 3-character cells. The row is tokenized with Lark: every complete cell
becomes one token and a final partial cell (1 or 2 characters) is kept as
a tail so lines of any width round-trip exactly.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from enum import Enum, unique
from typing import List, Optional

from lark import Lark, Token, Transformer

from tabmode import constants
from tabmode.base import MatchException


@unique
class EmbKind(Enum):
    """Embellishment of a note, stored as the character before its fret."""

    Normal = "-"
    Hammer = "h"
    Pull = "p"
    Bend = "b"
    Release = "r"
    SlideUp = "/"
    SlideDown = "\\"
    Vibrato = "~"
    Ghost = "("
    Muffled = "X"

    @property
    def char(self) -> str:
        return self.value


class Cell(metaclass=ABCMeta):
    """One 3-character slot on one string-line."""

    @abstractmethod
    def render(self) -> str:
        """Render this cell as exactly three characters."""
        raise NotImplementedError()

    @staticmethod
    def blank() -> BlankCell:
        return _BLANK

    @staticmethod
    def barline() -> BarlineCell:
        return _BARLINE

    @staticmethod
    def note(fret: int, emb: EmbKind = EmbKind.Normal) -> NoteCell:
        return NoteCell(emb=emb, fret=fret)

    @staticmethod
    def parse(text: str) -> Cell:
        """Parse exactly one cell's worth of text.

        Args:
            text: Three characters taken from a string-line.

        Returns:
            The matching cell; anything unrecognized becomes an OtherCell.
        """
        assert len(text) == constants.CELL_WIDTH
        return parse_row(text).cells[0]


@dataclass(frozen=True)
class BlankCell(Cell):
    def render(self) -> str:
        return constants.BLANK_CELL


@dataclass(frozen=True)
class BarlineCell(Cell):
    def render(self) -> str:
        return constants.BARLINE_CELL


@dataclass(frozen=True)
class NoteCell(Cell):
    """A fretted note with its embellishment."""

    emb: EmbKind
    fret: int

    def __post_init__(self) -> None:
        assert 0 <= self.fret <= constants.MAX_FRET

    def render(self) -> str:
        return self.emb.char + str(self.fret).rjust(2, "-")

    def with_fret(self, fret: int) -> NoteCell:
        return NoteCell(emb=self.emb, fret=fret)

    def with_emb(self, emb: EmbKind) -> NoteCell:
        return NoteCell(emb=emb, fret=self.fret)


@dataclass(frozen=True)
class OtherCell(Cell):
    """Three characters that are not a tablature cell, kept verbatim."""

    text: str

    def render(self) -> str:
        return self.text


_BLANK = BlankCell()
_BARLINE = BarlineCell()


# Terminal priorities order the lexer alternation: exact cells first, then
# notes, then any three characters, then a short tail at the end of a line.
ROW_GRAMMAR = r"""
start: (BLANK | BARLINE | NOTE | OTHER)* TAIL?

BLANK.4: "---"
BARLINE.4: "--|"
NOTE.3: /[-hpbr\/\\~(X][-0-9][0-9]/
OTHER.2: /.{3}/
TAIL.1: /.{1,2}/
"""


@dataclass(frozen=True)
class Row:
    """The parsed body of a string-line (everything after the margin)."""

    cells: List[Cell]
    tail: str

    def render(self) -> str:
        return "".join(c.render() for c in self.cells) + self.tail

    def with_cell(self, index: int, cell: Cell) -> Row:
        cells = list(self.cells)
        cells[index] = cell
        return Row(cells=cells, tail=self.tail)


class RowTransformer(Transformer):
    """Transform a parsed row into cells."""

    def start(self, items: List[Token]) -> Row:
        cells: List[Cell] = []
        tail = ""
        for token in items:
            if token.type == "BLANK":
                cells.append(Cell.blank())
            elif token.type == "BARLINE":
                cells.append(Cell.barline())
            elif token.type == "NOTE":
                cells.append(_note_from_text(str(token)))
            elif token.type == "OTHER":
                cells.append(OtherCell(str(token)))
            elif token.type == "TAIL":
                tail = str(token)
            else:
                raise MatchException(token.type)
        return Row(cells=cells, tail=tail)


def _note_from_text(text: str) -> Cell:
    fret = int(text[1:].lstrip("-"))
    if fret > constants.MAX_FRET:
        return OtherCell(text)
    note = NoteCell(emb=EmbKind(text[0]), fret=fret)
    # Zero-padded frets like "-05" are not ours to rewrite
    if note.render() != text:
        return OtherCell(text)
    return note


_ROW_PARSER = Lark(ROW_GRAMMAR, parser="lalr", lexer="basic")
_ROW_TRANSFORMER = RowTransformer()


def parse_row(body: str) -> Row:
    """Parse the cell area of a string-line.

    Args:
        body: The string-line text from the first cell column onward.

    Returns:
        The row of cells plus any trailing partial cell.
    """
    if not body:
        return Row(cells=[], tail="")
    tree = _ROW_PARSER.parse(body)
    return _ROW_TRANSFORMER.transform(tree)


def parse_line(line: str) -> Row:
    """Parse all cells of a string-line in one pass."""
    return parse_row(line[constants.FIRST_CELL_COLUMN :])


def render_line(line: str, row: Row) -> str:
    """Return the line with everything after the margin replaced by a row."""
    return line[: constants.FIRST_CELL_COLUMN] + row.render()


def cell_at(line: str, column: int) -> Optional[Cell]:
    """Get the cell starting at a column, or None past the last whole cell."""
    text = line[column : column + constants.CELL_WIDTH]
    if len(text) < constants.CELL_WIDTH:
        return None
    return Cell.parse(text)


def replace_cell(line: str, column: int, cell: Cell) -> str:
    """Return the line with the cell at a column replaced."""
    end = column + constants.CELL_WIDTH
    if len(line) < end:
        line = line + "-" * (end - len(line))
    return line[:column] + cell.render() + line[end:]
