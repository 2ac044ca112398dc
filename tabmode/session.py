"""The editing session: one document, its tuning, and per-document state.

The host calls one Session method per user command, passing raw offsets
into the document text. Each command either resolves its offset into tab
and edits the document, or (for key-triggered commands outside tab)
inserts the key as plain text and reports a literal action.

Commands are atomic. They run against a working copy of the document that
replaces the session's document only when the command finishes without
raising, so a failed command leaves nothing half-applied.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import Generator, Optional, Tuple

from tabmode import constants
from tabmode.base import NotInTabContext, RegionSpansMultipleStaves
from tabmode.cell import EmbKind, NoteCell
from tabmode.chords import ChordAnalyzer, ChordResult
from tabmode.config import TabConfig, init_config
from tabmode.cursor import CursorModel, TabContext
from tabmode.document import TabDocument
from tabmode.editor import Clipboard, StaffEditor
from tabmode.transpose import Transposer
from tabmode.tuning import Tuning, learn_tuning


@unique
class ActionKind(Enum):
    Literal = auto()  # The triggering key went in as plain text
    Edit = auto()  # Document changed or cursor moved; host adopts the new offset


@dataclass(frozen=True)
class Action:
    """What the host should do after a command."""

    kind: ActionKind
    text: Optional[str] = None
    """The key to insert for a literal action."""
    offset: Optional[int] = None
    """The new cursor offset."""
    message: Optional[str] = None
    """Text to show the user, if any."""

    @staticmethod
    def literal(text: str, offset: int) -> Action:
        return Action(kind=ActionKind.Literal, text=text, offset=offset)

    @staticmethod
    def edit(offset: int, message: Optional[str] = None) -> Action:
        return Action(kind=ActionKind.Edit, offset=offset, message=message)

    @property
    def is_literal(self) -> bool:
        return self.kind == ActionKind.Literal


class Session:
    """Per-document editing state and the commands that act on it."""

    def __init__(self, document: TabDocument, config: Optional[TabConfig] = None) -> None:
        self._config = config if config is not None else init_config()
        self._document = document
        self._tuning = Tuning.from_names(self._config.tuning_names)
        self._clipboard: Optional[Clipboard] = None
        self._pending_emb: Optional[EmbKind] = None
        self._analyzer = ChordAnalyzer(self._config.twelve_tone_spelling)
        self._last_command: Optional[str] = None
        self._last_fret: Optional[TabContext] = None

    @classmethod
    def from_text(cls, text: str, config: Optional[TabConfig] = None) -> Session:
        return cls(TabDocument.from_text(text), config)

    @property
    def text(self) -> str:
        return self._document.text()

    @property
    def document(self) -> TabDocument:
        return self._document

    @property
    def tuning(self) -> Tuning:
        return self._tuning

    @property
    def clipboard(self) -> Optional[Clipboard]:
        return self._clipboard

    @property
    def pending_embellishment(self) -> Optional[EmbKind]:
        return self._pending_emb

    @property
    def pending_chord(self) -> Optional[ChordResult]:
        return self._analyzer.pending

    def update_text(self, text: str) -> None:
        """Adopt text the host changed outside of session commands."""
        self._document = TabDocument.from_text(text)
        self._last_command = None
        self._analyzer.forget()

    def resolve(self, offset: int) -> Optional[TabContext]:
        return CursorModel(self._document).resolve(offset)

    @contextmanager
    def _command(self, name: str) -> Generator[TabDocument, None, None]:
        """Run a command against a working copy, committing on success."""
        previous = self._last_command
        self._last_command = None
        if name != "label_chord" and not (name == "analyze_chord" and previous == name):
            self._analyzer.forget()
        working = self._document.copy()
        yield working
        self._document = working
        self._last_command = name
        logging.debug("command %s committed", name)

    def _require(self, document: TabDocument, offset: int) -> TabContext:
        context = CursorModel(document).resolve(offset)
        if context is None:
            raise NotInTabContext(offset)
        return context

    def _edit(self, document: TabDocument, context: TabContext, message: Optional[str] = None) -> Action:
        return Action.edit(CursorModel(document).to_offset(context), message)

    def _edit_at(self, document: TabDocument, line_index: int, column: int) -> Action:
        column = min(column, len(document.line(line_index)))
        return Action.edit(document.offset_of(line_index, column))

    # Navigation

    def move_cells(self, offset: int, delta: int, key: Optional[str] = None) -> Action:
        """Move along the current string by whole cells."""
        with self._command("move") as document:
            context = CursorModel(document).resolve(offset)
            if context is None:
                return self._fallback(document, offset, key)
            return self._edit(document, CursorModel(document).advance(context, delta))

    def move_string(self, offset: int, down: bool, key: Optional[str] = None) -> Action:
        """Move to the neighbouring string, continuing into the next staff.

        At the bottom string moving down goes to the top string of the
        next staff (and the reverse going up); with no staff there the
        cursor stays where it is.
        """
        with self._command("move") as document:
            cursor = CursorModel(document)
            context = cursor.resolve(offset)
            if context is None:
                return self._fallback(document, offset, key)
            step = 1 if down else -1
            try:
                target = cursor.move_strings(context, step)
            except IndexError:
                neighbour = cursor.move_staff(context, step)
                if neighbour is None:
                    target = context
                else:
                    edge = 0 if down else constants.NUM_STRINGS - 1
                    target = cursor.move_strings(neighbour, edge - neighbour.string_index)
            return self._edit(document, target)

    def move_staff(self, offset: int, down: bool) -> Action:
        """Move to the same string of the next or previous staff."""
        with self._command("move") as document:
            cursor = CursorModel(document)
            context = self._require(document, offset)
            target = cursor.move_staff(context, 1 if down else -1)
            return self._edit(document, target if target is not None else context)

    # Staff structure

    def make_staff(self, offset: int) -> Action:
        """Insert a blank staff below the nearest staff above the cursor."""
        with self._command("make_staff") as document:
            line_index, _ = document.point_of(offset)
            context = StaffEditor(document).make_staff(
                line_index,
                self._tuning.prefixes,
                self._config.staff_width,
                self._config.staff_gap,
            )
            return self._edit(document, context)

    def insert_columns(self, offset: int, count: int = 1, key: Optional[str] = None) -> Action:
        with self._command("insert_columns") as document:
            context = CursorModel(document).resolve(offset)
            if context is None:
                return self._fallback(document, offset, key)
            StaffEditor(document).insert_columns(context, count)
            return self._edit(document, context)

    def delete_cells(
        self, offset: int, count: int = 1, forward: bool = True, key: Optional[str] = None
    ) -> Action:
        with self._command("delete_cells") as document:
            context = CursorModel(document).resolve(offset)
            if context is None:
                return self._fallback(document, offset, key)
            moved = StaffEditor(document).delete_cells(context, count, forward)
            return self._edit(document, moved)

    def toggle_barline(self, offset: int, advance: bool = True, key: Optional[str] = "|") -> Action:
        with self._command("toggle_barline") as document:
            context = CursorModel(document).resolve(offset)
            if context is None:
                return self._fallback(document, offset, key)
            column = StaffEditor(document).toggle_barline(context, advance)
            staff = document.staff(context.staff_index)
            return self._edit_at(document, staff.line_of(context.string_index), column)

    # Regions

    def _region(
        self, document: TabDocument, mark: int, point: int
    ) -> Tuple[TabContext, TabContext]:
        cursor = CursorModel(document)
        begin = cursor.resolve(mark)
        end = cursor.resolve(point)
        if begin is None or end is None or begin.staff_index != end.staff_index:
            raise RegionSpansMultipleStaves(begin, end)
        return begin, end

    def kill_region(self, mark: int, point: int, delete: bool = True) -> Action:
        """Cut (or copy) the rectangle between mark and point into the clipboard."""
        with self._command("kill_region") as document:
            begin, end = self._region(document, mark, point)
            self._clipboard = StaffEditor(document).kill_region(begin, end, delete)
            left = begin if begin.column <= end.column else end
            target = TabContext(left.staff_index, end.string_index, left.column)
            return self._edit(document, target if delete else end)

    def copy_region(self, mark: int, point: int) -> Action:
        return self.kill_region(mark, point, delete=False)

    def yank(self, offset: int) -> Action:
        """Insert the clipboard rectangle at the cursor."""
        with self._command("yank") as document:
            context = self._require(document, offset)
            if self._clipboard is not None:
                StaffEditor(document).yank(context, self._clipboard)
            return self._edit(document, context)

    # Notes

    def fret_key(self, offset: int, digit: str) -> Action:
        """Write a fret digit at the cursor.

        A second digit typed on the same cell right after the first joins
        it into a two-digit fret when the result is a valid fret.
        """
        assert len(digit) == 1 and digit.isdigit()
        previous = self._last_command
        last_fret = self._last_fret
        with self._command("fret") as document:
            context = CursorModel(document).resolve(offset)
            if context is None:
                return self._fallback(document, offset, digit)
            editor = StaffEditor(document)
            current = editor.cell(context)
            fret = int(digit)
            emb = self._pending_emb
            if (
                previous == "fret"
                and last_fret == context
                and isinstance(current, NoteCell)
                and current.fret < 10
                and current.fret * 10 + fret <= constants.MAX_FRET
            ):
                fret = current.fret * 10 + fret
                emb = current.emb
            editor.write_fret(context, fret, emb if emb is not None else EmbKind.Normal)
            self._pending_emb = None
            self._last_fret = context
            return self._edit(document, context)

    def erase_cell(self, offset: int, key: Optional[str] = " ") -> Action:
        with self._command("erase") as document:
            context = CursorModel(document).resolve(offset)
            if context is None:
                return self._fallback(document, offset, key)
            StaffEditor(document).erase_cell(context)
            return self._edit(document, context)

    def embellish(self, offset: int, emb: EmbKind, key: Optional[str] = None) -> Action:
        """Toggle an embellishment on the note at the cursor.

        On a cell without a note the embellishment is held for the next
        fret entered instead; asking for the held one again clears it.
        """
        with self._command("embellish") as document:
            context = CursorModel(document).resolve(offset)
            if context is None:
                return self._fallback(document, offset, key if key is not None else emb.char)
            if not StaffEditor(document).toggle_embellishment(context, emb):
                self._pending_emb = None if self._pending_emb == emb else emb
            return self._edit(document, context)

    def octave_shift(self, offset: int, up: bool) -> Action:
        with self._command("octave_shift") as document:
            context = self._require(document, offset)
            Transposer(document).octave_shift(context, up)
            return self._edit(document, context)

    # Tuning and transposition

    def transpose_region(self, mark: int, point: int, delta: int) -> Action:
        with self._command("transpose") as document:
            begin, end = self._region(document, mark, point)
            Transposer(document).transpose_uniform(begin, end, delta)
            return self._edit(document, end)

    def learn_tuning(self, offset: int) -> Action:
        """Adopt the tuning declared by the prefixes of the cursor's staff."""
        with self._command("learn_tuning") as document:
            context = self._require(document, offset)
            tuning = learn_tuning(document.prefixes(document.staff(context.staff_index)))
            self._tuning = tuning
            logging.info("tuning is now %s", tuning.names)
            return self._edit(document, context, " ".join(tuning.names))

    def retune_string(self, offset: int, name: str) -> Action:
        with self._command("retune_string") as document:
            context = self._require(document, offset)
            tuning = Transposer(document).retune_string(context, name)
            self._tuning = tuning
            return self._edit(document, context, " ".join(tuning.names))

    def copy_retune(self, offset: int) -> Action:
        """Copy the cursor's staff, re-fretted for the current tuning."""
        with self._command("copy_retune") as document:
            context = self._require(document, offset)
            copied = Transposer(document).copy_retune(context, self._tuning)
            return self._edit(document, copied)

    # Chords

    def analyze_chord(self, offset: int) -> Action:
        """Name the chord in the cursor's column.

        Repeating the command straight away moves the root to the next
        string with a note. The cursor moves to the root.
        """
        repeat = self._last_command == "analyze_chord"
        with self._command("analyze_chord") as document:
            context = self._require(document, offset)
            result = self._analyzer.analyze(document, context, self._tuning, repeat)
            root = TabContext(result.staff_index, result.root_string, result.column)
            message = f"{result.chord_name}{result.disclaimer}  {result.spelling}"
            return self._edit(document, root, message)

    def label_chord(self, offset: int) -> Action:
        """Write the chord just analyzed above its staff."""
        if self._last_command != "analyze_chord":
            self._analyzer.forget()
        with self._command("label_chord") as document:
            result = self._analyzer.pending
            self._analyzer.label(document)
            assert result is not None
            root = TabContext(result.staff_index, result.root_string, result.column)
            return self._edit(document, root)

    def _fallback(self, document: TabDocument, offset: int, key: Optional[str]) -> Action:
        """Insert the triggering key as text, or fail when there is no key."""
        if key is None:
            raise NotInTabContext(offset)
        return Action.literal(key, document.insert_text(offset, key))
