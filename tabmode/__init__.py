from tabmode.base import (
    ChordLabelOutOfSequence,
    InvalidTuningName,
    NoNotesInChord,
    NotInTabContext,
    RegionSpansMultipleStaves,
    TabError,
)
from tabmode.cell import Cell, EmbKind
from tabmode.chords import ChordAnalyzer, ChordResult
from tabmode.config import TabConfig, configure_logging, init_config
from tabmode.cursor import CursorModel, TabContext
from tabmode.document import Staff, TabDocument
from tabmode.editor import Clipboard, StaffEditor
from tabmode.session import Action, ActionKind, Session
from tabmode.transpose import Transposer
from tabmode.tuning import Tuning, learn_tuning

__all__ = [
    "Action",
    "ActionKind",
    "Cell",
    "ChordAnalyzer",
    "ChordLabelOutOfSequence",
    "ChordResult",
    "Clipboard",
    "CursorModel",
    "EmbKind",
    "InvalidTuningName",
    "NoNotesInChord",
    "NotInTabContext",
    "RegionSpansMultipleStaves",
    "Session",
    "Staff",
    "StaffEditor",
    "TabConfig",
    "TabContext",
    "TabDocument",
    "TabError",
    "Transposer",
    "Tuning",
    "configure_logging",
    "init_config",
    "learn_tuning",
]
