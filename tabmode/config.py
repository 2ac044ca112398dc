"""Configuration for a tabmode editing session.

A TabConfig is immutable; hosts derive variants with ``dataclasses.replace``
and hand the result to a new Session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from tabmode import constants


@dataclass(frozen=True)
class TabConfig:
    """Settings that shape new staves and chord spellings."""

    staff_width: int  # Total width of new string-lines
    tuning_names: List[str] = field(
        default_factory=lambda: list(constants.STANDARD_TUNING_NAMES)
    )  # Open-string note names, high string first
    twelve_tone_spelling: bool = False  # Append raw interval numbers to spellings
    staff_gap: int = constants.DEFAULT_STAFF_GAP  # Lines below cursor for a first staff

    def __post_init__(self) -> None:
        assert self.staff_width >= constants.FIRST_CELL_COLUMN + constants.CELL_WIDTH
        assert len(self.tuning_names) == constants.NUM_STRINGS
        assert self.staff_gap >= 0


def init_config(
    staff_width: int = constants.DEFAULT_STAFF_WIDTH,
    tuning_names: Optional[List[str]] = None,
    twelve_tone_spelling: bool = False,
    staff_gap: int = constants.DEFAULT_STAFF_GAP,
) -> TabConfig:
    """Initialize a configuration, in standard tuning unless told otherwise.

    Args:
        staff_width: Width of new string-lines, prefix included.
        tuning_names: Open-string note names, high string first.
        twelve_tone_spelling: Whether chord spellings carry raw intervals.
        staff_gap: Lines below the cursor for a staff with none above it.

    Returns:
        A TabConfig with the given settings.
    """
    return TabConfig(
        staff_width=staff_width,
        tuning_names=(
            list(tuning_names)
            if tuning_names is not None
            else list(constants.STANDARD_TUNING_NAMES)
        ),
        twelve_tone_spelling=twelve_tone_spelling,
        staff_gap=staff_gap,
    )


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level.

    The library itself only emits records; hosts call this once if they
    have no logging setup of their own.

    Args:
        log_level: The logging level (e.g., 'DEBUG', 'INFO', 'WARNING').
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )
