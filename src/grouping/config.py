from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """
    Row grouping and column spacing parameters.

    Defaults are explicit constants (no time/randomness). Gap thresholds are in
    page pixels and were calibrated against the default render scale (1.5);
    rendering at another scale skews the spacing classes unless the caller
    rescales these values. They are never rescaled automatically.
    """

    y_tolerance: float = 10.0

    # Gap classes: gap < column_gap_px -> word spacing,
    # column_gap_px <= gap < wide_column_gap_px -> column, else wide column.
    column_gap_px: float = 15.0
    wide_column_gap_px: float = 40.0

    word_spaces: int = 1
    column_spaces: int = 3
    wide_column_spaces: int = 5

    def validate(self) -> None:
        if self.y_tolerance < 0:
            raise ValueError("y_tolerance must be >= 0")
        if self.wide_column_gap_px < self.column_gap_px:
            raise ValueError("wide_column_gap_px must be >= column_gap_px")
        if min(self.word_spaces, self.column_spaces, self.wide_column_spaces) < 1:
            raise ValueError("spacer counts must be >= 1")
