from __future__ import annotations

from typing import Iterable

from contracts.layout import Row

from .config import LayoutConfig


def spacer_count(gap: float, config: LayoutConfig) -> int:
    """
    Map a horizontal gap (pixels) to a number of literal spaces.

    Overlapping boxes give a negative gap, which lands in the word-spacing class.
    """

    if gap < config.column_gap_px:
        return config.word_spaces
    if gap < config.wide_column_gap_px:
        return config.column_spaces
    return config.wide_column_spaces


def row_to_line(row: Row, config: LayoutConfig) -> str | None:
    """
    Render one left-to-right sorted row as a single text line.

    Returns None for an empty row (callers skip it).
    """

    frags = row.fragments
    if not frags:
        return None

    parts = [frags[0].text]
    for current, nxt in zip(frags, frags[1:]):
        gap = nxt.min_x - current.max_x
        parts.append(" " * spacer_count(gap, config))
        parts.append(nxt.text)
    return "".join(parts)


def rows_to_text(rows: Iterable[Row], config: LayoutConfig) -> str:
    lines = [line for line in (row_to_line(r, config) for r in rows) if line is not None]
    return "\n".join(lines).strip()
