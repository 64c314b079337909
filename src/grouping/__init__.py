"""
Layout reconstruction: recognized fragments -> rows -> spaced text lines.

- fixed-rule text correction applied to each fragment
- sequential row grouping by vertical proximity, left-to-right row order
- gap-classified column spacing (1/3/5 spaces)

Pure, deterministic functions; no I/O, no shared state.
"""

from .config import LayoutConfig
from .group_rows import group_rows
from .spacing import row_to_line, rows_to_text, spacer_count
from .text_correction import correct_common_ocr_errors

__all__ = [
    "LayoutConfig",
    "correct_common_ocr_errors",
    "group_rows",
    "row_to_line",
    "rows_to_text",
    "spacer_count",
]
