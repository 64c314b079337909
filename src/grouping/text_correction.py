from __future__ import annotations

import re

# Trailing "+" grade markers are commonly recognized as a lowercase "t".
_GRADE_MARKER_LETTERS = ("C", "B", "A", "D")

_LETTER_THEN_DIGIT = re.compile(r"([A-Za-z])(\d)")
_DIGIT_THEN_LETTER = re.compile(r"(\d)([A-Za-z])")


def correct_common_ocr_errors(text: str) -> str:
    """
    Apply the fixed correction rules to one recognized string.

    Rules run once, in order (no fixed point):
    1. "<L>t" -> "<L>+" for each grade letter L
    2. space between a letter followed by a digit
    3. space between a digit followed by a letter ("89Engineering" -> "89 Engineering")
    """

    corrected = text
    for letter in _GRADE_MARKER_LETTERS:
        corrected = corrected.replace(f"{letter}t", f"{letter}+")

    corrected = _LETTER_THEN_DIGIT.sub(r"\1 \2", corrected)
    corrected = _DIGIT_THEN_LETTER.sub(r"\1 \2", corrected)
    return corrected
