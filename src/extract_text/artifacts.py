from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .contracts import DocumentTextResult


def serialize_document_result(result: DocumentTextResult) -> str:
    """
    Stable JSON serialization for audit artifacts.
    """

    payload: dict[str, Any] = result.to_dict()
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_document_result_json(*, result: DocumentTextResult, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_document_result(result), encoding="utf-8")


def write_document_text(*, result: DocumentTextResult, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    text = result.text
    out_file.write_text(text + "\n" if text else "", encoding="utf-8")
