from __future__ import annotations

import os
from pathlib import Path


class DataAccessError(Exception):
    """
    Source document cannot be reached. `code` is a stable identifier for audits.
    """

    def __init__(self, message: str, *, code: str = "SOURCE_ACCESS_ERROR") -> None:
        super().__init__(message)
        self.code = code


def resolve_under_data_root(*, data_root: Path, relpath: str) -> Path:
    """
    Resolve a relative path under an explicit data_root, rejecting absolute
    paths and traversal outside the root.
    """

    if relpath.startswith(("/", "\\")) or (":" in relpath and "\\" in relpath):
        raise DataAccessError(
            f"Expected a relative path under data_root, got: {relpath!r}",
            code="SOURCE_NOT_RELATIVE",
        )

    root = data_root.expanduser().resolve()
    candidate = (root / relpath).resolve()

    if not candidate.is_relative_to(root):
        raise DataAccessError(
            f"Path traversal or external reference detected: relpath={relpath!r}",
            code="SOURCE_OUTSIDE_DATA_ROOT",
        )

    return candidate


def resolve_source_pdf(*, pdf_path: Path, data_root: Path | None = None) -> Path:
    """
    Resolve the source document and check that it can be read.

    With `data_root`, `pdf_path` must be relative to it.
    """

    try:
        if data_root is not None:
            pdf_file = resolve_under_data_root(data_root=data_root, relpath=pdf_path.as_posix())
        else:
            pdf_file = pdf_path.expanduser().resolve()

        if not pdf_file.exists():
            raise DataAccessError(f"Input PDF not found: {pdf_file}", code="SOURCE_NOT_FOUND")
        if not pdf_file.is_file():
            raise DataAccessError(f"Input PDF is not a regular file: {pdf_file}", code="SOURCE_NOT_A_FILE")
    except (OSError, ValueError) as e:
        # Unusable path (embedded NUL, unsearchable parent, ...).
        raise DataAccessError(f"Cannot access input PDF {str(pdf_path)!r}: {e}") from e
    if not os.access(pdf_file, os.R_OK):
        raise DataAccessError(f"Permission denied reading input PDF: {pdf_file}", code="SOURCE_PERMISSION_DENIED")
    return pdf_file
