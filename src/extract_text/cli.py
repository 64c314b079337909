from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from normalize_pdf.contracts import ColorMode

from .artifacts import write_document_result_json, write_document_text
from .contracts import ExtractOptions
from .module import run_extract_text_on_pdf


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pdf-layout-text",
        description="OCR a PDF and print plain text that approximates the page layout (rows and columns).",
    )
    p.add_argument("pdf", type=Path, help="PDF path (relative to --data-root when given).")
    p.add_argument("--data-root", type=Path, default=None, help="Confine the PDF path to this root.")
    p.add_argument("--scale", type=float, default=1.5, help="Render scale factor (1.0 == 72 dpi).")
    p.add_argument("--y-tolerance", type=float, default=10.0, help="Row clustering tolerance in pixels.")
    p.add_argument(
        "--minimum-confidence",
        type=float,
        default=0.5,
        help="Drop recognized text below this confidence (0..1).",
    )
    p.add_argument(
        "--disable-text-correction",
        action="store_false",
        dest="enable_text_correction",
        default=True,
        help="Turn off the OCR engine's own language correction.",
    )
    p.add_argument(
        "--color-mode",
        choices=[m.value for m in ColorMode],
        default=ColorMode.RGB.value,
        help="Color mode for rendered pages.",
    )
    p.add_argument(
        "--page-selection",
        default=None,
        help='Optional page selection like "1,3-5". Default: all pages.',
    )
    p.add_argument("--language", default="eng", help="Tesseract language hint (default: eng).")
    p.add_argument("--psm", type=int, default=None, help="Tesseract page segmentation mode (optional).")
    p.add_argument("--timeout-s", type=float, default=120.0, help="OCR timeout per page in seconds.")
    p.add_argument("--max-workers", type=int, default=1, help="Recognize pages in parallel (default: 1).")
    p.add_argument("--out", type=Path, default=None, help="Write text here instead of stdout.")
    p.add_argument("--result-json", type=Path, default=None, help="Also write the detailed result JSON.")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostics verbosity (stderr).",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        options = ExtractOptions(
            scale=args.scale,
            y_tolerance=args.y_tolerance,
            enable_text_correction=args.enable_text_correction,
            minimum_confidence=args.minimum_confidence,
            color_mode=ColorMode(args.color_mode),
            page_selection=args.page_selection,
            language=args.language,
            psm=args.psm,
            ocr_timeout_s=args.timeout_s,
            max_workers=args.max_workers,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    result = run_extract_text_on_pdf(pdf_path=args.pdf, options=options, data_root=args.data_root)

    if args.result_json is not None:
        write_document_result_json(result=result, out_file=args.result_json)

    if args.out is not None:
        write_document_text(result=result, out_file=args.out)
    elif result.text:
        print(result.text)

    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
