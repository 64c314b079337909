from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from contracts.ocr import RecognizedText
from grouping.group_rows import group_rows
from grouping.spacing import row_to_line, spacer_count

from .contracts import ExtractOptions
from .module import build_page_fragments


def _load_json(p: Path) -> dict[str, Any]:
    return json.loads(p.read_text(encoding="utf-8"))


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="pdf-layout-text-debug-rows")
    ap.add_argument(
        "--input",
        required=True,
        type=Path,
        help="OCR page JSON (OcrPageResult.to_dict shape with meta.image_size).",
    )
    ap.add_argument("--y-tolerance", type=float, default=10.0)
    ap.add_argument("--minimum-confidence", type=float, default=0.5)
    ap.add_argument("--max-rows", type=int, default=0, help="If >0, truncate after N rows.")
    args = ap.parse_args(argv)

    raw = _load_json(args.input)
    size = (raw.get("meta") or {}).get("image_size") or {}
    width_px = float(size.get("width_px", 0))
    height_px = float(size.get("height_px", 0))
    if width_px <= 0 or height_px <= 0:
        print(f"error: {args.input} has no usable meta.image_size (got {size!r})", file=sys.stderr)
        return 2
    observations = [RecognizedText.from_dict(o) for o in (raw.get("observations") or [])]

    options = ExtractOptions(y_tolerance=args.y_tolerance, minimum_confidence=args.minimum_confidence)
    layout = options.layout_config()
    fragments, dropped = build_page_fragments(
        observations,
        image_width=width_px,
        image_height=height_px,
        minimum_confidence=options.minimum_confidence,
    )
    rows = group_rows(fragments, y_tolerance=layout.y_tolerance)

    print(f"observations={len(observations)} fragments={len(fragments)} rows={len(rows)} dropped={dropped}")

    for i, row in enumerate(rows):
        if args.max_rows and i >= args.max_rows:
            print(f"... (truncated at {args.max_rows})")
            break

        print(f"\nrow {i:04d} :: {row_to_line(row, layout)}")
        prev = None
        for f in row.fragments:
            gap = "" if prev is None else f" gap={f.min_x - prev.max_x:>7.1f} spaces={spacer_count(f.min_x - prev.max_x, layout)}"
            print(f"  - x={f.min_x:>7.1f}..{f.max_x:<7.1f} mid_y={f.mid_y:>7.1f}{gap} text={f.text!r}")
            prev = f

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
