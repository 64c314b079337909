from __future__ import annotations

import csv
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from PIL import Image

from contracts.ocr import NormalizedBox, RecognizedText

from ..contracts import OcrConfig, OcrEngineName, OcrError, OcrPageResult
from .base import OcrEngine

logger = logging.getLogger(__name__)

# Tesseract's language-level correction comes from its word dictionaries.
_DISABLE_DICTIONARY_VARS = ("load_system_dawg=0", "load_freq_dawg=0")


def _normalize_confidence(raw_conf: float | None) -> float | None:
    if raw_conf is None:
        return None
    if raw_conf < 0:
        return None
    # Tesseract TSV is typically 0..100; clamp into [0, 1]
    return max(0.0, min(1.0, raw_conf / 100.0))


def build_command(*, config: OcrConfig, image_file: Path) -> list[str]:
    cmd = [
        "tesseract",
        str(image_file),
        "stdout",
        "-l",
        config.language,
    ]

    if config.psm is not None:
        cmd.extend(["--psm", str(config.psm)])

    if not config.enable_text_correction:
        for var in _DISABLE_DICTIONARY_VARS:
            cmd.extend(["-c", var])

    # Request TSV output (word-level rows include bounding boxes + conf + text).
    cmd.append("tsv")
    return cmd


def parse_tsv_observations(tsv: str, *, image_width: int, image_height: int) -> list[RecognizedText]:
    """
    Parse Tesseract TSV into word-level observations.

    Pixel boxes (top-left origin) are converted to normalized boxes with a
    bottom-left origin. Rows with malformed geometry or no confidence are
    dropped (no guessing). Ordering follows (page, block, par, line, word).
    """

    if image_width <= 0 or image_height <= 0:
        return []

    keyed: list[tuple[tuple[int, int, int, int, int], RecognizedText]] = []
    reader = csv.DictReader(tsv.splitlines(), delimiter="\t", quoting=csv.QUOTE_NONE)

    for row in reader:
        # level meanings: 1=page,2=block,3=para,4=line,5=word
        try:
            level = int(row.get("level", "") or "0")
        except ValueError:
            continue
        if level != 5:
            continue

        text = row.get("text") or ""
        if text == "":
            continue

        try:
            sort_key = (
                int(row.get("page_num", "") or "1"),
                int(row.get("block_num", "") or "0"),
                int(row.get("par_num", "") or "0"),
                int(row.get("line_num", "") or "0"),
                int(row.get("word_num", "") or "0"),
            )
            left = int(row.get("left", "") or "0")
            top = int(row.get("top", "") or "0")
            width = int(row.get("width", "") or "0")
            height = int(row.get("height", "") or "0")
        except ValueError:
            continue

        conf_str = row.get("conf") or ""
        try:
            conf = _normalize_confidence(float(conf_str)) if conf_str != "" else None
        except ValueError:
            conf = None
        if conf is None:
            continue

        bbox = NormalizedBox(
            min_x=left / image_width,
            min_y=1.0 - (top + height) / image_height,
            width=width / image_width,
            height=height / image_height,
        )
        keyed.append((sort_key, RecognizedText(text=text, confidence=conf, bbox=bbox)))

    return [obs for _, obs in sorted(keyed, key=lambda x: x[0])]


class TesseractCliEngine(OcrEngine):
    """
    Tesseract OCR via `tesseract` CLI, parsed from TSV output.

    The page image is written to a temporary PNG for the duration of the call.
    """

    def recognize_image(self, *, config: OcrConfig, image: Image.Image) -> OcrPageResult:
        width_px, height_px = image.size
        meta: dict[str, Any] = {
            "backend": "tesseract",
            "backend_mode": "cli",
            "language": config.language,
            "psm": config.psm,
            "enable_text_correction": config.enable_text_correction,
            "image_size": {"width_px": width_px, "height_px": height_px},
        }

        with tempfile.TemporaryDirectory(prefix="ocr_page_") as tmp:
            image_file = Path(tmp) / "page.png"
            try:
                image.save(image_file, format="PNG")
            except OSError as e:
                return self._failed(
                    meta,
                    OcrError(
                        code="OCR_IMAGE_WRITE_FAILED",
                        message="Failed to materialize page image for the OCR backend",
                        detail={"error": repr(e)},
                    ),
                )

            cmd = build_command(config=config, image_file=image_file)
            # Keep metadata portable: do not embed temporary paths.
            meta["command_template"] = ["tesseract", "<IMAGE_FILE>", *cmd[2:]]

            try:
                proc = subprocess.run(
                    cmd,
                    check=False,
                    capture_output=True,
                    text=True,
                    timeout=config.timeout_s,
                )
            except FileNotFoundError:
                return self._failed(
                    meta,
                    OcrError(
                        code="OCR_BACKEND_NOT_INSTALLED",
                        message="tesseract binary not found on PATH",
                        detail={"expected_command": "tesseract"},
                    ),
                )
            except subprocess.TimeoutExpired:
                return self._failed(
                    meta,
                    OcrError(
                        code="OCR_TIMEOUT",
                        message="OCR backend timed out",
                        detail={"timeout_s": config.timeout_s},
                    ),
                )

        if proc.returncode != 0:
            return self._failed(
                meta,
                OcrError(
                    code="OCR_BACKEND_ERROR",
                    message="OCR backend returned a non-zero exit code",
                    detail={
                        "returncode": proc.returncode,
                        "stderr": proc.stderr[-4000:],  # truncate for artifact stability
                    },
                ),
            )

        observations = parse_tsv_observations(proc.stdout, image_width=width_px, image_height=height_px)
        logger.debug("tesseract returned %d word observations", len(observations))
        return OcrPageResult(
            ok=True,
            engine=OcrEngineName.TESSERACT_CLI,
            observations=observations,
            errors=[],
            meta=meta,
        )

    @staticmethod
    def _failed(meta: dict[str, Any], error: OcrError) -> OcrPageResult:
        logger.debug("tesseract failed: %s (%s)", error.code, error.message)
        return OcrPageResult(
            ok=False,
            engine=OcrEngineName.TESSERACT_CLI,
            observations=[],
            errors=[error],
            meta=meta,
        )
