from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable

from contracts.layout import Fragment
from contracts.ocr import RecognizedText
from grouping.group_rows import group_rows
from grouping.spacing import rows_to_text
from grouping.text_correction import correct_common_ocr_errors
from normalize_pdf.contracts import RenderedPage
from normalize_pdf.data_access import DataAccessError, resolve_source_pdf
from normalize_pdf.engines import PdfRasterEngine, RasterDocument
from normalize_pdf.module import canonical_page_selection, open_pdf_document, parse_page_selection
from normalize_pdf.module import get_engine as get_raster_engine
from ocr.engines import OcrEngine
from ocr.module import get_engine as get_ocr_engine
from ocr.module import recognize_page_image

from .contracts import (
    DocumentTextResult,
    ExtractError,
    ExtractErrorKind,
    ExtractOptions,
    PageTextResult,
)

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"

# Recognition jobs queued per worker before rendering pauses.
_IN_FLIGHT_PER_WORKER = 2


def build_page_fragments(
    observations: Iterable[RecognizedText],
    *,
    image_width: float,
    image_height: float,
    minimum_confidence: float,
) -> tuple[list[Fragment], dict[str, int]]:
    """
    Turn recognizer observations into page-pixel fragments.

    Order of operations: confidence filter -> pixel conversion -> fixed-rule
    correction -> drop fragments whose text is empty after correction.
    """

    fragments: list[Fragment] = []
    dropped = {"confidence_below_minimum": 0, "empty_after_correction": 0}

    for obs in observations:
        if obs.confidence < minimum_confidence:
            dropped["confidence_below_minimum"] += 1
            continue
        text = correct_common_ocr_errors(obs.text)
        if not text:
            dropped["empty_after_correction"] += 1
            continue
        fragments.append(Fragment(text=text, rect=obs.bbox.to_pixel_rect(image_width, image_height)))

    return fragments, dropped


def layout_page(
    *,
    page_num: int,
    observations: list[RecognizedText],
    image_width: float,
    image_height: float,
    options: ExtractOptions,
) -> PageTextResult:
    fragments, dropped = build_page_fragments(
        observations,
        image_width=image_width,
        image_height=image_height,
        minimum_confidence=options.minimum_confidence,
    )
    layout = options.layout_config()
    rows = group_rows(fragments, y_tolerance=layout.y_tolerance)
    text = rows_to_text(rows, layout)

    meta: dict[str, Any] = {
        "image_size": {"width_px": image_width, "height_px": image_height},
        "observations": len(observations),
        "fragments_used": len(fragments),
        "dropped": dropped,
        "rows": len(rows),
    }
    logger.debug(
        "page %d: %d observations -> %d fragments -> %d rows",
        page_num,
        len(observations),
        len(fragments),
        len(rows),
    )
    return PageTextResult(page_num=page_num, ok=True, text=text, errors=[], meta=meta)


def page_text_from_observations(
    observations: list[RecognizedText],
    *,
    image_width: float,
    image_height: float,
    options: ExtractOptions | None = None,
) -> str:
    """
    Page block for one page's observations (rows joined by newlines, trimmed).
    """

    return layout_page(
        page_num=1,
        observations=observations,
        image_width=image_width,
        image_height=image_height,
        options=options or ExtractOptions(),
    ).text


def join_page_blocks(blocks: Iterable[str]) -> str:
    """
    Fold page blocks into the document text.

    A blank-line separator is inserted only when both the running text and the
    next block are non-empty, so empty pages leave no stray separators.
    """

    text = ""
    for block in blocks:
        if text and block:
            text += PAGE_SEPARATOR
        text += block
    return text.strip()


def _failed_page(page_num: int, errors: list[ExtractError]) -> PageTextResult:
    for err in errors:
        logger.warning("page %d skipped: %s (%s)", page_num, err.code, err.message)
    return PageTextResult(page_num=page_num, ok=False, text="", errors=errors, meta={})


def _render_page(
    doc: RasterDocument, *, page_num: int, options: ExtractOptions
) -> RenderedPage | PageTextResult:
    try:
        return doc.render_page(page_num=page_num, scale=options.scale, color_mode=options.color_mode)
    except Exception as e:
        return _failed_page(
            page_num,
            [
                ExtractError(
                    code="EXTRACT_PAGE_RENDER_FAILED",
                    kind=ExtractErrorKind.PAGE,
                    message="Page rasterization failed",
                    page_num=page_num,
                    detail={"error": repr(e)},
                )
            ],
        )


def _recognize_and_layout(
    rendered: RenderedPage, *, options: ExtractOptions, ocr_engine: OcrEngine
) -> PageTextResult:
    page_num = rendered.page_num
    try:
        ocr_result = recognize_page_image(config=options.ocr_config(), image=rendered.image, engine=ocr_engine)
    except Exception as e:
        return _failed_page(
            page_num,
            [
                ExtractError(
                    code="EXTRACT_PAGE_RECOGNITION_FAILED",
                    kind=ExtractErrorKind.PAGE,
                    message="Text recognition raised an exception",
                    page_num=page_num,
                    detail={"error": repr(e)},
                )
            ],
        )

    if not ocr_result.ok:
        return _failed_page(
            page_num,
            [
                ExtractError(
                    code=err.code,
                    kind=ExtractErrorKind.PAGE,
                    message=err.message,
                    page_num=page_num,
                    detail=err.detail,
                )
                for err in ocr_result.errors
            ]
            or [
                ExtractError(
                    code="EXTRACT_PAGE_RECOGNITION_FAILED",
                    kind=ExtractErrorKind.PAGE,
                    message="Text recognition reported failure without detail",
                    page_num=page_num,
                )
            ],
        )

    return layout_page(
        page_num=page_num,
        observations=ocr_result.observations,
        image_width=rendered.width_px,
        image_height=rendered.height_px,
        options=options,
    )


def _process_pages(
    doc: RasterDocument, *, pages: list[int], options: ExtractOptions, ocr_engine: OcrEngine
) -> list[PageTextResult]:
    """
    Per-page processing in document order.

    Rendering always happens on the calling thread (the PDF handle is not
    shared across threads); with max_workers > 1 only recognition and layout
    run in the pool, with at most 2 * max_workers pages in flight. Results are
    collected by page order.
    """

    results: list[PageTextResult] = []
    if options.max_workers == 1:
        for page_num in pages:
            rendered = _render_page(doc, page_num=page_num, options=options)
            if isinstance(rendered, PageTextResult):
                results.append(rendered)
            else:
                results.append(_recognize_and_layout(rendered, options=options, ocr_engine=ocr_engine))
        return results

    pending: deque[PageTextResult | Future[PageTextResult]] = deque()
    max_in_flight = _IN_FLIGHT_PER_WORKER * options.max_workers

    def fold_oldest() -> None:
        done = pending.popleft()
        results.append(done if isinstance(done, PageTextResult) else done.result())

    with ThreadPoolExecutor(max_workers=options.max_workers) as pool:
        for page_num in pages:
            rendered = _render_page(doc, page_num=page_num, options=options)
            if isinstance(rendered, PageTextResult):
                pending.append(rendered)
            else:
                pending.append(pool.submit(_recognize_and_layout, rendered, options=options, ocr_engine=ocr_engine))
            # Bound the number of page images alive at once.
            while sum(isinstance(p, Future) for p in pending) >= max_in_flight:
                fold_oldest()
        while pending:
            fold_oldest()
    return results


def _failed_document(
    *, source_pdf: str, error: ExtractError, meta: dict[str, Any]
) -> DocumentTextResult:
    logger.warning("extraction failed for %s: %s (%s)", source_pdf, error.code, error.message)
    return DocumentTextResult(ok=False, source_pdf=source_pdf, text="", pages=[], errors=[error], meta=meta)


def run_extract_text_on_pdf(
    *,
    pdf_path: Path,
    options: ExtractOptions | None = None,
    data_root: Path | None = None,
    raster_engine: PdfRasterEngine | None = None,
    ocr_engine: OcrEngine | None = None,
) -> DocumentTextResult:
    """
    Extract layout-preserving text from a PDF, keeping failure details.

    Resource failures (unreadable/unparseable document) yield ok=False with an
    empty text. Page failures are recorded per page and contribute nothing.
    """

    options = options or ExtractOptions()
    source_pdf = str(pdf_path)
    raster_engine = raster_engine or get_raster_engine(options.raster_engine)
    ocr_engine = ocr_engine or get_ocr_engine(options.ocr_engine)

    meta: dict[str, Any] = {
        "options": options.to_dict(),
        "raster_backend": raster_engine.backend_id(),
        "raster_backend_version": raster_engine.backend_version(),
        "page_selection": canonical_page_selection(options.page_selection),
    }

    try:
        pdf_file = resolve_source_pdf(pdf_path=Path(pdf_path), data_root=data_root)
    except DataAccessError as e:
        return _failed_document(
            source_pdf=source_pdf,
            error=ExtractError(
                code=e.code,
                kind=ExtractErrorKind.RESOURCE,
                message=str(e),
                detail={"data_root": None if data_root is None else str(data_root)},
            ),
            meta=meta,
        )

    try:
        with open_pdf_document(engine=raster_engine, pdf_file=pdf_file) as doc:
            page_count = doc.page_count
            meta["page_count"] = page_count
            try:
                pages_to_process = parse_page_selection(options.page_selection, page_count=page_count)
            except ValueError as e:
                return _failed_document(
                    source_pdf=source_pdf,
                    error=ExtractError(
                        code="EXTRACT_BAD_PAGE_SELECTION",
                        kind=ExtractErrorKind.CONFIG,
                        message="Invalid page_selection",
                        detail={"page_selection": options.page_selection, "error": str(e)},
                    ),
                    meta=meta,
                )
            pages = _process_pages(doc, pages=pages_to_process, options=options, ocr_engine=ocr_engine)
    except Exception as e:
        return _failed_document(
            source_pdf=source_pdf,
            error=ExtractError(
                code="EXTRACT_DOCUMENT_OPEN_FAILED",
                kind=ExtractErrorKind.RESOURCE,
                message="Failed to open or read the PDF document",
                detail={"error": repr(e)},
            ),
            meta=meta,
        )

    text = join_page_blocks(p.text for p in pages)
    return DocumentTextResult(
        ok=all(p.ok for p in pages),
        source_pdf=source_pdf,
        text=text,
        pages=pages,
        errors=[],
        meta=meta,
    )


def extract_text(
    pdf_path: Path | str,
    options: ExtractOptions | None = None,
    *,
    data_root: Path | None = None,
) -> str:
    """
    Best-effort entry point: always returns a string, never raises.

    Failures are logged; use `run_extract_text_on_pdf` to inspect them.
    """

    try:
        result = run_extract_text_on_pdf(pdf_path=Path(pdf_path), options=options, data_root=data_root)
    except Exception:
        logger.exception("text extraction failed for %s", pdf_path)
        return ""
    return result.text
