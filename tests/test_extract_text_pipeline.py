from __future__ import annotations

import tempfile
import threading
import time
import unittest
from pathlib import Path
from typing import Callable
from unittest.mock import patch

from PIL import Image

from contracts.ocr import NormalizedBox, RecognizedText
from extract_text.contracts import ExtractErrorKind, ExtractOptions
from extract_text.module import extract_text, run_extract_text_on_pdf
from normalize_pdf.contracts import ColorMode, RenderedPage
from normalize_pdf.engines.base import PdfRasterEngine, RasterDocument
from ocr.contracts import OcrConfig, OcrEngineName, OcrError, OcrPageResult
from ocr.engines.base import OcrEngine

PAGE_W = 600
PAGE_H = 800


def _obs(text: str, x: float, y: float, w: float = 40, h: float = 10, conf: float = 0.9) -> RecognizedText:
    return RecognizedText(
        text=text,
        confidence=conf,
        bbox=NormalizedBox(min_x=x / PAGE_W, min_y=1.0 - (y + h) / PAGE_H, width=w / PAGE_W, height=h / PAGE_H),
    )


class _FakeDocument(RasterDocument):
    def __init__(
        self, page_count: int, failing_pages: set[int], on_render: Callable[[int], None] | None = None
    ) -> None:
        self._page_count = page_count
        self._failing_pages = failing_pages
        self._on_render = on_render
        self.closed = False
        self.rendered: list[int] = []

    @property
    def page_count(self) -> int:
        return self._page_count

    def render_page(self, *, page_num: int, scale: float, color_mode: ColorMode) -> RenderedPage:
        if page_num in self._failing_pages:
            raise RuntimeError(f"cannot render page {page_num}")
        self.rendered.append(page_num)
        if self._on_render is not None:
            self._on_render(page_num)
        image = Image.new("RGB", (PAGE_W, PAGE_H), "white")
        # Page number travels with the image so the fake recognizer can look it up.
        image.info["page_num"] = page_num
        return RenderedPage(page_num=page_num, image=image, width_px=PAGE_W, height_px=PAGE_H)

    def close(self) -> None:
        self.closed = True


class _FakeRasterEngine(PdfRasterEngine):
    def __init__(
        self,
        page_count: int = 3,
        failing_pages: set[int] | None = None,
        open_error: Exception | None = None,
        on_render: Callable[[int], None] | None = None,
    ):
        self.page_count = page_count
        self.failing_pages = failing_pages or set()
        self.open_error = open_error
        self.on_render = on_render
        self.documents: list[_FakeDocument] = []

    def backend_id(self) -> str:
        return "fake_backend"

    def open_document(self, *, pdf_file: Path) -> RasterDocument:
        if self.open_error is not None:
            raise self.open_error
        doc = _FakeDocument(self.page_count, self.failing_pages, self.on_render)
        self.documents.append(doc)
        return doc


class _FakeOcrEngine(OcrEngine):
    def __init__(
        self,
        pages: dict[int, list[RecognizedText]],
        failing_pages: set[int] | None = None,
        raising_pages: set[int] | None = None,
        delay_s: float = 0.0,
    ) -> None:
        self.pages = pages
        self.failing_pages = failing_pages or set()
        self.raising_pages = raising_pages or set()
        self.delay_s = delay_s
        self.completed = 0
        self._lock = threading.Lock()

    def recognize_image(self, *, config: OcrConfig, image: Image.Image) -> OcrPageResult:
        page_num = image.info["page_num"]
        if self.delay_s:
            time.sleep(self.delay_s)
        try:
            return self._recognize(page_num)
        finally:
            with self._lock:
                self.completed += 1

    def _recognize(self, page_num: int) -> OcrPageResult:
        if page_num in self.raising_pages:
            raise RuntimeError("recognizer crashed")
        if page_num in self.failing_pages:
            return OcrPageResult(
                ok=False,
                engine=OcrEngineName.TESSERACT_CLI,
                observations=[],
                errors=[OcrError(code="OCR_BACKEND_ERROR", message="boom", detail={"returncode": 1})],
                meta={},
            )
        return OcrPageResult(
            ok=True,
            engine=OcrEngineName.TESSERACT_CLI,
            observations=list(self.pages.get(page_num, [])),
            errors=[],
            meta={"backend": "fake"},
        )


PAGES = {
    1: [_obs("Name", 0, 0), _obs("Age", 200, 0, w=30), _obs("John", 0, 20), _obs("25", 200, 20, w=20)],
    2: [],
    3: [_obs("Total", 0, 100, w=50), _obs("89Engineering", 100, 102, w=120)],
}


class TestExtractTextPipeline(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.pdf = Path(self._tmp.name) / "input.pdf"
        self.pdf.write_bytes(b"%PDF-FAKE%")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, raster: _FakeRasterEngine, ocr: _FakeOcrEngine, **opts):
        return run_extract_text_on_pdf(
            pdf_path=self.pdf, options=ExtractOptions(**opts), raster_engine=raster, ocr_engine=ocr
        )

    def test_pages_joined_with_single_blank_line(self) -> None:
        raster = _FakeRasterEngine()
        result = self._run(raster, _FakeOcrEngine(PAGES))

        self.assertTrue(result.ok)
        self.assertEqual(result.text, "Name     Age\nJohn     25\n\nTotal     89 Engineering")
        self.assertEqual([p.page_num for p in result.pages], [1, 2, 3])
        self.assertEqual(result.pages[1].text, "")
        self.assertNotIn("\n\n\n", result.text)
        self.assertTrue(raster.documents[0].closed)
        self.assertEqual(result.meta["page_count"], 3)

    def test_single_page_has_no_separators(self) -> None:
        result = self._run(_FakeRasterEngine(page_count=1), _FakeOcrEngine(PAGES))
        self.assertEqual(result.text, "Name     Age\nJohn     25")
        self.assertNotIn("\n\n", result.text)

    def test_leading_empty_page_adds_no_separator(self) -> None:
        pages = {1: [], 2: [_obs("Hello", 0, 0)]}
        result = self._run(_FakeRasterEngine(page_count=2), _FakeOcrEngine(pages))
        self.assertEqual(result.text, "Hello")

    def test_render_failure_is_page_local(self) -> None:
        raster = _FakeRasterEngine(failing_pages={1})
        result = self._run(raster, _FakeOcrEngine(PAGES))

        self.assertFalse(result.ok)
        self.assertEqual(result.text, "Total     89 Engineering")
        self.assertEqual(result.errors, [])
        err = result.pages[0].errors[0]
        self.assertEqual(err.code, "EXTRACT_PAGE_RENDER_FAILED")
        self.assertEqual(err.kind, ExtractErrorKind.PAGE)
        self.assertEqual(err.page_num, 1)
        self.assertTrue(raster.documents[0].closed)

    def test_recognition_failures_are_page_local(self) -> None:
        ocr = _FakeOcrEngine(PAGES, failing_pages={1}, raising_pages={3})
        result = self._run(_FakeRasterEngine(), ocr)

        self.assertFalse(result.ok)
        self.assertEqual(result.text, "")
        codes = [e.code for e in result.all_errors()]
        self.assertEqual(codes, ["OCR_BACKEND_ERROR", "EXTRACT_PAGE_RECOGNITION_FAILED"])
        self.assertTrue(all(e.kind == ExtractErrorKind.PAGE for e in result.all_errors()))

    def test_open_failure_yields_empty_result(self) -> None:
        raster = _FakeRasterEngine(open_error=ValueError("not a PDF"))
        result = self._run(raster, _FakeOcrEngine(PAGES))

        self.assertFalse(result.ok)
        self.assertEqual(result.text, "")
        self.assertEqual(result.pages, [])
        self.assertEqual(result.errors[0].code, "EXTRACT_DOCUMENT_OPEN_FAILED")
        self.assertEqual(result.errors[0].kind, ExtractErrorKind.RESOURCE)

    def test_missing_source(self) -> None:
        result = run_extract_text_on_pdf(
            pdf_path=Path(self._tmp.name) / "missing.pdf",
            raster_engine=_FakeRasterEngine(),
            ocr_engine=_FakeOcrEngine(PAGES),
        )
        self.assertFalse(result.ok)
        self.assertEqual(result.text, "")
        self.assertEqual(result.errors[0].code, "SOURCE_NOT_FOUND")
        self.assertEqual(result.errors[0].kind, ExtractErrorKind.RESOURCE)

    def test_unusable_source_path_is_a_resource_error(self) -> None:
        result = run_extract_text_on_pdf(
            pdf_path=Path("bad\x00name.pdf"),
            raster_engine=_FakeRasterEngine(),
            ocr_engine=_FakeOcrEngine(PAGES),
        )
        self.assertFalse(result.ok)
        self.assertEqual(result.text, "")
        self.assertEqual(result.errors[0].kind, ExtractErrorKind.RESOURCE)
        self.assertIn(result.errors[0].code, {"SOURCE_ACCESS_ERROR", "SOURCE_NOT_FOUND"})

        with patch("normalize_pdf.data_access.Path.exists", side_effect=PermissionError("search denied")):
            denied = run_extract_text_on_pdf(
                pdf_path=self.pdf, raster_engine=_FakeRasterEngine(), ocr_engine=_FakeOcrEngine(PAGES)
            )
        self.assertFalse(denied.ok)
        self.assertEqual(denied.errors[0].code, "SOURCE_ACCESS_ERROR")
        self.assertEqual(denied.errors[0].kind, ExtractErrorKind.RESOURCE)

    def test_data_root_rejects_traversal(self) -> None:
        result = run_extract_text_on_pdf(
            pdf_path=Path("../input.pdf"),
            data_root=Path(self._tmp.name) / "sub",
            raster_engine=_FakeRasterEngine(),
            ocr_engine=_FakeOcrEngine(PAGES),
        )
        self.assertEqual(result.errors[0].code, "SOURCE_OUTSIDE_DATA_ROOT")

        ok = run_extract_text_on_pdf(
            pdf_path=Path("input.pdf"),
            data_root=Path(self._tmp.name),
            raster_engine=_FakeRasterEngine(page_count=1),
            ocr_engine=_FakeOcrEngine(PAGES),
        )
        self.assertTrue(ok.ok)

    def test_page_selection(self) -> None:
        raster = _FakeRasterEngine()
        result = self._run(raster, _FakeOcrEngine(PAGES), page_selection="3")
        self.assertEqual(raster.documents[0].rendered, [3])
        self.assertEqual(result.text, "Total     89 Engineering")

        raster = _FakeRasterEngine()
        bad = self._run(raster, _FakeOcrEngine(PAGES), page_selection="2-9")
        self.assertFalse(bad.ok)
        self.assertEqual(bad.errors[0].code, "EXTRACT_BAD_PAGE_SELECTION")
        self.assertEqual(bad.errors[0].kind, ExtractErrorKind.CONFIG)
        self.assertTrue(raster.documents[0].closed)

    def test_parallel_matches_sequential(self) -> None:
        pages = {n: [_obs(f"p{n}", 0, 0), _obs("x", 300, 2)] for n in range(1, 9)}
        seq = self._run(_FakeRasterEngine(page_count=8, failing_pages={4}), _FakeOcrEngine(pages))
        par = self._run(_FakeRasterEngine(page_count=8, failing_pages={4}), _FakeOcrEngine(pages), max_workers=4)

        self.assertEqual(seq.text, par.text)
        self.assertEqual([p.page_num for p in par.pages], list(range(1, 9)))
        self.assertEqual([p.ok for p in seq.pages], [p.ok for p in par.pages])

    def test_parallel_rendering_waits_for_recognition(self) -> None:
        page_count = 20
        pages = {n: [_obs(f"p{n}", 0, 0)] for n in range(1, page_count + 1)}
        ocr = _FakeOcrEngine(pages, delay_s=0.01)
        completed_at_render: dict[int, int] = {}

        def on_render(page_num: int) -> None:
            completed_at_render[page_num] = ocr.completed

        raster = _FakeRasterEngine(page_count=page_count, on_render=on_render)
        result = self._run(raster, ocr, max_workers=2)

        self.assertEqual(result.text, "\n\n".join(f"p {n}" for n in range(1, page_count + 1)))
        # At most 2 * max_workers pages may be queued ahead of recognition.
        for page_num, completed in completed_at_render.items():
            self.assertGreaterEqual(completed, page_num - 4, f"page {page_num}")
        self.assertGreater(completed_at_render[page_count], 0)

    def test_repeated_runs_are_identical(self) -> None:
        r1 = self._run(_FakeRasterEngine(), _FakeOcrEngine(PAGES)).to_dict()
        r2 = self._run(_FakeRasterEngine(), _FakeOcrEngine(PAGES)).to_dict()
        self.assertEqual(r1, r2)

    def test_extract_text_never_raises(self) -> None:
        self.assertEqual(extract_text("/nonexistent/file.pdf"), "")

        with patch("extract_text.module.run_extract_text_on_pdf", side_effect=RuntimeError("unexpected")):
            with self.assertLogs("extract_text.module", level="ERROR"):
                self.assertEqual(extract_text(self.pdf), "")

    def test_extract_text_returns_result_text(self) -> None:
        def fake_run(**kwargs):
            return run_extract_text_on_pdf(
                raster_engine=_FakeRasterEngine(), ocr_engine=_FakeOcrEngine(PAGES), **kwargs
            )

        with patch("extract_text.module.run_extract_text_on_pdf", side_effect=fake_run):
            text = extract_text(self.pdf)
        self.assertEqual(text, "Name     Age\nJohn     25\n\nTotal     89 Engineering")


if __name__ == "__main__":
    unittest.main()
