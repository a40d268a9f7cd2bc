from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from errors import InvalidInput

logger = logging.getLogger(__name__)

PdfSource = Union[str, Path, bytes, bytearray]

DEFAULT_ZOOM = 2.0
DEFAULT_MAX_PAGES = 3


@dataclass
class RasterizedPdf:
    pages: List[bytes]
    method: str
    page_count: int
    metadata: dict = field(default_factory=dict)


def _open_source(source: PdfSource):
    if isinstance(source, (bytes, bytearray)):
        return None, io.BytesIO(bytes(source))
    return str(source), None


def _rasterize_with_pymupdf(source: PdfSource, zoom: float, max_pages: int) -> Optional[RasterizedPdf]:
    try:
        import fitz  # type: ignore
    except Exception as exc:  # pragma: no cover - import guard
        logger.info("pymupdf unavailable: %s", exc)
        return None

    path, stream = _open_source(source)
    try:
        doc = fitz.open(path) if path else fitz.open(stream=stream.getvalue(), filetype="pdf")
        with doc:
            matrix = fitz.Matrix(zoom, zoom)
            pages = [
                doc[index].get_pixmap(matrix=matrix).tobytes("png")
                for index in range(min(doc.page_count, max_pages))
            ]
            page_count = doc.page_count
    except Exception as exc:  # pragma: no cover - safety
        logger.warning("pymupdf failed, will fallback: %s", exc)
        return None
    return RasterizedPdf(pages=pages, method="pymupdf", page_count=page_count)


def _rasterize_with_pdfplumber(source: PdfSource, zoom: float, max_pages: int) -> Optional[RasterizedPdf]:
    try:
        import pdfplumber
    except Exception as exc:  # pragma: no cover - import guard
        logger.info("pdfplumber unavailable: %s", exc)
        return None

    path, stream = _open_source(source)
    try:
        pages = []
        with pdfplumber.open(path or stream) as pdf:
            # PDF user space is 72 dpi; zoom 2.0 renders at 144.
            resolution = int(72 * zoom)
            for page in pdf.pages[:max_pages]:
                buffer = io.BytesIO()
                page.to_image(resolution=resolution).original.save(buffer, format="PNG")
                pages.append(buffer.getvalue())
            page_count = len(pdf.pages)
    except Exception as exc:  # pragma: no cover - safety
        logger.warning("pdfplumber failed: %s", exc)
        return None
    return RasterizedPdf(pages=pages, method="pdfplumber", page_count=page_count)


def rasterize_pdf(
    source: PdfSource,
    zoom: float = DEFAULT_ZOOM,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> RasterizedPdf:
    """
    Render the first ``max_pages`` pages of a PDF to PNG bytes, ready to send to
    the vision model. Prefers pymupdf, falling back to pdfplumber.
    """
    if source is None or (isinstance(source, (bytes, bytearray)) and not source):
        raise InvalidInput("No PDF provided.")
    if isinstance(source, (str, Path)) and not Path(source).exists():
        raise InvalidInput(f"PDF not found: {source}")
    if zoom <= 0 or max_pages < 1:
        raise InvalidInput("zoom must be positive and max_pages at least 1")

    result = _rasterize_with_pymupdf(source, zoom, max_pages)
    if not result or not result.pages:
        result = _rasterize_with_pdfplumber(source, zoom, max_pages)

    if not result or not result.pages:
        raise InvalidInput("Unable to render PDF pages with available rasterizers")

    if result.page_count > max_pages:
        logger.info("Rendered %s of %s pages", max_pages, result.page_count)
    result.metadata = {"zoom": zoom, "max_pages": max_pages}
    if not isinstance(source, (bytes, bytearray)):
        result.metadata["path"] = str(source)
    return result
