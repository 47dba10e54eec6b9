import asyncio
import io
import logging
import os
import pdfplumber
from domain.ports import ConversionResult, UploadedDocument

logger = logging.getLogger(__name__)

# pdfplumber renders at 72 dpi per unit of scale
PREVIEW_RESOLUTION = 72 * 4


def render_first_page(data: bytes, resolution: int = PREVIEW_RESOLUTION) -> bytes:
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        if not pdf.pages:
            raise ValueError("document has no pages")
        page_image = pdf.pages[0].to_image(resolution=resolution, antialias=True)
        out = io.BytesIO()
        page_image.original.save(out, format="PNG")
    return out.getvalue()


class PdfRasterizer:
    """Rasterization capability: first page of a PDF as a PNG preview."""

    def __init__(self, resolution: int = PREVIEW_RESOLUTION):
        self.resolution = resolution

    async def convert(self, document: UploadedDocument) -> ConversionResult:
        try:
            png = await asyncio.to_thread(render_first_page, document.content, self.resolution)
        except Exception as exc:
            logger.warning("PDF conversion failed for %s: %s", document.name, exc)
            return ConversionResult(error=f"Failed to convert PDF: {exc}")
        stem, _ = os.path.splitext(document.name or "resume.pdf")
        return ConversionResult(image=UploadedDocument(
            name=f"{stem}.png", content=png, content_type="image/png"))
