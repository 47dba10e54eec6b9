import io
import pdfplumber

def parse_pdf_text(data: bytes, max_pages: int | None = None) -> str:
    text_parts = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        pages = pdf.pages if max_pages is None else pdf.pages[:max_pages]
        for page in pages:
            t = page.extract_text() or ""
            text_parts.append(t)
    return "\n".join(text_parts)
