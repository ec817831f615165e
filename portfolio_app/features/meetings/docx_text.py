"""Plain-text extraction from .docx meeting exports."""

from __future__ import annotations

import html
import io
import re
import zipfile

from portfolio_app.core.errors import PortfolioError

DOCUMENT_PART = "word/document.xml"


def extract_docx_text(data: bytes) -> str:
    """Paragraph text of the main document part, one paragraph per line."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            xml = archive.read(DOCUMENT_PART).decode("utf-8")
    except (KeyError, zipfile.BadZipFile) as exc:
        raise PortfolioError("Could not read document.xml from .docx file") from exc
    text = re.sub(r"<w:p[ >]", "\n<w:p ", xml)
    text = text.replace("</w:p>", "\n")
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"&#x[0-9A-Fa-f]+;", "", text)
    text = html.unescape(text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()
