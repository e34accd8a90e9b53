"""Text extraction for recipes uploaded as PDF or Word documents.

Both formats are reduced to a list of page texts so the caller can pick a page
range before the text goes to the language model. PDFs keep their real pages
(blank ones included, so numbering matches the viewer); DOCX has no layout, so
paragraphs are grouped into pages of roughly ``CHARS_PER_PAGE`` characters.
"""

import logging
import re
from io import BytesIO
from typing import Iterable, List, Optional
from zipfile import BadZipFile

import docx
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from tastebox.app.core.errors import ValidationError

logger = logging.getLogger(__name__)

CHARS_PER_PAGE = 3000
PAGE_BREAK_LINE_RE = re.compile(r"^\s*(page\s+\d+|page break)\s*$", re.IGNORECASE)
BLANK_LINES_RE = re.compile(r"\n{3,}")
INLINE_SPACE_RE = re.compile(r"[ \t\r\v]+")

PDF_CONTENT_TYPES = {"application/pdf"}
DOCX_CONTENT_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}


def extract_pdf_pages(data: bytes) -> List[str]:
    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            raise ValidationError("Encrypted PDF files are not supported")
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except (PdfReadError, ValueError, KeyError) as exc:
        logger.warning("Unreadable PDF upload: %s", exc)
        raise ValidationError("Invalid PDF file") from exc
    logger.info("PDF has %d pages, %d characters of text", len(pages), sum(len(page) for page in pages))
    return pages


def extract_docx_pages(data: bytes) -> List[str]:
    try:
        document = docx.Document(BytesIO(data))
    except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as exc:
        logger.warning("Unreadable DOCX upload: %s", exc)
        raise ValidationError("Invalid DOCX file") from exc

    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    pages = split_into_pages(lines)
    logger.info("DOCX split into %d pages", len(pages))
    return pages


def split_into_pages(lines: Iterable[str], chars_per_page: int = CHARS_PER_PAGE) -> List[str]:
    pages: List[str] = []
    current: List[str] = []
    length = 0

    def flush() -> None:
        text = "\n".join(current).strip()
        if text:
            pages.append(text)

    for line in lines:
        if "\f" in line or PAGE_BREAK_LINE_RE.match(line):
            flush()
            current, length = [], 0
            continue
        current.append(line)
        length += len(line)
        if length > chars_per_page:
            flush()
            current, length = [], 0
    flush()
    return pages


def select_pages(pages: List[str], start_page: Optional[int] = None, end_page: Optional[int] = None) -> str:
    """Join the text of pages ``start_page``..``end_page`` (1-based, inclusive)."""
    total = len(pages)
    if not any(pages):
        raise ValidationError("No readable text found in the document")

    start = 1 if start_page is None else start_page
    end = total if end_page is None else end_page
    if start < 1 or end < start or end > total:
        raise ValidationError(
            f"Invalid page range: {start}-{end}. Document has {total} pages.",
            [{"field": "start_page", "message": f"Pages must be within 1-{total} and start <= end"}],
        )

    text = "\n\n".join(page for page in pages[start - 1 : end] if page)
    if not text:
        raise ValidationError(f"No readable text found in pages {start}-{end}")
    return text


def normalize_text(text: str, max_chars: int) -> str:
    """Collapse runs of spaces and blank lines, keeping line structure, and cap the length."""
    lines = [INLINE_SPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    cleaned = BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()
    if len(cleaned) > max_chars:
        return cleaned[:max_chars] + "..."
    return cleaned
