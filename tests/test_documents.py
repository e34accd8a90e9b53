from io import BytesIO

import docx
import pytest
from pypdf import PdfWriter

from tastebox.app.core.errors import ValidationError
from tastebox.app.services.recipe_import.documents import (
    extract_docx_pages,
    extract_pdf_pages,
    normalize_text,
    select_pages,
    split_into_pages,
)


def make_pdf(*page_texts: str) -> bytes:
    """Assemble a minimal PDF with one Helvetica text line per page."""
    page_count = len(page_texts)
    font_id = 3 + 2 * page_count
    kids = " ".join(f"{3 + 2 * i} 0 R" for i in range(page_count))
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode(),
    ]
    for i, text in enumerate(page_texts):
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents {4 + 2 * i} 0 R "
            f"/Resources << /Font << /F1 {font_id} 0 R >> >> >>".encode()
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    out = BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % number + body + b"\nendobj\n")
    xref_at = out.tell()
    out.write(b"xref\n0 %d\n" % (len(objects) + 1))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(b"%010d 00000 n \n" % offset)
    out.write(b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at))
    return out.getvalue()


def make_docx(paragraphs, table_rows=()) -> bytes:
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table_rows:
        table = document.add_table(rows=0, cols=len(table_rows[0]))
        for row in table_rows:
            cells = table.add_row().cells
            for cell, value in zip(cells, row):
                cell.text = value
    out = BytesIO()
    document.save(out)
    return out.getvalue()


def test_pdf_pages_keep_their_numbering():
    pages = extract_pdf_pages(make_pdf("Flan casero", "Ingredientes: leche, huevos"))
    assert len(pages) == 2
    assert "Flan casero" in pages[0]
    assert "leche" in pages[1]


def test_blank_pdf_has_no_readable_text():
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    out = BytesIO()
    writer.write(out)

    pages = extract_pdf_pages(out.getvalue())
    assert pages == [""]
    with pytest.raises(ValidationError, match="No readable text"):
        select_pages(pages)


def test_invalid_pdf_is_rejected():
    with pytest.raises(ValidationError, match="Invalid PDF file"):
        extract_pdf_pages(b"this is not a pdf at all")


def test_docx_paragraphs_and_tables_are_extracted():
    data = make_docx(
        ["Tarta de ricota", "Mezclar la ricota con el azúcar."],
        table_rows=[("Ricota", "500 g"), ("Azúcar", "150 g")],
    )
    pages = extract_docx_pages(data)
    assert len(pages) == 1
    assert "Tarta de ricota" in pages[0]
    assert "Ricota | 500 g" in pages[0]


def test_invalid_docx_is_rejected():
    with pytest.raises(ValidationError, match="Invalid DOCX file"):
        extract_docx_pages(b"PK not really a zip")


def test_split_into_pages_on_markers_and_length():
    lines = ["Portada", "\f", "Receta uno", "Page 3", "Receta dos"]
    assert split_into_pages(lines) == ["Portada", "Receta uno", "Receta dos"]

    long_lines = ["x" * 40] * 5
    pages = split_into_pages(long_lines, chars_per_page=100)
    assert len(pages) == 2


def test_select_pages_range():
    pages = ["uno", "dos", "", "cuatro"]
    assert select_pages(pages) == "uno\n\ndos\n\ncuatro"
    assert select_pages(pages, 2, 3) == "dos"
    assert select_pages(pages, start_page=4) == "cuatro"


@pytest.mark.parametrize("start, end", [(0, 2), (3, 2), (1, 5)])
def test_select_pages_rejects_bad_ranges(start, end):
    with pytest.raises(ValidationError, match="Invalid page range") as excinfo:
        select_pages(["uno", "dos", "tres"], start, end)
    assert excinfo.value.violations


def test_select_pages_with_only_blank_pages_in_range():
    with pytest.raises(ValidationError, match="pages 2-2"):
        select_pages(["uno", ""], 2, 2)


def test_normalize_text_keeps_lines_and_caps_length():
    text = "Flan   casero\n\n\n\n  Leche\t500 ml  \n"
    assert normalize_text(text, 100) == "Flan casero\n\nLeche 500 ml"
    assert normalize_text("a" * 20, 10) == "a" * 10 + "..."
