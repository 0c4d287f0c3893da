"""
Document Export - renders a stored document for download.

TXT is the raw content, PDF is built with reportlab and DOCX with
python-docx. VIN labels store their field data as JSON, which is rendered
as a two-column table instead of running text.
"""

import io
import json
import logging
import re
from typing import Dict, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, HRFlowable
)

from docx import Document
from docx.shared import Pt
from docx.enum.text import WD_ALIGN_PARAGRAPH

from models import ExportFormat, GeneratedDocument, HistoryDocumentType

logger = logging.getLogger(__name__)

BRAND_NAME = "DOCUHAUL"

CONTENT_TYPES = {
    ExportFormat.TXT: "text/plain; charset=utf-8",
    ExportFormat.PDF: "application/pdf",
    ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

_TITLES = {
    HistoryDocumentType.NVIS.value: "New Vehicle Information Statement",
    HistoryDocumentType.BILL_OF_SALE.value: "Bill of Sale",
    HistoryDocumentType.VIN_LABEL.value: "VIN Label",
}


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def export_filename(document: GeneratedDocument, fmt: ExportFormat) -> str:
    """Download filename; only [A-Za-z0-9_.-] survive so it is safe inside a quoted header."""
    stem = "_".join((document.document_type.replace(" ", "_"), document.vin, document.document_id))
    return f"{_UNSAFE_FILENAME_CHARS.sub('', stem)}.{fmt.value}"


def _label_rows(document: GeneratedDocument) -> Optional[Dict[str, str]]:
    if document.document_type != HistoryDocumentType.VIN_LABEL.value:
        return None
    try:
        data = json.loads(document.content)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return {str(k): str(v) for k, v in data.items()}


def generate_txt(document: GeneratedDocument) -> bytes:
    return document.content.encode("utf-8")


def generate_pdf(document: GeneratedDocument) -> bytes:
    """Generate a PDF rendition of a stored document."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=20*mm,
        leftMargin=20*mm,
        topMargin=25*mm,
        bottomMargin=20*mm,
    )

    story = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'DocTitle',
        parent=styles['Heading1'],
        fontSize=18,
        alignment=TA_CENTER,
        spaceAfter=8,
    )
    ref_style = ParagraphStyle(
        'Reference',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.gray,
        alignment=TA_CENTER,
    )
    body_style = ParagraphStyle(
        'Body',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
    )

    story.append(Paragraph(BRAND_NAME, ref_style))
    story.append(Paragraph(_TITLES.get(document.document_type, document.document_type), title_style))
    story.append(Paragraph(
        f"VIN: {escape(document.vin)} | Reference: {document.document_id} | "
        f"{document.created_at.strftime('%Y-%m-%d')}",
        ref_style
    ))
    story.append(HRFlowable(width="100%", thickness=1, color=colors.gray))
    story.append(Spacer(1, 12))

    rows = _label_rows(document)
    if rows is not None:
        table = Table(
            [[Paragraph(escape(k), body_style), Paragraph(escape(v), body_style)] for k, v in rows.items()],
            colWidths=[70*mm, 100*mm],
        )
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.gray),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        story.append(table)
    else:
        for line in document.content.splitlines():
            if line.strip():
                story.append(Paragraph(escape(line), body_style))
            else:
                story.append(Spacer(1, 6))

    doc.build(story)
    return buffer.getvalue()


def generate_docx(document: GeneratedDocument) -> bytes:
    """Generate a DOCX rendition of a stored document."""
    doc = Document()

    core_props = doc.core_properties
    core_props.title = f"{document.document_type} - {document.document_id}"
    core_props.subject = document.vin

    heading = doc.add_heading(_TITLES.get(document.document_type, document.document_type), level=1)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

    ref = doc.add_paragraph(f"VIN: {document.vin} | Reference: {document.document_id}")
    ref.alignment = WD_ALIGN_PARAGRAPH.CENTER

    rows = _label_rows(document)
    if rows is not None:
        table = doc.add_table(rows=0, cols=2)
        table.style = "Table Grid"
        for key, value in rows.items():
            cells = table.add_row().cells
            cells[0].text = key
            cells[1].text = value
    else:
        for line in document.content.splitlines():
            paragraph = doc.add_paragraph(line)
            for run in paragraph.runs:
                run.font.size = Pt(10)

    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


_RENDERERS = {
    ExportFormat.TXT: generate_txt,
    ExportFormat.PDF: generate_pdf,
    ExportFormat.DOCX: generate_docx,
}


def export_document(document: GeneratedDocument, fmt: ExportFormat) -> Tuple[bytes, str, str]:
    """Return (body, content_type, filename) for a download."""
    body = _RENDERERS[fmt](document)
    logger.info(f"Exported {document.document_id} as {fmt.value} ({len(body)} bytes)")
    return body, CONTENT_TYPES[fmt], export_filename(document, fmt)
