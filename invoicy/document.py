"""Invoice PDF rendering."""
from __future__ import annotations

import html
import io
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError

from .errors import RenderError
from .models import COLUMN_HEADINGS, Contact, Customer, Position
from .projection import format_total

logger = logging.getLogger(__name__)

DATE_FMT = "%B %d, %Y"
LOGO_MAX_WIDTH = 60 * mm
LOGO_MAX_HEIGHT = 30 * mm

RenderCell = tuple[str, Position]


def build_item_table(cells: Iterable[RenderCell]) -> list[list[str]]:
    """Lay the supplied cells out as rows, headed by the column titles.

    The table extent is the largest row and column present. Positions never
    supplied are blank; a position supplied twice keeps the later text.
    """

    placed: dict[Position, str] = {}
    for text, position in cells:
        placed[position] = text
    if not placed:
        return [list(COLUMN_HEADINGS)]

    max_row = max(row for row, _ in placed)
    max_col = max(col for _, col in placed)
    header = [
        COLUMN_HEADINGS[col] if col < len(COLUMN_HEADINGS) else ""
        for col in range(max_col + 1)
    ]
    body = [
        [placed.get((row, col), "") for col in range(max_col + 1)]
        for row in range(max_row + 1)
    ]
    return [header, *body]


def _paragraph_lines(lines: list[str], style: ParagraphStyle) -> Paragraph:
    text = "<br/>".join(html.escape(line) for line in lines) or "&nbsp;"
    return Paragraph(text, style)


def _logo_flowable(logo_path: Optional[Path]):
    if logo_path is None:
        return ""
    if not Path(logo_path).exists():
        logger.warning("Logo not found at %s; rendering without it", logo_path)
        return ""
    width, height = ImageReader(str(logo_path)).getSize()
    scale = min(LOGO_MAX_WIDTH / width, LOGO_MAX_HEIGHT / height, 1.0)
    logo = Image(str(logo_path), width=width * scale, height=height * scale)
    logo.hAlign = "RIGHT"
    return logo


def _draw_page_number(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 10)
    page_width, page_height = doc.pagesize
    canvas.drawCentredString(page_width / 2.0, page_height - 10 * mm, f"Page {doc.page}")
    canvas.restoreState()


def build_invoice_pdf(
    *,
    cells: Iterable[RenderCell],
    contact: Contact,
    customer: Customer,
    estimate_number: int,
    grand_total: float,
    logo_path: Optional[Path] = None,
    issue_date: Optional[date] = None,
    valid_days: int = 7,
) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        topMargin=15 * mm,
        bottomMargin=10 * mm,
        title=f"Estimate {estimate_number}",
    )
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="Block", parent=styles["Normal"], fontSize=10, leading=13))
    styles.add(
        ParagraphStyle(
            name="BlockBold", parent=styles["Block"], fontName="Helvetica-Bold"
        )
    )
    styles.add(ParagraphStyle(name="Cell", parent=styles["Normal"], fontSize=9, leading=11))

    issued = issue_date or date.today()
    valid_until = issued + timedelta(days=valid_days)

    story: list[object] = [Spacer(1, 6)]

    top_table = Table(
        [[_paragraph_lines(contact.block_lines(), styles["Block"]), _logo_flowable(logo_path)]],
        colWidths=[doc.width * 0.5, doc.width * 0.5],
    )
    top_table.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ALIGN", (1, 0), (1, 0), "RIGHT"),
            ]
        )
    )
    story.append(top_table)
    story.append(Spacer(1, 14))
    story.append(Paragraph("<b>FOR</b>", styles["Block"]))

    date_table = Table(
        [
            ["Estimate No.:", str(estimate_number)],
            ["Issue Date:", issued.strftime(DATE_FMT)],
            ["Valid Until:", valid_until.strftime(DATE_FMT)],
        ],
        colWidths=[doc.width * 0.2, doc.width * 0.3],
    )
    date_table.setStyle(TableStyle([("FONTSIZE", (0, 0), (-1, -1), 10)]))
    bottom_table = Table(
        [[_paragraph_lines(customer.block_lines(), styles["BlockBold"]), date_table]],
        colWidths=[doc.width * 0.5, doc.width * 0.5],
    )
    bottom_table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story.append(bottom_table)
    story.append(Spacer(1, 14))

    rows = build_item_table(cells)
    table_data = [
        [Paragraph(html.escape(text), styles["Cell"]) for text in row] for row in rows
    ]
    item_table = Table(table_data, repeatRows=1)
    item_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 4),
                ("RIGHTPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    story.append(item_table)
    story.append(Spacer(1, 10))
    story.append(
        Paragraph(f"<b>Grand Total: {format_total(grand_total)}</b>", styles["Block"])
    )

    try:
        doc.build(story, onLaterPages=_draw_page_number)
    except LayoutError as exc:
        raise RenderError("A table row is too tall to fit on one page.") from exc
    return buffer.getvalue()


def render_invoice(path: Path, **kwargs) -> Path:
    """Write the invoice PDF to ``path`` and return it.

    Raises :class:`RenderError` when the content cannot be laid out and
    :class:`OSError` when the file cannot be written.
    """

    destination = Path(path)
    payload = build_invoice_pdf(**kwargs)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(payload)
    logger.info("Invoice written to %s", destination)
    return destination
