"""
Proofly - Property Evaluation Report PDF

Renders the evaluation report of a completed order for download.
Uses ReportLab for deterministic PDF generation.

Output Structure:
1. Header (order reference, dates, evaluator)
2. Properties Evaluated (address, zone, landlord)
3. Cost Summary
4. Evaluator Comments
5. Media Links (image / video, when supplied)
"""

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.orders.pricing import BULK_DISCOUNT_PERCENTAGE, PROXIMITY_ZONE_DESCRIPTIONS
from core.orders.schema import Order, OrderStatus, Report
from utils.formatting import format_currency, format_percent, format_timestamp


# =============================================================================
# Report Generation Result Types
# =============================================================================

@dataclass
class ReportSuccess:
    """Returned when PDF generation succeeds."""
    path: Path
    properties_included: int


@dataclass
class ReportNotReady:
    """Returned when the order has no report yet."""
    order_id: str
    message: str = "The evaluation report for this order is not ready yet."


ReportResult = Union[ReportSuccess, ReportNotReady]


# =============================================================================
# Color Palette
# =============================================================================

class Palette:
    """Print-friendly palette: charcoal text, one teal accent."""
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    SLATE = colors.Color(0.35, 0.38, 0.42)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    PALE_GRAY = colors.Color(0.95, 0.95, 0.95)
    WHITE = colors.white

    ACCENT = colors.Color(0.05, 0.45, 0.45)


def get_report_styles():
    """Paragraph styles for the evaluation report."""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='ReportBrand',
        parent=styles['Normal'],
        fontSize=10,
        leading=13,
        textColor=Palette.ACCENT,
        fontName='Helvetica-Bold',
        letterSpacing=1.5,
    ))

    styles.add(ParagraphStyle(
        name='ReportTitle',
        parent=styles['Normal'],
        fontSize=20,
        leading=26,
        textColor=Palette.CHARCOAL,
        alignment=TA_LEFT,
        fontName='Helvetica-Bold',
        spaceBefore=4*mm,
        spaceAfter=6*mm,
    ))

    styles.add(ParagraphStyle(
        name='SectionTitle',
        parent=styles['Normal'],
        fontSize=13,
        leading=17,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica-Bold',
        spaceBefore=16,
        spaceAfter=8,
    ))

    styles.add(ParagraphStyle(
        name='Body',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica',
    ))

    styles.add(ParagraphStyle(
        name='Meta',
        parent=styles['Normal'],
        fontSize=9,
        leading=12,
        textColor=Palette.SLATE,
        fontName='Helvetica',
    ))

    return styles


# =============================================================================
# Generator
# =============================================================================

class EvaluationReportGenerator:
    """
    Generates evaluation report PDFs.

    Usage:
        generator = EvaluationReportGenerator(output_dir="data/reports")
        result = generator.generate_report(order, report)
    """

    PAGE_WIDTH, PAGE_HEIGHT = A4
    MARGIN_LEFT = 18*mm
    MARGIN_RIGHT = 18*mm
    MARGIN_TOP = 18*mm
    MARGIN_BOTTOM = 22*mm

    def __init__(self, output_dir: Union[str, Path] = "reports"):
        self.output_dir = Path(output_dir)
        self.styles = get_report_styles()

    def generate_report(self, order: Order, report: Optional[Report]) -> ReportResult:
        """
        Write the report PDF for an order to the output directory.

        Returns:
            ReportSuccess with the path, or ReportNotReady when the order has
            no report or has not reached Report Ready
        """
        if report is None or order.status != OrderStatus.REPORT_READY:
            return ReportNotReady(order_id=order.id)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"PROOFLY-{order.id}.pdf"
        output_path.write_bytes(self.generate_to_buffer(order, report))

        return ReportSuccess(path=output_path, properties_included=len(order.properties))

    def generate_to_buffer(self, order: Order, report: Report) -> bytes:
        """Generate PDF and return as bytes (for streaming)."""
        buffer = BytesIO()
        self._build_document(order, report, buffer)
        return buffer.getvalue()

    def _build_document(self, order: Order, report: Report, buffer: BytesIO):
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=self.MARGIN_LEFT,
            rightMargin=self.MARGIN_RIGHT,
            topMargin=self.MARGIN_TOP,
            bottomMargin=self.MARGIN_BOTTOM,
            title=f"Evaluation Report - {order.id}",
            author="Proofly",
            subject="Property Evaluation Report",
        )

        story = []
        story.extend(self._build_header(order, report))
        story.extend(self._build_properties(order))
        story.extend(self._build_cost_summary(order))
        story.extend(self._build_comments(report))
        story.extend(self._build_media(report))

        doc.build(story, onFirstPage=self._draw_footer, onLaterPages=self._draw_footer)

    def _draw_footer(self, canvas_obj: canvas.Canvas, doc):
        canvas_obj.saveState()
        canvas_obj.setFont('Helvetica', 7)
        canvas_obj.setFillColor(Palette.GRAY)
        canvas_obj.drawString(self.MARGIN_LEFT, self.MARGIN_BOTTOM - 10*mm, "PROOFLY")
        canvas_obj.drawRightString(
            self.PAGE_WIDTH - self.MARGIN_RIGHT,
            self.MARGIN_BOTTOM - 10*mm,
            f"{doc.page}",
        )
        canvas_obj.restoreState()

    # =========================================================================
    # Sections
    # =========================================================================

    def _build_header(self, order: Order, report: Report) -> list:
        elements = [
            Paragraph("PROOFLY", self.styles['ReportBrand']),
            Paragraph("Property Evaluation Report", self.styles['ReportTitle']),
        ]

        evaluator = order.evaluator.name if order.evaluator else "Unassigned"
        meta = [
            f"Order reference: {order.id}",
            f"Ordered: {format_timestamp(order.created_at)}",
            f"Report issued: {format_timestamp(report.created_at)}",
            f"Evaluator: {escape(evaluator)}",
        ]
        for line in meta:
            elements.append(Paragraph(line, self.styles['Meta']))
        return elements

    def _build_properties(self, order: Order) -> list:
        elements = [Paragraph("Properties Evaluated", self.styles['SectionTitle'])]

        rows = [["#", "Address", "Zone", "Landlord"]]
        for i, prop in enumerate(order.properties, 1):
            landlord = prop.landlord_info.name if prop.landlord_info else "-"
            rows.append([
                str(i),
                Paragraph(escape(prop.address), self.styles['Body']),
                PROXIMITY_ZONE_DESCRIPTIONS.get(prop.proximity_zone, prop.proximity_zone.value),
                Paragraph(escape(landlord), self.styles['Body']),
            ])

        table = Table(rows, colWidths=[10*mm, 80*mm, 35*mm, 49*mm])
        table.setStyle(self._table_style())
        elements.append(table)
        return elements

    def _build_cost_summary(self, order: Order) -> list:
        elements = [Paragraph("Cost Summary", self.styles['SectionTitle'])]

        subtotal = sum(p.price.total for p in order.properties if p.price)
        rows = [["Subtotal", format_currency(subtotal)]]
        if order.discount:
            label = f"Bulk discount ({format_percent(BULK_DISCOUNT_PERCENTAGE * 100)})"
            rows.append([label, format_currency(-order.discount)])
        if order.surge_fee:
            rows.append(["High-demand surcharge", format_currency(order.surge_fee)])
        rows.append(["Total paid", format_currency(order.total_price)])

        table = Table(rows, colWidths=[60*mm, 40*mm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9.5),
            ('TEXTCOLOR', (0, 0), (-1, -1), Palette.CHARCOAL),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('LINEABOVE', (0, -1), (-1, -1), 0.75, Palette.LIGHT_GRAY),
        ]))
        elements.append(table)
        return elements

    def _build_comments(self, report: Report) -> list:
        elements = [Paragraph("Evaluator Comments", self.styles['SectionTitle'])]
        for paragraph in report.comments.split("\n\n"):
            text = escape(paragraph.strip()).replace("\n", "<br/>")
            if text:
                elements.append(Paragraph(text, self.styles['Body']))
                elements.append(Spacer(1, 6))
        return elements

    def _build_media(self, report: Report) -> list:
        links = [("Photos", report.image_url), ("Video walkthrough", report.video_url)]
        links = [(label, url) for label, url in links if url]
        if not links:
            return []

        elements = [Paragraph("Media", self.styles['SectionTitle'])]
        for label, url in links:
            elements.append(Paragraph(f"{label}: {escape(url)}", self.styles['Body']))
        return elements

    def _table_style(self) -> TableStyle:
        return TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 8.5),
            ('BACKGROUND', (0, 0), (-1, 0), Palette.CHARCOAL),
            ('TEXTCOLOR', (0, 0), (-1, 0), Palette.WHITE),
            ('TEXTCOLOR', (0, 1), (-1, -1), Palette.CHARCOAL),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('GRID', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
            ('TOPPADDING', (0, 0), (-1, -1), 2.5*mm),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2.5*mm),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [Palette.WHITE, Palette.PALE_GRAY]),
        ])


def generate_evaluation_pdf(order: Order, report: Report) -> bytes:
    """Render the evaluation report of an order to PDF bytes."""
    return EvaluationReportGenerator().generate_to_buffer(order, report)
