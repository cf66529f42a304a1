"""
PDF invoice renderer built on reportlab.

The canvas runs in invariant mode and every printed value comes from the
InvoiceDocument, so rendering the same document twice yields identical
bytes. Layout positions are given top-down (points from the top edge) and
converted to reportlab's bottom-up coordinates in `_y`.
"""
from __future__ import annotations

import io
from decimal import Decimal
from typing import Sequence

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from application.dtos.settlement import InvoiceLine
from application.ports.invoice_renderer import InvoiceDocument


TEXT_COLOR = "#444444"
RULE_COLOR = "#aaaaaa"
FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

LEFT = 50
RIGHT = 550
TABLE_TOP_FIRST_PAGE = 330
TABLE_TOP_CONTINUATION = 120
ROW_HEIGHT = 30
LINE_HEIGHT = 12
TABLE_BOTTOM = 720
FOOTER_TOP = 760
ITEM_COLUMN_WIDTH = 220

FOOTER_TEXT = "Payment is due upon receipt. Thank you for your business."

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}


def format_money(amount: Decimal, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol:
        return f"{symbol}{amount:,.2f}"
    return f"{amount:,.2f} {currency.upper()}"


class ReportlabInvoiceRenderer:
    """Renders invoices laid out like the marketplace's paper invoice."""

    def __init__(self, *, company_name: str, company_address: Sequence[str], pagesize=LETTER):
        self.company_name = company_name
        self.company_address = list(company_address)
        self.pagesize = pagesize
        self.page_height = pagesize[1]

    def render(self, document: InvoiceDocument) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self.pagesize, invariant=1, pageCompression=0)
        pdf.setTitle(f"Invoice {document.invoice_number}")
        pdf.setAuthor(self.company_name)
        pdf.setCreator(self.company_name)
        pdf.setSubject("Invoice")

        page = 1
        self._header(pdf)
        self._customer_information(pdf, document)
        y = self._table_header(pdf, TABLE_TOP_FIRST_PAGE)

        for line in document.lines:
            description = simpleSplit(line.description, FONT, 10, ITEM_COLUMN_WIDTH) or [""]
            row_height = max(ROW_HEIGHT, LINE_HEIGHT * len(description) + 18)
            if y + row_height > TABLE_BOTTOM:
                self._footer(pdf, page)
                pdf.showPage()
                page += 1
                self._header(pdf)
                self._continuation_title(pdf, document)
                y = self._table_header(pdf, TABLE_TOP_CONTINUATION)
            self._row(pdf, y, description, line, document.currency)
            y += row_height

        if y + 2 * ROW_HEIGHT > TABLE_BOTTOM:
            self._footer(pdf, page)
            pdf.showPage()
            page += 1
            self._header(pdf)
            self._continuation_title(pdf, document)
            y = TABLE_TOP_CONTINUATION
        self._totals(pdf, y, document)
        self._footer(pdf, page)
        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    def _y(self, top: float) -> float:
        return self.page_height - top

    def _hr(self, pdf: canvas.Canvas, top: float) -> None:
        pdf.setStrokeColor(RULE_COLOR)
        pdf.setLineWidth(1)
        pdf.line(LEFT, self._y(top), RIGHT, self._y(top))

    def _header(self, pdf: canvas.Canvas) -> None:
        pdf.setFillColor(TEXT_COLOR)
        pdf.setFont(FONT, 20)
        pdf.drawString(LEFT, self._y(57 + 15), self.company_name)
        pdf.setFont(FONT, 10)
        for offset, address_line in enumerate(self.company_address):
            pdf.drawRightString(RIGHT, self._y(50 + 10 + offset * 15), address_line)

    def _customer_information(self, pdf: canvas.Canvas, document: InvoiceDocument) -> None:
        pdf.setFillColor(TEXT_COLOR)
        pdf.setFont(FONT, 20)
        pdf.drawString(LEFT, self._y(160 + 15), "Invoice")
        self._hr(pdf, 185)

        top = 200 + 10
        pdf.setFont(FONT, 10)
        pdf.drawString(LEFT, self._y(top), "Invoice Number:")
        pdf.setFont(FONT_BOLD, 10)
        pdf.drawString(150, self._y(top), document.invoice_number)
        pdf.setFont(FONT, 10)
        pdf.drawString(LEFT, self._y(top + 15), "Invoice Date:")
        pdf.drawString(150, self._y(top + 15), document.issued_at.strftime("%Y-%m-%d"))
        pdf.drawString(LEFT, self._y(top + 30), "Balance Due:")
        pdf.drawString(150, self._y(top + 30), format_money(document.balance_due, document.currency))

        for offset, customer_line in enumerate(document.customer_lines[:4]):
            pdf.setFont(FONT_BOLD if offset == 0 else FONT, 10)
            pdf.drawString(300, self._y(top + offset * 15), customer_line)

        self._hr(pdf, 272)

    def _continuation_title(self, pdf: canvas.Canvas, document: InvoiceDocument) -> None:
        pdf.setFont(FONT, 12)
        pdf.drawString(LEFT, self._y(100), f"Invoice {document.invoice_number} (continued)")

    def _table_header(self, pdf: canvas.Canvas, top: float) -> float:
        pdf.setFillColor(TEXT_COLOR)
        pdf.setFont(FONT_BOLD, 10)
        baseline = self._y(top + 10)
        pdf.drawString(LEFT, baseline, "Item")
        pdf.drawRightString(370, baseline, "Unit Cost")
        pdf.drawRightString(460, baseline, "Quantity")
        pdf.drawRightString(RIGHT, baseline, "Line Total")
        self._hr(pdf, top + 20)
        pdf.setFont(FONT, 10)
        return top + ROW_HEIGHT

    def _row(
        self,
        pdf: canvas.Canvas,
        top: float,
        description: list[str],
        line: InvoiceLine,
        currency: str,
    ) -> None:
        pdf.setFont(FONT, 10)
        baseline = self._y(top + 10)
        for offset, text in enumerate(description):
            pdf.drawString(LEFT, baseline - offset * LINE_HEIGHT, text)
        pdf.drawRightString(370, baseline, format_money(line.unit_amount, currency))
        pdf.drawRightString(460, baseline, str(line.quantity))
        pdf.drawRightString(RIGHT, baseline, format_money(line.line_total, currency))
        self._hr(pdf, top + 10 + LINE_HEIGHT * (len(description) - 1) + 10)

    def _totals(self, pdf: canvas.Canvas, top: float, document: InvoiceDocument) -> None:
        subtotal = sum((line.line_total for line in document.lines), Decimal("0.00"))
        pdf.setFont(FONT, 10)
        pdf.drawRightString(460, self._y(top + 10), "Subtotal")
        pdf.drawRightString(RIGHT, self._y(top + 10), format_money(subtotal, document.currency))
        pdf.setFont(FONT_BOLD, 10)
        pdf.drawRightString(460, self._y(top + 10 + ROW_HEIGHT), "Balance Due")
        pdf.drawRightString(
            RIGHT, self._y(top + 10 + ROW_HEIGHT), format_money(document.balance_due, document.currency)
        )

    def _footer(self, pdf: canvas.Canvas, page: int) -> None:
        pdf.setFillColor(TEXT_COLOR)
        pdf.setFont(FONT, 10)
        pdf.drawCentredString((LEFT + RIGHT) / 2, self._y(FOOTER_TOP + 10), FOOTER_TEXT)
        pdf.drawRightString(RIGHT, self._y(FOOTER_TOP + 25), f"Page {page}")
