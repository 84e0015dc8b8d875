"""
Payout invoice PDF rendering with ReportLab.

ReportLabInvoiceRenderer is the default InvoicePdfRenderer. It only reads the
invoice snapshot dict it is given, so it can run inside a Celery worker
without database access.

Usage:
    from toolkit.services.pdf import ReportLabInvoiceRenderer

    pdf_bytes = ReportLabInvoiceRenderer().render_invoice_pdf(invoice.to_render_data())
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

if TYPE_CHECKING:
    from typing import Any

HEADER_COLOR = colors.HexColor("#1F3A5F")
ROW_ALT_COLOR = colors.HexColor("#F3F6FA")


def _money(value: Any) -> str:
    return f"PHP {float(value or 0):,.2f}"


class ReportLabInvoiceRenderer:
    """Implements toolkit.protocols.InvoicePdfRenderer."""

    def render_invoice_pdf(self, invoice_data: dict[str, Any]) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=1.8 * cm,
            rightMargin=1.8 * cm,
            topMargin=1.5 * cm,
            bottomMargin=1.5 * cm,
            title=f"Payout Invoice {invoice_data.get('invoice_number', '')}",
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            alignment=TA_CENTER,
            textColor=HEADER_COLOR,
        )
        heading_style = ParagraphStyle(
            "InvoiceHeading",
            parent=styles["Heading3"],
            textColor=HEADER_COLOR,
            spaceBefore=10,
        )
        right_style = ParagraphStyle("Right", parent=styles["Normal"], alignment=TA_RIGHT)

        organization = invoice_data.get("organization") or {}
        elements = [
            Paragraph("Payout Invoice", title_style),
            Paragraph(f"<b>{escape(str(invoice_data.get('invoice_number', '')))}</b>", right_style),
            Spacer(1, 12),
        ]

        # Header block
        bank = organization.get("bank_details") or {}
        header_rows = [
            ["Organization", escape(str(organization.get("name", "")))],
            ["Period", f"{invoice_data.get('period_start', '')} to {invoice_data.get('period_end', '')}"],
            ["Status", str(invoice_data.get("status", ""))],
            ["Payout account", escape(" / ".join(str(v) for v in bank.values() if v)) or "-"],
        ]
        header_table = Table(header_rows, colWidths=[4.5 * cm, 12 * cm])
        header_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        elements.append(header_table)

        # Orders
        elements.append(Paragraph("Orders", heading_style))
        order_rows = [["Order #", "Paid", "Items", "Amount"]]
        for order in invoice_data.get("orders", []):
            order_rows.append(
                [
                    order.get("order_number", ""),
                    order.get("paid_at") or "-",
                    str(order.get("item_count", 0)),
                    _money(order.get("total_amount")),
                ]
            )
        if len(order_rows) == 1:
            order_rows.append(["-", "-", "0", _money(0)])
        elements.append(self._grid(order_rows, [5 * cm, 5 * cm, 2 * cm, 4.5 * cm]))

        # Adjustments
        adjustments = invoice_data.get("adjustments", [])
        if adjustments:
            elements.append(Paragraph("Adjustments", heading_style))
            adjustment_rows = [["Type", "Reason", "Amount"]]
            for adjustment in adjustments:
                adjustment_rows.append(
                    [
                        adjustment.get("type", ""),
                        Paragraph(escape(adjustment.get("reason", "")), styles["Normal"]),
                        _money(adjustment.get("amount")),
                    ]
                )
            elements.append(self._grid(adjustment_rows, [3.5 * cm, 9 * cm, 4 * cm]))

        # Totals
        elements.append(Paragraph("Summary", heading_style))
        summary_rows = [
            ["Gross sales", _money(invoice_data.get("gross_amount"))],
            [
                f"Platform fee ({invoice_data.get('platform_fee_percentage', 0)}%)",
                f"- {_money(invoice_data.get('platform_fee_amount'))}",
            ],
            ["Adjustments", _money(invoice_data.get("total_adjustment_amount"))],
            ["Net payout", _money(invoice_data.get("net_amount"))],
        ]
        summary_table = Table(summary_rows, colWidths=[12.5 * cm, 4 * cm])
        summary_table.setStyle(
            TableStyle(
                [
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, HEADER_COLOR),
                    ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ]
            )
        )
        elements.append(summary_table)

        doc.build(elements)
        return buffer.getvalue()

    @staticmethod
    def _grid(rows: list[list], col_widths: list[float]) -> Table:
        table = Table(rows, colWidths=col_widths, repeatRows=1)
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("ALIGN", (-1, 0), (-1, -1), "RIGHT"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ]
        for index in range(2, len(rows), 2):
            style.append(("BACKGROUND", (0, index), (-1, index), ROW_ALT_COLOR))
        table.setStyle(TableStyle(style))
        return table
