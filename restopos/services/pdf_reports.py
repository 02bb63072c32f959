"""
PDF exports (reportlab).

- 58 mm thermal receipt drawn on a canvas
- Daily / weekly / monthly / yearly sales reports
- Payment-method and item-wise range reports
- Printable digital menu

Every renderer returns the PDF as bytes. The core PDF fonts have no
rupee glyph, so amounts use ``settings.pdf_currency_label``.
"""

import colorsys
import io
import logging
import re
from typing import Any, Iterable, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from restopos.core.config import get_settings
from restopos.core.timeutils import parse_timestamp, to_local
from restopos.services.digital_menu import slugify
from restopos.services.themes import MenuTheme

settings = get_settings()
logger = logging.getLogger(__name__)

HEADER_FILL = colors.Color(41 / 255, 128 / 255, 185 / 255)

RECEIPT_WIDTH_MM = 58
RECEIPT_MARGIN_MM = 3
RECEIPT_LINE_MM = 3.5


def money(amount: float) -> str:
    return f"{settings.pdf_currency_label}{float(amount):,.2f}"


def _rate(rate: float) -> str:
    return f"{float(rate):g}"


# =============================================================================
# RECEIPT
# =============================================================================

def receipt_pdf(order: dict[str, Any], restaurant: dict[str, Any]) -> bytes:
    """
    Receipt for a 58 mm thermal printer.

    ``order`` is a serialized order (``order_number``, ``created_at``,
    ``payment_method``, ``total_amount``, ``items``). Prices are treated as
    tax inclusive: subtotal = total / (1 + rate / 100).
    """
    width = RECEIPT_WIDTH_MM * mm
    margin = RECEIPT_MARGIN_MM * mm
    text_width = width - 2 * margin
    font, font_size = "Courier", 7

    def wrap(text: str, max_width: float) -> list[str]:
        return simpleSplit(text, font, font_size, max_width) or [""]

    header = [restaurant.get("restaurant_name") or "Receipt"]
    for field in ("address", "phone"):
        if restaurant.get(field):
            header.extend(wrap(restaurant[field], text_width))
    if restaurant.get("fssai_number"):
        header.append(f"FSSAI: {restaurant['fssai_number']}")

    item_rows = []
    for item in order["items"]:
        lines = wrap(f"{item['quantity']}x {item['item_name']}", text_width - 18 * mm)
        item_rows.append((lines, money(item["total_price"])))

    line_count = len(header) + sum(len(lines) for lines, _ in item_rows) + 14
    height = max(80 * mm, line_count * RECEIPT_LINE_MM * mm + 20 * mm)

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))
    y = height - 8 * mm

    def line(text: str, size: float = font_size, align: str = "left", right: Optional[str] = None):
        nonlocal y
        c.setFont(font, size)
        if align == "center":
            c.drawCentredString(width / 2, y, text)
        else:
            c.drawString(margin, y, text)
        if right is not None:
            c.drawRightString(width - margin, y, right)
        y -= RECEIPT_LINE_MM * mm

    def rule():
        nonlocal y
        y += 1 * mm
        c.line(margin, y, width - margin, y)
        y -= 3 * mm

    line(header[0], size=10, align="center")
    for text in header[1:]:
        line(text, align="center")
    rule()

    created = parse_timestamp(order["created_at"])
    line(f"Order #{order['order_number']}")
    line(to_local(created).strftime("%d/%m/%Y %H:%M"))
    line(f"Payment: {str(order['payment_method']).upper()}")
    rule()

    for lines, amount in item_rows:
        for i, text in enumerate(lines):
            line(text, right=amount if i == 0 else None)
    rule()

    total = float(order["total_amount"])
    tax_rate = float(restaurant.get("tax_rate") or 0)
    subtotal = total / (1 + tax_rate / 100)
    line("Subtotal:", right=money(subtotal))
    if tax_rate > 0:
        line(f"Tax ({_rate(tax_rate)}%):", right=money(total - subtotal))
    line("TOTAL:", size=9, right=money(total))
    y -= 2 * mm

    line("Thank you for your visit!", align="center")
    line("Please visit again", align="center")

    c.showPage()
    c.save()
    return buffer.getvalue()


# =============================================================================
# SALES REPORTS
# =============================================================================

def _styles():
    styles = getSampleStyleSheet()
    title = ParagraphStyle("ReportTitle", parent=styles["Heading1"], fontSize=20, leading=24, alignment=1)
    subtitle = ParagraphStyle("ReportSubtitle", parent=styles["Heading2"], fontSize=14, leading=18, alignment=1)
    period = ParagraphStyle("ReportPeriod", parent=styles["Normal"], fontSize=12, leading=16, alignment=1)
    return styles, title, subtitle, period


def _data_table(head: Sequence[str], rows: Iterable[Sequence[Any]], col_widths=None) -> Table:
    table = Table([list(head)] + [list(r) for r in rows], colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ("INNERGRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("BOX", (0, 0), (-1, -1), 0.5, colors.black),
    ]))
    return table


def _report_pdf(
    restaurant: dict[str, Any],
    title: str,
    period: str,
    report: dict[str, Any],
    sections: Sequence[tuple[str, Table]],
) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4, rightMargin=40, leftMargin=40, topMargin=50, bottomMargin=40,
        title=f"{title} - {period}",
    )
    styles, title_style, subtitle_style, period_style = _styles()

    elements = [
        Paragraph(escape(restaurant.get("restaurant_name") or ""), title_style),
        Paragraph(escape(title), subtitle_style),
        Paragraph(escape(period), period_style),
        Spacer(1, 18),
    ]

    summary = Table(
        [
            ("Total Orders:", f"{report['total_orders']:,}"),
            ("Total Revenue:", money(report["total_revenue"])),
            ("Average Order Value:", money(report["average_order_value"])),
        ],
        colWidths=[170, 200],
        hAlign="LEFT",
    )
    summary.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 11),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    elements.extend([summary, Spacer(1, 18)])

    for heading, table in sections:
        elements.append(Paragraph(escape(heading), styles["Heading3"]))
        elements.append(Spacer(1, 6))
        elements.append(table)
        elements.append(Spacer(1, 18))

    if not report["total_orders"]:
        elements.append(Paragraph("No orders in this period.", styles["Normal"]))

    doc.build(elements)
    return buffer.getvalue()


def _payment_section(report: dict[str, Any]) -> list[tuple[str, Table]]:
    rows = [
        (p["payment_method"].upper(), p["orders"], money(p["revenue"]), f"{p['share']}%")
        for p in report.get("payment_breakdown", [])
    ]
    if not rows:
        return []
    return [("Payment Method Breakdown", _data_table(["Payment", "Orders", "Revenue", "Share"], rows))]


def daily_sales_pdf(report: dict[str, Any], restaurant: dict[str, Any]) -> bytes:
    sections = _payment_section(report)
    if report["orders"]:
        sections.append((
            "Orders",
            _data_table(
                ["Order", "Time", "Items", "Payment", "Total"],
                [
                    (o["order_number"], o["time"], o["items"], o["payment_method"].upper(), money(o["total_amount"]))
                    for o in report["orders"]
                ],
            ),
        ))
    return _report_pdf(restaurant, "Daily Sales Report", report["date"], report, sections)


def weekly_sales_pdf(report: dict[str, Any], restaurant: dict[str, Any]) -> bytes:
    sections = [(
        "Daily Breakdown",
        _data_table(
            ["Date", "Orders", "Revenue"],
            [(d["date"], d["orders"], money(d["revenue"])) for d in report["daily"]],
        ),
    )]
    sections.extend(_payment_section(report))
    period = f"{report['start_date']} to {report['end_date']}"
    return _report_pdf(restaurant, "Weekly Sales Report", period, report, sections)


def monthly_sales_pdf(report: dict[str, Any], restaurant: dict[str, Any]) -> bytes:
    sections = []
    if report["daily"]:
        sections.append((
            "Daily Breakdown",
            _data_table(
                ["Date", "Orders", "Revenue"],
                [(d["date"], d["orders"], money(d["revenue"])) for d in report["daily"]],
            ),
        ))
    sections.extend(_payment_section(report))
    period = f"{report['month_name']} {report['year']}"
    return _report_pdf(restaurant, "Monthly Sales Report", period, report, sections)


def yearly_sales_pdf(report: dict[str, Any], restaurant: dict[str, Any]) -> bytes:
    sections = [(
        "Monthly Breakdown",
        _data_table(
            ["Month", "Orders", "Revenue"],
            [(m["month_name"], m["orders"], money(m["revenue"])) for m in report["monthly"]],
        ),
    )]
    sections.extend(_payment_section(report))
    return _report_pdf(restaurant, "Yearly Sales Report", str(report["year"]), report, sections)


def payment_method_pdf(report: dict[str, Any], restaurant: dict[str, Any]) -> bytes:
    period = f"{report['start_date']} to {report['end_date']}"
    return _report_pdf(restaurant, "Payment Method Report", period, report, _payment_section(report))


def item_wise_pdf(report: dict[str, Any], restaurant: dict[str, Any]) -> bytes:
    sections = []
    if report["items"]:
        sections.append((
            "Item Sales",
            _data_table(
                ["Item", "Quantity", "Orders", "Revenue"],
                [(i["item_name"], i["quantity_sold"], i["orders"], money(i["revenue"])) for i in report["items"]],
                col_widths=[220, 80, 70, 120],
            ),
        ))
    period = f"{report['start_date']} to {report['end_date']}"
    return _report_pdf(restaurant, "Item-wise Sales Report", period, report, sections)


REPORT_RENDERERS = {
    "daily": daily_sales_pdf,
    "weekly": weekly_sales_pdf,
    "monthly": monthly_sales_pdf,
    "yearly": yearly_sales_pdf,
    "payment-methods": payment_method_pdf,
    "items": item_wise_pdf,
}


def report_filename(kind: str, report: dict[str, Any]) -> str:
    if kind == "daily":
        return f"daily-sales-{report['date']}.pdf"
    if kind == "weekly":
        return f"weekly-sales-{report['start_date']}.pdf"
    if kind == "monthly":
        return f"monthly-sales-{report['year']}-{report['month']:02d}.pdf"
    if kind == "yearly":
        return f"yearly-sales-{report['year']}.pdf"
    if kind == "payment-methods":
        return f"payment-method-report-{report['start_date']}-to-{report['end_date']}.pdf"
    return f"item-wise-report-{report['start_date']}-to-{report['end_date']}.pdf"


# =============================================================================
# DIGITAL MENU
# =============================================================================

_HSL = re.compile(r"hsl\(\s*([\d.]+)\s*,\s*([\d.]+)%\s*,\s*([\d.]+)%\s*\)")


def parse_color(value: Optional[str], fallback=colors.black):
    """reportlab colour from ``#rrggbb`` or ``hsl(h, s%, l%)``."""
    if not value:
        return fallback
    value = value.strip()
    match = _HSL.fullmatch(value)
    if match:
        h, s, l = (float(g) for g in match.groups())
        r, g, b = colorsys.hls_to_rgb(h / 360, l / 100, s / 100)
        return colors.Color(r, g, b)
    try:
        return colors.HexColor(value)
    except ValueError:
        logger.debug(f"Unsupported colour {value!r}, using fallback")
        return fallback


def digital_menu_pdf(
    menu_items: Sequence[dict[str, Any]],
    restaurant: dict[str, Any],
    theme: Optional[MenuTheme] = None,
    custom_colors: Optional[dict] = None,
) -> bytes:
    """Printable menu grouped by category, coloured with the active theme."""
    palette = dict(theme.colors) if theme else {}
    palette.update(custom_colors or {})
    primary = parse_color(palette.get("primary"), HEADER_FILL)
    muted = parse_color(palette.get("text_secondary"), colors.grey)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=50, leftMargin=50, topMargin=50, bottomMargin=40)
    styles, title_style, _, period_style = _styles()
    title_style.textColor = primary
    info_style = ParagraphStyle("MenuInfo", parent=period_style, fontSize=10, textColor=muted)
    category_style = ParagraphStyle("MenuCategory", parent=styles["Heading2"], textColor=primary)

    elements = [Paragraph(escape(restaurant.get("restaurant_name") or "Menu"), title_style)]
    contact = " | ".join(escape(restaurant[f]) for f in ("address", "phone", "email") if restaurant.get(f))
    if contact:
        elements.append(Paragraph(contact, info_style))
    elements.append(Spacer(1, 18))

    groups: dict[str, list] = {}
    for item in menu_items:
        groups.setdefault(item["category"], []).append(item)

    for category, items in groups.items():
        elements.append(Paragraph(escape(category), category_style))
        table = Table(
            [(i["name"], money(i["price"])) for i in items],
            colWidths=[360, 120],
            hAlign="LEFT",
        )
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), 11),
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]))
        elements.extend([table, Spacer(1, 12)])

    if not groups:
        elements.append(Paragraph("No menu items yet.", styles["Normal"]))

    tax_rate = float(restaurant.get("tax_rate") or 0)
    if tax_rate > 0:
        note = (
            f"Prices include {_rate(tax_rate)}% GST"
            if restaurant.get("gst_inclusive")
            else f"Prices are exclusive of {_rate(tax_rate)}% GST"
        )
        elements.append(Paragraph(note, info_style))
    if restaurant.get("fssai_number"):
        elements.append(Paragraph(f"FSSAI License: {escape(restaurant['fssai_number'])}", info_style))

    doc.build(elements)
    return buffer.getvalue()


def menu_filename(restaurant_name: str) -> str:
    return f"{slugify(restaurant_name)}-menu.pdf"
