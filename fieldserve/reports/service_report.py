"""
Service report: the joined task data behind a signed report, and its PDF rendering.
"""
import base64
import binascii
import io
from datetime import datetime
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from PIL import Image as PILImage
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
import structlog

from ..models.models import Task
from ..services.task_service import expand_task
from ..services.time_rules import localize
from ..storage.provider import StorageProvider
from ..store.memory import MemoryStore


logger = structlog.get_logger(__name__)

PRIMARY = colors.HexColor("#2962FF")


def build_report_data(store: MemoryStore, task: Task, storage: StorageProvider) -> Dict[str, Any]:
    """Task expansion plus the totals a report shows. Money is rounded here and nowhere else."""
    data = expand_task(store, task, storage)
    materials_total = 0.0
    for usage in data["product_usage"]:
        product = usage["product"]
        line_total = usage["quantity"] * product["unit_price"] if product else 0.0
        materials_total += line_total
        usage["line_total"] = round(line_total, 2)
    data["materials_total"] = round(materials_total, 2)
    data["total_minutes"] = sum(ts["duration_minutes"] or 0 for ts in data["timesheets"])
    return data


def _fmt_dt(value: Optional[datetime], tz_name: str) -> str:
    if not value:
        return "N/A"
    return localize(value, tz_name).strftime("%b %d, %Y %I:%M %p")


def _fmt_minutes(minutes: Optional[int]) -> str:
    if not minutes:
        return "In progress"
    return f"{minutes // 60}h {minutes % 60:02d}m"


def _signature_flowable(data_url: Optional[str]):
    """Decode an image data URL into a flowable; None when absent or unreadable."""
    if not data_url:
        return None
    payload = data_url.split(",", 1)[1] if data_url.startswith("data:") else data_url
    try:
        raw = base64.b64decode(payload, validate=False)
        pil_im = PILImage.open(io.BytesIO(raw))
        if pil_im.mode in ("RGBA", "LA", "P"):
            background = PILImage.new("RGB", pil_im.size, "white")
            pil_im = pil_im.convert("RGBA")
            background.paste(pil_im, mask=pil_im.split()[-1])
            pil_im = background
        buf = io.BytesIO()
        pil_im.save(buf, format="PNG")
        buf.seek(0)
    except (binascii.Error, OSError, ValueError) as e:
        logger.warning("signature_decode_failed", error=str(e))
        return None
    width, height = pil_im.size
    target_w = 60 * mm
    target_h = target_w * height / width if width else 20 * mm
    max_h = 30 * mm
    if target_h > max_h:
        # Tall images shrink on both axes
        target_w = target_w * max_h / target_h
        target_h = max_h
    return Image(buf, width=target_w, height=target_h)


def _table(rows: List[List[Any]], col_widths, header: bool = True) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1 if header else 0)
    style = [
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#DDDDDD")),
    ]
    if header:
        style += [
            ("BACKGROUND", (0, 0), (-1, 0), PRIMARY),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ]
    table.setStyle(TableStyle(style))
    return table


def render_service_report_pdf(report: Dict[str, Any], company_name: str, tz_name: str) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=15 * mm, rightMargin=15 * mm,
                            topMargin=15 * mm, bottomMargin=15 * mm, title=report["title"])
    styles = getSampleStyleSheet()
    brand_style = ParagraphStyle("Brand", parent=styles["Title"], textColor=PRIMARY, alignment=0, fontSize=20)
    h2 = ParagraphStyle("Section", parent=styles["Heading2"], textColor=colors.HexColor("#3C3C3C"))
    body = styles["BodyText"]
    story: List[Any] = []

    story.append(Paragraph(escape(company_name), brand_style))
    story.append(Paragraph("Service Report", styles["Heading3"]))
    story.append(Paragraph(escape(report["title"]), styles["Heading1"]))

    client = report.get("client")
    info = [
        ["Status:", report["status"]],
        ["Priority:", report["priority"]],
        ["Location:", Paragraph(escape(f"{report['location_name']}, {report['location_address']}"), body)],
        ["Scheduled Date:", _fmt_dt(report["scheduled_date"], tz_name)],
        ["Client:", client["name"] if client else "N/A"],
        ["Progress:", f"{report['progress']}%"],
    ]
    story.append(_table(info, [40 * mm, 135 * mm], header=False))

    if report.get("description"):
        story.append(Paragraph("Description", h2))
        story.append(Paragraph(escape(report["description"]), body))

    if report["assigned_users"]:
        story.append(Paragraph("Assigned Technicians", h2))
        rows = [["Technician Name"]] + [[u["name"]] for u in report["assigned_users"]]
        story.append(_table(rows, [175 * mm]))

    sheet = report.get("service_sheet")
    if sheet:
        story.append(Paragraph("Service Details", h2))
        story.append(_table(
            [["Service Type:", sheet["service_type"]], ["Equipment Type:", sheet["equipment_type"]]],
            [40 * mm, 135 * mm],
            header=False,
        ))
        if sheet["checklist"]:
            story.append(Spacer(1, 4 * mm))
            rows = [["Item", "Status"]] + [
                [Paragraph(escape(item["name"]), body), "Completed" if item["completed"] else "Pending"]
                for item in sheet["checklist"]
            ]
            story.append(_table(rows, [135 * mm, 40 * mm]))

    if report["product_usage"]:
        story.append(Paragraph("Materials Used", h2))
        rows = [["Product", "SKU", "Qty", "Unit Price", "Total"]]
        for usage in report["product_usage"]:
            product = usage["product"] or {}
            rows.append([
                Paragraph(escape(product.get("name", f"#{usage['product_id']}")), body),
                product.get("sku", ""),
                str(usage["quantity"]),
                f"${product.get('unit_price', 0):.2f}",
                f"${usage['line_total']:.2f}",
            ])
        rows.append(["", "", "", "Total", f"${report['materials_total']:.2f}"])
        story.append(_table(rows, [70 * mm, 30 * mm, 15 * mm, 30 * mm, 30 * mm]))

    if report["timesheets"]:
        story.append(Paragraph("Time Records", h2))
        rows = [["Start", "End", "Duration", "Notes"]]
        for ts in report["timesheets"]:
            rows.append([
                _fmt_dt(ts["start_time"], tz_name),
                _fmt_dt(ts["end_time"], tz_name) if ts["end_time"] else "In progress",
                _fmt_minutes(ts["duration_minutes"]),
                Paragraph(escape(ts["notes"] or ""), body),
            ])
        story.append(_table(rows, [40 * mm, 40 * mm, 25 * mm, 70 * mm]))
        story.append(Paragraph(f"Total time: {_fmt_minutes(report['total_minutes'])}", body))

    if report["notes"]:
        story.append(Paragraph("Notes", h2))
        for note in report["notes"]:
            text = note["content"] if note["note_type"] == "text" else f"Voice note ({note['duration'] or 0}s)"
            story.append(Paragraph(escape(text), body))

    if report["photos"]:
        story.append(Paragraph("Photos", h2))
        for photo in report["photos"]:
            label = photo["description"] or photo["filename"]
            story.append(Paragraph(escape(f"{label} ({photo['url']})"), body))

    if sheet:
        story.append(Paragraph("Signatures", h2))
        for title, key in (("Technician", "technician_signature"), ("Customer", "customer_signature")):
            flowable = _signature_flowable(sheet.get(key))
            story.append(Paragraph(f"<b>{title} Signature</b>", body))
            story.append(flowable or Paragraph("Not signed", body))
        if sheet.get("customer_name"):
            story.append(Paragraph(f"Customer: {escape(sheet['customer_name'])}", body))
        if sheet.get("completion_date"):
            story.append(Paragraph(f"Completed: {_fmt_dt(sheet['completion_date'], tz_name)}", body))

    doc.build(story)
    return buf.getvalue()
