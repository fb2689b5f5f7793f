from __future__ import annotations
from datetime import date, timedelta
from io import BytesIO
from xml.sax.saxutils import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import DAYS, Schedule


ACTIVITY_COLORS = {
    "Study": colors.HexColor("#e0e7ff"),
    "Commitment": colors.HexColor("#ffedd5"),
    "Review": colors.HexColor("#f3e8ff"),
    "Break": colors.HexColor("#dcfce7"),
}


def _bullets(items, style) -> list:
    return [Paragraph(f"&bull; {escape(item)}", style) for item in items]


def schedule_to_pdf(schedule: Schedule, week_start: date) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    monday = week_start - timedelta(days=week_start.weekday())
    week_end = monday + timedelta(days=6)
    elems.append(Paragraph(f"Study Schedule: {monday.isoformat()} - {week_end.isoformat()}", styles["Title"]))
    elems.append(Spacer(1, 12))

    for i, day in enumerate(DAYS):
        blocks = schedule.weekly_schedule.get(day, [])
        if not blocks:
            continue
        the_date = monday + timedelta(days=i)
        elems.append(Paragraph(the_date.strftime("%A, %Y-%m-%d"), styles["Heading3"]))

        table_data = [["Time", "Activity", "Subject"]]
        row_styles = []
        for row, block in enumerate(blocks, start=1):
            table_data.append([block.label, block.activity, block.subject or ""])
            fill = ACTIVITY_COLORS.get(block.activity)
            if fill is not None:
                row_styles.append(("BACKGROUND", (0, row), (-1, row), fill))

        table = Table(table_data, hAlign="LEFT", colWidths=[100, 90, 200])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ] + row_styles))
        elems.append(table)

        tasks = schedule.daily_tasks.get(day, [])
        if tasks:
            elems.append(Spacer(1, 4))
            elems.extend(_bullets(
                [f"{t.description} ({t.subject}, {t.duration})" + (" - done" if t.completed else "") for t in tasks],
                styles["Normal"],
            ))
        elems.append(Spacer(1, 8))

    elems.append(Paragraph("Study techniques", styles["Heading3"]))
    elems.extend(_bullets(schedule.study_techniques, styles["Normal"]))
    elems.append(Spacer(1, 8))

    elems.append(Paragraph("Break patterns", styles["Heading3"]))
    pattern_data = [["Pattern", "Repeat", "Long break"]]
    for p in schedule.break_patterns:
        pattern_data.append([p.duration, str(p.repeat), p.long_break])
    pattern_table = Table(pattern_data, hAlign="LEFT")
    pattern_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("ALIGN", (1, 1), (1, -1), "RIGHT"),
    ]))
    elems.append(pattern_table)
    elems.append(Spacer(1, 8))

    if schedule.review_slots:
        elems.append(Paragraph("Review slots", styles["Heading3"]))
        elems.extend(_bullets(
            [f"{r.day} {r.start_hour:02d}:00 - {', '.join(r.subjects) or 'all subjects'}" for r in schedule.review_slots],
            styles["Normal"],
        ))
        elems.append(Spacer(1, 8))

    elems.append(Paragraph("If things go off track", styles["Heading3"]))
    elems.extend(_bullets(schedule.contingency_plans, styles["Normal"]))

    doc.build(elems)
    return buf.getvalue()
