"""
CRO Audit PDF Report Generator

Renders a serialized audit (the AuditResponse JSON shape) into a PDF with
score cards, the category breakdown, quick wins, A/B test ideas, the
benchmark table and the technical health section.
"""

import logging
import os
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import (
    KeepTogether,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

logger = logging.getLogger(__name__)

FONT_NAME = "Helvetica"
FONT_NAME_BOLD = "Helvetica-Bold"

FONT_CANDIDATES = [
    ("Pretendard", "/usr/share/fonts/truetype/pretendard/Pretendard-Regular.ttf", "/usr/share/fonts/truetype/pretendard/Pretendard-Bold.ttf"),
    ("DejaVu-Sans", "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
]

PAGE_WIDTH = 7.5 * inch


def register_fonts():
    """Register the first available TTF family, otherwise keep Helvetica"""
    global FONT_NAME, FONT_NAME_BOLD

    for name, regular, bold in FONT_CANDIDATES:
        if not (os.path.exists(regular) and os.path.exists(bold)):
            continue
        try:
            pdfmetrics.registerFont(TTFont(name, regular))
            pdfmetrics.registerFont(TTFont(f"{name}-Bold", bold))
        except Exception as e:
            logger.warning(f"⚠️ Could not register {name} font: {e}")
            continue
        FONT_NAME, FONT_NAME_BOLD = name, f"{name}-Bold"
        logger.debug(f"✓ Using {name} font")
        return

    FONT_NAME, FONT_NAME_BOLD = "Helvetica", "Helvetica-Bold"
    logger.debug("✓ Using Helvetica font (system fonts not found)")


COLORS = {
    "primary_red": colors.HexColor("#DC3545"),
    "dark_gray": colors.HexColor("#1F2937"),
    "medium_gray": colors.HexColor("#6B7280"),
    "light_gray": colors.HexColor("#F3F4F6"),
    "pale_gray": colors.HexColor("#F9FAFB"),
    "blue": colors.HexColor("#3B82F6"),
    "warning_bg": colors.HexColor("#FEF3C7"),
    "warning_text": colors.HexColor("#92400E"),
    "error_bg": colors.HexColor("#FEE2E2"),
    "error_text": colors.HexColor("#991B1B"),
    "success_bg": colors.HexColor("#D1FAE5"),
    "success_text": colors.HexColor("#047A55"),
    "white": colors.white,
    "fair_yellow": colors.HexColor("#F59E0B"),
    "good_green": colors.HexColor("#10B981"),
}

FINDING_STYLES = {
    "success": ("success_bg", "SuccessText", "[PASS]"),
    "warning": ("warning_bg", "WarningText", "[WARN]"),
    "error": ("error_bg", "ErrorText", "[FAIL]"),
}


def _text(value) -> str:
    return escape(str(value)) if value is not None else ""


def score_color(score):
    if score is None:
        return COLORS["medium_gray"]
    if score >= 80:
        return COLORS["good_green"]
    if score >= 50:
        return COLORS["fair_yellow"]
    return COLORS["primary_red"]


def create_custom_styles():
    """Create custom paragraph styles for the report"""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name="CustomTitle",
        parent=styles["Heading1"],
        fontSize=24,
        textColor=COLORS["dark_gray"],
        spaceAfter=6,
        alignment=TA_CENTER,
        fontName=FONT_NAME_BOLD,
    ))
    styles.add(ParagraphStyle(
        name="URLStyle",
        parent=styles["Normal"],
        fontSize=16,
        textColor=COLORS["blue"],
        spaceAfter=4,
        alignment=TA_CENTER,
        fontName=FONT_NAME_BOLD,
    ))
    styles.add(ParagraphStyle(
        name="DateStyle",
        parent=styles["Normal"],
        fontSize=10,
        textColor=COLORS["medium_gray"],
        spaceAfter=20,
        alignment=TA_CENTER,
        fontName=FONT_NAME,
    ))
    styles.add(ParagraphStyle(
        name="SectionHeading",
        parent=styles["Heading1"],
        fontSize=16,
        textColor=COLORS["dark_gray"],
        spaceAfter=8,
        spaceBefore=8,
        fontName=FONT_NAME_BOLD,
    ))
    styles.add(ParagraphStyle(
        name="SubsectionHeading",
        parent=styles["Heading2"],
        fontSize=11,
        textColor=COLORS["dark_gray"],
        spaceAfter=3,
        spaceBefore=3,
        fontName=FONT_NAME_BOLD,
    ))
    styles.add(ParagraphStyle(
        name="CustomBodyText",
        parent=styles["Normal"],
        fontSize=10,
        textColor=COLORS["dark_gray"],
        spaceAfter=4,
        alignment=TA_JUSTIFY,
        fontName=FONT_NAME,
        leading=14,
    ))
    styles.add(ParagraphStyle(
        name="TableText",
        parent=styles["Normal"],
        fontSize=8.5,
        textColor=COLORS["dark_gray"],
        fontName=FONT_NAME,
        leading=11,
    ))
    for name, color in (
        ("WarningText", "warning_text"),
        ("ErrorText", "error_text"),
        ("SuccessText", "success_text"),
    ):
        styles.add(ParagraphStyle(
            name=name,
            parent=styles["Normal"],
            fontSize=10,
            textColor=COLORS[color],
            spaceAfter=2,
            fontName=FONT_NAME,
            leading=13,
            leftIndent=6,
            rightIndent=6,
        ))

    return styles


def _boxed(paragraph, background, padding=8):
    table = Table([[paragraph]], colWidths=[PAGE_WIDTH])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), background),
        ("LEFTPADDING", (0, 0), (-1, -1), padding),
        ("RIGHTPADDING", (0, 0), (-1, -1), padding),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
    ]))
    return table


def _grid(rows, col_widths, styles):
    """Header row plus body rows, wrapped in Paragraphs so long text breaks."""
    data = [[Paragraph(f"<b>{_text(c)}</b>", styles["TableText"]) for c in rows[0]]]
    data += [[Paragraph(_text(c), styles["TableText"]) for c in row] for row in rows[1:]]
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), COLORS["light_gray"]),
        ("GRID", (0, 0), (-1, -1), 0.5, COLORS["light_gray"]),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [COLORS["white"], COLORS["pale_gray"]]),
    ]))
    return table


def create_metrics_table(result):
    """Four score cards in a single row"""
    health = result.get("technical_health") or {}
    lighthouse = health.get("performance_score")

    cards = [
        ("Overall CRO Score", result.get("overall_score")),
        ("Technical Health", health.get("score") if health else None),
        ("Lighthouse Performance", lighthouse),
    ]
    values = [f"{v}/100" if v is not None else "N/A" for _, v in cards]
    values.append(str(result.get("page_type", "")).title())
    labels = [label for label, _ in cards] + ["Page Type"]

    table = Table([values, labels], colWidths=[PAGE_WIDTH / 4] * 4, hAlign="CENTER")
    style = [
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("FONTSIZE", (0, 0), (-1, 0), 18),
        ("FONTNAME", (0, 0), (-1, 0), FONT_NAME_BOLD),
        ("TEXTCOLOR", (0, 0), (-1, 0), COLORS["dark_gray"]),
        ("TOPPADDING", (0, 0), (-1, 0), 12),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 18),
        ("FONTSIZE", (0, 1), (-1, 1), 9),
        ("FONTNAME", (0, 1), (-1, 1), FONT_NAME),
        ("TEXTCOLOR", (0, 1), (-1, 1), COLORS["medium_gray"]),
        ("BACKGROUND", (0, 0), (-1, -1), COLORS["white"]),
    ]
    for col, (_, value) in enumerate(cards):
        style.append(("BOX", (col, 0), (col, -1), 1, COLORS["light_gray"]))
        style.append(("BACKGROUND", (col, 0), (col, 0), score_color(value).clone(alpha=0.2)))
    style.append(("BOX", (3, 0), (3, -1), 1, COLORS["light_gray"]))
    table.setStyle(TableStyle(style))
    return table


def create_summary_section(result, styles):
    elements = [Paragraph("Executive Summary", styles["SectionHeading"])]
    elements.append(_boxed(Paragraph(_text(result.get("summary", "")), styles["CustomBodyText"]), COLORS["pale_gray"]))
    elements.append(Spacer(1, 0.1 * inch))

    actions = result.get("prioritized_actions") or []
    if actions:
        elements.append(Paragraph("Prioritized Actions", styles["SubsectionHeading"]))
        text = "<br/>".join(f"{i}. {_text(a)}" for i, a in enumerate(actions, 1))
        elements.append(_boxed(Paragraph(text, styles["CustomBodyText"]), COLORS["pale_gray"]))
        elements.append(Spacer(1, 0.1 * inch))

    wins = result.get("quick_wins") or []
    if wins:
        elements.append(Paragraph("Quick Wins", styles["SubsectionHeading"]))
        for win in wins:
            text = f"<b>{_text(win['title'])}</b><br/>{_text(win['description'])}<br/><i>{_text(win['estimated_impact'])}</i>"
            elements.append(_boxed(Paragraph(text, styles["SuccessText"]), COLORS["success_bg"]))
            elements.append(Spacer(1, 0.05 * inch))
    return elements


def create_category_overview(categories, styles):
    rows = [["Category", "Score", "Errors", "Warnings", "Passed"]]
    for cat in categories:
        kinds = [f["type"] for f in cat["findings"]]
        rows.append([
            cat["name"],
            f"{cat['score']}/100",
            kinds.count("error"),
            kinds.count("warning"),
            kinds.count("success"),
        ])
    return [
        Paragraph("Category Breakdown", styles["SectionHeading"]),
        _grid(rows, [3.3 * inch, 1.05 * inch, 1.05 * inch, 1.05 * inch, 1.05 * inch], styles),
        Spacer(1, 0.15 * inch),
    ]


def create_category_section(category, styles):
    """One category heading followed by its findings as colored boxes"""
    elements = [Paragraph(f"{_text(category['name'])}: {category['score']}/100", styles["SubsectionHeading"])]
    for finding in category["findings"]:
        background, style_name, marker = FINDING_STYLES[finding["type"]]
        text = f"<b>{marker} {_text(finding['title'])}</b> ({_text(finding['impact'])} impact)<br/>{_text(finding['description'])}"
        if finding.get("recommendation"):
            text += f"<br/><i>Recommendation:</i> {_text(finding['recommendation'])}"
        if finding.get("principle"):
            text += f"<br/><font size=8>Principle: {_text(finding['principle'])}</font>"
        elements.append(KeepTogether([_boxed(Paragraph(text, styles[style_name]), COLORS[background]), Spacer(1, 0.04 * inch)]))
    elements.append(Spacer(1, 0.12 * inch))
    return elements


def create_ab_test_section(ideas, styles):
    if not ideas:
        return []
    rows = [["#", "Test", "Hypothesis", "Metric", "Impact"]]
    for idea in ideas:
        rows.append([idea["id"], idea["title"], idea["hypothesis"], idea["metric"], idea["expected_impact"]])
    return [
        Paragraph("A/B Test Ideas", styles["SectionHeading"]),
        _grid(rows, [0.35 * inch, 1.8 * inch, 3.45 * inch, 1.2 * inch, 0.7 * inch], styles),
        Spacer(1, 0.15 * inch),
    ]


def create_benchmark_section(benchmark, styles):
    if not benchmark:
        return []
    rows = [["Metric", "Yours", "Industry avg", "Top performers", "Status"]]
    for comp in benchmark["comparisons"]:
        rows.append([comp["metric"], comp["your_value"], comp["industry_avg"], comp["top_performers"], comp["status"]])
    return [
        Paragraph("Industry Benchmark", styles["SectionHeading"]),
        Paragraph(_text(benchmark["overall_position"]), styles["CustomBodyText"]),
        _grid(rows, [2.7 * inch, 1.0 * inch, 1.2 * inch, 1.4 * inch, 1.2 * inch], styles),
        Spacer(1, 0.06 * inch),
        Paragraph(f"<i>{_text(benchmark['industry_context'])}</i>", styles["CustomBodyText"]),
        Spacer(1, 0.15 * inch),
    ]


def create_technical_section(health, styles):
    if not health:
        return []
    elements = [
        Paragraph("Technical Health", styles["SectionHeading"]),
        Paragraph(
            f"Health score {health['score']}/100, risk level <b>{_text(health['risk_level'])}</b>, "
            f"{health['passed_count']} checks passed.",
            styles["CustomBodyText"],
        ),
    ]
    vitals = health.get("core_web_vitals") or []
    if vitals:
        elements.append(Paragraph("Core Web Vitals", styles["SubsectionHeading"]))
        rows = [["Metric", "Value", "Rating", "Threshold"]]
        rows += [[v["metric"], v["value"], v["rating"], v["threshold"]] for v in vitals]
        elements.append(_grid(rows, [2.5 * inch, 1.5 * inch, 1.75 * inch, 1.75 * inch], styles))

    for group, checks in (health.get("groups") or {}).items():
        elements.append(Paragraph(_text(group), styles["SubsectionHeading"]))
        rows = [["Check", "Status", "Value", "How to fix"]]
        rows += [[c["label"], c["status"], c["value"], c.get("how_to_fix") or ""] for c in checks]
        elements.append(_grid(rows, [2.0 * inch, 0.8 * inch, 1.8 * inch, 2.9 * inch], styles))
    elements.append(Spacer(1, 0.15 * inch))
    return elements


def _format_date(value, fmt):
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime(fmt)
    except (ValueError, AttributeError):
        return str(value or "")


def generate_pdf(audit_data, output_path=None):
    """
    Generate the complete PDF report

    Args:
        audit_data: Serialized audit with url, analyzed_at and result
                    (an AnalysisResult as JSON)
        output_path: Optional file path to save PDF. If None, returns BytesIO buffer

    Returns:
        BytesIO buffer if output_path is None, otherwise None (saves to file)
    """
    register_fonts()
    result = audit_data["result"]

    pdf_file = output_path if output_path else BytesIO()
    doc = SimpleDocTemplate(
        pdf_file,
        pagesize=letter,
        rightMargin=0.5 * inch,
        leftMargin=0.5 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
    )
    styles = create_custom_styles()

    elements = [
        Paragraph("CRO Audit Report", styles["CustomTitle"]),
        Spacer(1, 0.1 * inch),
        Paragraph(_text(audit_data.get("url", "")), styles["URLStyle"]),
        Paragraph(f"Analyzed: {_text(_format_date(audit_data.get('analyzed_at'), '%m/%d/%Y'))}", styles["DateStyle"]),
        create_metrics_table(result),
        Spacer(1, 0.18 * inch),
    ]
    elements.extend(create_summary_section(result, styles))
    elements.extend(create_category_overview(result["categories"], styles))
    elements.append(PageBreak())

    elements.append(Paragraph("Findings by Category", styles["SectionHeading"]))
    for category in result["categories"]:
        elements.extend(create_category_section(category, styles))

    elements.extend(create_ab_test_section(result.get("ab_test_ideas") or [], styles))
    elements.extend(create_benchmark_section(result.get("benchmark"), styles))
    elements.extend(create_technical_section(result.get("technical_health"), styles))

    doc.build(elements)

    if output_path:
        logger.info(f"✅ PDF Report created successfully: {output_path}")
        return None
    pdf_file.seek(0)
    return pdf_file
