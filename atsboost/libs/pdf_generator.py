"""
Generate ATS analysis report PDFs using ReportLab.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, cast
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import (
    HRFlowable,
    KeepTogether,
    ListFlowable,
    ListItem,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from atsboost.schemas import CV, AnalysisReport

RATING_COLORS = {
    "Excellent": "#15803d",
    "Good": "#2563eb",
    "Average": "#d97706",
    "Needs Improvement": "#dc2626",
}


def _register_font(font_name: str, font_path: Path) -> bool:
    """
    Register a TrueType font if the file exists.

    Args:
        font_name: ReportLab font name to register.
        font_path: Path to the TrueType font file.

    Returns:
        True if the font was registered, otherwise False.
    """
    if not font_path.exists():
        return False
    pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
    return True


def _resolve_font_family() -> tuple[str, str]:
    """
    Resolve base and bold font names, preferring DejaVu Sans for wider glyph coverage.

    Returns:
        Tuple of (base_font, bold_font) names.
    """
    base_font, bold_font = "Helvetica", "Helvetica-Bold"
    font_dirs = [Path("/usr/share/fonts/truetype/dejavu"), Path("/Library/Fonts")]
    for font_dir in font_dirs:
        if _register_font("DejaVuSans", font_dir / "DejaVuSans.ttf"):
            base_font = "DejaVuSans"
            if _register_font("DejaVuSans-Bold", font_dir / "DejaVuSans-Bold.ttf"):
                bold_font = "DejaVuSans-Bold"
            break
    return base_font, bold_font


def _build_score_table(report: AnalysisReport, meta: ParagraphStyle, table_width: float) -> Table:
    """
    Build the component score breakdown table.

    Args:
        report: Analysis report to summarise.
        meta: Paragraph style for cell text.
        table_width: Width available for the table.

    Returns:
        ReportLab Table with one row per score component.
    """
    rows = [
        [Paragraph("<b>Component</b>", meta), Paragraph("<b>Score</b>", meta)],
        [Paragraph("Skills keywords", meta), Paragraph(f"{report.skills_score} / 50", meta)],
        [Paragraph("South African context", meta), Paragraph(f"{report.context_score} / 30", meta)],
        [Paragraph("ATS-friendly format", meta), Paragraph(f"{report.format_score} / 20", meta)],
        [Paragraph("<b>Overall</b>", meta), Paragraph(f"<b>{report.score} / 100</b>", meta)],
    ]
    table = Table(rows, colWidths=[table_width * 0.7, table_width * 0.3], hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#eef2f7")),
                ("LINEBELOW", (0, 0), (-1, -1), 0.5, colors.HexColor("#d0d0d0")),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )
    return table


def _build_bullet_section(
    story: list[Any],
    title: str,
    items: list[str],
    section: ParagraphStyle,
    normal: ParagraphStyle,
) -> None:
    if not items:
        return
    story.append(Paragraph(title, section))
    story.append(HRFlowable(width="100%", thickness=cast(int, 0.8), color=colors.HexColor("#d0d0d0")))
    bullets = ListFlowable(
        [ListItem(Paragraph(escape(item), normal), leftIndent=12) for item in items if item],
        bulletType="bullet",
        leftIndent=12,
    )
    story.append(KeepTogether(bullets))
    story.append(Spacer(1, 6))


def generate_ats_report_pdf(cv: CV, report: AnalysisReport) -> bytes:
    """
    Render an ATS analysis report for a CV.

    Args:
        cv: The analysed CV.
        report: Analysis report for the CV.

    Returns:
        The PDF document as bytes.
    """
    styles = getSampleStyleSheet()
    base_font, bold_font = _resolve_font_family()
    normal = ParagraphStyle(
        "ReportBody",
        parent=styles["BodyText"],
        fontName=base_font,
        fontSize=10,
        leading=13,
        spaceAfter=3,
        textColor=colors.HexColor("#1f2933"),
    )
    header = ParagraphStyle(
        "ReportHeader",
        parent=styles["Title"],
        fontName=bold_font,
        fontSize=18,
        spaceAfter=6,
        textColor=colors.HexColor("#1a1a1a"),
    )
    section = ParagraphStyle(
        "ReportSection",
        parent=styles["Heading2"],
        fontName=bold_font,
        fontSize=12,
        spaceBefore=6,
        spaceAfter=4,
        textColor=colors.HexColor("#369bad"),
    )
    meta = ParagraphStyle(
        "ReportMeta",
        parent=styles["BodyText"],
        fontName=base_font,
        fontSize=9.5,
        textColor=colors.HexColor("#555555"),
    )

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
        title=f"ATS report - {cv.title}",
    )

    rating_color = RATING_COLORS.get(report.rating, "#1f2933")
    story: list[Any] = [
        Paragraph("ATSBoost CV Analysis Report", header),
        HRFlowable(width="100%", thickness=cast(int, 1.0), color=colors.HexColor("#b0b0b0")),
        Paragraph(f"{escape(cv.title)} ({escape(cv.file_name)})", meta),
        Paragraph(f"Analysed on {cv.created_at:%d %B %Y}", meta),
        Spacer(1, 8),
        Paragraph(
            f'ATS score: <font color="{rating_color}"><b>{report.score}%</b> ({escape(report.rating)})</font>',
            section,
        ),
        _build_score_table(report, meta, doc.width),
        Spacer(1, 8),
    ]

    _build_bullet_section(story, "STRENGTHS", report.strengths, section, normal)
    _build_bullet_section(story, "IMPROVEMENTS", report.improvements, section, normal)
    _build_bullet_section(story, "ISSUES", report.issues, section, normal)

    sa_lines = []
    if report.sa_keywords_found:
        sa_lines.append("Keywords found: " + ", ".join(report.sa_keywords_found))
    sa_lines.append("B-BBEE status mentioned: " + ("yes" if report.bbbee_detected else "no"))
    sa_lines.append("NQF level mentioned: " + ("yes" if report.nqf_detected else "no"))
    _build_bullet_section(story, "SOUTH AFRICAN CONTEXT", sa_lines, section, normal)

    _build_bullet_section(
        story, "RECOMMENDED KEYWORDS", report.keyword_recommendations, section, normal
    )

    if report.job_match is not None:
        match = report.job_match
        match_lines = [f"Match score: {match.match_score}% ({match.job_relevance} relevance)"]
        if match.matched_keywords:
            match_lines.append("Matched: " + ", ".join(match.matched_keywords))
        if match.missing_keywords:
            match_lines.append("Missing: " + ", ".join(match.missing_keywords))
        _build_bullet_section(story, "JOB MATCH", match_lines, section, normal)

    doc.build(story)
    return buffer.getvalue()
