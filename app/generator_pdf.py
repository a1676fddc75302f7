"""
ResumeRecord ➜ PDF bytes.

Fixed A4 page, 50pt margins, sections top-to-bottom separated by a thin rule.
Empty sections are skipped entirely. Page overflow is left to platypus.
"""
from __future__ import annotations
import io
import logging
from pathlib import Path
from typing import List

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Flowable, HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from errors import IOFailure
from schema_resume import PRESENT, ResumeRecord

logger = logging.getLogger(__name__)

MARGIN = 50
SEPARATOR = "  ·  "
SKILL_SEPARATOR = "   ·   "
BULLET = "•"

# --- Colors ---
INK_HEX = "#1a1a2e"
INK = HexColor(INK_HEX)
BODY = HexColor("#333333")
MUTED = HexColor("#444444")
SOFT = HexColor("#555555")
FAINT = HexColor("#888888")
RULE = HexColor("#cccccc")


def _esc(text: str) -> str:
    """Escape text for reportlab Paragraph XML."""
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _build_styles() -> dict:
    s = {}
    s["name"] = ParagraphStyle(
        "name", fontName="Helvetica-Bold", fontSize=22, leading=26,
        textColor=INK, alignment=TA_CENTER, spaceAfter=6,
    )
    s["contact"] = ParagraphStyle(
        "contact", fontName="Helvetica", fontSize=9, leading=12,
        textColor=SOFT, alignment=TA_CENTER,
    )
    s["heading"] = ParagraphStyle(
        "heading", fontName="Helvetica-Bold", fontSize=12, leading=15,
        textColor=INK, spaceAfter=6,
    )
    s["body"] = ParagraphStyle(
        "body", fontName="Helvetica", fontSize=10, leading=13,
        textColor=BODY,
    )
    s["job_title"] = ParagraphStyle(
        "job_title", fontName="Helvetica", fontSize=11, leading=14,
        textColor=MUTED,
    )
    s["dates"] = ParagraphStyle(
        "dates", fontName="Helvetica-Oblique", fontSize=9, leading=12,
        textColor=FAINT, alignment=TA_RIGHT, spaceAfter=4,
    )
    s["bullet"] = ParagraphStyle(
        "bullet", parent=s["body"], leftIndent=18, bulletIndent=8,
        spaceAfter=2,
    )
    s["degree"] = ParagraphStyle(
        "degree", fontName="Helvetica-Bold", fontSize=11, leading=14,
        textColor=INK,
    )
    s["institution"] = ParagraphStyle(
        "institution", fontName="Helvetica", fontSize=10, leading=13,
        textColor=MUTED,
    )
    s["year"] = ParagraphStyle(
        "year", fontName="Helvetica-Oblique", fontSize=9, leading=12,
        textColor=FAINT, spaceAfter=8,
    )
    return s


def _rule() -> HRFlowable:
    return HRFlowable(width="100%", thickness=0.5, color=RULE, spaceBefore=6, spaceAfter=12)


def _heading(title: str, styles: dict) -> Paragraph:
    return Paragraph(_esc(title.upper()), styles["heading"])


def _bullet(text: str, styles: dict) -> Paragraph:
    return Paragraph(_esc(text), styles["bullet"], bulletText=BULLET)


def _date_range(start: str, end: str) -> str:
    end = end or PRESENT
    return f"{start} – {end}" if start else end


# ───────────────────────────────────────── sections ──
def _header(r: ResumeRecord, st: dict) -> List[Flowable]:
    out = [Paragraph(_esc(r.name), st["name"])]
    if r.contact_parts:
        out.append(Paragraph(_esc(SEPARATOR.join(r.contact_parts)), st["contact"]))
    return out


def _summary(r: ResumeRecord, st: dict) -> List[Flowable]:
    if not r.summary:
        return []
    return [_heading("Professional Summary", st), Paragraph(_esc(r.summary), st["body"])]


def _experience(r: ResumeRecord, st: dict) -> List[Flowable]:
    if not r.experience:
        return []
    out: List[Flowable] = [_heading("Career History", st)]
    for job in r.experience:
        title = f'<font name="Helvetica-Bold" color="{INK_HEX}">{_esc(job.position)}</font>'
        if job.position and job.company:
            title += _esc(SEPARATOR + job.company)
        elif job.company:
            title = _esc(job.company)
        out.append(Paragraph(title, st["job_title"]))
        out.append(Paragraph(_esc(_date_range(job.startDate, job.endDate)), st["dates"]))
        out.extend(_bullet(b, st) for b in job.bullets)
        out.append(Spacer(1, 8))
    return out


def _skills(r: ResumeRecord, st: dict) -> List[Flowable]:
    if not r.skills:
        return []
    return [_heading("Skills", st), Paragraph(_esc(SKILL_SEPARATOR.join(r.skills)), st["body"])]


def _education(r: ResumeRecord, st: dict) -> List[Flowable]:
    if not r.education:
        return []
    out: List[Flowable] = [_heading("Education", st)]
    for edu in r.education:
        if edu.degree:
            out.append(Paragraph(_esc(edu.degree), st["degree"]))
        if edu.institution:
            out.append(Paragraph(_esc(edu.institution), st["institution"]))
        out.append(Paragraph(_esc(edu.year), st["year"]) if edu.year else Spacer(1, 8))
    return out


def _certifications(r: ResumeRecord, st: dict) -> List[Flowable]:
    if not r.certifications:
        return []
    return [_heading("Certifications", st)] + [_bullet(c, st) for c in r.certifications]


SECTIONS = (_header, _summary, _experience, _skills, _education, _certifications)


def build_story(record: ResumeRecord) -> List[Flowable]:
    """Flowables for every non-empty section, joined by horizontal rules."""
    styles = _build_styles()
    story: List[Flowable] = []
    for section in SECTIONS:
        flowables = section(record, styles)
        if not flowables:
            continue
        if story:
            story.append(_rule())
        story.extend(flowables)
    return story


def _build(record: ResumeRecord, sink) -> None:
    doc = SimpleDocTemplate(
        sink, pagesize=A4,
        leftMargin=MARGIN, rightMargin=MARGIN, topMargin=MARGIN, bottomMargin=MARGIN,
        title=record.name, author=record.name, subject="Resume",
    )
    doc.build(build_story(record))


def render_pdf(record: ResumeRecord) -> bytes:
    buf = io.BytesIO()
    _build(record, buf)
    data = buf.getvalue()
    logger.info("Rendered resume PDF (%d bytes)", len(data))
    return data


def write_pdf(record: ResumeRecord, path: str | Path) -> Path:
    """Render straight to *path*; IOFailure if the file cannot be written."""
    path = Path(path)
    try:
        with path.open("wb") as fh:
            _build(record, fh)
    except OSError as e:
        raise IOFailure(f"could not write {path}: {e}") from e
    logger.info("Wrote resume PDF to %s", path)
    return path
