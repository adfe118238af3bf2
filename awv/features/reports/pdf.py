"""PDF rendering of visit reports using PyMuPDF."""

import fitz  # PyMuPDF
from datetime import date, datetime
from typing import List, Optional, Tuple

from awv.core.logging import logger
from awv.features.reports.schemas import VisitReport


PAGE_WIDTH, PAGE_HEIGHT = 595, 842  # A4 in points
MARGIN = 50
FOOTER_HEIGHT = 30
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
LEADING = 1.4

FONT_REGULAR = "helv"
FONT_BOLD = "hebo"
FONT_ITALIC = "heit"
# Embedded font for text outside Latin-1
FONT_UNICODE = "awvuni"

TEXT_COLOR = (0.13, 0.13, 0.13)
MUTED_COLOR = (0.42, 0.45, 0.50)
RULE_COLOR = (0.85, 0.85, 0.85)
TABLE_HEADER_FILL = (0.95, 0.95, 0.95)
DEFAULT_ACCENT = (0.15, 0.39, 0.92)
PRIORITY_COLORS = {
    "high": (0.86, 0.15, 0.15),
    "medium": (0.85, 0.47, 0.02),
    "low": (0.09, 0.64, 0.29),
}

REPORT_TITLE = "Annual Wellness Visit Report"
DISCLAIMER = (
    "This report is for informational purposes only. "
    "Please consult with your healthcare provider for any medical advice."
)


def hex_to_rgb(value: Optional[str]) -> Tuple[float, float, float]:
    """Convert ``#RRGGBB`` to a PyMuPDF color tuple."""
    digits = (value or "").lstrip("#")
    if len(digits) != 6:
        return DEFAULT_ACCENT
    try:
        return tuple(int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))
    except ValueError:
        return DEFAULT_ACCENT


_unicode_font: Optional[fitz.Font] = None


def unicode_font() -> fitz.Font:
    global _unicode_font
    if _unicode_font is None:
        _unicode_font = fitz.Font("cjk")
    return _unicode_font


def resolve_font(text: str, fontname: str) -> str:
    """Keep ``fontname`` when every character is Latin-1, else use the embedded Unicode font."""
    if all(ord(ch) < 256 for ch in text):
        return fontname
    return FONT_UNICODE


def text_width(text: str, fontname: str = FONT_REGULAR, fontsize: float = 10) -> float:
    if resolve_font(text, fontname) == FONT_UNICODE:
        return unicode_font().text_length(text, fontsize=fontsize)
    return fitz.get_text_length(text, fontname=fontname, fontsize=fontsize)


def wrap_text(text: str, width: float, fontname: str = FONT_REGULAR, fontsize: float = 10) -> List[str]:
    """Split ``text`` into lines no wider than ``width`` points."""
    lines = []
    for paragraph in str(text).splitlines() or [""]:
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, fontname, fontsize) <= width:
                current = candidate
                continue
            if current:
                lines.append(current)
            # Hard-break words wider than a whole line
            while len(word) > 1 and text_width(word, fontname, fontsize) > width:
                cut = len(word) - 1
                while cut > 1 and text_width(word[:cut], fontname, fontsize) > width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


def format_date(value) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%m/%d/%Y")
    return str(value)


class PDFReportRenderer:
    """Lay a VisitReport out on A4 pages."""

    def __init__(self):
        self.doc = None
        self.page = None
        self.y = MARGIN
        self.accent = DEFAULT_ACCENT
        self._unicode_pages = set()

    # ============== Layout primitives ==============

    def _new_page(self) -> None:
        self.page = self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        self.y = MARGIN

    def _ensure_space(self, height: float) -> None:
        if self.y + height > PAGE_HEIGHT - MARGIN - FOOTER_HEIGHT:
            self._new_page()

    def _insert(self, x: float, text: str, fontsize: float, fontname: str, color) -> None:
        fontname = resolve_font(text, fontname)
        if fontname == FONT_UNICODE and self.page.number not in self._unicode_pages:
            self.page.insert_font(fontname=FONT_UNICODE, fontbuffer=unicode_font().buffer)
            self._unicode_pages.add(self.page.number)
        self.page.insert_text((x, self.y + fontsize), text, fontsize=fontsize, fontname=fontname, color=color)

    def _write(
        self,
        text: str,
        fontsize: float = 10,
        fontname: str = FONT_REGULAR,
        color=TEXT_COLOR,
        x: float = MARGIN,
        width: float = CONTENT_WIDTH,
    ) -> None:
        line_height = fontsize * LEADING
        for line in wrap_text(text, width, fontname, fontsize):
            self._ensure_space(line_height)
            self._insert(x, line, fontsize, fontname, color)
            self.y += line_height

    def _write_centered(self, text: str, fontsize: float, fontname: str, color=TEXT_COLOR) -> None:
        line_height = fontsize * LEADING
        self._ensure_space(line_height)
        x = (PAGE_WIDTH - text_width(text, fontname, fontsize)) / 2
        self._insert(x, text, fontsize, fontname, color)
        self.y += line_height

    def _rule(self, color=RULE_COLOR, width: float = 0.5) -> None:
        self.page.draw_line((MARGIN, self.y), (PAGE_WIDTH - MARGIN, self.y), color=color, width=width)

    def _columns(
        self,
        left: str,
        right: str,
        left_width: float,
        left_font: str = FONT_BOLD,
        right_font: str = FONT_REGULAR,
        fontsize: float = 10,
        indent: float = 0,
        left_color=TEXT_COLOR,
    ) -> None:
        """Two wrapped columns written line by line so rows can span pages."""
        gap = 10
        x_left = MARGIN + indent
        x_right = x_left + left_width + gap
        right_width = PAGE_WIDTH - MARGIN - x_right
        left_lines = wrap_text(left, left_width, left_font, fontsize)
        right_lines = wrap_text(right, right_width, right_font, fontsize)
        line_height = fontsize * LEADING

        for i in range(max(len(left_lines), len(right_lines))):
            self._ensure_space(line_height)
            if i < len(left_lines):
                self._insert(x_left, left_lines[i], fontsize, left_font, left_color)
            if i < len(right_lines):
                self._insert(x_right, right_lines[i], fontsize, right_font, TEXT_COLOR)
            self.y += line_height

    def _heading(self, text: str) -> None:
        self._ensure_space(50)
        self.y += 12
        self._insert(MARGIN, text, 13, FONT_BOLD, self.accent)
        self.y += 13 * LEADING
        self._rule(self.accent, 0.8)
        self.y += 8

    def _subheading(self, text: str) -> None:
        self._ensure_space(40)
        self.y += 6
        self._write(text, 11, FONT_BOLD)

    # ============== Report blocks ==============

    def _header(self, report: VisitReport, logo: Optional[bytes]) -> None:
        practice = report.practice
        header_width = CONTENT_WIDTH
        top = self.y

        if logo:
            size = 60
            rect = fitz.Rect(PAGE_WIDTH - MARGIN - size, top, PAGE_WIDTH - MARGIN, top + size)
            self.page.insert_image(rect, stream=logo, keep_proportion=True)
            header_width -= size + 10

        self._write(practice.name, 16, FONT_BOLD, self.accent, width=header_width)
        self._write(practice.address, 9, FONT_REGULAR, MUTED_COLOR, width=header_width)
        contact = [f"Phone: {practice.phone}", f"Email: {practice.email}"]
        if practice.website:
            contact.append(practice.website)
        self._write(" | ".join(contact), 9, FONT_REGULAR, MUTED_COLOR, width=header_width)

        if logo:
            self.y = max(self.y, top + 60)
        self.y += 14
        self._write_centered(REPORT_TITLE, 18, FONT_BOLD)
        self.y += 4
        self._rule()
        self.y += 4

    def _field_rows(self, rows: List[Tuple[str, Optional[str]]]) -> None:
        for label, value in rows:
            self._columns(f"{label}:", value or "N/A", left_width=110)

    def _patient_block(self, report: VisitReport) -> None:
        patient = report.patient
        self._heading("Patient Information")
        self._field_rows([
            ("Name", patient.name),
            ("Date of Birth", f"{format_date(patient.date_of_birth)} (Age {patient.age})"),
            ("Gender", patient.gender.capitalize()),
            ("Medical Record #", patient.medical_record_number),
            ("Phone", patient.phone),
            ("Email", patient.email),
        ])

    def _visit_block(self, report: VisitReport) -> None:
        visit = report.visit
        provider = report.provider
        provider_text = provider.name
        if provider.title:
            provider_text = f"{provider.name}, {provider.title}"

        self._heading("Visit Information")
        self._field_rows([
            ("Visit Date", format_date(visit.scheduled_date)),
            ("Visit Type", visit.visit_type.replace("-", " ").title()),
            ("Provider", provider_text),
            ("Assessment", visit.template_name),
            ("Status", visit.status.replace("-", " ").title()),
            ("Completed Date", format_date(visit.completed_at)),
        ])

    def _assessment(self, report: VisitReport) -> None:
        self._heading("Assessment Results")
        question_width = CONTENT_WIDTH * 0.6 - 10

        for section in report.sections:
            self._subheading(section.title)
            if section.description:
                self._write(section.description, 9, FONT_ITALIC, MUTED_COLOR)

            if not section.answers:
                self._write("No responses recorded for this section.", 10, FONT_ITALIC, MUTED_COLOR)
                continue

            self._ensure_space(40)
            fill = fitz.Rect(MARGIN, self.y, PAGE_WIDTH - MARGIN, self.y + 10 * LEADING + 2)
            self.page.draw_rect(fill, color=None, fill=TABLE_HEADER_FILL)
            self.y += 1
            self._columns("Question", "Response", question_width, FONT_BOLD, FONT_BOLD)
            self.y += 1

            for answer in section.answers:
                self.y += 2
                self._columns(answer.question, answer.answer or "N/A", question_width, FONT_REGULAR, FONT_REGULAR)
                self._rule()

    def _health_plan(self, report: VisitReport) -> None:
        self._heading("Health Plan Recommendations")

        if not report.health_plan:
            self._write("No recommendations were generated for this visit.", 10, FONT_ITALIC, MUTED_COLOR)

        for group in report.health_plan:
            self._subheading(group.domain)
            for recommendation in group.recommendations:
                tag = f"[{recommendation.priority.upper()}]"
                color = PRIORITY_COLORS.get(recommendation.priority, TEXT_COLOR)
                self._columns(tag, recommendation.text, 55, FONT_BOLD, FONT_REGULAR, indent=10, left_color=color)
                if recommendation.source:
                    source = recommendation.source
                    basis = f"Based on: {source.question}"
                    if source.response:
                        basis += f" ({source.response})"
                    self._write(basis, 8, FONT_ITALIC, MUTED_COLOR, x=MARGIN + 75, width=CONTENT_WIDTH - 75)
                self.y += 3

        if report.summary:
            self._subheading("Summary")
            self._write(report.summary)

    def _notes(self, report: VisitReport) -> None:
        if not report.notes:
            return
        self._heading("Provider Notes")
        self._write(report.notes)

    def _disclaimer(self) -> None:
        self.y += 16
        self._write(DISCLAIMER, 8, FONT_ITALIC, MUTED_COLOR)

    def _footers(self, report: VisitReport) -> None:
        total = self.doc.page_count
        generated = f"Generated {format_date(report.generated_at)}"
        baseline = PAGE_HEIGHT - MARGIN / 2
        for number, page in enumerate(self.doc, start=1):
            label = f"Page {number} of {total}"
            x = (PAGE_WIDTH - text_width(label, FONT_REGULAR, 8)) / 2
            page.insert_text((x, baseline), label, fontsize=8, fontname=FONT_REGULAR, color=MUTED_COLOR)
            page.insert_text((MARGIN, baseline), generated, fontsize=8, fontname=FONT_REGULAR, color=MUTED_COLOR)

    # ============== Entry point ==============

    def render(self, report: VisitReport, logo: Optional[bytes] = None) -> bytes:
        """Render ``report`` and return the PDF bytes."""
        self.doc = fitz.open()
        self._unicode_pages = set()
        self.accent = hex_to_rgb(report.practice.primary_color)
        try:
            self._new_page()
            self._header(report, logo)
            self._patient_block(report)
            self._visit_block(report)
            self._assessment(report)
            self._health_plan(report)
            self._notes(report)
            self._disclaimer()
            self._footers(report)

            self.doc.set_metadata({
                "title": f"Annual Wellness Visit - {report.patient.name}",
                "author": report.provider.name,
                "subject": REPORT_TITLE,
                "keywords": "AWV, wellness, healthcare",
                "creator": report.practice.name,
            })
            data = self.doc.tobytes(garbage=3, deflate=True)
            page_count = self.doc.page_count
        finally:
            self.doc.close()
            self.doc = None
            self.page = None

        logger.info(f"Rendered report for visit {report.visit.id}: {page_count} page(s), {len(data)} bytes")
        return data
