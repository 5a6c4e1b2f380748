from __future__ import annotations  # Styled PDF rendering for session review reports

from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from domain import SessionStatus

from .models import QuestionBreakdown, SessionReport

ACCENT = (79, 70, 229)  # Palette accent
DANGER = (220, 38, 38)  # Violation banner
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 244, 255)  # Highlight background


def _format_millis(value: Optional[int]) -> str:  # Format epoch millis for display
    if not value:
        return "-"
    stamp = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return stamp.strftime("%d %b %Y, %H:%M UTC")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with banner header and paged footer
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Assessment Report"

    @staticmethod
    def clean(text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        value = value.replace("•", "-").replace("—", "-").replace("’", "'")
        return value.encode("latin-1", "ignore").decode("latin-1")

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font("Helvetica", "B", 16)
            self.set_xy(self.l_margin, 6)
            self.cell(usable, 8, self.clean(self.header_title))
            self.set_text_color(*TEXT)
            self.set_y(26)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font("Helvetica", "B", 12)
            self.cell(usable, 6, self.clean(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, pdf.clean(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(col, line, pdf.clean(left[0]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.clean(right[0]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "B", 11)
        pdf.cell(col, line, pdf.clean(left[1]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.clean(right[1]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _score_box(pdf: ReportPDF, report: SessionReport) -> None:  # Highlight the aggregate score
    width = _effective_width(pdf)
    top = pdf.get_y()
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 5)
    pdf.set_text_color(*MUTED)
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(width / 2, 6, f"Average score across {report.answered}/{report.total_questions} questions")
    pdf.set_xy(pdf.l_margin, top + 4)
    pdf.set_text_color(*ACCENT)
    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(width - 6, 8, f"{report.average_score}/100", align="R")
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)


def _violation_notice(pdf: ReportPDF) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(*DANGER)
    pdf.set_font("Helvetica", "B", 11)
    pdf.multi_cell(
        _effective_width(pdf),
        6,
        "Session terminated: unauthorized tab/window switch. Only answers recorded before the interruption are listed.",
    )
    pdf.set_text_color(*TEXT)
    pdf.ln(2)


def _render_question(pdf: ReportPDF, item: QuestionBreakdown) -> None:  # Render one breakdown row
    width = _effective_width(pdf)
    line = 5.5
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(*ACCENT)
    pdf.set_font("Helvetica", "B", 10)
    pdf.multi_cell(width, line, pdf.clean(f"Q{item.number}. {item.question_text}  [{item.score}/100]"))
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(60, 60, 60)
    pdf.set_font("Helvetica", "", 10)
    answer = "Skipped" if item.skipped else (item.answer_text.strip() or "-")
    pdf.multi_cell(width, line, pdf.clean(f"A: {answer}"))
    if item.feedback:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 9)
        pdf.multi_cell(width, line, pdf.clean(f"Feedback: {item.feedback}"))
    for label, values in (("Strength", item.strengths), ("Weakness", item.weaknesses)):
        for value in values:
            pdf.set_x(pdf.l_margin)
            pdf.multi_cell(width, line, pdf.clean(f"- {label}: {value}"))
    if item.ideal_answer:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*TEXT)
        pdf.multi_cell(width, line, pdf.clean(f"Ideal answer: {item.ideal_answer}"))
    y = pdf.get_y() + 1
    pdf.set_draw_color(*RULE)
    pdf.line(pdf.l_margin, y, pdf.l_margin + width, y)
    pdf.set_y(y + 3)
    pdf.set_text_color(*TEXT)


def generate_session_report_pdf(report: SessionReport, *, started_at: Optional[int] = None) -> bytes:  # Build PDF payload
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    title = f"{report.role} - {report.category.value.replace('_', ' ').title()} Report"
    if report.candidate_name:
        title = f"{report.candidate_name} - {title}"
    pdf.header_title = title
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    status = report.status.value if report.status else "IN REVIEW"
    _meta_block(
        pdf,
        [
            ("Candidate", report.candidate_name or "-"),
            ("Role", report.role),
            ("Round", report.category.value),
            ("Access Code", report.exam_id or "Practice"),
            ("Status", status),
            ("Started", _format_millis(started_at)),
        ],
    )
    if report.status is SessionStatus.VIOLATION_TAB_SWITCH:
        _violation_notice(pdf)
    _score_box(pdf, report)

    _section_title(pdf, "Question Breakdown")
    if not report.breakdown:
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 10)
        pdf.multi_cell(_effective_width(pdf), 6, "No answers were recorded for this session.")
    for item in report.breakdown:
        _render_question(pdf, item)

    return bytes(pdf.output())


__all__ = ["generate_session_report_pdf"]
