from __future__ import annotations  # Session report package exports

from .models import QuestionBreakdown, SessionReport, build_report
from .pdf import generate_session_report_pdf

__all__ = ["QuestionBreakdown", "SessionReport", "build_report", "generate_session_report_pdf"]
