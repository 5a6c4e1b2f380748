"""FastAPI routes for identity, exams, interview sessions and dashboards."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from access import AccessDeniedError, AccessShell
from api.schemas import (
    AnswerReq,
    AnswerResp,
    CodeValidateReq,
    CodingChallengeReq,
    ConfigureReq,
    ConsentReq,
    CreateExamReq,
    ExamSessionReq,
    OkResp,
    PracticeSessionReq,
    ResumeAnalyzeReq,
    SignInReq,
    SignOutReq,
    VisibilityReq,
    VisibilityResp,
)
from domain import (
    CodeReview,
    CodingChallenge,
    CompanyProfile,
    ExamConfig,
    LeaderboardEntry,
    Profile,
    ResumeAnalysis,
    Session,
)
from evaluation_gateway import EvaluationGateway
from interview_session import (
    ConsentRequiredError,
    IllegalTransitionError,
    QuestionGenerationError,
    SessionMachine,
    SessionSnapshot,
)
from services import exams as exam_service
from services.scoring import DashboardSummary, dashboard_summary, leaderboard
from services.sessions import SessionRegistry
from session_reports import SessionReport, generate_session_report_pdf

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Runtime:  # Per-app collaborators shared by every route
    access: AccessShell
    gateway: EvaluationGateway
    sessions: SessionRegistry


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


router = APIRouter(prefix="/api")


# identity -------------------------------------------------------------


@router.post("/auth/sign-in", response_model=Profile)
def sign_in(req: SignInReq, rt: Runtime = Depends(get_runtime)) -> Profile:
    if not req.email.strip():
        raise HTTPException(status_code=400, detail="Email is required.")
    return rt.access.sign_in(req.email, req.role, name=req.name, signup=req.signup)


@router.post("/auth/sign-out", response_model=OkResp)
def sign_out(req: SignOutReq, rt: Runtime = Depends(get_runtime)) -> OkResp:
    rt.access.end_exam_attempt(req.email)
    return OkResp()


@router.get("/profiles/{email}", response_model=Profile)
def get_profile(email: str, rt: Runtime = Depends(get_runtime)) -> Profile:
    return rt.access.resolve_active_identity(email)


# exams ----------------------------------------------------------------


@router.post("/exams", response_model=ExamConfig, status_code=201)
def create_exam(req: CreateExamReq, rt: Runtime = Depends(get_runtime)) -> ExamConfig:
    try:
        return exam_service.create_exam(
            req.recruiter_email,
            req.role,
            req.category,
            req.difficulty,
            rt.access,
            invited_emails=req.invited_emails,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Exam creation failed for %s", req.recruiter_email)
        raise HTTPException(status_code=500, detail="Unable to create exam") from exc


@router.get("/exams/{code}", response_model=ExamConfig)
def open_exam(code: str, email: Optional[str] = None, rt: Runtime = Depends(get_runtime)) -> ExamConfig:
    try:
        return exam_service.open_exam(code, email, rt.access)
    except AccessDeniedError as exc:
        raise HTTPException(status_code=403, detail=exc.reason) from exc


@router.get("/recruiters/{email}/exams", response_model=List[ExamConfig])
def recruiter_exams(email: str, rt: Runtime = Depends(get_runtime)) -> List[ExamConfig]:
    return rt.access.exams_by_recruiter(email)


@router.get("/recruiters/{email}/company", response_model=CompanyProfile)
def get_company(email: str, rt: Runtime = Depends(get_runtime)) -> CompanyProfile:
    return rt.access.get_company(email)


@router.put("/recruiters/{email}/company", response_model=CompanyProfile)
def save_company(email: str, company: CompanyProfile, rt: Runtime = Depends(get_runtime)) -> CompanyProfile:
    rt.access.save_company(email, company)
    return company


# interview sessions ---------------------------------------------------


def _machine(rt: Runtime, session_id: str) -> SessionMachine:
    machine = rt.sessions.get(session_id)
    if machine is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return machine


def _guarded(action: Callable[[], T]) -> T:  # Map state machine errors onto HTTP codes
    try:
        return action()
    except (IllegalTransitionError, ConsentRequiredError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except QuestionGenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/interview-sessions", response_model=SessionSnapshot, status_code=201)
def new_practice_session(req: PracticeSessionReq, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    identity = rt.access.resolve_active_identity(req.email)
    return rt.sessions.new_practice_session(identity).snapshot()


@router.post("/interview-sessions/exam", response_model=SessionSnapshot, status_code=201)
def new_exam_session(req: ExamSessionReq, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    try:
        exam = exam_service.open_exam(req.code, req.email, rt.access)
    except AccessDeniedError as exc:
        raise HTTPException(status_code=403, detail=exc.reason) from exc
    identity = rt.access.resolve_active_identity(req.email)
    try:
        machine = _guarded(lambda: rt.sessions.new_exam_session(identity, exam))
    except AccessDeniedError as exc:
        raise HTTPException(status_code=403, detail=exc.reason) from exc
    return machine.snapshot()


@router.get("/interview-sessions/{session_id}", response_model=SessionSnapshot)
def session_snapshot(session_id: str, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    return _machine(rt, session_id).snapshot()


@router.post("/interview-sessions/{session_id}/configure", response_model=SessionSnapshot)
def configure_session(session_id: str, req: ConfigureReq, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    machine = _machine(rt, session_id)
    _guarded(lambda: machine.configure(req.role, req.category, req.difficulty))
    return machine.snapshot()


@router.post("/interview-sessions/{session_id}/start", response_model=SessionSnapshot)
def start_session(session_id: str, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    machine = _machine(rt, session_id)
    _guarded(machine.start)
    return machine.snapshot()


@router.post("/interview-sessions/{session_id}/consent", response_model=SessionSnapshot)
def give_consent(session_id: str, req: ConsentReq, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    machine = _machine(rt, session_id)
    _guarded(lambda: machine.accept_guidelines(req.accepted))
    return machine.snapshot()


@router.post("/interview-sessions/{session_id}/begin", response_model=SessionSnapshot)
def begin_session(session_id: str, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    machine = _machine(rt, session_id)
    _guarded(machine.begin)
    return machine.snapshot()


@router.post("/interview-sessions/{session_id}/cancel", response_model=SessionSnapshot)
def cancel_session(session_id: str, rt: Runtime = Depends(get_runtime)) -> SessionSnapshot:
    machine = _machine(rt, session_id)
    _guarded(lambda: rt.sessions.cancel(machine))
    return machine.snapshot()


@router.post("/interview-sessions/{session_id}/answer", response_model=AnswerResp)
def submit_answer(session_id: str, req: AnswerReq, rt: Runtime = Depends(get_runtime)) -> AnswerResp:
    machine = _machine(rt, session_id)
    record = _guarded(lambda: machine.submit(req.answer_text))
    return AnswerResp(record=record, snapshot=machine.snapshot())


@router.post("/interview-sessions/{session_id}/pass", response_model=AnswerResp)
def pass_question(session_id: str, rt: Runtime = Depends(get_runtime)) -> AnswerResp:
    machine = _machine(rt, session_id)
    record = _guarded(machine.pass_question)
    return AnswerResp(record=record, snapshot=machine.snapshot())


@router.post("/interview-sessions/{session_id}/visibility", response_model=VisibilityResp)
def visibility_changed(session_id: str, req: VisibilityReq, rt: Runtime = Depends(get_runtime)) -> VisibilityResp:
    machine = _machine(rt, session_id)
    suspended = machine.visibility_changed(req.hidden)
    return VisibilityResp(suspended=suspended, snapshot=machine.snapshot())


@router.post("/interview-sessions/{session_id}/finalize", response_model=Session)
def finalize_session(session_id: str, rt: Runtime = Depends(get_runtime)) -> Session:
    machine = _machine(rt, session_id)
    _guarded(machine.finalize)
    stored = rt.sessions.stored_session(session_id)
    if stored is None:
        raise HTTPException(status_code=500, detail="Session completion was not recorded")
    return stored


@router.get("/interview-sessions/{session_id}/report", response_model=SessionReport)
def session_report(session_id: str, rt: Runtime = Depends(get_runtime)) -> SessionReport:
    machine = _machine(rt, session_id)
    return _guarded(machine.report)


def _safe_slug(value: Optional[str]) -> str:  # Sanitize value for filenames
    if not value:
        return ""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return re.sub(r"-+", "-", slug).strip("-")


@router.get("/interview-sessions/{session_id}/report.pdf")
def session_report_pdf(session_id: str, rt: Runtime = Depends(get_runtime)) -> Response:
    machine = _machine(rt, session_id)
    report = _guarded(machine.report)
    stored = rt.sessions.stored_session(session_id)
    payload = generate_session_report_pdf(report, started_at=stored.start_time if stored else None)
    filename = f"{_safe_slug(report.candidate_name) or 'candidate'}-{_safe_slug(report.role) or 'report'}.pdf"
    headers = {"Content-Disposition": f"attachment; filename=\"{filename}\""}
    return Response(content=payload, media_type="application/pdf", headers=headers)


# dashboards -----------------------------------------------------------


@router.get("/dashboard/{email}", response_model=DashboardSummary)
def dashboard(email: str, rt: Runtime = Depends(get_runtime)) -> DashboardSummary:
    profile = rt.access.resolve_active_identity(email)
    newest_first = rt.access.list_sessions(profile.email)
    return dashboard_summary(profile, list(reversed(newest_first)))


@router.get("/sessions", response_model=List[Session])
def list_sessions(email: Optional[str] = None, rt: Runtime = Depends(get_runtime)) -> List[Session]:
    return rt.access.list_sessions(email)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(
    exam_id: Optional[str] = None,
    recruiter_email: Optional[str] = None,
    rt: Runtime = Depends(get_runtime),
) -> List[LeaderboardEntry]:
    if exam_id:
        return leaderboard(rt.access.sessions_for_exam(exam_id.strip().upper()), exam_id=exam_id)
    if recruiter_email:
        codes = [exam.id for exam in rt.access.exams_by_recruiter(recruiter_email)]
        pool: List[Session] = []
        for code in codes:
            pool.extend(rt.access.sessions_for_exam(code))
        pool.sort(key=lambda s: s.start_time, reverse=True)
        return leaderboard(pool, exam_ids=codes)
    return leaderboard(rt.access.list_sessions())


# gateway passthroughs -------------------------------------------------


@router.post("/coding/challenge", response_model=CodingChallenge)
def coding_challenge(req: CodingChallengeReq, rt: Runtime = Depends(get_runtime)) -> CodingChallenge:
    return rt.gateway.generate_coding_challenge(req.role)


@router.post("/coding/validate", response_model=CodeReview)
def validate_code(req: CodeValidateReq, rt: Runtime = Depends(get_runtime)) -> CodeReview:
    return rt.gateway.validate_code(req.problem, req.language, req.code)


@router.post("/resume/analyze", response_model=ResumeAnalysis)
def analyze_resume(req: ResumeAnalyzeReq, rt: Runtime = Depends(get_runtime)) -> ResumeAnalysis:
    return rt.gateway.analyze_resume(req.resume_text, req.target_job)


__all__ = ["Runtime", "get_runtime", "router"]
