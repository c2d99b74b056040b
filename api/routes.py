"""
api/routes.py — FastAPI endpoints

Blocking store / auth calls run on worker threads (asyncio.to_thread).
The exam policy lives here: window checks, one submission per candidate,
cancellation after too many tab switches.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, field_validator

import api.session as session
from recruitment_exam.models.question_model import OPTION_COUNT, Question
from recruitment_exam.models.result_model import ResultStatus, TestResultCreate
from recruitment_exam.models.session_state import SessionPhase, SessionStatus
from recruitment_exam.models.user_model import (
    BRANCHES, LoginForm, PasswordResetForm, SignupForm, UserProfile,
)
from recruitment_exam.services.exam_service import (
    calculate_category_scores, calculate_score, grade_answers, grade_of,
)
from recruitment_exam.services.question_bank import get_question
from recruitment_exam.services.question_selector import select_questions

logger = logging.getLogger(__name__)

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class SubmitBody(BaseModel):
    # {question id: chosen option index}; omitted or null means skipped
    answers: dict[str, Optional[int]] = {}

    @field_validator("answers")
    @classmethod
    def validate_indices(cls, v: dict[str, Optional[int]]) -> dict[str, Optional[int]]:
        for qid, idx in v.items():
            if idx is not None and not 0 <= idx < OPTION_COUNT:
                raise ValueError(f"Option index {idx} for question {qid} is out of range.")
        return v


# ── helpers ──────────────────────────────────────────────────────────────────

def _services(request: Request):
    return request.app.state.services


def _sid(request: Request) -> str:
    return request.state.session_id


def _profile_dict(profile: UserProfile) -> dict:
    return profile.model_dump(by_alias=True, mode="json")


async def _require_profile(request: Request) -> UserProfile:
    token = session.token(_sid(request))
    if not token:
        raise HTTPException(status_code=401, detail="Please sign in first.")
    profile = await asyncio.to_thread(_services(request).auth.current_profile, token)
    if profile is None:
        raise HTTPException(status_code=401, detail="Your session has expired. Please sign in again.")
    return profile


def _questions_of(draw: Optional[session.ExamDraw]) -> list[Question]:
    if draw is None:
        return []
    return [q for q in (get_question(i) for i in draw.question_ids) if q is not None]


async def _require_running_exam(request: Request, profile: UserProfile) -> session.ExamDraw:
    """Status must not be finished and this browser must hold a draw."""
    status = await asyncio.to_thread(_services(request).tracker.get_or_create, profile.id)
    _refuse_if_finished(status)
    draw = session.current_draw(_sid(request), profile.id)
    if draw is None or not draw.question_ids:
        raise HTTPException(status_code=400, detail="No test in progress.")
    return draw


def _window_dict(svc, now: datetime) -> dict:
    policy = svc.policy
    return {
        "start_time": policy.start_time.isoformat(),
        "end_time": policy.end_time().isoformat(),
        "duration_minutes": policy.duration_minutes,
        "max_tab_switches": policy.max_tab_switches,
        "available": policy.is_available(now),
        "closed": policy.is_closed(now),
        "remaining_seconds": policy.remaining_seconds(now),
    }


def _refuse_if_finished(status: SessionStatus) -> None:
    if not status.is_finished:
        return
    if status.phase == SessionPhase.CANCELLED:
        raise HTTPException(status_code=409, detail="Your test has been cancelled.")
    raise HTTPException(status_code=409, detail="You have already submitted this test.")


# ── account endpoints ────────────────────────────────────────────────────────

def _sign_in(sid: str, token: str, profile: UserProfile) -> dict:
    session.sign_in(sid, token, profile.id)
    return {"ok": True, "user": _profile_dict(profile)}


@router.get("/api/branches")
async def branches():
    return {"branches": list(BRANCHES)}


@router.post("/api/signup")
async def signup(body: SignupForm, request: Request):
    auth_session, profile = await asyncio.to_thread(_services(request).auth.signup, body)
    return _sign_in(_sid(request), auth_session.token, profile)


@router.post("/api/login")
async def login(body: LoginForm, request: Request):
    auth_session, profile = await asyncio.to_thread(_services(request).auth.login, body)
    return _sign_in(_sid(request), auth_session.token, profile)


@router.post("/api/logout")
async def logout(request: Request):
    sid = _sid(request)
    await asyncio.to_thread(_services(request).auth.logout, session.token(sid))
    session.reset(sid)
    return {"ok": True}


@router.post("/api/reset-password")
async def reset_password(body: PasswordResetForm, request: Request):
    await asyncio.to_thread(_services(request).auth.reset_password, body)
    return {
        "ok": True,
        "message": "Password reset email sent! Check your inbox and follow the "
                   "instructions to reset your password.",
    }


@router.get("/api/me")
async def me(request: Request):
    profile = await _require_profile(request)
    return {"user": _profile_dict(profile)}


# ── exam endpoints ───────────────────────────────────────────────────────────

@router.get("/api/exam/settings")
async def exam_settings(request: Request):
    svc = _services(request)
    return _window_dict(svc, svc.clock())


@router.get("/api/exam/status")
async def exam_status(request: Request):
    profile = await _require_profile(request)
    status = await asyncio.to_thread(_services(request).tracker.get_or_create, profile.id)
    d = status.model_dump(by_alias=True, mode="json")
    d["phase"] = status.phase.value
    return d


@router.post("/api/exam/start")
async def start_exam(request: Request):
    svc = _services(request)
    sid = _sid(request)
    profile = await _require_profile(request)

    now = svc.clock()
    if not svc.policy.is_available(now):
        raise HTTPException(status_code=403, detail="The test has not started yet.")
    if svc.policy.is_closed(now):
        raise HTTPException(status_code=403, detail="The test window has closed.")

    status = await asyncio.to_thread(svc.tracker.get_or_create, profile.id)
    _refuse_if_finished(status)

    # A reload keeps the same draw.
    questions = _questions_of(session.current_draw(sid, profile.id))
    if not questions:
        questions = select_questions(profile.branch, svc.question_count, rng=svc.rng)
        session.start_draw(sid, profile.id, [q.id for q in questions], now)
        logger.info(f"{profile.id} started the test with {len(questions)} questions ({profile.branch})")

    return {
        "ok": True,
        "total": len(questions),
        "questions": [q.public_dict() for q in questions],
        "tab_switch_count": status.tab_switch_count,
        **_window_dict(svc, now),
    }


@router.post("/api/exam/tab-switch")
async def tab_switch(request: Request):
    svc = _services(request)
    profile = await _require_profile(request)
    await _require_running_exam(request, profile)

    count = await asyncio.to_thread(svc.tracker.increment_tab_switch, profile.id)
    limit = svc.policy.max_tab_switches
    cancelled = count > limit
    if cancelled:
        await asyncio.to_thread(svc.tracker.cancel, profile.id)
        session.clear_exam(_sid(request))
        logger.warning(f"{profile.id} exceeded {limit} tab switches; test cancelled")

    return {
        "tab_switch_count": count,
        "max_tab_switches": limit,
        "remaining_switches": max(0, limit - count),
        "cancelled": cancelled,
    }


@router.post("/api/exam/cancel")
async def cancel_exam(request: Request):
    profile = await _require_profile(request)
    await _require_running_exam(request, profile)
    await asyncio.to_thread(_services(request).tracker.cancel, profile.id)
    session.clear_exam(_sid(request))
    return {"ok": True}


@router.post("/api/exam/submit")
async def submit_exam(body: SubmitBody, request: Request):
    svc = _services(request)
    sid = _sid(request)
    profile = await _require_profile(request)

    draw = await _require_running_exam(request, profile)
    questions = _questions_of(draw)

    now = svc.clock()
    started_at = draw.started_at
    answers = grade_answers(questions, body.answers)
    summary = calculate_score(answers)
    grade = grade_of(summary.percentage)

    result = TestResultCreate(
        user_id=profile.id,
        user_name=profile.name,
        user_email=profile.email,
        admission_number=profile.admission_number,
        branch=profile.branch,
        score=summary.score,
        total_questions=len(questions),
        percentage=summary.percentage,
        time_spent_seconds=max(0, int((now - started_at).total_seconds())),
        answers=answers,
        status=ResultStatus.COMPLETED,
    )
    result_id = await asyncio.to_thread(svc.recorder.submit, result)
    session.clear_exam(sid)

    return {
        "ok": True,
        "result_id": result_id,
        "score": summary.score,
        "total": len(questions),
        "percentage": summary.percentage,
        "grade": grade.grade,
        "message": grade.message,
        "category_scores": calculate_category_scores(questions, answers),
    }


# ── results ──────────────────────────────────────────────────────────────────

@router.get("/api/results/me")
async def my_results(request: Request):
    profile = await _require_profile(request)
    results = await asyncio.to_thread(_services(request).recorder.list_by_user, profile.id)
    return {"results": [r.model_dump(by_alias=True, mode="json") for r in results]}


@router.get("/api/results")
async def all_results(request: Request):
    svc = _services(request)
    profile = await _require_profile(request)
    if profile.email.lower() not in svc.admin_emails:
        raise HTTPException(status_code=403, detail="Administrator access required.")
    results = await asyncio.to_thread(svc.recorder.list_all)
    return {"results": [r.model_dump(by_alias=True, mode="json") for r in results]}
