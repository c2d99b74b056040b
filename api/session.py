"""
api/session.py — multi-user in-memory web sessions (cookie based)

Each browser gets a UUID session id. A session carries the sign-in token and
the current exam draw; exam status and results live in the document store.
Sessions expire after SESSION_TTL of inactivity.
"""

import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional

from config import SESSION_TTL


class ExamDraw(NamedTuple):
    """Questions handed to one candidate and when they were handed out."""
    user_id: str
    question_ids: tuple[str, ...]
    started_at: datetime


@dataclass
class WebSession:
    token: str = ""
    user_id: str = ""
    draw: Optional[ExamDraw] = None


_lock = threading.Lock()
_sessions: dict[str, WebSession] = {}
_timestamps: dict[str, float] = {}


def create_session() -> str:
    """Create a session and return its id."""
    sid = uuid.uuid4().hex
    with _lock:
        _sessions[sid] = WebSession()
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> Optional[WebSession]:
    """Session for ``sid``; None if unknown or expired."""
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            del _sessions[sid]
            del _timestamps[sid]
            return None
        _timestamps[sid] = time.time()  # refresh on access
        return _sessions[sid]


def token(sid: str) -> str:
    s = get_session(sid)
    return s.token if s is not None else ""


def sign_in(sid: str, auth_token: str, user_id: str) -> None:
    """Bind a signed-in user to the browser; any previous draw is dropped."""
    with _lock:
        if sid in _sessions:
            _sessions[sid] = WebSession(token=auth_token, user_id=user_id)
            _timestamps[sid] = time.time()


def start_draw(sid: str, user_id: str, question_ids: list[str], started_at: datetime) -> ExamDraw:
    draw = ExamDraw(user_id, tuple(question_ids), started_at)
    with _lock:
        if sid in _sessions:
            _sessions[sid].draw = draw
            _timestamps[sid] = time.time()
    return draw


def current_draw(sid: str, user_id: str) -> Optional[ExamDraw]:
    """The draw in progress for ``user_id`` in this browser, if any."""
    s = get_session(sid)
    if s is None or s.draw is None or s.draw.user_id != user_id:
        return None
    return s.draw


def clear_exam(sid: str) -> None:
    """Drop the current question draw, keep the login."""
    with _lock:
        if sid in _sessions:
            _sessions[sid].draw = None


def reset(sid: str) -> None:
    """Log the browser out."""
    with _lock:
        if sid in _sessions:
            _sessions[sid] = WebSession()
            _timestamps[sid] = time.time()


def cleanup_expired() -> int:
    """Purge expired sessions; returns how many were removed."""
    now = time.time()
    removed = 0
    with _lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            del _sessions[sid]
            del _timestamps[sid]
            removed += 1
    return removed
