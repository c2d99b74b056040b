"""
api/app.py — FastAPI app factory + session middleware + error mapping + static files
"""

import logging
import os
import random
import threading
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

import config
from api.routes import router
import api.session as session
from recruitment_exam.errors import AuthError, ResultRecorderError, StatusTrackerError, StoreError
from recruitment_exam.services.auth_service import (
    AuthProvider, AuthService, FirebaseAuthProvider, LocalAuthProvider,
)
from recruitment_exam.services.result_recorder import ResultRecorder
from recruitment_exam.services.status_tracker import SessionStatusTracker
from recruitment_exam.services.window_policy import Clock, WindowPolicy, utcnow
from recruitment_exam.store.base import DocumentStore
from recruitment_exam.store.memory import InMemoryDocumentStore

logger = logging.getLogger(__name__)

SESSION_COOKIE = "exam_session"


@dataclass
class PortalServices:
    """Everything the routes need, built once per app."""

    store: DocumentStore
    auth: AuthService
    tracker: SessionStatusTracker
    recorder: ResultRecorder
    policy: WindowPolicy
    clock: Clock = utcnow
    question_count: int = config.DEFAULT_QUESTION_COUNT
    admin_emails: FrozenSet[str] = frozenset()
    rng: Optional[random.Random] = None
    auth_provider: Optional[AuthProvider] = field(default=None, repr=False)


def _build_store() -> DocumentStore:
    if config.STORE_BACKEND == "firestore":
        from recruitment_exam.store.firestore import FirestoreDocumentStore
        return FirestoreDocumentStore(project=config.FIREBASE_PROJECT_ID)
    if config.STORE_BACKEND != "memory":
        raise RuntimeError(f"Unknown STORE_BACKEND: {config.STORE_BACKEND}")
    logger.warning("Using the in-memory document store; data is lost on restart.")
    return InMemoryDocumentStore()


def _build_auth_provider() -> AuthProvider:
    if config.AUTH_BACKEND == "firebase":
        return FirebaseAuthProvider(config.FIREBASE_API_KEY, timeout=config.AUTH_TIMEOUT)
    if config.AUTH_BACKEND != "local":
        raise RuntimeError(f"Unknown AUTH_BACKEND: {config.AUTH_BACKEND}")
    return LocalAuthProvider()


def build_services(
    store: Optional[DocumentStore] = None,
    auth_provider: Optional[AuthProvider] = None,
    policy: Optional[WindowPolicy] = None,
    clock: Clock = utcnow,
    question_count: int = config.DEFAULT_QUESTION_COUNT,
    admin_emails: Optional[FrozenSet[str]] = None,
    rng: Optional[random.Random] = None,
) -> PortalServices:
    if store is None or auth_provider is None:
        config.require_firebase_settings()
    store = store or _build_store()
    auth_provider = auth_provider or _build_auth_provider()
    tracker = SessionStatusTracker(store, clock)
    return PortalServices(
        store=store,
        auth=AuthService(auth_provider, store, clock),
        tracker=tracker,
        recorder=ResultRecorder(store, tracker, clock),
        policy=policy or WindowPolicy.from_config(),
        clock=clock,
        question_count=question_count,
        admin_emails=config.ADMIN_EMAILS if admin_emails is None else admin_emails,
        rng=rng,
        auth_provider=auth_provider,
    )


def create_app(services: Optional[PortalServices] = None) -> FastAPI:
    services = services or build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        services.store.close()
        if services.auth_provider is not None:
            services.auth_provider.close()

    app = FastAPI(title="Recruitment Exam Portal", docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Session middleware: read the session id from the cookie, issue one if missing
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=config.SESSION_TTL,
        )
        return response

    # ── error mapping: one-line detail, no partial-success states ──────────
    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError):
        return JSONResponse(status_code=400, content={"detail": exc.message})

    @app.exception_handler(StatusTrackerError)
    @app.exception_handler(ResultRecorderError)
    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} (cause: {exc.cause!r})")
        return JSONResponse(status_code=503, content={"detail": exc.message})

    app.include_router(router)

    if os.path.isdir(config.STATIC_DIR):
        app.mount("/static", StaticFiles(directory=config.STATIC_DIR), name="static")

    @app.get("/")
    async def serve_index():
        index_path = os.path.join(config.STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    # Purge expired web sessions every 5 minutes
    def _cleanup_loop():
        while True:
            time.sleep(300)
            removed = session.cleanup_expired()
            if removed:
                logger.info(f"Purged {removed} expired sessions")

    t = threading.Thread(target=_cleanup_loop, daemon=True)
    t.start()

    return app
