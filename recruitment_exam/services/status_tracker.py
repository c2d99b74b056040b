"""
services/status_tracker.py

Per-user exam status kept in the ``userTestStatus`` collection.

Reading and creating are separate steps: try_get() never writes,
get_or_create() writes the default record only when none exists.
The tracker records state; deciding when to cancel (too many tab switches,
time over) is left to the caller.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import ValidationError

from recruitment_exam.errors import StatusTrackerError, StoreError, StoreErrorKind
from recruitment_exam.models.session_state import SessionPhase, SessionStatus
from recruitment_exam.services.window_policy import Clock, utcnow
from recruitment_exam.store.base import STATUS_COLLECTION, DocumentStore

logger = logging.getLogger(__name__)

# Read failures that mean "treat the record as missing".
_ABSENT_KINDS = (StoreErrorKind.NOT_FOUND, StoreErrorKind.PERMISSION_DENIED)


class SessionStatusTracker:

    def __init__(self, store: DocumentStore, clock: Clock = utcnow):
        self._store = store
        self._clock = clock

    # ── reads ────────────────────────────────────────────────────────────────

    def try_get(self, user_id: str) -> Optional[SessionStatus]:
        try:
            doc = self._store.get(STATUS_COLLECTION, user_id)
        except StoreError as e:
            if e.kind in _ABSENT_KINDS:
                logger.info(f"Status read for {user_id} reported {e.kind.value}; treating as absent")
                return None
            raise StatusTrackerError(f"Failed to get user test status: {e.message}", cause=e) from e
        if doc is None:
            return None
        return self._parse(user_id, doc)

    def get_or_create(self, user_id: str) -> SessionStatus:
        status = self.try_get(user_id)
        if status is not None:
            return status

        status = SessionStatus.default(user_id, self._clock())
        self._write(user_id, status.to_document(), "create user test status")
        logger.info(f"Created test status for {user_id}")
        return status

    get = get_or_create

    def phase(self, user_id: str) -> SessionPhase:
        status = self.try_get(user_id)
        return SessionPhase.NOT_STARTED if status is None else status.phase

    # ── writes ───────────────────────────────────────────────────────────────

    def update(self, user_id: str, fields: Dict[str, Any], now: Optional[datetime] = None) -> None:
        """
        Merge ``fields`` (model field names) into the record and refresh
        last_activity. A missing record is created from the defaults.
        """
        now = now or self._clock()
        wire = {SessionStatus.wire_name(k): v for k, v in fields.items()}
        wire[SessionStatus.wire_name("last_activity")] = now

        try:
            self._store.update(STATUS_COLLECTION, user_id, wire)
            return
        except StoreError as e:
            if e.kind != StoreErrorKind.NOT_FOUND:
                raise StatusTrackerError(
                    f"Failed to update user test status: {e.message}", cause=e
                ) from e

        document = SessionStatus.default(user_id, now).to_document()
        document.update(wire)
        self._write(user_id, document, "update user test status")

    def mark_submitted(self, user_id: str) -> None:
        now = self._clock()
        self.update(user_id, {"has_submitted": True, "submission_time": now}, now=now)
        logger.info(f"Marked {user_id} as submitted")

    def cancel(self, user_id: str) -> None:
        self.update(user_id, {"is_cancelled": True})
        logger.info(f"Cancelled test for {user_id}")

    def increment_tab_switch(self, user_id: str) -> int:
        """Add one tab switch atomically at the store; returns the new count."""
        now = self._clock()
        try:
            count = self._store.increment(
                STATUS_COLLECTION,
                user_id,
                SessionStatus.wire_name("tab_switch_count"),
                amount=1,
                defaults=SessionStatus.default(user_id, now).to_document(),
                extra={SessionStatus.wire_name("last_activity"): now},
            )
        except StoreError as e:
            raise StatusTrackerError(
                f"Failed to increment tab switch count: {e.message}", cause=e
            ) from e
        logger.info(f"Tab switch #{count} for {user_id}")
        return count

    # ── helpers ──────────────────────────────────────────────────────────────

    def _write(self, user_id: str, document: Dict[str, Any], action: str) -> None:
        try:
            self._store.set(STATUS_COLLECTION, user_id, document)
        except StoreError as e:
            raise StatusTrackerError(f"Failed to {action}: {e.message}", cause=e) from e

    def _parse(self, user_id: str, doc: Dict[str, Any]) -> SessionStatus:
        data = dict(doc)
        data["userId"] = user_id
        # Older records may lack lastActivity or hold nulls.
        if data.get("lastActivity") is None:
            data["lastActivity"] = self._clock()
        for key, default in (("hasSubmitted", False), ("tabSwitchCount", 0), ("isTestCancelled", False)):
            if data.get(key) is None:
                data[key] = default
        try:
            return SessionStatus.model_validate(data)
        except ValidationError as e:
            raise StatusTrackerError(f"Malformed user test status for {user_id}", cause=e) from e
