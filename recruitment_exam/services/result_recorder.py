"""
services/result_recorder.py

Stores finished attempts in ``testResults`` and reads them back.

submit() is two independent writes: the status record is marked submitted
first, then the result is appended. There is no transaction across them, so a
failure in between leaves a submitted status with no result. That case is
logged as an orphaned submission and reported to the caller; it is not
repaired here.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from recruitment_exam.errors import ResultRecorderError, StatusTrackerError, StoreError
from recruitment_exam.models.result_model import TestResult, TestResultCreate
from recruitment_exam.services.status_tracker import SessionStatusTracker
from recruitment_exam.services.window_policy import Clock, utcnow
from recruitment_exam.store.base import RESULTS_COLLECTION, Document, DocumentStore

logger = logging.getLogger(__name__)

_COMPLETED_AT = "completedAt"
_USER_ID = "userId"


class ResultRecorder:

    def __init__(self, store: DocumentStore, tracker: SessionStatusTracker, clock: Clock = utcnow):
        self._store = store
        self._tracker = tracker
        self._clock = clock

    def submit(self, result: TestResultCreate) -> str:
        """Mark the user submitted, then append the result. Returns the new id."""
        try:
            self._tracker.mark_submitted(result.user_id)
        except StatusTrackerError as e:
            raise ResultRecorderError(f"Failed to submit test result: {e.message}", cause=e.cause or e) from e

        document = result.model_copy(update={"completed_at": self._clock()}).to_document()
        try:
            result_id = self._store.add(RESULTS_COLLECTION, document)
        except StoreError as e:
            logger.error(
                f"Orphaned submission: {result.user_id} is marked submitted "
                f"but the result was not stored ({e})"
            )
            raise ResultRecorderError(f"Failed to submit test result: {e.message}", cause=e) from e

        logger.info(
            f"Stored result {result_id} for {result.user_id}: "
            f"{result.score}/{result.total_questions} ({result.percentage}%)"
        )
        return result_id

    def list_by_user(self, user_id: str) -> List[TestResult]:
        """Newest first. Sorted here so the store needs no composite index."""
        try:
            docs = self._store.query(RESULTS_COLLECTION, filters=[(_USER_ID, "==", user_id)])
        except StoreError as e:
            raise ResultRecorderError(f"Failed to get test results: {e.message}", cause=e) from e
        return _newest_first([self._parse(d) for d in docs])

    def list_all(self) -> List[TestResult]:
        """Newest first, ordered by the store."""
        try:
            docs = self._store.query(RESULTS_COLLECTION, order_by=_COMPLETED_AT, descending=True)
        except StoreError as e:
            raise ResultRecorderError(f"Failed to get all test results: {e.message}", cause=e) from e
        results = [self._parse(d) for d in docs]
        # sorted() is stable, so a correctly ordered store result is left as-is.
        return _newest_first(results)

    @staticmethod
    def _parse(doc: Document) -> TestResult:
        data: Dict[str, Any] = {**doc.data, "id": doc.id}
        try:
            return TestResult.model_validate(data)
        except ValidationError as e:
            raise ResultRecorderError(f"Malformed test result {doc.id}", cause=e) from e


def _newest_first(results: List[TestResult]) -> List[TestResult]:
    return sorted(results, key=lambda r: r.completed_at, reverse=True)
