"""
store/firestore.py

Cloud Firestore adapter.
google.api_core exceptions are mapped onto StoreErrorKind; nothing is retried
here beyond what the Firestore client library itself does.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from google.api_core import exceptions as gexc
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from recruitment_exam.errors import StoreError, StoreErrorKind
from recruitment_exam.store.base import Document, DocumentStore, Filter

logger = logging.getLogger(__name__)

_TRANSIENT = (
    gexc.ServiceUnavailable,
    gexc.DeadlineExceeded,
    gexc.Aborted,
    gexc.ResourceExhausted,
    gexc.InternalServerError,
)


def translate_error(exc: Exception, action: str) -> StoreError:
    """Map a Firestore client exception to a tagged StoreError."""
    if isinstance(exc, gexc.NotFound):
        kind = StoreErrorKind.NOT_FOUND
    elif isinstance(exc, (gexc.PermissionDenied, gexc.Unauthenticated)):
        kind = StoreErrorKind.PERMISSION_DENIED
    elif isinstance(exc, _TRANSIENT):
        kind = StoreErrorKind.TRANSIENT
    else:
        kind = StoreErrorKind.OTHER
    message = getattr(exc, "message", None) or str(exc)
    return StoreError(kind, f"{action} failed: {message}", cause=exc)


@contextmanager
def _translated(action: str) -> Iterator[None]:
    try:
        yield
    except StoreError:
        raise
    except gexc.GoogleAPIError as e:
        err = translate_error(e, action)
        logger.warning(f"Firestore error ({err.kind.value}) during {action}: {e}")
        raise err from e


class FirestoreDocumentStore(DocumentStore):

    def __init__(self, project: Optional[str] = None, client: Optional[firestore.Client] = None):
        self._client = client or firestore.Client(project=project)

    def _ref(self, collection: str, key: str):
        return self._client.collection(collection).document(key)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        with _translated(f"get {collection}/{key}"):
            snap = self._ref(collection, key).get()
        return snap.to_dict() if snap.exists else None

    def set(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        with _translated(f"set {collection}/{key}"):
            self._ref(collection, key).set(fields)

    def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        with _translated(f"update {collection}/{key}"):
            self._ref(collection, key).update(fields)

    def add(self, collection: str, fields: Dict[str, Any]) -> str:
        with _translated(f"add {collection}"):
            _, ref = self._client.collection(collection).add(fields)
        return ref.id

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        q = self._client.collection(collection)
        for field, op, value in filters:
            q = q.where(filter=FieldFilter(field, op, value))
        if order_by is not None:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            q = q.order_by(order_by, direction=direction)

        with _translated(f"query {collection}"):
            return [Document(snap.id, snap.to_dict()) for snap in q.stream()]

    def increment(
        self,
        collection: str,
        key: str,
        field: str,
        amount: int = 1,
        defaults: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> int:
        ref = self._ref(collection, key)

        @firestore.transactional
        def _apply(transaction) -> int:
            snap = ref.get(transaction=transaction)
            if snap.exists:
                new_value = int((snap.to_dict() or {}).get(field) or 0) + amount
                transaction.update(ref, {field: new_value, **(extra or {})})
            else:
                new_value = amount
                transaction.set(ref, {**(defaults or {}), field: new_value, **(extra or {})})
            return new_value

        action = f"increment {collection}/{key}.{field}"
        with _translated(action):
            try:
                return _apply(self._client.transaction())
            except ValueError as e:
                # Raised by the client once contention retries are used up.
                if isinstance(e.__cause__, gexc.Aborted):
                    raise translate_error(e.__cause__, action) from e
                raise

    def close(self) -> None:
        self._client.close()
