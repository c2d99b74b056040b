"""
store/memory.py

In-process document store for local runs and tests.
Documents are deep-copied on the way in and out; one lock guards all state.
"""

import copy
import threading
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from recruitment_exam.errors import StoreError, StoreErrorKind
from recruitment_exam.store.base import Document, DocumentStore, Filter


class InMemoryDocumentStore(DocumentStore):

    def __init__(self):
        self._lock = threading.Lock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._collections[collection].get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            self._collections[collection][key] = copy.deepcopy(fields)

    def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            doc = self._collections[collection].get(key)
            if doc is None:
                raise StoreError(
                    StoreErrorKind.NOT_FOUND,
                    f"No document to update: {collection}/{key}",
                )
            doc.update(copy.deepcopy(fields))

    def add(self, collection: str, fields: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            self._collections[collection][doc_id] = copy.deepcopy(fields)
        return doc_id

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        for _, op, _ in filters:
            if op != "==":
                raise StoreError(StoreErrorKind.OTHER, f"Unsupported filter operator: {op}")

        with self._lock:
            docs = [
                Document(doc_id, copy.deepcopy(data))
                for doc_id, data in self._collections[collection].items()
                if all(data.get(field) == value for field, _, value in filters)
            ]

        if order_by is not None:
            # Documents lacking the field are excluded, as Firestore does.
            docs = [d for d in docs if d.data.get(order_by) is not None]
            docs.sort(key=lambda d: d.data[order_by], reverse=descending)
        return docs

    def increment(
        self,
        collection: str,
        key: str,
        field: str,
        amount: int = 1,
        defaults: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> int:
        with self._lock:
            docs = self._collections[collection]
            doc = docs.get(key)
            if doc is None:
                doc = copy.deepcopy(defaults or {})
                doc[field] = 0
                docs[key] = doc
            doc[field] = int(doc.get(field) or 0) + amount
            if extra:
                doc.update(copy.deepcopy(extra))
            return doc[field]
