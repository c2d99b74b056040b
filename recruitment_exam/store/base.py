"""
store/base.py

Document store boundary.

Adapters translate their backend's failures into StoreError tagged with a
StoreErrorKind, so services switch on a closed set of kinds instead of
inspecting backend-specific exceptions.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

# Only equality filters are used by the services.
Filter = Tuple[str, str, Any]

STATUS_COLLECTION = "userTestStatus"
RESULTS_COLLECTION = "testResults"
USERS_COLLECTION = "users"


class Document(NamedTuple):
    id: str
    data: Dict[str, Any]


class DocumentStore(ABC):

    @abstractmethod
    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """Document fields, or None when the document does not exist."""

    @abstractmethod
    def set(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        """Create or replace the document."""

    @abstractmethod
    def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document; NOT_FOUND if absent."""

    @abstractmethod
    def add(self, collection: str, fields: Dict[str, Any]) -> str:
        """Append a document under a generated id and return the id."""

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        ...

    @abstractmethod
    def increment(
        self,
        collection: str,
        key: str,
        field: str,
        amount: int = 1,
        defaults: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> int:
        """
        Atomically add ``amount`` to an integer field and return the new value.

        A missing document is created from ``defaults`` (field starting at 0).
        ``extra`` fields are written in the same operation.
        """

    def close(self) -> None:
        pass
