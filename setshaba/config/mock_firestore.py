"""
In-memory stand-in for the Firestore client.

Used when USE_MOCK_DB is set (local development without credentials) and by
the test suite. Only the subset of the Firestore API that the services use is
implemented, with the same failure semantics:

- ``DocumentReference.create`` raises ``AlreadyExists`` when the id is taken
- ``DocumentReference.update`` raises ``NotFound`` when the document is missing
- ``SERVER_TIMESTAMP`` is resolved to the current UTC time on write
- ``order_by`` drops documents that do not have the ordering field

Every read and write holds a single lock so document writes are atomic the
way they are on the real store.
"""

import copy
import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists, NotFound

logger = logging.getLogger(__name__)


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "not-in": lambda a, b: a not in b,
    "array_contains": lambda a, b: isinstance(a, list) and b in a,
}


def _resolve_sentinels(data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    resolved = copy.deepcopy(existing) if existing else {}
    now = datetime.now(timezone.utc)
    for key, value in data.items():
        if value is firestore.SERVER_TIMESTAMP:
            resolved[key] = now
        elif value is firestore.DELETE_FIELD:
            resolved.pop(key, None)
        else:
            resolved[key] = copy.deepcopy(value)
    return resolved


class MockDocumentSnapshot:
    """Read-only view of a document at the time it was fetched."""

    def __init__(self, reference: "MockDocumentReference", data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field: str) -> Any:
        if self._data is None:
            return None
        return copy.deepcopy(self._data.get(field))


class MockDocumentReference:
    def __init__(self, store: "MockFirestore", collection: str, doc_id: str):
        self._store = store
        self._collection = collection
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self._collection}/{self.id}"

    def get(self) -> MockDocumentSnapshot:
        with self._store._lock:
            data = self._store._docs(self._collection).get(self.id)
            return MockDocumentSnapshot(self, copy.deepcopy(data))

    def set(self, data: Dict[str, Any], merge: bool = False) -> None:
        with self._store._lock:
            docs = self._store._docs(self._collection)
            existing = docs.get(self.id) if merge else None
            docs[self.id] = _resolve_sentinels(data, existing)

    def create(self, data: Dict[str, Any]) -> None:
        with self._store._lock:
            docs = self._store._docs(self._collection)
            if self.id in docs:
                raise AlreadyExists(f"Document already exists: {self.path}")
            docs[self.id] = _resolve_sentinels(data)

    def update(self, data: Dict[str, Any]) -> None:
        with self._store._lock:
            docs = self._store._docs(self._collection)
            if self.id not in docs:
                raise NotFound(f"No document to update: {self.path}")
            docs[self.id] = _resolve_sentinels(data, docs[self.id])

    def delete(self) -> None:
        # Deleting a missing document is a no-op, as on Firestore.
        with self._store._lock:
            self._store._docs(self._collection).pop(self.id, None)


class MockAggregationResult:
    def __init__(self, alias: str, value: int):
        self.alias = alias
        self.value = value


class MockAggregationQuery:
    def __init__(self, query: "MockQuery", alias: Optional[str]):
        self._query = query
        self._alias = alias or "field_1"

    def get(self) -> List[List[MockAggregationResult]]:
        total = sum(1 for _ in self._query.stream())
        return [[MockAggregationResult(self._alias, total)]]


class MockQuery:
    """Immutable query; every builder method returns a new query."""

    def __init__(
        self,
        store: "MockFirestore",
        collection: str,
        filters: Tuple[Tuple[str, str, Any], ...] = (),
        orders: Tuple[Tuple[str, str], ...] = (),
        limit_to: Optional[int] = None,
        offset_by: int = 0,
    ):
        self._store = store
        self._collection = collection
        self._filters = filters
        self._orders = orders
        self._limit = limit_to
        self._offset = offset_by

    def _copy(self, **changes: Any) -> "MockQuery":
        params = {
            "filters": self._filters,
            "orders": self._orders,
            "limit_to": self._limit,
            "offset_by": self._offset,
        }
        params.update(changes)
        return MockQuery(self._store, self._collection, **params)

    def where(self, field_path: str, op_string: str, value: Any) -> "MockQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {op_string}")
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path: str, direction: str = firestore.Query.ASCENDING) -> "MockQuery":
        return self._copy(orders=self._orders + ((field_path, direction),))

    def limit(self, count: int) -> "MockQuery":
        return self._copy(limit_to=count)

    def offset(self, num_to_skip: int) -> "MockQuery":
        return self._copy(offset_by=num_to_skip)

    def count(self, alias: Optional[str] = None) -> MockAggregationQuery:
        return MockAggregationQuery(self, alias)

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        with self._store._lock:
            items = list(self._store._docs(self._collection).items())
            matched = [
                (doc_id, data) for doc_id, data in items
                if all(
                    field in data and _OPERATORS[op](data[field], value)
                    for field, op, value in self._filters
                )
            ]
            for field, direction in reversed(self._orders):
                matched = [(doc_id, data) for doc_id, data in matched if field in data]
                matched.sort(
                    key=lambda item: (item[1][field] is not None, item[1][field]),
                    reverse=direction == firestore.Query.DESCENDING,
                )
            matched = matched[self._offset:]
            if self._limit is not None:
                matched = matched[:self._limit]
            snapshots = [
                MockDocumentSnapshot(
                    MockDocumentReference(self._store, self._collection, doc_id),
                    copy.deepcopy(data),
                )
                for doc_id, data in matched
            ]
        return iter(snapshots)

    def get(self) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    def __init__(self, store: "MockFirestore", name: str):
        super().__init__(store, name)
        self.id = name

    def document(self, document_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._store, self._collection, document_id or uuid.uuid4().hex[:20])


class MockFirestore:
    """Process-local document store keyed by collection name and document id."""

    def __init__(self, seed: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for collection, docs in (seed or {}).items():
            for doc_id, data in docs.items():
                self.collection(collection).document(doc_id).set(data)

    @classmethod
    def from_file(cls, path: str) -> "MockFirestore":
        with open(path, "r", encoding="utf-8") as f:
            seed = json.load(f)
        logger.info(f"Mock store seeded from {path}")
        return cls(seed)

    def _docs(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._data.setdefault(collection, {})

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def collections(self) -> List[MockCollectionReference]:
        with self._lock:
            return [MockCollectionReference(self, name) for name, docs in self._data.items() if docs]
