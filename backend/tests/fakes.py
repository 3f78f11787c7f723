"""In-memory stand-ins for the Firestore client and the OpenAI client.

Only the calls the services make are supported. Firestore denials can be
switched on per operation and collection to exercise security-rule failures.
"""
import copy
import itertools
import json
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Set, Tuple

from google.api_core import exceptions as google_exceptions

_ids = itertools.count(1)


def _matches(data: Dict[str, Any], field: str, op: str, value: Any) -> bool:
    if field not in data:
        return False
    actual = data[field]
    if op == "==":
        return actual == value
    if op == "!=":
        return actual != value
    if op == "in":
        return actual in value
    if op == "array_contains":
        return isinstance(actual, list) and value in actual
    if actual is None:
        return False
    if op == "<":
        return actual < value
    if op == "<=":
        return actual <= value
    if op == ">":
        return actual > value
    if op == ">=":
        return actual >= value
    raise ValueError(f"Unsupported operator {op}")


class FakeSnapshot:
    def __init__(self, reference: "FakeDocumentRef", data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, db: "FakeFirestore", collection: str, doc_id: str):
        self._db = db
        self.collection_name = collection
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self.collection_name}/{self.id}"

    def get(self) -> FakeSnapshot:
        self._db.check("get", self.collection_name)
        return FakeSnapshot(self, self._db.store[self.collection_name].get(self.id))

    def set(self, data: Dict[str, Any], merge: bool = False) -> None:
        self._db.check("set", self.collection_name)
        docs = self._db.store[self.collection_name]
        if merge and self.id in docs:
            docs[self.id].update(copy.deepcopy(data))
        else:
            docs[self.id] = copy.deepcopy(data)

    def update(self, updates: Dict[str, Any]) -> None:
        self._db.check("update", self.collection_name)
        docs = self._db.store[self.collection_name]
        if self.id not in docs:
            raise google_exceptions.NotFound(f"No document to update: {self.path}")
        docs[self.id].update(copy.deepcopy(updates))

    def delete(self) -> None:
        self._db.check("delete", self.collection_name)
        self._db.store[self.collection_name].pop(self.id, None)


class FakeQuery:
    def __init__(
        self,
        db: "FakeFirestore",
        collection: str,
        filters: Tuple = (),
        order: Optional[Tuple[str, bool]] = None,
        limit_count: Optional[int] = None,
    ):
        self._db = db
        self._collection = collection
        self._filters = filters
        self._order = order
        self._limit = limit_count

    def where(self, field: str, op: str, value: Any) -> "FakeQuery":
        return FakeQuery(self._db, self._collection, self._filters + ((field, op, value),), self._order, self._limit)

    def order_by(self, field: str, direction: str = "ASCENDING") -> "FakeQuery":
        return FakeQuery(self._db, self._collection, self._filters, (field, direction == "DESCENDING"), self._limit)

    def limit(self, count: int) -> "FakeQuery":
        return FakeQuery(self._db, self._collection, self._filters, self._order, count)

    def stream(self):
        self._db.check("list", self._collection)
        docs = self._db.store[self._collection]
        results = [
            (doc_id, data) for doc_id, data in docs.items()
            if all(_matches(data, f, op, v) for f, op, v in self._filters)
        ]
        if self._order:
            field, descending = self._order
            # Firestore leaves out documents without the ordered field
            results = [item for item in results if item[1].get(field) is not None]
            results.sort(key=lambda item: item[1].get(field), reverse=descending)
        if self._limit is not None:
            results = results[:self._limit]
        for doc_id, data in results:
            yield FakeSnapshot(FakeDocumentRef(self._db, self._collection, doc_id), data)


class FakeCollection(FakeQuery):
    def __init__(self, db: "FakeFirestore", name: str):
        super().__init__(db, name)
        self.name = name

    def document(self, doc_id: Optional[str] = None) -> FakeDocumentRef:
        return FakeDocumentRef(self._db, self.name, doc_id or f"{self.name}-{next(_ids)}")

    def add(self, data: Dict[str, Any]):
        self._db.check("create", self.name)
        ref = self.document()
        self._db.store[self.name][ref.id] = copy.deepcopy(data)
        return datetime.now(timezone.utc), ref


class FakeFirestore:
    """Dict-backed Firestore client.

    ``deny("update", "homeBookings")`` makes every matching call raise the
    same PermissionDenied error the real client raises for a rule failure.
    """

    def __init__(self):
        self.store: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._denied: Set[Tuple[str, str]] = set()

    def collection(self, name: str) -> FakeCollection:
        self.store.setdefault(name, {})
        return FakeCollection(self, name)

    def deny(self, operation: str, collection: str) -> None:
        self._denied.add((operation, collection))

    def check(self, operation: str, collection: str) -> None:
        self.store.setdefault(collection, {})
        if (operation, collection) in self._denied:
            raise google_exceptions.PermissionDenied("Missing or insufficient permissions.")

    def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Seed a document directly, bypassing denials."""
        self.store.setdefault(collection, {})[doc_id] = copy.deepcopy(data)
        return {**data, "id": doc_id}

    def docs(self, collection: str) -> List[Dict[str, Any]]:
        return [{**data, "id": doc_id} for doc_id, data in self.store.get(collection, {}).items()]


class FakeCompletions:
    def __init__(self, replies: List[Optional[str]]):
        self._replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        content = self._replies.pop(0) if self._replies else None
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeOpenAI:
    """Returns canned chat completion replies in order."""

    def __init__(self, *replies: Any):
        contents = [r if r is None or isinstance(r, str) else json.dumps(r) for r in replies]
        self.chat = SimpleNamespace(completions=FakeCompletions(contents))

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.chat.completions.calls


TEACHER = {
    "id": "teacher-1",
    "name": "Ravi Sharma",
    "email": "ravi@example.com",
    "mobileNumber": "9811111111",
    "role": "teacher",
    "teacherType": "coaching",
    "subjects": ["Physics", "Maths"],
    "whatsappNumber": "+91 98111 11111",
    "coins": 0,
    "streak": 0,
}

STUDENT = {
    "id": "student-1",
    "name": "Asha Verma",
    "email": "9822222222@edconnect.pro",
    "mobileNumber": "9822222222",
    "role": "student",
    "classLevel": "Class 10",
    "parentMobileNumber": "9833333333",
    "status": "approved",
    "coins": 0,
    "streak": 0,
}

ADMIN = {
    "id": "admin-1",
    "name": "Site Admin",
    "email": "admin@example.com",
    "role": "admin",
}
