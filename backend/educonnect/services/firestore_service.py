"""Data access helpers shared by every feature service.

Firestore permission failures are not broadcast anywhere: ``guarded`` turns
them into ``PermissionDeniedError`` carrying the operation and document path,
and the exception travels up to the API layer like any other error.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from educonnect.auth.firebase import initialize_firebase
from educonnect.errors import NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)


def get_firestore_db():
    """Get Firestore database instance."""
    try:
        initialize_firebase()
        return firestore.client()
    except Exception as e:
        raise RuntimeError(f"Firestore not available: {e}")


def get_db():
    """FastAPI dependency returning the Firestore client."""
    return get_firestore_db()


@contextmanager
def guarded(operation: str, path: str) -> Iterator[None]:
    """Re-raise Firestore permission failures as PermissionDeniedError."""
    try:
        yield
    except google_exceptions.PermissionDenied as e:
        logger.warning("Permission denied: %s on %s (%s)", operation, path, e)
        raise PermissionDeniedError(operation, path) from e


def to_datetime(value: Any) -> Optional[datetime]:
    """Normalize Firestore timestamps, datetimes and ISO strings to aware UTC datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def snapshot_to_dict(doc) -> Dict[str, Any]:
    """Document data with its id under ``id``."""
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def get_document(db, collection: str, doc_id: str, label: str = "Document") -> Dict[str, Any]:
    path = f"{collection}/{doc_id}"
    with guarded("get", path):
        doc = db.collection(collection).document(doc_id).get()
    if not doc.exists:
        raise NotFoundError(f"{label} not found")
    return snapshot_to_dict(doc)


def add_document(db, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
    with guarded("create", collection):
        _, doc_ref = db.collection(collection).add(data)
    return {**data, "id": doc_ref.id}


def update_document(db, collection: str, doc_id: str, updates: Dict[str, Any]) -> None:
    path = f"{collection}/{doc_id}"
    with guarded("update", path):
        db.collection(collection).document(doc_id).update(updates)


def stream_query(query, path: str) -> List[Dict[str, Any]]:
    with guarded("list", path):
        return [snapshot_to_dict(doc) for doc in query.stream()]
