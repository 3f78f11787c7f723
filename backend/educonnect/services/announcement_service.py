import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from educonnect.services.firestore_service import add_document, stream_query, to_datetime

logger = logging.getLogger(__name__)

MARQUEE_SEPARATOR = " ••• "

# Announcement targets are plural, profile roles are singular
ROLE_TARGETS = {
    "teacher": "teachers",
    "student": "students",
}


def targets_for_role(role: str) -> List[str]:
    targets = ["all"]
    if role in ROLE_TARGETS:
        targets.append(ROLE_TARGETS[role])
    return targets


def filter_active(announcements: Iterable[Dict[str, Any]], now: datetime) -> List[Dict[str, Any]]:
    """Keep announcements without an expiry or expiring after ``now``."""
    active = []
    for announcement in announcements:
        expires_at = to_datetime(announcement.get("expiresAt"))
        if expires_at is None or expires_at > now:
            active.append(announcement)
    return active


def marquee_text(announcements: Iterable[Dict[str, Any]]) -> str:
    return MARQUEE_SEPARATOR.join(a["message"] for a in announcements)


def create_announcement(db, message: str, target: str, expires_at=None) -> Dict[str, Any]:
    return add_document(db, "announcements", {
        "message": message.strip(),
        "target": target,
        "createdAt": datetime.now(timezone.utc),
        "expiresAt": expires_at,
    })


def list_active_announcements(db, role: str, now: datetime) -> List[Dict[str, Any]]:
    query = db.collection("announcements").where("target", "in", targets_for_role(role))
    announcements = stream_query(query, "announcements")
    return filter_active(announcements, now)


# Firestore caps the values of an "in" filter
IN_QUERY_LIMIT = 30


def create_class_announcement(db, class_data: Dict[str, Any], teacher: Dict[str, Any], content: str) -> Dict[str, Any]:
    """Post an announcement to one class. Class announcements carry no ``target``,
    so the marquee query never picks them up."""
    created = add_document(db, "announcements", {
        "classId": class_data["id"],
        "classTitle": class_data.get("title", ""),
        "teacherId": teacher["id"],
        "teacherName": teacher.get("name", ""),
        "content": content.strip(),
        "createdAt": datetime.now(timezone.utc),
    })
    logger.info("Class announcement %s posted to %s", created["id"], class_data["id"])
    return created


def list_class_announcements(db, class_ids: List[str]) -> List[Dict[str, Any]]:
    """Announcements of the given classes, newest first."""
    announcements: List[Dict[str, Any]] = []
    unique_ids = list(dict.fromkeys(class_ids))
    for start in range(0, len(unique_ids), IN_QUERY_LIMIT):
        chunk = unique_ids[start:start + IN_QUERY_LIMIT]
        query = db.collection("announcements").where("classId", "in", chunk)
        announcements.extend(stream_query(query, "announcements"))

    oldest = datetime.min.replace(tzinfo=timezone.utc)
    announcements.sort(key=lambda a: to_datetime(a.get("createdAt")) or oldest, reverse=True)
    return announcements
