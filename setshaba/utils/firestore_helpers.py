"""
Firestore query helpers shared by the services.

The real client and MockFirestore expose the same surface, so these helpers
work against either store.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("created_at", "updated_at", "resolved_at")


def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply a field filter using positional arguments.

    Usage:
        query = where_filter(collection, "created_by", "==", user_id)
        query = where_filter(query, "status", "==", "open")
    """
    return query.where(field_path, op_string, value)


def count_matches(query) -> int:
    """Count documents matched by a query with a server-side aggregation."""
    results = query.count().get()
    return int(results[0][0].value) if results and results[0] else 0


def _to_datetime(value: Any) -> Any:
    # Firestore returns DatetimeWithNanoseconds (a datetime); older SDKs
    # may hand back Timestamp objects with to_datetime().
    if value is None or isinstance(value, datetime):
        return value
    if hasattr(value, "to_datetime"):
        return value.to_datetime()
    logger.warning(f"Unknown timestamp type: {type(value)}")
    return None


def snapshot_to_dict(doc) -> Optional[Dict[str, Any]]:
    """
    Convert a document snapshot to a dict with its id.
    Returns None when the document does not exist.
    """
    if doc is None or not doc.exists:
        return None

    data = doc.to_dict() or {}
    data["id"] = doc.id
    for field in TIMESTAMP_FIELDS:
        if field in data:
            data[field] = _to_datetime(data[field])
    return data