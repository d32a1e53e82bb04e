"""
Authorization rules layered over the store.

A municipality is the tenant boundary. Officials see and change reports of
their own municipality only; citizens see the reports they authored. The
boundary is always the ``municipality_id`` stored on the report at creation,
never anything derived from the caller at request time.

Disclosure policy: an id that does not exist is reported as not found before
any entitlement check; an id (report, user or municipality) that exists but
belongs to someone else is always refused with Forbidden.
"""

import logging
from typing import Dict, Optional

from setshaba.core.errors import Forbidden
from setshaba.models.user import CurrentUser

logger = logging.getLogger(__name__)


def can_view_report(user: CurrentUser, report: Dict) -> bool:
    if user.is_citizen:
        return report.get("created_by") == user.id
    if user.is_official:
        return user.municipality_id is not None and report.get("municipality_id") == user.municipality_id
    return False


def can_view_user(user: CurrentUser, profile: Dict) -> bool:
    if profile.get("id") == user.id:
        return True
    return (
        user.is_official
        and user.municipality_id is not None
        and profile.get("municipality_id") == user.municipality_id
    )


def ensure_can_view_report(user: CurrentUser, report: Dict) -> None:
    if not can_view_report(user, report):
        logger.warning(f"Report access denied: user={user.id} report={report.get('id')}")
        raise Forbidden()


def ensure_can_view_user(user: CurrentUser, profile: Dict) -> None:
    if not can_view_user(user, profile):
        logger.warning(f"Profile access denied: user={user.id} target={profile.get('id')}")
        raise Forbidden()


def ensure_same_tenant(user: CurrentUser, municipality_id: Optional[str]) -> None:
    """Raise Forbidden unless the caller is an official of ``municipality_id``."""
    if not user.is_official or user.municipality_id is None or user.municipality_id != municipality_id:
        logger.warning(f"Cross-tenant access denied: user={user.id} municipality={municipality_id}")
        raise Forbidden()


def resolve_official_scope(user: CurrentUser, requested_municipality_id: Optional[str]) -> str:
    """
    Effective municipality filter for an official's listing.

    An explicit request for another municipality is refused, not clamped.
    """
    if not user.is_official or user.municipality_id is None:
        raise Forbidden()
    if requested_municipality_id is not None and requested_municipality_id != user.municipality_id:
        logger.warning(
            f"Cross-tenant listing denied: user={user.id} requested={requested_municipality_id}"
        )
        raise Forbidden("Access denied to reports from other municipalities")
    return user.municipality_id
