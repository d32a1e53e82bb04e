"""
FastAPI dependencies: collaborator handles, identity resolution and role gates.

Collaborators live on ``app.state`` (set by ``create_app``), so tests can
pass fakes instead of patching module globals.

Gate order for a protected route: bearer token -> profile -> role -> handler.
A failing gate raises before the handler runs and writes nothing.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, Request

from setshaba.core.errors import Forbidden, InternalError, Unauthenticated
from setshaba.core.settings import Settings
from setshaba.models.user import CurrentUser, Role
from setshaba.services.geocoding import MunicipalityResolver
from setshaba.services.identity import IdentityError, IdentityProvider
from setshaba.services.municipality_service import MunicipalityService
from setshaba.services.report_service import ReportService
from setshaba.services.user_service import UserService
from setshaba.services.vote_service import VoteService

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request):
    return request.app.state.db


def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_resolver(request: Request) -> MunicipalityResolver:
    return request.app.state.resolver


def get_user_service(
    db=Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    resolver: MunicipalityResolver = Depends(get_resolver),
) -> UserService:
    return UserService(db, identity=identity, resolver=resolver)


def get_report_service(db=Depends(get_db), resolver: MunicipalityResolver = Depends(get_resolver)) -> ReportService:
    return ReportService(db, resolver=resolver)


def get_vote_service(db=Depends(get_db)) -> VoteService:
    return VoteService(db)


def get_municipality_service(db=Depends(get_db)) -> MunicipalityService:
    return MunicipalityService(db)


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthenticated("Access token required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Access token required")
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(None),
    identity: IdentityProvider = Depends(get_identity),
    db=Depends(get_db),
) -> CurrentUser:
    """
    Resolve the bearer credential to the caller's profile.

    Missing/invalid tokens and tokens without a profile are Unauthenticated;
    provider or store failures are Internal.
    """
    token = _bearer_token(authorization)

    try:
        uid = identity.verify_token(token)
    except IdentityError:
        raise Unauthenticated("Invalid or expired token")
    except Exception as e:
        logger.error(f"Token verification failed: {e}", exc_info=True)
        raise InternalError() from e

    try:
        profile = UserService(db).get_user(uid)
    except Exception as e:
        logger.error(f"Profile lookup failed for {uid}: {e}", exc_info=True)
        raise InternalError() from e

    if profile is None:
        raise Unauthenticated("Invalid or expired token")

    try:
        return CurrentUser.from_profile(uid, profile)
    except (KeyError, ValueError):
        logger.error(f"Malformed profile for {uid}: role={profile.get('role')!r}")
        raise Unauthenticated("Invalid or expired token")


def require_role(role: Role) -> Callable[..., CurrentUser]:
    """Dependency factory: the resolved caller must hold ``role``."""

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role is not role:
            logger.warning(f"Role check failed: user={user.id} role={user.role.value} required={role.value}")
            raise Forbidden(f"{role.value.capitalize()} access required")
        return user

    return dependency


require_citizen = require_role(Role.CITIZEN)
require_official = require_role(Role.OFFICIAL)
