"""
User profile endpoints.
"""

import logging

from fastapi import APIRouter, Depends

from setshaba.core.errors import DomainError, InternalError
from setshaba.dependencies import get_current_user, get_user_service
from setshaba.models.base import ApiResponse
from setshaba.models.user import CurrentUser, UserPayload
from setshaba.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


# Declared before /{user_id} so "me" is not captured as an id.
@router.get("/me", response_model=ApiResponse[UserPayload])
def get_me(
    caller: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    try:
        profile = users.get_profile(caller.id)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Get current user failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=UserPayload(user=profile))


@router.get("/{user_id}", response_model=ApiResponse[UserPayload])
def get_user(
    user_id: str,
    caller: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    A user's profile. Visible to the user themself and to officials of the
    same municipality.
    """
    try:
        profile = users.get_visible_profile(caller, user_id)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Get user {user_id} failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=UserPayload(user=profile))
