"""
Authentication endpoints - email + password registration and login.

Credentials are checked by the identity provider; this service only keeps
the profile row next to the identity account.
"""

import logging

from fastapi import APIRouter, Depends, status

from setshaba.core.errors import DomainError, InternalError
from setshaba.core.settings import Settings
from setshaba.dependencies import get_settings, get_user_service
from setshaba.models.base import ApiResponse
from setshaba.models.user import LoginPayload, LoginRequest, RegisterRequest, UserPayload
from setshaba.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[UserPayload])
def register(
    request: RegisterRequest,
    users: UserService = Depends(get_user_service),
    app_settings: Settings = Depends(get_settings),
):
    """
    Create an account and its profile.

    Officials must name their municipality. Citizens may give one, or give
    home coordinates to have it resolved.
    """
    try:
        profile = users.register(request, allow_officials=app_settings.ALLOW_OFFICIAL_REGISTRATION)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Registration failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=UserPayload(user=profile), message="User registered successfully")


@router.post("/login", response_model=ApiResponse[LoginPayload])
def login(request: LoginRequest, users: UserService = Depends(get_user_service)):
    try:
        result = users.login(request.email, request.password)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Login failed: {e}", exc_info=True)
        raise InternalError() from e
    logger.info(f"User logged in: {result['user']['id']}")
    return ApiResponse(data=LoginPayload(**result), message="Login successful")
