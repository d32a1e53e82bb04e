import logging
import time
from typing import Any, Dict, Optional

import requests
from firebase_admin import auth

from .base import IdentityError, IdentityProvider, Session

logger = logging.getLogger(__name__)


class FirebaseIdentityProvider(IdentityProvider):
    """
    Firebase Authentication provider.

    - Account creation, token verification and deletion go through the
      firebase_admin SDK (requires an initialized default app).
    - Password sign-in is not part of the Admin SDK, so it uses the Identity
      Toolkit REST endpoint with the project's web API key.
    """

    SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

    def __init__(self, web_api_key: Optional[str], timeout: float = 5.0):
        self.web_api_key = web_api_key
        self.timeout = timeout

    def sign_up(self, email: str, password: str) -> str:
        try:
            record = auth.create_user(email=email, password=password)
        except auth.EmailAlreadyExistsError:
            raise IdentityError("Email already registered")
        except ValueError as e:
            raise IdentityError(str(e))
        logger.info(f"Identity account created: {record.uid}")
        return record.uid

    def sign_in(self, email: str, password: str) -> Session:
        if not self.web_api_key:
            raise RuntimeError("FIREBASE_WEB_API_KEY is required for password sign-in")

        resp = requests.post(
            self.SIGN_IN_URL,
            params={"key": self.web_api_key},
            json={"email": email, "password": password, "returnSecureToken": True},
            timeout=self.timeout,
        )
        if resp.status_code == 400:
            data: Dict[str, Any] = resp.json()
            reason = (data.get("error") or {}).get("message", "INVALID_LOGIN_CREDENTIALS")
            logger.info(f"Sign-in rejected: {reason}")
            raise IdentityError(reason)
        resp.raise_for_status()

        data = resp.json()
        return Session(
            uid=data["localId"],
            access_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
            expires_at=int(time.time()) + int(data.get("expiresIn", 3600)),
        )

    def verify_token(self, token: str) -> str:
        try:
            claims = auth.verify_id_token(token)
        except (ValueError, auth.InvalidIdTokenError, auth.UserDisabledError) as e:
            # ExpiredIdTokenError and RevokedIdTokenError subclass InvalidIdTokenError
            raise IdentityError(str(e))
        return claims["uid"]

    def delete_user(self, uid: str) -> None:
        try:
            auth.delete_user(uid)
        except auth.UserNotFoundError:
            logger.warning(f"Identity account already gone: {uid}")
