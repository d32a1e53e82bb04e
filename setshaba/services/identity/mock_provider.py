import hashlib
import logging
import secrets
import threading
import time
import uuid
from typing import Dict

from .base import IdentityError, IdentityProvider, Session

logger = logging.getLogger(__name__)


class MockIdentityProvider(IdentityProvider):
    """
    In-memory identity provider for local development and tests.

    Passwords are stored as salted SHA-256 digests and tokens are opaque
    random strings held in memory. Nothing survives a restart.
    """

    TOKEN_TTL_SECONDS = 3600

    def __init__(self):
        self._lock = threading.RLock()
        self._accounts: Dict[str, Dict[str, str]] = {}  # email -> {uid, salt, password_hash}
        self._tokens: Dict[str, Dict] = {}  # token -> {uid, expires_at}

    @staticmethod
    def _hash(password: str, salt: str) -> str:
        return hashlib.sha256(f"{salt}{password}".encode()).hexdigest()

    def sign_up(self, email: str, password: str) -> str:
        email = email.strip().lower()
        with self._lock:
            if email in self._accounts:
                raise IdentityError("Email already registered")
            salt = secrets.token_hex(8)
            uid = uuid.uuid4().hex
            self._accounts[email] = {"uid": uid, "salt": salt, "password_hash": self._hash(password, salt)}
        logger.info(f"Mock identity account created: {uid}")
        return uid

    def sign_in(self, email: str, password: str) -> Session:
        email = email.strip().lower()
        with self._lock:
            account = self._accounts.get(email)
            if not account or not secrets.compare_digest(
                account["password_hash"], self._hash(password, account["salt"])
            ):
                raise IdentityError("INVALID_LOGIN_CREDENTIALS")
            return self.issue_token(account["uid"])

    def issue_token(self, uid: str) -> Session:
        """Mint a session for an existing uid (used by sign_in and test fixtures)."""
        token = secrets.token_urlsafe(32)
        expires_at = int(time.time()) + self.TOKEN_TTL_SECONDS
        with self._lock:
            self._tokens[token] = {"uid": uid, "expires_at": expires_at}
        return Session(uid=uid, access_token=token, refresh_token=secrets.token_urlsafe(32), expires_at=expires_at)

    def verify_token(self, token: str) -> str:
        with self._lock:
            entry = self._tokens.get(token)
        if entry is None:
            raise IdentityError("Invalid token")
        if entry["expires_at"] < time.time():
            raise IdentityError("Token expired")
        return entry["uid"]

    def delete_user(self, uid: str) -> None:
        with self._lock:
            for email, account in list(self._accounts.items()):
                if account["uid"] == uid:
                    del self._accounts[email]
            for token, entry in list(self._tokens.items()):
                if entry["uid"] == uid:
                    del self._tokens[token]
