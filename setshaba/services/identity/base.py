from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class IdentityError(Exception):
    """
    The provider rejected the request (bad credentials, duplicate email,
    invalid or expired token). Any other exception is a provider failure.
    """


@dataclass(frozen=True)
class Session:
    uid: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None


class IdentityProvider(ABC):
    """
    Abstract identity provider.

    Contract:
    - sign_up(email, password) -> uid of the new account
    - sign_in(email, password) -> Session
    - verify_token(token) -> uid the bearer token was issued to
    - delete_user(uid) removes an account (used to undo a failed registration)
    - Rejections raise IdentityError; infrastructure failures propagate as-is.
    """

    @abstractmethod
    def sign_up(self, email: str, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Session:
        raise NotImplementedError

    @abstractmethod
    def verify_token(self, token: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def delete_user(self, uid: str) -> None:
        raise NotImplementedError
