"""
Identity collaborator: credential verification and account creation.

Delegates password handling and token issuance to an external provider.
"""

from setshaba.services.identity.base import IdentityError, IdentityProvider, Session
from setshaba.services.identity.firebase_provider import FirebaseIdentityProvider
from setshaba.services.identity.mock_provider import MockIdentityProvider
from setshaba.services.identity.registry import get_identity_provider

__all__ = [
    "IdentityError",
    "IdentityProvider",
    "Session",
    "FirebaseIdentityProvider",
    "MockIdentityProvider",
    "get_identity_provider",
]
