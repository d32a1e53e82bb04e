import logging

from setshaba.config.firebase import initialize_firebase_app
from setshaba.core.settings import Settings
from .base import IdentityProvider
from .firebase_provider import FirebaseIdentityProvider
from .mock_provider import MockIdentityProvider

logger = logging.getLogger(__name__)


def get_identity_provider(app_settings: Settings) -> IdentityProvider:
    """
    Resolve the identity provider based on settings.

    Rules:
    - IDENTITY_PROVIDER='mock' -> in-memory provider.
    - Anything else -> Firebase Authentication (initializes the default
      firebase_admin app if the storage setup has not).
    """
    provider_name = (app_settings.IDENTITY_PROVIDER or "firebase").lower()

    if provider_name == "mock":
        logger.warning("Identity provider initialized: mock (accounts are not persisted)")
        return MockIdentityProvider()

    initialize_firebase_app(app_settings)
    logger.info("Identity provider initialized: firebase")
    return FirebaseIdentityProvider(web_api_key=app_settings.FIREBASE_WEB_API_KEY)
