"""
User Service - profiles in Firestore, accounts via the identity provider.
"""

import logging
from typing import Dict, Optional

from firebase_admin import firestore

from setshaba.core.errors import (
    Forbidden,
    InvalidCredentials,
    NotFound,
    RegistrationFailed,
    ValidationFailed,
)
from setshaba.models.user import CurrentUser, RegisterRequest, Role
from setshaba.services.access_control import ensure_can_view_user
from setshaba.services.geocoding import MunicipalityResolver
from setshaba.services.identity import IdentityError, IdentityProvider, Session
from setshaba.services.municipality_service import MunicipalityService, summarize
from setshaba.utils.firestore_helpers import snapshot_to_dict

logger = logging.getLogger(__name__)

COLLECTION = "users"

PROFILE_FIELDS = (
    "id", "name", "email", "role", "municipality_id",
    "home_address", "lat", "lng", "created_at",
)


class UserService:
    """
    Service for user profiles.

    Profiles are stored under users/{uid} where uid is the identity
    provider's account id.
    """

    def __init__(self, db, identity: Optional[IdentityProvider] = None, resolver: Optional[MunicipalityResolver] = None):
        self.db = db
        self.identity = identity
        self.resolver = resolver
        self.municipalities = MunicipalityService(db)

    def get_user(self, user_id: str) -> Optional[Dict]:
        """Raw profile document, or None."""
        if not user_id:
            return None
        return snapshot_to_dict(self.db.collection(COLLECTION).document(user_id).get())

    def get_profile(self, user_id: str) -> Dict:
        """Profile shaped for responses, joined with its municipality."""
        user = self.get_user(user_id)
        if user is None:
            raise NotFound("User not found")
        return self._shape_profile(user)

    def get_visible_profile(self, caller: CurrentUser, user_id: str) -> Dict:
        """
        Profile of ``user_id`` if the caller may see it: their own, or an
        official of the same municipality. Missing ids are NotFound first.
        """
        user = self.get_user(user_id)
        if user is None:
            raise NotFound("User not found")
        ensure_can_view_user(caller, user)
        return self._shape_profile(user)

    def get_official_in_municipality(self, user_id: str, municipality_id: str) -> Optional[Dict]:
        user = self.get_user(user_id)
        if user is None:
            return None
        if user.get("role") != Role.OFFICIAL.value or user.get("municipality_id") != municipality_id:
            return None
        return user

    def register(self, request: RegisterRequest, allow_officials: bool = True) -> Dict:
        """
        Create the identity account and the profile row.

        Everything that reads the store runs before the identity account is
        created. If the profile write then fails the account is deleted so
        that no half-registered user remains.
        """
        if request.role is Role.OFFICIAL and not allow_officials:
            raise Forbidden("Official registration is disabled")

        if request.municipality_id and not self.municipalities.exists(request.municipality_id):
            raise ValidationFailed("Unknown municipality", details=[{"loc": ["body", "municipality_id"]}])

        municipality_id = request.municipality_id
        if (
            request.role is Role.CITIZEN
            and municipality_id is None
            and request.lat is not None
            and request.lng is not None
            and self.resolver is not None
        ):
            municipality_id = self.resolver.resolve(self.db, request.lat, request.lng)

        try:
            uid = self.identity.sign_up(request.email, request.password)
        except IdentityError as e:
            raise RegistrationFailed(str(e))

        profile = {
            "name": request.name,
            "email": request.email.lower(),
            "role": request.role.value,
            "municipality_id": municipality_id,
            "home_address": request.home_address,
            "lat": request.lat,
            "lng": request.lng,
            "created_at": firestore.SERVER_TIMESTAMP,
        }

        try:
            self.db.collection(COLLECTION).document(uid).set(profile)
        except Exception as e:
            logger.error(f"User profile creation failed for {uid}: {e}", exc_info=True)
            self.identity.delete_user(uid)
            raise RegistrationFailed("Failed to create user profile")

        logger.info(f"User registered: {uid} ({request.role.value})")
        return self.get_profile(uid)

    def login(self, email: str, password: str) -> Dict:
        try:
            session: Session = self.identity.sign_in(email, password)
        except IdentityError:
            raise InvalidCredentials()

        user = self.get_user(session.uid)
        if user is None:
            raise NotFound("User profile not found")

        return {
            "user": self._shape_profile(user),
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_at": session.expires_at,
        }

    def _shape_profile(self, user: Dict) -> Dict:
        profile = {field: user.get(field) for field in PROFILE_FIELDS}
        municipality = self.municipalities.get_municipality(user.get("municipality_id"))
        profile["municipality"] = summarize(municipality) if municipality else None
        return profile


def summarize_user(user: Optional[Dict]) -> Optional[Dict]:
    if not user:
        return None
    return {"id": user["id"], "name": user.get("name"), "email": user.get("email")}
