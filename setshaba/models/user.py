"""
User models for authentication and profile responses.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from setshaba.models.municipality import MunicipalitySummary


class Role(str, Enum):
    """Closed set of caller roles."""
    CITIZEN = "citizen"
    OFFICIAL = "official"


@dataclass(frozen=True)
class CurrentUser:
    """
    Authenticated caller, built once per request by identity resolution.
    """
    id: str
    role: Role
    municipality_id: Optional[str]
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_citizen(self) -> bool:
        return self.role is Role.CITIZEN

    @property
    def is_official(self) -> bool:
        return self.role is Role.OFFICIAL

    @classmethod
    def from_profile(cls, user_id: str, profile: Dict[str, Any]) -> "CurrentUser":
        return cls(
            id=user_id,
            role=Role(profile["role"]),
            municipality_id=profile.get("municipality_id"),
            name=profile.get("name"),
            email=profile.get("email"),
        )


class RegisterRequest(BaseModel):
    """Registration payload. Officials must name their municipality."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.CITIZEN
    municipality_id: Optional[str] = Field(None, min_length=1)
    home_address: Optional[str] = Field(None, max_length=500)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_official_municipality(self) -> "RegisterRequest":
        if self.role is Role.OFFICIAL and not self.municipality_id:
            raise ValueError("municipality_id is required for officials")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    """Minimal user shape embedded in report responses."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class UserProfile(BaseModel):
    """Profile as returned by /users and /auth endpoints."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Role
    municipality_id: Optional[str] = None
    home_address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    created_at: Optional[datetime] = None
    municipality: Optional[MunicipalitySummary] = None


class UserPayload(BaseModel):
    user: UserProfile


class LoginPayload(BaseModel):
    user: UserProfile
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = Field(None, description="Unix timestamp when the access token expires")
