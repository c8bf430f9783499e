"""
Pydantic schemas defining the contract for user identity and profiles
across the Presentation (API) and Service Layers.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from skillswap.models.definitions import Availability

from .common import PageRequest

MAX_SKILL_LENGTH = 50


def _normalize_skills(skills: list[str] | None) -> list[str] | None:
    """Trims entries, drops blanks and duplicates while keeping the original order."""
    if skills is None:
        return None
    cleaned: list[str] = []
    for skill in skills:
        skill = skill.strip()
        if not skill or skill in cleaned:
            continue
        if len(skill) > MAX_SKILL_LENGTH:
            raise ValueError(f"Skill name cannot exceed {MAX_SKILL_LENGTH} characters")
        cleaned.append(skill)
    return cleaned


# --- Input Schemas (Requests / Commands) ---


class UserRequest(BaseModel):
    """
    Schema for user registration. Credentials are handled by the identity
    layer and never reach this service.
    """

    email: EmailStr = Field(..., description="User's unique email address (stored lowercased)")
    name: str = Field(..., min_length=1, max_length=50, description="Display name")
    location: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    profile_photo: str | None = Field(default=None, description="Reference to the stored profile photo")
    skills_offered: list[str] = Field(default_factory=list, description="Skills the user can teach")
    skills_wanted: list[str] = Field(default_factory=list, description="Skills the user wants to learn")
    availability: list[Availability] = Field(default_factory=list)
    is_public: bool = Field(default=True, description="Whether the profile is discoverable")

    @field_validator("email", mode="after")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("skills_offered", "skills_wanted", mode="after")
    @classmethod
    def _clean_skills(cls, value: list[str]) -> list[str]:
        return _normalize_skills(value)


class ProfileRequest(BaseModel):
    """
    Schema for updating profile fields. Fields are optional as they are updates.
    """

    name: str | None = Field(default=None, min_length=1, max_length=50)
    location: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    profile_photo: str | None = Field(default=None)
    skills_offered: list[str] | None = Field(default=None)
    skills_wanted: list[str] | None = Field(default=None)
    availability: list[Availability] | None = Field(default=None)
    is_public: bool | None = Field(default=None)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("skills_offered", "skills_wanted", mode="after")
    @classmethod
    def _clean_skills(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_skills(value)


class DirectoryFilters(PageRequest):
    """Query for the public user directory."""

    search: str | None = Field(default=None, max_length=100)
    skill: str | None = Field(default=None, max_length=50)
    availability: Availability | None = None
    location: str | None = Field(default=None, max_length=100)
    limit: int = Field(default=12, ge=1, le=50)


# --- Output Schemas ---


class UserSummary(BaseModel):
    """Minimal identity projection embedded in swap requests."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    profile_photo: str | None = None
    rating: float


class PublicProfile(BaseModel):
    """What other users may see. Rating internals are left out."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    location: str | None = None
    bio: str | None = None
    profile_photo: str | None = None
    skills_offered: list[str] = Field(default_factory=list)
    skills_wanted: list[str] = Field(default_factory=list)
    availability: list[str] = Field(default_factory=list)
    is_public: bool
    rating: float
    created_at: datetime


class UserResponse(PublicProfile):
    """
    Full user record, returned to the owner and to admins.
    """

    is_admin: bool
    is_banned: bool
    total_ratings: int
    rating_sum: int
    updated_at: datetime


class BanResult(BaseModel):
    user: UserResponse
    cancelled_request_ids: list[int] = Field(default_factory=list)
