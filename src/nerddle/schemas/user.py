"""Pydantic schemas for user records and user management."""

from datetime import datetime
from enum import StrEnum
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from nerddle.schemas.base import as_utc

CLASS_LEVELS = (8, 9, 10, 11, 12)

PLACEHOLDER_PFP = "data:image/svg+xml;utf8," + quote(
    "<svg xmlns='http://www.w3.org/2000/svg' width='256' height='256'>"
    "<rect width='100%' height='100%' fill='#d1d5db'/>"
    "<text x='50%' y='50%' dominant-baseline='middle' text-anchor='middle' "
    "fill='#6b7280' font-size='36' font-family='Arial'>N</text></svg>"
)

ADMIN_PFP = "data:image/svg+xml;utf8," + quote(
    "<svg xmlns='http://www.w3.org/2000/svg' width='400' height='400'>"
    "<rect width='100%' height='100%' fill='#7c3aed'/></svg>"
)


class UserRole(StrEnum):
    """User authorization roles."""

    USER = "user"
    ADMIN = "admin"


def _check_class_level(v: int) -> int:
    if v not in CLASS_LEVELS:
        msg = f"Class level must be one of {', '.join(map(str, CLASS_LEVELS))}"
        raise ValueError(msg)
    return v


class User(BaseModel):
    """A stored user record, also used as the session snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    username: str = Field(min_length=1)
    password: str
    email: str = ""
    fullname: str = ""
    class_level: int = 9
    bio: str = ""
    pfp: str = ""
    joined_at: datetime
    role: UserRole = UserRole.USER

    @field_validator("class_level")
    @classmethod
    def validate_class_level(cls, v: int) -> int:
        """Validate the class level is one of the enumerated grades."""
        return _check_class_level(v)

    @field_validator("joined_at")
    @classmethod
    def validate_joined_at(cls, v: datetime) -> datetime:
        """Store join times in UTC so they stay comparable."""
        return as_utc(v)

    @property
    def is_admin(self) -> bool:
        """Check if user has admin privileges."""
        return self.role == UserRole.ADMIN

    @property
    def avatar(self) -> str:
        """Profile picture to display, falling back to the placeholder."""
        return self.pfp or PLACEHOLDER_PFP


class UserCreate(BaseModel):
    """Schema for the admin "Add User" form."""

    username: str = Field(description="Unique username")
    password: str = Field(description="Plaintext password")
    fullname: str = Field(description="Display name")
    email: EmailStr = Field(description="Valid email address")
    class_level: int = Field(default=9, description="Grade (8-12)")
    bio: str = Field(default="", description="Free text biography")
    pfp: str = Field(default="", description="Profile picture URL")

    @field_validator("username", "password", "fullname")
    @classmethod
    def validate_required(cls, v: str) -> str:
        """Validate required text fields are not blank."""
        if not v.strip():
            raise ValueError("Field is required")
        return v

    @field_validator("class_level")
    @classmethod
    def validate_class_level(cls, v: int) -> int:
        """Validate the class level is one of the enumerated grades."""
        return _check_class_level(v)


class UserUpdate(BaseModel):
    """Partial update for a user record.

    Unset fields are left untouched. ``email``, ``class_level``, ``role`` and
    ``password`` only take effect when an admin applies the patch.
    """

    fullname: str | None = None
    bio: str | None = None
    pfp: str | None = None
    email: str | None = None
    class_level: int | None = None
    role: UserRole | None = None
    password: str | None = None

    @field_validator("class_level")
    @classmethod
    def validate_class_level(cls, v: int | None) -> int | None:
        """Validate the class level is one of the enumerated grades."""
        if v is None:
            return v
        return _check_class_level(v)
