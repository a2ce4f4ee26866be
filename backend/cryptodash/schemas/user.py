"""
CryptoDash - Pydantic Schemas
User, Authentication and Settings Schemas
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool
from pydantic.alias_generators import to_camel


Language = Literal["fr", "en"]
Theme = Literal["dark", "light"]
ProfileVisibility = Literal["public", "friends", "private"]


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys; accepts snake_case too."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =========================
# Preference Groups
# =========================

class NotificationSettings(CamelModel):
    """Notification preferences."""
    price_alerts: bool = True
    push_notifications: bool = False
    email_notifications: bool = True
    sound_enabled: bool = True


class PrivacySettings(CamelModel):
    """Privacy preferences."""
    analytics: bool = True
    data_sharing: bool = False
    profile_visibility: ProfileVisibility = "private"


class NotificationSettingsUpdate(CamelModel):
    """Partial update of notification preferences."""
    price_alerts: Optional[StrictBool] = None
    push_notifications: Optional[StrictBool] = None
    email_notifications: Optional[StrictBool] = None
    sound_enabled: Optional[StrictBool] = None


class PrivacySettingsUpdate(CamelModel):
    """Partial update of privacy preferences."""
    analytics: Optional[StrictBool] = None
    data_sharing: Optional[StrictBool] = None
    profile_visibility: Optional[ProfileVisibility] = None


# =========================
# User Schemas
# =========================

class UserPublic(CamelModel):
    """User as returned to callers. Never carries the password hash."""
    id: str
    email: str
    username: str
    phone: str = ""
    location: str = ""
    bio: str = ""
    company: str = ""
    website: str = ""
    language: str = "fr"
    timezone: str = "UTC"
    theme: str = "dark"
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None


class UserRegister(CamelModel):
    """Schema for registration."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    username: Optional[str] = Field(None, max_length=50)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "alice@example.com",
                "password": "Passw0rd!",
                "username": "alice",
            }
        }
    )


class RegisterResponse(BaseModel):
    """Schema for a successful registration."""
    message: str
    redirect: str = "/login"


class LoginRequest(CamelModel):
    """Schema for login."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(CamelModel):
    """Schema for login response."""
    user: UserPublic
    token: str
    message: str = "Login successful"


class SessionResponse(CamelModel):
    """Schema for session checks."""
    authenticated: bool
    user: Optional[dict] = None
    error: Optional[str] = None


class UserProfileUpdate(CamelModel):
    """Schema for profile updates. Unknown keys are ignored."""
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    location: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    company: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=200)


class UserSettingsUpdate(CamelModel):
    """Schema for settings updates. Nested groups are merged."""
    language: Optional[Language] = None
    timezone: Optional[str] = Field(None, min_length=1, max_length=64)
    theme: Optional[Theme] = None
    notifications: Optional[NotificationSettingsUpdate] = None
    privacy: Optional[PrivacySettingsUpdate] = None


class PasswordChange(CamelModel):
    """Schema for password change."""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=128)


# =========================
# Response Schemas
# =========================

class Message(BaseModel):
    """Generic message response."""
    message: str


class SuccessMessage(BaseModel):
    """Message response with a success flag."""
    success: bool = True
    message: str
