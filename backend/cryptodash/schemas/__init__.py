"""
CryptoDash - Pydantic Schemas
"""
from cryptodash.schemas.user import (
    CamelModel,
    NotificationSettings,
    PrivacySettings,
    UserPublic,
    UserRegister,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    SessionResponse,
    UserProfileUpdate,
    UserSettingsUpdate,
    PasswordChange,
    Message,
    SuccessMessage,
)

from cryptodash.schemas.favorite import (
    FavoriteCreate,
    Favorite,
    FavoriteAddResponse,
    FavoriteRemoveResponse,
)
