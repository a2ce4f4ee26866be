"""
CryptoDash - User Model
"""
import uuid

from sqlalchemy import Column, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship

from cryptodash.db.database import Base, utcnow


def default_notifications() -> dict:
    return {
        "price_alerts": True,
        "push_notifications": False,
        "email_notifications": True,
        "sound_enabled": True,
    }


def default_privacy() -> dict:
    return {
        "analytics": True,
        "data_sharing": False,
        "profile_visibility": "private",
    }


class User(Base):
    """User model for authentication, profile and preferences."""

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    phone = Column(String(30), nullable=False, default="")
    location = Column(String(100), nullable=False, default="")
    bio = Column(Text, nullable=False, default="")
    company = Column(String(100), nullable=False, default="")
    website = Column(String(200), nullable=False, default="")

    # Preferences
    language = Column(String(5), nullable=False, default="fr")
    timezone = Column(String(64), nullable=False, default="UTC")
    theme = Column(String(10), nullable=False, default="dark")
    notifications = Column(JSON, nullable=False, default=default_notifications)
    privacy = Column(JSON, nullable=False, default=default_privacy)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_login = Column(DateTime(timezone=True), nullable=True)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    favorites = relationship(
        "Favorite",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Favorite.added_at",
    )

    def __repr__(self):
        return f"<User {self.email}>"
