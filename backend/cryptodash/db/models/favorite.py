"""
CryptoDash - Favorite Model
"""
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from cryptodash.db.database import Base, utcnow


class Favorite(Base):
    """A coin pinned by a user. (user_id, symbol) is unique."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_favorites_user_symbol"),
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    symbol = Column(String(100), nullable=False)
    name = Column(String(200), nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    user = relationship("User", back_populates="favorites")

    def __repr__(self):
        return f"<Favorite {self.symbol}>"
