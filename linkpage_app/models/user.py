import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, JSON, String
from sqlalchemy.orm import relationship

from linkpage_app.database.connection import Base
from linkpage_app.utils import utcnow


class Plan(str, enum.Enum):
    FREE = "FREE"
    PRO = "PRO"


def default_features() -> dict:
    """Feature flags a freshly registered user starts with."""
    return {
        "domains": False,
        "advancedAnalytics": False,
        "ogImage": False,
        "removeBranding": False,
        "extraThemes": False,
    }


class User(Base):
    """
    Account owner.

    Plan and feature flags are denormalized onto the row and read on every
    request that needs tier gating, so a plan change applies on the next call.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    name = Column(String(100), nullable=True)
    plan = Column(Enum(Plan, name="plan"), nullable=False, default=Plan.FREE)
    features = Column(JSON, nullable=False, default=default_features)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    profile = relationship("Profile", back_populates="user", uselist=False)
    refresh_tokens = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan"
    )

    def has_feature(self, name: str) -> bool:
        return bool((self.features or {}).get(name))

    @property
    def has_advanced_analytics(self) -> bool:
        return self.plan == Plan.PRO and self.has_feature("advancedAnalytics")
