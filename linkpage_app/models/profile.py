import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from linkpage_app.database.connection import Base
from linkpage_app.utils import utcnow


class Profile(Base):
    """
    Public link page for a user.

    `username` uniqueness is a database constraint; concurrent creators race
    on the insert and the loser gets an IntegrityError.
    """
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    username = Column(String(30), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=True)
    bio = Column(String(500), nullable=True)
    avatar = Column(String, nullable=True)
    theme = Column(String(50), nullable=False, default="default")

    # PRO customization
    custom_css = Column(Text, nullable=True)
    meta_title = Column(String(60), nullable=True)
    meta_description = Column(String(160), nullable=True)
    og_image = Column(String, nullable=True)
    custom_domain = Column(String(255), nullable=True)

    view_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="profile")
    links = relationship(
        "Link",
        back_populates="profile",
        order_by="Link.position",
        cascade="all, delete-orphan",
    )

    @property
    def active_links(self):
        return [link for link in self.links if link.is_active]
