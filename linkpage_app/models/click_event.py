from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from linkpage_app.database.connection import Base
from linkpage_app.utils import utcnow


class ClickEvent(Base):
    """Append-only record of one visitor click. Removed only with its Link."""
    __tablename__ = "click_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    link_id = Column(
        String(36), ForeignKey("links.id", ondelete="CASCADE"), nullable=False, index=True
    )
    clicked_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    ip = Column(String(45), nullable=True)
    user_agent = Column(String, nullable=True)
    referer = Column(String, nullable=True)

    link = relationship("Link", back_populates="click_events")
