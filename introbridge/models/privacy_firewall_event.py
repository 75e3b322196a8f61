import enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..platform.database import Base


class FirewallEventType(str, enum.Enum):
    BLOCK = "BLOCK"
    UNBLOCK = "UNBLOCK"


class PrivacyFirewallEvent(Base):
    """Append-only block/unblock log. Rows are never updated or deleted."""

    __tablename__ = "privacy_firewall_events"
    __table_args__ = (
        Index("ix_privacy_firewall_events_candidate_occurred", "candidate_id", "occurred_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), index=True, nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), index=True, nullable=False)
    event_type = Column(String, nullable=False)
    # "candidate" for explicit requests, "dual_role" for automatic employer blocks
    reason = Column(String, default="candidate", nullable=False)
    occurred_at = Column(DateTime(timezone=True), nullable=False)

    candidate = relationship("Candidate", back_populates="firewall_events")
