import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..platform.database import Base


class IntroductionStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"
    WITHDRAWN = "WITHDRAWN"


ACTIVE_INTRODUCTION_STATUSES = (IntroductionStatus.PENDING.value, IntroductionStatus.ACCEPTED.value)


class IntroductionRequest(Base):
    """A sponsor's consent-gated connection offer. Never deleted."""

    __tablename__ = "introduction_requests"
    __table_args__ = (
        Index("ix_introduction_requests_candidate_org", "candidate_id", "organization_id"),
        Index("ix_introduction_requests_candidate_role", "candidate_id", "job_role_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_role_id = Column(Integer, ForeignKey("job_roles.id"), index=True, nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), index=True, nullable=False)
    sent_by_sponsor_id = Column(Integer, ForeignKey("sponsors.id"), index=True, nullable=False)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), index=True, nullable=False)
    status = Column(String, default=IntroductionStatus.PENDING.value, nullable=False, index=True)
    message = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    withdrawn_at = Column(DateTime(timezone=True), nullable=True)
    viewed_by_candidate = Column(Boolean, default=False, nullable=False)
    viewed_at = Column(DateTime(timezone=True), nullable=True)
    credits_refunded = Column(Boolean, default=False, nullable=False)

    job_role = relationship("JobRole", back_populates="introduction_requests")
    candidate = relationship("Candidate", back_populates="introduction_requests")
    sponsor = relationship("Sponsor")
    organization = relationship("Organization")
