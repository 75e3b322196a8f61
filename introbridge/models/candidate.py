import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..platform.database import Base


class VerificationStatus(str, enum.Enum):
    UNVERIFIED = "UNVERIFIED"
    BASIC = "BASIC"
    FULL = "FULL"
    PREMIUM = "PREMIUM"


class Candidate(Base):
    """A professional profile that sponsors can be introduced to."""

    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    headline = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    current_title = Column(String, nullable=True)
    current_employer = Column(String, nullable=True)
    location_city = Column(String, nullable=True)
    location_country = Column(String, nullable=True)
    years_of_experience = Column(Integer, nullable=True)

    # Contact / external profiles
    linkedin_url = Column(String, nullable=True)
    portfolio_url = Column(String, nullable=True)

    # [{"company", "title", "start_date", "end_date", "description"}]
    employment_history = Column(JSON, nullable=True)
    skills = Column(JSON, nullable=True)

    open_to_opportunities = Column(Boolean, default=True, nullable=False)
    confidential_search = Column(Boolean, default=False, nullable=False)
    # Projection of the privacy firewall log, rewritten after every append
    hide_from_org_ids = Column(JSON, nullable=True)
    verification_status = Column(String, default=VerificationStatus.UNVERIFIED.value, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="candidate")
    introduction_requests = relationship("IntroductionRequest", back_populates="candidate")
    firewall_events = relationship("PrivacyFirewallEvent", back_populates="candidate")

    @property
    def email(self) -> str | None:
        return self.user.email if self.user else None
