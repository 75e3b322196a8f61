from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..platform.database import Base
from ..shared.utils import ensure_utc, utcnow


class Organization(Base):
    __tablename__ = "organizations"
    __table_args__ = (
        CheckConstraint("introduction_credit_balance >= 0", name="ck_organizations_credit_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True)
    # Mutated only through components.credits.ledger
    introduction_credit_balance = Column(Integer, default=0, server_default="0", nullable=False)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    sponsors = relationship("Sponsor", back_populates="organization")
    job_roles = relationship("JobRole", back_populates="organization")
    credit_ledger_entries = relationship("CreditLedgerEntry", back_populates="organization")

    def subscription_active_at(self, now: datetime) -> bool:
        """No expiry means the subscription never lapses."""
        expires = ensure_utc(self.subscription_expires_at)
        return expires is None or expires > ensure_utc(now)

    @property
    def subscription_active(self) -> bool:
        return self.subscription_active_at(utcnow())
