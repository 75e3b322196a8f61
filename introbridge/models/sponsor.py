from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..platform.database import Base


class Sponsor(Base):
    """An organization's hiring representative."""

    __tablename__ = "sponsors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), index=True, nullable=False)
    job_title = Column(String, nullable=True)
    can_send_introductions = Column(Boolean, default=True, nullable=False)
    can_create_roles = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="sponsor")
    organization = relationship("Organization", back_populates="sponsors")
