import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class Tenant(Base):
    """
    Tenant (institution) in the multi-tenant platform.

    All calendar entities belong to exactly one tenant. The tenant row is also the lock target that
    serializes calendar writers of one tenant (see UnitOfWork).
    """

    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")
