"""Tenant-scoped classes. Model named SchoolClass to avoid Python 'class' keyword."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class SchoolClass(Base):
    """Class roster owned by the roster service; read here for teacher/student ownership checks."""

    __tablename__ = "classes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False)
    name = Column(String(50), nullable=False)
    # Supervising teacher (users.id)
    supervisor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    supervisor = relationship("User", foreign_keys=[supervisor_id])
