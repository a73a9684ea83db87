import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import relationship

from app.db.session import Base


class AcademicYear(Base):
    """
    Academic year per tenant. At most one per tenant can be is_current = true, and years of one tenant
    never overlap. Locked years are read-only until explicitly unlocked; the lock also covers their terms.
    """

    __tablename__ = "academic_years"
    __table_args__ = (
        # Storage backstop for the single-current rule; the rule engine clears other flags first.
        Index(
            "uq_academic_year_tenant_current",
            "tenant_id",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current = 1"),
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)  # e.g. "2025-2026"
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    is_locked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    tenant = relationship("Tenant", backref="academic_years")
    terms = relationship("Term", back_populates="academic_year", order_by="Term.start_date")
