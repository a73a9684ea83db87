import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class Term(Base):
    """Subdivision of an academic year. Contained in its year's range; terms of one year never overlap."""

    __tablename__ = "terms"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    academic_year_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("academic_years.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(50), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_locked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    academic_year = relationship("AcademicYear", back_populates="terms")
