import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class Student(Base):
    """
    Student enrollment fact: which user account is the student, who the parent is and which class the
    student sits in. Maintained by the roster service.
    """

    __tablename__ = "students"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    parent_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    parent = relationship("User", foreign_keys=[parent_id])
    school_class = relationship("SchoolClass", foreign_keys=[class_id])


class StudentResult(Base):
    """A graded record belonging to one student."""

    __tablename__ = "student_results"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    score = Column(Numeric(6, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student", backref="results")
