"""Classroom model with its embedded student and attendance sequences.

Students and attendance records have no life outside their classroom: they are
stored in child tables, ordered by insertion, and removed with the parent.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, JSON, Index, CheckConstraint
)
from sqlalchemy.orm import relationship

from classroom_api.database import Base


def generate_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Classroom(Base):
    __tablename__ = "classrooms"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(120), nullable=True)
    start_year = Column(Integer, nullable=False)
    end_year = Column(Integer, nullable=False)
    image_url = Column(String(500), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner = relationship("User", back_populates="classrooms")
    students = relationship(
        "ClassroomStudent",
        back_populates="classroom",
        order_by="ClassroomStudent.seq",
        cascade="all, delete-orphan",
    )
    attendance_records = relationship(
        "AttendanceRecord",
        back_populates="classroom",
        order_by="AttendanceRecord.seq",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("start_year <= end_year", name="ck_classrooms_year_range"),
        Index("ix_classrooms_created_by_end_year", "created_by", "end_year"),
    )

    def __repr__(self):
        return f"<Classroom(id='{self.id}', name='{self.name}', created_by={self.created_by})>"


class ClassroomStudent(Base):
    __tablename__ = "classroom_students"

    # seq keeps insertion order; id is the identifier exposed to clients
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False, default=generate_id)
    classroom_id = Column(String(32), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    adm_no = Column(String(50), nullable=False)
    image_url = Column(String(500), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    classroom = relationship("Classroom", back_populates="students")

    def __repr__(self):
        return f"<ClassroomStudent(id='{self.id}', classroom_id='{self.classroom_id}', adm_no='{self.adm_no}')>"


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False, default=generate_id)
    classroom_id = Column(String(32), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(DateTime(timezone=True), nullable=False)
    presentees = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    classroom = relationship("Classroom", back_populates="attendance_records")

    __table_args__ = (
        Index("ix_attendance_records_classroom_day", "classroom_id", "day"),
    )

    def __repr__(self):
        return f"<AttendanceRecord(id='{self.id}', classroom_id='{self.classroom_id}', day={self.day})>"
