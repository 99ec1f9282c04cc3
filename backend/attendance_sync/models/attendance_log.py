"""Attendance ledger: one row per student per calendar day."""
import enum

from attendance_sync import db
from attendance_sync.models.base import BaseModel
from attendance_sync.utils.helpers import utcnow


class AttendanceStatus(enum.Enum):
    """Attendance status enumeration."""
    PRESENT = 'present'
    ABSENT = 'absent'


class CaptureMethod(enum.Enum):
    """How the observation was made on the device."""
    ML = 'ml'          # face recognition
    MANUAL = 'manual'  # marked by hand


def enum_values(enum_class):
    """Persist enum values ('present') rather than member names ('PRESENT')."""
    return [member.value for member in enum_class]


class AttendanceLog(BaseModel):
    """Ledger entry keyed by (student_id, date)."""

    __tablename__ = 'attendance_logs'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'date', name='uq_attendance_logs_student_date'),
        db.Index('idx_attendance_logs_section_date', 'section_id', 'date'),
        db.Index('idx_attendance_logs_faculty_date', 'faculty_id', 'date'),
    )

    student_id = db.Column(
        db.String(36), db.ForeignKey('students.id', ondelete='CASCADE'), nullable=False, index=True
    )
    faculty_id = db.Column(
        db.String(36), db.ForeignKey('faculty.id', ondelete='CASCADE'), nullable=False, index=True
    )
    section_id = db.Column(
        db.String(36), db.ForeignKey('sections.id', ondelete='CASCADE'), nullable=False, index=True
    )
    date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(
        db.Enum(AttendanceStatus, name='attendance_status', values_callable=enum_values),
        nullable=False, index=True
    )
    capture_method = db.Column(
        db.Enum(CaptureMethod, name='capture_method', values_callable=enum_values),
        nullable=False
    )
    synced_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Relationships
    student = db.relationship('Student', backref=db.backref('attendance_logs', lazy='dynamic'))
    faculty = db.relationship('Faculty')
    section = db.relationship('Section')

    def __repr__(self) -> str:
        return f'<AttendanceLog {self.student_id}@{self.date}>'
