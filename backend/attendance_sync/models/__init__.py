"""Models package with all models."""
from .base import BaseModel
from .faculty import Faculty
from .section import Section
from .student import Student
from .attendance_log import AttendanceLog, AttendanceStatus, CaptureMethod

__all__ = [
    'BaseModel', 'Faculty', 'Section', 'Student',
    'AttendanceLog', 'AttendanceStatus', 'CaptureMethod'
]
