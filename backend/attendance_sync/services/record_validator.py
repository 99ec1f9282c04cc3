"""Per-record validation for attendance sync.

Raw client payloads are untrusted dicts. :class:`RecordValidator` turns each
one into either a :class:`ValidatedRecord` (the only type the committer
accepts) or a :class:`RecordRejection` listing every problem found.
"""
import re
from dataclasses import dataclass
from datetime import datetime, date, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from attendance_sync.models.attendance_log import AttendanceStatus, CaptureMethod
from attendance_sync.utils.errors import (
    ReferentialError, ShapeError, StoreError, SyncError, TemporalError
)

DUPLICATE_WARNING = 'Attendance record already exists for this student on this date (will be updated)'

ID_FIELDS = ('studentId', 'facultyId', 'sectionId')

# fromisoformat before Python 3.11 only takes 3 or 6 fraction digits
FRACTION_PATTERN = re.compile(r'(?<=:\d{2})\.(\d+)')


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ValidatedRecord:
    """A record that passed every check and may be committed."""
    record_id: int
    student_id: str
    faculty_id: str
    section_id: str
    timestamp: datetime
    attendance_date: date
    status: AttendanceStatus
    capture_method: CaptureMethod
    has_existing_entry: bool = False
    warnings: Tuple[str, ...] = ()

    @property
    def conflict_key(self) -> Tuple[str, date]:
        return self.student_id, self.attendance_date


@dataclass(frozen=True)
class RecordRejection:
    """A record excluded from commit, with all of its errors."""
    record_id: int
    errors: Tuple[SyncError, ...]

    @property
    def error_type(self) -> str:
        return self.errors[0].kind

    @property
    def retryable(self) -> bool:
        return any(e.retryable for e in self.errors)

    @property
    def message(self) -> str:
        return '; '.join(str(e) for e in self.errors)


def client_record_id(raw: Any, index: int) -> int:
    """The client's local id when it sent one, else the position in the batch."""
    if isinstance(raw, dict):
        value = raw.get('id')
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return index


def normalize_iso(value: str) -> str:
    """Map a trailing Z to +00:00 and pad or trim fractional seconds to microseconds."""
    value = value.strip().replace('Z', '+00:00')
    return FRACTION_PATTERN.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), value, count=1)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or epoch milliseconds into an aware UTC datetime."""
    if isinstance(value, bool):
        return None

    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        elif isinstance(value, str) and value.strip():
            parsed = datetime.fromisoformat(normalize_iso(value))
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class RecordValidator:
    """Classify submitted records as acceptable or rejected."""

    def __init__(self, store, retention_days: int = 30,
                 clock: Callable[[], datetime] = utc_clock):
        self.store = store
        self.retention_days = retention_days
        self.clock = clock

    def validate(self, raw: Any, index: int) -> Union[ValidatedRecord, RecordRejection]:
        record_id = client_record_id(raw, index)

        fields, errors = self.check_shape(raw)
        if errors:
            return RecordRejection(record_id, tuple(errors))

        warnings: List[str] = []
        try:
            errors = self.check_references(fields)
            errors.extend(self.check_timestamp(fields['timestamp'], warnings))
            if errors:
                return RecordRejection(record_id, tuple(errors))

            attendance_date = fields['timestamp'].date()
            existing = self.store.find_ledger_entry(fields['studentId'], attendance_date)
        except StoreError as e:
            return RecordRejection(record_id, (StoreError(f'Database validation error: {e}'),))

        if existing is not None:
            warnings.append(DUPLICATE_WARNING)

        return ValidatedRecord(
            record_id=record_id,
            student_id=fields['studentId'],
            faculty_id=fields['facultyId'],
            section_id=fields['sectionId'],
            timestamp=fields['timestamp'],
            attendance_date=attendance_date,
            status=fields['status'],
            capture_method=fields['captureMethod'],
            has_existing_entry=existing is not None,
            warnings=tuple(warnings)
        )

    def check_shape(self, raw: Any) -> Tuple[Dict[str, Any], List[SyncError]]:
        """Field presence, types and enum membership."""
        if not isinstance(raw, dict):
            return {}, [ShapeError('Record must be a JSON object')]

        fields: Dict[str, Any] = {}
        errors: List[SyncError] = []

        for name in ID_FIELDS:
            value = raw.get(name)
            if not isinstance(value, str) or not value.strip():
                errors.append(ShapeError(f'{name} is required and must be a non-empty string'))
            else:
                fields[name] = value.strip()

        timestamp = parse_timestamp(raw.get('timestamp'))
        if timestamp is None:
            errors.append(ShapeError('timestamp is required and must be a valid date'))
        else:
            fields['timestamp'] = timestamp

        try:
            fields['status'] = AttendanceStatus(raw.get('status'))
        except ValueError:
            errors.append(ShapeError('status must be either "present" or "absent"'))

        try:
            fields['captureMethod'] = CaptureMethod(raw.get('captureMethod'))
        except ValueError:
            errors.append(ShapeError('captureMethod must be either "ml" or "manual"'))

        return fields, errors

    def check_references(self, fields: Dict[str, Any]) -> List[SyncError]:
        """Student, faculty and section must exist and agree with each other."""
        errors: List[SyncError] = []

        student = self.store.find_student_by_id(fields['studentId'])
        if student is None:
            errors.append(ReferentialError('Student not found'))
        else:
            if not student.is_active:
                errors.append(ReferentialError('Student is not active'))
            if student.section_id != fields['sectionId']:
                errors.append(ReferentialError('Student does not belong to the specified section'))

        faculty = self.store.find_faculty_by_id(fields['facultyId'])
        if faculty is None:
            errors.append(ReferentialError('Faculty not found'))
        elif not faculty.is_active:
            errors.append(ReferentialError('Faculty is not active'))

        section = self.store.find_section_by_id(fields['sectionId'])
        if section is None:
            errors.append(ReferentialError('Section not found'))
        elif section.faculty_id != fields['facultyId']:
            errors.append(ReferentialError('Faculty does not have access to this section'))

        return errors

    def check_timestamp(self, timestamp: datetime, warnings: List[str]) -> List[SyncError]:
        """Future timestamps are rejected; stale ones only warn."""
        now = self.clock()
        if timestamp > now:
            return [TemporalError('Future timestamp: attendance timestamp cannot be in the future')]

        if timestamp < now - timedelta(days=self.retention_days):
            warnings.append(f'Attendance record is more than {self.retention_days} days old')
        return []
