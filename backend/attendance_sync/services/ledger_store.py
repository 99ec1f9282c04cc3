"""SQLAlchemy-backed store used by the sync reconciler.

Reference lookups (students, faculty, sections) are read-only. Ledger writes
happen inside :meth:`LedgerStore.transaction`, one transaction per record, so
a failing record never rolls back its siblings.
"""
import logging
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from attendance_sync import db
from attendance_sync.models import AttendanceLog, Faculty, Section, Student
from attendance_sync.utils.errors import StoreError, StoreUnavailableError
from attendance_sync.utils.helpers import utcnow

logger = logging.getLogger(__name__)


class LedgerStore:
    """Persistence operations the reconciler depends on."""

    def __init__(self, session=None):
        self.session = session or db.session

    def ping(self) -> None:
        """Acquire a connection once; raise StoreUnavailableError if we cannot."""
        try:
            self.session.execute(text('SELECT 1'))
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreUnavailableError(str(e)) from e

    # Reference lookups

    def find_student_by_id(self, student_id: str) -> Optional[Student]:
        return self._get(Student, student_id)

    def find_faculty_by_id(self, faculty_id: str) -> Optional[Faculty]:
        return self._get(Faculty, faculty_id)

    def find_section_by_id(self, section_id: str) -> Optional[Section]:
        return self._get(Section, section_id)

    # Ledger

    def find_ledger_entry(self, student_id: str, entry_date: date) -> Optional[AttendanceLog]:
        try:
            return self.session.query(AttendanceLog).filter_by(
                student_id=student_id, date=entry_date
            ).first()
        except SQLAlchemyError as e:
            # PostgreSQL refuses further statements until the failed transaction ends
            self.session.rollback()
            raise StoreError(str(e)) from e

    def insert_ledger_entry(self, record) -> AttendanceLog:
        """Insert a new ledger row for a validated record."""
        entry = AttendanceLog(
            student_id=record.student_id,
            faculty_id=record.faculty_id,
            section_id=record.section_id,
            date=record.attendance_date,
            status=record.status,
            capture_method=record.capture_method,
            synced_at=utcnow()
        )
        try:
            self.session.add(entry)
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        return entry

    def update_ledger_entry(self, student_id: str, entry_date: date, fields: Dict) -> AttendanceLog:
        """Overwrite the mutable fields of the entry at (student_id, entry_date)."""
        entry = self.find_ledger_entry(student_id, entry_date)
        if entry is None:
            raise StoreError(f'No attendance entry for student {student_id} on {entry_date}')

        for key, value in fields.items():
            setattr(entry, key, value)
        entry.synced_at = utcnow()

        try:
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        return entry

    @contextmanager
    def transaction(self, timeout: Optional[float] = None) -> Iterator[None]:
        """Commit on success, roll back and raise StoreError on any failure."""
        try:
            if timeout and self.session.get_bind().dialect.name == 'postgresql':
                # Only lasts until the end of this record's transaction
                self.session.execute(
                    text(f'SET LOCAL statement_timeout = {int(timeout * 1000)}')
                )
            yield
            self.session.commit()
        except StoreError as e:
            self.session.rollback()
            logger.warning('Rolled back ledger write: %s', e)
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning('Rolled back ledger write: %s', e)
            raise StoreError(str(e)) from e
        except Exception:
            self.session.rollback()
            raise

    def _get(self, model, id_: str):
        try:
            return self.session.get(model, id_)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(str(e)) from e
