"""Apply validated records to the attendance ledger, one transaction each."""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from attendance_sync.services.record_validator import ValidatedRecord
from attendance_sync.utils.errors import CommitTimeoutError, StoreError

logger = logging.getLogger(__name__)


@dataclass
class CommitOutcome:
    """Result of committing one record."""
    record: ValidatedRecord
    entry: Optional[Dict[str, Any]] = None
    created: bool = False
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchCommitter:
    """Insert-or-update per conflict key; last write processed wins."""

    def __init__(self, store, timeout: Optional[float] = 5.0,
                 monotonic: Callable[[], float] = time.monotonic):
        self.store = store
        self.timeout = timeout
        self.monotonic = monotonic

    def commit(self, record: ValidatedRecord) -> CommitOutcome:
        if not isinstance(record, ValidatedRecord):
            raise TypeError('Only validated records can be committed')

        started = self.monotonic()
        student_id, attendance_date = record.conflict_key

        try:
            with self.store.transaction(timeout=self.timeout):
                existing = self.store.find_ledger_entry(student_id, attendance_date)
                if existing is None:
                    entry = self.store.insert_ledger_entry(record)
                    created = True
                else:
                    entry = self.store.update_ledger_entry(student_id, attendance_date, {
                        'status': record.status,
                        'capture_method': record.capture_method,
                        'faculty_id': record.faculty_id,
                        'section_id': record.section_id,
                    })
                    created = False

                elapsed = self.monotonic() - started
                if self.timeout and elapsed > self.timeout:
                    raise CommitTimeoutError(
                        f'Commit exceeded {self.timeout:g}s timeout ({elapsed:.2f}s)'
                    )

                # Serialize before commit expires the row's attributes
                payload = entry.to_dict()
        except StoreError as e:
            logger.info('Record %s failed to commit: %s', record.record_id, e)
            return CommitOutcome(record=record, error=e)

        return CommitOutcome(record=record, entry=payload, created=created)
