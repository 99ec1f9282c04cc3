"""Attendance sync reconciliation.

A batch of client records goes through three stages, record by record in
submission order:

1. :class:`RecordValidator` classifies the record.
2. :class:`BatchCommitter` applies it in its own transaction.
3. :class:`SyncResultAggregator` tallies the outcome.

Every record ends up either synced or failed, so
``synced_records + failed_records == total_records`` always holds.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from attendance_sync.services.batch_committer import BatchCommitter, CommitOutcome
from attendance_sync.services.record_validator import (
    RecordRejection, RecordValidator, ValidatedRecord, utc_clock
)
from attendance_sync.utils.errors import BatchShapeError
from attendance_sync.utils.validators import Validator

logger = logging.getLogger(__name__)


class SyncObserver:
    """Hooks for collecting sync metrics. Default methods do nothing."""

    def record_synced(self, record: ValidatedRecord, created: bool) -> None:
        pass

    def record_failed(self, record_id: int, error_type: str, message: str) -> None:
        pass

    def batch_completed(self, result: 'SyncResult', duration: float) -> None:
        pass


class LoggingSyncObserver(SyncObserver):
    """Writes sync activity to the application log."""

    def record_failed(self, record_id: int, error_type: str, message: str) -> None:
        logger.debug('Record %s rejected (%s): %s', record_id, error_type, message)

    def batch_completed(self, result: 'SyncResult', duration: float) -> None:
        logger.info(
            'Attendance sync: %d total, %d synced, %d failed in %.3fs',
            result.total_records, result.synced_records, result.failed_records, duration
        )


@dataclass
class SyncErrorEntry:
    record_id: int
    error: str
    error_type: str
    retryable: bool
    timestamp: datetime
    retry_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'recordId': self.record_id,
            'error': self.error,
            'errorType': self.error_type,
            'retryable': self.retryable,
            'retryCount': self.retry_count,
            'timestamp': self.timestamp.isoformat()
        }


@dataclass
class SyncResult:
    total_records: int
    errors: List[SyncErrorEntry] = field(default_factory=list)
    entries: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def synced_records(self) -> int:
        return len(self.entries)

    @property
    def failed_records(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalRecords': self.total_records,
            'syncedRecords': self.synced_records,
            'failedRecords': self.failed_records,
            'errors': [e.to_dict() for e in self.errors]
        }


class SyncResultAggregator:
    """Assemble validation and commit outcomes into a SyncResult."""

    def __init__(self, total_records: int, clock: Callable[[], datetime] = utc_clock,
                 observer: Optional[SyncObserver] = None):
        self.result = SyncResult(total_records=total_records)
        self.clock = clock
        self.observer = observer or SyncObserver()

    def add_rejection(self, rejection: RecordRejection) -> None:
        self._fail(rejection.record_id, rejection.message, rejection.error_type, rejection.retryable)

    def add_commit(self, outcome: CommitOutcome) -> None:
        record = outcome.record
        if not outcome.ok:
            self._fail(record.record_id, f'Database error: {outcome.error}',
                       outcome.error.kind, outcome.error.retryable)
            return

        self.result.entries.append(outcome.entry)
        if record.warnings:
            self.result.warnings.append({
                'recordId': record.record_id,
                'warnings': list(record.warnings)
            })
        self.observer.record_synced(record, outcome.created)

    def build(self) -> SyncResult:
        return self.result

    def _fail(self, record_id: int, message: str, error_type: str, retryable: bool) -> None:
        self.result.errors.append(SyncErrorEntry(
            record_id=record_id,
            error=message,
            error_type=error_type,
            retryable=retryable,
            timestamp=self.clock()
        ))
        self.observer.record_failed(record_id, error_type, message)


class SyncService:
    """Reconcile a batch of offline attendance records with the ledger."""

    def __init__(self, store, max_batch_size: int = 100, retention_days: int = 30,
                 record_timeout: Optional[float] = 5.0,
                 clock: Callable[[], datetime] = utc_clock,
                 observer: Optional[SyncObserver] = None):
        self.store = store
        self.max_batch_size = max_batch_size
        self.clock = clock
        self.observer = observer or LoggingSyncObserver()
        self.validator = RecordValidator(store, retention_days=retention_days, clock=clock)
        self.committer = BatchCommitter(store, timeout=record_timeout)

    @classmethod
    def from_config(cls, config: Dict[str, Any], store, **kwargs) -> 'SyncService':
        return cls(
            store,
            max_batch_size=config.get('SYNC_MAX_BATCH_SIZE', 100),
            retention_days=config.get('SYNC_RETENTION_DAYS', 30),
            record_timeout=config.get('SYNC_RECORD_TIMEOUT_SECONDS', 5.0),
            **kwargs
        )

    def check_batch(self, payload: Any) -> List[Any]:
        """Return the records list or raise BatchShapeError."""
        validation = Validator.validate_sync_batch(payload, self.max_batch_size)
        if not validation['is_valid']:
            raise BatchShapeError(validation['errors'])
        return payload['records']

    def sync(self, payload: Any) -> SyncResult:
        records = self.check_batch(payload)
        self.store.ping()

        started = time.monotonic()
        aggregator = SyncResultAggregator(len(records), clock=self.clock, observer=self.observer)

        for index, raw in enumerate(records):
            checked = self.validator.validate(raw, index)
            if isinstance(checked, RecordRejection):
                aggregator.add_rejection(checked)
            else:
                aggregator.add_commit(self.committer.commit(checked))

        result = aggregator.build()
        self.observer.batch_completed(result, time.monotonic() - started)
        return result
