"""Unit tests for the sync reconciler against an in-memory store."""
from datetime import date, timedelta

import pytest

from attendance_sync.models.attendance_log import AttendanceStatus
from attendance_sync.services.batch_committer import BatchCommitter
from attendance_sync.services.record_validator import DUPLICATE_WARNING, RecordValidator
from attendance_sync.services.sync_service import SyncObserver, SyncService
from attendance_sync.utils.errors import BatchShapeError, StoreUnavailableError

from conftest import FIXED_NOW


@pytest.fixture
def service(fake_store):
    return SyncService(fake_store, clock=lambda: FIXED_NOW)


def assert_conserved(result):
    assert result.synced_records + result.failed_records == result.total_records
    assert len(result.errors) == result.failed_records


class RecordingObserver(SyncObserver):
    def __init__(self):
        self.synced, self.failed, self.batches = [], [], []

    def record_synced(self, record, created):
        self.synced.append((record.record_id, created))

    def record_failed(self, record_id, error_type, message):
        self.failed.append((record_id, error_type))

    def batch_completed(self, result, duration):
        self.batches.append(result.total_records)


def test_all_valid_records_sync(service, fake_store, roster, fake_record):
    records = [fake_record(s) for s in roster.students]

    result = service.sync({'records': records})

    assert result.total_records == 2
    assert result.synced_records == 2
    assert result.errors == []
    assert len(fake_store.ledger) == 2
    assert {e['status'] for e in result.entries} == {'present'}


def test_mixed_batch_is_conserved(service, roster, fake_record):
    records = [
        fake_record(),
        fake_record(studentId='missing-student'),
        fake_record(roster.students[1], status='late'),
        'not a record',
        fake_record(roster.students[1], timestamp=(FIXED_NOW + timedelta(hours=2)).isoformat()),
    ]

    result = service.sync({'records': records})

    assert_conserved(result)
    assert result.synced_records == 1
    assert [e.record_id for e in result.errors] == [1, 2, 3, 4]


def test_future_timestamp_is_rejected_without_blocking_others(service, fake_store, roster, fake_record):
    future = (FIXED_NOW + timedelta(hours=2)).isoformat()
    records = [fake_record(id=7, timestamp=future), fake_record(roster.students[1], id=8)]

    result = service.sync({'records': records})

    assert result.synced_records == 1
    error = result.errors[0]
    assert error.record_id == 7
    assert error.error_type == 'temporal'
    assert error.retryable is False
    assert 'Future timestamp' in error.error
    assert (roster.students[0].id, (FIXED_NOW - timedelta(hours=1)).date()) not in fake_store.ledger


def test_referential_failures_are_all_reported(service, fake_store, roster, fake_record):
    stranger = fake_store.add_faculty()
    record = fake_record(facultyId=stranger.id)

    result = service.sync({'records': [record]})

    assert result.failed_records == 1
    assert result.errors[0].error_type == 'referential'
    assert result.errors[0].error == 'Faculty does not have access to this section'


def test_student_outside_section_and_inactive(service, fake_store, roster, fake_record):
    other_section = fake_store.add_section(roster.faculty)
    dropped = fake_store.add_student(other_section, is_active=False)
    record = fake_record(dropped, sectionId=roster.section.id)

    result = service.sync({'records': [record]})

    message = result.errors[0].error
    assert 'Student is not active' in message
    assert 'Student does not belong to the specified section' in message


def test_shape_errors_list_every_bad_field(service):
    result = service.sync({'records': [{'id': 3, 'status': 'late'}]})

    error = result.errors[0]
    assert error.record_id == 3
    assert error.error_type == 'shape'
    for fragment in ('studentId is required', 'facultyId is required', 'sectionId is required',
                     'timestamp is required', 'status must be', 'captureMethod must be'):
        assert fragment in error.error


def test_record_id_falls_back_to_batch_index(service, fake_record):
    result = service.sync({'records': [fake_record(), {'id': 'local-1'}]})

    assert result.errors[0].record_id == 1


def test_same_student_same_day_last_write_wins(service, fake_store, fake_record):
    records = [
        fake_record(id=1, status='present'),
        fake_record(id=2, status='absent', captureMethod='manual'),
    ]

    result = service.sync({'records': records})

    assert result.synced_records == 2
    assert len(fake_store.ledger) == 1
    entry = next(iter(fake_store.ledger.values()))
    assert entry.status == AttendanceStatus.ABSENT
    assert result.warnings == [{'recordId': 2, 'warnings': [DUPLICATE_WARNING]}]


def test_resubmission_is_idempotent(service, fake_store, roster, fake_record):
    payload = {'records': [fake_record(s) for s in roster.students]}

    service.sync(payload)
    ids_before = {k: e.id for k, e in fake_store.ledger.items()}
    stamps_before = {k: e.synced_at for k, e in fake_store.ledger.items()}
    result = service.sync(payload)

    assert result.synced_records == 2
    assert {k: e.id for k, e in fake_store.ledger.items()} == ids_before
    for key, entry in fake_store.ledger.items():
        assert entry.synced_at > stamps_before[key]
    assert all(DUPLICATE_WARNING in w['warnings'] for w in result.warnings)


def test_store_failure_is_isolated_to_one_record(service, fake_store, roster, fake_record):
    fake_store.fail_inserts_for.add(roster.students[0].id)
    records = [fake_record(id=1), fake_record(roster.students[1], id=2)]

    result = service.sync({'records': records})

    assert_conserved(result)
    assert result.synced_records == 1
    error = result.errors[0]
    assert error.record_id == 1
    assert error.error_type == 'store'
    assert error.retryable is True
    assert error.error.startswith('Database error: ')
    assert fake_store.rollbacks == 1
    assert len(fake_store.ledger) == 1


def test_lookup_failure_is_retryable(service, fake_store, fake_record):
    fake_store.fail_lookups = True

    result = service.sync({'records': [fake_record()]})

    error = result.errors[0]
    assert error.error_type == 'store'
    assert error.retryable is True
    assert error.error.startswith('Database validation error')


def test_stale_record_syncs_with_warning(service, fake_record):
    old = (FIXED_NOW - timedelta(days=40)).isoformat()

    result = service.sync({'records': [fake_record(timestamp=old)]})

    assert result.synced_records == 1
    assert result.warnings[0]['warnings'] == ['Attendance record is more than 30 days old']


def test_date_is_taken_from_utc_timestamp(service, fake_store, fake_record):
    result = service.sync({'records': [fake_record(timestamp='2024-03-15T01:00:00+05:00')]})

    assert result.entries[0]['date'] == '2024-03-14'
    assert ((fake_record()['studentId'], date(2024, 3, 14))) in fake_store.ledger


def test_epoch_millisecond_timestamps_are_accepted(service, fake_record):
    millis = int((FIXED_NOW - timedelta(minutes=5)).timestamp() * 1000)

    result = service.sync({'records': [fake_record(timestamp=millis)]})

    assert result.synced_records == 1


@pytest.mark.parametrize('payload', [
    None,
    {},
    {'records': 'nope'},
    {'records': []},
])
def test_malformed_batch_raises_before_any_work(service, fake_store, payload):
    with pytest.raises(BatchShapeError) as exc:
        service.sync(payload)

    assert exc.value.details
    assert fake_store.ledger == {}


def test_batch_size_bound(fake_store, fake_record):
    service = SyncService(fake_store, max_batch_size=3, clock=lambda: FIXED_NOW)

    with pytest.raises(BatchShapeError) as exc:
        service.sync({'records': [fake_record() for _ in range(4)]})

    assert exc.value.details[0]['field'] == 'records'
    assert fake_store.commits == 0


def test_unavailable_store_fails_whole_batch(service, fake_store, fake_record):
    fake_store.unavailable = True

    with pytest.raises(StoreUnavailableError):
        service.sync({'records': [fake_record()]})

    assert fake_store.ledger == {}


def test_commit_past_deadline_is_rolled_back(fake_store, roster, fake_record):
    service = SyncService(fake_store, clock=lambda: FIXED_NOW)
    ticks = iter([0.0, 10.0])
    service.committer = BatchCommitter(fake_store, timeout=5.0, monotonic=lambda: next(ticks))

    result = service.sync({'records': [fake_record()]})

    assert result.failed_records == 1
    assert result.errors[0].error_type == 'store'
    assert result.errors[0].retryable is True
    assert 'timeout' in result.errors[0].error
    assert fake_store.ledger == {}


def test_committer_only_accepts_validated_records(fake_store, fake_record):
    committer = BatchCommitter(fake_store)

    with pytest.raises(TypeError):
        committer.commit(fake_record())


def test_entry_serialized_while_transaction_open(fake_store, fake_record):
    serialized_in_transaction = []
    insert = fake_store.insert_ledger_entry

    def tracking_insert(record):
        entry = insert(record)
        to_dict = entry.to_dict

        def tracked():
            serialized_in_transaction.append(fake_store.in_transaction)
            return to_dict()

        entry.to_dict = tracked
        return entry

    fake_store.insert_ledger_entry = tracking_insert
    validated = RecordValidator(fake_store, clock=lambda: FIXED_NOW).validate(fake_record(), 0)

    outcome = BatchCommitter(fake_store).commit(validated)

    assert outcome.ok
    assert serialized_in_transaction == [True]
    assert outcome.entry['student_id'] == validated.student_id
    assert fake_store.commits == 1


def test_observer_sees_every_outcome(fake_store, roster, fake_record):
    observer = RecordingObserver()
    service = SyncService(fake_store, clock=lambda: FIXED_NOW, observer=observer)

    service.sync({'records': [fake_record(id=1), fake_record(id=2, studentId='nobody')]})

    assert observer.synced == [(1, True)]
    assert observer.failed == [(2, 'referential')]
    assert observer.batches == [2]


def test_result_serializes_for_transport(service, fake_record):
    result = service.sync({'records': [fake_record(id=5, status='maybe')]})

    payload = result.to_dict()

    assert payload['totalRecords'] == 1
    assert payload['syncedRecords'] == 0
    assert payload['failedRecords'] == 1
    error = payload['errors'][0]
    assert error['recordId'] == 5
    assert error['retryCount'] == 0
    assert error['errorType'] == 'shape'
    assert error['timestamp'] == FIXED_NOW.isoformat()
