"""Shared fixtures for the test suite."""
import copy
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from attendance_sync import create_app, db
from attendance_sync.models import Faculty, Section, Student
from attendance_sync.services.auth_service import AuthService
from attendance_sync.utils.errors import StoreError, StoreUnavailableError

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def faculty(app):
    member = Faculty(username='jane_doe', name='Jane Doe', email='jane@school.edu')
    member.set_password('password123')
    return member.save()


@pytest.fixture
def other_faculty(app):
    member = Faculty(username='bob_ross', name='Bob Ross', email='bob@school.edu')
    member.set_password('password123')
    return member.save()


@pytest.fixture
def section(faculty):
    return Section(name='A', grade='10', faculty_id=faculty.id).save()


@pytest.fixture
def student(section):
    return Student(roll_number='10A001', name='Alice Brown', section_id=section.id).save()


@pytest.fixture
def auth_headers(app, faculty):
    tokens = AuthService.issue_tokens(faculty)
    return {'Authorization': f"Bearer {tokens['accessToken']}"}


@pytest.fixture
def make_record():
    """Build a raw sync record; keyword arguments override fields."""
    def _make(student, section, faculty_id=None, **overrides):
        record = {
            'studentId': student.id,
            'facultyId': faculty_id or section.faculty_id,
            'sectionId': section.id,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'status': 'present',
            'captureMethod': 'manual'
        }
        record.update(overrides)
        return record
    return _make


# In-memory store for reconciler unit tests

class FakeEntry(SimpleNamespace):
    def to_dict(self):
        return {
            'id': self.id,
            'student_id': self.student_id,
            'faculty_id': self.faculty_id,
            'section_id': self.section_id,
            'date': self.date.isoformat(),
            'status': self.status.value,
            'capture_method': self.capture_method.value,
            'synced_at': self.synced_at.isoformat()
        }


class FakeLedgerStore:
    """Dict-backed stand-in for LedgerStore with failure injection."""

    def __init__(self):
        self.students = {}
        self.faculty = {}
        self.sections = {}
        self.ledger = {}
        self.unavailable = False
        self.fail_inserts_for = set()
        self.fail_lookups = False
        self.commits = 0
        self.rollbacks = 0
        self.in_transaction = False
        self.sync_ticks = 0

    def add_faculty(self, is_active=True):
        member = SimpleNamespace(id=str(uuid.uuid4()), is_active=is_active)
        self.faculty[member.id] = member
        return member

    def add_section(self, faculty):
        section = SimpleNamespace(id=str(uuid.uuid4()), faculty_id=faculty.id)
        self.sections[section.id] = section
        return section

    def add_student(self, section, is_active=True):
        student = SimpleNamespace(id=str(uuid.uuid4()), section_id=section.id, is_active=is_active)
        self.students[student.id] = student
        return student

    def ping(self):
        if self.unavailable:
            raise StoreUnavailableError('connection refused')

    def _lookup(self, table, key):
        if self.fail_lookups:
            raise StoreError('connection reset')
        return table.get(key)

    def find_student_by_id(self, student_id):
        return self._lookup(self.students, student_id)

    def find_faculty_by_id(self, faculty_id):
        return self._lookup(self.faculty, faculty_id)

    def find_section_by_id(self, section_id):
        return self._lookup(self.sections, section_id)

    def find_ledger_entry(self, student_id, entry_date):
        return self.ledger.get((student_id, entry_date))

    def _stamp(self):
        self.sync_ticks += 1
        return datetime(2024, 1, 1) + timedelta(seconds=self.sync_ticks)

    def insert_ledger_entry(self, record):
        if record.student_id in self.fail_inserts_for:
            raise StoreError('duplicate key value violates unique constraint')
        entry = FakeEntry(
            id=str(uuid.uuid4()),
            student_id=record.student_id,
            faculty_id=record.faculty_id,
            section_id=record.section_id,
            date=record.attendance_date,
            status=record.status,
            capture_method=record.capture_method,
            synced_at=self._stamp()
        )
        self.ledger[record.conflict_key] = entry
        return entry

    def update_ledger_entry(self, student_id, entry_date, fields):
        entry = self.ledger[(student_id, entry_date)]
        for key, value in fields.items():
            setattr(entry, key, value)
        entry.synced_at = self._stamp()
        return entry

    @contextmanager
    def transaction(self, timeout=None):
        snapshot = copy.deepcopy(self.ledger)
        self.in_transaction = True
        try:
            yield
            self.commits += 1
        except Exception:
            self.ledger = snapshot
            self.rollbacks += 1
            raise
        finally:
            self.in_transaction = False


@pytest.fixture
def fake_store():
    return FakeLedgerStore()


@pytest.fixture
def roster(fake_store):
    """One active faculty member owning one section with two students."""
    member = fake_store.add_faculty()
    section = fake_store.add_section(member)
    return SimpleNamespace(
        faculty=member,
        section=section,
        students=[fake_store.add_student(section), fake_store.add_student(section)]
    )


@pytest.fixture
def fake_record(roster):
    """Build a raw record against the fake roster, timestamped one hour before FIXED_NOW."""
    def _make(student=None, **overrides):
        student = student or roster.students[0]
        record = {
            'studentId': student.id,
            'facultyId': roster.faculty.id,
            'sectionId': student.section_id,
            'timestamp': (FIXED_NOW - timedelta(hours=1)).isoformat(),
            'status': 'present',
            'captureMethod': 'ml'
        }
        record.update(overrides)
        return record
    return _make
