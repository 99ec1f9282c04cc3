"""Database seeding service for development data."""
import logging
from typing import Dict

from attendance_sync import db
from attendance_sync.models.faculty import Faculty
from attendance_sync.models.section import Section
from attendance_sync.models.student import Student

logger = logging.getLogger(__name__)

FACULTY_DATA = [
    ('john_smith', 'John Smith', 'john.smith@school.edu'),
    ('mary_jones', 'Mary Jones', 'mary.jones@school.edu'),
]

SECTION_DATA = [
    ('A', '10'),
    ('B', '10'),
]

STUDENT_NAMES = [
    'Alice Brown', 'Bob Wilson', 'Carol Davis', 'David Miller', 'Emma Taylor',
    'Frank Moore', 'Grace Lee', 'Henry Clark', 'Ivy Walker', 'Jack Hall',
]

DEFAULT_PASSWORD = 'password123'


class SeedService:
    """Service to seed database with sample data."""

    @staticmethod
    def seed_all() -> Dict[str, int]:
        """Seed faculty, their sections and students. Existing rows are kept."""
        faculty = SeedService.seed_faculty()
        sections = SeedService.seed_sections(faculty)
        students = SeedService.seed_students(sections)
        db.session.commit()

        for section in sections:
            section.student_count = section.students.filter_by(is_active=True).count()
        db.session.commit()

        logger.info('Seeded %d faculty, %d sections, %d students',
                    len(faculty), len(sections), students)
        return {'faculty': len(faculty), 'sections': len(sections), 'students': students}

    @staticmethod
    def seed_faculty():
        members = []
        for username, name, email in FACULTY_DATA:
            faculty = Faculty.query.filter_by(username=username).first()
            if not faculty:
                faculty = Faculty(username=username, name=name, email=email)
                faculty.set_password(DEFAULT_PASSWORD)
                db.session.add(faculty)
            members.append(faculty)
        db.session.flush()
        return members

    @staticmethod
    def seed_sections(faculty_members):
        sections = []
        for faculty in faculty_members:
            for name, grade in SECTION_DATA:
                section = Section.query.filter_by(name=name, faculty_id=faculty.id).first()
                if not section:
                    section = Section(name=name, grade=grade, faculty_id=faculty.id)
                    db.session.add(section)
                sections.append(section)
        db.session.flush()
        return sections

    @staticmethod
    def seed_students(sections) -> int:
        created = 0
        for section_idx, section in enumerate(sections):
            for idx, name in enumerate(STUDENT_NAMES, start=1):
                roll_number = f'{section.grade}{section.name}{section_idx + 1:02d}{idx:03d}'
                exists = Student.query.filter_by(roll_number=roll_number, section_id=section.id).first()
                if not exists:
                    db.session.add(Student(roll_number=roll_number, name=name, section_id=section.id))
                    created += 1
        return created
