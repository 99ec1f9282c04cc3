"""Section management service."""
from typing import Dict, List, Optional

from attendance_sync import db
from attendance_sync.models.attendance_log import AttendanceLog
from attendance_sync.models.faculty import Faculty
from attendance_sync.models.section import Section
from attendance_sync.models.student import Student
from attendance_sync.services.student_service import StudentService
from attendance_sync.utils.errors import ResourceConflictError, ResourceNotFoundError


class SectionService:
    """Service for managing sections."""

    @staticmethod
    def get_section(section_id: str) -> Section:
        section = db.session.get(Section, section_id)
        if not section:
            raise ResourceNotFoundError('Section not found')
        return section

    @staticmethod
    def section_to_dict(section: Section, include_faculty: bool = False,
                        include_students: bool = False) -> Dict:
        data = section.to_dict()
        if include_faculty:
            data['faculty_name'] = section.faculty.name
            data['faculty_email'] = section.faculty.email
        if include_students:
            students = section.students.filter_by(is_active=True).order_by(Student.roll_number).all()
            data['students'] = [s.to_dict() for s in students]
        return data

    @staticmethod
    def list_sections() -> List[Section]:
        return Section.query.order_by(Section.grade, Section.name).all()

    @staticmethod
    def list_faculty_sections(faculty_id: str) -> List[Section]:
        if not db.session.get(Faculty, faculty_id):
            raise ResourceNotFoundError('Faculty not found')
        return Section.query.filter_by(faculty_id=faculty_id).order_by(Section.grade, Section.name).all()

    @staticmethod
    def name_exists(name: str, faculty_id: str, exclude_section_id: Optional[str] = None) -> bool:
        query = Section.query.filter_by(name=name, faculty_id=faculty_id)
        if exclude_section_id:
            query = query.filter(Section.id != exclude_section_id)
        return db.session.query(query.exists()).scalar()

    @staticmethod
    def create_section(name: str, grade: str, faculty_id: str) -> Section:
        name, grade = name.strip(), grade.strip()
        if not db.session.get(Faculty, faculty_id):
            raise ResourceNotFoundError('Faculty not found')
        if SectionService.name_exists(name, faculty_id):
            raise ResourceConflictError('Section with this name already exists for the faculty')

        return Section(name=name, grade=grade, faculty_id=faculty_id).save()

    @staticmethod
    def update_section(section_id: str, data: Dict) -> Section:
        section = SectionService.get_section(section_id)

        faculty_id = data.get('facultyId', section.faculty_id)
        name = data.get('name', section.name).strip()

        if faculty_id != section.faculty_id and not db.session.get(Faculty, faculty_id):
            raise ResourceNotFoundError('New faculty not found')
        if SectionService.name_exists(name, faculty_id, exclude_section_id=section.id):
            raise ResourceConflictError('Section with this name already exists for the faculty')

        changes = {'name': name, 'faculty_id': faculty_id}
        if 'grade' in data:
            changes['grade'] = data['grade'].strip()
        return section.update(**changes)

    @staticmethod
    def delete_section(section_id: str) -> None:
        section = SectionService.get_section(section_id)
        if section.students.filter_by(is_active=True).count():
            raise ResourceConflictError('Cannot delete section with active students')

        # Deactivated students and their ledger rows go with the section
        AttendanceLog.query.filter_by(section_id=section.id).delete(synchronize_session=False)
        Student.query.filter_by(section_id=section.id).delete(synchronize_session=False)
        section.delete()

    @staticmethod
    def refresh_student_count(section_id: str) -> int:
        SectionService.get_section(section_id)
        return StudentService.update_section_student_count(section_id)
