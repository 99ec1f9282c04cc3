"""Student registry service."""
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.exc import IntegrityError

from attendance_sync import db
from attendance_sync.models.section import Section
from attendance_sync.models.student import Student
from attendance_sync.utils.errors import ResourceConflictError, ResourceNotFoundError

BULK_COLUMNS = ('roll_number', 'name')


class StudentService:
    """Service for managing students."""

    @staticmethod
    def get_section_or_404(section_id: str) -> Section:
        section = db.session.get(Section, section_id)
        if not section:
            raise ResourceNotFoundError('Section not found')
        return section

    @staticmethod
    def get_student(student_id: str) -> Student:
        student = db.session.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError('Student not found')
        return student

    @staticmethod
    def get_students_by_section(section_id: str) -> List[Student]:
        """Active students of a section, ordered by roll number."""
        StudentService.get_section_or_404(section_id)
        return Student.query.filter_by(
            section_id=section_id, is_active=True
        ).order_by(Student.roll_number).all()

    @staticmethod
    def roll_number_exists(roll_number: str, section_id: str,
                           exclude_student_id: Optional[str] = None) -> bool:
        query = Student.query.filter_by(roll_number=roll_number, section_id=section_id)
        if exclude_student_id:
            query = query.filter(Student.id != exclude_student_id)
        return db.session.query(query.exists()).scalar()

    @staticmethod
    def update_section_student_count(section_id: str) -> int:
        """Recompute a section's cached active-student count."""
        count = Student.query.filter_by(section_id=section_id, is_active=True).count()
        section = db.session.get(Section, section_id)
        if section:
            section.student_count = count
            db.session.commit()
        return count

    @staticmethod
    def create_student(roll_number: str, name: str, section_id: str) -> Student:
        """Create a new student in a section."""
        roll_number = roll_number.strip()
        StudentService.get_section_or_404(section_id)

        if StudentService.roll_number_exists(roll_number, section_id):
            raise ResourceConflictError('Student with this roll number already exists in the section')

        student = Student(roll_number=roll_number, name=name.strip(), section_id=section_id)
        try:
            student.save()
        except IntegrityError:
            db.session.rollback()
            raise ResourceConflictError('Student with this roll number already exists in the section')

        StudentService.update_section_student_count(section_id)
        return student

    @staticmethod
    def update_student(student_id: str, data: Dict) -> Student:
        """Update name, roll number, section or active flag."""
        student = StudentService.get_student(student_id)
        old_section_id = student.section_id

        section_id = data.get('sectionId', student.section_id)
        roll_number = data.get('rollNumber', student.roll_number).strip()

        if section_id != old_section_id and not db.session.get(Section, section_id):
            raise ResourceNotFoundError('New section not found')

        if StudentService.roll_number_exists(roll_number, section_id, exclude_student_id=student.id):
            raise ResourceConflictError('Student with this roll number already exists in the section')

        changes = {'roll_number': roll_number, 'section_id': section_id}
        if 'name' in data:
            changes['name'] = data['name'].strip()
        if 'isActive' in data:
            changes['is_active'] = bool(data['isActive'])

        try:
            student.update(**changes)
        except IntegrityError:
            db.session.rollback()
            raise ResourceConflictError('Student with this roll number already exists in the section')

        StudentService.update_section_student_count(section_id)
        if section_id != old_section_id:
            StudentService.update_section_student_count(old_section_id)
        return student

    @staticmethod
    def deactivate_student(student_id: str) -> Student:
        """Soft delete: history stays in the ledger."""
        student = StudentService.get_student(student_id)
        student.update(is_active=False)
        StudentService.update_section_student_count(student.section_id)
        return student

    @staticmethod
    def read_upload(file_storage) -> pd.DataFrame:
        """Load an uploaded CSV or Excel file into a DataFrame."""
        filename = file_storage.filename.lower()
        if filename.endswith('.csv'):
            df = pd.read_csv(file_storage.stream, dtype=str)
        else:
            df = pd.read_excel(file_storage.stream, dtype=str)

        df.columns = [str(c).strip().lower().replace(' ', '_') for c in df.columns]
        missing = [c for c in BULK_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Missing required columns: {', '.join(missing)}")
        return df

    @staticmethod
    def create_students_bulk(section_id: str, df: pd.DataFrame) -> List[Dict]:
        """Create students from DataFrame rows; one bad row does not stop the others."""
        StudentService.get_section_or_404(section_id)
        results = []

        for index, row in df.iterrows():
            roll_number = row.get('roll_number')
            name = row.get('name')
            excel_row = index + 2  # header is row 1

            if pd.isna(roll_number) or pd.isna(name) or not str(roll_number).strip() or not str(name).strip():
                results.append({
                    'row': excel_row,
                    'rollNumber': None if pd.isna(roll_number) else roll_number,
                    'success': False,
                    'error': 'roll_number and name are required'
                })
                continue

            try:
                student = StudentService.create_student(str(roll_number), str(name), section_id)
                results.append({
                    'row': excel_row,
                    'rollNumber': student.roll_number,
                    'success': True,
                    'studentId': student.id
                })
            except ResourceConflictError as e:
                results.append({
                    'row': excel_row,
                    'rollNumber': str(roll_number).strip(),
                    'success': False,
                    'error': str(e)
                })

        return results
