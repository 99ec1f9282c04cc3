"""Read side of the attendance ledger: history and section analytics."""
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func

from attendance_sync import db
from attendance_sync.models.attendance_log import AttendanceLog, AttendanceStatus
from attendance_sync.models.faculty import Faculty
from attendance_sync.models.section import Section
from attendance_sync.models.student import Student
from attendance_sync.utils.errors import ResourceNotFoundError
from attendance_sync.utils.helpers import serialize_value


def _present_count():
    return func.sum(case((AttendanceLog.status == AttendanceStatus.PRESENT, 1), else_=0))


def _absent_count():
    return func.sum(case((AttendanceLog.status == AttendanceStatus.ABSENT, 1), else_=0))


def _percentage(present: Optional[int], total: Optional[int]) -> float:
    if not total:
        return 0.0
    return round((present or 0) * 100.0 / total, 2)


def _date_filters(query, start_date: Optional[date], end_date: Optional[date]):
    if start_date:
        query = query.filter(AttendanceLog.date >= start_date)
    if end_date:
        query = query.filter(AttendanceLog.date <= end_date)
    return query


class AttendanceService:
    """Queries over synced attendance."""

    @staticmethod
    def get_history(student_id: str, start_date: Optional[date] = None,
                    end_date: Optional[date] = None, limit: int = 50,
                    offset: int = 0) -> Dict[str, Any]:
        """Newest-first ledger entries for one active student."""
        student = db.session.get(Student, student_id)
        if not student or not student.is_active:
            raise ResourceNotFoundError('Student not found or inactive')

        query = db.session.query(
            AttendanceLog,
            Student.name.label('student_name'),
            Student.roll_number.label('roll_number'),
            Faculty.name.label('faculty_name'),
            Section.name.label('section_name')
        ).join(
            Student, AttendanceLog.student_id == Student.id
        ).join(
            Faculty, AttendanceLog.faculty_id == Faculty.id
        ).join(
            Section, AttendanceLog.section_id == Section.id
        ).filter(AttendanceLog.student_id == student_id)

        query = _date_filters(query, start_date, end_date)
        total = query.order_by(None).count()

        rows = query.order_by(
            AttendanceLog.date.desc(), AttendanceLog.synced_at.desc()
        ).limit(limit).offset(offset).all()

        records = []
        for entry, student_name, roll_number, faculty_name, section_name in rows:
            record = entry.to_dict()
            record.update({
                'student_name': student_name,
                'roll_number': roll_number,
                'faculty_name': faculty_name,
                'section_name': section_name
            })
            records.append(record)

        return {
            'records': records,
            'pagination': {
                'total': total,
                'limit': limit,
                'offset': offset,
                'hasMore': offset + len(records) < total
            }
        }

    @staticmethod
    def get_statistics(section_id: str, start_date: Optional[date] = None,
                       end_date: Optional[date] = None) -> List[Dict[str, Any]]:
        """Per-student attendance totals for a section, best attendance first."""
        if not db.session.get(Section, section_id):
            raise ResourceNotFoundError('Section not found')

        query = db.session.query(
            AttendanceLog.student_id,
            Student.name,
            Student.roll_number,
            func.count(AttendanceLog.id).label('total_days'),
            _present_count().label('present_days'),
            _absent_count().label('absent_days')
        ).join(
            Student, AttendanceLog.student_id == Student.id
        ).filter(
            AttendanceLog.section_id == section_id
        ).group_by(AttendanceLog.student_id, Student.name, Student.roll_number)

        rows = _date_filters(query, start_date, end_date).all()

        statistics = [{
            'student_id': row.student_id,
            'student_name': row.name,
            'roll_number': row.roll_number,
            'total_days': row.total_days,
            'present_days': int(row.present_days or 0),
            'absent_days': int(row.absent_days or 0),
            'attendance_percentage': _percentage(row.present_days, row.total_days)
        } for row in rows]

        statistics.sort(key=lambda s: (-s['attendance_percentage'], s['roll_number']))
        return statistics

    @staticmethod
    def get_summary(section_id: str, start_date: Optional[date] = None,
                    end_date: Optional[date] = None) -> Dict[str, Any]:
        """Aggregate attendance figures for a section over a date range."""
        if not db.session.get(Section, section_id):
            raise ResourceNotFoundError('Section not found')

        query = db.session.query(
            func.count(func.distinct(AttendanceLog.student_id)).label('total_students'),
            func.count(func.distinct(AttendanceLog.date)).label('total_days'),
            func.count(AttendanceLog.id).label('total_records'),
            _present_count().label('present_count'),
            _absent_count().label('absent_count')
        ).filter(AttendanceLog.section_id == section_id)

        row = _date_filters(query, start_date, end_date).one()

        return {
            'sectionId': section_id,
            'startDate': serialize_value(start_date),
            'endDate': serialize_value(end_date),
            'totalStudents': row.total_students or 0,
            'totalDays': row.total_days or 0,
            'presentCount': int(row.present_count or 0),
            'absentCount': int(row.absent_count or 0),
            'averageAttendance': _percentage(row.present_count, row.total_records)
        }
