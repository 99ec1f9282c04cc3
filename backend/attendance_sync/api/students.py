"""Student registry API."""
from flask import Blueprint, current_app, request

from attendance_sync import limiter
from attendance_sync.services.student_service import StudentService
from attendance_sync.utils.decorators import faculty_required
from attendance_sync.utils.helpers import error_response, success_response
from attendance_sync.utils.validators import Validator

students_bp = Blueprint('students', __name__)


def management_rate_limit():
    return current_app.config['MANAGEMENT_RATE_LIMIT']


def validate_student_payload(data, partial=False):
    """Field errors for create (all required) or update (all optional)."""
    errors = []
    errors += Validator.validate_string(data, 'rollNumber', 1, 20, required=not partial)
    errors += Validator.validate_string(data, 'name', 2, 100, required=not partial)
    errors += Validator.validate_string(data, 'sectionId', 36, 36, required=not partial)

    roll_number = data.get('rollNumber')
    if isinstance(roll_number, str) and roll_number.strip() \
            and not Validator.ROLL_NUMBER_PATTERN.match(roll_number.strip()):
        errors.append({
            'field': 'rollNumber',
            'message': 'Roll number must contain only alphanumeric characters'
        })

    if 'isActive' in data and not isinstance(data['isActive'], bool):
        errors.append({'field': 'isActive', 'message': 'isActive must be of type boolean'})
    return errors


@students_bp.route('/section/<section_id>', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_students_by_section(section_id):
    """Active students of a section."""
    students = StudentService.get_students_by_section(section_id)
    return success_response(
        data=[s.to_dict() for s in students],
        message='Students retrieved',
        count=len(students)
    )


@students_bp.route('/<student_id>', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_student(student_id):
    """Get single student details."""
    student = StudentService.get_student(student_id)
    return success_response(data=student.to_dict())


@students_bp.route('/', methods=['POST'])
@limiter.limit(management_rate_limit)
@faculty_required
def create_student():
    """Create single student."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response('Request body must be JSON', 400)

    errors = validate_student_payload(data)
    if errors:
        return error_response('Student data validation failed', 400,
                              code='VALIDATION_ERROR', details=errors)

    student = StudentService.create_student(data['rollNumber'], data['name'], data['sectionId'])
    return success_response(data=student.to_dict(), message='Student created successfully'), 201


@students_bp.route('/<student_id>', methods=['PUT'])
@limiter.limit(management_rate_limit)
@faculty_required
def update_student(student_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response('Request body must be JSON', 400)

    errors = validate_student_payload(data, partial=True)
    if errors:
        return error_response('Student data validation failed', 400,
                              code='VALIDATION_ERROR', details=errors)

    student = StudentService.update_student(student_id, data)
    return success_response(data=student.to_dict(), message='Student updated successfully')


@students_bp.route('/<student_id>', methods=['DELETE'])
@limiter.limit(management_rate_limit)
@faculty_required
def delete_student(student_id):
    """Soft delete a student."""
    StudentService.deactivate_student(student_id)
    return success_response(message='Student deleted successfully')


@students_bp.route('/section/<section_id>/bulk', methods=['POST'])
@limiter.limit(management_rate_limit)
@faculty_required
def create_students_bulk(section_id):
    """Create multiple students from a CSV/Excel file."""
    if 'file' not in request.files:
        return error_response('No file uploaded', 400)

    file = request.files['file']
    if file.filename == '':
        return error_response('No file selected', 400)

    extension = file.filename.rsplit('.', 1)[-1].lower() if '.' in file.filename else ''
    if extension not in current_app.config['ALLOWED_EXTENSIONS']:
        return error_response('Invalid file format. Use CSV or Excel', 400)

    try:
        df = StudentService.read_upload(file)
    except Exception as e:
        # pandas raises a wide range of parser errors
        return error_response(f'Error reading file: {str(e)}', 400)

    results = StudentService.create_students_bulk(section_id, df)
    created = sum(1 for r in results if r['success'])

    return success_response(
        data=results,
        message=f'Created {created} of {len(results)} students',
        summary={'total': len(results), 'created': created, 'failed': len(results) - created}
    )
