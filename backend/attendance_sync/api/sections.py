"""Section management API."""
from flask import Blueprint, current_app, g, request

from attendance_sync import limiter
from attendance_sync.services.section_service import SectionService
from attendance_sync.utils.decorators import faculty_required
from attendance_sync.utils.helpers import error_response, success_response
from attendance_sync.utils.validators import Validator

sections_bp = Blueprint('sections', __name__)


def management_rate_limit():
    return current_app.config['MANAGEMENT_RATE_LIMIT']


def validate_section_payload(data, partial=False):
    errors = []
    errors += Validator.validate_string(data, 'name', 1, 50, required=not partial)
    errors += Validator.validate_string(data, 'grade', 1, 10, required=not partial)
    errors += Validator.validate_string(data, 'facultyId', 36, 36, required=False)
    return errors


@sections_bp.route('/', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_sections():
    """All sections with their faculty."""
    sections = SectionService.list_sections()
    return success_response(
        data=[SectionService.section_to_dict(s, include_faculty=True) for s in sections],
        count=len(sections)
    )


@sections_bp.route('/faculty/<faculty_id>/sections', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_faculty_sections(faculty_id):
    sections = SectionService.list_faculty_sections(faculty_id)
    return success_response(
        data=[SectionService.section_to_dict(s) for s in sections],
        count=len(sections)
    )


@sections_bp.route('/<section_id>', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_section(section_id):
    """Section details with active students."""
    section = SectionService.get_section(section_id)
    return success_response(
        data=SectionService.section_to_dict(section, include_faculty=True, include_students=True)
    )


@sections_bp.route('/', methods=['POST'])
@limiter.limit(management_rate_limit)
@faculty_required
def create_section():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response('Request body must be JSON', 400)

    errors = validate_section_payload(data)
    if errors:
        return error_response('Section data validation failed', 400,
                              code='VALIDATION_ERROR', details=errors)

    section = SectionService.create_section(
        data['name'], data['grade'], data.get('facultyId') or g.current_faculty.id
    )
    return success_response(data=section.to_dict(), message='Section created successfully'), 201


@sections_bp.route('/<section_id>', methods=['PUT'])
@limiter.limit(management_rate_limit)
@faculty_required
def update_section(section_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response('Request body must be JSON', 400)

    errors = validate_section_payload(data, partial=True)
    if errors:
        return error_response('Section data validation failed', 400,
                              code='VALIDATION_ERROR', details=errors)

    section = SectionService.update_section(section_id, data)
    return success_response(data=section.to_dict(), message='Section updated successfully')


@sections_bp.route('/<section_id>', methods=['DELETE'])
@limiter.limit(management_rate_limit)
@faculty_required
def delete_section(section_id):
    SectionService.delete_section(section_id)
    return success_response(message='Section deleted successfully')


@sections_bp.route('/<section_id>/update-student-count', methods=['POST'])
@limiter.limit(management_rate_limit)
@faculty_required
def update_student_count(section_id):
    """Recompute the cached active-student count."""
    count = SectionService.refresh_student_count(section_id)
    return success_response(
        data={'sectionId': section_id, 'studentCount': count},
        message='Student count updated successfully'
    )
