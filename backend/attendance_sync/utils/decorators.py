"""Custom decorators for authorization."""
from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from attendance_sync import db
from attendance_sync.models.faculty import Faculty
from attendance_sync.utils.helpers import error_response


def faculty_required(f):
    """Decorator to require an authenticated, active faculty member."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        current_faculty_id = get_jwt_identity()
        faculty = db.session.get(Faculty, current_faculty_id)

        if not faculty:
            return error_response("User not found", 401, code='USER_NOT_FOUND')

        if not faculty.is_active:
            return error_response("User account is inactive", 403, code='USER_INACTIVE')

        g.current_faculty = faculty
        return f(*args, **kwargs)
    return decorated_function
