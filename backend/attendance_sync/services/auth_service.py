"""Authentication service for faculty accounts."""
from typing import Dict, Optional, Tuple

from flask_jwt_extended import create_access_token, create_refresh_token
from sqlalchemy.exc import SQLAlchemyError

from attendance_sync import db
from attendance_sync.models.faculty import Faculty
from attendance_sync.utils.validators import Validator


class AuthService:
    @staticmethod
    def validate_password(password: str) -> Tuple[bool, str]:
        """Validate password strength."""
        if not password or len(password) < 6:
            return False, "Password must be at least 6 characters long"
        if len(password) > 128:
            return False, "Password must be at most 128 characters long"
        return True, ""

    @staticmethod
    def issue_tokens(faculty: Faculty) -> Dict[str, str]:
        """Create an access/refresh token pair for a faculty member."""
        claims = {'username': faculty.username}
        return {
            "accessToken": create_access_token(identity=faculty.id, additional_claims=claims),
            "refreshToken": create_refresh_token(identity=faculty.id, additional_claims=claims)
        }

    @staticmethod
    def login(username: str, password: str) -> Tuple[Optional[Dict], Optional[str]]:
        """Authenticate faculty and return tokens."""
        faculty = Faculty.query.filter_by(username=username.strip()).first()

        # Same message for unknown user and bad password
        if not faculty or not faculty.check_password(password):
            return None, "Invalid username or password"

        if not faculty.is_active:
            return None, "Account is deactivated"

        return {
            "user": faculty.to_dict(),
            **AuthService.issue_tokens(faculty)
        }, None

    @staticmethod
    def refresh_token(faculty_id: str) -> Tuple[Optional[Dict], Optional[str]]:
        """Generate a new token pair for a still-active faculty member."""
        faculty = db.session.get(Faculty, faculty_id)
        if not faculty or not faculty.is_active:
            return None, "User account is inactive or not found"

        return {
            "user": faculty.to_dict(),
            **AuthService.issue_tokens(faculty)
        }, None

    @staticmethod
    def create_faculty(username: str, name: str, email: str,
                       password: str) -> Tuple[Optional[Faculty], Optional[str]]:
        """Create a faculty account."""
        username_check = Validator.validate_username(username)
        if not username_check['is_valid']:
            return None, username_check['errors'][0]['message']

        if not name or len(name.strip()) < 2:
            return None, "Name must be at least 2 characters long"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        is_valid, password_error = AuthService.validate_password(password)
        if not is_valid:
            return None, password_error

        email = email.lower().strip()
        if Faculty.query.filter_by(username=username).first():
            return None, "Username already exists"
        if Faculty.query.filter_by(email=email).first():
            return None, "Email already exists"

        faculty = Faculty(username=username, name=name.strip(), email=email)
        faculty.set_password(password)

        try:
            faculty.save()
        except SQLAlchemyError as e:
            db.session.rollback()
            return None, f"Registration failed: {str(e)}"

        return faculty, None
