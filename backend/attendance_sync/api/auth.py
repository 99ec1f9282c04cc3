"""Faculty authentication API."""
from flask import Blueprint, current_app, g, request
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from attendance_sync import limiter
from attendance_sync.services.auth_service import AuthService
from attendance_sync.utils.decorators import faculty_required
from attendance_sync.utils.helpers import error_response, success_response
from attendance_sync.utils.validators import Validator

auth_bp = Blueprint("auth", __name__)


def auth_rate_limit():
    return current_app.config['AUTH_RATE_LIMIT']


@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(auth_rate_limit)
def login():
    """Faculty login with username and password."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Request body must be JSON", 400)

    errors = (Validator.validate_string(data, "username", 3, 50)
              + Validator.validate_string(data, "password", 1, 128))
    if not errors:
        errors = Validator.validate_username(data["username"])["errors"]
    if errors:
        return error_response("Validation failed", 400, code="VALIDATION_ERROR", details=errors)

    result, error = AuthService.login(data["username"], data["password"])
    if error:
        current_app.logger.info("Failed login for %s", data["username"])
        return error_response(error, 401, code="LOGIN_FAILED")

    return success_response(data=result, message="Login successful")


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh_token():
    """Issue a new token pair from a refresh token."""
    result, error = AuthService.refresh_token(get_jwt_identity())
    if error:
        return error_response(error, 401, code="USER_INACTIVE")

    return success_response(data=result, message="Token refreshed successfully")


@auth_bp.route("/profile", methods=["GET"])
@faculty_required
def profile():
    """Get current faculty profile."""
    return success_response(data={"user": g.current_faculty.to_dict()})


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    # Tokens are stateless; the client discards them
    return success_response(message="Logged out successfully")


@auth_bp.route("/verify", methods=["POST"])
@jwt_required()
def verify():
    """Report whether the presented access token is valid."""
    claims = get_jwt()
    return success_response(data={
        "valid": True,
        "user": {
            "userId": get_jwt_identity(),
            "username": claims.get("username")
        }
    })
