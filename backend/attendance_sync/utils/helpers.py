"""Helper functions for the application."""
from datetime import datetime, date, timezone
from enum import Enum
from typing import Any, Optional

from flask import jsonify


def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'success': False,
        'error': str(error),
        'status_code': status_code
    }), status_code


def success_response(data: Any = None, message: str = "Success", **extra):
    """Return consistent success response."""
    response = {
        'success': True,
        'message': message
    }

    if data is not None:
        response['data'] = data

    response.update(extra)
    return jsonify(response)


def error_response(message: str, status_code: int = 400, code: str = None, details: Any = None):
    """Return consistent error response."""
    response = {
        'success': False,
        'error': message,
        'status_code': status_code
    }

    if code:
        response['code'] = code
    if details is not None:
        response['details'] = details

    return jsonify(response), status_code


def utcnow() -> datetime:
    """Naive UTC now, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD (or a full ISO timestamp) into a date; None passes through."""
    if not value:
        return None
    if len(value) == 10:
        return date.fromisoformat(value)
    return datetime.fromisoformat(value.replace('Z', '+00:00')).date()


def serialize_value(value: Any) -> Any:
    """Make column values JSON friendly."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value
