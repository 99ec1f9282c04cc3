"""Validation utilities for request payloads and query strings."""
import re
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from attendance_sync.utils.helpers import parse_iso_date


class Validator:
    """Validation helper class."""

    USERNAME_PATTERN = re.compile(r'^[A-Za-z0-9_]+$')
    EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
    ROLL_NUMBER_PATTERN = re.compile(r'^[A-Za-z0-9-]+$')

    @staticmethod
    def is_valid_uuid(value: Any) -> bool:
        """Check a string is a canonical UUID."""
        if not isinstance(value, str):
            return False
        try:
            return str(uuid.UUID(value)) == value.lower()
        except ValueError:
            return False

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        return bool(Validator.EMAIL_PATTERN.match(email))

    @staticmethod
    def validate_username(username: Any) -> Dict[str, Any]:
        """Validate faculty username."""
        errors = []

        if not isinstance(username, str) or not username:
            errors.append({'field': 'username', 'message': 'username is required'})
        elif not 3 <= len(username) <= 50:
            errors.append({'field': 'username', 'message': 'username must be between 3 and 50 characters'})
        elif not Validator.USERNAME_PATTERN.match(username):
            errors.append({
                'field': 'username',
                'message': 'Username must contain only alphanumeric characters and underscores'
            })

        return {"is_valid": len(errors) == 0, "errors": errors}

    @staticmethod
    def validate_string(data: Dict, field: str, min_length: int = 1, max_length: int = 100,
                        required: bool = True) -> List[Dict[str, Any]]:
        """Validate a string field's presence and length."""
        value = data.get(field)
        if value is None:
            return [{'field': field, 'message': f'{field} is required'}] if required else []
        if not isinstance(value, str):
            return [{'field': field, 'message': f'{field} must be of type string'}]
        if not min_length <= len(value.strip()) <= max_length:
            return [{
                'field': field,
                'message': f'{field} must be between {min_length} and {max_length} characters'
            }]
        return []

    @staticmethod
    def validate_pagination(limit: Optional[str], offset: Optional[str],
                            default_limit: int = 50, max_limit: int = 100) -> Dict[str, Any]:
        """Validate limit/offset query parameters."""
        errors = []
        validated_limit, validated_offset = default_limit, 0

        if limit is not None:
            try:
                validated_limit = int(limit)
                if validated_limit < 1:
                    errors.append('Limit must be a positive integer')
                elif validated_limit > max_limit:
                    errors.append(f'Limit cannot exceed {max_limit}')
            except ValueError:
                errors.append('Limit must be a positive integer')

        if offset is not None:
            try:
                validated_offset = int(offset)
                if validated_offset < 0:
                    errors.append('Offset must be a non-negative integer')
            except ValueError:
                errors.append('Offset must be a non-negative integer')

        return {
            "is_valid": len(errors) == 0,
            "errors": errors,
            "limit": validated_limit,
            "offset": validated_offset
        }

    @staticmethod
    def validate_date_range(start: Optional[str], end: Optional[str]) -> Dict[str, Any]:
        """Validate an optional ISO date range."""
        errors = []
        start_date: Optional[date] = None
        end_date: Optional[date] = None

        try:
            start_date = parse_iso_date(start)
        except ValueError:
            errors.append('Start date must be a valid date')

        try:
            end_date = parse_iso_date(end)
        except ValueError:
            errors.append('End date must be a valid date')

        if start_date and end_date and start_date > end_date:
            errors.append('Start date must be before end date')

        return {
            "is_valid": len(errors) == 0,
            "errors": errors,
            "start_date": start_date,
            "end_date": end_date
        }

    @staticmethod
    def validate_sync_batch(data: Any, max_batch_size: int) -> Dict[str, Any]:
        """Validate the outer shape of a sync request body."""
        errors = []

        if not isinstance(data, dict):
            errors.append({'field': 'body', 'message': 'Request body must be a JSON object'})
        elif data.get('records') is None:
            errors.append({'field': 'records', 'message': 'records is required'})
        elif not isinstance(data['records'], list):
            errors.append({'field': 'records', 'message': 'records must be of type array'})
        elif not 1 <= len(data['records']) <= max_batch_size:
            errors.append({
                'field': 'records',
                'message': f'records must contain between 1 and {max_batch_size} items'
            })

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }
