"""Attendance API: offline batch sync, history and section analytics."""
import logging

from flask import Blueprint, current_app, request

from attendance_sync import limiter
from attendance_sync.services.attendance_service import AttendanceService
from attendance_sync.services.ledger_store import LedgerStore
from attendance_sync.services.sync_service import SyncService
from attendance_sync.utils.decorators import faculty_required
from attendance_sync.utils.helpers import error_response, success_response
from attendance_sync.utils.validators import Validator

logger = logging.getLogger(__name__)

attendance_bp = Blueprint('attendance', __name__)


def sync_rate_limit():
    return current_app.config['SYNC_RATE_LIMIT']


def management_rate_limit():
    return current_app.config['MANAGEMENT_RATE_LIMIT']


@attendance_bp.route('/sync', methods=['POST'])
@limiter.limit(sync_rate_limit)
@faculty_required
def sync_attendance():
    """Reconcile a batch of offline attendance records.

    Batch-level problems answer 400 (malformed body) or 503 (store down)
    through the app error handlers. Otherwise the answer is 200 with
    per-record failures listed in ``result.errors``.
    """
    payload = request.get_json(silent=True)

    service = SyncService.from_config(current_app.config, LedgerStore())
    result = service.sync(payload)

    if result.failed_records:
        message = (f'Synced {result.synced_records} of {result.total_records} records; '
                   f'{result.failed_records} failed')
    else:
        message = f'Synced {result.synced_records} records'

    return success_response(
        data=result.entries,
        message=message,
        result=result.to_dict(),
        warnings=result.warnings
    )


@attendance_bp.route('/student/<student_id>', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_student_history(student_id):
    """Attendance history for a student, newest first."""
    if not Validator.is_valid_uuid(student_id):
        return error_response('Invalid student ID format', 400, code='VALIDATION_ERROR')

    pagination = Validator.validate_pagination(
        request.args.get('limit'),
        request.args.get('offset'),
        default_limit=current_app.config['DEFAULT_PAGE_SIZE'],
        max_limit=current_app.config['MAX_PAGE_SIZE']
    )
    if not pagination['is_valid']:
        return error_response('Invalid pagination parameters', 400,
                              code='VALIDATION_ERROR', details=pagination['errors'])

    dates = Validator.validate_date_range(request.args.get('startDate'), request.args.get('endDate'))
    if not dates['is_valid']:
        return error_response('Invalid date range', 400,
                              code='VALIDATION_ERROR', details=dates['errors'])

    history = AttendanceService.get_history(
        student_id,
        start_date=dates['start_date'],
        end_date=dates['end_date'],
        limit=pagination['limit'],
        offset=pagination['offset']
    )

    return success_response(
        data=history['records'],
        message='Attendance history retrieved',
        pagination=history['pagination']
    )


@attendance_bp.route('/section/<section_id>/statistics', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_section_statistics(section_id):
    """Per-student attendance percentages for a section."""
    dates = Validator.validate_date_range(request.args.get('startDate'), request.args.get('endDate'))
    if not dates['is_valid']:
        return error_response('Invalid date range', 400,
                              code='VALIDATION_ERROR', details=dates['errors'])

    statistics = AttendanceService.get_statistics(
        section_id, start_date=dates['start_date'], end_date=dates['end_date']
    )
    return success_response(data=statistics, message='Attendance statistics retrieved')


@attendance_bp.route('/section/<section_id>/summary', methods=['GET'])
@limiter.limit(management_rate_limit)
@faculty_required
def get_section_summary(section_id):
    dates = Validator.validate_date_range(request.args.get('startDate'), request.args.get('endDate'))
    if not dates['is_valid']:
        return error_response('Invalid date range', 400,
                              code='VALIDATION_ERROR', details=dates['errors'])

    summary = AttendanceService.get_summary(
        section_id, start_date=dates['start_date'], end_date=dates['end_date']
    )
    return success_response(data=summary, message='Attendance summary retrieved')
