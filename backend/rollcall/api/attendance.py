"""Attendance check-in and history API endpoints."""
import logging

from flask import Blueprint, current_app, request
from sqlalchemy.exc import SQLAlchemyError

from rollcall import db, limiter
from rollcall.errors import ValidationError
from rollcall.services.checkin_service import CheckInOrchestrator, CheckInState
from rollcall.services.enrollment_service import EnrollmentRegistry
from rollcall.services.ledger_service import AttendanceLedger
from rollcall.utils import dates
from rollcall.utils.decorators import (
    ROLE_INSTRUCTOR, current_role, get_identity_verifier, instructor_required,
    resolve_student_identity, session_identity
)
from rollcall.utils.helpers import success_response, error_response
from rollcall.utils.validators import Validator

logger = logging.getLogger(__name__)

attendance_bp = Blueprint('attendance', __name__)


@attendance_bp.route('/checkin', methods=['POST'])
@limiter.limit("30 per minute")
def check_in():
    """Mark today's attendance with a scanned daily token."""
    data = Validator.require(request.get_json(silent=True), ['batchId', 'token'])

    credential = Validator.optional_string(data, 'credential')
    identity = None if credential else session_identity()

    orchestrator = CheckInOrchestrator(get_identity_verifier())
    try:
        attempt = orchestrator.check_in(
            batch_id=data['batchId'],
            token_value=data['token'],
            credential=credential,
            identity=identity
        )
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Database error during check-in")
        return error_response("Error marking attendance. Please try again.", 500)

    return success_response(
        data=attempt.to_dict(),
        message="Attendance marked" if attempt.state is CheckInState.MARKED else "Attendance already marked today"
    )


@attendance_bp.route('/attendance/today', methods=['GET'])
def today_status():
    """Whether the signed-in student is already marked today."""
    batch_id = request.args.get('batchId')
    Validator.require({'batchId': batch_id}, ['batchId'])
    identity = resolve_student_identity()

    EnrollmentRegistry().lookup(identity.subject_id, batch_id)
    day = dates.today()
    record = AttendanceLedger().find(identity.subject_id, batch_id, day)

    return success_response(data={
        'marked': record is not None,
        'date': dates.format_day(day),
        'timestamp': dates.isoformat(record.marked_at) if record else None
    })


@attendance_bp.route('/history', methods=['GET'])
def history():
    """Attendance history for one student in one batch, newest first.

    Students read their own history; instructors pass ``subjectId``.
    """
    batch_id = request.args.get('batchId')
    Validator.require({'batchId': batch_id}, ['batchId'])
    limit = Validator.parse_limit(
        request.args.get('limit'),
        default=current_app.config.get('DEFAULT_HISTORY_LIMIT', 10),
        maximum=current_app.config.get('MAX_PAGE_SIZE', 100)
    )

    if current_role() == ROLE_INSTRUCTOR:
        subject_id = _instructor_subject_id()
    else:
        subject_id = resolve_student_identity().subject_id

    records = AttendanceLedger().history(subject_id, batch_id, limit)
    return success_response(data=[
        {'timestamp': dates.isoformat(record.marked_at), 'date': dates.format_day(record.day)}
        for record in records
    ])


@instructor_required
def _instructor_subject_id():
    """``subjectId`` query parameter, for an active instructor only."""
    subject_id = request.args.get('subjectId')
    if not subject_id:
        raise ValidationError("subjectId is required")
    return subject_id
