"""Student enrollment API endpoints."""
from flask import Blueprint, request

from rollcall import limiter
from rollcall.services.enrollment_service import EnrollmentRegistry
from rollcall.utils.decorators import create_student_session, resolve_student_identity
from rollcall.utils.helpers import success_response
from rollcall.utils.validators import Validator

enrollment_bp = Blueprint('enrollment', __name__)


@enrollment_bp.route('/enroll', methods=['POST'])
@limiter.limit("20 per minute")
def enroll():
    """Enroll the signed-in student in a batch.

    The identity comes from a verified Google ID token (``credential``) or
    from a student session token; client-supplied names are ignored.
    """
    data = Validator.require(request.get_json(silent=True), ['batchId'])
    identity = resolve_student_identity(Validator.optional_string(data, 'credential'))

    enrollment, created = EnrollmentRegistry().enroll(identity, data['batchId'])

    return success_response(
        data={
            'studentId': enrollment.student_id,
            'enrolled': True,
            'alreadyEnrolled': not created,
            'enrollment': enrollment.to_dict(),
            'sessionToken': create_student_session(identity)
        },
        message="Enrolled successfully" if created else "Already enrolled",
        status_code=201 if created else 200
    )


@enrollment_bp.route('/enrollment', methods=['GET'])
def get_enrollment():
    """Enrollment status of the signed-in student for a batch."""
    batch_id = request.args.get('batchId')
    Validator.require({'batchId': batch_id}, ['batchId'])
    identity = resolve_student_identity()

    enrollment = EnrollmentRegistry().lookup(identity.subject_id, batch_id)
    return success_response(data=enrollment.to_dict())
