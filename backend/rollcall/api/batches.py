"""Batch management API endpoints."""
from flask import Blueprint, Response, g, request

from rollcall.services.batch_service import BatchService
from rollcall.services.qr_service import QRService
from rollcall.utils.decorators import instructor_required
from rollcall.utils.helpers import success_response
from rollcall.utils.validators import Validator

batches_bp = Blueprint('batches', __name__)


@batches_bp.route('', methods=['POST'])
@instructor_required
def create_batch():
    """Create a batch and return its enrollment and attendance links."""
    data = Validator.require(request.get_json(silent=True), ['institution'])

    batch = BatchService.create_batch(
        institution=data['institution'],
        name=Validator.optional_string(data, 'name'),
        created_by=g.instructor.id
    )

    payload = BatchService.to_payload(batch)
    payload['enrollmentQr'] = QRService.render_data_uri(payload['enrollmentUrl'])

    return success_response(
        data=payload,
        message="Batch created successfully",
        status_code=201
    )


@batches_bp.route('', methods=['GET'])
@instructor_required
def list_batches():
    """List batches, optionally filtered by institution or active flag."""
    active = request.args.get('active')
    if active is not None:
        active = active.lower() in ['true', '1', 'yes']

    batches = BatchService.list_batches(
        institution=request.args.get('institution'),
        active=active
    )

    return success_response(data=[BatchService.to_payload(batch) for batch in batches])


@batches_bp.route('/institutions', methods=['GET'])
@instructor_required
def list_institutions():
    return success_response(data=BatchService.list_institutions())


@batches_bp.route('/<batch_id>', methods=['GET'])
def get_batch(batch_id):
    """Public batch details shown on the enrollment page."""
    batch = BatchService.get_batch(batch_id)
    return success_response(data=batch.to_dict())


@batches_bp.route('/<batch_id>/deactivate', methods=['POST'])
@instructor_required
def deactivate_batch(batch_id):
    """Close a batch to new enrollments and check-ins."""
    batch = BatchService.deactivate_batch(batch_id)
    return success_response(data=BatchService.to_payload(batch), message="Batch deactivated")


@batches_bp.route('/<batch_id>/qr/enrollment', methods=['GET'])
@instructor_required
def enrollment_qr(batch_id):
    """PNG QR code for the batch's enrollment link."""
    batch = BatchService.get_active_batch(batch_id)
    png = QRService.render_png(BatchService.enrollment_url(batch))
    return Response(png, mimetype='image/png', headers={
        'Content-Disposition': f'inline; filename={batch.name}_enrollment_qr.png'
    })
