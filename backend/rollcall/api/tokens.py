"""Daily attendance token API endpoints."""
from flask import Blueprint, Response, request

from rollcall.services.qr_service import QRService
from rollcall.services.token_service import DailyTokenIssuer
from rollcall.utils import dates
from rollcall.utils.decorators import instructor_required
from rollcall.utils.helpers import success_response
from rollcall.utils.validators import Validator

tokens_bp = Blueprint('tokens', __name__)


def _issue_from_args():
    batch_id = request.args.get('batchId')
    Validator.require({'batchId': batch_id}, ['batchId'])

    raw_date = request.args.get('date')
    day = dates.parse_day(raw_date) if raw_date else dates.today()

    issuer = DailyTokenIssuer()
    token, already_existed = issuer.current_token(batch_id, day)
    return issuer, token, already_existed


@tokens_bp.route('', methods=['GET'])
@instructor_required
def current_token():
    """Today's (or ``date``'s) attendance token for a batch."""
    issuer, token, already_existed = _issue_from_args()

    data = token.to_dict()
    data['alreadyExisted'] = already_existed
    data['attendanceUrl'] = issuer.attendance_url(token)

    return success_response(
        data=data,
        message="Token issued" if not already_existed else "Token already issued for this day"
    )


@tokens_bp.route('/qr', methods=['GET'])
@instructor_required
def token_qr():
    """PNG QR code embedding the day's attendance link."""
    issuer, token, _ = _issue_from_args()
    png = QRService.render_png(issuer.attendance_url(token))
    return Response(png, mimetype='image/png', headers={
        'Content-Disposition': f'inline; filename=attendance_{dates.format_day(token.day)}.png',
        'Cache-Control': 'no-store'
    })
