"""Daily attendance token issuance and resolution."""
import logging
from datetime import date
from typing import Tuple
from urllib.parse import urlencode

from flask import current_app

from rollcall.errors import InvalidToken
from rollcall.models.base import insert_or_get
from rollcall.models.daily_token import DailyToken
from rollcall.services.batch_service import BatchService

logger = logging.getLogger(__name__)


class DailyTokenIssuer:
    """Issues one attendance token per (batch, calendar day).

    Tokens rotate daily, so a photographed QR code is only useful on the day
    it was displayed, while every student of that day can scan the same code.
    """

    def current_token(self, batch_id: str, day: date) -> Tuple[DailyToken, bool]:
        """Return the token for (batch, day), minting it on first request.

        ``day`` is chosen by the caller; an instructor may prepare a token for
        a make-up session on another date. Returns ``(token, already_existed)``.
        """
        BatchService.get_active_batch(batch_id)

        existing = DailyToken.query.filter_by(batch_id=batch_id, day=day).first()
        if existing is not None:
            return existing, True

        token, created = insert_or_get(
            DailyToken(batch_id=batch_id, day=day, token=DailyToken.generate_token()),
            batch_id=batch_id,
            day=day
        )
        if created:
            logger.info('Issued attendance token for batch %s on %s', batch_id, day.isoformat())
        return token, not created

    def resolve(self, token_value: str) -> DailyToken:
        """Find the issued token; raises ``InvalidToken`` if unknown."""
        if not token_value or not isinstance(token_value, str):
            raise InvalidToken()
        token = DailyToken.query.filter_by(token=token_value.strip()).first()
        if token is None:
            raise InvalidToken()
        return token

    def attendance_url(self, token: DailyToken) -> str:
        """Check-in link embedded in the day's QR code."""
        query = urlencode({'batch': token.batch_id, 'token': token.token})
        return f"{current_app.config['APP_URL'].rstrip('/')}/student/attend.html?{query}"
