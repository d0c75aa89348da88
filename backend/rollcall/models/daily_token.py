"""Daily attendance token for a batch."""
import secrets

from rollcall import db
from rollcall.models.base import BaseModel
from rollcall.utils.dates import isoformat, format_day

TOKEN_BYTES = 32


class DailyToken(BaseModel):
    """One live token per (batch, calendar day).

    Past tokens stay in the table so they remain resolvable for audit.
    """

    __tablename__ = 'daily_tokens'
    __table_args__ = (
        db.UniqueConstraint('batch_id', 'day', name='uq_daily_token_batch_day'),
    )

    batch_id = db.Column(db.String(32), db.ForeignKey('batches.id'), nullable=False, index=True)
    day = db.Column(db.Date, nullable=False)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)

    batch = db.relationship('Batch', lazy='joined')

    @staticmethod
    def generate_token() -> str:
        """256 bits from the OS CSPRNG, URL-safe base64."""
        return secrets.token_urlsafe(TOKEN_BYTES)

    @property
    def issued_at(self):
        return self.created_at

    def to_dict(self, exclude: list = None) -> dict:
        return {
            'token': self.token,
            'batchId': self.batch_id,
            'date': format_day(self.day),
            'issuedAt': isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f'<DailyToken {self.batch_id} {self.day}>'
