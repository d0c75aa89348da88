"""Base model class with common functionality."""
import uuid
from datetime import date, datetime
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError

from rollcall import db
from rollcall.utils.dates import utcnow, isoformat, format_day


def new_id() -> str:
    """Opaque, non-sequential identifier."""
    return uuid.uuid4().hex


class BaseModel(db.Model):
    """Base model class with common fields and methods."""

    __abstract__ = True

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def save(self) -> 'BaseModel':
        """Save instance to database."""
        db.session.add(self)
        db.session.commit()
        return self

    def to_dict(self, exclude: list = None) -> Dict[str, Any]:
        """Convert instance to dictionary."""
        exclude = exclude or []
        result = {}

        for column in self.__table__.columns:
            key = column.name
            if key not in exclude:
                value = getattr(self, key)
                if isinstance(value, datetime):
                    value = isoformat(value)
                elif isinstance(value, date):
                    value = format_day(value)
                result[key] = value

        return result

    @classmethod
    def get_by_id(cls, id: str) -> 'BaseModel':
        """Get instance by ID."""
        if not id:
            return None
        return db.session.get(cls, id)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.id}>'


def insert_or_get(instance: BaseModel, **lookup):
    """Atomically insert ``instance`` unless a row matching ``lookup`` exists.

    The unique constraint on the lookup columns arbitrates concurrent
    writers: the loser's INSERT fails with ``IntegrityError``, its session is
    rolled back, and the winner's row is returned. Returns ``(row, created)``.
    """
    model = type(instance)
    db.session.add(instance)
    try:
        db.session.commit()
        return instance, True
    except IntegrityError:
        db.session.rollback()
        existing = model.query.filter_by(**lookup).first()
        if existing is None:
            raise
        return existing, False
