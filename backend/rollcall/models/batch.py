"""Batch (class cohort) model."""
from rollcall import db
from rollcall.models.base import BaseModel


class Batch(BaseModel):
    """A class batch owning its enrollments and daily tokens.

    Batches are never deleted; closing a batch clears ``is_active``.
    """

    __tablename__ = 'batches'

    name = db.Column(db.String(100), nullable=False)
    institution = db.Column(db.String(255), nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(db.String(32), db.ForeignKey('instructors.id'), nullable=True)

    def to_dict(self, exclude: list = None) -> dict:
        data = super().to_dict(exclude=exclude)
        return {
            'batchId': data.get('id'),
            'batchName': data.get('name'),
            'institution': data.get('institution'),
            'isActive': data.get('is_active'),
            'createdAt': data.get('created_at'),
        }

    def __repr__(self) -> str:
        return f'<Batch {self.name}>'
