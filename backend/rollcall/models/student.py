"""Student model keyed by the identity provider's subject id."""
from rollcall import db
from rollcall.models.base import BaseModel
from rollcall.utils.dates import utcnow


class Student(BaseModel):
    """Student identity created on first enrollment."""

    __tablename__ = 'students'

    subject_id = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    avatar_url = db.Column(db.String(1024), nullable=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def refresh_profile(self, identity) -> bool:
        """Copy display fields from a newer verified sign-in."""
        changed = False
        for attr in ('name', 'email', 'avatar_url'):
            value = getattr(identity, attr)
            if value and getattr(self, attr) != value:
                setattr(self, attr, value)
                changed = True
        return changed

    def to_dict(self, exclude: list = None) -> dict:
        return {
            'studentId': self.id,
            'subjectId': self.subject_id,
            'name': self.name,
            'email': self.email,
            'avatarUrl': self.avatar_url,
        }

    def __repr__(self) -> str:
        return f'<Student {self.subject_id}>'
