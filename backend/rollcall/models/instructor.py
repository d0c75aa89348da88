"""Instructor accounts that manage batches and display daily QR codes."""
from werkzeug.security import generate_password_hash, check_password_hash
from rollcall import db
from rollcall.models.base import BaseModel


class Instructor(BaseModel):
    """Instructor model."""

    __tablename__ = 'instructors'

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    def set_password(self, password: str) -> None:
        """Set instructor password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        exclude = (exclude or []) + ['password_hash']
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<Instructor {self.email}>'
