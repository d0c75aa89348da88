"""Enrollment of a student in a batch."""
from rollcall import db
from rollcall.models.base import BaseModel
from rollcall.utils.dates import isoformat


class Enrollment(BaseModel):
    """At most one enrollment per (student, batch)."""

    __tablename__ = 'enrollments'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'batch_id', name='uq_enrollment_student_batch'),
    )

    student_id = db.Column(db.String(32), db.ForeignKey('students.id'), nullable=False, index=True)
    batch_id = db.Column(db.String(32), db.ForeignKey('batches.id'), nullable=False, index=True)

    student = db.relationship('Student', lazy='joined')
    batch = db.relationship('Batch', lazy='joined')

    @property
    def enrolled_at(self):
        return self.created_at

    def to_dict(self, exclude: list = None) -> dict:
        return {
            'enrollmentId': self.id,
            'studentId': self.student_id,
            'batchId': self.batch_id,
            'batchName': self.batch.name if self.batch else None,
            'institution': self.batch.institution if self.batch else None,
            'name': self.student.name if self.student else None,
            'email': self.student.email if self.student else None,
            'enrolledAt': isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f'<Enrollment {self.student_id}-{self.batch_id}>'
