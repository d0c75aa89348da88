"""Attendance record model."""
from rollcall import db
from rollcall.models.base import BaseModel
from rollcall.utils.dates import isoformat, format_day


class AttendanceRecord(BaseModel):
    """One attendance mark per (student, batch, day); never mutated."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'batch_id', 'day', name='uq_attendance_student_batch_day'),
        db.Index('ix_attendance_batch_day', 'batch_id', 'day'),
    )

    student_id = db.Column(db.String(32), db.ForeignKey('students.id'), nullable=False, index=True)
    batch_id = db.Column(db.String(32), db.ForeignKey('batches.id'), nullable=False)
    day = db.Column(db.Date, nullable=False)
    token = db.Column(db.String(64), nullable=False)

    student = db.relationship('Student', lazy='joined')
    batch = db.relationship('Batch', lazy='joined')

    @property
    def marked_at(self):
        return self.created_at

    def to_dict(self, exclude: list = None) -> dict:
        return {
            'attendanceId': self.id,
            'studentId': self.student_id,
            'batchId': self.batch_id,
            'date': format_day(self.day),
            'timestamp': isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f'<AttendanceRecord {self.student_id}-{self.batch_id}-{self.day}>'
