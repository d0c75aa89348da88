"""Attendance ledger: at most one mark per (student, batch, day)."""
import logging
from datetime import date
from typing import List, Optional, Tuple

from rollcall.errors import NotEnrolled
from rollcall.models.attendance import AttendanceRecord
from rollcall.models.base import insert_or_get
from rollcall.models.student import Student

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Append-only store of attendance marks."""

    def find(self, subject_id: str, batch_id: str, day: date) -> Optional[AttendanceRecord]:
        return (
            AttendanceRecord.query
            .join(Student, AttendanceRecord.student_id == Student.id)
            .filter(
                Student.subject_id == subject_id,
                AttendanceRecord.batch_id == batch_id,
                AttendanceRecord.day == day
            )
            .first()
        )

    def already_marked(self, subject_id: str, batch_id: str, day: date) -> bool:
        return self.find(subject_id, batch_id, day) is not None

    def mark(self, subject_id: str, batch_id: str, day: date, token_value: str) -> Tuple[AttendanceRecord, bool]:
        """Record attendance; idempotent on (subject, batch, day).

        Returns ``(record, created)``. When a record already exists, including
        one written by a concurrent request between our check and our insert,
        that record is returned unchanged.
        """
        student = Student.query.filter_by(subject_id=subject_id).first()
        if student is None:
            raise NotEnrolled()

        record, created = insert_or_get(
            AttendanceRecord(student_id=student.id, batch_id=batch_id, day=day, token=token_value),
            student_id=student.id,
            batch_id=batch_id,
            day=day
        )
        if created:
            logger.info('Marked student %s present in batch %s on %s', student.id, batch_id, day.isoformat())
        return record, created

    def history(self, subject_id: str, batch_id: str, limit: int) -> List[AttendanceRecord]:
        """Most recent marks first; stable ordering for repeated queries."""
        return (
            AttendanceRecord.query
            .join(Student, AttendanceRecord.student_id == Student.id)
            .filter(Student.subject_id == subject_id, AttendanceRecord.batch_id == batch_id)
            .order_by(
                AttendanceRecord.day.desc(),
                AttendanceRecord.created_at.desc(),
                AttendanceRecord.id.desc()
            )
            .limit(limit)
            .all()
        )
