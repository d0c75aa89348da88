"""Enrollment registry: which identities belong to which batch."""
import logging
from typing import Optional, Tuple

from rollcall import db
from rollcall.errors import NotEnrolled
from rollcall.models.base import insert_or_get
from rollcall.models.enrollment import Enrollment
from rollcall.models.student import Student
from rollcall.services.batch_service import BatchService
from rollcall.services.identity_service import Identity

logger = logging.getLogger(__name__)


class EnrollmentRegistry:
    """Maps (student identity, batch) to an enrollment record."""

    def find_student(self, subject_id: str) -> Optional[Student]:
        if not subject_id:
            return None
        return Student.query.filter_by(subject_id=subject_id).first()

    def find(self, subject_id: str, batch_id: str) -> Optional[Enrollment]:
        """Enrollment for (subject, batch), or ``None``."""
        if not subject_id or not batch_id:
            return None
        return (
            Enrollment.query
            .join(Student, Enrollment.student_id == Student.id)
            .filter(Student.subject_id == subject_id, Enrollment.batch_id == batch_id)
            .first()
        )

    def lookup(self, subject_id: str, batch_id: str) -> Enrollment:
        """Enrollment for (subject, batch); raises ``NotEnrolled`` if absent."""
        enrollment = self.find(subject_id, batch_id)
        if enrollment is None:
            raise NotEnrolled()
        return enrollment

    def enroll(self, identity: Identity, batch_id: str) -> Tuple[Enrollment, bool]:
        """Enroll ``identity`` in the batch; idempotent on (subject, batch).

        Returns ``(enrollment, created)``. An existing enrollment is returned
        unchanged, so a re-submitted form does not create a second record.
        """
        BatchService.get_active_batch(batch_id)

        student = self._get_or_create_student(identity)

        existing = Enrollment.query.filter_by(student_id=student.id, batch_id=batch_id).first()
        if existing is not None:
            return existing, False

        enrollment, created = insert_or_get(
            Enrollment(student_id=student.id, batch_id=batch_id),
            student_id=student.id,
            batch_id=batch_id
        )
        if created:
            logger.info('Enrolled student %s in batch %s', student.id, batch_id)
        return enrollment, created

    def _get_or_create_student(self, identity: Identity) -> Student:
        student = self.find_student(identity.subject_id)
        if student is not None:
            if student.refresh_profile(identity):
                db.session.commit()
            return student

        student, created = insert_or_get(
            Student(
                subject_id=identity.subject_id,
                name=identity.name,
                email=identity.email,
                avatar_url=identity.avatar_url
            ),
            subject_id=identity.subject_id
        )
        if created:
            logger.info('Registered student %s', student.id)
        return student
