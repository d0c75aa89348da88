"""Demo data for local development."""
from typing import Dict

from rollcall import db
from rollcall.models.instructor import Instructor
from rollcall.services.batch_service import BatchService

DEMO_INSTRUCTOR_EMAIL = 'instructor@example.com'
DEMO_INSTRUCTOR_PASSWORD = 'instructor123'
DEMO_INSTITUTION = 'ABC College'


class SeedService:
    """Service for seeding a development database."""

    @staticmethod
    def seed_demo() -> Dict:
        """Create a demo instructor and one open batch."""
        db.create_all()

        instructor = Instructor.query.filter_by(email=DEMO_INSTRUCTOR_EMAIL).first()
        if not instructor:
            instructor = Instructor(email=DEMO_INSTRUCTOR_EMAIL, name='Demo Instructor')
            instructor.set_password(DEMO_INSTRUCTOR_PASSWORD)
            instructor.save()

        batch = BatchService.create_batch(DEMO_INSTITUTION, created_by=instructor.id)

        return {
            'instructor_email': DEMO_INSTRUCTOR_EMAIL,
            'instructor_password': DEMO_INSTRUCTOR_PASSWORD,
            'batch_id': batch.id,
            'batch_name': batch.name,
            'enrollment_url': BatchService.enrollment_url(batch),
        }
