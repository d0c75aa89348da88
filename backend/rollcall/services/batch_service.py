"""Batch management service."""
import logging
import secrets
import string
from typing import Dict, List, Optional
from urllib.parse import urlencode

from flask import current_app

from rollcall import db
from rollcall.errors import BatchNotFound, BatchInactive, ValidationError
from rollcall.models.batch import Batch
from rollcall.utils.validators import Validator

logger = logging.getLogger(__name__)

BATCH_NAME_ALPHABET = string.ascii_uppercase + string.digits


class BatchService:
    """Service for creating and looking up class batches."""

    @staticmethod
    def generate_batch_name(length: int = 6) -> str:
        """Generate a display name such as ``BATCH_5X8A9B``."""
        prefix = current_app.config.get('BATCH_NAME_PREFIX', 'BATCH_')
        return prefix + ''.join(secrets.choice(BATCH_NAME_ALPHABET) for _ in range(length))

    @staticmethod
    def create_batch(institution: str, name: str = None, created_by: str = None) -> Batch:
        """Create a new active batch."""
        institution = (institution or '').strip()
        result = Validator.validate_name(institution, 'Institution')
        if not result['is_valid']:
            raise ValidationError('; '.join(result['errors']))

        name = (name or '').strip() or BatchService.generate_batch_name()
        if len(name) > 100:
            raise ValidationError('Batch name is too long')

        batch = Batch(name=name, institution=institution, created_by=created_by)
        batch.save()
        logger.info('Created batch %s (%s) for %s', batch.id, batch.name, batch.institution)
        return batch

    @staticmethod
    def get_batch(batch_id: str) -> Batch:
        """Return the batch or raise ``BatchNotFound``."""
        batch = Batch.get_by_id(batch_id)
        if batch is None:
            raise BatchNotFound()
        return batch

    @staticmethod
    def get_active_batch(batch_id: str) -> Batch:
        """Return the batch if it exists and is still open."""
        batch = BatchService.get_batch(batch_id)
        if not batch.is_active:
            raise BatchInactive()
        return batch

    @staticmethod
    def list_batches(institution: str = None, active: Optional[bool] = None) -> List[Batch]:
        query = Batch.query
        if institution:
            query = query.filter_by(institution=institution)
        if active is not None:
            query = query.filter_by(is_active=active)
        return query.order_by(Batch.created_at.desc(), Batch.id).all()

    @staticmethod
    def deactivate_batch(batch_id: str) -> Batch:
        """Close a batch. Enrollments, tokens and marks are kept."""
        batch = BatchService.get_batch(batch_id)
        if batch.is_active:
            batch.is_active = False
            db.session.commit()
            logger.info('Deactivated batch %s', batch.id)
        return batch

    @staticmethod
    def list_institutions() -> List[str]:
        """Distinct institution names across all batches."""
        rows = db.session.query(Batch.institution).distinct().order_by(Batch.institution).all()
        return [row[0] for row in rows]

    @staticmethod
    def enrollment_url(batch: Batch) -> str:
        """Link encoded in the one-time enrollment QR code."""
        query = urlencode({'batch': batch.id, 'college': batch.institution})
        return f"{current_app.config['APP_URL'].rstrip('/')}/student/enroll.html?{query}"

    @staticmethod
    def attendance_page_url(batch: Batch) -> str:
        """Check-in page for a batch, without a day's token."""
        query = urlencode({'batch': batch.id})
        return f"{current_app.config['APP_URL'].rstrip('/')}/student/attend.html?{query}"

    @staticmethod
    def to_payload(batch: Batch) -> Dict:
        data = batch.to_dict()
        data['enrollmentUrl'] = BatchService.enrollment_url(batch)
        data['attendanceUrl'] = BatchService.attendance_page_url(batch)
        return data
