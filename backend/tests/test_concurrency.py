"""Concurrent writers against a shared file-backed database."""
import threading
from datetime import date

import pytest

from rollcall import create_app, db
from rollcall.config import TestingConfig
from rollcall.models.attendance import AttendanceRecord
from rollcall.models.daily_token import DailyToken
from rollcall.models.enrollment import Enrollment
from rollcall.models.instructor import Instructor
from rollcall.models.student import Student
from rollcall.services.batch_service import BatchService
from rollcall.services.enrollment_service import EnrollmentRegistry
from rollcall.services.identity_service import Identity
from rollcall.services.ledger_service import AttendanceLedger
from rollcall.services.token_service import DailyTokenIssuer

THREADS = 8
DAY = date(2025, 11, 1)
STUDENT = Identity(subject_id='google-sub-1', name='Test Student', email='student@example.com')


@pytest.fixture
def shared_app(tmp_path, monkeypatch):
    """App bound to an on-disk SQLite file so every thread sees one database."""
    monkeypatch.setattr(TestingConfig, 'SQLALCHEMY_DATABASE_URI', f"sqlite:///{tmp_path / 'rollcall.db'}")
    monkeypatch.setattr(TestingConfig, 'SQLALCHEMY_ENGINE_OPTIONS', {
        'connect_args': {'timeout': 30, 'check_same_thread': False}
    }, raising=False)

    app = create_app('testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def batch_id(shared_app):
    with shared_app.app_context():
        instructor = Instructor(email='lecturer@example.com', name='Test Instructor')
        instructor.set_password('password123')
        instructor.save()
        return BatchService.create_batch('ABC College', name='BATCH_B1', created_by=instructor.id).id


def run_together(app, work):
    """Run ``work`` in THREADS threads released at once, each in its own app context."""
    barrier = threading.Barrier(THREADS, timeout=30)
    lock = threading.Lock()
    results, errors = [], []

    def worker():
        with app.app_context():
            try:
                barrier.wait()
                outcome = work()
                with lock:
                    results.append(outcome)
            except Exception as e:
                with lock:
                    errors.append(e)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker) for _ in range(THREADS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    return results, errors


def test_concurrent_marks_create_one_record(shared_app, batch_id):
    with shared_app.app_context():
        EnrollmentRegistry().enroll(STUDENT, batch_id)

    def mark():
        record, created = AttendanceLedger().mark(STUDENT.subject_id, batch_id, DAY, 'tok')
        return record.id, created

    results, errors = run_together(shared_app, mark)

    assert errors == []
    assert len(results) == THREADS
    assert len({record_id for record_id, _ in results}) == 1
    assert [created for _, created in results].count(True) == 1
    with shared_app.app_context():
        assert AttendanceRecord.query.count() == 1


def test_concurrent_token_requests_share_one_token(shared_app, batch_id):
    def issue():
        token, already_existed = DailyTokenIssuer().current_token(batch_id, DAY)
        return token.token, already_existed

    results, errors = run_together(shared_app, issue)

    assert errors == []
    assert len(results) == THREADS
    assert len({value for value, _ in results}) == 1
    assert [already_existed for _, already_existed in results].count(False) == 1
    with shared_app.app_context():
        assert DailyToken.query.count() == 1


def test_concurrent_enrollments_converge(shared_app, batch_id):
    def enroll():
        enrollment, created = EnrollmentRegistry().enroll(STUDENT, batch_id)
        return enrollment.id, created

    results, errors = run_together(shared_app, enroll)

    assert errors == []
    assert len(results) == THREADS
    assert len({enrollment_id for enrollment_id, _ in results}) == 1
    assert [created for _, created in results].count(True) == 1
    with shared_app.app_context():
        assert Enrollment.query.count() == 1
        assert Student.query.count() == 1
