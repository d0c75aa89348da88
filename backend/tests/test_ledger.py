"""Tests for the attendance ledger."""
from datetime import date, timedelta

import pytest

from rollcall.errors import NotEnrolled
from rollcall.models.attendance import AttendanceRecord
from rollcall.services.enrollment_service import EnrollmentRegistry
from rollcall.services.ledger_service import AttendanceLedger

DAY = date(2025, 11, 1)


@pytest.fixture
def enrolled(batch, identity):
    EnrollmentRegistry().enroll(identity, batch.id)
    return identity


def test_mark_and_already_marked(batch, enrolled):
    ledger = AttendanceLedger()
    assert ledger.already_marked(enrolled.subject_id, batch.id, DAY) is False

    record, created = ledger.mark(enrolled.subject_id, batch.id, DAY, 'tok')

    assert created is True
    assert record.day == DAY
    assert record.token == 'tok'
    assert ledger.already_marked(enrolled.subject_id, batch.id, DAY) is True
    assert ledger.already_marked(enrolled.subject_id, batch.id, DAY + timedelta(days=1)) is False


def test_repeated_marks_keep_one_record(batch, enrolled):
    """The insert path itself dedups, even without a prior read."""
    ledger = AttendanceLedger()

    first, created = ledger.mark(enrolled.subject_id, batch.id, DAY, 'tok')
    results = [ledger.mark(enrolled.subject_id, batch.id, DAY, 'tok') for _ in range(5)]

    assert created is True
    assert all(created is False for _, created in results)
    assert all(record.id == first.id for record, _ in results)
    assert all(record.marked_at == first.marked_at for record, _ in results)
    assert AttendanceRecord.query.count() == 1


def test_mark_unknown_student(batch):
    with pytest.raises(NotEnrolled):
        AttendanceLedger().mark('nobody', batch.id, DAY, 'tok')


def test_history_most_recent_first(batch, enrolled):
    ledger = AttendanceLedger()
    for offset in (2, 0, 4, 1, 3):
        ledger.mark(enrolled.subject_id, batch.id, DAY + timedelta(days=offset), 'tok')

    history = ledger.history(enrolled.subject_id, batch.id, limit=3)

    assert [record.day for record in history] == [
        DAY + timedelta(days=4), DAY + timedelta(days=3), DAY + timedelta(days=2)
    ]
    again = ledger.history(enrolled.subject_id, batch.id, limit=3)
    assert [record.id for record in again] == [record.id for record in history]


def test_history_is_scoped_to_batch(batch, other_batch, enrolled):
    ledger = AttendanceLedger()
    EnrollmentRegistry().enroll(enrolled, other_batch.id)
    ledger.mark(enrolled.subject_id, batch.id, DAY, 'tok')
    ledger.mark(enrolled.subject_id, other_batch.id, DAY, 'tok2')

    assert len(ledger.history(enrolled.subject_id, batch.id, limit=10)) == 1
    assert ledger.history('someone-else', batch.id, limit=10) == []
