"""Tests for instructor reports."""
from datetime import date

import pytest

from rollcall.errors import ValidationError
from rollcall.services.enrollment_service import EnrollmentRegistry
from rollcall.services.identity_service import Identity
from rollcall.services.ledger_service import AttendanceLedger
from rollcall.services.report_service import ReportService

OCT_31 = date(2025, 10, 31)
NOV_1 = date(2025, 11, 1)
NOV_2 = date(2025, 11, 2)
NOV_3 = date(2025, 11, 3)


@pytest.fixture
def marks(batch, identity):
    """Two students; the first attends four days running, the second one day."""
    second = Identity(subject_id='google-sub-2', name='Second Student', email='second@example.com')
    registry = EnrollmentRegistry()
    registry.enroll(identity, batch.id)
    registry.enroll(second, batch.id)

    ledger = AttendanceLedger()
    for day in (OCT_31, NOV_1, NOV_2, NOV_3):
        ledger.mark(identity.subject_id, batch.id, day, 'tok')
    ledger.mark(second.subject_id, batch.id, NOV_2, 'tok')


def test_range_is_inclusive(marks):
    records = ReportService.attendance_list(start_date=NOV_1, end_date=NOV_2)

    assert [record['date'] for record in records] == ['2025-11-02', '2025-11-02', '2025-11-01']


def test_open_ended_ranges(marks):
    from_nov_2 = ReportService.attendance_list(start_date=NOV_2)
    assert {record['date'] for record in from_nov_2} == {'2025-11-02', '2025-11-03'}

    until_nov_1 = ReportService.attendance_list(end_date=NOV_1)
    assert {record['date'] for record in until_nov_1} == {'2025-10-31', '2025-11-01'}


def test_single_day_range(marks):
    records = ReportService.attendance_list(start_date=NOV_3, end_date=NOV_3)
    assert len(records) == 1
    assert records[0]['date'] == '2025-11-03'


def test_start_after_end_is_rejected(marks):
    with pytest.raises(ValidationError):
        ReportService.attendance_list(start_date=NOV_3, end_date=NOV_1)


def test_summarize(marks):
    records = ReportService.attendance_list(start_date=NOV_1, end_date=NOV_3)

    assert ReportService.summarize(records) == {
        'totalRecords': 4,
        'uniqueStudents': 2,
        'uniqueDates': 3,
    }
    assert ReportService.summarize([]) == {'totalRecords': 0, 'uniqueStudents': 0, 'uniqueDates': 0}
