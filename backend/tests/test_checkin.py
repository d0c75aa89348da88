"""Tests for the check-in state machine."""
from datetime import date

import pytest

from rollcall.errors import (
    BatchInactive, InvalidCredential, InvalidToken, NotEnrolled,
    TokenBatchMismatch, TokenExpired
)
from rollcall.models.attendance import AttendanceRecord
from rollcall.services.batch_service import BatchService
from rollcall.services.checkin_service import CheckInOrchestrator, CheckInState
from rollcall.services.enrollment_service import EnrollmentRegistry
from rollcall.services.token_service import DailyTokenIssuer

NOV_1 = date(2025, 11, 1)
NOV_2 = date(2025, 11, 2)


@pytest.fixture
def orchestrator(verifier):
    return CheckInOrchestrator(verifier, clock=lambda: NOV_1)


@pytest.fixture
def enrolled(batch, identity):
    EnrollmentRegistry().enroll(identity, batch.id)
    return identity


@pytest.fixture
def token(batch):
    token, _ = DailyTokenIssuer().current_token(batch.id, NOV_1)
    return token


def test_check_in_with_credential(orchestrator, batch, enrolled, token, make_credential):
    attempt = orchestrator.check_in(batch.id, token.token, credential=make_credential())

    assert attempt.state is CheckInState.MARKED
    assert attempt.transitions == [
        CheckInState.IDENTITY_PENDING,
        CheckInState.ENROLLMENT_PENDING,
        CheckInState.TOKEN_VALIDATION,
        CheckInState.MARKING,
        CheckInState.MARKED,
    ]
    assert attempt.to_dict()['status'] == 'marked'
    assert attempt.record.token == token.token


def test_reentry_with_session_identity_skips_verification(orchestrator, batch, enrolled, token):
    attempt = orchestrator.check_in(batch.id, token.token, identity=enrolled)

    assert attempt.transitions[0] is CheckInState.ENROLLMENT_PENDING
    assert attempt.state is CheckInState.MARKED


def test_second_check_in_is_already_marked(orchestrator, batch, enrolled, token):
    first = orchestrator.check_in(batch.id, token.token, identity=enrolled)
    second = orchestrator.check_in(batch.id, token.token, identity=enrolled)

    assert second.state is CheckInState.ALREADY_MARKED
    assert second.failure is None
    assert second.to_dict()['timestamp'] == first.to_dict()['timestamp']
    assert AttendanceRecord.query.count() == 1


def test_lost_insert_race_reports_already_marked(orchestrator, batch, enrolled, token, monkeypatch):
    """Two concurrent attempts both pass the read gate; only one row is written."""
    orchestrator.check_in(batch.id, token.token, identity=enrolled)
    monkeypatch.setattr(orchestrator.ledger, 'find', lambda *args: None)

    attempt = orchestrator.check_in(batch.id, token.token, identity=enrolled)

    assert attempt.transitions[-2:] == [CheckInState.MARKING, CheckInState.ALREADY_MARKED]
    assert attempt.state is CheckInState.ALREADY_MARKED
    assert AttendanceRecord.query.count() == 1


def test_invalid_credential_fails(orchestrator, batch, enrolled, token, make_credential, other_key):
    with pytest.raises(InvalidCredential):
        orchestrator.check_in(batch.id, token.token, credential=make_credential(key=other_key))

    with pytest.raises(InvalidCredential):
        orchestrator.check_in(batch.id, token.token)


def test_not_enrolled(orchestrator, batch, token, identity):
    with pytest.raises(NotEnrolled):
        orchestrator.check_in(batch.id, token.token, identity=identity)


def test_unknown_token(orchestrator, batch, enrolled):
    with pytest.raises(InvalidToken):
        orchestrator.check_in(batch.id, 'forged-token', identity=enrolled)


def test_token_from_another_batch_is_rejected(orchestrator, batch, other_batch, enrolled):
    """Enrolled in both batches, presenting batch B's token for batch A."""
    EnrollmentRegistry().enroll(enrolled, other_batch.id)
    other_token, _ = DailyTokenIssuer().current_token(other_batch.id, NOV_1)

    with pytest.raises(TokenBatchMismatch):
        orchestrator.check_in(batch.id, other_token.token, identity=enrolled)
    assert AttendanceRecord.query.count() == 0


def test_token_expires_next_day(batch, enrolled, token, verifier, make_credential):
    next_day = CheckInOrchestrator(verifier, clock=lambda: NOV_2)

    with pytest.raises(TokenExpired):
        next_day.check_in(batch.id, token.token, credential=make_credential())


def test_inactive_batch(orchestrator, batch, enrolled, token):
    BatchService.deactivate_batch(batch.id)

    with pytest.raises(BatchInactive):
        orchestrator.check_in(batch.id, token.token, identity=enrolled)


def test_failure_carries_error_code(orchestrator, batch, enrolled):
    with pytest.raises(InvalidToken) as exc:
        orchestrator.check_in(batch.id, 'nope', identity=enrolled)

    assert exc.value.code == 'InvalidToken'


def test_daily_scenario(verifier, batch, identity, make_credential):
    """Enroll, check in twice on day one, then the old token expires on day two."""
    EnrollmentRegistry().enroll(identity, batch.id)
    issuer = DailyTokenIssuer()
    t1, _ = issuer.current_token(batch.id, NOV_1)

    day_one = CheckInOrchestrator(verifier, clock=lambda: NOV_1)
    first = day_one.check_in(batch.id, t1.token, credential=make_credential())
    again = day_one.check_in(batch.id, t1.token, credential=make_credential())

    assert first.to_dict()['status'] == 'marked'
    assert again.to_dict()['status'] == 'already_marked'
    assert again.to_dict()['timestamp'] == first.to_dict()['timestamp']

    t2, existed = issuer.current_token(batch.id, NOV_2)
    assert existed is False
    assert t2.token != t1.token

    day_two = CheckInOrchestrator(verifier, clock=lambda: NOV_2)
    with pytest.raises(TokenExpired):
        day_two.check_in(batch.id, t1.token, credential=make_credential())

    assert day_two.check_in(batch.id, t2.token, credential=make_credential()).state is CheckInState.MARKED
