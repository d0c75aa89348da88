"""Check-in orchestration.

Each attempt walks a small state machine::

    IDENTITY_PENDING -> ENROLLMENT_PENDING -> TOKEN_VALIDATION
        -> ALREADY_MARKED
        -> MARKING -> MARKED

``FAILED`` is reachable from every state and carries the typed error. An
attempt that starts from an identity already proven by a server-signed
session skips straight to ``ENROLLMENT_PENDING``, which is what happens when
a student reloads the check-in page.
"""
import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from rollcall.errors import (
    RollcallError, InvalidCredential, TokenBatchMismatch, TokenExpired
)
from rollcall.models.attendance import AttendanceRecord
from rollcall.models.daily_token import DailyToken
from rollcall.models.enrollment import Enrollment
from rollcall.services.batch_service import BatchService
from rollcall.services.enrollment_service import EnrollmentRegistry
from rollcall.services.identity_service import Identity, IdentityVerifier
from rollcall.services.ledger_service import AttendanceLedger
from rollcall.services.token_service import DailyTokenIssuer
from rollcall.utils import dates
from rollcall.utils.dates import isoformat, format_day

logger = logging.getLogger(__name__)


class CheckInState(enum.Enum):
    """States of a single check-in attempt."""
    IDENTITY_PENDING = 'identity_pending'
    ENROLLMENT_PENDING = 'enrollment_pending'
    TOKEN_VALIDATION = 'token_validation'
    MARKING = 'marking'
    ALREADY_MARKED = 'already_marked'
    MARKED = 'marked'
    FAILED = 'failed'


TERMINAL_STATES = (CheckInState.MARKED, CheckInState.ALREADY_MARKED, CheckInState.FAILED)


@dataclass
class CheckInAttempt:
    """Progress and outcome of one check-in attempt."""
    batch_id: str
    token_value: str
    day: date
    state: CheckInState = CheckInState.IDENTITY_PENDING
    identity: Optional[Identity] = None
    enrollment: Optional[Enrollment] = None
    token: Optional[DailyToken] = None
    record: Optional[AttendanceRecord] = None
    failure: Optional[RollcallError] = None
    transitions: List[CheckInState] = field(default_factory=list)

    def __post_init__(self):
        self.transitions.append(self.state)

    def advance(self, state: CheckInState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f'Check-in attempt already finished in {self.state.value}')
        self.state = state
        self.transitions.append(state)

    def fail(self, error: RollcallError) -> None:
        """Move to ``FAILED`` and raise ``error``."""
        self.failure = error
        self.state = CheckInState.FAILED
        self.transitions.append(CheckInState.FAILED)
        raise error

    @property
    def succeeded(self) -> bool:
        return self.state in (CheckInState.MARKED, CheckInState.ALREADY_MARKED)

    def to_dict(self) -> dict:
        return {
            'status': self.state.value,
            'timestamp': isoformat(self.record.marked_at) if self.record else None,
            'date': format_day(self.day),
            'batchId': self.batch_id,
        }


class CheckInOrchestrator:
    """Validates identity, enrollment and token, then writes the ledger.

    Holds no state between attempts; everything shared lives in the
    database behind the registry, issuer and ledger.
    """

    def __init__(
        self,
        verifier: IdentityVerifier,
        registry: EnrollmentRegistry = None,
        issuer: DailyTokenIssuer = None,
        ledger: AttendanceLedger = None,
        clock: Callable[[], date] = None
    ):
        self.verifier = verifier
        self.registry = registry or EnrollmentRegistry()
        self.issuer = issuer or DailyTokenIssuer()
        self.ledger = ledger or AttendanceLedger()
        self.clock = clock or dates.today

    def check_in(
        self,
        batch_id: str,
        token_value: str,
        credential: str = None,
        identity: Identity = None,
        today: date = None
    ) -> CheckInAttempt:
        """Run one attempt to a terminal state.

        Raises the attempt's ``RollcallError`` when it ends in ``FAILED``.
        """
        attempt = CheckInAttempt(
            batch_id=batch_id,
            token_value=token_value,
            day=today or self.clock(),
            state=CheckInState.ENROLLMENT_PENDING if identity else CheckInState.IDENTITY_PENDING
        )

        try:
            if attempt.state is CheckInState.IDENTITY_PENDING:
                self._establish_identity(attempt, credential)
            else:
                attempt.identity = identity

            self._check_enrollment(attempt)
            self._validate_token(attempt)
            self._mark(attempt)
        except RollcallError as e:
            if attempt.state is not CheckInState.FAILED:
                logger.info(
                    'Check-in for batch %s failed in %s: %s',
                    batch_id, attempt.state.value, e.code
                )
                attempt.fail(e)
            raise

        logger.info(
            'Check-in for batch %s on %s: %s',
            batch_id, format_day(attempt.day), attempt.state.value
        )
        return attempt

    def _establish_identity(self, attempt: CheckInAttempt, credential: str) -> None:
        if not credential:
            attempt.fail(InvalidCredential('Please sign in to mark attendance.'))
        attempt.identity = self.verifier.verify(credential)
        attempt.advance(CheckInState.ENROLLMENT_PENDING)

    def _check_enrollment(self, attempt: CheckInAttempt) -> None:
        BatchService.get_active_batch(attempt.batch_id)
        attempt.enrollment = self.registry.lookup(attempt.identity.subject_id, attempt.batch_id)
        attempt.advance(CheckInState.TOKEN_VALIDATION)

    def _validate_token(self, attempt: CheckInAttempt) -> None:
        token = self.issuer.resolve(attempt.token_value)
        if token.batch_id != attempt.enrollment.batch_id:
            attempt.fail(TokenBatchMismatch())
        if token.day != attempt.day:
            attempt.fail(TokenExpired())
        attempt.token = token

    def _mark(self, attempt: CheckInAttempt) -> None:
        subject_id = attempt.identity.subject_id
        existing = self.ledger.find(subject_id, attempt.batch_id, attempt.day)
        if existing is not None:
            attempt.record = existing
            attempt.advance(CheckInState.ALREADY_MARKED)
            return

        attempt.advance(CheckInState.MARKING)
        record, created = self.ledger.mark(subject_id, attempt.batch_id, attempt.day, attempt.token.token)
        attempt.record = record
        if created:
            attempt.advance(CheckInState.MARKED)
        else:
            # Lost the insert race to a concurrent request for the same key.
            attempt.advance(CheckInState.ALREADY_MARKED)
