"""Error taxonomy for the ballot core.

Services raise these exceptions after rolling back their unit of work. Each
class carries a stable ``code`` so the transport layer can map it to a distinct
outward signal without inspecting messages.
"""

from __future__ import annotations


class BallotError(Exception):
    """Base class for all ballot domain errors."""

    code = "ballot_error"
    default_message = "Ballot operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotAuthenticated(BallotError):
    code = "not_authenticated"
    default_message = "Not authenticated"


class Forbidden(BallotError):
    """Raised when the caller lacks the required role or admin rights."""

    code = "forbidden"
    default_message = "Access denied"


class NoActivePeriod(BallotError):
    code = "no_active_period"
    default_message = "No active period"


class InvalidPeriodState(BallotError):
    code = "invalid_period_state"
    default_message = "Invalid period state"


class StaleTransition(BallotError):
    """Raised when the phase changed between reading and applying a transition."""

    code = "stale_transition"
    default_message = "Period changed concurrently; re-read the current phase"


class WrongPhase(BallotError):
    """Raised when an operation is attempted outside its phase."""

    code = "wrong_phase"

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Not in {expected} phase (current phase: {actual})")


class InvalidAddressFormat(BallotError):
    code = "invalid_address_format"
    default_message = "Invalid contract address format"


class DuplicateSubmission(BallotError):
    code = "duplicate_submission"
    default_message = "Collection already submitted"


class SubmissionNotFound(BallotError):
    code = "submission_not_found"
    default_message = "Submission not found"


class VoteCapExceeded(BallotError):
    code = "vote_cap_exceeded"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Maximum {limit} votes allowed")


class AlreadyComputed(BallotError):
    code = "already_computed"

    def __init__(self, period_id: int) -> None:
        self.period_id = period_id
        super().__init__(f"Winners already computed for period {period_id}")


class StorageFailure(BallotError):
    """Transient storage error; the unit of work was rolled back."""

    code = "storage_failure"
    default_message = "Storage temporarily unavailable"
