"""Error kinds raised by the loan workflow.

Each error carries a stable ``code`` and the HTTP status the API maps it to.
"""


class LoanServiceError(Exception):
    """Base exception for all loan workflow errors."""

    code = "loan_service_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LoanServiceError):
    """Raised when a profile, loan, user or notification does not exist."""

    code = "not_found"
    status_code = 404


class ValidationFailed(LoanServiceError):
    """Raised when required fields are missing or malformed."""

    code = "validation_failed"
    status_code = 400


class RetirementWindowTooShort(LoanServiceError):
    """Raised when the employee retires in fewer than the required years."""

    code = "retirement_window_too_short"
    status_code = 400


class EligibilityExceeded(LoanServiceError):
    """Raised when an amount exceeds the remaining eligible balance."""

    code = "eligibility_exceeded"
    status_code = 400


class EligibilityExhausted(EligibilityExceeded):
    """Raised when nothing is left to borrow; reported with the same code as EligibilityExceeded."""


class InvalidStateTransition(LoanServiceError):
    """Raised when a loan is not in the source state a transition requires."""

    code = "invalid_state_transition"
    status_code = 409


class Unauthorized(LoanServiceError):
    """Raised when the actor lacks the role or ownership for an operation."""

    code = "unauthorized"
    status_code = 403


class RenderFailure(LoanServiceError):
    """Raised when contract generation fails."""

    code = "render_failure"
    status_code = 500


class LockTimeout(LoanServiceError):
    """Raised when the per-employee lock cannot be acquired in time."""

    code = "lock_timeout"
    status_code = 503
