from datetime import timedelta

import pytest

from hr_loans.core import security
from hr_loans.core.config import _mask_secret, settings
from hr_loans.core.exceptions import (
    EligibilityExceeded,
    EligibilityExhausted,
    InvalidStateTransition,
    LoanServiceError,
    LockTimeout,
    NotFound,
    RenderFailure,
    RetirementWindowTooShort,
    Unauthorized,
    ValidationFailed,
)


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", "unit-test-secret")


def test_password_hash_roundtrip():
    hashed = security.hash_password("Password@123")
    assert hashed != "Password@123"
    assert security.verify_password("Password@123", hashed)
    assert not security.verify_password("wrong-password", hashed)


def test_short_password_rejected():
    assert not security.is_valid_password("short")
    assert not security.is_valid_password(None)
    with pytest.raises(ValueError):
        security.hash_password("short")


def test_verify_against_garbage_hash_is_false():
    assert not security.verify_password("Password@123", "not-a-bcrypt-hash")


def test_token_carries_subject_and_role():
    token = security.create_access_token({"sub": "hr@example.com", "role": "HR_MANAGER"})
    payload = security.decode_token(token)
    assert payload["sub"] == "hr@example.com"
    assert payload["role"] == "HR_MANAGER"


def test_expired_or_tampered_token_is_rejected(monkeypatch):
    expired = security.create_access_token({"sub": "a@example.com"}, expires_delta=timedelta(minutes=-5))
    assert security.decode_token(expired) is None

    token = security.create_access_token({"sub": "a@example.com"})
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", "another-secret")
    assert security.decode_token(token) is None


def test_mask_secret():
    assert _mask_secret(None) == "<missing>"
    assert _mask_secret("abc") == "***"
    assert _mask_secret("supersecretvalue") == "supe...alue"


def test_policy_from_settings():
    policy = settings.policy()
    assert policy.term_months == settings.CONTRACT_TERM_MONTHS
    assert policy.salary_multiplier == settings.LOAN_SALARY_MULTIPLIER


@pytest.mark.parametrize("error_class, code, status", [
    (NotFound, "not_found", 404),
    (ValidationFailed, "validation_failed", 400),
    (RetirementWindowTooShort, "retirement_window_too_short", 400),
    (EligibilityExceeded, "eligibility_exceeded", 400),
    (EligibilityExhausted, "eligibility_exceeded", 400),
    (InvalidStateTransition, "invalid_state_transition", 409),
    (Unauthorized, "unauthorized", 403),
    (RenderFailure, "render_failure", 500),
    (LockTimeout, "lock_timeout", 503),
])
def test_error_codes(error_class, code, status):
    error = error_class("boom")
    assert isinstance(error, LoanServiceError)
    assert error.code == code
    assert error.status_code == status
    assert error.message == "boom"
    assert str(error) == "boom"
