from datetime import date
from decimal import Decimal

import pytest

from hr_loans.core.exceptions import (
    EligibilityExceeded,
    EligibilityExhausted,
    InvalidStateTransition,
    RetirementWindowTooShort,
    Unauthorized,
)
from hr_loans.domain import eligibility
from hr_loans.domain.policy import LoanPolicy
from hr_loans.domain.records import LoanStatus
from hr_loans.domain.workflow import (
    COMMITTED_STATES,
    RECOMMEND,
    REJECT,
    RESERVE_APPROVAL,
    TERMINAL_STATES,
    TRANSITIONS,
    authorize,
    ensure_source,
)


def test_max_loan_is_six_times_salary():
    assert eligibility.max_loan(Decimal("15000")) == Decimal("90000")
    assert eligibility.max_loan(Decimal("12345.67")) == Decimal("74074.02")


def test_assess_subtracts_committed_amounts():
    snapshot = eligibility.assess(Decimal("15000"), [Decimal("20000"), Decimal("10000.50"), None])

    assert snapshot.max_loan == Decimal("90000")
    assert snapshot.total_approved == Decimal("30000.50")
    assert snapshot.remaining == Decimal("59999.50")
    assert eligibility.remaining_eligible(Decimal("15000"), []) == Decimal("90000")


def test_custom_multiplier():
    policy = LoanPolicy(salary_multiplier=Decimal("4"))
    assert eligibility.assess(Decimal("1000"), [], policy).remaining == Decimal("4000")


def test_amount_equal_to_remaining_is_allowed():
    snapshot = eligibility.assess(Decimal("15000"), [Decimal("50000")])
    eligibility.ensure_amount_within(Decimal("40000"), snapshot)


def test_amount_one_unit_over_remaining_fails():
    snapshot = eligibility.assess(Decimal("15000"), [Decimal("50000")])
    with pytest.raises(EligibilityExceeded) as excinfo:
        eligibility.ensure_amount_within(Decimal("40001"), snapshot)
    assert "40000" in excinfo.value.message


def test_nothing_left_is_exhausted():
    snapshot = eligibility.assess(Decimal("15000"), [Decimal("90000")])
    with pytest.raises(EligibilityExhausted):
        eligibility.ensure_amount_within(Decimal("0.01"), snapshot)


@pytest.mark.parametrize("offset, allowed", [(0, False), (2, False), (3, True), (10, True)])
def test_retirement_window(offset, allowed):
    today = date(2026, 6, 30)
    if allowed:
        eligibility.ensure_retirement_window(today.year + offset, today)
    else:
        with pytest.raises(RetirementWindowTooShort):
            eligibility.ensure_retirement_window(today.year + offset, today)


def test_retirement_window_uses_calendar_year_only():
    assert eligibility.years_to_retirement(2029, date(2026, 1, 1)) == 3
    assert eligibility.years_to_retirement(2029, date(2026, 12, 31)) == 3


def test_transition_table():
    assert TRANSITIONS["recommend"] is RECOMMEND
    assert TRANSITIONS["approve"] is RESERVE_APPROVAL
    assert RECOMMEND.source == LoanStatus.pending and RECOMMEND.target == LoanStatus.reviewed
    assert REJECT.source == LoanStatus.reviewed and REJECT.target == LoanStatus.rejected
    assert not any(t.source in TERMINAL_STATES for t in TRANSITIONS.values())
    assert set(COMMITTED_STATES) == {LoanStatus.approved, LoanStatus.approving}


def test_authorize_checks_role():
    authorize(RECOMMEND, "HR_OFFICER")
    with pytest.raises(Unauthorized):
        authorize(RECOMMEND, "HR_MANAGER")
    with pytest.raises(Unauthorized):
        authorize(REJECT, None)


def test_ensure_source_rejects_wrong_state():
    ensure_source(RESERVE_APPROVAL, LoanStatus.reviewed)
    with pytest.raises(InvalidStateTransition):
        ensure_source(RESERVE_APPROVAL, LoanStatus.pending)
    with pytest.raises(InvalidStateTransition):
        ensure_source(RECOMMEND, LoanStatus.approved)
