"""Eligibility arithmetic for salary advances.

An employee may borrow up to ``gross_salary * salary_multiplier`` in total.
Every approved (or provisionally approved) loan counts against that ceiling.
Nothing here is cached; callers pass the current approved amounts each time.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from hr_loans.core.exceptions import (
    EligibilityExceeded,
    EligibilityExhausted,
    RetirementWindowTooShort,
)
from hr_loans.domain.policy import LoanPolicy, DEFAULT_POLICY


@dataclass(frozen=True)
class EligibilitySnapshot:
    max_loan: Decimal
    total_approved: Decimal
    remaining: Decimal


def max_loan(gross_salary: Decimal, policy: LoanPolicy = DEFAULT_POLICY) -> Decimal:
    return Decimal(gross_salary) * policy.salary_multiplier


def total_committed(approved_amounts: Iterable[Decimal]) -> Decimal:
    return sum((Decimal(a) for a in approved_amounts if a is not None), Decimal("0"))


def assess(
    gross_salary: Decimal,
    approved_amounts: Iterable[Decimal],
    policy: LoanPolicy = DEFAULT_POLICY,
) -> EligibilitySnapshot:
    ceiling = max_loan(gross_salary, policy)
    total = total_committed(approved_amounts)
    return EligibilitySnapshot(max_loan=ceiling, total_approved=total, remaining=ceiling - total)


def remaining_eligible(
    gross_salary: Decimal,
    approved_amounts: Iterable[Decimal],
    policy: LoanPolicy = DEFAULT_POLICY,
) -> Decimal:
    return assess(gross_salary, approved_amounts, policy).remaining


def ensure_amount_within(amount: Decimal, snapshot: EligibilitySnapshot) -> None:
    if snapshot.remaining <= 0:
        raise EligibilityExhausted("No remaining eligible loan amount available")
    if Decimal(amount) > snapshot.remaining:
        raise EligibilityExceeded(
            f"Amount exceeds remaining eligible limit. Maximum allowed: {snapshot.remaining}"
        )


def years_to_retirement(retirement_year: int, today: date) -> int:
    return retirement_year - today.year


def ensure_retirement_window(
    retirement_year: int,
    today: date,
    policy: LoanPolicy = DEFAULT_POLICY,
) -> None:
    if years_to_retirement(retirement_year, today) < policy.min_years_to_retirement:
        raise RetirementWindowTooShort(
            f"Employee must have at least {policy.min_years_to_retirement} years remaining until retirement"
        )
