from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class LoanPolicy:
    """Policy constants governing salary advances."""

    salary_multiplier: Decimal = Decimal("6")
    term_months: int = 36
    min_years_to_retirement: int = 3


DEFAULT_POLICY = LoanPolicy()
