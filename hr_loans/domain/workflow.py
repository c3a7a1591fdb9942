"""Loan request lifecycle.

PENDING -> REVIEWED -> APPROVED | REJECTED. Approval passes through the
transient APPROVING state while the contract is rendered; if rendering
fails the request drops back to REVIEWED.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from hr_loans.core.exceptions import InvalidStateTransition, Unauthorized
from hr_loans.domain.records import LoanStatus, Role


@dataclass(frozen=True)
class Transition:
    name: str
    source: LoanStatus
    target: LoanStatus
    roles: Tuple[Role, ...] = ()


RECOMMEND = Transition("recommend", LoanStatus.pending, LoanStatus.reviewed, (Role.hr_officer,))
RESERVE_APPROVAL = Transition("approve", LoanStatus.reviewed, LoanStatus.approving, (Role.hr_manager,))
COMMIT_APPROVAL = Transition("commit_approval", LoanStatus.approving, LoanStatus.approved)
ABORT_APPROVAL = Transition("abort_approval", LoanStatus.approving, LoanStatus.reviewed)
REJECT = Transition("reject", LoanStatus.reviewed, LoanStatus.rejected, (Role.hr_manager,))

TRANSITIONS: Dict[str, Transition] = {
    t.name: t for t in (RECOMMEND, RESERVE_APPROVAL, COMMIT_APPROVAL, ABORT_APPROVAL, REJECT)
}

TERMINAL_STATES = frozenset({LoanStatus.approved, LoanStatus.rejected})

# Statuses whose approved_amount counts against the eligibility ceiling
COMMITTED_STATES = (LoanStatus.approved, LoanStatus.approving)


def authorize(transition: Transition, role: Optional[str]) -> None:
    if transition.roles and role not in {r.value for r in transition.roles}:
        raise Unauthorized(f"Role {role} may not {transition.name} loan requests")


def ensure_source(transition: Transition, current: LoanStatus) -> None:
    if current != transition.source:
        raise InvalidStateTransition(
            f"Cannot {transition.name} a loan request in status {LoanStatus(current).value}; "
            f"expected {transition.source.value}"
        )
