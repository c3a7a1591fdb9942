import asyncio
import logging
import os
from datetime import timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from hr_loans.core.clock import Clock, SystemClock
from hr_loans.core.config import settings
from hr_loans.core.exceptions import (
    InvalidStateTransition,
    NotFound,
    RenderFailure,
    Unauthorized,
    ValidationFailed,
)
from hr_loans.database.mongo_stores import MongoLoanStore, MongoProfileStore
from hr_loans.database.stores import LoanStore, ProfileStore
from hr_loans.domain import eligibility
from hr_loans.domain.eligibility import EligibilitySnapshot
from hr_loans.domain.policy import LoanPolicy
from hr_loans.domain.records import EmployeeProfile, LoanRequest, LoanStatus, Role
from hr_loans.domain.workflow import (
    ABORT_APPROVAL,
    COMMIT_APPROVAL,
    RECOMMEND,
    REJECT,
    RESERVE_APPROVAL,
    Transition,
    authorize,
    ensure_source,
)
from hr_loans.schemas.profile_schema import ProfileDetailsUpdate
from hr_loans.services.audit_service import AuditService, audit_service
from hr_loans.services.contract_service import ContractData, ContractRenderer, PdfContractRenderer
from hr_loans.services.notification_service import NotificationService, notification_service

logger = logging.getLogger(__name__)

HR_ROLES = {Role.hr_officer.value, Role.hr_manager.value}


def _parse_amount(value: Any, field: str) -> Decimal:
    if value is None:
        raise ValidationFailed(f"{field} is required")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationFailed(f"{field} must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationFailed(f"{field} must be greater than 0")
    return amount


class LoanWorkflowService:
    """Drives loan requests through submission, review and final decision."""

    def __init__(
        self,
        loans: LoanStore,
        profiles: ProfileStore,
        notifications: NotificationService,
        renderer: ContractRenderer,
        clock: Optional[Clock] = None,
        policy: Optional[LoanPolicy] = None,
        audit: Optional[AuditService] = None,
        stale_approval_after: Optional[timedelta] = None,
    ):
        self.loans = loans
        self.profiles = profiles
        self.notifications = notifications
        self.renderer = renderer
        self.clock = clock or SystemClock()
        self.policy = policy or settings.policy()
        self.audit = audit or audit_service
        self.stale_approval_after = stale_approval_after or timedelta(seconds=settings.APPROVAL_STALE_SECONDS)
        logger.info("LoanWorkflowService initialized")

    # Eligibility

    async def _snapshot(self, profile: EmployeeProfile) -> EligibilitySnapshot:
        amounts = await self.loans.committed_amounts(profile.id)
        return eligibility.assess(profile.gross_salary, amounts, self.policy)

    async def _own_profile(self, actor: Dict) -> EmployeeProfile:
        if actor.get("role") != Role.employee.value:
            raise Unauthorized("Only employees have loan profiles")
        profile = await self.profiles.get_by_user(actor["id"])
        if profile is None:
            raise NotFound("Employee profile not found")
        return profile

    async def get_profile(self, actor: Dict) -> EmployeeProfile:
        return await self._own_profile(actor)

    async def eligibility_for(self, actor: Dict) -> EligibilitySnapshot:
        profile = await self._own_profile(actor)
        return await self._snapshot(profile)

    # Transitions

    async def submit(
        self,
        actor: Dict,
        amount: Any,
        profile_update: Optional[ProfileDetailsUpdate] = None,
    ) -> LoanRequest:
        profile = await self._own_profile(actor)
        eligibility.ensure_retirement_window(profile.retirement_year, self.clock.today(), self.policy)
        requested = _parse_amount(amount, "amount")
        details = profile_update.model_dump(exclude_unset=True, mode="json") if profile_update else {}

        async with self.loans.employee_lock(profile.id):
            await self._release_stale_for(profile.id)
            snapshot = await self._snapshot(profile)
            eligibility.ensure_amount_within(requested, snapshot)
            queue_number = await self.loans.next_queue_number()
            loan = await self.loans.insert(LoanRequest(
                employee_id=profile.id,
                employee_user_id=actor["id"],
                requested_amount=requested,
                status=LoanStatus.pending,
                queue_number=queue_number,
                submitted_at=self.clock.now(),
            ))

        if details:
            await self.profiles.update_details(profile.id, details)

        logger.info(f"Loan {loan.id} (#{loan.queue_number}) submitted by {actor['id']} for {requested}")
        await self.audit.record("submit_loan", actor.get("email"), loan.id)
        await self.notifications.dispatch_to_role(
            Role.hr_officer,
            f"New loan request #{loan.queue_number} of {requested} submitted by {profile.full_name}",
        )
        await self.notifications.dispatch(
            [actor["id"]],
            f"Your loan request #{loan.queue_number} of {requested} has been submitted for review.",
        )
        return loan

    async def _load_for(self, transition: Transition, actor: Dict, loan_id: str) -> LoanRequest:
        authorize(transition, actor.get("role"))
        loan = await self.loans.get(loan_id)
        if loan is None:
            raise NotFound("Loan request not found")
        if transition.source == LoanStatus.reviewed:
            loan = await self._release_stale_approval(loan)
        ensure_source(transition, loan.status)
        return loan

    def _is_stale_approval(self, loan: LoanRequest) -> bool:
        if loan.status != LoanStatus.approving or loan.approved_at is None:
            return False
        approved_at = loan.approved_at
        if approved_at.tzinfo is None:
            approved_at = approved_at.replace(tzinfo=timezone.utc)
        return self.clock.now() - approved_at > self.stale_approval_after

    async def _abort_approval(self, loan: LoanRequest) -> Optional[LoanRequest]:
        return await self.loans.transition(loan.id, ABORT_APPROVAL.source, {
            "status": ABORT_APPROVAL.target,
            "approved_amount": None,
            "approved_by": None,
            "approved_at": None,
        })

    async def _release_stale_approval(self, loan: LoanRequest) -> LoanRequest:
        """Return an approval abandoned mid-render to REVIEWED so it can be decided again."""
        if not self._is_stale_approval(loan):
            return loan
        released = await self._abort_approval(loan)
        if released is None:
            return await self.loans.get(loan.id) or loan
        logger.warning(f"Loan {loan.id} was stuck in {LoanStatus.approving.value} since {loan.approved_at}; returned to review")
        await self.audit.record("abort_stale_approval", None, loan.id)
        return released

    async def _release_stale_for(self, employee_id: str) -> None:
        for other in await self.loans.list_for_employee(employee_id):
            await self._release_stale_approval(other)

    async def release_stale_approvals(self, actor: Dict) -> List[LoanRequest]:
        """Return every stale APPROVING request to REVIEWED."""
        authorize(RESERVE_APPROVAL, actor.get("role"))
        released = []
        for loan in await self.loans.list_all():
            if self._is_stale_approval(loan):
                updated = await self._release_stale_approval(loan)
                if updated.status == LoanStatus.reviewed:
                    released.append(updated)
        return released

    async def _apply(self, transition: Transition, loan: LoanRequest, changes: Dict[str, Any]) -> LoanRequest:
        updated = await self.loans.transition(
            loan.id, transition.source, {"status": transition.target, **changes}
        )
        if updated is None:
            raise InvalidStateTransition(
                f"Loan request {loan.id} is no longer {transition.source.value}; cannot {transition.name}"
            )
        return updated

    async def recommend(self, actor: Dict, loan_id: str) -> LoanRequest:
        loan = await self._load_for(RECOMMEND, actor, loan_id)
        updated = await self._apply(RECOMMEND, loan, {
            "reviewed_by": actor["id"],
            "reviewed_at": self.clock.now(),
        })
        logger.info(f"Loan {loan.id} recommended by {actor['id']}")
        await self.audit.record("recommend_loan", actor.get("email"), loan.id)
        await self.notifications.dispatch_to_role(
            Role.hr_manager,
            f"Loan request #{updated.queue_number} of {updated.requested_amount} is awaiting your final decision.",
            also=[updated.employee_user_id],
        )
        return updated

    async def approve(self, actor: Dict, loan_id: str, approved_amount: Any) -> LoanRequest:
        authorize(RESERVE_APPROVAL, actor.get("role"))
        amount = _parse_amount(approved_amount, "approved_amount")
        loan = await self._load_for(RESERVE_APPROVAL, actor, loan_id)
        profile = await self.profiles.get(loan.employee_id)
        if profile is None:
            raise NotFound("Employee profile not found")

        async with self.loans.employee_lock(loan.employee_id):
            await self._release_stale_for(loan.employee_id)
            current = await self.loans.get(loan.id)
            ensure_source(RESERVE_APPROVAL, current.status)
            snapshot = await self._snapshot(profile)
            eligibility.ensure_amount_within(amount, snapshot)
            reserved = await self._apply(RESERVE_APPROVAL, current, {
                "approved_amount": amount,
                "approved_by": actor["id"],
                "approved_at": self.clock.now(),
            })

        try:
            contract_path = await asyncio.to_thread(
                self.renderer.render, self._contract_data(reserved, profile)
            )
        except Exception as e:
            try:
                await self._abort_approval(reserved)
                logger.error(f"Approval of loan {loan.id} rolled back, contract rendering failed: {e}")
            except Exception:
                # The loan stays APPROVING until _release_stale_approval picks it up
                logger.exception(f"Could not roll back approval of loan {loan.id} after rendering failed")
            await self.audit.record("approve_loan", actor.get("email"), loan.id, status="failed")
            if isinstance(e, RenderFailure):
                raise
            raise RenderFailure(f"Failed to generate contract: {e}") from e

        approved = await self._apply(COMMIT_APPROVAL, reserved, {"contract_path": contract_path})
        logger.info(f"Loan {loan.id} approved by {actor['id']} for {amount}")
        await self.audit.record("approve_loan", actor.get("email"), loan.id)
        await self.notifications.dispatch(
            [approved.employee_user_id],
            f"Your loan request of {approved.requested_amount} has been approved. Approved amount: {amount}",
        )
        return approved

    async def reject(self, actor: Dict, loan_id: str) -> LoanRequest:
        loan = await self._load_for(REJECT, actor, loan_id)
        rejected = await self._apply(REJECT, loan, {
            "approved_amount": Decimal("0"),
            "approved_by": actor["id"],
            "approved_at": self.clock.now(),
        })
        logger.info(f"Loan {loan.id} rejected by {actor['id']}")
        await self.audit.record("reject_loan", actor.get("email"), loan.id)
        await self.notifications.dispatch(
            [rejected.employee_user_id],
            f"Your loan request of {rejected.requested_amount} has been rejected.",
        )
        return rejected

    async def finalize(
        self,
        actor: Dict,
        loan_id: str,
        decision: str,
        approved_amount: Any = None,
    ) -> LoanRequest:
        if decision == LoanStatus.approved.value:
            return await self.approve(actor, loan_id, approved_amount)
        if decision == LoanStatus.rejected.value:
            return await self.reject(actor, loan_id)
        raise ValidationFailed("Invalid status")

    def _contract_data(self, loan: LoanRequest, profile: EmployeeProfile) -> ContractData:
        guarantor = profile.guarantor
        return ContractData(
            loan_id=loan.id,
            contract_number=loan.queue_number,
            employee_name=profile.full_name,
            approved_amount=loan.approved_amount,
            term_months=self.policy.term_months,
            approved_at=loan.approved_at or self.clock.now(),
            department=profile.department,
            job_level=profile.job_level,
            phone_number=profile.address.phone_number if profile.address else None,
            guarantor_name=guarantor.full_name if guarantor else None,
            guarantor_phone=guarantor.address.phone_number if guarantor and guarantor.address else None,
        )

    # Queries

    async def my_loans(self, actor: Dict) -> List[LoanRequest]:
        profile = await self._own_profile(actor)
        return await self.loans.list_for_employee(profile.id)

    async def all_loans(self, actor: Dict) -> List[Tuple[LoanRequest, Optional[EmployeeProfile]]]:
        if actor.get("role") not in HR_ROLES:
            raise Unauthorized("Only HR staff may list all loan requests")
        loans = await self.loans.list_all()
        profiles: Dict[str, Optional[EmployeeProfile]] = {}
        for loan in loans:
            if loan.employee_id not in profiles:
                profiles[loan.employee_id] = await self.profiles.get(loan.employee_id)
        return [(loan, profiles[loan.employee_id]) for loan in loans]

    async def get_contract(self, actor: Dict, loan_id: str) -> str:
        loan = await self.loans.get(loan_id)
        if loan is None:
            raise NotFound("Loan request not found")
        if actor.get("role") not in HR_ROLES and loan.employee_user_id != actor.get("id"):
            raise Unauthorized("Not authorized to view this contract")
        if loan.status != LoanStatus.approved or not loan.contract_path:
            raise NotFound("Contract not available for this loan request")
        if not os.path.exists(loan.contract_path):
            logger.error(f"Contract file missing for loan {loan.id}: {loan.contract_path}")
            raise NotFound("Contract file not found")
        return loan.contract_path


# Builds the service wired to MongoDB and the PDF renderer
def initialize_loan_workflow_service() -> LoanWorkflowService:
    return LoanWorkflowService(
        loans=MongoLoanStore(lease_seconds=settings.LOCK_LEASE_SECONDS),
        profiles=MongoProfileStore(),
        notifications=notification_service,
        renderer=PdfContractRenderer(settings.CONTRACTS_DIR),
    )


loan_workflow_service = initialize_loan_workflow_service()
