from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse
from typing import Any, Dict, List
import logging
import os

from hr_loans.core.auth_dependencies import (
    get_current_user,
    get_employee_user,
    get_hr_manager_user,
    get_hr_officer_user,
    get_hr_user,
)
from hr_loans.helpers.response_builder import (
    build_eligibility_response,
    build_loan_response,
    build_profile_response,
)
from hr_loans.schemas import FinalizeLoanRequest, RecommendLoanRequest, SubmitLoanRequest
from hr_loans.services.loan_service import LoanWorkflowService, loan_workflow_service

logger = logging.getLogger(__name__)


# Returns the loan workflow service instance
def get_loan_workflow_service() -> LoanWorkflowService:
    return loan_workflow_service


router = APIRouter(prefix="/loans", tags=["Loan Requests"])


# --- Employee routes ---

@router.get("/profile")
async def get_my_profile(
    current_user: Dict = Depends(get_employee_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> Dict[str, Any]:
    profile = await service.get_profile(current_user)
    return build_profile_response(profile)


@router.get("/eligibility")
async def get_my_eligibility(
    current_user: Dict = Depends(get_employee_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> Dict[str, Any]:
    snapshot = await service.eligibility_for(current_user)
    return build_eligibility_response(snapshot)


@router.post("/submit", status_code=status.HTTP_201_CREATED)
async def submit_loan_request(
    payload: SubmitLoanRequest,
    current_user: Dict = Depends(get_employee_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> Dict[str, Any]:
    loan = await service.submit(current_user, payload.amount, payload.profile_update)
    return {
        "message": "Loan request submitted. HR will review and approve based on eligible limit.",
        "loan_request": build_loan_response(loan),
    }


@router.get("/my-loans")
async def get_my_loan_requests(
    current_user: Dict = Depends(get_employee_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> List[Dict[str, Any]]:
    loans = await service.my_loans(current_user)
    return [build_loan_response(loan) for loan in loans]


# --- HR routes ---

@router.get("/all")
async def get_all_loan_requests(
    current_user: Dict = Depends(get_hr_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> List[Dict[str, Any]]:
    rows = await service.all_loans(current_user)
    return [build_loan_response(loan, profile) for loan, profile in rows]


@router.post("/recommend")
async def recommend_loan(
    payload: RecommendLoanRequest,
    current_user: Dict = Depends(get_hr_officer_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> Dict[str, Any]:
    loan = await service.recommend(current_user, payload.loan_id)
    return {"message": "Loan request recommended", "loan_request": build_loan_response(loan)}


@router.post("/finalize")
async def finalize_loan(
    payload: FinalizeLoanRequest,
    current_user: Dict = Depends(get_hr_manager_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> Dict[str, Any]:
    loan = await service.finalize(current_user, payload.loan_id, payload.status.value, payload.approved_amount)
    return {
        "message": f"Loan request {loan.status.value.lower()}",
        "loan_request": build_loan_response(loan),
    }


@router.post("/release-stale-approvals")
async def release_stale_approvals(
    current_user: Dict = Depends(get_hr_manager_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> Dict[str, Any]:
    released = await service.release_stale_approvals(current_user)
    return {
        "message": f"{len(released)} stalled approval(s) returned to review",
        "loan_requests": [build_loan_response(loan) for loan in released],
    }


# --- Contract route ---

@router.get("/{loan_id}/contract")
async def get_loan_contract(
    loan_id: str,
    current_user: Dict = Depends(get_current_user),
    service: LoanWorkflowService = Depends(get_loan_workflow_service),
) -> FileResponse:
    path = await service.get_contract(current_user, loan_id)
    return FileResponse(path, media_type="application/pdf", filename=os.path.basename(path))
