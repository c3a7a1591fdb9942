from pydantic import BaseModel, Field
from enum import Enum
from decimal import Decimal
from typing import Optional

from hr_loans.schemas.profile_schema import ProfileDetailsUpdate


class FinalDecisionEnum(str, Enum):
    approved = "APPROVED"
    rejected = "REJECTED"


class SubmitLoanRequest(BaseModel):
    """Employee submission; ``profile_update`` optionally refreshes profile details."""
    amount: Decimal = Field(..., description="Requested amount")
    profile_update: Optional[ProfileDetailsUpdate] = None


class RecommendLoanRequest(BaseModel):
    loan_id: str = Field(..., description="ID of the loan request to recommend")


class FinalizeLoanRequest(BaseModel):
    loan_id: str = Field(..., description="ID of the reviewed loan request")
    status: FinalDecisionEnum = Field(..., description="Final decision")
    approved_amount: Optional[Decimal] = Field(None, description="Required when approving")
