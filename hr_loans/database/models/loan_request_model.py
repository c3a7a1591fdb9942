from beanie import Document
from pydantic import Field, field_validator
from decimal import Decimal
from datetime import datetime
from typing import Optional
from pymongo import IndexModel, ASCENDING, DESCENDING

from hr_loans.domain.records import LoanRequest, LoanStatus
from hr_loans.database.models.money import to_decimal


class LoanRequestDocument(Document):
    employee_id: str = Field(..., description="ID of the employee profile the request belongs to")
    employee_user_id: str = Field(..., description="ID of the requesting employee's user account")
    requested_amount: Decimal = Field(..., description="Amount requested by the employee")
    approved_amount: Optional[Decimal] = Field(None, description="Amount granted; 0 on rejection")
    status: LoanStatus = Field(default=LoanStatus.pending, description="Current workflow status")
    queue_number: int = Field(..., description="Sequential reference number assigned at submission")
    contract_path: Optional[str] = Field(None, description="Path of the generated contract PDF")
    submitted_at: datetime = Field(default_factory=datetime.utcnow)
    reviewed_by: Optional[str] = Field(None, description="HR officer who recommended the request")
    reviewed_at: Optional[datetime] = None
    approved_by: Optional[str] = Field(None, description="HR manager who finalized the request")
    approved_at: Optional[datetime] = None

    @field_validator("requested_amount", "approved_amount", mode="before")
    @classmethod
    def unwrap_decimal128(cls, value):
        return to_decimal(value)

    class Settings:
        name = "loan_requests"
        indexes = [
            IndexModel([("queue_number", ASCENDING)], unique=True),
            IndexModel([("employee_id", ASCENDING), ("status", ASCENDING)]),
            IndexModel([("submitted_at", DESCENDING)]),
        ]

    def to_record(self) -> LoanRequest:
        return LoanRequest(
            id=str(self.id),
            **self.model_dump(exclude={"id", "revision_id"}),
        )

    @classmethod
    def from_record(cls, loan: LoanRequest) -> "LoanRequestDocument":
        return cls(**loan.model_dump(exclude={"id"}))
