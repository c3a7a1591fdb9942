from pydantic import BaseModel, Field
from enum import Enum
from decimal import Decimal
from datetime import datetime
from typing import Optional


class Role(str, Enum):
    admin = "ADMIN"
    employee = "EMPLOYEE"
    hr_officer = "HR_OFFICER"
    hr_manager = "HR_MANAGER"


class LoanStatus(str, Enum):
    pending = "PENDING"
    reviewed = "REVIEWED"
    approving = "APPROVING"
    approved = "APPROVED"
    rejected = "REJECTED"


class Address(BaseModel):
    sub_city: Optional[str] = None
    woreda: Optional[str] = None
    house_number: Optional[str] = None
    phone_number: Optional[str] = None


class Guarantor(BaseModel):
    full_name: Optional[str] = None
    address: Optional[Address] = None


class EmployeeProfile(BaseModel):
    id: Optional[str] = None
    user_id: str = Field(..., description="Account this profile belongs to")
    full_name: str
    gross_salary: Decimal = Field(..., gt=0, description="Monthly gross salary")
    employment_year: int
    retirement_year: int
    year_of_birth: Optional[int] = None
    job_level: Optional[str] = None
    department: Optional[str] = None
    address: Optional[Address] = None
    guarantor: Optional[Guarantor] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoanRequest(BaseModel):
    id: Optional[str] = None
    employee_id: str = Field(..., description="EmployeeProfile the request belongs to")
    employee_user_id: str = Field(..., description="Account of the requesting employee")
    requested_amount: Decimal = Field(..., gt=0)
    approved_amount: Optional[Decimal] = None
    status: LoanStatus = LoanStatus.pending
    queue_number: int
    contract_path: Optional[str] = None
    submitted_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


class Notification(BaseModel):
    id: Optional[str] = None
    recipient_id: str
    message: str
    is_read: bool = False
    created_at: datetime
