# schemas.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from decimal import Decimal

from hr_loans.domain.records import Role

DEFAULT_SEED_PASSWORD = "Password@123"

class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="Email address of the user")
    password: str = Field(..., min_length=8, description="Password for the user account")
    role: Role = Field(..., description="Role of the user")
    full_name: Optional[str] = Field(None, description="Full name of the user")

class UserResponse(BaseModel):
    id: str = Field(..., description="Unique identifier for the user")
    email: EmailStr = Field(..., description="Email address of the user")
    full_name: Optional[str] = Field(None, description="Full name of the user")
    role: Role = Field(..., description="Role of the user")
    message: Optional[str] = None

class Token(BaseModel):
    access_token: str = Field(..., description="Access token for the user")
    token_type: str = Field(default="bearer", description="Type of the token")

class ResetPasswordRequest(BaseModel):
    user_id: str
    new_password: str = Field(..., min_length=8)

class SeedEmployee(BaseModel):
    """One employee row of a bulk seed; optional fields are checked by the service."""
    email: Optional[str] = None
    full_name: Optional[str] = None
    gross_salary: Optional[Decimal] = None
    employment_year: Optional[int] = None
    retirement_year: Optional[int] = None
    password: Optional[str] = None

class SeedEmployeesRequest(BaseModel):
    employees: List[SeedEmployee] = Field(default_factory=list)
