from pydantic import BaseModel, Field, model_validator
from decimal import Decimal
from typing import Optional

from hr_loans.domain.records import Address, Guarantor


class ProfileDetailsUpdate(BaseModel):
    """Descriptive fields an employee may change when submitting a request."""
    year_of_birth: Optional[int] = Field(None, ge=1900)
    job_level: Optional[str] = None
    department: Optional[str] = None
    address: Optional[Address] = None
    guarantor: Optional[Guarantor] = None


class CreateProfileRequest(ProfileDetailsUpdate):
    """Request body used by administrators to create an employee profile."""
    user_id: str = Field(..., description="ID of the user account the profile belongs to")
    full_name: str = Field(..., min_length=1)
    gross_salary: Decimal = Field(..., gt=0, description="Monthly gross salary")
    employment_year: int = Field(..., ge=1900)
    retirement_year: int = Field(..., ge=1900)

    @model_validator(mode="after")
    def check_years(self):
        if self.retirement_year <= self.employment_year:
            raise ValueError("retirement_year must be after employment_year")
        return self
