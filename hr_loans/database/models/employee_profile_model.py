from beanie import Document
from pydantic import Field, field_validator
from decimal import Decimal
from datetime import datetime
from typing import Optional
from pymongo import IndexModel, ASCENDING

from hr_loans.domain.records import Address, Guarantor, EmployeeProfile
from hr_loans.database.models.money import to_decimal


class EmployeeProfileDocument(Document):
    user_id: str = Field(..., description="ID of the user account owning this profile")
    full_name: str = Field(..., description="Full name of the employee")
    gross_salary: Decimal = Field(..., description="Monthly gross salary")
    employment_year: int = Field(..., description="Calendar year the employee was hired")
    retirement_year: int = Field(..., description="Calendar year the employee retires")
    year_of_birth: Optional[int] = Field(None, description="Year of birth")
    job_level: Optional[str] = Field(None, description="Job level or grade")
    department: Optional[str] = Field(None, description="Department name")
    address: Optional[Address] = Field(None, description="Home address of the employee")
    guarantor: Optional[Guarantor] = Field(None, description="Guarantor for salary advances")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("gross_salary", mode="before")
    @classmethod
    def unwrap_decimal128(cls, value):
        return to_decimal(value)

    class Settings:
        name = "employee_profiles"
        indexes = [IndexModel([("user_id", ASCENDING)], unique=True)]

    def to_record(self) -> EmployeeProfile:
        return EmployeeProfile(
            id=str(self.id),
            **self.model_dump(exclude={"id", "revision_id"}),
        )

    @classmethod
    def from_record(cls, profile: EmployeeProfile) -> "EmployeeProfileDocument":
        return cls(**profile.model_dump(exclude={"id"}, exclude_none=True))
