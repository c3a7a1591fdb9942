import logging
from datetime import datetime
from typing import Any, Dict, List

from hr_loans.core.exceptions import LoanServiceError, NotFound, ValidationFailed
from hr_loans.database.mongo_stores import MongoProfileStore
from hr_loans.database.stores import ProfileStore
from hr_loans.domain.records import EmployeeProfile, Role
from hr_loans.schemas.profile_schema import CreateProfileRequest
from hr_loans.schemas.user_schemas import DEFAULT_SEED_PASSWORD, SeedEmployee
from hr_loans.services.auth_service import AuthService, auth_service

logger = logging.getLogger(__name__)

SEED_REQUIRED_FIELDS = ("email", "full_name", "gross_salary", "employment_year", "retirement_year")


class AdminService:
    """Account and employee profile administration."""

    def __init__(self, profiles: ProfileStore, accounts: AuthService):
        self.profiles = profiles
        self.accounts = accounts

    async def create_profile(self, request: CreateProfileRequest) -> EmployeeProfile:
        user = await self.accounts.get_user_by_id(request.user_id)
        if user is None:
            raise NotFound("User not found")
        if await self.profiles.get_by_user(request.user_id):
            raise ValidationFailed("Profile already exists")

        now = datetime.utcnow()
        profile = await self.profiles.create(EmployeeProfile(
            **request.model_dump(),
            created_at=now,
            updated_at=now,
        ))
        logger.info(f"Employee profile {profile.id} created for user {request.user_id}")
        return profile

    async def seed_employees(self, employees: List[SeedEmployee]) -> Dict[str, Any]:
        if not employees:
            raise ValidationFailed("Please provide an array of employees.")

        results = {"success": 0, "failed": 0, "errors": []}
        for emp in employees:
            label = emp.email or "unknown user"
            missing = [f for f in SEED_REQUIRED_FIELDS if getattr(emp, f) in (None, "")]
            if missing:
                results["failed"] += 1
                results["errors"].append(
                    f"Missing data for {label}. Required: {', '.join(SEED_REQUIRED_FIELDS)}."
                )
                continue

            try:
                profile_request = CreateProfileRequest(
                    user_id="pending",
                    full_name=emp.full_name,
                    gross_salary=emp.gross_salary,
                    employment_year=emp.employment_year,
                    retirement_year=emp.retirement_year,
                )
                user = await self.accounts.create_user(
                    email=emp.email,
                    password=emp.password or DEFAULT_SEED_PASSWORD,
                    role=Role.employee.value,
                    full_name=emp.full_name,
                )
                await self.create_profile(profile_request.model_copy(update={"user_id": user["id"]}))
                results["success"] += 1
            except LoanServiceError as e:
                results["failed"] += 1
                results["errors"].append(f"Failed to seed {label}: {e.message}")
            except ValueError as e:
                results["failed"] += 1
                results["errors"].append(f"Failed to seed {label}: {e}")

        logger.info(f"Bulk seeding completed: {results['success']} succeeded, {results['failed']} failed")
        return results


admin_service = AdminService(profiles=MongoProfileStore(), accounts=auth_service)
