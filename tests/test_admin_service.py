from decimal import Decimal

import pytest

from fakes import InMemoryProfileStore
from hr_loans.core.exceptions import NotFound, ValidationFailed
from hr_loans.schemas import CreateProfileRequest, SeedEmployee
from hr_loans.schemas.user_schemas import DEFAULT_SEED_PASSWORD
from hr_loans.services.admin_service import AdminService


class FakeAccounts:
    def __init__(self):
        self.users = {}
        self.passwords = {}

    async def create_user(self, email, password, role, full_name=None):
        email = email.strip().lower()
        if any(u["email"] == email for u in self.users.values()):
            raise ValidationFailed("Email already exists")
        user_id = f"user-{len(self.users) + 1}"
        self.users[user_id] = {"id": user_id, "email": email, "role": role, "full_name": full_name}
        self.passwords[email] = password
        return self.users[user_id]

    async def get_user_by_id(self, user_id):
        return self.users.get(user_id)


@pytest.fixture
def accounts():
    return FakeAccounts()


@pytest.fixture
def admin(accounts):
    return AdminService(profiles=InMemoryProfileStore(), accounts=accounts)


@pytest.mark.asyncio
async def test_create_profile_for_existing_user(admin, accounts):
    user = await accounts.create_user("hana@example.com", "Secret123!", "EMPLOYEE")
    request = CreateProfileRequest(
        user_id=user["id"],
        full_name="Hana Girma",
        gross_salary=Decimal("8000"),
        employment_year=2015,
        retirement_year=2050,
        department="Operations",
    )

    profile = await admin.create_profile(request)

    assert profile.id
    assert profile.department == "Operations"
    assert profile.created_at is not None

    with pytest.raises(ValidationFailed):
        await admin.create_profile(request)


@pytest.mark.asyncio
async def test_create_profile_for_unknown_user(admin):
    request = CreateProfileRequest(
        user_id="nobody",
        full_name="Ghost",
        gross_salary=Decimal("1"),
        employment_year=2000,
        retirement_year=2040,
    )
    with pytest.raises(NotFound):
        await admin.create_profile(request)


def test_profile_request_requires_retirement_after_employment():
    with pytest.raises(ValueError):
        CreateProfileRequest(
            user_id="u",
            full_name="Backwards",
            gross_salary=Decimal("1000"),
            employment_year=2030,
            retirement_year=2020,
        )


@pytest.mark.asyncio
async def test_seed_employees_reports_each_row(admin, accounts):
    employees = [
        SeedEmployee(email="Dawit@Example.com", full_name="Dawit Alemu", gross_salary=Decimal("9000"),
                     employment_year=2012, retirement_year=2048),
        SeedEmployee(email="selam@example.com", full_name="Selam Bekele", gross_salary=Decimal("7000"),
                     employment_year=2019, retirement_year=2055, password="Custom@456"),
        SeedEmployee(email="incomplete@example.com", full_name="No Salary"),
        SeedEmployee(email="dawit@example.com", full_name="Dawit Again", gross_salary=Decimal("9000"),
                     employment_year=2012, retirement_year=2048),
        SeedEmployee(email="late@example.com", full_name="Backwards Years", gross_salary=Decimal("5000"),
                     employment_year=2040, retirement_year=2030),
    ]

    results = await admin.seed_employees(employees)

    assert results["success"] == 2
    assert results["failed"] == 3
    assert len(results["errors"]) == 3
    assert "Missing data for incomplete@example.com" in results["errors"][0]
    assert "Email already exists" in results["errors"][1]
    assert accounts.passwords["dawit@example.com"] == DEFAULT_SEED_PASSWORD
    assert accounts.passwords["selam@example.com"] == "Custom@456"
    assert len(admin.profiles.profiles) == 2


@pytest.mark.asyncio
async def test_seed_employees_requires_rows(admin):
    with pytest.raises(ValidationFailed):
        await admin.seed_employees([])
