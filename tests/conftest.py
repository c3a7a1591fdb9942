import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-loan-service")

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fakes import (
    EMPLOYEE,
    MANAGER,
    OFFICER,
    FakeAudit,
    FakeRenderer,
    FakeUserDirectory,
    InMemoryLoanStore,
    InMemoryNotificationStore,
    InMemoryProfileStore,
)
from hr_loans.core.clock import FixedClock
from hr_loans.domain.policy import LoanPolicy
from hr_loans.domain.records import Address, EmployeeProfile, Guarantor, Role
from hr_loans.services.loan_service import LoanWorkflowService
from hr_loans.services.notification_service import NotificationService


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def policy():
    return LoanPolicy()


@pytest.fixture
def profile():
    return EmployeeProfile(
        id="profile-1",
        user_id=EMPLOYEE["id"],
        full_name="Abebe Kebede",
        gross_salary=Decimal("15000"),
        employment_year=2010,
        retirement_year=2045,
        department="Finance",
        job_level="Senior Accountant",
        address=Address(sub_city="Bole", phone_number="+251911000000"),
        guarantor=Guarantor(full_name="Almaz Tadesse", address=Address(phone_number="+251922000000")),
    )


@pytest.fixture
def loan_store():
    return InMemoryLoanStore()


@pytest.fixture
def profile_store(profile):
    return InMemoryProfileStore(profile)


@pytest.fixture
def notification_store():
    return InMemoryNotificationStore()


@pytest.fixture
def directory():
    return FakeUserDirectory({
        Role.hr_officer.value: [OFFICER["id"]],
        Role.hr_manager.value: [MANAGER["id"]],
    })


@pytest.fixture
def notifications(notification_store, directory, clock):
    return NotificationService(notification_store, directory, clock=clock)


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def audit():
    return FakeAudit()


@pytest.fixture
def workflow(loan_store, profile_store, notifications, renderer, clock, policy, audit):
    return LoanWorkflowService(
        loans=loan_store,
        profiles=profile_store,
        notifications=notifications,
        renderer=renderer,
        clock=clock,
        policy=policy,
        audit=audit,
    )
