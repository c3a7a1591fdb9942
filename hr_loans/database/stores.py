"""Persistence contracts the loan workflow depends on.

The workflow service only talks to these interfaces; the MongoDB
implementations live in ``hr_loans.database.mongo_stores``.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, AsyncContextManager, Dict, List, Optional

from hr_loans.domain.records import EmployeeProfile, LoanRequest, LoanStatus, Notification


class LoanStore(ABC):
    @abstractmethod
    async def next_queue_number(self) -> int:
        """Atomically allocate the next queue number (1, 2, 3, ...)."""

    @abstractmethod
    async def insert(self, loan: LoanRequest) -> LoanRequest:
        ...

    @abstractmethod
    async def get(self, loan_id: str) -> Optional[LoanRequest]:
        ...

    @abstractmethod
    async def list_for_employee(self, employee_id: str) -> List[LoanRequest]:
        """Loans of one employee, newest first."""

    @abstractmethod
    async def list_all(self) -> List[LoanRequest]:
        """All loans, newest first."""

    @abstractmethod
    async def committed_amounts(self, employee_id: str) -> List[Decimal]:
        """Approved amounts of the employee's APPROVED and APPROVING loans."""

    @abstractmethod
    async def transition(
        self,
        loan_id: str,
        expected: LoanStatus,
        changes: Dict[str, Any],
    ) -> Optional[LoanRequest]:
        """Apply ``changes`` only if the loan is still in ``expected`` status.

        Returns the updated loan, or ``None`` when the loan is missing or its
        status no longer matches.
        """

    @abstractmethod
    def employee_lock(self, employee_id: str) -> AsyncContextManager[None]:
        """Mutual exclusion for eligibility checks of one employee."""


class ProfileStore(ABC):
    @abstractmethod
    async def get(self, profile_id: str) -> Optional[EmployeeProfile]:
        ...

    @abstractmethod
    async def get_by_user(self, user_id: str) -> Optional[EmployeeProfile]:
        ...

    @abstractmethod
    async def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        ...

    @abstractmethod
    async def update_details(self, profile_id: str, details: Dict[str, Any]) -> Optional[EmployeeProfile]:
        ...


class NotificationStore(ABC):
    @abstractmethod
    async def create(self, notification: Notification) -> Notification:
        ...

    @abstractmethod
    async def list_for_recipient(self, recipient_id: str, limit: int) -> List[Notification]:
        ...

    @abstractmethod
    async def get(self, notification_id: str) -> Optional[Notification]:
        ...

    @abstractmethod
    async def mark_read(self, notification_id: str) -> None:
        ...

    @abstractmethod
    async def mark_all_read(self, recipient_id: str) -> int:
        ...


class UserDirectory(ABC):
    """Read access to user accounts needed for notification routing."""

    @abstractmethod
    async def ids_with_role(self, role: str) -> List[str]:
        ...
