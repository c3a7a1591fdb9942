"""MongoDB implementations of the workflow stores.

Queue numbers come from a ``counters`` document bumped with ``$inc``; status
changes are conditional updates filtered on the expected status; the
per-employee lock is an expiring lease document keyed by employee id.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from beanie import PydanticObjectId
from beanie.operators import In
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from hr_loans.core.exceptions import LockTimeout
from hr_loans.database.models import (
    EmployeeProfileDocument,
    LoanRequestDocument,
    NotificationDocument,
    User,
)
from hr_loans.database.models.money import to_decimal128
from hr_loans.database.stores import LoanStore, NotificationStore, ProfileStore, UserDirectory
from hr_loans.domain.records import EmployeeProfile, LoanRequest, LoanStatus, Notification
from hr_loans.domain.workflow import COMMITTED_STATES

logger = logging.getLogger(__name__)

QUEUE_COUNTER_ID = "loan_queue_number"


def _object_id(value: str) -> Optional[ObjectId]:
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return to_decimal128(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    return value


class MongoLoanStore(LoanStore):
    def __init__(self, lease_seconds: int = 30, lock_timeout: float = 10.0, poll_interval: float = 0.05):
        self.lease_seconds = lease_seconds
        self.lock_timeout = lock_timeout
        self.poll_interval = poll_interval

    @staticmethod
    def _collection():
        return LoanRequestDocument.get_motor_collection()

    def _database(self):
        return self._collection().database

    async def next_queue_number(self) -> int:
        counter = await self._database()["counters"].find_one_and_update(
            {"_id": QUEUE_COUNTER_ID},
            {"$inc": {"value": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["value"])

    async def insert(self, loan: LoanRequest) -> LoanRequest:
        document = LoanRequestDocument.from_record(loan)
        await document.insert()
        return document.to_record()

    async def get(self, loan_id: str) -> Optional[LoanRequest]:
        oid = _object_id(loan_id)
        if oid is None:
            return None
        document = await LoanRequestDocument.get(PydanticObjectId(oid))
        return document.to_record() if document else None

    async def list_for_employee(self, employee_id: str) -> List[LoanRequest]:
        documents = await LoanRequestDocument.find(
            LoanRequestDocument.employee_id == employee_id
        ).sort(-LoanRequestDocument.submitted_at).to_list()
        return [d.to_record() for d in documents]

    async def list_all(self) -> List[LoanRequest]:
        documents = await LoanRequestDocument.find_all().sort(-LoanRequestDocument.submitted_at).to_list()
        return [d.to_record() for d in documents]

    async def committed_amounts(self, employee_id: str) -> List[Decimal]:
        documents = await LoanRequestDocument.find(
            LoanRequestDocument.employee_id == employee_id,
            In(LoanRequestDocument.status, [s.value for s in COMMITTED_STATES]),
        ).to_list()
        return [d.approved_amount for d in documents if d.approved_amount is not None]

    async def transition(
        self,
        loan_id: str,
        expected: LoanStatus,
        changes: Dict[str, Any],
    ) -> Optional[LoanRequest]:
        oid = _object_id(loan_id)
        if oid is None:
            return None
        raw = await self._collection().find_one_and_update(
            {"_id": oid, "status": expected.value},
            {"$set": _encode(changes)},
            return_document=ReturnDocument.AFTER,
        )
        if raw is None:
            return None
        return LoanRequestDocument.model_validate(raw).to_record()

    @asynccontextmanager
    async def employee_lock(self, employee_id: str):
        locks = self._database()["employee_locks"]
        owner = uuid4().hex
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.lock_timeout
        while True:
            now = datetime.utcnow()
            try:
                await locks.insert_one({
                    "_id": employee_id,
                    "owner": owner,
                    "expires_at": now + timedelta(seconds=self.lease_seconds),
                })
                break
            except DuplicateKeyError:
                # Break leases abandoned by a crashed holder
                result = await locks.delete_one({"_id": employee_id, "expires_at": {"$lt": now}})
                if result.deleted_count:
                    logger.warning(f"Broke expired eligibility lock for employee {employee_id}")
                    continue
                if loop.time() >= deadline:
                    raise LockTimeout(f"Timed out waiting for eligibility lock of employee {employee_id}")
                await asyncio.sleep(self.poll_interval)
        try:
            yield
        finally:
            await locks.delete_one({"_id": employee_id, "owner": owner})


class MongoProfileStore(ProfileStore):
    async def get(self, profile_id: str) -> Optional[EmployeeProfile]:
        oid = _object_id(profile_id)
        if oid is None:
            return None
        document = await EmployeeProfileDocument.get(PydanticObjectId(oid))
        return document.to_record() if document else None

    async def get_by_user(self, user_id: str) -> Optional[EmployeeProfile]:
        document = await EmployeeProfileDocument.find_one(EmployeeProfileDocument.user_id == user_id)
        return document.to_record() if document else None

    async def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        document = EmployeeProfileDocument.from_record(profile)
        await document.insert()
        return document.to_record()

    async def update_details(self, profile_id: str, details: Dict[str, Any]) -> Optional[EmployeeProfile]:
        oid = _object_id(profile_id)
        if oid is None:
            return None
        changes = dict(details)
        changes["updated_at"] = datetime.utcnow()
        raw = await EmployeeProfileDocument.get_motor_collection().find_one_and_update(
            {"_id": oid},
            {"$set": _encode(changes)},
            return_document=ReturnDocument.AFTER,
        )
        if raw is None:
            return None
        return EmployeeProfileDocument.model_validate(raw).to_record()


class MongoNotificationStore(NotificationStore):
    async def create(self, notification: Notification) -> Notification:
        document = NotificationDocument(**notification.model_dump(exclude={"id"}))
        await document.insert()
        return document.to_record()

    async def list_for_recipient(self, recipient_id: str, limit: int) -> List[Notification]:
        documents = await NotificationDocument.find(
            NotificationDocument.recipient_id == recipient_id
        ).sort(-NotificationDocument.created_at).limit(limit).to_list()
        return [d.to_record() for d in documents]

    async def get(self, notification_id: str) -> Optional[Notification]:
        oid = _object_id(notification_id)
        if oid is None:
            return None
        document = await NotificationDocument.get(PydanticObjectId(oid))
        return document.to_record() if document else None

    async def mark_read(self, notification_id: str) -> None:
        oid = _object_id(notification_id)
        if oid is None:
            return
        await NotificationDocument.get_motor_collection().update_one(
            {"_id": oid}, {"$set": {"is_read": True}}
        )

    async def mark_all_read(self, recipient_id: str) -> int:
        result = await NotificationDocument.get_motor_collection().update_many(
            {"recipient_id": recipient_id, "is_read": False},
            {"$set": {"is_read": True}},
        )
        return result.modified_count


class MongoUserDirectory(UserDirectory):
    async def ids_with_role(self, role: str) -> List[str]:
        users = await User.find(User.role == role, User.is_active == True).to_list()  # noqa: E712
        return [str(u.id) for u in users]
