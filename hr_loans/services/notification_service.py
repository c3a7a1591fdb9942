"""
In-app notifications for loan workflow events.

Dispatch is fire-and-forget: a failure to store a notification is logged and
never propagates into the state transition that triggered it.
"""

import logging
from typing import Iterable, List

from hr_loans.core.clock import Clock, SystemClock
from hr_loans.core.config import settings
from hr_loans.core.exceptions import NotFound, Unauthorized
from hr_loans.database.mongo_stores import MongoNotificationStore, MongoUserDirectory
from hr_loans.database.stores import NotificationStore, UserDirectory
from hr_loans.domain.records import Notification, Role

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates and serves notifications addressed to individual users."""

    def __init__(
        self,
        store: NotificationStore,
        directory: UserDirectory,
        clock: Clock = None,
        feed_limit: int = 20,
    ):
        self.store = store
        self.directory = directory
        self.clock = clock or SystemClock()
        self.feed_limit = feed_limit

    async def dispatch(self, recipient_ids: Iterable[str], message: str) -> int:
        """
        Create one notification per distinct recipient.

        Returns:
            int: Number of notifications actually stored
        """
        sent = 0
        for recipient_id in dict.fromkeys(r for r in recipient_ids if r):
            try:
                await self.store.create(Notification(
                    recipient_id=recipient_id,
                    message=message,
                    created_at=self.clock.now(),
                ))
                sent += 1
            except Exception:
                logger.exception(f"Failed to notify user {recipient_id}: {message!r}")
        return sent

    async def dispatch_to_role(self, role: Role, message: str, also: Iterable[str] = ()) -> int:
        try:
            recipients = await self.directory.ids_with_role(role.value)
        except Exception:
            logger.exception(f"Failed to resolve {role.value} recipients for notification")
            recipients = []
        return await self.dispatch([*recipients, *also], message)

    async def feed(self, user_id: str) -> List[Notification]:
        return await self.store.list_for_recipient(user_id, self.feed_limit)

    async def mark_read(self, user_id: str, notification_id: str) -> Notification:
        notification = await self.store.get(notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        if notification.recipient_id != user_id:
            raise Unauthorized("Not authorized")
        await self.store.mark_read(notification_id)
        return notification.model_copy(update={"is_read": True})

    async def mark_all_read(self, user_id: str) -> int:
        return await self.store.mark_all_read(user_id)


def initialize_notification_service() -> NotificationService:
    return NotificationService(
        store=MongoNotificationStore(),
        directory=MongoUserDirectory(),
        feed_limit=settings.NOTIFICATION_FEED_LIMIT,
    )


notification_service = initialize_notification_service()
