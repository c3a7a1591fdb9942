from beanie import Document
from pydantic import Field
from datetime import datetime
from pymongo import IndexModel, ASCENDING, DESCENDING

from hr_loans.domain.records import Notification


class NotificationDocument(Document):
    recipient_id: str = Field(..., description="ID of the user the notification is addressed to")
    message: str = Field(..., description="Notification text")
    is_read: bool = Field(default=False, description="Whether the recipient has read it")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "notifications"
        indexes = [IndexModel([("recipient_id", ASCENDING), ("created_at", DESCENDING)])]

    def to_record(self) -> Notification:
        return Notification(
            id=str(self.id),
            recipient_id=self.recipient_id,
            message=self.message,
            is_read=self.is_read,
            created_at=self.created_at,
        )
