from beanie import Document
from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional
from bson import ObjectId
from pymongo import IndexModel, ASCENDING

from hr_loans.domain.records import Role

class User(Document):
    email: EmailStr = Field(..., description="Email address of the user")
    full_name: Optional[str] = Field(None, description="Full name of the user")
    hashed_password: str = Field(..., description="Hashed password for the user account")
    role: Role = Field(..., description="Role granting access to workflow operations")
    is_active: bool = Field(default=True, description="Indicates if the user account is active")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Timestamp when the user was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp when the user was last updated")

    class Settings:
        name = "users"  # Collection name in MongoDB
        indexes = [IndexModel([("email", ASCENDING)], unique=True)]

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        json_encoders = {
            ObjectId: str,
            datetime: lambda v: v.isoformat()
        }
