from fastapi import HTTPException, status
from beanie import PydanticObjectId
from bson import ObjectId
from hr_loans.database.models import User
from hr_loans.core.security import hash_password, verify_password, create_access_token, is_valid_password
from hr_loans.core.exceptions import NotFound, ValidationFailed
from typing import Dict, List, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


def _user_dict(user: User) -> Dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role.value if hasattr(user.role, "value") else user.role,
        "is_active": user.is_active,
    }


class AuthService:
    # Create a new user account with a role (administrators only)
    @staticmethod
    async def create_user(email: str, password: str, role: str, full_name: Optional[str] = None) -> Dict:
        email = email.strip().lower()
        existing_user = await User.find_one(User.email == email)
        if existing_user:
            raise ValidationFailed("Email already exists")

        if not is_valid_password(password):
            raise ValidationFailed("Password must be at least 8 characters long")

        new_user = User(
            email=email,
            full_name=full_name,
            hashed_password=hash_password(password),
            role=role,
            created_at=datetime.utcnow()
        )
        await new_user.insert()
        logger.info("User %s created with role %s", new_user.id, role)
        return _user_dict(new_user)

    # Authenticate user and generate access token
    @staticmethod
    async def login_user(email: str, password: str) -> Dict:
        logger.debug("Login attempt for email: %s", email)

        user = await User.find_one(User.email == email.strip().lower())
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Failed login for email: %s", email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is disabled"
            )

        try:
            access_token = create_access_token(data={"sub": user.email, "role": _user_dict(user)["role"]})
        except ValueError as e:
            logger.error("Token creation failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not create access token"
            )
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": _user_dict(user)
        }

    # Retrieve user information by email address
    @staticmethod
    async def get_user_by_email(email: str) -> Optional[Dict]:
        user = await User.find_one(User.email == email)
        if not user:
            return None
        return _user_dict(user)

    @staticmethod
    async def get_user_by_id(user_id: str) -> Optional[User]:
        if not ObjectId.is_valid(user_id):
            return None
        return await User.get(PydanticObjectId(user_id))

    # Replace a user's password (administrators only)
    @staticmethod
    async def reset_password(user_id: str, new_password: str) -> None:
        user = await AuthService.get_user_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        if not is_valid_password(new_password):
            raise ValidationFailed("Password must be at least 8 characters long")
        user.hashed_password = hash_password(new_password)
        user.updated_at = datetime.utcnow()
        await user.save()
        logger.info("Password reset for user %s", user_id)

    # Lists all users without password hashes, newest first
    @staticmethod
    async def list_users() -> List[Dict]:
        users = await User.find_all().sort(-User.created_at).to_list()
        return [_user_dict(u) for u in users]

auth_service = AuthService()
