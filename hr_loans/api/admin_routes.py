from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from hr_loans.core.auth_dependencies import get_admin_user
from hr_loans.core.exceptions import ValidationFailed
from hr_loans.helpers.response_builder import build_profile_response
from hr_loans.schemas import (
    CreateProfileRequest,
    ResetPasswordRequest,
    SeedEmployeesRequest,
    UserCreate,
    UserResponse,
)
from hr_loans.services.admin_service import AdminService, admin_service
from hr_loans.services.audit_service import audit_service
from hr_loans.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Administration"])


def get_admin_service() -> AdminService:
    return admin_service


# Creates a user account with the given role
@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, current_user: Dict = Depends(get_admin_user)) -> UserResponse:
    user = await auth_service.create_user(
        email=payload.email,
        password=payload.password,
        role=payload.role.value,
        full_name=payload.full_name,
    )
    await audit_service.record("create_user", current_user.get("email"), user["id"])
    return UserResponse(**user, message="User created")


# Lists all users, newest first
@router.get("/users", response_model=List[UserResponse])
async def list_users(current_user: Dict = Depends(get_admin_user)):
    return await auth_service.list_users()


# Creates an employee profile for an existing user
@router.post("/profiles", status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: CreateProfileRequest,
    current_user: Dict = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service),
) -> Dict[str, Any]:
    profile = await service.create_profile(payload)
    await audit_service.record("create_profile", current_user.get("email"), profile.id)
    return {"message": "Employee profile created", "profile": build_profile_response(profile)}


# Resets a user's password
@router.post("/reset-password")
async def reset_password(payload: ResetPasswordRequest, current_user: Dict = Depends(get_admin_user)) -> Dict[str, str]:
    await auth_service.reset_password(payload.user_id, payload.new_password)
    await audit_service.record("reset_password", current_user.get("email"), payload.user_id)
    return {"message": "Password reset successfully"}


# Bulk-creates employee accounts with minimal profiles
@router.post("/seed-employees")
async def seed_employees(
    payload: SeedEmployeesRequest,
    current_user: Dict = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service),
) -> Dict[str, Any]:
    results = await service.seed_employees(payload.employees)
    return {"message": "Bulk seeding completed", "results": results}


# Lists audit log entries
@router.get("/audit")
async def list_audits(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=1000),
    action: Optional[str] = Query(default=None),
    actor: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    current_user: Dict = Depends(get_admin_user),
) -> Dict[str, Any]:
    filters: Dict[str, Any] = {"action": action, "actor": actor}
    try:
        if start_date:
            filters["start_date"] = datetime.strptime(start_date, "%Y-%m-%d")
        if end_date:
            filters["end_date"] = datetime.strptime(end_date, "%Y-%m-%d").replace(
                hour=23, minute=59, second=59, microsecond=999999
            )
    except ValueError:
        raise ValidationFailed("Invalid date format, expected YYYY-MM-DD")
    return await audit_service.get_audits(skip=skip, limit=limit, filters=filters)
