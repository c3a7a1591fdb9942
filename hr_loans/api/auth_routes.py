from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Dict
import logging

from hr_loans.services.auth_service import auth_service
from hr_loans.services.audit_service import audit_service
from hr_loans.schemas import UserResponse, Token
from hr_loans.core.auth_dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

# Authenticates user credentials and returns an access token
@router.post("/login", response_model=Token, status_code=status.HTTP_200_OK)
async def login_user(form_data: OAuth2PasswordRequestForm = Depends()) -> Token:
    try:
        token_data = await auth_service.login_user(form_data.username, form_data.password)
    except HTTPException:
        await audit_service.record("login", form_data.username, None, status="failed")
        raise

    await audit_service.record("login", form_data.username, token_data["user"]["id"])
    return Token(
        access_token=token_data["access_token"],
        token_type=token_data["token_type"]
    )

# Retrieves the authenticated user's profile information
@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def get_current_user_info(current_user: Dict = Depends(get_current_user)) -> UserResponse:
    return UserResponse(**current_user)
