from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from hr_loans.core.security import decode_token
from hr_loans.core.exceptions import Unauthorized
from hr_loans.domain.records import Role
from hr_loans.services.auth_service import auth_service
from typing import Dict
import logging

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# Extracts and validates JWT token to retrieve current authenticated user
async def get_current_user(token: str = Depends(oauth2_scheme)) -> Dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if payload is None:
        logger.debug("Token payload is None after decoding.")
        raise credentials_exception

    email = payload.get("sub")
    if email is None:
        logger.debug("No 'sub' field in token payload.")
        raise credentials_exception

    user = await auth_service.get_user_by_email(email)
    if user is None or not user.get("is_active", True):
        raise credentials_exception

    return user

# Builds a dependency that admits only users holding one of the given roles
def require_roles(*roles: Role):
    allowed = {r.value for r in roles}

    async def checker(current_user: Dict = Depends(get_current_user)) -> Dict:
        if current_user.get("role") not in allowed:
            logger.warning("User %s with role %s denied access", current_user.get("id"), current_user.get("role"))
            raise Unauthorized("Not authorized for this operation")
        return current_user

    return checker

get_admin_user = require_roles(Role.admin)
get_employee_user = require_roles(Role.employee)
get_hr_officer_user = require_roles(Role.hr_officer)
get_hr_manager_user = require_roles(Role.hr_manager)
get_hr_user = require_roles(Role.hr_officer, Role.hr_manager)
