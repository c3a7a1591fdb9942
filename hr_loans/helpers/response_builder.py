from decimal import Decimal
from enum import Enum
from datetime import datetime
from typing import Any, Dict, Optional

from hr_loans.domain.eligibility import EligibilitySnapshot
from hr_loans.domain.records import EmployeeProfile, LoanRequest, Notification


def to_jsonable(obj: Any) -> Any:
    """Convert Decimals, enums and datetimes to JSON-friendly values."""
    if isinstance(obj, dict):
        return {key: to_jsonable(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [to_jsonable(item) for item in obj]
    elif isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, datetime):
        return obj.isoformat()
    return obj


def build_loan_response(loan: LoanRequest, profile: Optional[EmployeeProfile] = None) -> Dict[str, Any]:
    response = loan.model_dump(exclude={"contract_path"})
    response["has_contract"] = bool(loan.contract_path)
    if profile is not None:
        response["employee"] = {
            "id": profile.id,
            "full_name": profile.full_name,
            "department": profile.department,
            "gross_salary": profile.gross_salary,
        }
    return to_jsonable(response)


def build_profile_response(profile: EmployeeProfile) -> Dict[str, Any]:
    return to_jsonable(profile.model_dump())


def build_eligibility_response(snapshot: EligibilitySnapshot) -> Dict[str, Any]:
    return to_jsonable({
        "max_loan": snapshot.max_loan,
        "total_approved": snapshot.total_approved,
        "remaining_eligible": snapshot.remaining,
    })


def build_notification_response(notification: Notification) -> Dict[str, Any]:
    return to_jsonable(notification.model_dump())
