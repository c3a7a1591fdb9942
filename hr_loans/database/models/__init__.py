from hr_loans.database.models.user_model import User
from hr_loans.database.models.employee_profile_model import EmployeeProfileDocument
from hr_loans.database.models.loan_request_model import LoanRequestDocument
from hr_loans.database.models.notification_model import NotificationDocument
from hr_loans.database.models.audit_log_model import AuditLog

DOCUMENT_MODELS = [User, EmployeeProfileDocument, LoanRequestDocument, NotificationDocument, AuditLog]

__all__ = [
    "User",
    "EmployeeProfileDocument",
    "LoanRequestDocument",
    "NotificationDocument",
    "AuditLog",
    "DOCUMENT_MODELS",
]
