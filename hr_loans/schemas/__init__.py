from hr_loans.schemas.user_schemas import (
    UserCreate,
    UserResponse,
    Token,
    ResetPasswordRequest,
    SeedEmployee,
    SeedEmployeesRequest,
)
from hr_loans.schemas.profile_schema import ProfileDetailsUpdate, CreateProfileRequest
from hr_loans.schemas.loan_schema import (
    FinalDecisionEnum,
    SubmitLoanRequest,
    RecommendLoanRequest,
    FinalizeLoanRequest,
)
