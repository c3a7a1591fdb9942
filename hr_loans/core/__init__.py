from hr_loans.core.config import Settings, settings
from hr_loans.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
    is_valid_password,
)
