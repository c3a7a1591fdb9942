import os
from decimal import Decimal
from dotenv import load_dotenv

from hr_loans.domain.policy import LoanPolicy

load_dotenv()


class Settings:
    PROJECT_NAME: str = "Employee Loan Management"
    MONGODB_URI: str = os.getenv("MONGODB_URI")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME")
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:5173")
    CONTRACTS_DIR: str = os.getenv("CONTRACTS_DIR", "contracts")
    LOCK_LEASE_SECONDS: int = int(os.getenv("LOCK_LEASE_SECONDS", "30"))
    APPROVAL_STALE_SECONDS: int = int(os.getenv("APPROVAL_STALE_SECONDS", "300"))
    APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")

    # Loan policy
    LOAN_SALARY_MULTIPLIER: Decimal = Decimal(os.getenv("LOAN_SALARY_MULTIPLIER", "6"))
    CONTRACT_TERM_MONTHS: int = int(os.getenv("CONTRACT_TERM_MONTHS", "36"))
    MIN_YEARS_TO_RETIREMENT: int = int(os.getenv("MIN_YEARS_TO_RETIREMENT", "3"))
    NOTIFICATION_FEED_LIMIT: int = int(os.getenv("NOTIFICATION_FEED_LIMIT", "20"))

    @classmethod
    def policy(cls) -> LoanPolicy:
        return LoanPolicy(
            salary_multiplier=cls.LOAN_SALARY_MULTIPLIER,
            term_months=cls.CONTRACT_TERM_MONTHS,
            min_years_to_retirement=cls.MIN_YEARS_TO_RETIREMENT,
        )


settings = Settings()


def _mask_secret(val: str) -> str:
    if not val:
        return "<missing>"
    if len(val) <= 8:
        return "*" * len(val)
    return f"{val[:4]}...{val[-4:]}"
