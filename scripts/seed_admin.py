"""
Bootstrap the first administrator account.

Usage:
    python scripts/seed_admin.py admin@example.com 'StrongPass@1' "System Admin"
"""

import asyncio
import logging
import sys

from hr_loans.core.exceptions import ValidationFailed
from hr_loans.database.connection import init_db
from hr_loans.domain.records import Role
from hr_loans.services.auth_service import auth_service

logger = logging.getLogger("seed_admin")


async def main(email: str, password: str, full_name: str = None) -> int:
    await init_db()
    try:
        user = await auth_service.create_user(email, password, Role.admin.value, full_name)
    except ValidationFailed as e:
        logger.error(f"Could not create administrator: {e.message}")
        return 1
    logger.info(f"Administrator {user['email']} created with id {user['id']}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(*sys.argv[1:4])))
