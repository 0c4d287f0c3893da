"""
Set premium/admin claims by email (operator script)

Use to grant the first admin, or to fix a premium grant when a webhook
delivery was missed.

Usage (from backend/):
  python -m scripts.set_user_claims owner@example.com --admin
  python -m scripts.set_user_claims customer@example.com --premium
  python -m scripts.set_user_claims customer@example.com --no-premium
"""

import asyncio
import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from database import get_db_context
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def set_claims_by_email(
    email: str,
    premium: Optional[bool] = None,
    admin: Optional[bool] = None,
) -> bool:
    """Returns True if the user exists and the claims were written."""
    email_lower = email.strip().lower()
    if not email_lower:
        logger.error("Email is required")
        return False

    updates = {}
    if premium is not None:
        updates["claims.premium"] = premium
    if admin is not None:
        updates["claims.admin"] = admin
    if not updates:
        logger.error("Nothing to set; pass --premium/--no-premium or --admin/--no-admin")
        return False
    updates["updated_at"] = datetime.now(timezone.utc)

    async with get_db_context() as db:
        result = await db.users.update_one({"email": email_lower}, {"$set": updates})
        if result.matched_count == 0:
            logger.warning("No user found with email: %s", email_lower)
            return False

    logger.info("Updated claims for %s: premium=%s admin=%s", email_lower, premium, admin)
    return True


def main():
    parser = argparse.ArgumentParser(description="Set premium/admin claims for a user by email")
    parser.add_argument("email", help="User email")
    parser.add_argument("--premium", dest="premium", action="store_true", default=None)
    parser.add_argument("--no-premium", dest="premium", action="store_false")
    parser.add_argument("--admin", dest="admin", action="store_true", default=None)
    parser.add_argument("--no-admin", dest="admin", action="store_false")
    args = parser.parse_args()
    ok = asyncio.run(set_claims_by_email(args.email, premium=args.premium, admin=args.admin))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
