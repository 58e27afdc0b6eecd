"""
Admin Account Script
Creates an admin account, or resets the password of an existing one.

    python -m app.scripts.create_admin --email admin@example.com --password 'S3cret!pw' --name Admin
    python -m app.scripts.create_admin --email admin@example.com --password 'N3w!pw' --reset
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.core.security import hash_password
from app.core.validation import is_valid_email
from app.database.supabase_client import get_supabase
from app.modules.admin_auth.service import MIN_PASSWORD_LENGTH
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_admin(supabase: Client, email: str, password: str, name: str) -> bool:
    """Insert a new active admin; returns False if the email is taken"""
    existing = supabase.table("admin_users")\
        .select("id")\
        .eq("email", email)\
        .limit(1)\
        .execute()
    if existing.data:
        logger.warning(f"Admin {email} already exists, use --reset to change the password")
        return False

    result = supabase.table("admin_users").insert({
        "email": email,
        "password_hash": hash_password(password),
        "name": name,
        "is_active": True
    }).execute()
    logger.info(f"Created admin {email} ({result.data[0]['id']})")
    return True


def reset_password(supabase: Client, email: str, password: str) -> bool:
    """Replace the password hash of an existing admin"""
    result = supabase.table("admin_users")\
        .update({
            "password_hash": hash_password(password),
            "updated_at": datetime.now(timezone.utc).isoformat()
        })\
        .eq("email", email)\
        .execute()
    if not result.data:
        logger.error(f"Admin {email} not found")
        return False

    # Existing admin sessions stop being valid once the password changes
    admin_id = result.data[0]["id"]
    supabase.table("admin_sessions").delete().eq("admin_id", admin_id).execute()
    logger.info(f"Password reset for admin {email}")
    return True


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create an admin account or reset its password")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Admin")
    parser.add_argument("--reset", action="store_true", help="reset the password of an existing admin")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    email = args.email.strip().lower()

    if not is_valid_email(email):
        logger.error("Invalid email format")
        sys.exit(1)
    if len(args.password) < MIN_PASSWORD_LENGTH:
        logger.error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        sys.exit(1)

    try:
        supabase = get_supabase()
        if args.reset:
            ok = reset_password(supabase, email, args.password)
        else:
            ok = create_admin(supabase, email, args.password, args.name.strip() or "Admin")
    except Exception as e:
        logger.error(f"Error updating admin account: {e}")
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
