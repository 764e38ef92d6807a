"""
One-time script to provision the admin account.
Self-registration as ADMIN is refused by the API, so this is the only way
to create one. Run from the project root:

    python scripts/create_admin.py

The login defaults to the reserved admin login (ADMIN_LOGIN, "gerenciador"),
which is the only login accepted by POST /auth/admin.
"""

import getpass
import os
import sys

# Make sure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings  # noqa: E402
from app.core.exceptions import ConflictError  # noqa: E402
from app.database import SessionLocal, init_db  # noqa: E402
from app.models.users import ROLE_ADMIN  # noqa: E402
from app.services.auth import create_user, get_user_by_login  # noqa: E402


def main():
    # Ensure the tables exist
    init_db()

    db = SessionLocal()
    try:
        print("\n── ProductsCatalog · Create Admin User ──\n")

        login = input(f"Login (default: {settings.ADMIN_LOGIN}): ").strip()
        login = login or settings.ADMIN_LOGIN
        if login != settings.ADMIN_LOGIN:
            print(
                f"Warning: only '{settings.ADMIN_LOGIN}' can sign in through /auth/admin."
            )

        existing = get_user_by_login(db, login)
        if existing:
            print(f"User {login} already exists (role: {existing.role}).")
            return

        password = getpass.getpass("Password (min 8 chars): ").strip()
        if len(password) < 8:
            print("Password too short.")
            return

        try:
            user = create_user(db, login, password, ROLE_ADMIN)
        except ConflictError:
            print(f"User {login} already exists.")
            return
        print(f"\n✓ User created: {user.login} (role: {user.role}, id: {user.id})\n")

    finally:
        db.close()


if __name__ == "__main__":
    main()
