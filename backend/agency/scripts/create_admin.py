from __future__ import annotations

import argparse
import getpass

from backend.agency.db import SessionLocal
from backend.agency.errors import ValidationError
from backend.agency.services.auth_service import SessionService
from backend.agency.services.permissions import ROLES


def main() -> None:
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("email")
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    parser.add_argument("--role", choices=ROLES, default="admin")
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        raise SystemExit("[create_admin] passwords do not match")

    db = SessionLocal()
    try:
        user = SessionService(db).create_admin(
            email=args.email,
            password=password,
            first_name=args.first_name,
            last_name=args.last_name,
            role=args.role,
        )
    except ValidationError as exc:
        raise SystemExit(f"[create_admin] {exc.message}: {exc.fields}")
    finally:
        db.close()
    print(f"[create_admin] created id={user.id} email={user.email} role={user.role}")


if __name__ == "__main__":
    main()
