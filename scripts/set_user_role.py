"""Create or update a user with a role and print a bearer token for local development."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure the project root is on sys.path so ``styledecor`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from styledecor import create_app
from styledecor.extensions import db
from styledecor.identity import SignedTokenVerifier
from styledecor.models import USER_ROLES, User


def set_role(email: str, role: str, name: str | None = None) -> None:
    app = create_app()
    email = email.strip().lower()

    with app.app_context():
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, name=name or email.split("@")[0], role=role)
            db.session.add(user)
            print(f"Created new {role} user: {email}")
        elif user.role != role:
            print(f"Updating user role from '{user.role}' to '{role}'")
            user.role = role
        db.session.commit()

        verifier = app.extensions["identity_verifier"]
        if isinstance(verifier, SignedTokenVerifier):
            print(f"Bearer token: {verifier.issue(email)}")
        else:
            print("Identity provider is not 'signed'; sign in through the frontend to get a token.")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Set a user role for local testing.")
    parser.add_argument("email", help="User email address")
    parser.add_argument("--role", choices=USER_ROLES, default="admin", help="User role (default: admin)")
    parser.add_argument("--name", help="Display name for a newly created user")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    set_role(args.email, args.role, args.name)


if __name__ == "__main__":
    main()
