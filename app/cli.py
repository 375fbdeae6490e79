"""CLI commands for HydroBuddy."""

import argparse
import asyncio
import getpass
import sys

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.user import User
from app.services.auth import get_auth_provider


def create_user(email: str, password: str | None = None, name: str | None = None) -> None:
    """Create a user account."""
    db: Session = SessionLocal()

    try:
        # Check if email already exists
        existing = db.query(User).filter(User.email == email.lower()).first()
        if existing:
            print(f"Error: User with email '{email}' already exists.")
            sys.exit(1)

        # Get password if not provided
        if not password:
            password = getpass.getpass("Password: ")
            password_confirm = getpass.getpass("Confirm password: ")
            if password != password_confirm:
                print("Error: Passwords do not match.")
                sys.exit(1)

        if len(password) < 8:
            print("Error: Password must be at least 8 characters.")
            sys.exit(1)

        asyncio.run(get_auth_provider().create_user(db, email, password, name=name))
        print(f"User created successfully: {email}")

    finally:
        db.close()


def issue_token(email: str, password: str | None = None) -> None:
    """Authenticate a user and print a new session token."""
    db: Session = SessionLocal()

    try:
        if not password:
            password = getpass.getpass("Password: ")

        provider = get_auth_provider()
        user = asyncio.run(provider.authenticate(db, email, password))
        if not user:
            print("Error: Invalid email or password.")
            sys.exit(1)

        token = asyncio.run(provider.create_session(db, user, user_agent="hydrobuddy-cli"))
        print(token)

    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="HydroBuddy CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # create-user command
    create_user_parser = subparsers.add_parser(
        "create-user", help="Create a user account"
    )
    create_user_parser.add_argument("--email", required=True, help="Email address")
    create_user_parser.add_argument(
        "--password", help="Password (will prompt if not provided)"
    )
    create_user_parser.add_argument("--name", help="Display name seed")

    # issue-token command
    issue_token_parser = subparsers.add_parser(
        "issue-token", help="Create a session token for a user"
    )
    issue_token_parser.add_argument("--email", required=True, help="Email address")
    issue_token_parser.add_argument(
        "--password", help="Password (will prompt if not provided)"
    )

    args = parser.parse_args()

    if args.command == "create-user":
        create_user(args.email, args.password, args.name)
    elif args.command == "issue-token":
        issue_token(args.email, args.password)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
