#!/usr/bin/env python3
"""
Admin Seed Script
Creates the single administrator account for the Crisis Reporting API.

Usage:
    python -m scripts.seed_admin <email> <name> <password>

Example:
    python -m scripts.seed_admin admin@example.org "Site Admin" securepassword123
"""
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session
from crisis_api.database import SessionLocal, init_db
from crisis_api.errors import ValidationError
from crisis_api.routers.admin import create_admin


def seed_admin(email: str, name: str, password: str, session_factory=SessionLocal) -> bool:
    """Create the admin account. Returns False if an admin already exists."""
    db: Session = session_factory()
    try:
        admin = create_admin(db, name, email, password)
    except ValidationError as e:
        print(f"Error: {e.message}")
        db.rollback()
        return False
    finally:
        db.close()

    print("Admin created successfully!")
    print(f"  Email: {admin.email}")
    print(f"  Name: {admin.name}")
    return True


def main():
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)

    email = sys.argv[1]
    name = sys.argv[2]
    password = sys.argv[3]

    # Basic validation
    if len(password) < 6:
        print("Error: Password must be at least 6 characters.")
        sys.exit(1)

    if "@" not in email:
        print("Error: Invalid email format.")
        sys.exit(1)

    # Ensure tables exist
    init_db()

    success = seed_admin(email, name, password)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
