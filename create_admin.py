#!/usr/bin/env python3
"""
Script to create an Admin account for the Purple Publishing API.
Run it with the same environment (DATABASE_URL etc.) as the server.
"""

import getpass
from purple_publishing import create_app
from purple_publishing.extensions import db
from purple_publishing.models import User, ROLE_ADMIN


def create_admin_user(email, password):
    """
    Create an Admin account, or promote an existing account.

    Args:
        email: Admin email address (login name)
        password: Admin password (will be hashed)
    """
    user = User.find_by_email(email)
    if user is not None:
        print(f"User with email {email} already exists!")
        print(f"   Current role: {user.role} (active: {user.is_active})")

        update = input("Do you want to make this user an active Admin? (yes/no): ").lower()
        if update == 'yes':
            user.role = ROLE_ADMIN
            user.is_active = True
            db.session.commit()
            print(f"User {email} updated to Admin role!")
        return

    user = User(email=email, role=ROLE_ADMIN, is_active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    print("Admin user created successfully!")
    print(f"   Email: {email}")
    print(f"   Role: {ROLE_ADMIN}")
    print("\nYou can now log in with these credentials at /api/auth/login")


def main():
    print("=" * 60)
    print("Purple Publishing - Admin User Creation")
    print("=" * 60)
    print()

    email = input("Email: ").strip()
    password = getpass.getpass("Password: ")
    if not email or not password.strip():
        print("Email and password are required.")
        return

    confirm = input(f"Create Admin {email}? (yes/no): ").lower()
    if confirm != 'yes':
        print("Admin creation cancelled.")
        return

    app = create_app()
    with app.app_context():
        create_admin_user(email, password)


if __name__ == '__main__':
    main()
