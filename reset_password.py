#!/usr/bin/env python3
"""
Utility script to reset a user's password or create a new admin user.
Run from the project root:
    python reset_password.py
"""
from tms.database import SessionLocal, engine, Base
from tms.models import Role, User
from tms.auth_utils import get_password_hash

Base.metadata.create_all(bind=engine)


def list_users():
    """List all users in the database"""
    db = SessionLocal()
    try:
        users = db.query(User).order_by(User.id).all()
        if not users:
            print("\nNo users found in database.")
            return []

        print("\n=== Existing Users ===")
        for user in users:
            print(
                f"  ID: {user.id}, Username: {user.username}, Name: {user.full_name}, "
                f"Role: {user.role.value}, Active: {user.is_active}"
            )
        return users
    finally:
        db.close()


def reset_password(username: str, new_password: str):
    """Reset password for an existing user"""
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.username == username).first()
        if not user:
            print(f"\nError: User '{username}' not found.")
            return False

        user.hashed_password = get_password_hash(new_password)
        user.is_active = True  # Ensure user is active
        db.commit()
        print(f"\nSuccess! Password reset for user: {username}")
        return True
    finally:
        db.close()


def create_admin(username: str, password: str, full_name: str, mobile_number: str, email: str = None):
    """Create a new admin user"""
    db = SessionLocal()
    try:
        existing = db.query(User).filter(
            (User.username == username) | (User.mobile_number == mobile_number)
        ).first()
        if existing:
            print(f"\nUser '{existing.username}' already uses that username or mobile number. Use reset option instead.")
            return False

        user = User(
            username=username,
            email=email or None,
            full_name=full_name,
            mobile_number=mobile_number,
            hashed_password=get_password_hash(password),
            role=Role.ADMIN,
            is_active=True,
        )
        db.add(user)
        db.commit()
        print(f"\nSuccess! Created admin user: {username}")
        return True
    finally:
        db.close()


def main():
    print("\n=== Aarohi User Management ===")

    # First, list existing users
    users = list_users()

    print("\nOptions:")
    print("  1. Reset password for existing user")
    print("  2. Create new admin user")
    print("  3. Exit")

    choice = input("\nEnter choice (1/2/3): ").strip()

    if choice == "1":
        if not users:
            print("No users to reset. Create a new admin user instead.")
            choice = "2"
        else:
            username = input("Enter username: ").strip()
            new_password = input("Enter new password: ").strip()
            if username and new_password:
                reset_password(username, new_password)
            else:
                print("Username and password are required.")

    if choice == "2":
        username = input("Enter admin username: ").strip()
        password = input("Enter password: ").strip()
        full_name = input("Enter full name (default: Administrator): ").strip() or "Administrator"
        mobile_number = input("Enter mobile number: ").strip()
        email = input("Enter email (optional): ").strip()
        if username and password and mobile_number:
            create_admin(username, password, full_name, mobile_number, email)
        else:
            print("Username, password and mobile number are required.")

    if choice == "3":
        print("Goodbye!")


if __name__ == "__main__":
    main()
