#!/usr/bin/env python3
"""Create an admin user with properly hashed password."""

import asyncio

from sqlalchemy import select

from nakanostay.core.security import get_password_hash
from nakanostay.database import AsyncSessionLocal
from nakanostay.models.user import AdminUser


async def create_admin(
    email: str = "admin@nakanostay.ec",
    password: str = "Admin@123",
    full_name: str = "NakanoStay Admin",
) -> None:
    """Create an admin user if it doesn't exist."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(AdminUser).where(AdminUser.email == email)
        )
        existing = result.scalar_one_or_none()

        if existing:
            existing.password_hash = get_password_hash(password)
            existing.full_name = full_name
            existing.is_active = True
            await session.commit()
            print(f"Updated existing admin user: {email}")
        else:
            admin = AdminUser(
                email=email,
                password_hash=get_password_hash(password),
                full_name=full_name,
                is_active=True,
            )
            session.add(admin)
            await session.commit()
            print(f"Created admin user: {email}")

        print(f"Email: {email}")
        print(f"Password: {password}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@nakanostay.ec", help="Admin email")
    parser.add_argument("--password", default="Admin@123", help="Admin password")
    parser.add_argument("--full-name", default="NakanoStay Admin", help="Full name")

    args = parser.parse_args()

    asyncio.run(
        create_admin(
            email=args.email,
            password=args.password,
            full_name=args.full_name,
        )
    )
