import asyncio
import os
import sys

# Add the current directory to sys.path to allow imports
sys.path.append(os.getcwd())

from sqlalchemy import select

from app.core.roles import Role
from app.core.security import get_password_hash
from app.db.session import AsyncSessionLocal
from app.models.employee import Employee
from app.models.user import ApplicationUser


async def create_user():
    """Seed a super user so the first login is possible on an empty database."""
    email = os.getenv("SEED_ADMIN_EMAIL", "admin@vodichron.local")
    password = os.getenv("SEED_ADMIN_PASSWORD", "Admin123!")

    async with AsyncSessionLocal() as db:
        employee = await db.scalar(select(Employee).where(Employee.official_email == email))
        if employee is None:
            employee = Employee(
                name="Super User",
                gender="Other",
                contact_number="0000000000",
                official_email=email,
                employee_code="ADMIN001",
                designation="Administrator",
                employment_status="ACTIVE",
            )
            db.add(employee)
            await db.flush()

        user = await db.scalar(select(ApplicationUser).where(ApplicationUser.employee_id == employee.uuid))
        if user is not None:
            user.password = get_password_hash(password)
            user.status = "ACTIVE"
            await db.commit()
            print(f"User {email} already exists, password reset to '{password}'")
            return

        db.add(ApplicationUser(
            employee_id=employee.uuid,
            role=Role.SUPER_USER.value,
            password=get_password_hash(password),
            status="ACTIVE",
            is_system_generated=True,
        ))
        await db.commit()
        print(f"Created super user: {email} / {password}")


if __name__ == "__main__":
    asyncio.run(create_user())
