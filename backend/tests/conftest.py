"""
Shared test fixtures and configuration for Vodichron backend tests.
"""
import os
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-min-32-chars")
os.environ["SMTP_HOST"] = ""


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.close = AsyncMock()
    return session


def make_caller(role: str = "employee", uuid: str = "emp-1", type: str = "employee", email: str = None):
    """Build an AuthContext for service calls."""
    from app.schemas.auth import AuthContext

    return AuthContext(uuid=uuid, role=role, type=type, email=email or f"{uuid}@example.com", name=uuid)


@pytest.fixture
def employee_caller():
    return make_caller("employee", "emp-1")


@pytest.fixture
def manager_caller():
    return make_caller("manager", "mgr-1")


@pytest.fixture
def hr_caller():
    return make_caller("hr", "hr-1")


@pytest.fixture
def super_user_caller():
    return make_caller("super_user", "su-1")


@pytest.fixture
def mock_email_service():
    """Email service whose sends always succeed."""
    service = MagicMock()
    service.send_email = AsyncMock(return_value=True)
    service.send_bulk = AsyncMock()
    return service


def make_employee(uuid: str = "emp-1", **overrides):
    """Employee-like object with the attributes services read."""
    employee = MagicMock()
    employee.uuid = uuid
    employee.name = overrides.pop("name", f"Employee {uuid}")
    employee.official_email = overrides.pop("official_email", f"{uuid}@vodichron.com")
    employee.reporting_manager_id = overrides.pop("reporting_manager_id", "mgr-1")
    employee.reporting_director_id = overrides.pop("reporting_director_id", None)
    employee.date_of_joining = overrides.pop("date_of_joining", date.today() - timedelta(days=800))
    for key, value in overrides.items():
        setattr(employee, key, value)
    return employee


@pytest.fixture
def page_params():
    from app.schemas.common import PageParams

    return PageParams(page=1, page_size=20)


@pytest.fixture
def caller_factory():
    return make_caller


@pytest.fixture
def employee_factory():
    return make_employee
