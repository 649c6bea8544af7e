"""
Role and status constants shared by every module.
"""

from enum import Enum


class Role(str, Enum):
    SUPER_USER = "super_user"
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    DIRECTOR = "director"
    EMPLOYEE = "employee"
    CUSTOMER = "customer"


class ApprovalStatus(str, Enum):
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveApprovalStatus(str, Enum):
    REQUESTED = "REQUESTED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TimesheetWorkflowStatus(str, Enum):
    SAVED = "SAVED"
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RecordStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class SubjectType(str, Enum):
    EMPLOYEE = "employee"
    CUSTOMER = "customer"


class OnlineStatus(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    AWAY = "AWAY"


# Role groups
ADMIN_ROLES = frozenset({Role.SUPER_USER, Role.ADMIN, Role.HR})
HR_ROLES = frozenset({Role.SUPER_USER, Role.HR})
APPROVER_ROLES = frozenset({Role.SUPER_USER, Role.HR, Role.MANAGER, Role.DIRECTOR, Role.CUSTOMER})
REPORTEE_VIEWER_ROLES = frozenset({Role.MANAGER, Role.DIRECTOR})
CUSTOMER_ADMIN_ROLES = frozenset({Role.SUPER_USER, Role.ADMIN})
FINAL_APPROVAL_STATUSES = frozenset({ApprovalStatus.APPROVED.value, ApprovalStatus.REJECTED.value})


def has_role(role, allowed) -> bool:
    """True when `role` (enum or raw string) belongs to `allowed`."""
    if role is None:
        return False
    try:
        return Role(role) in allowed
    except ValueError:
        return False
