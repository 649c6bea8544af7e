"""
Leave allocation and balance rules.

Casual and Privileged leave share one allocation bucket
(`Casual Leave_Privileged Leave`). Employees joining during the year get
their allocation prorated by joining month; leave types without an
organisation allocation report an unlimited balance.
"""

import logging
import math
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.roles import LeaveApprovalStatus
from app.models.leave import EmployeeLeave
from app.schemas.leave import LeaveBalance
from app.stores import leave_store

logger = logging.getLogger("vodichron.leaves.calculation")

SICK_LEAVE = "Sick Leave"
CASUAL_LEAVE = "Casual Leave"
PRIVILEGED_LEAVE = "Privileged Leave"
PERSONAL_EMERGENCY = "Personal Emergency"
COMBINED_CASUAL_PRIVILEGE_LEAVE = f"{CASUAL_LEAVE}_{PRIVILEGED_LEAVE}"

LEAVE_TYPES = (
    SICK_LEAVE,
    CASUAL_LEAVE,
    PRIVILEGED_LEAVE,
    PERSONAL_EMERGENCY,
    "Maternity Leave",
    "Paternity Leave",
    "Bereavement Leave",
    "Marriage Leave",
    "Loss of Pay",
    "Work From Home",
    "Compensatory Off",
)

ORGANIZATION_LEAVE_ALLOCATION: Dict[str, int] = {
    SICK_LEAVE: 8,
    COMBINED_CASUAL_PRIVILEGE_LEAVE: 14,
    PERSONAL_EMERGENCY: 2,
}

CARRY_FORWARD_PERCENTAGE = 0.5
UNLIMITED_BALANCE = 999


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def allocation_key(leave_type: str) -> str:
    """Bucket a leave type is counted against."""
    if leave_type in (CASUAL_LEAVE, PRIVILEGED_LEAVE):
        return COMBINED_CASUAL_PRIVILEGE_LEAVE
    return leave_type


def calculate_leave_days(start: date, end: date, is_half_day: bool = False) -> float:
    if is_half_day:
        return 0.5
    return float(abs((end - start).days) + 1)


def combine_applied_leaves(applied: Dict[str, float]) -> Dict[str, float]:
    """Fold Casual and Privileged leave into the combined bucket."""
    combined: Dict[str, float] = {}
    for leave_type, days in applied.items():
        key = allocation_key(leave_type)
        combined[key] = combined.get(key, 0.0) + float(days)
    return combined


def _joined_in_year(joining_date: Optional[date], year: int) -> bool:
    return joining_date is not None and joining_date.year >= year


def calculate_leave_allocation(joining_date: Optional[date], year: int) -> Dict[str, int]:
    """Allocated days per bucket for `year`, prorated when the employee joined that year."""
    allocation = {}
    for leave_type, allocated in ORGANIZATION_LEAVE_ALLOCATION.items():
        if not _joined_in_year(joining_date, year):
            allocation[leave_type] = allocated
            continue
        months = joining_date.month if joining_date.day >= 15 else joining_date.month - 1
        lapsed = _round_half_up(allocated / 12 * months)
        allocation[leave_type] = allocated - lapsed
    return allocation


def _prorated_allocation(allocated: int, joining_date: Optional[date], year: int) -> float:
    if not _joined_in_year(joining_date, year):
        return float(allocated)
    if joining_date.day >= 15:
        lapsed = allocated / 12 * joining_date.month
    else:
        lapsed = math.floor(allocated / 12 * (joining_date.month - 1))
    return allocated - lapsed


def calculate_leave_balance(
    joining_date: Optional[date],
    year: int,
    applied: Dict[str, float],
    carry_forwarded: Optional[Dict[str, float]] = None,
) -> List[LeaveBalance]:
    """
    Balance per bucket from approved days (`applied`, keyed by leave type).

    Every organisation bucket is reported even without applied days; other
    leave types with applied days report UNLIMITED_BALANCE.
    """
    carry_forwarded = carry_forwarded or {}
    combined = combine_applied_leaves(applied)
    balances: List[LeaveBalance] = []

    for leave_type, allocated in ORGANIZATION_LEAVE_ALLOCATION.items():
        actual = _prorated_allocation(allocated, joining_date, year)
        used = combined.get(leave_type, 0.0)
        carried = float(carry_forwarded.get(leave_type, 0.0))
        balance = actual - used + carried
        if _joined_in_year(joining_date, year):
            balance = _round_half_up(balance)
        balances.append(LeaveBalance(
            leave_type=leave_type,
            allocated=actual,
            carry_forwarded=carried,
            applied=used,
            balance=balance,
        ))

    for leave_type, used in combined.items():
        if leave_type in ORGANIZATION_LEAVE_ALLOCATION:
            continue
        balances.append(LeaveBalance(
            leave_type=leave_type,
            allocated=0,
            applied=used,
            balance=UNLIMITED_BALANCE,
        ))

    return balances


def carry_forward_amount(previous_balance: float) -> float:
    """Half of the previous year's combined CL/PL balance, when it exceeds one day."""
    if previous_balance > 1:
        return previous_balance * CARRY_FORWARD_PERCENTAGE
    return 0.0


async def allocate_leaves_for_employee(
    db: AsyncSession,
    employee_id: str,
    joining_date: Optional[date],
    year: int,
    created_by: str,
) -> None:
    """Create the year's allocation rows, carrying forward from the previous year's CL/PL bucket."""
    carry_forward = 0.0
    for previous in await leave_store.get_allocations(db, employee_id, str(year - 1)):
        if previous.leave_type == COMBINED_CASUAL_PRIVILEGE_LEAVE:
            carry_forward = carry_forward_amount(previous.balance)

    allocations = [
        {
            "leave_type": leave_type,
            "leaves_allocated": allocated,
            "leaves_carry_forwarded": carry_forward if leave_type == COMBINED_CASUAL_PRIVILEGE_LEAVE else 0,
        }
        for leave_type, allocated in calculate_leave_allocation(joining_date, year).items()
    ]
    await leave_store.upsert_allocations(db, employee_id, str(year), allocations, created_by)
    logger.info(f"Allocated {year} leaves for {employee_id} (carry forward {carry_forward})")


async def apply_status_transition(
    db: AsyncSession, leave: EmployeeLeave, new_status: str, updated_by: str
) -> None:
    """
    Keep leaves_applied in step with approvals: add the days when a leave
    becomes APPROVED, give them back when an APPROVED leave is REJECTED.
    """
    previous_status = leave.leave_approval_status
    approved = LeaveApprovalStatus.APPROVED.value
    if new_status == approved and previous_status != approved:
        delta = float(leave.leave_days)
    elif new_status == LeaveApprovalStatus.REJECTED.value and previous_status == approved:
        delta = -float(leave.leave_days)
    else:
        return

    year = str(leave.leave_start_date.year)
    bucket = allocation_key(leave.leave_type)
    updated = await leave_store.add_applied_days(db, leave.employee_id, year, bucket, delta, updated_by)
    if not updated and delta > 0:
        await leave_store.upsert_allocations(
            db,
            leave.employee_id,
            year,
            [{"leave_type": bucket, "leaves_allocated": 0, "leaves_applied": delta}],
            updated_by,
        )
    logger.info(f"Adjusted {bucket} {year} applied days for {leave.employee_id} by {delta}")
