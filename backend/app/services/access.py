"""
Caller-scoped visibility shared by the list endpoints.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.roles import ADMIN_ROLES, REPORTEE_VIEWER_ROLES, Role, has_role
from app.schemas.auth import AuthContext
from app.stores import employee_store, project_store


async def reportee_ids(db: AsyncSession, caller: AuthContext) -> Optional[List[str]]:
    """
    Employees whose records the caller may review.

    None means every employee (admin roles); managers and directors see their
    direct reportees; customers see employees allocated to them; everybody
    else sees nobody.
    """
    if has_role(caller.role, ADMIN_ROLES):
        return None
    if has_role(caller.role, REPORTEE_VIEWER_ROLES):
        return await employee_store.list_reportee_ids(db, caller.uuid)
    if caller.role == Role.CUSTOMER.value:
        return await project_store.list_employee_ids_for_customer(db, caller.uuid)
    return []


async def can_view_employee(db: AsyncSession, caller: AuthContext, employee_id: str) -> bool:
    if caller.uuid == employee_id:
        return True
    visible = await reportee_ids(db, caller)
    return visible is None or employee_id in visible
