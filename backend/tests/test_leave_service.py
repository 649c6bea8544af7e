"""
Tests for app/services/leaves/leave_service.py - applying leave and the approver workflow.
"""
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.errors import BadRequestError, ForbiddenError, NotFoundError

MODULE = "app.services.leaves.leave_service"


@pytest.fixture
def stores(employee_factory, mock_email_service):
    with patch(f"{MODULE}.employee_store") as employee_store, \
            patch(f"{MODULE}.user_store") as user_store, \
            patch(f"{MODULE}.project_store") as project_store, \
            patch(f"{MODULE}.customer_store") as customer_store, \
            patch(f"{MODULE}.leave_store") as leave_store, \
            patch(f"{MODULE}.get_email_service", return_value=mock_email_service):
        employee_store.get_employee = AsyncMock(side_effect=lambda db, uuid: employee_factory(uuid))
        employee_store.get_employees = AsyncMock(return_value=[])
        user_store.get_user_by_employee_id = AsyncMock(return_value=MagicMock(role="manager"))
        project_store.find_customer_approver_allocation = AsyncMock(return_value=None)
        customer_store.get_customer = AsyncMock(return_value=None)
        leave_store.find_overlapping_leave = AsyncMock(return_value=None)
        leave_store.create_leave = AsyncMock(side_effect=_created_leave)
        leave_store.get_leave = AsyncMock(return_value=None)
        leave_store.update_leave_status = AsyncMock()
        leave_store.approved_days_by_type = AsyncMock(return_value={})
        leave_store.get_allocations = AsyncMock(return_value=[])
        leave_store.upsert_allocations = AsyncMock()
        yield MagicMock(
            employee=employee_store,
            user=user_store,
            project=project_store,
            customer=customer_store,
            leave=leave_store,
        )


def _created_leave(db, values):
    leave = MagicMock()
    leave.uuid = "leave-1"
    for key, value in values.items():
        setattr(leave, key, value)
    return leave


def _apply(employee_id: str = "emp-1", start=date(2025, 4, 7), end=date(2025, 4, 8), **kwargs):
    from app.schemas.leave import LeaveApplyRequest

    return LeaveApplyRequest(
        employee_id=employee_id,
        leave_type=kwargs.pop("leave_type", "Casual Leave"),
        reason="Family function",
        leave_start_date=start,
        leave_end_date=end,
        **kwargs,
    )


class TestApplyLeave:

    @pytest.mark.asyncio
    async def test_creates_leave_with_manager_approver(self, mock_db_session, stores, employee_caller, mock_email_service):
        from app.services.leaves import leave_service

        result = await leave_service.apply_leave(mock_db_session, _apply(), employee_caller)

        assert result["leave_uuid"] == "leave-1"
        values = stores.leave.create_leave.await_args.args[1]
        assert values["leave_days"] == 2.0
        assert values["leave_approval_status"] == "REQUESTED"
        assert [a["approver_id"] for a in values["leave_approvers"]] == ["mgr-1"]
        assert values["leave_approvers"][0]["status"] == "REQUESTED"
        recipients = [call.args[0] for call in mock_email_service.send_email.await_args_list]
        assert recipients == ["mgr-1@vodichron.com", "emp-1@vodichron.com"]

    @pytest.mark.asyncio
    async def test_secondary_and_customer_approvers(self, mock_db_session, stores, employee_caller):
        """A secondary approver and the allocated customer are added after the manager."""
        from app.services.leaves import leave_service

        stores.project.find_customer_approver_allocation.return_value = MagicMock(customer_id="cust-1")
        stores.customer.get_customer.return_value = MagicMock(uuid="cust-1", email="buyer@client.com")

        await leave_service.apply_leave(mock_db_session, _apply(secondary_approver_id="dir-1"), employee_caller)

        approvers = stores.leave.create_leave.await_args.args[1]["leave_approvers"]
        assert [a["approver_id"] for a in approvers] == ["mgr-1", "dir-1", "cust-1"]
        assert approvers[2]["approver_role"] == "customer"

    @pytest.mark.asyncio
    async def test_employee_cannot_apply_for_others(self, mock_db_session, stores, employee_caller):
        from app.services.leaves import leave_service

        with pytest.raises(ForbiddenError):
            await leave_service.apply_leave(mock_db_session, _apply("emp-2"), employee_caller)

        stores.leave.create_leave.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_leave_type(self, mock_db_session, stores, employee_caller):
        from app.services.leaves import leave_service

        with pytest.raises(BadRequestError):
            await leave_service.apply_leave(mock_db_session, _apply(leave_type="Vacation"), employee_caller)

    @pytest.mark.asyncio
    async def test_half_day_must_be_single_day(self, mock_db_session, stores, employee_caller):
        from app.services.leaves import leave_service

        with pytest.raises(BadRequestError) as exc:
            await leave_service.apply_leave(mock_db_session, _apply(is_half_day=True), employee_caller)

        assert "Half-day leave" in exc.value.message

    @pytest.mark.asyncio
    async def test_half_day_counts_half(self, mock_db_session, stores, employee_caller):
        from app.services.leaves import leave_service

        await leave_service.apply_leave(
            mock_db_session, _apply(end=date(2025, 4, 7), is_half_day=True), employee_caller
        )

        assert stores.leave.create_leave.await_args.args[1]["leave_days"] == 0.5

    @pytest.mark.asyncio
    async def test_overlapping_leave(self, mock_db_session, stores, employee_caller):
        from app.services.leaves import leave_service

        stores.leave.find_overlapping_leave.return_value = MagicMock()

        with pytest.raises(BadRequestError) as exc:
            await leave_service.apply_leave(mock_db_session, _apply(), employee_caller)

        assert "overlap" in exc.value.message
        assert stores.leave.find_overlapping_leave.await_args.args[4] == leave_service.OPEN_STATUSES

    @pytest.mark.asyncio
    async def test_employee_without_manager(self, mock_db_session, stores, employee_caller, employee_factory):
        from app.services.leaves import leave_service

        stores.employee.get_employee.side_effect = lambda db, uuid: employee_factory(uuid, reporting_manager_id=None)

        with pytest.raises(BadRequestError) as exc:
            await leave_service.apply_leave(mock_db_session, _apply(), employee_caller)

        assert "reporting manager" in exc.value.message


class TestResolveFinalStatus:

    def _approvers(self, *statuses):
        return [{"approver_id": f"a{i}", "status": status} for i, status in enumerate(statuses)]

    def test_any_rejection_rejects(self):
        from app.services.leaves.leave_service import resolve_final_status

        assert resolve_final_status(self._approvers("APPROVED", "REJECTED"), "REJECTED", "manager") == "REJECTED"

    def test_all_approved(self):
        from app.services.leaves.leave_service import resolve_final_status

        assert resolve_final_status(self._approvers("APPROVED", "APPROVED"), "APPROVED", "manager") == "APPROVED"

    def test_partial_approval_is_pending(self):
        from app.services.leaves.leave_service import resolve_final_status

        assert resolve_final_status(self._approvers("APPROVED", "REQUESTED"), "APPROVED", "manager") == "PENDING"

    def test_hr_approval_is_final(self):
        from app.services.leaves.leave_service import resolve_final_status

        assert resolve_final_status(self._approvers("APPROVED", "REQUESTED"), "APPROVED", "hr") == "APPROVED"


def _leave(status: str = "REQUESTED", approvers=None):
    leave = MagicMock()
    leave.uuid = "leave-1"
    leave.employee_id = "emp-1"
    leave.request_number = 111222
    leave.leave_type = "Sick Leave"
    leave.leave_start_date = date(2025, 4, 7)
    leave.leave_end_date = date(2025, 4, 7)
    leave.leave_days = Decimal("1")
    leave.leave_approval_status = status
    leave.leave_approvers = approvers if approvers is not None else [
        {"approver_id": "mgr-1", "status": "REQUESTED"},
        {"approver_id": "cust-1", "status": "REQUESTED"},
    ]
    return leave


class TestUpdateLeaveStatus:

    @pytest.mark.asyncio
    async def test_employee_cannot_update(self, mock_db_session, stores, employee_caller):
        from app.schemas.leave import LeaveStatusUpdate
        from app.services.leaves import leave_service

        with pytest.raises(ForbiddenError):
            await leave_service.update_leave_status(
                mock_db_session, "leave-1", LeaveStatusUpdate(approval_status="APPROVED"), employee_caller
            )

    @pytest.mark.asyncio
    async def test_missing_leave(self, mock_db_session, stores, manager_caller):
        from app.schemas.leave import LeaveStatusUpdate
        from app.services.leaves import leave_service

        with pytest.raises(BadRequestError):
            await leave_service.update_leave_status(
                mock_db_session, "leave-404", LeaveStatusUpdate(approval_status="APPROVED"), manager_caller
            )

    @pytest.mark.asyncio
    async def test_manager_approval_is_pending_until_all_approve(self, mock_db_session, stores, manager_caller, mock_email_service):
        from app.schemas.leave import LeaveStatusUpdate
        from app.services.leaves import leave_calculation, leave_service

        stores.leave.get_leave.return_value = _leave()

        with patch.object(leave_calculation, "apply_status_transition", AsyncMock()) as transition:
            result = await leave_service.update_leave_status(
                mock_db_session, "leave-1", LeaveStatusUpdate(approval_status="APPROVED", comment="ok"), manager_caller
            )

        assert result["status"] == "PENDING"
        transition.assert_awaited_once()
        approvers, final_status = stores.leave.update_leave_status.await_args.args[2:4]
        assert final_status == "PENDING"
        assert approvers[0]["status"] == "APPROVED"
        assert approvers[0]["approver_comments"] == "ok"
        assert approvers[1]["status"] == "REQUESTED"
        mock_email_service.send_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_manager_rejection_is_final_and_notifies(self, mock_db_session, stores, manager_caller, mock_email_service):
        from app.schemas.leave import LeaveStatusUpdate
        from app.services.leaves import leave_calculation, leave_service

        stores.leave.get_leave.return_value = _leave()

        with patch.object(leave_calculation, "apply_status_transition", AsyncMock()):
            result = await leave_service.update_leave_status(
                mock_db_session, "leave-1", LeaveStatusUpdate(approval_status="REJECTED"), manager_caller
            )

        assert result["status"] == "REJECTED"
        assert mock_email_service.send_email.await_args.args[0] == "emp-1@vodichron.com"

    @pytest.mark.asyncio
    async def test_non_approver_manager_is_forbidden(self, mock_db_session, stores, caller_factory):
        from app.schemas.leave import LeaveStatusUpdate
        from app.services.leaves import leave_service

        stores.leave.get_leave.return_value = _leave()

        with pytest.raises(ForbiddenError) as exc:
            await leave_service.update_leave_status(
                mock_db_session, "leave-1", LeaveStatusUpdate(approval_status="APPROVED"), caller_factory("manager", "mgr-9")
            )

        assert "not an approver" in exc.value.message
        stores.leave.update_leave_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hr_is_appended_and_approval_is_final(self, mock_db_session, stores, hr_caller):
        """HR may decide on any leave; their entry is added to the approver list."""
        from app.schemas.leave import LeaveStatusUpdate
        from app.services.leaves import leave_calculation, leave_service

        stores.leave.get_leave.return_value = _leave()

        with patch.object(leave_calculation, "apply_status_transition", AsyncMock()) as transition:
            result = await leave_service.update_leave_status(
                mock_db_session, "leave-1", LeaveStatusUpdate(approval_status="APPROVED"), hr_caller
            )

        assert result["status"] == "APPROVED"
        approvers = stores.leave.update_leave_status.await_args.args[2]
        assert approvers[-1]["approver_id"] == "hr-1"
        assert approvers[-1]["approver_role"] == "hr"
        assert approvers[-1]["status"] == "APPROVED"
        assert transition.await_args.args[2] == "APPROVED"

    @pytest.mark.asyncio
    async def test_final_leave_cannot_be_updated(self, mock_db_session, stores, manager_caller):
        from app.schemas.leave import LeaveStatusUpdate
        from app.services.leaves import leave_service

        stores.leave.get_leave.return_value = _leave("APPROVED")

        with pytest.raises(BadRequestError) as exc:
            await leave_service.update_leave_status(
                mock_db_session, "leave-1", LeaveStatusUpdate(approval_status="REJECTED"), manager_caller
            )

        assert exc.value.message == "Leave is already APPROVED and cannot be updated again."


class TestBalanceAndAllocations:

    @pytest.mark.asyncio
    async def test_employee_cannot_view_others_balance(self, mock_db_session, stores, employee_caller):
        from app.services.leaves import leave_service

        with pytest.raises(ForbiddenError):
            await leave_service.get_leave_balance(mock_db_session, "emp-2", employee_caller)

    @pytest.mark.asyncio
    async def test_balance_for_unknown_employee(self, mock_db_session, stores, hr_caller):
        from app.services.leaves import leave_service

        stores.employee.get_employee.side_effect = None
        stores.employee.get_employee.return_value = None

        with pytest.raises(NotFoundError):
            await leave_service.get_leave_balance(mock_db_session, "emp-404", hr_caller)

    @pytest.mark.asyncio
    async def test_balance_uses_approved_days_and_carry_forward(self, mock_db_session, stores, employee_caller):
        from app.services.leaves import leave_service

        stores.leave.approved_days_by_type.return_value = {"Sick Leave": 2.0}
        stores.leave.get_allocations.return_value = [
            MagicMock(leave_type="Casual Leave_Privileged Leave", leaves_carry_forwarded=Decimal("3"))
        ]

        balances = await leave_service.get_leave_balance(mock_db_session, "emp-1", employee_caller, year=2025)
        by_type = {b.leave_type: b for b in balances}

        assert by_type["Sick Leave"].balance == 6
        assert by_type["Casual Leave_Privileged Leave"].balance == 17
        stores.leave.approved_days_by_type.assert_awaited_once_with(
            mock_db_session, "emp-1", date(2025, 1, 1), date(2025, 12, 31)
        )

    @pytest.mark.asyncio
    async def test_only_hr_updates_allocations(self, mock_db_session, stores, manager_caller):
        from app.schemas.leave import LeaveAllocationUpdate
        from app.services.leaves import leave_service

        payload = LeaveAllocationUpdate(allocations=[{"leave_type": "Sick Leave", "leaves_allocated": 10}])

        with pytest.raises(ForbiddenError):
            await leave_service.update_leave_allocations(mock_db_session, "emp-1", payload, manager_caller)

    @pytest.mark.asyncio
    async def test_yearly_allocation_runs_for_previous_year_employees(self, mock_db_session, stores, hr_caller, employee_factory):
        from app.services.leaves import leave_calculation, leave_service

        stores.leave.list_employees_with_allocations = AsyncMock(return_value=["emp-1", "emp-2"])
        stores.employee.get_employees.return_value = [employee_factory("emp-1"), employee_factory("emp-2")]

        with patch.object(leave_calculation, "allocate_leaves_for_employee", AsyncMock()) as allocate:
            result = await leave_service.allocate_yearly_leaves(mock_db_session, hr_caller, year=2026)

        assert result == {"year": 2026, "count": 2}
        stores.leave.list_employees_with_allocations.assert_awaited_once_with(mock_db_session, "2025")
        assert allocate.await_count == 2
