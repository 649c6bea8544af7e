"""
Tests for app/services/timesheets/daily_service.py - daily submission and approvals.
"""
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import BadRequestError, ForbiddenError, InternalServerError, NotFoundError

MODULE = "app.services.timesheets.daily_service"


@pytest.fixture
def store():
    with patch(f"{MODULE}.timesheet_store") as timesheet_store:
        timesheet_store.find_daily_by_date = AsyncMock(return_value=None)
        timesheet_store.get_max_task_number = AsyncMock(return_value=4)
        timesheet_store.create_daily_timesheet = AsyncMock(
            return_value=MagicMock(uuid="ts-1", request_number=123456)
        )
        timesheet_store.get_daily_timesheet = AsyncMock(return_value=None)
        timesheet_store.get_daily_timesheets = AsyncMock(return_value=[])
        timesheet_store.update_daily_approval = AsyncMock(return_value=1)
        timesheet_store.update_daily_timesheet = AsyncMock(return_value=1)
        timesheet_store.list_daily_timesheets = AsyncMock(return_value=([], 0))
        yield timesheet_store


@pytest.fixture
def employees(employee_factory):
    with patch(f"{MODULE}.employee_store") as employee_store:
        employee_store.get_employee = AsyncMock(side_effect=lambda db, uuid: employee_factory(uuid))
        yield employee_store


def _payload(employee_id: str = "emp-1", timesheet_date: str = "2025-03-03"):
    from app.schemas.timesheet import DailyTimesheetCreate

    return DailyTimesheetCreate(
        employee_id=employee_id,
        timesheet_date=timesheet_date,
        task_details=[{"task": "Build reports", "task_hours": "08:00", "task_status": "Completed"}],
        total_hours=8,
    )


def _timesheet(uuid: str = "ts-1", employee_id: str = "emp-1"):
    timesheet = MagicMock()
    timesheet.uuid = uuid
    timesheet.employee_id = employee_id
    timesheet.request_number = 123456
    timesheet.timesheet_date = date(2025, 3, 3)
    timesheet.total_hours = 8.5
    timesheet.approval_status = "REQUESTED"
    return timesheet


class TestCreateDailyTimesheet:

    @pytest.mark.asyncio
    async def test_creates_with_next_task_id(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        result = await daily_service.create_daily_timesheet(mock_db_session, _payload(), employee_caller)

        assert result == {"timesheet_uuid": "ts-1", "request_number": 123456, "task_id": "TASK005"}
        values = store.create_daily_timesheet.await_args.args[1]
        assert values["timesheet_date"] == date(2025, 3, 3)
        assert values["approval_status"] == "REQUESTED"
        assert values["task_details"][0]["task"] == "Build reports"

    @pytest.mark.asyncio
    async def test_accepts_dd_mm_yyyy(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        await daily_service.create_daily_timesheet(mock_db_session, _payload(timesheet_date="03/03/2025"), employee_caller)

        assert store.create_daily_timesheet.await_args.args[1]["timesheet_date"] == date(2025, 3, 3)

    @pytest.mark.asyncio
    async def test_employee_cannot_submit_for_others(self, mock_db_session, store, employee_caller):
        """No store access happens for a forbidden submission."""
        from app.services.timesheets import daily_service

        with pytest.raises(ForbiddenError):
            await daily_service.create_daily_timesheet(mock_db_session, _payload("emp-2"), employee_caller)

        store.find_daily_by_date.assert_not_awaited()
        store.create_daily_timesheet.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_can_submit_for_others(self, mock_db_session, store, hr_caller):
        from app.services.timesheets import daily_service

        await daily_service.create_daily_timesheet(mock_db_session, _payload("emp-2"), hr_caller)

        store.create_daily_timesheet.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_date(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        with pytest.raises(BadRequestError):
            await daily_service.create_daily_timesheet(mock_db_session, _payload(timesheet_date="2025-13-40"), employee_caller)

    @pytest.mark.asyncio
    async def test_duplicate_date(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        store.find_daily_by_date.return_value = _timesheet()

        with pytest.raises(BadRequestError) as exc:
            await daily_service.create_daily_timesheet(mock_db_session, _payload(), employee_caller)

        assert exc.value.message == "Timesheet is already submitted for date, 3rd March 2025."

    @pytest.mark.asyncio
    async def test_unique_violation_maps_to_duplicate(self, mock_db_session, store, employee_caller):
        """A concurrent insert for the same date reports the duplicate, not a 500."""
        from app.services.timesheets import daily_service

        store.create_daily_timesheet.side_effect = IntegrityError("insert", {}, Exception("duplicate key"))

        with pytest.raises(BadRequestError):
            await daily_service.create_daily_timesheet(mock_db_session, _payload(), employee_caller)

        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        store.create_daily_timesheet.side_effect = OperationalError("insert", {}, Exception("connection lost"))

        with pytest.raises(InternalServerError) as exc:
            await daily_service.create_daily_timesheet(mock_db_session, _payload(), employee_caller)

        assert exc.value.message == daily_service.SUBMIT_FAILED


class TestDailyApproval:

    @pytest.mark.asyncio
    async def test_employee_cannot_approve(self, mock_db_session, store, employee_caller):
        from app.schemas.timesheet import TimesheetApproval
        from app.services.timesheets import daily_service

        with pytest.raises(ForbiddenError):
            await daily_service.update_daily_approval(
                mock_db_session, "ts-1", TimesheetApproval(approval_status="APPROVED"), employee_caller
            )

        store.get_daily_timesheet.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_status(self, mock_db_session, store, manager_caller):
        from app.schemas.timesheet import TimesheetApproval
        from app.services.timesheets import daily_service

        with pytest.raises(BadRequestError) as exc:
            await daily_service.update_daily_approval(
                mock_db_session, "ts-1", TimesheetApproval(approval_status="PENDING"), manager_caller
            )

        assert exc.value.message == daily_service.INVALID_STATUS

    @pytest.mark.asyncio
    async def test_missing_timesheet(self, mock_db_session, store, manager_caller):
        from app.schemas.timesheet import TimesheetApproval
        from app.services.timesheets import daily_service

        with pytest.raises(NotFoundError):
            await daily_service.update_daily_approval(
                mock_db_session, "ts-404", TimesheetApproval(approval_status="APPROVED"), manager_caller
            )

    @pytest.mark.asyncio
    async def test_approval_updates_and_notifies(self, mock_db_session, store, employees, manager_caller, mock_email_service):
        from app.schemas.timesheet import TimesheetApproval
        from app.services.timesheets import daily_service

        store.get_daily_timesheet.return_value = _timesheet()

        with patch(f"{MODULE}.get_email_service", return_value=mock_email_service):
            await daily_service.update_daily_approval(
                mock_db_session, "ts-1", TimesheetApproval(approval_status="REJECTED", comment="Missing tasks"), manager_caller
            )

        store.update_daily_approval.assert_awaited_once_with(mock_db_session, "ts-1", "REJECTED", "mgr-1", "Missing tasks")
        to, subject, html = mock_email_service.send_email.await_args.args
        assert to == "emp-1@vodichron.com"
        assert "Missing tasks" in html

    @pytest.mark.asyncio
    async def test_bulk_approval_sends_one_summary_per_employee(
        self, mock_db_session, store, employees, manager_caller, mock_email_service
    ):
        from app.schemas.timesheet import BulkTimesheetApproval
        from app.services.timesheets import daily_service

        timesheets = {"ts-1": _timesheet("ts-1"), "ts-2": _timesheet("ts-2"), "ts-3": _timesheet("ts-3", "emp-2")}
        store.get_daily_timesheets.return_value = list(timesheets.values())

        with patch(f"{MODULE}.get_email_service", return_value=mock_email_service):
            result = await daily_service.bulk_approve_daily_timesheets(
                mock_db_session,
                BulkTimesheetApproval(timesheet_ids=list(timesheets), approval_status="APPROVED"),
                manager_caller,
            )

        assert result == {"success": True, "approved_count": 3}
        assert store.update_daily_approval.await_count == 3
        recipients = [call.args[0] for call in mock_email_service.send_email.await_args_list]
        assert sorted(recipients) == ["emp-1@vodichron.com", "emp-2@vodichron.com"]


    @pytest.mark.asyncio
    async def test_bulk_rejection_sends_one_summary(
        self, mock_db_session, store, employees, manager_caller, mock_email_service
    ):
        from app.schemas.timesheet import BulkTimesheetApproval
        from app.services.timesheets import daily_service

        store.get_daily_timesheets.return_value = [_timesheet("ts-1"), _timesheet("ts-2"), _timesheet("ts-3")]

        with patch(f"{MODULE}.get_email_service", return_value=mock_email_service):
            result = await daily_service.bulk_approve_daily_timesheets(
                mock_db_session,
                BulkTimesheetApproval(
                    timesheet_ids=["ts-1", "ts-2", "ts-3"], approval_status="REJECTED", comment="Add task briefs"
                ),
                manager_caller,
            )

        assert result["approved_count"] == 3
        assert mock_email_service.send_email.await_count == 1
        to, subject, html = mock_email_service.send_email.await_args.args
        assert to == "emp-1@vodichron.com"
        assert subject.startswith("3 Timesheets Rejected")
        assert "Add task briefs" in html

    @pytest.mark.asyncio
    async def test_bulk_with_unknown_id_updates_nothing(
        self, mock_db_session, store, employees, manager_caller, mock_email_service
    ):
        from app.schemas.timesheet import BulkTimesheetApproval
        from app.services.timesheets import daily_service

        store.get_daily_timesheets.return_value = [_timesheet("ts-1")]

        with patch(f"{MODULE}.get_email_service", return_value=mock_email_service):
            with pytest.raises(BadRequestError) as exc:
                await daily_service.bulk_approve_daily_timesheets(
                    mock_db_session,
                    BulkTimesheetApproval(timesheet_ids=["ts-1", "ts-2"], approval_status="APPROVED"),
                    manager_caller,
                )

        assert "ts-2" in exc.value.message
        store.update_daily_approval.assert_not_awaited()
        mock_email_service.send_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bulk_count_reflects_rows_written(
        self, mock_db_session, store, employees, manager_caller, mock_email_service
    ):
        from app.schemas.timesheet import BulkTimesheetApproval
        from app.services.timesheets import daily_service

        store.get_daily_timesheets.return_value = [_timesheet("ts-1"), _timesheet("ts-2")]
        store.update_daily_approval.side_effect = [1, 0]

        with patch(f"{MODULE}.get_email_service", return_value=mock_email_service):
            result = await daily_service.bulk_approve_daily_timesheets(
                mock_db_session,
                BulkTimesheetApproval(timesheet_ids=["ts-1", "ts-2", "ts-1"], approval_status="APPROVED"),
                manager_caller,
            )

        assert result == {"success": True, "approved_count": 1}
        store.get_daily_timesheets.assert_awaited_once_with(mock_db_session, ["ts-1", "ts-2"])


def _update_payload(total_hours: float = 6.5):
    from app.schemas.timesheet import DailyTimesheetUpdate

    return DailyTimesheetUpdate(
        task_details=[{"task": "Review leave policy", "task_hours": "06:30", "task_status": "In Progress"}],
        total_hours=total_hours,
    )


class TestUpdateDailyTimesheet:

    @pytest.fixture
    def todays_timesheet(self, store):
        timesheet = _timesheet()
        timesheet.timesheet_date = date.today()
        store.get_daily_timesheet.return_value = timesheet
        return timesheet

    @pytest.mark.asyncio
    async def test_owner_edits_same_day(self, mock_db_session, store, todays_timesheet, employee_caller):
        from app.services.timesheets import daily_service

        result = await daily_service.update_daily_timesheet(mock_db_session, "ts-1", _update_payload(), employee_caller)

        assert result == {"success": True}
        timesheet_id, values = store.update_daily_timesheet.await_args.args[1:]
        assert timesheet_id == "ts-1"
        assert values["total_hours"] == 6.5
        assert values["task_details"][0]["task"] == "Review leave policy"
        assert values["updated_by"] == "emp-1"

    @pytest.mark.asyncio
    async def test_rejected_entry_can_be_edited(self, mock_db_session, store, todays_timesheet, employee_caller):
        from app.services.timesheets import daily_service

        todays_timesheet.approval_status = "REJECTED"

        await daily_service.update_daily_timesheet(mock_db_session, "ts-1", _update_payload(), employee_caller)

        store.update_daily_timesheet.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_timesheet(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        with pytest.raises(NotFoundError):
            await daily_service.update_daily_timesheet(mock_db_session, "ts-404", _update_payload(), employee_caller)

    @pytest.mark.asyncio
    async def test_other_employee_is_forbidden(self, mock_db_session, store, todays_timesheet, caller_factory):
        from app.services.timesheets import daily_service

        with pytest.raises(ForbiddenError):
            await daily_service.update_daily_timesheet(
                mock_db_session, "ts-1", _update_payload(), caller_factory("manager", "mgr-1")
            )

        store.update_daily_timesheet.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_previous_day_is_locked_for_employee(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        store.get_daily_timesheet.return_value = _timesheet()

        with pytest.raises(BadRequestError) as exc:
            await daily_service.update_daily_timesheet(mock_db_session, "ts-1", _update_payload(), employee_caller)

        assert "same day" in exc.value.message

    @pytest.mark.asyncio
    async def test_admin_edits_previous_day(self, mock_db_session, store, hr_caller):
        from app.services.timesheets import daily_service

        store.get_daily_timesheet.return_value = _timesheet()

        await daily_service.update_daily_timesheet(mock_db_session, "ts-1", _update_payload(), hr_caller)

        store.update_daily_timesheet.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_approved_entry_cannot_be_edited(self, mock_db_session, store, todays_timesheet, hr_caller):
        from app.services.timesheets import daily_service

        todays_timesheet.approval_status = "APPROVED"

        with pytest.raises(BadRequestError) as exc:
            await daily_service.update_daily_timesheet(mock_db_session, "ts-1", _update_payload(), hr_caller)

        assert exc.value.message == "Cannot update an approved timesheet."

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db_session, store, todays_timesheet, employee_caller):
        from app.services.timesheets import daily_service

        store.update_daily_timesheet.side_effect = OperationalError("UPDATE", {}, Exception("down"))

        with pytest.raises(InternalServerError):
            await daily_service.update_daily_timesheet(mock_db_session, "ts-1", _update_payload(), employee_caller)

        mock_db_session.rollback.assert_awaited_once()

    def test_hours_capped_per_day(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            _update_payload(total_hours=24.5)


class TestListingAndTaskIds:

    @pytest.mark.asyncio
    async def test_other_employee_outside_scope_is_forbidden(self, mock_db_session, store, manager_caller, page_params):
        from app.services.timesheets import daily_service

        with patch(f"{MODULE}.reportee_ids", AsyncMock(return_value=["emp-1"])):
            with pytest.raises(ForbiddenError):
                await daily_service.list_daily_timesheets(mock_db_session, manager_caller, page_params, employee_id="emp-9")

    @pytest.mark.asyncio
    async def test_own_listing_scopes_to_caller(self, mock_db_session, store, employee_caller, page_params):
        from app.services.timesheets import daily_service

        page = await daily_service.list_daily_timesheets(mock_db_session, employee_caller, page_params)

        assert page.total == 0
        assert store.list_daily_timesheets.await_args.args[1] == ["emp-1"]

    @pytest.mark.asyncio
    async def test_next_task_id(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        result = await daily_service.get_next_task_id(mock_db_session, "emp-1", employee_caller)

        assert result.task_id == "TASK005"
        assert result.task_number == 5
        assert result.current_task_count == 4

    @pytest.mark.asyncio
    async def test_next_task_id_for_other_employee_is_forbidden(self, mock_db_session, store, employee_caller):
        from app.services.timesheets import daily_service

        with pytest.raises(ForbiddenError):
            await daily_service.get_next_task_id(mock_db_session, "emp-2", employee_caller)

    @pytest.mark.asyncio
    async def test_reportee_listing_excludes_caller_in_query(self, mock_db_session, store, hr_caller, page_params):
        """Own rows are filtered by the query so paging and totals stay consistent."""
        from app.services.timesheets import daily_service

        row = SimpleNamespace(
            uuid="ts-7",
            employee_id="emp-7",
            request_number=654321,
            timesheet_date=date(2025, 3, 4),
            task_details=[],
            total_hours=7.0,
            task_id="TASK001",
            approval_status="REQUESTED",
            approver_id=None,
            approval_date=None,
            approver_comments=None,
        )
        store.list_daily_timesheets.return_value = ([(row, "Employee emp-7")], 21)

        with patch(f"{MODULE}.reportee_ids", AsyncMock(return_value=None)):
            page = await daily_service.list_reportee_daily_timesheets(mock_db_session, hr_caller, page_params, "REQUESTED")

        args, kwargs = store.list_daily_timesheets.await_args
        assert args[1:] == (None, 0, 20, "REQUESTED")
        assert kwargs == {"exclude_employee_id": hr_caller.uuid}
        assert page.total == 21
        assert [item.employee_name for item in page.items] == ["Employee emp-7"]

    @pytest.mark.asyncio
    async def test_reportee_listing_forbidden_for_employee(self, mock_db_session, store, employee_caller, page_params):
        from app.services.timesheets import daily_service

        with pytest.raises(ForbiddenError):
            await daily_service.list_reportee_daily_timesheets(mock_db_session, employee_caller, page_params)
