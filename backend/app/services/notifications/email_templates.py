"""
HTML email templates. Each builder returns (subject, html).
"""

from html import escape
from typing import Iterable, Optional, Tuple

APP_NAME = "Vodichron HRMS"

_GREEN = "#10b981"
_RED = "#ef4444"
_BLUE = "#3b82f6"
_ORANGE = "#f97316"


def _layout(title: str, accent: str, greeting: str, intro: str, details: Iterable[Tuple[str, object]],
            action_label: Optional[str] = None, action_link: Optional[str] = None) -> str:
    rows = "".join(
        f'<tr><td style="color:#6b7280;font-size:14px;font-weight:600;width:45%;">{escape(str(label))}:</td>'
        f'<td style="color:#1f2937;font-size:14px;">{escape(str(value)) if value not in (None, "") else "-"}</td></tr>'
        for label, value in details
    )
    button = ""
    if action_label and action_link:
        button = (
            f'<p style="text-align:center;margin:32px 0 0 0;"><a href="{escape(action_link, quote=True)}" '
            f'style="background:{accent};color:#ffffff;padding:12px 28px;border-radius:8px;'
            f'text-decoration:none;font-weight:600;">{escape(action_label)}</a></p>'
        )
    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>{escape(title)}</title></head>
<body style="margin:0;padding:0;font-family:-apple-system,'Segoe UI',Roboto,sans-serif;background-color:#FFF6F1;">
  <table width="100%" cellpadding="0" cellspacing="0" style="padding:40px 0;">
    <tr><td align="center">
      <table width="600" cellpadding="0" cellspacing="0" style="background:#ffffff;border-radius:12px;overflow:hidden;">
        <tr><td style="background:{accent};padding:30px;text-align:center;">
          <h1 style="color:#ffffff;margin:0;font-size:24px;">{escape(title)}</h1>
        </td></tr>
        <tr><td style="padding:40px 30px;">
          <h2 style="color:#1f2937;font-size:20px;margin:0 0 16px 0;">{escape(greeting)}</h2>
          <p style="color:#4b5563;font-size:16px;line-height:1.6;margin:0 0 24px 0;">{escape(intro)}</p>
          <table width="100%" cellpadding="8" cellspacing="0" style="border:2px solid {accent};border-radius:12px;">{rows}</table>
          {button}
        </td></tr>
        <tr><td style="background:#f9fafb;padding:20px;text-align:center;color:#9ca3af;font-size:12px;">
          This is an automated message from {APP_NAME}. Please do not reply.
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""


def reset_password_email(name: str, reset_link: str, expires_minutes: int) -> Tuple[str, str]:
    subject = f"Reset your password - {APP_NAME}"
    html = _layout(
        "Password Reset Request", _BLUE, f"Hello {name},",
        "We received a request to reset your password. Use the button below to choose a new one. "
        "If you did not request this, you can safely ignore this email.",
        [("Link valid for", f"{expires_minutes} minutes")],
        "Reset Password", reset_link,
    )
    return subject, html


def welcome_email(name: str, email: str, temporary_password: str, app_link: str) -> Tuple[str, str]:
    subject = f"Welcome to {APP_NAME}"
    html = _layout(
        "Welcome aboard", _BLUE, f"Hello {name},",
        "Your account has been created. Please sign in and change your password.",
        [("Login email", email), ("Temporary password", temporary_password)],
        "Sign in", app_link,
    )
    return subject, html


def timesheet_submitted_manager_email(manager_name: str, employee_name: str, request_number: object,
                                      week_start: str, week_end: str, total_hours: object,
                                      app_link: str) -> Tuple[str, str]:
    subject = f"Timesheet Submitted #{request_number} by {employee_name} - {APP_NAME}"
    html = _layout(
        "Timesheet Awaiting Approval", _ORANGE, f"Hello {manager_name},",
        f"{employee_name} has submitted a timesheet for your review.",
        [("Request Number", f"#{request_number}"), ("Week", f"{week_start} to {week_end}"),
         ("Total Hours", total_hours)],
        "Review Timesheet", app_link,
    )
    return subject, html


def timesheet_submitted_employee_email(employee_name: str, request_number: object, week_start: str,
                                       week_end: str, total_hours: object, app_link: str) -> Tuple[str, str]:
    subject = f"Timesheet Submitted #{request_number} - {APP_NAME}"
    html = _layout(
        "Timesheet Submitted", _BLUE, f"Hello {employee_name},",
        "Your timesheet has been submitted and sent to your manager for approval.",
        [("Request Number", f"#{request_number}"), ("Week", f"{week_start} to {week_end}"),
         ("Total Hours", total_hours)],
        "View Timesheet", app_link,
    )
    return subject, html


def timesheet_approved_email(employee_name: str, request_number: object, period: str, total_hours: object,
                             approver_name: str, comments: Optional[str], app_link: str) -> Tuple[str, str]:
    subject = f"Timesheet Approved #{request_number} - {APP_NAME}"
    html = _layout(
        "Timesheet Approved", _GREEN, f"Hello {employee_name}!",
        "Your timesheet request has been approved.",
        [("Request Number", f"#{request_number}"), ("Period", period), ("Total Hours", total_hours),
         ("Approved By", approver_name), ("Comments", comments)],
        "View Timesheet", app_link,
    )
    return subject, html


def timesheet_rejected_email(employee_name: str, request_number: object, period: str, total_hours: object,
                             approver_name: str, comments: Optional[str], app_link: str) -> Tuple[str, str]:
    subject = f"Timesheet Rejected #{request_number} - {APP_NAME}"
    html = _layout(
        "Timesheet Rejected", _RED, f"Hello {employee_name},",
        "Your timesheet request has been rejected. Please review the comments and resubmit.",
        [("Request Number", f"#{request_number}"), ("Period", period), ("Total Hours", total_hours),
         ("Rejected By", approver_name), ("Comments", comments)],
        "Update Timesheet", app_link,
    )
    return subject, html


def timesheets_bulk_approved_email(employee_name: str, count: int, approval_date: str, approver_name: str,
                                   dates: Iterable[str], app_link: str) -> Tuple[str, str]:
    subject = f"{count} Timesheets Approved - {approval_date} - {APP_NAME}"
    html = _layout(
        "Timesheets Approved", _GREEN, f"Hello {employee_name}!",
        f"{count} of your timesheets have been approved.",
        [("Approved By", approver_name), ("Approval Date", approval_date), ("Dates", ", ".join(dates))],
        "View Timesheets", app_link,
    )
    return subject, html


def timesheets_bulk_rejected_email(employee_name: str, count: int, rejection_date: str, approver_name: str,
                                   dates: Iterable[str], comments: Optional[str], app_link: str) -> Tuple[str, str]:
    subject = f"{count} Timesheets Rejected - {rejection_date} - {APP_NAME}"
    html = _layout(
        "Timesheets Rejected", _RED, f"Hello {employee_name},",
        f"{count} of your timesheets have been rejected. Please review the comments and resubmit.",
        [("Rejected By", approver_name), ("Rejection Date", rejection_date), ("Dates", ", ".join(dates)),
         ("Comments", comments)],
        "Update Timesheets", app_link,
    )
    return subject, html


def leave_submitted_approver_email(approver_name: str, employee_name: str, request_number: object,
                                   leave_type: str, start: str, end: str, days: object,
                                   reason: Optional[str], app_link: str) -> Tuple[str, str]:
    subject = f"Leave Request #{request_number} from {employee_name} - {APP_NAME}"
    html = _layout(
        "Leave Request Awaiting Approval", _ORANGE, f"Hello {approver_name},",
        f"{employee_name} has applied for leave and you are listed as an approver.",
        [("Request Number", f"#{request_number}"), ("Leave Type", leave_type), ("From", start), ("To", end),
         ("Days", days), ("Reason", reason)],
        "Review Leave", app_link,
    )
    return subject, html


def leave_submitted_employee_email(employee_name: str, request_number: object, leave_type: str, start: str,
                                   end: str, days: object, app_link: str) -> Tuple[str, str]:
    subject = f"Leave Request #{request_number} Submitted - {APP_NAME}"
    html = _layout(
        "Leave Request Submitted", _BLUE, f"Hello {employee_name},",
        "Your leave request has been submitted to your approvers.",
        [("Request Number", f"#{request_number}"), ("Leave Type", leave_type), ("From", start), ("To", end),
         ("Days", days)],
        "View Leaves", app_link,
    )
    return subject, html


def leave_decision_email(employee_name: str, approved: bool, request_number: object, leave_type: str,
                         start: str, end: str, days: object, approver_name: str,
                         comments: Optional[str], app_link: str) -> Tuple[str, str]:
    status = "Approved" if approved else "Rejected"
    subject = f"Leave {status} #{request_number} - {APP_NAME}"
    html = _layout(
        f"Leave {status}", _GREEN if approved else _RED, f"Hello {employee_name},",
        f"Your leave request has been {status.lower()}.",
        [("Request Number", f"#{request_number}"), ("Leave Type", leave_type), ("From", start), ("To", end),
         ("Days", days), (f"{status} By", approver_name), ("Comments", comments)],
        "View Leaves", app_link,
    )
    return subject, html
