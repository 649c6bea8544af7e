"""Initial HRMS schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column('created_by', sa.String(50), nullable=True),
        sa.Column('updated_by', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    ]


def upgrade() -> None:
    # Employees
    op.create_table(
        'employees',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('gender', sa.String(10), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('contact_number', sa.String(15), nullable=False),
        sa.Column('personal_email', sa.String(200), nullable=True),
        sa.Column('blood_group', sa.String(10), nullable=True),
        sa.Column('marital_status', sa.String(20), nullable=True),
        sa.Column('permanent_address', sa.String(255), nullable=True),
        sa.Column('temporary_address', sa.String(255), nullable=True),
        sa.Column('employee_code', sa.String(15), nullable=True),
        sa.Column('official_email', sa.String(200), nullable=True),
        sa.Column('skills', sa.Text(), nullable=True),
        sa.Column('date_of_joining', sa.Date(), nullable=True),
        sa.Column('reporting_manager_id', sa.String(50), nullable=True),
        sa.Column('reporting_director_id', sa.String(50), nullable=True),
        sa.Column('designation', sa.String(50), nullable=True),
        sa.Column('department', sa.String(50), nullable=True),
        sa.Column('pan_card_number', sa.String(500), nullable=True),
        sa.Column('bank_account_number', sa.String(500), nullable=True),
        sa.Column('aadhaar_card_number', sa.String(500), nullable=True),
        sa.Column('pf_account_number', sa.String(500), nullable=True),
        sa.Column('ifsc_code', sa.String(20), nullable=True),
        sa.Column('highest_qualification', sa.String(200), nullable=True),
        sa.Column('total_work_experience', sa.String(100), nullable=True),
        sa.Column('linkedin', sa.String(255), nullable=True),
        sa.Column('employment_status', sa.String(10), nullable=False, server_default='ACTIVE'),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['reporting_manager_id'], ['employees.uuid'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['reporting_director_id'], ['employees.uuid'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('personal_email'),
        sa.UniqueConstraint('official_email'),
        sa.UniqueConstraint('employee_code'),
    )
    op.create_index('idx_employees_reporting_manager', 'employees', ['reporting_manager_id'])
    op.create_index('idx_employees_reporting_director', 'employees', ['reporting_director_id'])
    op.create_index('idx_employees_status', 'employees', ['employment_status'])

    op.create_table(
        'employee_online_status',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('online_status', sa.String(10), nullable=False, server_default='OFFLINE'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('employee_id'),
    )

    op.create_table(
        'employee_application_activities',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('activity_name', sa.String(50), nullable=False),
        sa.Column('value', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index(op.f('ix_employee_application_activities_employee_id'), 'employee_application_activities', ['employee_id'])
    op.create_index(op.f('ix_employee_application_activities_activity_name'), 'employee_application_activities', ['activity_name'])

    # Authentication
    op.create_table(
        'application_users',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='employee'),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('password_update_timestamp', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(10), nullable=False, server_default='ACTIVE'),
        sa.Column('is_system_generated', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('employee_id'),
    )
    op.create_index('idx_application_users_role', 'application_users', ['role'])
    op.create_index('idx_application_users_status', 'application_users', ['status'])

    op.create_table(
        'customers',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('primary_contact', sa.String(15), nullable=False),
        sa.Column('secondary_contact', sa.String(15), nullable=True),
        sa.Column('email', sa.String(200), nullable=False),
        sa.Column('country', sa.String(200), nullable=False),
        sa.Column('timezone', sa.String(200), nullable=False),
        sa.Column('status', sa.String(10), nullable=False, server_default='ACTIVE'),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('idx_customers_name', 'customers', ['name'])
    op.create_index('idx_customers_status', 'customers', ['status'])

    op.create_table(
        'customer_app_access',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('customer_id', sa.String(50), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('password_update_timestamp', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(10), nullable=False, server_default='ACTIVE'),
        sa.Column('is_system_generated', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('customer_id'),
    )

    op.create_table(
        'sessions',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('subject_id', sa.String(50), nullable=False),
        sa.Column('subject_type', sa.String(10), nullable=False),
        sa.Column('token_hash', sa.String(128), nullable=False),
        sa.Column('user_agent', sa.String(255), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('token_hash'),
    )
    op.create_index('idx_sessions_subject', 'sessions', ['subject_id'])
    op.create_index('idx_sessions_expires', 'sessions', ['expires_at'])

    op.create_table(
        'user_password_reset_request',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('email', sa.String(200), nullable=False),
        sa.Column('token', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index(op.f('ix_user_password_reset_request_email'), 'user_password_reset_request', ['email'])
    op.create_index(op.f('ix_user_password_reset_request_token'), 'user_password_reset_request', ['token'])

    # Timesheets
    op.create_table(
        'employee_timesheets',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('request_number', sa.Integer(), nullable=False),
        sa.Column('timesheet_date', sa.Date(), nullable=False),
        sa.Column('task_details', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('total_hours', sa.Numeric(4, 2), nullable=False),
        sa.Column('task_id', sa.String(20), nullable=True),
        sa.Column('approval_status', sa.String(10), nullable=False, server_default='REQUESTED'),
        sa.Column('approver_id', sa.String(50), nullable=True),
        sa.Column('approval_date', sa.Date(), nullable=True),
        sa.Column('approver_comments', sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index('uq_timesheets_employee_date', 'employee_timesheets', ['employee_id', 'timesheet_date'], unique=True)
    op.create_index('idx_timesheets_status', 'employee_timesheets', ['approval_status'])
    op.create_index('idx_timesheets_date', 'employee_timesheets', ['timesheet_date'])

    op.create_table(
        'employee_weekly_timesheets',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('request_number', sa.Integer(), nullable=False),
        sa.Column('week_start_date', sa.Date(), nullable=False),
        sa.Column('week_end_date', sa.Date(), nullable=False),
        sa.Column('task_details', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('total_hours', sa.Numeric(5, 2), nullable=False),
        sa.Column('task_id', sa.String(20), nullable=True),
        sa.Column('approval_status', sa.String(10), nullable=False, server_default='REQUESTED'),
        sa.Column('approver_id', sa.String(50), nullable=True),
        sa.Column('approver_role', sa.String(50), nullable=True),
        sa.Column('approval_date', sa.Date(), nullable=True),
        sa.Column('approver_comments', sa.Text(), nullable=True),
        sa.Column('time_sheet_status', sa.String(10), nullable=False, server_default='SAVED'),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index('uq_weekly_timesheets_employee_week', 'employee_weekly_timesheets', ['employee_id', 'week_start_date'], unique=True)
    op.create_index('idx_weekly_timesheets_status', 'employee_weekly_timesheets', ['time_sheet_status'])

    # Leaves
    op.create_table(
        'employee_leaves',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('request_number', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('leave_type', sa.String(50), nullable=False),
        sa.Column('reason', sa.String(100), nullable=True),
        sa.Column('leave_start_date', sa.Date(), nullable=False),
        sa.Column('leave_end_date', sa.Date(), nullable=False),
        sa.Column('leave_days', sa.Numeric(4, 2), nullable=False),
        sa.Column('is_half_day', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('requested_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('leave_approvers', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('leave_approval_status', sa.String(10), nullable=False, server_default='REQUESTED'),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index(op.f('ix_employee_leaves_request_number'), 'employee_leaves', ['request_number'])
    op.create_index(op.f('ix_employee_leaves_employee_id'), 'employee_leaves', ['employee_id'])
    op.create_index(op.f('ix_employee_leaves_leave_approval_status'), 'employee_leaves', ['leave_approval_status'])
    op.create_index('idx_leaves_dates', 'employee_leaves', ['leave_start_date', 'leave_end_date'])

    op.create_table(
        'employee_leave_allocation',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('year', sa.String(4), nullable=False),
        sa.Column('leave_type', sa.String(50), nullable=False),
        sa.Column('leaves_applied', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('leaves_allocated', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('leaves_carry_forwarded', sa.Numeric(5, 2), nullable=False, server_default='0'),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index(op.f('ix_employee_leave_allocation_employee_id'), 'employee_leave_allocation', ['employee_id'])
    op.create_index(op.f('ix_employee_leave_allocation_year'), 'employee_leave_allocation', ['year'])
    op.create_index('uq_leave_allocation_employee_year_type', 'employee_leave_allocation', ['employee_id', 'year', 'leave_type'], unique=True)

    # Projects and allocations
    op.create_table(
        'projects',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('domain', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='INITIATED'),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index(op.f('ix_projects_name'), 'projects', ['name'])
    op.create_index(op.f('ix_projects_status'), 'projects', ['status'])

    op.create_table(
        'project_resource_allocation',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('allocation_code', sa.String(10), nullable=False),
        sa.Column('project_id', sa.String(50), nullable=False),
        sa.Column('customer_id', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('role', sa.String(255), nullable=False),
        sa.Column('customer_approver', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('status', sa.String(10), nullable=False, server_default='ACTIVE'),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.uuid'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.uuid'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index(op.f('ix_project_resource_allocation_project_id'), 'project_resource_allocation', ['project_id'])
    op.create_index(op.f('ix_project_resource_allocation_customer_id'), 'project_resource_allocation', ['customer_id'])
    op.create_index(op.f('ix_project_resource_allocation_employee_id'), 'project_resource_allocation', ['employee_id'])
    op.create_index('uq_resource_allocation', 'project_resource_allocation', ['project_id', 'customer_id', 'employee_id'], unique=True)
    op.create_index('idx_resource_allocation_status', 'project_resource_allocation', ['status'])

    # Documents
    op.create_table(
        'employee_docs',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('document_type', sa.String(50), nullable=False),
        sa.Column('file_name', sa.String(100), nullable=False),
        sa.Column('original_file_name', sa.String(255), nullable=True),
        sa.Column('hr_approval_status', sa.String(10), nullable=False, server_default='REQUESTED'),
        sa.Column('hr_approver_id', sa.String(50), nullable=True),
        sa.Column('hr_approval_date', sa.Date(), nullable=True),
        sa.Column('hr_approver_comments', sa.Text(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.uuid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index(op.f('ix_employee_docs_employee_id'), 'employee_docs', ['employee_id'])
    op.create_index(op.f('ix_employee_docs_document_type'), 'employee_docs', ['document_type'])
    op.create_index(op.f('ix_employee_docs_hr_approval_status'), 'employee_docs', ['hr_approval_status'])

    # Master data
    op.create_table(
        'application_master_data',
        sa.Column('uuid', sa.String(50), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('value', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('name'),
    )


def downgrade() -> None:
    op.drop_table('application_master_data')
    op.drop_table('employee_docs')
    op.drop_table('project_resource_allocation')
    op.drop_table('projects')
    op.drop_table('employee_leave_allocation')
    op.drop_table('employee_leaves')
    op.drop_table('employee_weekly_timesheets')
    op.drop_table('employee_timesheets')
    op.drop_table('user_password_reset_request')
    op.drop_table('sessions')
    op.drop_table('customer_app_access')
    op.drop_table('customers')
    op.drop_table('application_users')
    op.drop_table('employee_application_activities')
    op.drop_table('employee_online_status')
    op.drop_table('employees')
