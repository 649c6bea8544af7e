# Import all the models, so that Base has them before being
# imported by Alembic
from app.db.base_class import Base  # noqa

from app.models.employee import Employee, EmployeeOnlineStatus, EmployeeActivity  # noqa
from app.models.user import ApplicationUser  # noqa
from app.models.customer import Customer, CustomerAppAccess  # noqa
from app.models.session import Session  # noqa
from app.models.password_reset import PasswordResetRequest  # noqa
from app.models.timesheet import EmployeeTimesheet, EmployeeWeeklyTimesheet  # noqa
from app.models.leave import EmployeeLeave, EmployeeLeaveAllocation  # noqa
from app.models.project import Project, ProjectResourceAllocation  # noqa
from app.models.document import EmployeeDocument  # noqa
from app.models.master_data import ApplicationMasterData  # noqa
