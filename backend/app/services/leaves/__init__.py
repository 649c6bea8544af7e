# Leave services
from app.services.leaves import leave_calculation, leave_service

__all__ = ["leave_calculation", "leave_service"]
