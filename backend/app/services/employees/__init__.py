# Employee Services Package
# Employee records, application users and employee documents

from app.services.employees import document_service, employee_service, user_service

__all__ = [
    "document_service",
    "employee_service",
    "user_service",
]
