# Customer Services Package
# Customers, projects and resource allocation

from app.services.customers import customer_service, project_service

__all__ = [
    "customer_service",
    "project_service",
]
