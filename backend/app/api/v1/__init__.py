from fastapi import APIRouter

from app.api.v1 import (
    auth,
    customers,
    documents,
    employees,
    leaves,
    master_data,
    projects,
    timesheets,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
api_router.include_router(timesheets.router, prefix="/timesheets", tags=["timesheets"])
api_router.include_router(master_data.router, prefix="/master-data", tags=["master-data"])
