import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import CurrentUser, get_employee_service, require_admin
from app.services.hr.employee_service import EmployeeService
from app.schemas.common.pagination import PaginatedResponse
from app.schemas.hr.employee_schema import EmployeeCreate, EmployeeUpdate, EmployeeResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_data: EmployeeCreate,
    service: EmployeeService = Depends(get_employee_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Create a new employee"""
    return await service.create_employee(employee_data, current_user.username)


@router.get("/", response_model=PaginatedResponse[EmployeeResponse])
async def get_employees(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    department: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(True),
    search: Optional[str] = Query(None),
    service: EmployeeService = Depends(get_employee_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Get all employees with filtering and pagination"""
    return await service.get_employees(
        page_index=page_index,
        page_size=page_size,
        department=department,
        is_active=is_active,
        search=search
    )


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    service: EmployeeService = Depends(get_employee_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Get employee by ID"""
    return await service.get_employee(employee_id)


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    employee_data: EmployeeUpdate,
    service: EmployeeService = Depends(get_employee_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Update employee details"""
    return await service.update_employee(employee_id, employee_data, current_user.username)


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: int,
    service: EmployeeService = Depends(get_employee_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Soft delete an employee; enrolled templates are left untouched"""
    await service.delete_employee(employee_id, current_user.username)
    return {"message": "Employee deleted successfully", "success": True}
