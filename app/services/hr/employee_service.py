import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError as DBIntegrityError, SQLAlchemyError

from app.core.exceptions import ConflictError, NotFoundError, VaultError
from app.db.base import utc_now
from app.models.hr.employee import Employee
from app.schemas.hr.employee_schema import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


class EmployeeService:
    """Employee directory: the people fingerprint templates are enrolled for"""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ---------- Helpers ----------
    async def _generate_employee_id(self) -> str:
        prefix = "EMP"
        timestamp = utc_now().strftime("%y%m")
        result = await self.session.execute(
            select(func.count()).select_from(Employee).where(
                Employee.employee_id.like(f"{prefix}{timestamp}%")
            )
        )
        count = int(result.scalar() or 0)
        return f"{prefix}{timestamp}{count + 1:04d}"

    # ---------- Create / Update / Delete ----------
    async def create_employee(self, data: EmployeeCreate, actor_id: str) -> Employee:
        try:
            employee_id = data.employee_id or await self._generate_employee_id()
            if await self.find_by_employee_code(employee_id) is not None:
                raise ConflictError(f"Employee with ID {employee_id} already exists")

            employee = Employee(
                employee_id=employee_id,
                created_by=actor_id,
                **data.dict(exclude={"employee_id"})
            )

            self.session.add(employee)
            await self.session.commit()
            await self.session.refresh(employee)

            logger.info(f"Employee created: {employee.employee_id} - {employee.name} by {actor_id}")
            return employee

        except VaultError:
            raise
        except DBIntegrityError:
            await self.session.rollback()
            raise ConflictError(f"Employee with ID {employee_id} already exists")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating employee: {e}")
            raise VaultError("Error creating employee")

    async def update_employee(self, employee_ref: int, data: EmployeeUpdate, actor_id: str) -> Employee:
        employee = await self.get_employee(employee_ref)
        try:
            for field, value in data.dict(exclude_unset=True).items():
                setattr(employee, field, value)

            await self.session.commit()
            await self.session.refresh(employee)

            logger.info(f"Employee updated: {employee.employee_id} by {actor_id}")
            return employee

        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating employee {employee_ref}: {e}")
            raise VaultError("Error updating employee")

    async def delete_employee(self, employee_ref: int, actor_id: str) -> bool:
        """Soft delete: the row stays so enrolled templates keep their owner"""
        employee = await self.get_employee(employee_ref)
        try:
            employee.is_active = False
            await self.session.commit()
            logger.info(f"Employee deleted: {employee.employee_id} by {actor_id}")
            return True

        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error deleting employee {employee_ref}: {e}")
            raise VaultError("Error deleting employee")

    # ---------- Getters ----------
    async def get_employee(self, employee_ref: int) -> Employee:
        result = await self.session.execute(
            select(Employee).where(
                Employee.id == employee_ref,
                Employee.is_active == True
            )
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundError("Employee not found")
        return employee

    async def find_by_employee_code(self, employee_code: str) -> Optional[Employee]:
        result = await self.session.execute(
            select(Employee).where(Employee.employee_id == employee_code)
        )
        return result.scalar_one_or_none()

    async def get_by_employee_code(self, employee_code: str, active_only: bool = False) -> Employee:
        employee = await self.find_by_employee_code(employee_code)
        if employee is None or (active_only and not employee.is_active):
            raise NotFoundError(f"Employee {employee_code} not found")
        return employee

    # ---------- Listing ----------
    async def get_employees(
        self,
        page_index: int = 1,
        page_size: int = 50,
        department: Optional[str] = None,
        is_active: Optional[bool] = True,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get paginated list of employees with filtering"""
        conditions = []

        if is_active is not None:
            conditions.append(Employee.is_active == is_active)
        if department:
            conditions.append(Employee.department == department)
        if search:
            like = f"%{search}%"
            conditions.append(
                or_(
                    Employee.name.ilike(like),
                    Employee.employee_id.ilike(like),
                    Employee.job_role.ilike(like),
                )
            )

        total_count = await self.session.scalar(
            select(func.count(Employee.id)).where(*conditions)
        )

        skip = (page_index - 1) * page_size
        employees = await self.session.scalars(
            select(Employee)
            .where(*conditions)
            .order_by(Employee.created_at.desc(), Employee.id.desc())
            .offset(skip)
            .limit(page_size)
        )

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": employees.all()
        }

    async def get_employees_with_inline_templates(self) -> List[Employee]:
        result = await self.session.execute(
            select(Employee)
            .where(
                Employee.fingerprint_template.is_not(None),
                Employee.is_active == True
            )
            .order_by(Employee.id)
        )
        return list(result.scalars().all())
