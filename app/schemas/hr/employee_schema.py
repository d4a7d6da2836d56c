from pydantic import BaseModel, ConfigDict, EmailStr, Field, validator
from typing import Optional
from datetime import datetime


class EmployeeBase(BaseModel):
    name: str = Field(..., max_length=100)
    job_role: str = Field(..., max_length=100)
    department: str = Field(..., max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None

    model_config = ConfigDict(from_attributes=True)


class EmployeeCreate(EmployeeBase):
    # Generated as EMP<yymm><seq> when omitted
    employee_id: Optional[str] = Field(None, min_length=1, max_length=50)

    @validator('name')
    def validate_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Name must be at least 2 characters')
        return v.strip()

    @validator('job_role', 'department')
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()

    @validator('employee_id')
    def validate_employee_id(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError('employee_id cannot be blank')
        return v.strip().upper()


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    job_role: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None

    @validator('name')
    def validate_name(cls, v):
        if v is None or len(v.strip()) < 2:
            raise ValueError('Name must be at least 2 characters')
        return v.strip()

    @validator('job_role', 'department')
    def validate_required_text(cls, v):
        if v is None or not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()


class EmployeeResponse(BaseModel):
    id: int
    employee_id: str
    name: str
    job_role: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
