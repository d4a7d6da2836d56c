# app/schemas/biometric/fingerprint_schema.py
from pydantic import BaseModel, validator, Field
from typing import Optional, List
from datetime import datetime

from app.models.shared.enums import TemplateFormat, TemplateStatus


class DeviceInfo(BaseModel):
    vendor: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    service_version: Optional[str] = Field(None, max_length=50)


class FingerprintEnrollRequest(BaseModel):
    employee_id: str = Field(..., min_length=1, max_length=50, description="Employee code, e.g. EMP001")
    template_base64: str = Field(..., description="Base64 encoded fingerprint template")
    finger_index: Optional[int] = Field(None, description="Finger slot 0-9, omit when unknown")
    format: Optional[str] = Field(None, description="ISO_19794_2 (default), ISO_19794_4, ANSI_378 or PROPRIETARY")
    quality: Optional[int] = None
    device_info: Optional[DeviceInfo] = None

    @validator('template_base64')
    def validate_template_base64(cls, v):
        if not v or not v.strip():
            raise ValueError('template_base64 is required')
        return v


class FingerprintRevokeRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class FingerprintResponse(BaseModel):
    id: int
    employee_id: str
    finger_index: Optional[int]
    finger_name: str
    format: TemplateFormat
    quality: Optional[int]
    status: TemplateStatus
    content_hash: Optional[str] = None
    device_vendor: Optional[str]
    device_model: Optional[str]
    device_serial: Optional[str]
    device_service_version: Optional[str]
    enrolled_by: str
    enrolled_at: datetime
    revoked_by: Optional[str]
    revoked_at: Optional[datetime]
    revoke_reason: Optional[str]
    expired_at: Optional[datetime]
    last_verified_at: Optional[datetime]
    verification_count: int

    class Config:
        from_attributes = True

    @classmethod
    def from_record(cls, record, expose_hash: bool = False) -> "FingerprintResponse":
        """Build the API view; the encrypted payload is never part of it"""
        view = cls.model_validate(record)
        if not expose_hash:
            view.content_hash = None
        return view


class FingerprintTemplateResponse(BaseModel):
    id: int
    employee_id: str
    finger_index: Optional[int]
    format: TemplateFormat
    template: str


class EmployeeFingerprintsResponse(BaseModel):
    employee_id: str
    fingerprints: List[FingerprintResponse]
    count: int
