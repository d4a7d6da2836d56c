import logging
from typing import Optional
from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from app.api.dependencies import CurrentUser, get_fingerprint_service, require_admin, require_superadmin
from app.core.config import settings
from app.models.shared.enums import TemplateStatus
from app.services.biometric.fingerprint_service import FingerprintService
from app.schemas.biometric.fingerprint_schema import (
    FingerprintEnrollRequest, FingerprintRevokeRequest, FingerprintResponse,
    FingerprintTemplateResponse, EmployeeFingerprintsResponse
)
from app.schemas.common.pagination import PaginatedResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def to_view(record) -> FingerprintResponse:
    return FingerprintResponse.from_record(record, expose_hash=settings.EXPOSE_TEMPLATE_HASH)


@router.post("/enroll", response_model=FingerprintResponse, status_code=status.HTTP_201_CREATED)
async def enroll_fingerprint(
    enroll_data: FingerprintEnrollRequest,
    service: FingerprintService = Depends(get_fingerprint_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Enroll a new fingerprint template"""
    fingerprint = await service.enroll_fingerprint(
        employee_id=enroll_data.employee_id,
        template=enroll_data.template_base64,
        actor_id=current_user.username,
        finger_index=enroll_data.finger_index,
        template_format=enroll_data.format,
        quality=enroll_data.quality,
        device_info=enroll_data.device_info.dict(exclude_none=True) if enroll_data.device_info else None,
    )
    return to_view(fingerprint)


@router.get("/list/all", response_model=PaginatedResponse[FingerprintResponse])
async def list_all_fingerprints(
    status_filter: Optional[TemplateStatus] = Query(None, alias="status"),
    page_index: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    service: FingerprintService = Depends(get_fingerprint_service),
    current_user: CurrentUser = Depends(require_superadmin)
):
    """Admin overview of all fingerprint templates"""
    fingerprints, total = await service.list_templates(status=status_filter, page=page_index, limit=page_size)
    return PaginatedResponse[FingerprintResponse](
        page_index=page_index,
        page_size=page_size,
        count=total,
        data=[to_view(fp) for fp in fingerprints],
    )


@router.get("/template/{fingerprint_id}", response_model=FingerprintTemplateResponse)
async def get_decrypted_template(
    fingerprint_id: int,
    service: FingerprintService = Depends(get_fingerprint_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Return the decrypted template of an ACTIVE fingerprint"""
    template = await service.retrieve_decrypted(fingerprint_id, current_user.username)
    fingerprint = await service.get_fingerprint(fingerprint_id)
    return FingerprintTemplateResponse(
        id=fingerprint.id,
        employee_id=fingerprint.employee_id,
        finger_index=fingerprint.finger_index,
        format=fingerprint.format,
        template=template,
    )


@router.post("/verify")
async def verify_fingerprint(current_user: CurrentUser = Depends(require_admin)):
    """Server-side matching is not provided; devices match locally"""
    return JSONResponse(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        content={
            "success": False,
            "message": "Server-side verification not implemented",
            "note": "Capture and match on the device, then report the attempt to /{id}/verification.",
        },
    )


@router.post("/{fingerprint_id}/verification", status_code=status.HTTP_204_NO_CONTENT)
async def record_verification(
    fingerprint_id: int,
    service: FingerprintService = Depends(get_fingerprint_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Record a verification attempt reported by a device"""
    await service.record_verification(fingerprint_id)


@router.get("/{employee_id}", response_model=EmployeeFingerprintsResponse)
async def get_employee_fingerprints(
    employee_id: str,
    service: FingerprintService = Depends(get_fingerprint_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Get all fingerprint templates for an employee"""
    fingerprints = await service.list_employee_templates(employee_id)
    return EmployeeFingerprintsResponse(
        employee_id=employee_id,
        fingerprints=[to_view(fp) for fp in fingerprints],
        count=len(fingerprints),
    )


@router.delete("/{fingerprint_id}", response_model=FingerprintResponse)
async def revoke_fingerprint(
    fingerprint_id: int,
    revoke_data: Optional[FingerprintRevokeRequest] = Body(None),
    service: FingerprintService = Depends(get_fingerprint_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Revoke (soft delete) a fingerprint template"""
    reason = revoke_data.reason if revoke_data else None
    fingerprint = await service.revoke_fingerprint(fingerprint_id, current_user.username, reason)
    return to_view(fingerprint)
