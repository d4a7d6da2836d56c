from functools import lru_cache
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.audit import AuditSink, LoggingAuditSink
from app.core.database import get_async_session
from app.core.security import get_encryption_key
from app.auth.jwt_handler import decode_access_token
from app.auth.permissions import ROLE_ADMIN, ROLE_SUPERADMIN, RoleChecker
from app.services.biometric.fingerprint_service import FingerprintService
from app.services.hr.employee_service import EmployeeService
from app.utils.template_crypto import TemplateCipher
import logging

security = HTTPBearer()
logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    """Identity taken from the bearer token"""
    username: str
    role: str

    class Config:
        frozen = True


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """Get current authenticated user from the bearer token"""
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = CurrentUser(username=payload["username"], role=payload["role"])
    request.state.current_user = user
    return user


def require_roles(*roles: str):
    """
    Dependency to require one of the given roles for an endpoint

    Examples:
        require_roles("admin", "superadmin")
    """
    async def role_dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        RoleChecker(current_user.role).require(roles)
        return current_user

    return role_dependency


require_admin = require_roles(ROLE_ADMIN, ROLE_SUPERADMIN)
require_superadmin = require_roles(ROLE_SUPERADMIN)


@lru_cache(maxsize=1)
def get_template_cipher() -> TemplateCipher:
    return TemplateCipher(get_encryption_key())


@lru_cache(maxsize=1)
def get_audit_sink() -> AuditSink:
    return LoggingAuditSink()


async def get_fingerprint_service(
    session: AsyncSession = Depends(get_async_session),
    cipher: TemplateCipher = Depends(get_template_cipher),
    audit_sink: AuditSink = Depends(get_audit_sink),
) -> FingerprintService:
    return FingerprintService(session, cipher=cipher, audit_sink=audit_sink)


async def get_employee_service(session: AsyncSession = Depends(get_async_session)) -> EmployeeService:
    return EmployeeService(session)
