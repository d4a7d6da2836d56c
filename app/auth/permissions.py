# app/auth/permissions.py
from typing import Iterable, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_SUPERADMIN = "superadmin"


class RoleChecker:
    """
    Check the role carried in the JWT token
    """

    def __init__(self, role: Optional[str]):
        self.role = (role or "").lower()

    def has_any(self, roles: Iterable[str]) -> bool:
        """
        Check if the user holds one of the given roles (OR logic)
        """
        allowed = {r.lower() for r in roles}
        granted = self.role in allowed
        logger.debug(f"Role check {'granted' if granted else 'denied'}: {self.role} in {sorted(allowed)}")
        return granted

    def require(self, roles: Iterable[str], custom_message: Optional[str] = None):
        """
        Require one of the roles or raise HTTPException
        """
        roles = list(roles)
        if not self.has_any(roles):
            message = custom_message or f"Access denied. Requires one of roles: {', '.join(roles)}"
            logger.warning(f"Role check failed: {message}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=message
            )
