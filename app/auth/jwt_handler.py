from typing import Optional
from datetime import datetime, timezone
from app.core.security import verify_token

def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate access token"""
    payload = verify_token(token)
    if payload is None:
        return None

    # Check token type
    if payload.get("type", "access") != "access":
        return None

    # Check expiration
    exp = payload.get("exp")
    if exp is None or datetime.now(timezone.utc).timestamp() > exp:
        return None

    # Actor identity and role are required for audit fields and role gating
    if not payload.get("username") or not payload.get("role"):
        return None

    return payload
