import base64
import binascii
import logging
import secrets
from functools import lru_cache
from typing import Optional

from jose import JWTError, jwt

from app.core.config import settings
from app.core.exceptions import KeyConfigurationError

logger = logging.getLogger(__name__)

ENCRYPTION_KEY_BYTES = 32  # AES-256


def parse_encryption_key(raw_key: str) -> bytes:
    """Accept a 256-bit key as 64 hex characters or as Base64 text"""
    value = raw_key.strip()
    if len(value) == ENCRYPTION_KEY_BYTES * 2:
        try:
            return bytes.fromhex(value)
        except ValueError:
            pass
    try:
        key = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise KeyConfigurationError("FINGERPRINT_ENCRYPTION_KEY must be hex or Base64 encoded")
    if len(key) != ENCRYPTION_KEY_BYTES:
        raise KeyConfigurationError(
            f"FINGERPRINT_ENCRYPTION_KEY must decode to {ENCRYPTION_KEY_BYTES} bytes"
        )
    return key


def load_encryption_key(raw_key: Optional[str], allow_ephemeral: bool = False) -> bytes:
    """Resolve the process-wide template key.

    A missing key is a startup failure. With ``allow_ephemeral`` a random key
    is generated for this process only; anything encrypted with it is lost
    on restart.
    """
    if raw_key:
        return parse_encryption_key(raw_key)

    if not allow_ephemeral:
        raise KeyConfigurationError(
            "FINGERPRINT_ENCRYPTION_KEY is not set; refusing to start without a template key"
        )

    logger.warning(
        "⚠️  WARNING: FINGERPRINT_ENCRYPTION_KEY is not set. Using an ephemeral random key; "
        "templates enrolled by this process cannot be decrypted after a restart!"
    )
    return secrets.token_bytes(ENCRYPTION_KEY_BYTES)


@lru_cache(maxsize=1)
def get_encryption_key() -> bytes:
    return load_encryption_key(
        settings.FINGERPRINT_ENCRYPTION_KEY,
        allow_ephemeral=settings.ALLOW_EPHEMERAL_FINGERPRINT_KEY,
    )


def verify_token(token: str) -> Optional[dict]:
    """Decode a signed JWT, returning None when it is invalid"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
