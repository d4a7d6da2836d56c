from fastapi import status


class VaultError(Exception):
    """Base error for the fingerprint template vault.

    Every error carries the HTTP status the API layer answers with, so the
    single exception handler in ``main`` can translate it without knowing the
    concrete type.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Template vault error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(VaultError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation error"


class NotFoundError(VaultError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ConflictError(VaultError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Duplicate fingerprint template detected"


class StateError(VaultError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current template status"


class IntegrityError(VaultError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to decrypt template"


class KeyConfigurationError(VaultError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Fingerprint encryption key is not configured"
