import base64
import binascii
from typing import Optional, Union

from app.core.exceptions import ValidationError
from app.models.biometric.fingerprint import MAX_TEMPLATE_BYTES
from app.models.shared.enums import FingerPosition, TemplateFormat, UNKNOWN_FINGER

TemplateInput = Union[bytes, bytearray, memoryview, str]


def decode_template(template: TemplateInput, max_bytes: int = MAX_TEMPLATE_BYTES) -> bytes:
    """Return raw template bytes from bytes or Base64 text, enforcing the size bounds."""
    if template is None:
        raise ValidationError("Template data is required")

    if isinstance(template, (bytes, bytearray, memoryview)):
        raw = bytes(template)
    elif isinstance(template, str):
        try:
            raw = base64.b64decode(template.strip(), validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Invalid Base64 template data")
    else:
        raise ValidationError("Template must be bytes or Base64 text")

    if len(raw) == 0 or len(raw) > max_bytes:
        raise ValidationError(f"Template size must be between 1 byte and {max_bytes} bytes")
    return raw


def validate_finger_index(finger_index: Optional[int]) -> Optional[int]:
    if finger_index is None:
        return None
    if isinstance(finger_index, bool) or not isinstance(finger_index, int):
        raise ValidationError("finger_index must be an integer between 0 and 9")
    if finger_index < 0 or finger_index > 9:
        raise ValidationError("finger_index must be between 0 and 9")
    return finger_index


def finger_name_for(finger_index: Optional[int]) -> str:
    if finger_index is None:
        return UNKNOWN_FINGER
    return FingerPosition(finger_index).name


def validate_quality(quality: Optional[int]) -> Optional[int]:
    if quality is None:
        return None
    if isinstance(quality, bool) or not isinstance(quality, int) or not 0 <= quality <= 100:
        raise ValidationError("quality must be between 0 and 100")
    return quality


def validate_format(template_format: Union[TemplateFormat, str, None]) -> TemplateFormat:
    if template_format is None:
        return TemplateFormat.ISO_19794_2
    try:
        return TemplateFormat(template_format)
    except ValueError:
        valid = ", ".join(f.value for f in TemplateFormat)
        raise ValidationError(f"Invalid format. Must be one of: {valid}")
