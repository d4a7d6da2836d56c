from enum import Enum, IntEnum

# Enums
class FingerPosition(IntEnum):
    """Finger slot: 0-4 right hand thumb to pinky, 5-9 left hand thumb to pinky"""
    RIGHT_THUMB = 0
    RIGHT_INDEX = 1
    RIGHT_MIDDLE = 2
    RIGHT_RING = 3
    RIGHT_PINKY = 4
    LEFT_THUMB = 5
    LEFT_INDEX = 6
    LEFT_MIDDLE = 7
    LEFT_RING = 8
    LEFT_PINKY = 9

UNKNOWN_FINGER = "UNKNOWN"

class TemplateFormat(str, Enum):
    ISO_19794_2 = "ISO_19794_2"
    ISO_19794_4 = "ISO_19794_4"
    ANSI_378 = "ANSI_378"
    PROPRIETARY = "PROPRIETARY"

class TemplateStatus(str, Enum):
    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"      # terminal, actor driven
    EXPIRED = "EXPIRED"      # terminal, retention driven

class AuditAction(str, Enum):
    TEMPLATE_ENROLLED = "TEMPLATE_ENROLLED"
    TEMPLATE_DECRYPTED = "TEMPLATE_DECRYPTED"
    TEMPLATE_DECRYPT_FAILED = "TEMPLATE_DECRYPT_FAILED"
    TEMPLATE_REVOKED = "TEMPLATE_REVOKED"
    TEMPLATE_EXPIRED = "TEMPLATE_EXPIRED"
