from sqlalchemy import Column, Integer, String, DateTime, LargeBinary, ForeignKey, Index, Enum as SQLEnum, text
from sqlalchemy.orm import relationship, validates
from app.db.base import BaseModel, utc_now
from app.core.exceptions import ValidationError
from app.models.shared.enums import TemplateFormat, TemplateStatus, UNKNOWN_FINGER

NONCE_BYTES = 16
TAG_BYTES = 16
ENVELOPE_OVERHEAD = NONCE_BYTES + TAG_BYTES
MAX_TEMPLATE_BYTES = 10 * 1024 * 1024
MIN_ENVELOPE_BYTES = ENVELOPE_OVERHEAD + 1
MAX_ENVELOPE_BYTES = MAX_TEMPLATE_BYTES + ENVELOPE_OVERHEAD

ACTIVE_ONLY = text("status = 'ACTIVE'")
ACTIVE_FINGER_SLOT = text("status = 'ACTIVE' AND finger_index IS NOT NULL")


class FingerprintTemplate(BaseModel):
    __tablename__ = 'fingerprint_templates'
    __table_args__ = (
        # At most one active record per template content and per finger slot
        Index('uq_fingerprint_active_hash', 'content_hash', unique=True,
              postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY),
        Index('uq_fingerprint_active_finger', 'employee_ref', 'finger_index', unique=True,
              postgresql_where=ACTIVE_FINGER_SLOT, sqlite_where=ACTIVE_FINGER_SLOT),
        Index('ix_fingerprint_employee_status', 'employee_id', 'status'),
    )

    employee_ref = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    # Snapshot of Employee.employee_id at enrollment, intentionally not kept in sync
    employee_id = Column(String(50), nullable=False, index=True)
    finger_index = Column(Integer)  # None when the slot is unknown
    finger_name = Column(String(20), nullable=False, default=UNKNOWN_FINGER)
    format = Column(SQLEnum(TemplateFormat), nullable=False, default=TemplateFormat.ISO_19794_2)
    encrypted_payload = Column(LargeBinary, nullable=False)  # nonce + tag + ciphertext
    content_hash = Column(String(64), nullable=False, index=True)  # SHA-256 of the plaintext
    quality = Column(Integer)

    device_vendor = Column(String(100), default="Mantra")
    device_model = Column(String(100), default="MFS110")
    device_serial = Column(String(100))
    device_service_version = Column(String(50))

    status = Column(SQLEnum(TemplateStatus), nullable=False, default=TemplateStatus.ACTIVE, index=True)
    enrolled_by = Column(String(100), nullable=False)
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    revoked_by = Column(String(100))
    revoked_at = Column(DateTime(timezone=True))
    revoke_reason = Column(String(500))
    expired_at = Column(DateTime(timezone=True))

    last_verified_at = Column(DateTime(timezone=True))
    verification_count = Column(Integer, nullable=False, default=0)

    # Relationships
    employee = relationship("Employee", back_populates="fingerprints")

    @validates("encrypted_payload")
    def validate_encrypted_payload(self, key, value):
        if value is None or not (MIN_ENVELOPE_BYTES <= len(value) <= MAX_ENVELOPE_BYTES):
            raise ValidationError("Encrypted template envelope has an invalid size")
        return value

    def __repr__(self):
        return f"<FingerprintTemplate {self.id} {self.employee_id} {self.finger_name} {self.status}>"
