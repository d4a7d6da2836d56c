import base64
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError as DBIntegrityError, SQLAlchemyError

from app.core.audit import AuditEvent, AuditSink, LoggingAuditSink
from app.core.exceptions import (
    VaultError, ValidationError, NotFoundError, ConflictError, StateError, IntegrityError
)
from app.db.base import utc_now
from app.models.biometric.fingerprint import FingerprintTemplate
from app.models.shared.enums import AuditAction, FingerPosition, TemplateFormat, TemplateStatus
from app.services.hr.employee_service import EmployeeService
from app.utils.template_crypto import TemplateCipher
from app.utils.validators.validation_utils import (
    TemplateInput, decode_template, finger_name_for, validate_finger_index,
    validate_format, validate_quality
)

logger = logging.getLogger(__name__)

DEFAULT_REVOKE_REASON = "No reason provided"
SYSTEM_ACTOR = "system"
MIGRATION_ACTOR = "migration_script"
MAX_LIST_LIMIT = 200
DEVICE_FIELDS = ("vendor", "model", "serial_number", "service_version")


class FingerprintService:
    """Template vault: encrypted storage, deduplication and lifecycle of fingerprint templates.

    Plaintext templates only exist inside ``enroll_fingerprint`` and
    ``retrieve_decrypted``; everything persisted or returned carries the
    encrypted envelope or nothing at all.
    """

    def __init__(
        self,
        session: AsyncSession,
        cipher: TemplateCipher,
        audit_sink: Optional[AuditSink] = None,
    ):
        self.session = session
        self.cipher = cipher
        self.audit_sink = audit_sink or LoggingAuditSink()
        self.employees = EmployeeService(session)

    # ---------- Helpers ----------
    def _audit(self, fingerprint: FingerprintTemplate, actor_id: str, action: AuditAction) -> None:
        event = AuditEvent(
            record_id=fingerprint.id,
            employee_id=fingerprint.employee_id,
            actor_id=actor_id,
            action=action,
        )
        try:
            self.audit_sink.emit(event)
        except Exception as e:
            logger.error(f"Audit sink failed for fingerprint {fingerprint.id}: {e}")
            raise VaultError(f"Audit unavailable for fingerprint {fingerprint.id}; operation refused")

    async def _audit_before_commit(
        self, fingerprint: FingerprintTemplate, actor_id: str, action: AuditAction
    ) -> None:
        """Audit a pending write; the write is rolled back when the event cannot be recorded"""
        try:
            self._audit(fingerprint, actor_id, action)
        except VaultError:
            await self.session.rollback()
            raise

    @staticmethod
    def _require_actor(actor_id: str) -> str:
        if not actor_id or not isinstance(actor_id, str) or not actor_id.strip():
            raise ValidationError("actor_id is required")
        return actor_id.strip()

    @staticmethod
    def _normalize_device_info(device_info: Optional[Dict[str, Any]]) -> Dict[str, Optional[str]]:
        device = {"vendor": "Mantra", "model": "MFS110", "serial_number": None, "service_version": None}
        if not device_info:
            return device

        unknown = set(device_info) - set(DEVICE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown device_info fields: {', '.join(sorted(unknown))}")
        for field in DEVICE_FIELDS:
            value = device_info.get(field)
            if value is None:
                continue
            if not isinstance(value, str) or len(value) > 100:
                raise ValidationError(f"device_info.{field} must be a string of at most 100 characters")
            device[field] = value
        return device

    async def _finger_slot_taken(self, employee_ref: int, finger_index: int) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(FingerprintTemplate).where(
                FingerprintTemplate.employee_ref == employee_ref,
                FingerprintTemplate.finger_index == finger_index,
                FingerprintTemplate.status == TemplateStatus.ACTIVE
            )
        )
        return int(result.scalar() or 0) > 0

    # ---------- Lookups ----------
    async def exists_active_with_hash(self, content_hash: str) -> bool:
        """True when an ACTIVE template with this content hash exists"""
        result = await self.session.execute(
            select(func.count()).select_from(FingerprintTemplate).where(
                FingerprintTemplate.content_hash == content_hash,
                FingerprintTemplate.status == TemplateStatus.ACTIVE
            )
        )
        return int(result.scalar() or 0) > 0

    async def get_fingerprint(self, record_id: int) -> FingerprintTemplate:
        fingerprint = await self.session.get(FingerprintTemplate, record_id, populate_existing=True)
        if fingerprint is None:
            raise NotFoundError(f"Fingerprint {record_id} not found")
        return fingerprint

    async def find_active_by_employee(self, employee_id: str) -> List[FingerprintTemplate]:
        result = await self.session.execute(
            select(FingerprintTemplate)
            .where(
                FingerprintTemplate.employee_id == employee_id,
                FingerprintTemplate.status == TemplateStatus.ACTIVE
            )
            .order_by(FingerprintTemplate.created_at.desc(), FingerprintTemplate.id.desc())
        )
        return list(result.scalars().all())

    async def list_employee_templates(self, employee_id: str) -> List[FingerprintTemplate]:
        """All templates of one employee, any status, newest first"""
        await self.employees.get_by_employee_code(employee_id)
        result = await self.session.execute(
            select(FingerprintTemplate)
            .where(FingerprintTemplate.employee_id == employee_id)
            .order_by(FingerprintTemplate.created_at.desc(), FingerprintTemplate.id.desc())
        )
        return list(result.scalars().all())

    async def list_templates(
        self,
        status: Optional[TemplateStatus] = None,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[List[FingerprintTemplate], int]:
        if page < 1 or not 1 <= limit <= MAX_LIST_LIMIT:
            raise ValidationError(f"page must be >= 1 and limit between 1 and {MAX_LIST_LIMIT}")

        query = select(FingerprintTemplate)
        count_query = select(func.count()).select_from(FingerprintTemplate)
        if status is not None:
            query = query.where(FingerprintTemplate.status == status)
            count_query = count_query.where(FingerprintTemplate.status == status)

        total = int((await self.session.execute(count_query)).scalar() or 0)
        result = await self.session.execute(
            query.order_by(FingerprintTemplate.created_at.desc(), FingerprintTemplate.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    # ---------- Enrollment ----------
    async def enroll_fingerprint(
        self,
        employee_id: str,
        template: TemplateInput,
        actor_id: str,
        finger_index: Optional[int] = None,
        template_format: Optional[TemplateFormat] = None,
        quality: Optional[int] = None,
        device_info: Optional[Dict[str, Any]] = None,
    ) -> FingerprintTemplate:
        """Encrypt and store a new template for an employee"""
        actor_id = self._require_actor(actor_id)
        finger_index = validate_finger_index(finger_index)
        quality = validate_quality(quality)
        template_format = validate_format(template_format)
        device = self._normalize_device_info(device_info)
        plaintext = decode_template(template)

        try:
            employee = await self.employees.get_by_employee_code(employee_id, active_only=True)

            # Hash before encryption so duplicates are found without decrypting anything
            content_hash = self.cipher.hash_template(plaintext)
            if await self.exists_active_with_hash(content_hash):
                raise ConflictError("This fingerprint template is already enrolled (duplicate detected)")

            finger_name = finger_name_for(finger_index)
            if finger_index is not None and await self._finger_slot_taken(employee.id, finger_index):
                raise ConflictError(
                    f"Fingerprint already enrolled for {finger_name} of employee {employee.employee_id}"
                )

            envelope = self.cipher.encrypt(plaintext)
            original_size = len(plaintext)
            del plaintext

            fingerprint = FingerprintTemplate(
                employee_ref=employee.id,
                employee_id=employee.employee_id,
                finger_index=finger_index,
                finger_name=finger_name,
                format=template_format,
                encrypted_payload=envelope,
                content_hash=content_hash,
                quality=quality,
                device_vendor=device["vendor"],
                device_model=device["model"],
                device_serial=device["serial_number"],
                device_service_version=device["service_version"],
                status=TemplateStatus.ACTIVE,
                enrolled_by=actor_id,
                enrolled_at=utc_now(),
                verification_count=0,
            )

            self.session.add(fingerprint)
            await self.session.flush()
            await self._audit_before_commit(fingerprint, actor_id, AuditAction.TEMPLATE_ENROLLED)
            await self.session.commit()
            await self.session.refresh(fingerprint)

        except VaultError:
            raise
        except DBIntegrityError:
            # Lost the race against a concurrent enrollment of the same template or finger slot
            await self.session.rollback()
            logger.warning(f"Duplicate fingerprint rejected by storage: Employee {employee_id}")
            raise ConflictError("Duplicate fingerprint template detected")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error enrolling fingerprint for employee {employee_id}: {e}")
            raise VaultError("Failed to enroll fingerprint")

        logger.info(
            f"Fingerprint enrolled: ID {fingerprint.id}, Employee {fingerprint.employee_id}, "
            f"Finger {fingerprint.finger_name}, Size {original_size} -> {len(envelope)} bytes"
        )
        return fingerprint

    # ---------- Read ----------
    async def retrieve_decrypted(self, record_id: int, actor_id: str) -> str:
        """Return the plaintext template as Base64. Every successful read is audited."""
        actor_id = self._require_actor(actor_id)
        fingerprint = await self.get_fingerprint(record_id)

        if fingerprint.status != TemplateStatus.ACTIVE:
            raise StateError(f"Cannot retrieve template {record_id}: status is {fingerprint.status.value}")

        try:
            plaintext = self.cipher.decrypt(fingerprint.encrypted_payload)
        except IntegrityError:
            logger.error(
                f"Template integrity check failed: Fingerprint {record_id}, Employee {fingerprint.employee_id}"
            )
            self._audit(fingerprint, actor_id, AuditAction.TEMPLATE_DECRYPT_FAILED)
            raise

        self._audit(fingerprint, actor_id, AuditAction.TEMPLATE_DECRYPTED)
        encoded = base64.b64encode(plaintext).decode("ascii")
        del plaintext
        return encoded

    # ---------- Lifecycle ----------
    async def revoke_fingerprint(
        self,
        record_id: int,
        actor_id: str,
        reason: Optional[str] = None
    ) -> FingerprintTemplate:
        """Soft delete: ACTIVE -> REVOKED. Any other starting status is a StateError."""
        actor_id = self._require_actor(actor_id)
        reason = reason.strip() if reason and reason.strip() else DEFAULT_REVOKE_REASON
        if len(reason) > 500:
            raise ValidationError("Revoke reason must be at most 500 characters")

        now = utc_now()
        try:
            # Conditional update: of two concurrent revokes only one matches an ACTIVE row
            result = await self.session.execute(
                update(FingerprintTemplate)
                .where(
                    FingerprintTemplate.id == record_id,
                    FingerprintTemplate.status == TemplateStatus.ACTIVE
                )
                .values(
                    status=TemplateStatus.REVOKED,
                    revoked_by=actor_id,
                    revoked_at=now,
                    revoke_reason=reason,
                    updated_at=now
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                fingerprint = await self.get_fingerprint(record_id)
                raise StateError(f"Fingerprint {record_id} cannot be revoked: status is {fingerprint.status.value}")

            fingerprint = await self.get_fingerprint(record_id)
            await self._audit_before_commit(fingerprint, actor_id, AuditAction.TEMPLATE_REVOKED)
            await self.session.commit()

        except VaultError:
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error revoking fingerprint {record_id}: {e}")
            raise VaultError("Failed to revoke fingerprint")

        logger.info(f"Fingerprint revoked: ID {record_id}, Employee {fingerprint.employee_id}, By: {actor_id}")
        return fingerprint

    async def record_verification(self, record_id: int) -> None:
        """Count a verification attempt made by an external matcher, whatever the status"""
        try:
            result = await self.session.execute(
                update(FingerprintTemplate)
                .where(FingerprintTemplate.id == record_id)
                .values(
                    verification_count=FingerprintTemplate.verification_count + 1,
                    last_verified_at=utc_now()
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFoundError(f"Fingerprint {record_id} not found")
            await self.session.commit()
        except VaultError:
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error recording verification for fingerprint {record_id}: {e}")
            raise VaultError("Failed to record verification")

    async def expire_enrolled_before(self, cutoff: datetime) -> int:
        """Retention policy: move ACTIVE templates enrolled before ``cutoff`` to EXPIRED"""
        try:
            result = await self.session.execute(
                select(FingerprintTemplate.id).where(
                    FingerprintTemplate.status == TemplateStatus.ACTIVE,
                    FingerprintTemplate.enrolled_at < cutoff
                )
            )
            candidate_ids = list(result.scalars().all())

            expired_ids = []
            for record_id in candidate_ids:
                now = utc_now()
                updated = await self.session.execute(
                    update(FingerprintTemplate)
                    .where(
                        FingerprintTemplate.id == record_id,
                        FingerprintTemplate.status == TemplateStatus.ACTIVE
                    )
                    .values(status=TemplateStatus.EXPIRED, expired_at=now, updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                if updated.rowcount:
                    await self._audit_before_commit(
                        await self.get_fingerprint(record_id), SYSTEM_ACTOR, AuditAction.TEMPLATE_EXPIRED
                    )
                    expired_ids.append(record_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error expiring fingerprints enrolled before {cutoff.isoformat()}: {e}")
            raise VaultError("Failed to expire fingerprints")

        logger.info(f"Expired {len(expired_ids)} fingerprint(s) enrolled before {cutoff.isoformat()}")
        return len(expired_ids)

    # ---------- Migration ----------
    async def migrate_legacy_templates(self, actor_id: str = MIGRATION_ACTOR) -> Dict[str, int]:
        """Move inline Employee.fingerprint_template values into the vault"""
        employees = await self.employees.get_employees_with_inline_templates()
        # Plain tuples: a rollback during enrollment expires ORM instances
        legacy = [(employee.employee_id, employee.fingerprint_template) for employee in employees]
        summary = {"migrated": 0, "skipped": 0, "failed": 0}

        for employee_id, inline_template in legacy:
            if await self.find_active_by_employee(employee_id):
                logger.info(f"Skipping {employee_id} - already has encrypted fingerprint")
                summary["skipped"] += 1
                continue
            try:
                await self.enroll_fingerprint(
                    employee_id,
                    inline_template,
                    actor_id,
                    finger_index=FingerPosition.RIGHT_INDEX.value,
                    template_format=TemplateFormat.ISO_19794_2,
                )
            except ConflictError:
                logger.info(f"Skipping {employee_id} - template already enrolled")
                summary["skipped"] += 1
            except VaultError as e:
                logger.error(f"Failed to migrate {employee_id}: {e.detail}")
                summary["failed"] += 1
            else:
                logger.info(f"Migrated {employee_id}")
                summary["migrated"] += 1

        return summary
