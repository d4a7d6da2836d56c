"""
Move inline employee fingerprint templates into the encrypted vault (async, idempotent)
- Employees that already hold an ACTIVE vault record are skipped
- Templates already enrolled for someone else are skipped as duplicates
Run:  python scripts/migrate_fingerprints.py
"""

import os, sys
import asyncio
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.core.audit import LoggingAuditSink
from app.core.database import async_session_maker, engine
from app.core.logging_config import setup_logging
from app.core.security import get_encryption_key
from app.models.base import Base
import app.models  # noqa: F401  registers tables on Base.metadata
from app.services.biometric.fingerprint_service import FingerprintService
from app.utils.template_crypto import TemplateCipher


async def main():
    setup_logging()
    cipher = TemplateCipher(get_encryption_key())

    # Create tables (safe if already created)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as db:
        service = FingerprintService(db, cipher=cipher, audit_sink=LoggingAuditSink())
        summary = await service.migrate_legacy_templates()

    print("\n📈 Migration Summary:")
    print(f"   ✅ Migrated: {summary['migrated']}")
    print(f"   ⏭️  Skipped: {summary['skipped']}")
    print(f"   ❌ Failed: {summary['failed']}")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main())
