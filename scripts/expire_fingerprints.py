"""
Apply the fingerprint retention policy
- ACTIVE templates enrolled more than FINGERPRINT_RETENTION_DAYS ago become EXPIRED
Run:  python scripts/expire_fingerprints.py
"""

import os, sys
import asyncio
from datetime import timedelta
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.core.audit import LoggingAuditSink
from app.core.config import settings
from app.core.database import async_session_maker, engine
from app.core.logging_config import setup_logging
from app.core.security import get_encryption_key
from app.db.base import utc_now
from app.services.biometric.fingerprint_service import FingerprintService
from app.utils.template_crypto import TemplateCipher


async def main():
    setup_logging()
    if settings.FINGERPRINT_RETENTION_DAYS is None:
        print("⏭️  FINGERPRINT_RETENTION_DAYS is not set; nothing to expire")
        return

    cutoff = utc_now() - timedelta(days=settings.FINGERPRINT_RETENTION_DAYS)
    async with async_session_maker() as db:
        service = FingerprintService(db, cipher=TemplateCipher(get_encryption_key()), audit_sink=LoggingAuditSink())
        expired = await service.expire_enrolled_before(cutoff)

    print(f"✅ Expired {expired} fingerprint template(s) enrolled before {cutoff.isoformat()}")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main())
