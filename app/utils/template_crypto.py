import hashlib
import secrets
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.exceptions import IntegrityError, KeyConfigurationError
from app.models.biometric.fingerprint import NONCE_BYTES, TAG_BYTES, MIN_ENVELOPE_BYTES


class TemplateCipher:
    """AES-256-GCM envelope encryption for fingerprint templates.

    Envelope layout: ``nonce(16) + auth_tag(16) + ciphertext``. The key is
    held as immutable bytes and never changes after construction.
    """

    def __init__(self, key: bytes):
        if not isinstance(key, (bytes, bytearray)) or len(key) != 32:
            raise KeyConfigurationError("Fingerprint encryption key must be 32 bytes")
        self._aesgcm = AESGCM(bytes(key))

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt with a fresh random nonce"""
        nonce = secrets.token_bytes(NONCE_BYTES)
        # AESGCM returns ciphertext followed by the tag
        sealed = self._aesgcm.encrypt(nonce, bytes(plaintext), None)
        ciphertext, auth_tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return nonce + auth_tag + ciphertext

    def decrypt(self, envelope: bytes) -> bytes:
        """Decrypt an envelope, raising IntegrityError when the tag does not verify"""
        if envelope is None or len(envelope) < MIN_ENVELOPE_BYTES:
            raise IntegrityError("Encrypted template envelope is truncated")

        envelope = bytes(envelope)
        nonce = envelope[0:NONCE_BYTES]
        auth_tag = envelope[NONCE_BYTES:NONCE_BYTES + TAG_BYTES]
        ciphertext = envelope[NONCE_BYTES + TAG_BYTES:]
        try:
            return self._aesgcm.decrypt(nonce, ciphertext + auth_tag, None)
        except InvalidTag:
            raise IntegrityError("Template authentication failed (tampered data or wrong key)")

    @staticmethod
    def hash_template(plaintext: bytes) -> str:
        """Hex SHA-256 of the plaintext, used for deduplication"""
        return hashlib.sha256(bytes(plaintext)).hexdigest()
