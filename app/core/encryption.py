"""
Encryption of per-user Supabase credentials at rest.

Values are Fernet tokens (AES-128-CBC + HMAC) keyed by the SHA-256 digest of
``settings.encryption_key``.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from app.config.settings import settings


class CredentialDecryptionError(Exception):
    pass


def _fernet() -> Fernet:
    digest = hashlib.sha256(settings.get_encryption_key().encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt(text: str) -> str:
    return _fernet().encrypt(text.encode("utf-8")).decode("ascii")


def decrypt(token: str) -> str:
    try:
        return _fernet().decrypt(token.encode("ascii")).decode("utf-8")
    except (InvalidToken, ValueError) as e:
        raise CredentialDecryptionError("Stored credential could not be decrypted") from e
