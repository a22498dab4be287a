"""
validator.py - Check a master password without storing it

A known sentinel string is sealed under the master password and kept apart
from the vault. A login attempt only ever decrypts this sentinel, never the
real vault.
"""
from .codec import EncryptedEnvelope, open_bytes, seal_bytes
from .errors import VaultError

SENTINEL = "MASTER_PASSWORD_VALIDATION"


def create_validation(password) -> EncryptedEnvelope:
    """Seal the sentinel under the password"""
    return seal_bytes(SENTINEL.encode('utf-8'), password)


def check_validation(password, envelope: EncryptedEnvelope) -> bool:
    """
    Return True if the password decrypts the envelope back to the sentinel.

    Never raises for a bad password or a bad envelope; every failure is
    just False.
    """
    try:
        return open_bytes(envelope, password) == SENTINEL.encode('utf-8')
    except (VaultError, AttributeError, TypeError, ValueError):
        return False
