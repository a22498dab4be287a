"""
PocketVault - Offline password vault with a single master password.

Features:
- PBKDF2-HMAC-SHA256 key derivation (100,000 iterations)
- AES-256-GCM authenticated encryption with fresh salt and IV per save
- Master password checked against a sealed sentinel, never stored
- Cryptographically secure password generator
- Deterministic strength estimator for live feedback
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .codec import EncryptedEnvelope, open_vault, seal_vault
from .errors import (
    ConstraintError,
    DecryptionFailed,
    EncodingError,
    RandomnessUnavailable,
    VaultError,
)
from .generator import DEFAULT_PASSWORD_OPTIONS, PasswordOptions, generate_password
from .manager import PasswordManager
from .models import Vault, VaultRecord
from .session import MasterPassword, Session
from .strength import StrengthResult, estimate_strength
from .validator import check_validation, create_validation

__all__ = [
    "ConstraintError",
    "DecryptionFailed",
    "DEFAULT_PASSWORD_OPTIONS",
    "EncodingError",
    "EncryptedEnvelope",
    "MasterPassword",
    "PasswordManager",
    "PasswordOptions",
    "RandomnessUnavailable",
    "Session",
    "StrengthResult",
    "Vault",
    "VaultError",
    "VaultRecord",
    "check_validation",
    "create_validation",
    "estimate_strength",
    "generate_password",
    "open_vault",
    "seal_vault",
]


def get_version():
    """Get the current version string."""
    return __version__
