"""
codec.py - Turns the vault into a storable encrypted envelope and back

Envelope layout (JSON, every value hex text):
    {"data": <ciphertext+tag>, "iv": <12-byte nonce>, "salt": <32-byte salt>}
"""
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Dict

from .crypto import decrypt, derive_key, encrypt, generate_salt
from .errors import DecryptionFailed, EncodingError
from .models import Vault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptedEnvelope:
    """Ciphertext plus the IV and salt needed to decrypt it"""

    data: str
    iv: str
    salt: str

    @property
    def ciphertext_bytes(self) -> bytes:
        return _unhex(self.data, "data")

    @property
    def iv_bytes(self) -> bytes:
        return _unhex(self.iv, "iv")

    @property
    def salt_bytes(self) -> bytes:
        return _unhex(self.salt, "salt")

    def to_dict(self) -> Dict[str, str]:
        return {"data": self.data, "iv": self.iv, "salt": self.salt}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data) -> "EncryptedEnvelope":
        if not isinstance(data, dict):
            raise EncodingError("Envelope must be a JSON object")

        try:
            envelope = cls(data=data["data"], iv=data["iv"], salt=data["salt"])
        except KeyError as e:
            raise EncodingError(f"Envelope is missing field {e}") from e

        for name in ("data", "iv", "salt"):
            value = getattr(envelope, name)
            if not isinstance(value, str):
                raise EncodingError(f"Envelope field '{name}' must be a string")
            _unhex(value, name)
        return envelope

    @classmethod
    def from_json(cls, text: str) -> "EncryptedEnvelope":
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Envelope is not valid JSON: {e}") from e
        return cls.from_dict(data)


def _unhex(value: str, name: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except (TypeError, ValueError, binascii.Error) as e:
        raise EncodingError(f"Envelope field '{name}' is not hex") from e


def _key_for(password, salt: bytes) -> bytes:
    # Accept a plain password or a session's MasterPassword wrapper
    if isinstance(password, (str, bytes)):
        return derive_key(password, salt)
    if not hasattr(password, "derive_key"):
        raise TypeError(f"Expected a str, bytes or MasterPassword, got {type(password).__name__}")
    return password.derive_key(salt)


def encode_vault(vault: Vault) -> bytes:
    """Canonical JSON bytes: sorted keys, no whitespace, UTF-8"""
    return json.dumps(
        vault.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode('utf-8')


def decode_vault(payload: bytes) -> Vault:
    try:
        data = json.loads(payload.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise EncodingError(f"Vault payload is not valid JSON: {e}") from e
    return Vault.from_dict(data)


def seal_bytes(plaintext: bytes, password) -> EncryptedEnvelope:
    """
    Encrypt bytes under a password.

    Every call draws a fresh salt and IV, even for identical input.
    """
    salt = generate_salt()
    key = _key_for(password, salt)
    ciphertext, iv = encrypt(plaintext, key)
    return EncryptedEnvelope(data=ciphertext.hex(), iv=iv.hex(), salt=salt.hex())


def open_bytes(envelope: EncryptedEnvelope, password) -> bytes:
    """
    Decrypt an envelope.

    Raises:
        DecryptionFailed: For any failure, including malformed hex
    """
    try:
        key = _key_for(password, envelope.salt_bytes)
        return decrypt(envelope.ciphertext_bytes, key, envelope.iv_bytes)
    except EncodingError as e:
        raise DecryptionFailed("Decryption failed") from e


def seal_vault(vault: Vault, password) -> EncryptedEnvelope:
    envelope = seal_bytes(encode_vault(vault), password)
    logger.debug("Sealed vault with %d entries", len(vault.entries))
    return envelope


def open_vault(envelope: EncryptedEnvelope, password) -> Vault:
    """
    Decrypt and parse a vault envelope.

    Wrong password and corrupted data raise the same DecryptionFailed, so
    the failure says nothing about which one happened.
    """
    plaintext = open_bytes(envelope, password)
    try:
        vault = decode_vault(plaintext)
    except EncodingError as e:
        logger.warning("Vault envelope decrypted but payload is malformed")
        raise DecryptionFailed("Decryption failed") from e
    logger.debug("Opened vault with %d entries", len(vault.entries))
    return vault
