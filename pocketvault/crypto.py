"""
crypto.py - Key derivation and authenticated encryption
This is the security core of PocketVault
"""
from typing import Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DecryptionFailed
from .random_source import random_bytes

KEY_LENGTH = 32          # 256-bit AES key
SALT_LENGTH = 32         # 256-bit salt
IV_LENGTH = 12           # 96-bit nonce, the GCM recommendation

# PBKDF2 work factor. Raising it later only affects new envelopes if the
# value is stored with them; today it is a fixed, documented constant.
KDF_ITERATIONS = 100_000
MIN_KDF_ITERATIONS = 100_000


def derive_key(password: Union[str, bytes], salt: bytes, iterations: int = KDF_ITERATIONS) -> bytes:
    """
    Derive a 256-bit key from the master password.

    Uses PBKDF2-HMAC-SHA256:
    1. The salt makes the same password produce different keys per envelope
    2. The iteration count makes every guess expensive for an attacker
    3. Same password + salt always gives the same key (nothing is cached)
    """
    if iterations < MIN_KDF_ITERATIONS:
        raise ValueError(f"PBKDF2 needs at least {MIN_KDF_ITERATIONS} iterations")

    if isinstance(password, str):
        password = password.encode('utf-8')

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(bytes(password))


def generate_salt() -> bytes:
    """Fresh random salt for one envelope"""
    return random_bytes(SALT_LENGTH)


def encrypt(plaintext: bytes, key: bytes) -> Tuple[bytes, bytes]:
    """
    Encrypt bytes with AES-256-GCM.

    A new IV is drawn on every call and returned next to the ciphertext.
    The IV is not secret but it must travel with the ciphertext.

    Returns:
        (ciphertext, iv) - ciphertext carries the 16-byte GCM tag at its end
    """
    iv = random_bytes(IV_LENGTH)
    ciphertext = AESGCM(key).encrypt(iv, plaintext, None)
    return ciphertext, iv


def decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """
    Decrypt AES-256-GCM ciphertext.

    Will raise DecryptionFailed if:
    - Wrong password was used (wrong key)
    - Ciphertext or IV has been tampered with (tag check fails)
    - Key or IV has the wrong length
    """
    if len(iv) != IV_LENGTH:
        raise DecryptionFailed("Invalid IV length")

    try:
        return AESGCM(key).decrypt(iv, ciphertext, None)
    except (InvalidTag, ValueError) as e:
        raise DecryptionFailed("Decryption failed") from e


# Example usage (for testing)
if __name__ == "__main__":
    salt = generate_salt()
    key = derive_key("my-super-secret-password", salt)

    secret = b"My GitHub password is: ghp_abcd1234"
    ciphertext, iv = encrypt(secret, key)
    print(f"Encrypted: {ciphertext.hex()[:50]}...")

    assert decrypt(ciphertext, key, iv) == secret
    print("✓ Encryption/decryption working correctly!")

    try:
        decrypt(ciphertext, derive_key("wrong", salt), iv)
    except DecryptionFailed:
        print("✓ Wrong key rejected!")
