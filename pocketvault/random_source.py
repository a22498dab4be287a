"""
random_source.py - The single source of randomness for PocketVault

Everything that needs unpredictable bytes (salts, IVs, generated passwords,
shuffles) goes through here so there is exactly one place that talks to
the OS CSPRNG.
"""
import os

from .errors import RandomnessUnavailable


def random_bytes(n: int) -> bytes:
    """
    Return n cryptographically secure random bytes.

    Raises:
        ValueError: If n is negative
        RandomnessUnavailable: If the OS cannot supply secure randomness.
            There is no fallback to the `random` module.
    """
    if n < 0:
        raise ValueError("Byte count must not be negative")

    try:
        return os.urandom(n)
    except (NotImplementedError, OSError) as e:
        raise RandomnessUnavailable(f"Secure randomness is unavailable: {e}") from e


def random_index(n: int) -> int:
    """
    Return a random index in range(n) from a single secure byte.

    This is `byte % n`, so for alphabets whose size does not divide 256 the
    lower indices are very slightly more likely. Each index is off from
    uniform by less than 1/256.
    """
    if not 1 <= n <= 256:
        raise ValueError("Index range must be between 1 and 256")
    return random_bytes(1)[0] % n
