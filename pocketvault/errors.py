"""
errors.py - Exception types raised by PocketVault
"""


class VaultError(Exception):
    """Base class for every error PocketVault raises on purpose"""


class RandomnessUnavailable(VaultError):
    """The platform could not supply secure random bytes. Fatal."""


class ConstraintError(VaultError, ValueError):
    """A password generation request cannot be satisfied"""


class DecryptionFailed(VaultError):
    """
    Wrong password or corrupted envelope.

    Both causes deliberately share this one type so callers cannot tell
    them apart.
    """


class EncodingError(VaultError):
    """A stored envelope, store file or vault payload is malformed"""


class VaultLockedError(VaultError):
    """Operation needs an unlocked vault"""


class VaultExistsError(VaultError):
    pass


class VaultNotFoundError(VaultError):
    pass


class WeakMasterPasswordError(VaultError, ValueError):
    pass


class EntryNotFoundError(VaultError, KeyError):
    def __str__(self):
        return f"No entry with id {self.args[0]!r}" if self.args else "Entry not found"
