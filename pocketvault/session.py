"""
session.py - Holds the master password for one authenticated session

The master password is never written anywhere. It lives in a MasterPassword
wrapper owned by a Session, and the only things you can do with it are
derive a key from it or wipe it.
"""
import asyncio
import logging
from typing import Optional

from .crypto import derive_key
from .errors import VaultLockedError
from .validator import check_validation

logger = logging.getLogger(__name__)


class MasterPassword:
    """
    In-memory master password.

    Stored as a mutable bytearray so wipe() can overwrite it in place.
    Copies made while deriving a key are short-lived and out of our hands.
    """

    __slots__ = ("_secret",)

    def __init__(self, password: str):
        self._secret = bytearray(password.encode('utf-8'))

    def derive_key(self, salt: bytes) -> bytes:
        if self._secret is None:
            raise VaultLockedError("Master password has been wiped")
        return derive_key(bytes(self._secret), salt)

    def wipe(self) -> None:
        if getattr(self, "_secret", None) is not None:
            for i in range(len(self._secret)):
                self._secret[i] = 0
            self._secret = None

    @property
    def wiped(self) -> bool:
        return self._secret is None

    def __repr__(self):
        return "MasterPassword(<hidden>)" if not self.wiped else "MasterPassword(<wiped>)"

    def __del__(self):
        self.wipe()


class Session:
    """
    Authenticated session context.

    Use it as a context manager so logout happens even on errors:

        with Session() as session:
            if session.login(password, validation):
                ...
    """

    def __init__(self):
        self._master: Optional[MasterPassword] = None

    @property
    def is_authenticated(self) -> bool:
        return self._master is not None

    @property
    def master_password(self) -> MasterPassword:
        if self._master is None:
            raise VaultLockedError("Vault is locked! Log in first.")
        return self._master

    def login(self, password: str, validation) -> bool:
        """
        Check the password against a validation envelope and start the session.

        Returns:
            True if the password is correct, False otherwise
        """
        if validation is None or not check_validation(password, validation):
            logger.info("Login rejected")
            return False

        self.logout()
        self._master = MasterPassword(password)
        logger.info("Session started")
        return True

    async def login_async(self, password: str, validation) -> bool:
        """Run login() in a worker thread so the event loop never waits on PBKDF2"""
        return await asyncio.to_thread(self.login, password, validation)

    def logout(self) -> None:
        if self._master is not None:
            self._master.wipe()
            self._master = None
            logger.info("Session ended")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.logout()
        return False
