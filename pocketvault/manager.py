"""
manager.py - Main password manager class that orchestrates all functionality
"""
import asyncio
import logging
from typing import List, Optional

from . import config
from .codec import EncryptedEnvelope, open_vault, seal_vault
from .errors import (
    EntryNotFoundError,
    VaultExistsError,
    VaultLockedError,
    VaultNotFoundError,
    WeakMasterPasswordError,
)
from .models import Vault, VaultRecord
from .portability import VaultExporter
from .session import Session
from .storage import FileKeyValueStore, KeyValueStore
from .validator import check_validation, create_validation

logger = logging.getLogger(__name__)


class PasswordManager:
    """Main class that combines the session, the vault codec and storage"""

    def __init__(self, store: Optional[KeyValueStore] = None):
        """
        Initialize the password manager.

        Args:
            store: Where envelopes and preferences are kept
                (default: FileKeyValueStore at config.default_store_path())
        """
        self.store = store if store is not None else FileKeyValueStore(config.default_store_path())
        self.session = Session()
        self._vault: Optional[Vault] = None

    # -- lifecycle ---------------------------------------------------------

    def has_vault(self) -> bool:
        """A vault exists once its validation envelope has been stored"""
        return self.store.get(config.VALIDATION_KEY) is not None

    def setup(self, master_password: str) -> None:
        """
        Create a new, empty vault protected by the master password.

        Raises:
            VaultExistsError: If a vault already exists
            WeakMasterPasswordError: If the password is too short
        """
        if self.has_vault():
            raise VaultExistsError("Vault already exists! Use unlock() instead.")

        if len(master_password) < config.MIN_MASTER_PASSWORD_LENGTH:
            raise WeakMasterPasswordError(
                f"Master password must be at least {config.MIN_MASTER_PASSWORD_LENGTH} characters long"
            )

        vault = Vault()
        self._store_envelopes(vault, master_password)

        self.session.login(master_password, self._validation())
        self._vault = vault
        logger.info("Created new vault")

    def unlock(self, master_password: str) -> bool:
        """
        Unlock the vault using the master password.

        The password is checked against the validation envelope before the
        vault envelope is touched.

        Returns:
            True if unlocked successfully, False if wrong password

        Raises:
            VaultNotFoundError: If no vault has been set up
        """
        validation = self._validation()
        if validation is None:
            raise VaultNotFoundError("No vault exists! Create one with setup() first.")

        self.lock()
        if not self.session.login(master_password, validation):
            return False

        try:
            self._vault = self._load_vault()
        except BaseException:
            self.lock()
            raise

        logger.info("Vault unlocked (%d entries)", len(self._vault.entries))
        return True

    async def unlock_async(self, master_password: str) -> bool:
        """unlock() off the calling thread; key derivation takes a while"""
        return await asyncio.to_thread(self.unlock, master_password)

    def lock(self) -> None:
        """Lock the vault and drop the master password and cached entries"""
        if self._vault is not None or self.session.is_authenticated:
            logger.info("Vault locked")
        self.session.logout()
        self._vault = None

    def is_unlocked(self) -> bool:
        return self._vault is not None and self.session.is_authenticated

    def change_master_password(self, current_password: str, new_password: str) -> bool:
        """
        Re-seal the vault and validation envelope under a new master password.

        Returns:
            True if successful, False if current password is wrong
        """
        if len(new_password) < config.MIN_MASTER_PASSWORD_LENGTH:
            raise WeakMasterPasswordError(
                f"Master password must be at least {config.MIN_MASTER_PASSWORD_LENGTH} characters long"
            )

        validation = self._validation()
        if validation is None or not check_validation(current_password, validation):
            return False

        if not self.is_unlocked():
            self.unlock(current_password)

        self._store_envelopes(self._vault, new_password)

        self.session.login(new_password, self._validation())
        logger.info("Master password changed")
        return True

    def reset(self) -> None:
        """Delete the vault, the validation envelope and every preference"""
        self.lock()
        for key in config.ALL_KEYS:
            self.store.remove(key)
        logger.warning("All vault data removed")

    # -- entries -----------------------------------------------------------

    @property
    def vault(self) -> Vault:
        if not self.is_unlocked():
            raise VaultLockedError("Vault is locked! Call unlock() first.")
        return self._vault

    def entries(self) -> List[VaultRecord]:
        return list(self.vault.entries)

    def get_entry(self, entry_id: str) -> VaultRecord:
        entry = self.vault.find(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def add_entry(
        self,
        title: str,
        website: str = "",
        username: str = "",
        password: str = "",
        notes: str = "",
        tags: Optional[List[str]] = None,
    ) -> VaultRecord:
        """
        Add a new record and persist the vault.

        Returns:
            The stored record, with its generated id
        """
        entry = VaultRecord(
            title=title,
            website=website,
            username=username,
            password=password,
            notes=notes,
            tags=tags or [],
        )
        self.vault.entries.append(entry)
        self._save()
        return entry

    def update_entry(self, entry_id: str, **changes) -> VaultRecord:
        """
        Update fields of an existing record.

        Args:
            entry_id: Id of the record
            **changes: title, website, username, password, notes and/or tags

        Raises:
            EntryNotFoundError: If there is no such record
            ValueError: If an unknown or immutable field is passed
        """
        entry = self.get_entry(entry_id)
        entry.update(**changes)
        self._save()
        return entry

    def delete_entry(self, entry_id: str) -> None:
        entry = self.get_entry(entry_id)
        self.vault.entries.remove(entry)
        self._save()

    def search(self, query: str = "", tag: Optional[str] = None) -> List[VaultRecord]:
        """
        Find records by text and/or tag.

        Args:
            query: Case-insensitive text looked up in title, website, username and notes
            tag: Only records carrying exactly this tag
        """
        results = self.vault.entries
        if query:
            results = [e for e in results if e.matches(query)]
        if tag:
            results = [e for e in results if tag in e.tags]
        return list(results)

    def all_tags(self) -> List[str]:
        return sorted({tag for entry in self.vault.entries for tag in entry.tags})

    def export(self, format_type: str = 'json', include_passwords: bool = True) -> str:
        """Export the opened vault as plaintext JSON or CSV"""
        return VaultExporter().export(self.vault, format_type, include_passwords)

    # -- preferences -------------------------------------------------------

    def biometric_enabled(self) -> bool:
        return self.store.get(config.BIOMETRIC_ENABLED_KEY) == "true"

    def set_biometric_enabled(self, enabled: bool) -> None:
        self.store.set(config.BIOMETRIC_ENABLED_KEY, "true" if enabled else "false")

    def auto_lock_timeout(self) -> int:
        """Minutes of inactivity before locking (default 5)"""
        value = self.store.get(config.AUTO_LOCK_TIMEOUT_KEY)
        try:
            return int(value) if value else config.DEFAULT_AUTO_LOCK_MINUTES
        except ValueError:
            logger.warning("Ignoring invalid auto-lock timeout %r", value)
            return config.DEFAULT_AUTO_LOCK_MINUTES

    def set_auto_lock_timeout(self, minutes: int) -> None:
        if minutes < 0:
            raise ValueError("Auto-lock timeout cannot be negative")
        self.store.set(config.AUTO_LOCK_TIMEOUT_KEY, str(int(minutes)))

    # -- persistence -------------------------------------------------------

    def _validation(self) -> Optional[EncryptedEnvelope]:
        raw = self.store.get(config.VALIDATION_KEY)
        return EncryptedEnvelope.from_json(raw) if raw is not None else None

    def _load_vault(self) -> Vault:
        raw = self.store.get(config.VAULT_DATA_KEY)
        if raw is None:
            # Validation exists but the vault was never written; start empty
            logger.warning("Validation envelope found without vault data")
            return Vault()
        return open_vault(EncryptedEnvelope.from_json(raw), self.session.master_password)

    def _store_envelopes(self, vault: Vault, master_password: str) -> None:
        """Write the vault and validation envelopes together, never one without the other"""
        self.store.update({
            config.VAULT_DATA_KEY: seal_vault(vault, master_password).to_json(),
            config.VALIDATION_KEY: create_validation(master_password).to_json(),
        })

    def _save(self) -> None:
        """Re-seal the whole vault with fresh salt and IV and overwrite storage"""
        envelope = seal_vault(self.vault, self.session.master_password)
        self.store.set(config.VAULT_DATA_KEY, envelope.to_json())
