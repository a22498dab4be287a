'''
storage.py - Key-value string store the vault is persisted in
PocketVault only ever stores opaque strings under a handful of keys.
'''
import json
import logging
import os
import tempfile
from typing import Dict, Optional

from .errors import EncodingError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Minimal get/set/remove string store"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def update(self, values: Dict[str, str]) -> None:
        """Write several keys at once. Either every key is stored or none is."""
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Store that lives only as long as the process. Useful for tests and embedding."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def update(self, values: Dict[str, str]) -> None:
        self._data.update(values)


class FileKeyValueStore(KeyValueStore):
    """
    Store backed by a single JSON file.

    Every write replaces the whole file atomically, so a crash mid-write
    leaves the previous version intact.
    """

    def __init__(self, filename: str):
        """
        Args:
            filename: Path of the JSON file holding every key
        """
        self.filename = filename

    def exists(self) -> bool:
        return os.path.exists(self.filename)

    def _read(self) -> Dict[str, str]:
        if not self.exists():
            return {}

        try:
            with open(self.filename, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            raise EncodingError(f"Store file {self.filename} is corrupted: {e}") from e

        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise EncodingError(f"Store file {self.filename} is corrupted")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.filename))
        if not os.path.exists(directory):
            os.makedirs(directory, mode=0o700)  # Secure directory

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, sort_keys=True)

            # Owner read/write only (600) on Unix-like systems
            if os.name == 'posix':
                os.chmod(tmp_path, 0o600)

            os.replace(tmp_path, self.filename)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        logger.debug("Stored key %s in %s", key, self.filename)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
            logger.debug("Removed key %s from %s", key, self.filename)

    def update(self, values: Dict[str, str]) -> None:
        data = self._read()
        data.update(values)
        self._write(data)
        logger.debug("Stored keys %s in %s", ", ".join(sorted(values)), self.filename)

    def get_file_info(self) -> Optional[dict]:
        """
        Get information about the storage file.

        Returns:
            Dictionary with file info, or None if file doesn't exist
        """
        if not self.exists():
            return None

        stat = os.stat(self.filename)
        return {
            'size': stat.st_size,
            'modified': stat.st_mtime,
            'permissions': oct(stat.st_mode)[-3:] if os.name == 'posix' else 'N/A'
        }
