"""
models.py - Vault records and the vault document
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import EncodingError

VAULT_VERSION = "1.0.0"

# Fields a caller may change after creation. `id` and `created_at` are fixed.
EDITABLE_FIELDS = ("title", "website", "username", "password", "notes", "tags")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean_tags(tags) -> List[str]:
    """Strip, drop blanks and duplicates, keep first-seen order"""
    cleaned = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


@dataclass
class VaultRecord:
    """One stored credential"""

    title: str
    website: str = ""
    username: str = ""
    password: str = ""
    notes: str = ""
    tags: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=_now)
    updated_at: str = ""

    def __post_init__(self):
        self.tags = _clean_tags(self.tags)
        if not self.updated_at:
            self.updated_at = self.created_at

    def __repr__(self):
        # Keep secrets out of tracebacks and log lines
        return f"VaultRecord(id={self.id!r}, title={self.title!r}, website={self.website!r})"

    def update(self, **changes) -> None:
        """
        Change editable fields in place and refresh updated_at.

        Raises:
            ValueError: If an unknown or immutable field is passed
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        for name, value in changes.items():
            if name == "tags":
                value = _clean_tags(value)
            setattr(self, name, value)
        self.updated_at = _now()

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title, website, username and notes"""
        query = query.lower()
        return any(
            query in value.lower()
            for value in (self.title, self.website, self.username, self.notes)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "website": self.website,
            "username": self.username,
            "password": self.password,
            "notes": self.notes,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VaultRecord":
        if not isinstance(data, dict):
            raise EncodingError("Vault entry must be an object")

        try:
            values = {
                "id": data["id"],
                "title": data["title"],
                "website": data.get("website", ""),
                "username": data.get("username", ""),
                "password": data.get("password", ""),
                "notes": data.get("notes", ""),
                "created_at": data["createdAt"],
                "updated_at": data.get("updatedAt", ""),
            }
        except KeyError as e:
            raise EncodingError(f"Vault entry is missing field {e}") from e

        for name, value in values.items():
            if not isinstance(value, str):
                raise EncodingError(f"Vault entry field '{name}' must be a string")

        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise EncodingError("Vault entry tags must be a list of strings")

        return cls(tags=tags, **values)


@dataclass
class Vault:
    """
    The whole vault: every record plus a schema version.

    Always encrypted and decrypted as one unit, never per record.
    """

    entries: List[VaultRecord] = field(default_factory=list)
    version: str = VAULT_VERSION

    def find(self, entry_id: str) -> Optional[VaultRecord]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vault":
        if not isinstance(data, dict):
            raise EncodingError("Vault document must be an object")

        entries = data.get("entries")
        version = data.get("version")
        if not isinstance(entries, list) or not isinstance(version, str):
            raise EncodingError("Vault document needs an 'entries' list and a 'version' string")

        return cls(entries=[VaultRecord.from_dict(e) for e in entries], version=version)
