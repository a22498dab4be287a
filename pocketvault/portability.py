"""
portability.py - Export vault records as JSON or CSV text
"""
import csv
import json
from io import StringIO
from typing import List

from .models import Vault, VaultRecord

HIDDEN = "***HIDDEN***"

CSV_COLUMNS = ['title', 'website', 'username', 'password', 'notes', 'tags', 'createdAt', 'updatedAt']


class VaultExporter:
    """Export vault records to plaintext formats"""

    SUPPORTED_FORMATS = {
        'json': 'Vault document (same shape as the encrypted payload)',
        'csv': 'Generic CSV (title,website,username,password,...)',
    }

    def export(self, vault: Vault, format_type: str, include_passwords: bool = False) -> str:
        """
        Export a vault.

        Args:
            vault: The opened vault
            format_type: 'json' or 'csv'
            include_passwords: Whether to include the actual secrets

        Returns:
            Exported text
        """
        if format_type not in self.SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format: {format_type}")

        entries = [self._prepare(entry, include_passwords) for entry in vault.entries]

        if format_type == 'json':
            return self._export_json(entries, vault.version)
        return self._export_csv(entries)

    def _prepare(self, entry: VaultRecord, include_passwords: bool) -> dict:
        data = entry.to_dict()
        if not include_passwords:
            data['password'] = HIDDEN
        return data

    def _export_json(self, entries: List[dict], version: str) -> str:
        return json.dumps({'entries': entries, 'version': version}, indent=2, ensure_ascii=False)

    def _export_csv(self, entries: List[dict]) -> str:
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_COLUMNS)

        for data in entries:
            writer.writerow([
                ';'.join(data['tags']) if column == 'tags' else data[column]
                for column in CSV_COLUMNS
            ])

        return output.getvalue()
