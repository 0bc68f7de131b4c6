# tbx/core/memory.py

"""
Per-client learned mapping store ("memory").

Each client has a flat list of confirmed (name, parent) -> category
mappings, persisted as one CSV file per client. Writes go through upsert,
which is last-write-wins on the (name_norm, parent_norm) key and serialized
per client. Reads never block and never fail: a missing or corrupt file is
an empty memory.
"""

import csv
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from tbx.models import MemoryMapping
from tbx.core.normalizers import normalize_name

logger = logging.getLogger(__name__)

MEMORY_COLUMNS = [
    "client_id",
    "name_norm",
    "parent_norm",
    "category",
    "source",
    "updated_at",
]

_UNSAFE_CLIENT_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def match_exact(
    mappings: list[MemoryMapping],
    name_norm: str,
    parent_norm: Optional[str] = None,
) -> Optional[MemoryMapping]:
    """
    Exact memory lookup.

    Tries (name, parent) when a parent is given, then falls back to name
    alone. First match in insertion order wins.
    """
    if parent_norm:
        for mapping in mappings:
            if mapping.name_norm == name_norm and mapping.parent_norm == parent_norm:
                return mapping

    for mapping in mappings:
        if mapping.name_norm == name_norm:
            return mapping

    return None


class MemoryStore:
    """CSV-backed store of per-client memory mappings."""

    def __init__(self, memory_dir: str | Path):
        self.memory_dir = Path(memory_dir)
        self.memory_dir.mkdir(parents=True, exist_ok=True)

        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # ============================================
    # Reads
    # ============================================

    def load(self, client_id: str) -> list[MemoryMapping]:
        """Load a client's mappings. Missing or unreadable files yield []."""
        # Distinct ids may sanitize to the same file; rows carry their owner
        return [
            m for m in self._read(self.path_for(client_id))
            if m.client_id == client_id
        ]

    def _read(self, path: Path) -> list[MemoryMapping]:
        if not path.exists():
            return []

        try:
            with path.open(newline="", encoding="utf-8") as f:
                return [
                    MemoryMapping.model_validate(_row_to_record(row))
                    for row in csv.DictReader(f)
                ]
        except (OSError, UnicodeDecodeError, csv.Error, ValidationError) as e:
            # A learning aid must never block classification
            logger.warning("Ignoring unreadable memory file %s: %s", path.name, e)
            return []

    def find_exact(
        self,
        client_id: str,
        name_norm: str,
        parent_norm: Optional[str] = None,
    ) -> Optional[MemoryMapping]:
        """Exact lookup against the client's stored memory."""
        return match_exact(self.load(client_id), name_norm, parent_norm)

    # ============================================
    # Writes
    # ============================================

    def save(self, client_id: str, mappings: list[MemoryMapping]) -> None:
        """
        Overwrite the client's whole collection.

        Written to a temp file and swapped in with os.replace, so readers
        see either the old or the new file, never a partial one. Rows of
        other clients sharing the file are kept.
        """
        path = self.path_for(client_id)

        with self._lock_for(path.name):
            others = [m for m in self._read(path) if m.client_id != client_id]

            fd, tmp_name = tempfile.mkstemp(
                dir=self.memory_dir, prefix=f".{path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
                    writer = csv.DictWriter(f, fieldnames=MEMORY_COLUMNS)
                    writer.writeheader()
                    for mapping in others + list(mappings):
                        writer.writerow(_mapping_to_row(mapping))
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    def upsert(self, mapping: MemoryMapping) -> None:
        """
        Insert or replace a mapping keyed by (name_norm, parent_norm).

        Full read-modify-write under the client's lock.
        """
        # Keyed by file: distinct ids can sanitize to the same path
        with self._lock_for(self.path_for(mapping.client_id).name):
            mappings = [
                m for m in self.load(mapping.client_id)
                if m.key != mapping.key
            ]
            mappings.append(mapping)
            self.save(mapping.client_id, mappings)

        logger.info(
            "Memory updated for client %r: %r -> %r (%s)",
            mapping.client_id, mapping.name_norm, mapping.category, mapping.source,
        )

    def remember(
        self,
        client_id: str,
        name: str,
        category: str,
        parent_name: Optional[str] = None,
        source: str = "user",
    ) -> MemoryMapping:
        """Record a confirmed category for a raw account name."""
        mapping = MemoryMapping(
            client_id=client_id,
            name_norm=normalize_name(name),
            parent_norm=normalize_name(parent_name),
            category=category,
            source=source,
        )
        self.upsert(mapping)
        return mapping

    # ============================================
    # Helpers
    # ============================================

    def path_for(self, client_id: str) -> Path:
        """Storage path for a client, with path-hostile characters replaced."""
        safe_client_id = _UNSAFE_CLIENT_CHARS.sub("_", client_id)
        return self.memory_dir / f"{safe_client_id}_memory.csv"

    def _lock_for(self, key: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock


def _row_to_record(row: dict) -> dict:
    # DictReader fills missing columns with None
    record = {k: v for k, v in row.items() if k in MEMORY_COLUMNS and v is not None}
    if not record.get("updated_at"):
        record.pop("updated_at", None)
    return record


def _mapping_to_row(mapping: MemoryMapping) -> dict:
    return {
        "client_id": mapping.client_id,
        "name_norm": mapping.name_norm,
        "parent_norm": mapping.parent_norm or "",
        "category": mapping.category,
        "source": mapping.source,
        "updated_at": mapping.updated_at.isoformat(),
    }
