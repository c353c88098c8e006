"""
Host persistence backends.

A flat string-keyed store: one string value per key, no transactions, no
expiry. Backends raise PersistenceError; the keyed store catches it.
"""

import hashlib
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol

import structlog

from .exceptions import PersistenceError

logger = structlog.get_logger(__name__)


class StorageBackend(Protocol):
    """The host key-value API the keyed store runs against."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class InMemoryBackend:
    """Dictionary-backed store, the process-local equivalent of browser storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise PersistenceError("Stored values must be strings", details={"key": key})
        self._data[key] = value

    def remove(self, key: str) -> None:
        """Remove a key. Used by hosts; the keyed store never deletes."""
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class FileBackend:
    """
    One file per key under a root directory.

    Keys are sanitized into file names so they cannot escape the root, with a
    hash suffix so distinct keys never collide.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._ensure_root()
        logger.info("File storage backend initialized", root=str(self.root))

    def _ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Error creating storage root directory", root=str(self.root), error=str(e))
            raise PersistenceError("Error creating storage root directory", details={"root": str(self.root)}) from e

    def _sanitize_key(self, key: str) -> str:
        """
        Sanitize a key for filesystem safety.

        Format: {safe_prefix}_{hash_suffix}
        Example: saved-customers_1a2b3c4d
        """
        safe_prefix = re.sub(r"[^a-zA-Z0-9_-]", "", key)[:40]
        hash_suffix = hashlib.sha256(key.encode("utf-8")).hexdigest()[:8]
        return f"{safe_prefix}_{hash_suffix}"

    def path_for(self, key: str) -> Path:
        return self.root / f"{self._sanitize_key(key)}.dat"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading stored key", path=str(path), error=str(e))
            raise PersistenceError("Error reading stored key", details={"key": key}) from e

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_name = None
        try:
            # Readers never see a partial value
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.root, prefix=".tmp_", delete=False
            ) as f:
                tmp_name = f.name
                f.write(value)
            os.replace(tmp_name, path)
        except (OSError, TypeError) as e:
            logger.error("Error writing stored key", path=str(path), error=str(e))
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError("Error writing stored key", details={"key": key}) from e

    def remove(self, key: str) -> None:
        """Remove a key. Used by hosts; the keyed store never deletes."""
        path = self.path_for(key)
        if not path.exists():
            return
        try:
            path.unlink()
        except OSError as e:
            logger.error("Error deleting stored key", path=str(path), error=str(e))
            raise PersistenceError("Error deleting stored key", details={"key": key}) from e
        logger.info("Deleted stored key", path=str(path))
