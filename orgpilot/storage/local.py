"""Legacy local-storage channel: one JSON object file shared by every tab."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from orgpilot.storage.base import StorageUnavailableError

logger = logging.getLogger(__name__)


class LocalStorageStore:
    """JSON-file key/value store with the same keys as the cookie channel."""

    def __init__(self, path: Path, name: str = "local_storage") -> None:
        self.path = path.expanduser()
        self.name = name

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StorageUnavailableError(self.name, str(e)) from e
        if not isinstance(data, dict):
            raise StorageUnavailableError(self.name, f"expected object in {self.path}")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        """Read-modify-write under an advisory lock, then atomically replace the file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            lock_path = self.path.with_suffix(".lock")
            with open(lock_path, "w", encoding="utf-8") as lock_file:
                try:
                    import fcntl

                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
                except (ImportError, OSError):
                    pass  # fcntl not available or locking failed, proceed best-effort

                data = self._read_all()
                data[key] = value

                tmp_path = self.path.with_suffix(".tmp")
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                    f.flush()
                    os.fsync(f.fileno())

                os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageUnavailableError(self.name, str(e)) from e

        logger.debug("Saved %s=%s to %s", key, value, self.path)
