# pricewatch/storage/local_storage.py

"""File-backed key/value store holding the persisted client state."""

import json
import logging
from pathlib import Path

from pricewatch.config.settings import Settings

logger = logging.getLogger("pricewatch.storage")


class LocalStorage:
    """String key/value store persisted as a single JSON file.

    The file is re-read on every access: another process (a CLI
    ``logout``, or the user deleting the file) must be visible to a
    running dashboard immediately.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.STORAGE_PATH
        logger.debug("LocalStorage initialised, path=%s", self.path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "Unreadable local storage %s, treating as empty: %s",
                self.path,
                exc,
            )
            return {}
        if not isinstance(data, dict):
            logger.warning("Local storage %s is not an object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        """Drop every key."""
        if self.path.exists():
            self._write({})
        logger.debug("Local storage cleared")

    def keys(self) -> list[str]:
        return list(self._read())
