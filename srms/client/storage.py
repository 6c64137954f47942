"""File-backed key/value store playing the part of browser local storage."""

import json
import logging
import os
import tempfile
from typing import Any

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                contents = json.load(handle)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        return contents if isinstance(contents, dict) else {}

    def _write_all(self, contents: dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(contents, handle, indent=2)
            os.replace(temp_path, self.path)
        except OSError:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        contents = self._read_all()
        contents[key] = value
        self._write_all(contents)

    def remove_item(self, key: str) -> None:
        contents = self._read_all()
        if key in contents:
            del contents[key]
            self._write_all(contents)

    def clear(self) -> None:
        self._write_all({})

    def keys(self) -> list[str]:
        return list(self._read_all())
