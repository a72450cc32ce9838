"""
Persisted key-value state for settings and recently used lists.
"""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from resource_picker.models.exceptions import StorageError
from resource_picker.services.base import BaseKeyValueStorage


class MemoryStorage(BaseKeyValueStorage):
    """Key-value storage held in process memory."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    async def update(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)


class JsonFileStorage(BaseKeyValueStorage):
    """Key-value storage persisted as a single JSON object on disk."""

    def __init__(self, file_path: str):
        self.file_path = Path(file_path).expanduser()
        self.logger = logging.getLogger(__name__)
        self._values: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        """
        Load the state file.

        Returns:
            Dict[str, Any]: Stored values, empty if the file does not exist

        Raises:
            StorageError: If the file exists but cannot be parsed
        """
        if not self.file_path.exists():
            return {}

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"State file is not valid JSON: {self.file_path}: {str(e)}")
        except OSError as e:
            raise StorageError(f"Failed to read state file {self.file_path}: {str(e)}")

        if not isinstance(data, dict):
            raise StorageError(f"State file must contain a JSON object: {self.file_path}")

        return data

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    async def update(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)
        self._write()

    def _write(self) -> None:
        """Write all values, replacing the file atomically."""
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=str(self.file_path.parent), prefix='.state-', suffix='.json'
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._values, f, indent=2)
            os.replace(temp_path, self.file_path)
        except OSError as e:
            raise StorageError(f"Failed to write state file {self.file_path}: {str(e)}")

        self.logger.debug(f"Saved state to {self.file_path}")
