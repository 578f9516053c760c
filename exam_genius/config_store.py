"""
Saved generation settings.

A single JSON file plays the part of the browser's local storage: it maps
the storage key to the serialized GenerationConfig string.
"""

import json
import logging
from pathlib import Path

from .config import get_settings
from .schema import GenerationConfig

logger = logging.getLogger(__name__)

STORAGE_KEY = "examGeniusConfig"


class ConfigStore:
    """Save/load one GenerationConfig under STORAGE_KEY."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or get_settings().SETTINGS_FILE)

    def _read_storage(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def save(self, config: GenerationConfig) -> None:
        storage = self._read_storage()
        storage[STORAGE_KEY] = config.model_dump_json(by_alias=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(storage, f, ensure_ascii=False, indent=2)
        logger.info("Saved generation config to %s", self.path)

    def load(self) -> GenerationConfig | None:
        """Return the saved config merged over the defaults, or None if nothing is saved."""
        saved = self._read_storage().get(STORAGE_KEY)
        if saved is None:
            return None
        parsed = json.loads(saved)
        merged = GenerationConfig().model_dump(mode="json", by_alias=True)
        merged.update(parsed)
        return GenerationConfig.model_validate(merged)

    def clear(self) -> None:
        storage = self._read_storage()
        if storage.pop(STORAGE_KEY, None) is not None:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(storage, f, ensure_ascii=False, indent=2)
