"""Saved model library persisted as a JSON list."""

import json
import logging
import threading
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ..models.asset import ImageAsset
from ..utils.storage import atomic_write_text

logger = logging.getLogger(__name__)


DEDUP_PREFIX_LENGTH = 100

_assets_adapter = TypeAdapter(list[ImageAsset])


class AssetLibrary:
    """Ordered list of saved assets, newest first.

    Two assets count as the same photo when the first 100 characters of
    their payloads match.
    """

    def __init__(self, path: Path):
        self.path = path
        self._lock = threading.Lock()
        self._assets = self._load()

    def _load(self) -> list[ImageAsset]:
        if not self.path.exists():
            return []
        try:
            return _assets_adapter.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning("Failed to load saved models from %s: %s", self.path, e)
            return []

    def _save(self, assets: list[ImageAsset]) -> None:
        data = _assets_adapter.dump_python(assets, mode="json")
        atomic_write_text(self.path, json.dumps(data))

    def entries(self) -> list[ImageAsset]:
        with self._lock:
            return list(self._assets)

    def _is_duplicate(self, asset: ImageAsset) -> bool:
        prefix = asset.payload[:DEDUP_PREFIX_LENGTH]
        return any(a.payload[:DEDUP_PREFIX_LENGTH] == prefix for a in self._assets)

    def save(self, asset: ImageAsset) -> bool:
        """Prepend ``asset`` unless an equivalent photo is already saved.

        Returns False (library unchanged) for a duplicate.
        """
        with self._lock:
            if self._is_duplicate(asset):
                logger.info("Model %s already in library", asset.id)
                return False
            assets = [asset, *self._assets]
            self._save(assets)
            self._assets = assets
        return True

    def delete(self, asset_id: str) -> bool:
        """Remove the entry with ``asset_id``; returns False if absent."""
        with self._lock:
            remaining = [a for a in self._assets if a.id != asset_id]
            if len(remaining) == len(self._assets):
                return False
            self._save(remaining)
            self._assets = remaining
        return True
