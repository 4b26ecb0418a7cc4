"""Yerel anahtar-değer deposu (tek süreç, senkron JSON dosyası)."""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from src.models.errors import ItemNotFound, StorageUnavailableError
from src.storage.base import Collection, PersistenceAdapter

logger = logging.getLogger(__name__)

KEY_PREFIX = "lubetrack_"


class LocalStore(PersistenceAdapter):
    """Her koleksiyonu `lubetrack_<koleksiyon>` anahtarında tutar.

    path verilmezse veri yalnızca bellekte kalır (testler için).
    """

    name = "local"

    def __init__(self, path: Optional[Union[str, Path]] = None):
        super().__init__()
        self.path = Path(path) if path else None
        self._data: dict[str, dict[str, dict]] = {}
        self._load()
        self._connected = True

    def _key(self, collection: Collection) -> str:
        return f"{KEY_PREFIX}{collection.value}"

    def _load(self) -> None:
        if not self.path or not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageUnavailableError(f"Yerel depo okunamadı: {self.path} ({e})") from e
        for key, rows in raw.items():
            self._data[key] = {str(row["id"]): row for row in rows}
        logger.info("Yerel depo yüklendi: %s (%d koleksiyon)", self.path, len(self._data))

    def _flush(self) -> None:
        if not self.path:
            return
        payload = {key: list(rows.values()) for key, rows in self._data.items()}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Yerel depo yazılamadı: %s", e)
            raise StorageUnavailableError(f"Yerel depo yazılamadı: {self.path} ({e})") from e

    def _rows(self, collection: Collection) -> dict[str, dict]:
        return self._data.setdefault(self._key(collection), {})

    async def _list(self, collection: Collection) -> list[dict]:
        return [copy.deepcopy(row) for row in self._rows(collection).values()]

    async def _get(self, collection: Collection, entity_id: str) -> Optional[dict]:
        row = self._rows(collection).get(str(entity_id))
        return copy.deepcopy(row) if row is not None else None

    async def _upsert(self, collection: Collection, items: list[dict]) -> None:
        rows = self._rows(collection)
        previous = {str(item["id"]): rows.get(str(item["id"])) for item in items}
        for item in items:
            rows[str(item["id"])] = copy.deepcopy(item)
        try:
            self._flush()
        except StorageUnavailableError:
            self._restore(rows, previous)
            raise

    async def _delete(self, collection: Collection, entity_id: str) -> None:
        rows = self._rows(collection)
        previous = {str(entity_id): rows.pop(str(entity_id), None)}
        try:
            self._flush()
        except StorageUnavailableError:
            self._restore(rows, previous)
            raise

    @staticmethod
    def _restore(rows: dict[str, dict], previous: dict[str, Optional[dict]]) -> None:
        """Yazılamayan değişikliği bellekten geri alır."""
        for entity_id, row in previous.items():
            if row is None:
                rows.pop(entity_id, None)
            else:
                rows[entity_id] = row

    async def _adjust_stock(self, item_id: str, delta: float) -> float:
        row = self._rows(Collection.INVENTORY).get(str(item_id))
        if row is None:
            raise ItemNotFound(item_id)
        previous = row.get("stock", 0.0)
        row["stock"] = round(float(previous) + delta, 2)
        try:
            self._flush()
        except StorageUnavailableError:
            row["stock"] = previous
            raise
        return row["stock"]
