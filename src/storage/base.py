"""Kalıcılık adaptörü sözleşmesi.

Servisler yalnızca bu arayüzü çağırır; arkasında yerel JSON deposu veya
DynamoDB tabloları olabilir. Tüm işlemler awaitable'dır.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from src.models.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


class Collection(str, Enum):
    EQUIPMENT = "equipment"
    RECORDS = "records"
    INVENTORY = "inventory"
    TRANSACTIONS = "transactions"
    SOP_CATEGORIES = "sop_categories"
    SOP_DOCUMENTS = "sop_documents"
    SETTINGS = "settings"


def sort_rows(rows: list[dict], order_by: Optional[str], descending: bool = False) -> list[dict]:
    """Satırları verilen alana göre sıralar (alan yoksa boş string)."""
    if not order_by:
        return rows
    return sorted(rows, key=lambda r: str(r.get(order_by) or ""), reverse=descending)


class PersistenceAdapter(ABC):
    """Koleksiyon bazlı list/get/upsert/delete sözleşmesi."""

    name = "base"

    def __init__(self) -> None:
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def ensure_available(self) -> None:
        """Depo kullanılamıyorsa StorageUnavailableError fırlatır."""
        if not self._connected:
            raise StorageUnavailableError(f"Depolama bağlı değil: {self.name}")

    async def list(
        self, collection: Collection, order_by: Optional[str] = None, descending: bool = False
    ) -> list[dict]:
        """Koleksiyondaki tüm kayıtları döndürür; depo yoksa boş liste."""
        if not self._connected:
            logger.warning("Depolama bağlı değil, %s için boş liste döndürülüyor", collection.value)
            return []
        rows = await self._list(collection)
        return sort_rows(rows, order_by, descending)

    async def get(self, collection: Collection, entity_id: str) -> Optional[dict]:
        if not self._connected:
            logger.warning("Depolama bağlı değil, %s/%s okunamadı", collection.value, entity_id)
            return None
        return await self._get(collection, entity_id)

    async def upsert(self, collection: Collection, items: list[dict]) -> None:
        self.ensure_available()
        if not items:
            return
        await self._upsert(collection, items)

    async def delete(self, collection: Collection, entity_id: str) -> None:
        self.ensure_available()
        await self._delete(collection, entity_id)

    async def adjust_stock(self, item_id: str, delta: float) -> float:
        """Malzeme stoğunu delta kadar değiştirir ve yeni stoğu döndürür.

        Malzeme yoksa ItemNotFound fırlatır.
        """
        self.ensure_available()
        return await self._adjust_stock(item_id, round(delta, 2))

    @abstractmethod
    async def _list(self, collection: Collection) -> list[dict]:
        ...

    @abstractmethod
    async def _get(self, collection: Collection, entity_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    async def _upsert(self, collection: Collection, items: list[dict]) -> None:
        ...

    @abstractmethod
    async def _delete(self, collection: Collection, entity_id: str) -> None:
        ...

    @abstractmethod
    async def _adjust_stock(self, item_id: str, delta: float) -> float:
        ...
