"""Çalışma kümesi - depodaki tüm koleksiyonların anlık kopyası.

Uzak depodan gelen her değişiklik bildirimi tüm kümenin yeniden
okunmasını tetikler (artımlı yama yapılmaz).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from src.models.maintenance import (
    Equipment,
    InventoryItem,
    ServiceRecord,
    SOPCategory,
    SOPDocument,
    StockTransaction,
)
from src.storage.base import Collection, PersistenceAdapter

logger = logging.getLogger(__name__)


@dataclass
class WorkingSet:
    equipment: list[Equipment] = field(default_factory=list)
    records: list[ServiceRecord] = field(default_factory=list)
    inventory: list[InventoryItem] = field(default_factory=list)
    transactions: list[StockTransaction] = field(default_factory=list)
    sop_categories: list[SOPCategory] = field(default_factory=list)
    sop_documents: list[SOPDocument] = field(default_factory=list)
    connected: bool = True


async def load_working_set(store: PersistenceAdapter) -> WorkingSet:
    """Tüm koleksiyonları eşzamanlı okur."""
    equipment, records, inventory, transactions, categories, documents = await asyncio.gather(
        store.list(Collection.EQUIPMENT, order_by="name"),
        store.list(Collection.RECORDS, order_by="performed_date", descending=True),
        store.list(Collection.INVENTORY, order_by="name"),
        store.list(Collection.TRANSACTIONS, order_by="timestamp", descending=True),
        store.list(Collection.SOP_CATEGORIES, order_by="name"),
        store.list(Collection.SOP_DOCUMENTS, order_by="title"),
    )
    return WorkingSet(
        equipment=[Equipment.from_dict(r) for r in equipment],
        records=[ServiceRecord.from_dict(r) for r in records],
        inventory=[InventoryItem.from_dict(r) for r in inventory],
        transactions=[StockTransaction.from_dict(r) for r in transactions],
        sop_categories=[SOPCategory.from_dict(r) for r in categories],
        sop_documents=[SOPDocument.from_dict(r) for r in documents],
        connected=store.connected,
    )


class ChangeListener:
    """Değişiklik bildiriminde çalışma kümesini baştan yükler ve aboneye iletir."""

    def __init__(
        self,
        store: PersistenceAdapter,
        on_reload: Callable[[WorkingSet], Optional[Awaitable[None]]],
    ):
        self.store = store
        self._on_reload = on_reload
        self._closed = False
        self.reload_count = 0

    async def notify(self, collection: Optional[Collection] = None) -> Optional[WorkingSet]:
        """Bir değişiklik bildirimi işler; kapatılmışsa sonuç atılır."""
        if self._closed:
            return None
        logger.debug("Değişiklik bildirimi: %s", collection.value if collection else "*")
        working_set = await load_working_set(self.store)
        if self._closed:
            logger.debug("Dinleyici kapandı, yeniden yükleme sonucu atıldı")
            return None
        self.reload_count += 1
        result = self._on_reload(working_set)
        if asyncio.iscoroutine(result):
            await result
        return working_set

    def close(self) -> None:
        self._closed = True
