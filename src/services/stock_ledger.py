"""Stok Defteri - malzeme stoğu ile hareket geçmişinin tutarlılığı.

- Giriş/çıkış hareketi kaydı
- Hareket düzenleme (eski etkiyi geri alıp yenisini uygular)
- Hareket silme (ters düzeltme)
- Defter doğrulama: stok == başlangıç stoğu + işaretli hareketlerin toplamı

Aynı malzemeye ait düzeltmeler süreç içinde malzeme bazlı asyncio.Lock ile
sıralanır; süreçler arası güvenlik deponun atomik adjust_stock çağrısından
gelir.
"""

from __future__ import annotations

import asyncio
import logging
import math
import uuid
from contextlib import AsyncExitStack
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Union

from src.models.errors import (
    ItemNotFound,
    StorageUnavailableError,
    TransactionNotFound,
    ValidationError,
)
from src.models.maintenance import Direction, InventoryItem, StockTransaction
from src.storage.base import Collection, PersistenceAdapter

logger = logging.getLogger(__name__)

# Bu eşiğin altındaki net farklar kayan nokta gürültüsü sayılır
DELTA_EPSILON = 0.001


@dataclass
class LedgerEntry:
    entry_id: str
    operation: str
    inventory_id: str
    delta: float
    stock_after: float
    transaction_id: Optional[str] = None
    user: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class StockLedger:
    """Malzeme stoklarını hareket kayıtlarıyla tutarlı tutar."""

    def __init__(self, store: PersistenceAdapter):
        self.store = store
        self._locks: dict[str, asyncio.Lock] = {}
        self._audit_log: list[LedgerEntry] = []

    # --- Yardımcılar ---

    def _lock(self, inventory_id: str) -> asyncio.Lock:
        if inventory_id not in self._locks:
            self._locks[inventory_id] = asyncio.Lock()
        return self._locks[inventory_id]

    async def _hold_locks(self, stack: AsyncExitStack, *inventory_ids: str) -> None:
        # Sabit sıra: iki malzemeli düzenlemelerde kilitlenmeyi önler
        for inventory_id in sorted(set(inventory_ids)):
            await stack.enter_async_context(self._lock(inventory_id))

    @staticmethod
    def _validate_amount(amount: Union[int, float]) -> float:
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
            raise ValidationError(f"Miktar sayı olmalıdır: {amount!r}")
        rounded = round(float(amount), 2)
        if rounded <= 0:
            raise ValidationError(f"Miktar pozitif olmalıdır: {amount}")
        return rounded

    async def get_item(self, inventory_id: str) -> InventoryItem:
        row = await self.store.get(Collection.INVENTORY, inventory_id)
        if row is None:
            raise ItemNotFound(inventory_id)
        return InventoryItem.from_dict(row)

    async def _get_transaction(self, transaction_id: str) -> StockTransaction:
        row = await self.store.get(Collection.TRANSACTIONS, transaction_id)
        if row is None:
            raise TransactionNotFound(transaction_id)
        return StockTransaction.from_dict(row)

    async def _adjust(
        self, inventory_id: str, delta: float, operation: str,
        transaction_id: Optional[str] = None, user: str = "",
    ) -> float:
        stock_after = await self.store.adjust_stock(inventory_id, delta)
        self._audit_log.append(
            LedgerEntry(
                entry_id=str(uuid.uuid4()),
                operation=operation,
                inventory_id=inventory_id,
                delta=round(delta, 2),
                stock_after=stock_after,
                transaction_id=transaction_id,
                user=user,
            )
        )
        logger.info("Stok düzeltildi [%s]: %s %+.2f -> %.2f", operation, inventory_id, delta, stock_after)
        return stock_after

    async def _revert(self, inventory_id: str, delta: float, transaction_id: Optional[str]) -> None:
        """Başarısız işlemin uyguladığı stok düzeltmesini geri alır."""
        try:
            await self._adjust(inventory_id, -delta, "rollback", transaction_id)
        except (StorageUnavailableError, ItemNotFound) as e:
            logger.error("Stok geri alma başarısız: %s %+.2f (%s)", inventory_id, -delta, e)

    # --- Malzeme kayıtları ---

    async def list_items(self) -> list[InventoryItem]:
        rows = await self.store.list(Collection.INVENTORY, order_by="name")
        return [InventoryItem.from_dict(r) for r in rows]

    async def low_stock_items(self) -> list[InventoryItem]:
        return [item for item in await self.list_items() if item.is_low_stock]

    async def create_item(
        self, name: str, type: str, stock: float, unit: str, min_threshold: float = 0.0
    ) -> InventoryItem:
        """Yeni malzeme oluşturur; açılış stoğu defterin başlangıç değeri olur."""
        if not name:
            raise ValidationError("Malzeme adı zorunludur")
        if stock < 0 or min_threshold < 0:
            raise ValidationError("Stok ve minimum eşik negatif olamaz")
        opening = round(float(stock), 2)
        item = InventoryItem(
            id=str(uuid.uuid4()),
            name=name,
            type=type,
            stock=opening,
            unit=unit,
            min_threshold=float(min_threshold),
            initial_stock=opening,
        )
        await self.store.upsert(Collection.INVENTORY, [item.to_dict()])
        logger.info("Malzeme oluşturuldu: %s (%s %s)", item.name, opening, unit)
        return item

    async def update_item(self, item: InventoryItem) -> InventoryItem:
        """Malzemenin tanım alanlarını günceller.

        Stok yalnızca hareketlerle değişir; saklanan stok ve başlangıç stoğu korunur.
        """
        if not item.name:
            raise ValidationError("Malzeme adı zorunludur")
        if item.min_threshold < 0:
            raise ValidationError("Minimum eşik negatif olamaz")
        self.store.ensure_available()
        async with self._lock(item.id):
            stored = await self.get_item(item.id)
            merged = replace(item, stock=stored.stock, initial_stock=stored.initial_stock)
            await self.store.upsert(Collection.INVENTORY, [merged.to_dict()])
        return merged

    async def delete_item(self, inventory_id: str) -> None:
        """Malzemeyi siler; hareketleri geçmiş olarak kalır."""
        self.store.ensure_available()
        async with self._lock(inventory_id):
            await self.get_item(inventory_id)
            await self.store.delete(Collection.INVENTORY, inventory_id)
        logger.info("Malzeme silindi: %s", inventory_id)

    # --- Stok hareketleri ---

    async def list_transactions(self, inventory_id: Optional[str] = None) -> list[StockTransaction]:
        """Hareketleri en yeniden eskiye döndürür."""
        rows = await self.store.list(Collection.TRANSACTIONS, order_by="timestamp", descending=True)
        txs = [StockTransaction.from_dict(r) for r in rows]
        if inventory_id:
            txs = [t for t in txs if t.inventory_id == inventory_id]
        return txs

    async def record_transaction(
        self,
        inventory_id: str,
        direction: Union[Direction, str],
        amount: float,
        user: str,
        timestamp: Optional[str] = None,
    ) -> StockTransaction:
        """Giriş/çıkış hareketi kaydeder ve stoğu günceller."""
        direction = Direction.parse(direction)
        amount = self._validate_amount(amount)
        if not user:
            raise ValidationError("Kullanıcı adı zorunludur")
        self.store.ensure_available()

        async with self._lock(inventory_id):
            item = await self.get_item(inventory_id)
            tx = StockTransaction(
                id=str(uuid.uuid4()),
                inventory_id=item.id,
                inventory_name=item.name,
                direction=direction,
                amount=amount,
                user=user,
                timestamp=timestamp or datetime.now().isoformat(),
            )
            await self._adjust(item.id, tx.signed_amount, "record", tx.id, user)
            try:
                await self.store.upsert(Collection.TRANSACTIONS, [tx.to_dict()])
            except StorageUnavailableError:
                await self._revert(item.id, tx.signed_amount, tx.id)
                raise

        return tx

    async def edit_transaction(self, updated: StockTransaction) -> StockTransaction:
        """Hareketi düzenler: stoğa yalnızca yeni ve eski etki arasındaki fark uygulanır.

        Hareket başka bir malzemeye taşınırsa eski malzemeden eski etki geri
        alınır, yeni malzemeye yeni etki uygulanır.
        """
        amount = self._validate_amount(updated.amount)
        updated = replace(updated, amount=amount, direction=Direction.parse(updated.direction))
        self.store.ensure_available()

        while True:
            seen = await self._get_transaction(updated.id)
            async with AsyncExitStack() as stack:
                await self._hold_locks(stack, seen.inventory_id, updated.inventory_id)
                existing = await self._get_transaction(updated.id)
                if existing.inventory_id != seen.inventory_id:
                    # Kilit alınırken hareket başka malzemeye taşındı
                    logger.debug("Hareket kilit beklerken taşındı, tekrar deneniyor: %s", updated.id)
                    continue
                return await self._apply_edit(existing, updated)

    async def _apply_edit(self, existing: StockTransaction, updated: StockTransaction) -> StockTransaction:
        old_signed = existing.signed_amount
        new_signed = updated.signed_amount

        if existing.inventory_id == updated.inventory_id:
            delta = round(new_signed - old_signed, 2)
            applied: list[tuple[str, float]] = []
            if abs(delta) > DELTA_EPSILON:
                await self._adjust(updated.inventory_id, delta, "edit", updated.id, updated.user)
                applied.append((updated.inventory_id, delta))
        else:
            new_item = await self.get_item(updated.inventory_id)
            updated = replace(updated, inventory_name=new_item.name)
            await self._adjust(new_item.id, new_signed, "edit_move_in", updated.id, updated.user)
            applied = [(new_item.id, new_signed)]
            try:
                await self._adjust(existing.inventory_id, -old_signed, "edit_move_out", updated.id, updated.user)
                applied.append((existing.inventory_id, -old_signed))
            except ItemNotFound:
                logger.warning("Eski malzeme silinmiş, geri alma atlandı: %s", existing.inventory_id)
            except StorageUnavailableError:
                await self._revert(new_item.id, new_signed, updated.id)
                raise

        try:
            await self.store.upsert(Collection.TRANSACTIONS, [updated.to_dict()])
        except StorageUnavailableError:
            for inventory_id, delta in applied:
                await self._revert(inventory_id, delta, updated.id)
            raise
        return updated

    async def delete_transaction(self, transaction_id: str) -> None:
        """Hareketi siler; önce stoktaki etkisini geri alır."""
        self.store.ensure_available()
        while True:
            seen = await self._get_transaction(transaction_id)
            async with self._lock(seen.inventory_id):
                tx = await self._get_transaction(transaction_id)
                if tx.inventory_id != seen.inventory_id:
                    logger.debug("Hareket kilit beklerken taşındı, tekrar deneniyor: %s", transaction_id)
                    continue
                await self._apply_delete(tx)
                return

    async def _apply_delete(self, tx: StockTransaction) -> None:
        reverted = False
        try:
            await self._adjust(tx.inventory_id, -tx.signed_amount, "delete", tx.id, tx.user)
            reverted = True
        except ItemNotFound:
            logger.warning("Malzemesi silinmiş hareket siliniyor: %s", tx.id)

        try:
            await self.store.delete(Collection.TRANSACTIONS, tx.id)
        except StorageUnavailableError:
            if reverted:
                await self._revert(tx.inventory_id, -tx.signed_amount, tx.id)
            raise

    # --- Defter doğrulama ---

    async def verify_ledger(self) -> dict:
        """Her malzeme için stoğu başlangıç + hareket toplamı ile karşılaştırır."""
        items = await self.list_items()
        txs = await self.list_transactions()

        sums: dict[str, float] = {}
        for tx in txs:
            sums[tx.inventory_id] = sums.get(tx.inventory_id, 0.0) + tx.signed_amount

        details: dict[str, dict] = {}
        discrepancies = []
        for item in items:
            expected = round(item.initial_stock + sums.get(item.id, 0.0), 2)
            is_match = abs(expected - item.stock) < 0.005
            details[item.id] = {"expected": expected, "actual": item.stock, "match": is_match}
            if not is_match:
                discrepancies.append({
                    "inventory_id": item.id,
                    "name": item.name,
                    "expected": expected,
                    "actual": item.stock,
                    "difference": round(item.stock - expected, 2),
                })

        if discrepancies:
            logger.warning("Defter tutarsızlığı: %d malzeme", len(discrepancies))

        return {
            "verification_date": datetime.now().isoformat(),
            "items_checked": len(items),
            "discrepancies_found": len(discrepancies),
            "discrepancies": discrepancies,
            "all_valid": not discrepancies,
            "details": details,
        }

    def get_audit_log(self, inventory_id: Optional[str] = None) -> list[LedgerEntry]:
        entries = self._audit_log
        if inventory_id:
            entries = [e for e in entries if e.inventory_id == inventory_id]
        return list(entries)
