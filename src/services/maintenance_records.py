"""Ekipman ve bakım kaydı servisi.

- Ekipman CRUD (sonraki bakım tarihi her zaman yeniden hesaplanır)
- Görev tamamlama: kayıt anlık görüntüsü + ekipman takviminin ilerletilmesi
- Bakım kaydı düzenleme/silme
- Fotoğraf saklama süresi temizliği
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Optional

from src.models.errors import (
    EquipmentNotFound,
    PartialFailureError,
    RecordNotFound,
    StorageUnavailableError,
    ValidationError,
)
from src.models.maintenance import Equipment, PhotoAttachment, ServiceRecord
from src.services.schedule import (
    DateLike,
    compute_next_date,
    list_due_tasks,
    parse_date,
    validate_cycle_days,
)
from src.storage.base import Collection, PersistenceAdapter

logger = logging.getLogger(__name__)

DEFAULT_PERFORMER = "N/A"
DEFAULT_NOTES = "Routine lubrication"


class MaintenanceRecordService:
    """Ekipman takvimi ve bakım geçmişini yönetir."""

    def __init__(self, store: PersistenceAdapter, today_provider: Optional[Callable[[], date]] = None):
        self.store = store
        self._today = today_provider or date.today

    # --- Ekipman ---

    async def list_equipment(self) -> list[Equipment]:
        rows = await self.store.list(Collection.EQUIPMENT, order_by="name")
        return [Equipment.from_dict(r) for r in rows]

    async def get_equipment(self, equipment_id: str) -> Equipment:
        row = await self.store.get(Collection.EQUIPMENT, equipment_id)
        if row is None:
            raise EquipmentNotFound(equipment_id)
        return Equipment.from_dict(row)

    @staticmethod
    def _validate_equipment(name: str, cycle_days: int) -> None:
        if not name:
            raise ValidationError("Ekipman adı zorunludur")
        validate_cycle_days(cycle_days)

    async def add_equipment(
        self,
        name: str,
        type: str,
        location: str,
        lubricant: str,
        cycle_days: int,
        last_service_date: DateLike,
        capacity: str = "",
        notes: str = "",
    ) -> Equipment:
        self._validate_equipment(name, cycle_days)
        last = parse_date(last_service_date).isoformat()
        equipment = Equipment(
            id=str(uuid.uuid4()),
            name=name,
            type=type,
            location=location,
            lubricant=lubricant,
            cycle_days=cycle_days,
            last_service_date=last,
            next_service_date=compute_next_date(last, cycle_days),
            capacity=capacity,
            notes=notes,
        )
        await self.store.upsert(Collection.EQUIPMENT, [equipment.to_dict()])
        logger.info("Ekipman eklendi: %s (sonraki bakım %s)", equipment.name, equipment.next_service_date)
        return equipment

    async def update_equipment(self, equipment: Equipment) -> Equipment:
        """Ekipmanı günceller; sonraki bakım tarihi son tarih + periyottan türetilir."""
        self._validate_equipment(equipment.name, equipment.cycle_days)
        self.store.ensure_available()
        await self.get_equipment(equipment.id)
        last = parse_date(equipment.last_service_date).isoformat()
        updated = replace(
            equipment,
            last_service_date=last,
            next_service_date=compute_next_date(last, equipment.cycle_days),
        )
        await self.store.upsert(Collection.EQUIPMENT, [updated.to_dict()])
        return updated

    async def delete_equipment(self, equipment_id: str) -> None:
        """Ekipmanı siler; bakım kayıtları ad anlık görüntüsüyle kalır."""
        self.store.ensure_available()
        await self.get_equipment(equipment_id)
        await self.store.delete(Collection.EQUIPMENT, equipment_id)
        logger.info("Ekipman silindi: %s", equipment_id)

    async def due_tasks(self) -> list[Equipment]:
        return list_due_tasks(await self.list_equipment(), self._today())

    # --- Görev tamamlama ---

    async def complete_task(
        self,
        equipment_id: str,
        performed_date: DateLike,
        next_date: Optional[DateLike] = None,
        notes: str = "",
        performer: str = "",
        photos: Optional[list[PhotoAttachment]] = None,
    ) -> ServiceRecord:
        """Bakımı tamamlar: önce kayıt yazılır, ardından ekipman takvimi ilerletilir.

        next_date verilmezse periyottan hesaplanır. Kayıt yazıldıktan sonra
        ekipman güncellemesi başarısız olursa PartialFailureError fırlatılır.
        """
        self.store.ensure_available()
        equipment = await self.get_equipment(equipment_id)
        performed = parse_date(performed_date).isoformat()
        if next_date is None:
            next_service = compute_next_date(performed, equipment.cycle_days)
        else:
            next_service = parse_date(next_date).isoformat()

        record = ServiceRecord(
            id=str(uuid.uuid4()),
            equipment_id=equipment.id,
            equipment_name=equipment.name,
            performed_date=performed,
            performed_by=performer or DEFAULT_PERFORMER,
            notes=notes or DEFAULT_NOTES,
            photos=list(photos or []),
        )
        await self.store.upsert(Collection.RECORDS, [record.to_dict()])

        updated = replace(equipment, last_service_date=performed, next_service_date=next_service)
        try:
            await self.store.upsert(Collection.EQUIPMENT, [updated.to_dict()])
        except StorageUnavailableError as e:
            logger.error("Bakım kaydı yazıldı ama ekipman güncellenemedi: %s (%s)", equipment.id, e)
            raise PartialFailureError(
                f"Bakım kaydı {record.id} kaydedildi, ekipman takvimi güncellenemedi: {e}",
                persisted=record,
            ) from e

        logger.info(
            "Bakım tamamlandı: %s %s, sonraki bakım %s (%d fotoğraf)",
            equipment.name, performed, next_service, len(record.photos),
        )
        return record

    # --- Bakım kayıtları ---

    async def list_records(self, equipment_id: Optional[str] = None) -> list[ServiceRecord]:
        """Kayıtları en yeni bakım tarihinden başlayarak döndürür."""
        rows = await self.store.list(Collection.RECORDS, order_by="performed_date", descending=True)
        records = [ServiceRecord.from_dict(r) for r in rows]
        if equipment_id:
            records = [r for r in records if r.equipment_id == equipment_id]
        return records

    async def edit_record(self, record: ServiceRecord) -> ServiceRecord:
        self.store.ensure_available()
        if await self.store.get(Collection.RECORDS, record.id) is None:
            raise RecordNotFound(record.id)
        parse_date(record.performed_date)
        await self.store.upsert(Collection.RECORDS, [record.to_dict()])
        return record

    async def delete_record(self, record_id: str) -> None:
        """Kaydı siler; ekipman takvimi geriye dönük değiştirilmez."""
        self.store.ensure_available()
        if await self.store.get(Collection.RECORDS, record_id) is None:
            raise RecordNotFound(record_id)
        await self.store.delete(Collection.RECORDS, record_id)

    # --- Fotoğraf temizliği ---

    async def purge_expired_photos(self, retention_days: int, today: Optional[DateLike] = None) -> int:
        """Saklama süresini aşan kayıtların fotoğraflarını siler, kayıtları korur.

        Returns:
            Silinen toplam fotoğraf sayısı (retention_days <= 0 ise 0).
        """
        if retention_days <= 0:
            return 0

        ref = parse_date(today) if today is not None else self._today()
        cutoff = ref - timedelta(days=retention_days)

        changed: list[ServiceRecord] = []
        removed = 0
        for record in await self.list_records():
            if not record.photos:
                continue
            try:
                performed = parse_date(record.performed_date)
            except ValidationError:
                logger.warning("Tarihi okunamayan kayıt atlandı: %s", record.id)
                continue
            if performed < cutoff:
                removed += len(record.photos)
                changed.append(replace(record, photos=[]))

        if changed:
            await self.store.upsert(Collection.RECORDS, [r.to_dict() for r in changed])
            logger.info("Fotoğraf temizliği: %d kayıtta %d fotoğraf silindi", len(changed), removed)
        return removed
