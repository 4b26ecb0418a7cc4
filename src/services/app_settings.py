"""Uygulama ayarları (tek kayıt) ve otomatik fotoğraf temizliği."""

from __future__ import annotations

import logging

from src.models.errors import ValidationError
from src.models.maintenance import AppSettings
from src.services.maintenance_records import MaintenanceRecordService
from src.storage.base import Collection, PersistenceAdapter

logger = logging.getLogger(__name__)

SETTINGS_ID = "app"


class SettingsService:
    def __init__(self, store: PersistenceAdapter):
        self.store = store

    async def get(self) -> AppSettings:
        row = await self.store.get(Collection.SETTINGS, SETTINGS_ID)
        return AppSettings.from_dict(row) if row else AppSettings()

    async def save(self, settings: AppSettings) -> AppSettings:
        days = settings.photo_retention_days
        if isinstance(days, bool) or not isinstance(days, int) or days < 0:
            raise ValidationError(f"Fotoğraf saklama süresi negatif olmayan tam sayı olmalıdır: {days!r}")
        await self.store.upsert(Collection.SETTINGS, [settings.to_dict()])
        logger.info("Ayarlar kaydedildi: fotoğraf saklama %d gün", days)
        return settings

    async def run_retention_sweep(self, records: MaintenanceRecordService) -> int:
        """Kayıtlı saklama süresine göre fotoğraf temizliği çalıştırır."""
        settings = await self.get()
        return await records.purge_expired_photos(settings.photo_retention_days)
