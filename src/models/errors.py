"""Servis katmanı hata sınıfları."""

from __future__ import annotations

from typing import Any, Optional


class LubeTrackError(Exception):
    """Tüm uygulama hatalarının temel sınıfı."""
    pass


class ValidationError(LubeTrackError):
    """Geçersiz girdi - hiçbir değişiklik yapılmadan reddedilir."""
    pass


class InvalidDateError(ValidationError):
    """Takvim tarihi çözümlenemedi."""
    pass


class NotFoundError(LubeTrackError):
    """Referans verilen kayıt bulunamadı."""

    def __init__(self, entity_id: str, message: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message or f"Kayıt bulunamadı: {entity_id}")


class ItemNotFound(NotFoundError):
    def __init__(self, entity_id: str):
        super().__init__(entity_id, f"Malzeme bulunamadı: {entity_id}")


class TransactionNotFound(NotFoundError):
    def __init__(self, entity_id: str):
        super().__init__(entity_id, f"Stok hareketi bulunamadı: {entity_id}")


class EquipmentNotFound(NotFoundError):
    def __init__(self, entity_id: str):
        super().__init__(entity_id, f"Ekipman bulunamadı: {entity_id}")


class RecordNotFound(NotFoundError):
    def __init__(self, entity_id: str):
        super().__init__(entity_id, f"Bakım kaydı bulunamadı: {entity_id}")


class CategoryNotFound(NotFoundError):
    def __init__(self, entity_id: str):
        super().__init__(entity_id, f"SOP kategorisi bulunamadı: {entity_id}")


class StorageUnavailableError(LubeTrackError):
    """Depolama yapılandırılmamış veya erişilemiyor."""
    pass


class PartialFailureError(LubeTrackError):
    """İki adımlı yazmanın ilk adımı kalıcı oldu, ikincisi başarısız."""

    def __init__(self, message: str, persisted: Any = None):
        self.persisted = persisted
        super().__init__(message)
