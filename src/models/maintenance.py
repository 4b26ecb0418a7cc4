"""Yağlama bakım takibi veri modelleri."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from src.models.errors import ValidationError


class Direction(str, Enum):
    IN = "IN"
    OUT = "OUT"

    @classmethod
    def parse(cls, value: Any) -> Direction:
        """Saklanan yön değerini okur; eksik veya bilinmeyen yön kabul edilmez."""
        try:
            return cls(value)
        except ValueError as e:
            raise ValidationError(f"Geçersiz hareket yönü: {value!r}") from e

    def signed(self, amount: float) -> float:
        """Hareket yönüne göre işaretli miktarı döndürür."""
        return amount if self is Direction.IN else -amount


class ServiceStatus(str, Enum):
    OK = "OK"
    DUE = "DUE"
    OVERDUE = "OVERDUE"


@dataclass
class Equipment:
    id: str
    name: str
    type: str
    location: str
    lubricant: str
    cycle_days: int
    last_service_date: str  # YYYY-MM-DD
    next_service_date: str  # YYYY-MM-DD
    capacity: str = ""
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "location": self.location,
            "lubricant": self.lubricant,
            "cycle_days": self.cycle_days,
            "last_service_date": self.last_service_date,
            "next_service_date": self.next_service_date,
            "capacity": self.capacity,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Equipment:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            type=data.get("type", ""),
            location=data.get("location", ""),
            lubricant=data.get("lubricant", ""),
            cycle_days=int(data.get("cycle_days", 0)),
            last_service_date=data.get("last_service_date", ""),
            next_service_date=data.get("next_service_date", ""),
            capacity=data.get("capacity", ""),
            notes=data.get("notes") or "",
        )


@dataclass
class PhotoAttachment:
    id: str
    data_url: str  # base64 sıkıştırılmış görsel
    comment: str = ""
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "data_url": self.data_url,
            "comment": self.comment,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PhotoAttachment:
        return cls(
            id=str(data["id"]),
            data_url=data.get("data_url", ""),
            comment=data.get("comment") or "",
            created_at=data.get("created_at", ""),
        )


@dataclass
class ServiceRecord:
    id: str
    equipment_id: str
    equipment_name: str  # tamamlama anındaki ekipman adı
    performed_date: str  # YYYY-MM-DD
    performed_by: str
    notes: str = ""
    photos: list[PhotoAttachment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "equipment_id": self.equipment_id,
            "equipment_name": self.equipment_name,
            "performed_date": self.performed_date,
            "performed_by": self.performed_by,
            "notes": self.notes,
            "photos": [p.to_dict() for p in self.photos],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ServiceRecord:
        return cls(
            id=str(data["id"]),
            equipment_id=str(data.get("equipment_id", "")),
            equipment_name=data.get("equipment_name", ""),
            performed_date=data.get("performed_date", ""),
            performed_by=data.get("performed_by", ""),
            notes=data.get("notes") or "",
            photos=[PhotoAttachment.from_dict(p) for p in data.get("photos") or []],
        )


@dataclass
class InventoryItem:
    id: str
    name: str
    type: str
    stock: float
    unit: str
    min_threshold: float
    initial_stock: float = 0.0  # ledger başlangıç değeri

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_threshold

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "stock": self.stock,
            "unit": self.unit,
            "min_threshold": self.min_threshold,
            "initial_stock": self.initial_stock,
        }

    @classmethod
    def from_dict(cls, data: dict) -> InventoryItem:
        stock = float(data.get("stock", 0.0))
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            type=data.get("type", ""),
            stock=stock,
            unit=data.get("unit", ""),
            min_threshold=float(data.get("min_threshold", 0.0)),
            initial_stock=float(data.get("initial_stock", stock)),
        )


@dataclass
class StockTransaction:
    id: str
    inventory_id: str
    inventory_name: str  # hareket anındaki malzeme adı
    direction: Direction
    amount: float
    user: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def signed_amount(self) -> float:
        return self.direction.signed(self.amount)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "inventory_id": self.inventory_id,
            "inventory_name": self.inventory_name,
            "direction": self.direction.value,
            "amount": self.amount,
            "user": self.user,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StockTransaction:
        return cls(
            id=str(data["id"]),
            inventory_id=str(data.get("inventory_id", "")),
            inventory_name=data.get("inventory_name", ""),
            direction=Direction.parse(data.get("direction")),
            amount=float(data.get("amount", 0.0)),
            user=data.get("user", ""),
            timestamp=data.get("timestamp", ""),
        )


@dataclass
class SOPCategory:
    id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: dict) -> SOPCategory:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            description=data.get("description") or "",
        )


@dataclass
class SOPDocument:
    id: str
    category_id: str
    title: str
    content: str = ""  # markdown veya düz metin
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "title": self.title,
            "content": self.content,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SOPDocument:
        return cls(
            id=str(data["id"]),
            category_id=str(data.get("category_id", "")),
            title=data.get("title", ""),
            content=data.get("content") or "",
            updated_at=data.get("updated_at"),
        )


@dataclass
class AppSettings:
    photo_retention_days: int = 0  # 0 = fotoğraflar süresiz saklanır

    def to_dict(self) -> dict[str, Any]:
        return {"id": "app", "photo_retention_days": self.photo_retention_days}

    @classmethod
    def from_dict(cls, data: dict) -> AppSettings:
        return cls(photo_retention_days=int(data.get("photo_retention_days", 0)))
