"""Örnek veri üretici - ilk kurulumda yüklenen ekipman, stok ve SOP kayıtları.

Tarihler referans güne göre hesaplanır, böylece kurulumdan hemen sonra
panoda gecikmiş, bugün yapılacak ve ileri tarihli görevler görünür.
"""
from datetime import date, datetime, timedelta
from typing import Optional

from src.models.maintenance import (
    Direction,
    Equipment,
    InventoryItem,
    ServiceRecord,
    SOPCategory,
    SOPDocument,
    StockTransaction,
)
from src.services.schedule import compute_next_date


def _days(ref: date, offset: int) -> str:
    return (ref + timedelta(days=offset)).isoformat()


def seed_equipment(ref: date) -> list[Equipment]:
    specs = [
        # id, ad, tip, konum, yağlayıcı, periyot, son bakım (gün farkı), kapasite, not
        ("1", "Main Conveyor Motor", "Motor", "Zone A", "Lithium Grease EP2", 30, -35, "40g",
         "Check bearings for abnormal noise"),
        ("2", "Hydraulic Pump P-102", "Pump", "Pump Room", "ISO VG 46 Hydraulic Oil", 90, -88, "200L",
         "Filter element due for replacement"),
        ("3", "Packaging Gearbox", "Gearbox", "Line 3", "Synthetic Gear Oil 220", 180, 0, "5L", ""),
        ("4", "Cooling Fan Bearing", "Fan", "Roof", "Lithium Grease EP2", 14, -14, "15g", ""),
    ]
    equipment = []
    for eq_id, name, eq_type, location, lubricant, cycle, offset, capacity, notes in specs:
        last = _days(ref, offset)
        equipment.append(Equipment(
            id=eq_id, name=name, type=eq_type, location=location, lubricant=lubricant,
            cycle_days=cycle, last_service_date=last,
            next_service_date=compute_next_date(last, cycle),
            capacity=capacity, notes=notes,
        ))
    return equipment


def seed_inventory() -> list[InventoryItem]:
    # Başlangıç stokları, örnek hareketler düşülmeden önceki değerlerdir
    return [
        InventoryItem(id="1", name="Lithium Grease EP2", type="Grease", stock=15.0, unit="kg",
                      min_threshold=5, initial_stock=15.5),
        InventoryItem(id="2", name="ISO VG 46 Hydraulic Oil", type="Hydraulic Oil", stock=180.0, unit="L",
                      min_threshold=50, initial_stock=180.0),
        InventoryItem(id="3", name="Synthetic Gear Oil 220", type="Gear Oil", stock=40.0, unit="L",
                      min_threshold=10, initial_stock=40.0),
    ]


def seed_transactions(now: datetime) -> list[StockTransaction]:
    return [
        StockTransaction(id="t1", inventory_id="1", inventory_name="Lithium Grease EP2",
                         direction=Direction.OUT, amount=0.5, user="Operator", timestamp=now.isoformat()),
    ]


def seed_records(ref: date) -> list[ServiceRecord]:
    return [
        ServiceRecord(id="r1", equipment_id="1", equipment_name="Main Conveyor Motor",
                      performed_date=_days(ref, -35), performed_by="Operator",
                      notes="Routine greasing, running smoothly"),
        ServiceRecord(id="r2", equipment_id="1", equipment_name="Main Conveyor Motor",
                      performed_date=_days(ref, -65), performed_by="Operator",
                      notes="Cleaned grease nipple"),
        ServiceRecord(id="r3", equipment_id="2", equipment_name="Hydraulic Pump P-102",
                      performed_date=_days(ref, -88), performed_by="Technician",
                      notes="Oil level low, topped up 20L"),
        ServiceRecord(id="r4", equipment_id="3", equipment_name="Packaging Gearbox",
                      performed_date=_days(ref, 0), performed_by="Technician",
                      notes="Quarterly service, oil sample taken"),
    ]


def seed_sop(ref: date) -> tuple[list[SOPCategory], list[SOPDocument]]:
    categories = [
        SOPCategory(id="c1", name="Motors", description="Lubrication standards for HV/LV motors"),
        SOPCategory(id="c2", name="Pumps", description="Centrifugal and gear pumps"),
        SOPCategory(id="c3", name="Conveyor Systems", description="Drum and idler lubrication"),
    ]
    documents = [
        SOPDocument(
            id="d1", category_id="c1", title="Induction motor bearing lubrication SOP",
            content=(
                "### 1. Purpose\nStandardize motor bearing lubrication.\n\n"
                "### 2. Tools\n- Grease gun\n- Clean rags\n- Matching grease (usually EP2)\n\n"
                "### 3. Steps\n1. Clean the grease nipple.\n2. Open the drain port if present.\n"
                "3. Inject the nameplate quantity evenly.\n4. Run the motor for 20 minutes.\n"
                "5. Wipe off excess grease and close the drain port."
            ),
            updated_at=_days(ref, -30),
        ),
        SOPDocument(
            id="d2", category_id="c2", title="Hydraulic power unit oil change SOP",
            content=(
                "1. Stop and lock out.\n2. Prepare drip tray, open drain valve.\n"
                "3. Clean tank sediment.\n4. Replace return filter and breather.\n"
                "5. Pump new oil to the specified level."
            ),
            updated_at=_days(ref, -10),
        ),
    ]
    return categories, documents


def build_seed_data(today: Optional[date] = None, now: Optional[datetime] = None) -> dict[str, list[dict]]:
    """Koleksiyon adı -> kayıt listesi eşlemesi döndürür."""
    ref = today or date.today()
    categories, documents = seed_sop(ref)
    return {
        "equipment": [e.to_dict() for e in seed_equipment(ref)],
        "records": [r.to_dict() for r in seed_records(ref)],
        "inventory": [i.to_dict() for i in seed_inventory()],
        "transactions": [t.to_dict() for t in seed_transactions(now or datetime.now())],
        "sop_categories": [c.to_dict() for c in categories],
        "sop_documents": [d.to_dict() for d in documents],
    }
