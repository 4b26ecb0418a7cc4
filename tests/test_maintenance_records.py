"""Ekipman, bakım tamamlama ve fotoğraf temizliği testleri."""

import asyncio
from dataclasses import replace
from datetime import date
from unittest.mock import AsyncMock

import pytest

from src.models.errors import (
    EquipmentNotFound,
    PartialFailureError,
    RecordNotFound,
    StorageUnavailableError,
    ValidationError,
)
from src.models.maintenance import PhotoAttachment
from src.services.maintenance_records import MaintenanceRecordService
from src.storage import Collection, LocalStore

TODAY = date(2024, 3, 10)


def _run(coro):
    return asyncio.run(coro)


def _create_service(store=None):
    return MaintenanceRecordService(store or LocalStore(), today_provider=lambda: TODAY)


def _add_motor(service, last="2024-02-05", cycle=30):
    return _run(service.add_equipment(
        "Main Conveyor Motor", "Motor", "Zone A", "Lithium Grease EP2", cycle, last, capacity="40g",
    ))


def _photos(count):
    return [PhotoAttachment(id=f"p{i}", data_url="data:image/jpeg;base64,AAAA", comment=f"c{i}") for i in range(count)]


class TestEquipment:

    def test_add_computes_next_date(self):
        service = _create_service()
        motor = _add_motor(service)
        assert motor.next_service_date == "2024-03-06"
        assert _run(service.get_equipment(motor.id)).capacity == "40g"

    def test_update_recomputes_next_date(self):
        service = _create_service()
        motor = _add_motor(service)
        updated = _run(service.update_equipment(replace(motor, cycle_days=90, next_service_date="2099-01-01")))
        assert updated.next_service_date == "2024-05-05"

    @pytest.mark.parametrize("cycle", [0, -1, 1.5])
    def test_invalid_cycle(self, cycle):
        service = _create_service()
        with pytest.raises(ValidationError):
            _add_motor(service, cycle=cycle)

    def test_invalid_last_date(self):
        service = _create_service()
        with pytest.raises(ValidationError):
            _add_motor(service, last="05/02/2024")
        assert _run(service.list_equipment()) == []

    def test_delete_keeps_records(self):
        service = _create_service()
        motor = _add_motor(service)
        _run(service.complete_task(motor.id, "2024-03-08"))
        _run(service.delete_equipment(motor.id))
        records = _run(service.list_records())
        assert len(records) == 1
        assert records[0].equipment_name == "Main Conveyor Motor"

    def test_missing_equipment(self):
        service = _create_service()
        with pytest.raises(EquipmentNotFound):
            _run(service.get_equipment("missing"))
        with pytest.raises(EquipmentNotFound):
            _run(service.delete_equipment("missing"))

    def test_due_tasks(self):
        service = _create_service()
        overdue = _add_motor(service, last="2024-02-05")
        _add_motor(service, last="2024-03-01")
        due = _run(service.due_tasks())
        assert [e.id for e in due] == [overdue.id]


class TestCompleteTask:

    def test_completion_advances_schedule(self):
        service = _create_service()
        motor = _add_motor(service, last="2024-01-01")
        record = _run(service.complete_task(motor.id, "2024-02-05", notes="ok", performer="Ali"))

        refreshed = _run(service.get_equipment(motor.id))
        assert refreshed.last_service_date == "2024-02-05"
        assert refreshed.next_service_date == "2024-03-06"
        assert record.equipment_name == "Main Conveyor Motor"
        assert record.performed_by == "Ali"
        assert record.notes == "ok"

    def test_override_next_date(self):
        service = _create_service()
        motor = _add_motor(service)
        _run(service.complete_task(motor.id, "2024-03-10", next_date="2024-03-20"))
        assert _run(service.get_equipment(motor.id)).next_service_date == "2024-03-20"

    def test_defaults_for_blank_fields(self):
        service = _create_service()
        motor = _add_motor(service)
        record = _run(service.complete_task(motor.id, "2024-03-10"))
        assert record.performed_by == "N/A"
        assert record.notes == "Routine lubrication"

    def test_photos_are_kept_on_record(self):
        service = _create_service()
        motor = _add_motor(service)
        record = _run(service.complete_task(motor.id, "2024-03-10", photos=_photos(2)))
        stored = _run(service.list_records(motor.id))[0]
        assert stored.id == record.id
        assert [p.comment for p in stored.photos] == ["c0", "c1"]

    def test_unknown_equipment(self):
        service = _create_service()
        with pytest.raises(EquipmentNotFound):
            _run(service.complete_task("missing", "2024-03-10"))

    def test_invalid_date_writes_nothing(self):
        service = _create_service()
        motor = _add_motor(service)
        with pytest.raises(ValidationError):
            _run(service.complete_task(motor.id, "yesterday"))
        assert _run(service.list_records()) == []

    def test_partial_failure_reports_persisted_record(self):
        store = LocalStore()
        service = _create_service(store)
        motor = _add_motor(service)
        original_upsert = store._upsert

        async def fail_on_equipment(collection, items):
            if collection == Collection.EQUIPMENT:
                raise StorageUnavailableError("down")
            await original_upsert(collection, items)

        store._upsert = AsyncMock(side_effect=fail_on_equipment)

        with pytest.raises(PartialFailureError) as exc_info:
            _run(service.complete_task(motor.id, "2024-03-10"))

        persisted = exc_info.value.persisted
        assert [r.id for r in _run(service.list_records())] == [persisted.id]
        assert _run(service.get_equipment(motor.id)).last_service_date == "2024-02-05"


class TestRecords:

    def test_list_newest_first(self):
        service = _create_service()
        motor = _add_motor(service)
        _run(service.complete_task(motor.id, "2024-01-10"))
        _run(service.complete_task(motor.id, "2024-03-01"))
        _run(service.complete_task(motor.id, "2024-02-10"))
        dates = [r.performed_date for r in _run(service.list_records())]
        assert dates == ["2024-03-01", "2024-02-10", "2024-01-10"]

    def test_edit_and_delete(self):
        service = _create_service()
        motor = _add_motor(service)
        record = _run(service.complete_task(motor.id, "2024-03-10"))
        _run(service.edit_record(replace(record, notes="Bearing noise")))
        assert _run(service.list_records())[0].notes == "Bearing noise"
        _run(service.delete_record(record.id))
        assert _run(service.list_records()) == []
        # takvim geriye dönük değişmez
        assert _run(service.get_equipment(motor.id)).last_service_date == "2024-03-10"

    def test_missing_record(self):
        service = _create_service()
        motor = _add_motor(service)
        record = _run(service.complete_task(motor.id, "2024-03-10"))
        with pytest.raises(RecordNotFound):
            _run(service.edit_record(replace(record, id="missing")))
        with pytest.raises(RecordNotFound):
            _run(service.delete_record("missing"))


class TestPhotoRetention:

    def test_old_photos_purged_record_kept(self):
        service = _create_service()
        motor = _add_motor(service)
        old = _run(service.complete_task(motor.id, "2024-01-30", photos=_photos(2)))
        recent = _run(service.complete_task(motor.id, "2024-03-01", photos=_photos(1)))

        removed = _run(service.purge_expired_photos(30))
        assert removed == 2

        records = {r.id: r for r in _run(service.list_records())}
        assert records[old.id].photos == []
        assert records[old.id].notes == "Routine lubrication"
        assert len(records[recent.id].photos) == 1

    def test_purge_is_idempotent(self):
        service = _create_service()
        motor = _add_motor(service)
        _run(service.complete_task(motor.id, "2024-01-30", photos=_photos(2)))
        assert _run(service.purge_expired_photos(30)) == 2
        assert _run(service.purge_expired_photos(30)) == 0

    def test_cutoff_day_is_kept(self):
        service = _create_service()
        motor = _add_motor(service)
        _run(service.complete_task(motor.id, "2024-02-09", photos=_photos(1)))
        assert _run(service.purge_expired_photos(30)) == 0

    def test_zero_retention_disables_purge(self):
        service = _create_service()
        motor = _add_motor(service)
        _run(service.complete_task(motor.id, "2020-01-01", photos=_photos(3)))
        assert _run(service.purge_expired_photos(0)) == 0
        assert len(_run(service.list_records())[0].photos) == 3
