"""Çalışma kümesi yeniden yükleme testleri."""

import asyncio

from src.services.working_set import ChangeListener, load_working_set
from src.storage import Collection, DynamoDBStore, LocalStore


def _run(coro):
    return asyncio.run(coro)


def _seeded_store():
    store = LocalStore()
    _run(store.upsert(Collection.INVENTORY, [
        {"id": "2", "name": "Oil", "stock": 10.0},
        {"id": "1", "name": "Grease", "stock": 5.0},
    ]))
    _run(store.upsert(Collection.SOP_CATEGORIES, [{"id": "c1", "name": "Motors"}]))
    return store


class TestWorkingSet:

    def test_load_all_collections(self):
        ws = _run(load_working_set(_seeded_store()))
        assert [i.name for i in ws.inventory] == ["Grease", "Oil"]
        assert ws.sop_categories[0].name == "Motors"
        assert ws.equipment == []
        assert ws.connected is True

    def test_disconnected_store_gives_empty_set(self):
        ws = _run(load_working_set(DynamoDBStore()))
        assert ws.inventory == []
        assert ws.connected is False


class TestChangeListener:

    def test_notification_reloads_everything(self):
        store = _seeded_store()
        received = []
        listener = ChangeListener(store, received.append)

        _run(store.upsert(Collection.INVENTORY, [{"id": "3", "name": "Gear Oil", "stock": 1.0}]))
        ws = _run(listener.notify(Collection.INVENTORY))
        assert len(ws.inventory) == 3
        assert received == [ws]
        assert listener.reload_count == 1

    def test_async_subscriber(self):
        store = _seeded_store()
        received = []

        async def on_reload(ws):
            received.append(len(ws.inventory))

        _run(ChangeListener(store, on_reload).notify())
        assert received == [2]

    def test_closed_listener_discards(self):
        received = []
        listener = ChangeListener(_seeded_store(), received.append)
        listener.close()
        assert _run(listener.notify()) is None
        assert received == []
        assert listener.reload_count == 0
