"""DynamoDB kurulum ve örnek veri testleri."""

import asyncio
from datetime import date
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from data_layer.generators.seed_data import build_seed_data
from data_layer.infrastructure.dynamodb_setup import (
    create_tables,
    delete_tables,
    load_seed_data,
    table_definitions,
)
from src.services.maintenance_records import MaintenanceRecordService
from src.services.stock_ledger import StockLedger
from src.storage import Collection, LocalStore

TODAY = date(2024, 3, 10)


def _not_found():
    return ClientError({"Error": {"Code": "ResourceNotFoundException", "Message": "missing"}}, "DescribeTable")


class TestTableSetup:

    def test_definitions_cover_all_collections(self):
        names = [d["TableName"] for d in table_definitions("Test-")]
        assert len(names) == len(Collection)
        assert "Test-StockTransactions" in names
        assert all(d["KeySchema"] == [{"AttributeName": "id", "KeyType": "HASH"}] for d in table_definitions())

    def test_create_only_missing_tables(self):
        client = MagicMock()

        def describe(TableName):
            if TableName == "Test-Equipment":
                return {"Table": {"TableName": TableName}}
            raise _not_found()

        client.describe_table.side_effect = describe
        created = create_tables(prefix="Test-", client=client)
        assert len(created) == 6
        assert "Test-Equipment" not in created
        assert client.create_table.call_count == 6

    def test_delete_tables(self):
        client = MagicMock()
        delete_tables(prefix="Test-", client=client)
        assert client.delete_table.call_count == 7

    def test_seed_skips_tables_with_data(self):
        resource = MagicMock()
        client = MagicMock()
        client.scan.side_effect = lambda TableName, **kwargs: {"Count": 1 if TableName == "Test-Equipment" else 0}
        loaded = load_seed_data(prefix="Test-", resource=resource, client=client)
        assert "Test-Equipment" not in loaded
        assert loaded["Test-Inventory"] == 3
        assert loaded["Test-SOPCategories"] == 3


class TestSeedData:
    """Örnek veri yüklendiğinde tutarlı bir başlangıç durumu oluşturmalı."""

    def _seeded_store(self):
        store = LocalStore()
        for collection, rows in build_seed_data(TODAY).items():
            asyncio.run(store.upsert(Collection(collection), rows))
        return store

    def test_ledger_is_consistent(self):
        ledger = StockLedger(self._seeded_store())
        result = asyncio.run(ledger.verify_ledger())
        assert result["all_valid"] is True
        assert result["items_checked"] == 3

    def test_due_tasks_relative_to_reference_date(self):
        service = MaintenanceRecordService(self._seeded_store(), today_provider=lambda: TODAY)
        due = asyncio.run(service.due_tasks())
        assert [e.name for e in due] == ["Main Conveyor Motor", "Cooling Fan Bearing"]
