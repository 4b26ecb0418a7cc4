"""DynamoDB deposu testleri (boto3 resource MagicMock ile)."""

import asyncio
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from src.config import StoreConfig
from src.models.errors import ItemNotFound, StorageUnavailableError
from src.storage import Collection, DynamoDBStore


def _run(coro):
    return asyncio.run(coro)


def _client_error(code, operation="UpdateItem"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def _create_store():
    """Tablo adına göre ayrı mock tablolar döndüren resource ile depo oluşturur."""
    tables = {}

    def table(name):
        if name not in tables:
            tables[name] = MagicMock()
            tables[name].name = name
        return tables[name]

    resource = MagicMock()
    resource.Table.side_effect = table
    store = DynamoDBStore(StoreConfig(region="us-west-2", table_prefix="Test-"), dynamodb_resource=resource)
    return store, tables, resource


class TestReads:

    def test_tables_use_prefix(self):
        store, tables, _ = _create_store()
        assert store.connected is True
        assert "Test-Inventory" in tables
        assert "Test-StockTransactions" in tables
        assert len(tables) == 7

    def test_list_paginates_and_converts_decimals(self):
        store, tables, _ = _create_store()
        inventory = tables["Test-Inventory"]
        inventory.scan.side_effect = [
            {"Items": [{"id": "1", "stock": Decimal("10.5")}], "LastEvaluatedKey": {"id": "1"}},
            {"Items": [{"id": "2", "stock": Decimal("3")}]},
        ]
        rows = _run(store.list(Collection.INVENTORY, order_by="id"))
        assert rows == [{"id": "1", "stock": 10.5}, {"id": "2", "stock": 3}]
        assert inventory.scan.call_args_list[1].kwargs == {"ExclusiveStartKey": {"id": "1"}}

    def test_get(self):
        store, tables, _ = _create_store()
        table = tables["Test-Equipment"]
        table.get_item.return_value = {"Item": {"id": "1", "cycle_days": Decimal("30")}}
        assert _run(store.get(Collection.EQUIPMENT, "1")) == {"id": "1", "cycle_days": 30}
        table.get_item.assert_called_with(Key={"id": "1"})

        table.get_item.return_value = {}
        assert _run(store.get(Collection.EQUIPMENT, "2")) is None


class TestWrites:

    def test_upsert_uses_batch_writer(self):
        store, tables, _ = _create_store()
        table = tables["Test-Inventory"]
        batch = table.batch_writer.return_value.__enter__.return_value
        _run(store.upsert(Collection.INVENTORY, [{"id": "1", "stock": 2.5}]))
        batch.put_item.assert_called_once_with(Item={"id": "1", "stock": Decimal("2.5")})

    def test_delete(self):
        store, tables, _ = _create_store()
        _run(store.delete(Collection.SOP_DOCUMENTS, "d1"))
        tables["Test-SOPDocuments"].delete_item.assert_called_once_with(Key={"id": "d1"})

    def test_adjust_stock_is_atomic_add(self):
        store, tables, _ = _create_store()
        table = tables["Test-Inventory"]
        table.update_item.return_value = {"Attributes": {"stock": Decimal("7.5")}}

        assert _run(store.adjust_stock("1", -2.5)) == 7.5
        kwargs = table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"id": "1"}
        assert kwargs["UpdateExpression"] == "ADD stock :delta"
        assert kwargs["ExpressionAttributeValues"] == {":delta": Decimal("-2.5")}
        assert "ConditionExpression" in kwargs

    def test_adjust_missing_item(self):
        store, tables, _ = _create_store()
        tables["Test-Inventory"].update_item.side_effect = _client_error("ConditionalCheckFailedException")
        with pytest.raises(ItemNotFound):
            _run(store.adjust_stock("missing", 1))

    def test_client_error_becomes_storage_unavailable(self):
        store, tables, _ = _create_store()
        tables["Test-Inventory"].update_item.side_effect = _client_error("ProvisionedThroughputExceededException")
        with pytest.raises(StorageUnavailableError):
            _run(store.adjust_stock("1", 1))

        tables["Test-Equipment"].scan.side_effect = _client_error("ResourceNotFoundException", "Scan")
        with pytest.raises(StorageUnavailableError):
            _run(store.list(Collection.EQUIPMENT))


class TestConnection:

    def test_unconfigured_store_is_disconnected(self):
        store = DynamoDBStore()
        assert store.connected is False
        assert _run(store.list(Collection.EQUIPMENT)) == []
        assert _run(store.get(Collection.EQUIPMENT, "1")) is None
        with pytest.raises(StorageUnavailableError):
            _run(store.upsert(Collection.EQUIPMENT, [{"id": "1"}]))
        with pytest.raises(StorageUnavailableError):
            _run(store.adjust_stock("1", 1))

    def test_check_connection(self):
        store, _, resource = _create_store()
        assert _run(store.check_connection()) is True
        resource.meta.client.describe_table.assert_called_with(TableName="Test-Inventory")

        resource.meta.client.describe_table.side_effect = _client_error("ResourceNotFoundException", "DescribeTable")
        assert _run(store.check_connection()) is False
        assert store.connected is False
        assert _run(store.list(Collection.INVENTORY)) == []
