"""DynamoDB tabanlı uzak depo.

Her koleksiyon ayrı bir tabloda tutulur (hash key: id). Stok düzeltmesi
sunucu tarafında atomik `ADD` ifadesiyle yapılır, böylece farklı
istemcilerin eşzamanlı hareketleri birbirini ezmez.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from src.models.errors import ItemNotFound, StorageUnavailableError
from src.storage.base import Collection, PersistenceAdapter

if TYPE_CHECKING:
    from src.config import StoreConfig

logger = logging.getLogger(__name__)

TABLE_NAMES = {
    Collection.EQUIPMENT: "Equipment",
    Collection.RECORDS: "ServiceRecords",
    Collection.INVENTORY: "Inventory",
    Collection.TRANSACTIONS: "StockTransactions",
    Collection.SOP_CATEGORIES: "SOPCategories",
    Collection.SOP_DOCUMENTS: "SOPDocuments",
    Collection.SETTINGS: "AppSettings",
}


def to_dynamo(obj: Any) -> Any:
    """float değerleri DynamoDB'nin kabul ettiği Decimal'e çevirir."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: to_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [to_dynamo(i) for i in obj]
    return obj


def from_dynamo(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_dynamo(i) for i in obj]
    return obj


class DynamoDBStore(PersistenceAdapter):
    """boto3 resource üzerinden çalışan kalıcılık adaptörü.

    dynamodb_resource verilirse (testlerde MagicMock) doğrudan kullanılır,
    verilmezse config'ten oluşturulur. İkisi de yoksa depo bağlı değildir.
    """

    name = "dynamodb"

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        dynamodb_resource: Optional[Any] = None,
    ):
        super().__init__()
        self.config = config
        self.table_prefix = config.table_prefix if config else ""
        self.dynamodb = dynamodb_resource
        if self.dynamodb is None and config is not None and config.is_complete:
            self.dynamodb = boto3.resource(
                "dynamodb",
                region_name=config.region,
                endpoint_url=config.endpoint_url,
            )
        self._tables: dict[Collection, Any] = {}
        if self.dynamodb is not None:
            for collection, table_name in TABLE_NAMES.items():
                self._tables[collection] = self.dynamodb.Table(f"{self.table_prefix}{table_name}")
            self._connected = True
            logger.info("DynamoDB deposu hazır (prefix=%r)", self.table_prefix)
        else:
            logger.warning("DynamoDB yapılandırması yok, depo bağlı değil")

    async def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """boto3 çağrısını iş parçacığında çalıştırır ve hataları dönüştürür."""
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            logger.error("DynamoDB hatası [%s]: %s", code, e)
            raise StorageUnavailableError(f"DynamoDB hatası: {code or e}") from e
        except BotoCoreError as e:
            logger.error("DynamoDB bağlantı hatası: %s", e)
            raise StorageUnavailableError(f"DynamoDB erişilemiyor: {e}") from e

    async def check_connection(self) -> bool:
        """Inventory tablosunu sorgulayarak bağlantıyı doğrular."""
        if self.dynamodb is None:
            return False
        table = self._tables[Collection.INVENTORY]
        try:
            await self._call(self.dynamodb.meta.client.describe_table, TableName=table.name)
        except StorageUnavailableError:
            self._connected = False
            return False
        self._connected = True
        return True

    def _scan_all(self, table: Any) -> list[dict]:
        items: list[dict] = []
        kwargs: dict[str, Any] = {}
        while True:
            response = table.scan(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    async def _list(self, collection: Collection) -> list[dict]:
        rows = await self._call(self._scan_all, self._tables[collection])
        return [from_dynamo(row) for row in rows]

    async def _get(self, collection: Collection, entity_id: str) -> Optional[dict]:
        response = await self._call(self._tables[collection].get_item, Key={"id": str(entity_id)})
        item = response.get("Item")
        return from_dynamo(item) if item else None

    def _batch_put(self, table: Any, items: list[dict]) -> None:
        with table.batch_writer(overwrite_by_pkeys=["id"]) as batch:
            for item in items:
                batch.put_item(Item=to_dynamo(item))

    async def _upsert(self, collection: Collection, items: list[dict]) -> None:
        await self._call(self._batch_put, self._tables[collection], items)

    async def _delete(self, collection: Collection, entity_id: str) -> None:
        await self._call(self._tables[collection].delete_item, Key={"id": str(entity_id)})

    def _atomic_add(self, item_id: str, delta: float) -> float:
        table = self._tables[Collection.INVENTORY]
        try:
            response = table.update_item(
                Key={"id": str(item_id)},
                UpdateExpression="ADD stock :delta",
                ConditionExpression=Attr("id").exists(),
                ExpressionAttributeValues={":delta": Decimal(str(delta))},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise ItemNotFound(item_id) from e
            raise
        return float(response["Attributes"]["stock"])

    async def _adjust_stock(self, item_id: str, delta: float) -> float:
        return round(await self._call(self._atomic_add, item_id, delta), 2)
