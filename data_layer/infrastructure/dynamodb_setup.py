"""DynamoDB tablo oluşturma ve örnek veri yükleme.

7 tablo: Equipment, ServiceRecords, Inventory, StockTransactions,
SOPCategories, SOPDocuments, AppSettings (hepsinde hash key: id)
"""
import os
import sys

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
import env_loader  # noqa: F401

from data_layer.generators.seed_data import build_seed_data
from src.storage.base import Collection
from src.storage.dynamodb_store import TABLE_NAMES, to_dynamo

REGION = os.environ.get("AWS_DEFAULT_REGION", "us-west-2")
TABLE_PREFIX = os.environ.get("LUBETRACK_TABLE_PREFIX", "LubeTrack-")
BOTO_CONFIG = Config(retries={"max_attempts": 3})


def table_definitions(prefix: str = TABLE_PREFIX) -> list[dict]:
    """Her koleksiyon için PAY_PER_REQUEST tablo tanımı üretir."""
    return [
        {
            "TableName": f"{prefix}{name}",
            "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
            "AttributeDefinitions": [{"AttributeName": "id", "AttributeType": "S"}],
            "BillingMode": "PAY_PER_REQUEST",
        }
        for name in TABLE_NAMES.values()
    ]


def create_tables(region: str = REGION, prefix: str = TABLE_PREFIX, client=None):
    """Eksik DynamoDB tablolarını oluşturur."""
    dynamodb = client or boto3.client("dynamodb", region_name=region, config=BOTO_CONFIG)

    created = []
    for table_def in table_definitions(prefix):
        table_name = table_def["TableName"]
        try:
            dynamodb.describe_table(TableName=table_name)
            print(f"  ⏭️  {table_name} zaten mevcut, atlanıyor")
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                print(f"  🔨 {table_name} oluşturuluyor...")
                dynamodb.create_table(**table_def)
                # Tablonun aktif olmasını bekle
                waiter = dynamodb.get_waiter("table_exists")
                waiter.wait(TableName=table_name)
                created.append(table_name)
                print(f"  ✓  {table_name} oluşturuldu")
            else:
                raise
    return created


def _table_has_data(client, table_name: str) -> bool:
    """Tabloda veri var mı kontrol eder (hızlı scan, 1 item)."""
    resp = client.scan(TableName=table_name, Limit=1, Select="COUNT")
    return resp.get("Count", 0) > 0


def load_seed_data(region: str = REGION, prefix: str = TABLE_PREFIX, resource=None, client=None):
    """Örnek verileri boş tablolara yükler (doluysa atlar)."""
    dynamodb = resource or boto3.resource("dynamodb", region_name=region, config=BOTO_CONFIG)
    dynamodb_client = client or dynamodb.meta.client
    seed = build_seed_data()

    print("\n📤 DynamoDB'ye örnek veri yükleniyor...\n")
    loaded = {}
    for collection, rows in seed.items():
        table_name = f"{prefix}{TABLE_NAMES[Collection(collection)]}"
        if _table_has_data(dynamodb_client, table_name):
            print(f"  ⏭️  {table_name} zaten dolu, atlanıyor")
            continue
        table = dynamodb.Table(table_name)
        with table.batch_writer() as batch:
            for row in rows:
                batch.put_item(Item=to_dynamo(row))
        loaded[table_name] = len(rows)
        print(f"  ✓  {table_name}: {len(rows)} kayıt yüklendi")
    return loaded


def delete_tables(region: str = REGION, prefix: str = TABLE_PREFIX, client=None):
    """Tüm tabloları siler (dikkatli kullan)."""
    dynamodb = client or boto3.client("dynamodb", region_name=region, config=BOTO_CONFIG)
    for table_def in table_definitions(prefix):
        table_name = table_def["TableName"]
        try:
            dynamodb.delete_table(TableName=table_name)
            print(f"  🗑️  {table_name} silindi")
        except ClientError:
            print(f"  ⏭️  {table_name} bulunamadı, atlanıyor")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "--delete":
        print("🗑️  Tablolar siliniyor...")
        delete_tables()
    else:
        print("🏗️  DynamoDB tabloları oluşturuluyor...\n")
        create_tables()
        load_seed_data()
