from src.storage.base import Collection, PersistenceAdapter
from src.storage.dynamodb_store import DynamoDBStore
from src.storage.local_store import LocalStore

__all__ = [
    "Collection",
    "DynamoDBStore",
    "LocalStore",
    "PersistenceAdapter",
]
