"""Depo yapılandırması çözümleme.

Öncelik sırası: koddaki sabit değerler -> ortam değişkenleri -> yerel
override dosyası. İlk eksiksiz yapılandırma kazanır; hiçbiri yoksa yerel
JSON deposuna düşülür.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

from src.storage.base import PersistenceAdapter
from src.storage.dynamodb_store import DynamoDBStore
from src.storage.local_store import LocalStore

logger = logging.getLogger(__name__)

DEFAULT_OVERRIDE_PATH = Path.home() / ".lubetrack" / "store_config.json"
DEFAULT_LOCAL_PATH = Path.home() / ".lubetrack" / "data.json"


@dataclass
class StoreConfig:
    region: str
    table_prefix: str = ""
    endpoint_url: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.region) and self.region != "undefined"


class ConfigProvider(Protocol):
    name: str

    def load(self) -> Optional[StoreConfig]:
        ...


class StaticConfigProvider:
    """Kod içinde sabitlenmiş yapılandırma."""

    name = "static"

    def __init__(self, region: Optional[str] = None, table_prefix: str = "", endpoint_url: Optional[str] = None):
        self._config = StoreConfig(region or "", table_prefix, endpoint_url)

    def load(self) -> Optional[StoreConfig]:
        return self._config if self._config.is_complete else None


class EnvConfigProvider:
    """LUBETRACK_* ortam değişkenlerinden yapılandırma okur."""

    name = "env"

    def __init__(self, environ: Optional[dict] = None):
        self._environ = environ if environ is not None else os.environ

    def load(self) -> Optional[StoreConfig]:
        region = self._environ.get("LUBETRACK_AWS_REGION") or self._environ.get("AWS_DEFAULT_REGION")
        prefix = self._environ.get("LUBETRACK_TABLE_PREFIX")
        # Prefix tanımlı değilse uzak depo kullanılmak istenmiyor demektir
        if not region or prefix is None:
            return None
        config = StoreConfig(
            region=region,
            table_prefix=prefix,
            endpoint_url=self._environ.get("LUBETRACK_DYNAMODB_ENDPOINT") or None,
        )
        return config if config.is_complete else None


class LocalOverrideProvider:
    """CLI'dan kaydedilen JSON override dosyası."""

    name = "local_override"

    def __init__(self, path: Union[str, Path] = DEFAULT_OVERRIDE_PATH):
        self.path = Path(path)

    def load(self) -> Optional[StoreConfig]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = StoreConfig(
                region=data.get("region", ""),
                table_prefix=data.get("table_prefix", ""),
                endpoint_url=data.get("endpoint_url"),
            )
        except (OSError, json.JSONDecodeError, AttributeError) as e:
            logger.warning("Override dosyası okunamadı: %s (%s)", self.path, e)
            return None
        return config if config.is_complete else None

    def save(self, config: StoreConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(asdict(config), f, indent=2)
        logger.info("Depo yapılandırması kaydedildi: %s", self.path)


def default_providers() -> list[ConfigProvider]:
    return [StaticConfigProvider(), EnvConfigProvider(), LocalOverrideProvider()]


def resolve_store_config(providers: Optional[Sequence[ConfigProvider]] = None) -> Optional[StoreConfig]:
    """Sağlayıcıları sırayla dener, ilk eksiksiz yapılandırmayı döndürür."""
    for provider in providers if providers is not None else default_providers():
        config = provider.load()
        if config is not None:
            logger.info("Depo yapılandırması bulundu: %s", provider.name)
            return config
    return None


def build_store(
    config: Optional[StoreConfig] = None,
    local_path: Optional[Union[str, Path]] = DEFAULT_LOCAL_PATH,
) -> PersistenceAdapter:
    """Yapılandırma varsa DynamoDB, yoksa yerel depo oluşturur."""
    if config is not None and config.is_complete:
        return DynamoDBStore(config)
    logger.info("Uzak depo yapılandırılmamış, yerel depo kullanılıyor: %s", local_path)
    return LocalStore(local_path)
