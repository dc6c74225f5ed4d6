"""
Düz JSON dosyası koleksiyonları: ürünler ve siparişler.

Her koleksiyon dosyanın tamamını okur, bellekte değiştirir ve tamamını geri yazar.
Aynı süreç içindeki istekler koleksiyon başına tek bir kilitle sıraya girer;
birden fazla süreç aynı dosyaya yazarsa son yazan kazanır.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

from .config import settings

logger = logging.getLogger(__name__)

PRODUCTS_FILE = "products.json"
ORDERS_FILE = "orders.json"


class Collection(Protocol):
    lock: threading.RLock

    def load(self) -> list[dict[str, Any]]: ...

    def save(self, items: list[dict[str, Any]]) -> None: ...


class JsonCollection:
    """Tek bir JSON dizi dosyası (ör. data/orders.json)."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock = threading.RLock()

    def ensure(self) -> None:
        """Dosya yoksa boş dizi ile oluşturur."""
        if not self.path.exists():
            self.save([])

    def load(self) -> list[dict[str, Any]]:
        """
        Koleksiyonu okur. Dosya yoksa, boşsa veya JSON bozuksa boş liste döner
        (bozuk dosya uyarı olarak loglanır, bir sonraki yazma ile üzerine yazılır).
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        raw = raw.lstrip("\ufeff")
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Bozuk JSON koleksiyonu boş kabul edildi: %s (%s)", self.path, e)
            return []
        if not isinstance(data, list):
            logger.warning("JSON koleksiyonu dizi değil, boş kabul edildi: %s", self.path)
            return []
        return data

    def save(self, items: list[dict[str, Any]]) -> None:
        """Geçici dosyaya yazıp rename ile atomik olarak değiştirir."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.stem}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, ensure_ascii=False, indent=2)
                f.write("\n")
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise


class MemoryCollection:
    """Bellek içi koleksiyon; testlerde JSON dosyası yerine enjekte edilir."""

    def __init__(self, items: list[dict[str, Any]] | None = None):
        self._items = copy.deepcopy(items or [])
        self.lock = threading.RLock()

    def load(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._items)

    def save(self, items: list[dict[str, Any]]) -> None:
        self._items = copy.deepcopy(items)


@dataclass
class DataStore:
    products: Collection
    orders: Collection

    @classmethod
    def in_memory(
        cls,
        products: list[dict[str, Any]] | None = None,
        orders: list[dict[str, Any]] | None = None,
    ) -> "DataStore":
        return cls(products=MemoryCollection(products), orders=MemoryCollection(orders))

    @classmethod
    def from_directory(cls, data_dir: Path) -> "DataStore":
        data_dir = Path(data_dir)
        return cls(
            products=JsonCollection(data_dir / PRODUCTS_FILE),
            orders=JsonCollection(data_dir / ORDERS_FILE),
        )

    def ensure(self) -> None:
        for collection in (self.products, self.orders):
            if isinstance(collection, JsonCollection):
                collection.ensure()


@lru_cache
def _default_store() -> DataStore:
    return DataStore.from_directory(settings.data_dir)


def get_store() -> DataStore:
    """FastAPI dependency: ayarlardaki data_dir altındaki JSON koleksiyonları."""
    return _default_store()
