"""Ürün kataloğu: JSON koleksiyonu üzerinde depo + listeleme / yönetim işlemleri."""
from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Iterable

from pydantic import ValidationError

from storefront.core.store import Collection
from storefront.core.text import normalize_text, to_int
from storefront.errors import ProductNotFound, StorefrontError
from storefront.models.product import Product

logger = logging.getLogger(__name__)

SORT_PRICE_ASC = "price-asc"
SORT_PRICE_DESC = "price-desc"
SORT_NEW = "new"


class ProductRepository:
    """
    Ürün koleksiyonu. Doğrulanamayan kayıtlar (elle düzenlenmiş, eksik alanlı vb.) listelerde
    uyarı ile atlanır ama dosyadan silinmez; yazma işlemleri sadece hedef kaydı değiştirir.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    @property
    def lock(self):
        return self.collection.lock

    def list(self) -> list[Product]:
        products = []
        for raw in self.collection.load():
            try:
                products.append(Product.model_validate(raw))
            except ValidationError as e:
                logger.warning("Gecersiz urun kaydi atlandi: id=%s (%d hata)", _raw_id(raw, "id"), e.error_count())
        return products

    def get(self, product_id: str) -> Product | None:
        return next((p for p in self.list() if p.id == product_id), None)

    def save_all(self, products: Iterable[Product]) -> None:
        """Koleksiyonun tamamını verilen ürünlerle değiştirir (seed)."""
        self.collection.save([p.to_json() for p in products])

    def add(self, product: Product) -> Product:
        with self.lock:
            raw = self.collection.load()
            raw.append(product.to_json())
            self.collection.save(raw)
        return product

    def update(self, product: Product) -> Product:
        with self.lock:
            raw = self.collection.load()
            for i, item in enumerate(raw):
                if _raw_id(item, "id") == product.id:
                    raw[i] = product.to_json()
                    break
            else:
                raise ProductNotFound(product.id)
            self.collection.save(raw)
        return product

    def delete(self, product_id: str) -> None:
        with self.lock:
            raw = self.collection.load()
            remaining = [item for item in raw if _raw_id(item, "id") != product_id]
            if len(remaining) == len(raw):
                raise ProductNotFound(product_id)
            self.collection.save(remaining)


def _raw_id(item: Any, key: str) -> Any:
    return item.get(key) if isinstance(item, dict) else None


def create_product_id() -> str:
    stamp = _base36(int(time.time() * 1000))
    return f"urun-{stamp}-{1000 + secrets.randbelow(9000)}"


def _base36(n: int) -> str:
    chars = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = chars[r] + out
    return out or "0"


def list_products(
    repo: ProductRepository,
    category: str | None = None,
    search: str | None = None,
    sort: str | None = None,
) -> list[Product]:
    """Kategori ve metin filtresi; sıralama: price-asc, price-desc, new, varsayılan öne çıkanlar."""
    products = repo.list()
    if category and category != "all":
        products = [p for p in products if p.category == category]
    if search:
        q = normalize_text(search).lower()
        products = [
            p
            for p in products
            if q in p.name.lower() or q in p.description.lower() or q in p.category.lower()
        ]
    if sort == SORT_PRICE_ASC:
        products.sort(key=lambda p: p.price)
    elif sort == SORT_PRICE_DESC:
        products.sort(key=lambda p: p.price, reverse=True)
    elif sort == SORT_NEW:
        products.sort(key=lambda p: p.new, reverse=True)
    else:
        products.sort(key=lambda p: p.featured, reverse=True)
    return products


def _sizes(value: Any) -> list[str]:
    if isinstance(value, list):
        return [normalize_text(s) for s in value if normalize_text(s)]
    return [normalize_text(value)] if normalize_text(value) else []


def create_product(repo: ProductRepository, data: dict[str, Any]) -> Product:
    name = normalize_text(data.get("name"))
    category = normalize_text(data.get("category"))
    price = to_int(data.get("price"))
    sizes = _sizes(data.get("sizes"))
    description = normalize_text(data.get("description"))
    if not name or not category or not price or not sizes or not description:
        raise StorefrontError("Urun bilgileri eksik.")
    stock = to_int(data.get("stock")) or 0
    if price < 0 or stock < 0:
        raise StorefrontError("Fiyat ve stok negatif olamaz.")
    product = Product(
        id=create_product_id(),
        name=name,
        category=category,
        price=price,
        old_price=to_int(data.get("oldPrice")) or price,
        image=normalize_text(data.get("image")) or "https://via.placeholder.com/400",
        stock=stock,
        sizes=sizes,
        description=description,
        featured=bool(data.get("featured")),
        new=bool(data.get("new")),
    )
    return repo.add(product)


def update_product(repo: ProductRepository, product_id: str, data: dict[str, Any]) -> Product:
    """Sadece gönderilen alanlar güncellenir."""
    with repo.lock:
        product = repo.get(product_id)
        if not product:
            raise ProductNotFound(product_id)
        changes: dict[str, Any] = {}
        for key in ("name", "category", "image", "description"):
            if data.get(key):
                changes[key] = normalize_text(data[key])
        if data.get("price"):
            changes["price"] = to_int(data["price"])
        if data.get("oldPrice"):
            changes["old_price"] = to_int(data["oldPrice"])
        if data.get("stock") is not None:
            changes["stock"] = to_int(data["stock"])
        if data.get("sizes"):
            changes["sizes"] = _sizes(data["sizes"])
        if data.get("featured") is not None:
            changes["featured"] = bool(data["featured"])
        if data.get("new") is not None:
            changes["new"] = bool(data["new"])
        for key in ("price", "old_price", "stock"):
            if key in changes and (changes[key] is None or changes[key] < 0):
                raise StorefrontError("Fiyat ve stok negatif olamaz.")
        updated = product.model_copy(update=changes)
        return repo.update(updated)
