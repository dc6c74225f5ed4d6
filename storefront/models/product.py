"""Katalog ürünü: fiyat TL tam sayı, stok yalnızca sipariş akışı ile değişir."""
from pydantic import Field

from .document import Document


class Product(Document):
    id: str
    name: str
    category: str = ""
    price: int = Field(default=0, ge=0)
    old_price: int | None = None
    image: str = ""
    stock: int = Field(default=0, ge=0)
    sizes: list[str] = Field(default_factory=list)
    description: str = ""
    featured: bool = False
    new: bool = False
