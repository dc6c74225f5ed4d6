#!/usr/bin/env python3
"""Boş kataloğa örnek ürünler yazar. Proje kökünden: python3 scripts/seed_catalog.py [--force]"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from storefront.core.store import get_store  # noqa: E402
from storefront.models import Product  # noqa: E402
from storefront.services.catalog import ProductRepository  # noqa: E402

SAMPLE_PRODUCTS = [
    Product(id="urun-basic-tisort", name="Basic Tisort", category="tisort", price=349, old_price=449,
            stock=40, sizes=["S", "M", "L", "XL"], description="Pamuklu, bisiklet yaka basic tisort.",
            featured=True),
    Product(id="urun-oversize-hoodie", name="Oversize Hoodie", category="sweatshirt", price=899, old_price=1099,
            stock=15, sizes=["M", "L", "XL"], description="Kapusonlu, ic yuzu sardonlu oversize hoodie.",
            new=True),
    Product(id="urun-kargo-pantolon", name="Kargo Pantolon", category="pantolon", price=1249, old_price=1249,
            stock=8, sizes=["30", "32", "34"], description="Genis cepli, rahat kesim kargo pantolon."),
]


def main():
    parser = argparse.ArgumentParser(description="Örnek ürünleri yükle")
    parser.add_argument("--force", action="store_true", help="Mevcut kataloğun üzerine yaz")
    args = parser.parse_args()
    repo = ProductRepository(get_store().products)
    if repo.list() and not args.force:
        print("Katalog boş değil, atlandı (--force ile üzerine yazılabilir).")
        return
    repo.save_all(SAMPLE_PRODUCTS)
    print(f"{len(SAMPLE_PRODUCTS)} ürün yazıldı.")


if __name__ == "__main__":
    main()
