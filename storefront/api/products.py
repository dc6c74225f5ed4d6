from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_product_repository
from storefront.core.text import normalize_text
from storefront.services.catalog import ProductRepository, list_products

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
def products(
    category: str | None = None,
    search: str | None = None,
    sort: str | None = None,
    repo: ProductRepository = Depends(get_product_repository),
):
    return [p.to_json() for p in list_products(repo, category=category, search=search, sort=sort)]


@router.get("/{product_id}")
def product_detail(product_id: str, repo: ProductRepository = Depends(get_product_repository)):
    product = repo.get(normalize_text(product_id))
    if not product:
        raise HTTPException(status_code=404, detail="Urun bulunamadi.")
    return product.to_json()
