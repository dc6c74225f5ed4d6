"""
Stok defteri: ürün koleksiyonu üzerinde rezervasyon ve iade.

Her çağrı koleksiyonun tamamını okuyup yazar; süreç içi kilit dışında iyimser
eşzamanlılık jetonu yoktur (birden fazla süreçte son yazan kazanır).
"""
import logging

from storefront.errors import InsufficientStock
from storefront.services.catalog import ProductRepository

logger = logging.getLogger(__name__)


class StockLedger:
    def __init__(self, products: ProductRepository):
        self.products = products

    def reserve(self, product_id: str, quantity: int) -> int:
        """Stoktan düşer ve kalan stoku döner; yetersizse InsufficientStock."""
        with self.products.lock:
            product = self.products.get(product_id)
            if product is None:
                raise InsufficientStock(product_id, product_id, 0)
            if quantity > product.stock:
                raise InsufficientStock(product.id, product.name, product.stock)
            product.stock -= quantity
            self.products.update(product)
            return product.stock

    def release(self, product_id: str, quantity: int) -> int | None:
        """Stoku koşulsuz artırır (iptal). Ürün silinmişse atlanır ve None döner."""
        with self.products.lock:
            product = self.products.get(product_id)
            if product is None:
                logger.warning("Stok iadesi atlandı, ürün bulunamadı: product_id=%s quantity=%s", product_id, quantity)
                return None
            product.stock += quantity
            self.products.update(product)
            return product.stock
