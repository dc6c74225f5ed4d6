"""Sipariş ve stok akışının alan hataları; API katmanı bunları HTTP 400/404'e çevirir."""


class StorefrontError(Exception):
    """Tüm mağaza hatalarının tabanı. message kullanıcıya gösterilebilir."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(StorefrontError):
    status_code = 404


class OrderNotFound(NotFoundError):
    def __init__(self, order_no: str):
        self.order_no = order_no
        super().__init__("Siparis bulunamadi.")


class ProductNotFound(NotFoundError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Urun bulunamadi.")


class MissingCustomerFields(StorefrontError):
    def __init__(self, missing_fields: list[str]):
        self.missing_fields = missing_fields
        super().__init__("Musteri bilgileri eksik.")


class EmptyCart(StorefrontError):
    def __init__(self):
        super().__init__("Sepet bos olamaz.")


class InvalidCartLine(StorefrontError):
    """Sepet satırı geçersiz: ürün yok, beden yok veya adet hatalı."""


class InsufficientStock(StorefrontError):
    def __init__(self, product_id: str, name: str, available: int):
        self.product_id = product_id
        self.available = available
        super().__init__(f"Yetersiz stok: {name}. Kalan stok: {available}")


class PaymentRejected(StorefrontError):
    """Kart doğrulaması başarısız; mesaj ilk başarısız kuralı söyler."""


class AlreadyCancelled(StorefrontError):
    def __init__(self, order_no: str):
        self.order_no = order_no
        super().__init__("Bu siparis zaten iptal edilmis.")


class NotCancellable(StorefrontError):
    def __init__(self, order_no: str):
        self.order_no = order_no
        super().__init__("Teslim edilmis siparisler iptal edilemez.")


class InvalidStatus(StorefrontError):
    def __init__(self, status: str):
        self.status = status
        super().__init__("Gecersiz durum degeri.")
