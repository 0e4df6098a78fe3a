"""CatalogRegistry: the products on offer during the session."""

import threading

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from pizzeria.catalogue.product import Product

logger = structlog.get_logger(__name__)


class CatalogRegistry:
    """Append-only product collection. Ratings are the only in-place update."""

    def __init__(self) -> None:
        self._products: dict[int, Product] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def next_identity(self) -> int:
        with self._lock:
            product_id = self._next_id
            self._next_id += 1
            return product_id

    def add_product(self, product: Product) -> Product:
        with self._lock:
            if product.product_id in self._products:
                raise ValidationError({"product_id": [f"Product {product.product_id} already exists"]})
            self._products[product.product_id] = product
            self._next_id = max(self._next_id, product.product_id + 1)

        logger.debug("Product added", product_id=product.product_id, name=product.name)
        return product

    def all_products(self) -> list[Product]:
        with self._lock:
            return list(self._products.values())

    def get(self, product_id: int) -> Product:
        with self._lock:
            try:
                return self._products[product_id]
            except KeyError:
                raise ObjectNotFoundError(f"Product {product_id} not found") from None

    def rate(self, product_id: int, rating: int) -> Product:
        with self._lock:
            product = self.get(product_id)
            product.rate(rating)

        logger.info(
            "Product rated",
            product_id=product_id,
            rating=rating,
            average_rating=round(product.average_rating, 2),
            rating_count=product.rating_count,
        )
        return product

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)
