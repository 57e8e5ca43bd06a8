"""
Product catalog service.

Keeps the index of previously billed products used for autocompletion.
Explicit edits (upsert/update) may create entries; usage recording from
invoice issuance only ever touches existing ones.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal

from src.config import get_logger
from src.core.entities.product import Product, normalize_product_name
from src.core.exceptions import DuplicateProductError, ProductNotFoundError, ValidationError
from src.core.interfaces.storage import IProductStore

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _require_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("name", "is required", name)
    return name.strip()


def _require_price(unit_price: Decimal | None) -> Decimal:
    if unit_price is None:
        raise ValidationError("unit_price", "is required")
    if not unit_price.is_finite() or unit_price < 0:
        raise ValidationError("unit_price", "must be zero or positive", unit_price)
    return unit_price


class ProductCatalog:
    """Catalog operations on top of an IProductStore."""

    def __init__(
        self,
        store: IProductStore,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._clock = clock

    async def find(self, name: str) -> Product | None:
        """Case-insensitive exact lookup."""
        normalized = normalize_product_name(name)
        if not normalized:
            return None
        return await self._store.find_by_normalized_name(normalized)

    async def search(self, query: str, limit: int = 10) -> list[Product]:
        """Substring autocomplete, most used first, then most recent."""
        fragment = normalize_product_name(query or "")
        if not fragment:
            return []
        return await self._store.search(fragment, limit=limit)

    async def recent(self, limit: int = 10) -> list[Product]:
        """Most recently used products."""
        return await self._store.list_recent(limit=limit)

    async def list_products(self, limit: int = 50) -> list[Product]:
        """Catalog listing, by recency then usage."""
        return await self._store.list_products(limit=limit)

    async def get(self, product_id: int) -> Product:
        product = await self._store.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def upsert(
        self,
        name: str,
        unit_price: Decimal,
        description: str | None = None,
    ) -> Product:
        """
        Create a product or refresh an existing one.

        An existing entry gets the new price, the description when one is
        given, one more use, and a fresh last_used_at.
        """
        name = _require_name(name)
        unit_price = _require_price(unit_price)

        existing = await self.find(name)
        if existing is None:
            now = self._clock()
            product = Product(
                name=name,
                unit_price=unit_price,
                description=description,
                usage_count=1,
                last_used_at=now,
                created_at=now,
                updated_at=now,
            )
            try:
                created = await self._store.create(product)
            except DuplicateProductError:
                # Lost a concurrent create for the same name
                existing = await self.find(name)
                if existing is None:
                    raise
            else:
                logger.info("product_created", product_id=created.id, name=created.name)
                return created

        return await self._refresh(existing, unit_price, description)

    async def _refresh(
        self,
        product: Product,
        unit_price: Decimal,
        description: str | None,
    ) -> Product:
        now = self._clock()
        product.unit_price = unit_price
        if description is not None:
            product.description = description
        product.usage_count += 1
        product.last_used_at = now
        product.updated_at = now
        updated = await self._store.update(product)
        logger.info(
            "product_refreshed",
            product_id=updated.id,
            name=updated.name,
            usage_count=updated.usage_count,
        )
        return updated

    async def update(
        self,
        product_id: int,
        name: str | None = None,
        unit_price: Decimal | None = None,
        description: str | None = None,
    ) -> Product:
        """Edit a product in place without counting a use."""
        product = await self.get(product_id)

        if name is not None:
            product.name = _require_name(name)
            product.normalized_name = normalize_product_name(product.name)
        if unit_price is not None:
            product.unit_price = _require_price(unit_price)
        if description is not None:
            product.description = description
        product.updated_at = self._clock()

        return await self._store.update(product)

    async def delete(self, product_id: int) -> bool:
        deleted = await self._store.delete(product_id)
        if deleted:
            logger.info("product_deleted", product_id=product_id)
        return deleted

    async def record_usage(self, name: str, at: datetime | None = None) -> bool:
        """
        Count one use of an existing product.

        Returns False, and changes nothing, when the name is not in the
        catalog.
        """
        normalized = normalize_product_name(name)
        if not normalized:
            return False
        return await self._store.increment_usage(normalized, at or self._clock())
