"""
Product domain entity for the autocomplete catalog.

Products are identified by their case-insensitive name.
"""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


def normalize_product_name(name: str) -> str:
    """Identity key of a product name: trimmed and lower-cased."""
    return name.strip().lower()


class Product(BaseModel):
    """
    A catalog entry with usage statistics.

    ``usage_count`` and ``last_used_at`` drive suggestion ranking.
    """

    id: int | None = None
    name: str
    normalized_name: str = ""
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    description: str | None = None
    usage_count: int = Field(default=1, ge=1)
    last_used_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def compute_normalized_name(self) -> "Product":
        """Auto-compute normalized_name from name if not set."""
        if not self.normalized_name:
            self.normalized_name = normalize_product_name(self.name)
        return self
