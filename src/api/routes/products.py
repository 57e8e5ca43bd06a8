"""
Product catalog endpoints.

Backs line-item autocompletion: search by name fragment, recent products,
and explicit edits. Invoice issuance updates usage counts on its own.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_app_settings, get_product_catalog
from src.application.dto.requests import UpdateProductRequest, UpsertProductRequest
from src.application.dto.responses import ErrorResponse, ProductListResponse, ProductResponse
from src.config import Settings
from src.core.entities.product import Product
from src.core.exceptions import ProductNotFoundError
from src.core.services import ProductCatalog

router = APIRouter(prefix="/api/products", tags=["products"])


def _to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,  # type: ignore[arg-type]
        name=product.name,
        normalized_name=product.normalized_name,
        unit_price=float(product.unit_price),
        description=product.description,
        usage_count=product.usage_count,
        last_used_at=product.last_used_at,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _to_list(products: list[Product]) -> ProductListResponse:
    return ProductListResponse(
        products=[_to_response(p) for p in products],
        total=len(products),
    )


@router.get("", response_model=ProductListResponse)
async def list_products(
    limit: int | None = Query(default=None, ge=1, le=500),
    catalog: ProductCatalog = Depends(get_product_catalog),
    settings: Settings = Depends(get_app_settings),
) -> ProductListResponse:
    """List catalog products, most recently used first."""
    products = await catalog.list_products(limit=limit or settings.catalog.list_limit)
    return _to_list(products)


@router.get("/search", response_model=ProductListResponse)
async def search_products(
    q: str = Query(default="", description="Name fragment, case-insensitive"),
    limit: int | None = Query(default=None, ge=1, le=100),
    catalog: ProductCatalog = Depends(get_product_catalog),
    settings: Settings = Depends(get_app_settings),
) -> ProductListResponse:
    """Autocomplete search, most used first."""
    products = await catalog.search(q, limit=limit or settings.catalog.search_limit)
    return _to_list(products)


@router.get("/recent", response_model=ProductListResponse)
async def recent_products(
    limit: int | None = Query(default=None, ge=1, le=100),
    catalog: ProductCatalog = Depends(get_product_catalog),
    settings: Settings = Depends(get_app_settings),
) -> ProductListResponse:
    """Most recently used products."""
    products = await catalog.recent(limit=limit or settings.catalog.recent_limit)
    return _to_list(products)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def get_product(
    product_id: int,
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> ProductResponse:
    """Get a catalog product by ID."""
    return _to_response(await catalog.get(product_id))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upsert_product(
    request: UpsertProductRequest,
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> ProductResponse:
    """
    Create a product, or refresh the one with the same name.

    Names are compared case-insensitively. Refreshing sets the new price,
    counts one more use, and updates the description when one is given.
    """
    product = await catalog.upsert(
        name=request.name,
        unit_price=Decimal(str(request.unit_price)),
        description=request.description,
    )
    return _to_response(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Product not found"},
        409: {"model": ErrorResponse, "description": "Name already used by another product"},
    },
)
async def update_product(
    product_id: int,
    request: UpdateProductRequest,
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> ProductResponse:
    """Edit a product without counting a use."""
    product = await catalog.update(
        product_id,
        name=request.name,
        unit_price=Decimal(str(request.unit_price)) if request.unit_price is not None else None,
        description=request.description,
    )
    return _to_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def delete_product(
    product_id: int,
    catalog: ProductCatalog = Depends(get_product_catalog),
) -> None:
    """Remove a product from the catalog."""
    deleted = await catalog.delete(product_id)
    if not deleted:
        raise ProductNotFoundError(product_id)
