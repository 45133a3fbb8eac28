"""Product API endpoints.

Provides product search, single-product lookup, filter options, the
featured shelf, and placeholders for the admin write operations.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.api.params import fold_query_params
from storefront.api.schemas import (
    ErrorResponse,
    FeaturedProductsResponse,
    FilterOptionsResponse,
    NamedRecordSchema,
    ProductListResponse,
    ProductResponse,
    ProductSchema,
)
from storefront.catalog.models import Product
from storefront.catalog.service import CatalogService, get_catalog_service
from storefront.domain.exceptions import OperationNotImplementedError
from storefront.infrastructure.database import get_session_factory

router = APIRouter(prefix="/api/v1/product", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> CatalogService:
    """Get catalog service bound to the request's session factory."""
    return get_catalog_service(session_factory)


# ============================================================================
# Converters
# ============================================================================


def product_to_schema(product: Product) -> ProductSchema:
    """Convert Product model to response schema."""
    return ProductSchema.model_validate(product.to_dict())


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search products",
    description=(
        "Paginated, filtered and sorted product search. Query parameters: "
        "page, limit, search, sortBy[value], color, size, brand, "
        "price[minPrice], price[maxPrice], category."
    ),
)
@router.get(
    "/filter",
    response_model=ProductListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search products (filter alias)",
    include_in_schema=False,
)
async def list_products(
    request: Request,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductListResponse:
    """Search products.

    Malformed parameters fall back to their defaults instead of failing.
    Facet options always cover the whole catalog.

    Returns:
        Product page, total count and facet options.
    """
    params = fold_query_params(request.query_params.multi_items())
    query = service.build_query(params)
    result = await service.search_products(query)

    return ProductListResponse(
        count=result.total,
        products=[product_to_schema(p) for p in result.products],
        color_options=result.facets.colors,
        brand_options=result.facets.brands,
        category_options=result.facets.categories,
    )


@router.get(
    "/filter-options",
    response_model=FilterOptionsResponse,
    status_code=status.HTTP_200_OK,
    summary="List filter options",
    description="Get every color, brand and category, independent of any query.",
)
async def get_filter_options(
    service: Annotated[CatalogService, Depends(get_service)],
) -> FilterOptionsResponse:
    """Get global filter options."""
    options = await service.get_filter_options()
    return FilterOptionsResponse(
        colors=options.colors,
        brands=[NamedRecordSchema(**b.to_dict()) for b in options.brands],
        category=[NamedRecordSchema(**c.to_dict()) for c in options.categories],
    )


@router.get(
    "/featured",
    response_model=FeaturedProductsResponse,
    status_code=status.HTTP_200_OK,
    summary="List featured products",
)
async def get_featured_products(
    service: Annotated[CatalogService, Depends(get_service)],
) -> FeaturedProductsResponse:
    """Get featured products."""
    products = await service.get_featured_products()
    return FeaturedProductsResponse(products=[product_to_schema(p) for p in products])


@router.get(
    "/{slug}",
    response_model=ProductResponse,
    status_code=status.HTTP_200_OK,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
    summary="Get product",
)
async def get_product(
    slug: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductResponse:
    """Get an active product by slug.

    Raises:
        ProductNotFoundError: If the slug is unknown or the product is inactive.
    """
    product = await service.get_product(slug)
    return ProductResponse(data=product_to_schema(product))


# ============================================================================
# Admin Placeholders
# ============================================================================


_NOT_IMPLEMENTED = {501: {"model": ErrorResponse, "description": "Not implemented"}}


@router.post(
    "",
    status_code=status.HTTP_501_NOT_IMPLEMENTED,
    responses=_NOT_IMPLEMENTED,
    summary="Create product (not implemented)",
)
async def create_product() -> None:
    raise OperationNotImplementedError("createProduct")


@router.put(
    "/{slug}",
    status_code=status.HTTP_501_NOT_IMPLEMENTED,
    responses=_NOT_IMPLEMENTED,
    summary="Update product (not implemented)",
)
async def update_product(slug: str) -> None:
    raise OperationNotImplementedError("updateProduct")


@router.put(
    "/{slug}/review",
    status_code=status.HTTP_501_NOT_IMPLEMENTED,
    responses=_NOT_IMPLEMENTED,
    summary="Update review (not implemented)",
)
async def update_review(slug: str) -> None:
    raise OperationNotImplementedError("updateReview")
