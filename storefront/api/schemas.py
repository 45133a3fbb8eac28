"""API schemas for the storefront API.

Pydantic models for response serialization. Wire names are camelCase;
Python attribute names stay snake_case.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ApiModel(BaseModel):
    """Base model accepting both attribute names and wire aliases."""

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(ApiModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    success: bool = Field(default=False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")


class NamedRecordSchema(ApiModel):
    """Brand or category record."""

    id: str = Field(..., description="Record identifier")
    name: str = Field(..., description="Display name")


# ============================================================================
# Product Schemas
# ============================================================================


class SizeQuantitySchema(ApiModel):
    """Stock held for one size."""

    size: int = Field(..., description="Numeric size")
    quantity: int = Field(..., description="Units in stock")


class ProductSchema(ApiModel):
    """Product representation."""

    id: str = Field(..., description="Product identifier")
    name: str = Field(..., description="Product name")
    slug: str = Field(..., description="URL-safe unique identifier")
    description: str | None = Field(default=None, description="Product description")
    price: int = Field(..., description="Price in whole currency units")
    color: str | None = Field(default=None, description="Color label")
    brand: str = Field(..., description="Brand name")
    category: str = Field(..., description="Category name")
    size_quantity: list[SizeQuantitySchema] = Field(
        default_factory=list, alias="sizeQuantity", description="Stocked sizes"
    )
    is_active: bool = Field(..., alias="isActive")
    is_featured: bool = Field(default=False, alias="isFeatured")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class ProductListResponse(ApiModel):
    """Page of products with the global facet options."""

    success: bool = True
    count: int = Field(..., description="Products matching the filter, all pages")
    products: list[ProductSchema] = Field(..., description="Products in this page")
    color_options: list[str] = Field(..., alias="colorOptions")
    brand_options: list[str] = Field(..., alias="brandOptions")
    category_options: list[str] = Field(..., alias="categoryOptions")


class ProductResponse(ApiModel):
    """Single product."""

    success: bool = True
    data: ProductSchema


class FeaturedProductsResponse(ApiModel):
    """Featured products."""

    success: bool = True
    products: list[ProductSchema]


class FilterOptionsResponse(ApiModel):
    """All filter values, independent of any query."""

    success: bool = True
    colors: list[str]
    brands: list[NamedRecordSchema]
    category: list[NamedRecordSchema]
