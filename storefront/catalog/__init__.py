"""Product Catalog.

Provides query construction, persistence and search operations for the
storefront product catalog.
"""

from storefront.catalog.generator import CatalogGenerator, GeneratorConfig
from storefront.catalog.models import Brand, Category, Product, ProductSize
from storefront.catalog.query import (
    Pagination,
    ProductFilter,
    ProductQuery,
    QueryBuilder,
    SearchRequest,
    SortDirection,
    SortSpec,
)
from storefront.catalog.repository import ProductRepository
from storefront.catalog.service import (
    CatalogService,
    FacetOptions,
    FilterOptions,
    SearchResult,
    get_catalog_service,
)

__all__ = [
    # Models
    "Brand",
    "Category",
    "Product",
    "ProductSize",
    # Query
    "Pagination",
    "ProductFilter",
    "ProductQuery",
    "QueryBuilder",
    "SearchRequest",
    "SortDirection",
    "SortSpec",
    # Generator
    "CatalogGenerator",
    "GeneratorConfig",
    # Repository
    "ProductRepository",
    # Service
    "CatalogService",
    "FacetOptions",
    "FilterOptions",
    "SearchResult",
    "get_catalog_service",
]
