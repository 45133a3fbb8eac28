"""Catalog service for product operations.

High-level service that combines the query builder and repository reads
into the storefront's search, lookup and facet operations.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.catalog.generator import CatalogGenerator, GeneratorConfig
from storefront.catalog.models import Brand, Category, Product
from storefront.catalog.query import Pagination, ProductQuery, QueryBuilder
from storefront.catalog.repository import ProductRepository
from storefront.domain.exceptions import ProductNotFoundError
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import async_session_factory

T = TypeVar("T")

logger = structlog.get_logger()


@dataclass
class FacetOptions:
    """Filter values offered to clients, independent of any active filter.

    Attributes:
        colors: Distinct product colors across the whole catalog.
        brands: All brand names.
        categories: All category names.
    """

    colors: list[str]
    brands: list[str]
    categories: list[str]


@dataclass
class SearchResult:
    """Result of a product search.

    Attributes:
        products: Products in the requested page window.
        total: Number of products matching the filter (unpaginated).
        facets: Global facet options.
        pagination: Window that produced ``products``.
    """

    products: list[Product]
    total: int
    facets: FacetOptions
    pagination: Pagination


@dataclass
class FilterOptions:
    """Records behind the filter-options endpoint."""

    colors: list[str]
    brands: list[Brand]
    categories: list[Category]


class CatalogService:
    """Service for catalog operations.

    Each repository read runs in its own session so that independent reads
    can be awaited concurrently.

    Example usage:
        service = CatalogService(async_session_factory)
        query = service.build_query({"color": ["red"], "page": "2"})
        result = await service.search_products(query)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        query_builder: QueryBuilder | None = None,
        featured_limit: int = 12,
    ) -> None:
        """Initialize service.

        Args:
            session_factory: Factory for database sessions.
            query_builder: Builder for search queries.
            featured_limit: Maximum number of featured products returned.
        """
        self.session_factory = session_factory
        self.query_builder = query_builder or QueryBuilder()
        self.featured_limit = featured_limit

    async def _read(self, operation: Callable[[ProductRepository], Awaitable[T]]) -> T:
        """Run one repository operation in a fresh session."""
        async with self.session_factory() as session:
            return await operation(ProductRepository(session))

    def build_query(self, params: Mapping[str, Any] | None) -> ProductQuery:
        """Build a product query from raw request parameters."""
        query = self.query_builder.build(params)
        logger.debug(
            "Product query built",
            filter=query.filter,
            sort_field=query.sort.field,
            sort_direction=query.sort.direction.value,
            skip=query.pagination.skip,
            limit=query.pagination.limit,
        )
        return query

    async def search_products(self, query: ProductQuery) -> SearchResult:
        """Search products and fetch the global facet options.

        The page, the count and the three facet lists are independent reads
        and are issued concurrently. Storage errors propagate unchanged.

        Args:
            query: Product query.

        Returns:
            Search result with facets.
        """
        pagination = query.pagination
        products, total, colors, brands, categories = await asyncio.gather(
            self._read(
                lambda repo: repo.find(
                    query.filter,
                    query.sort,
                    skip=pagination.skip,
                    limit=pagination.limit,
                )
            ),
            self._read(lambda repo: repo.count(query.filter)),
            self._read(lambda repo: repo.distinct_values("color")),
            self._read(lambda repo: repo.list_names(Brand)),
            self._read(lambda repo: repo.list_names(Category)),
        )

        logger.info(
            "Product search completed",
            total=total,
            returned=len(products),
            skip=pagination.skip,
            limit=pagination.limit,
        )

        return SearchResult(
            products=list(products),
            total=total,
            facets=FacetOptions(colors=colors, brands=brands, categories=categories),
            pagination=pagination,
        )

    async def get_facet_options(self) -> FacetOptions:
        """Get global facet options.

        Returns:
            Colors, brand names and category names.
        """
        colors, brands, categories = await asyncio.gather(
            self._read(lambda repo: repo.distinct_values("color")),
            self._read(lambda repo: repo.list_names(Brand)),
            self._read(lambda repo: repo.list_names(Category)),
        )
        return FacetOptions(colors=colors, brands=brands, categories=categories)

    async def get_filter_options(self) -> FilterOptions:
        """Get colors plus full brand and category records."""
        colors, brands, categories = await asyncio.gather(
            self._read(lambda repo: repo.distinct_values("color")),
            self._read(lambda repo: repo.list_all(Brand)),
            self._read(lambda repo: repo.list_all(Category)),
        )
        return FilterOptions(colors=colors, brands=brands, categories=categories)

    async def get_product(self, slug: str) -> Product:
        """Get an active product by slug.

        Args:
            slug: Product slug.

        Returns:
            Product.

        Raises:
            ProductNotFoundError: If no active product has this slug.
        """
        product = await self._read(lambda repo: repo.get_by_slug(slug))
        if product is None:
            logger.warning("Product not found", slug=slug)
            raise ProductNotFoundError(slug)
        return product

    async def get_featured_products(self, limit: int | None = None) -> list[Product]:
        """Get featured products.

        Args:
            limit: Maximum results (defaults to the configured featured limit).

        Returns:
            Featured products.
        """
        products = await self._read(
            lambda repo: repo.find_featured(limit=limit or self.featured_limit)
        )
        return list(products)

    async def seed_catalog(
        self,
        config: GeneratorConfig | None = None,
        clear_existing: bool = True,
    ) -> dict[str, Any]:
        """Seed the sample catalog.

        Args:
            config: Generator configuration (defaults to the small catalog).
            clear_existing: Whether to delete existing catalog rows first.

        Returns:
            Seeding result with counts.
        """
        catalog = CatalogGenerator(config or GeneratorConfig.small()).generate_catalog()

        async with self.session_factory() as session:
            repository = ProductRepository(session)

            deleted = 0
            if clear_existing:
                deleted = await repository.delete_all()

            await repository.save_all(catalog.all_rows())
            await session.commit()

        result = {
            "deleted": deleted,
            "products_created": len(catalog.products),
            "inactive": sum(1 for p in catalog.products if not p.is_active),
            "featured": sum(1 for p in catalog.products if p.is_featured),
            "brands": len(catalog.brands),
            "categories": len(catalog.categories),
        }
        logger.info("Catalog seeded", **result)
        return result


def get_catalog_service(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> CatalogService:
    """Create a catalog service from application settings.

    Args:
        session_factory: Session factory (defaults to the configured database).

    Returns:
        CatalogService instance.
    """
    return CatalogService(
        session_factory or async_session_factory,
        QueryBuilder(
            default_limit=settings.default_page_size,
            max_limit=settings.max_page_size,
        ),
        featured_limit=settings.featured_limit,
    )
