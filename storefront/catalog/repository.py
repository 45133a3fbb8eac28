"""Product repository for database operations.

Translates ProductFilter / SortSpec values into SQLAlchemy statements and
provides the read operations the catalog service is built on.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.catalog.models import Brand, Category, Product, ProductSize
from storefront.catalog.query import ProductFilter, SortSpec

LIKE_ESCAPE = "\\"

# Public sort names → columns
SORT_COLUMNS: dict[str, Any] = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "price": Product.price,
    "name": Product.name,
    "brand": Product.brand,
    "category": Product.category,
    "color": Product.color,
}

DISTINCT_COLUMNS: dict[str, Any] = {
    "color": Product.color,
    "brand": Product.brand,
    "category": Product.category,
}


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user text is matched literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def contains_pattern(text: str) -> str:
    """Build a LIKE pattern matching any value containing ``text``."""
    return f"%{escape_like(text)}%"


class ProductRepository:
    """Repository for Product database operations.

    Handles all database interactions for products including
    filtering, sorting, pagination and facet lookups.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.find(
                ProductFilter(colors=("red",)),
                SortSpec("price", SortDirection.DESC),
                skip=0,
                limit=12,
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save_all(self, rows: Sequence[Any]) -> Sequence[Any]:
        """Save multiple catalog rows to database.

        Args:
            rows: Products, brands or categories to save.

        Returns:
            Saved rows.
        """
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    async def delete_all(self) -> int:
        """Delete every product, brand and category.

        Returns:
            Number of deleted products.
        """
        await self.session.execute(delete(ProductSize))
        result = await self.session.execute(delete(Product))
        await self.session.execute(delete(Brand))
        await self.session.execute(delete(Category))
        await self.session.flush()
        return result.rowcount or 0

    async def get_by_slug(self, slug: str, active_only: bool = True) -> Product | None:
        """Get product by slug.

        Args:
            slug: Product slug.
            active_only: Ignore inactive (soft-deleted) products.

        Returns:
            Product if found, None otherwise.
        """
        query = (
            select(Product)
            .where(Product.slug == slug)
            .options(selectinload(Product.sizes))
        )
        if active_only:
            query = query.where(Product.is_active.is_(True))

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find(
        self,
        filters: ProductFilter,
        sort: SortSpec,
        skip: int = 0,
        limit: int = 12,
    ) -> Sequence[Product]:
        """Find products with filtering, sorting, and pagination.

        Args:
            filters: Product predicate.
            sort: Sort field and direction.
            skip: Number of matching products to skip.
            limit: Maximum results.

        Returns:
            Sequence of matching products.
        """
        query = (
            select(Product)
            .where(*self._conditions(filters))
            .order_by(*self._ordering(sort))
            .offset(skip)
            .limit(limit)
            .options(selectinload(Product.sizes))
        )

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, filters: ProductFilter) -> int:
        """Count products matching a filter, ignoring pagination.

        Args:
            filters: Product predicate.

        Returns:
            Count of matching products.
        """
        query = select(func.count(Product.id)).where(*self._conditions(filters))
        result = await self.session.execute(query)
        return result.scalar_one()

    async def distinct_values(self, field: str) -> list[str]:
        """Get distinct non-null values of a product field across all products.

        Args:
            field: Public field name ("color", "brand" or "category").

        Returns:
            Sorted list of values.

        Raises:
            ValueError: If the field is not supported.
        """
        column = DISTINCT_COLUMNS.get(field)
        if column is None:
            raise ValueError(f"Unsupported distinct field: {field}")

        query = select(column).where(column.is_not(None)).distinct().order_by(column)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_names(self, model: type[Brand] | type[Category]) -> list[str]:
        """Get the names of every brand or category.

        Args:
            model: Brand or Category.

        Returns:
            Names ordered alphabetically.
        """
        result = await self.session.execute(select(model.name).order_by(model.name))
        return list(result.scalars().all())

    async def list_all(self, model: type[Brand] | type[Category]) -> list[Any]:
        """Get every brand or category record."""
        result = await self.session.execute(select(model).order_by(model.name))
        return list(result.scalars().all())

    async def find_featured(self, limit: int = 12) -> Sequence[Product]:
        """Find featured products.

        Args:
            limit: Maximum results.

        Returns:
            Featured active products, oldest first.
        """
        # Inactive products are hidden here as in search; created_at gives a
        # stable order where storage order is unspecified
        query = (
            select(Product)
            .where(Product.is_featured.is_(True), Product.is_active.is_(True))
            .order_by(Product.created_at.asc(), Product.id.asc())
            .limit(limit)
            .options(selectinload(Product.sizes))
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    def _conditions(self, filters: ProductFilter) -> list[Any]:
        """Translate a ProductFilter into WHERE clauses.

        Args:
            filters: Product predicate.

        Returns:
            List of SQLAlchemy conditions (joined with AND).
        """
        conditions = [
            Product.is_active.is_(filters.is_active),
            Product.name.ilike(contains_pattern(filters.name_contains), escape=LIKE_ESCAPE),
            Product.price >= filters.min_price,
        ]

        if filters.has_max_price:
            conditions.append(Product.price <= filters.max_price)

        if filters.brands:
            conditions.append(Product.brand.in_(filters.brands))

        if filters.colors:
            # Both sides folded by the database so case rules agree
            conditions.append(
                func.lower(Product.color).in_([func.lower(c) for c in filters.colors])
            )

        if filters.sizes:
            # Stored sizes are integers; fractional values can never match
            sizes = [int(s) for s in filters.matchable_sizes if float(s).is_integer()]
            conditions.append(Product.sizes.any(ProductSize.size.in_(sizes)))

        if filters.category_contains:
            conditions.append(
                Product.category.ilike(
                    contains_pattern(filters.category_contains), escape=LIKE_ESCAPE
                )
            )

        return conditions

    def _ordering(self, sort: SortSpec) -> list[Any]:
        """Get ORDER BY clauses for a sort specification.

        Unknown fields keep the storage order; the id tiebreak keeps
        pages stable.
        """
        ordering = []
        column = SORT_COLUMNS.get(sort.field)
        if column is not None:
            ordering.append(column.desc() if sort.descending else column.asc())
        ordering.append(Product.id.asc())
        return ordering
