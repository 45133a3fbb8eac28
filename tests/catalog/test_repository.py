"""Tests for the product repository against the SQLite test catalog."""

import math

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.catalog.models import Brand, Category, Product, ProductSize
from storefront.catalog.query import (
    INT_COLUMN_MAX,
    MAX_SKIP,
    ProductFilter,
    QueryBuilder,
    SortDirection,
    SortSpec,
)
from storefront.catalog.repository import ProductRepository, contains_pattern, escape_like
from tests.conftest import ACTIVE_SLUGS

DEFAULT_SORT = SortSpec()


async def find_slugs(
    session_factory: async_sessionmaker[AsyncSession],
    filters: ProductFilter,
    sort: SortSpec = DEFAULT_SORT,
    skip: int = 0,
    limit: int = 100,
) -> list[str]:
    async with session_factory() as session:
        products = await ProductRepository(session).find(filters, sort, skip=skip, limit=limit)
        return [p.slug for p in products]


async def count(session_factory: async_sessionmaker[AsyncSession], filters: ProductFilter) -> int:
    async with session_factory() as session:
        return await ProductRepository(session).count(filters)


class TestLikeEscaping:
    """Tests for literal LIKE patterns."""

    def test_escape_like(self) -> None:
        assert escape_like("50%") == "50\\%"
        assert escape_like("a_b") == "a\\_b"
        assert escape_like("back\\slash") == "back\\\\slash"
        assert escape_like("a.c*") == "a.c*"

    def test_contains_pattern(self) -> None:
        assert contains_pattern("") == "%%"
        assert contains_pattern("run") == "%run%"


class TestActiveOnly:
    """Tests that inactive products never match."""

    @pytest.mark.asyncio
    async def test_default_filter_returns_active_products(self, session_factory) -> None:
        """Empty search matches every active product and nothing else."""
        slugs = await find_slugs(session_factory, ProductFilter())

        assert slugs == ACTIVE_SLUGS
        assert "acme-retired-runner" not in slugs
        assert await count(session_factory, ProductFilter()) == 6

    @pytest.mark.asyncio
    async def test_inactive_excluded_even_when_other_clauses_match(self, session_factory) -> None:
        """The retired runner matches every clause but is inactive."""
        filters = ProductFilter(
            name_contains="Retired",
            brands=("Acme",),
            colors=("Red",),
            sizes=(42.0,),
        )
        assert await find_slugs(session_factory, filters) == []


class TestTextMatching:
    """Tests for name and category substring matching."""

    @pytest.mark.asyncio
    async def test_search_case_insensitive_substring(self, session_factory) -> None:
        slugs = await find_slugs(session_factory, ProductFilter(name_contains="RUNNER"))
        assert slugs == ["acme-road-runner", "acme-trail-runner"]

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(self, session_factory) -> None:
        """LIKE wildcards in user text are escaped."""
        assert await find_slugs(session_factory, ProductFilter(name_contains="50%")) == [
            "acme-50-off-sandal"
        ]
        assert await find_slugs(session_factory, ProductFilter(name_contains="%")) == [
            "acme-50-off-sandal"
        ]
        assert await find_slugs(session_factory, ProductFilter(name_contains="_")) == []

    @pytest.mark.asyncio
    async def test_search_regex_metacharacters_match_literally(self, session_factory) -> None:
        """Pattern syntax in search text has no special meaning."""
        assert await find_slugs(session_factory, ProductFilter(name_contains=".*")) == []
        assert await find_slugs(session_factory, ProductFilter(name_contains="R.ad")) == []

    @pytest.mark.asyncio
    async def test_category_substring(self, session_factory) -> None:
        slugs = await find_slugs(session_factory, ProductFilter(category_contains="boot"))
        assert slugs == ["globex-winter-boot", "globex-plain-boot"]


class TestSetMatching:
    """Tests for brand, color and size sets."""

    @pytest.mark.asyncio
    async def test_colors_case_insensitive_exact(self, session_factory) -> None:
        """Red matches Red, RED and red but not Red/Black."""
        slugs = await find_slugs(session_factory, ProductFilter(colors=("Red",)))
        assert slugs == ["acme-road-runner", "acme-trail-runner", "globex-beach-sandal"]

    @pytest.mark.asyncio
    async def test_colors_folded_by_database_on_both_sides(self, session_factory) -> None:
        """Non-ASCII colors match when only the ASCII letters differ in case."""
        async with session_factory() as session:
            session.add(
                Product(
                    id="p8",
                    name="Globex Ecru Loafer",
                    slug="globex-ecru-loafer",
                    price=80,
                    color="Écru",
                    brand="Globex",
                    category="Loafers",
                    sizes=[ProductSize(size=41, quantity=2)],
                )
            )
            await session.commit()

        slugs = await find_slugs(session_factory, ProductFilter(colors=("ÉCRU",)))
        assert slugs == ["globex-ecru-loafer"]

    @pytest.mark.asyncio
    async def test_colors_any_of(self, session_factory) -> None:
        slugs = await find_slugs(session_factory, ProductFilter(colors=("blue", "red/black")))
        assert slugs == ["globex-winter-boot", "acme-50-off-sandal"]

    @pytest.mark.asyncio
    async def test_brands_verbatim(self, session_factory) -> None:
        assert await count(session_factory, ProductFilter(brands=("Acme",))) == 3
        assert await count(session_factory, ProductFilter(brands=("acme",))) == 0

    @pytest.mark.asyncio
    async def test_sizes(self, session_factory) -> None:
        slugs = await find_slugs(session_factory, ProductFilter(sizes=(42.0,)))
        assert slugs == ["acme-road-runner", "acme-trail-runner"]

    @pytest.mark.asyncio
    async def test_nan_size_matches_nothing(self, session_factory) -> None:
        """The NaN sentinel keeps the clause but matches no product."""
        filters = ProductFilter(sizes=(math.nan,))
        assert await find_slugs(session_factory, filters) == []
        assert await count(session_factory, filters) == 0

    @pytest.mark.asyncio
    async def test_fractional_size_matches_nothing(self, session_factory) -> None:
        assert await count(session_factory, ProductFilter(sizes=(42.5,))) == 0

    @pytest.mark.asyncio
    async def test_nan_mixed_with_real_size(self, session_factory) -> None:
        slugs = await find_slugs(session_factory, ProductFilter(sizes=(math.nan, 44.0)))
        assert slugs == ["globex-winter-boot"]


class TestPriceRange:
    """Tests for inclusive price bounds."""

    @pytest.mark.asyncio
    async def test_bounds_inclusive(self, session_factory) -> None:
        slugs = await find_slugs(session_factory, ProductFilter(min_price=30, max_price=150))
        assert slugs == ["acme-road-runner", "acme-trail-runner", "globex-beach-sandal"]

    @pytest.mark.asyncio
    async def test_open_upper_bound(self, session_factory) -> None:
        assert await count(session_factory, ProductFilter(min_price=100)) == 4


class TestSortingAndPaging:
    """Tests for ordering and the page window."""

    @pytest.mark.asyncio
    async def test_price_desc(self, session_factory) -> None:
        slugs = await find_slugs(
            session_factory, ProductFilter(), SortSpec("price", SortDirection.DESC)
        )
        assert slugs == [
            "globex-winter-boot",
            "globex-plain-boot",
            "acme-trail-runner",
            "acme-road-runner",
            "globex-beach-sandal",
            "acme-50-off-sandal",
        ]

    @pytest.mark.asyncio
    async def test_created_at_desc(self, session_factory) -> None:
        slugs = await find_slugs(
            session_factory, ProductFilter(), SortSpec("createdAt", SortDirection.DESC)
        )
        assert slugs == list(reversed(ACTIVE_SLUGS))

    @pytest.mark.asyncio
    async def test_unknown_sort_field_uses_storage_order(self, session_factory) -> None:
        """Unknown fields do not fail; products come back in id order."""
        slugs = await find_slugs(
            session_factory, ProductFilter(), SortSpec("popularity", SortDirection.DESC)
        )
        assert slugs == ACTIVE_SLUGS

    @pytest.mark.asyncio
    async def test_skip_and_limit(self, session_factory) -> None:
        slugs = await find_slugs(session_factory, ProductFilter(), skip=2, limit=2)
        assert slugs == ["globex-winter-boot", "globex-beach-sandal"]

    @pytest.mark.asyncio
    async def test_count_ignores_window(self, session_factory) -> None:
        query = QueryBuilder().build({"page": "3", "limit": "2", "color": ["red"]})
        async with session_factory() as session:
            repo = ProductRepository(session)
            page = await repo.find(
                query.filter, query.sort, query.pagination.skip, query.pagination.limit
            )
            total = await repo.count(query.filter)

        assert page == []
        assert total == 3


class TestFacetReads:
    """Tests for distinct values and name listings."""

    @pytest.mark.asyncio
    async def test_distinct_colors_cover_all_products(self, session_factory) -> None:
        """Colors include inactive products and drop missing values."""
        async with session_factory() as session:
            colors = await ProductRepository(session).distinct_values("color")

        assert set(colors) == {"Red", "RED", "red", "Red/Black", "Blue"}
        assert len(colors) == 5

    @pytest.mark.asyncio
    async def test_distinct_unsupported_field(self, session_factory) -> None:
        async with session_factory() as session:
            with pytest.raises(ValueError):
                await ProductRepository(session).distinct_values("description")

    @pytest.mark.asyncio
    async def test_list_names(self, session_factory) -> None:
        async with session_factory() as session:
            repo = ProductRepository(session)
            assert await repo.list_names(Brand) == ["Acme", "Globex", "Initech"]
            assert await repo.list_names(Category) == ["Boots", "Running Shoes", "Sandals"]


class TestPointReads:
    """Tests for slug lookup and featured products."""

    @pytest.mark.asyncio
    async def test_get_by_slug(self, session_factory) -> None:
        async with session_factory() as session:
            product = await ProductRepository(session).get_by_slug("acme-road-runner")

        assert product is not None
        assert product.name == "Acme Road Runner"
        assert [s.size for s in product.sizes] == [40, 41, 42]

    @pytest.mark.asyncio
    async def test_get_by_slug_inactive(self, session_factory) -> None:
        async with session_factory() as session:
            repo = ProductRepository(session)
            assert await repo.get_by_slug("acme-retired-runner") is None
            assert await repo.get_by_slug("acme-retired-runner", active_only=False) is not None

    @pytest.mark.asyncio
    async def test_find_featured(self, session_factory) -> None:
        async with session_factory() as session:
            products = await ProductRepository(session).find_featured(limit=12)

        assert [p.slug for p in products] == ["acme-road-runner", "globex-winter-boot"]


class TestStorageRanges:
    """Tests that normalized extreme values run without driver errors."""

    @pytest.mark.asyncio
    async def test_largest_offset(self, session_factory) -> None:
        assert await find_slugs(session_factory, ProductFilter(), skip=MAX_SKIP, limit=12) == []

    @pytest.mark.asyncio
    async def test_min_price_at_column_limit(self, session_factory) -> None:
        assert await count(session_factory, ProductFilter(min_price=INT_COLUMN_MAX)) == 0

    @pytest.mark.asyncio
    async def test_out_of_range_size(self, session_factory) -> None:
        filters = ProductFilter(sizes=(1e30,))
        assert await find_slugs(session_factory, filters) == []
        assert await count(session_factory, filters) == 0

    @pytest.mark.asyncio
    async def test_built_from_huge_parameters(self, session_factory) -> None:
        """Queries built from oversized numbers are safe to run."""
        query = QueryBuilder().build(
            {"page": "99999999999999999999", "price": {"maxPrice": "1e30"}, "size": ["1e30"]}
        )
        async with session_factory() as session:
            repo = ProductRepository(session)
            page = await repo.find(
                query.filter, query.sort, query.pagination.skip, query.pagination.limit
            )
            total = await repo.count(query.filter)

        assert page == []
        assert total == 0
