"""Shared fixtures: a small, hand-built catalog in a SQLite database.

Catalog (created_at ascending):

    slug                  price  color      brand   category       sizes        active  featured
    acme-road-runner      120    Red        Acme    Running Shoes  40, 41, 42   yes     yes
    acme-trail-runner     150    RED        Acme    Running Shoes  42, 43       yes     no
    globex-winter-boot    200    Red/Black  Globex  Boots          44           yes     yes
    globex-beach-sandal   30     red        Globex  Sandals        38, 39       yes     no
    acme-50-off-sandal    25     Blue       Acme    Sandals        40           yes     no
    acme-retired-runner   90     Red        Acme    Running Shoes  42           no      yes
    globex-plain-boot     180    (none)     Globex  Boots          45           yes     no

Brands: Acme, Globex, Initech. Categories: Boots, Running Shoes, Sandals.
"""

import asyncio
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from storefront.catalog.models import Brand, Category, Product, ProductSize
from storefront.catalog.service import CatalogService
from storefront.infrastructure.database import create_tables

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

PRODUCT_ROWS = [
    # id, name, slug, price, color, brand, category, sizes, active, featured
    ("p1", "Acme Road Runner", "acme-road-runner", 120, "Red", "Acme", "Running Shoes", [40, 41, 42], True, True),
    ("p2", "Acme Trail Runner", "acme-trail-runner", 150, "RED", "Acme", "Running Shoes", [42, 43], True, False),
    ("p3", "Globex Winter Boot", "globex-winter-boot", 200, "Red/Black", "Globex", "Boots", [44], True, True),
    ("p4", "Globex Beach Sandal", "globex-beach-sandal", 30, "red", "Globex", "Sandals", [38, 39], True, False),
    ("p5", "Acme 50% Off Sandal", "acme-50-off-sandal", 25, "Blue", "Acme", "Sandals", [40], True, False),
    ("p6", "Acme Retired Runner", "acme-retired-runner", 90, "Red", "Acme", "Running Shoes", [42], False, True),
    ("p7", "Globex Plain Boot", "globex-plain-boot", 180, None, "Globex", "Boots", [45], True, False),
]

ACTIVE_SLUGS = [row[2] for row in PRODUCT_ROWS if row[8]]


def build_catalog() -> list:
    """Build fresh model instances for the test catalog."""
    products = [
        Product(
            id=pid,
            name=name,
            slug=slug,
            description=f"{name} description",
            price=price,
            color=color,
            brand=brand,
            category=category,
            sizes=[ProductSize(size=s, quantity=5) for s in sizes],
            is_active=active,
            is_featured=featured,
            created_at=T0 + timedelta(days=i),
            updated_at=T0 + timedelta(days=i),
        )
        for i, (pid, name, slug, price, color, brand, category, sizes, active, featured)
        in enumerate(PRODUCT_ROWS)
    ]
    brands = [Brand(id=f"b{i}", name=n) for i, n in enumerate(["Acme", "Globex", "Initech"])]
    categories = [
        Category(id=f"c{i}", name=n)
        for i, n in enumerate(["Boots", "Running Shoes", "Sandals"])
    ]
    return [*brands, *categories, *products]


def make_engine(path: Path) -> AsyncEngine:
    """Create a SQLite engine that opens a fresh connection per session.

    Connections are not pooled, so the engine can be used from any event loop.
    """
    return create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def _seed(engine: AsyncEngine) -> None:
    await create_tables(engine)
    async with make_session_factory(engine)() as session:
        session.add_all(build_catalog())
        await session.commit()


@pytest.fixture
def session_factory(tmp_path: Path) -> Generator[async_sessionmaker[AsyncSession], None, None]:
    """Session factory for a database holding the test catalog."""
    engine = make_engine(tmp_path / "catalog.db")
    asyncio.run(_seed(engine))
    yield make_session_factory(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def empty_session_factory(tmp_path: Path) -> Generator[async_sessionmaker[AsyncSession], None, None]:
    """Session factory for a database with tables but no rows."""
    engine = make_engine(tmp_path / "empty.db")
    asyncio.run(create_tables(engine))
    yield make_session_factory(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def service(session_factory: async_sessionmaker[AsyncSession]) -> CatalogService:
    """Catalog service over the test catalog."""
    return CatalogService(session_factory)
