"""Product catalog generator with deterministic seeding.

Generates a sample storefront catalog (brands, categories and products with
colors and stocked sizes). Uses seeded random for reproducibility.
"""

import hashlib
import random
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterator

from storefront.catalog.models import Brand, Category, Product, ProductSize


# ============================================================================
# Constants
# ============================================================================

# Synthetic brand names (fictional companies)
BRANDS = [
    "Acme",
    "Contoso",
    "Northwind",
    "Fabrikam",
    "Tailwind",
    "Globex",
    "Initech",
    "Umbrella",
]

# Category name → (price range in whole units, sizes stocked)
CATEGORIES: dict[str, tuple[tuple[int, int], list[int]]] = {
    "Running Shoes": ((60, 220), [38, 39, 40, 41, 42, 43, 44, 45]),
    "Casual Sneakers": ((40, 160), [37, 38, 39, 40, 41, 42, 43, 44]),
    "Boots": ((90, 320), [39, 40, 41, 42, 43, 44, 45, 46]),
    "Sandals": ((20, 90), [36, 37, 38, 39, 40, 41, 42]),
    "Kids Shoes": ((25, 80), [28, 29, 30, 31, 32, 33, 34]),
}

COLORS = ["Black", "White", "Red", "Blue", "Green", "Navy", "Gray", "Red/Black"]

# Product name templates
TEMPLATES = [
    "{brand} {adj} {noun}",
    "{brand} {noun} {adj}",
    "{adj} {noun} by {brand}",
]

ADJECTIVES = [
    "Premium", "Elite", "Pro", "Ultra", "Max", "Plus",
    "Classic", "Essential", "Advanced", "Dynamic",
    "Flex", "Prime", "Apex", "Core", "Nova", "Titan",
]

# Fixed epoch so created_at ordering is reproducible
EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Make a URL-safe slug from text."""
    return _SLUG_STRIP.sub("-", text.lower()).strip("-")


# ============================================================================
# Generator Configuration
# ============================================================================


@dataclass
class GeneratorConfig:
    """Configuration for catalog generation.

    Attributes:
        seed: Random seed for reproducibility.
        products_per_category: Number of products per category.
        sizes_per_product: Max stocked sizes per product.
        inactive_ratio: Share of products generated as inactive.
        featured_ratio: Share of products flagged as featured.
        categories: Category names to generate (defaults to all).
    """

    seed: int = 42
    products_per_category: int = 10
    sizes_per_product: int = 4
    inactive_ratio: float = 0.1
    featured_ratio: float = 0.15
    categories: list[str] = field(default_factory=lambda: list(CATEGORIES))

    @classmethod
    def small(cls) -> "GeneratorConfig":
        """Create config for small catalog (~25 products)."""
        return cls(products_per_category=5, sizes_per_product=3)

    @classmethod
    def full(cls) -> "GeneratorConfig":
        """Create config for full catalog (~150 products)."""
        return cls(products_per_category=30, sizes_per_product=6)


@dataclass
class GeneratedCatalog:
    """Rows produced by one generator run."""

    brands: list[Brand]
    categories: list[Category]
    products: list[Product]

    def all_rows(self) -> list:
        return [*self.brands, *self.categories, *self.products]


# ============================================================================
# Catalog Generator
# ============================================================================


class CatalogGenerator:
    """Generates catalogs with deterministic seeding.

    Example usage:
        generator = CatalogGenerator(GeneratorConfig.small())
        catalog = generator.generate_catalog()
        for product in catalog.products:
            print(product.name, product.color)
    """

    def __init__(self, config: GeneratorConfig) -> None:
        """Initialize generator with configuration.

        Args:
            config: Generator configuration.
        """
        self.config = config

    def _deterministic_seed(self, *args: str | int) -> int:
        """Create deterministic seed from arguments.

        Args:
            args: Values to include in seed.

        Returns:
            Deterministic integer seed.
        """
        data = "|".join(str(a) for a in args)
        hash_bytes = hashlib.md5(data.encode()).digest()
        return int.from_bytes(hash_bytes[:4], "big")

    def _generate_product(self, category: str, index: int) -> Product:
        """Generate a single product.

        Args:
            category: Category name.
            index: Product index within category.

        Returns:
            Generated Product.
        """
        rng = random.Random(self._deterministic_seed(self.config.seed, category, index))
        (min_price, max_price), sizes = CATEGORIES[category]

        brand = rng.choice(BRANDS)
        adj = rng.choice(ADJECTIVES)
        noun = category.split()[-1].rstrip("s")
        name = rng.choice(TEMPLATES).format(brand=brand, adj=adj, noun=noun)

        product_id = hashlib.md5(f"{self.config.seed}:{category}:{index}".encode()).hexdigest()
        product_id = f"{product_id[:8]}-{product_id[8:12]}-{product_id[12:16]}-{product_id[16:20]}-{product_id[20:32]}"

        stocked = sorted(rng.sample(sizes, min(len(sizes), self.config.sizes_per_product)))
        created_at = EPOCH + timedelta(hours=self._deterministic_seed(category, index) % 8760)

        return Product(
            id=product_id,
            name=name,
            slug=f"{slugify(name)}-{product_id[:8]}",
            description=f"{adj} {category.lower()} from {brand}.",
            price=rng.randint(min_price, max_price),
            color=rng.choice(COLORS),
            brand=brand,
            category=category,
            is_active=rng.random() >= self.config.inactive_ratio,
            is_featured=rng.random() < self.config.featured_ratio,
            created_at=created_at,
            updated_at=created_at,
            sizes=[
                ProductSize(size=size, quantity=rng.randint(0, 40)) for size in stocked
            ],
        )

    def generate(self) -> Iterator[Product]:
        """Generate all products.

        Yields:
            Generated Product instances.
        """
        for category in self.config.categories:
            for i in range(self.config.products_per_category):
                yield self._generate_product(category, i)

    def generate_catalog(self) -> GeneratedCatalog:
        """Generate products with their brand and category records.

        Returns:
            Generated catalog.
        """
        return GeneratedCatalog(
            brands=[Brand(name=name) for name in BRANDS],
            categories=[Category(name=name) for name in self.config.categories],
            products=list(self.generate()),
        )

    @property
    def expected_count(self) -> int:
        """Get expected number of products."""
        return len(self.config.categories) * self.config.products_per_category
