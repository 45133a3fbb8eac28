"""Query construction for product search.

Translates the loosely-typed parameter bag of a product-list request into a
storage-agnostic ProductQuery (filter, sort and pagination window).

Every field is resolved through a single rule in FIELD_RULES. A rule's parser
is total: it returns the parsed value, or None to select the rule's default.
Malformed input is therefore normalized, never reported.

Example usage:
    builder = QueryBuilder()
    query = builder.build({"page": "3", "color": ["Red"], "sortBy": {"value": "price_desc"}})
    query.pagination.skip       # 24
    query.sort.field            # "price"
    query.filter.is_active      # always True
"""

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12
MAX_LIMIT = 100
DEFAULT_SORT_FIELD = "createdAt"

# Range of the Integer columns (price, size)
INT_COLUMN_MIN = -(2**31)
INT_COLUMN_MAX = 2**31 - 1

# Largest OFFSET passed to storage (signed 64-bit)
MAX_SKIP = 2**63 - 1

# Optional sign and the leading run of digits; trailing text is ignored
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ============================================================================
# Value Objects
# ============================================================================


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    """Sort key and direction.

    Attributes:
        field: Public field name (e.g. "createdAt", "price"). Not validated
            here; the repository decides how unknown names are ordered.
        direction: Sort direction.
    """

    field: str = DEFAULT_SORT_FIELD
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


@dataclass(frozen=True)
class Pagination:
    """Pagination window.

    Attributes:
        page: Page number (1-based).
        limit: Items per page.
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        """Number of matching documents to skip, capped at MAX_SKIP."""
        return min(max(0, self.page - 1) * self.limit, MAX_SKIP)


@dataclass(frozen=True)
class SearchRequest:
    """Typed, normalized product search request.

    Attributes:
        page: Page number (1-based).
        limit: Items per page.
        search: Literal substring matched against the product name.
        sort: Sort specification.
        colors: Colors matched case-insensitively and exactly.
        sizes: Numeric sizes; NaN marks a value that can never match.
        brands: Brand names matched verbatim.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound (may be +inf).
        category: Literal category substring, None when not filtering.
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: str = ""
    sort: SortSpec = field(default_factory=SortSpec)
    colors: tuple[str, ...] = ()
    sizes: tuple[float, ...] = ()
    brands: tuple[str, ...] = ()
    min_price: int = 0
    max_price: float = math.inf
    category: str | None = None

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any] | None,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ) -> "SearchRequest":
        """Build a request from a raw parameter bag.

        Args:
            params: Nested parameter mapping (see storefront.api.params).
            default_limit: Page size used when limit is absent or invalid.
            max_limit: Upper bound applied to the page size.

        Returns:
            Normalized search request.
        """
        params = params or {}
        # The configured page size replaces the table default
        rules = {**FIELD_RULES, "limit": replace(FIELD_RULES["limit"], default=default_limit)}
        values = {name: rule.resolve(params) for name, rule in rules.items()}
        values["limit"] = min(values["limit"], max_limit)

        return cls(**values)

    @property
    def pagination(self) -> Pagination:
        return Pagination(page=self.page, limit=self.limit)


@dataclass(frozen=True)
class ProductFilter:
    """Storage-agnostic product predicate.

    Optional clauses are None when they do not apply. ``is_active`` is not a
    constructor argument: every filter only ever matches active products.

    Attributes:
        name_contains: Case-insensitive literal substring of the name.
            Always applied; "" matches every name.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound, +inf for none.
        brands: Brand must be one of these (verbatim).
        colors: Color must equal one of these, ignoring case.
        sizes: Product must stock one of these sizes.
        category_contains: Case-insensitive literal substring of the category.
    """

    name_contains: str = ""
    min_price: int = 0
    max_price: float = math.inf
    brands: tuple[str, ...] | None = None
    colors: tuple[str, ...] | None = None
    sizes: tuple[float, ...] | None = None
    category_contains: str | None = None
    is_active: bool = field(default=True, init=False)

    @classmethod
    def from_request(cls, request: SearchRequest) -> "ProductFilter":
        return cls(
            name_contains=request.search,
            min_price=request.min_price,
            max_price=request.max_price,
            brands=request.brands or None,
            colors=request.colors or None,
            sizes=request.sizes or None,
            category_contains=request.category or None,
        )

    @property
    def has_max_price(self) -> bool:
        return math.isfinite(self.max_price)

    @property
    def matchable_sizes(self) -> tuple[float, ...]:
        """Sizes that can match a stored value.

        NaN sentinels and values outside the size column range are removed.
        """
        return tuple(s for s in self.sizes or () if INT_COLUMN_MIN <= s <= INT_COLUMN_MAX)


@dataclass(frozen=True)
class ProductQuery:
    """Everything the repository needs to run a product search."""

    filter: ProductFilter
    sort: SortSpec
    pagination: Pagination


# ============================================================================
# Field Parsers
# ============================================================================


def _first(value: Any) -> Any:
    """Collapse a repeated parameter to its first occurrence."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _as_list(value: Any) -> list[Any]:
    """Normalize a scalar or repeated parameter to a list, dropping blanks."""
    if value is None:
        items = []
    elif isinstance(value, (list, tuple)):
        items = list(value)
    elif isinstance(value, Mapping):
        items = list(value.values())
    else:
        items = [value]
    return [v for v in items if not (isinstance(v, str) and not v.strip())]


def parse_int(value: Any) -> int | None:
    """Parse the leading integer of a value.

    "12" → 12, "3abc" → 3, "12.7" → 12, "abc" → None.
    """
    value = _first(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def parse_number(value: Any) -> float | None:
    """Parse a whole value as a finite number, or None."""
    value = _first(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _parse_page(value: Any) -> int | None:
    page = parse_int(value)
    return page if page is not None and page >= 1 else None


def _parse_limit(value: Any) -> int | None:
    limit = parse_int(value)
    return limit if limit is not None and limit >= 1 else None


def _parse_text(value: Any) -> str | None:
    value = _first(value)
    return value if isinstance(value, str) else None


def _parse_non_empty_text(value: Any) -> str | None:
    return _parse_text(value) or None


def _parse_sort(value: Any) -> SortSpec | None:
    raw = _parse_text(value)
    if not raw:
        return None
    sort_field, _, direction = raw.partition("_")
    return SortSpec(
        field=sort_field or DEFAULT_SORT_FIELD,
        direction=SortDirection.DESC if direction.lower() == "desc" else SortDirection.ASC,
    )


def _parse_strings(value: Any) -> tuple[str, ...]:
    return tuple(str(v) for v in _as_list(value) if isinstance(v, (str, int, float)))


def _parse_sizes(value: Any) -> tuple[float, ...]:
    sizes = []
    for item in _as_list(value):
        number = parse_number(item)
        if number is None or not INT_COLUMN_MIN <= number <= INT_COLUMN_MAX:
            # No stored size can equal it
            number = math.nan
        sizes.append(number)
    return tuple(sizes)


def _parse_price(value: Any) -> int | None:
    number = parse_number(value)
    if number is None:
        return None
    return int(min(max(number, INT_COLUMN_MIN), INT_COLUMN_MAX))


def _parse_max_price(value: Any) -> int | None:
    """Parse the upper bound; one above every storable price means no bound."""
    number = parse_number(value)
    if number is None or number > INT_COLUMN_MAX:
        return None
    return _parse_price(number)


# ============================================================================
# Defaulting Table
# ============================================================================


@dataclass(frozen=True)
class FieldRule:
    """How one SearchRequest field is read from the parameter bag.

    Attributes:
        path: Location of the value in the nested bag.
        parse: Total parser; None selects the default.
        default: Value used when the parameter is absent or malformed.
    """

    path: tuple[str, ...]
    parse: Callable[[Any], Any]
    default: Any

    def lookup(self, params: Mapping[str, Any]) -> Any:
        value: Any = params
        for key in self.path:
            if not isinstance(value, Mapping):
                return None
            value = value.get(key)
        return value

    def resolve(self, params: Mapping[str, Any]) -> Any:
        raw = self.lookup(params)
        if raw is None:
            return self.default
        parsed = self.parse(raw)
        return self.default if parsed is None else parsed


FIELD_RULES: dict[str, FieldRule] = {
    "page": FieldRule(("page",), _parse_page, DEFAULT_PAGE),
    "limit": FieldRule(("limit",), _parse_limit, DEFAULT_LIMIT),
    "search": FieldRule(("search",), _parse_text, ""),
    "sort": FieldRule(("sortBy", "value"), _parse_sort, SortSpec()),
    "colors": FieldRule(("color",), _parse_strings, ()),
    "sizes": FieldRule(("size",), _parse_sizes, ()),
    "brands": FieldRule(("brand",), _parse_strings, ()),
    "min_price": FieldRule(("price", "minPrice"), _parse_price, 0),
    "max_price": FieldRule(("price", "maxPrice"), _parse_max_price, math.inf),
    "category": FieldRule(("category",), _parse_non_empty_text, None),
}


# ============================================================================
# Query Builder
# ============================================================================


class QueryBuilder:
    """Builds ProductQuery objects from raw request parameters.

    Stateless; safe to share between requests.
    """

    def __init__(
        self,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ) -> None:
        """Initialize builder.

        Args:
            default_limit: Page size when none (or an invalid one) is given.
            max_limit: Largest page size a caller may request.
        """
        self.default_limit = default_limit
        self.max_limit = max_limit

    def parse(self, params: Mapping[str, Any] | None) -> SearchRequest:
        """Normalize raw parameters into a SearchRequest."""
        return SearchRequest.from_params(
            params,
            default_limit=self.default_limit,
            max_limit=self.max_limit,
        )

    def build(self, params: Mapping[str, Any] | None) -> ProductQuery:
        """Build the filter, sort and pagination window for a request.

        Args:
            params: Nested parameter mapping.

        Returns:
            Product query, always safe to hand to the repository.
        """
        request = self.parse(params)
        return ProductQuery(
            filter=ProductFilter.from_request(request),
            sort=request.sort,
            pagination=request.pagination,
        )
