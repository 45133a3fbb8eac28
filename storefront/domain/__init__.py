"""Domain layer - domain-specific errors.

Example usage:
    from storefront.domain import ProductNotFoundError

    raise ProductNotFoundError("no-such-slug")
"""

from storefront.domain.exceptions import (
    CatalogError,
    DomainError,
    OperationNotImplementedError,
    ProductNotFoundError,
)

__all__ = [
    "CatalogError",
    "DomainError",
    "OperationNotImplementedError",
    "ProductNotFoundError",
]
