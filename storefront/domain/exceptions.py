"""Domain exceptions.

Errors raised by the catalog service and rendered by the application's
exception handlers. Each carries the HTTP status it maps to.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Catalog Errors
# ============================================================================


class CatalogError(DomainError):
    """Base class for catalog-related errors."""

    pass


class ProductNotFoundError(CatalogError):
    """Raised when no active product has the requested slug."""

    status_code = 404

    def __init__(self, slug: str) -> None:
        """Initialize product not found error.

        Args:
            slug: The slug that was looked up.
        """
        super().__init__("No such product exist", details={"slug": slug})


class OperationNotImplementedError(CatalogError):
    """Raised by admin operations that are placeholders."""

    status_code = 501

    def __init__(self, operation: str) -> None:
        """Initialize not implemented error.

        Args:
            operation: Operation name (e.g. "createProduct").
        """
        super().__init__(
            f"{operation} not implemented in hotfix",
            details={"operation": operation},
        )
