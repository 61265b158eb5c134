from typing import Optional, Dict, Any, List
import traceback
import sys


class BaseAPIException(Exception):
    def __init__(self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        internal_message: Optional[str] = None):
        self.message = message  # User-facing message
        self.internal_message = internal_message or message  # Internal/debug message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__.replace('Error', '').upper()
        self.details = details or {}

        # Capture stack trace for debugging
        self.traceback = traceback.format_exc() if sys.exc_info()[0] else None

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(BaseAPIException):
    """Raised when request validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class UnauthorizedError(BaseAPIException):
    """Raised when user is not authenticated"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401, "UNAUTHORIZED")


class ProductNotFoundError(BaseAPIException):
    """Raised when the catalog has no product for a slug"""

    def __init__(self, slug: Optional[str] = None):
        details = {"slug": slug} if slug else {}
        super().__init__("Item does not exist", 404, "PRODUCT_NOT_FOUND", details)


class OutOfStockError(BaseAPIException):
    """Raised when the requested quantity exceeds the catalog's stock"""

    def __init__(self, slug: Optional[str] = None, requested: Optional[int] = None,
                 available: Optional[int] = None):
        details: Dict[str, Any] = {}
        if slug:
            details["slug"] = slug
        if requested is not None:
            details["requested"] = requested
        if available is not None:
            details["available"] = available
        super().__init__("Not enough inventory", 409, "OUT_OF_STOCK", details)


class PriceUnavailableError(BaseAPIException):
    """Raised when the catalog returns a product without a price"""

    def __init__(self, slug: Optional[str] = None):
        details = {"slug": slug} if slug else {}
        super().__init__("Price of product not available", 422, "PRICE_UNAVAILABLE", details)


class CatalogUnavailableError(BaseAPIException):
    """Raised when the product catalog cannot be reached or answers garbage"""

    def __init__(self, message: str = "Product catalog unavailable", service_name: str = "catalog"):
        details = {"service": service_name}
        super().__init__(message, 503, "CATALOG_UNAVAILABLE", details)


class PaymentError(BaseAPIException):
    """Raised when the payment gateway rejects or fails a request"""

    def __init__(self, message: str = "Payment gateway error", operation: Optional[str] = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message, 502, "PAYMENT_ERROR", details)


class DatabaseError(BaseAPIException):
    """Raised when database operations fail"""

    def __init__(self, message: str = "Database operation failed", operation: Optional[str] = None):
        # Don't expose internal database details to users
        user_message = "An internal error occurred. Please try again later."
        details = {"operation": operation} if operation else {}
        super().__init__(
            user_message,
            500,
            "DATABASE_ERROR",
            details,
            internal_message=message  # Keep original message for logging
        )


# Failures of a catalog-validated cart mutation. The cart store turns these
# into notifications instead of letting them propagate.
CART_MUTATION_ERRORS = (
    OutOfStockError,
    PriceUnavailableError,
    ProductNotFoundError,
    CatalogUnavailableError,
)
