"""Custom application-wide exceptions."""


class ApplicationError(Exception):
    """Base class for application-specific errors."""

    def __init__(
        self, message: str = "An application error occurred", original_exception: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_exception = original_exception
        self.message = message

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (Original error: {self.original_exception})"
        return self.message


class APIError(ApplicationError):
    """Exception raised when a webhook delivery to a subscriber fails."""

    def __init__(
        self,
        message: str = "API call failed",
        original_exception: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, original_exception)
        self.status_code = status_code
        self.message = f"API Error: {message}"
        if status_code:
            self.message += f" (Status Code: {status_code})"


class DatabaseError(ApplicationError):
    """Exception raised for errors during database operations."""

    def __init__(self, message: str = "Database operation failed", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)
        self.message = f"Database Error: {message}"


class InvalidStockMutationError(ApplicationError):
    """Raised when a stock mutation carries a value that is not a plain integer."""


class NotFoundError(ApplicationError):
    """Base class for lookups of records that do not exist."""

    entity_name = "Record"

    def __init__(self, record_id: int) -> None:
        super().__init__(f"{self.entity_name} {record_id} not found")
        self.record_id = record_id


class ProductNotFoundError(NotFoundError):
    entity_name = "Product"


class VariantNotFoundError(NotFoundError):
    entity_name = "Variant"


class StockItemNotFoundError(NotFoundError):
    entity_name = "Stock item"
