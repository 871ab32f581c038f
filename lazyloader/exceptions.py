from collections.abc import Generator
from contextlib import contextmanager

from botocore.exceptions import ClientError


class LazyLoaderError(Exception):
    """Base exception for all lazyloader errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class BatchLoadError(LazyLoaderError):
    """Raised when fetching a batch fails while advancing an iterator."""

    def __init__(
        self, message: str = "Failed to load next batch", original_error: Exception | None = None
    ) -> None:
        if original_error is not None:
            message = f"{message}: {original_error!s}"
        super().__init__(message, original_error)


class TableNotFoundError(LazyLoaderError):
    """Raised when the DynamoDB table does not exist."""

    def __init__(self, table_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Table '{table_name}' not found", original_error)
        self.table_name = table_name


class ProvisionedThroughputExceededError(LazyLoaderError):
    """Raised when DynamoDB throttles requests."""

    def __init__(
        self, message: str = "Request rate exceeded", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class RequestTimeoutError(LazyLoaderError):
    """Raised when a request to DynamoDB times out."""

    def __init__(
        self, message: str = "Request timed out", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class ValidationError(LazyLoaderError):
    """Raised for request validation errors reported by DynamoDB."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


class DynamoSerializationError(LazyLoaderError):
    """Raised when serialization to DynamoDB format fails (e.g. unsupported type)."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


@contextmanager
def handle_load_errors() -> Generator[None, None, None]:
    """
    Context manager used around a fetch triggered by an iteration step.

    Any exception raised by the data source is re-raised as BatchLoadError,
    chained to the original and kept on ``original_error``.

    Usage:
        with handle_load_errors():
            page = dao.get_models_batch(context, key, 50)
    """
    try:
        yield
    except Exception as e:
        raise BatchLoadError(original_error=e) from e


@contextmanager
def handle_dynamo_errors(table_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches botocore.exceptions.ClientError
    and raises the appropriate LazyLoaderError subclass.

    Args:
        table_name: Optional table name for better error messages

    Usage:
        with handle_dynamo_errors(table_name="users"):
            client.query(...)
    """
    try:
        yield
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code == "ResourceNotFoundException":
            raise TableNotFoundError(table_name=table_name or "unknown", original_error=e) from e

        if error_code in (
            "ProvisionedThroughputExceededException",
            "ThrottlingException",
            "RequestLimitExceeded",
        ):
            raise ProvisionedThroughputExceededError(message=error_message, original_error=e) from e

        if error_code in ("ValidationException", "SerializationException"):
            raise ValidationError(message=error_message, original_error=e) from e

        if error_code in ("RequestTimeout", "RequestTimeoutException"):
            raise RequestTimeoutError(message=error_message, original_error=e) from e

        # Unknown error: wrap in generic LazyLoaderError
        raise LazyLoaderError(
            message=f"DynamoDB error ({error_code}): {error_message}", original_error=e
        ) from e
