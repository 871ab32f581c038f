"""
Unit tests for exception handling in lazyloader.

These tests verify the exception hierarchy, the wrapping of iteration-time
fetch failures, and the translation of botocore ClientError exceptions into
LazyLoaderError subclasses.
"""

import pytest
from botocore.exceptions import ClientError

from lazyloader.exceptions import (
    BatchLoadError,
    DynamoSerializationError,
    LazyLoaderError,
    ProvisionedThroughputExceededError,
    RequestTimeoutError,
    TableNotFoundError,
    ValidationError,
    handle_dynamo_errors,
    handle_load_errors,
)


def client_error(code: str, message: str = "failed", operation: str = "Query") -> ClientError:
    return ClientError(
        error_response={"Error": {"Code": code, "Message": message}}, operation_name=operation
    )


class TestExceptionHierarchy:
    """Test the exception class hierarchy and instantiation."""

    def test_lazyloader_error_base_class(self):
        error = LazyLoaderError("Test message")
        assert isinstance(error, Exception)
        assert error.message == "Test message"
        assert error.original_error is None

    def test_lazyloader_error_with_original_error(self):
        original = ValueError("Original error")
        error = LazyLoaderError("Wrapped message", original_error=original)
        assert error.message == "Wrapped message"
        assert error.original_error is original

    def test_batch_load_error_message(self):
        """Test BatchLoadError mentions the original failure."""
        error = BatchLoadError(original_error=RuntimeError("socket closed"))
        assert str(error) == "Failed to load next batch: socket closed"

    def test_table_not_found_error(self):
        error = TableNotFoundError("test_table")
        assert error.table_name == "test_table"
        assert "test_table" in str(error)

    def test_exception_inheritance(self):
        """Test that all exceptions inherit from LazyLoaderError."""
        exceptions = [
            BatchLoadError(),
            TableNotFoundError("test"),
            ProvisionedThroughputExceededError(),
            RequestTimeoutError(),
            ValidationError("test"),
            DynamoSerializationError("test"),
        ]

        for exc in exceptions:
            assert isinstance(exc, LazyLoaderError)
            assert isinstance(exc, Exception)


class TestHandleLoadErrors:
    """Test the handle_load_errors context manager."""

    def test_successful_operation(self):
        with handle_load_errors():
            result = 42
        assert result == 42

    def test_any_exception_is_wrapped(self):
        original = KeyError("cursor")

        with pytest.raises(BatchLoadError) as exc_info:
            with handle_load_errors():
                raise original

        assert exc_info.value.original_error is original
        assert exc_info.value.__cause__ is original

    def test_library_errors_are_wrapped_too(self):
        """Test translated DynamoDB errors are still carried as the cause."""
        original = TableNotFoundError("users")

        with pytest.raises(BatchLoadError) as exc_info:
            with handle_load_errors():
                raise original

        assert exc_info.value.original_error is original


class TestHandleDynamoErrors:
    """Test the handle_dynamo_errors context manager."""

    def test_successful_operation(self):
        with handle_dynamo_errors():
            result = 42
        assert result == 42

    def test_resource_not_found_exception(self):
        mock_error = client_error("ResourceNotFoundException", "Requested resource not found")

        with pytest.raises(TableNotFoundError) as exc_info:
            with handle_dynamo_errors(table_name="users"):
                raise mock_error

        error = exc_info.value
        assert error.table_name == "users"
        assert error.original_error is mock_error
        assert error.__cause__ is mock_error

    @pytest.mark.parametrize(
        "code",
        ["ProvisionedThroughputExceededException", "ThrottlingException", "RequestLimitExceeded"],
    )
    def test_throttling_exceptions(self, code):
        mock_error = client_error(code, "Rate limit exceeded")

        with pytest.raises(ProvisionedThroughputExceededError) as exc_info:
            with handle_dynamo_errors():
                raise mock_error

        assert exc_info.value.original_error is mock_error

    @pytest.mark.parametrize("code", ["ValidationException", "SerializationException"])
    def test_validation_exceptions(self, code):
        mock_error = client_error(code, "Validation failed")

        with pytest.raises(ValidationError) as exc_info:
            with handle_dynamo_errors():
                raise mock_error

        assert exc_info.value.original_error is mock_error

    @pytest.mark.parametrize("code", ["RequestTimeout", "RequestTimeoutException"])
    def test_timeout_exceptions(self, code):
        with pytest.raises(RequestTimeoutError):
            with handle_dynamo_errors():
                raise client_error(code)

    def test_unknown_error_code(self):
        mock_error = client_error("UnknownErrorCode", "Something unexpected happened", "Scan")

        with pytest.raises(LazyLoaderError) as exc_info:
            with handle_dynamo_errors():
                raise mock_error

        error = exc_info.value
        assert "UnknownErrorCode" in str(error)
        assert "Something unexpected happened" in str(error)
        assert error.original_error is mock_error

    def test_error_without_table_name(self):
        with pytest.raises(TableNotFoundError) as exc_info:
            with handle_dynamo_errors():
                raise client_error("ResourceNotFoundException", "Table not found")

        assert exc_info.value.table_name == "unknown"

    def test_non_client_errors_pass_through(self):
        with pytest.raises(KeyError):
            with handle_dynamo_errors():
                raise KeyError("Items")
