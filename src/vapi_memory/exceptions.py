"""Custom exceptions for vapi-memory."""


class VapiMemoryError(Exception):
    """Base class for all vapi-memory errors."""

    pass


class ValidationError(VapiMemoryError, ValueError):
    """Raised when input or configuration validation fails."""

    pass


class BackendError(VapiMemoryError):
    """Raised when a call to the memory backend fails.

    Covers transport errors, non-2xx responses and payloads that do not
    match the expected response shape.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize backend error.

        Args:
            operation: Human readable name of the failed operation
            message: Original error message
            status_code: HTTP status code, when the backend answered
        """
        super().__init__(f"Failed to {operation}: {message}")
        self.operation = operation
        self.status_code = status_code


class ContextRetrievalError(VapiMemoryError):
    """Raised when context assembly fails outside the best-effort sub-fetches."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to get context: {message}")


class MemoryStoreError(VapiMemoryError):
    """Raised when storing or reading back user memories fails."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"Failed to {operation}: {message}")
        self.operation = operation
