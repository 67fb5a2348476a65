"""Jupiter domain-specific exceptions."""


class JupiterError(Exception):
    """Base exception for Jupiter-related errors."""

    def __init__(self, message: str = "A Jupiter error occurred") -> None:
        """Initialize the exception with a message."""
        self.message = message
        super().__init__(self.message)


class JupiterAPIError(JupiterError):
    """Exception raised when a Jupiter API call fails."""

    def __init__(
        self,
        message: str = "Jupiter API request failed",
        status_code: int | None = None,
        response: str | None = None,
    ) -> None:
        """Initialize the exception with API error details."""
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class RoutingError(JupiterAPIError):
    """Exception raised when quoting routes fails."""

    def __init__(
        self,
        message: str = "Failed to get routes",
        status_code: int | None = None,
        response: str | None = None,
    ) -> None:
        """Initialize the exception with quote error details."""
        super().__init__(message, status_code=status_code, response=response)


class SwapTransactionError(JupiterAPIError):
    """Exception raised when building a swap transaction fails."""

    def __init__(
        self,
        message: str = "Failed to get swap transaction",
        status_code: int | None = None,
        response: str | None = None,
    ) -> None:
        """Initialize the exception with swap error details."""
        super().__init__(message, status_code=status_code, response=response)
