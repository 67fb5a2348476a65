"""Solana domain-specific exceptions."""


class SolanaError(Exception):
    """Base exception for Solana-related errors."""

    def __init__(self, message: str = "A Solana error occurred") -> None:
        """Initialize the exception with a message."""
        self.message = message
        super().__init__(self.message)


class SolanaRPCError(SolanaError):
    """Exception raised when a JSON-RPC call fails."""

    def __init__(
        self,
        message: str = "Solana RPC request failed",
        method: str | None = None,
        code: int | None = None,
    ) -> None:
        """Initialize the exception with RPC error details."""
        self.method = method
        self.code = code
        super().__init__(message)
