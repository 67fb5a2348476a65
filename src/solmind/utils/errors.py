"""Custom exception classes for SolMind."""


class SolmindError(Exception):
    """Base exception for all SolMind errors."""

    pass


class TradeParamsError(SolmindError, ValueError):
    """Malformed trade parameters supplied by the caller."""

    pass


class ModelError(SolmindError):
    """Behavior model loading or inference error."""

    pass


class ConfigError(SolmindError):
    """Configuration error."""

    pass
