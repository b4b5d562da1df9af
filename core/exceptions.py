"""Custom exception hierarchy for the request duplicator."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit.

    Attributes:
        limit: Configured ceiling in bytes
        size: Declared or observed body size in bytes
    """

    def __init__(self, limit: int, size: int) -> None:
        super().__init__(f"Request body of {size} bytes exceeds limit of {limit} bytes")
        self.limit = limit
        self.size = size
