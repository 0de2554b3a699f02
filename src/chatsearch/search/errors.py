"""Error types raised by the search subsystem."""


class ConfigurationError(Exception):
    """Raised when static configuration is unusable at startup."""


class SearchError(Exception):
    """Base class for errors raised while answering a request."""


class InvalidArgumentError(SearchError, ValueError):
    """Raised when a mandatory argument is missing or blank."""


class EngineError(SearchError):
    """Raised when the search engine call fails.

    Attributes:
        status_code: HTTP status returned by the engine, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize engine error.

        Args:
            message: Error description.
            status_code: HTTP status returned by the engine, if any.
        """
        super().__init__(message)
        self.status_code = status_code
