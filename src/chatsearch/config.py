"""API configuration loaded from environment variables."""
from typing import Any

import structlog
from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

DEFAULT_SUGGESTION_SIZE = 10
DEFAULT_MAX_FILE_SIZE = 20 * 1024**2


class Settings(BaseSettings):
    """API configuration loaded from environment variables.

    Attributes:
        host: Bind address for the API server.
        port: Port number for the API server.
        debug: Enable debug mode and API documentation.
        cors_origins_raw: Raw comma-separated CORS origins string.
        shutdown_timeout: Seconds to wait for graceful shutdown.
        key: API key for authenticating requests.
        engine_url: Base URL of the search engine core (``/select`` is appended).
        engine_timeout: Seconds before an engine call is abandoned.
        client_name: Collection name reported as client in report records.
        general_search_enabled: Report message, room and user stats on ping.
        file_search_enabled: Query file documents.
        file_search_max_file_size: Largest file (bytes) accepted for indexing.
        suggestion_size: Maximum number of suggestions returned.
        search_workers: Maximum concurrent category sub-queries per request.
        defaults_file: YAML file holding the default parameter layers.
        schema_version: Index schema version reported by the ping endpoint.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHATSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins_raw: str = ""
    shutdown_timeout: float = 30.0
    key: str = ""

    engine_url: str = "http://localhost:8983/solr/chatpal"
    engine_timeout: float = 10.0
    client_name: str = "chatpal"
    schema_version: str = "1.0"

    general_search_enabled: bool = True
    file_search_enabled: bool = False
    file_search_max_file_size: int = DEFAULT_MAX_FILE_SIZE
    suggestion_size: int = DEFAULT_SUGGESTION_SIZE
    search_workers: int = 4

    defaults_file: str | None = None

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [
            origin.strip()
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]

    def effective_suggestion_size(self) -> int:
        """Suggestion cap, falling back to the default for values below 1."""
        if self.suggestion_size <= 0:
            logger.warning(
                "suggestion_size_invalid",
                configured=self.suggestion_size,
                fallback=DEFAULT_SUGGESTION_SIZE,
            )
            return DEFAULT_SUGGESTION_SIZE
        return self.suggestion_size

    def api_config(self) -> dict[str, Any]:
        """Public view of the enabled search features."""
        return {
            "generalSearch": {"enabled": self.general_search_enabled},
            "fileSearch": {
                "enabled": self.file_search_enabled,
                "maxFileSize": self.file_search_max_file_size,
            },
        }
