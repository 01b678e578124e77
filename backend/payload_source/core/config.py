"""Process-level settings for the Payload source.

Values are read from the environment (prefix ``PAYLOAD_SOURCE_``) or a local
``.env`` file. Per-site options such as the endpoint and the list of types live
in ``PluginOptions`` instead.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pydantic settings class for the sync engine.

    Attributes:
        LOG_LEVEL: Level for the package logger
        LOG_FORMAT: Format string for the default stream handler
        CACHE_DIR: Directory used by the filesystem cache and downloaded files
        HTTP_TIMEOUT: Timeout in seconds for requests to the Payload API
        HTTP_MAX_RETRIES: Attempts for retryable requests (429s and timeouts)
        DEFAULT_PAGE_SIZE: Page size used when listing collections
        DEFAULT_DEPTH: Relationship population depth requested from Payload
    """

    model_config = SettingsConfigDict(
        env_prefix="PAYLOAD_SOURCE_", env_file=".env", extra="ignore"
    )

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    CACHE_DIR: str = ".cache/payload-source"

    HTTP_TIMEOUT: float = 30.0
    HTTP_MAX_RETRIES: int = 5
    DEFAULT_PAGE_SIZE: int = 100
    DEFAULT_DEPTH: Optional[int] = None


settings = Settings()
