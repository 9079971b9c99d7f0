"""
=============================================================================
CONFIGURATION
=============================================================================

Settings for serving a compiled API with `python -m weft`, or for code that
builds a WeftApp itself.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  CLI flags          --port 9000                  (highest)          │
    │  Environment        WEFT_PORT=9000                                  │
    │  Defaults           WeftConfig()                 (lowest)           │
    └─────────────────────────────────────────────────────────────────────┘

The cache-directive table, the gzip allow-list and the 20-byte compression
threshold are fixed behaviour, not settings.

=============================================================================
"""

import os
from dataclasses import dataclass

from .log import ACCESS_LOG_FORMATS

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUE = ("1", "true", "yes", "on")


@dataclass
class WeftConfig:
    """
    Serving configuration.

    Attributes:
        host:               Interface to bind (0.0.0.0 in containers)
        port:               TCP port
        log_level:          Level for the weft loggers
        log_format:         Access log format, "text" or "json"
        gzip_level:         Compression level 1-9 for gzip responses
        negotiate_fallback: Validate the query and set Content-Type on the
                            default GET variant too
    """

    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"
    log_format: str = "text"
    gzip_level: int = 6
    negotiate_fallback: bool = False

    @classmethod
    def from_env(cls) -> "WeftConfig":
        """
        Create configuration from environment variables.

            WEFT_HOST                 default 127.0.0.1
            WEFT_PORT                 default 8080
            WEFT_LOG_LEVEL            default INFO
            WEFT_LOG_FORMAT           default text
            WEFT_GZIP_LEVEL           default 6
            WEFT_NEGOTIATE_FALLBACK   1/true/yes/on enables it

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        return cls(
            host=os.getenv("WEFT_HOST", "127.0.0.1"),
            port=int(os.getenv("WEFT_PORT", "8080")),
            log_level=os.getenv("WEFT_LOG_LEVEL", "INFO"),
            log_format=os.getenv("WEFT_LOG_FORMAT", "text"),
            gzip_level=int(os.getenv("WEFT_GZIP_LEVEL", "6")),
            negotiate_fallback=os.getenv("WEFT_NEGOTIATE_FALLBACK", "").strip().lower() in _TRUE,
        )

    def validate(self) -> None:
        """
        Validate configuration values. Called at startup so a bad setting
        fails before the first request.

        Raises:
            ValueError: On the first invalid value
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in ACCESS_LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(ACCESS_LOG_FORMATS)}")

        if not 1 <= self.gzip_level <= 9:
            raise ValueError(f"gzip_level must be 1-9, got {self.gzip_level}")
