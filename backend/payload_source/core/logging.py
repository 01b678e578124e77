"""Logging for the sync engine.

``logger`` is the package-wide default. Components accept an optional
``ContextualLogger`` so a caller can bind dimensions (plugin, pass, type) once
and have them rendered on every line:

    pass_logger = logger.with_context(pass_id="3", type_name="posts")
    pass_logger.info("Fetched 12 entities")
    # ... - payload_source - INFO - Fetched 12 entities [pass_id=3 type_name=posts]
"""

import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

from payload_source.core.config import settings


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that carries a set of key/value dimensions."""

    def __init__(self, logger: logging.Logger, dimensions: Optional[Dict[str, Any]] = None):
        """Wrap a stdlib logger.

        Args:
            logger: The underlying logger
            dimensions: Key/value pairs appended to every message
        """
        super().__init__(logger, dimensions or {})
        self.dimensions: Dict[str, Any] = dict(dimensions or {})

    def with_context(self, **kwargs: Any) -> "ContextualLogger":
        """Return a new logger with extra dimensions merged over the current ones."""
        return ContextualLogger(self.logger, {**self.dimensions, **kwargs})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Append dimensions to the message and expose them as record attributes."""
        extra = kwargs.get("extra") or {}
        kwargs["extra"] = {**self.dimensions, **extra}
        if self.dimensions:
            rendered = " ".join(f"{key}={value}" for key, value in self.dimensions.items())
            msg = f"{msg} [{rendered}]"
        return msg, kwargs


def _configure_base_logger() -> logging.Logger:
    """Create the package logger with a single stream handler."""
    base = logging.getLogger("payload_source")
    base.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Avoid adding handlers multiple times
    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        base.addHandler(handler)
    base.propagate = False
    return base


logger = ContextualLogger(_configure_base_logger())
