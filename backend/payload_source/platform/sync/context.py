"""Session and per-pass context for syncs."""

import time
from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4

from payload_source.core.logging import ContextualLogger
from payload_source.core.logging import logger as default_logger
from payload_source.platform.contexts.protocol import CacheStore, NodeSink, ProgressReporter
from payload_source.platform.sync.config import PluginOptions


@dataclass
class SyncSession:
    """State that lives as long as the process.

    ``first_pass`` is True until the first pass has touched the nodes left over
    from earlier runs. Create one session per process and hand the same one to
    every pass; ``reset()`` starts over, e.g. when the host store is reloaded.
    """

    first_pass: bool = True
    passes: int = 0

    def reset(self) -> None:
        """Forget that a pass already ran."""
        self.first_pass = True
        self.passes = 0


@dataclass
class SyncContext:
    """Everything a single pass needs.

    Contains:
    - options - the plugin options for the site being synced
    - session - the process-lifetime session
    - sink - the host graph store
    - cache - persistent key/value store for the sync state
    - reporter - progress hooks
    - logger - contextual logger with pass metadata
    """

    options: PluginOptions
    session: SyncSession
    sink: NodeSink
    cache: CacheStore
    reporter: ProgressReporter
    logger: ContextualLogger = field(default=default_logger)
    pass_id: str = field(default_factory=lambda: uuid4().hex[:8])
    started_at_ms: int = field(default_factory=lambda: int(time.time() * 1000))

    @property
    def needs_relationships(self) -> bool:
        """The relationship index is only used by local file and CDN modes."""
        return self.options.local_files or self.options.image_cdn


class LoggingReporter:
    """Progress reporter that writes an activity timer to the logger."""

    def __init__(self, activity: str, logger: Optional[ContextualLogger] = None):
        """Create the reporter.

        Args:
            activity: Name of the activity, e.g. "Sourcing from payload-source API"
            logger: Optional contextual logger
        """
        self.activity = activity
        self.logger = logger or default_logger
        self._started: Optional[float] = None
        self.status: Optional[str] = None

    def start(self) -> None:
        """Start the timer."""
        self._started = time.monotonic()
        self.logger.info(f"{self.activity} - started")

    def end(self) -> None:
        """Stop the timer and log the elapsed time."""
        elapsed = time.monotonic() - self._started if self._started is not None else 0.0
        suffix = f" - {self.status}" if self.status else ""
        self.logger.info(f"{self.activity}{suffix} - {elapsed:.3f}s")
        self._started = None

    def set_status(self, status: str) -> None:
        """Remember the status; it is logged with the elapsed time."""
        self.status = status
        self.logger.info(f"{self.activity} - {status}")

    def verbose(self, message: str) -> None:
        """Log a detail message at debug level."""
        self.logger.debug(message)
