"""Exceptions raised by the sync engine.

Every exception here is fatal to a sync pass: nothing inside the engine retries
or recovers from them. They surface to whoever invoked the pass.
"""

from typing import Optional


class PayloadSourceError(Exception):
    """Base class for all sync engine errors."""

    pass


class InvalidTypeConfig(PayloadSourceError):
    """Raised when a type configuration entry is malformed.

    Examples:
    - An entry that is neither a string nor a mapping
    - A mapping without a non-empty string ``slug``
    - An override with a wrong value type (e.g. ``locale=3``)
    """

    def __init__(self, message: str, entry: object = None):
        """Create the error.

        Args:
            message: Human readable description
            entry: The offending configuration entry
        """
        super().__init__(message)
        self.entry = entry


class TransportError(PayloadSourceError):
    """Raised when fetching from the Payload API fails.

    The orchestrator attaches the type name and category of the descriptor whose
    fetch failed, so the message points at the broken collection or global.
    """

    def __init__(
        self,
        message: str,
        type_name: Optional[str] = None,
        category: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        """Create the error.

        Args:
            message: Human readable description
            type_name: Slug of the type that was being fetched
            category: One of "collection", "global" or "upload"
            status_code: HTTP status code, when the failure was an HTTP error
        """
        super().__init__(message)
        self.type_name = type_name
        self.category = category
        self.status_code = status_code

    def __str__(self) -> str:
        """Render the message with the originating type when known."""
        message = super().__str__()
        if self.type_name:
            return f"[{self.category or 'type'} '{self.type_name}'] {message}"
        return message


class MaterializationError(PayloadSourceError):
    """Raised when a remote file cannot be downloaded or registered as a node."""

    def __init__(self, message: str, url: Optional[str] = None):
        """Create the error.

        Args:
            message: Human readable description
            url: URL of the file that failed
        """
        super().__init__(message)
        self.url = url


class NodeSubmissionError(PayloadSourceError):
    """Raised when the host store rejects a node."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        """Create the error.

        Args:
            message: Human readable description
            node_id: Id of the rejected node, when it had one
        """
        super().__init__(message)
        self.node_id = node_id
