"""File download module for materializing uploads locally."""

from .service import RemoteFileMaterializer

__all__ = ["RemoteFileMaterializer"]
