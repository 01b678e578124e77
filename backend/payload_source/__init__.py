"""Payload CMS source for content-graph stores."""

__version__ = "0.1.0"
