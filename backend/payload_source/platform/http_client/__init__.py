"""HTTP transport for the Payload REST API."""

from .payload_client import PayloadHttpClient, flatten_query_params

__all__ = ["PayloadHttpClient", "flatten_query_params"]
