"""HTTP helpers for riskscan."""

from .client import HTTPClient, HTTPResponse
from .headers import lookup_headers

__all__ = [
    "HTTPClient",
    "HTTPResponse",
    "lookup_headers",
]
