"""Network capabilities used by the probes."""

from riskscan.tools.http import HTTPClient, HTTPResponse
from riskscan.tools.tls import PeerCertificate, fetch_peer_certificate_async

__all__ = [
    "HTTPClient",
    "HTTPResponse",
    "PeerCertificate",
    "fetch_peer_certificate_async",
]
