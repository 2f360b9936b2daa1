"""Target validation and canonicalization."""

import ipaddress
import re
from urllib.parse import urlsplit

from riskscan.errors import InvalidTarget

_SCHEMES = ("http://", "https://")
_DEFAULT_PORTS = {"http": 80, "https": 443}
MAX_HOSTNAME_LENGTH = 253
MAX_LABEL_LENGTH = 63
_HOSTNAME_RE = re.compile(r"^[a-z0-9_]([a-z0-9_-]*[a-z0-9_])?(\.[a-z0-9_]([a-z0-9_-]*[a-z0-9_])?)*\.?$")


def _valid_host(host: str) -> bool:
    if ":" in host:
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True
    if len(host.rstrip(".")) > MAX_HOSTNAME_LENGTH:
        return False
    if any(len(label) > MAX_LABEL_LENGTH for label in host.split(".")):
        return False
    return bool(_HOSTNAME_RE.match(host))


def normalize_target(target: str) -> str:
    """Return the scheme://host[:port] origin for a bare host or URL.

    ``https://`` is assumed when no scheme is given. Path, query, fragment
    and credentials are dropped. Normalizing an already normalized value
    returns it unchanged.
    """
    candidate = (target or "").strip()
    if not candidate:
        raise InvalidTarget(target, "Empty target")

    if not candidate.lower().startswith(_SCHEMES):
        if "://" in candidate:
            raise InvalidTarget(target, "Unsupported scheme")
        candidate = f"https://{candidate}"

    try:
        parsed = urlsplit(candidate)
        host = parsed.hostname
        port = parsed.port
    except ValueError as exc:
        raise InvalidTarget(target) from exc

    if not host or not _valid_host(host):
        raise InvalidTarget(target)

    scheme = parsed.scheme.lower()
    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    return f"{scheme}://{netloc}"


def target_host(target: str) -> str:
    """Hostname part of a normalized target."""
    host = urlsplit(target).hostname
    if not host:
        raise InvalidTarget(target)
    return host
