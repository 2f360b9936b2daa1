"""Case-insensitive response header helpers."""

from collections.abc import Iterable, Mapping


def lookup_headers(headers: Mapping[str, str], names: Iterable[str]) -> dict[str, str | None]:
    """Return ``{name: value}`` for each name, ``None`` when the header is absent."""
    # Headers may be lowercase in response, so check case-insensitively
    lowered = {k.lower(): v for k, v in headers.items()}
    return {name: lowered.get(name.lower()) for name in names}
