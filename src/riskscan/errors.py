"""Error types raised by the scan engine."""


class RiskScanError(Exception):
    """Base class for scan engine errors."""


class InvalidTarget(RiskScanError, ValueError):
    """The supplied host or URL cannot be turned into a scan target."""

    def __init__(self, target: str, reason: str = "Invalid URL format"):
        self.target = target
        self.reason = reason
        super().__init__(f"{reason}: {target!r}")


class ScanNotFound(RiskScanError, LookupError):
    """No scan job exists for the given identifier."""

    def __init__(self, scan_id: str):
        self.scan_id = scan_id
        super().__init__(f"Scan not found: {scan_id}")


class InvalidTransition(RiskScanError):
    """A status change outside pending -> running -> completed|failed."""

    def __init__(self, scan_id: str, current: str, requested: str):
        self.scan_id = scan_id
        self.current = current
        self.requested = requested
        super().__init__(f"Scan {scan_id}: cannot move from {current} to {requested}")
