"""Runtime settings for the scan engine."""

from dataclasses import dataclass
from pathlib import Path

from .env_loader import global_config_dir
from .getters import get_bool, get_config, get_float, get_int

VERSION = "0.1.0"
DEFAULT_USER_AGENT = f"riskscan/{VERSION}"


def default_db_url() -> str:
    return f"sqlite:///{global_config_dir() / 'scans.db'}"


@dataclass
class ScanSettings:
    """Timeouts, limits and storage location used by a scan manager."""

    db_url: str = ""
    http_timeout: float = 10.0
    http_max_redirects: int = 5
    probe_timeout: float = 5.0
    probe_max_redirects: int = 3
    tls_timeout: float = 10.0
    tls_port: int = 443
    port_scan_enabled: bool = False
    port_timeout: float = 1.0
    port_concurrency: int = 20
    max_concurrent_scans: int = 0
    rules_file: Path | None = None
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not self.db_url:
            self.db_url = default_db_url()

    @classmethod
    def from_config(cls, work_dir: Path | None = None) -> "ScanSettings":
        """Build settings from env vars, the local .env and ~/.riskscan/config.yml."""
        rules_file = get_config("RISKSCAN_RULES_FILE", work_dir)
        return cls(
            db_url=get_config("RISKSCAN_DB_URL", work_dir, "") or "",
            http_timeout=get_float("RISKSCAN_HTTP_TIMEOUT", cls.http_timeout, work_dir),
            http_max_redirects=get_int(
                "RISKSCAN_HTTP_MAX_REDIRECTS", cls.http_max_redirects, work_dir
            ),
            probe_timeout=get_float("RISKSCAN_PROBE_TIMEOUT", cls.probe_timeout, work_dir),
            probe_max_redirects=get_int(
                "RISKSCAN_PROBE_MAX_REDIRECTS", cls.probe_max_redirects, work_dir
            ),
            tls_timeout=get_float("RISKSCAN_TLS_TIMEOUT", cls.tls_timeout, work_dir),
            tls_port=get_int("RISKSCAN_TLS_PORT", cls.tls_port, work_dir),
            port_scan_enabled=get_bool("RISKSCAN_PORT_SCAN", cls.port_scan_enabled, work_dir),
            port_timeout=get_float("RISKSCAN_PORT_TIMEOUT", cls.port_timeout, work_dir),
            port_concurrency=max(
                1, get_int("RISKSCAN_PORT_CONCURRENCY", cls.port_concurrency, work_dir)
            ),
            max_concurrent_scans=max(
                0, get_int("RISKSCAN_MAX_CONCURRENT_SCANS", cls.max_concurrent_scans, work_dir)
            ),
            rules_file=Path(rules_file).expanduser() if rules_file else None,
            user_agent=get_config("RISKSCAN_USER_AGENT", work_dir, cls.user_agent),
            log_level=str(get_config("RISKSCAN_LOG_LEVEL", work_dir, cls.log_level)).upper(),
        )


def load_scan_settings(work_dir: Path | None = None) -> ScanSettings:
    """Load settings with layered config lookup."""
    return ScanSettings.from_config(work_dir)
