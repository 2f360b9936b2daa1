"""Common-port exposure probe (TCP connect)."""

import asyncio
import logging
import socket
from collections.abc import Awaitable, Callable, Mapping, Sequence

from .models import PortInfo, ProbeResult
from .rules import CANDIDATE_PORTS, PORT_RISKS

logger = logging.getLogger(__name__)

PortConnector = Callable[[str, int, float], Awaitable[str]]


async def tcp_connect_state(host: str, port: int, timeout: float) -> str:
    """Return open, closed (refused) or filtered (no answer in time).

    Name resolution errors propagate as socket.gaierror, or UnicodeError
    for names that cannot be IDNA-encoded.
    """
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except TimeoutError:
        return "filtered"
    except socket.gaierror:
        raise
    except OSError:
        return "closed"

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return "open"


async def scan_ports(
    host: str,
    enabled: bool = False,
    ports: Sequence[int] = CANDIDATE_PORTS,
    risks: Mapping[int, tuple[str, str]] = PORT_RISKS,
    timeout: float = 1.0,
    concurrency: int = 20,
    connect: PortConnector = tcp_connect_state,
) -> ProbeResult[list[PortInfo]]:
    """Report open candidate ports on *host*.

    Disabled, this returns an empty list without touching the network.
    """
    if not enabled:
        return ProbeResult.ok([])

    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def check(port: int) -> tuple[int, str]:
        async with semaphore:
            return port, await connect(host, port, timeout)

    try:
        states = await asyncio.gather(*(check(port) for port in ports))
    except (socket.gaierror, UnicodeError) as exc:
        logger.warning("Port probe could not resolve %s: %s", host, exc)
        return ProbeResult.degrade([], f"name resolution failed: {exc}")

    open_ports = []
    for port, state in states:
        if state != "open":
            continue
        service, risk = risks.get(port, (None, "info"))
        open_ports.append(PortInfo(port=port, state=state, service=service, risk=risk))
    return ProbeResult.ok(open_ports)
