"""psutil-backed statistics source for the local host.

Boot time, interface IO counters and TCP connections come from psutil.
Conntrack and UDP protocol counters are read from the proc filesystem, which
is located with the ``HOST_PROC`` override (default ``/proc``) so the source
can observe a host from inside a container.
"""

import asyncio
import logging
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import psutil

from netscrapy.core.config import NetworkScraperConfig
from netscrapy.core.errors import StatSourceError, UnsupportedPlatformError
from netscrapy.core.models import (
    ConnectionRecord,
    ConntrackCounters,
    NetIOCounters,
    ProtocolCounters,
)
from netscrapy.core.scraper import NetworkScraper

logger = logging.getLogger(__name__)

# psutil spells a few states differently from the scraper's vocabulary
_STATUS_ALIASES = {
    psutil.CONN_FIN_WAIT1: "FIN_WAIT_1",
    psutil.CONN_FIN_WAIT2: "FIN_WAIT_2",
}


def _addr(value: object) -> tuple[str, int] | None:
    if not value:
        return None
    ip, port = value  # type: ignore[misc]
    return (str(ip), int(port))


# @tra: Adapter.PsutilSource.ImplementsStatSourcePort
class PsutilStatSource:
    """StatSourcePort implementation using psutil and /proc.

    Every query runs in a worker thread so it never blocks the event loop.

    Args:
        env: Environment overrides. ``HOST_PROC`` relocates the proc
            filesystem for the files this source reads directly.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = dict(env or {})

    @property
    def proc_root(self) -> Path:
        return Path(self._env.get("HOST_PROC") or os.environ.get("HOST_PROC", "/proc"))

    async def boot_time(self) -> int:
        return int(await self._run(psutil.boot_time))

    async def io_counters(self, per_interface: bool = True) -> list[NetIOCounters]:
        if not per_interface:
            total = await self._run(psutil.net_io_counters, pernic=False)
            return [self._to_io_counters("all", total)] if total else []
        per_nic = await self._run(psutil.net_io_counters, pernic=True)
        return [self._to_io_counters(name, nic) for name, nic in per_nic.items()]

    async def connections(self, kind: str = "tcp") -> list[ConnectionRecord]:
        conns = await self._run(psutil.net_connections, kind=kind)
        return [
            ConnectionRecord(
                status=_STATUS_ALIASES.get(c.status, c.status),
                laddr=_addr(c.laddr),
                raddr=_addr(c.raddr),
                pid=c.pid,
            )
            for c in conns
        ]

    async def conntrack_counters(self) -> list[ConntrackCounters]:
        self._require_linux("conntrack counters")
        return await self._run(self._read_conntrack)

    async def protocol_counters(
        self, protocols: Sequence[str]
    ) -> list[ProtocolCounters]:
        self._require_linux("protocol counters")
        return await self._run(self._read_snmp, tuple(p.lower() for p in protocols))

    async def _run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (psutil.Error, OSError, ValueError) as exc:
            raise StatSourceError(str(exc) or type(exc).__name__) from exc

    @staticmethod
    def _require_linux(what: str) -> None:
        if not sys.platform.startswith("linux"):
            raise UnsupportedPlatformError(
                f"{what} are not supported on {sys.platform}"
            )

    @staticmethod
    def _to_io_counters(name: str, nic: Any) -> NetIOCounters:
        return NetIOCounters(
            name=name,
            bytes_sent=int(nic.bytes_sent),
            bytes_recv=int(nic.bytes_recv),
            packets_sent=int(nic.packets_sent),
            packets_recv=int(nic.packets_recv),
            errin=int(nic.errin),
            errout=int(nic.errout),
            dropin=int(nic.dropin),
            dropout=int(nic.dropout),
        )

    def _read_conntrack(self) -> list[ConntrackCounters]:
        base = self.proc_root / "sys" / "net" / "netfilter"
        count = int((base / "nf_conntrack_count").read_text().strip())
        max_ = int((base / "nf_conntrack_max").read_text().strip())
        return [ConntrackCounters(count=count, max=max_)]

    def _read_snmp(self, protocols: tuple[str, ...]) -> list[ProtocolCounters]:
        path = self.proc_root / "net" / "snmp"
        logger.debug("Reading protocol counters from %s", path)
        return parse_snmp(path.read_text(), protocols)


def parse_snmp(text: str, protocols: Sequence[str] = ()) -> list[ProtocolCounters]:
    """Parse /proc/net/snmp content.

    The file holds pairs of lines per protocol: a header line naming the
    counters and a value line, both prefixed with ``<Proto>:``.

    Args:
        text: File content.
        protocols: Lower-case protocol names to keep. Empty keeps all.

    Raises:
        ValueError: If a header/value pair is malformed.
    """
    lines = [line.split() for line in text.splitlines() if line.strip()]
    result: list[ProtocolCounters] = []
    for header, values in zip(lines[::2], lines[1::2]):
        proto = header[0].rstrip(":")
        if values[0].rstrip(":") != proto or len(header) != len(values):
            raise ValueError(f"malformed snmp entry for {proto!r}")
        name = proto.lower()
        if protocols and name not in protocols:
            continue
        stats = {key: int(value) for key, value in zip(header[1:], values[1:])}
        result.append(ProtocolCounters(protocol=name, stats=stats))
    return result


def create_network_scraper(config: NetworkScraperConfig) -> NetworkScraper:
    """Build a scraper that reads the local host through psutil.

    ``config.env_overrides`` is handed to the source, so ``HOST_PROC`` there
    selects the proc filesystem to read.
    """
    return NetworkScraper(config, PsutilStatSource(env=config.env_overrides))
