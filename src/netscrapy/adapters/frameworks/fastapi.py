"""FastAPI adapter exposing the latest network metrics snapshot."""

from fastapi import APIRouter, Response

from netscrapy.core.encoding.ndjson import encode_ndjson
from netscrapy.core.encoding.prometheus import encode_prometheus
from netscrapy.core.ports import SnapshotStoragePort


def _not_ready() -> Response:
    return Response(
        content="No scrape has completed yet\n",
        status_code=503,
        media_type="text/plain",
    )


def create_network_metrics_router(storage: SnapshotStoragePort) -> APIRouter:
    """Create a FastAPI router with /metrics and /metrics/prometheus endpoints.

    Args:
        storage: Storage adapter implementing SnapshotStoragePort.

    Returns:
        APIRouter serving the most recent snapshot. Both endpoints answer
        503 until the first scrape result has been written.
    """
    router = APIRouter()

    @router.get("/metrics")
    async def get_metrics() -> Response:
        """Return the latest snapshot in NDJSON format."""
        result = await storage.latest()
        if result is None:
            return _not_ready()
        headers: dict[str, str] = {}
        if result.error is not None:
            headers["X-Scrape-Failed-Metrics"] = str(result.error.failed)
        return Response(
            content=encode_ndjson(result.snapshot),
            media_type="application/x-ndjson",
            headers=headers,
        )

    @router.get("/metrics/prometheus")
    async def get_prometheus() -> Response:
        """Return the latest snapshot in Prometheus text format.

        See ``encode_prometheus`` for the udp.errors/udp.no_ports overlap.
        """
        result = await storage.latest()
        if result is None:
            return _not_ready()
        return Response(
            content=encode_prometheus(result.snapshot),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return router
