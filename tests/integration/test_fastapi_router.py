"""Integration tests for the FastAPI network metrics router."""

import json

import pytest

fastapi = pytest.importorskip("fastapi")
httpx = pytest.importorskip("httpx")

from netscrapy.adapters.frameworks.fastapi import (  # noqa: E402
    create_network_metrics_router,
)
from netscrapy.adapters.storage.in_memory import InMemorySnapshotStorage  # noqa: E402

pytestmark = [pytest.mark.asgi, pytest.mark.tier(2)]


@pytest.fixture
def storage() -> InMemorySnapshotStorage:
    return InMemorySnapshotStorage()


@pytest.fixture
def client(storage: InMemorySnapshotStorage):
    app = fastapi.FastAPI()
    app.include_router(create_network_metrics_router(storage))
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    )


class TestMetricsEndpoint:
    """Tests for the /metrics endpoint."""

    @pytest.mark.tra("Adapter.FastAPI.NotReadyBeforeFirstScrape")
    async def test_returns_503_before_first_scrape(self, client) -> None:
        async with client:
            response = await client.get("/metrics")

        assert response.status_code == 503

    async def test_returns_ndjson_of_latest_snapshot(
        self, client, storage, started_scraper
    ) -> None:
        await storage.write(await started_scraper.scrape())

        async with client:
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/x-ndjson"
        lines = [json.loads(line) for line in response.text.strip().split("\n")]
        eth0_io = [
            line
            for line in lines
            if line["name"] == "system.network.io"
            and line["labels"]["device"] == "eth0"
        ]
        assert {line["labels"]["direction"]: line["value"] for line in eth0_io} == {
            "transmit": 1000,
            "receive": 2000,
        }
        assert "X-Scrape-Failed-Metrics" not in response.headers

    async def test_failed_metric_count_header(
        self, client, storage, started_scraper, source
    ) -> None:
        source.io_error = OSError("boom")
        await storage.write(await started_scraper.scrape())

        async with client:
            response = await client.get("/metrics")

        assert response.headers["X-Scrape-Failed-Metrics"] == "4"


class TestPrometheusEndpoint:
    """Tests for the /metrics/prometheus endpoint."""

    async def test_returns_503_before_first_scrape(self, client) -> None:
        async with client:
            response = await client.get("/metrics/prometheus")

        assert response.status_code == 503

    async def test_returns_text_format(self, client, storage, started_scraper) -> None:
        await storage.write(await started_scraper.scrape())

        async with client:
            response = await client.get("/metrics/prometheus")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "# TYPE system_network_packets_total counter" in response.text
        assert "# TYPE system_network_connections gauge" in response.text
