"""Example FastAPI application serving host network metrics.

Run with:
    uvicorn examples.fastapi_example:app --reload

Endpoints:
    /metrics              - NDJSON samples of the latest scrape
    /metrics/prometheus   - Prometheus text format of the latest scrape

Environment:
    SCRAPE_INTERVAL       - Seconds between scrapes (default 10)
    HOST_PROC             - Proc filesystem root when running in a container
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from netscrapy import (
    InMemorySnapshotStorage,
    NetworkScraperConfig,
    ScrapeController,
    create_network_scraper,
)
from netscrapy.adapters.frameworks.fastapi import create_network_metrics_router

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

config = NetworkScraperConfig.from_dict(
    {
        "metrics": {
            "system.network.udp.datagrams": {"enabled": True},
            "system.network.udp.errors": {"enabled": True},
        },
        "exclude": {"interfaces": ["lo", "^veth", "^docker"], "match_type": "regexp"},
        "env": {k: v for k, v in os.environ.items() if k == "HOST_PROC"},
    }
)
storage = InMemorySnapshotStorage()
controller = ScrapeController(
    create_network_scraper(config),
    storage,
    interval=float(os.environ.get("SCRAPE_INTERVAL", 10)),
    timeout=5.0,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await controller.start()
    yield
    await controller.stop()


app = FastAPI(title="Network Metrics Example", lifespan=lifespan)
app.include_router(create_network_metrics_router(storage))
