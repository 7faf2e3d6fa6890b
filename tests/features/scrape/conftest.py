"""BDD step definitions for network scrape features."""

import asyncio
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from netscrapy.core.config import MatchConfig, MetricsConfig, NetworkScraperConfig
from netscrapy.core.models import NetIOCounters
from netscrapy.core.scraper import ALL_TCP_STATES, NetworkScraper, ScrapeResult
from tests.fakes import FakeStatSource, eth0_counters, eth1_counters


@dataclass
class ScrapeScenarioContext:
    """Shared state between steps in a scrape scenario."""

    source: FakeStatSource = field(default_factory=FakeStatSource)
    config: NetworkScraperConfig = field(default_factory=NetworkScraperConfig)
    result: ScrapeResult | None = None


@pytest.fixture
def ctx() -> ScrapeScenarioContext:
    """Fresh scenario context for each test."""
    return ScrapeScenarioContext()


def _device_samples(ctx: ScrapeScenarioContext, device: str) -> list:
    assert ctx.result is not None
    return [s for s in ctx.result.snapshot.samples if s.labels.get("device") == device]


# === Given ===


@given(parsers.parse('the host has interface "{name}" with counters'))
def step_interface_with_counters(
    ctx: ScrapeScenarioContext, name: str, datatable: list[list[str]]
) -> None:
    values = {row[0]: int(row[1]) for row in datatable[1:]}
    ctx.source.io = [NetIOCounters(name=name, **values)]


@given(parsers.parse('the host has interfaces "{first}" and "{second}"'))
def step_two_interfaces(ctx: ScrapeScenarioContext, first: str, second: str) -> None:
    assert (first, second) == ("eth0", "eth1")
    ctx.source.io = [eth0_counters(), eth1_counters()]


@given("the host has no TCP connections")
def step_no_connections(ctx: ScrapeScenarioContext) -> None:
    ctx.source.conns = []


@given("the host reports no protocol counters")
def step_no_protocol_counters(ctx: ScrapeScenarioContext) -> None:
    ctx.source.protocols = []


@given(parsers.parse('the IO counters query fails with "{message}"'))
def step_io_fails(ctx: ScrapeScenarioContext, message: str) -> None:
    ctx.source.io_error = OSError(message)


@given("the scraper uses the default configuration")
def step_default_config(ctx: ScrapeScenarioContext) -> None:
    ctx.config = NetworkScraperConfig()


@given(parsers.parse('the scraper excludes interface "{name}"'))
def step_exclude(ctx: ScrapeScenarioContext, name: str) -> None:
    ctx.config = NetworkScraperConfig(exclude=MatchConfig(interfaces=(name,)))


@given(parsers.parse('the scraper enables "{metric}"'))
def step_enable_metric(ctx: ScrapeScenarioContext, metric: str) -> None:
    ctx.config = NetworkScraperConfig(
        metrics=MetricsConfig.from_dict({metric: {"enabled": True}})
    )


# === When ===


@when("the scraper is started and scrapes once")
def step_scrape(ctx: ScrapeScenarioContext) -> None:
    scraper = NetworkScraper(ctx.config, ctx.source)

    async def run() -> ScrapeResult:
        await scraper.start()
        return await scraper.scrape()

    ctx.result = asyncio.run(run())


# === Then ===


@then(parsers.parse('interface "{name}" has {count:d} data points'))
def step_point_count(ctx: ScrapeScenarioContext, name: str, count: int) -> None:
    assert len(_device_samples(ctx, name)) == count


@then(
    parsers.parse(
        'interface "{name}" reports "{metric}" transmit {tx:d} and receive {rx:d}'
    )
)
def step_direction_values(
    ctx: ScrapeScenarioContext, name: str, metric: str, tx: int, rx: int
) -> None:
    values = {
        s.labels["direction"]: s.value
        for s in _device_samples(ctx, name)
        if s.name == metric
    }
    assert values == {"transmit": tx, "receive": rx}


@then("every TCP state is reported with value 0")
def step_all_states_zero(ctx: ScrapeScenarioContext) -> None:
    assert ctx.result is not None
    series = ctx.result.snapshot.series("system.network.connections")
    assert sorted(s.labels["state"] for s in series) == sorted(ALL_TCP_STATES)
    assert all(s.value == 0 for s in series)


@then("a snapshot is returned")
def step_snapshot_returned(ctx: ScrapeScenarioContext) -> None:
    assert ctx.result is not None
    assert ctx.result.snapshot is not None


@then("the scrape has no error")
def step_no_error(ctx: ScrapeScenarioContext) -> None:
    assert ctx.result is not None
    assert ctx.result.error is None


@then(parsers.parse("the scrape error reports {count:d} failed metrics"))
def step_failed_count(ctx: ScrapeScenarioContext, count: int) -> None:
    assert ctx.result is not None and ctx.result.error is not None
    assert ctx.result.error.failed == count


@then(parsers.parse('the scrape error mentions "{text}"'))
def step_error_mentions(ctx: ScrapeScenarioContext, text: str) -> None:
    assert ctx.result is not None and ctx.result.error is not None
    assert text in str(ctx.result.error)
