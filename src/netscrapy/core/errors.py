"""Exceptions and partial-failure accounting for network scrapes."""

from dataclasses import dataclass, field


class NetscrapyError(Exception):
    """Base class for netscrapy errors."""


class ConfigError(NetscrapyError, ValueError):
    """Raised when scraper configuration has an invalid shape."""


class FilterCompileError(ConfigError):
    """Raised when an interface match pattern cannot be compiled."""


class ScraperStartError(NetscrapyError):
    """Raised when the scraper cannot establish its start timestamp."""


class StatSourceError(NetscrapyError):
    """Raised when an operating-system statistics query fails."""


class UnsupportedPlatformError(StatSourceError):
    """Raised when a statistic is not available on this platform."""


def _metrics(count: int) -> str:
    return f"{count} metric" if count == 1 else f"{count} metrics"


class PartialScrapeError(NetscrapyError):
    """Combined failures of a single scrape cycle.

    Attributes:
        errors: Ordered (failed_count, cause) pairs, one per failed group.
        failed: Total number of metrics lost to the failures.
    """

    def __init__(self, errors: list[tuple[int, BaseException]]) -> None:
        self.errors = list(errors)
        self.failed = sum(count for count, _ in self.errors)
        causes = "; ".join(
            f"{cause} ({_metrics(count)})" for count, cause in self.errors
        )
        super().__init__(f"failed to scrape {_metrics(self.failed)}: {causes}")

    @property
    def causes(self) -> list[BaseException]:
        """The underlying exceptions, in the order they were added."""
        return [cause for _, cause in self.errors]


# @tra: Core.ScrapeErrors.AccumulatesWithoutShortCircuit
@dataclass
class ScrapeErrors:
    """Accumulates group failures across one scrape cycle."""

    _errors: list[tuple[int, BaseException]] = field(default_factory=list)

    def add_partial(self, failed: int, cause: BaseException) -> None:
        """Record a failure that cost ``failed`` metrics."""
        self._errors.append((failed, cause))

    def add(self, cause: BaseException) -> None:
        """Record a failure that is not tied to a metric count."""
        self._errors.append((0, cause))

    def __len__(self) -> int:
        return len(self._errors)

    def combine(self) -> PartialScrapeError | None:
        """Return a single error describing every failure, or None."""
        if not self._errors:
            return None
        return PartialScrapeError(self._errors)
