"""Interface name filtering."""

import re
from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

from netscrapy.core.config import MatchConfig, MatchType
from netscrapy.core.errors import FilterCompileError
from netscrapy.core.models import NetIOCounters


class FilterSet(Protocol):
    def matches(self, name: str) -> bool: ...


class StrictFilterSet:
    """Matches names equal to one of the patterns."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self._names = frozenset(patterns)

    def matches(self, name: str) -> bool:
        return name in self._names


class RegexpFilterSet:
    """Matches names where any pattern is found (unanchored search)."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self._patterns: list[re.Pattern[str]] = []
        for pattern in patterns:
            try:
                self._patterns.append(re.compile(pattern))
            except re.error as exc:
                raise FilterCompileError(
                    f"invalid interface pattern {pattern!r}: {exc}"
                ) from exc

    def matches(self, name: str) -> bool:
        return any(p.search(name) for p in self._patterns)


def create_filter_set(
    patterns: Sequence[str], match_type: MatchType | str
) -> FilterSet:
    """Compile patterns into a filter set.

    Raises:
        FilterCompileError: If the match type is unknown or a pattern is invalid.
    """
    try:
        match_type = MatchType(match_type)
    except ValueError as exc:
        raise FilterCompileError(f"unknown match type {match_type!r}") from exc
    if match_type is MatchType.REGEXP:
        return RegexpFilterSet(patterns)
    return StrictFilterSet(patterns)


_T = TypeVar("_T", bound=NetIOCounters)


# @tra: Core.InterfaceFilter.IncludeThenExclude
class InterfaceFilter:
    """Include/exclude predicate over network interface names.

    An interface is kept when it matches the include set (or there is none)
    and does not match the exclude set (or there is none).
    """

    def __init__(
        self,
        include: FilterSet | None = None,
        exclude: FilterSet | None = None,
    ) -> None:
        self._include = include
        self._exclude = exclude

    @classmethod
    def from_config(
        cls, include: MatchConfig | None, exclude: MatchConfig | None
    ) -> "InterfaceFilter":
        """Build a filter from match configs.

        A match config with no interfaces is treated as absent.

        Raises:
            FilterCompileError: If any pattern cannot be compiled.
        """
        include_fs = None
        exclude_fs = None
        if include is not None and include.interfaces:
            try:
                include_fs = create_filter_set(include.interfaces, include.match_type)
            except FilterCompileError as exc:
                raise FilterCompileError(
                    f"error creating network interface include filters: {exc}"
                ) from exc
        if exclude is not None and exclude.interfaces:
            try:
                exclude_fs = create_filter_set(exclude.interfaces, exclude.match_type)
            except FilterCompileError as exc:
                raise FilterCompileError(
                    f"error creating network interface exclude filters: {exc}"
                ) from exc
        return cls(include_fs, exclude_fs)

    @property
    def is_noop(self) -> bool:
        return self._include is None and self._exclude is None

    def matches(self, name: str) -> bool:
        return (self._include is None or self._include.matches(name)) and (
            self._exclude is None or not self._exclude.matches(name)
        )

    def filter_by_interface(self, counters: list[_T]) -> list[_T]:
        """Return the counters whose interface name passes the filter.

        With no include or exclude set the input list itself is returned.
        """
        if self.is_noop:
            return counters
        return [c for c in counters if self.matches(c.name)]
