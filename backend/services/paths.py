"""Logical paths addressing documents in the data tree.

A logical path is a sequence of segment names plus a document kind; it is
the cache key and is turned into a concrete location only by a resolution
strategy.
"""

from dataclasses import dataclass
from enum import Enum

COUNTRIES = "countries"
TIMEZONES = "timezones"


class DocumentKind(str, Enum):
    LIST = "list"
    META = "meta"
    CHILDREN = "children"


@dataclass(frozen=True)
class LogicalPath:
    segments: tuple[str, ...]
    kind: DocumentKind
    name: str

    @property
    def scope(self) -> tuple[str, ...]:
        return self.segments

    def relative(self) -> str:
        return "/".join((*self.segments, f"{self.name}.json"))

    def __str__(self) -> str:
        return self.relative()


def countries_list() -> LogicalPath:
    return LogicalPath((COUNTRIES,), DocumentKind.LIST, "countries")


def country_meta(country_segment: str) -> LogicalPath:
    return LogicalPath((COUNTRIES, country_segment), DocumentKind.META, "meta")


def states_of(country_segment: str) -> LogicalPath:
    return LogicalPath((COUNTRIES, country_segment), DocumentKind.CHILDREN, "states")


def cities_of(country_segment: str, state_segment: str) -> LogicalPath:
    return LogicalPath(
        (COUNTRIES, country_segment, state_segment), DocumentKind.CHILDREN, "cities"
    )


def timezones_list() -> LogicalPath:
    return LogicalPath((TIMEZONES,), DocumentKind.LIST, "timezones")


def abbreviations_list() -> LogicalPath:
    return LogicalPath((TIMEZONES,), DocumentKind.LIST, "abbreviations")


def timezones_of(country_code: str) -> LogicalPath:
    return LogicalPath((TIMEZONES, "by-country"), DocumentKind.CHILDREN, country_code)


def scope_index(scope: tuple[str, ...]) -> LogicalPath | None:
    """Document listing the children of a scope, used to derive segment names."""
    if scope == (COUNTRIES,):
        return countries_list()
    if len(scope) == 2 and scope[0] == COUNTRIES:
        return states_of(scope[1])
    return None
