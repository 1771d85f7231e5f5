"""Country, state and city accessors.

Single-entity getters return None and collection getters return [] when the
entity does not exist; every other failure propagates to the caller.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from models.country import City, Country, CountryMeta, State
from services import paths
from services.document_loader import DocumentLoader
from services.segment_resolver import SegmentResolver
from utils.errors import NotFoundError, ParseError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

_ROOT_SCOPE = (paths.COUNTRIES,)


def build_model(model: type[M], document: Any, path: paths.LogicalPath) -> M:
    if not isinstance(document, dict):
        raise ParseError(f"{path} is not an object", path=str(path))
    try:
        return model.model_validate(document)
    except ValidationError as e:
        raise ParseError(f"{path} has an unexpected shape: {e}", path=str(path)) from e


def build_models(model: type[M], document: Any, path: paths.LogicalPath) -> list[M]:
    if not isinstance(document, list):
        raise ParseError(f"{path} is not an array", path=str(path))
    return [build_model(model, record, path) for record in document]


async def _limited(semaphore: asyncio.Semaphore, call: Awaitable[T]) -> T:
    async with semaphore:
        return await call


class CountryService:
    def __init__(
        self,
        loader: DocumentLoader,
        resolver: SegmentResolver,
        max_concurrency: int = 8,
    ):
        self.loader = loader
        self.resolver = resolver
        self.max_concurrency = max_concurrency

    async def _country_segment(self, country_code: str) -> str | None:
        return await self.resolver.resolve(_ROOT_SCOPE, country_code.upper())

    async def _load_list(self, model: type[M], path: paths.LogicalPath) -> list[M]:
        try:
            document = await self.loader.load(path)
        except NotFoundError:
            return []
        return build_models(model, document, path)

    # ── Loaders ──────────────────────────────────────────────────────

    async def get_countries(self) -> list[Country]:
        """Lightweight list of every country (no timezones or translations)."""
        return await self._load_list(Country, paths.countries_list())

    async def get_country_by_code(self, country_code: str) -> CountryMeta | None:
        """Full country record including timezones and translations."""
        segment = await self._country_segment(country_code)
        if segment is None:
            return None
        path = paths.country_meta(segment)
        try:
            document = await self.loader.load(path)
        except NotFoundError:
            return None
        return build_model(CountryMeta, document, path)

    async def get_states_of_country(self, country_code: str) -> list[State]:
        segment = await self._country_segment(country_code)
        if segment is None:
            return []
        return await self._load_list(State, paths.states_of(segment))

    async def get_state_by_code(self, country_code: str, state_code: str) -> State | None:
        states = await self.get_states_of_country(country_code)
        return next((s for s in states if s.iso2 == state_code), None)

    async def get_cities_of_state(self, country_code: str, state_code: str) -> list[City]:
        country_code = country_code.upper()
        country_segment = await self._country_segment(country_code)
        if country_segment is None:
            return []
        state_segment = await self.resolver.resolve(
            (paths.COUNTRIES, country_segment), state_code
        )
        if state_segment is None:
            return []

        cities = await self._load_list(City, paths.cities_of(country_segment, state_segment))
        matching = [
            c for c in cities if c.country_code == country_code and c.state_code == state_code
        ]
        if len(matching) != len(cities):
            logger.warning(
                "Dropped %d cities under %s/%s with mismatched parent codes",
                len(cities) - len(matching), country_code, state_code,
            )
        return matching

    async def get_city_by_id(
        self, country_code: str, state_code: str, city_id: int
    ) -> City | None:
        cities = await self.get_cities_of_state(country_code, state_code)
        return next((c for c in cities if c.id == city_id), None)

    # ── Aggregates ───────────────────────────────────────────────────

    async def _cities_of_country(
        self, country_code: str, semaphore: asyncio.Semaphore
    ) -> list[City]:
        states = await _limited(semaphore, self.get_states_of_country(country_code))
        per_state = await asyncio.gather(*(
            _limited(semaphore, self.get_cities_of_state(country_code, s.iso2))
            for s in states
        ))
        return [city for cities in per_state for city in cities]

    async def get_all_cities_of_country(self, country_code: str) -> list[City]:
        """Every city in a country, one document per state.

        At most ``max_concurrency`` documents are loaded at a time.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        return await self._cities_of_country(country_code, semaphore)

    async def get_all_cities_in_world(self) -> list[City]:
        """Every city in the dataset. Loads every city document; use sparingly."""
        countries = await self.get_countries()
        semaphore = asyncio.Semaphore(self.max_concurrency)
        per_country = await asyncio.gather(*(
            self._cities_of_country(c.iso2, semaphore) for c in countries
        ))
        logger.info("Loaded cities for %d countries", len(countries))
        return [city for cities in per_country for city in cities]

    # ── Utilities ────────────────────────────────────────────────────

    async def is_valid_country_code(self, country_code: str) -> bool:
        code = country_code.upper()
        return any(c.iso2 == code for c in await self.get_countries())

    async def is_valid_state_code(self, country_code: str, state_code: str) -> bool:
        states = await self.get_states_of_country(country_code)
        return any(s.iso2 == state_code for s in states)

    async def search_cities_by_name(
        self, country_code: str, state_code: str, search_term: str
    ) -> list[City]:
        """Case-insensitive substring match within one state."""
        term = search_term.lower()
        cities = await self.get_cities_of_state(country_code, state_code)
        return [c for c in cities if term in c.name.lower()]

    async def get_country_name_by_code(self, country_code: str) -> str | None:
        code = country_code.upper()
        country = next((c for c in await self.get_countries() if c.iso2 == code), None)
        return country.name if country else None

    async def get_state_name_by_code(self, country_code: str, state_code: str) -> str | None:
        state = await self.get_state_by_code(country_code, state_code)
        return state.name if state else None

    async def get_timezone_for_city(
        self, country_code: str, state_code: str, city_name: str
    ) -> str | None:
        cities = await self.get_cities_of_state(country_code, state_code)
        city = next((c for c in cities if c.name == city_name), None)
        return city.timezone if city else None

    async def get_country_timezones(self, country_code: str) -> list[str]:
        country = await self.get_country_by_code(country_code)
        if not country:
            return []
        return [tz.zoneName for tz in country.timezones]
