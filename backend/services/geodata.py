"""Wires configuration, cache, loader and resolver into the two facades.

Each GeoData instance owns its own cache and strategy list, so differently
configured instances can live side by side in one process.
"""

import logging

import httpx

from config import Settings, settings as default_settings
from services.cache_service import ResultCache
from services.country_service import CountryService
from services.document_loader import DocumentLoader
from services.segment_resolver import SegmentResolver
from services.strategies import (
    HostEnvironment,
    ResolutionStrategy,
    build_strategies,
    data_roots,
)
from services.timezone_service import TimezoneService
from utils.http_client import close_client, create_client

logger = logging.getLogger(__name__)


class GeoData:
    def __init__(
        self,
        settings: Settings | None = None,
        strategies: list[ResolutionStrategy] | None = None,
        environment: HostEnvironment | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or default_settings
        self.environment = environment or HostEnvironment.detect(
            self.settings.source, [root for _, root in data_roots(self.settings)]
        )
        self.cache = ResultCache(enabled=self.settings.cache_enabled)

        self._client: httpx.AsyncClient | None = None
        if self.settings.base_url:
            self._client = create_client(
                self.settings.request_headers, self.settings.request_timeout, transport
            )
        if strategies is None:
            strategies = build_strategies(self.settings, self._client)

        self.loader = DocumentLoader(strategies, self.cache, self.environment)
        self.resolver = SegmentResolver(self.loader, self.cache)
        self.countries = CountryService(
            self.loader, self.resolver, self.settings.max_concurrency
        )
        self.timezones = TimezoneService(self.loader)
        logger.debug(
            "GeoData ready on %s host with strategies %s",
            self.environment.describe(), self.loader.strategies,
        )

    def clear_cache(self) -> None:
        self.cache.clear()

    async def aclose(self) -> None:
        await close_client(self._client)
        self._client = None


_geodata: GeoData | None = None


def get_geodata() -> GeoData:
    global _geodata
    if _geodata is None:
        _geodata = GeoData()
    return _geodata


async def close_geodata():
    global _geodata
    if _geodata is not None:
        await _geodata.aclose()
        _geodata = None
