import logging

from services.cache_service import ResultCache
from services.document_loader import DocumentLoader
from services.paths import scope_index
from utils.errors import EnvironmentMismatch, NotFoundError, ParseError
from utils.json_helpers import segment_code, segment_name

logger = logging.getLogger(__name__)


class SegmentResolver:
    """Maps a short code to the '{Label}-{Code}' segment under a parent scope.

    The code -> segment table for a scope is built on first use and kept in
    the result cache. Concurrent first calls may both build it; the tables
    are identical so the last write is as good as the first.
    """

    def __init__(self, loader: DocumentLoader, cache: ResultCache):
        self.loader = loader
        self.cache = cache

    async def resolve(self, scope: tuple[str, ...], code: str) -> str | None:
        mapping = await self.mapping(scope)
        return mapping.get(code)

    async def mapping(self, scope: tuple[str, ...]) -> dict[str, str]:
        cached = self.cache.get_mapping(scope)
        if cached is not None:
            return cached

        mapping = {segment_code(name): name for name in await self._enumerate(scope)}
        logger.info("Indexed %d segments under %s", len(mapping), "/".join(scope))
        self.cache.set_mapping(scope, mapping)
        return mapping

    async def _enumerate(self, scope: tuple[str, ...]) -> list[str]:
        try:
            return await self.loader.list_segments(scope)
        except NotFoundError:
            return []
        except EnvironmentMismatch as e:
            logger.debug("Listing unavailable (%s), deriving segments from index", e)

        index = scope_index(scope)
        if index is None:
            return []
        try:
            records = await self.loader.load(index)
        except NotFoundError:
            return []
        if not isinstance(records, list):
            raise ParseError(f"{index} is not an array", path=str(index))
        names = []
        for record in records:
            if not isinstance(record, dict):
                raise ParseError(f"{index} holds a non-object record", path=str(index))
            if record.get("name") and record.get("iso2"):
                names.append(segment_name(record["name"], record["iso2"]))
        return names
