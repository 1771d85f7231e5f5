import logging
from typing import Any

from services.cache_service import ABSENT, MISS, ResultCache
from services.paths import LogicalPath
from services.strategies import HostEnvironment, ResolutionStrategy
from utils.errors import EnvironmentMismatch, NotFoundError

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Loads documents by logical path through an ordered list of strategies.

    Strategies are tried strictly in order and the first one that yields a
    document wins. Missing candidates fall through to the next strategy;
    timeouts, parse failures and unreachable origins propagate immediately.
    """

    def __init__(
        self,
        strategies: list[ResolutionStrategy],
        cache: ResultCache,
        environment: HostEnvironment,
    ):
        self.strategies = list(strategies)
        self.cache = cache
        self.environment = environment
        self.load_count = 0

    def _viable(self, skipped: list[str]) -> list[ResolutionStrategy]:
        viable = []
        for strategy in self.strategies:
            if self.environment.supports(strategy.capability):
                viable.append(strategy)
            else:
                skipped.append(f"{strategy.name}: host lacks {strategy.capability}")
        return viable

    async def load(self, path: LogicalPath) -> Any:
        cached = self.cache.get(path)
        if cached is ABSENT:
            raise NotFoundError(f"{path} not found (cached)", path=str(path))
        if cached is not MISS:
            return cached

        candidates: list[str] = []
        skipped: list[str] = []
        for strategy in self._viable(skipped):
            candidates.append(strategy.location(path))
            self.load_count += 1
            try:
                document = await strategy.fetch(path)
            except NotFoundError:
                logger.debug("%s: no %s", strategy.name, path)
                continue
            except EnvironmentMismatch as e:
                skipped.append(f"{strategy.name}: {e}")
                continue
            logger.debug("Loaded %s via %s", path, strategy.name)
            self.cache.set(path, document)
            return document

        self.cache.set(path, ABSENT)
        raise NotFoundError(
            f"{path} not found in any of {len(candidates)} candidate locations",
            path=str(path),
            candidates=candidates,
            skipped=skipped,
            environment=self.environment.describe(),
        )

    async def list_segments(self, scope: tuple[str, ...]) -> list[str]:
        """Enumerate child segment names of a scope.

        Raises EnvironmentMismatch when a strategy that could not list was
        passed over and nothing else answered, so callers can fall back to an
        index document.
        """
        skipped: list[str] = []
        for strategy in self._viable(skipped):
            try:
                return await strategy.list_segments(scope)
            except NotFoundError:
                continue
            except EnvironmentMismatch as e:
                skipped.append(f"{strategy.name}: {e}")
        if skipped:
            raise EnvironmentMismatch(
                "No strategy could enumerate %s (%s)" % ("/".join(scope), "; ".join(skipped)),
                path="/".join(scope),
            )
        raise NotFoundError(
            f"{'/'.join(scope)} has no listing",
            path="/".join(scope),
            environment=self.environment.describe(),
        )
