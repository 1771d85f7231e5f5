"""Resolution strategies: candidate ways of turning a logical path into data.

The list of strategies is fixed when the loader is built; nothing downstream
inspects which kind of host it is running on.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from config import Settings
from services.paths import LogicalPath
from utils.errors import (
    EnvironmentMismatch,
    LoadTimeoutError,
    NotFoundError,
    SourceUnavailableError,
)
from utils.json_helpers import parse_document

logger = logging.getLogger(__name__)

FILESYSTEM = "filesystem"
NETWORK = "network"

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class HostEnvironment:
    filesystem: bool
    network: bool

    def supports(self, capability: str) -> bool:
        return {FILESYSTEM: self.filesystem, NETWORK: self.network}.get(capability, False)

    def describe(self) -> str:
        caps = [c for c in (FILESYSTEM, NETWORK) if self.supports(c)]
        return "+".join(caps) or "none"

    @classmethod
    def detect(cls, mode: str = "auto", roots: list[Path] | None = None) -> "HostEnvironment":
        """In auto mode the host counts as filesystem-capable only when one
        of the candidate data roots exists on disk."""
        if mode == FILESYSTEM:
            return cls(filesystem=True, network=False)
        if mode == NETWORK:
            return cls(filesystem=False, network=True)
        return cls(filesystem=any(Path(root).is_dir() for root in roots or ()), network=True)


class ResolutionStrategy(ABC):
    name: str = "base"
    capability: str = FILESYSTEM

    @abstractmethod
    def location(self, path: LogicalPath) -> str:
        raise NotImplementedError

    @abstractmethod
    async def fetch(self, path: LogicalPath) -> Any:
        """Return the parsed document or raise NotFoundError for a missing candidate."""
        raise NotImplementedError

    async def list_segments(self, scope: tuple[str, ...]) -> list[str]:
        raise EnvironmentMismatch(
            f"{self.name} strategy cannot enumerate segments", path="/".join(scope)
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def _read_file(file_path: Path) -> bytes | None:
    try:
        return file_path.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


def _list_dirs(dir_path: Path) -> list[str] | None:
    if not dir_path.is_dir():
        return None
    return sorted(entry.name for entry in dir_path.iterdir() if entry.is_dir())


class FileSystemStrategy(ResolutionStrategy):
    capability = FILESYSTEM

    def __init__(self, root: Path, name: str = "filesystem"):
        self.root = Path(root)
        self.name = name

    def location(self, path: LogicalPath) -> str:
        return str(self.root.joinpath(*path.segments, f"{path.name}.json"))

    async def fetch(self, path: LogicalPath) -> Any:
        location = self.location(path)
        loop = asyncio.get_running_loop()
        try:
            raw = await loop.run_in_executor(None, partial(_read_file, Path(location)))
        except OSError as e:
            logger.error("Could not read %s: %s", location, e)
            raise SourceUnavailableError(f"Could not read {location}: {e}", path=str(path)) from e
        if raw is None:
            raise NotFoundError(f"{location} does not exist", path=str(path))
        return parse_document(raw, location, str(path))

    async def list_segments(self, scope: tuple[str, ...]) -> list[str]:
        dir_path = self.root.joinpath(*scope)
        loop = asyncio.get_running_loop()
        try:
            names = await loop.run_in_executor(None, partial(_list_dirs, dir_path))
        except OSError as e:
            logger.error("Could not list %s: %s", dir_path, e)
            raise SourceUnavailableError(
                f"Could not list {dir_path}: {e}", path="/".join(scope)
            ) from e
        if names is None:
            raise NotFoundError(f"{dir_path} is not a directory", path="/".join(scope))
        return names


class HttpStrategy(ResolutionStrategy):
    name = "http"
    capability = NETWORK

    def __init__(self, base_url: str, client: httpx.AsyncClient, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def location(self, path: LogicalPath) -> str:
        return f"{self.base_url}/{quote(path.relative())}"

    async def fetch(self, path: LogicalPath) -> Any:
        url = self.location(path)
        try:
            response = await asyncio.wait_for(
                self._client.get(url, timeout=self.timeout), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("Timed out after %.2fs loading %s", self.timeout, url)
            raise LoadTimeoutError(
                f"Request timeout loading {url} ({self.timeout}s)",
                path=str(path),
                timeout=self.timeout,
            ) from e
        except httpx.TransportError as e:
            raise SourceUnavailableError(f"Could not reach {url}: {e}", path=str(path)) from e

        if response.status_code in (404, 410):
            raise NotFoundError(f"{url} returned HTTP {response.status_code}", path=str(path))
        if response.status_code >= 400:
            logger.error("HTTP %s loading %s", response.status_code, url)
            raise SourceUnavailableError(
                f"Failed to load {url}: HTTP {response.status_code} {response.reason_phrase}",
                path=str(path),
                status_code=response.status_code,
            )
        return parse_document(response.content, url, str(path))


def data_roots(settings: Settings) -> list[tuple[str, Path]]:
    """Named filesystem roots in lookup order: configured dir, package dir,
    one level up, then the absolute install root."""
    roots = []
    if settings.data_dir is not None:
        roots.append(("configured", Path(settings.data_dir)))
    roots += [
        ("module", _PACKAGE_DIR / "data"),
        ("parent", _PACKAGE_DIR.parent / "data"),
        ("install-root", Path(settings.install_root)),
    ]
    return roots


def build_strategies(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> list[ResolutionStrategy]:
    """Ordered candidate list: the filesystem roots, then the network origin
    when one is set."""
    strategies: list[ResolutionStrategy] = [
        FileSystemStrategy(root, name) for name, root in data_roots(settings)
    ]
    if settings.base_url:
        if client is None:
            raise ValueError("An HTTP client is required when base_url is set")
        strategies.append(HttpStrategy(settings.base_url, client, settings.request_timeout))
    return strategies
