import asyncio
from pathlib import Path
from urllib.parse import unquote

import httpx
import pytest

from config import Settings
from services.geodata import GeoData
from services.strategies import HostEnvironment

FIXTURE_DATA = Path(__file__).resolve().parent / "fixtures" / "data"

BASE_URL = "https://cdn.example.test/geodata"


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "data_dir": FIXTURE_DATA,
        "install_root": tmp_path / "missing-install-root",
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


def serve_tree(root: Path, requests: list | None = None, delay: float = 0.0):
    """MockTransport handler serving a data tree the way a static host would."""

    async def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if delay:
            await asyncio.sleep(delay)
        prefix = httpx.URL(BASE_URL).path
        relative = unquote(request.url.path)[len(prefix):].lstrip("/")
        file_path = root / relative
        if not file_path.is_file():
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, content=file_path.read_bytes())

    return handler


@pytest.fixture
def geo(tmp_path):
    return GeoData(
        make_settings(tmp_path),
        environment=HostEnvironment(filesystem=True, network=False),
    )


@pytest.fixture
def network_geo(tmp_path):
    """A network-only host reading the fixture tree over HTTP."""
    requests: list[httpx.Request] = []
    instance = GeoData(
        make_settings(tmp_path, data_dir=None, base_url=BASE_URL, source="network"),
        transport=httpx.MockTransport(serve_tree(FIXTURE_DATA, requests)),
    )
    instance.requests = requests
    return instance
