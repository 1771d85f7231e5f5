import asyncio
import json
import time

import httpx
import pytest

from conftest import BASE_URL, FIXTURE_DATA, serve_tree
from services import paths
from services.cache_service import ResultCache
from services.document_loader import DocumentLoader
from services.strategies import FileSystemStrategy, HostEnvironment, HttpStrategy
from utils.errors import (
    EnvironmentMismatch,
    LoadTimeoutError,
    NotFoundError,
    ParseError,
    SourceUnavailableError,
)

LOCAL = HostEnvironment(filesystem=True, network=False)
ANYWHERE = HostEnvironment(filesystem=True, network=True)
NETWORK_ONLY = HostEnvironment(filesystem=False, network=True)


def make_loader(strategies, environment=LOCAL, enabled=True) -> DocumentLoader:
    return DocumentLoader(strategies, ResultCache(enabled=enabled), environment)


def http_strategy(handler, timeout=5.0, headers=None) -> HttpStrategy:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), headers=headers)
    return HttpStrategy(BASE_URL, client, timeout=timeout)


def test_loads_from_first_strategy():
    loader = make_loader([FileSystemStrategy(FIXTURE_DATA, "fixtures")])
    countries = asyncio.run(loader.load(paths.countries_list()))
    assert {c["iso2"] for c in countries} == {"AQ", "IN", "US"}
    assert loader.load_count == 1


def test_falls_back_to_later_candidate(tmp_path):
    loader = make_loader([
        FileSystemStrategy(tmp_path / "module", "module"),
        FileSystemStrategy(tmp_path / "parent", "parent"),
        FileSystemStrategy(FIXTURE_DATA, "install-root"),
    ])
    meta = asyncio.run(loader.load(paths.country_meta("United_States-US")))
    assert meta["name"] == "United States"
    assert loader.load_count == 3


def test_first_success_short_circuits(tmp_path):
    other = tmp_path / "other"
    (other / "countries").mkdir(parents=True)
    (other / "countries" / "countries.json").write_text(json.dumps([{"id": 1}]))

    loader = make_loader([
        FileSystemStrategy(FIXTURE_DATA, "first"),
        FileSystemStrategy(other, "second"),
    ])
    countries = asyncio.run(loader.load(paths.countries_list()))
    assert len(countries) == 3
    assert loader.load_count == 1


def test_all_candidates_missing_raises_not_found(tmp_path):
    loader = make_loader([
        FileSystemStrategy(tmp_path / "a", "a"),
        FileSystemStrategy(tmp_path / "b", "b"),
    ])
    with pytest.raises(NotFoundError) as excinfo:
        asyncio.run(loader.load(paths.country_meta("Nowhere-ZZ")))

    err = excinfo.value
    assert err.stage == "resolution"
    assert err.path == "countries/Nowhere-ZZ/meta.json"
    assert len(err.candidates) == 2
    assert err.environment == "filesystem"


def test_repeat_load_hits_cache():
    loader = make_loader([FileSystemStrategy(FIXTURE_DATA)])
    first = asyncio.run(loader.load(paths.states_of("United_States-US")))
    second = asyncio.run(loader.load(paths.states_of("United_States-US")))
    assert first == second
    assert loader.load_count == 1


def test_confirmed_absence_is_cached(tmp_path):
    loader = make_loader([FileSystemStrategy(tmp_path)])
    for _ in range(2):
        with pytest.raises(NotFoundError):
            asyncio.run(loader.load(paths.countries_list()))
    assert loader.load_count == 1


def test_disabled_cache_reruns_strategies():
    loader = make_loader([FileSystemStrategy(FIXTURE_DATA)], enabled=False)
    asyncio.run(loader.load(paths.countries_list()))
    asyncio.run(loader.load(paths.countries_list()))
    assert loader.load_count == 2


def test_clear_forces_reload():
    loader = make_loader([FileSystemStrategy(FIXTURE_DATA)])
    asyncio.run(loader.load(paths.countries_list()))
    loader.cache.clear()
    asyncio.run(loader.load(paths.countries_list()))
    assert loader.load_count == 2


def test_malformed_document_is_not_retried(tmp_path):
    broken = tmp_path / "broken"
    (broken / "countries").mkdir(parents=True)
    (broken / "countries" / "countries.json").write_text("[{not json")

    loader = make_loader([
        FileSystemStrategy(broken, "broken"),
        FileSystemStrategy(FIXTURE_DATA, "good"),
    ])
    with pytest.raises(ParseError) as excinfo:
        asyncio.run(loader.load(paths.countries_list()))
    assert excinfo.value.stage == "parse"
    assert loader.load_count == 1


def test_unreadable_file_is_source_unavailable(monkeypatch):
    def denied(file_path):
        raise PermissionError(13, "Permission denied", str(file_path))

    monkeypatch.setattr("services.strategies._read_file", denied)
    loader = make_loader([FileSystemStrategy(FIXTURE_DATA)])
    with pytest.raises(SourceUnavailableError) as excinfo:
        asyncio.run(loader.load(paths.countries_list()))
    assert excinfo.value.stage == "resolution"
    assert excinfo.value.path == "countries/countries.json"
    assert isinstance(excinfo.value.__cause__, PermissionError)


def test_strategies_needing_missing_capability_are_skipped(tmp_path):
    loader = make_loader(
        [FileSystemStrategy(FIXTURE_DATA)], environment=NETWORK_ONLY
    )
    with pytest.raises(NotFoundError) as excinfo:
        asyncio.run(loader.load(paths.countries_list()))

    err = excinfo.value
    assert err.candidates == []
    assert err.skipped == ["filesystem: host lacks filesystem"]
    assert err.environment == "network"
    assert loader.load_count == 0


def test_http_strategy_loads_document():
    requests = []
    loader = make_loader(
        [http_strategy(serve_tree(FIXTURE_DATA, requests))], environment=NETWORK_ONLY
    )
    cities = asyncio.run(loader.load(paths.cities_of("United_States-US", "California-CA")))
    assert "Los Angeles" in [c["name"] for c in cities]
    assert str(requests[0].url) == (
        f"{BASE_URL}/countries/United_States-US/California-CA/cities.json"
    )


def test_http_sends_configured_headers():
    requests = []
    loader = make_loader(
        [http_strategy(serve_tree(FIXTURE_DATA, requests), headers={"Authorization": "Bearer t"})],
        environment=NETWORK_ONLY,
    )
    asyncio.run(loader.load(paths.timezones_list()))
    assert requests[0].headers["Authorization"] == "Bearer t"


def test_filesystem_miss_falls_through_to_http(tmp_path):
    loader = make_loader(
        [FileSystemStrategy(tmp_path, "module"), http_strategy(serve_tree(FIXTURE_DATA))],
        environment=ANYWHERE,
    )
    meta = asyncio.run(loader.load(paths.country_meta("India-IN")))
    assert meta["iso2"] == "IN"
    assert loader.load_count == 2


def test_http_404_is_not_found():
    loader = make_loader([http_strategy(serve_tree(FIXTURE_DATA))], environment=NETWORK_ONLY)
    with pytest.raises(NotFoundError):
        asyncio.run(loader.load(paths.timezones_of("ZZ")))


def test_http_server_error_is_not_folded_into_not_found():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    loader = make_loader([http_strategy(handler)], environment=NETWORK_ONLY)
    with pytest.raises(SourceUnavailableError) as excinfo:
        asyncio.run(loader.load(paths.countries_list()))
    assert excinfo.value.status_code == 503


def test_http_malformed_body_raises_parse_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    loader = make_loader([http_strategy(handler)], environment=NETWORK_ONLY)
    with pytest.raises(ParseError):
        asyncio.run(loader.load(paths.countries_list()))


def test_slow_source_times_out_within_margin():
    loader = make_loader(
        [http_strategy(serve_tree(FIXTURE_DATA, delay=5.0), timeout=0.05)],
        environment=NETWORK_ONLY,
    )
    started = time.monotonic()
    with pytest.raises(LoadTimeoutError) as excinfo:
        asyncio.run(loader.load(paths.countries_list()))
    elapsed = time.monotonic() - started

    assert isinstance(excinfo.value, TimeoutError)
    assert excinfo.value.stage == "timeout"
    assert elapsed < 1.0


def test_timeout_is_not_cached_as_absence():
    loader = make_loader(
        [http_strategy(serve_tree(FIXTURE_DATA, delay=5.0), timeout=0.05)],
        environment=NETWORK_ONLY,
    )
    with pytest.raises(LoadTimeoutError):
        asyncio.run(loader.load(paths.countries_list()))
    assert paths.countries_list() not in loader.cache


def test_list_segments_reports_environment_mismatch_for_http():
    loader = make_loader([http_strategy(serve_tree(FIXTURE_DATA))], environment=NETWORK_ONLY)
    with pytest.raises(EnvironmentMismatch):
        asyncio.run(loader.list_segments(("countries",)))


def test_list_segments_reads_directories():
    loader = make_loader([FileSystemStrategy(FIXTURE_DATA)])
    segments = asyncio.run(loader.list_segments(("countries", "United_States-US")))
    assert segments == ["California-CA", "District_of_Columbia-DC", "Texas-TX"]
