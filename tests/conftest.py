"""Shared test fixtures for GeoServer connections and shapefile trees."""

import pytest

from geoserver_batch.lib.publisher.types import GeoServerConnection
from tests.fakes import GEOSERVER_URL, WORKSPACE


@pytest.fixture
def connection() -> GeoServerConnection:
    """Connection for the fake GeoServer served by httpx_mock."""
    return GeoServerConnection.from_values(GEOSERVER_URL, WORKSPACE, "admin", "geoserver")


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    """Keep host GEOSERVER_* variables and any local .env out of the tests."""
    for name in (
        "GEOSERVER_URL",
        "GEOSERVER_WORKSPACE",
        "GEOSERVER_USER",
        "GEOSERVER_PASSWORD",
        "GEOSERVER_SHAPEFILE_DIR",
        "GEOSERVER_STORE_PREFIX",
        "GEOSERVER_LAYER_PREFIX",
        "GEOSERVER_OVERWRITE",
        "WFS_MAX_FEATURES",
        "LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
