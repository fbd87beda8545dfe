"""Integration tests for the `geoserver-batch layers` CLI command."""

from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from geoserver_batch.cli.app import app
from tests.fakes import GEOSERVER_URL, REST, WORKSPACE

runner = CliRunner()

_LISTING_URL = f"{REST}/featuretypes.json?count=10000&startIndex=0"


@pytest.fixture(autouse=True)
def geoserver_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOSERVER_URL", GEOSERVER_URL)
    monkeypatch.setenv("GEOSERVER_WORKSPACE", WORKSPACE)
    monkeypatch.setenv("GEOSERVER_USER", "admin")
    monkeypatch.setenv("GEOSERVER_PASSWORD", "geoserver")


class TestLayersCommand:
    """Tests for the layers command JSON output."""

    def test_lists_layers(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(
            url=_LISTING_URL,
            json={"featureTypes": {"featureType": [{"name": "parcels", "title": "Parcels"}, {"name": "roads"}]}},
        )

        result = runner.invoke(app, ["layers", "--max-features", "25"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["count"] == 2
        assert payload["data"][0]["layer"] == "demo:parcels"
        assert payload["data"][0]["title"] == "Parcels"
        assert "title" not in payload["data"][1]
        wfs = httpx.URL(payload["data"][1]["wfsUrl"])
        assert wfs.params["typeNames"] == "demo:roads"
        assert wfs.params["maxFeatures"] == "25"

    def test_empty_workspace(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=_LISTING_URL, status_code=404)

        result = runner.invoke(app, ["layers"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload == {
            "success": True,
            "message": 'Workspace "demo" has no published feature types.',
            "data": [],
        }

    def test_pretty_output(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=_LISTING_URL, json={"featureTypes": {"featureType": {"name": "parcels"}}})

        result = runner.invoke(app, ["layers", "--pretty"])

        assert result.exit_code == 0, result.output
        assert result.stdout.startswith("{\n  ")
        assert json.loads(result.stdout)["data"][0]["wfsUrl"].endswith("maxFeatures=1000")

    def test_error_is_reported_as_json(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=_LISTING_URL, status_code=401, text="Unauthorized")

        result = runner.invoke(app, ["layers"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert payload["data"] is None
        assert "401" in payload["error"]

    def test_missing_configuration(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEOSERVER_WORKSPACE")

        result = runner.invoke(app, ["layers"])

        assert result.exit_code == 1
        assert "Missing workspace" in json.loads(result.stdout)["error"]

    def test_rejects_non_positive_max_features(self) -> None:
        result = runner.invoke(app, ["layers", "--max-features", "0"])
        assert result.exit_code == 2
