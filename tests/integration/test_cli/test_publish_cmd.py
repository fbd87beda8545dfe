"""Integration tests for the `geoserver-batch publish` CLI command.

HTTP is served by httpx_mock and the ``zip`` subprocess is replaced by an
in-process archiver, so these tests exercise the CLI orchestration end to end
without a GeoServer or a zip binary.
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from geoserver_batch.cli.app import app
from tests.fakes import GEOSERVER_URL, WORKSPACE, create_url, upload_url, write_shapefile, zipfile_archiver

runner = CliRunner()


def _strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _fake_zip_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
    """Stand-in for ``subprocess.run(["zip", "-j", dest, *sources])``."""
    zipfile_archiver(Path(cmd[2]), [Path(p) for p in cmd[3:]], Path(kwargs["cwd"]))
    return subprocess.CompletedProcess(cmd, 0, "", "")


@pytest.fixture
def fake_zip():  # type: ignore[no-untyped-def]
    with (
        patch("geoserver_batch.lib.publisher.archive.shutil.which", return_value="/usr/bin/zip"),
        patch("geoserver_batch.lib.publisher.archive.subprocess.run", side_effect=_fake_zip_run) as mock_run,
    ):
        yield mock_run


@pytest.fixture
def geoserver_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOSERVER_URL", GEOSERVER_URL)
    monkeypatch.setenv("GEOSERVER_WORKSPACE", WORKSPACE)
    monkeypatch.setenv("GEOSERVER_USER", "admin")
    monkeypatch.setenv("GEOSERVER_PASSWORD", "geoserver")


class TestPublishConfiguration:
    """Startup errors exit with code 1 before any work."""

    def test_missing_url(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["publish", "--dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "Missing GeoServer URL" in result.output

    def test_missing_password(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEOSERVER_URL", GEOSERVER_URL)
        result = runner.invoke(
            app,
            ["publish", "--dir", str(tmp_path), "--workspace", WORKSPACE, "--username", "admin"],
        )
        assert result.exit_code == 1
        assert "GEOSERVER_PASSWORD" in result.output

    def test_missing_directory(self, tmp_path: Path, geoserver_env: None, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        result = runner.invoke(app, ["publish", "--dir", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Directory not found" in result.output
        assert httpx_mock.get_requests() == []


class TestPublishRun:
    """Full publish runs against a mocked GeoServer."""

    def test_publishes_with_flags(self, tmp_path: Path, fake_zip, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        write_shapefile(tmp_path, "parcels", (".shp", ".shx", ".dbf", ".prj"))
        write_shapefile(tmp_path, "roads", (".shp", ".shx", ".dbf"))
        for store in ("gs_parcels", "gs_roads"):
            httpx_mock.add_response(method="PUT", url=upload_url(store), status_code=201)
            httpx_mock.add_response(method="POST", url=create_url(store), status_code=201)

        result = runner.invoke(
            app,
            [
                "publish",
                "--dir",
                str(tmp_path),
                "--geoserver-url",
                GEOSERVER_URL + "/",
                "--workspace",
                WORKSPACE,
                "--username",
                "admin",
                "--password",
                "geoserver",
                "--store-prefix",
                "gs_",
            ],
        )

        assert result.exit_code == 0, result.output
        output = _strip_ansi(result.output)
        assert "Published: 2" in output
        assert fake_zip.call_count == 2
        assert len(httpx_mock.get_requests(method="POST")) == 2

    def test_failures_still_exit_zero(self, tmp_path: Path, geoserver_env: None, fake_zip, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        write_shapefile(tmp_path, "lake", (".shp", ".shx"))
        write_shapefile(tmp_path, "parcels")
        httpx_mock.add_response(method="PUT", url=upload_url("parcels"), status_code=500, text="broken store")

        result = runner.invoke(app, ["publish", "--dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        output = _strip_ansi(result.output)
        assert "INVALID" in output
        assert "FAILED" in output
        assert "Failed: 2" in output

    def test_overwrite_flag(self, tmp_path: Path, geoserver_env: None, fake_zip, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        write_shapefile(tmp_path, "parcels")
        httpx_mock.add_response(method="PUT", url=upload_url("parcels", overwrite=True), status_code=200)
        httpx_mock.add_response(method="POST", url=create_url("parcels"), status_code=201)

        result = runner.invoke(app, ["publish", "--dir", str(tmp_path), "--overwrite"])

        assert result.exit_code == 0, result.output
        assert "Published: 1" in _strip_ansi(result.output)

    def test_empty_directory(self, tmp_path: Path, geoserver_env: None, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        result = runner.invoke(app, ["publish", "--dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Nothing to do" in result.output
        assert httpx_mock.get_requests() == []

    def test_directory_from_env(
        self,
        tmp_path: Path,
        geoserver_env: None,
        monkeypatch: pytest.MonkeyPatch,
        httpx_mock,  # type: ignore[no-untyped-def]
    ) -> None:
        monkeypatch.setenv("GEOSERVER_SHAPEFILE_DIR", str(tmp_path))
        result = runner.invoke(app, ["publish"])
        assert result.exit_code == 0, result.output
        assert str(tmp_path.resolve()) in result.output
