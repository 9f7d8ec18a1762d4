"""Tests for the bortmax console entrypoint."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
import yaml

from bortmax.interfaces.cli import cli


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("BORTMAX_") or key in ("HOST", "PORT"):
            monkeypatch.delenv(key, raising=False)


class TestOverrides:
    def test_only_given_flags_become_overrides(self) -> None:
        args = cli._build_parser().parse_args(
            ["--upstream", "http://vault.lan/", "--catalog-ttl", "60"]
        )
        assert cli._cli_overrides(args) == {
            "upstream_base_url": "http://vault.lan/",
            "catalog_ttl_seconds": 60,
        }

    def test_no_flags(self) -> None:
        args = cli._build_parser().parse_args([])
        assert cli._cli_overrides(args) == {}


class TestBindAddress:
    def test_defaults(self) -> None:
        args = cli._build_parser().parse_args([])
        assert cli._bind_address(args) == ("0.0.0.0", 8080)

    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "9000")
        args = cli._build_parser().parse_args([])
        assert cli._bind_address(args) == ("127.0.0.1", 9000)

    def test_flags_win_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "9000")
        args = cli._build_parser().parse_args(["--port", "7000"])
        assert cli._bind_address(args)[1] == 7000


class TestStart:
    def test_print_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.object(cli.uvicorn, "run") as run:
            cli.start(["--upstream", "http://vault.lan", "--print-config"])

        run.assert_not_called()
        dumped = yaml.safe_load(capsys.readouterr().out)
        assert dumped["upstream"]["base_url"] == "http://vault.lan/"
        assert dumped["catalog"]["max_items"] == 200

    def test_serves_with_loaded_config(self) -> None:
        with (
            patch.object(cli.uvicorn, "run") as run,
            patch.object(cli, "configure_logging", return_value={"version": 1}),
        ):
            cli.start(["--port", "8181", "--upstream", "http://vault.lan/"])

        run.assert_called_once()
        _, kwargs = run.call_args
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 8181
        assert kwargs["log_config"] == {"version": 1}
        app = run.call_args.args[0]
        assert app.state.config.upstream_base_url == "http://vault.lan/"

    def test_invalid_upstream_is_fatal(self) -> None:
        with patch.object(cli.uvicorn, "run") as run, pytest.raises(ValueError):
            cli.start(["--upstream", "not-a-url"])
        run.assert_not_called()
