"""Integration tests for layered configuration loading.

Precedence: defaults < YAML < env (incl. .env) < CLI overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from bortmax.infrastructure.config import AppConfig, load_config

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("BORTMAX_"):
            monkeypatch.delenv(key, raising=False)


def _write_yaml(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_defaults(self) -> None:
        config = load_config()
        assert config.upstream_base_url == "http://localhost:8000/"
        assert config.upstream_movie_path == "movies/"
        assert config.upstream_series_path == "tvs/"
        assert config.http_timeout_seconds == 12.0
        assert config.catalog.ttl_seconds == 3600
        assert config.catalog.max_items == 200
        assert config.stremio.addon_name == "Bort Max"
        assert config.stremio.stream_title_suffix == "(Direct Stream)"

    def test_log_format_derived_from_environment(self) -> None:
        assert load_config().log_format == "console"
        prod = load_config(cli_overrides={"environment": "prod"})
        assert prod.log_format == "json"


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


class TestPrecedence:
    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path,
            "upstream:\n"
            "  base_url: http://vault.lan/media\n"
            "  movie_path: /films\n"
            "catalog:\n"
            "  ttl_seconds: 60\n",
        )
        config = load_config(config_path=path)
        assert config.upstream_base_url == "http://vault.lan/media/"
        assert config.upstream_movie_path == "films/"
        assert config.upstream_series_path == "tvs/"
        assert config.catalog.ttl_seconds == 60
        assert config.catalog.max_items == 200

    def test_env_overrides_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write_yaml(tmp_path, "catalog:\n  ttl_seconds: 60\n")
        monkeypatch.setenv("BORTMAX_CATALOG_TTL_SECONDS", "120")
        monkeypatch.setenv("BORTMAX_UPSTREAM_BASE_URL", "https://env.example/")

        config = load_config(config_path=path)
        assert config.catalog.ttl_seconds == 120
        assert config.upstream_base_url == "https://env.example/"

    def test_cli_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BORTMAX_LOG_LEVEL", "WARNING")
        config = load_config(cli_overrides={"log_level": "DEBUG"})
        assert config.log_level == "DEBUG"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text("BORTMAX_HTTP_TIMEOUT_SECONDS=15\n", encoding="utf-8")
        # load_dotenv writes into os.environ; let monkeypatch undo it.
        monkeypatch.setenv("BORTMAX_HTTP_TIMEOUT_SECONDS", "")
        monkeypatch.delenv("BORTMAX_HTTP_TIMEOUT_SECONDS")

        config = load_config(dotenv_path=dotenv)
        assert config.http_timeout_seconds == 15.0

    def test_stremio_section_from_yaml(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path,
            "stremio:\n  stream_title_suffix: ''\n  source_label: Vault\n",
        )
        config = load_config(config_path=path)
        assert config.stremio.stream_title_suffix == ""
        assert config.stremio.source_label == "Vault"
        assert config.stremio.addon_name == "Bort Max"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_missing_config_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nope.yaml")

    def test_missing_dotenv_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / ".env")

    def test_yaml_must_be_a_mapping(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_empty_yaml_is_allowed(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "")
        assert load_config(config_path=path).catalog.ttl_seconds == 3600

    @pytest.mark.parametrize(
        "overrides",
        [
            {"upstream_base_url": "ftp://vault.lan/"},
            {"upstream_base_url": "vault.lan"},
            {"http_timeout_seconds": 0.5},
            {"http_timeout_seconds": 120},
            {"catalog_max_items": 0},
            {"catalog_ttl_seconds": -1},
            {"upstream_movie_path": "/"},
        ],
    )
    def test_invalid_values(self, overrides: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            load_config(cli_overrides=overrides)


class TestSectionedDump:
    def test_round_trips_through_model_validate(self) -> None:
        config = load_config(cli_overrides={"catalog_max_items": 50})
        again = AppConfig.model_validate(config.to_sectioned_dict())
        assert again == config
