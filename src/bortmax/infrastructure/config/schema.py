"""Configuration models.

``AppConfig`` is the validated result of all layers. Flat fields accept
either their own name or the sectioned YAML path (``upstream.base_url``),
so the merged sectioned dict from load.py validates directly.
``EnvOverrides`` only reads ``BORTMAX_*`` variables; precedence is applied
by the loader, not here.
"""

from __future__ import annotations

from typing import Any, Literal, Optional
from urllib.parse import urlparse

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    NonNegativeInt,
    PositiveInt,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

_ADDON_LOGO = "https://i.imgur.com/1tDdDUF.png"


def _from(name: str, section: str, key: str) -> AliasChoices:
    """Accept ``name`` (flat) or ``section.key`` (sectioned YAML)."""
    return AliasChoices(name, AliasPath(section, key))


def _with_slash(value: str) -> str:
    return value if value.endswith("/") else f"{value}/"


class CatalogConfig(BaseModel):
    """``catalog.*``: how the folder catalog is scraped and memoised."""

    ttl_seconds: NonNegativeInt = Field(
        default=3600,
        description="Seconds a scraped catalog is served before re-scraping; 0 disables caching.",
    )
    max_items: PositiveInt = Field(
        default=200,
        description="Upper bound on catalog entries per content type.",
    )
    poster_url: str = Field(
        default=_ADDON_LOGO,
        description="Poster attached to every catalog item.",
    )


class StremioConfig(BaseModel):
    """``stremio.*``: addon identity and how streams are labelled."""

    addon_id: str = "com.bortmax.streams"
    addon_name: str = "Bort Max"
    addon_description: str = "Direct streams from Bort Knox vault"
    addon_logo: str = _ADDON_LOGO
    stream_title_suffix: str = Field(
        default="(Direct Stream)",
        description="Appended to each stream title; empty string turns it off.",
    )
    source_label: str = Field(
        default="Bort Max",
        description="Stream 'name' shown in the Stremio source column.",
    )


class AppConfig(BaseModel):
    """Validated runtime configuration."""

    app_name: str = "bortmax"
    environment: Environment = Field(
        default="dev",
        description="dev/test/prod; prod switches the default log format to json.",
    )

    upstream_base_url: str = Field(
        default="http://localhost:8000/",
        validation_alias=_from("upstream_base_url", "upstream", "base_url"),
        description="Root URL of the autoindex server.",
    )
    upstream_movie_path: str = Field(
        default="movies/",
        validation_alias=_from("upstream_movie_path", "upstream", "movie_path"),
    )
    upstream_series_path: str = Field(
        default="tvs/",
        validation_alias=_from("upstream_series_path", "upstream", "series_path"),
    )

    http_timeout_seconds: float = Field(
        default=12.0,
        ge=1.0,
        le=60.0,
        validation_alias=_from("http_timeout_seconds", "http", "timeout_seconds"),
        description="Bound on every upstream listing fetch.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=_from("http_follow_redirects", "http", "follow_redirects"),
    )
    http_user_agent: str = Field(
        default="BortMax/1.0.0",
        validation_alias=_from("http_user_agent", "http", "user_agent"),
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=_from("log_level", "logging", "level"),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=_from("log_format", "logging", "format"),
        description="console or json; derived from environment when unset.",
    )

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    stremio: StremioConfig = Field(default_factory=StremioConfig)

    @field_validator("upstream_base_url")
    @classmethod
    def _check_base_url(cls, v: str) -> str:
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"upstream base URL must be http(s), got: {v!r}")
        return _with_slash(v)

    @field_validator("upstream_movie_path", "upstream_series_path", mode="before")
    @classmethod
    def _check_root_path(cls, v: Any) -> str:
        # "/movies", "movies" and "movies/" all mean "movies/"
        if not isinstance(v, str):
            raise ValueError(f"root path must be a string, got: {type(v).__name__}")
        path = v.strip().strip("/")
        if not path:
            raise ValueError("root path must not be empty")
        return f"{path}/"

    @model_validator(mode="after")
    def _default_log_format(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Inverse of the sectioned YAML layout (used by ``--print-config``)."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "upstream": {
                "base_url": self.upstream_base_url,
                "movie_path": self.upstream_movie_path,
                "series_path": self.upstream_series_path,
            },
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "catalog": self.catalog.model_dump(),
            "stremio": self.stremio.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """``BORTMAX_*`` environment variables, flat names, all optional.

    e.g. ``BORTMAX_UPSTREAM_BASE_URL``, ``BORTMAX_HTTP_TIMEOUT_SECONDS``,
    ``BORTMAX_CATALOG_TTL_SECONDS``, ``BORTMAX_LOG_LEVEL``.
    """

    model_config = SettingsConfigDict(
        env_prefix="BORTMAX_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    upstream_base_url: Optional[str] = None
    upstream_movie_path: Optional[str] = None
    upstream_series_path: Optional[str] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    catalog_ttl_seconds: Optional[int] = None
    catalog_max_items: Optional[int] = None
    catalog_poster_url: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Variables that are actually set, as a flat layer for the loader."""
        return self.model_dump(exclude_none=True)
