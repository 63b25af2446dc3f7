from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from medace.domain.constants import (
    DEFAULT_ACTIVITY_WINDOW_DAYS,
    DEFAULT_SESSION_LIMIT,
    REQUEST_TIMEOUT,
)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/medace/config.toml",
        Path.home() / ".medace.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for medace.
    Supports loading from:
    1. Environment variables (MEDACE_*)
    2. Config file (~/.config/medace/config.toml)
    3. Manual overrides (CLI / API)
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDACE_",
        extra="ignore",
    )

    # Storage backend
    backend: Literal["local", "remote"] = "local"
    data_file: Path | None = Field(
        default_factory=lambda: Path.home() / ".local/share/medace/store.json"
    )
    remote_url: str = "http://127.0.0.1:8787"
    request_timeout: float = REQUEST_TIMEOUT

    # Study defaults
    session_limit: int = Field(default=DEFAULT_SESSION_LIMIT, ge=1)
    activity_window_days: int = Field(default=DEFAULT_ACTIVITY_WINDOW_DAYS, ge=1)

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file; init kwargs take final precedence
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_file", mode="before")
    @classmethod
    def resolve_data_file(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser().resolve()

    @field_validator("remote_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/medace/config.toml (if exists)
    3. Environment variables (MEDACE_*)
    4. overrides (passed from Typer or the HTTP API), None values ignored
    """
    cleaned = {k: v for k, v in (overrides or {}).items() if v is not None}
    return AppConfig(**cleaned)
