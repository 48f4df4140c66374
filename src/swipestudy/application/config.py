import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from swipestudy.domain.constants import (
    DEFAULT_ITEM_COUNT,
    DEFAULT_QUESTION_TYPES,
    MASTERY_THRESHOLD,
)

_LOG_LEVELS = {0: logging.ERROR, 1: logging.WARNING, 2: logging.INFO}


def config_file_candidates() -> list[Path]:
    home = Path.home()
    return [home / ".config/swipestudy/config.toml", home / ".swipestudy.toml"]


class AppConfig(BaseSettings):
    """
    Configuration model for swipestudy.
    Supports loading from:
    1. Environment variables (SWIPESTUDY_*)
    2. Config file (~/.config/swipestudy/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="SWIPESTUDY_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/swipestudy")

    # Study Settings
    mastery_threshold: int = Field(default=MASTERY_THRESHOLD, ge=1)
    default_item_count: int = Field(default=DEFAULT_ITEM_COUNT, ge=1)
    default_mode: Literal["scheduled", "random", "focused"] = "scheduled"
    question_types: list[Literal["written", "multiple-choice", "true-false"]] = Field(
        default_factory=lambda: list(DEFAULT_QUESTION_TYPES)
    )

    # External calls
    grading_timeout: float | None = Field(default=30.0, gt=0)

    # Logging
    verbose: int = Field(default=1, ge=0)

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

        # Find the first existing file
        toml_file = None
        for f in config_file_candidates():
            if f.exists():
                toml_file = f
                break

        # CLI overrides win over env, env wins over the file
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @property
    def log_level(self) -> int:
        """0 = errors only, 1 = warnings, 2 = info, 3 or more = debug."""
        return _LOG_LEVELS.get(self.verbose, logging.DEBUG)

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/swipestudy/config.toml (if exists)
    3. Environment variables (SWIPESTUDY_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not set
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
