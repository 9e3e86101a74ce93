import logging
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from srs.domain.constants import (
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
)
from srs.domain.errors import DeckPathError

logger = logging.getLogger(__name__)


def config_dir() -> Path:
    """`$XDG_CONFIG_HOME/srs`, falling back to `~/.config/srs`."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "srs"


def config_file() -> Path:
    return config_dir() / "config.toml"


def legacy_config_file() -> Path:
    return config_dir() / "config"


class LegacyConfigSource(PydanticBaseSettingsSource):
    """
    Reads the old plain-text config: `base_deck=<path>` lines, `#` comments.
    Lowest priority; only consulted when nothing else sets the base deck.
    """

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        path = legacy_config_file()
        if not path.is_file():
            return {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Ignoring unreadable legacy config {path}: {e}")
            return {}

        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("base_deck="):
                return {"base_deck_path": line[len("base_deck=") :].strip()}
        return {}


class AppConfig(BaseSettings):
    """
    Configuration model for srs.
    Supports loading from:
    1. Manual overrides (CLI / API)
    2. Environment variables (SRS_*)
    3. Config file ($XDG_CONFIG_HOME/srs/config.toml)
    4. Legacy config file ($XDG_CONFIG_HOME/srs/config)
    """

    model_config = SettingsConfigDict(
        env_prefix="SRS_",
        extra="ignore",
    )

    # Paths
    base_deck_path: Path | None = None

    # Review
    editor: str | None = None
    requeue_policy: Literal["pending", "snapshot"] = "pending"

    # Scheduler
    desired_retention: float = Field(default=DEFAULT_DESIRED_RETENTION, gt=0.0, lt=1.0)
    maximum_interval: int = Field(default=DEFAULT_MAXIMUM_INTERVAL, ge=1)
    enable_fuzzing: bool = False

    # Daemon
    server_host: str = DEFAULT_SERVER_HOST
    server_port: int = DEFAULT_SERVER_PORT

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

        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]

        toml_file = config_file()
        if toml_file.exists():
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_file))

        sources.append(LegacyConfigSource(settings_cls))
        return tuple(sources)

    @field_validator("base_deck_path", mode="before")
    @classmethod
    def resolve_base_deck(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    Overrides with a value of None are dropped so they do not mask lower layers.
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)


def resolve_deck_path(deck: str | Path | None, config: AppConfig) -> Path:
    """
    Turn a user-given deck path into an absolute path.

    Absolute paths are used as-is. "." (or nothing) means the base deck.
    Anything else is a subdirectory of the base deck.
    """
    deck_str = str(deck) if deck is not None else ""
    if deck_str and Path(deck_str).expanduser().is_absolute():
        return Path(deck_str).expanduser().resolve()

    if config.base_deck_path is None:
        raise DeckPathError("no base deck configured - run 'srs config init' to set one up")

    if deck_str in ("", "."):
        return config.base_deck_path
    return (config.base_deck_path / deck_str).resolve()


def save_base_deck(path: Path) -> Path:
    """
    Write the base deck to the TOML config file, keeping other keys.

    Paths under the home directory are stored as `~/...`.
    Returns the config file that was written.
    """
    target = config_file()
    target.parent.mkdir(parents=True, exist_ok=True)

    value = str(Path(path).expanduser().resolve())
    home = str(Path.home())
    if value == home or value.startswith(home + os.sep):
        value = "~" + value[len(home) :]

    kept: list[str] = []
    if target.exists():
        kept = [
            line
            for line in target.read_text(encoding="utf-8").splitlines()
            if not line.strip().startswith("base_deck_path")
        ]

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    lines = [f'base_deck_path = "{escaped}"', *kept]
    target.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info(f"Base deck saved to {target}")
    return target
