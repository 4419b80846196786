"""Configuration management using pydantic-settings."""

from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.services import DEFAULT_TIMEOUT

try:
    import tomllib
except ImportError:
    import tomli as tomllib

DEFAULT_MAX_OUTPUT_TOKENS = 65536
MIN_OUTPUT_TOKENS = 8192
DEFAULT_EXPORT_FILENAME = "lecture_notes.json"
CONFIG_PATH = Path("~/.config/lecturelens/config.toml").expanduser()


class TranscriberProvider(str, Enum):
    """Available transcription providers."""

    GEMINI = "gemini"
    CLAUDE_API = "claude-api"
    OLLAMA = "ollama"


class TranscriberConfig(BaseSettings):
    """Model provider configuration."""

    model_config = SettingsConfigDict(env_prefix="LECTURELENS_TRANSCRIBER_")

    provider: TranscriberProvider = TranscriberProvider.GEMINI
    model: str | None = None  # provider default when unset
    api_key: SecretStr | None = None
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    timeout: float = DEFAULT_TIMEOUT
    ollama_url: str = "http://localhost:11434"

    @field_validator("max_output_tokens")
    @classmethod
    def output_fits_full_page(cls, v: int) -> int:
        # Dense handwritten pages easily exceed a few thousand tokens
        if v < MIN_OUTPUT_TOKENS:
            raise ValueError(f"max_output_tokens must be at least {MIN_OUTPUT_TOKENS}")
        return v

    @field_validator("timeout")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("ollama_url")
    @classmethod
    def http_url(cls, v: str) -> str:
        scheme = urlparse(v).scheme
        if scheme not in ("http", "https"):
            raise ValueError(f"Invalid ollama_url scheme: {scheme}")
        return v


class SessionConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LECTURELENS_SESSION_")

    include_summary: bool = False


class ExportConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LECTURELENS_EXPORT_")

    directory: Path = Path(".")
    filename: str = DEFAULT_EXPORT_FILENAME
    name_from_title: bool = False

    @field_validator("directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LECTURELENS_")

    transcriber: TranscriberConfig = Field(default_factory=TranscriberConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from TOML file, falling back to defaults."""
    path = config_path or CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)

        transcriber = TranscriberConfig(**data.get("transcriber", {}))
        session = SessionConfig(**data.get("session", {}))
        export = ExportConfig(**data.get("export", {}))
        return Settings(transcriber=transcriber, session=session, export=export)

    return Settings()
