"""Unified settings for http-message."""

import importlib.metadata
import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict, empty when not shipped."""
    if not pyproject_path.is_file():
        return {}
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(project: dict) -> str:
    """Get version from package metadata or fallback to pyproject."""
    try:
        return importlib.metadata.version("http-message")
    except importlib.metadata.PackageNotFoundError:
        return project.get("project", {}).get("version", "0.0.0")


class Settings(BaseSettings):
    """Unified settings for http-message."""

    DEBUG: bool = False
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "http-message")
    VERSION: ClassVar[str] = get_version(PROJECT)

    # Messages
    DEFAULT_PROTOCOL_VERSION: str = "1.1"
    STREAM_CHUNK_SIZE: int = 512_000

    # Cache
    CACHE_PATH: Path = BASE_DIR / "cache"

    model_config = SettingsConfigDict(
        env_prefix="HTTP_MESSAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()  # type: ignore
