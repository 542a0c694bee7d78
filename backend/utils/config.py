"""
SpecTrace Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try current working directory
    load_dotenv()


def _split_csv(v: str | list[str]) -> list[str]:
    if isinstance(v, str):
        return [p.strip() for p in v.split(",") if p.strip()]
    return v


class PathSettings(BaseSettings):
    """Where each artifact lives, relative to the project root."""

    model_config = SettingsConfigDict(env_prefix="PATHS_")

    idl_file: Path = Field(default=Path("spec/context/_webcodecs.idl"))
    narrative_dir: Path = Field(default=Path("spec/context"))
    header_dir: Path = Field(default=Path("src"))
    implementation_dir: Path = Field(default=Path("src"))
    wrapper_dir: Path = Field(default=Path("lib"))
    test_dir: Path = Field(default=Path("test"))
    output_dir: Path = Field(default=Path("docs/tasks"))

    narrative_suffix: str = Field(default=".md")
    header_suffix: str = Field(default=".h")
    implementation_suffix: str = Field(default=".cpp")
    wrapper_suffix: str = Field(default=".ts")
    test_suffix: str = Field(default=".test.ts")


class ParserSettings(BaseSettings):
    """Parser configuration settings."""

    model_config = SettingsConfigDict(env_prefix="PARSER_")

    header_return_types: list[str] = Field(
        default=["Napi::Value", "void", "bool"],
        description="Return-type spellings that mark an instance method declaration",
    )
    group_functions: list[str] = Field(
        default=["describe"], description="Test functions that open a named group"
    )
    case_functions: list[str] = Field(
        default=["it"], description="Test functions that declare a single case"
    )
    static_lookahead_chars: int = Field(
        default=200, ge=1, description="Window after a method heading searched for the static marker"
    )

    @field_validator("header_return_types", "group_functions", "case_functions", mode="before")
    @classmethod
    def parse_name_lists(cls, v: str | list[str]) -> list[str]:
        """Parse name lists from comma-separated string or list."""
        return _split_csv(v)


class GeneratorSettings(BaseSettings):
    """Task generator configuration settings."""

    model_config = SettingsConfigDict(env_prefix="GENERATOR_")

    missing_symbol_policy: Literal["first", "all"] = Field(
        default="first",
        description="'first' aborts an interface on its first missing symbol, 'all' collects them first",
    )
    json_indent: int = Field(default=2, ge=0, le=8)
    max_concurrent_reads: int = Field(default=8, ge=1, le=64)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="SpecTrace")
    app_version: str = Field(default="0.1.0")

    # Sub-settings
    paths: PathSettings = Field(default_factory=PathSettings)
    parser: ParserSettings = Field(default_factory=ParserSettings)
    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    """
    return Settings()
