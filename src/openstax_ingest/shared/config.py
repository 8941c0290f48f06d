"""
Configuration Module - Load and validate scraper settings.
==========================================================

Loads configuration from:
1. config/settings.yaml (defaults)
2. Environment variables from .env file
3. Environment variables from system

Environment variables override YAML defaults. The resulting ``Settings``
object is built once per process and handed to the fetcher and the
orchestrator as a parameter.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from openstax_ingest.shared.errors import ConfigError

# Load .env file early
load_dotenv()


def _find_project_root() -> Path:
    """Find the project root directory by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.yaml"

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; EducationalBot/1.0; +Physics4CTA)"
ALL_CHAPTERS = "all"


# ─────────────────────────────────────────────────────────────────────────────
# Nested Configuration Models
# ─────────────────────────────────────────────────────────────────────────────


def _default_volumes() -> list["VolumeConfig"]:
    return [
        VolumeConfig(
            id="VOL1",
            name="University Physics Volume 1",
            base_url="https://openstax.org/books/university-physics-volume-1/pages/",
            chapters=ALL_CHAPTERS,
        ),
        VolumeConfig(
            id="VOL2",
            name="University Physics Volume 2",
            base_url="https://openstax.org/books/university-physics-volume-2/pages/",
            chapters=[1, 2, 3, 4],
        ),
        VolumeConfig(
            id="VOL3",
            name="University Physics Volume 3",
            base_url="https://openstax.org/books/university-physics-volume-3/pages/",
            chapters=[1, 2, 3, 4],
        ),
    ]


class VolumeConfig(BaseModel):
    """Source location and chapter-inclusion rule for one textbook volume."""

    id: str
    name: str = ""
    base_url: str
    chapters: Union[str, list[int]] = ALL_CHAPTERS

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v: Any) -> str:
        return str(v).strip().upper()

    @field_validator("chapters", mode="before")
    @classmethod
    def validate_chapters(cls, v: Any) -> Union[str, list[int]]:
        """Accept the literal 'all' or a list of positive chapter numbers."""
        if isinstance(v, str):
            if v.strip().lower() != ALL_CHAPTERS:
                raise ValueError(f"chapter rule must be 'all' or a list, got {v!r}")
            return ALL_CHAPTERS
        numbers = [int(n) for n in v]
        if any(n < 1 for n in numbers):
            raise ValueError(f"chapter numbers must be positive, got {numbers}")
        return numbers

    @property
    def includes_all(self) -> bool:
        return self.chapters == ALL_CHAPTERS


class ScrapingConfig(BaseModel):
    """Fetcher and sweep settings."""

    user_agent: str = DEFAULT_USER_AGENT
    rate_limit: float = 1.0
    timeout: Optional[float] = 30.0
    max_retries: int = 1
    # Volume 1 has no published chapter count in the site structure
    all_chapters_estimate: int = 17
    volumes: list[VolumeConfig] = Field(default_factory=_default_volumes)

    def get_volume(self, volume_id: str) -> VolumeConfig:
        """Get volume configuration by ID."""
        for volume in self.volumes:
            if volume.id == volume_id.upper():
                return volume
        raise ConfigError(f"Volume '{volume_id}' is not configured")


class PathsConfig(BaseModel):
    """Data paths configuration."""

    chapters_file: str = "data/processed/chapters.jsonl"
    formulas_file: str = "data/processed/formulas.jsonl"

    def resolve(self, base_path: Path) -> "ResolvedPaths":
        """Resolve paths relative to a base path."""
        return ResolvedPaths(
            chapters_file=base_path / self.chapters_file,
            formulas_file=base_path / self.formulas_file,
        )


class ResolvedPaths(BaseModel):
    """Resolved absolute paths."""

    chapters_file: Path
    formulas_file: Path


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    rich_console: bool = True
    file: str = ""


# ─────────────────────────────────────────────────────────────────────────────
# Main Settings Class
# ─────────────────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """
    Main application settings.

    Loads from:
    1. config/settings.yaml (defaults)
    2. Environment variables

    Environment variables override YAML settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Per-volume base URL overrides
    scrape_vol1_url: Optional[str] = Field(default=None, validation_alias="SCRAPE_VOL1_URL")
    scrape_vol2_url: Optional[str] = Field(default=None, validation_alias="SCRAPE_VOL2_URL")
    scrape_vol3_url: Optional[str] = Field(default=None, validation_alias="SCRAPE_VOL3_URL")
    log_level: Optional[str] = Field(default=None, validation_alias="LOG_LEVEL")

    # Nested configurations (from YAML)
    scraping: ScrapingConfig = Field(default_factory=ScrapingConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _project_root: Path = PROJECT_ROOT
    _resolved_paths: Optional[ResolvedPaths] = None

    @property
    def resolved_paths(self) -> ResolvedPaths:
        """Get resolved absolute paths."""
        if self._resolved_paths is None:
            self._resolved_paths = self.paths.resolve(self._project_root)
        return self._resolved_paths

    def get_effective_base_url(self, volume_id: str) -> str:
        """Get the base URL for a volume (env override or config)."""
        override = {
            "VOL1": self.scrape_vol1_url,
            "VOL2": self.scrape_vol2_url,
            "VOL3": self.scrape_vol3_url,
        }.get(volume_id.upper())
        if override:
            return override
        return self.scraping.get_volume(volume_id).base_url

    def get_effective_scraping(self) -> ScrapingConfig:
        """
        Get the scraping config with environment URL overrides applied.

        This is the value object passed into the fetcher and orchestrator.
        """
        volumes = [
            volume.model_copy(update={"base_url": self.get_effective_base_url(volume.id)})
            for volume in self.scraping.volumes
        ]
        return self.scraping.model_copy(update={"volumes": volumes})

    def get_effective_log_level(self) -> str:
        """Get the effective log level (env override or config)."""
        if self.log_level:
            return self.log_level.upper()
        return self.logging.level.upper()


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def _create_settings(config_path: Optional[Path] = None) -> Settings:
    """Create settings instance by merging YAML defaults with environment."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    yaml_config = _load_yaml_config(config_path)

    try:
        return Settings(**yaml_config)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the singleton settings instance.

    Returns:
        Settings instance with merged configuration

    Example:
        >>> settings = get_settings()
        >>> print(settings.scraping.rate_limit)
        1.0
    """
    return _create_settings()
