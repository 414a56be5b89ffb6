"""Configuration management for the feed harvester."""

from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

DEFAULT_HARVEST_CONFIG = Path(__file__).parent / "harvest.yaml"


class SiteProfile(BaseModel):
    """Selection rules used to locate article text on a site's pages."""
    model_config = ConfigDict(frozen=True)

    name: str
    article_selectors: tuple[str, ...]
    paragraph_selector: str = "p"
    min_paragraph_length: int = 40


class SiteProfileRule(BaseModel):
    """A domain substring and the profile it selects."""
    model_config = ConfigDict(frozen=True)

    match: str
    profile: SiteProfile


class FeedConfig(BaseModel):
    """RSS feed configuration."""
    model_config = ConfigDict(frozen=True)

    url: str
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.url


class PipelineConfig(BaseModel):
    """Immutable configuration value handed to every pipeline component."""
    model_config = ConfigDict(frozen=True)

    feeds: tuple[FeedConfig, ...] = ()
    taxonomy: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    site_profiles: tuple[SiteProfileRule, ...] = ()
    default_profile: SiteProfile = SiteProfile(
        name="default",
        article_selectors=("article", ".article", ".content", ".post-content", "main", ".entry-content"),
    )
    fetch_interval: timedelta = timedelta(hours=1)
    max_entries_per_feed: int = 50
    include_content: bool = True
    include_categories: bool = True
    include_publish_date: bool = True
    extract_full_content: bool = True
    filter_by_keywords: bool = True
    keyword_score_threshold: int = 1


class Settings(BaseSettings):
    """Main application settings."""

    # ── Harvest Options ────────────────────────────────────────────────────
    harvest_config_path: Path = Field(
        DEFAULT_HARVEST_CONFIG, description="YAML file with feeds, taxonomy and site profiles"
    )
    fetch_interval: timedelta = Field(timedelta(hours=1), description="Delay between two harvests")
    max_entries_per_feed: int = Field(50, description="Max items kept from each feed")
    include_content: bool = Field(True, description="Attach the feed summary to each record")
    include_categories: bool = Field(True, description="Attach feed categories to each record")
    include_publish_date: bool = Field(True, description="Attach the feed publish date to each record")
    extract_full_content: bool = Field(True, description="Fetch source pages and extract the article body")
    filter_by_keywords: bool = Field(True, description="Score articles and drop those under the threshold")
    keyword_score_threshold: int = Field(1, description="Minimum keyword score for a record to be kept")

    # ── HTTP Settings ──────────────────────────────────────────────────────
    user_agent: str = Field(
        "FeedHarvestBot/0.1 (RSS keyword harvester)",
        description="User agent for web requests"
    )
    request_timeout_seconds: float = Field(30.0, description="Timeout applied to each feed or page fetch")
    global_parallel: int = Field(20, description="Max concurrent page fetches")

    # ── Output ─────────────────────────────────────────────────────────────
    output_dir: Path = Field(Path("./output"), description="Output directory")
    records_filename: str = Field("ai_training_data.jsonl", description="JSON Lines file for kept records")
    report_filename: str = Field("report.txt", description="Plain-text summary report")

    # ── Logging ────────────────────────────────────────────────────────────
    log_level: str = Field("INFO", description="Log level")
    json_logging: bool = Field(True, description="Enable JSON logging")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("max_entries_per_feed", "keyword_score_threshold")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Counts and thresholds cannot be negative."""
        if v < 0:
            raise ValueError("Value must be greater than or equal to 0")
        return v

    @field_validator("fetch_interval")
    @classmethod
    def validate_interval(cls, v: timedelta) -> timedelta:
        """Validate the harvest interval."""
        if v.total_seconds() <= 0:
            raise ValueError("Fetch interval must be positive")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v

    @field_validator("global_parallel")
    @classmethod
    def validate_parallel(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Parallelism must be at least 1")
        return v

    @property
    def records_path(self) -> Path:
        return self.output_dir / self.records_filename

    @property
    def report_path(self) -> Path:
        return self.output_dir / self.report_filename


class HarvestConfig:
    """Harvest configuration loader (feeds, taxonomy, site profiles)."""

    def __init__(self, config_path: str | Path = DEFAULT_HARVEST_CONFIG):
        self.config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> None:
        """Load harvest configuration from YAML file."""
        if not self.config_path.exists():
            raise ConfigError(f"Harvest config file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(self._config, dict):
            raise ConfigError(f"Harvest config must be a mapping: {self.config_path}")

    def get_feeds(self) -> list[FeedConfig]:
        """Get configured RSS feeds."""
        feeds = []
        for entry in self._config.get("feeds", []):
            # Bare URLs are accepted as shorthand
            if isinstance(entry, str):
                entry = {"url": entry}
            feeds.append(FeedConfig(**entry))
        return feeds

    def get_taxonomy(self) -> dict[str, tuple[str, ...]]:
        """Get the category -> keyword phrases mapping."""
        taxonomy = self._config.get("taxonomy", {}) or {}
        return {
            str(category): tuple(str(keyword) for keyword in (keywords or []))
            for category, keywords in taxonomy.items()
        }

    def get_site_profiles(self) -> list[SiteProfileRule]:
        """Get site profile rules in declaration order."""
        rules = []
        for entry in self._config.get("site_profiles", []):
            profile_data = {k: v for k, v in entry.items() if k != "match"}
            profile_data.setdefault("name", entry["match"])
            rules.append(SiteProfileRule(match=entry["match"], profile=SiteProfile(**profile_data)))
        return rules

    def get_default_profile(self) -> SiteProfile:
        """Get the profile used when no site rule matches."""
        data = self._config.get("default_profile")
        if not data:
            return PipelineConfig().default_profile
        return SiteProfile(**{"name": "default", **data})


def build_pipeline_config(settings: "Settings", harvest_config: HarvestConfig) -> PipelineConfig:
    """Combine settings and the harvest file into one immutable value."""
    try:
        return PipelineConfig(
            feeds=tuple(harvest_config.get_feeds()),
            taxonomy=harvest_config.get_taxonomy(),
            site_profiles=tuple(harvest_config.get_site_profiles()),
            default_profile=harvest_config.get_default_profile(),
            fetch_interval=settings.fetch_interval,
            max_entries_per_feed=settings.max_entries_per_feed,
            include_content=settings.include_content,
            include_categories=settings.include_categories,
            include_publish_date=settings.include_publish_date,
            extract_full_content=settings.extract_full_content,
            filter_by_keywords=settings.filter_by_keywords,
            keyword_score_threshold=settings.keyword_score_threshold,
        )
    except (ValidationError, KeyError, TypeError) as e:
        raise ConfigError(f"Invalid harvest configuration: {e}") from e


# Global instances
settings = Settings()
_harvest_config: HarvestConfig | None = None


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def get_harvest_config() -> HarvestConfig:
    """Get the harvest configuration named by the settings."""
    global _harvest_config
    if _harvest_config is None:
        _harvest_config = HarvestConfig(settings.harvest_config_path)
    return _harvest_config


def validate_config(settings: Settings, harvest_config: HarvestConfig | None = None) -> bool:
    """Validate configuration completeness."""
    try:
        harvest_config = harvest_config or HarvestConfig(settings.harvest_config_path)
        config = build_pipeline_config(settings, harvest_config)

        if not config.taxonomy or not any(config.taxonomy.values()):
            raise ConfigError("Taxonomy must define at least one keyword")

        for feed in config.feeds:
            if not feed.url.startswith(("http://", "https://")):
                raise ConfigError(f"Feed URL must be http(s): {feed.url}")

        return True

    except ConfigError as e:
        print(f"Configuration validation failed: {e}")
        return False


if __name__ == "__main__":
    if validate_config(get_settings()):
        print("✅ Configuration is valid")
    else:
        print("❌ Configuration validation failed")
        exit(1)
