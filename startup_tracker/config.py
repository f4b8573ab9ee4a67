"""
Configuration management for the Startup Tracker.
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """Database configuration settings."""
    url: str = Field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./startups.db"))
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @field_validator("url", mode="before")
    @classmethod
    def get_url_from_env(cls, v):
        env_url = os.getenv("DATABASE_URL")
        if env_url:
            return env_url
        return v or "sqlite:///./startups.db"


class ScrapingConfig(BaseModel):
    """Web scraping configuration settings."""
    user_agent: str = "StartupTracker/1.0 (+https://github.com/startup-tracker/bot-info)"
    requests_per_second: float = Field(default=0.5, gt=0)  # One request every 2 seconds
    timeout: int = 30
    max_retries: int = 3
    retry_delay: float = 2.0
    page_retry_delay: float = 5.0
    max_consecutive_errors: int = 3
    max_connections: int = 20
    max_connections_per_host: int = 5


class ProxyConfig(BaseModel):
    """Fetch-and-render proxy service used for outbound page fetches."""
    enabled: bool = True
    api_url: str = "https://app.scrapingbee.com/api/v1"
    api_key: str = Field(default_factory=lambda: os.getenv("SCRAPING_BEE_API_KEY", ""))
    render_js: bool = True
    premium_proxy: bool = True
    block_ads: bool = True
    wait_ms: int = 5000
    timeout_ms: int = 20000

    @field_validator("api_key", mode="before")
    @classmethod
    def get_api_key_from_env(cls, v):
        env_key = os.getenv("SCRAPING_BEE_API_KEY")
        if env_key:
            return env_key
        return v or ""


class InvestmentWindow(BaseModel):
    """Calendar quarter an investment must fall in."""
    year: int
    quarter: int = Field(ge=1, le=4)


class PortfolioSourceConfig(BaseModel):
    """Venture portfolio page source."""
    enabled: bool = True
    urls: List[str] = Field(default_factory=lambda: ["https://a16z.com/portfolio/"])
    selectors: List[str] = Field(default_factory=lambda: [
        ".company-grid-item",
        "[data-filter-by]",
        "[data-name]",
        "[data-secondary-name]",
        ".column.grid-item",
        ".portfolio-company",
        ".builder",
        ".portfolio-grid > div",
        ".company-list-item",
        ".startup-item",
    ])
    investment_window: Optional[InvestmentWindow] = None
    exclude_exits: bool = False


class DirectorySourceConfig(BaseModel):
    """Accelerator company directory API source."""
    enabled: bool = True
    api_url: str = "https://api.ycombinator.com/v0.1/companies"
    batches: List[str] = Field(default_factory=lambda: ["W24"])
    page_size: int = 100


class SourcesConfig(BaseModel):
    """All scraping sources."""
    portfolio: PortfolioSourceConfig = Field(default_factory=PortfolioSourceConfig)
    directory: DirectorySourceConfig = Field(default_factory=DirectorySourceConfig)


class LinkedInConfig(BaseModel):
    """Company profile lookup settings."""
    base_url: str = "https://www.linkedin.com/company/"
    search_enabled: bool = False
    search_url: str = "https://www.google.com/search"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = None


class WebConfig(BaseModel):
    """HTTP surface configuration."""
    host: str = "0.0.0.0"
    port: int = 8000
    max_duration: float = 60.0


class AppConfig(BaseModel):
    """Application configuration."""
    name: str = "Startup Tracker"
    version: str = "0.1.0"
    environment: str = Field(default_factory=lambda: os.getenv("APP_ENVIRONMENT", "development"))
    debug: bool = Field(default_factory=lambda: os.getenv("APP_DEBUG", "").lower() in ("true", "1", "yes"))

    @field_validator("environment", mode="before")
    @classmethod
    def get_environment_from_env(cls, v):
        if v is None:
            return os.getenv("APP_ENVIRONMENT", "development")
        return v

    @field_validator("debug", mode="before")
    @classmethod
    def get_debug_from_env(cls, v):
        if v is None:
            env_debug = os.getenv("APP_DEBUG", "")
            if env_debug:
                return env_debug.lower() in ("true", "1", "yes")
            return False
        return v


class Config(BaseModel):
    """Main configuration class."""
    app: AppConfig = Field(default_factory=AppConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scraping: ScrapingConfig = Field(default_factory=ScrapingConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    linkedin: LinkedInConfig = Field(default_factory=LinkedInConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to configuration file. If None, uses CONFIG_PATH
            or the default location.

    Returns:
        Config object with all settings.
    """
    if config_path is None:
        config_path = os.getenv("CONFIG_PATH") or Path(__file__).parent.parent / "config" / "default.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    return Config(**config_data)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with all settings.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Install an already-built configuration as the global instance."""
    global _config
    _config = config


def reload_config(config_path: Optional[str] = None) -> Config:
    """
    Reload configuration from file.

    Args:
        config_path: Path to configuration file. If None, uses default location.

    Returns:
        Updated Config object.
    """
    global _config
    _config = load_config(config_path)
    return _config
