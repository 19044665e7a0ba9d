"""Configuration management for the placement tag engine.

Provides Pydantic-based configuration classes for type-safe, validated configuration
management using environment variables.
"""

import logging

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class TrackingConfig(BaseSettings):
    """Tracking endpoint and creative CDN configuration."""

    cdn_url: str = Field(
        default="",
        validation_alias=AliasChoices("TRACKING_CDN_URL", "TRACKING_BASE_URL"),
        description="Base URL of the tracking CDN (pixel, click and asset endpoints)",
    )
    pixel_path: str = Field(
        default="/pxl.png",
        validation_alias=AliasChoices("TRACKING_PIXEL_PATH"),
        description="Path of the impression pixel endpoint",
    )
    click_path: str = Field(default="/c", validation_alias=AliasChoices("TRACKING_CLICK_PATH"))
    asset_path: str = Field(default="/a", validation_alias=AliasChoices("TRACKING_ASSET_PATH"))
    ad_assets_cdn_domain: str = Field(
        default="",
        validation_alias=AliasChoices("AWS_CLOUDFRONT_DOMAIN_AD_ASSETS", "TRACKING_AD_ASSETS_CDN_DOMAIN"),
        description="Permanent public domain that serves uploaded creatives",
    )
    placeholder_landing_url: str = Field(
        default="https://advertiser.example.com/landing",
        validation_alias=AliasChoices("TRACKING_PLACEHOLDER_LANDING_URL"),
        description="Landing URL used when a creative has no click-through URL",
    )
    item_path_fallback: str = Field(default="tracking-display")
    email_id_token: str = Field(default="EMAIL_ID")
    cache_buster_token: str = Field(default="CACHE_BUSTER")
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "TRACKING_ENVIRONMENT"),
        description="Environment: production, staging, or development",
    )

    model_config = SettingsConfigDict(case_sensitive=False, populate_by_name=True, extra="ignore")

    @field_validator("cdn_url")
    @classmethod
    def normalize_cdn_url(cls, v):
        """Add https:// when no scheme is given and drop any trailing slash."""
        v = (v or "").strip()
        if not v:
            return v  # Allow empty - reported by validate_configuration()
        if not v.startswith(("http://", "https://")):
            v = f"https://{v}"
        return v.rstrip("/")

    @field_validator("ad_assets_cdn_domain")
    @classmethod
    def strip_cdn_domain_scheme(cls, v):
        """Store the bare domain; https:// is added when URLs are composed."""
        v = (v or "").strip()
        for prefix in ("https://", "http://"):
            if v.startswith(prefix):
                v = v[len(prefix) :]
        return v.rstrip("/")

    @field_validator("pixel_path", "click_path", "asset_path")
    @classmethod
    def ensure_leading_slash(cls, v):
        if v and not v.startswith("/"):
            return f"/{v}"
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def missing_fields(self) -> list[str]:
        """Names of settings that are unset and degrade generated output."""
        missing = []
        if not self.cdn_url:
            missing.append("TRACKING_CDN_URL")
        if not self.ad_assets_cdn_domain:
            missing.append("AWS_CLOUDFRONT_DOMAIN_AD_ASSETS")
        return missing


class DatabaseConfig(BaseSettings):
    """Database configuration."""

    url: str | None = Field(default=None, description="Database connection URL")

    model_config = SettingsConfigDict(env_prefix="DATABASE_", case_sensitive=False)


class AppConfig(BaseSettings):
    """Main application configuration."""

    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, extra="ignore")


# Global configuration instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None


def validate_configuration(config: AppConfig | None = None) -> list[str]:
    """Validate configuration at startup.

    Missing tracking settings are not fatal: generation still runs and produces
    empty-prefixed or pass-through URLs. Every gap is logged here so it is
    visible at startup instead of mid-generation.

    Returns:
        Human-readable descriptions of each configuration problem found.
    """
    config = config or get_config()
    problems = []

    tracking = config.tracking
    if not tracking.cdn_url:
        problems.append("TRACKING_CDN_URL is not set - tracking URLs will have no host")
    if not tracking.ad_assets_cdn_domain:
        problems.append("AWS_CLOUDFRONT_DOMAIN_AD_ASSETS is not set - creative URLs may expire")
    if not config.database.url:
        problems.append("DATABASE_URL is not set")

    for problem in problems:
        logger.warning(f"Configuration: {problem}")

    if not problems:
        logger.info("Configuration validation passed")
    return problems
