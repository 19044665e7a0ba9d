"""
Global pytest configuration and fixtures for all tests.

This file provides fixtures available to all test modules.
"""

import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tracking_tags.core.config import TrackingConfig, reset_config  # noqa: E402

TEST_CDN_URL = "https://track.example.com"
TEST_ASSETS_DOMAIN = "assets.example.com"


@pytest.fixture
def tracking_config():
    """Fully configured tracking settings."""
    return TrackingConfig(
        cdn_url=TEST_CDN_URL,
        ad_assets_cdn_domain=TEST_ASSETS_DOMAIN,
        environment="development",
    )


@pytest.fixture
def bare_tracking_config():
    """Tracking settings with neither base URL nor CDN domain."""
    return TrackingConfig(cdn_url="", ad_assets_cdn_domain="", environment="development")


@pytest.fixture
def tracking_env(monkeypatch):
    """Configure the global settings through the environment."""
    monkeypatch.setenv("TRACKING_CDN_URL", TEST_CDN_URL)
    monkeypatch.setenv("AWS_CLOUDFRONT_DOMAIN_AD_ASSETS", TEST_ASSETS_DOMAIN)
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    reset_config()
    yield
    reset_config()
