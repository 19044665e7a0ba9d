"""Rewrite storage URLs into permanent public CDN URLs.

Presigned S3 URLs expire (typically after an hour); a tag embedded in a
newsletter or ad server must keep working for the whole flight.
"""

import logging
from urllib.parse import urlsplit

from tracking_tags.core.config import TrackingConfig

logger = logging.getLogger(__name__)


def is_s3_hostname(hostname: str) -> bool:
    """Match bucket.s3.region.amazonaws.com, bucket.s3.amazonaws.com and s3.region.amazonaws.com."""
    hostname = hostname.lower()
    return ".s3." in hostname or hostname.startswith("s3.") or hostname.endswith(".s3.amazonaws.com")


def normalize_creative_url(storage_url: str | None, config: TrackingConfig) -> str | None:
    """Return a stable public URL for an uploaded creative.

    Without a configured CDN domain the original (possibly expiring) URL is
    returned unchanged. URLs that cannot be parsed or are not storage URLs are
    also returned unchanged.
    """
    if not storage_url:
        return storage_url

    domain = config.ad_assets_cdn_domain
    if not domain:
        if not config.is_production:
            logger.warning("AWS_CLOUDFRONT_DOMAIN_AD_ASSETS not configured - using storage URL which may expire")
        return storage_url

    try:
        parts = urlsplit(storage_url)
        hostname = parts.hostname or ""
    except ValueError:
        return storage_url

    if not hostname or not is_s3_hostname(hostname):
        return storage_url

    key = parts.path.lstrip("/")
    if hostname.lower().startswith("s3."):
        # Path style: first path segment is the bucket
        _, _, key = key.partition("/")

    if not key:
        return storage_url

    # Drop presigned query parameters; the CDN serves the object publicly
    return f"https://{domain}/{key}"
