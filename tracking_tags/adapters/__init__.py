import logging

from tracking_tags.core.exceptions import UnknownPlatformError
from tracking_tags.core.schemas import PublicationPlatforms, TrackingChannel, TransformedTag

from .ad_servers import AdButlerTransformer, BroadstreetTransformer, GoogleAdManagerTransformer
from .base import PlatformTransformer as PlatformTransformer
from .direct import DirectTransformer
from .email_platforms import ESP_MERGE_TAGS, EmailPlatformTransformer

logger = logging.getLogger(__name__)

# Map of ad server type strings to transformer classes
AD_SERVER_REGISTRY = {
    "gam": GoogleAdManagerTransformer,
    "google_ad_manager": GoogleAdManagerTransformer,
    "broadstreet": BroadstreetTransformer,
    "adbutler": AdButlerTransformer,
    "direct": DirectTransformer,
}

GENERIC_AD_SERVER_INSTRUCTIONS = (
    "Paste this tag into your ad server. Replace CACHE_BUSTER with your ad server's cache-buster macro."
)
GENERIC_ESP_INSTRUCTIONS = (
    "Paste this tag into your email platform. Replace EMAIL_ID with your subscriber ID merge tag "
    "and CACHE_BUSTER with a timestamp merge tag."
)


def get_ad_server_transformer(
    ad_server: str,
    click_path: str = "/c",
    cache_buster_token: str = "CACHE_BUSTER",
) -> PlatformTransformer:
    """Factory function to get the transformer for an ad server."""
    transformer_class = AD_SERVER_REGISTRY.get((ad_server or "").lower())
    if not transformer_class:
        raise UnknownPlatformError(f"Unknown ad server: {ad_server}")
    if transformer_class is DirectTransformer:
        return DirectTransformer(cache_buster_token=cache_buster_token)
    return transformer_class(cache_buster_token=cache_buster_token, click_path=click_path)


def get_esp_transformer(
    esp: str,
    custom_email_id: str | None = None,
    custom_cache_buster: str | None = None,
    cache_buster_token: str = "CACHE_BUSTER",
    email_id_token: str = "EMAIL_ID",
) -> PlatformTransformer:
    """Factory function to get the transformer for an email platform."""
    key = (esp or "").lower()
    if key not in ESP_MERGE_TAGS:
        raise UnknownPlatformError(f"Unknown email platform: {esp}")
    return EmailPlatformTransformer(
        key,
        custom_email_id=custom_email_id,
        custom_cache_buster=custom_cache_buster,
        cache_buster_token=cache_buster_token,
        email_id_token=email_id_token,
    )


def transform_tag(
    tag: str,
    channel: TrackingChannel | str,
    platforms: PublicationPlatforms,
    click_path: str = "/c",
) -> TransformedTag:
    """Rewrite a stored tag for the publication's configured platform.

    Newsletter channels use the ESP, everything else the ad server. An unset or
    unknown platform returns the stored tag with generic instructions.
    """
    channel = TrackingChannel(channel)
    try:
        if channel.is_newsletter:
            if not platforms.esp:
                return TransformedTag(
                    tag=tag, platform="generic", platform_name="Email Platform", instructions=GENERIC_ESP_INSTRUCTIONS
                )
            transformer = get_esp_transformer(
                platforms.esp,
                custom_email_id=platforms.esp_custom_email_id,
                custom_cache_buster=platforms.esp_custom_cache_buster,
            )
        else:
            if not platforms.ad_server:
                return TransformedTag(
                    tag=tag, platform="generic", platform_name="Ad Server", instructions=GENERIC_AD_SERVER_INSTRUCTIONS
                )
            transformer = get_ad_server_transformer(platforms.ad_server, click_path=click_path)
    except UnknownPlatformError as e:
        logger.warning(f"{e}; returning stored tag with generic instructions")
        instructions = GENERIC_ESP_INSTRUCTIONS if channel.is_newsletter else GENERIC_AD_SERVER_INSTRUCTIONS
        return TransformedTag(tag=tag, platform="generic", platform_name="Unknown Platform", instructions=instructions)

    return transformer.render(tag)
