"""Channel classification for tracking scripts.

Free-text channel labels ("Website", "newsletter", "Streaming Video", ...) are
mapped onto the closed TrackingChannel set with explicit precedence.
"""

import logging
from collections.abc import Iterable

from tracking_tags.core.schemas import AssetReference, Dimensions, TrackingChannel

logger = logging.getLogger(__name__)


def classify_channel(label: str | None, has_newsletter_text: bool = False) -> TrackingChannel:
    """Map a raw channel label to a TrackingChannel.

    "newsletter" wins over "streaming"; anything else (including empty) is website.
    """
    normalized = (label or "").strip().lower()
    if "newsletter" in normalized:
        return TrackingChannel.NEWSLETTER_TEXT if has_newsletter_text else TrackingChannel.NEWSLETTER_IMAGE
    if "streaming" in normalized:
        return TrackingChannel.STREAMING
    return TrackingChannel.WEBSITE


class LegacyChannelResolver:
    """Channel lookup by pixel size against an order's historical asset references.

    Only used when neither the placement nor the creative carries a channel.
    Placements created before explicit channel tagging depend on it; remove once
    no unassigned creatives remain.
    """

    def __init__(self, asset_references: Iterable[AssetReference]):
        self.asset_references = list(asset_references)

    def match(self, dimensions: Dimensions) -> AssetReference | None:
        size = dimensions.size_string
        for ref in self.asset_references:
            if any(d.strip().lower() == size for d in ref.dimension_list):
                return ref
        return None

    def resolve(self, dimensions: Dimensions) -> str | None:
        ref = self.match(dimensions)
        if ref is None or not ref.channel:
            return None
        logger.info(
            f"Matched {dimensions.size_string} to legacy placement '{ref.placement_name}' with channel '{ref.channel}'"
        )
        return ref.channel.lower()


def resolve_channel_label(
    placement_channel: str | None,
    creative_channel: str | None,
    dimensions: Dimensions,
    legacy_resolver: LegacyChannelResolver | None = None,
) -> str:
    """Pick the channel label to classify.

    placement-declared -> creative association -> legacy dimension match -> "website"
    """
    for label in (placement_channel, creative_channel):
        if label and label.strip():
            return label.strip().lower()
    if legacy_resolver is not None:
        legacy = legacy_resolver.resolve(dimensions)
        if legacy:
            return legacy
    return TrackingChannel.WEBSITE.value
