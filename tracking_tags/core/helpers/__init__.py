"""Pure helper functions for tracking script generation.

- dimension_helpers: ad size resolution for a creative/placement pair
- channel_helpers: channel classification and the legacy dimension-match resolver
- placement_helpers: creative to placement matching and non-digital exclusion
- url_helpers: attribution URL building and parsing
- cdn_helpers: storage URL to permanent CDN URL rewriting
"""

from tracking_tags.core.helpers.cdn_helpers import normalize_creative_url
from tracking_tags.core.helpers.channel_helpers import LegacyChannelResolver, classify_channel, resolve_channel_label
from tracking_tags.core.helpers.dimension_helpers import DEFAULT_DIMENSIONS, resolve_dimensions
from tracking_tags.core.helpers.placement_helpers import PlacementTarget, exclusion_reason, match_placements
from tracking_tags.core.helpers.url_helpers import build_attribution_urls, build_tracking_url, parse_tracking_url

__all__ = [
    "DEFAULT_DIMENSIONS",
    "LegacyChannelResolver",
    "PlacementTarget",
    "build_attribution_urls",
    "build_tracking_url",
    "classify_channel",
    "exclusion_reason",
    "match_placements",
    "normalize_creative_url",
    "parse_tracking_url",
    "resolve_channel_label",
    "resolve_dimensions",
]
