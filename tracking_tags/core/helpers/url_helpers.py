"""Attribution URL building and parsing.

URL structure (query keys are fixed; deployed tags and the click redirect
handler depend on them):
- Impressions: {base}{pixel_path}?oid=..&cid=..&pid=..&ch=..&t=display&cb=CACHE_BUSTER&cr=..&s=..&ip=..
- Clicks:      {base}{click_path}?oid=..&cid=..&pid=..&ch=..&t=click&cb=CACHE_BUSTER&cr=..&s=..&ip=..&r={landing}
- Newsletters add eid=EMAIL_ID, replaced by the ESP merge tag at send time.
"""

from dataclasses import dataclass
from typing import Literal
from urllib.parse import parse_qs, urlencode, urlsplit

from tracking_tags.core.config import TrackingConfig
from tracking_tags.core.schemas import Dimensions, TrackingChannel, TrackingUrls

EventType = Literal["display", "click", "view"]

# Logical attribution field -> query parameter key
TRACKING_QUERY_PARAMS: dict[str, str] = {
    "orderId": "oid",
    "campaignId": "cid",
    "publicationId": "pid",
    "channel": "ch",
    "eventType": "t",
    "cacheBuster": "cb",
    "creativeId": "cr",
    "size": "s",
    "itemPath": "ip",
    "emailId": "eid",
    "redirectUrl": "r",
}


@dataclass(frozen=True)
class AttributionParams:
    order_id: str
    campaign_id: str
    publication_id: int
    channel: str
    creative_id: str | None = None
    size: str | None = None
    item_path: str | None = None
    email_id: str | None = None
    redirect_url: str | None = None


def build_tracking_url(
    base_url: str,
    path: str,
    event_type: EventType,
    params: AttributionParams,
    cache_buster_token: str = "CACHE_BUSTER",
) -> str:
    """Compose one tracking URL. Values are URL-encoded exactly once."""
    query: list[tuple[str, str]] = [
        ("oid", params.order_id),
        ("cid", params.campaign_id),
        ("pid", str(params.publication_id)),
        ("ch", params.channel),
        ("t", event_type),
        # Left as a literal; the ad server or ESP substitutes its own macro
        ("cb", cache_buster_token),
    ]
    if params.creative_id:
        query.append(("cr", params.creative_id))
    if params.size:
        query.append(("s", params.size))
    if params.item_path:
        query.append(("ip", params.item_path))
    if params.email_id:
        query.append(("eid", params.email_id))
    if event_type == "click" and params.redirect_url:
        query.append(("r", params.redirect_url))

    return f"{base_url}{path}?{urlencode(query)}"


def build_attribution_urls(
    config: TrackingConfig,
    *,
    order_id: str,
    campaign_id: str,
    publication_id: int,
    channel: TrackingChannel,
    creative_id: str,
    dimensions: Dimensions,
    item_path: str | None,
    redirect_url: str,
    creative_url: str | None = None,
) -> TrackingUrls:
    """Build the impression, click and creative URLs for one (creative, placement) pair.

    `creative_url` is the already CDN-normalized image URL; when the creative has
    no stored file the asset endpoint of the tracking CDN is used instead.
    """
    params = AttributionParams(
        order_id=order_id,
        campaign_id=campaign_id,
        publication_id=publication_id,
        channel=channel.url_code,
        creative_id=creative_id,
        size=dimensions.size_string,
        item_path=item_path or config.item_path_fallback,
        email_id=config.email_id_token if channel.is_newsletter else None,
        redirect_url=redirect_url,
    )
    base = config.cdn_url
    token = config.cache_buster_token

    impression = build_tracking_url(base, config.pixel_path, "display", params, token)
    click = build_tracking_url(base, config.click_path, "click", params, token)
    if not creative_url:
        creative_url = build_tracking_url(base, f"{config.asset_path}/{creative_id}.jpg", "view", params, token)

    return TrackingUrls(impression_pixel=impression, click_tracker=click, creative_url=creative_url)


def parse_tracking_url(url: str) -> dict[str, str]:
    """Recover the attribution fields of a tracking URL, keyed by logical name."""
    query = parse_qs(urlsplit(url).query, keep_blank_values=True)
    by_key = {key: values[0] for key, values in query.items() if values}
    return {name: by_key[key] for name, key in TRACKING_QUERY_PARAMS.items() if key in by_key}
