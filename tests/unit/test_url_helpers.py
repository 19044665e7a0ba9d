"""Unit tests for attribution URL building and parsing."""

from urllib.parse import urlsplit

import pytest

from tracking_tags.core.helpers.url_helpers import (
    AttributionParams,
    build_attribution_urls,
    build_tracking_url,
    parse_tracking_url,
)
from tracking_tags.core.schemas import Dimensions, TrackingChannel


def _urls(config, channel=TrackingChannel.WEBSITE, **overrides):
    kwargs = {
        "order_id": "order_1",
        "campaign_id": "camp 1&2",
        "publication_id": 101,
        "channel": channel,
        "creative_id": "cr_abc",
        "dimensions": Dimensions(width=970, height=90),
        "item_path": "leaderboard@970x90",
        "redirect_url": "https://acme.example/spring?utm_source=news&utm_medium=email",
        "creative_url": "https://assets.example.com/creatives/cr_abc.png",
    }
    kwargs.update(overrides)
    return build_attribution_urls(config, **kwargs)


class TestBuildAttributionUrls:
    """Test impression, click and creative URL composition."""

    def test_endpoints(self, tracking_config):
        urls = _urls(tracking_config)

        assert urls.impression_pixel.startswith("https://track.example.com/pxl.png?")
        assert urls.click_tracker.startswith("https://track.example.com/c?")
        assert urls.creative_url == "https://assets.example.com/creatives/cr_abc.png"

    @pytest.mark.parametrize("channel", list(TrackingChannel))
    def test_round_trip_recovers_ids(self, tracking_config, channel):
        urls = _urls(tracking_config, channel=channel)

        for url in (urls.impression_pixel, urls.click_tracker):
            parsed = parse_tracking_url(url)
            assert parsed["campaignId"] == "camp 1&2"
            assert parsed["publicationId"] == "101"
            assert parsed["creativeId"] == "cr_abc"
            assert parsed["orderId"] == "order_1"

    def test_click_carries_redirect_impression_does_not(self, tracking_config):
        urls = _urls(tracking_config)

        click = parse_tracking_url(urls.click_tracker)
        impression = parse_tracking_url(urls.impression_pixel)

        assert click["redirectUrl"] == "https://acme.example/spring?utm_source=news&utm_medium=email"
        assert click["eventType"] == "click"
        assert "redirectUrl" not in impression
        assert impression["eventType"] == "display"

    def test_literal_cache_buster(self, tracking_config):
        urls = _urls(tracking_config)

        assert "cb=CACHE_BUSTER" in urls.impression_pixel
        assert parse_tracking_url(urls.click_tracker)["cacheBuster"] == "CACHE_BUSTER"

    def test_newsletter_adds_email_id(self, tracking_config):
        newsletter = parse_tracking_url(_urls(tracking_config, channel=TrackingChannel.NEWSLETTER_TEXT).click_tracker)
        website = parse_tracking_url(_urls(tracking_config).click_tracker)

        assert newsletter["emailId"] == "EMAIL_ID"
        assert newsletter["channel"] == "newsletter"
        assert "emailId" not in website

    def test_size_and_item_path(self, tracking_config):
        parsed = parse_tracking_url(_urls(tracking_config).impression_pixel)

        assert parsed["size"] == "970x90"
        assert parsed["itemPath"] == "leaderboard@970x90"

    def test_missing_item_path_uses_fallback(self, tracking_config):
        parsed = parse_tracking_url(_urls(tracking_config, item_path=None).impression_pixel)

        assert parsed["itemPath"] == "tracking-display"

    def test_no_stored_file_uses_asset_endpoint(self, tracking_config):
        urls = _urls(tracking_config, creative_url=None)

        assert urlsplit(urls.creative_url).path == "/a/cr_abc.jpg"
        assert parse_tracking_url(urls.creative_url)["eventType"] == "view"

    def test_empty_base_url_degrades(self, bare_tracking_config):
        urls = _urls(bare_tracking_config)

        assert urls.impression_pixel.startswith("/pxl.png?")


class TestBuildTrackingUrl:
    def test_values_encoded_once(self):
        params = AttributionParams(order_id="o/1", campaign_id="c 1", publication_id=7, channel="website")

        url = build_tracking_url("https://t.example", "/pxl.png", "display", params)

        assert "cid=c+1" in url
        assert "oid=o%2F1" in url
        assert "%25" not in url

    def test_optional_fields_omitted(self):
        params = AttributionParams(order_id="o1", campaign_id="c1", publication_id=7, channel="website")

        parsed = parse_tracking_url(build_tracking_url("https://t.example", "/c", "click", params))

        assert set(parsed) == {"orderId", "campaignId", "publicationId", "channel", "eventType", "cacheBuster"}
