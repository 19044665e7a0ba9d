"""Unit tests for ad server and email platform transformers."""

import pytest

from tracking_tags.adapters import (
    AD_SERVER_REGISTRY,
    GENERIC_AD_SERVER_INSTRUCTIONS,
    GENERIC_ESP_INSTRUCTIONS,
    get_ad_server_transformer,
    get_esp_transformer,
    transform_tag,
)
from tracking_tags.adapters.direct import DirectTransformer
from tracking_tags.adapters.email_platforms import ESP_MERGE_TAGS
from tracking_tags.core.exceptions import UnknownPlatformError
from tracking_tags.core.schemas import PublicationPlatforms, TrackingChannel

CLICK = "https://track.example.com/c?oid=o1&t=click&cb=CACHE_BUSTER&r=https%3A%2F%2Facme.example"
PIXEL = "https://track.example.com/pxl.png?oid=o1&t=display&cb=CACHE_BUSTER"
IMAGE = "https://assets.example.com/creatives/cr_1.png"

DISPLAY_TAG = f"""<!-- Acme Co | Spring Sale | 300x250 -->
<a href="{CLICK}" target="_blank" rel="noopener">
  <img src="{IMAGE}" width="300" height="250" border="0" alt="Acme Co Ad" />
</a>
<img src="{PIXEL}" width="1" height="1" style="display:none;" alt="" />"""

NEWSLETTER_TAG = f'<a href="{CLICK}&eid=EMAIL_ID"><img src="{IMAGE}" /></a><img src="{PIXEL}&eid=EMAIL_ID" />'


class TestAdServerTransformers:
    """Test macro substitution for ad servers."""

    @pytest.mark.parametrize(
        "ad_server,click_macro,cache_buster",
        [
            ("gam", "%%CLICK_URL_UNESC%%", "%%CACHEBUSTER%%"),
            ("broadstreet", "{{click}}", "[timestamp]"),
            ("adbutler", "[TRACKING_LINK]", "[RANDOM]"),
        ],
    )
    def test_macros(self, ad_server, click_macro, cache_buster):
        tag = get_ad_server_transformer(ad_server).transform(DISPLAY_TAG)

        assert "CACHE_BUSTER" not in tag
        assert cache_buster in tag
        assert f'href="{click_macro}https://track.example.com/c?' in tag
        # The impression pixel is not a click and keeps its plain URL
        assert '<img src="https://track.example.com/pxl.png?' in tag

    def test_registry_aliases(self):
        assert AD_SERVER_REGISTRY["google_ad_manager"] is AD_SERVER_REGISTRY["gam"]
        assert get_ad_server_transformer("GAM").platform == "gam"

    def test_unknown_ad_server_raises(self):
        with pytest.raises(UnknownPlatformError):
            get_ad_server_transformer("openx")

    def test_custom_click_path(self):
        tag = DISPLAY_TAG.replace("/c?", "/click?")
        transformed = get_ad_server_transformer("gam", click_path="/click").transform(tag)

        assert 'href="%%CLICK_URL_UNESC%%https://track.example.com/click?' in transformed


class TestDirectTransformer:
    """Test the JavaScript wrapper for direct placements."""

    def test_wrapper(self):
        tag = DirectTransformer().transform(DISPLAY_TAG)

        assert "IntersectionObserver" in tag
        assert "/bot|crawl|spider" in tag
        assert "<noscript>" in tag
        assert "'+Date.now()+'" in tag
        assert "CACHE_BUSTER" not in tag
        assert "width:300px;height:250px;" in tag
        assert 'alt="Acme Co Ad"' in tag

    def test_noscript_uses_fixed_cache_buster(self):
        tag = DirectTransformer().transform(DISPLAY_TAG)
        noscript = tag.split("<noscript>")[1].split("</noscript>")[0]

        assert "cb=0" in noscript

    def test_container_id_deterministic(self):
        transformer = DirectTransformer()

        assert transformer.transform(DISPLAY_TAG) == transformer.transform(DISPLAY_TAG)
        assert transformer.container_id(DISPLAY_TAG) != transformer.container_id(DISPLAY_TAG + " ")
        assert transformer.container_id(DISPLAY_TAG).startswith("ad-container-")


class TestEmailPlatformTransformers:
    """Test merge tag substitution for ESPs."""

    def test_all_esps_registered(self):
        expected = {
            "mailchimp",
            "constant_contact",
            "campaign_monitor",
            "klaviyo",
            "sailthru",
            "active_campaign",
            "sendgrid",
            "beehiiv",
            "convertkit",
            "emma",
            "hubspot",
            "brevo",
            "mailer_lite",
            "drip",
            "aweber",
            "other",
        }
        assert set(ESP_MERGE_TAGS) == expected

    def test_mailchimp(self):
        transformer = get_esp_transformer("mailchimp")
        tag = transformer.transform(NEWSLETTER_TAG)

        assert "eid=*|UNIQID|*" in tag
        assert "cb=*|DATE:U|*" in tag
        assert transformer.platform_name == "Mailchimp"

    def test_custom_merge_tags_override(self):
        tag = get_esp_transformer("other", custom_email_id="%%sub_id%%", custom_cache_buster="%%now%%").transform(
            NEWSLETTER_TAG
        )

        assert "eid=%%sub_id%%" in tag
        assert "cb=%%now%%" in tag

    def test_other_without_custom_tags_keeps_tokens(self):
        assert get_esp_transformer("other").transform(NEWSLETTER_TAG) == NEWSLETTER_TAG

    def test_unknown_esp_raises(self):
        with pytest.raises(UnknownPlatformError):
            get_esp_transformer("hotmail")


class TestTransformTag:
    """Test platform family dispatch by channel."""

    def test_newsletter_uses_esp(self):
        platforms = PublicationPlatforms(ad_server="gam", esp="klaviyo")

        result = transform_tag(NEWSLETTER_TAG, TrackingChannel.NEWSLETTER_IMAGE, platforms)

        assert result.platform == "klaviyo"
        assert "{{ person.id }}" in result.tag

    def test_website_uses_ad_server(self):
        platforms = PublicationPlatforms(ad_server="broadstreet", esp="klaviyo")

        result = transform_tag(DISPLAY_TAG, "website", platforms)

        assert result.platform == "broadstreet"
        assert "[timestamp]" in result.tag

    def test_unset_platform_generic(self):
        result = transform_tag(NEWSLETTER_TAG, TrackingChannel.NEWSLETTER_TEXT, PublicationPlatforms())

        assert result.tag == NEWSLETTER_TAG
        assert result.platform == "generic"
        assert result.instructions == GENERIC_ESP_INSTRUCTIONS

    def test_unknown_platform_generic(self, caplog):
        result = transform_tag(DISPLAY_TAG, TrackingChannel.STREAMING, PublicationPlatforms(ad_server="openx"))

        assert result.tag == DISPLAY_TAG
        assert result.platform_name == "Unknown Platform"
        assert result.instructions == GENERIC_AD_SERVER_INSTRUCTIONS
        assert "openx" in caplog.text
