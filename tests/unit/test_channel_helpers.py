"""Unit tests for channel classification and the legacy resolver."""

import logging

import pytest

from tracking_tags.core.helpers.channel_helpers import LegacyChannelResolver, classify_channel, resolve_channel_label
from tracking_tags.core.schemas import AssetReference, Dimensions, TrackingChannel


class TestClassifyChannel:
    """Test mapping free-text labels onto TrackingChannel."""

    @pytest.mark.parametrize(
        "label,has_text,expected",
        [
            ("Website", False, TrackingChannel.WEBSITE),
            ("newsletter", False, TrackingChannel.NEWSLETTER_IMAGE),
            ("Weekly Newsletter", True, TrackingChannel.NEWSLETTER_TEXT),
            ("Streaming Video", False, TrackingChannel.STREAMING),
            ("streaming newsletter", False, TrackingChannel.NEWSLETTER_IMAGE),
            ("", False, TrackingChannel.WEBSITE),
            (None, True, TrackingChannel.WEBSITE),
            ("social", False, TrackingChannel.WEBSITE),
        ],
    )
    def test_classification(self, label, has_text, expected):
        assert classify_channel(label, has_text) == expected

    def test_headline_makes_newsletter_text(self):
        """Same placement, same creative: text fields decide text vs image."""
        assert classify_channel("newsletter", has_newsletter_text=True) == TrackingChannel.NEWSLETTER_TEXT
        assert classify_channel("newsletter", has_newsletter_text=False) == TrackingChannel.NEWSLETTER_IMAGE

    def test_channel_codes(self):
        assert TrackingChannel.NEWSLETTER_TEXT.url_code == "newsletter"
        assert TrackingChannel.NEWSLETTER_IMAGE.type_code == "nli"
        assert TrackingChannel.WEBSITE.type_code == "display"
        assert TrackingChannel.STREAMING.url_code == "streaming"


class TestResolveChannelLabel:
    """Test label precedence: placement, creative, legacy match, website."""

    def setup_method(self):
        self.resolver = LegacyChannelResolver(
            [
                AssetReference(placement_name="Newsletter Banner", channel="Newsletter", dimensions=["600x150"]),
                AssetReference(placement_name="Pre-roll", channel=None, dimensions="640x360"),
            ]
        )

    def test_placement_channel_wins(self):
        label = resolve_channel_label("Website", "newsletter", Dimensions(width=600, height=150), self.resolver)
        assert label == "website"

    def test_creative_channel_second(self):
        label = resolve_channel_label("  ", "Streaming", Dimensions(width=600, height=150), self.resolver)
        assert label == "streaming"

    def test_legacy_dimension_match(self, caplog):
        with caplog.at_level(logging.INFO):
            label = resolve_channel_label(None, None, Dimensions(width=600, height=150), self.resolver)

        assert label == "newsletter"
        assert "Newsletter Banner" in caplog.text

    def test_legacy_match_without_channel_falls_through(self):
        label = resolve_channel_label(None, None, Dimensions(width=640, height=360), self.resolver)
        assert label == "website"

    def test_no_resolver_defaults_to_website(self):
        assert resolve_channel_label(None, None, Dimensions(width=600, height=150)) == "website"
