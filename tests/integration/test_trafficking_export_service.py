"""Integration tests for the bulk trafficking export."""

import pytest

from tests.fixtures import CreativeFactory
from tracking_tags.core.database import queries
from tracking_tags.core.exceptions import OrderNotFoundError
from tracking_tags.services.tracking_script_service import TrackingScriptService
from tracking_tags.services.trafficking_export_service import ESP_IMPRESSION_CAVEAT, TraffickingExportService

pytestmark = pytest.mark.integration


@pytest.fixture
def exported_order(seed, db_session, tracking_config):
    seed.campaign()
    seed.order(order_id="order_1", ad_server="gam", esp="mailchimp", esp_compatibility="limited")
    seed.creative(creative_id="cr_web", assignments=[CreativeFactory.assignment("leaderboard@970x90")])
    seed.creative(creative_id="cr_nl", assignments=[CreativeFactory.assignment("newsletter-banner")])
    TrackingScriptService(db_session, tracking_config).generate_for_order("camp_1", 101)
    return seed


class TestTraffickingExport:
    """Test the exported HTML document."""

    def test_document_content(self, exported_order, db_session, tracking_config):
        html = TraffickingExportService(db_session, tracking_config).export_order("order_1")

        assert "Acme Co | Spring Sale" in html
        assert "Leaderboard (970x90)" in html
        assert "Newsletter Banner (600x150)" in html
        assert "Flight: Mar 01, 2026 - Mar 31, 2026" in html
        assert ESP_IMPRESSION_CAVEAT in html
        assert "Google Ad Manager (DFP)" in html
        assert "Mailchimp" in html

    def test_tags_transformed_and_escaped(self, exported_order, db_session, tracking_config):
        html = TraffickingExportService(db_session, tracking_config).export_order("order_1")

        assert "%%CLICK_URL_UNESC%%https://track.example.com/c?" in html
        assert "%%CACHEBUSTER%%" in html
        assert "*|UNIQID|*" in html
        assert "CACHE_BUSTER" not in html
        assert "&lt;a href=" in html
        assert "<a href=" not in html

    def test_limited_esp_gets_simplified_tag(self, exported_order, db_session, tracking_config):
        html = TraffickingExportService(db_session, tracking_config).export_order("order_1")

        assert "Simplified Version" in html

    def test_groups(self, exported_order, db_session, tracking_config):
        service = TraffickingExportService(db_session, tracking_config)
        campaign = queries.get_campaign(db_session, "camp_1")
        order = queries.get_order_by_id(db_session, "order_1")

        groups = service.build_groups(campaign, order, queries.list_active_scripts(db_session, order_id="order_1"))

        assert [g.item_path for g in groups] == ["leaderboard@970x90", "newsletter-banner"]
        (web,) = groups[0].entries
        assert web.channel_code == "display"
        assert web.size == "970x90"
        assert web.platform_name == "Google Ad Manager (DFP)"
        assert ESP_IMPRESSION_CAVEAT not in web.notes

    def test_legacy_scripts_grouped_under_fallback(self, seed, db_session, tracking_config):
        seed.campaign()
        seed.order(order_id="order_1")
        seed.creative(creative_id="cr_legacy")
        TrackingScriptService(db_session, tracking_config).generate_for_order("camp_1", 101)

        html = TraffickingExportService(db_session, tracking_config).export_order("order_1")

        assert "tracking-display" in html
        assert "General placement" in html
        assert "Ad Server:" in html

    def test_empty_order(self, seed, db_session, tracking_config):
        seed.campaign()
        seed.order(order_id="order_1")

        html = TraffickingExportService(db_session, tracking_config).export_order("order_1")

        assert "No active tracking tags for this order." in html

    def test_unknown_order(self, db_session, tracking_config):
        with pytest.raises(OrderNotFoundError):
            TraffickingExportService(db_session, tracking_config).export_order("order_missing")
