"""Unit tests for creative to placement matching."""

import logging

import pytest

from tests.fixtures import CreativeFactory, OrderFactory
from tracking_tags.core.helpers.placement_helpers import exclusion_reason, match_placements
from tracking_tags.core.schemas import CreativeAsset, Order


def _creative(**kwargs) -> CreativeAsset:
    return CreativeAsset(**CreativeFactory.create(**kwargs))


def _order(**kwargs) -> Order:
    return Order(**OrderFactory.create(**kwargs))


class TestExclusionRule:
    """Test which creative/placement pairs never get a script."""

    @pytest.mark.parametrize("group", ["print::full-page", "Radio::30s", "podcast-midroll"])
    def test_non_digital_group_excludes_even_images(self, group):
        creative = _creative(file_type="image/png")
        assert exclusion_reason(creative, group, "website") is not None

    def test_pdf_excluded(self):
        creative = _creative(original_filename="insert.pdf", file_type="application/pdf")
        assert "pdf" in exclusion_reason(creative, None, None)

    def test_video_with_streaming_channel_kept(self):
        creative = _creative(original_filename="spot.mp4", file_type="video/mp4")
        assert exclusion_reason(creative, None, "Streaming") is None

    def test_document_extension_with_image_mime_kept(self):
        creative = _creative(original_filename="scan.tif", file_type="image/tiff")
        assert exclusion_reason(creative, None, None) is None

    def test_plain_image_kept(self):
        assert exclusion_reason(_creative(), "website::dim:300x250", "website") is None


class TestMatchPlacements:
    """Test assignment-driven and legacy placement matching."""

    def test_assignments_for_this_publication_only(self):
        creative = _creative(
            assignments=[
                CreativeFactory.assignment("leaderboard@970x90", publication_id=101),
                CreativeFactory.assignment("leaderboard@970x90", publication_id=202),
            ]
        )

        targets = match_placements(creative, _order(publication_id=101))

        assert [t.item_path for t in targets] == ["leaderboard@970x90"]

    def test_order_placement_fills_name_and_channel(self):
        creative = _creative(assignments=[CreativeFactory.assignment("newsletter-banner")])

        (target,) = match_placements(creative, _order())

        assert target.placement_name == "Newsletter Banner (600x150)"
        assert target.channel == "newsletter"

    def test_assignment_values_win_over_order(self):
        creative = _creative(
            assignments=[
                CreativeFactory.assignment("leaderboard@970x90", placement_name="Top Banner (728x90)", channel="web")
            ]
        )

        (target,) = match_placements(creative, _order())

        assert target.placement_name == "Top Banner (728x90)"
        assert target.channel == "web"

    def test_duplicate_assignments_collapse(self):
        assignment = CreativeFactory.assignment("leaderboard@970x90")
        creative = _creative(assignments=[assignment, dict(assignment)])

        assert len(match_placements(creative, _order())) == 1

    def test_legacy_creative_gets_one_order_level_target(self):
        creative = _creative(spec_group_id="website::dim:300x250")

        (target,) = match_placements(creative, _order())

        assert target.item_path is None
        assert target.spec_group_id == "website::dim:300x250"

    def test_assigned_elsewhere_gets_nothing(self):
        """A creative with any assignment never falls back to the legacy path."""
        creative = _creative(assignments=[CreativeFactory.assignment("leaderboard@970x90", publication_id=202)])

        assert match_placements(creative, _order(publication_id=101)) == []

    def test_unknown_placement_skipped_with_warning(self, caplog):
        creative = _creative(assignments=[CreativeFactory.assignment("sidebar@300x600")])

        with caplog.at_level(logging.WARNING, logger="tracking_tags.generation"):
            targets = match_placements(creative, _order())

        assert targets == []
        assert "unassigned_placement" in caplog.text

    def test_order_without_placement_list_accepts_assignment(self):
        creative = _creative(assignments=[CreativeFactory.assignment("sidebar@300x600", channel="website")])

        (target,) = match_placements(creative, _order(placements=[]))

        assert target.item_path == "sidebar@300x600"

    def test_print_group_excluded(self):
        creative = _creative(
            file_type="image/png",
            assignments=[CreativeFactory.assignment("leaderboard@970x90", spec_group_id="print::dim:970x90")],
        )

        assert match_placements(creative, _order()) == []
