"""Unit tests for ad size resolution."""

import pytest

from tests.fixtures import CreativeFactory
from tracking_tags.core.helpers.dimension_helpers import (
    DEFAULT_DIMENSIONS,
    parse_filename_size,
    parse_group_id_size,
    parse_placement_name_size,
    resolve_dimensions,
)
from tracking_tags.core.schemas import CreativeAsset, Dimensions


def _creative(**kwargs) -> CreativeAsset:
    return CreativeAsset(**CreativeFactory.create(**kwargs))


class TestSizeParsers:
    """Test the individual size sources."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Leaderboard (970x90)", (970, 90)),
            ("Medium Rectangle ( 300 X 250 )", (300, 250)),
            ("Leaderboard 970x90", None),
            ("Sidebar (0x250)", None),
            (None, None),
        ],
    )
    def test_placement_name(self, name, expected):
        """Only a parenthesized WxH counts as a placement name size."""
        result = parse_placement_name_size(name)
        assert (result.width, result.height) == expected if expected else result is None

    @pytest.mark.parametrize(
        "group_id,expected",
        [
            ("website::dim:728x90", (728, 90)),
            ("newsletter::dim: 600 x 150", (600, 150)),
            ("website::leaderboard", None),
            ("", None),
        ],
    )
    def test_group_id(self, group_id, expected):
        result = parse_group_id_size(group_id)
        assert (result.width, result.height) == expected if expected else result is None

    def test_filename(self):
        assert parse_filename_size("300x250_MediumRectangle.png") == Dimensions(width=300, height=250)
        assert parse_filename_size("logo.png") is None


class TestResolveDimensions:
    """Test the resolution precedence."""

    def test_placement_name_beats_filename(self):
        """A 970x90 slot stays 970x90 even when the uploaded file says 300x250."""
        creative = _creative(original_filename="banner_300x250.png")

        result = resolve_dimensions(creative, placement_name="Leaderboard (970x90)")

        assert result == Dimensions(width=970, height=90)

    def test_group_id_beats_declared_size(self):
        creative = _creative(specifications={"width": 300, "height": 600})

        result = resolve_dimensions(creative, spec_group_id="website::dim:728x90")

        assert result.size_string == "728x90"

    def test_declared_size_beats_filename(self):
        creative = _creative(original_filename="ad_160x600.png", specifications={"width": 320, "height": 50})

        assert resolve_dimensions(creative).size_string == "320x50"

    def test_filename_used_when_nothing_else(self):
        creative = _creative(original_filename="ad_160x600.png")

        assert resolve_dimensions(creative).size_string == "160x600"

    def test_default_when_no_source(self):
        creative = _creative(original_filename="spring-promo.png")

        assert resolve_dimensions(creative, placement_name="Sidebar") == DEFAULT_DIMENSIONS
        assert DEFAULT_DIMENSIONS.size_string == "300x250"

    def test_zero_declared_size_is_ignored(self):
        creative = _creative(original_filename="ad_728x90.png", specifications={"width": 0, "height": 90})

        assert resolve_dimensions(creative).size_string == "728x90"
