"""Ad size resolution for a creative/placement pair.

The placement's declared size always wins over the uploaded file's own size:
the slot is fixed by the publisher's layout.
"""

import re

from tracking_tags.core.schemas import CreativeAsset, Dimensions

DEFAULT_DIMENSIONS = Dimensions(width=300, height=250)

_PLACEMENT_NAME_PATTERN = re.compile(r"\(\s*(\d+)\s*x\s*(\d+)\s*\)", re.IGNORECASE)
_GROUP_ID_PATTERN = re.compile(r"dim:\s*(\d+)\s*x\s*(\d+)", re.IGNORECASE)
_FILENAME_PATTERN = re.compile(r"(\d+)x(\d+)", re.IGNORECASE)


def _to_dimensions(match: re.Match | None) -> Dimensions | None:
    if not match:
        return None
    width, height = int(match.group(1)), int(match.group(2))
    if width <= 0 or height <= 0:
        return None
    return Dimensions(width=width, height=height)


def parse_placement_name_size(placement_name: str | None) -> Dimensions | None:
    """Parse '(WxH)' out of a placement display name, e.g. 'Leaderboard (970x90)'."""
    if not placement_name:
        return None
    return _to_dimensions(_PLACEMENT_NAME_PATTERN.search(placement_name))


def parse_group_id_size(spec_group_id: str | None) -> Dimensions | None:
    """Parse a 'dim:WxH' token out of a placement group identifier."""
    if not spec_group_id:
        return None
    return _to_dimensions(_GROUP_ID_PATTERN.search(spec_group_id))


def parse_filename_size(filename: str | None) -> Dimensions | None:
    """Parse 'WxH' out of a filename, e.g. '300x250_MediumRectangle.png'."""
    if not filename:
        return None
    return _to_dimensions(_FILENAME_PATTERN.search(filename))


def declared_creative_size(creative: CreativeAsset) -> Dimensions | None:
    specs = creative.specifications
    if specs.width and specs.height and specs.width > 0 and specs.height > 0:
        return Dimensions(width=specs.width, height=specs.height)
    return None


def resolve_dimensions(
    creative: CreativeAsset,
    placement_name: str | None = None,
    spec_group_id: str | None = None,
) -> Dimensions:
    """Resolve the rendered ad size, first match wins.

    1. '(WxH)' in the placement display name
    2. 'dim:WxH' in the placement group identifier
    3. width/height declared on the creative
    4. 'WxH' in the original filename
    5. 300x250
    """
    return (
        parse_placement_name_size(placement_name)
        or parse_group_id_size(spec_group_id)
        or declared_creative_size(creative)
        or parse_filename_size(creative.original_filename)
        or DEFAULT_DIMENSIONS
    )
