"""Mapping of creative assets onto the order placements they serve."""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from tracking_tags.core.logging_config import generation_logger
from tracking_tags.core.schemas import CreativeAsset, Order

logger = logging.getLogger(__name__)

NON_DIGITAL_GROUP_PREFIXES = ("print", "radio", "podcast")

DOCUMENT_EXTENSIONS = {"pdf", "doc", "docx", "ai", "eps", "indd", "psd", "tif", "tiff"}
AUDIO_EXTENSIONS = {"mp3", "wav", "m4a", "aac", "ogg", "flac", "aif", "aiff"}
VIDEO_EXTENSIONS = {"mp4", "mov", "avi", "wmv", "mkv", "webm", "m4v"}
NON_DIGITAL_EXTENSIONS = DOCUMENT_EXTENSIONS | AUDIO_EXTENSIONS | VIDEO_EXTENSIONS

DIGITAL_CHANNEL_KEYWORDS = ("website", "newsletter", "streaming")
DIGITAL_MIME_PREFIXES = ("image/", "text/html")


@dataclass(frozen=True)
class PlacementTarget:
    """One placement a creative produces a script for.

    item_path is None for legacy creatives that carry no placement assignments.
    """

    item_path: str | None
    placement_name: str | None
    channel: str | None
    spec_group_id: str | None


def file_extension(filename: str | None) -> str:
    if not filename:
        return ""
    return PurePosixPath(filename.lower()).suffix.lstrip(".")


def is_digital_channel(label: str | None) -> bool:
    normalized = (label or "").lower()
    return any(keyword in normalized for keyword in DIGITAL_CHANNEL_KEYWORDS)


def is_digital_mime(file_type: str | None) -> bool:
    return (file_type or "").lower().startswith(DIGITAL_MIME_PREFIXES)


def exclusion_reason(creative: CreativeAsset, spec_group_id: str | None, channel: str | None) -> str | None:
    """Return why this creative/placement pair gets no script, or None when it is eligible.

    A non-digital group prefix always excludes. A non-digital file extension
    excludes unless the MIME type or channel is explicitly digital.
    """
    group = (spec_group_id or "").strip().lower()
    for prefix in NON_DIGITAL_GROUP_PREFIXES:
        if group.startswith(prefix):
            return f"placement group '{spec_group_id}' is {prefix}"

    extension = file_extension(creative.original_filename)
    if extension in NON_DIGITAL_EXTENSIONS:
        explicitly_digital = (
            is_digital_mime(creative.file_type)
            or is_digital_channel(channel)
            or is_digital_channel(creative.channel)
            or is_digital_channel(creative.specifications.channel)
        )
        if not explicitly_digital:
            return f"file extension '.{extension}' is not a digital ad format"
    return None


def match_placements(creative: CreativeAsset, order: Order) -> list[PlacementTarget]:
    """Resolve the placements of `order` that `creative` produces scripts for.

    Creatives with placement assignments only use the assignments for the order's
    publication. Creatives with no assignments at all fall back to one script per
    order with no placement identifier.
    """
    if creative.is_legacy:
        targets = [
            PlacementTarget(
                item_path=None,
                placement_name=None,
                channel=None,
                spec_group_id=creative.spec_group_id,
            )
        ]
    else:
        targets = []
        seen: set[str] = set()
        for assignment in creative.placement_assignments:
            if assignment.publication_id != order.publication_id or assignment.placement_id in seen:
                continue
            seen.add(assignment.placement_id)

            order_placement = order.find_placement(assignment.placement_id)
            if order.placements and order_placement is None:
                generation_logger.log_data_quality_issue(
                    "unassigned_placement",
                    creative.creative_id,
                    f"assigned to placement '{assignment.placement_id}' which is not in order {order.order_id}; skipping",
                    order_id=order.order_id,
                    item_path=assignment.placement_id,
                )
                continue

            targets.append(
                PlacementTarget(
                    item_path=assignment.placement_id,
                    placement_name=assignment.placement_name or (order_placement.item_name if order_placement else None),
                    channel=assignment.channel or (order_placement.channel if order_placement else None),
                    spec_group_id=assignment.spec_group_id or creative.spec_group_id,
                )
            )

    eligible = []
    for target in targets:
        reason = exclusion_reason(creative, target.spec_group_id, target.channel)
        if reason:
            logger.info(f"Skipping creative {creative.creative_id} for order {order.order_id}: {reason}")
            continue
        eligible.append(target)
    return eligible
