"""Database query helper functions for tracking script generation.

Loaders convert ORM rows into the pydantic input models the generation
engine works on. Script helpers enforce the one-active-script-per-key rule.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracking_tags.core import schemas
from tracking_tags.core.database.models import Campaign, CreativeAsset, PublicationOrder, TrackingScript
from tracking_tags.core.exceptions import InvalidRecordError

logger = logging.getLogger(__name__)

ELIGIBLE_CREATIVE_STATUSES = ("pending", "approved")


# --- Loaders ------------------------------------------------------------------


def _validation_messages(error: ValidationError) -> list[str]:
    return [f"{'.'.join(str(part) for part in e['loc']) or 'record'}: {e['msg']}" for e in error.errors()]


def to_campaign(row: Campaign) -> schemas.Campaign:
    try:
        return schemas.Campaign(
            campaign_id=row.campaign_id,
            name=row.name,
            advertiser_name=row.advertiser_name,
            start_date=row.start_date,
            end_date=row.end_date,
            selected_inventory=row.selected_inventory,
        )
    except ValidationError as e:
        raise InvalidRecordError("campaign", row.campaign_id, _validation_messages(e)) from e


def to_order(row: PublicationOrder) -> schemas.Order:
    try:
        return schemas.Order(
            order_id=row.order_id,
            campaign_id=row.campaign_id,
            publication_id=row.publication_id,
            publication_name=row.publication_name,
            placements=row.placements or [],
            asset_references=row.asset_references or [],
            platforms=schemas.PublicationPlatforms(
                ad_server=row.ad_server,
                esp=row.esp,
                esp_custom_email_id=row.esp_custom_email_id,
                esp_custom_cache_buster=row.esp_custom_cache_buster,
                esp_compatibility=row.esp_compatibility or schemas.ESPCompatibility.FULL,
            ),
        )
    except ValidationError as e:
        raise InvalidRecordError("order", row.order_id, _validation_messages(e)) from e


def to_creative(row: CreativeAsset) -> schemas.CreativeAsset:
    try:
        return schemas.CreativeAsset(
            creative_id=row.creative_id,
            campaign_id=row.campaign_id,
            original_filename=row.original_filename,
            file_type=row.file_type,
            file_url=row.file_url,
            channel=row.channel,
            spec_group_id=row.spec_group_id,
            status=row.status,
            specifications=row.specifications or {},
            digital_ad_properties=row.digital_ad_properties or {},
            placement_assignments=row.placement_assignments or [],
        )
    except ValidationError as e:
        raise InvalidRecordError("creative", row.creative_id, _validation_messages(e)) from e


def _convert_rows(rows, convert) -> tuple[list, list[InvalidRecordError]]:
    """Convert each row on its own; malformed rows are returned as errors instead of raising."""
    loaded, invalid = [], []
    for row in rows:
        try:
            loaded.append(convert(row))
        except InvalidRecordError as e:
            invalid.append(e)
    return loaded, invalid


def get_campaign(session: Session, campaign_id: str) -> schemas.Campaign | None:
    row = session.get(Campaign, campaign_id)
    return to_campaign(row) if row else None


def get_order(session: Session, campaign_id: str, publication_id: int) -> schemas.Order | None:
    """Get the live order for a campaign/publication pair (newest first if several exist)."""
    stmt = (
        select(PublicationOrder)
        .filter_by(campaign_id=campaign_id, publication_id=publication_id)
        .filter(PublicationOrder.deleted_at.is_(None))
        .order_by(PublicationOrder.created_at.desc())
    )
    row = session.scalars(stmt).first()
    return to_order(row) if row else None


def get_order_by_id(session: Session, order_id: str) -> schemas.Order | None:
    row = session.get(PublicationOrder, order_id)
    if row is None or row.deleted_at is not None:
        return None
    return to_order(row)


def get_orders_for_campaign(session: Session, campaign_id: str) -> tuple[list[schemas.Order], list[InvalidRecordError]]:
    """Get the live orders of a campaign, plus one error per order row that failed to load."""
    stmt = (
        select(PublicationOrder)
        .filter_by(campaign_id=campaign_id)
        .filter(PublicationOrder.deleted_at.is_(None))
        .order_by(PublicationOrder.publication_id)
    )
    return _convert_rows(session.scalars(stmt).all(), to_order)


def get_creative(session: Session, creative_id: str) -> schemas.CreativeAsset | None:
    row = session.get(CreativeAsset, creative_id)
    if row is None or row.deleted_at is not None:
        return None
    return to_creative(row)


def get_eligible_creatives(
    session: Session, campaign_id: str
) -> tuple[list[schemas.CreativeAsset], list[InvalidRecordError]]:
    """Get non-deleted creatives of a campaign that are pending or approved.

    Returns the loaded creatives and one error per creative row that failed to load.
    """
    stmt = (
        select(CreativeAsset)
        .filter_by(campaign_id=campaign_id)
        .filter(CreativeAsset.deleted_at.is_(None), CreativeAsset.status.in_(ELIGIBLE_CREATIVE_STATUSES))
        .order_by(CreativeAsset.uploaded_at, CreativeAsset.creative_id)
    )
    return _convert_rows(session.scalars(stmt).all(), to_creative)


# --- Tracking scripts ---------------------------------------------------------


def find_active_script(
    session: Session, campaign_id: str, publication_id: int, creative_id: str, item_path: str | None
) -> TrackingScript | None:
    stmt = select(TrackingScript).filter_by(
        campaign_id=campaign_id,
        publication_id=publication_id,
        creative_id=creative_id,
        item_path=item_path or "",
        deleted_at=None,
    )
    return session.scalars(stmt).first()


def next_script_version(
    session: Session, campaign_id: str, publication_id: int, creative_id: str, item_path: str | None
) -> int:
    """1 + the highest version ever stored for the key (soft-deleted rows included)."""
    stmt = select(func.max(TrackingScript.version)).filter_by(
        campaign_id=campaign_id,
        publication_id=publication_id,
        creative_id=creative_id,
        item_path=item_path or "",
    )
    current = session.scalar(stmt)
    return (current or 0) + 1


def _script_from_draft(draft: schemas.ScriptDraft, version: int) -> TrackingScript:
    return TrackingScript(
        campaign_id=draft.campaign_id,
        publication_id=draft.publication_id,
        publication_name=draft.publication_name,
        order_id=draft.order_id,
        creative_id=draft.creative_id,
        item_path=draft.item_path or "",
        placement_name=draft.placement_name,
        channel=draft.channel.value,
        creative=draft.creative.model_dump(),
        impression_url=draft.urls.impression_pixel,
        click_url=draft.urls.click_tracker,
        creative_url=draft.urls.creative_url,
        full_tag=draft.tags.full_tag,
        simplified_tag=draft.tags.simplified_tag,
        comments=draft.tags.comments,
        esp_compatibility=draft.esp_compatibility.value,
        status=schemas.ScriptStatus.ACTIVE.value,
        version=version,
        generated_at=datetime.now(UTC),
        generated_by=draft.generated_by,
    )


def insert_script_if_absent(session: Session, draft: schemas.ScriptDraft) -> TrackingScript | None:
    """Insert a script unless an active one already exists for its key.

    Returns the new row, or None when the key is already covered. The insert
    runs in a savepoint so a concurrent writer that wins the race on the
    partial unique index only rolls back this one row.
    """
    key = (draft.campaign_id, draft.publication_id, draft.creative_id, draft.item_path)
    if find_active_script(session, *key) is not None:
        return None

    script = _script_from_draft(draft, next_script_version(session, *key))
    try:
        with session.begin_nested():
            session.add(script)
            session.flush()  # Flush to detect constraint violations before full commit
    except IntegrityError:
        logger.info(
            f"Script for creative {draft.creative_id} / placement '{draft.item_path or ''}' "
            f"was created concurrently for campaign {draft.campaign_id}, skipping"
        )
        return None
    return script


def soft_delete_scripts(session: Session, campaign_id: str, publication_id: int) -> int:
    """Mark every active script of a campaign/publication pair deleted. Returns the count."""
    stmt = select(TrackingScript).filter(
        TrackingScript.campaign_id == campaign_id,
        TrackingScript.publication_id == publication_id,
        TrackingScript.deleted_at.is_(None),
    )
    scripts = session.scalars(stmt).all()
    for script in scripts:
        soft_delete_script(session, script)
    # Flush before any regeneration so the partial unique index sees the deletions
    session.flush()
    return len(scripts)


def soft_delete_script(session: Session, script: TrackingScript) -> None:
    script.deleted_at = datetime.now(UTC)
    script.status = schemas.ScriptStatus.DELETED.value


def get_script(session: Session, script_id: str) -> TrackingScript | None:
    script = session.get(TrackingScript, script_id)
    if script is None or script.deleted_at is not None:
        return None
    return script


def list_active_scripts(
    session: Session,
    campaign_id: str | None = None,
    publication_id: int | None = None,
    order_id: str | None = None,
    creative_id: str | None = None,
    channel: str | None = None,
) -> list[TrackingScript]:
    """List active scripts, ordered by publication, channel, then creative name."""
    stmt = select(TrackingScript).filter(TrackingScript.deleted_at.is_(None))

    if campaign_id is not None:
        stmt = stmt.filter(TrackingScript.campaign_id == campaign_id)
    if publication_id is not None:
        stmt = stmt.filter(TrackingScript.publication_id == publication_id)
    if order_id is not None:
        stmt = stmt.filter(TrackingScript.order_id == order_id)
    if creative_id is not None:
        stmt = stmt.filter(TrackingScript.creative_id == creative_id)
    if channel is not None:
        stmt = stmt.filter(TrackingScript.channel == channel)

    scripts = list(session.scalars(stmt.order_by(TrackingScript.publication_id, TrackingScript.channel)).all())
    # Creative name lives in the JSON column; sort in Python to stay dialect-neutral
    scripts.sort(key=lambda s: (s.publication_id, s.channel, (s.creative or {}).get("name", "").lower()))
    return scripts


def group_scripts_by_publication(scripts: list[TrackingScript]) -> dict[int, list[TrackingScript]]:
    grouped: dict[int, list[TrackingScript]] = {}
    for script in scripts:
        grouped.setdefault(script.publication_id, []).append(script)
    return grouped


def script_to_dict(script: TrackingScript) -> dict[str, Any]:
    """Serialize a script row for API responses and exports."""
    return {
        "script_id": script.script_id,
        "campaign_id": script.campaign_id,
        "publication_id": script.publication_id,
        "publication_name": script.publication_name,
        "order_id": script.order_id,
        "creative_id": script.creative_id,
        "item_path": script.item_path or None,
        "placement_name": script.placement_name,
        "channel": script.channel,
        "creative": script.creative,
        "urls": {
            "impression_pixel": script.impression_url,
            "click_tracker": script.click_url,
            "creative_url": script.creative_url,
        },
        "tags": {
            "full_tag": script.full_tag,
            "simplified_tag": script.simplified_tag,
            "comments": script.comments,
        },
        "esp_compatibility": script.esp_compatibility,
        "status": script.status,
        "version": script.version,
        "generated_at": script.generated_at.isoformat() if script.generated_at else None,
        "generated_by": script.generated_by,
        "impression_count": script.impression_count,
        "click_count": script.click_count,
    }
