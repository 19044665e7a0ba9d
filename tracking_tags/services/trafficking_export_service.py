"""Bulk trafficking export: one HTML document with every active tag of an order.

Tags are grouped by placement and pre-transformed for the publication's
configured ad server or email platform.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.orm import Session

from tracking_tags.adapters import transform_tag
from tracking_tags.core.config import TrackingConfig, get_config
from tracking_tags.core.database import queries
from tracking_tags.core.database.models import TrackingScript
from tracking_tags.core.exceptions import CampaignNotFoundError, OrderNotFoundError
from tracking_tags.core.schemas import Campaign, ESPCompatibility, Order, TrackingChannel

logger = logging.getLogger(__name__)

ESP_IMPRESSION_CAVEAT = (
    "Email impressions are approximate: Apple Mail Privacy Protection and image blocking "
    "inflate or suppress opens. Clicks are the reliable metric."
)


def _get_jinja_env() -> Environment:
    """Get configured Jinja2 environment for export templates."""
    template_dir = os.path.join(os.path.dirname(__file__), "templates")

    return Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


@dataclass
class ExportEntry:
    script_id: str
    creative_name: str
    channel_code: str
    size: str
    tag: str
    platform_name: str
    instructions: str
    notes: list[str] = field(default_factory=list)


@dataclass
class ExportGroup:
    item_path: str
    placement_name: str
    entries: list[ExportEntry] = field(default_factory=list)


def _format_date(value: datetime | None) -> str:
    return value.strftime("%b %d, %Y") if value else "TBD"


class TraffickingExportService:
    def __init__(self, db_session: Session, config: TrackingConfig | None = None):
        self.db_session = db_session
        self.config = config or get_config().tracking

    def build_groups(self, campaign: Campaign, order: Order, scripts: list[TrackingScript]) -> list[ExportGroup]:
        flight = f"Flight: {_format_date(campaign.start_date)} - {_format_date(campaign.end_date)}"
        groups: dict[str, ExportGroup] = {}

        for script in scripts:
            key = script.item_path or ""
            group = groups.get(key)
            if group is None:
                group = ExportGroup(
                    item_path=key or self.config.item_path_fallback,
                    placement_name=script.placement_name or "General placement",
                )
                groups[key] = group

            channel = TrackingChannel(script.channel)
            stored_tag = script.full_tag
            if (
                channel == TrackingChannel.NEWSLETTER_IMAGE
                and script.simplified_tag
                and order.platforms.esp_compatibility != ESPCompatibility.FULL
            ):
                stored_tag = script.simplified_tag

            transformed = transform_tag(stored_tag, channel, order.platforms, click_path=self.config.click_path)
            creative = script.creative or {}
            size = f"{creative.get('width')}x{creative.get('height')}" if creative.get("width") else "n/a"

            notes = [f"Channel: {channel.value}", f"Size: {size}", flight]
            if channel.is_newsletter:
                notes.append(ESP_IMPRESSION_CAVEAT)

            group.entries.append(
                ExportEntry(
                    script_id=script.script_id,
                    creative_name=creative.get("name") or script.creative_id,
                    channel_code=channel.type_code,
                    size=size,
                    tag=transformed.tag,
                    platform_name=transformed.platform_name,
                    instructions=transformed.instructions,
                    notes=notes,
                )
            )

        return sorted(groups.values(), key=lambda g: g.item_path)

    def export_order(self, order_id: str) -> str:
        """Render the trafficking document for an order.

        Raises:
            OrderNotFoundError: order does not exist or is deleted
            CampaignNotFoundError: the order's campaign is missing
        """
        order = queries.get_order_by_id(self.db_session, order_id)
        if order is None:
            raise OrderNotFoundError(order_id=order_id)
        campaign = queries.get_campaign(self.db_session, order.campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(order.campaign_id)

        scripts = queries.list_active_scripts(self.db_session, order_id=order_id)
        groups = self.build_groups(campaign, order, scripts)
        logger.info(f"Exporting {len(scripts)} tracking scripts in {len(groups)} placements for order {order_id}")

        template = _get_jinja_env().get_template("trafficking_export.html")
        return template.render(
            advertiser_name=campaign.display_advertiser,
            campaign_name=campaign.display_name,
            publication_name=scripts[0].publication_name if scripts else (order.publication_name or "Publication"),
            order_id=order.order_id,
            generated_at=datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC"),
            script_count=len(scripts),
            groups=groups,
        )
