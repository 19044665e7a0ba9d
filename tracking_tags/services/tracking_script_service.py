"""Tracking script generation.

Two entry points feed the same per-pair pipeline:
- generate_for_order: every eligible creative of a campaign against one order
- generate_for_asset: one newly uploaded creative against every order of its campaign

Both insert through insert_script_if_absent, so running either of them again,
or both in any order, converges on the same active script set.
"""

import logging
import time

from sqlalchemy.orm import Session

from tracking_tags.core.config import TrackingConfig, get_config
from tracking_tags.core.database import queries
from tracking_tags.core.database.models import TrackingScript
from tracking_tags.core.exceptions import (
    CampaignNotFoundError,
    CreativeNotFoundError,
    InvalidRecordError,
    OrderNotFoundError,
    ScriptValidationError,
)
from tracking_tags.core.helpers import (
    LegacyChannelResolver,
    PlacementTarget,
    build_attribution_urls,
    classify_channel,
    match_placements,
    normalize_creative_url,
    resolve_channel_label,
    resolve_dimensions,
)
from tracking_tags.core.logging_config import generation_logger
from tracking_tags.core.schemas import (
    Campaign,
    CreativeAsset,
    GenerateScriptsResult,
    Order,
    ScriptDraft,
    TrackingCreativeInfo,
)
from tracking_tags.core.tag_renderers import render_tags
from tracking_tags.core.validation import validate_tracking_script

logger = logging.getLogger(__name__)

NO_DIGITAL_CREATIVES_MESSAGE = "No digital creatives found. Upload image assets for digital placements first."


def publication_display_name(campaign: Campaign, order: Order) -> str:
    """Publication name from the campaign's selected inventory, then the order."""
    inventory = campaign.selected_inventory or {}
    for publication in inventory.get("publications") or []:
        if publication.get("publicationId") == order.publication_id and publication.get("publicationName"):
            return publication["publicationName"]
    return order.publication_name or "Publication"


class TrackingScriptService:
    """Generates tracking scripts for creative/placement pairs.

    The service commits at the end of each entry point. A failure on one pair
    is logged and counted; the remaining pairs are still generated.
    """

    def __init__(self, db_session: Session, config: TrackingConfig | None = None, generated_by: str = "system"):
        self.db_session = db_session
        self.config = config or get_config().tracking
        self.generated_by = generated_by

        missing = self.config.missing_fields()
        if missing:
            logger.warning(f"Tracking configuration incomplete ({', '.join(missing)}); generated URLs may not work")

    # --- Entry points ---------------------------------------------------------

    def generate_for_order(
        self, campaign_id: str, publication_id: int, delete_existing: bool = False
    ) -> GenerateScriptsResult:
        """Generate scripts for every eligible creative of a campaign against one publication's order.

        Raises:
            CampaignNotFoundError: campaign does not exist (nothing is written)
            OrderNotFoundError: no live order for the pair (nothing is written)
            InvalidRecordError: the campaign or order record itself cannot be loaded
        """
        started = time.perf_counter()
        campaign = queries.get_campaign(self.db_session, campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        order = queries.get_order(self.db_session, campaign_id, publication_id)
        if order is None:
            raise OrderNotFoundError(campaign_id=campaign_id, publication_id=publication_id)

        result = GenerateScriptsResult()
        if delete_existing:
            result.scripts_deleted = queries.soft_delete_scripts(self.db_session, campaign_id, publication_id)
            logger.info(
                f"Soft-deleted {result.scripts_deleted} scripts for campaign {campaign_id} / publication {publication_id}"
            )

        creatives, invalid = queries.get_eligible_creatives(self.db_session, campaign_id)
        for error in invalid:
            self._record_invalid(error, result)
        pairs = [(creative, target) for creative in creatives for target in match_placements(creative, order)]

        if pairs:
            self._generate_pairs(campaign, order, pairs, result)
        result.message = self._summary(result) if pairs or invalid else NO_DIGITAL_CREATIVES_MESSAGE

        self.db_session.commit()
        self._finish("generate_for_order", result, started, campaign_id=campaign_id, publication_id=publication_id)
        return result

    def refresh_order(self, campaign_id: str, publication_id: int) -> GenerateScriptsResult:
        """Soft-delete every active script of the pair, then regenerate from current creatives."""
        return self.generate_for_order(campaign_id, publication_id, delete_existing=True)

    def generate_for_asset(self, creative: str | CreativeAsset) -> GenerateScriptsResult:
        """Generate scripts for one creative across every order of its campaign.

        Accepts a creative id or an already loaded creative. A stored creative or
        order that cannot be loaded is counted as failed rather than raised.
        """
        started = time.perf_counter()
        if isinstance(creative, str):
            creative_id = creative
            try:
                creative = queries.get_creative(self.db_session, creative_id)
            except InvalidRecordError as e:
                result = GenerateScriptsResult()
                self._record_invalid(e, result)
                result.message = self._summary(result)
                self._finish("generate_for_asset", result, started, creative_id=creative_id)
                return result
            if creative is None:
                raise CreativeNotFoundError(creative_id)

        result = GenerateScriptsResult()
        if not creative.campaign_id:
            result.message = f"Creative {creative.creative_id} is not attached to a campaign"
            self._finish("generate_for_asset", result, started, creative_id=creative.creative_id)
            return result

        campaign = queries.get_campaign(self.db_session, creative.campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(creative.campaign_id)

        if creative.status not in queries.ELIGIBLE_CREATIVE_STATUSES:
            result.message = f"Creative {creative.creative_id} has status '{creative.status}'; no scripts generated"
            self._finish("generate_for_asset", result, started, creative_id=creative.creative_id)
            return result

        orders, invalid_orders = queries.get_orders_for_campaign(self.db_session, creative.campaign_id)
        for error in invalid_orders:
            self._record_invalid(error, result)
        logger.info(f"Generating scripts for creative {creative.creative_id} across {len(orders)} orders")

        for order in orders:
            pairs = [(creative, target) for target in match_placements(creative, order)]
            self._generate_pairs(campaign, order, pairs, result)

        if result.scripts_generated == 0 and result.scripts_skipped == 0 and result.scripts_failed == 0:
            result.message = NO_DIGITAL_CREATIVES_MESSAGE
        else:
            result.message = self._summary(result)

        self.db_session.commit()
        self._finish(
            "generate_for_asset", result, started, campaign_id=creative.campaign_id, creative_id=creative.creative_id
        )
        return result

    def generate_for_placement(
        self, campaign_id: str, publication_id: int, creative_id: str, item_path: str | None = None
    ) -> tuple[ScriptDraft, TrackingScript | None]:
        """Generate the script for one (creative, placement) pair, validating it first.

        Returns the draft and the stored row, or None as the row when an active
        script already covers the pair.

        Raises:
            ScriptValidationError: pair is not eligible or the draft is incomplete
        """
        campaign = queries.get_campaign(self.db_session, campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        order = queries.get_order(self.db_session, campaign_id, publication_id)
        if order is None:
            raise OrderNotFoundError(campaign_id=campaign_id, publication_id=publication_id)
        creative = queries.get_creative(self.db_session, creative_id)
        if creative is None:
            raise CreativeNotFoundError(creative_id)

        targets = match_placements(creative, order)
        target = next((t for t in targets if (t.item_path or None) == (item_path or None)), None)
        if target is None:
            raise ScriptValidationError(
                [f"creative {creative_id} has no eligible placement '{item_path or '-'}' in order {order.order_id}"]
            )

        draft = self.build_draft(campaign, order, creative, target, LegacyChannelResolver(order.asset_references))
        errors = validate_tracking_script(draft)
        if errors:
            raise ScriptValidationError(errors)

        script = self.store_draft(draft)
        self.db_session.commit()
        return draft, script

    # --- Per-pair pipeline ----------------------------------------------------

    def build_draft(
        self,
        campaign: Campaign,
        order: Order,
        creative: CreativeAsset,
        target: PlacementTarget,
        legacy_resolver: LegacyChannelResolver | None = None,
    ) -> ScriptDraft:
        """Resolve size and channel, build URLs and render tags for one pair. No I/O."""
        advertiser_name = campaign.display_advertiser
        campaign_name = campaign.display_name

        dimensions = resolve_dimensions(creative, target.placement_name, target.spec_group_id)
        label = resolve_channel_label(
            target.channel,
            creative.channel or creative.specifications.channel,
            dimensions,
            legacy_resolver,
        )
        props = creative.digital_ad_properties
        channel = classify_channel(label, props.has_newsletter_text)

        click_url = props.click_url
        if not click_url:
            click_url = self.config.placeholder_landing_url
            generation_logger.log_missing_click_url(creative.creative_id, click_url)

        urls = build_attribution_urls(
            self.config,
            order_id=order.order_id,
            campaign_id=campaign.campaign_id,
            publication_id=order.publication_id,
            channel=channel,
            creative_id=creative.creative_id,
            dimensions=dimensions,
            item_path=target.item_path,
            redirect_url=click_url,
            creative_url=normalize_creative_url(creative.file_url, self.config),
        )

        info = TrackingCreativeInfo(
            name=creative.original_filename or f"{advertiser_name} - {dimensions.size_string}",
            click_url=click_url,
            image_url=urls.creative_url,
            width=dimensions.width,
            height=dimensions.height,
            alt_text=props.alt_text or f"{advertiser_name} Ad",
            headline=props.headline,
            body=props.body,
            cta_text=props.cta_text,
        )
        publication_name = publication_display_name(campaign, order)
        tags = render_tags(channel, info, urls, advertiser_name, campaign_name, publication_name)

        return ScriptDraft(
            campaign_id=campaign.campaign_id,
            publication_id=order.publication_id,
            publication_name=publication_name,
            order_id=order.order_id,
            creative_id=creative.creative_id,
            item_path=target.item_path,
            placement_name=target.placement_name,
            channel=channel,
            creative=info,
            urls=urls,
            tags=tags,
            esp_compatibility=order.platforms.esp_compatibility,
            generated_by=self.generated_by,
        )

    def store_draft(self, draft: ScriptDraft) -> TrackingScript | None:
        """Insert a draft unless its key is already covered; None means skipped."""
        return queries.insert_script_if_absent(self.db_session, draft)

    def _generate_pairs(
        self,
        campaign: Campaign,
        order: Order,
        pairs: list[tuple[CreativeAsset, PlacementTarget]],
        result: GenerateScriptsResult,
    ) -> None:
        legacy_resolver = LegacyChannelResolver(order.asset_references)
        for creative, target in pairs:
            pair_label = f"creative {creative.creative_id} / placement '{target.item_path or '-'}'"
            try:
                draft = self.build_draft(campaign, order, creative, target, legacy_resolver)
                script = self.store_draft(draft)
            except Exception as e:
                logger.error(f"Failed to generate script for {pair_label} in order {order.order_id}: {e}", exc_info=True)
                result.scripts_failed += 1
                result.errors.append(f"{pair_label}: {e}")
                continue

            if script is None:
                result.scripts_skipped += 1
            else:
                result.scripts_generated += 1
                result.script_ids.append(script.script_id)

    # --- Reporting ------------------------------------------------------------

    def _record_invalid(self, error: InvalidRecordError, result: GenerateScriptsResult) -> None:
        generation_logger.log_invalid_record(error.kind, error.record_id, error.errors)
        result.scripts_failed += 1
        result.errors.append(str(error))

    def _summary(self, result: GenerateScriptsResult) -> str:
        message = f"Generated {result.scripts_generated} tracking scripts"
        if result.scripts_skipped:
            message += f", {result.scripts_skipped} already existed"
        if result.scripts_failed:
            message += f", {result.scripts_failed} failed"
        return message

    def _finish(self, operation: str, result: GenerateScriptsResult, started: float, **context) -> None:
        if result.scripts_failed and not (result.scripts_generated or result.scripts_skipped):
            result.success = False
        generation_logger.log_generation_run(
            operation,
            result.success,
            details={
                **context,
                "generated": result.scripts_generated,
                "skipped": result.scripts_skipped,
                "failed": result.scripts_failed,
                "deleted": result.scripts_deleted,
            },
            error="; ".join(result.errors) or None,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
