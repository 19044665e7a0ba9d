"""Repair of active scripts whose stored size disagrees with their placement.

Scripts generated before placement-declared sizes took priority may carry the
uploaded file's size instead of the slot size. The repair soft-deletes them and
regenerates their (campaign, publication) pairs.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session

from tracking_tags.core.config import TrackingConfig
from tracking_tags.core.database import queries
from tracking_tags.core.database.models import TrackingScript
from tracking_tags.core.exceptions import InvalidRecordError, TrackingScriptError
from tracking_tags.core.helpers.dimension_helpers import parse_group_id_size, parse_placement_name_size
from tracking_tags.core.logging_config import generation_logger
from tracking_tags.core.schemas import CreativeAsset, Dimensions, GenerateScriptsResult
from tracking_tags.services.tracking_script_service import TrackingScriptService

logger = logging.getLogger(__name__)


@dataclass
class DimensionMismatch:
    script_id: str
    campaign_id: str
    publication_id: int
    placement: str
    stored: str
    expected: str


@dataclass
class RepairReport:
    dry_run: bool
    mismatches: list[DimensionMismatch] = field(default_factory=list)
    regenerated: dict[tuple[str, int], GenerateScriptsResult] = field(default_factory=dict)
    failed: dict[tuple[str, int], str] = field(default_factory=dict)

    @property
    def pairs(self) -> list[tuple[str, int]]:
        return sorted({(m.campaign_id, m.publication_id) for m in self.mismatches})


def expected_dimensions(script: TrackingScript, creative: CreativeAsset) -> Dimensions | None:
    """Slot size the script should have, or None when the placement declares none."""
    group_id = creative.spec_group_id
    for assignment in creative.placement_assignments:
        if assignment.publication_id == script.publication_id and assignment.placement_id == script.item_path:
            group_id = assignment.spec_group_id or group_id
            break
    return parse_placement_name_size(script.placement_name) or parse_group_id_size(group_id)


class ScriptRepairService:
    def __init__(self, db_session: Session, config: TrackingConfig | None = None):
        self.db_session = db_session
        self.config = config

    def _load_creative(self, creative_id: str) -> CreativeAsset | None:
        try:
            return queries.get_creative(self.db_session, creative_id)
        except InvalidRecordError as e:
            generation_logger.log_invalid_record(e.kind, e.record_id, e.errors)
            return None

    def find_mismatches(self) -> list[DimensionMismatch]:
        """Active scripts whose stored size differs from their placement's size.

        Scripts whose creative is missing or cannot be loaded are left alone.
        """
        scripts = self.db_session.scalars(
            select(TrackingScript).filter(TrackingScript.deleted_at.is_(None)).order_by(TrackingScript.campaign_id)
        ).all()

        creatives: dict[str, CreativeAsset | None] = {}
        mismatches = []
        for script in scripts:
            if script.creative_id not in creatives:
                creatives[script.creative_id] = self._load_creative(script.creative_id)
            creative = creatives[script.creative_id]
            if creative is None:
                continue

            expected = expected_dimensions(script, creative)
            width = (script.creative or {}).get("width")
            height = (script.creative or {}).get("height")
            if expected is None or not width or not height:
                continue
            if (width, height) == (expected.width, expected.height):
                continue

            mismatches.append(
                DimensionMismatch(
                    script_id=script.script_id,
                    campaign_id=script.campaign_id,
                    publication_id=script.publication_id,
                    placement=script.placement_name or script.item_path or "-",
                    stored=f"{width}x{height}",
                    expected=expected.size_string,
                )
            )
        return mismatches

    def repair(self, dry_run: bool = True) -> RepairReport:
        """Find mismatched scripts; unless dry_run, soft-delete and regenerate them pair by pair.

        A pair that cannot be regenerated keeps its original scripts and is
        recorded in the report's failures; the remaining pairs are still repaired.
        """
        report = RepairReport(dry_run=dry_run, mismatches=self.find_mismatches())
        for mismatch in report.mismatches:
            logger.info(
                f"Mismatch: {mismatch.placement} | pub {mismatch.publication_id} | "
                f"stored {mismatch.stored} -> expected {mismatch.expected} (script {mismatch.script_id})"
            )

        if dry_run or not report.mismatches:
            return report

        service = TrackingScriptService(self.db_session, self.config, generated_by="repair")
        for pair in report.pairs:
            script_ids = [m.script_id for m in report.mismatches if (m.campaign_id, m.publication_id) == pair]
            try:
                for script_id in script_ids:
                    script = queries.get_script(self.db_session, script_id)
                    if script is not None:
                        queries.soft_delete_script(self.db_session, script)
                self.db_session.flush()
                report.regenerated[pair] = service.generate_for_order(*pair)
            except TrackingScriptError as e:
                # Only this pair's uncommitted soft-deletes are discarded
                self.db_session.rollback()
                logger.error(f"Failed to repair campaign {pair[0]} / publication {pair[1]}: {e}")
                report.failed[pair] = str(e)
        return report
