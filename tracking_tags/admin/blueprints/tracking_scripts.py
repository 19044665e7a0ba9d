"""Tracking scripts blueprint: listing, generation, refresh and export."""

import logging

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from tracking_tags.adapters import transform_tag
from tracking_tags.core.config import get_config
from tracking_tags.core.database import queries
from tracking_tags.core.database.database_session import get_db_session
from tracking_tags.core.exceptions import (
    CampaignNotFoundError,
    CreativeNotFoundError,
    InvalidRecordError,
    OrderNotFoundError,
    ScriptValidationError,
)
from tracking_tags.services.tracking_script_service import TrackingScriptService
from tracking_tags.services.trafficking_export_service import TraffickingExportService

logger = logging.getLogger(__name__)

# Create blueprint
tracking_scripts_bp = Blueprint("tracking_scripts", __name__)


@tracking_scripts_bp.errorhandler(CampaignNotFoundError)
@tracking_scripts_bp.errorhandler(OrderNotFoundError)
@tracking_scripts_bp.errorhandler(CreativeNotFoundError)
def handle_not_found(error):
    return jsonify({"error": str(error)}), 404


@tracking_scripts_bp.errorhandler(ScriptValidationError)
def handle_script_validation(error):
    return jsonify({"error": "Validation failed", "details": error.errors}), 400


@tracking_scripts_bp.errorhandler(InvalidRecordError)
def handle_invalid_record(error):
    logger.error(f"Stored record failed to load: {error}")
    return jsonify({"error": str(error), "details": error.errors}), 422


@tracking_scripts_bp.errorhandler(ValidationError)
@tracking_scripts_bp.errorhandler(ValueError)
def handle_bad_request(error):
    return jsonify({"error": str(error)}), 400


def _require(payload: dict, *names: str) -> None:
    missing = [name for name in names if payload.get(name) in (None, "")]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")


def _publication_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"publication_id must be an integer, got {value!r}") from None


def _with_transformed(session, script) -> dict:
    """Serialize a script plus its tag rewritten for the publication's platform."""
    data = queries.script_to_dict(script)
    order = queries.get_order_by_id(session, script.order_id)
    if order is not None:
        transformed = transform_tag(script.full_tag, script.channel, order.platforms, get_config().tracking.click_path)
        data["transformed"] = transformed.model_dump()
    return data


@tracking_scripts_bp.route("", methods=["GET"])
def list_scripts():
    """List active scripts, filtered by campaign_id, publication_id, creative_id and channel."""
    publication_id = request.args.get("publication_id")
    with get_db_session() as db_session:
        scripts = queries.list_active_scripts(
            db_session,
            campaign_id=request.args.get("campaign_id"),
            publication_id=_publication_id(publication_id) if publication_id else None,
            creative_id=request.args.get("creative_id"),
            channel=request.args.get("channel"),
        )
        return jsonify({"scripts": [queries.script_to_dict(s) for s in scripts], "count": len(scripts)})


@tracking_scripts_bp.route("/campaign/<campaign_id>", methods=["GET"])
def list_campaign_scripts(campaign_id):
    """Active scripts of a campaign grouped by publication."""
    with get_db_session() as db_session:
        scripts = queries.list_active_scripts(db_session, campaign_id=campaign_id)
        publications = [
            {
                "publication_id": publication_id,
                "publication_name": group[0].publication_name,
                "scripts": [queries.script_to_dict(s) for s in group],
            }
            for publication_id, group in queries.group_scripts_by_publication(scripts).items()
        ]
        return jsonify({"campaign_id": campaign_id, "publications": publications, "count": len(scripts)})


@tracking_scripts_bp.route("/order/<order_id>", methods=["GET"])
def list_order_scripts(order_id):
    with get_db_session() as db_session:
        order = queries.get_order_by_id(db_session, order_id)
        if order is None:
            raise OrderNotFoundError(order_id=order_id)
        scripts = queries.list_active_scripts(db_session, order_id=order_id)
        return jsonify(
            {
                "order_id": order_id,
                "scripts": [_with_transformed(db_session, s) for s in scripts],
                "count": len(scripts),
            }
        )


@tracking_scripts_bp.route("/<script_id>", methods=["GET"])
def get_script(script_id):
    with get_db_session() as db_session:
        script = queries.get_script(db_session, script_id)
        if script is None:
            return jsonify({"error": f"Tracking script not found: {script_id}"}), 404
        return jsonify(_with_transformed(db_session, script))


@tracking_scripts_bp.route("/generate", methods=["POST"])
def generate_script():
    """Generate the script for a single (creative, placement) pair."""
    payload = request.get_json(silent=True) or {}
    _require(payload, "campaign_id", "publication_id", "creative_id")

    with get_db_session() as db_session:
        generated_by = payload.get("generated_by") or "api"
        service = TrackingScriptService(db_session, get_config().tracking, generated_by=generated_by)
        draft, script = service.generate_for_placement(
            payload["campaign_id"],
            _publication_id(payload["publication_id"]),
            payload["creative_id"],
            payload.get("item_path"),
        )
        if script is None:
            existing = queries.find_active_script(
                db_session, draft.campaign_id, draft.publication_id, draft.creative_id, draft.item_path
            )
            return jsonify(
                {
                    "script": queries.script_to_dict(existing) if existing else None,
                    "created": False,
                    "message": "Tracking script already exists",
                }
            )
        return (
            jsonify({"script": queries.script_to_dict(script), "created": True, "message": "Tracking script generated"}),
            201,
        )


@tracking_scripts_bp.route("/generate-for-order", methods=["POST"])
def generate_for_order():
    payload = request.get_json(silent=True) or {}
    _require(payload, "campaign_id", "publication_id")

    with get_db_session() as db_session:
        service = TrackingScriptService(db_session, get_config().tracking)
        result = service.generate_for_order(payload["campaign_id"], _publication_id(payload["publication_id"]))
        return jsonify(result.model_dump())


@tracking_scripts_bp.route("/generate-for-asset/<creative_id>", methods=["POST"])
def generate_for_asset(creative_id):
    with get_db_session() as db_session:
        service = TrackingScriptService(db_session, get_config().tracking)
        result = service.generate_for_asset(creative_id)
        return jsonify(result.model_dump())


@tracking_scripts_bp.route("/refresh", methods=["POST"])
def refresh():
    """Soft-delete and regenerate every script of a campaign/publication pair."""
    payload = request.get_json(silent=True) or {}
    _require(payload, "campaign_id", "publication_id")

    with get_db_session() as db_session:
        service = TrackingScriptService(db_session, get_config().tracking)
        result = service.refresh_order(payload["campaign_id"], _publication_id(payload["publication_id"]))
        return jsonify(result.model_dump())


@tracking_scripts_bp.route("/export/<order_id>", methods=["GET"])
def export_order(order_id):
    with get_db_session() as db_session:
        html = TraffickingExportService(db_session, get_config().tracking).export_order(order_id)
    response = Response(html, mimetype="text/html")
    if request.args.get("download"):
        response.headers["Content-Disposition"] = f'attachment; filename="trafficking-{order_id}.html"'
    return response
