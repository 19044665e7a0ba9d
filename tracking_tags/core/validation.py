"""Validation of generated tracking scripts before they are stored."""

from tracking_tags.core.schemas import ScriptDraft, TrackingChannel


def validate_tracking_script(draft: ScriptDraft) -> list[str]:
    """Return a list of problems with a script draft; empty when it is storable."""
    errors = []

    if not draft.campaign_id:
        errors.append("campaign_id is required")
    if not draft.creative_id:
        errors.append("creative_id is required")
    if not draft.publication_id:
        errors.append("publication_id is required")
    if not draft.generated_by:
        errors.append("generated_by is required")

    creative = draft.creative
    if draft.channel == TrackingChannel.NEWSLETTER_TEXT:
        if not creative.headline:
            errors.append("headline is required for newsletter text")
        if not creative.body:
            errors.append("body is required for newsletter text")
    else:
        if not creative.image_url:
            errors.append("image_url is required for image-based ads")
        if not creative.width:
            errors.append("width is required for image-based ads")
        if not creative.height:
            errors.append("height is required for image-based ads")

    if not creative.click_url:
        errors.append("click_url is required")
    if not draft.urls.impression_pixel or not draft.urls.click_tracker:
        errors.append("impression and click URLs are required")
    if not draft.tags.full_tag:
        errors.append("full_tag is required")

    return errors
