"""Pydantic models for the tracking script engine.

Input models mirror the records handed over by the campaign, order and creative
asset subsystems. Output models describe what the engine generates.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TrackingChannel(str, Enum):
    """Digital channel kinds that receive a tracking tag."""

    WEBSITE = "website"
    NEWSLETTER_IMAGE = "newsletter_image"
    NEWSLETTER_TEXT = "newsletter_text"
    STREAMING = "streaming"

    @property
    def is_newsletter(self) -> bool:
        return self in (TrackingChannel.NEWSLETTER_IMAGE, TrackingChannel.NEWSLETTER_TEXT)

    @property
    def url_code(self) -> str:
        """Value of the `ch` query parameter."""
        return CHANNEL_URL_CODES[self]

    @property
    def type_code(self) -> str:
        """Short display code used in comments and exports."""
        return CHANNEL_TYPE_CODES[self]


CHANNEL_URL_CODES: dict[TrackingChannel, str] = {
    TrackingChannel.WEBSITE: "website",
    TrackingChannel.NEWSLETTER_IMAGE: "newsletter",
    TrackingChannel.NEWSLETTER_TEXT: "newsletter",
    TrackingChannel.STREAMING: "streaming",
}

CHANNEL_TYPE_CODES: dict[TrackingChannel, str] = {
    TrackingChannel.WEBSITE: "display",
    TrackingChannel.NEWSLETTER_IMAGE: "nli",
    TrackingChannel.NEWSLETTER_TEXT: "nlt",
    TrackingChannel.STREAMING: "stream",
}


class ESPCompatibility(str, Enum):
    """How much HTML the publication's email platform accepts."""

    FULL = "full"
    LIMITED = "limited"
    NONE = "none"


class ScriptStatus(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class Dimensions(BaseModel):
    """Rendered ad size in pixels."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @property
    def size_string(self) -> str:
        return f"{self.width}x{self.height}"


# --- Inputs -----------------------------------------------------------------


class PlacementAssignment(BaseModel):
    """Placement a creative was assigned to at upload/assignment time."""

    publication_id: int
    placement_id: str = Field(..., description="Item path of the placement within the order")
    placement_name: str | None = Field(None, description="Display name, may carry a '(WxH)' size")
    channel: str | None = Field(None, description="Free-text channel label of the placement")
    spec_group_id: str | None = Field(None, description="Placement group identifier, e.g. 'website::dim:300x250'")


class CreativeSpecifications(BaseModel):
    model_config = ConfigDict(extra="ignore")

    width: int | None = None
    height: int | None = None
    channel: str | None = None


class DigitalAdProperties(BaseModel):
    """Per-channel properties the advertiser entered for a digital creative."""

    model_config = ConfigDict(extra="ignore")

    click_url: str | None = None
    alt_text: str | None = None
    headline: str | None = None
    body: str | None = None
    cta_text: str | None = None

    @property
    def has_newsletter_text(self) -> bool:
        return bool((self.headline or "").strip() or (self.body or "").strip())


class CreativeAsset(BaseModel):
    """An uploaded creative file plus its metadata."""

    model_config = ConfigDict(extra="ignore")

    creative_id: str
    campaign_id: str | None = None
    original_filename: str | None = None
    file_type: str | None = Field(None, description="MIME type of the uploaded file")
    file_url: str | None = Field(None, description="Storage URL, possibly a time-limited signed URL")
    channel: str | None = Field(None, description="Channel association recorded for the creative")
    spec_group_id: str | None = Field(None, description="Placement group identifier the creative was uploaded for")
    status: str = "pending"
    specifications: CreativeSpecifications = Field(default_factory=CreativeSpecifications)
    digital_ad_properties: DigitalAdProperties = Field(default_factory=DigitalAdProperties)
    placement_assignments: list[PlacementAssignment] = Field(default_factory=list)

    @property
    def is_legacy(self) -> bool:
        """Creatives uploaded before placement assignment existed carry no assignments."""
        return not self.placement_assignments


class OrderPlacement(BaseModel):
    """One resolved inventory item (placement) of a publication order."""

    model_config = ConfigDict(extra="ignore")

    item_path: str
    item_name: str | None = None
    channel: str | None = None


class AssetReference(BaseModel):
    """Legacy channel-by-dimension hint attached to an order."""

    model_config = ConfigDict(extra="ignore")

    placement_name: str | None = None
    channel: str | None = None
    dimensions: str | list[str] | None = None

    @property
    def dimension_list(self) -> list[str]:
        if self.dimensions is None:
            return []
        if isinstance(self.dimensions, str):
            return [self.dimensions]
        return list(self.dimensions)


class PublicationPlatforms(BaseModel):
    """Ad server and email platform a publication traffics through."""

    ad_server: str | None = None
    esp: str | None = None
    esp_custom_email_id: str | None = None
    esp_custom_cache_buster: str | None = None
    esp_compatibility: ESPCompatibility = ESPCompatibility.FULL


class Order(BaseModel):
    """Publication insertion order: one per campaign x publication."""

    model_config = ConfigDict(extra="ignore")

    order_id: str
    campaign_id: str
    publication_id: int
    publication_name: str | None = None
    placements: list[OrderPlacement] = Field(default_factory=list)
    asset_references: list[AssetReference] = Field(default_factory=list)
    platforms: PublicationPlatforms = Field(default_factory=PublicationPlatforms)

    def find_placement(self, item_path: str) -> OrderPlacement | None:
        for placement in self.placements:
            if placement.item_path == item_path:
                return placement
        return None


class Campaign(BaseModel):
    model_config = ConfigDict(extra="ignore")

    campaign_id: str
    name: str | None = None
    advertiser_name: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    selected_inventory: dict[str, Any] | None = None

    @property
    def display_advertiser(self) -> str:
        return self.advertiser_name or "Advertiser"

    @property
    def display_name(self) -> str:
        return self.name or "Campaign"


# --- Outputs ----------------------------------------------------------------


class TrackingCreativeInfo(BaseModel):
    """Creative information denormalized onto a script for tag rendering."""

    name: str
    click_url: str
    image_url: str | None = None
    width: int | None = None
    height: int | None = None
    alt_text: str | None = None
    headline: str | None = None
    body: str | None = None
    cta_text: str | None = None


class TrackingUrls(BaseModel):
    impression_pixel: str
    click_tracker: str
    creative_url: str


class TrackingTags(BaseModel):
    full_tag: str
    simplified_tag: str | None = None
    comments: str


class ScriptDraft(BaseModel):
    """Everything needed to persist one tracking script for a (creative, placement) pair."""

    campaign_id: str
    publication_id: int
    publication_name: str
    order_id: str
    creative_id: str
    item_path: str | None = None
    placement_name: str | None = None
    channel: TrackingChannel
    creative: TrackingCreativeInfo
    urls: TrackingUrls
    tags: TrackingTags
    esp_compatibility: ESPCompatibility = ESPCompatibility.FULL
    generated_by: str = "system"


class GenerateScriptsResult(BaseModel):
    """Outcome of one orchestrator invocation."""

    success: bool = True
    scripts_generated: int = 0
    scripts_skipped: int = 0
    scripts_failed: int = 0
    scripts_deleted: int = 0
    message: str | None = None
    errors: list[str] = Field(default_factory=list)
    script_ids: list[str] = Field(default_factory=list)


class TransformedTag(BaseModel):
    """A stored tag rewritten for one target platform. Never persisted."""

    tag: str
    platform: str
    platform_name: str
    instructions: str
