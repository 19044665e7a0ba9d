"""SQLAlchemy models for database schema."""

import logging
from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from tracking_tags.core.database.json_type import JSONType

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models using SQLAlchemy 2.0 declarative style."""

    pass


class Campaign(Base):
    __tablename__ = "campaigns"

    campaign_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    advertiser_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    # Legacy dimension hints keyed by publication
    selected_inventory: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    orders = relationship("PublicationOrder", back_populates="campaign")


class PublicationOrder(Base):
    """Insertion order for one publication within a campaign."""

    __tablename__ = "publication_orders"

    order_id: Mapped[str] = mapped_column(String(100), primary_key=True, default=lambda: uuid4().hex)
    campaign_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("campaigns.campaign_id", ondelete="CASCADE"), nullable=False
    )
    publication_id: Mapped[int] = mapped_column(Integer, nullable=False)
    publication_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    placements: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    asset_references: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    ad_server: Mapped[str | None] = mapped_column(String(50), nullable=True)
    esp: Mapped[str | None] = mapped_column(String(50), nullable=True)
    esp_custom_email_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    esp_custom_cache_buster: Mapped[str | None] = mapped_column(String(100), nullable=True)
    esp_compatibility: Mapped[str] = mapped_column(String(20), nullable=False, default="full")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    campaign = relationship("Campaign", back_populates="orders")

    __table_args__ = (Index("idx_publication_orders_campaign_pub", "campaign_id", "publication_id"),)


class CreativeAsset(Base):
    """Uploaded creative file. Written by the asset subsystem, read by tag generation."""

    __tablename__ = "creative_assets"

    creative_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    campaign_id: Mapped[str | None] = mapped_column(
        String(100), ForeignKey("campaigns.campaign_id", ondelete="SET NULL"), nullable=True
    )
    original_filename: Mapped[str | None] = mapped_column(String(500), nullable=True)
    file_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    channel: Mapped[str | None] = mapped_column(String(50), nullable=True)
    spec_group_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    specifications: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    digital_ad_properties: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    placement_assignments: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_creative_assets_campaign", "campaign_id"),
        Index("idx_creative_assets_status", "status"),
    )


class TrackingScript(Base):
    """Generated tracking tags for one (campaign, publication, creative, placement).

    Rows are never edited once active: a refresh soft-deletes and inserts anew.
    item_path is '' for legacy creatives without placement assignments so the
    partial unique index below covers them too.
    """

    __tablename__ = "tracking_scripts"

    script_id: Mapped[str] = mapped_column(String(100), primary_key=True, default=lambda: uuid4().hex)
    campaign_id: Mapped[str] = mapped_column(String(100), nullable=False)
    publication_id: Mapped[int] = mapped_column(Integer, nullable=False)
    publication_name: Mapped[str] = mapped_column(String(255), nullable=False)
    order_id: Mapped[str] = mapped_column(String(100), nullable=False)
    creative_id: Mapped[str] = mapped_column(String(100), nullable=False)
    item_path: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    placement_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    channel: Mapped[str] = mapped_column(String(50), nullable=False)

    # Denormalized creative info (name, click_url, image_url, width, height, alt_text, headline, body, cta_text)
    creative: Mapped[dict] = mapped_column(JSONType, nullable=False)

    impression_url: Mapped[str] = mapped_column(Text, nullable=False)
    click_url: Mapped[str] = mapped_column(Text, nullable=False)
    creative_url: Mapped[str] = mapped_column(Text, nullable=False)
    full_tag: Mapped[str] = mapped_column(Text, nullable=False)
    simplified_tag: Mapped[str | None] = mapped_column(Text, nullable=True)
    comments: Mapped[str] = mapped_column(Text, nullable=False)
    esp_compatibility: Mapped[str] = mapped_column(String(20), nullable=False, default="full")

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    generated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())
    generated_by: Mapped[str] = mapped_column(String(100), nullable=False, default="system")
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Maintained by the pixel/redirect pipeline
    impression_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    click_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index(
            "uq_tracking_scripts_active_key",
            "campaign_id",
            "publication_id",
            "creative_id",
            "item_path",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index("idx_tracking_scripts_campaign_pub", "campaign_id", "publication_id"),
        Index("idx_tracking_scripts_creative", "creative_id"),
    )
