"""Initial tracking schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _json():
    return sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("campaign_id", sa.String(100), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("advertiser_name", sa.String(255), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("selected_inventory", _json(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "publication_orders",
        sa.Column("order_id", sa.String(100), primary_key=True),
        sa.Column(
            "campaign_id",
            sa.String(100),
            sa.ForeignKey("campaigns.campaign_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("publication_id", sa.Integer(), nullable=False),
        sa.Column("publication_name", sa.String(255), nullable=True),
        sa.Column("placements", _json(), nullable=True),
        sa.Column("asset_references", _json(), nullable=True),
        sa.Column("ad_server", sa.String(50), nullable=True),
        sa.Column("esp", sa.String(50), nullable=True),
        sa.Column("esp_custom_email_id", sa.String(100), nullable=True),
        sa.Column("esp_custom_cache_buster", sa.String(100), nullable=True),
        sa.Column("esp_compatibility", sa.String(20), nullable=False, server_default="full"),
        sa.Column("status", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("idx_publication_orders_campaign_pub", "publication_orders", ["campaign_id", "publication_id"])

    op.create_table(
        "creative_assets",
        sa.Column("creative_id", sa.String(100), primary_key=True),
        sa.Column(
            "campaign_id",
            sa.String(100),
            sa.ForeignKey("campaigns.campaign_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("original_filename", sa.String(500), nullable=True),
        sa.Column("file_type", sa.String(100), nullable=True),
        sa.Column("file_url", sa.Text(), nullable=True),
        sa.Column("channel", sa.String(50), nullable=True),
        sa.Column("spec_group_id", sa.String(255), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("specifications", _json(), nullable=True),
        sa.Column("digital_ad_properties", _json(), nullable=True),
        sa.Column("placement_assignments", _json(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("idx_creative_assets_campaign", "creative_assets", ["campaign_id"])
    op.create_index("idx_creative_assets_status", "creative_assets", ["status"])

    op.create_table(
        "tracking_scripts",
        sa.Column("script_id", sa.String(100), primary_key=True),
        sa.Column("campaign_id", sa.String(100), nullable=False),
        sa.Column("publication_id", sa.Integer(), nullable=False),
        sa.Column("publication_name", sa.String(255), nullable=False),
        sa.Column("order_id", sa.String(100), nullable=False),
        sa.Column("creative_id", sa.String(100), nullable=False),
        sa.Column("item_path", sa.String(255), nullable=False, server_default=""),
        sa.Column("placement_name", sa.String(255), nullable=True),
        sa.Column("channel", sa.String(50), nullable=False),
        sa.Column("creative", _json(), nullable=False),
        sa.Column("impression_url", sa.Text(), nullable=False),
        sa.Column("click_url", sa.Text(), nullable=False),
        sa.Column("creative_url", sa.Text(), nullable=False),
        sa.Column("full_tag", sa.Text(), nullable=False),
        sa.Column("simplified_tag", sa.Text(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=False),
        sa.Column("esp_compatibility", sa.String(20), nullable=False, server_default="full"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("generated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("generated_by", sa.String(100), nullable=False, server_default="system"),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("impression_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("click_count", sa.Integer(), nullable=False, server_default="0"),
    )

    # At most one active script per (campaign, publication, creative, placement)
    op.create_index(
        "uq_tracking_scripts_active_key",
        "tracking_scripts",
        ["campaign_id", "publication_id", "creative_id", "item_path"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
        sqlite_where=sa.text("deleted_at IS NULL"),
    )
    op.create_index("idx_tracking_scripts_campaign_pub", "tracking_scripts", ["campaign_id", "publication_id"])
    op.create_index("idx_tracking_scripts_creative", "tracking_scripts", ["creative_id"])


def downgrade() -> None:
    op.drop_index("idx_tracking_scripts_creative", table_name="tracking_scripts")
    op.drop_index("idx_tracking_scripts_campaign_pub", table_name="tracking_scripts")
    op.drop_index("uq_tracking_scripts_active_key", table_name="tracking_scripts")
    op.drop_table("tracking_scripts")

    op.drop_index("idx_creative_assets_status", table_name="creative_assets")
    op.drop_index("idx_creative_assets_campaign", table_name="creative_assets")
    op.drop_table("creative_assets")

    op.drop_index("idx_publication_orders_campaign_pub", table_name="publication_orders")
    op.drop_table("publication_orders")

    op.drop_table("campaigns")
