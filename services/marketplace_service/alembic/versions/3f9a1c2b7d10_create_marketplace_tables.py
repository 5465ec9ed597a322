"""create_marketplace_tables

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "3f9a1c2b7d10"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "business_category_enum": (
        "restaurant", "bakery", "cafe", "grocery", "pastry", "butcher", "other",
    ),
    "booking_status_enum": (
        "pending", "confirmed", "completed", "cancelled", "expired", "rejected",
    ),
    "booking_cancelled_by_enum": ("user", "seller", "admin", "system"),
    "booking_payment_status_enum": ("pending", "completed", "refunded", "failed"),
    "booking_payment_method_enum": ("cash", "card", "wallet", "other"),
    "review_moderation_status_enum": ("approved", "rejected", "changes_requested"),
    "notification_type_enum": (
        "booking_created", "booking_confirmed", "booking_cancelled",
        "booking_completed", "offer_expired", "new_offer", "new_review",
        "promotion", "system_update", "account_alert", "admin_alert",
        "payment_received", "payment_failed", "announcement", "other",
    ),
    "notification_entity_type_enum": (
        "booking", "offer", "store", "user", "review", "payment", "system",
    ),
    "notification_priority_enum": ("low", "medium", "high", "urgent"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamp(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "stores",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("category", _enum("business_category_enum"), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("logo", sa.String(255), nullable=False, server_default="no-photo.jpg"),
        sa.Column("cover_image", sa.String(255), nullable=False, server_default="no-cover.jpg"),
        sa.Column("photo", sa.String(255), nullable=True),
        sa.Column("opening_hours", sa.JSON(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="store_rating_range"),
    )
    op.create_index("ix_stores_owner_id", "stores", ["owner_id"])
    op.create_index("ix_stores_city", "stores", ["city"])
    op.create_index("ix_stores_location", "stores", ["latitude", "longitude"])

    op.create_table(
        "offers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("seller_id", sa.String(255), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("category", _enum("business_category_enum"), nullable=False),
        sa.Column("original_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("discounted_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("available_quantity", sa.Integer(), nullable=False),
        _timestamp("pickup_start", nullable=False),
        _timestamp("pickup_end", nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating_count", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.CheckConstraint("quantity >= 1", name="offer_positive_quantity"),
        sa.CheckConstraint(
            "available_quantity >= 0 AND available_quantity <= quantity",
            name="offer_valid_available",
        ),
        sa.CheckConstraint("original_price >= 0", name="offer_positive_price"),
        sa.CheckConstraint(
            "discounted_price < original_price", name="offer_discount_below_price"
        ),
        sa.CheckConstraint("pickup_end > pickup_start", name="offer_pickup_window"),
    )
    op.create_index("ix_offers_store_id", "offers", ["store_id"])
    op.create_index("ix_offers_seller_id", "offers", ["seller_id"])
    op.create_index("ix_offers_pickup_end", "offers", ["pickup_end"])
    op.create_index("ix_offers_location", "offers", ["latitude", "longitude"])
    op.create_index("ix_offers_active_pickup_end", "offers", ["is_active", "pickup_end"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("offer_id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("seller_id", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "status",
            _enum("booking_status_enum"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("pickup_code", sa.String(16), nullable=False),
        _timestamp("pickup_time", nullable=False),
        sa.Column("offer_title", sa.String(100), nullable=False),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        sa.Column("cancelled_by", _enum("booking_cancelled_by_enum"), nullable=True),
        _timestamp("cancelled_at"),
        _timestamp("confirmed_at"),
        _timestamp("completed_at"),
        sa.Column(
            "payment_status",
            _enum("booking_payment_status_enum"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "payment_method",
            _enum("booking_payment_method_enum"),
            nullable=False,
            server_default="cash",
        ),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["offer_id"], ["offers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("pickup_code"),
        sa.CheckConstraint("quantity >= 1", name="booking_positive_quantity"),
        sa.CheckConstraint("total_price >= 0", name="booking_positive_total"),
    )
    op.create_index("ix_bookings_offer_id", "bookings", ["offer_id"])
    op.create_index("ix_bookings_store_id", "bookings", ["store_id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_seller_id", "bookings", ["seller_id"])
    op.create_index("ix_bookings_user_id_status", "bookings", ["user_id", "status"])
    op.create_index("ix_bookings_offer_id_status", "bookings", ["offer_id", "status"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("offer_id", sa.Uuid(), nullable=True),
        sa.Column("booking_id", sa.Uuid(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(500), nullable=True),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("helpful_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("is_flagged", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("admin_attention", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "moderation_status",
            _enum("review_moderation_status_enum"),
            nullable=False,
            server_default="approved",
        ),
        sa.Column("moderation_reason", sa.Text(), nullable=True),
        sa.Column("moderation_message", sa.Text(), nullable=True),
        sa.Column("moderated_by", sa.String(255), nullable=True),
        _timestamp("moderated_at"),
        sa.Column("flags", sa.JSON(), nullable=False),
        sa.Column("flag_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default="false"),
        _timestamp("deleted_at"),
        sa.Column("deleted_by", sa.String(255), nullable=True),
        sa.Column("deleted_reason", sa.Text(), nullable=True),
        sa.Column("response_text", sa.String(500), nullable=True),
        sa.Column("responded_by", sa.String(255), nullable=True),
        _timestamp("responded_at"),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["offer_id"], ["offers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("user_id", "booking_id", name="uq_review_user_booking"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="review_rating_range"),
    )
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])
    op.create_index("ix_reviews_store_id", "reviews", ["store_id"])
    op.create_index("ix_reviews_offer_id", "reviews", ["offer_id"])
    op.create_index("ix_reviews_store_id_is_deleted", "reviews", ["store_id", "is_deleted"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("type", _enum("notification_type_enum"), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        _timestamp("read_at"),
        sa.Column(
            "related_entity_type", _enum("notification_entity_type_enum"), nullable=True
        ),
        sa.Column("related_entity_id", sa.Uuid(), nullable=True),
        sa.Column("action_url", sa.String(255), nullable=True),
        sa.Column("image", sa.String(255), nullable=True),
        sa.Column(
            "priority",
            _enum("notification_priority_enum"),
            nullable=False,
            server_default="medium",
        ),
        _timestamp("scheduled_at"),
        _timestamp("expires_at"),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default="false"),
        _timestamp("created_at", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index(
        "ix_notifications_user_id_is_read", "notifications", ["user_id", "is_read"]
    )
    op.create_index(
        "ix_notifications_user_id_created_at", "notifications", ["user_id", "created_at"]
    )

    op.create_table(
        "notification_preferences",
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("preferences", sa.JSON(), nullable=False),
        _timestamp("updated_at", nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("notification_preferences")
    op.drop_table("notifications")
    op.drop_table("reviews")
    op.drop_table("bookings")
    op.drop_table("offers")
    op.drop_table("stores")

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
