"""Initial schema: route network, fleet, reservations and bookings.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── route_edges ───────────────────────────────────────────────────
    op.create_table(
        "route_edges",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("source", sa.String(64), nullable=False),
        sa.Column("target", sa.String(64), nullable=False),
        sa.Column("duration_minutes", sa.Integer, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("source", "target", name="uq_route_edges_pair"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_route_edges_duration"),
    )
    op.create_index("idx_route_edges_source", "route_edges", ["source"])

    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("rate_per_minute", sa.Float, nullable=False),
        sa.Column("active", sa.Boolean, default=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_vehicles_active", "vehicles", ["active"])

    # ── reservations ──────────────────────────────────────────────────
    op.create_table(
        "reservations",
        sa.Column("booking_id", sa.String(36), primary_key=True),
        sa.Column(
            "vehicle_id", sa.String(36), sa.ForeignKey("vehicles.id"), nullable=False
        ),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_reservations_vehicle", "reservations", ["vehicle_id"])

    # ── bookings ──────────────────────────────────────────────────────
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("human_code", sa.String(16), unique=True, nullable=False),
        sa.Column("rider_contact", sa.String(255), nullable=True),
        sa.Column("source", sa.String(64), nullable=False),
        sa.Column("destination", sa.String(64), nullable=False),
        sa.Column(
            "vehicle_id", sa.String(36), sa.ForeignKey("vehicles.id"), nullable=False
        ),
        sa.Column("path", sa.JSON, nullable=False),
        sa.Column("total_duration", sa.Integer, nullable=False),
        sa.Column("estimated_cost", sa.Float, nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "CONFIRMED",
                "IN_PROGRESS",
                "COMPLETED",
                "CANCELLED",
                name="bookingstatus",
            ),
            default="CONFIRMED",
            nullable=False,
        ),
        sa.Column("notification_sent", sa.Boolean, default=False, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_bookings_status", "bookings", ["status"])
    op.create_index("idx_bookings_vehicle", "bookings", ["vehicle_id"])
    op.create_index("idx_bookings_contact", "bookings", ["rider_contact"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("reservations")
    op.drop_table("vehicles")
    op.drop_table("route_edges")
    op.execute("DROP TYPE IF EXISTS bookingstatus")
