"""Initial migration: create gameslot, slotrequest, leaguefield, membership tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Slots live under SLOT#{league}#{division}; legacy rows under {division}
    op.create_table(
        "gameslot",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("partition_key", sa.String(), nullable=False),
        sa.Column("slot_id", sa.String(), nullable=False),
        sa.Column("league_id", sa.String(), nullable=False),
        sa.Column("division", sa.String(), nullable=False),
        sa.Column("offering_team_id", sa.String(), nullable=False),
        sa.Column("offering_email", sa.String(), nullable=False),
        sa.Column("game_date", sa.String(), nullable=False),
        sa.Column("start_time", sa.String(), nullable=False),
        sa.Column("end_time", sa.String(), nullable=False),
        sa.Column("field_key", sa.String(), nullable=False),
        sa.Column("park_name", sa.String(), nullable=False),
        sa.Column("field_name", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("game_type", sa.String(), nullable=False),
        sa.Column("notes", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("confirmed_team_id", sa.String(), nullable=True),
        sa.Column("confirmed_request_id", sa.String(), nullable=True),
        sa.Column("confirmed_by", sa.String(), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(), nullable=True),
        sa.Column("etag", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("partition_key", "slot_id", name="uq_gameslot_partition_row"),
    )
    op.create_index("ix_gameslot_partition_key", "gameslot", ["partition_key"])
    op.create_index("idx_gameslot_league_date_status", "gameslot", ["league_id", "game_date", "status"])

    # Claims live under SLOTREQ#{league}#{division}#{slot}; legacy rows under {division}|{slot}
    op.create_table(
        "slotrequest",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("partition_key", sa.String(), nullable=False),
        sa.Column("request_id", sa.String(), nullable=False),
        sa.Column("league_id", sa.String(), nullable=False),
        sa.Column("division", sa.String(), nullable=False),
        sa.Column("slot_id", sa.String(), nullable=False),
        sa.Column("requesting_user_id", sa.String(), nullable=False),
        sa.Column("requesting_team_id", sa.String(), nullable=False),
        sa.Column("requesting_email", sa.String(), nullable=False),
        sa.Column("notes", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("approved_by", sa.String(), nullable=True),
        sa.Column("etag", sa.String(), nullable=False),
        sa.Column("requested_at", sa.DateTime(), nullable=False),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("partition_key", "request_id", name="uq_slotrequest_partition_row"),
    )
    op.create_index("ix_slotrequest_partition_key", "slotrequest", ["partition_key"])

    op.create_table(
        "leaguefield",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("league_id", sa.String(), nullable=False),
        sa.Column("park_code", sa.String(), nullable=False),
        sa.Column("field_code", sa.String(), nullable=False),
        sa.Column("park_name", sa.String(), nullable=False),
        sa.Column("field_name", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("league_id", "park_code", "field_code", name="uq_field_league_park_field"),
    )
    op.create_index("ix_leaguefield_league_id", "leaguefield", ["league_id"])

    op.create_table(
        "leaguemembership",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("league_id", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("division", sa.String(), nullable=True),
        sa.Column("team_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "league_id", name="uq_membership_user_league"),
    )
    op.create_index("ix_leaguemembership_user_id", "leaguemembership", ["user_id"])

    op.create_table(
        "globaladmin",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("globaladmin")
    op.drop_index("ix_leaguemembership_user_id", table_name="leaguemembership")
    op.drop_table("leaguemembership")
    op.drop_index("ix_leaguefield_league_id", table_name="leaguefield")
    op.drop_table("leaguefield")
    op.drop_index("ix_slotrequest_partition_key", table_name="slotrequest")
    op.drop_table("slotrequest")
    op.drop_index("idx_gameslot_league_date_status", table_name="gameslot")
    op.drop_index("ix_gameslot_partition_key", table_name="gameslot")
    op.drop_table("gameslot")
