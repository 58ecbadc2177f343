"""Roster and orphaned record schema.

Revision ID: 0001_orphan_schema
Revises:
Create Date: 2026-10-18 09:00:00

"""
from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from rosterrecon.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "0001_orphan_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_CHANGE_TYPES = ("ADDED", "CHANGED", "DELETED")
_ACTION_TYPES = ("CLAIM", "IGNORE")


def upgrade() -> None:
    op.create_table(
        "org",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("reporting_group", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_org")),
        sa.UniqueConstraint("reporting_group", name=op.f("uq_org_org_reporting_group")),
    )
    op.create_table(
        "unit",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(
            ["org_id"], ["org.id"], name=op.f("fk_unit_unit_org_id_org"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_unit")),
    )
    op.create_table(
        "roster",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("edipi", sa.String(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("phone_number", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["unit_id"],
            ["unit.id"],
            name=op.f("fk_roster_roster_unit_id_unit"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_roster")),
        sa.UniqueConstraint("edipi", "unit_id", name=op.f("uq_roster_roster_edipi")),
    )
    op.create_table(
        "roster_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("edipi", sa.String(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column(
            "change_type",
            sa.Enum(*_CHANGE_TYPES, name="changetype", native_enum=False),
            nullable=False,
        ),
        sa.Column("timestamp", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["unit_id"],
            ["unit.id"],
            name=op.f("fk_roster_history_roster_history_unit_id_unit"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_roster_history")),
    )
    op.create_index("ix_roster_history_unit_edipi", "roster_history", ["unit_id", "edipi"])
    op.create_table(
        "orphaned_record",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("document_id", sa.String(), nullable=False),
        sa.Column("edipi", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("unit", sa.String(), nullable=True),
        sa.Column("timestamp", UTCDateTime(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("composite_id", sa.String(), nullable=False),
        sa.Column("deleted_on", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["org_id"],
            ["org.id"],
            name=op.f("fk_orphaned_record_orphaned_record_org_id_org"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_orphaned_record")),
    )
    op.create_index("ix_orphaned_record_composite_id", "orphaned_record", ["composite_id"])
    op.create_index("ix_orphaned_record_document_id", "orphaned_record", ["document_id"])
    op.create_table(
        "orphaned_record_action",
        sa.Column("composite_id", sa.String(), nullable=False),
        sa.Column("user_edipi", sa.String(), nullable=False),
        sa.Column(
            "type",
            sa.Enum(*_ACTION_TYPES, name="actiontype", native_enum=False),
            nullable=False,
        ),
        sa.Column("expires_on", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint(
            "composite_id", "user_edipi", name=op.f("pk_orphaned_record_action")
        ),
    )


def downgrade() -> None:
    op.drop_table("orphaned_record_action")
    op.drop_index("ix_orphaned_record_document_id", table_name="orphaned_record")
    op.drop_index("ix_orphaned_record_composite_id", table_name="orphaned_record")
    op.drop_table("orphaned_record")
    op.drop_index("ix_roster_history_unit_edipi", table_name="roster_history")
    op.drop_table("roster_history")
    op.drop_table("roster")
    op.drop_table("unit")
    op.drop_table("org")
