"""Baseline schema: lists, tasks, tags, attributes, templates.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19

Databases created by ``init_database`` before version tracking get
stamped at this revision without running it.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def _timestamps(*, deletable: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
    ]
    if deletable:
        cols.append(sa.Column("deleted_at", sa.Text))
    return cols


def upgrade() -> None:
    op.create_table(
        "task_lists",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("parent_list_id", sa.Integer, sa.ForeignKey("task_lists.id")),
        *_timestamps(),
    )
    op.create_index("ix_task_lists_parent_list_id", "task_lists", ["parent_list_id"])
    op.create_index("ix_task_lists_deleted_at", "task_lists", ["deleted_at"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("notes", sa.Text),
        sa.Column("status", sa.Text, nullable=False, server_default="pending"),
        sa.Column("priority", sa.Text, nullable=False, server_default="normal"),
        sa.Column("list_id", sa.Integer, sa.ForeignKey("task_lists.id")),
        sa.Column("due_date", sa.Text),
        sa.Column("estimated_hours", sa.REAL),
        sa.Column("completed_at", sa.Text),
        *_timestamps(),
    )
    op.create_index("ix_tasks_list_id", "tasks", ["list_id"])
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_due_date", "tasks", ["due_date"])
    op.create_index("ix_tasks_deleted_at", "tasks", ["deleted_at"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
        sa.Column("color", sa.Text),
        sa.Column("parent_id", sa.Integer, sa.ForeignKey("tags.id", ondelete="SET NULL")),
        sa.Column("created_at", sa.Text, nullable=False),
    )
    op.create_index("ix_tags_parent_id", "tags", ["parent_id"])

    for assoc, owner, owner_table in (
        ("task_tags", "task_id", "tasks"),
        ("list_tags", "list_id", "task_lists"),
    ):
        op.create_table(
            assoc,
            sa.Column(
                owner,
                sa.Integer,
                sa.ForeignKey(f"{owner_table}.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "tag_id", sa.Integer, sa.ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("created_at", sa.Text, nullable=False),
            sa.PrimaryKeyConstraint(owner, "tag_id"),
        )

    op.create_table(
        "attribute_definitions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
        sa.Column("type", sa.Text, nullable=False),
        sa.Column("is_required", sa.Integer, nullable=False, server_default="0"),
        sa.Column("default_value", sa.Text),
        sa.Column("validation_rules", sa.Text),
        sa.Column("created_at", sa.Text, nullable=False),
    )

    for values_table, owner, owner_table in (
        ("task_attributes", "task_id", "tasks"),
        ("list_attributes", "list_id", "task_lists"),
    ):
        op.create_table(
            values_table,
            sa.Column(
                owner,
                sa.Integer,
                sa.ForeignKey(f"{owner_table}.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "attribute_definition_id",
                sa.Integer,
                sa.ForeignKey("attribute_definitions.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("value", sa.Text, nullable=False),
            *_timestamps(deletable=False),
            sa.PrimaryKeyConstraint(owner, "attribute_definition_id"),
        )

    op.create_table(
        "templates",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("category", sa.Text),
        sa.Column("version", sa.Text, nullable=False, server_default="1.0"),
        *_timestamps(),
    )
    op.create_index("ix_templates_category", "templates", ["category"])

    op.create_table(
        "template_tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "template_id",
            sa.Integer,
            sa.ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("order_index", sa.Integer, nullable=False),
        sa.Column("estimated_hours", sa.REAL),
        sa.Column("priority", sa.Text, nullable=False, server_default="normal"),
        sa.Column("created_at", sa.Text, nullable=False),
    )
    op.create_index("ix_template_tasks_template_id", "template_tasks", ["template_id"])


def downgrade() -> None:
    for name in (
        "template_tasks",
        "templates",
        "list_attributes",
        "task_attributes",
        "attribute_definitions",
        "list_tags",
        "task_tags",
        "tags",
        "tasks",
        "task_lists",
    ):
        op.drop_table(name)
