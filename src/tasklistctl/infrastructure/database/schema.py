"""SQLAlchemy Core table definitions for the tasklistctl database.

Timestamps are ISO-8601 UTC text. Lists, tasks and templates are
soft-deleted through ``deleted_at``; tags and attribute definitions are
removed outright, with association and value rows cascading.
"""

from __future__ import annotations

from sqlalchemy import (
    REAL,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
)

metadata = MetaData()

task_lists = Table(
    "task_lists",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("parent_list_id", Integer, ForeignKey("task_lists.id")),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    Column("deleted_at", Text),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("notes", Text),
    Column("status", Text, nullable=False, server_default="pending"),
    Column("priority", Text, nullable=False, server_default="normal"),
    Column("list_id", Integer, ForeignKey("task_lists.id")),  # NULL once orphaned
    Column("due_date", Text),
    Column("estimated_hours", REAL),
    Column("completed_at", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    Column("deleted_at", Text),
)

tags = Table(
    "tags",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False, unique=True),
    Column("color", Text),
    Column("parent_id", Integer, ForeignKey("tags.id", ondelete="SET NULL")),
    Column("created_at", Text, nullable=False),
)

task_tags = Table(
    "task_tags",
    metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", Text, nullable=False),
    PrimaryKeyConstraint("task_id", "tag_id"),
)

list_tags = Table(
    "list_tags",
    metadata,
    Column("list_id", Integer, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", Text, nullable=False),
    PrimaryKeyConstraint("list_id", "tag_id"),
)

attribute_definitions = Table(
    "attribute_definitions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False, unique=True),
    Column("type", Text, nullable=False),
    Column("is_required", Integer, nullable=False, server_default="0"),
    Column("default_value", Text),
    Column("validation_rules", Text),  # JSON object
    Column("created_at", Text, nullable=False),
)

task_attributes = Table(
    "task_attributes",
    metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
    Column(
        "attribute_definition_id",
        Integer,
        ForeignKey("attribute_definitions.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("value", Text, nullable=False),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    PrimaryKeyConstraint("task_id", "attribute_definition_id"),
)

list_attributes = Table(
    "list_attributes",
    metadata,
    Column("list_id", Integer, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False),
    Column(
        "attribute_definition_id",
        Integer,
        ForeignKey("attribute_definitions.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("value", Text, nullable=False),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    PrimaryKeyConstraint("list_id", "attribute_definition_id"),
)

templates = Table(
    "templates",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("category", Text),
    Column("version", Text, nullable=False, server_default="1.0"),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    Column("deleted_at", Text),
)

template_tasks = Table(
    "template_tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "template_id", Integer, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False
    ),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("order_index", Integer, nullable=False),
    Column("estimated_hours", REAL),
    Column("priority", Text, nullable=False, server_default="normal"),
    Column("created_at", Text, nullable=False),
)

# --- Indexes ---
Index("ix_tasks_list_id", tasks.c.list_id)
Index("ix_tasks_status", tasks.c.status)
Index("ix_tasks_due_date", tasks.c.due_date)
Index("ix_tasks_deleted_at", tasks.c.deleted_at)
Index("ix_task_lists_parent_list_id", task_lists.c.parent_list_id)
Index("ix_task_lists_deleted_at", task_lists.c.deleted_at)
Index("ix_tags_parent_id", tags.c.parent_id)
Index("ix_templates_category", templates.c.category)
Index("ix_template_tasks_template_id", template_tasks.c.template_id)
