"""AttributeService: typed custom-attribute definitions and per-entity values.

Values are validated against their definition at write time and stored
as strings. Writes upsert: an existing (entity, definition) value is
updated in place with a fresh ``updated_at``. Deleting a definition
removes every task and list value referencing it in the same transaction.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import Table, delete, insert, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from tasklistctl.domain.attributes import (
    AttributeType,
    parse_validation_rules,
    resolve_value,
    validate_value,
)
from tasklistctl.domain.errors import ConflictError
from tasklistctl.domain.fields import ATTRIBUTE_NAME_MAX, require_text
from tasklistctl.infrastructure.database.schema import (
    attribute_definitions,
    list_attributes,
    task_attributes,
    task_lists,
    tasks,
)
from tasklistctl.services._helpers import now_iso, parse_enum
from tasklistctl.services.base import BaseService, reports_errors
from tasklistctl.services.contracts import (
    AttributeDefinitionItem,
    AttributeValueItem,
    collection,
    dump_validated,
)
from tasklistctl.services.result import ServiceResult
from tasklistctl.services.telemetry import traced

logger = logging.getLogger(__name__)

# entity kind -> (entity table, values table, owner column, label)
_TARGETS: dict[str, tuple[Table, Table, str, str]] = {
    "task": (tasks, task_attributes, "task_id", "Task"),
    "list": (task_lists, list_attributes, "list_id", "List"),
}


def _definition_payload(row: dict[str, Any]) -> dict[str, Any]:
    rules = row.get("validation_rules")
    return {
        **row,
        "is_required": bool(row["is_required"]),
        "validation_rules": json.loads(rules) if rules else None,
    }


class AttributeService(BaseService):
    """Define attribute types and set, read or remove their values."""

    # --- Definitions ---

    @traced
    @reports_errors("create_attribute_definition")
    def create_attribute_definition(
        self,
        name: str,
        attr_type: str,
        *,
        is_required: bool = False,
        default_value: str | None = None,
        validation_rules: str | dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Define a named, typed attribute.

        *validation_rules* is a JSON object (string or mapping); see
        :class:`~tasklistctl.domain.attributes.ValidationRules`.
        """
        clean_name = require_text(name, "name", max_length=ATTRIBUTE_NAME_MAX)
        kind = parse_enum(AttributeType, attr_type, "type")
        rules = parse_validation_rules(kind, validation_rules)
        if default_value:
            validate_value(clean_name, kind, default_value, rules=rules)

        with self._store.transaction() as txn:
            exists = txn.conn.execute(
                select(attribute_definitions.c.id).where(attribute_definitions.c.name == clean_name)
            ).first()
            if exists is not None:
                raise ConflictError(
                    f"Attribute definition '{clean_name}' already exists", name=clean_name
                )
            result = txn.conn.execute(
                insert(attribute_definitions).values(
                    name=clean_name,
                    type=kind.value,
                    is_required=int(is_required),
                    default_value=default_value,
                    validation_rules=(
                        rules.model_dump_json(exclude_none=True) if rules is not None else None
                    ),
                    created_at=now_iso(),
                )
            )
            row = txn.fetch(attribute_definitions, int(result.inserted_primary_key[0]))
            assert row is not None

        return ServiceResult(
            ok=True,
            op="create_attribute_definition",
            data=dump_validated(AttributeDefinitionItem, _definition_payload(row)),
        )

    @traced
    @reports_errors("get_attribute_definition")
    def get_attribute_definition(self, definition_id: int) -> ServiceResult:
        with self._store.read() as txn:
            row = txn.require_live(attribute_definitions, definition_id, "Attribute definition")
        return ServiceResult(
            ok=True,
            op="get_attribute_definition",
            data=dump_validated(AttributeDefinitionItem, _definition_payload(row)),
        )

    @traced
    @reports_errors("list_attribute_definitions")
    def list_attribute_definitions(self) -> ServiceResult:
        with self._store.read() as txn:
            rows = [
                _definition_payload(dict(r._mapping))
                for r in txn.conn.execute(
                    select(attribute_definitions).order_by(attribute_definitions.c.name)
                )
            ]
        return ServiceResult(
            ok=True,
            op="list_attribute_definitions",
            data=collection(AttributeDefinitionItem, rows),
        )

    @traced
    @reports_errors("delete_attribute_definition")
    def delete_attribute_definition(self, definition_id: int) -> ServiceResult:
        """Hard-delete a definition together with every value that uses it."""
        op = "delete_attribute_definition"
        with self._store.transaction() as txn:
            if txn.fetch(attribute_definitions, definition_id) is None:
                return ServiceResult(ok=True, op=op, data={"id": definition_id, "deleted": False})
            removed = 0
            for values in (task_attributes, list_attributes):
                removed += txn.conn.execute(
                    delete(values).where(values.c.attribute_definition_id == definition_id)
                ).rowcount
            txn.conn.execute(
                delete(attribute_definitions).where(attribute_definitions.c.id == definition_id)
            )
        logger.info("Deleted attribute definition %d and %d value(s)", definition_id, removed)
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": definition_id, "deleted": True, "values_removed": removed},
        )

    # --- Values ---

    def _set(self, kind: str, entity_id: int, definition_id: int, value: str | None) -> str:
        entity_table, values, owner, label = _TARGETS[kind]
        with self._store.transaction() as txn:
            txn.require_writable(entity_table, entity_id, label)
            definition = txn.require_live(
                attribute_definitions, definition_id, "Attribute definition"
            )
            attr_type = AttributeType(definition["type"])
            stored = resolve_value(
                definition["name"],
                attr_type,
                value,
                is_required=bool(definition["is_required"]),
                default_value=definition["default_value"],
                rules=parse_validation_rules(attr_type, definition["validation_rules"]),
            )
            now = now_iso()
            stmt = sqlite_insert(values).values(
                {
                    owner: entity_id,
                    "attribute_definition_id": definition_id,
                    "value": stored,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            txn.conn.execute(
                stmt.on_conflict_do_update(
                    index_elements=[values.c[owner], values.c.attribute_definition_id],
                    set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
                )
            )
        return stored

    def _get(self, kind: str, entity_id: int) -> list[dict[str, Any]]:
        entity_table, values, owner, label = _TARGETS[kind]
        stmt = (
            select(
                values.c.attribute_definition_id,
                attribute_definitions.c.name,
                attribute_definitions.c.type,
                values.c.value,
                values.c.created_at,
                values.c.updated_at,
            )
            .select_from(
                values.join(
                    attribute_definitions,
                    attribute_definitions.c.id == values.c.attribute_definition_id,
                )
            )
            .where(values.c[owner] == entity_id)
            .order_by(attribute_definitions.c.name)
        )
        with self._store.read() as txn:
            txn.require_live(entity_table, entity_id, label)
            return [dict(r._mapping) for r in txn.conn.execute(stmt)]

    def _remove(self, kind: str, entity_id: int, definition_id: int) -> bool:
        _, values, owner, _ = _TARGETS[kind]
        with self._store.transaction() as txn:
            return (
                txn.conn.execute(
                    delete(values).where(
                        values.c[owner] == entity_id,
                        values.c.attribute_definition_id == definition_id,
                    )
                ).rowcount
                > 0
            )

    @traced
    @reports_errors("set_task_attribute")
    def set_task_attribute(
        self, task_id: int, definition_id: int, value: str | None
    ) -> ServiceResult:
        """Validate *value* against the definition and upsert it for the task."""
        stored = self._set("task", task_id, definition_id, value)
        return ServiceResult(
            ok=True,
            op="set_task_attribute",
            data={"task_id": task_id, "attribute_definition_id": definition_id, "value": stored},
        )

    @traced
    @reports_errors("set_list_attribute")
    def set_list_attribute(
        self, list_id: int, definition_id: int, value: str | None
    ) -> ServiceResult:
        stored = self._set("list", list_id, definition_id, value)
        return ServiceResult(
            ok=True,
            op="set_list_attribute",
            data={"list_id": list_id, "attribute_definition_id": definition_id, "value": stored},
        )

    @traced
    @reports_errors("get_task_attributes")
    def get_task_attributes(self, task_id: int) -> ServiceResult:
        rows = self._get("task", task_id)
        return ServiceResult(
            ok=True, op="get_task_attributes", data=collection(AttributeValueItem, rows)
        )

    @traced
    @reports_errors("get_list_attributes")
    def get_list_attributes(self, list_id: int) -> ServiceResult:
        rows = self._get("list", list_id)
        return ServiceResult(
            ok=True, op="get_list_attributes", data=collection(AttributeValueItem, rows)
        )

    @traced
    @reports_errors("remove_task_attribute")
    def remove_task_attribute(self, task_id: int, definition_id: int) -> ServiceResult:
        removed = self._remove("task", task_id, definition_id)
        return ServiceResult(
            ok=True,
            op="remove_task_attribute",
            data={"task_id": task_id, "attribute_definition_id": definition_id, "removed": removed},
        )

    @traced
    @reports_errors("remove_list_attribute")
    def remove_list_attribute(self, list_id: int, definition_id: int) -> ServiceResult:
        removed = self._remove("list", list_id, definition_id)
        return ServiceResult(
            ok=True,
            op="remove_list_attribute",
            data={"list_id": list_id, "attribute_definition_id": definition_id, "removed": removed},
        )
