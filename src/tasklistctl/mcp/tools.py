"""MCP tool definitions.

Categories: Lists, Tasks, Templates, Tags, Attributes, Search.
Each tool has a ``<name>_impl`` function testable without the mcp
package; ``register_tools()`` wraps them with FastMCP decorators.
Tag and attribute tools take ``kind`` ("task" or "list") to pick the
entity they apply to.
"""

from __future__ import annotations

from typing import Any

from tasklistctl.services.result import ServiceError, ServiceResult

_KINDS = ("task", "list")


def _to_mcp_response(result: ServiceResult) -> dict[str, Any]:
    """Convert a ServiceResult to an MCP-friendly dict."""
    response: dict[str, Any] = {
        "ok": result.ok,
        "op": result.op,
        "data": result.data,
    }
    if result.warnings:
        response["warnings"] = result.warnings
    if result.error is not None:
        response["error"] = {
            "code": result.error.code,
            "message": result.error.message,
        }
    return response


def _bad_kind(op: str, kind: str) -> dict[str, Any]:
    return _to_mcp_response(
        ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="VALIDATION_FAILED",
                message=f"kind must be one of {', '.join(_KINDS)}, got {kind!r}",
                detail={"field": "kind"},
            ),
        )
    )


# ---------------------------------------------------------------------------
# List tools
# ---------------------------------------------------------------------------


def create_list_impl(
    store: Any,
    name: str,
    *,
    description: str | None = None,
    parent_id: int | None = None,
) -> dict[str, Any]:
    """Create a list, optionally nested under *parent_id*."""
    from tasklistctl.services.lists import ListService

    result = ListService(store).create_list(name, description=description, parent_id=parent_id)
    return _to_mcp_response(result)


def get_list_impl(store: Any, list_id: int) -> dict[str, Any]:
    from tasklistctl.services.lists import ListService

    return _to_mcp_response(ListService(store).get_list(list_id))


def update_list_impl(store: Any, list_id: int, *, changes: dict[str, Any]) -> dict[str, Any]:
    """Apply a partial update (name, description, parent_list_id)."""
    from tasklistctl.services.lists import ListService

    return _to_mcp_response(ListService(store).update_list(list_id, changes=changes))


def delete_list_impl(store: Any, list_id: int, *, cascade: bool = False) -> dict[str, Any]:
    from tasklistctl.services.lists import ListService

    return _to_mcp_response(ListService(store).delete_list(list_id, cascade=cascade))


def get_all_lists_impl(store: Any, *, hierarchical: bool = False) -> dict[str, Any]:
    from tasklistctl.services.lists import ListService

    return _to_mcp_response(ListService(store).list_all(hierarchical=hierarchical))


def move_task_impl(store: Any, task_id: int, target_list_id: int | None) -> dict[str, Any]:
    from tasklistctl.services.lists import ListService

    return _to_mcp_response(ListService(store).move_task(task_id, target_list_id))


# ---------------------------------------------------------------------------
# Task tools
# ---------------------------------------------------------------------------


def create_task_impl(
    store: Any,
    title: str,
    list_id: int,
    *,
    description: str | None = None,
    status: str = "pending",
    priority: str = "normal",
    due_date: str | None = None,
    estimated_hours: float | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Create a task in *list_id*."""
    from tasklistctl.services.tasks import TaskService

    result = TaskService(store).create_task(
        title,
        list_id,
        description=description,
        status=status,
        priority=priority,
        due_date=due_date,
        estimated_hours=estimated_hours,
        notes=notes,
    )
    return _to_mcp_response(result)


def get_task_impl(store: Any, task_id: int) -> dict[str, Any]:
    from tasklistctl.services.tasks import TaskService

    return _to_mcp_response(TaskService(store).get_task(task_id))


def update_task_impl(store: Any, task_id: int, *, changes: dict[str, Any]) -> dict[str, Any]:
    """Apply a partial update; keys absent from *changes* are left alone."""
    from tasklistctl.services.tasks import TaskService

    return _to_mcp_response(TaskService(store).update_task(task_id, changes=changes))


def start_task_impl(store: Any, task_id: int) -> dict[str, Any]:
    from tasklistctl.services.tasks import TaskService

    return _to_mcp_response(TaskService(store).start_task(task_id))


def complete_task_impl(store: Any, task_id: int) -> dict[str, Any]:
    from tasklistctl.services.tasks import TaskService

    return _to_mcp_response(TaskService(store).complete_task(task_id))


def delete_task_impl(store: Any, task_id: int) -> dict[str, Any]:
    from tasklistctl.services.tasks import TaskService

    return _to_mcp_response(TaskService(store).delete_task(task_id))


def list_tasks_impl(
    store: Any,
    *,
    list_id: int | None = None,
    status: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    from tasklistctl.services.tasks import TaskService

    result = TaskService(store).list_tasks(
        list_id=list_id, status=status, limit=limit, offset=offset
    )
    return _to_mcp_response(result)


# ---------------------------------------------------------------------------
# Template tools
# ---------------------------------------------------------------------------


def create_template_impl(
    store: Any,
    name: str,
    *,
    description: str | None = None,
    category: str | None = None,
    from_list_id: int | None = None,
) -> dict[str, Any]:
    """Create an empty template, or capture *from_list_id*'s tasks as its steps."""
    from tasklistctl.services.templates import TemplateService

    svc = TemplateService(store)
    if from_list_id is not None:
        result = svc.create_template_from_list(
            from_list_id, name, description=description, category=category
        )
    else:
        result = svc.create_template(name, description=description, category=category)
    return _to_mcp_response(result)


def add_template_task_impl(
    store: Any,
    template_id: int,
    title: str,
    *,
    description: str | None = None,
    priority: str = "normal",
    estimated_hours: float | None = None,
) -> dict[str, Any]:
    from tasklistctl.services.templates import TemplateService

    result = TemplateService(store).add_template_task(
        template_id,
        title,
        description=description,
        priority=priority,
        estimated_hours=estimated_hours,
    )
    return _to_mcp_response(result)


def get_template_impl(store: Any, template_id: int) -> dict[str, Any]:
    from tasklistctl.services.templates import TemplateService

    return _to_mcp_response(TemplateService(store).get_template(template_id))


def list_templates_impl(store: Any, *, category: str | None = None) -> dict[str, Any]:
    from tasklistctl.services.templates import TemplateService

    return _to_mcp_response(TemplateService(store).list_templates(category=category))


def apply_template_impl(
    store: Any,
    template_id: int,
    list_name: str,
    *,
    list_description: str | None = None,
    parent_list_id: int | None = None,
    parameters: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Instantiate a template as a new list, filling ``{{name}}`` placeholders."""
    from tasklistctl.services.templates import TemplateService

    result = TemplateService(store).apply_template(
        template_id,
        list_name,
        list_description=list_description,
        parent_list_id=parent_list_id,
        parameters=parameters,
    )
    return _to_mcp_response(result)


def delete_template_impl(store: Any, template_id: int) -> dict[str, Any]:
    from tasklistctl.services.templates import TemplateService

    return _to_mcp_response(TemplateService(store).delete_template(template_id))


# ---------------------------------------------------------------------------
# Tag tools
# ---------------------------------------------------------------------------


def create_tag_impl(
    store: Any, name: str, *, color: str | None = None, parent_id: int | None = None
) -> dict[str, Any]:
    from tasklistctl.services.tags import TagService

    return _to_mcp_response(TagService(store).create_tag(name, color=color, parent_id=parent_id))


def get_tag_impl(store: Any, tag_id: int) -> dict[str, Any]:
    from tasklistctl.services.tags import TagService

    return _to_mcp_response(TagService(store).get_tag(tag_id))


def list_tags_impl(store: Any) -> dict[str, Any]:
    from tasklistctl.services.tags import TagService

    return _to_mcp_response(TagService(store).list_tags())


def delete_tag_impl(store: Any, tag_id: int) -> dict[str, Any]:
    from tasklistctl.services.tags import TagService

    return _to_mcp_response(TagService(store).delete_tag(tag_id))


def add_tag_impl(store: Any, kind: str, entity_id: int, tag_id: int) -> dict[str, Any]:
    from tasklistctl.services.tags import TagService

    svc = TagService(store)
    if kind == "task":
        return _to_mcp_response(svc.add_tag_to_task(entity_id, tag_id))
    if kind == "list":
        return _to_mcp_response(svc.add_tag_to_list(entity_id, tag_id))
    return _bad_kind("add_tag", kind)


def remove_tag_impl(store: Any, kind: str, entity_id: int, tag_id: int) -> dict[str, Any]:
    from tasklistctl.services.tags import TagService

    svc = TagService(store)
    if kind == "task":
        return _to_mcp_response(svc.remove_tag_from_task(entity_id, tag_id))
    if kind == "list":
        return _to_mcp_response(svc.remove_tag_from_list(entity_id, tag_id))
    return _bad_kind("remove_tag", kind)


def get_tags_impl(store: Any, kind: str, entity_id: int) -> dict[str, Any]:
    from tasklistctl.services.tags import TagService

    svc = TagService(store)
    if kind == "task":
        return _to_mcp_response(svc.get_task_tags(entity_id))
    if kind == "list":
        return _to_mcp_response(svc.get_list_tags(entity_id))
    return _bad_kind("get_tags", kind)


# ---------------------------------------------------------------------------
# Attribute tools
# ---------------------------------------------------------------------------


def create_attribute_definition_impl(
    store: Any,
    name: str,
    attr_type: str,
    *,
    is_required: bool = False,
    default_value: str | None = None,
    validation_rules: dict[str, Any] | None = None,
) -> dict[str, Any]:
    from tasklistctl.services.attributes import AttributeService

    result = AttributeService(store).create_attribute_definition(
        name,
        attr_type,
        is_required=is_required,
        default_value=default_value,
        validation_rules=validation_rules,
    )
    return _to_mcp_response(result)


def list_attribute_definitions_impl(store: Any) -> dict[str, Any]:
    from tasklistctl.services.attributes import AttributeService

    return _to_mcp_response(AttributeService(store).list_attribute_definitions())


def get_attribute_definition_impl(store: Any, definition_id: int) -> dict[str, Any]:
    from tasklistctl.services.attributes import AttributeService

    return _to_mcp_response(AttributeService(store).get_attribute_definition(definition_id))


def delete_attribute_definition_impl(store: Any, definition_id: int) -> dict[str, Any]:
    """Delete a definition together with every value stored against it."""
    from tasklistctl.services.attributes import AttributeService

    return _to_mcp_response(AttributeService(store).delete_attribute_definition(definition_id))


def set_attribute_impl(
    store: Any, kind: str, entity_id: int, definition_id: int, value: str | None
) -> dict[str, Any]:
    """Validate *value* against the definition and store it on the entity."""
    from tasklistctl.services.attributes import AttributeService

    svc = AttributeService(store)
    if kind == "task":
        return _to_mcp_response(svc.set_task_attribute(entity_id, definition_id, value))
    if kind == "list":
        return _to_mcp_response(svc.set_list_attribute(entity_id, definition_id, value))
    return _bad_kind("set_attribute", kind)


def get_attributes_impl(store: Any, kind: str, entity_id: int) -> dict[str, Any]:
    from tasklistctl.services.attributes import AttributeService

    svc = AttributeService(store)
    if kind == "task":
        return _to_mcp_response(svc.get_task_attributes(entity_id))
    if kind == "list":
        return _to_mcp_response(svc.get_list_attributes(entity_id))
    return _bad_kind("get_attributes", kind)


def remove_attribute_impl(
    store: Any, kind: str, entity_id: int, definition_id: int
) -> dict[str, Any]:
    from tasklistctl.services.attributes import AttributeService

    svc = AttributeService(store)
    if kind == "task":
        return _to_mcp_response(svc.remove_task_attribute(entity_id, definition_id))
    if kind == "list":
        return _to_mcp_response(svc.remove_list_attribute(entity_id, definition_id))
    return _bad_kind("remove_attribute", kind)


# ---------------------------------------------------------------------------
# Search tools
# ---------------------------------------------------------------------------


def search_tasks_impl(store: Any, criteria: dict[str, Any] | None = None) -> dict[str, Any]:
    """Search tasks; *criteria* uses the SearchFilter field names."""
    from tasklistctl.services.search import SearchService

    return _to_mcp_response(SearchService(store).search_tasks(criteria))


def search_lists_impl(store: Any, criteria: dict[str, Any] | None = None) -> dict[str, Any]:
    from tasklistctl.services.search import SearchService

    return _to_mcp_response(SearchService(store).search_lists(criteria))


def search_suggestions_impl(
    store: Any, partial: str, *, limit: int | None = None
) -> dict[str, Any]:
    from tasklistctl.services.search import SearchService

    return _to_mcp_response(SearchService(store).get_search_suggestions(partial, limit=limit))


def task_count_by_status_impl(store: Any, *, list_id: int | None = None) -> dict[str, Any]:
    from tasklistctl.services.search import SearchService

    return _to_mcp_response(SearchService(store).get_task_count_by_status(list_id=list_id))


def most_used_tags_impl(store: Any, *, limit: int = 20) -> dict[str, Any]:
    from tasklistctl.services.search import SearchService

    return _to_mcp_response(SearchService(store).get_most_used_tags(limit=limit))


def task_analytics_impl(
    store: Any, *, list_id: int | None = None, max_tags: int = 10
) -> dict[str, Any]:
    from tasklistctl.services.search import SearchService

    result = SearchService(store).get_task_analytics(list_id=list_id, max_tags=max_tags)
    return _to_mcp_response(result)


def register_tools(server: Any, store: Any) -> None:
    """Register every MCP tool on the FastMCP server."""

    @server.tool()  # type: ignore[untyped-decorator]
    def create_list(
        name: str, description: str | None = None, parent_id: int | None = None
    ) -> dict[str, Any]:
        """Create a task list, optionally nested under a parent list."""
        return create_list_impl(store, name, description=description, parent_id=parent_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def get_list(list_id: int) -> dict[str, Any]:
        """Get a list with its path and counts."""
        return get_list_impl(store, list_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def update_list(list_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Update a list's name, description or parent_list_id."""
        return update_list_impl(store, list_id, changes=changes)

    @server.tool()  # type: ignore[untyped-decorator]
    def delete_list(list_id: int, cascade: bool = False) -> dict[str, Any]:
        """Delete a list; cascade also deletes its descendants."""
        return delete_list_impl(store, list_id, cascade=cascade)

    @server.tool()  # type: ignore[untyped-decorator]
    def get_all_lists(hierarchical: bool = False) -> dict[str, Any]:
        """All live lists, flat or nested."""
        return get_all_lists_impl(store, hierarchical=hierarchical)

    @server.tool()  # type: ignore[untyped-decorator]
    def move_task(task_id: int, target_list_id: int | None = None) -> dict[str, Any]:
        """Move a task to another list (or to no list)."""
        return move_task_impl(store, task_id, target_list_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def create_task(
        title: str,
        list_id: int,
        description: str | None = None,
        status: str = "pending",
        priority: str = "normal",
        due_date: str | None = None,
        estimated_hours: float | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Create a task in a list."""
        return create_task_impl(
            store,
            title,
            list_id,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            estimated_hours=estimated_hours,
            notes=notes,
        )

    @server.tool()  # type: ignore[untyped-decorator]
    def get_task(task_id: int) -> dict[str, Any]:
        """Get a task with its list name and tags."""
        return get_task_impl(store, task_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def update_task(task_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Update any subset of a task's fields."""
        return update_task_impl(store, task_id, changes=changes)

    @server.tool()  # type: ignore[untyped-decorator]
    def start_task(task_id: int) -> dict[str, Any]:
        """Mark a task in progress; the list's other active task is paused."""
        return start_task_impl(store, task_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def complete_task(task_id: int) -> dict[str, Any]:
        """Mark a task completed."""
        return complete_task_impl(store, task_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def delete_task(task_id: int) -> dict[str, Any]:
        """Delete a task."""
        return delete_task_impl(store, task_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def list_tasks(
        list_id: int | None = None,
        status: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> dict[str, Any]:
        """Page through live tasks, newest first."""
        return list_tasks_impl(store, list_id=list_id, status=status, limit=limit, offset=offset)

    @server.tool()  # type: ignore[untyped-decorator]
    def create_template(
        name: str,
        description: str | None = None,
        category: str | None = None,
        from_list_id: int | None = None,
    ) -> dict[str, Any]:
        """Create a template, optionally from an existing list's tasks."""
        return create_template_impl(
            store, name, description=description, category=category, from_list_id=from_list_id
        )

    @server.tool()  # type: ignore[untyped-decorator]
    def add_template_task(
        template_id: int,
        title: str,
        description: str | None = None,
        priority: str = "normal",
        estimated_hours: float | None = None,
    ) -> dict[str, Any]:
        """Append a step to a template."""
        return add_template_task_impl(
            store,
            template_id,
            title,
            description=description,
            priority=priority,
            estimated_hours=estimated_hours,
        )

    @server.tool()  # type: ignore[untyped-decorator]
    def get_template(template_id: int) -> dict[str, Any]:
        """Get a template with its ordered steps and placeholders."""
        return get_template_impl(store, template_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def list_templates(category: str | None = None) -> dict[str, Any]:
        """List templates, optionally by category."""
        return list_templates_impl(store, category=category)

    @server.tool()  # type: ignore[untyped-decorator]
    def apply_template(
        template_id: int,
        list_name: str,
        list_description: str | None = None,
        parent_list_id: int | None = None,
        parameters: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Create a new list from a template."""
        return apply_template_impl(
            store,
            template_id,
            list_name,
            list_description=list_description,
            parent_list_id=parent_list_id,
            parameters=parameters,
        )

    @server.tool()  # type: ignore[untyped-decorator]
    def delete_template(template_id: int) -> dict[str, Any]:
        """Delete a template."""
        return delete_template_impl(store, template_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def create_tag(
        name: str, color: str | None = None, parent_id: int | None = None
    ) -> dict[str, Any]:
        """Create a tag, optionally under a parent tag."""
        return create_tag_impl(store, name, color=color, parent_id=parent_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def get_tag(tag_id: int) -> dict[str, Any]:
        """One tag with its path."""
        return get_tag_impl(store, tag_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def list_tags() -> dict[str, Any]:
        """All tags with their paths and usage counts."""
        return list_tags_impl(store)

    @server.tool()  # type: ignore[untyped-decorator]
    def delete_tag(tag_id: int) -> dict[str, Any]:
        """Delete a tag and its associations."""
        return delete_tag_impl(store, tag_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def add_tag(kind: str, entity_id: int, tag_id: int) -> dict[str, Any]:
        """Attach a tag to a task or list (kind: task|list)."""
        return add_tag_impl(store, kind, entity_id, tag_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def remove_tag(kind: str, entity_id: int, tag_id: int) -> dict[str, Any]:
        """Detach a tag from a task or list (kind: task|list)."""
        return remove_tag_impl(store, kind, entity_id, tag_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def get_tags(kind: str, entity_id: int) -> dict[str, Any]:
        """Tags on a task or list (kind: task|list)."""
        return get_tags_impl(store, kind, entity_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def create_attribute_definition(
        name: str,
        attr_type: str,
        is_required: bool = False,
        default_value: str | None = None,
        validation_rules: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Define a typed custom attribute."""
        return create_attribute_definition_impl(
            store,
            name,
            attr_type,
            is_required=is_required,
            default_value=default_value,
            validation_rules=validation_rules,
        )

    @server.tool()  # type: ignore[untyped-decorator]
    def list_attribute_definitions() -> dict[str, Any]:
        """All attribute definitions."""
        return list_attribute_definitions_impl(store)

    @server.tool()  # type: ignore[untyped-decorator]
    def get_attribute_definition(definition_id: int) -> dict[str, Any]:
        """One attribute definition."""
        return get_attribute_definition_impl(store, definition_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def delete_attribute_definition(definition_id: int) -> dict[str, Any]:
        """Delete an attribute definition and every value set against it."""
        return delete_attribute_definition_impl(store, definition_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def set_attribute(
        kind: str, entity_id: int, definition_id: int, value: str | None = None
    ) -> dict[str, Any]:
        """Set an attribute value on a task or list (kind: task|list)."""
        return set_attribute_impl(store, kind, entity_id, definition_id, value)

    @server.tool()  # type: ignore[untyped-decorator]
    def get_attributes(kind: str, entity_id: int) -> dict[str, Any]:
        """Attribute values on a task or list (kind: task|list)."""
        return get_attributes_impl(store, kind, entity_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def remove_attribute(kind: str, entity_id: int, definition_id: int) -> dict[str, Any]:
        """Remove an attribute value from a task or list (kind: task|list)."""
        return remove_attribute_impl(store, kind, entity_id, definition_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def search_tasks(criteria: dict[str, Any] | None = None) -> dict[str, Any]:
        """Search tasks by text, status, priority, list, tags, attributes and dates."""
        return search_tasks_impl(store, criteria)

    @server.tool()  # type: ignore[untyped-decorator]
    def search_lists(criteria: dict[str, Any] | None = None) -> dict[str, Any]:
        """Search lists by text, tags and attributes."""
        return search_lists_impl(store, criteria)

    @server.tool()  # type: ignore[untyped-decorator]
    def search_suggestions(partial: str, limit: int | None = None) -> dict[str, Any]:
        """Complete a partial term from task titles, list names and tag names."""
        return search_suggestions_impl(store, partial, limit=limit)

    @server.tool()  # type: ignore[untyped-decorator]
    def task_count_by_status(list_id: int | None = None) -> dict[str, Any]:
        """Live task counts per status, optionally within one list."""
        return task_count_by_status_impl(store, list_id=list_id)

    @server.tool()  # type: ignore[untyped-decorator]
    def most_used_tags(limit: int = 20) -> dict[str, Any]:
        """Tags ordered by how many live tasks and lists carry them."""
        return most_used_tags_impl(store, limit=limit)

    @server.tool()  # type: ignore[untyped-decorator]
    def task_analytics(list_id: int | None = None, max_tags: int = 10) -> dict[str, Any]:
        """Status counts, completion rate and top tags."""
        return task_analytics_impl(store, list_id=list_id, max_tags=max_tags)
