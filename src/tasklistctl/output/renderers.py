"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Console; :func:`render_result`
dispatches on ``result.op`` and falls back to a key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from tasklistctl.output.console import (
    create_console,
    get_output,
    style_for_priority,
    style_for_status,
)

if TYPE_CHECKING:
    from rich.console import Console

    from tasklistctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids of listed items, else the status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    items = result.data.get("items")
    if isinstance(items, list):
        ids = [item["id"] for item in items if isinstance(item, dict) and "id" in item]
        return "\n".join(str(i) for i in ids)
    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="tl.ok"), Text(f"  {result.op}", style="tl.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="tl.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="tl.id")
    elif key in ("title", "name"):
        v = Text(str(value), style="tl.title")
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Telemetry span tree (verbose only)."""
    if not result.meta or "telemetry" not in result.meta:
        return
    console.print()
    console.print(Text("  telemetry:", style="dim"))
    _render_span(console, result.meta["telemetry"], indent=4)


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    duration = span.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    line = f"{' ' * indent}[{style}]{duration:>8.2f}ms[/{style}]  {span.get('name', '?')}"
    annotations = span.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)
    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


def _task_table(items: list[dict[str, Any]], *, verbose: bool) -> Table:
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="tl.id", no_wrap=True, justify="right")
    table.add_column("Title", style="tl.title")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("List", justify="right")
    table.add_column("Due")
    if verbose:
        table.add_column("Updated", style="dim")
    for item in items:
        status = str(item.get("status", ""))
        priority = str(item.get("priority", ""))
        row: list[Text | str] = [
            str(item["id"]),
            str(item.get("title", "")),
            Text(status, style=style_for_status(status)),
            Text(priority, style=style_for_priority(priority)),
            "" if item.get("list_id") is None else str(item["list_id"]),
            str(item.get("due_date") or ""),
        ]
        if verbose:
            row.append(str(item.get("updated_at", "")))
        table.add_row(*row)
    return table


def _simple_table(items: list[dict[str, Any]], columns: list[str]) -> Table:
    table = Table(show_header=True, pad_edge=False, expand=False)
    for col in columns:
        style = "tl.id" if col == "id" or col.endswith("_id") else None
        table.add_column(col.replace("_", " ").title(), style=style)
    for item in items:
        table.add_row(*("" if item.get(col) is None else str(item[col]) for col in columns))
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    console.print(
        Text("ERROR", style="tl.error"),
        Text(f"  {result.op}", style="tl.op"),
        Text(f" [{err.code}]" if err else ""),
        Text(" " + (err.message if err else "Unknown error")),
    )
    if verbose and err and err.detail:
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Task renderers ────────────────────────────────────────────────────


def _render_task(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "title", "status", "priority", "list_id", "list_name", "due_date"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    for key in ("estimated_hours", "completed_at", "description", "notes"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    if result.data.get("tags"):
        _field(console, "tags", ", ".join(result.data["tags"]))
    if verbose:
        _render_meta(console, result)


def _render_task_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_task_table(items, verbose=verbose))
    total = result.data.get("total")
    suffix = f" of {total}" if total is not None and total != len(items) else ""
    console.print(f"\n{len(items)}{suffix} tasks")
    if verbose:
        _render_meta(console, result)


# ── List renderers ────────────────────────────────────────────────────


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "name", "path", "parent_list_id", "depth", "task_count", "child_list_count"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    if result.data.get("description"):
        _field(console, "description", result.data["description"])
    if verbose:
        _render_meta(console, result)


def _add_branch(node: Tree, item: dict[str, Any]) -> None:
    label = Text.assemble(
        (f"{item['id']} ", "tl.id"),
        (item["name"], "tl.title"),
        (f"  ({item.get('task_count') or 0} tasks)", "dim"),
    )
    branch = node.add(label)
    for child in item.get("children") or []:
        _add_branch(branch, child)


def _render_lists(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if any(item.get("children") is not None for item in items):
        tree = Tree("lists", guide_style="dim")
        for item in items:
            _add_branch(tree, item)
        console.print(tree)
    else:
        console.print(
            _simple_table(items, ["id", "name", "path", "task_count", "child_list_count"])
        )
    console.print(f"\n{result.data.get('count', len(items))} lists")


# ── Template renderers ────────────────────────────────────────────────


def _render_template(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    lines = [f"version: {d.get('version')}"]
    if d.get("category"):
        lines.append(f"category: {d['category']}")
    if d.get("description"):
        lines.append(d["description"])
    if d.get("placeholders"):
        lines.append(f"placeholders: {', '.join(d['placeholders'])}")
    console.print(Panel("\n".join(lines), title=f"{d.get('id')}  {d.get('name')}", expand=False))
    steps = d.get("tasks") or []
    if steps:
        console.print(
            _simple_table(steps, ["order_index", "title", "priority", "estimated_hours"])
        )


def _render_templates(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_simple_table(items, ["id", "name", "category", "version", "task_count"]))
    console.print(f"\n{result.data.get('count', len(items))} templates")


# ── Tag and attribute renderers ───────────────────────────────────────


def _render_tags(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_simple_table(items, ["id", "path", "color", "usage_count"]))


def _render_definitions(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_simple_table(items, ["id", "name", "type", "is_required", "default_value"]))


def _render_values(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_simple_table(items, ["attribute_definition_id", "name", "type", "value"]))


# ── Search and analytics renderers ────────────────────────────────────


def _render_suggestions(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    for text in result.data.get("items", []):
        console.print(text)


def _render_counts(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("list_id", "total", "completion_rate", "cancellation_rate", "active"):
        if d.get(key) is not None:
            _field(console, key, d[key])
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Status")
    table.add_column("Tasks", justify="right")
    for status, count in d.get("counts", {}).items():
        table.add_row(Text(status, style=style_for_status(status)), str(count))
    console.print(table)
    top = d.get("top_tags") or d.get("items")
    if top:
        console.print(_simple_table(top, ["name", "task_count", "list_count", "usage_count"]))


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("applied_count", "pending_count", "stamped", "current", "head", "backup_path"):
        if key in result.data:
            _field(console, key, result.data[key])
    if "message" in result.data:
        _field(console, "message", result.data["message"])
    if verbose:
        for p in result.data.get("pending", []):
            console.print(f"  {p['revision']}: {p['description']}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Status line plus every data key."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    # Tasks
    "create_task": _render_task,
    "get_task": _render_task,
    "update_task": _render_task,
    "start_task": _render_task,
    "complete_task": _render_task,
    "list_tasks": _render_task_table,
    "search_tasks": _render_task_table,
    # Lists
    "create_list": _render_list,
    "get_list": _render_list,
    "update_list": _render_list,
    "apply_template": _render_list,
    "list_all_lists": _render_lists,
    "search_lists": _render_lists,
    # Templates
    "create_template": _render_template,
    "create_template_from_list": _render_template,
    "add_template_task": _render_template,
    "get_template": _render_template,
    "list_templates": _render_templates,
    # Tags and attributes
    "list_tags": _render_tags,
    "get_task_tags": _render_tags,
    "get_list_tags": _render_tags,
    "get_most_used_tags": _render_tags,
    "list_attribute_definitions": _render_definitions,
    "get_task_attributes": _render_values,
    "get_list_attributes": _render_values,
    # Search and analytics
    "get_search_suggestions": _render_suggestions,
    "get_task_count_by_status": _render_counts,
    "get_task_analytics": _render_counts,
    # Upgrade
    "upgrade": _render_upgrade,
}
