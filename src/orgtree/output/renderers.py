"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO); the caller
extracts the text via ``get_output(console)``. Renderers are dispatched by
``result.op`` in :func:`render_result`. Unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from orgtree.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from orgtree.services.result import ServiceResult


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
    """Minimal output for ``--quiet``: one id per line, or a status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if item.get("id") is not None)
    roots = result.data.get("roots")
    if isinstance(roots, list):
        return "\n".join(str(node["id"]) for node in _walk(roots))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _walk(nodes: list[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    """Pre-order over nested node dicts."""
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.get("children", [])))


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="org.ok")
    op = Text(f"  {result.op}", style="org.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="org.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="org.id")
    elif key in ("title", "name"):
        v = Text(str(value), style="org.title")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including the telemetry span tree."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _designation_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="org.id", no_wrap=True)
    table.add_column("Title", style="org.title")
    table.add_column("Level", style="org.level", justify="right")
    table.add_column("Reports To")
    if verbose:
        table.add_column("Department", style="dim")

    for item in items:
        row = [
            str(item.get("id", "")),
            str(item.get("title", "")),
            str(item.get("level", "")),
            str(item.get("reports_to") or ""),
        ]
        if verbose:
            row.append(str(item.get("department_name") or item.get("department_id") or ""))
        table.add_row(*row)
    return table


def _staff_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="org.id", no_wrap=True)
    table.add_column("Name", style="org.title")
    table.add_column("Designation")
    table.add_column("Reports To")
    if verbose:
        table.add_column("Department", style="dim")
        table.add_column("Status", style="dim")

    for item in items:
        row = [
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("designation", "")),
            str(item.get("reports_to") or ""),
        ]
        if verbose:
            row.append(str(item.get("department_name") or item.get("department_id") or ""))
            row.append(str(item.get("status", "")))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="org.error")
    op = Text(f"  {result.op}", style="org.op")
    console.print(label, op, Text(": "), msg)
    # A cycle is only actionable with its path, so show it regardless of verbosity.
    if err and err.code == "HIERARCHY_CYCLE" and err.detail.get("cycle"):
        console.print(f"  cycle: {' -> '.join(str(k) for k in err.detail['cycle'])}")
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create, delete, hire and transfer results."""
    _status_line(console, result)
    for key in ("id", "title", "name", "level", "designation", "reports_to", "department_id"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    if result.data.get("whitelisted"):
        _field(console, "whitelisted", True)
    if result.data.get("changed"):
        _field(console, "changed", ", ".join(result.data["changed"]))
    if verbose:
        _render_meta(console, result)


def _render_whitelist(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "department_id", d.get("department_id", ""))
    if d.get("name"):
        _field(console, "name", d["name"])
    whitelist = d.get("whitelist", [])
    if not whitelist:
        console.print(Text("  (no whitelist: every designation is allowed)", style="dim"))
    for title in whitelist:
        console.print(f"  - {title}")
    if verbose:
        _render_meta(console, result)


# ── Listing renderers ─────────────────────────────────────────────────


def _render_designations(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_designations and designation_options as a table."""
    items = result.data.get("items", [])
    console.print(_designation_table(items, verbose=verbose))
    console.print(f"\n{result.data.get('count', len(items))} designations")
    if verbose:
        _render_meta(console, result)


def _render_reconcile(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    items = d.get("items", [])
    if d.get("stale"):
        console.print(Text("Designations unavailable (stale); retry later.", style="org.warning"))
    else:
        console.print(_designation_table(items, verbose=verbose))
        scope = "whitelisted" if d.get("filtered") else "all, no whitelist"
        console.print(f"\n{d.get('count', len(items))} designations ({scope})")
    for created in d.get("created", []):
        console.print(f"  [org.ok]created[/org.ok] {created['title']} ({created['id']})")
    for title, reason in d.get("failed", {}).items():
        console.print(f"  [org.error]failed[/org.error] {title}: {reason}")
    if verbose:
        _render_meta(console, result)


def _render_departments(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="org.id", no_wrap=True)
    table.add_column("Name", style="org.title")
    table.add_column("Whitelist")
    for item in items:
        whitelist = item.get("designations") or []
        table.add_row(str(item.get("id", "")), str(item.get("name", "")), ", ".join(whitelist))
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} departments")


def _render_staff(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render manager_candidates and direct_reports as a table."""
    d = result.data
    manager = d.get("manager")
    if manager:
        console.print(
            Text(f"{manager['name']} ({manager['designation']})", style="org.title"),
        )
    items = d.get("items", [])
    console.print(_staff_table(items, verbose=verbose))
    console.print(f"\n{d.get('count', len(items))} staff")
    if verbose:
        _render_meta(console, result)


def _render_suggestion(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "designation", d.get("designation", ""))
    _field(console, "reports_to", d.get("reports_to") or "(top level)")
    manager = d.get("manager")
    if manager:
        _field(console, "manager_id", manager["id"])
        _field(console, "name", manager["name"])
    else:
        console.print(Text("  no suggested manager", style="dim"))


# ── Tree renderers ────────────────────────────────────────────────────


def _role_label(node: dict[str, Any]) -> Text:
    label = Text()
    label.append(str(node.get("title", "")), style="org.title")
    label.append(f"  L{node.get('level', '?')}", style="org.level")
    holders = node.get("holders") or []
    if holders:
        names = ", ".join(h["name"] for h in holders)
        label.append(f"  [{names}]", style="org.holder")
    return label


def _staff_label(node: dict[str, Any]) -> Text:
    label = Text()
    label.append(str(node.get("name", "")), style="org.title")
    if node.get("designation"):
        label.append(f"  {node['designation']}")
    label.append(f"  {node.get('id', '')}", style="org.id")
    return label


def _add_branch(
    tree: Tree,
    node: dict[str, Any],
    label: Any,
) -> None:
    """Attach *node* and its visible descendants under *tree*, iteratively."""
    stack: list[tuple[Tree, dict[str, Any]]] = [(tree, node)]
    while stack:
        parent, current = stack.pop()
        branch = parent.add(label(current))
        children = current.get("children", [])
        if not children:
            continue
        if not current.get("expanded"):
            branch.add(Text(f"+{len(children)} collapsed", style="org.collapsed"))
            continue
        # Reversed so the stack pops children in source order.
        for child in reversed(children):
            stack.append((branch, child))


def _render_tree(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    label = _role_label if result.op == "role_tree" else _staff_label
    heading = "Roles" if result.op == "role_tree" else "Staff"
    if d.get("department_id"):
        heading += f" ({d['department_id']})"
    tree = Tree(Text(heading, style="org.op"))
    for root in d.get("roots", []):
        _add_branch(tree, root, label)
    console.print(tree)
    suffix = " (stale)" if d.get("stale") else ""
    console.print(f"\n{d.get('count', 0)} nodes{suffix}")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Catalog
    "list_designations": _render_designations,
    "create_designation": _render_mutation,
    "delete_designation": _render_mutation,
    "list_departments": _render_departments,
    "create_department": _render_mutation,
    "get_whitelist": _render_whitelist,
    "set_whitelist": _render_whitelist,
    "reconcile": _render_reconcile,
    # Hierarchy
    "role_tree": _render_tree,
    "staff_tree": _render_tree,
    "direct_reports": _render_staff,
    # Staffing
    "manager_candidates": _render_staff,
    "designation_options": _render_designations,
    "suggest_manager": _render_suggestion,
    "hire": _render_mutation,
    "transfer": _render_mutation,
}
