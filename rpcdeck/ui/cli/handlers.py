"""
Command handlers for CLI.

Each handler receives the console, the wired Dashboard and the split command
line. Slots are addressed by 1-based position or by a unique id prefix.
"""
from __future__ import annotations

import asyncio
import json
from typing import List, Optional

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.json import JSON
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rpcdeck.abstractions.dto.slots import ExecutionState, ExecutionStatus, InvocationSlot
from rpcdeck.api.di.composition import Dashboard
from rpcdeck.domain.errors import PersistenceError
from rpcdeck.infrastructure.catalog.registry import MethodRegistry
from rpcdeck.settings.interfaces import SettingsRepository

_STATUS_STYLE = {
    ExecutionStatus.IDLE: "muted",
    ExecutionStatus.PENDING: "pending",
    ExecutionStatus.SUCCEEDED: "success",
    ExecutionStatus.FAILED: "error",
}


def show_help(console: Console) -> None:
    """Print help panel."""
    console.print(
        Panel(
            "Commands\n"
            "/slots                      Show the dashboard\n"
            "/methods                    List the method catalog\n"
            "/add [method]               Append a slot (unconfigured when no method given)\n"
            "/set <slot> <method>        Select the method of a slot ('-' to unset)\n"
            "/remove <slot>              Remove a slot\n"
            "/move <slot> <to>           Move a slot to the position of another\n"
            "/param <slot> <name> <val>  Set a parameter value without running\n"
            "/run <slot>                 Prompt for parameters and execute the slot\n"
            "/runall                     Execute every configured slot concurrently\n"
            "/loadall                    Replace the dashboard with every known method\n"
            "/reset                      Restore the default dashboard\n"
            "/clearall                   Remove every slot\n"
            "/config                     Show endpoint and storage configuration\n"
            "/prefs                      Show persisted preferences\n"
            "/theme                      Toggle theme (dark/light)\n"
            "/clear                      Clear the screen\n"
            "/exit                       Exit\n\n"
            "<slot> is a position (1, 2, ...) or an id prefix.",
            title="Help",
            box=ROUNDED,
        )
    )


# ---------- Rendering ----------

def list_methods(console: Console, registry: MethodRegistry) -> None:
    """Render one table per catalog category."""
    for category in registry.categories:
        table = Table(title=category.title, box=ROUNDED)
        table.add_column("Name", no_wrap=True)
        table.add_column("Label")
        table.add_column("Params")
        table.add_column("Description")
        for name, descriptor in category.methods.items():
            params = ", ".join(f"{p.name}:{p.type}" for p in descriptor.params)
            table.add_row(name, descriptor.label, params or "-", descriptor.description or "-")
        console.print(table)


def render_slot(index: int, slot: InvocationSlot, registry: MethodRegistry, state: ExecutionState, params: dict) -> Panel:
    descriptor = registry.resolve(slot.method_name)
    if descriptor is None:
        return Panel(
            Text("Select method...", style="muted"),
            title=f"{index}. (unconfigured)",
            subtitle=slot.id[:8],
            box=ROUNDED,
        )

    parts: List = []
    if descriptor.description:
        parts.append(Text(descriptor.description, style="muted"))
    for spec in descriptor.params:
        value = params.get(spec.name)
        line = Text(f"{spec.name}: ")
        line.append(value if value else spec.placeholder, style="primary" if value else "muted")
        parts.append(line)

    parts.append(Text(state.status.value, style=_STATUS_STYLE[state.status]))
    if state.status is ExecutionStatus.SUCCEEDED:
        parts.append(JSON.from_data(state.result, indent=2))
    elif state.status is ExecutionStatus.FAILED:
        parts.append(Text(state.message or "", style="error"))

    return Panel(
        Group(*parts),
        title=f"{index}. {descriptor.label} [muted]({descriptor.name})[/muted]",
        subtitle=slot.id[:8],
        box=ROUNDED,
    )


def show_slots(console: Console, dash: Dashboard) -> None:
    """Render every slot as a panel, in dashboard order."""
    slots = dash.slots.slots
    if not slots:
        console.print("[muted]No slots. Use /add, /loadall or /reset.[/muted]")
        return
    for i, slot in enumerate(slots, start=1):
        console.print(render_slot(i, slot, dash.registry, dash.board.state(slot.id), dash.board.params(slot.id)))


def show_config(console: Console, dash: Dashboard) -> None:
    """Display current endpoint and storage configuration."""
    content = (
        f"RPC URL: {dash.config.RPC_URL}\n"
        f"Settings DB: {getattr(dash.settings, 'db_path', '-')}\n"
        f"Log level: {dash.config.LOG_LEVEL}\n"
        f"Methods: {len(dash.registry)}\n"
        f"Slots: {len(dash.slots.slots)}\n"
    )
    console.print(Panel(content, title="Configuration", box=ROUNDED))


# ---------- Slot addressing ----------

def resolve_slot(dash: Dashboard, token: str) -> Optional[InvocationSlot]:
    """Slot by 1-based position or unique id prefix."""
    slots = dash.slots.slots
    token = (token or "").strip()
    if not token:
        return None
    if token.isdigit():
        i = int(token)
        return slots[i - 1] if 1 <= i <= len(slots) else None
    matches = [s for s in slots if s.id.startswith(token)]
    return matches[0] if len(matches) == 1 else None


def _slot_or_warn(console: Console, dash: Dashboard, token: str) -> Optional[InvocationSlot]:
    slot = resolve_slot(dash, token)
    if slot is None:
        console.print(f"[warning]No slot '{escape(token)}'.[/warning]")
    return slot


def _after_mutation(console: Console, dash: Dashboard) -> None:
    dash.board.sync(dash.slots.slots)
    if dash.slots.last_persist_error:
        console.print(f"[warning]Layout not saved: {escape(dash.slots.last_persist_error)}[/warning]")


def _method_or_warn(console: Console, dash: Dashboard, name: str) -> bool:
    if name in dash.registry:
        return True
    console.print(f"[warning]Unknown method '{escape(name)}'. See /methods.[/warning]")
    return False


# ---------- Mutations ----------

def handle_add(console: Console, dash: Dashboard, parts: List[str]) -> None:
    """Handle /add command."""
    name = parts[1].strip() if len(parts) > 1 else None
    if name and not _method_or_warn(console, dash, name):
        return
    dash.slots.add(name)
    _after_mutation(console, dash)
    show_slots(console, dash)


def handle_set(console: Console, dash: Dashboard, parts: List[str]) -> None:
    """Handle /set command."""
    if len(parts) < 3:
        print("Usage: /set <slot> <method|->")
        return
    slot = _slot_or_warn(console, dash, parts[1])
    if slot is None:
        return
    name = parts[2].strip()
    if name == "-":
        name = ""
    elif not _method_or_warn(console, dash, name):
        return
    dash.slots.set_method(slot.id, name)
    _after_mutation(console, dash)
    show_slots(console, dash)


def handle_remove(console: Console, dash: Dashboard, parts: List[str]) -> None:
    """Handle /remove command."""
    if len(parts) < 2:
        print("Usage: /remove <slot>")
        return
    slot = _slot_or_warn(console, dash, parts[1])
    if slot is None:
        return
    dash.slots.remove(slot.id)
    _after_mutation(console, dash)
    show_slots(console, dash)


def handle_move(console: Console, dash: Dashboard, parts: List[str]) -> None:
    """Handle /move command."""
    if len(parts) < 3:
        print("Usage: /move <slot> <to>")
        return
    source = _slot_or_warn(console, dash, parts[1])
    target = _slot_or_warn(console, dash, parts[2])
    if source is None or target is None:
        return
    dash.slots.reorder(source.id, target.id)
    _after_mutation(console, dash)
    show_slots(console, dash)


def handle_bulk(console: Console, dash: Dashboard, command: str) -> None:
    """Handle /loadall, /reset and /clearall."""
    if command == "/loadall":
        dash.slots.load_all(dash.registry.names())
    elif command == "/reset":
        dash.slots.reset()
    else:
        dash.slots.clear()
    _after_mutation(console, dash)
    show_slots(console, dash)


# ---------- Execution ----------

def handle_param(console: Console, dash: Dashboard, parts: List[str]) -> None:
    """Handle /param command."""
    if len(parts) < 3:
        print("Usage: /param <slot> <name> <value>")
        return
    slot = _slot_or_warn(console, dash, parts[1])
    if slot is None:
        return
    descriptor = dash.registry.resolve(slot.method_name)
    if descriptor is None:
        console.print("[warning]Select a method for this slot first.[/warning]")
        return
    name = parts[2].strip()
    if name not in {p.name for p in descriptor.params}:
        console.print(f"[warning]{descriptor.name} has no parameter '{escape(name)}'.[/warning]")
        return
    dash.board.set_param(slot.id, name, parts[3] if len(parts) > 3 else "")


async def handle_run(console: Console, session, dash: Dashboard, parts: List[str]) -> Optional[asyncio.Task]:
    """
    Handle /run command: prompt for each parameter, then start the slot.

    Returns as soon as the call is in flight; the slot shows Pending in
    /slots until the endpoint answers.
    """
    if len(parts) < 2:
        print("Usage: /run <slot>")
        return None
    slot = _slot_or_warn(console, dash, parts[1])
    if slot is None:
        return None
    descriptor = dash.registry.resolve(slot.method_name)
    if descriptor is None:
        console.print("[warning]Select a method for this slot first.[/warning]")
        return None

    current = dash.board.params(slot.id)
    for spec in descriptor.params:
        hint = f" ({spec.placeholder})" if spec.placeholder else ""
        value = await session.prompt_async(f"{spec.name}{hint}: ", default=current.get(spec.name, ""))
        dash.board.set_param(slot.id, spec.name, value)

    console.print(f"[pending]Executing {descriptor.name}... (see /slots)[/pending]")
    return dash.board.schedule(slot, dash.registry)


def handle_runall(console: Console, dash: Dashboard) -> List[asyncio.Task]:
    """Handle /runall command: start every configured slot without waiting."""
    tasks = dash.board.schedule_many(dash.slots.slots, dash.registry)
    if not tasks:
        console.print("[warning]No configured slots to run.[/warning]")
        return tasks
    console.print(f"[pending]Executing {len(tasks)} slot(s)... (see /slots)[/pending]")
    return tasks


def method_words(registry: MethodRegistry) -> List[str]:
    """Completion words for method names, in catalog order."""
    return [option.value for option in registry.method_options]


# ---------- Shell ----------

def handle_prefs(console: Console, repo: SettingsRepository) -> None:
    """Handle /prefs command."""
    try:
        prefs = repo.all_prefs()
    except PersistenceError as e:
        console.print(f"[warning]Preferences unavailable: {escape(str(e))}[/warning]")
        return
    console.print(Panel(Text(json.dumps(prefs, ensure_ascii=False, indent=2)), title="Preferences", box=ROUNDED))


def handle_theme(console: Console, repo: SettingsRepository, theme: str) -> str:
    """Handle /theme command."""
    new_theme = "light" if theme == "dark" else "dark"
    try:
        repo.set_pref("cli_theme", new_theme)
    except PersistenceError as e:
        console.print(f"[warning]Theme not saved: {escape(str(e))}[/warning]")
    return new_theme


def handle_clear(console) -> None:
    """Handle /clear command."""
    console.clear()


def handle_exit(console, dash: Dashboard) -> None:
    """Handle /exit command."""
    if dash.board.in_flight:
        console.print(f"[muted]Abandoning {dash.board.in_flight} call(s) still in flight.[/muted]")
    console.print("\n[warning]Exiting...[/warning]")
