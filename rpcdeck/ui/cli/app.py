"""
Interactive dashboard for a JSON-RPC endpoint (Anvil / Ethereum dev nodes).

Features:
- Ordered dashboard of invocation slots, persisted across sessions
- Method catalog with tab completion on method names
- Per-slot execution with pending/success/error state and raw JSON results
- Non-blocking execution: /run and /runall return to the prompt while calls
  are in flight, so a hung endpoint only leaves its own slots Pending
- Color themes (dark/light) and rich panels for output

Commands: see /help.

Run:
  rpcdeck
  or
  python -m rpcdeck
"""

from __future__ import annotations

import asyncio
import logging

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from rich.box import ROUNDED
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from rpcdeck.api.di.composition import Dashboard, build_dashboard
from rpcdeck.config import Config
from rpcdeck.domain.errors import PersistenceError

from .console import make_console
from .handlers import (
    handle_add, handle_bulk, handle_clear, handle_exit, handle_move, handle_param,
    handle_prefs, handle_remove, handle_run, handle_runall, handle_set, handle_theme,
    list_methods, method_words, show_config, show_help, show_slots,
)

COMMANDS = [
    "/help", "/slots", "/methods", "/add", "/set", "/remove", "/move", "/param", "/run",
    "/runall", "/loadall", "/reset", "/clearall", "/config", "/prefs", "/theme", "/clear", "/exit",
]


def configure_logging(level: str, console=None) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _resolve_theme(config: Config, dash: Dashboard) -> str:
    theme = config.CLI_THEME
    if not theme:
        try:
            theme = dash.settings.get_pref("cli_theme")
        except PersistenceError:
            theme = None
    return "light" if theme in ("light", "white") else "dark"


def run(config: Config | None = None) -> None:
    """Entry point: the whole session runs on one event loop."""
    asyncio.run(repl(config or Config()))


async def repl(config: Config) -> None:
    """Main interactive loop; slot executions run as tasks beside the prompt."""
    dash = build_dashboard(config)

    theme = _resolve_theme(config, dash)
    console = make_console(theme, use_color=config.CLI_COLOR)
    configure_logging(config.LOG_LEVEL, console=console)
    session = PromptSession(history=InMemoryHistory())

    console.print(
        Panel(
            f"rpcdeck\nJSON-RPC dashboard for [accent]{escape(config.RPC_URL)}[/accent]",
            title="Welcome",
            box=ROUNDED,
        )
    )
    show_slots(console, dash)

    completer = WordCompleter(COMMANDS + method_words(dash.registry), ignore_case=True, match_middle=True)

    try:
        with patch_stdout():
            while True:
                try:
                    user_input = await session.prompt_async("> ", completer=completer)
                except (KeyboardInterrupt, EOFError):
                    console.print("\nExiting...", style="warning")
                    break

                cmd = user_input.strip()
                if not cmd:
                    continue
                parts = cmd.split(maxsplit=3)
                head = parts[0].lower()

                if head == "/help":
                    show_help(console)
                elif head == "/slots":
                    show_slots(console, dash)
                elif head == "/methods":
                    list_methods(console, dash.registry)
                elif head == "/add":
                    handle_add(console, dash, parts)
                elif head == "/set":
                    handle_set(console, dash, parts)
                elif head == "/remove":
                    handle_remove(console, dash, parts)
                elif head == "/move":
                    handle_move(console, dash, parts)
                elif head == "/param":
                    handle_param(console, dash, parts)
                elif head == "/run":
                    try:
                        await handle_run(console, session, dash, parts)
                    except KeyboardInterrupt:
                        console.print("[warning]Run cancelled.[/warning]")
                elif head == "/runall":
                    handle_runall(console, dash)
                elif head in ("/loadall", "/reset", "/clearall"):
                    handle_bulk(console, dash, head)
                elif head == "/config":
                    show_config(console, dash)
                elif head == "/prefs":
                    handle_prefs(console, dash.settings)
                elif head == "/theme":
                    theme = handle_theme(console, dash.settings, theme)
                    console = make_console(theme, use_color=config.CLI_COLOR)
                    configure_logging(config.LOG_LEVEL, console=console)
                    console.print(Panel(f"Theme switched to [accent]{theme}[/accent]", title="Theme", box=ROUNDED))
                elif head == "/clear":
                    handle_clear(console)
                elif head == "/exit":
                    handle_exit(console, dash)
                    break
                else:
                    console.print("[warning]Unknown command. Type /help.[/warning]")
    finally:
        dash.transport.close()


def main() -> None:
    run()


if __name__ == "__main__":
    main()
