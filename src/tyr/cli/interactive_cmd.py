"""``tyr interactive`` -- Chat about threats with the configured model.

Commands inside the session:
    help         -- Show the available commands.
    clear        -- Forget the conversation (the --context file is kept).
    exit / quit  -- Leave the session.

Exit Codes:
    0 -- Session ended normally.
    1 -- The backend could not be reached at startup.
    2 -- Startup failed (provider configuration or credentials).
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from tyr.cli.output import console, err_console, print_error
from tyr.cli.runtime import EXIT_FAILURE, EXIT_OK, EXIT_STARTUP, build_modeler
from tyr.core.engine import ThreatModeler
from tyr.exceptions import AnalysisError, AuthError, ProviderError

_HELP_TEXT = """\
Ask any question about threats, mitigations or secure design.

Commands:
  help         Show this help
  clear        Start a fresh conversation
  exit, quit   Leave the session"""

_EXIT_WORDS = frozenset({"exit", "quit"})


def _start_session(modeler: ThreatModeler, context: str | None, label: str) -> None:
    session = modeler.new_session()
    if context:
        session.load_context(context, label=label)


@click.command("interactive")
@click.option(
    "--context",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="File to load as background for the conversation.",
)
@click.pass_context
def interactive_command(ctx: click.Context, context: str | None) -> None:
    """Start an interactive threat modeling chat."""
    context_text: str | None = None
    label = "context"
    if context is not None:
        path = Path(context)
        try:
            context_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print_error(f"Cannot read {path}: {exc}")
            sys.exit(EXIT_FAILURE)
        if not context_text.strip():
            print_error(f"Context file {path} is empty")
            sys.exit(EXIT_FAILURE)
        label = f"file {path.name}"

    modeler = build_modeler(ctx)
    try:
        asyncio.run(modeler.check_available())
    except AuthError as exc:
        print_error(str(exc))
        sys.exit(EXIT_STARTUP)
    except ProviderError as exc:
        print_error(str(exc))
        sys.exit(EXIT_FAILURE)

    _start_session(modeler, context_text, label)
    console.print(Panel(
        Text.assemble(
            ("Tyr interactive threat modeling", "bold"),
            f"\nProvider: {modeler.provider.name}",
            "\nType 'help' for commands, 'exit' to leave.",
        ),
    ))
    if context_text:
        console.print(Text(f"Loaded {label} into the conversation.", style="dim"))

    while True:
        try:
            query = click.prompt("You", prompt_suffix="> ", default="",
                                 show_default=False)
        except click.Abort:
            break
        command = query.strip().lower()
        if not command:
            continue
        if command in _EXIT_WORDS:
            break
        if command == "help":
            console.print(Text(_HELP_TEXT))
            continue
        if command == "clear":
            _start_session(modeler, context_text, label)
            console.print(Text("Conversation cleared.", style="dim"))
            continue

        try:
            with err_console.status("Thinking..."):
                reply = modeler.interactive_ask(query)
        except AuthError as exc:
            print_error(str(exc))
            sys.exit(EXIT_STARTUP)
        except AnalysisError as exc:
            print_error(str(exc), hint="Your question was kept; try again.")
            continue
        console.print(Panel(Markdown(reply), title="Tyr", title_align="left"))

    console.print(Text("Goodbye.", style="dim"))
    sys.exit(EXIT_OK)
