"""Tyr CLI -- AI-assisted STRIDE threat modeling.

Entry point for the ``tyr`` command-line tool. Registers all subcommands
under a single Click group.

Commands:
    analyze     -- Threat model one architecture, IaC or API document.
    scan        -- Threat model every matching file in a directory.
    interactive -- Chat about threats with the configured model.

Usage::

    tyr analyze architecture.md
    tyr analyze main.tf --format json --output threats.json
    tyr --provider ollama scan ./infra --pattern '*.tf'
    tyr interactive --context architecture.md

The backend is selected with ``AI_PROVIDER`` (``claude`` or ``ollama``) or
``--provider``.
"""

from __future__ import annotations

import click

from tyr import __version__
from tyr.cli.analyze_cmd import analyze_command
from tyr.cli.interactive_cmd import interactive_command
from tyr.cli.runtime import CliSettings
from tyr.cli.scan_cmd import scan_command
from tyr.config import ProviderKind
from tyr.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="tyr")
@click.option(
    "--provider",
    type=click.Choice([k.value for k in ProviderKind], case_sensitive=False),
    default=None,
    help="Backend to use (overrides AI_PROVIDER).",
)
@click.option(
    "--model",
    default=None,
    help="Model name for the selected backend.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Log debug output to stderr.",
)
@click.pass_context
def cli(ctx: click.Context, provider: str | None, model: str | None, verbose: bool) -> None:
    """Tyr: AI-assisted STRIDE threat modeling.

    Analyze architecture descriptions, Terraform, Kubernetes manifests and
    API specifications for Spoofing, Tampering, Repudiation, Information
    Disclosure, Denial of Service and Elevation of Privilege threats.
    """
    setup_logging("DEBUG" if verbose else "WARNING")
    ctx.obj = CliSettings(provider=provider, model=model, verbose=verbose)


# Register all subcommands
cli.add_command(analyze_command)
cli.add_command(scan_command)
cli.add_command(interactive_command)
