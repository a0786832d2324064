"""Startup wiring shared by the CLI commands.

The global options are stored on the click context by the ``tyr`` group;
each command turns them into a ``ThreatModeler`` only when it actually
needs a backend, so ``--help`` and input validation work without any
environment configured.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

import click

from tyr.cli.output import print_error
from tyr.config import ProviderConfig
from tyr.core.engine import ThreatModeler
from tyr.exceptions import AuthError, ConfigurationError

# Exit codes shared by all commands.
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_STARTUP = 2


@dataclass(frozen=True)
class CliSettings:
    """Global options given before the subcommand."""

    provider: str | None = None
    model: str | None = None
    verbose: bool = False


def load_config(settings: CliSettings) -> ProviderConfig:
    """Read the environment and apply ``--provider``/``--model``.

    Raises:
        ConfigurationError: If no usable provider is configured.
    """
    environ = dict(os.environ)
    if settings.provider:
        environ["AI_PROVIDER"] = settings.provider
    config = ProviderConfig.from_env(environ)
    return config.with_model(settings.model or None)


def build_modeler(ctx: click.Context, **kwargs: object) -> ThreatModeler:
    """Create the modeler or exit with status 2 on a startup error."""
    settings = ctx.find_object(CliSettings) or CliSettings()
    try:
        return ThreatModeler.from_config(load_config(settings), **kwargs)
    except ConfigurationError as exc:
        print_error(str(exc), hint="Set AI_PROVIDER to 'claude' or 'ollama', "
                                   "or pass --provider.")
    except AuthError as exc:
        print_error(str(exc), hint="Export a valid ANTHROPIC_API_KEY.")
    sys.exit(EXIT_STARTUP)
