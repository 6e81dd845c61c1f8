#!/usr/bin/env python3
"""
Command-line interface for virtwrap.

    virtwrap [--dry-run] clone <from-vm> <new-vm>
    virtwrap [--dry-run] destroy <vm-name>
    virtwrap ip <vm-name>
"""

from typing import Any, List, Optional, Sequence

import click

from .commands import registry
from .config import AppConfig, config_loader
from .context import ExecutionContext
from .exceptions import ConfigurationError
from .hooks import ExitHooks
from .logging import logger
from .runner import ProcessRunner


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load configuration, falling back to defaults on error."""
    try:
        return config_loader.load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Warning: {e}", err=True)
        return AppConfig()


def run(
    argv: Sequence[str],
    config: Optional[AppConfig] = None,
    runner: Optional[ProcessRunner] = None,
) -> int:
    """Run one invocation and return its exit code."""
    config = config or load_config()
    logger.configure(config.log_level, config.log_format)

    runner = runner or ProcessRunner()
    with ExitHooks(runner) as hooks:
        ctx = ExecutionContext(config=config, runner=runner, hooks=hooks)
        hooks.exit_code = registry.dispatch(list(argv), ctx)
    return hooks.exit_code


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": [],
    },
    add_help_option=False,
)
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(ctx: Any, argv: List[str]) -> None:
    """Clone, destroy and locate libvirt VMs."""
    ctx.exit(run(argv))


if __name__ == "__main__":
    main()
