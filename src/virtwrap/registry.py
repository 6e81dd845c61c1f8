"""
Sub-command table and dispatcher.

A command is a name bound to an action plus optional parse and validate
hooks. Parse hooks are built from click commands so each sub-command declares
its own arguments; the dispatcher itself only knows ``-h/--help`` and
``--dry-run``. Commands without a parse hook get the raw list as ``args``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import click

from .context import ExecutionContext
from .logging import logger

Params = Dict[str, Any]
Action = Callable[..., int]
Parser = Callable[[List[str]], Params]
Validator = Callable[..., None]

PROG_NAME = "virtwrap"
HELP_FLAGS = ("-h", "--help")
DRY_RUN_FLAG = "--dry-run"


@dataclass
class Command:
    """A registered sub-command."""

    name: str
    action: Action
    parse: Optional[Parser] = None
    validate: Optional[Validator] = None
    help: str = ""


class ClickParser:
    """Parse hook built from a click command's parameter declarations.

    Calling it maps the argument list to the command's keyword parameters and
    raises ``click.UsageError`` on bad input.
    """

    def __init__(self, command: click.Command) -> None:
        self.command = command
        self.info_name = f"{PROG_NAME} {command.name}"

    def __call__(self, args: List[str]) -> Params:
        ctx = self.command.make_context(self.info_name, list(args))
        return dict(ctx.params)

    def usage(self) -> str:
        return self.command.get_usage(click.Context(self.command, info_name=self.info_name))


class CommandRegistry:
    """Explicit name -> Command table."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}

    def register(self, command: Command) -> Command:
        if command.name in self._commands:
            raise ValueError(f"command already registered: {command.name}")
        self._commands[command.name] = command
        return command

    def command(
        self,
        name: str,
        parse: Optional[Parser] = None,
        validate: Optional[Validator] = None,
        help: Optional[str] = None,
    ) -> Callable[[Action], Action]:
        """Decorator registering the wrapped function as ``name``'s action."""

        def decorator(func: Action) -> Action:
            doc = (func.__doc__ or "").strip().splitlines()
            self.register(
                Command(
                    name=name,
                    action=func,
                    parse=parse,
                    validate=validate,
                    help=help if help is not None else (doc[0] if doc else ""),
                )
            )
            return func

        return decorator

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def names(self) -> List[str]:
        return sorted(self._commands)

    def usage(self) -> str:
        lines = [
            f"Usage: {PROG_NAME} [--dry-run] <command> [args...]",
            "",
            "Options:",
            "  -h, --help  Show this message and exit.",
            "  --dry-run   Print external commands instead of running them.",
            "",
            "Commands:",
        ]
        width = max((len(name) for name in self._commands), default=0)
        for name in self.names():
            lines.append(f"  {name.ljust(width)}  {self._commands[name].help}".rstrip())
        return "\n".join(lines)

    def dispatch(self, argv: Sequence[str], ctx: ExecutionContext) -> int:
        """Resolve and run a sub-command; returns the exit code."""
        if not argv:
            click.echo(self.usage(), err=True)
            return 1

        show_usage = False
        remaining: List[str] = []
        for token in argv:
            if token in HELP_FLAGS:
                show_usage = True
                break
            if token == DRY_RUN_FLAG:
                ctx.dry_run = True
                continue
            remaining.append(token)

        if show_usage:
            click.echo(self.usage())
            return 0

        command = self.get(remaining[0]) if remaining else None
        if command is None:
            if remaining:
                logger.error(f"Unknown command: {remaining[0]}")
            click.echo(self.usage(), err=True)
            return 1

        args = remaining[1:]
        params: Params = {}
        if command.parse is not None:
            try:
                params = command.parse(args)
            except click.UsageError as e:
                logger.error(e.format_message())
                usage = getattr(command.parse, "usage", None)
                if usage is not None:
                    click.echo(usage(), err=True)
                return 1
        else:
            params = {"args": args}

        if command.validate is not None:
            command.validate(ctx, **params)

        logger.debug(
            f"Running command {command.name}",
            command=command.name,
            dry_run=ctx.dry_run,
        )
        return command.action(ctx, **params)
