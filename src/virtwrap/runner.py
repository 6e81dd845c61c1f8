"""Process execution for virtwrap."""

import shlex
import subprocess
from typing import Sequence

import click

from .logging import logger
from .models import ProcessResult

COMMAND_NOT_FOUND = 127


class ProcessRunner:
    """
    Runs external commands synchronously.

    ``run`` is for commands with side effects: it echoes the command line and,
    in dry-run mode, skips execution and reports success. ``capture`` is for
    read-only queries whose output is parsed; those always execute.
    """

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    @staticmethod
    def format_command(command: Sequence[str]) -> str:
        return " ".join(shlex.quote(str(part)) for part in command)

    def run(self, command: Sequence[str]) -> int:
        """Run ``command`` and return its exit status unchanged."""
        line = self.format_command(command)
        if self.dry_run:
            click.echo(f"[dry-run] {line}")
            return 0

        click.echo(f"+ {line}")
        try:
            completed = subprocess.run(list(command), check=False)
        except FileNotFoundError:
            logger.error(f"Command not found: {command[0]}", command=line)
            return COMMAND_NOT_FOUND
        return completed.returncode

    def capture(self, command: Sequence[str]) -> ProcessResult:
        """Run a read-only query and return its text output."""
        line = self.format_command(command)
        logger.debug(f"Querying: {line}", command=line)
        try:
            result = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.error(f"Command not found: {command[0]}", command=line)
            return ProcessResult(
                returncode=COMMAND_NOT_FOUND,
                stdout="",
                stderr=f"{command[0]}: command not found",
            )

        if result.returncode != 0:
            logger.debug(
                f"Query exited with status {result.returncode}: {result.stderr.strip()}",
                command=line,
                returncode=result.returncode,
            )
        return ProcessResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
