"""
Deferred cleanup actions for a virtwrap run.

Usage:
    with ExitHooks(runner) as hooks:
        hooks.on_exit(["rm", "-f", "/tmp/scratch.img"])
        hooks.exit_code = do_work()

On leaving the block, on every path, the registered actions run once, most
recently registered first.
"""

from __future__ import annotations

import traceback
from types import TracebackType
from typing import Any, Callable, List, Optional, Sequence, Type, Union

import click

from .exceptions import VirtWrapError
from .logging import logger
from .runner import ProcessRunner

Hook = Union[Sequence[str], Callable[[], Any]]


def _system_exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    if isinstance(exc.code, int):
        return exc.code
    return 1


class ExitHooks:
    """Stack of cleanup actions drained exactly once when the run ends."""

    def __init__(self, runner: Optional[ProcessRunner] = None) -> None:
        self.runner = runner or ProcessRunner()
        self.hooks: List[Hook] = []
        self.exit_code = 0
        self.drained = False

    def __enter__(self) -> ExitHooks:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> bool:
        suppress = False
        if exc_val is None:
            code = self.exit_code
        elif isinstance(exc_val, SystemExit):
            code = _system_exit_code(exc_val)
        elif isinstance(exc_val, VirtWrapError):
            logger.error(exc_val.message, error_code=exc_val.error_code)
            code = 1
            suppress = True
        elif isinstance(exc_val, Exception):
            logger.error(f"Unexpected error: {exc_val}", error_type=type(exc_val).__name__)
            code = 1
            suppress = True
        else:
            # KeyboardInterrupt and friends still get cleanup, then propagate
            code = 130

        self.exit_code = code
        self.drain(code, exc_tb)
        return suppress

    def on_exit(self, action: Hook) -> Hook:
        """Register ``action`` to run when the block exits; returns it."""
        if self.drained:
            raise RuntimeError("exit hooks already ran")
        self.hooks.insert(0, action)
        logger.debug(f"Registered exit hook: {self._describe(action)}")
        return action

    def drain(self, exit_code: int, tb: Optional[TracebackType] = None) -> None:
        """Run all hooks once. Later calls do nothing."""
        if self.drained:
            return
        self.drained = True

        if exit_code != 0 and tb is not None:
            self.print_call_stack(tb)

        for hook in self.hooks:
            try:
                self._run_hook(hook)
            except Exception as e:
                # Log but continue cleanup
                logger.warning(
                    f"Exit hook failed: {self._describe(hook)}: {e}",
                    error_type=type(e).__name__,
                )

    def _run_hook(self, hook: Hook) -> None:
        if callable(hook):
            hook()
            return

        status = self.runner.run(hook)
        if status != 0:
            logger.warning(
                f"Exit hook failed: {self._describe(hook)} exited with status {status}"
            )

    @staticmethod
    def print_call_stack(tb: TracebackType) -> None:
        """Print file, line, function and source text per frame, outermost first."""
        frames = traceback.extract_tb(tb)
        if not frames:
            return
        click.echo("Call stack (most recent call last):", err=True)
        for line in traceback.format_list(frames):
            click.echo(line.rstrip("\n"), err=True)

    @staticmethod
    def _describe(hook: Hook) -> str:
        if callable(hook):
            return getattr(hook, "__name__", repr(hook))
        return ProcessRunner.format_command(hook)
