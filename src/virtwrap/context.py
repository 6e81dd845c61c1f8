"""Per-run state shared by the dispatcher and the commands."""

from dataclasses import dataclass, field

from .config import AppConfig
from .hooks import ExitHooks
from .runner import ProcessRunner
from .security import CommandBuilder


@dataclass
class ExecutionContext:
    """Everything a command needs; there is no process-wide mutable state."""

    config: AppConfig
    runner: ProcessRunner
    hooks: ExitHooks
    commands: CommandBuilder = field(init=False)

    def __post_init__(self) -> None:
        self.commands = CommandBuilder(self.config)

    @property
    def dry_run(self) -> bool:
        return self.runner.dry_run

    @dry_run.setter
    def dry_run(self, value: bool) -> None:
        self.runner.dry_run = value
