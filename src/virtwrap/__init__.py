"""virtwrap - clone, destroy and locate libvirt VMs from the command line."""

__version__ = "0.1.0"
__description__ = "Thin orchestration over virsh, qemu-img and virt-clone"

from .config import AppConfig, ConfigLoader
from .context import ExecutionContext
from .exceptions import (
    VirtWrapError,
    ConfigurationError,
    VMNotFoundError,
    ValidationError,
    ImageNotReadableError,
)
from .hooks import ExitHooks
from .models import ProcessResult, DomainDisk, BlockDevice, ArpEntry
from .registry import Command, CommandRegistry
from .runner import ProcessRunner
from .security import SecurityValidator, CommandBuilder

__all__ = [
    "__version__",
    "__description__",
    "AppConfig",
    "ConfigLoader",
    "ExecutionContext",
    "VirtWrapError",
    "ConfigurationError",
    "VMNotFoundError",
    "ValidationError",
    "ImageNotReadableError",
    "ExitHooks",
    "ProcessResult",
    "DomainDisk",
    "BlockDevice",
    "ArpEntry",
    "Command",
    "CommandRegistry",
    "ProcessRunner",
    "SecurityValidator",
    "CommandBuilder",
]
