"""
Data models for virtwrap.

Plain records for what the external tools report back. None of them is
persisted; the virtualization stack owns all state.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ProcessResult:
    """Result of a captured process execution."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class DomainDisk:
    """A file-backed disk from a domain definition."""

    path: str
    format: str
    target: str
    device: str = "disk"


@dataclass
class BlockDevice:
    """One row of a block-device listing."""

    target: str
    source: Optional[str] = None


@dataclass
class ArpEntry:
    """One address-resolution cache entry."""

    ip_address: str
    mac_address: str
    device: Optional[str] = None
