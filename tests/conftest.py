"""Test configuration and fixtures for virtwrap."""

import pytest
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from virtwrap.config import AppConfig  # noqa: E402
from virtwrap.context import ExecutionContext  # noqa: E402
from virtwrap.hooks import ExitHooks  # noqa: E402
from virtwrap.models import ProcessResult  # noqa: E402
from virtwrap.runner import ProcessRunner  # noqa: E402


Output = Union[str, ProcessResult]


class RecordingRunner(ProcessRunner):
    """ProcessRunner double: records commands and serves canned query output.

    ``outputs`` maps a command tuple to the text (or ProcessResult) a capture
    returns; unknown queries fail with status 1. ``statuses`` maps a command
    tuple to the status ``run`` reports.
    """

    def __init__(
        self,
        outputs: Optional[Dict[tuple, Output]] = None,
        statuses: Optional[Dict[tuple, int]] = None,
        dry_run: bool = False,
    ) -> None:
        super().__init__(dry_run=dry_run)
        self.outputs = outputs or {}
        self.statuses = statuses or {}
        self.calls: List[List[str]] = []
        self.executed: List[List[str]] = []
        self.queries: List[List[str]] = []

    def run(self, command: Sequence[str]) -> int:
        command = list(command)
        self.calls.append(command)
        if self.dry_run:
            return 0
        self.executed.append(command)
        return self.statuses.get(tuple(command), 0)

    def capture(self, command: Sequence[str]) -> ProcessResult:
        command = list(command)
        self.queries.append(command)
        output = self.outputs.get(tuple(command))
        if output is None:
            return ProcessResult(returncode=1, stdout="", stderr="error: no such domain")
        if isinstance(output, ProcessResult):
            return output
        return ProcessResult(returncode=0, stdout=output, stderr="")


def domain_xml(name: str, disk_path: str, disk_format: str = "qcow2") -> str:
    return f"""<domain type='kvm'>
  <name>{name}</name>
  <memory unit='KiB'>2097152</memory>
  <devices>
    <emulator>/usr/bin/qemu-system-x86_64</emulator>
    <disk type='file' device='cdrom'>
      <driver name='qemu' type='raw'/>
      <target dev='sda' bus='sata'/>
      <readonly/>
    </disk>
    <disk type='file' device='disk'>
      <driver name='qemu' type='{disk_format}'/>
      <source file='{disk_path}'/>
      <target dev='vda' bus='virtio'/>
    </disk>
    <interface type='network'>
      <mac address='52:54:00:6b:3c:58'/>
      <source network='default'/>
      <model type='virtio'/>
    </interface>
  </devices>
</domain>
"""


DOMBLKLIST = """ Target   Source
------------------------------------------------
 vda      /vms/web1.qcow2
 sda      -
"""

DOMIFLIST = """ Interface   Type      Source    Model    MAC
-------------------------------------------------------------
 vnet0       network   default   virtio   52:54:00:6b:3c:58
 vnet1       bridge    br0       e1000    52:54:00:AA:BB:CC
"""

ARP_AN = """? (192.168.122.1) at <incomplete> on virbr0
? (192.168.122.87) at 52:54:00:6b:3c:58 [ether] on virbr0
? (10.0.0.1) at 00:11:22:33:44:55 [ether] on eth0
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host configuration out of the tests."""
    for var in (
        "VIRTWRAP_CONFIG",
        "VIRTWRAP_LOG_LEVEL",
        "VIRTWRAP_LOG_FORMAT",
        "VIRTWRAP_CONNECT_URI",
        "VIRTWRAP_VIRSH",
        "VIRTWRAP_QEMU_IMG",
        "VIRTWRAP_VIRT_CLONE",
        "VIRTWRAP_ARP",
        "VIRTWRAP_REMOVE_OVERLAY_ON_FAILURE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def make_context(config):
    """Build an ExecutionContext around a RecordingRunner."""

    def _make(runner: RecordingRunner, cfg: Optional[AppConfig] = None) -> ExecutionContext:
        return ExecutionContext(config=cfg or config, runner=runner, hooks=ExitHooks(runner))

    return _make
