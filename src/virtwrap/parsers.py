"""
Adapters over the textual output of virsh and arp.

Each function handles exactly one output shape so format drift in a tool
breaks one function, and each is tested against literal samples.
"""

import re
import xml.etree.ElementTree as ET
from typing import Iterable, List, Optional

from .models import ArpEntry, BlockDevice, DomainDisk

MAC_PATTERN = re.compile(r"\b(?:[0-9a-fA-F]{2}:){5}[0-9a-fA-F]{2}\b")

# "? (192.168.122.45) at 52:54:00:ab:cd:ef [ether] on virbr0"
ARP_AN_PATTERN = re.compile(
    r"\((?P<ip>[0-9a-fA-F.:]+)\)\s+at\s+(?P<mac>(?:[0-9a-fA-F]{2}:){5}[0-9a-fA-F]{2})"
    r"(?:.*?\son\s+(?P<dev>\S+))?"
)


def parse_domain_disks(xml_desc: str) -> List[DomainDisk]:
    """Return file-backed disks of a ``virsh dumpxml`` document, in order."""
    try:
        root = ET.fromstring(xml_desc)
    except ET.ParseError:
        return []

    disks = []
    for disk_elem in root.findall("./devices/disk[@type='file']"):
        source = disk_elem.find("source")
        if source is None or not source.get("file"):
            continue

        driver = disk_elem.find("driver")
        target = disk_elem.find("target")
        disks.append(
            DomainDisk(
                path=source.get("file", ""),
                format=driver.get("type", "raw") if driver is not None else "raw",
                target=target.get("dev", "") if target is not None else "",
                device=disk_elem.get("device", "disk"),
            )
        )
    return disks


def primary_disk(disks: Iterable[DomainDisk]) -> Optional[DomainDisk]:
    """First disk with device="disk"; CD-ROMs and floppies are skipped."""
    for disk in disks:
        if disk.device == "disk":
            return disk
    return None


def parse_domain_names(output: str) -> List[str]:
    """Parse ``virsh list --all --name``: one name per line, blank lines dropped."""
    return [line.strip() for line in output.splitlines() if line.strip()]


def parse_block_devices(output: str) -> List[BlockDevice]:
    """
    Parse ``virsh domblklist <vm>``.

    Example::

         Target   Source
        ------------------------------------------
         vda      /var/lib/libvirt/images/web1.qcow2
         sda      -
    """
    devices = []
    # Skip header lines (title and separator)
    for line in output.splitlines()[2:]:
        parts = line.split(None, 1)
        if not parts:
            continue
        source = parts[1].strip() if len(parts) > 1 else None
        devices.append(BlockDevice(target=parts[0], source=None if source == "-" else source))
    return devices


def backing_files(devices: Iterable[BlockDevice]) -> List[str]:
    """Sources that are absolute paths; empty drives and network disks drop out."""
    return [dev.source for dev in devices if dev.source and dev.source.startswith("/")]


def parse_mac_addresses(output: str) -> List[str]:
    """All MAC addresses in ``output``, lower-cased, first occurrence order."""
    macs: List[str] = []
    for match in MAC_PATTERN.finditer(output):
        mac = match.group(0).lower()
        if mac not in macs:
            macs.append(mac)
    return macs


def parse_arp_table(output: str) -> List[ArpEntry]:
    """Parse ``arp -an``; incomplete entries have no MAC and are dropped."""
    entries = []
    for line in output.splitlines():
        match = ARP_AN_PATTERN.search(line)
        if match:
            entries.append(
                ArpEntry(
                    ip_address=match.group("ip"),
                    mac_address=match.group("mac").lower(),
                    device=match.group("dev"),
                )
            )
    return entries


def lookup_ip(arp_output: str, mac: str) -> Optional[str]:
    """IP address cached for ``mac``, or None."""
    mac = mac.lower()
    for entry in parse_arp_table(arp_output):
        if entry.mac_address == mac:
            return entry.ip_address
    return None
