"""
Input validation and command building for virtwrap.

Everything handed to an external tool passes through here: names are checked
against a pattern and commands are built as argv lists, never as
shell strings.
"""

import os
import re
from typing import List, Optional

from .config import AppConfig
from .exceptions import ValidationError


class SecurityValidator:
    """Security validation utilities."""

    # The name is passed as one argv element and used as the overlay file name
    VM_NAME_PATTERN = re.compile(r"^[^\-./\x00-\x1f\x7f][^/\x00-\x1f\x7f]*$")

    @staticmethod
    def validate_vm_name(name: str) -> str:
        """
        Validate a VM name.

        Args:
            name: VM name to validate

        Returns:
            str: Validated VM name

        Raises:
            ValidationError: If VM name is invalid
        """
        if not name or not isinstance(name, str):
            raise ValidationError("VM name must be a non-empty string", "vm_name")

        if len(name) > 64:
            raise ValidationError("VM name must be 64 characters or less", "vm_name")

        if not SecurityValidator.VM_NAME_PATTERN.fullmatch(name):
            raise ValidationError(
                f"Invalid VM name {name!r}: no slashes or control characters, "
                "and not starting with a dot or hyphen",
                "vm_name",
            )

        return name

    @staticmethod
    def validate_image_path(path: Optional[str]) -> str:
        """
        Check that a disk image path is absolute and readable.

        Raises:
            ValidationError: If the path is missing, relative or unreadable
        """
        if not path:
            raise ValidationError("Image path is empty", "image_path")

        if not os.path.isabs(path):
            raise ValidationError(f"Image path is not absolute: {path}", "image_path")

        if not os.path.isfile(path) or not os.access(path, os.R_OK):
            raise ValidationError(f"Image is not readable: {path}", "image_path")

        return path


class CommandBuilder:
    """Builds argv lists for the external tools."""

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or AppConfig()

    def virsh(self, action: str, *args: str) -> List[str]:
        """virsh [-c URI] ACTION ARGS..."""
        cmd = [self.config.virsh_binary]
        if self.config.connect_uri:
            cmd.extend(["-c", self.config.connect_uri])
        cmd.append(action)
        cmd.extend(str(arg) for arg in args)
        return cmd

    def qemu_img_create(self, overlay: str, backing_file: str, backing_format: str) -> List[str]:
        """Create a copy-on-write overlay on top of ``backing_file``."""
        return [
            self.config.qemu_img_binary,
            "create",
            "-f",
            self.config.overlay_format,
            "-F",
            backing_format,
            "-b",
            backing_file,
            overlay,
        ]

    def virt_clone(self, original: str, name: str, disk_file: str) -> List[str]:
        """Duplicate a definition onto an existing disk, leaving its data untouched."""
        cmd = [self.config.virt_clone_binary]
        if self.config.connect_uri:
            cmd.extend(["--connect", self.config.connect_uri])
        cmd.extend(
            [
                "--original",
                original,
                "--name",
                name,
                "--file",
                disk_file,
                "--preserve-data",
            ]
        )
        return cmd

    def arp(self) -> List[str]:
        return [self.config.arp_binary, "-an"]

    @staticmethod
    def rm_file(path: str) -> List[str]:
        return ["rm", "-f", path]
