"""
Custom exceptions for virtwrap operations.

This module defines all custom exceptions used throughout virtwrap.
"""


class VirtWrapError(Exception):
    """Base exception for virtwrap operations."""

    def __init__(self, message: str, error_code: int = 1000) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message


class ConfigurationError(VirtWrapError):
    """Configuration-related errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code=1001)


class VMNotFoundError(VirtWrapError):
    """VM not found errors."""

    def __init__(self, vm_name: str) -> None:
        super().__init__(f"VM '{vm_name}' does not exist", error_code=1003)
        self.vm_name = vm_name


class ValidationError(VirtWrapError):
    """Validation errors."""

    def __init__(self, message: str, validation_type: str = "general") -> None:
        super().__init__(
            f"Validation error ({validation_type}): {message}", error_code=1007
        )
        self.validation_type = validation_type


class ImageNotReadableError(VirtWrapError):
    """Source disk image missing or unreadable."""

    def __init__(self, vm_name: str, path: str) -> None:
        super().__init__(
            f"Cannot read disk image of VM '{vm_name}': {path or '<none>'}",
            error_code=1014,
        )
        self.vm_name = vm_name
        self.path = path

