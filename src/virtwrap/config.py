"""
Configuration management for virtwrap.

This module handles loading and validating configuration from files and environment variables.
"""

import os
import yaml
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict

from .exceptions import ConfigurationError
from .logging import logger


DEFAULT_CONFIG_PATHS = [
    "~/.config/virtwrap/config.yaml",
    "/etc/virtwrap/config.yaml",
    "virtwrap.yaml",
]


class AppConfig(BaseModel):
    """Application configuration with Pydantic validation.

    Configuration can be loaded from:
    1. Explicit config file path (VIRTWRAP_CONFIG)
    2. Default config file locations
    3. Environment variables (highest priority)

    Environment variables:
    - VIRTWRAP_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - VIRTWRAP_LOG_FORMAT: "text" or "json"
    - VIRTWRAP_CONNECT_URI: libvirt connection URI passed to virsh -c
    - VIRTWRAP_VIRSH: virsh binary
    - VIRTWRAP_QEMU_IMG: qemu-img binary
    - VIRTWRAP_VIRT_CLONE: virt-clone binary
    - VIRTWRAP_ARP: arp binary
    - VIRTWRAP_REMOVE_OVERLAY_ON_FAILURE: remove a fresh overlay when clone fails
    """

    model_config = ConfigDict(extra="forbid")  # Reject unknown fields

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", pattern=r"^(text|json)$")
    connect_uri: Optional[str] = None

    virsh_binary: str = Field(default="virsh", min_length=1)
    qemu_img_binary: str = Field(default="qemu-img", min_length=1)
    virt_clone_binary: str = Field(default="virt-clone", min_length=1)
    arp_binary: str = Field(default="arp", min_length=1)

    overlay_format: str = Field(default="qcow2", pattern=r"^[a-z0-9]+$")
    remove_overlay_on_failure: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"not a boolean: {value}")


class ConfigLoader:
    """Loads and validates configuration."""

    ENV_MAPPINGS = {
        "VIRTWRAP_LOG_LEVEL": "log_level",
        "VIRTWRAP_LOG_FORMAT": "log_format",
        "VIRTWRAP_CONNECT_URI": "connect_uri",
        "VIRTWRAP_VIRSH": "virsh_binary",
        "VIRTWRAP_QEMU_IMG": "qemu_img_binary",
        "VIRTWRAP_VIRT_CLONE": "virt_clone_binary",
        "VIRTWRAP_ARP": "arp_binary",
        "VIRTWRAP_REMOVE_OVERLAY_ON_FAILURE": ("remove_overlay_on_failure", _to_bool),
    }

    def __init__(self) -> None:
        self.logger = logger

    @staticmethod
    def search_paths() -> List[str]:
        """Config file candidates, in lookup order."""
        return [os.path.expanduser(path) for path in DEFAULT_CONFIG_PATHS]

    def load_config(self, config_path: Optional[str] = None) -> AppConfig:
        """
        Load configuration from file and environment variables.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file (explicit path, VIRTWRAP_CONFIG, or default locations)
        3. Default values

        Args:
            config_path: Path to configuration file. If None, looks in default locations.

        Returns:
            AppConfig: Loaded configuration
        """
        config_path = config_path or os.getenv("VIRTWRAP_CONFIG")
        if config_path:
            config_data = self._load_data_from_file(config_path)
        else:
            config_data = {}
            for path in self.search_paths():
                if os.path.exists(path):
                    self.logger.debug(f"Loading configuration from {path}", path=path)
                    config_data = self._load_data_from_file(path)
                    break

            if not config_data:
                self.logger.debug("No configuration file found, using defaults and environment variables")

        config_data = self._apply_env_overrides(config_data)

        try:
            return AppConfig(**config_data)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _apply_env_overrides(self, config_data: dict) -> dict:
        """Apply environment variable overrides to config data."""
        for env_var, mapping in self.ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue

            if isinstance(mapping, tuple):
                config_key, converter = mapping
                try:
                    config_data[config_key] = converter(env_value)
                    self.logger.debug(f"Applied environment override: {env_var}={env_value}")
                except (ValueError, TypeError) as e:
                    self.logger.warning(
                        f"Invalid value for {env_var}: {env_value}, ignoring. Error: {e}"
                    )
            else:
                config_data[mapping] = env_value
                self.logger.debug(f"Applied environment override: {env_var}={env_value}")

        return config_data

    def _load_data_from_file(self, path: str) -> dict:
        """Load configuration data from a specific file."""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse configuration file {path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration from {path}: {e}")

        if data is None:
            return {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid configuration format in {path}")

        return data


# Global config loader
config_loader = ConfigLoader()
