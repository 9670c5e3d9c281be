"""Configuration management for the admin tools.

Supports YAML-based configuration with per-tool sections.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..collectors.dell import DELL_SUPPORT_URL
from ..data.parsing import DEFAULT_RUNTIME_RESOURCE
from ..passwords import DEFAULT_LENGTH


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""


@dataclass
class GridEngineConfig:
    """Settings for the qstat-backed job tools."""

    qstat: str = "qstat"
    timeout: int = 30  # seconds per qstat call
    max_retries: int = 2
    retry_delay: float = 2  # seconds
    runtime_resource: str = DEFAULT_RUNTIME_RESOURCE


@dataclass
class DellConfig:
    """Settings for the warranty lookup."""

    url: str = DELL_SUPPORT_URL
    timeout: int = 20
    insecure: bool = False
    ca_bundle: Optional[str] = None
    user_agent: str = "hpc-admin-tools/1.0"


@dataclass
class PasswordConfig:
    length: int = DEFAULT_LENGTH


@dataclass
class Config:
    """Main configuration container."""

    gridengine: GridEngineConfig = field(default_factory=GridEngineConfig)
    dell: DellConfig = field(default_factory=DellConfig)
    passwords: PasswordConfig = field(default_factory=PasswordConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        ge_data = data.get("gridengine") or {}
        gridengine = GridEngineConfig(
            qstat=ge_data.get("qstat", "qstat"),
            timeout=ge_data.get("timeout", 30),
            max_retries=ge_data.get("max_retries", 2),
            retry_delay=ge_data.get("retry_delay", 2),
            runtime_resource=ge_data.get("runtime_resource", DEFAULT_RUNTIME_RESOURCE),
        )

        dell_data = data.get("dell") or {}
        dell = DellConfig(
            url=dell_data.get("url", DELL_SUPPORT_URL),
            timeout=dell_data.get("timeout", 20),
            insecure=dell_data.get("insecure", False),
            ca_bundle=dell_data.get("ca_bundle"),
            user_agent=dell_data.get("user_agent", "hpc-admin-tools/1.0"),
        )

        pw_data = data.get("passwords") or {}
        passwords = PasswordConfig(length=pw_data.get("length", DEFAULT_LENGTH))

        return cls(gridengine=gridengine, dell=dell, passwords=passwords)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load config from YAML file."""
        if not path.exists():
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load config from path or defaults.

        Checks in order:
        1. Provided path
        2. HPC_ADMIN_CONFIG env var
        3. ./configs/config.yaml
        4. ./config.yaml
        5. ~/.hpc_admin/config.yaml
        6. Default config
        """
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return cls.from_yaml(path)

        paths_to_try = []
        if env_path := os.environ.get("HPC_ADMIN_CONFIG"):
            paths_to_try.append(Path(env_path))

        paths_to_try.extend([
            Path("./configs/config.yaml"),
            Path("./config.yaml"),
            Path.home() / ".hpc_admin" / "config.yaml",
        ])

        for path in paths_to_try:
            if path.exists():
                return cls.from_yaml(path)

        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "gridengine": {
                "qstat": self.gridengine.qstat,
                "timeout": self.gridengine.timeout,
                "max_retries": self.gridengine.max_retries,
                "retry_delay": self.gridengine.retry_delay,
                "runtime_resource": self.gridengine.runtime_resource,
            },
            "dell": {
                "url": self.dell.url,
                "timeout": self.dell.timeout,
                "insecure": self.dell.insecure,
                "ca_bundle": self.dell.ca_bundle,
                "user_agent": self.dell.user_agent,
            },
            "passwords": {
                "length": self.passwords.length,
            },
        }
