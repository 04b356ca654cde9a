"""
Monitor Configuration - environment-driven settings for the adapter inventory.

All values can be overridden with NETINV_* environment variables.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigurationError


class ClassifierPolicy(Enum):
    """Which physical-adapter heuristic to apply in physical-only mode."""
    BINDING = "binding"      # IPv4 binding index + interface type + description keywords
    NAMING = "naming"        # NDIS filter names + product denylist
    COMBINED = "combined"    # Physical only if both heuristics agree

    @classmethod
    def parse(cls, value: str) -> ClassifierPolicy:
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ConfigurationError(f"Unknown classifier policy '{value}' (expected one of: {choices})")


@dataclass
class MonitorConfig:
    """Complete adapter monitor configuration."""

    physical_only: bool = False
    classifier_policy: ClassifierPolicy = ClassifierPolicy.COMBINED

    # Enumeration
    max_enumeration_attempts: int = 5

    # Change detection
    poll_interval: float = 2.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __post_init__(self):
        if self.max_enumeration_attempts < 1:
            raise ConfigurationError("max_enumeration_attempts must be at least 1")
        if self.poll_interval <= 0:
            raise ConfigurationError("poll_interval must be positive")

    @classmethod
    def from_env(cls) -> MonitorConfig:
        """Create config from environment variables."""
        try:
            attempts = int(os.getenv("NETINV_MAX_ATTEMPTS", "5"))
            interval = float(os.getenv("NETINV_POLL_INTERVAL", "2.0"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}")

        return cls(
            physical_only=os.getenv("NETINV_PHYSICAL_ONLY", "false").lower() == "true",
            classifier_policy=ClassifierPolicy.parse(os.getenv("NETINV_CLASSIFIER", "combined")),
            max_enumeration_attempts=attempts,
            poll_interval=interval,
            log_level=os.getenv("NETINV_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(config: MonitorConfig) -> None:
    """Install a root handler. Only entry points should call this."""
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format=config.log_format,
    )
