"""
Concord Configuration

Loads concord.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    GovernanceConfig,
    GovernanceSectionConfig,
    LoggingSectionConfig,
    TimelockSectionConfig,
    load_config,
)

__all__ = [
    "GovernanceConfig",
    "GovernanceSectionConfig",
    "LoggingSectionConfig",
    "TimelockSectionConfig",
    "load_config",
]
