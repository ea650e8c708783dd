"""
Concord TOML Configuration Loader

Loads the [governance], [timelock] and [logging] sections of concord.toml
with environment variable overrides.

Environment variable mapping:
    [governance] address                 → CONCORD_GOVERNOR_ADDRESS
    [governance] founder                 → CONCORD_FOUNDER
    [governance] council                 → CONCORD_COUNCIL
    [governance] voting_delay            → CONCORD_VOTING_DELAY
    [governance] voting_period           → CONCORD_VOTING_PERIOD
    [governance] proposal_threshold_bps  → CONCORD_PROPOSAL_THRESHOLD_BPS
    [governance] quorum_votes_bps        → CONCORD_QUORUM_VOTES_BPS
    [governance] proposal_refund         → CONCORD_PROPOSAL_REFUND
    [governance] vote_refund             → CONCORD_VOTE_REFUND
    [timelock]   address                 → CONCORD_TIMELOCK_ADDRESS
    [timelock]   delay                   → CONCORD_TIMELOCK_DELAY
    [timelock]   grace_period            → CONCORD_TIMELOCK_GRACE_PERIOD
    [logging]    level                   → CONCORD_LOG_LEVEL
    [logging]    file_output             → CONCORD_LOG_FILE_OUTPUT
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_PROPOSAL_THRESHOLD_BPS,
    DEFAULT_QUORUM_VOTES_BPS,
    DEFAULT_VOTING_DELAY,
    DEFAULT_VOTING_PERIOD,
    TIMELOCK_DEFAULT_DELAY,
    TIMELOCK_GRACE_PERIOD,
    TIMELOCK_MAX_DELAY,
    TIMELOCK_MIN_DELAY,
    parse_bool,
)
from ..exceptions import ConfigurationError
from ..governance.addresses import require_nonzero
from ..governance.errors import GovernanceError
from ..governance.parameters import GovernanceParameters
from ..logger import LogManager, get_logger

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(name: str) -> Optional[bool]:
    value = parse_bool(os.environ.get(name, ""))
    if isinstance(value, bool):
        return value
    return None


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class GovernanceSectionConfig:
    """[governance] section."""
    address: str = ""
    founder: str = ""
    council: str = ""
    voting_delay: int = DEFAULT_VOTING_DELAY
    voting_period: int = DEFAULT_VOTING_PERIOD
    proposal_threshold_bps: int = DEFAULT_PROPOSAL_THRESHOLD_BPS
    quorum_votes_bps: int = DEFAULT_QUORUM_VOTES_BPS
    proposal_refund: bool = False
    vote_refund: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceSectionConfig":
        return cls(
            address=data.get("address", ""),
            founder=data.get("founder", ""),
            council=data.get("council", ""),
            voting_delay=data.get("voting_delay", DEFAULT_VOTING_DELAY),
            voting_period=data.get("voting_period", DEFAULT_VOTING_PERIOD),
            proposal_threshold_bps=data.get("proposal_threshold_bps", DEFAULT_PROPOSAL_THRESHOLD_BPS),
            quorum_votes_bps=data.get("quorum_votes_bps", DEFAULT_QUORUM_VOTES_BPS),
            proposal_refund=data.get("proposal_refund", False),
            vote_refund=data.get("vote_refund", False),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("CONCORD_GOVERNOR_ADDRESS"):
            self.address = v
        if v := os.environ.get("CONCORD_FOUNDER"):
            self.founder = v
        if v := os.environ.get("CONCORD_COUNCIL"):
            self.council = v
        if (n := _env_int("CONCORD_VOTING_DELAY")) is not None:
            self.voting_delay = n
        if (n := _env_int("CONCORD_VOTING_PERIOD")) is not None:
            self.voting_period = n
        if (n := _env_int("CONCORD_PROPOSAL_THRESHOLD_BPS")) is not None:
            self.proposal_threshold_bps = n
        if (n := _env_int("CONCORD_QUORUM_VOTES_BPS")) is not None:
            self.quorum_votes_bps = n
        if (b := _env_bool("CONCORD_PROPOSAL_REFUND")) is not None:
            self.proposal_refund = b
        if (b := _env_bool("CONCORD_VOTE_REFUND")) is not None:
            self.vote_refund = b

    def to_parameters(self) -> GovernanceParameters:
        return GovernanceParameters(
            voting_delay=self.voting_delay,
            voting_period=self.voting_period,
            proposal_threshold_bps=self.proposal_threshold_bps,
            quorum_votes_bps=self.quorum_votes_bps,
            proposal_refund=self.proposal_refund,
            vote_refund=self.vote_refund,
        )

    def validate(self) -> None:
        for name in ("address", "founder", "council"):
            value = getattr(self, name)
            if not value:
                raise ConfigurationError(f"[governance] {name} is required")
            try:
                require_nonzero(value)
            except GovernanceError as e:
                raise ConfigurationError(f"[governance] {name}: {e}") from e
        try:
            self.to_parameters().validate()
        except GovernanceError as e:
            raise ConfigurationError(f"[governance] {e}") from e


@dataclass
class TimelockSectionConfig:
    """[timelock] section."""
    address: str = ""
    delay: int = TIMELOCK_DEFAULT_DELAY
    grace_period: int = TIMELOCK_GRACE_PERIOD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimelockSectionConfig":
        return cls(
            address=data.get("address", ""),
            delay=data.get("delay", TIMELOCK_DEFAULT_DELAY),
            grace_period=data.get("grace_period", TIMELOCK_GRACE_PERIOD),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CONCORD_TIMELOCK_ADDRESS"):
            self.address = v
        if (n := _env_int("CONCORD_TIMELOCK_DELAY")) is not None:
            self.delay = n
        if (n := _env_int("CONCORD_TIMELOCK_GRACE_PERIOD")) is not None:
            self.grace_period = n

    def validate(self) -> None:
        if self.address:
            try:
                require_nonzero(self.address)
            except GovernanceError as e:
                raise ConfigurationError(f"[timelock] address: {e}") from e
        if not TIMELOCK_MIN_DELAY <= self.delay <= TIMELOCK_MAX_DELAY:
            raise ConfigurationError(
                f"[timelock] delay must be in [{TIMELOCK_MIN_DELAY}, {TIMELOCK_MAX_DELAY}]"
            )
        if self.grace_period <= 0:
            raise ConfigurationError("[timelock] grace_period must be > 0")


@dataclass
class LoggingSectionConfig:
    """[logging] section."""
    level: str = "INFO"
    console_output: bool = True
    file_output: bool = False
    file: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSectionConfig":
        return cls(
            level=data.get("level", "INFO"),
            console_output=data.get("console_output", True),
            file_output=data.get("file_output", False),
            file=data.get("file", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CONCORD_LOG_LEVEL"):
            self.level = v
        if (b := _env_bool("CONCORD_LOG_FILE_OUTPUT")) is not None:
            self.file_output = b

    def validate(self) -> None:
        if self.level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.level}")

    def configure(self) -> None:
        """Rebuild the process-wide log handlers from this section."""
        manager = LogManager()
        manager.reset()
        manager.configure(
            log_level=self.level.upper(),
            log_file=Path(self.file) if self.file else None,
            console_output=self.console_output,
            file_output=self.file_output,
        )


# ---------------------------------------------------------------------------
# Top-level configuration
# ---------------------------------------------------------------------------


@dataclass
class GovernanceConfig:
    """
    Unified governance configuration.

    Loads every section of concord.toml and applies environment variable
    overrides.
    """
    governance: GovernanceSectionConfig = field(default_factory=GovernanceSectionConfig)
    timelock: TimelockSectionConfig = field(default_factory=TimelockSectionConfig)
    logging: LoggingSectionConfig = field(default_factory=LoggingSectionConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceConfig":
        """Create GovernanceConfig from a parsed TOML dict."""
        return cls(
            governance=GovernanceSectionConfig.from_dict(data.get("governance", {})),
            timelock=TimelockSectionConfig.from_dict(data.get("timelock", {})),
            logging=LoggingSectionConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "GovernanceConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults with environment overrides.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config file not found: {config_path}, using defaults")
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        logger.info(f"Loaded configuration from {path}")
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.governance.apply_env()
        self.timelock.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.governance.validate()
        self.timelock.validate()
        self.logging.validate()
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "governance": {
                "address": self.governance.address,
                "founder": self.governance.founder,
                "council": self.governance.council,
                "voting_delay": self.governance.voting_delay,
                "voting_period": self.governance.voting_period,
                "proposal_threshold_bps": self.governance.proposal_threshold_bps,
                "quorum_votes_bps": self.governance.quorum_votes_bps,
                "proposal_refund": self.governance.proposal_refund,
                "vote_refund": self.governance.vote_refund,
            },
            "timelock": {
                "address": self.timelock.address,
                "delay": self.timelock.delay,
                "grace_period": self.timelock.grace_period,
            },
            "logging": {
                "level": self.logging.level,
                "console_output": self.logging.console_output,
                "file_output": self.logging.file_output,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> GovernanceConfig:
    """
    Load governance configuration.

    Resolution order:
        1. Explicit *path* argument
        2. CONCORD_CONFIG env var
        3. ./concord.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("CONCORD_CONFIG", "concord.toml")

    return GovernanceConfig.from_file(path)
