"""
Concord Governance Constants

This module consolidates all global constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE BOUNDS BELOW ARE PART OF THE GOVERNANCE RULES. CHANGING THEM CHANGES WHICH
# PARAMETER UPDATES A RUNNING DAO WILL ACCEPT, AND EXISTING DEPLOYMENTS WILL REJECT
# PROPOSALS BUILT AGAINST DIFFERENT VALUES.

# ==================================================================================
# TIME
# ==================================================================================
HOUR = 60 * 60
DAY = 24 * HOUR


# ==================================================================================
# BASIS POINTS
# ==================================================================================
BPS_DENOMINATOR = 10_000  # 100% expressed in basis points


# ==================================================================================
# PROPOSAL PARAMETERS
# ==================================================================================
# Maximum number of actions a single proposal may carry
MAX_OPERATIONS = 10

# Proposal threshold: 0.01% .. 10% of total voting power
MIN_PROPOSAL_THRESHOLD_BPS = 1
MAX_PROPOSAL_THRESHOLD_BPS = 1_000

# Quorum: 2% .. 20% of total voting power
MIN_QUORUM_VOTES_BPS = 200
MAX_QUORUM_VOTES_BPS = 2_000

# Delay between proposal creation and the start of voting
MIN_VOTING_DELAY = 1
MAX_VOTING_DELAY = 7 * DAY

# Length of the voting window
MIN_VOTING_PERIOD = DAY
MAX_VOTING_PERIOD = 14 * DAY

DEFAULT_VOTING_DELAY = DAY
DEFAULT_VOTING_PERIOD = 3 * DAY
DEFAULT_PROPOSAL_THRESHOLD_BPS = 50     # 0.5%
DEFAULT_QUORUM_VOTES_BPS = 1_000        # 10%


# ==================================================================================
# VOTE SUPPORT VALUES
# ==================================================================================
VOTE_AGAINST = 0
VOTE_FOR = 1
VOTE_ABSTAIN = 2


# ==================================================================================
# TIMELOCK
# ==================================================================================
TIMELOCK_DEFAULT_DELAY = 2 * DAY
TIMELOCK_MIN_DELAY = 2 * DAY
TIMELOCK_MAX_DELAY = 30 * DAY
TIMELOCK_GRACE_PERIOD = 14 * DAY


# ==================================================================================
# ADDRESSES
# ==================================================================================
ZERO_ADDRESS = "0x" + "00" * 20


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = dict(LOGGER_DEFAULTS)
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        # ast.literal_eval expects "True"/"False"
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
