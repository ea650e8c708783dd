"""
Governance parameters and their bounded setters.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Tuple

from ..logger import get_logger
from ..constants import (
    DEFAULT_PROPOSAL_THRESHOLD_BPS,
    DEFAULT_QUORUM_VOTES_BPS,
    DEFAULT_VOTING_DELAY,
    DEFAULT_VOTING_PERIOD,
    MAX_PROPOSAL_THRESHOLD_BPS,
    MAX_QUORUM_VOTES_BPS,
    MAX_VOTING_DELAY,
    MAX_VOTING_PERIOD,
    MIN_PROPOSAL_THRESHOLD_BPS,
    MIN_QUORUM_VOTES_BPS,
    MIN_VOTING_DELAY,
    MIN_VOTING_PERIOD,
)
from .addresses import require_nonzero
from .errors import ParameterOutOfBounds
from .events import ParameterChanged
from .roles import ADMIN_ROLES, Role

if TYPE_CHECKING:
    from .context import GovernanceContext
    from .ledger import VotingPowerLedger

logger = get_logger(__name__)


PARAMETER_BOUNDS: Dict[str, Tuple[int, int]] = {
    "voting_delay":           (MIN_VOTING_DELAY, MAX_VOTING_DELAY),
    "voting_period":          (MIN_VOTING_PERIOD, MAX_VOTING_PERIOD),
    "proposal_threshold_bps": (MIN_PROPOSAL_THRESHOLD_BPS, MAX_PROPOSAL_THRESHOLD_BPS),
    "quorum_votes_bps":       (MIN_QUORUM_VOTES_BPS, MAX_QUORUM_VOTES_BPS),
}


def check_bounds(name: str, value: int) -> int:
    """Return *value* if it lies within the hardcoded range for *name*."""
    low, high = PARAMETER_BOUNDS[name]
    if not isinstance(value, int) or isinstance(value, bool) or not low <= value <= high:
        raise ParameterOutOfBounds(f"{name}={value!r} outside [{low}, {high}]")
    return value


@dataclass
class GovernanceParameters:
    """The four tunables plus the refund toggles."""
    voting_delay: int = DEFAULT_VOTING_DELAY
    voting_period: int = DEFAULT_VOTING_PERIOD
    proposal_threshold_bps: int = DEFAULT_PROPOSAL_THRESHOLD_BPS
    quorum_votes_bps: int = DEFAULT_QUORUM_VOTES_BPS
    proposal_refund: bool = False
    vote_refund: bool = False

    def validate(self):
        for name in PARAMETER_BOUNDS:
            check_bounds(name, getattr(self, name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "votingDelay": self.voting_delay,
            "votingPeriod": self.voting_period,
            "proposalThresholdBps": self.proposal_threshold_bps,
            "quorumVotesBps": self.quorum_votes_bps,
            "proposalRefund": self.proposal_refund,
            "voteRefund": self.vote_refund,
        }


# ══════════════════════════════════════════════════════════════════════
#  PARAMETER GOVERNOR
# ══════════════════════════════════════════════════════════════════════

class ParameterGovernor:
    """
    Bounded setters for the governance tunables.

    Delay and period are changed only by the timelock (that is, by an
    executed proposal). Threshold and quorum BPS may also be set by an
    administrator. Replacing the voting-power ledger is timelock-only.
    """

    def __init__(self, ctx: "GovernanceContext"):
        self.ctx = ctx

    def _set(self, name: str, value: int, camel: str):
        check_bounds(name, value)
        old = getattr(self.ctx.params, name)
        setattr(self.ctx.params, name, value)
        self.ctx.events.emit(ParameterChanged(camel, old, value))
        logger.info(f"Parameter '{camel}' changed: {old} → {value}")

    def set_voting_delay(self, caller: str, value: int):
        self.ctx.access.require(caller, Role.TIMELOCK)
        self._set("voting_delay", value, "votingDelay")

    def set_voting_period(self, caller: str, value: int):
        self.ctx.access.require(caller, Role.TIMELOCK)
        self._set("voting_period", value, "votingPeriod")

    def set_proposal_threshold_bps(self, caller: str, value: int):
        self.ctx.access.require(caller, Role.TIMELOCK, *ADMIN_ROLES)
        self._set("proposal_threshold_bps", value, "proposalThresholdBps")

    def set_quorum_votes_bps(self, caller: str, value: int):
        self.ctx.access.require(caller, Role.TIMELOCK, *ADMIN_ROLES)
        self._set("quorum_votes_bps", value, "quorumVotesBps")

    def set_refund_flags(self, caller: str, proposing: bool, voting: bool):
        self.ctx.access.require(caller, Role.TIMELOCK)
        params = self.ctx.params
        old = (params.proposal_refund, params.vote_refund)
        params.proposal_refund = bool(proposing)
        params.vote_refund = bool(voting)
        new = (params.proposal_refund, params.vote_refund)
        self.ctx.events.emit(ParameterChanged("refundFlags", old, new))
        logger.info(f"Refund flags: propose={params.proposal_refund} vote={params.vote_refund}")

    def set_voting_power_ledger(self, caller: str, ledger: "VotingPowerLedger"):
        """Point the governor at a different voting-power ledger."""
        self.ctx.access.require(caller, Role.TIMELOCK)
        new_address = require_nonzero(ledger.address)
        old = self.ctx.ledger
        old_address = old.address if old is not None else None
        self.ctx.ledger = ledger
        self.ctx.access.assign(Role.LEDGER, new_address)
        self.ctx.events.emit(ParameterChanged("votingPowerLedger", old_address, new_address))
        logger.warning(f"Voting-power ledger migrated: {old_address} → {new_address}")
