"""
Governor

The single coordinating service. Owns the governance state and exposes
every operation; each call runs to completion before the next starts.
"""

import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..logger import get_logger
from .addresses import normalize_address, require_nonzero
from .context import GovernanceContext, RefundHook
from .errors import AlreadyInitialized, GovernanceError, InvalidInput
from .events import CommunityScoresUpdated
from .execution import ExecutionBridge
from .ledger import VotingPowerLedger
from .lifecycle import LifecycleEngine
from .parameters import GovernanceParameters, ParameterGovernor
from .proposals import Proposal, ProposalAction, Receipt
from .roles import Role
from .state import ProposalState
from .store import CommunityScore
from .thresholds import bps_to_votes
from .timelock import Timelock
from .voting import VotingEngine

logger = get_logger(__name__)


def encode_uint256(value: int) -> bytes:
    """Calldata for a single uint256 argument."""
    return value.to_bytes(32, "big")


def decode_uint256(data: bytes) -> int:
    if len(data) != 32:
        raise InvalidInput(f"Expected 32 bytes of calldata, got {len(data)}")
    return int.from_bytes(data, "big")


class Governor:
    """
    Governance engine facade.

    Usage:
        governor = Governor(GOVERNOR_ADDRESS)
        governor.initialize(ledger, timelock, founder=..., council=...)
        pid = governor.propose(alice, [target], [0], ["sig()"], [b""], "…")
        governor.verify(founder, pid)
        governor.cast_vote(bob, pid, Support.FOR)
        governor.queue(anyone, pid)
        governor.execute(anyone, pid)
    """

    def __init__(self, address: str, clock: Optional[Callable[[], int]] = None):
        self.ctx = GovernanceContext(
            address=require_nonzero(address),
            clock=clock or (lambda: int(time.time())),
        )
        self.lifecycle = LifecycleEngine(self.ctx)
        self.voting = VotingEngine(self.ctx)
        self.execution = ExecutionBridge(self.ctx)
        self.parameters = ParameterGovernor(self.ctx)
        self._initialized = False
        self._admin_calls: Dict[str, Callable[[str, int], None]] = {
            "setVotingDelay(uint256)": self.parameters.set_voting_delay,
            "setVotingPeriod(uint256)": self.parameters.set_voting_period,
            "setProposalThresholdBPS(uint256)": self.parameters.set_proposal_threshold_bps,
            "setQuorumVotesBPS(uint256)": self.parameters.set_quorum_votes_bps,
        }

    # ── Initialization ────────────────────────────────────────────────

    def initialize(
        self,
        ledger: VotingPowerLedger,
        timelock: Timelock,
        founder: str,
        council: str,
        params: Optional[GovernanceParameters] = None,
        refund_hook: Optional[RefundHook] = None,
    ):
        """Wire collaborators and roles. May run once."""
        if self._initialized:
            raise AlreadyInitialized("Governor already initialized")
        params = params or GovernanceParameters()
        params.validate()
        holders = {
            Role.FOUNDER: require_nonzero(founder),
            Role.COUNCIL: require_nonzero(council),
            Role.TIMELOCK: require_nonzero(timelock.address),
            Role.LEDGER: require_nonzero(ledger.address),
        }
        for role, address in holders.items():
            self.ctx.access.assign(role, address)

        self.ctx.ledger = ledger
        self.ctx.timelock = timelock
        self.ctx.params = params
        self.ctx.refund_hook = refund_hook
        self._initialized = True
        logger.info(
            f"Governor {self.address} initialized: timelock={timelock.address} "
            f"ledger={ledger.address} params={params.to_dict()}"
        )

    @classmethod
    def from_config(
        cls,
        config,
        ledger: VotingPowerLedger,
        timelock: Timelock,
        clock: Optional[Callable[[], int]] = None,
        refund_hook: Optional[RefundHook] = None,
    ) -> "Governor":
        """Build and initialize a governor from a loaded GovernanceConfig."""
        section = config.governance
        governor = cls(section.address, clock=clock)
        governor.initialize(
            ledger,
            timelock,
            founder=section.founder,
            council=section.council,
            params=section.to_parameters(),
            refund_hook=refund_hook,
        )
        return governor

    def _require_initialized(self):
        if not self._initialized:
            raise GovernanceError("Governor is not initialized")

    @property
    def address(self) -> str:
        return self.ctx.address

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def access(self):
        return self.ctx.access

    @property
    def events(self):
        return self.ctx.events

    @property
    def params(self) -> GovernanceParameters:
        return self.ctx.params

    @property
    def ledger(self) -> Optional[VotingPowerLedger]:
        return self.ctx.ledger

    @property
    def timelock(self) -> Optional[Timelock]:
        return self.ctx.timelock

    # ── Lifecycle ─────────────────────────────────────────────────────

    def propose(
        self,
        caller: str,
        targets: Sequence[str],
        values: Sequence[int],
        signatures: Sequence[str],
        calldatas: Sequence[bytes],
        description: str = "",
    ) -> int:
        self._require_initialized()
        return self.lifecycle.propose(caller, targets, values, signatures, calldatas, description)

    def verify(self, caller: str, proposal_id: int):
        self._require_initialized()
        self.lifecycle.verify(caller, proposal_id)

    def cancel(self, caller: str, proposal_id: int):
        self._require_initialized()
        self.lifecycle.cancel(caller, proposal_id)

    def veto(self, caller: str, proposal_id: int):
        self._require_initialized()
        self.lifecycle.veto(caller, proposal_id)

    def clear(self, caller: str, proposal_id: int):
        self._require_initialized()
        self.lifecycle.clear(caller, proposal_id)

    # ── Voting ────────────────────────────────────────────────────────

    def cast_vote(self, caller: str, proposal_id: int, support: int) -> int:
        self._require_initialized()
        return self.voting.cast_vote(caller, proposal_id, support)

    # ── Execution ─────────────────────────────────────────────────────

    def queue(self, caller: str, proposal_id: int) -> int:
        self._require_initialized()
        return self.execution.queue(caller, proposal_id)

    def execute(self, caller: str, proposal_id: int) -> List[Any]:
        self._require_initialized()
        return self.execution.execute(caller, proposal_id)

    # ── Parameters ────────────────────────────────────────────────────

    def set_voting_delay(self, caller: str, value: int):
        self._require_initialized()
        self.parameters.set_voting_delay(caller, value)

    def set_voting_period(self, caller: str, value: int):
        self._require_initialized()
        self.parameters.set_voting_period(caller, value)

    def set_proposal_threshold_bps(self, caller: str, value: int):
        self._require_initialized()
        self.parameters.set_proposal_threshold_bps(caller, value)

    def set_quorum_votes_bps(self, caller: str, value: int):
        self._require_initialized()
        self.parameters.set_quorum_votes_bps(caller, value)

    def set_refund_flags(self, caller: str, proposing: bool, voting: bool):
        self._require_initialized()
        self.parameters.set_refund_flags(caller, proposing, voting)

    def set_voting_power_ledger(self, caller: str, ledger: VotingPowerLedger):
        self._require_initialized()
        self.parameters.set_voting_power_ledger(caller, ledger)

    def handle_admin_call(self, signature: str, calldata: bytes, value: int):
        """
        Timelock target handler for proposals that retune the governor.

        Register with `timelock.register_target(governor.address,
        governor.handle_admin_call)`; calls arrive as the timelock.
        """
        setter = self._admin_calls.get(signature)
        if setter is None:
            raise InvalidInput(f"Unknown governor function: {signature}")
        setter(self.ctx.timelock.address, decode_uint256(calldata))

    # ── Ledger callback ───────────────────────────────────────────────

    def update_community_scores(
        self,
        caller: str,
        scores: Mapping[str, CommunityScore],
        total: CommunityScore,
    ):
        """Overwrite community scores wholesale. Only the ledger may call."""
        self._require_initialized()
        self.ctx.access.require(caller, Role.LEDGER)
        normalized = {normalize_address(a): s for a, s in scores.items()}
        self.ctx.store.overwrite_scores(normalized, total)
        self.ctx.events.emit(CommunityScoresUpdated(tuple(normalized)))
        logger.info(f"Community scores overwritten for {len(normalized)} address(es)")

    # ── Roles ─────────────────────────────────────────────────────────

    def transfer_role(self, caller: str, role: Role, new_holder: str):
        if role in (Role.TIMELOCK, Role.LEDGER):
            raise InvalidInput(f"Role {role.value} follows its collaborator")
        self.ctx.access.transfer_role(caller, role, new_holder)

    def accept_role(self, caller: str, role: Role):
        self.ctx.access.accept_role(caller, role)

    # ── Views ─────────────────────────────────────────────────────────

    def state(self, proposal_id: int) -> ProposalState:
        self._require_initialized()
        return self.ctx.state(proposal_id)

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self.ctx.store.get(proposal_id)

    def get_actions(self, proposal_id: int) -> List[ProposalAction]:
        return list(self.ctx.store.get(proposal_id).actions)

    def get_receipt(self, proposal_id: int, voter: str) -> Receipt:
        return self.voting.get_receipt(proposal_id, voter)

    def get_active_proposals(self) -> List[int]:
        return self.ctx.store.active.to_list()

    def stale_proposals(self) -> List[int]:
        self._require_initialized()
        return self.lifecycle.stale_proposals()

    def has_live_proposal(self, proposer: str) -> bool:
        self._require_initialized()
        return self.lifecycle.has_live_proposal(proposer)

    @property
    def proposal_count(self) -> int:
        return self.ctx.store.proposal_count

    def latest_proposal_id(self, proposer: str) -> int:
        return self.ctx.store.latest_proposal_id(normalize_address(proposer))

    def community_score(self, address: str) -> CommunityScore:
        return self.ctx.store.score(normalize_address(address))

    @property
    def total_community_score(self) -> CommunityScore:
        return self.ctx.store.total_score.copy()

    def proposal_threshold(self) -> int:
        """Votes needed to propose right now."""
        self._require_initialized()
        return bps_to_votes(
            self.ctx.params.proposal_threshold_bps,
            self.ctx.ledger.get_total_voting_power(),
        )

    def quorum_votes(self) -> int:
        """Quorum a proposal created right now would snapshot."""
        self._require_initialized()
        return bps_to_votes(
            self.ctx.params.quorum_votes_bps,
            self.ctx.ledger.get_total_voting_power(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "initialized": self._initialized,
            "params": self.ctx.params.to_dict(),
            "roles": self.ctx.access.to_dict(),
            "store": self.ctx.store.to_dict(),
            "events": self.ctx.events.to_list(),
        }

    def __repr__(self) -> str:
        return (
            f"<Governor {self.address} proposals={self.proposal_count} "
            f"active={len(self.ctx.store.active)}>"
        )
