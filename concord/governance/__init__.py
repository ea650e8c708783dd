"""
Concord On-Chain Governance

Provides:
  - Proposal / ProposalAction / Receipt / ProposalStatus   (proposals.py)
  - ProposalState / resolve_state                          (state.py)
  - ProposalStore / ActiveProposalSet / CommunityScore     (store.py)
  - VotingEngine                                           (voting.py)
  - TimelockQueue / TimelockEntry / ExecutionBridge        (timelock.py, execution.py)
  - StakingLedger / VotingPowerLedger                      (ledger.py)
  - Governor                                               (governor.py)
"""

from .errors import (
    AlreadyInitialized,
    AlreadyVoted,
    GovernanceError,
    InvalidId,
    InvalidInput,
    InvalidProposal,
    InvalidStatus,
    NotAuthorized,
    NotEligible,
    NotInActiveProposals,
    ParameterOutOfBounds,
    TimelockError,
    Unauthorized,
    ZeroAddress,
)
from .proposals import (
    Proposal,
    ProposalAction,
    ProposalStatus,
    Receipt,
    Support,
    build_actions,
)
from .state import ProposalState, resolve_state
from .store import ActiveProposalSet, CommunityScore, ProposalStore
from .events import EventLog
from .roles import AccessControl, Role
from .ledger import StakingLedger, VotingPowerLedger
from .timelock import (
    Timelock,
    TimelockEntry,
    TimelockQueue,
    TimelockStatus,
    transaction_hash,
)
from .thresholds import bps_to_votes
from .parameters import GovernanceParameters, ParameterGovernor
from .lifecycle import LifecycleEngine
from .voting import VotingEngine
from .execution import ExecutionBridge
from .governor import Governor, encode_uint256

__all__ = [
    # Errors
    "AlreadyInitialized",
    "AlreadyVoted",
    "GovernanceError",
    "InvalidId",
    "InvalidInput",
    "InvalidProposal",
    "InvalidStatus",
    "NotAuthorized",
    "NotEligible",
    "NotInActiveProposals",
    "ParameterOutOfBounds",
    "TimelockError",
    "Unauthorized",
    "ZeroAddress",
    # Proposals
    "Proposal",
    "ProposalAction",
    "ProposalStatus",
    "Receipt",
    "Support",
    "build_actions",
    "ProposalState",
    "resolve_state",
    # Store
    "ActiveProposalSet",
    "CommunityScore",
    "ProposalStore",
    "EventLog",
    # Roles
    "AccessControl",
    "Role",
    # Collaborators
    "StakingLedger",
    "VotingPowerLedger",
    "Timelock",
    "TimelockEntry",
    "TimelockQueue",
    "TimelockStatus",
    "transaction_hash",
    # Engines
    "bps_to_votes",
    "GovernanceParameters",
    "ParameterGovernor",
    "LifecycleEngine",
    "VotingEngine",
    "ExecutionBridge",
    "Governor",
    "encode_uint256",
]
