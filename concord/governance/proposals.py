"""
Governance Proposals

Defines the action payload, per-voter receipts, the stored lifecycle status
and the Proposal dataclass that tracks one submission from creation to a
terminal outcome.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..logger import get_logger
from ..constants import MAX_OPERATIONS, VOTE_ABSTAIN, VOTE_AGAINST, VOTE_FOR
from .addresses import normalize_address
from .errors import AlreadyVoted, InvalidInput, InvalidProposal, InvalidStatus

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ProposalStatus(IntEnum):
    """Stored lifecycle stage. Time-derived states live in state.py."""
    CREATED = 0     # Submitted, awaiting admin verification
    VERIFIED = 1    # Verified, voting window open or closed
    QUEUED = 2      # Actions scheduled in the timelock
    EXECUTED = 3    # Actions dispatched
    CANCELED = 4    # Canceled by proposer or by anyone once stale
    VETOED = 5      # Vetoed by an administrator


# Valid forward transitions
_VALID_TRANSITIONS: Dict[ProposalStatus, set] = {
    ProposalStatus.CREATED:  {ProposalStatus.VERIFIED, ProposalStatus.CANCELED,
                              ProposalStatus.VETOED},
    ProposalStatus.VERIFIED: {ProposalStatus.QUEUED, ProposalStatus.CANCELED,
                              ProposalStatus.VETOED},
    ProposalStatus.QUEUED:   {ProposalStatus.EXECUTED, ProposalStatus.CANCELED,
                              ProposalStatus.VETOED},
    # Terminal states
    ProposalStatus.EXECUTED: set(),
    ProposalStatus.CANCELED: set(),
    ProposalStatus.VETOED:   set(),
}

_FINAL = (ProposalStatus.EXECUTED, ProposalStatus.CANCELED, ProposalStatus.VETOED)

# Stages only reachable through verification
_PAST_VERIFICATION = (ProposalStatus.VERIFIED, ProposalStatus.QUEUED, ProposalStatus.EXECUTED)


# ══════════════════════════════════════════════════════════════════════
#  ACTIONS & RECEIPTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProposalAction:
    """One privileged call: target, value, function signature and calldata."""
    target: str
    value: int
    signature: str
    calldata: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "value": self.value,
            "signature": self.signature,
            "calldata": "0x" + self.calldata.hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProposalAction":
        return cls(
            target=data["target"],
            value=int(data["value"]),
            signature=data["signature"],
            calldata=bytes.fromhex(data["calldata"][2:]),
        )


def build_actions(
    targets: Sequence[str],
    values: Sequence[int],
    signatures: Sequence[str],
    calldatas: Sequence[bytes],
) -> Tuple[ProposalAction, ...]:
    """
    Zip the four parallel lists into action tuples.

    Raises InvalidProposal when the lists differ in length, are empty, or
    exceed MAX_OPERATIONS.
    """
    n = len(targets)
    if not (n == len(values) == len(signatures) == len(calldatas)):
        raise InvalidProposal("Proposal function information arity mismatch")
    if n == 0:
        raise InvalidProposal("Proposal must provide actions")
    if n > MAX_OPERATIONS:
        raise InvalidProposal(f"Too many actions ({n} > {MAX_OPERATIONS})")

    actions = []
    for target, value, signature, calldata in zip(targets, values, signatures, calldatas):
        if int(value) < 0:
            raise InvalidProposal(f"Negative action value: {value}")
        actions.append(ProposalAction(
            target=normalize_address(target),
            value=int(value),
            signature=signature,
            calldata=bytes(calldata),
        ))
    return tuple(actions)


class Support:
    """Vote support values."""
    AGAINST = VOTE_AGAINST
    FOR = VOTE_FOR
    ABSTAIN = VOTE_ABSTAIN

    _NAMES = {
        VOTE_AGAINST: "AGAINST",
        VOTE_FOR: "FOR",
        VOTE_ABSTAIN: "ABSTAIN",
    }

    @classmethod
    def name(cls, support: int) -> str:
        return cls._NAMES.get(support, "UNKNOWN")

    @classmethod
    def is_valid(cls, support: int) -> bool:
        if not isinstance(support, int) or isinstance(support, bool):
            return False
        return support in cls._NAMES


@dataclass(frozen=True)
class Receipt:
    """A voter's single, immutable participation record on one proposal."""
    has_voted: bool = False
    support: int = 0
    votes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasVoted": self.has_voted,
            "support": self.support,
            "votes": self.votes,
        }


EMPTY_RECEIPT = Receipt()


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Proposal:
    """
    Governance proposal.

    Fields:
        id:                  Monotonic identifier, starting at 1
        proposer:            Checksum address of the submitter
        actions:             Ordered action tuples
        start_time:          Voting opens (creation time + voting delay)
        end_time:            Voting closes (start_time + voting period)
        proposal_threshold:  Votes needed to propose, snapshotted at creation
        quorum_votes:        For-votes needed to succeed, snapshotted at creation
        description:         Free-form rationale
        eta:                 Timelock execution time, 0 until queued
        status:              Stored lifecycle stage
        cleared_at:          Set once `clear` garbage-collected the proposal
    """
    id: int
    proposer: str
    actions: Tuple[ProposalAction, ...]
    start_time: int
    end_time: int
    proposal_threshold: int
    quorum_votes: int
    description: str = ""
    created_at: int = 0
    eta: int = 0
    for_votes: int = 0
    against_votes: int = 0
    abstain_votes: int = 0
    status: ProposalStatus = ProposalStatus.CREATED
    cleared_at: Optional[int] = None
    receipts: Dict[str, Receipt] = field(default_factory=dict, repr=False)
    _history: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.id < 1:
            raise InvalidProposal(f"Proposal id must be >= 1, got {self.id}")
        if not self.actions:
            raise InvalidProposal("Proposal must provide actions")
        if self.start_time >= self.end_time:
            raise InvalidProposal("Voting window must end after it starts")
        if not self._history:
            self._history.append({
                "from": "INIT",
                "to": ProposalStatus.CREATED.name,
                "reason": "created",
                "timestamp": self.created_at,
            })

    # ── Latches ───────────────────────────────────────────────────────

    @property
    def verified(self) -> bool:
        if self.status in _PAST_VERIFICATION:
            return True
        return any(h["to"] == ProposalStatus.VERIFIED.name for h in self._history)

    @property
    def canceled(self) -> bool:
        return self.status == ProposalStatus.CANCELED

    @property
    def vetoed(self) -> bool:
        return self.status == ProposalStatus.VETOED

    @property
    def executed(self) -> bool:
        return self.status == ProposalStatus.EXECUTED

    @property
    def is_final(self) -> bool:
        """Executed, canceled or vetoed."""
        return self.status in _FINAL

    @property
    def is_scheduled(self) -> bool:
        """Actions currently sit in the timelock."""
        return self.status == ProposalStatus.QUEUED and self.cleared_at is None

    @property
    def history(self) -> List[Dict[str, Any]]:
        return list(self._history)

    # ── Receipts ──────────────────────────────────────────────────────

    def get_receipt(self, voter: str) -> Receipt:
        return self.receipts.get(voter, EMPTY_RECEIPT)

    def record_vote(self, voter: str, support: int, votes: int) -> Receipt:
        """Write the voter's receipt and add *votes* to the matching tally."""
        if voter in self.receipts:
            raise AlreadyVoted(f"{voter} has already voted on proposal #{self.id}")
        if support == Support.AGAINST:
            self.against_votes += votes
        elif support == Support.FOR:
            self.for_votes += votes
        elif support == Support.ABSTAIN:
            self.abstain_votes += votes
        else:
            raise InvalidInput(f"Invalid vote type: {support}")
        receipt = Receipt(has_voted=True, support=support, votes=votes)
        self.receipts[voter] = receipt
        return receipt

    # ── State transitions ─────────────────────────────────────────────

    def transition_to(self, new_status: ProposalStatus, reason: str, timestamp: int):
        """
        Advance proposal to *new_status*.

        Raises InvalidStatus on invalid transitions.
        """
        allowed = _VALID_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStatus(
                f"Cannot transition #{self.id} from {self.status.name} → {new_status.name}. "
                f"Allowed: {[s.name for s in allowed]}"
            )
        old = self.status
        self._history.append({
            "from": old.name,
            "to": new_status.name,
            "reason": reason,
            "timestamp": timestamp,
        })
        self.status = new_status
        logger.info(f"Proposal #{self.id}: {old.name} → {new_status.name} | {reason}")

    def mark_cleared(self, timestamp: int):
        self.cleared_at = timestamp
        self._history.append({
            "from": self.status.name,
            "to": self.status.name,
            "reason": "cleared",
            "timestamp": timestamp,
        })

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposer": self.proposer,
            "actions": [a.to_dict() for a in self.actions],
            "description": self.description,
            "createdAt": self.created_at,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "proposalThreshold": self.proposal_threshold,
            "quorumVotes": self.quorum_votes,
            "eta": self.eta,
            "forVotes": self.for_votes,
            "againstVotes": self.against_votes,
            "abstainVotes": self.abstain_votes,
            "status": self.status.name,
            "verified": self.verified,
            "canceled": self.canceled,
            "vetoed": self.vetoed,
            "executed": self.executed,
            "clearedAt": self.cleared_at,
            "receipts": {v: r.to_dict() for v, r in self.receipts.items()},
            "history": self.history,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        proposal = cls(
            id=data["id"],
            proposer=data["proposer"],
            actions=tuple(ProposalAction.from_dict(a) for a in data["actions"]),
            start_time=data["startTime"],
            end_time=data["endTime"],
            proposal_threshold=data["proposalThreshold"],
            quorum_votes=data["quorumVotes"],
            description=data.get("description", ""),
            created_at=data.get("createdAt", 0),
            eta=data.get("eta", 0),
            for_votes=data.get("forVotes", 0),
            against_votes=data.get("againstVotes", 0),
            abstain_votes=data.get("abstainVotes", 0),
            status=ProposalStatus[data.get("status", "CREATED")],
            cleared_at=data.get("clearedAt"),
            receipts={
                voter: Receipt(
                    has_voted=r["hasVoted"], support=r["support"], votes=r["votes"]
                )
                for voter, r in data.get("receipts", {}).items()
            },
            _history=list(data.get("history", [])),
        )
        # Snapshots without history still carry the verification latch
        if data.get("verified") and not proposal.verified:
            proposal._history.append({
                "from": ProposalStatus.CREATED.name,
                "to": ProposalStatus.VERIFIED.name,
                "reason": "restored",
                "timestamp": proposal.created_at,
            })
        return proposal

    def __repr__(self) -> str:
        return (
            f"<Proposal #{self.id} proposer={self.proposer} "
            f"actions={len(self.actions)} status={self.status.name}>"
        )
