"""
Governance event records.

Every successful state change appends one record to the governor's
EventLog for observability and off-chain indexing.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from .proposals import ProposalAction, Support


@dataclass(frozen=True)
class ProposalCreated:
    """Emitted when a proposal is recorded."""
    proposal_id: int
    proposer: str
    actions: Tuple[ProposalAction, ...]
    start_time: int
    end_time: int
    proposal_threshold: int
    quorum_votes: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ProposalCreated",
            "id": self.proposal_id,
            "proposer": self.proposer,
            "targets": [a.target for a in self.actions],
            "values": [a.value for a in self.actions],
            "signatures": [a.signature for a in self.actions],
            "calldatas": ["0x" + a.calldata.hex() for a in self.actions],
            "startTime": self.start_time,
            "endTime": self.end_time,
            "proposalThreshold": self.proposal_threshold,
            "quorumVotes": self.quorum_votes,
            "description": self.description,
        }


@dataclass(frozen=True)
class ProposalVerified:
    proposal_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalVerified", "id": self.proposal_id}


@dataclass(frozen=True)
class ProposalQueued:
    proposal_id: int
    eta: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalQueued", "id": self.proposal_id, "eta": self.eta}


@dataclass(frozen=True)
class ProposalExecuted:
    proposal_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalExecuted", "id": self.proposal_id}


@dataclass(frozen=True)
class ProposalCanceled:
    proposal_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalCanceled", "id": self.proposal_id}


@dataclass(frozen=True)
class ProposalVetoed:
    proposal_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalVetoed", "id": self.proposal_id}


@dataclass(frozen=True)
class ProposalCleared:
    proposal_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalCleared", "id": self.proposal_id}


@dataclass(frozen=True)
class VoteCast:
    """Emitted on every counted vote."""
    voter: str
    proposal_id: int
    support: int
    votes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "VoteCast",
            "voter": self.voter,
            "proposalId": self.proposal_id,
            "support": Support.name(self.support),
            "votes": self.votes,
        }


@dataclass(frozen=True)
class ParameterChanged:
    """Emitted by every tunable setter, carrying the old and new value."""
    name: str
    old_value: Any
    new_value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ParameterChanged",
            "name": self.name,
            "oldValue": self.old_value,
            "newValue": self.new_value,
        }


@dataclass(frozen=True)
class CommunityScoresUpdated:
    addresses: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "CommunityScoresUpdated", "addresses": list(self.addresses)}


class EventLog:
    """Append-only list of emitted governance events."""

    def __init__(self):
        self._events: List[Any] = []

    def emit(self, event: Any):
        self._events.append(event)

    def all(self, event_type: Optional[Type] = None) -> List[Any]:
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self, event_type: Optional[Type] = None) -> Optional[Any]:
        matching = self.all(event_type)
        return matching[-1] if matching else None

    def __len__(self) -> int:
        return len(self._events)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._events]
