"""
Proposal Store

Durable record of every proposal and its receipts, the active proposal
working set, and community score counters.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from ..logger import get_logger
from .errors import InvalidId, NotInActiveProposals
from .proposals import Proposal

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  COMMUNITY SCORE
# ══════════════════════════════════════════════════════════════════════

@dataclass
class CommunityScore:
    """Participation counters for one address or for the whole DAO."""
    proposals_created: int = 0
    proposals_passed: int = 0
    votes_cast: int = 0

    def copy(self) -> "CommunityScore":
        return CommunityScore(
            proposals_created=self.proposals_created,
            proposals_passed=self.proposals_passed,
            votes_cast=self.votes_cast,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "proposalsCreated": self.proposals_created,
            "proposalsPassed": self.proposals_passed,
            "votesCast": self.votes_cast,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "CommunityScore":
        return cls(
            proposals_created=data.get("proposalsCreated", 0),
            proposals_passed=data.get("proposalsPassed", 0),
            votes_cast=data.get("votesCast", 0),
        )


# ══════════════════════════════════════════════════════════════════════
#  ACTIVE PROPOSAL SET
# ══════════════════════════════════════════════════════════════════════

class ActiveProposalSet:
    """
    Unordered set of proposal ids not yet queued, executed, canceled or
    vetoed. Removal swaps the last element into the vacated slot.
    """

    def __init__(self, ids: Optional[List[int]] = None):
        self._ids: List[int] = []
        self._index: Dict[int, int] = {}
        for pid in ids or []:
            self.add(pid)

    def add(self, proposal_id: int):
        if proposal_id in self._index:
            return
        self._index[proposal_id] = len(self._ids)
        self._ids.append(proposal_id)

    def remove(self, proposal_id: int):
        """Remove *proposal_id*; raises NotInActiveProposals if absent."""
        pos = self._index.pop(proposal_id, None)
        if pos is None:
            raise NotInActiveProposals(f"Proposal #{proposal_id} is not active")
        last = self._ids.pop()
        if last != proposal_id:
            self._ids[pos] = last
            self._index[last] = pos

    def __contains__(self, proposal_id: int) -> bool:
        return proposal_id in self._index

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._ids))

    def to_list(self) -> List[int]:
        return list(self._ids)


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL STORE
# ══════════════════════════════════════════════════════════════════════

class ProposalStore:
    """
    Owns all proposal records. Ids are allocated monotonically from 1 and
    never reused; records are never deleted.
    """

    def __init__(self):
        self._proposals: Dict[int, Proposal] = {}
        self._proposal_count = 0
        self._latest_proposal_ids: Dict[str, int] = {}
        self.active = ActiveProposalSet()
        self._scores: Dict[str, CommunityScore] = {}
        self.total_score = CommunityScore()

    # ── Proposals ─────────────────────────────────────────────────────

    @property
    def proposal_count(self) -> int:
        return self._proposal_count

    def next_id(self) -> int:
        return self._proposal_count + 1

    def add(self, proposal: Proposal):
        """Record a freshly created proposal and mark it active."""
        if proposal.id != self.next_id():
            raise InvalidId(
                f"Expected proposal id {self.next_id()}, got {proposal.id}"
            )
        self._proposals[proposal.id] = proposal
        self._proposal_count = proposal.id
        self._latest_proposal_ids[proposal.proposer] = proposal.id
        self.active.add(proposal.id)

    def check_id(self, proposal_id: int):
        if proposal_id < 0 or proposal_id > self._proposal_count:
            raise InvalidId(
                f"Invalid proposal id {proposal_id} (count={self._proposal_count})"
            )

    def get(self, proposal_id: int) -> Proposal:
        if proposal_id == 0:
            raise InvalidId("Proposal id 0 is the empty sentinel")
        self.check_id(proposal_id)
        return self._proposals[proposal_id]

    def latest_proposal_id(self, proposer: str) -> int:
        return self._latest_proposal_ids.get(proposer, 0)

    def __iter__(self) -> Iterator[Proposal]:
        return iter(list(self._proposals.values()))

    def __len__(self) -> int:
        return len(self._proposals)

    # ── Community scores ──────────────────────────────────────────────

    def score(self, address: str) -> CommunityScore:
        return self._scores.get(address, CommunityScore()).copy()

    def _score_for_update(self, address: str) -> CommunityScore:
        return self._scores.setdefault(address, CommunityScore())

    def record_proposal_created(self, proposer: str):
        self._score_for_update(proposer).proposals_created += 1
        self.total_score.proposals_created += 1

    def record_proposal_passed(self, proposer: str):
        self._score_for_update(proposer).proposals_passed += 1
        self.total_score.proposals_passed += 1

    def record_vote_cast(self, voter: str):
        self._score_for_update(voter).votes_cast += 1
        self.total_score.votes_cast += 1

    def overwrite_scores(
        self,
        scores: Dict[str, CommunityScore],
        total: CommunityScore,
    ):
        """Replace per-address records and the aggregate wholesale."""
        for address, score in scores.items():
            self._scores[address] = score.copy()
        self.total_score = total.copy()

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalCount": self._proposal_count,
            "proposals": [p.to_dict() for p in self._proposals.values()],
            "latestProposalIds": dict(self._latest_proposal_ids),
            "activeProposals": self.active.to_list(),
            "scores": {a: s.to_dict() for a, s in self._scores.items()},
            "totalScore": self.total_score.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProposalStore":
        store = cls()
        for raw in data.get("proposals", []):
            proposal = Proposal.from_dict(raw)
            store._proposals[proposal.id] = proposal
        store._proposal_count = data.get("proposalCount", len(store._proposals))
        store._latest_proposal_ids = dict(data.get("latestProposalIds", {}))
        store.active = ActiveProposalSet(data.get("activeProposals", []))
        store._scores = {
            a: CommunityScore.from_dict(s) for a, s in data.get("scores", {}).items()
        }
        store.total_score = CommunityScore.from_dict(data.get("totalScore", {}))
        logger.info(
            f"Proposal store restored: {store._proposal_count} proposals, "
            f"{len(store.active)} active"
        )
        return store
