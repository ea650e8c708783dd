"""
Stake-Weighted Voting Engine

Implements:
  - One receipt per (proposal, voter), immutable once written
  - Support values: Against (0) / For (1) / Abstain (2)
  - Weight read from the voting-power ledger at the moment of the vote
"""

from typing import List

from ..logger import get_logger
from .addresses import normalize_address
from .context import GovernanceContext
from .errors import AlreadyVoted, InvalidInput, InvalidStatus
from .events import VoteCast
from .proposals import Receipt, Support
from .state import ProposalState

logger = get_logger(__name__)


class VotingEngine:
    """Accepts votes during a proposal's Active window."""

    def __init__(self, ctx: GovernanceContext):
        self.ctx = ctx

    def cast_vote(self, caller: str, proposal_id: int, support: int) -> int:
        """
        Cast *caller*'s vote on *proposal_id*.

        Returns the weight counted.
        """
        ctx = self.ctx
        voter = normalize_address(caller)
        state = ctx.state(proposal_id)
        if state != ProposalState.ACTIVE:
            raise InvalidStatus(
                f"Voting is closed for proposal #{proposal_id} (state={state.name})"
            )
        if not Support.is_valid(support):
            raise InvalidInput(f"Invalid vote type: {support}")

        proposal = ctx.store.get(proposal_id)
        if proposal.get_receipt(voter).has_voted:
            raise AlreadyVoted(f"{voter} has already voted on proposal #{proposal_id}")

        votes = ctx.ledger.get_votes(voter)
        proposal.record_vote(voter, support, votes)
        # Score counters only after the tally so they never influence it
        ctx.store.record_vote_cast(voter)
        ctx.events.emit(VoteCast(
            voter=voter, proposal_id=proposal_id, support=support, votes=votes,
        ))
        logger.info(
            f"Vote: {voter} → {Support.name(support)} on proposal #{proposal_id} "
            f"(votes={votes})"
        )
        ctx.refund("vote", voter)
        return votes

    # ── Queries ───────────────────────────────────────────────────────

    def get_receipt(self, proposal_id: int, voter: str) -> Receipt:
        return self.ctx.store.get(proposal_id).get_receipt(normalize_address(voter))

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self.get_receipt(proposal_id, voter).has_voted

    def voters(self, proposal_id: int) -> List[str]:
        return list(self.ctx.store.get(proposal_id).receipts)
