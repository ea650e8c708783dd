"""
Proposal Lifecycle Engine

Creation, verification, cancellation, veto and clearing. Every operation
validates fully before it writes, so a raised error leaves no trace.
"""

from typing import List, Sequence

from ..logger import get_logger
from .addresses import normalize_address
from .context import GovernanceContext
from .errors import NotEligible, InvalidStatus, TimelockError
from .events import (
    ProposalCanceled,
    ProposalCleared,
    ProposalCreated,
    ProposalVerified,
    ProposalVetoed,
)
from .proposals import Proposal, ProposalStatus, build_actions
from .roles import ADMIN_ROLES
from .state import LIVE_STATES, ProposalState
from .thresholds import bps_to_votes

logger = get_logger(__name__)

_CLEARABLE = (ProposalState.EXPIRED, ProposalState.DEFEATED)
_STALE = (ProposalState.DEFEATED, ProposalState.CANCELED)


class LifecycleEngine:
    """Drives a proposal from submission to cancel / veto / clear."""

    def __init__(self, ctx: GovernanceContext):
        self.ctx = ctx

    # ── Propose ───────────────────────────────────────────────────────

    def propose(
        self,
        caller: str,
        targets: Sequence[str],
        values: Sequence[int],
        signatures: Sequence[str],
        calldatas: Sequence[bytes],
        description: str = "",
    ) -> int:
        ctx = self.ctx
        proposer = normalize_address(caller)
        total = ctx.ledger.get_total_voting_power()
        threshold = bps_to_votes(ctx.params.proposal_threshold_bps, total)
        votes = ctx.ledger.get_votes(proposer)
        if votes < threshold:
            raise NotEligible(
                f"{proposer} has {votes} votes, proposal threshold is {threshold}"
            )

        actions = build_actions(targets, values, signatures, calldatas)

        latest = ctx.store.latest_proposal_id(proposer)
        if latest != 0:
            latest_state = ctx.state(latest)
            if latest_state in LIVE_STATES:
                raise NotEligible(
                    f"{proposer} already has a live proposal "
                    f"(#{latest} is {latest_state.name})"
                )

        now = ctx.now()
        start_time = now + ctx.params.voting_delay
        end_time = start_time + ctx.params.voting_period
        proposal = Proposal(
            id=ctx.store.next_id(),
            proposer=proposer,
            actions=actions,
            start_time=start_time,
            end_time=end_time,
            proposal_threshold=threshold,
            quorum_votes=bps_to_votes(ctx.params.quorum_votes_bps, total),
            description=description,
            created_at=now,
        )
        ctx.store.add(proposal)
        ctx.events.emit(ProposalCreated(
            proposal_id=proposal.id,
            proposer=proposer,
            actions=actions,
            start_time=start_time,
            end_time=end_time,
            proposal_threshold=proposal.proposal_threshold,
            quorum_votes=proposal.quorum_votes,
            description=description,
        ))
        logger.info(
            f"Proposal #{proposal.id} created by {proposer}: {len(actions)} action(s), "
            f"threshold={threshold} quorum={proposal.quorum_votes} "
            f"window=[{start_time}, {end_time}]"
        )
        ctx.refund("propose", proposer)
        return proposal.id

    # ── Verify ────────────────────────────────────────────────────────

    def verify(self, caller: str, proposal_id: int):
        """Admin confirmation that opens the proposal's voting window."""
        ctx = self.ctx
        ctx.access.require(caller, *ADMIN_ROLES)
        state = ctx.state(proposal_id)
        proposal = ctx.store.get(proposal_id)
        if state != ProposalState.PENDING or proposal.status != ProposalStatus.CREATED:
            raise InvalidStatus(
                f"Proposal #{proposal_id} cannot be verified (state={state.name})"
            )
        proposal.transition_to(ProposalStatus.VERIFIED, "verified by admin", ctx.now())
        ctx.store.record_proposal_created(proposal.proposer)
        ctx.events.emit(ProposalVerified(proposal_id))

    # ── Cancel / Veto / Clear ─────────────────────────────────────────

    def cancel(self, caller: str, proposal_id: int):
        """
        Cancel a proposal.

        The proposer may always cancel. Anyone may cancel a proposal that
        was never verified and whose voting window has closed.
        """
        ctx = self.ctx
        proposal = ctx.store.get(proposal_id)
        if proposal.is_final:
            raise InvalidStatus(
                f"Proposal #{proposal_id} is already {proposal.status.name}"
            )
        caller = normalize_address(caller)
        now = ctx.now()
        if caller != proposal.proposer:
            if proposal.verified or now <= proposal.end_time:
                raise NotEligible(f"{caller} may not cancel proposal #{proposal_id}")

        self._unwind(proposal, ctx.state(proposal_id))
        proposal.transition_to(ProposalStatus.CANCELED, f"canceled by {caller}", now)
        ctx.events.emit(ProposalCanceled(proposal_id))

    def veto(self, caller: str, proposal_id: int):
        ctx = self.ctx
        ctx.access.require(caller, *ADMIN_ROLES)
        proposal = ctx.store.get(proposal_id)
        if proposal.is_final:
            raise InvalidStatus(
                f"Proposal #{proposal_id} is already {proposal.status.name}"
            )
        self._unwind(proposal, ctx.state(proposal_id))
        proposal.transition_to(ProposalStatus.VETOED, "vetoed by admin", ctx.now())
        ctx.events.emit(ProposalVetoed(proposal_id))
        logger.warning(f"VETO: proposal #{proposal_id} vetoed by {caller}")

    def clear(self, caller: str, proposal_id: int):
        """
        Garbage-collect a Defeated or Expired proposal.

        Leaves the canceled latch untouched. Clearing the same proposal
        twice is a no-op.
        """
        ctx = self.ctx
        state = ctx.state(proposal_id)
        if state not in _CLEARABLE:
            raise NotEligible(
                f"Proposal #{proposal_id} is {state.name}; only EXPIRED or DEFEATED can be cleared"
            )
        proposal = ctx.store.get(proposal_id)
        if proposal.cleared_at is not None:
            logger.debug(f"Proposal #{proposal_id} already cleared")
            return
        self._unwind(proposal, state)
        proposal.mark_cleared(ctx.now())
        ctx.events.emit(ProposalCleared(proposal_id))
        logger.warning(f"Proposal #{proposal_id} cleared ({state.name}) by {caller}")

    def _unwind(self, proposal: Proposal, state: ProposalState):
        """
        Undo the timelock schedule of a Queued / Expired proposal, or drop
        any other proposal from the active set.
        """
        ctx = self.ctx
        if proposal.cleared_at is not None:
            return
        if state in (ProposalState.QUEUED, ProposalState.EXPIRED):
            timelock = ctx.timelock
            for action in proposal.actions:
                if not timelock.is_queued(
                    action.target, action.value, action.signature, action.calldata, proposal.eta
                ):
                    raise TimelockError(
                        f"Proposal #{proposal.id} action {action.signature} is not scheduled"
                    )
            for action in proposal.actions:
                timelock.cancel_transaction(
                    ctx.address, action.target, action.value,
                    action.signature, action.calldata, proposal.eta,
                )
        else:
            ctx.store.active.remove(proposal.id)

    # ── Queries ───────────────────────────────────────────────────────

    def has_live_proposal(self, proposer: str) -> bool:
        latest = self.ctx.store.latest_proposal_id(normalize_address(proposer))
        return latest != 0 and self.ctx.state(latest) in LIVE_STATES

    def stale_proposals(self) -> List[int]:
        """Active-set ids that `clear` or `cancel` can prune right now."""
        return [pid for pid in self.ctx.store.active if self.ctx.state(pid) in _STALE]
