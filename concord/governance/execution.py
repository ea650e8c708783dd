"""
Execution Bridge

Moves Succeeded proposals into the timelock and dispatches them once the
delay has elapsed.
"""

from typing import Any, List

from ..logger import get_logger
from .context import GovernanceContext
from .errors import InvalidProposal, InvalidStatus, NotInActiveProposals, TimelockError
from .events import ProposalExecuted, ProposalQueued
from .proposals import ProposalStatus
from .state import ProposalState
from .timelock import transaction_hash

logger = get_logger(__name__)


class ExecutionBridge:
    """Queue / execute choreography against the timelock."""

    def __init__(self, ctx: GovernanceContext):
        self.ctx = ctx

    def queue(self, caller: str, proposal_id: int) -> int:
        """Schedule every action of a Succeeded proposal. Returns the eta."""
        ctx = self.ctx
        state = ctx.state(proposal_id)
        if state != ProposalState.SUCCEEDED:
            raise InvalidStatus(
                f"Proposal #{proposal_id} can only be queued if it is SUCCEEDED "
                f"(state={state.name})"
            )
        if proposal_id not in ctx.store.active:
            raise NotInActiveProposals(f"Proposal #{proposal_id} is not active")

        proposal = ctx.store.get(proposal_id)
        timelock = ctx.timelock
        eta = ctx.now() + timelock.delay

        seen = set()
        for action in proposal.actions:
            key = transaction_hash(
                action.target, action.value, action.signature, action.calldata, eta
            )
            if key in seen or timelock.is_queued(
                action.target, action.value, action.signature, action.calldata, eta
            ):
                raise InvalidProposal(
                    f"Identical proposal action already queued at eta {eta}"
                )
            seen.add(key)

        for action in proposal.actions:
            timelock.queue_transaction(
                ctx.address, action.target, action.value,
                action.signature, action.calldata, eta,
            )

        proposal.eta = eta
        proposal.transition_to(ProposalStatus.QUEUED, f"queued by {caller} (ETA={eta})", ctx.now())
        ctx.store.active.remove(proposal_id)
        ctx.events.emit(ProposalQueued(proposal_id, eta))
        return eta

    def execute(self, caller: str, proposal_id: int) -> List[Any]:
        """
        Dispatch every action of a Queued proposal, in order, at its eta.

        Timing and scheduling are checked before anything is written. The
        executed latch is set before dispatch so a re-entrant call sees
        the proposal as EXECUTED. If an action fails, the actions not yet
        dispatched are canceled in the timelock and the error propagates;
        the proposal stays EXECUTED.
        """
        ctx = self.ctx
        state = ctx.state(proposal_id)
        if state != ProposalState.QUEUED:
            raise InvalidStatus(
                f"Proposal #{proposal_id} can only be executed if it is QUEUED "
                f"(state={state.name})"
            )
        proposal = ctx.store.get(proposal_id)
        now = ctx.now()
        if now < proposal.eta:
            raise TimelockError(
                f"Proposal #{proposal_id} hasn't surpassed time lock (remaining={proposal.eta - now}s)"
            )
        for action in proposal.actions:
            if not ctx.timelock.is_queued(
                action.target, action.value, action.signature, action.calldata, proposal.eta
            ):
                raise TimelockError(
                    f"Proposal #{proposal_id} action {action.signature} is not scheduled"
                )

        ctx.store.record_proposal_passed(proposal.proposer)
        proposal.transition_to(ProposalStatus.EXECUTED, f"executed by {caller}", now)

        results = []
        for index, action in enumerate(proposal.actions):
            try:
                results.append(ctx.timelock.execute_transaction(
                    ctx.address, action.target, action.value,
                    action.signature, action.calldata, proposal.eta,
                ))
            except Exception:
                logger.error(
                    f"Proposal #{proposal_id}: action {index} ({action.signature}) failed; "
                    f"canceling {len(proposal.actions) - index} scheduled action(s)"
                )
                self._cancel_remaining(proposal, index)
                raise

        ctx.events.emit(ProposalExecuted(proposal_id))
        return results

    def _cancel_remaining(self, proposal, start: int):
        timelock = self.ctx.timelock
        for action in proposal.actions[start:]:
            if timelock.is_queued(
                action.target, action.value, action.signature, action.calldata, proposal.eta
            ):
                timelock.cancel_transaction(
                    self.ctx.address, action.target, action.value,
                    action.signature, action.calldata, proposal.eta,
                )
