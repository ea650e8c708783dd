"""
Proposal state resolution.

The derived state of a proposal is a pure function of its stored fields,
the current time and the timelock grace period.
"""

from enum import IntEnum

from .proposals import Proposal, ProposalStatus


class ProposalState(IntEnum):
    """Observable lifecycle state."""
    PENDING = 0
    ACTIVE = 1
    CANCELED = 2
    DEFEATED = 3
    SUCCEEDED = 4
    QUEUED = 5
    EXPIRED = 6
    EXECUTED = 7
    VETOED = 8


LIVE_STATES = (ProposalState.PENDING, ProposalState.ACTIVE)


def resolve_state(proposal: Proposal, now: int, grace_period: int) -> ProposalState:
    """
    Derive *proposal*'s state at time *now*.

    Precedence:
        1. VETOED     vetoed
        2. CANCELED   canceled, or the window closed before verification
        3. PENDING    before start_time, or not verified
        4. ACTIVE     now <= end_time
        5. DEFEATED   against >= for, or for < quorum
        6. SUCCEEDED  not queued (eta unset)
        7. EXECUTED   executed
        8. EXPIRED    now >= eta + grace_period
        9. QUEUED
    """
    if proposal.status == ProposalStatus.VETOED:
        return ProposalState.VETOED
    verified = proposal.verified
    if proposal.status == ProposalStatus.CANCELED or (
        not verified and now > proposal.end_time
    ):
        return ProposalState.CANCELED
    if now < proposal.start_time or not verified:
        return ProposalState.PENDING
    if now <= proposal.end_time:
        return ProposalState.ACTIVE
    if (
        proposal.against_votes >= proposal.for_votes
        or proposal.for_votes < proposal.quorum_votes
    ):
        return ProposalState.DEFEATED
    if proposal.eta == 0:
        return ProposalState.SUCCEEDED
    if proposal.status == ProposalStatus.EXECUTED:
        return ProposalState.EXECUTED
    if now >= proposal.eta + grace_period:
        return ProposalState.EXPIRED
    return ProposalState.QUEUED
