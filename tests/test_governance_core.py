"""
Governance Core Test Suite

Coverage:
  - Basis-point threshold math and address normalization
  - Proposal actions, receipts and the stored status transition table
  - ProposalStore / ActiveProposalSet bookkeeping and snapshots
  - Derived proposal state precedence
  - Event log, access control, in-memory timelock and staking ledger
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from eth_utils import to_checksum_address

from concord.constants import (
    DAY,
    MAX_OPERATIONS,
    TIMELOCK_DEFAULT_DELAY,
    TIMELOCK_GRACE_PERIOD,
    ZERO_ADDRESS,
)
from concord.governance.addresses import normalize_address, require_nonzero
from concord.governance.errors import (
    AlreadyVoted,
    InvalidId,
    InvalidInput,
    InvalidProposal,
    InvalidStatus,
    NotAuthorized,
    NotInActiveProposals,
    TimelockError,
    Unauthorized,
    ZeroAddress,
)
from concord.governance.events import (
    EventLog,
    ParameterChanged,
    ProposalCanceled,
    ProposalQueued,
    VoteCast,
)
from concord.governance.ledger import StakingLedger
from concord.governance.proposals import (
    Proposal,
    ProposalAction,
    ProposalStatus,
    Support,
    build_actions,
)
from concord.governance.roles import AccessControl, Role
from concord.governance.state import ProposalState, resolve_state
from concord.governance.store import ActiveProposalSet, CommunityScore, ProposalStore
from concord.governance.thresholds import bps_to_votes
from concord.governance.timelock import (
    TimelockQueue,
    TimelockStatus,
    transaction_hash,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = to_checksum_address("0x" + "a1" * 20)
BOB = to_checksum_address("0x" + "b2" * 20)
CAROL = to_checksum_address("0x" + "c3" * 20)
GOVERNOR = to_checksum_address("0x" + "10" * 20)
TIMELOCK = to_checksum_address("0x" + "20" * 20)
LEDGER = to_checksum_address("0x" + "30" * 20)
TARGET = to_checksum_address("0x" + "e5" * 20)
GRACE = TIMELOCK_GRACE_PERIOD


class FakeClock:
    """Manually advanced clock returning integer seconds."""

    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_action(signature="setValue(uint256)", calldata=b"\x01", value=0, target=TARGET):
    return ProposalAction(target=target, value=value, signature=signature, calldata=calldata)


def make_proposal(pid=1, start=100, end=200, quorum=5, proposer=ALICE, actions=None):
    return Proposal(
        id=pid,
        proposer=proposer,
        actions=actions or (make_action(),),
        start_time=start,
        end_time=end,
        proposal_threshold=1,
        quorum_votes=quorum,
        description="test proposal",
        created_at=start - 10,
    )


def verified(proposal):
    proposal.transition_to(ProposalStatus.VERIFIED, "verified", proposal.created_at)
    return proposal


def make_timelock(clock=None, **kwargs):
    clock = clock or FakeClock()
    return TimelockQueue(TIMELOCK, admin=GOVERNOR, clock=clock, **kwargs), clock


# ══════════════════════════════════════════════════════════════════════
#  THRESHOLDS & ADDRESSES
# ══════════════════════════════════════════════════════════════════════

class TestThresholds:

    def test_floor_division(self):
        assert bps_to_votes(50, 1000) == 5
        assert bps_to_votes(1, 9_999) == 0
        assert bps_to_votes(1, 10_000) == 1

    def test_full_and_zero(self):
        assert bps_to_votes(10_000, 1234) == 1234
        assert bps_to_votes(1000, 0) == 0


class TestAddresses:

    def test_normalizes_to_checksum(self):
        assert normalize_address("0x" + "a1" * 20) == ALICE
        assert normalize_address(ALICE.lower()) == normalize_address(ALICE.upper().replace("0X", "0x"))

    def test_malformed_address_raises(self):
        with pytest.raises(InvalidInput):
            normalize_address("0x1234")
        with pytest.raises(InvalidInput):
            normalize_address(None)

    def test_zero_address_rejected(self):
        with pytest.raises(ZeroAddress):
            require_nonzero(ZERO_ADDRESS)


# ══════════════════════════════════════════════════════════════════════
#  PROPOSALS
# ══════════════════════════════════════════════════════════════════════

class TestBuildActions:

    def test_zips_parallel_lists(self):
        actions = build_actions(
            ["0x" + "e5" * 20, BOB], [0, 7], ["a()", "b(uint256)"], [b"", b"\x02"],
        )
        assert len(actions) == 2
        assert actions[0].target == TARGET
        assert actions[1] == ProposalAction(BOB, 7, "b(uint256)", b"\x02")

    def test_arity_mismatch(self):
        with pytest.raises(InvalidProposal, match="arity mismatch"):
            build_actions([TARGET, BOB], [0], ["a()", "b()"], [b"", b""])

    def test_empty_actions(self):
        with pytest.raises(InvalidProposal, match="must provide actions"):
            build_actions([], [], [], [])

    def test_too_many_actions(self):
        n = MAX_OPERATIONS + 1
        with pytest.raises(InvalidProposal, match="Too many"):
            build_actions([TARGET] * n, [0] * n, ["a()"] * n, [b""] * n)

    def test_max_operations_allowed(self):
        n = MAX_OPERATIONS
        assert len(build_actions([TARGET] * n, [0] * n, ["a()"] * n, [b""] * n)) == n

    def test_negative_value(self):
        with pytest.raises(InvalidProposal, match="Negative"):
            build_actions([TARGET], [-1], ["a()"], [b""])

    def test_action_dict_round_trip(self):
        action = make_action(calldata=b"\xde\xad")
        d = action.to_dict()
        assert d["calldata"] == "0xdead"
        assert ProposalAction.from_dict(d) == action


class TestProposal:

    def test_new_proposal_is_created(self):
        p = make_proposal()
        assert p.status == ProposalStatus.CREATED
        assert not p.verified
        assert not p.canceled
        assert not p.executed
        assert p.history[0]["to"] == "CREATED"

    def test_invalid_window(self):
        with pytest.raises(InvalidProposal):
            make_proposal(start=200, end=200)

    def test_id_zero_rejected(self):
        with pytest.raises(InvalidProposal):
            make_proposal(pid=0)

    def test_valid_transitions(self):
        p = verified(make_proposal())
        p.transition_to(ProposalStatus.QUEUED, "queued", 300)
        p.transition_to(ProposalStatus.EXECUTED, "executed", 400)
        assert p.executed
        assert p.verified
        assert p.is_final
        assert [h["to"] for h in p.history] == ["CREATED", "VERIFIED", "QUEUED", "EXECUTED"]

    def test_cannot_queue_unverified(self):
        p = make_proposal()
        with pytest.raises(InvalidStatus):
            p.transition_to(ProposalStatus.QUEUED, "queued", 300)

    def test_terminal_states_are_final(self):
        for terminal in (ProposalStatus.CANCELED, ProposalStatus.VETOED):
            p = make_proposal()
            p.transition_to(terminal, "done", 150)
            with pytest.raises(InvalidStatus):
                p.transition_to(ProposalStatus.VERIFIED, "again", 160)

    def test_verified_survives_cancel(self):
        p = verified(make_proposal())
        p.transition_to(ProposalStatus.CANCELED, "canceled", 150)
        assert p.verified
        assert p.canceled

    def test_record_vote_tallies(self):
        p = make_proposal()
        p.record_vote(ALICE, Support.FOR, 10)
        p.record_vote(BOB, Support.AGAINST, 4)
        p.record_vote(CAROL, Support.ABSTAIN, 3)
        assert (p.for_votes, p.against_votes, p.abstain_votes) == (10, 4, 3)
        receipt = p.get_receipt(BOB)
        assert receipt.has_voted
        assert receipt.support == Support.AGAINST
        assert receipt.votes == 4

    def test_record_vote_twice(self):
        p = make_proposal()
        p.record_vote(ALICE, Support.FOR, 10)
        with pytest.raises(AlreadyVoted):
            p.record_vote(ALICE, Support.AGAINST, 10)
        assert p.for_votes == 10
        assert p.against_votes == 0

    def test_record_vote_bad_support(self):
        p = make_proposal()
        with pytest.raises(InvalidInput):
            p.record_vote(ALICE, 3, 10)
        assert not p.get_receipt(ALICE).has_voted

    def test_missing_receipt_is_empty(self):
        receipt = make_proposal().get_receipt(CAROL)
        assert not receipt.has_voted
        assert receipt.votes == 0

    def test_dict_round_trip(self):
        p = verified(make_proposal())
        p.record_vote(BOB, Support.FOR, 42)
        p.mark_cleared(500)
        restored = Proposal.from_dict(p.to_dict())
        assert restored.to_dict() == p.to_dict()
        assert restored.verified
        assert restored.cleared_at == 500

    def test_queued_snapshot_without_history(self):
        p = verified(make_proposal())
        p.record_vote(BOB, Support.FOR, 42)
        p.transition_to(ProposalStatus.QUEUED, "queued", 250)
        p.eta = 400
        data = p.to_dict()
        del data["history"]
        restored = Proposal.from_dict(data)
        assert restored.verified
        assert resolve_state(restored, 300, GRACE) == ProposalState.QUEUED

    def test_canceled_snapshot_keeps_verified_flag(self):
        p = verified(make_proposal())
        p.transition_to(ProposalStatus.CANCELED, "canceled", 150)
        data = p.to_dict()
        del data["history"]
        assert Proposal.from_dict(data).verified

    @pytest.mark.parametrize("support", [True, False, 1.0, "1", None])
    def test_support_must_be_int(self, support):
        assert not Support.is_valid(support)
        assert Support.is_valid(Support.FOR)


# ══════════════════════════════════════════════════════════════════════
#  STORE
# ══════════════════════════════════════════════════════════════════════

class TestActiveProposalSet:

    def test_add_is_idempotent(self):
        s = ActiveProposalSet()
        s.add(1)
        s.add(1)
        assert len(s) == 1

    def test_remove_swaps_last(self):
        s = ActiveProposalSet([1, 2, 3])
        s.remove(1)
        assert s.to_list() == [3, 2]
        assert 1 not in s
        s.remove(2)
        assert s.to_list() == [3]

    def test_remove_absent_raises(self):
        s = ActiveProposalSet([1])
        with pytest.raises(NotInActiveProposals):
            s.remove(7)
        s.remove(1)
        with pytest.raises(NotInActiveProposals):
            s.remove(1)


class TestProposalStore:

    def test_ids_are_sequential(self):
        store = ProposalStore()
        assert store.next_id() == 1
        store.add(make_proposal(pid=1))
        store.add(make_proposal(pid=2, proposer=BOB))
        assert store.proposal_count == 2
        assert store.latest_proposal_id(ALICE) == 1
        assert store.latest_proposal_id(BOB) == 2
        assert store.active.to_list() == [1, 2]

    def test_out_of_order_id_rejected(self):
        store = ProposalStore()
        with pytest.raises(InvalidId):
            store.add(make_proposal(pid=2))

    def test_check_id_bounds(self):
        store = ProposalStore()
        store.check_id(0)
        with pytest.raises(InvalidId):
            store.check_id(1)
        with pytest.raises(InvalidId):
            store.check_id(-1)

    def test_get_sentinel_raises(self):
        store = ProposalStore()
        store.add(make_proposal())
        with pytest.raises(InvalidId):
            store.get(0)
        assert store.get(1).id == 1

    def test_scores(self):
        store = ProposalStore()
        store.record_proposal_created(ALICE)
        store.record_vote_cast(ALICE)
        store.record_vote_cast(BOB)
        store.record_proposal_passed(ALICE)
        assert store.score(ALICE) == CommunityScore(1, 1, 1)
        assert store.total_score == CommunityScore(1, 1, 2)

    def test_score_is_a_copy(self):
        store = ProposalStore()
        store.score(ALICE).votes_cast = 99
        assert store.score(ALICE).votes_cast == 0

    def test_overwrite_scores(self):
        store = ProposalStore()
        store.record_vote_cast(ALICE)
        store.overwrite_scores({ALICE: CommunityScore()}, CommunityScore(0, 0, 5))
        assert store.score(ALICE) == CommunityScore()
        assert store.total_score.votes_cast == 5

    def test_snapshot_round_trip(self):
        store = ProposalStore()
        store.add(make_proposal(pid=1))
        store.add(make_proposal(pid=2, proposer=BOB))
        store.active.remove(1)
        store.record_vote_cast(BOB)
        restored = ProposalStore.from_dict(store.to_dict())
        assert restored.proposal_count == 2
        assert restored.active.to_list() == [2]
        assert restored.latest_proposal_id(BOB) == 2
        assert restored.score(BOB).votes_cast == 1
        assert restored.to_dict() == store.to_dict()


# ══════════════════════════════════════════════════════════════════════
#  STATE RESOLUTION
# ══════════════════════════════════════════════════════════════════════

class TestResolveState:

    def test_unverified_is_pending_then_canceled(self):
        p = make_proposal()
        assert resolve_state(p, 50, GRACE) == ProposalState.PENDING
        assert resolve_state(p, 150, GRACE) == ProposalState.PENDING
        assert resolve_state(p, 200, GRACE) == ProposalState.PENDING
        assert resolve_state(p, 201, GRACE) == ProposalState.CANCELED

    def test_verified_window(self):
        p = verified(make_proposal())
        assert resolve_state(p, 99, GRACE) == ProposalState.PENDING
        assert resolve_state(p, 100, GRACE) == ProposalState.ACTIVE
        assert resolve_state(p, 200, GRACE) == ProposalState.ACTIVE

    def test_no_votes_is_defeated(self):
        p = verified(make_proposal())
        assert resolve_state(p, 201, GRACE) == ProposalState.DEFEATED

    def test_tie_is_defeated(self):
        p = verified(make_proposal(quorum=5))
        p.for_votes = p.against_votes = 10
        assert resolve_state(p, 201, GRACE) == ProposalState.DEFEATED

    def test_below_quorum_is_defeated(self):
        p = verified(make_proposal(quorum=50))
        p.for_votes = 49
        assert resolve_state(p, 201, GRACE) == ProposalState.DEFEATED

    def test_succeeded(self):
        p = verified(make_proposal(quorum=50))
        p.for_votes = 50
        p.against_votes = 49
        assert resolve_state(p, 201, GRACE) == ProposalState.SUCCEEDED

    def test_queued_then_expired(self):
        p = verified(make_proposal())
        p.for_votes = 10
        p.eta = 1000
        p.transition_to(ProposalStatus.QUEUED, "queued", 300)
        assert resolve_state(p, 1000 + GRACE - 1, GRACE) == ProposalState.QUEUED
        assert resolve_state(p, 1000 + GRACE, GRACE) == ProposalState.EXPIRED

    def test_executed_beats_expired(self):
        p = verified(make_proposal())
        p.for_votes = 10
        p.eta = 1000
        p.transition_to(ProposalStatus.QUEUED, "queued", 300)
        p.transition_to(ProposalStatus.EXECUTED, "executed", 1000)
        assert resolve_state(p, 1000 + 10 * GRACE, GRACE) == ProposalState.EXECUTED

    def test_vetoed_beats_everything(self):
        p = make_proposal()
        p.transition_to(ProposalStatus.VETOED, "vetoed", 150)
        assert resolve_state(p, 50, GRACE) == ProposalState.VETOED
        assert resolve_state(p, 10_000, GRACE) == ProposalState.VETOED

    def test_canceled_during_window(self):
        p = verified(make_proposal())
        p.transition_to(ProposalStatus.CANCELED, "canceled", 150)
        assert resolve_state(p, 150, GRACE) == ProposalState.CANCELED


# ══════════════════════════════════════════════════════════════════════
#  EVENTS & ROLES
# ══════════════════════════════════════════════════════════════════════

class TestEventLog:

    def test_filter_and_last(self):
        log = EventLog()
        log.emit(ProposalQueued(1, 500))
        log.emit(VoteCast(ALICE, 1, Support.FOR, 10))
        log.emit(ProposalQueued(2, 600))
        assert len(log) == 3
        assert [e.proposal_id for e in log.all(ProposalQueued)] == [1, 2]
        assert log.last(ProposalQueued).eta == 600
        assert log.last(ProposalCanceled) is None

    def test_to_list(self):
        log = EventLog()
        log.emit(ParameterChanged("votingDelay", 1, 2))
        log.emit(VoteCast(ALICE, 1, Support.ABSTAIN, 3))
        out = log.to_list()
        assert out[0] == {"event": "ParameterChanged", "name": "votingDelay", "oldValue": 1, "newValue": 2}
        assert out[1]["support"] == "ABSTAIN"


class TestAccessControl:

    def test_require(self):
        access = AccessControl()
        access.assign(Role.FOUNDER, ALICE)
        access.require(ALICE.lower(), Role.FOUNDER, Role.COUNCIL)
        with pytest.raises(NotAuthorized):
            access.require(BOB, Role.FOUNDER, Role.COUNCIL)

    def test_unauthorized_alias(self):
        assert Unauthorized is NotAuthorized

    def test_two_step_handoff(self):
        access = AccessControl()
        access.assign(Role.COUNCIL, ALICE)
        with pytest.raises(NotAuthorized):
            access.transfer_role(BOB, Role.COUNCIL, CAROL)
        access.transfer_role(ALICE, Role.COUNCIL, BOB)
        assert access.pending_holder(Role.COUNCIL) == BOB
        assert access.holder(Role.COUNCIL) == ALICE
        with pytest.raises(NotAuthorized):
            access.accept_role(CAROL, Role.COUNCIL)
        access.accept_role(BOB, Role.COUNCIL)
        assert access.holder(Role.COUNCIL) == BOB
        assert access.pending_holder(Role.COUNCIL) is None

    def test_assign_zero_address(self):
        with pytest.raises(ZeroAddress):
            AccessControl().assign(Role.FOUNDER, ZERO_ADDRESS)


# ══════════════════════════════════════════════════════════════════════
#  TIMELOCK
# ══════════════════════════════════════════════════════════════════════

class TestTransactionHash:

    def test_deterministic(self):
        h1 = transaction_hash(TARGET, 0, "a()", b"", 100)
        h2 = transaction_hash(TARGET.lower(), 0, "a()", b"", 100)
        assert h1 == h2
        assert h1.startswith("0x") and len(h1) == 66

    def test_eta_changes_hash(self):
        assert transaction_hash(TARGET, 0, "a()", b"", 100) != transaction_hash(TARGET, 0, "a()", b"", 101)


class TestTimelockQueue:

    def test_delay_bounds(self):
        with pytest.raises(TimelockError, match="minimum"):
            make_timelock(delay=DAY)
        with pytest.raises(TimelockError, match="maximum"):
            make_timelock(delay=31 * DAY)

    def test_queue_and_execute(self):
        tl, clock = make_timelock()
        handler = MagicMock(return_value="done")
        tl.register_target(TARGET, handler)
        eta = clock.now + TIMELOCK_DEFAULT_DELAY
        tx_hash = tl.queue_transaction(GOVERNOR, TARGET, 5, "a(uint256)", b"\x01", eta)
        assert tl.is_queued(TARGET, 5, "a(uint256)", b"\x01", eta)

        clock.now = eta
        assert tl.execute_transaction(GOVERNOR, TARGET, 5, "a(uint256)", b"\x01", eta) == "done"
        handler.assert_called_once_with("a(uint256)", b"\x01", 5)
        assert tl.get_entry(tx_hash).status == TimelockStatus.EXECUTED
        assert not tl.is_queued(TARGET, 5, "a(uint256)", b"\x01", eta)

    def test_non_admin_rejected(self):
        tl, clock = make_timelock()
        with pytest.raises(TimelockError, match="admin"):
            tl.queue_transaction(ALICE, TARGET, 0, "a()", b"", clock.now + TIMELOCK_DEFAULT_DELAY)

    def test_eta_must_satisfy_delay(self):
        tl, clock = make_timelock()
        with pytest.raises(TimelockError, match="delay"):
            tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"", clock.now + TIMELOCK_DEFAULT_DELAY - 1)

    def test_duplicate_rejected(self):
        tl, clock = make_timelock()
        eta = clock.now + TIMELOCK_DEFAULT_DELAY
        tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        with pytest.raises(TimelockError, match="already queued"):
            tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)

    def test_execute_too_early_and_stale(self):
        tl, clock = make_timelock()
        tl.register_target(TARGET, MagicMock())
        eta = clock.now + TIMELOCK_DEFAULT_DELAY
        tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        with pytest.raises(TimelockError, match="surpassed"):
            tl.execute_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        clock.now = eta + TIMELOCK_GRACE_PERIOD + 1
        with pytest.raises(TimelockError, match="stale"):
            tl.execute_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)

    def test_missing_handler(self):
        tl, clock = make_timelock()
        eta = clock.now + TIMELOCK_DEFAULT_DELAY
        tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        clock.now = eta
        with pytest.raises(TimelockError, match="No handler"):
            tl.execute_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        assert tl.is_queued(TARGET, 0, "a()", b"", eta)

    def test_failing_handler_leaves_entry_queued(self):
        tl, clock = make_timelock()
        tl.register_target(TARGET, MagicMock(side_effect=RuntimeError("boom")))
        eta = clock.now + TIMELOCK_DEFAULT_DELAY
        tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        clock.now = eta
        with pytest.raises(RuntimeError):
            tl.execute_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        assert tl.is_queued(TARGET, 0, "a()", b"", eta)

    def test_cancel(self):
        tl, clock = make_timelock()
        eta = clock.now + TIMELOCK_DEFAULT_DELAY
        tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        tl.cancel_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)
        assert not tl.is_queued(TARGET, 0, "a()", b"", eta)
        assert tl.queued_entries() == []
        with pytest.raises(TimelockError, match="not queued"):
            tl.cancel_transaction(GOVERNOR, TARGET, 0, "a()", b"", eta)

    def test_to_dict(self):
        tl, clock = make_timelock()
        tl.queue_transaction(GOVERNOR, TARGET, 0, "a()", b"\x01", clock.now + TIMELOCK_DEFAULT_DELAY)
        d = tl.to_dict()
        assert d["queuedCount"] == 1
        entry = next(iter(d["entries"].values()))
        assert entry["data"] == "0x01"
        assert entry["status"] == "QUEUED"


# ══════════════════════════════════════════════════════════════════════
#  STAKING LEDGER
# ══════════════════════════════════════════════════════════════════════

class TestStakingLedger:

    def test_stake_and_votes(self):
        ledger = StakingLedger(LEDGER)
        ledger.stake(ALICE, 600)
        ledger.stake(BOB, 400)
        assert ledger.get_votes(ALICE) == 600
        assert ledger.get_total_voting_power() == 1000

    def test_unstake(self):
        ledger = StakingLedger(LEDGER)
        ledger.stake(ALICE, 100)
        ledger.unstake(ALICE, 40)
        assert ledger.staked(ALICE) == 60
        with pytest.raises(InvalidInput):
            ledger.unstake(ALICE, 61)
        with pytest.raises(InvalidInput):
            ledger.stake(ALICE, 0)

    def test_delegation_moves_power(self):
        ledger = StakingLedger(LEDGER)
        ledger.stake(ALICE, 600)
        ledger.stake(BOB, 400)
        ledger.delegate(ALICE, BOB)
        assert ledger.get_votes(ALICE) == 0
        assert ledger.get_votes(BOB) == 1000
        assert ledger.delegate_of(ALICE) == BOB
        assert ledger.get_total_voting_power() == 1000
        ledger.undelegate(ALICE)
        assert ledger.get_votes(ALICE) == 600

    def test_self_delegation_rejected(self):
        with pytest.raises(InvalidInput):
            StakingLedger(LEDGER).delegate(ALICE, ALICE)

    def test_delegate_calls_back_governor(self):
        ledger = StakingLedger(LEDGER)
        governor = MagicMock()
        governor.total_community_score = CommunityScore(3, 1, 7)
        ledger.bind(governor)
        ledger.delegate(ALICE, BOB)
        governor.update_community_scores.assert_called_once_with(
            LEDGER, {ALICE: CommunityScore()}, CommunityScore(3, 1, 7),
        )
