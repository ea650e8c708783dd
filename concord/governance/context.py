"""
Shared governance state.

One GovernanceContext is owned by the Governor and handed to every engine;
no engine keeps state of its own.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from .events import EventLog
from .ledger import VotingPowerLedger
from .parameters import GovernanceParameters
from .roles import AccessControl
from .state import ProposalState, resolve_state
from .store import ProposalStore
from .timelock import Timelock
from ..logger import get_logger

logger = get_logger(__name__)

# hook(kind, caller) with kind in {"propose", "vote"}
RefundHook = Callable[[str, str], None]


@dataclass
class GovernanceContext:
    address: str
    clock: Callable[[], int]
    store: ProposalStore = field(default_factory=ProposalStore)
    params: GovernanceParameters = field(default_factory=GovernanceParameters)
    access: AccessControl = field(default_factory=AccessControl)
    events: EventLog = field(default_factory=EventLog)
    ledger: Optional[VotingPowerLedger] = None
    timelock: Optional[Timelock] = None
    refund_hook: Optional[RefundHook] = None

    def now(self) -> int:
        return int(self.clock())

    def state(self, proposal_id: int) -> ProposalState:
        """
        Current state of *proposal_id*.

        Id 0 resolves as an empty record: never verified, window long over.
        """
        self.store.check_id(proposal_id)
        if proposal_id == 0:
            return ProposalState.CANCELED
        return resolve_state(
            self.store.get(proposal_id), self.now(), self.timelock.grace_period
        )

    def refund(self, kind: str, caller: str) -> None:
        """
        Run the refund hook after a committed propose or vote.

        Hook failures are logged and never undo the operation.
        """
        enabled = self.params.proposal_refund if kind == "propose" else self.params.vote_refund
        if not enabled or self.refund_hook is None:
            return
        try:
            self.refund_hook(kind, caller)
        except Exception:
            logger.exception(f"Refund hook failed for {kind} by {caller}")
