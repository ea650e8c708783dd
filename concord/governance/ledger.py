"""
Voting-Power Ledger

The governor reads voting power through the VotingPowerLedger protocol.
StakingLedger is an in-memory ledger: staked balances, one-hop
delegation, and the community score callback issued when an address
delegates its power away.
"""

from typing import Dict, Optional, Protocol

from ..logger import get_logger
from .addresses import normalize_address, require_nonzero
from .errors import InvalidInput
from .store import CommunityScore

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Ledger interface (Protocol for structural typing)
# ---------------------------------------------------------------------------

class VotingPowerLedger(Protocol):
    """Read side of the voting-power ledger consumed by the governor."""

    @property
    def address(self) -> str: ...

    def get_votes(self, account: str) -> int: ...
    def get_total_voting_power(self) -> int: ...


# ---------------------------------------------------------------------------
# In-memory staking ledger
# ---------------------------------------------------------------------------

class StakingLedger:
    """
    Stake-weighted voting power.

    An account's votes are its own stake (unless delegated away) plus every
    stake delegated to it. Total voting power is the sum of all stakes.
    """

    def __init__(self, address: str):
        self._address = require_nonzero(address)
        self._stakes: Dict[str, int] = {}
        self._delegates: Dict[str, str] = {}  # delegator → delegatee
        self._governor = None

    @property
    def address(self) -> str:
        return self._address

    def bind(self, governor):
        """Attach the governor that receives community score callbacks."""
        self._governor = governor

    # ── Stake ─────────────────────────────────────────────────────────

    def stake(self, account: str, amount: int):
        if amount <= 0:
            raise InvalidInput("Stake amount must be positive")
        account = normalize_address(account)
        self._stakes[account] = self._stakes.get(account, 0) + amount
        logger.debug(f"Stake: {account} +{amount} (total={self._stakes[account]})")

    def unstake(self, account: str, amount: int):
        account = normalize_address(account)
        current = self._stakes.get(account, 0)
        if amount <= 0 or amount > current:
            raise InvalidInput(f"Cannot unstake {amount} (staked={current})")
        self._stakes[account] = current - amount

    def staked(self, account: str) -> int:
        return self._stakes.get(normalize_address(account), 0)

    # ── Delegation ────────────────────────────────────────────────────

    def delegate(self, delegator: str, delegatee: str):
        """
        Move *delegator*'s power to *delegatee*.

        The delegator's community history stays in the governor's aggregate
        while its live record is zeroed.
        """
        delegator = normalize_address(delegator)
        delegatee = normalize_address(delegatee)
        if delegator == delegatee:
            raise InvalidInput("Cannot delegate to self")
        self._delegates[delegator] = delegatee
        logger.info(f"Delegation: {delegator} → {delegatee}")

        if self._governor is not None:
            self._governor.update_community_scores(
                self._address,
                {delegator: CommunityScore()},
                self._governor.total_community_score,
            )

    def undelegate(self, delegator: str):
        self._delegates.pop(normalize_address(delegator), None)

    def delegate_of(self, account: str) -> Optional[str]:
        return self._delegates.get(normalize_address(account))

    # ── Voting power ──────────────────────────────────────────────────

    def get_votes(self, account: str) -> int:
        account = normalize_address(account)
        own = 0 if account in self._delegates else self._stakes.get(account, 0)
        delegated = sum(
            self._stakes.get(delegator, 0)
            for delegator, delegatee in self._delegates.items()
            if delegatee == account
        )
        return own + delegated

    def get_total_voting_power(self) -> int:
        return sum(self._stakes.values())

    def __repr__(self) -> str:
        return (
            f"<StakingLedger {self._address} stakers={len(self._stakes)} "
            f"delegations={len(self._delegates)}>"
        )
