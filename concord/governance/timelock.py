"""
Time-Lock Queue

Implements:
  - Timelock: the protocol the execution bridge schedules through
  - TimelockEntry: one scheduled action, keyed by its transaction hash
  - TimelockQueue: in-memory timelock with a fixed delay and grace period,
    admin-only scheduling, and registered target handlers for dispatch
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Protocol

import rlp
from eth_utils import encode_hex, keccak, to_canonical_address

from ..logger import get_logger
from ..constants import (
    TIMELOCK_DEFAULT_DELAY,
    TIMELOCK_GRACE_PERIOD,
    TIMELOCK_MAX_DELAY,
    TIMELOCK_MIN_DELAY,
)
from .addresses import normalize_address, require_nonzero
from .errors import TimelockError

logger = get_logger(__name__)

# handler(signature, calldata, value) → result
TargetHandler = Callable[[str, bytes, int], Any]


def transaction_hash(target: str, value: int, signature: str, data: bytes, eta: int) -> str:
    """keccak256 of the RLP-encoded action and its eta."""
    encoded = rlp.encode([
        to_canonical_address(target),
        value,
        signature.encode(),
        data,
        eta,
    ])
    return encode_hex(keccak(encoded))


# ---------------------------------------------------------------------------
# Timelock interface (Protocol for structural typing)
# ---------------------------------------------------------------------------

class Timelock(Protocol):
    """Operations the execution bridge needs from the delay component."""

    @property
    def address(self) -> str: ...
    @property
    def delay(self) -> int: ...
    @property
    def grace_period(self) -> int: ...

    def is_queued(self, target: str, value: int, signature: str, data: bytes, eta: int) -> bool: ...
    def queue_transaction(self, caller: str, target: str, value: int, signature: str,
                          data: bytes, eta: int) -> str: ...
    def execute_transaction(self, caller: str, target: str, value: int, signature: str,
                            data: bytes, eta: int) -> Any: ...
    def cancel_transaction(self, caller: str, target: str, value: int, signature: str,
                           data: bytes, eta: int) -> str: ...


# ---------------------------------------------------------------------------
# In-memory timelock
# ---------------------------------------------------------------------------

class TimelockStatus(IntEnum):
    """Status of a timelock entry."""
    QUEUED = 0
    EXECUTED = 1
    CANCELED = 2


@dataclass
class TimelockEntry:
    """A scheduled action awaiting execution."""
    tx_hash: str
    target: str
    value: int
    signature: str
    data: bytes
    eta: int
    queued_at: int
    status: TimelockStatus = TimelockStatus.QUEUED
    executed_at: Optional[int] = None
    canceled_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "target": self.target,
            "value": self.value,
            "signature": self.signature,
            "data": "0x" + self.data.hex(),
            "eta": self.eta,
            "queuedAt": self.queued_at,
            "status": self.status.name,
            "executedAt": self.executed_at,
            "canceledAt": self.canceled_at,
        }


class TimelockQueue:
    """
    Queue of actions awaiting execution after a delay.

    Only the admin (the governor) may queue, execute or cancel. An entry is
    executable from its eta until eta + grace_period.
    """

    def __init__(
        self,
        address: str,
        admin: str,
        clock: Callable[[], int],
        delay: int = TIMELOCK_DEFAULT_DELAY,
        grace_period: int = TIMELOCK_GRACE_PERIOD,
        min_delay: int = TIMELOCK_MIN_DELAY,
        max_delay: int = TIMELOCK_MAX_DELAY,
    ):
        if delay < min_delay:
            raise TimelockError(f"Delay {delay}s < minimum {min_delay}s")
        if delay > max_delay:
            raise TimelockError(f"Delay {delay}s > maximum {max_delay}s")
        self._address = require_nonzero(address)
        self.admin = require_nonzero(admin)
        self._clock = clock
        self._delay = delay
        self._grace_period = grace_period
        self._entries: Dict[str, TimelockEntry] = {}
        self._targets: Dict[str, TargetHandler] = {}

    @property
    def address(self) -> str:
        return self._address

    @property
    def delay(self) -> int:
        return self._delay

    @property
    def grace_period(self) -> int:
        return self._grace_period

    # ── Targets ───────────────────────────────────────────────────────

    def register_target(self, target: str, handler: TargetHandler):
        """Register the callable that receives actions addressed to *target*."""
        self._targets[normalize_address(target)] = handler

    # ── Queries ───────────────────────────────────────────────────────

    def get_entry(self, tx_hash: str) -> Optional[TimelockEntry]:
        return self._entries.get(tx_hash)

    def is_queued(self, target: str, value: int, signature: str, data: bytes, eta: int) -> bool:
        entry = self._entries.get(transaction_hash(target, value, signature, data, eta))
        return entry is not None and entry.status == TimelockStatus.QUEUED

    def queued_entries(self) -> List[TimelockEntry]:
        return [e for e in self._entries.values() if e.status == TimelockStatus.QUEUED]

    # ── Admin operations ──────────────────────────────────────────────

    def _require_admin(self, caller: str):
        if normalize_address(caller) != self.admin:
            raise TimelockError(f"{caller} is not the timelock admin")

    def queue_transaction(self, caller, target, value, signature, data, eta) -> str:
        self._require_admin(caller)
        now = self._clock()
        if eta < now + self._delay:
            raise TimelockError(
                f"ETA {eta} must satisfy delay (earliest {now + self._delay})"
            )
        tx_hash = transaction_hash(target, value, signature, data, eta)
        existing = self._entries.get(tx_hash)
        if existing is not None and existing.status == TimelockStatus.QUEUED:
            raise TimelockError(f"Transaction {tx_hash} already queued")

        self._entries[tx_hash] = TimelockEntry(
            tx_hash=tx_hash,
            target=normalize_address(target),
            value=value,
            signature=signature,
            data=bytes(data),
            eta=eta,
            queued_at=now,
        )
        logger.info(f"Timelock queued {tx_hash[:18]}… {signature} (ETA={eta})")
        return tx_hash

    def cancel_transaction(self, caller, target, value, signature, data, eta) -> str:
        self._require_admin(caller)
        tx_hash = transaction_hash(target, value, signature, data, eta)
        entry = self._entries.get(tx_hash)
        if entry is None or entry.status != TimelockStatus.QUEUED:
            raise TimelockError(f"Transaction {tx_hash} is not queued")
        entry.status = TimelockStatus.CANCELED
        entry.canceled_at = self._clock()
        logger.info(f"Timelock canceled {tx_hash[:18]}… {signature}")
        return tx_hash

    def execute_transaction(self, caller, target, value, signature, data, eta) -> Any:
        self._require_admin(caller)
        tx_hash = transaction_hash(target, value, signature, data, eta)
        entry = self._entries.get(tx_hash)
        if entry is None or entry.status != TimelockStatus.QUEUED:
            raise TimelockError(f"Transaction {tx_hash} hasn't been queued")
        now = self._clock()
        if now < eta:
            raise TimelockError(
                f"Transaction hasn't surpassed time lock (remaining={eta - now}s)"
            )
        if now > eta + self._grace_period:
            raise TimelockError("Transaction is stale")

        handler = self._targets.get(entry.target)
        if handler is None:
            raise TimelockError(f"No handler registered for target {entry.target}")

        result = handler(signature, entry.data, value)

        entry.status = TimelockStatus.EXECUTED
        entry.executed_at = now
        logger.info(f"Timelock executed {tx_hash[:18]}… {signature}")
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self._address,
            "admin": self.admin,
            "delay": self._delay,
            "gracePeriod": self._grace_period,
            "queuedCount": len(self.queued_entries()),
            "entries": {h: e.to_dict() for h, e in self._entries.items()},
        }

    def __repr__(self) -> str:
        return (
            f"<TimelockQueue {self._address} delay={self._delay}s "
            f"queued={len(self.queued_entries())}>"
        )
