"""
Role-based capability checks.

Every mutating governor operation asks AccessControl whether the caller
holds one of the roles it needs. Role handoff is two-step: the current
holder nominates, the nominee accepts.
"""

from enum import Enum
from typing import Dict, Optional

from ..logger import get_logger
from .addresses import normalize_address, require_nonzero
from .errors import NotAuthorized

logger = get_logger(__name__)


class Role(Enum):
    FOUNDER = "founder"     # Administrator
    COUNCIL = "council"     # Administrator
    TIMELOCK = "timelock"   # Execution-delay authority
    LEDGER = "ledger"       # Voting-power ledger callback


ADMIN_ROLES = (Role.FOUNDER, Role.COUNCIL)


class AccessControl:
    """Maps each role to at most one holder."""

    def __init__(self):
        self._holders: Dict[Role, str] = {}
        self._pending: Dict[Role, str] = {}

    def holder(self, role: Role) -> Optional[str]:
        return self._holders.get(role)

    def pending_holder(self, role: Role) -> Optional[str]:
        return self._pending.get(role)

    def has_role(self, caller: str, role: Role) -> bool:
        holder = self._holders.get(role)
        return holder is not None and holder == normalize_address(caller)

    def require(self, caller: str, *roles: Role):
        """Raise NotAuthorized unless *caller* holds one of *roles*."""
        if any(self.has_role(caller, role) for role in roles):
            return
        names = ", ".join(r.value for r in roles)
        logger.debug(f"Rejected {caller}: requires one of [{names}]")
        raise NotAuthorized(f"{caller} lacks required role ({names})")

    def assign(self, role: Role, address: str) -> str:
        """Set *role* directly. Used at initialization and by ledger migration."""
        address = require_nonzero(address)
        self._holders[role] = address
        self._pending.pop(role, None)
        logger.info(f"Role {role.value} → {address}")
        return address

    def transfer_role(self, caller: str, role: Role, new_holder: str):
        """Nominate *new_holder*; only the current holder may do this."""
        self.require(caller, role)
        self._pending[role] = require_nonzero(new_holder)
        logger.info(f"Role {role.value} transfer pending → {self._pending[role]}")

    def accept_role(self, caller: str, role: Role):
        """Complete a pending transfer; only the nominee may do this."""
        pending = self._pending.get(role)
        if pending is None or pending != normalize_address(caller):
            raise NotAuthorized(f"{caller} is not the pending {role.value}")
        self.assign(role, pending)

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {
            "holders": {r.value: a for r, a in self._holders.items()},
            "pending": {r.value: a for r, a in self._pending.items()},
        }
