"""
Governance error taxonomy.

Every failure aborts the operation before any state is written.
"""

from ..exceptions import ConcordException


class GovernanceError(ConcordException):
    """Base governance exception."""


class InvalidId(GovernanceError):
    """Proposal id is beyond the proposal counter."""


class InvalidProposal(GovernanceError):
    """Malformed action payload."""


class InvalidStatus(GovernanceError):
    """Operation attempted from the wrong lifecycle state."""


class InvalidInput(GovernanceError):
    """Malformed argument (vote support value, address)."""


class NotEligible(GovernanceError):
    """Caller lacks voting power or standing for the operation."""


class AlreadyVoted(GovernanceError):
    """Voter already holds a receipt for this proposal."""


class NotInActiveProposals(GovernanceError):
    """Proposal id is missing from the active set."""


class NotAuthorized(GovernanceError):
    """Caller does not hold a required role."""


Unauthorized = NotAuthorized


class ParameterOutOfBounds(GovernanceError):
    """Tunable outside its hardcoded range."""


class AlreadyInitialized(GovernanceError):
    """Governor was already initialized."""


class ZeroAddress(GovernanceError):
    """The zero address was supplied where an identity is required."""


class TimelockError(GovernanceError):
    """Timelock rejected a queue / execute / cancel call."""
