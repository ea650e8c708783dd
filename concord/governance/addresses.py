"""
Identity normalization.

Every identity the engine stores (proposers, voters, role holders, action
targets) is an EIP-55 checksum address so that two spellings of the same
account always compare equal.
"""

from eth_utils import is_address, to_checksum_address

from ..constants import ZERO_ADDRESS
from .errors import InvalidInput, ZeroAddress


def normalize_address(value: str) -> str:
    """Return the checksum form of *value*, raising InvalidInput if malformed."""
    if not isinstance(value, str) or not is_address(value):
        raise InvalidInput(f"Invalid address: {value!r}")
    return to_checksum_address(value)


def require_nonzero(value: str) -> str:
    """Normalize *value* and reject the zero address."""
    address = normalize_address(value)
    if address == to_checksum_address(ZERO_ADDRESS):
        raise ZeroAddress("Zero address is not a valid identity")
    return address
