"""
Basis-point threshold math.
"""

from ..constants import BPS_DENOMINATOR


def bps_to_votes(bps: int, total: int) -> int:
    """Absolute vote count for *bps* basis points of *total* (floored)."""
    return (total * bps) // BPS_DENOMINATOR
