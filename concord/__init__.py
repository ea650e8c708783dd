"""
Concord Governance Package

Stake-weighted DAO governance: proposals, voting, timelocked execution.
Core imports are lazily loaded; for direct module access, import from
submodules:

    from concord.governance import Governor, TimelockQueue, StakingLedger
    from concord.config import load_config
"""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy module loading to keep `import concord` light."""
    if name == 'Governor':
        from .governance import Governor
        return Governor
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name == 'ConcordException':
        from .exceptions import ConcordException
        return ConcordException
    raise AttributeError(f"module 'concord' has no attribute {name!r}")

__all__ = ['Governor', 'load_config', 'ConcordException']
