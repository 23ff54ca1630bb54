"""
Relay Config - Public API
===========================
"""

from relay.config.settings import EmitterConfig

__all__ = [
    "EmitterConfig",
]
