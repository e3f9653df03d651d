"""
Password Reset
==============
Opaque reset tokens with strict rollback and single-use redemption.
"""

from .engine import ResetEngine
from .urls import build_reset_url

__all__ = [
    "ResetEngine",
    "build_reset_url",
]
