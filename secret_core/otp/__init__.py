"""
OTP Generation and Verification
================================
Registration codes with cooldown, send-rate and attempt throttling.
"""

from .engine import OTPEngine

__all__ = [
    "OTPEngine",
]
