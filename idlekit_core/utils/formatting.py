"""
Number and time formatting for condition descriptions and CLI output.
"""

from __future__ import annotations

import math

_SUFFIXES = ["", "K", "M", "B", "T", "Qa", "Qi", "Sx", "Sp", "Oc", "No", "Dc"]


def format_number(value: float) -> str:
    """Abbreviate large numbers: 1500 -> "1.50K", 2_000_000 -> "2.00M".
    
    Values below 1000 are floored and printed as integers. Tiers past the
    suffix table fall back to an ``eN`` suffix.
    """
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value < 1000:
        return str(math.floor(value))
    
    tier = int(math.log10(abs(value)) // 3)
    if tier <= 0:
        return str(math.floor(value))
    
    suffix = _SUFFIXES[tier] if tier < len(_SUFFIXES) else f"e{tier * 3}"
    scaled = value / (10 ** (tier * 3))
    return f"{scaled:.2f}{suffix}"


def format_time(seconds: float) -> str:
    """Format elapsed seconds as ``m:ss`` or ``h:mm:ss``."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
