"""
safedate/detectors: per-message risk rules and the scanner that applies them.
"""

from safedate.detectors.message_scanner import check_message_for_risks, quick_safety_check
from safedate.detectors.pattern_library import RISK_PATTERNS, get_pattern

__all__ = [
    "RISK_PATTERNS",
    "check_message_for_risks",
    "get_pattern",
    "quick_safety_check",
]
