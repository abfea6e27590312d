"""
safedate/detectors/message_scanner.py
Single-message risk scan. Stateless: a pure function of
(text, timestamp, pattern table). Every matching rule yields its
own alert; no first-match-wins, no de-duplication.
"""

import time
import uuid
from typing import List, Optional, Sequence

from safedate.detectors.pattern_library import RISK_PATTERNS
from safedate.models.record import QuickCheck, RiskPattern, SafetyAlert


def new_alert_id(prefix: str = 'alert') -> str:
    """Unique, roughly time-ordered id: alert_<ms>_<9 hex chars>."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def check_message_for_risks(
    text:      str,
    timestamp: int,
    patterns:  Sequence[RiskPattern] = RISK_PATTERNS,
) -> List[SafetyAlert]:
    """
    Scan one message. Returns one SafetyAlert per rule whose regex
    matches anywhere in the text. Empty/whitespace text → [].
    """
    if not text or not text.strip():
        return []

    alerts: List[SafetyAlert] = []
    for rule in patterns:
        match = rule.pattern.search(text)
        if match is None:
            continue
        alerts.append(SafetyAlert(
            id             = new_alert_id(),
            category       = rule.category,
            severity       = rule.severity,
            title          = rule.title,
            description    = rule.description,
            recommendation = rule.recommendation,
            confidence     = rule.confidence,
            timestamp      = timestamp,
            matched_text   = match.group(0) or 'pattern match',
            rule_id        = rule.rule_id,
        ))
    return alerts


def quick_safety_check(
    text:     Optional[str],
    patterns: Sequence[RiskPattern] = RISK_PATTERNS,
) -> QuickCheck:
    """
    Real-time check while typing: reports the first matching rule only.
    """
    if not text:
        return QuickCheck(has_risk=False)

    for rule in patterns:
        if rule.pattern.search(text):
            return QuickCheck(
                has_risk       = True,
                category       = rule.category,
                severity       = rule.severity,
                recommendation = rule.recommendation,
            )
    return QuickCheck(has_risk=False)
