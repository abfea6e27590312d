"""
safedate/aggregators/risk_aggregator.py
Conversation safety aggregation.

Runs the message scanner over every contact message, runs the
conversation pattern analyzer once, and folds all alerts into a
single SafetyCheck.

NOTE ON RISK LEVEL:
  risk_level = mean(severity_weight(a.severity) * a.confidence) over
  all alerts, 0 when there are none, capped at 1.
  is_safe needs BOTH risk_level < 0.3 AND zero high/critical alerts:
  one high-severity alert makes the conversation unsafe regardless of
  the numeric score.
"""

import logging
from typing import Any, Iterable, List, Optional

from safedate.aggregators.conversation_patterns import analyze_conversation_patterns
from safedate.detectors.message_scanner import check_message_for_risks
from safedate.models.record import Message, SafetyAlert, SafetyCheck, coerce_messages

logger = logging.getLogger(__name__)

SEVERITY_WEIGHTS = {
    'critical': 1.0,
    'high':     0.8,
    'medium':   0.5,
    'low':      0.2,
}
UNKNOWN_SEVERITY_WEIGHT = 0.1

SEVERITY_ORDER = {'critical': 4, 'high': 3, 'medium': 2, 'low': 1}

SAFE_RISK_THRESHOLD = 0.3
HIGH_RISK_HIGH_ALERTS = 2     # this many high alerts (or any critical) → high-risk tips

# ── SAFETY TIPS ──────────────────────────────────────────────

NO_CONCERN_TIPS = (
    "✅ No immediate safety concerns detected",
    "💡 Always meet first dates in public places",
    "🔒 Keep personal information private until you build trust",
)

CATEGORY_TIPS = {
    'privacy': (
        "🔒 Protect your privacy: Avoid sharing phone numbers, addresses, or workplace details early",
        "📱 Use the dating app's messaging until you're comfortable meeting in person",
    ),
    'safety': (
        "⚠️ Stay safe: Meet in public places, tell a friend your plans, trust your instincts",
        "🚫 Don't feel pressured to move conversations to other platforms",
    ),
    'scam': (
        "🚨 Scam alert: Never send money, gift cards, or personal financial information",
        "🔗 Don't click suspicious links or download files from matches",
    ),
    'manipulation': (
        "🧠 Trust your gut: Be wary of excessive flattery or pressure tactics",
        "⏰ Take your time: Healthy relationships develop gradually",
    ),
}

HIGH_RISK_TIPS = (
    "🚨 HIGH RISK: Consider ending this conversation and reporting the user",
    "📞 If you feel unsafe, contact local authorities or the app's safety team",
)

GENERAL_SAFETY_TIPS = (
    "🏛️ Always meet first dates in public places like cafes, restaurants, or museums",
    "👥 Tell a trusted friend about your date plans and location",
    "📱 Keep conversations on the dating app until you've met and feel comfortable",
    "🔒 Don't share personal information like your address, workplace, or phone number early",
    "💰 Never send money, gift cards, or financial information to someone you met online",
    "🔗 Don't click suspicious links or download files from matches",
    "⏰ Take your time getting to know someone - don't rush into meetings",
    "🚫 Trust your instincts - if something feels off, it probably is",
    "📞 Use video calls before meeting to verify the person matches their photos",
    "🚗 Arrange your own transportation to and from dates",
)


def severity_weight(severity: str) -> float:
    return SEVERITY_WEIGHTS.get(severity, UNKNOWN_SEVERITY_WEIGHT)


def compute_risk_level(alerts: List[SafetyAlert]) -> float:
    """Mean severity-weighted confidence, clamped to [0, 1]. No alerts → 0."""
    if not alerts:
        return 0.0
    total = sum(severity_weight(a.severity) * a.confidence for a in alerts)
    return max(0.0, min(total / len(alerts), 1.0))


def sort_alerts(alerts: List[SafetyAlert]) -> List[SafetyAlert]:
    """Severity descending; equal severities keep emission order."""
    return sorted(alerts, key=lambda a: SEVERITY_ORDER.get(a.severity, 0), reverse=True)


def generate_safety_tips(alerts: List[SafetyAlert]) -> List[str]:
    """Contextual tips picked by alert categories. Deduplicated, first-seen order."""
    tips: List[str] = []
    if not alerts:
        tips.extend(NO_CONCERN_TIPS)

    present = {a.category for a in alerts}
    for category, category_tips in CATEGORY_TIPS.items():
        if category in present:
            tips.extend(category_tips)

    severities = [a.severity for a in alerts]
    if 'critical' in severities or severities.count('high') >= HIGH_RISK_HIGH_ALERTS:
        tips.extend(HIGH_RISK_TIPS)

    return list(dict.fromkeys(tips))


def general_safety_tips() -> List[str]:
    return list(GENERAL_SAFETY_TIPS)


def analyze_conversation_safety(
    messages: Optional[Iterable[Any]],
    now_ms:   Optional[int] = None,
) -> SafetyCheck:
    """
    Full pattern-only safety analysis of a conversation.
    Accepts Messages or loosely-shaped dicts; empty input → safe, risk 0.
    """
    history: List[Message] = coerce_messages(messages)

    alerts: List[SafetyAlert] = []
    for message in history:
        if message.is_contact:
            alerts.extend(check_message_for_risks(message.text, message.timestamp))

    alerts.extend(analyze_conversation_patterns(history, now_ms=now_ms))

    risk_level = compute_risk_level(alerts)
    severe     = sum(1 for a in alerts if a.severity in ('critical', 'high'))
    is_safe    = risk_level < SAFE_RISK_THRESHOLD and severe == 0

    logger.info(
        f"Safety analysis: messages={len(history)} alerts={len(alerts)} "
        f"risk={risk_level:.2f} safe={is_safe}"
    )

    return SafetyCheck(
        is_safe    = is_safe,
        risk_level = risk_level,
        alerts     = sort_alerts(alerts),
        safe_tips  = generate_safety_tips(alerts),
    )
