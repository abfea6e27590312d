"""
safedate/aggregators/conversation_patterns.py
Conversation-level pattern aggregation.

Looks at properties of the whole history that no single message
reveals. Only contact-authored messages are counted.

NOTE ON THRESHOLDS:
  Rapid disclosure:  more than 2 matching contact messages AND the
                     first contact message is under 24 hours old.
  Platform pressure: more than 1 contact message naming another
                     messaging app or asking to text/call.
  Both boundaries are fixed constants.
"""

import logging
import re
import time
from typing import List, Optional, Sequence

from safedate.detectors.message_scanner import new_alert_id
from safedate.models.record import Message, SafetyAlert

logger = logging.getLogger(__name__)

PERSONAL_INFO_RE   = re.compile(r'(?:phone|number|address|live|work|schedule|home|alone)', re.IGNORECASE)
PLATFORM_SWITCH_RE = re.compile(r'(?:whatsapp|telegram|signal|text\s+me|call\s+me)', re.IGNORECASE)

PERSONAL_INFO_MIN_COUNT   = 2         # strictly more than this
PERSONAL_INFO_WINDOW_HRS  = 24.0      # strictly less than this
PLATFORM_SWITCH_MIN_COUNT = 1         # strictly more than this

TAG_RAPID_PERSONAL_INFO   = 'rapid_personal_info_requests'
TAG_PLATFORM_SWITCH       = 'persistent_platform_switch'

_MS_PER_HOUR = 1000 * 60 * 60


def analyze_conversation_patterns(
    messages: Sequence[Message],
    now_ms:   Optional[int] = None,
) -> List[SafetyAlert]:
    """
    Return zero or more aggregate alerts for the full history.
    now_ms: reference clock for the 24h window (defaults to wall clock).
    """
    contact_messages = [m for m in messages if m.is_contact]
    if not contact_messages:
        return []

    now = int(time.time() * 1000) if now_ms is None else now_ms
    alerts: List[SafetyAlert] = []

    # ── RAPID PERSONAL-INFO DISCLOSURE ────────────────────────
    conversation_age_hrs = (now - contact_messages[0].timestamp) / _MS_PER_HOUR
    personal_info_count  = sum(1 for m in contact_messages if PERSONAL_INFO_RE.search(m.text))

    if personal_info_count > PERSONAL_INFO_MIN_COUNT and conversation_age_hrs < PERSONAL_INFO_WINDOW_HRS:
        alerts.append(SafetyAlert(
            id             = new_alert_id('pattern_personal_info'),
            category       = 'privacy',
            severity       = 'high',
            title          = 'Too Much Personal Information Too Quickly',
            description    = 'Multiple requests for personal information in a short time',
            recommendation = 'Slow down sharing personal details. Take time to build trust gradually',
            confidence     = 0.8,
            timestamp      = now,
            matched_text   = TAG_RAPID_PERSONAL_INFO,
            rule_id        = TAG_RAPID_PERSONAL_INFO,
        ))

    # ── PERSISTENT PLATFORM MIGRATION ─────────────────────────
    platform_switch_count = sum(1 for m in contact_messages if PLATFORM_SWITCH_RE.search(m.text))

    if platform_switch_count > PLATFORM_SWITCH_MIN_COUNT:
        alerts.append(SafetyAlert(
            id             = new_alert_id('pattern_platform_switch'),
            category       = 'safety',
            severity       = 'high',
            title          = 'Persistent Platform Switch Attempts',
            description    = 'Multiple attempts to move conversation off the dating platform',
            recommendation = 'Stay on the dating app. Legitimate matches will respect this boundary',
            confidence     = 0.9,
            timestamp      = now,
            matched_text   = TAG_PLATFORM_SWITCH,
            rule_id        = TAG_PLATFORM_SWITCH,
        ))

    logger.debug(
        f"Conversation patterns: personal_info={personal_info_count} "
        f"platform_switch={platform_switch_count} alerts={len(alerts)}"
    )
    return alerts
