"""
safedate/detectors/pattern_library.py
Phase 1 rule set: pure Python, zero dependencies, fully offline.

Declarative table of RiskPattern records. The scanner applies every
rule to every contact message; order only fixes emission order, it
never suppresses a later rule. Extend by appending records; no
scanner changes needed.

Confidence values are fixed calibration constants reflecting how
unambiguous each cue is (financial requests 0.95, urgency 0.6).
"""

import re
from typing import Dict, Tuple

from safedate.models.record import RiskPattern

_I = re.IGNORECASE

# ── RULE TABLE ───────────────────────────────────────────────

RISK_PATTERNS: Tuple[RiskPattern, ...] = (

    RiskPattern(
        rule_id        = 'phone_number_sharing',
        pattern        = re.compile(
            r"(?:my\s+(?:number|phone)\s+is\s*:?\s*)?"
            r"(?:\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})",
            _I,
        ),
        category       = 'privacy',
        severity       = 'high',
        title          = 'Phone Number Sharing Risk',
        description    = 'Phone number detected in conversation',
        recommendation = 'Avoid sharing phone numbers until you meet in person and feel comfortable',
        confidence     = 0.9,
    ),

    RiskPattern(
        rule_id        = 'address_sharing',
        pattern        = re.compile(
            r"(?:i\s+(?:live|work)\s+(?:at|in|on)\s+|my\s+address\s+is\s+"
            r"|home\s+address|work\s+address).{1,50}",
            _I,
        ),
        category       = 'privacy',
        severity       = 'critical',
        title          = 'Personal Address Sharing',
        description    = 'Home or work address information detected',
        recommendation = "Never share your home or work address with someone you haven't met",
        confidence     = 0.85,
    ),

    RiskPattern(
        rule_id        = 'social_media_request',
        pattern        = re.compile(
            r"(?:add\s+me\s+on\s+|follow\s+me\s+on\s+|find\s+me\s+on\s+)"
            r"(?:instagram|facebook|snapchat|tiktok|twitter)",
            _I,
        ),
        category       = 'privacy',
        severity       = 'medium',
        title          = 'Social Media Request',
        description    = 'Request to connect on social media platforms',
        recommendation = 'Be cautious about connecting on social media before meeting in person',
        confidence     = 0.8,
    ),

    RiskPattern(
        rule_id        = 'platform_migration',
        pattern        = re.compile(
            r"(?:let's\s+(?:move|switch|talk)\s+(?:to|on)\s+|message\s+me\s+on\s+|text\s+me\s+on\s+)"
            r"(?:whatsapp|telegram|signal|kik|wickr|discord)",
            _I,
        ),
        category       = 'safety',
        severity       = 'high',
        title          = 'Platform Migration Request',
        description    = 'Request to move conversation to another messaging platform',
        recommendation = "Stay on the dating app until you've built trust and met in person",
        confidence     = 0.9,
    ),

    RiskPattern(
        rule_id        = 'suspicious_link',
        pattern        = re.compile(
            r"(?:check\s+out\s+|visit\s+|click\s+|go\s+to\s+)?"
            r"(?:https?://|www\.|[a-zA-Z0-9-]+\.(?:com|net|org|co|io|me|ly|tk|ml|ga))",
            _I,
        ),
        category       = 'scam',
        severity       = 'high',
        title          = 'Suspicious Link Detected',
        description    = 'External link shared in conversation',
        recommendation = ("Never click links from people you don't know well. "
                          "Scammers often use malicious links"),
        confidence     = 0.85,
    ),

    RiskPattern(
        rule_id        = 'financial_request',
        pattern        = re.compile(
            r"(?:send\s+me\s+|need\s+|borrow\s+|lend\s+|transfer\s+|money\s+for\s+"
            r"|cash\s+for\s+|pay\s+for\s+|emergency\s+fund|financial\s+help"
            r"|paypal|venmo|cashapp|bitcoin|crypto)",
            _I,
        ),
        category       = 'scam',
        severity       = 'critical',
        title          = 'Financial Request',
        description    = 'Request for money or financial assistance',
        recommendation = ('NEVER send money to someone you met online. '
                          'This is a major red flag for scams'),
        confidence     = 0.95,
    ),

    RiskPattern(
        rule_id        = 'love_bombing',
        pattern        = re.compile(
            r"(?:love\s+you|soul\s*mate|perfect\s+match|meant\s+to\s+be|destiny|fate\s+brought\s+us)"
            r".*(?:first\s+(?:day|week|time)|just\s+met|barely\s+know)",
            _I,
        ),
        category       = 'manipulation',
        severity       = 'high',
        title          = 'Love Bombing Detected',
        description    = 'Excessive romantic language very early in conversation',
        recommendation = ('Be wary of people who express intense feelings too quickly. '
                          'This can be manipulation'),
        confidence     = 0.8,
    ),

    RiskPattern(
        rule_id        = 'invasive_questions',
        pattern        = re.compile(
            r"(?:where\s+do\s+you\s+(?:live|work)|what's\s+your\s+(?:address|workplace)"
            r"|where\s+is\s+your\s+(?:house|apartment)|work\s+schedule|when\s+are\s+you\s+home\s+alone)",
            _I,
        ),
        category       = 'safety',
        severity       = 'medium',
        title          = 'Invasive Personal Questions',
        description    = 'Questions about your location, schedule, or living situation',
        recommendation = ("Avoid sharing specific details about where you live or work "
                          "until you've met and built trust"),
        confidence     = 0.75,
    ),

    RiskPattern(
        rule_id        = 'photo_verification_request',
        pattern        = re.compile(
            r"(?:send\s+me\s+a\s+(?:photo|pic|picture|selfie)|prove\s+you're\s+real"
            r"|verification\s+(?:photo|pic)|show\s+me\s+(?:your\s+face|yourself))",
            _I,
        ),
        category       = 'privacy',
        severity       = 'medium',
        title          = 'Photo Verification Request',
        description    = 'Request for additional photos or verification pictures',
        recommendation = ("Be cautious about sending additional photos. "
                          "Use the app's built-in verification features instead"),
        confidence     = 0.7,
    ),

    RiskPattern(
        rule_id        = 'urgency_pressure',
        pattern        = re.compile(
            r"(?:right\s+now|immediately|urgent|emergency|time\s+sensitive"
            r"|hurry|quick|fast|asap|can't\s+wait)",
            _I,
        ),
        category       = 'manipulation',
        severity       = 'medium',
        title          = 'Pressure/Urgency Tactics',
        description    = 'Language creating false urgency or pressure',
        recommendation = ("Legitimate connections don't require urgent responses. "
                          "Take your time to think"),
        confidence     = 0.6,
    ),

    RiskPattern(
        rule_id        = 'immediate_meeting',
        pattern        = re.compile(
            r"(?:come\s+visit\s+me|i'll\s+visit\s+you|meet\s+tonight|come\s+over"
            r"|your\s+place\s+or\s+mine)",
            _I,
        ),
        category       = 'safety',
        severity       = 'high',
        title          = 'Immediate Meeting Request',
        description    = 'Request to meet immediately or at private location',
        recommendation = ('Always meet in public places for first dates. '
                          'Take time to get to know someone first'),
        confidence     = 0.8,
    ),
)

# Lookup by rule_id: tests and the API use this to address single rules
PATTERNS_BY_ID: Dict[str, RiskPattern] = {p.rule_id: p for p in RISK_PATTERNS}


def get_pattern(rule_id: str) -> RiskPattern:
    """Return one rule by id. Raises KeyError for unknown ids."""
    return PATTERNS_BY_ID[rule_id]
