"""
safedate/models/record.py
Shared dataclass schema. Detectors, aggregators, the AI analyzer and
the transcript scorers (interest, catfish, quality) all use these types.
Do not add logic here beyond tolerant construction, data only.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

# ── VOCABULARY ───────────────────────────────────────────────

SENDER_USER    = 'user'
SENDER_CONTACT = 'contact'
SENDER_ALIASES = {'match': SENDER_CONTACT, 'them': SENDER_CONTACT, 'me': SENDER_USER}

CATEGORIES = ('privacy', 'safety', 'scam', 'manipulation')
SEVERITIES = ('low', 'medium', 'high', 'critical')


def normalize_sender(value: Any) -> str:
    """Map aliases (match, them, me) to user/contact. Anything else is the user."""
    sender = str(value or SENDER_USER).strip().lower()
    sender = SENDER_ALIASES.get(sender, sender)
    return sender if sender in (SENDER_USER, SENDER_CONTACT) else SENDER_USER


@dataclass(frozen=True)
class Message:
    """One conversation turn. timestamp is epoch milliseconds."""
    text:       str
    timestamp:  int = 0
    sender:     str = SENDER_USER      # user / contact

    def __post_init__(self):
        object.__setattr__(self, 'sender', normalize_sender(self.sender))

    @property
    def is_contact(self) -> bool:
        return self.sender == SENDER_CONTACT

    @classmethod
    def from_dict(cls, data: Any) -> 'Message':
        """
        Build a Message from loosely-shaped input (JSON, API payloads).
        Missing or malformed fields fall back to defaults; never raises.
        """
        if isinstance(data, Message):
            return data
        if not isinstance(data, dict):
            return cls(text='')

        text = data.get('text')
        text = text if isinstance(text, str) else ''

        try:
            timestamp = int(data.get('timestamp') or 0)
        except (TypeError, ValueError, OverflowError):
            timestamp = 0

        return cls(text=text, timestamp=timestamp, sender=data.get('sender'))


def coerce_messages(items: Optional[Iterable[Any]]) -> List[Message]:
    """Normalize any iterable of dicts/Messages. None → []."""
    if not items:
        return []
    return [Message.from_dict(item) for item in items]


@dataclass(frozen=True)
class RiskPattern:
    """One declarative rule of the pattern library."""
    rule_id:        str
    pattern:        re.Pattern
    category:       str            # privacy / safety / scam / manipulation
    severity:       str            # low / medium / high / critical
    title:          str
    description:    str
    recommendation: str
    confidence:     float


@dataclass(frozen=True)
class SafetyAlert:
    """A single flagged concern. Never mutated after creation."""
    id:             str
    category:       str
    severity:       str
    title:          str
    description:    str
    recommendation: str
    confidence:     float
    timestamp:      int
    matched_text:   str            # matched substring, or meta-pattern tag
    rule_id:        str = ''


@dataclass
class SafetyCheck:
    """Aggregate result of one analysis call. Not cached, not persisted."""
    is_safe:    bool
    risk_level: float                               # 0 = safe, 1 = very risky
    alerts:     List[SafetyAlert] = field(default_factory=list)
    safe_tips:  List[str]         = field(default_factory=list)


@dataclass
class QuickCheck:
    """First-match result for a single message."""
    has_risk:       bool
    category:       Optional[str] = None
    severity:       Optional[str] = None
    recommendation: Optional[str] = None


@dataclass
class AiSafetyAnalysis:
    overall_risk:     float                         # 0-1
    concerns:         List[str] = field(default_factory=list)
    recommendations:  List[str] = field(default_factory=list)
    red_flags:        List[str] = field(default_factory=list)
    positive_signals: List[str] = field(default_factory=list)
    trust_score:      float     = 50.0              # 0-100
    source:           str       = 'ai'              # ai / fallback


@dataclass
class AiConversationResult:
    pattern_analysis:      SafetyCheck
    ai_analysis:           Optional[AiSafetyAnalysis]
    combined_risk:         float
    final_recommendations: List[str] = field(default_factory=list)


# ── INTEREST SCORING ─────────────────────────────────────────

@dataclass
class ConversationTurn:
    speaker: str                   # user / other
    message: str


@dataclass
class ResponseTimeScore:
    score:           int
    average_minutes: float
    details:         str


@dataclass
class MessageLengthScore:
    score:          int
    average_length: float
    details:        str


@dataclass
class EngagementScore:
    score:         int
    question_rate: float           # percent of their messages containing '?'
    details:       str


@dataclass
class SentimentScore:
    score:             int
    average_sentiment: float
    details:           str


@dataclass
class EnthusiasmScore:
    score:      int
    emoji_rate: float              # percent of their messages with an emoji
    details:    str


@dataclass
class InterestBreakdown:
    response_time:  ResponseTimeScore
    message_length: MessageLengthScore
    engagement:     EngagementScore
    sentiment:      SentimentScore
    enthusiasm:     EnthusiasmScore


@dataclass
class InterestAnalysisResult:
    overall_score:   int           # 0-100
    level:           str           # High Interest / Mixed Signals / Low Interest
    emoji:           str
    breakdown:       InterestBreakdown
    recommendations: List[str] = field(default_factory=list)
    insights:        List[str] = field(default_factory=list)


# ── CATFISH SCORING ──────────────────────────────────────────

@dataclass
class ComponentScore:
    score:   int
    details: str


@dataclass
class CatfishBreakdown:
    response_patterns:    ComponentScore
    personal_details:     ComponentScore
    escalation_speed:     ComponentScore
    language_consistency: ComponentScore
    profile_alignment:    ComponentScore


@dataclass
class CatfishAnalysisResult:
    realness_score:  int           # 0-100, higher = more likely a real person
    risk_level:      str           # Very Low / Low / Medium / High / Very High
    breakdown:       CatfishBreakdown
    red_flags:       List[str] = field(default_factory=list)
    green_flags:     List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


# ── CONVERSATION QUALITY (YOUR SIDE) ─────────────────────────

@dataclass
class QuestionAskingScore:
    score:   int
    count:   int
    details: str


@dataclass
class AverageLengthScore:
    score:      int
    avg_length: float              # words per message, one decimal
    details:    str


@dataclass
class OpenEndednessScore:
    score:      int
    open_count: int
    details:    str


@dataclass
class ResponseQualityScore:
    score:     int
    dry_count: int
    details:   str


@dataclass
class QualityBreakdown:
    question_asking:   QuestionAskingScore
    message_length:    AverageLengthScore
    open_endedness:    OpenEndednessScore
    response_quality:  ResponseQualityScore
    conversation_flow: ComponentScore


@dataclass
class ExampleReply:
    original: str
    improved: str


@dataclass
class ConversationQualityResult:
    overall_score:      int        # 0-100
    engagement_level:   str        # Excellent / Good / Average / Poor / Very Poor
    user_message_count: int
    breakdown:          QualityBreakdown
    strengths:          List[str]          = field(default_factory=list)
    improvements:       List[str]          = field(default_factory=list)
    specific_tips:      List[str]          = field(default_factory=list)
    example_replies:    List[ExampleReply] = field(default_factory=list)


def to_dict(obj: Any) -> Any:
    """Convert result dataclasses to JSON-serializable structures."""
    if hasattr(obj, '__dataclass_fields__'):
        return {k: to_dict(getattr(obj, k)) for k in obj.__dataclass_fields__}
    if isinstance(obj, list):
        return [to_dict(x) for x in obj]
    if isinstance(obj, dict):
        return {k: to_dict(v) for k, v in obj.items()}
    if isinstance(obj, re.Pattern):
        return obj.pattern
    return obj
