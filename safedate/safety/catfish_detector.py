"""
safedate/safety/catfish_detector.py
"Is this a real person?" scoring from a pasted transcript.

Only the other person's turns are scored (same turn parsing as the
interest scorer). Five component scores (0-100, higher = more real)
are folded into a weighted realness score:

  response_patterns     0.25   generic compliments, very short or scripted replies
  personal_details      0.25   concrete details shared vs evasive answers
  escalation_speed      0.25   early romance / money words, early contact requests
  language_consistency  0.15   typo rate near a natural level, few polished essays
  profile_alignment     0.10   contradictory ages or too many location claims

Pure keyword heuristics: no network, no AI call. A high realness score
is not proof of identity.
"""

import logging
import re
from typing import List

from safedate.interest.interest_detector import SPEAKER_OTHER, parse_conversation, round_half_up
from safedate.models.record import CatfishAnalysisResult, CatfishBreakdown, ComponentScore

logger = logging.getLogger(__name__)

RED_FLAG_KEYWORDS = (
    'honey', 'babe', 'darling', 'sweetie', 'beautiful', 'gorgeous', 'perfect',
    'love you', 'soulmate', 'destiny', 'meant to be', 'never felt this way',
    'delete this app', "here's my number", 'text me', 'whatsapp', 'telegram',
    'emergency', 'help me', 'money', 'financial', 'send', 'western union',
    'gift card', 'bitcoin', 'crypto', 'investment', 'business opportunity',
)

GENERIC_COMPLIMENTS = (
    "you're beautiful", "you're cute", "you're gorgeous", "you're perfect",
    "you're amazing", "you're wonderful", 'you look great', 'nice pics',
    'love your smile', 'beautiful eyes', 'stunning', 'wow', 'incredible',
)

EVASIVE_PATTERNS = (
    "i'd rather not say", 'maybe later', "let's talk about you",
    "that's personal", "i don't like talking about", 'change the subject',
    'enough about me', 'what about you', 'tell me about yourself',
)

PERSONAL_DETAIL_PHRASES = ('i work', 'my job', 'i live in', "i'm from", 'my family', 'i study')
CONTACT_WORDS           = ('number', 'phone', 'whatsapp', 'telegram')
CASUAL_WORDS            = ('umm', 'lol', 'haha', 'yeah')

WEIGHTS = {
    'response_patterns':    0.25,
    'personal_details':     0.25,
    'escalation_speed':     0.25,
    'language_consistency': 0.15,
    'profile_alignment':    0.10,
}

RISK_LEVELS = (
    (80, 'Very Low'),
    (65, 'Low'),
    (45, 'Medium'),
    (25, 'High'),
    (0,  'Very High'),
)

FLAG_ROMANCE       = 'Uses overly romantic language too early'
FLAG_COMPLIMENTS   = 'Relies on generic compliments'
FLAG_EVASIVE       = 'Avoids answering personal questions'
FLAG_CONTACT_INFO  = 'Quickly requests personal contact information'
FLAG_FINANCIAL     = 'Mentions financial situations or emergencies'

IDEAL_ERROR_RATE = 0.1      # grammar errors per 20 words
EARLY_SHARE      = 0.3      # first 30% of their messages

AGE_RE = re.compile(r'(\d+)\s*years?\s*old')
LOCATION_RES = tuple(
    re.compile(rf'{phrase}\s+([a-zA-Z\s,]+?)(?:\.|,|!|\?|$)', re.IGNORECASE)
    for phrase in ('from', 'live in', 'based in')
)

NO_MESSAGES = "No messages to analyze"


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _words(text: str) -> List[str]:
    return text.split(' ')


# ── COMPONENTS ───────────────────────────────────────────────

def response_patterns_score(messages: List[str]) -> ComponentScore:
    if not messages:
        return ComponentScore(score=50, details=NO_MESSAGES)

    suspicious = 0.0
    for msg in messages:
        lowered = msg.lower()
        if any(c in lowered for c in GENERIC_COMPLIMENTS):
            suspicious += 0.5
        if len(_words(lowered)) < 3:
            suspicious += 0.3
        if 'greetings' in lowered or 'salutations' in lowered:
            suspicious += 0.4

    ratio = suspicious / len(messages)
    return ComponentScore(
        score   = round_half_up(_clamp(100 - ratio * 100)),
        details = f"{round_half_up(ratio * 100)}% of messages show suspicious patterns",
    )


def personal_details_score(messages: List[str]) -> ComponentScore:
    if not messages:
        return ComponentScore(score=50, details=NO_MESSAGES)

    shared = evasive = questions = 0
    for msg in messages:
        lowered = msg.lower()
        if any(p in lowered for p in PERSONAL_DETAIL_PHRASES):
            shared += 1
        if any(p in lowered for p in EVASIVE_PATTERNS):
            evasive += 1
        if '?' in lowered and any(w in lowered for w in ('what', 'where', 'how')):
            questions += 1

    details_ratio = shared / max(questions, 1)
    evasive_ratio = evasive / len(messages)
    score = _clamp(details_ratio * 60 + (1 - evasive_ratio) * 40)

    return ComponentScore(
        score   = round_half_up(score),
        details = f"{shared} personal details shared, {evasive} evasive responses",
    )


def escalation_speed_score(messages: List[str]) -> ComponentScore:
    """Romance or money words count more the earlier they appear."""
    if not messages:
        return ComponentScore(score=50, details=NO_MESSAGES)

    total = len(messages)
    flags = 0.0
    for index, msg in enumerate(messages):
        lowered = msg.lower()
        if any(k in lowered for k in RED_FLAG_KEYWORDS):
            flags += 1 - index / total
        if any(w in lowered for w in CONTACT_WORDS) and index < total * EARLY_SHARE:
            flags += 0.8

    ratio = flags / total
    return ComponentScore(
        score   = round_half_up(_clamp(100 - ratio * 120)),
        details = f"{round_half_up(ratio * 100)}% escalation rate detected",
    )


def language_consistency_score(messages: List[str]) -> ComponentScore:
    """Peaks at IDEAL_ERROR_RATE with few long messages lacking casual words."""
    if not messages:
        return ComponentScore(score=50, details=NO_MESSAGES)

    errors = polished = total_words = 0
    for msg in messages:
        words = _words(msg)
        total_words += len(words)
        lowered = msg.lower()

        if ' i ' in f' {msg} ':
            errors += 1
        if 'your beautiful' in lowered or 'your amazing' in lowered:
            errors += 1
        if len(words) > 10 and not any(w in lowered for w in CASUAL_WORDS):
            polished += 1

    error_rate    = errors / max(total_words / 20, 1)
    polished_rate = polished / len(messages)

    error_score    = max(0.0, 100 - abs(error_rate - IDEAL_ERROR_RATE) * 200)
    polished_score = max(0.0, 100 - polished_rate * 60)

    return ComponentScore(
        score   = round_half_up((error_score + polished_score) / 2),
        details = f"{errors} grammar issues, {polished} overly polished messages",
    )


def profile_alignment_score(messages: List[str]) -> ComponentScore:
    if not messages:
        return ComponentScore(score=50, details=NO_MESSAGES)

    text = ' '.join(messages).lower()
    issues: List[str] = []

    ages = AGE_RE.findall(text)
    if len(ages) > 1 and len({int(a) for a in ages}) > 1:
        issues.append('Age inconsistencies found')

    location_claims = sum(len(regex.findall(text)) for regex in LOCATION_RES)
    if location_claims > 2:
        issues.append('Multiple location claims')

    return ComponentScore(
        score   = max(0, 100 - len(issues) * 30),
        details = ', '.join(issues) if issues else 'No major inconsistencies detected',
    )


# ── AGGREGATION ──────────────────────────────────────────────

def realness_score(breakdown: CatfishBreakdown) -> int:
    total = sum(getattr(breakdown, name).score * weight for name, weight in WEIGHTS.items())
    return round_half_up(round(total, 6))


def risk_level_for(score: int) -> str:
    for floor, level in RISK_LEVELS:
        if score >= floor:
            return level
    return RISK_LEVELS[-1][1]


def identify_red_flags(messages: List[str]) -> List[str]:
    text = ' '.join(messages).lower()
    flags: List[str] = []

    if any(k in text for k in RED_FLAG_KEYWORDS):
        flags.append(FLAG_ROMANCE)
    if any(c in text for c in GENERIC_COMPLIMENTS):
        flags.append(FLAG_COMPLIMENTS)
    if any(p in text for p in EVASIVE_PATTERNS):
        flags.append(FLAG_EVASIVE)
    if any(w in text for w in ('number', 'whatsapp', 'telegram')):
        flags.append(FLAG_CONTACT_INFO)
    if any(w in text for w in ('money', 'help', 'emergency')):
        flags.append(FLAG_FINANCIAL)
    return flags


def identify_green_flags(messages: List[str]) -> List[str]:
    text = ' '.join(messages).lower()
    flags: List[str] = []

    if any(p in text for p in ('i work', 'my job', 'i study')):
        flags.append('Shares specific personal/professional details')
    if messages and text.count('?') >= len(messages) * 0.3:
        flags.append('Asks engaging questions about you')
    if any(w in text for w in ('lol', 'haha', 'yeah')):
        flags.append('Uses natural, casual language')
    if any(w in text for w in ('hobby', 'favorite', 'love watching')):
        flags.append('Discusses specific interests and hobbies')
    return flags


def generate_recommendations(score: int, red_flags: List[str]) -> List[str]:
    if score < 30:
        recommendations = [
            'Exercise extreme caution - multiple red flags detected',
            'Consider ending this conversation',
        ]
    elif score < 50:
        recommendations = [
            'Proceed with caution and verify their identity',
            'Ask for a video call before meeting',
        ]
    elif score < 70:
        recommendations = [
            'Generally seems legitimate but stay alert',
            'Ask more personal questions to verify authenticity',
        ]
    else:
        recommendations = [
            'Person appears to be genuine',
            'Continue normal conversation',
        ]

    if FLAG_CONTACT_INFO in red_flags:
        recommendations.append("Avoid sharing personal contact info until you're comfortable")
    if FLAG_FINANCIAL in red_flags:
        recommendations.append('Never send money or financial assistance')
    return recommendations


# ── ENTRY POINT ──────────────────────────────────────────────

def analyze_catfish(conversation: str) -> CatfishAnalysisResult:
    """Score how likely the other person in a transcript is who they claim to be."""
    turns  = parse_conversation(conversation)
    theirs = [t.message for t in turns if t.speaker == SPEAKER_OTHER]

    breakdown = CatfishBreakdown(
        response_patterns    = response_patterns_score(theirs),
        personal_details     = personal_details_score(theirs),
        escalation_speed     = escalation_speed_score(theirs),
        language_consistency = language_consistency_score(theirs),
        profile_alignment    = profile_alignment_score(theirs),
    )
    score     = realness_score(breakdown)
    red_flags = identify_red_flags(theirs)

    logger.info(
        f"Catfish analysis: turns={len(turns)} theirs={len(theirs)} "
        f"realness={score} red_flags={len(red_flags)}"
    )

    return CatfishAnalysisResult(
        realness_score  = score,
        risk_level      = risk_level_for(score),
        breakdown       = breakdown,
        red_flags       = red_flags,
        green_flags     = identify_green_flags(theirs),
        recommendations = generate_recommendations(score, red_flags),
    )
