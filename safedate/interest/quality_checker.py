"""
safedate/interest/quality_checker.py
Coaching score for YOUR side of a transcript: are you asking questions,
writing more than one word, leaving room for a reply?

Five component scores (0-100) over the user's turns:

  question_asking    0.25   share of messages with a question, 40% is ideal
  message_length     0.20   average words per message, 8-20 is ideal
  open_endedness     0.25   open question words, closed yes/no questions ignored
  response_quality   0.20   dry one-word replies
  conversation_flow  0.10   building on topics, sharing about yourself
"""

import logging
from typing import List

from safedate.interest.interest_detector import SPEAKER_USER, parse_conversation, round_half_up
from safedate.models.record import (
    AverageLengthScore,
    ComponentScore,
    ConversationQualityResult,
    ExampleReply,
    OpenEndednessScore,
    QualityBreakdown,
    QuestionAskingScore,
    ResponseQualityScore,
)

logger = logging.getLogger(__name__)

DRY_RESPONSES = frozenset((
    'yes', 'no', 'ok', 'okay', 'cool', 'nice', 'yeah', 'nah', 'sure', 'maybe',
    'lol', 'haha', 'wow', 'oh', 'ah', 'hmm', 'yep', 'nope', 'k', 'kk',
))

ENGAGEMENT_WORDS = (
    'what', 'how', 'why', 'when', 'where', 'which', 'tell me', 'share',
    'describe', 'explain', 'think', 'feel', 'opinion', 'favorite', 'prefer',
    'experience', 'story', 'interesting', 'curious', 'wonder',
)

QUESTION_INDICATORS = ('?', 'what', 'how', 'why', 'when', 'where', 'which', 'do you', 'are you', 'have you')
CLOSED_QUESTIONS    = ('do you', 'are you', 'have you', 'did you')
BUILD_WORDS         = ('that', 'really', 'interesting', 'tell me more')
SHARING_WORDS       = ('i ', 'my ', 'me ', "i'm")

IDEAL_QUESTION_RATIO = 0.4
MAX_TIPS             = 6
MAX_EXAMPLES         = 3

WEIGHTS = {
    'question_asking':   0.25,
    'message_length':    0.20,
    'open_endedness':    0.25,
    'response_quality':  0.20,
    'conversation_flow': 0.10,
}

ENGAGEMENT_LEVELS = (
    (85, 'Excellent'),
    (70, 'Good'),
    (55, 'Average'),
    (35, 'Poor'),
    (0,  'Very Poor'),
)

DRY_REPLY_UPGRADES = {
    'cool': "That sounds really cool! I've always been curious about that. What got you started with it?",
    'nice': "That's awesome! I love hearing about experiences like that. What was your favorite part?",
    'yeah': ("Absolutely! I feel the same way. Have you noticed that too, or is there something "
             "specific that made you realize that?"),
    'lol':  ("Haha that's hilarious! You have a great sense of humor. Do you always find the "
             "funny side of things like that?"),
}
SHORT_REPLY_SUFFIX = (
    "That's really interesting! I'd love to hear more about your experience with that. "
    "What's been the most surprising thing about it?"
)

NO_MESSAGES = 'No messages to analyze'


def _word_count(text: str) -> int:
    return len(text.split(' '))


# ── COMPONENTS ───────────────────────────────────────────────

def question_asking_score(messages: List[str]) -> QuestionAskingScore:
    count = sum(1 for m in messages if any(q in m.lower() for q in QUESTION_INDICATORS))
    ratio = count / len(messages)
    return QuestionAskingScore(
        score   = round_half_up(min(100.0, ratio / IDEAL_QUESTION_RATIO * 100)),
        count   = count,
        details = f"{count} questions in {len(messages)} messages ({round_half_up(ratio * 100)}%)",
    )


def message_length_score(messages: List[str]) -> AverageLengthScore:
    average = sum(_word_count(m) for m in messages) / len(messages)

    if average < 3:
        score = 20
    elif average < 5:
        score = 40
    elif average < 8:
        score = 70
    elif average <= 20:
        score = 100
    elif average <= 30:
        score = 85
    else:
        score = 60          # too verbose

    return AverageLengthScore(
        score      = score,
        avg_length = round_half_up(average * 10) / 10,
        details    = f"Average {round_half_up(average)} words per message",
    )


def open_endedness_score(messages: List[str]) -> OpenEndednessScore:
    open_count = 0.0
    for msg in messages:
        lowered = msg.lower()
        if any(w in lowered for w in ENGAGEMENT_WORDS):
            open_count += 1
        if '?' in lowered and not any(c in lowered for c in CLOSED_QUESTIONS):
            open_count += 0.5

    ratio = open_count / len(messages)
    return OpenEndednessScore(
        score      = round_half_up(min(100.0, ratio * 200)),
        open_count = round_half_up(open_count),
        details    = f"{round_half_up(open_count)} open-ended messages out of {len(messages)}",
    )


def response_quality_score(messages: List[str]) -> ResponseQualityScore:
    dry = 0.0
    for msg in messages:
        cleaned = msg.lower().strip()
        if cleaned in DRY_RESPONSES or _word_count(msg) <= 2:
            dry += 1
        if len(cleaned) < 10 and '?' not in cleaned:
            dry += 0.5

    ratio = dry / len(messages)
    return ResponseQualityScore(
        score     = round_half_up(max(0.0, 100 - ratio * 120)),
        dry_count = round_half_up(dry),
        details   = f"{round_half_up(dry)} dry/short responses detected",
    )


def conversation_flow_score(messages: List[str]) -> ComponentScore:
    score = 100
    issues: List[str] = []

    builds = sum(1 for m in messages if any(w in m.lower() for w in BUILD_WORDS))
    if builds / max(len(messages) - 1, 1) < 0.2:
        score -= 20
        issues.append('rarely builds on previous topics')

    questions = sum(1 for m in messages if '?' in m)
    if questions > len(messages) * 0.8:
        score -= 15
        issues.append('too many questions without sharing')

    sharing = sum(1 for m in messages if any(w in m.lower() for w in SHARING_WORDS))
    if sharing / len(messages) < 0.3:
        score -= 15
        issues.append('not sharing enough about yourself')

    return ComponentScore(
        score   = max(0, score),
        details = ', '.join(issues) if issues else 'Good conversation flow',
    )


# ── AGGREGATION ──────────────────────────────────────────────

def overall_score(breakdown: QualityBreakdown) -> int:
    total = sum(getattr(breakdown, name).score * weight for name, weight in WEIGHTS.items())
    return round_half_up(round(total, 6))


def engagement_level_for(score: int) -> str:
    for floor, level in ENGAGEMENT_LEVELS:
        if score >= floor:
            return level
    return ENGAGEMENT_LEVELS[-1][1]


def identify_strengths(b: QualityBreakdown) -> List[str]:
    strengths: List[str] = []
    if b.question_asking.score >= 75:
        strengths.append('Asks engaging questions frequently')
    if b.message_length.score >= 80:
        strengths.append('Messages are well-detailed and substantive')
    if b.open_endedness.score >= 70:
        strengths.append('Uses open-ended questions effectively')
    if b.response_quality.score >= 80:
        strengths.append('Avoids dry, single-word responses')
    if b.conversation_flow.score >= 75:
        strengths.append('Maintains good conversation flow')

    if not strengths:
        strengths.append('Room for improvement in all areas - great opportunity to level up!')
    return strengths


def identify_improvements(b: QualityBreakdown) -> List[str]:
    improvements: List[str] = []
    if b.question_asking.score < 60:
        improvements.append('Ask more questions to show interest')
    if b.message_length.score < 60:
        if b.message_length.avg_length < 5:
            improvements.append('Write longer, more detailed messages')
        else:
            improvements.append('Keep messages more concise and focused')
    if b.open_endedness.score < 60:
        improvements.append('Use more open-ended questions instead of yes/no questions')
    if b.response_quality.score < 60:
        improvements.append('Avoid single-word replies and add more substance')
    if b.conversation_flow.score < 60:
        improvements.append('Build on previous topics and share more about yourself')
    return improvements


def generate_tips(b: QualityBreakdown) -> List[str]:
    tips: List[str] = []

    if b.question_asking.score < 70:
        tips.append('Try asking "What\'s your favorite..." or "How did you get into..." questions')
        tips.append('Follow up on things they mention with "Tell me more about that"')
    if b.message_length.avg_length < 5:
        tips.append('Add context to your responses - explain why you think that way')
        tips.append("Share a brief personal experience related to what they're saying")
    if b.open_endedness.score < 60:
        tips.append('Replace "Do you like X?" with "What do you think about X?"')
        tips.append('Ask about experiences: "What was that like?" or "How did that make you feel?"')
    if b.response_quality.score < 70:
        tips.append('Instead of "cool" try "That sounds really interesting, I\'ve always wanted to try that"')
        tips.append('Add your own perspective: "I love that too because..."')
    if b.conversation_flow.score < 70:
        tips.append('Reference earlier parts of the conversation: "Earlier you mentioned..."')
        tips.append('Balance asking questions with sharing your own experiences')

    tips.append('Use their name occasionally to make it more personal')
    tips.append('React to what they say with genuine enthusiasm or curiosity')
    return tips[:MAX_TIPS]


def example_replies(messages: List[str]) -> List[ExampleReply]:
    """Rewrites of your driest messages, at most MAX_EXAMPLES."""
    examples: List[ExampleReply] = []
    for msg in messages:
        upgrade = DRY_REPLY_UPGRADES.get(msg.lower().strip())
        if upgrade:
            examples.append(ExampleReply(original=msg, improved=upgrade))
        if _word_count(msg) <= 3 and '?' not in msg and len(examples) < MAX_EXAMPLES:
            examples.append(ExampleReply(original=msg, improved=f"{msg} {SHORT_REPLY_SUFFIX}"))
    return examples[:MAX_EXAMPLES]


def empty_result() -> ConversationQualityResult:
    return ConversationQualityResult(
        overall_score      = 0,
        engagement_level   = 'Very Poor',
        user_message_count = 0,
        breakdown          = QualityBreakdown(
            question_asking   = QuestionAskingScore(score=0, count=0, details=NO_MESSAGES),
            message_length    = AverageLengthScore(score=0, avg_length=0.0, details=NO_MESSAGES),
            open_endedness    = OpenEndednessScore(score=0, open_count=0, details=NO_MESSAGES),
            response_quality  = ResponseQualityScore(score=0, dry_count=0, details=NO_MESSAGES),
            conversation_flow = ComponentScore(score=0, details=NO_MESSAGES),
        ),
        improvements  = ['Start by sending a thoughtful, engaging message'],
        specific_tips = ['Ask open-ended questions', 'Share something about yourself', 'Show genuine interest'],
    )


# ── ENTRY POINT ──────────────────────────────────────────────

def analyze_conversation_quality(conversation: str) -> ConversationQualityResult:
    """Score how engaging the user's own messages are."""
    turns = parse_conversation(conversation)
    mine  = [t.message for t in turns if t.speaker == SPEAKER_USER]

    if not mine:
        logger.info("Quality analysis skipped: no messages from you.")
        return empty_result()

    breakdown = QualityBreakdown(
        question_asking   = question_asking_score(mine),
        message_length    = message_length_score(mine),
        open_endedness    = open_endedness_score(mine),
        response_quality  = response_quality_score(mine),
        conversation_flow = conversation_flow_score(mine),
    )
    score = overall_score(breakdown)

    logger.info(f"Quality analysis: turns={len(turns)} mine={len(mine)} score={score}")

    return ConversationQualityResult(
        overall_score      = score,
        engagement_level   = engagement_level_for(score),
        user_message_count = len(mine),
        breakdown          = breakdown,
        strengths          = identify_strengths(breakdown),
        improvements       = identify_improvements(breakdown),
        specific_tips      = generate_tips(breakdown),
        example_replies    = example_replies(mine),
    )
