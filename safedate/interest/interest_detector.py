"""
safedate/interest/interest_detector.py
Interest / engagement scoring from a pasted transcript.
Independent of the safety pipeline: no alerts, no AI call.

Five component scores (0-100) are bucketed from simple text statistics
of the other person's messages and folded into a weighted overall score:

  response_time   0.15   placeholder, transcripts carry no timestamps
  message_length  0.25   their average length / your average length
  engagement      0.25   share of their messages containing '?'
  sentiment       0.20   AFINN-165 valence sum per message
  enthusiasm      0.15   emoji share + flirty keyword count
"""

import logging
import math
import re
from typing import List, Optional

from afinn import Afinn

from safedate.models.record import (
    ConversationTurn,
    EngagementScore,
    EnthusiasmScore,
    InterestAnalysisResult,
    InterestBreakdown,
    MessageLengthScore,
    ResponseTimeScore,
    SentimentScore,
)

logger = logging.getLogger(__name__)

SPEAKER_USER  = 'user'
SPEAKER_OTHER = 'other'

USER_PREFIXES  = ('me:', 'you:', 'user:')
OTHER_PREFIXES = ('them:', 'other:')
LABEL_RE       = re.compile(r"^\w[\w.'-]*(?: \w[\w.'-]*){0,2}:")   # up to three words

WEIGHTS = {
    'response_time':  0.15,
    'message_length': 0.25,
    'engagement':     0.25,
    'sentiment':      0.20,
    'enthusiasm':     0.15,
}

HIGH_INTEREST  = 70
MIXED_INTEREST = 40

LEVELS = (
    (HIGH_INTEREST,  'High Interest', '🔥'),
    (MIXED_INTEREST, 'Mixed Signals', '🤔'),
    (0,              'Low Interest',  '❄️'),
)

EMOJI_RE  = re.compile('[\u2600-\u27BF\U0001F300-\U0001F64F\U0001F680-\U0001F6FF]')
FLIRTY_RE = re.compile(
    r'heart|love|kiss|cute|beautiful|gorgeous|sexy|babe|honey|darling|sweetie',
    re.IGNORECASE,
)

NO_OTHER_MESSAGES = (
    "No messages from the other person found. "
    "Make sure to clearly separate your messages from theirs."
)
NOT_ANALYZED = "Not analyzed"


# ── TURN PARSING ─────────────────────────────────────────────

def _content_after_label(line: str) -> str:
    return line[line.index(':') + 1:].strip()


def parse_conversation(conversation: str) -> List[ConversationTurn]:
    """
    Split a transcript into turns.

    'Me:/You:/User:' lines belong to the user, 'Them:/Other:' or any
    other 'Name:' label of up to three words ('Sarah Jones:') to the
    other person. Unlabeled lines extend the current speaker's message;
    before the first label they alternate, starting with the user.
    """
    turns: List[ConversationTurn] = []
    speaker: Optional[str] = None
    current = ''

    def flush() -> None:
        if speaker and current.strip():
            turns.append(ConversationTurn(speaker=speaker, message=current.strip()))

    for raw in (conversation or '').splitlines():
        line = raw.strip()
        if not line:
            continue
        lowered = line.lower()

        if lowered.startswith(USER_PREFIXES):
            flush()
            speaker, current = SPEAKER_USER, _content_after_label(line)
        elif lowered.startswith(OTHER_PREFIXES) or LABEL_RE.match(line):
            flush()
            speaker, current = SPEAKER_OTHER, _content_after_label(line)
        elif speaker:
            current += ' ' + line
        else:
            guess = SPEAKER_USER if len(turns) % 2 == 0 else SPEAKER_OTHER
            turns.append(ConversationTurn(speaker=guess, message=line))

    flush()
    return turns


# ── SCORER ───────────────────────────────────────────────────

class InterestDetector:
    """Stateless apart from the AFINN lexicon, which is loaded once."""

    def __init__(self, afinn: Optional[Afinn] = None):
        self.afinn = afinn or Afinn(language='en')

    def analyze_interest(self, conversation: str) -> InterestAnalysisResult:
        turns = parse_conversation(conversation)
        mine   = [t.message for t in turns if t.speaker == SPEAKER_USER]
        theirs = [t.message for t in turns if t.speaker == SPEAKER_OTHER]

        if not theirs:
            logger.info("Interest analysis skipped: no messages from the other person.")
            return default_result(NO_OTHER_MESSAGES)

        breakdown = InterestBreakdown(
            response_time  = self.response_time_score(),
            message_length = self.message_length_score(mine, theirs),
            engagement     = self.engagement_score(theirs),
            sentiment      = self.sentiment_score(theirs),
            enthusiasm     = self.enthusiasm_score(theirs),
        )
        overall = weighted_score(breakdown)
        level, emoji = interest_level(overall)

        logger.info(
            f"Interest analysis: turns={len(turns)} theirs={len(theirs)} "
            f"score={overall} level={level}"
        )

        return InterestAnalysisResult(
            overall_score   = overall,
            level           = level,
            emoji           = emoji,
            breakdown       = breakdown,
            recommendations = generate_recommendations(overall, breakdown),
            insights        = generate_insights(overall, len(theirs)),
        )

    # ── COMPONENTS ────────────────────────────────────────────
    @staticmethod
    def response_time_score() -> ResponseTimeScore:
        return ResponseTimeScore(
            score           = 60,
            average_minutes = 30.0,
            details         = "Response time analysis requires timestamps. Consider this a neutral indicator.",
        )

    @staticmethod
    def message_length_score(mine: List[str], theirs: List[str]) -> MessageLengthScore:
        avg_theirs = sum(len(m) for m in theirs) / len(theirs)
        avg_mine   = sum(len(m) for m in mine) / len(mine) if mine else 0.0

        if avg_mine <= 0:
            score = 20          # nothing of yours to compare against
        else:
            ratio = avg_theirs / avg_mine
            if ratio >= 1.2:
                score = 90
            elif ratio >= 0.8:
                score = 70
            elif ratio >= 0.5:
                score = 50
            else:
                score = 20

        return MessageLengthScore(
            score          = score,
            average_length = avg_theirs,
            details        = (
                f"Their messages average {round_half_up(avg_theirs)} characters "
                f"vs your {round_half_up(avg_mine)} characters."
            ),
        )

    @staticmethod
    def engagement_score(theirs: List[str]) -> EngagementScore:
        asked = sum(1 for m in theirs if '?' in m)
        rate  = asked / len(theirs)

        if rate >= 0.4:
            score = 90
        elif rate >= 0.2:
            score = 70
        elif rate >= 0.1:
            score = 50
        else:
            score = 20

        return EngagementScore(
            score         = score,
            question_rate = rate * 100,
            details       = f"Asks questions in {round_half_up(rate * 100)}% of messages ({asked}/{len(theirs)})",
        )

    def message_sentiment(self, text: str) -> float:
        """Sum of AFINN valences (-5..+5 per word) over the message."""
        return float(self.afinn.score(text))

    def sentiment_score(self, theirs: List[str]) -> SentimentScore:
        average = sum(self.message_sentiment(m) for m in theirs) / len(theirs)

        if average >= 2:
            score = 90
        elif average >= 1:
            score = 75
        elif average >= 0:
            score = 60
        elif average >= -1:
            score = 40
        else:
            score = 20

        if average > 1:
            label = 'positive'
        elif average > 0:
            label = 'neutral-positive'
        elif average > -1:
            label = 'neutral-negative'
        else:
            label = 'negative'

        return SentimentScore(
            score             = score,
            average_sentiment = average,
            details           = f"Overall {label} tone with sentiment score of {average:.2f}",
        )

    @staticmethod
    def enthusiasm_score(theirs: List[str]) -> EnthusiasmScore:
        with_emoji = sum(1 for m in theirs if EMOJI_RE.search(m))
        ratio      = with_emoji / len(theirs)
        flirty     = sum(len(FLIRTY_RE.findall(m)) for m in theirs)

        if ratio >= 0.6 or flirty >= 3:
            score = 90
        elif ratio >= 0.3 or flirty >= 1:
            score = 70
        elif ratio >= 0.1:
            score = 50
        else:
            score = 30

        return EnthusiasmScore(
            score      = score,
            emoji_rate = ratio * 100,
            details    = f"Uses emojis in {round_half_up(ratio * 100)}% of messages, {flirty} flirty expressions",
        )


# ── SCORING HELPERS ──────────────────────────────────────────

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def weighted_score(breakdown: InterestBreakdown) -> int:
    total = sum(getattr(breakdown, name).score * weight for name, weight in WEIGHTS.items())
    return round_half_up(round(total, 6))


def interest_level(score: int):
    """Return (level, emoji) for an overall score."""
    for floor, level, emoji in LEVELS:
        if score >= floor:
            return level, emoji
    return LEVELS[-1][1], LEVELS[-1][2]


def generate_recommendations(score: int, breakdown: InterestBreakdown) -> List[str]:
    recommendations: List[str] = []

    if score >= HIGH_INTEREST:
        recommendations.append("🎉 Great signs! They seem genuinely interested.")
        recommendations.append("💡 Keep the conversation engaging and suggest meeting up soon.")
    elif score >= MIXED_INTEREST:
        recommendations.append("🤔 Mixed signals detected. Try to gauge their interest more directly.")
        recommendations.append("💡 Ask more engaging questions to spark deeper conversation.")
    else:
        recommendations.append("❄️ Low interest indicators. Consider backing off a bit.")
        recommendations.append("💡 Focus on being interesting rather than pursuing aggressively.")

    if breakdown.engagement.score < 50:
        recommendations.append(
            "📝 They're not asking many questions. Try to be more interesting "
            "or consider if they're just not that into you."
        )
    if breakdown.message_length.score < 40:
        recommendations.append("💬 Their messages are quite short. They might be busy or not very engaged.")
    if breakdown.sentiment.score < 40:
        recommendations.append(
            "😟 Their tone seems neutral or negative. Something might be wrong or they're losing interest."
        )
    if breakdown.enthusiasm.score < 40:
        recommendations.append("⚡ Low enthusiasm detected. Try injecting more fun and energy into the conversation.")

    return recommendations


def generate_insights(score: int, message_count: int) -> List[str]:
    insights = [f"📊 Analysis based on {message_count} messages from them"]

    if score >= HIGH_INTEREST:
        insights.append("🔥 Strong interest indicators suggest they're into you!")
        insights.append("🎯 This is a good time to escalate the conversation or suggest meeting")
    elif score >= MIXED_INTEREST:
        insights.append("⚖️ Interest level is moderate - they might need more time or engagement")
        insights.append("🎨 Try being more creative with your conversation topics")
    else:
        insights.append("📉 Low interest signals suggest they might not be that interested")
        insights.append("🤷 Sometimes it's just not a match - don't take it personally")

    return insights


def default_result(message: str) -> InterestAnalysisResult:
    """Neutral 'no data' result: score 0, every component unanalyzed."""
    return InterestAnalysisResult(
        overall_score = 0,
        level         = 'Mixed Signals',
        emoji         = '🤔',
        breakdown     = InterestBreakdown(
            response_time  = ResponseTimeScore(score=0, average_minutes=0.0, details=NOT_ANALYZED),
            message_length = MessageLengthScore(score=0, average_length=0.0, details=NOT_ANALYZED),
            engagement     = EngagementScore(score=0, question_rate=0.0, details=NOT_ANALYZED),
            sentiment      = SentimentScore(score=0, average_sentiment=0.0, details=NOT_ANALYZED),
            enthusiasm     = EnthusiasmScore(score=0, emoji_rate=0.0, details=NOT_ANALYZED),
        ),
        recommendations = [message],
        insights        = ["Please provide a conversation to analyze"],
    )


_detector: Optional[InterestDetector] = None


def analyze_interest(conversation: str) -> InterestAnalysisResult:
    """Module-level entry point. Reuses one detector so the lexicon loads once."""
    global _detector
    if _detector is None:
        _detector = InterestDetector()
    return _detector.analyze_interest(conversation)
