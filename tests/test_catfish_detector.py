"""
tests/test_catfish_detector.py
Realness scoring of the other person in a transcript.
"""

import pytest

from safedate.models.record import CatfishBreakdown, ComponentScore
from safedate.safety.catfish_detector import (
    FLAG_CONTACT_INFO,
    FLAG_FINANCIAL,
    FLAG_ROMANCE,
    analyze_catfish,
    escalation_speed_score,
    language_consistency_score,
    profile_alignment_score,
    realness_score,
    response_patterns_score,
    risk_level_for,
)

SCAM = (
    "Me: hi, nice to meet you\n"
    "Them: hello beautiful\n"
    "Them: text me on whatsapp, here's my number\n"
    "Them: i need money for an emergency, can you help me"
)

GENUINE = (
    "Me: so what do you do?\n"
    "Alex: haha yeah I work as a nurse at the city hospital\n"
    "Me: nice, I hike a lot\n"
    "Alex: my favorite hobby is hiking, where do you like to go?\n"
    "Me: the coast mostly\n"
    "Alex: lol that sounds fun, I study photography on weekends too"
)


# ── END TO END ───────────────────────────────────────────────

class TestAnalyzeCatfish:

    def test_scam_transcript(self):
        result = analyze_catfish(SCAM)
        assert result.breakdown.response_patterns.score    == 90
        assert result.breakdown.personal_details.score     == 40
        assert result.breakdown.escalation_speed.score     == 20
        assert result.breakdown.language_consistency.score == 50
        assert result.breakdown.profile_alignment.score    == 100
        assert result.realness_score == 55
        assert result.risk_level     == 'Medium'
        assert result.red_flags      == [FLAG_ROMANCE, FLAG_CONTACT_INFO, FLAG_FINANCIAL]
        assert result.green_flags    == []
        assert 'Never send money or financial assistance' in result.recommendations
        assert "Avoid sharing personal contact info until you're comfortable" in result.recommendations

    def test_genuine_transcript(self):
        result = analyze_catfish(GENUINE)
        assert result.realness_score >= 80
        assert result.risk_level     == 'Very Low'
        assert result.red_flags      == []
        assert result.green_flags    == [
            'Shares specific personal/professional details',
            'Asks engaging questions about you',
            'Uses natural, casual language',
            'Discusses specific interests and hobbies',
        ]
        assert result.recommendations[0] == 'Person appears to be genuine'

    def test_user_messages_ignored(self):
        result = analyze_catfish("Me: send me money babe\nThem: hey there, how is your week going")
        assert result.red_flags == []

    def test_empty_transcript_is_neutral(self):
        result = analyze_catfish('')
        assert result.realness_score == 50
        assert result.risk_level     == 'Medium'
        assert result.breakdown.personal_details.details == 'No messages to analyze'


# ── COMPONENTS ───────────────────────────────────────────────

class TestComponents:

    def test_generic_compliment_and_short_reply(self):
        result = response_patterns_score(["wow you're gorgeous", 'hey'])
        assert result.score   == 60
        assert result.details == '40% of messages show suspicious patterns'

    def test_early_contact_request_counts_more(self):
        early = escalation_speed_score(['whats your number', 'ok', 'ok', 'ok'])
        late  = escalation_speed_score(['ok', 'ok', 'ok', 'whats your number'])
        assert early.score == 76
        assert late.score  == 100

    def test_lowercase_standalone_i_is_a_grammar_issue(self):
        assert language_consistency_score(['i think so']).details.startswith('1 grammar issues')
        assert language_consistency_score(['I think so']).details.startswith('0 grammar issues')

    def test_conflicting_ages(self):
        result = profile_alignment_score(['I am 28 years old', 'well I turned 31 years old in may'])
        assert result.score   == 70
        assert result.details == 'Age inconsistencies found'

    def test_repeated_age_is_consistent(self):
        assert profile_alignment_score(['28 years old', 'yes 28 years old']).score == 100

    def test_many_location_claims(self):
        result = profile_alignment_score(["I'm from Texas.", 'I live in Paris.', 'we are based in Rome.'])
        assert result.score   == 70
        assert result.details == 'Multiple location claims'


@pytest.mark.parametrize('score,level', [
    (80, 'Very Low'), (79, 'Low'), (65, 'Low'), (64, 'Medium'),
    (45, 'Medium'), (44, 'High'), (25, 'High'), (24, 'Very High'), (0, 'Very High'),
])
def test_risk_level_for(score, level):
    assert risk_level_for(score) == level


def test_realness_weights():
    breakdown = CatfishBreakdown(
        response_patterns    = ComponentScore(100, ''),
        personal_details     = ComponentScore(0, ''),
        escalation_speed     = ComponentScore(0, ''),
        language_consistency = ComponentScore(100, ''),
        profile_alignment    = ComponentScore(100, ''),
    )
    assert realness_score(breakdown) == 50
