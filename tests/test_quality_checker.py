"""
tests/test_quality_checker.py
Coaching score for the user's own side of a transcript.
"""

import pytest

from safedate.interest.quality_checker import (
    SHORT_REPLY_SUFFIX,
    analyze_conversation_quality,
    conversation_flow_score,
    engagement_level_for,
    message_length_score,
    open_endedness_score,
    question_asking_score,
)

DRY = (
    "Them: hey how was your weekend?\n"
    "Me: good\n"
    "Them: I went hiking, it was amazing\n"
    "Me: cool\n"
    "Them: do you hike?\n"
    "Me: no"
)

ENGAGED = (
    "Sam: I just got back from a hiking trip\n"
    "Me: That sounds amazing! I went hiking last month and loved it. What trail did you take?\n"
    "Sam: the ridge loop, took photos the whole way\n"
    "Me: Really? I'm curious what got you into photography, I have been trying it myself lately."
)


class TestAnalyzeQuality:

    def test_dry_replies(self):
        result = analyze_conversation_quality(DRY)
        b = result.breakdown
        assert result.user_message_count == 3
        assert b.question_asking.score   == 0
        assert b.message_length.score    == 20
        assert b.message_length.avg_length == 1.0
        assert b.open_endedness.score    == 0
        assert b.response_quality.score  == 0
        assert b.response_quality.dry_count == 5
        assert b.conversation_flow.score == 65
        assert result.overall_score    == 11
        assert result.engagement_level == 'Very Poor'
        assert result.strengths == ['Room for improvement in all areas - great opportunity to level up!']
        assert 'Write longer, more detailed messages' in result.improvements
        assert len(result.specific_tips) == 6

    def test_dry_replies_get_rewrites(self):
        examples = analyze_conversation_quality(DRY).example_replies
        assert [e.original for e in examples] == ['good', 'cool', 'cool']
        assert examples[0].improved == f"good {SHORT_REPLY_SUFFIX}"
        assert examples[1].improved.startswith('That sounds really cool!')

    def test_engaged_replies(self):
        result = analyze_conversation_quality(ENGAGED)
        b = result.breakdown
        assert b.question_asking.score   == 100
        assert b.message_length.score    == 100
        assert b.message_length.avg_length == 15.5
        assert b.open_endedness.score    == 100
        assert b.open_endedness.open_count == 3
        assert b.response_quality.score  == 100
        assert b.conversation_flow.score == 85
        assert b.conversation_flow.details == 'too many questions without sharing'
        assert result.overall_score    == 99
        assert result.engagement_level == 'Excellent'
        assert len(result.strengths)   == 5
        assert result.improvements     == []
        assert result.example_replies  == []

    @pytest.mark.parametrize('text', ['', 'Them: hi\nThem: anyone there?'])
    def test_no_user_messages(self, text):
        result = analyze_conversation_quality(text)
        assert result.overall_score      == 0
        assert result.engagement_level   == 'Very Poor'
        assert result.user_message_count == 0
        assert result.improvements == ['Start by sending a thoughtful, engaging message']
        assert result.breakdown.conversation_flow.details == 'No messages to analyze'


class TestComponents:

    def test_question_ratio_capped(self):
        result = question_asking_score(['how are you', 'ok', 'fine', 'sure', 'yes'])
        assert result.count   == 1
        assert result.score   == 50
        assert result.details == '1 questions in 5 messages (20%)'

    @pytest.mark.parametrize('words,expected', [
        (2, 20), (4, 40), (7, 70), (8, 100), (20, 100), (25, 85), (31, 60),
    ])
    def test_length_buckets(self, words, expected):
        assert message_length_score([' '.join(['w'] * words)]).score == expected

    def test_closed_question_gets_no_bonus(self):
        assert open_endedness_score(['do you ski?']).score == 0
        assert open_endedness_score(['skiing or snowboarding?']).score == 100

    def test_flow_without_issues(self):
        result = conversation_flow_score(['that is great, my sister does too', 'really, I love it'])
        assert result.score   == 100
        assert result.details == 'Good conversation flow'


@pytest.mark.parametrize('score,level', [
    (85, 'Excellent'), (84, 'Good'), (70, 'Good'), (69, 'Average'),
    (55, 'Average'), (54, 'Poor'), (35, 'Poor'), (34, 'Very Poor'),
])
def test_engagement_level_for(score, level):
    assert engagement_level_for(score) == level
