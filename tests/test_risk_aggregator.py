"""
tests/test_risk_aggregator.py
Conversation safety aggregation: risk level, is_safe, ordering, tips.
"""

from unittest.mock import patch

import pytest

from safedate.aggregators.risk_aggregator import (
    CATEGORY_TIPS,
    HIGH_RISK_TIPS,
    NO_CONCERN_TIPS,
    analyze_conversation_safety,
    compute_risk_level,
    general_safety_tips,
    generate_safety_tips,
    sort_alerts,
)
from safedate.models.record import Message, SafetyAlert, to_dict

NOW = 1_700_000_000_000


def _alert(severity, confidence=1.0, category='safety', title='t'):
    return SafetyAlert(
        id             = f"a_{severity}_{title}",
        category       = category,
        severity       = severity,
        title          = title,
        description    = 'd',
        recommendation = 'r',
        confidence     = confidence,
        timestamp      = 0,
        matched_text   = 'x',
    )


def _contact(text, ts=NOW):
    return {'text': text, 'timestamp': ts, 'sender': 'match'}


# ── EMPTY / BENIGN ───────────────────────────────────────────

class TestEmptyAndBenign:

    @pytest.mark.parametrize('messages', [[], None])
    def test_empty_conversation_is_safe(self, messages):
        check = analyze_conversation_safety(messages, now_ms=NOW)
        assert check.risk_level == 0
        assert check.alerts     == []
        assert check.is_safe    is True
        assert check.safe_tips  == list(NO_CONCERN_TIPS)

    def test_benign_conversation_is_safe(self):
        messages = [
            _contact('hey, how was your hike?'),
            {'text': 'great, the view was amazing', 'timestamp': NOW, 'sender': 'user'},
            _contact('I love hiking too'),
        ]
        check = analyze_conversation_safety(messages, now_ms=NOW)
        assert check.alerts  == []
        assert check.is_safe is True

    def test_user_messages_are_not_scanned(self):
        messages = [Message(text='can you send me money', timestamp=NOW, sender='user')]
        check = analyze_conversation_safety(messages, now_ms=NOW)
        assert check.alerts == []

    def test_malformed_entries_do_not_raise(self):
        check = analyze_conversation_safety([None, {'text': 5}, 'x', {'sender': 'contact'}], now_ms=NOW)
        assert check.is_safe is True


# ── RISK LEVEL ───────────────────────────────────────────────

class TestRiskLevel:

    def test_mean_of_weighted_confidences(self):
        alerts = [_alert('critical', 0.95), _alert('medium', 0.6)]
        assert compute_risk_level(alerts) == pytest.approx((0.95 + 0.5 * 0.6) / 2)

    def test_unknown_severity_weight(self):
        assert compute_risk_level([_alert('weird', 1.0)]) == pytest.approx(0.1)

    def test_clamped_to_one(self):
        assert compute_risk_level([_alert('critical', 3.0)]) == 1.0

    def test_no_alerts_is_zero(self):
        assert compute_risk_level([]) == 0.0


# ── IS_SAFE ──────────────────────────────────────────────────

class TestIsSafe:

    def test_financial_request_is_unsafe(self):
        check = analyze_conversation_safety([_contact('can you send me money for an emergency')], now_ms=NOW)
        assert check.is_safe is False
        assert check.alerts[0].severity == 'critical'
        assert check.alerts[0].category == 'scam'

    def test_high_alert_unsafe_even_with_low_risk_level(self):
        synthetic = [_alert('low', 0.1, title=str(i)) for i in range(9)] + [_alert('high', 0.5)]
        with patch('safedate.aggregators.risk_aggregator.check_message_for_risks', return_value=synthetic):
            check = analyze_conversation_safety([_contact('anything')], now_ms=NOW)
        assert check.risk_level < 0.3
        assert check.is_safe is False

    def test_only_low_alerts_below_threshold_is_safe(self):
        synthetic = [_alert('low', 0.1, title=str(i)) for i in range(3)]
        with patch('safedate.aggregators.risk_aggregator.check_message_for_risks', return_value=synthetic):
            check = analyze_conversation_safety([_contact('anything')], now_ms=NOW)
        assert check.risk_level < 0.3
        assert check.is_safe is True


# ── ORDERING ─────────────────────────────────────────────────

class TestOrdering:

    def test_critical_before_low(self):
        low, critical = _alert('low'), _alert('critical')
        assert sort_alerts([low, critical]) == [critical, low]

    def test_equal_severities_keep_emission_order(self):
        first, second, third = _alert('high', title='1'), _alert('high', title='2'), _alert('medium')
        assert sort_alerts([third, first, second]) == [first, second, third]

    def test_pattern_alerts_sorted_with_message_alerts(self):
        messages = [
            _contact('reply asap'),
            _contact('add me on whatsapp'),
            _contact('telegram is fine too'),
        ]
        check = analyze_conversation_safety(messages, now_ms=NOW)
        severities = [a.severity for a in check.alerts]
        assert severities == sorted(severities, key=['critical', 'high', 'medium', 'low'].index)
        assert severities[-1] == 'medium'


# ── TIPS ─────────────────────────────────────────────────────

class TestSafetyTips:

    def test_category_tips_for_present_categories(self):
        tips = generate_safety_tips([_alert('medium', category='privacy')])
        assert tips == list(CATEGORY_TIPS['privacy'])

    def test_high_risk_tips_for_any_critical(self):
        tips = generate_safety_tips([_alert('critical', category='scam')])
        for tip in HIGH_RISK_TIPS:
            assert tip in tips

    def test_high_risk_tips_for_two_high_alerts(self):
        tips = generate_safety_tips([_alert('high', title='1'), _alert('high', title='2')])
        assert HIGH_RISK_TIPS[0] in tips

    def test_no_high_risk_tips_for_single_high_alert(self):
        tips = generate_safety_tips([_alert('high')])
        assert HIGH_RISK_TIPS[0] not in tips

    def test_tips_deduplicated(self):
        tips = generate_safety_tips([_alert('medium', category='safety', title=str(i)) for i in range(4)])
        assert len(tips) == len(set(tips))

    def test_general_tips(self):
        tips = general_safety_tips()
        assert len(tips) == 10
        tips.append('mutated')
        assert len(general_safety_tips()) == 10


# ── IDEMPOTENCE ──────────────────────────────────────────────

def _strip_volatile(check_dict):
    for alert in check_dict['alerts']:
        alert.pop('id')
        alert.pop('timestamp')
    return check_dict


def test_repeat_analysis_identical_except_ids_and_timestamps():
    messages = [
        _contact('my number is 555-123-4567'),
        _contact('add me on whatsapp, quick'),
        _contact('telegram works too'),
        _contact('where do you live?'),
    ]
    first  = _strip_volatile(to_dict(analyze_conversation_safety(messages)))
    second = _strip_volatile(to_dict(analyze_conversation_safety(messages)))
    assert first == second
