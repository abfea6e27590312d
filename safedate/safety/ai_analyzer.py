"""
safedate/safety/ai_analyzer.py
Two-phase safety orchestrator. Runs the pattern aggregator, then asks
an LLM for a second opinion and folds it in with max().
Falls back to a keyword heuristic if the call fails or the reply
cannot be parsed. The AI step never raises to the caller.

NOTE ON COMBINATION:
  combined_risk = max(pattern_risk, ai_risk). A low AI score never
  lowers a high pattern score.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ValidationError, field_validator

from safedate.aggregators.risk_aggregator import analyze_conversation_safety, general_safety_tips
from safedate.detectors.message_scanner import quick_safety_check
from safedate.llm.base import TextGenerationClient
from safedate.models.record import (
    AiConversationResult,
    AiSafetyAnalysis,
    Message,
    SafetyCheck,
    coerce_messages,
)

logger = logging.getLogger(__name__)

# ── FALLBACK KEYWORDS ────────────────────────────────────────

RISK_KEYWORDS = (
    'money', 'send', 'pay', 'cash', 'loan', 'emergency', 'help',
    'whatsapp', 'telegram', 'call me', 'text me', 'phone',
    'love you', 'soulmate', 'perfect', 'destiny', 'fate',
    'click', 'link', 'website', 'download', 'verify',
    'urgent', 'hurry', 'quick', 'now', 'immediate',
)

SAFE_KEYWORDS = (
    'public', 'coffee', 'restaurant', 'meet', 'date',
    'weekend', 'hobby', 'interest', 'work', 'study',
)

FALLBACK_RECOMMENDATIONS = (
    'Take time to build trust gradually',
    'Meet in public places for safety',
    'Verify identity before sharing personal information',
)

# ── RISK TIERS FOR FINAL RECOMMENDATIONS ─────────────────────

HIGH_RISK_THRESHOLD     = 0.7
MODERATE_RISK_THRESHOLD = 0.4

HIGH_RISK_RECOMMENDATIONS = (
    "🚨 HIGH RISK: Strongly consider ending this conversation",
    "📋 Report this user to the dating app's safety team",
    "🔒 Review your privacy settings and shared information",
)
MODERATE_RISK_RECOMMENDATIONS = (
    "⚠️ MODERATE RISK: Proceed with extra caution",
    "👥 Share details with a trusted friend before meeting",
    "📍 Only meet in busy public places with good lighting",
)
LOW_RISK_RECOMMENDATIONS = (
    "✅ Lower risk conversation, but stay vigilant",
    "📋 Continue following standard dating safety practices",
)

SEVERITY_TIPS = {
    'critical': [
        "🚨 CRITICAL: Consider ending this conversation immediately",
        "📞 Contact app support or local authorities if threatened",
        "🔒 Do not share any additional personal information",
    ],
    'high': [
        "⚠️ HIGH RISK: Proceed with extreme caution",
        "👥 Tell someone about this conversation",
        "🚫 Do not meet this person in private",
    ],
    'medium': [
        "⚠️ Be cautious with this conversation",
        "🏛️ Only meet in public if you decide to meet",
        "📱 Keep conversations on the dating app",
    ],
    'low': [
        "💡 Minor concern noted - stay aware",
        "✅ Continue with normal safety practices",
    ],
}

RED_FLAGS = (
    "Asks for money, loans, or financial help",
    "Wants to move conversation off the dating app quickly",
    "Shares suspicious links or asks you to click them",
    "Asks for personal information like address or workplace",
    "Expresses strong feelings very quickly (love bombing)",
    "Creates false urgency or pressure",
    "Requests additional photos or 'verification' pictures",
    "Profile photos look too professional or model-like",
    "Story doesn't add up or changes over time",
    "Avoids phone calls or video chats",
)

SCAM_WARNINGS = (
    "Romance scammers often claim to be military, doctors, or traveling",
    "They may have emergencies requiring immediate financial help",
    "Photos are often stolen from other profiles or stock photos",
    "Grammar and language may not match their claimed background",
    "They avoid meeting in person or video calls",
    "Stories about being widowed, overseas, or in crisis are common",
    "They may send gifts early to build trust before asking for money",
    "Multiple spelling or grammar errors despite claiming education",
)


# ── RESPONSE SCHEMA ──────────────────────────────────────────

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _number_or(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value != value:      # NaN
        return default
    return float(value)


class AiSafetyPayload(BaseModel):
    """
    Strict view of the JSON object the model is asked to emit.
    Invalid or missing fields degrade to defaults instead of failing.
    """
    overallRisk:     float     = 0.0
    concerns:        List[str] = []
    recommendations: List[str] = []
    redFlags:        List[str] = []
    positiveSignals: List[str] = []
    trustScore:      float     = 50.0

    @field_validator('overallRisk', mode='before')
    @classmethod
    def _risk(cls, v: Any) -> float:
        return _clamp(_number_or(v, 0.0), 0.0, 1.0)

    @field_validator('trustScore', mode='before')
    @classmethod
    def _trust(cls, v: Any) -> float:
        return _clamp(_number_or(v, 50.0), 0.0, 100.0)

    @field_validator('concerns', 'recommendations', 'redFlags', 'positiveSignals', mode='before')
    @classmethod
    def _strings(cls, v: Any) -> List[str]:
        if not isinstance(v, list):
            return []
        return [str(item) for item in v if isinstance(item, (str, int, float)) and not isinstance(item, bool)]

    def to_analysis(self) -> AiSafetyAnalysis:
        return AiSafetyAnalysis(
            overall_risk     = self.overallRisk,
            concerns         = list(self.concerns),
            recommendations  = list(self.recommendations),
            red_flags        = list(self.redFlags),
            positive_signals = list(self.positiveSignals),
            trust_score      = self.trustScore,
            source           = 'ai',
        )


_FENCE_JSON_RE = re.compile(r'```json\n?')
_FENCE_RE      = re.compile(r'```\n?')
_LEAD_RE       = re.compile(r'^[^{]*')
_TRAIL_RE      = re.compile(r'[^}]*$')


def clean_model_output(text: str) -> str:
    """Strip markdown fences and anything before the first '{' / after the last '}'."""
    clean = _FENCE_JSON_RE.sub('', text or '')
    clean = _FENCE_RE.sub('', clean)
    clean = _LEAD_RE.sub('', clean, count=1)
    clean = _TRAIL_RE.sub('', clean, count=1)
    return clean.strip()


def parse_ai_response(text: str) -> Optional[AiSafetyAnalysis]:
    """
    Parse the model's reply. Returns None when it is not a JSON object;
    the caller falls back to keyword heuristics.
    """
    clean = clean_model_output(text)
    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        logger.warning(f"Could not parse AI safety analysis: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning("AI safety analysis is not a JSON object")
        return None
    try:
        return AiSafetyPayload.model_validate(data).to_analysis()
    except ValidationError as e:
        logger.warning(f"AI safety analysis failed validation: {e.error_count()} error(s)")
        return None


def fallback_analysis(conversation_text: str) -> AiSafetyAnalysis:
    """
    Keyword-count heuristic used whenever the AI step is degraded.
    Counts how many keywords of each list appear in the transcript.
    """
    lowered = (conversation_text or '').lower()
    risk_matches = sum(1 for kw in RISK_KEYWORDS if kw in lowered)
    safe_matches = sum(1 for kw in SAFE_KEYWORDS if kw in lowered)

    overall_risk = min(risk_matches / 10, 1.0)
    trust_score  = _clamp(100 - risk_matches * 10 + safe_matches * 5, 0, 100)

    return AiSafetyAnalysis(
        overall_risk     = overall_risk,
        concerns         = ['Multiple risk indicators detected'] if risk_matches > 2 else [],
        recommendations  = list(FALLBACK_RECOMMENDATIONS),
        red_flags        = ['High number of risk keywords detected'] if risk_matches > 3 else [],
        positive_signals = ['Normal conversation topics present'] if safe_matches > 2 else [],
        trust_score      = float(trust_score),
        source           = 'fallback',
    )


def format_transcript(messages: List[Message]) -> str:
    return '\n'.join(
        f"{'User' if m.sender == 'user' else 'Match'}: {m.text}"
        for m in messages
    )


def build_safety_prompt(conversation_text: str) -> str:
    return (
        "Analyze this dating app conversation for privacy and safety concerns. Look for:\n\n"
        "1. Scam patterns (money requests, suspicious links, fake profiles)\n"
        "2. Privacy risks (sharing personal info too early)\n"
        "3. Safety concerns (pressure tactics, inappropriate requests)\n"
        "4. Manipulation techniques (love bombing, urgency, isolation)\n"
        "5. Platform migration attempts (moving off dating app)\n\n"
        f"Conversation:\n{conversation_text}\n\n"
        "Consider:\n"
        "- How quickly personal information is being requested\n"
        "- Any requests for money, links, or platform changes\n"
        "- Language patterns that suggest deception or manipulation\n"
        "- Timeline of the conversation and escalation speed\n"
        "- Overall authenticity of the conversation\n\n"
        "Respond ONLY with a valid JSON object. No markdown, no explanation.\n"
        "{\n"
        '  "overallRisk": <number 0-1>,\n'
        '  "concerns": ["specific concern 1", "specific concern 2"],\n'
        '  "recommendations": ["recommendation 1", "recommendation 2"],\n'
        '  "redFlags": ["red flag 1", "red flag 2"],\n'
        '  "positiveSignals": ["positive aspect 1", "positive aspect 2"],\n'
        '  "trustScore": <number 0-100>\n'
        "}"
    )


# ── ORCHESTRATOR ─────────────────────────────────────────────

class AiSafetyAnalyzer:
    """
    Pattern analysis + optional LLM second opinion.
    The client is injected; with no client the analyzer is pattern-only.
    """

    def __init__(self, client: Optional[TextGenerationClient] = None):
        self.client = client

    def analyze_conversation_with_ai(
        self,
        messages: Optional[Iterable[Any]],
        skip_ai:  bool          = False,
        now_ms:   Optional[int] = None,
    ) -> AiConversationResult:
        history = coerce_messages(messages)
        pattern_analysis = analyze_conversation_safety(history, now_ms=now_ms)

        ai_analysis: Optional[AiSafetyAnalysis] = None
        combined_risk = pattern_analysis.risk_level

        if self.client is not None and not skip_ai and history:
            ai_analysis   = self._run_ai_analysis(history)
            combined_risk = max(pattern_analysis.risk_level, ai_analysis.overall_risk)
        elif self.client is None:
            logger.debug("No AI client configured, pattern analysis only.")

        return AiConversationResult(
            pattern_analysis      = pattern_analysis,
            ai_analysis           = ai_analysis,
            combined_risk         = combined_risk,
            final_recommendations = self.final_recommendations(pattern_analysis, ai_analysis, combined_risk),
        )

    def _run_ai_analysis(self, history: List[Message]) -> AiSafetyAnalysis:
        conversation_text = format_transcript(history)
        prompt = build_safety_prompt(conversation_text)

        try:
            result = self.client.generate_content(prompt)
        except Exception as e:
            logger.warning(f"AI safety analysis failed, using keyword fallback: {e}")
            return fallback_analysis(conversation_text)

        analysis = parse_ai_response(getattr(result, 'text', '') or '')
        if analysis is None:
            logger.warning("AI reply unusable, using keyword fallback.")
            return fallback_analysis(conversation_text)

        logger.info(
            f"AI safety analysis: risk={analysis.overall_risk:.2f} "
            f"trust={analysis.trust_score:.0f} model={getattr(self.client, 'model', '') or 'unknown'}"
        )
        return analysis

    @staticmethod
    def final_recommendations(
        pattern_analysis: SafetyCheck,
        ai_analysis:      Optional[AiSafetyAnalysis],
        combined_risk:    float,
    ) -> List[str]:
        recommendations: List[str] = list(pattern_analysis.safe_tips)
        if ai_analysis is not None:
            recommendations.extend(ai_analysis.recommendations)

        if combined_risk > HIGH_RISK_THRESHOLD:
            recommendations.extend(HIGH_RISK_RECOMMENDATIONS)
        elif combined_risk > MODERATE_RISK_THRESHOLD:
            recommendations.extend(MODERATE_RISK_RECOMMENDATIONS)
        else:
            recommendations.extend(LOW_RISK_RECOMMENDATIONS)

        return list(dict.fromkeys(recommendations))

    # ── REAL-TIME CHECK ───────────────────────────────────────
    @staticmethod
    def quick_message_check(message: str) -> Dict[str, Any]:
        """
        Check one message as it arrives.
        Returns {has_risk, risk_level, alerts, tips}.
        """
        check = quick_safety_check(message)
        if not check.has_risk:
            return {
                'has_risk':   False,
                'risk_level': 'low',
                'alerts':     [],
                'tips':       ['Conversation appears normal - continue with standard safety practices'],
            }

        severity = check.severity or 'low'
        return {
            'has_risk':   True,
            'risk_level': severity,
            'alerts':     [f"{(check.category or '').upper()}: {check.recommendation}"],
            'tips':       list(SEVERITY_TIPS.get(severity, SEVERITY_TIPS['low'])),
        }

    # ── EDUCATION ─────────────────────────────────────────────
    @staticmethod
    def safety_education() -> Dict[str, List[str]]:
        return {
            'general_tips':  general_safety_tips(),
            'red_flags':     list(RED_FLAGS),
            'scam_warnings': list(SCAM_WARNINGS),
        }
