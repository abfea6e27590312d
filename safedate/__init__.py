"""
safedate: dating conversation safety and interest scoring.

Pattern analysis is offline and deterministic. The AI second opinion is
optional and always degrades to a keyword fallback.
"""

from safedate.aggregators.risk_aggregator import analyze_conversation_safety
from safedate.interest.interest_detector import analyze_interest
from safedate.interest.quality_checker import analyze_conversation_quality
from safedate.safety.ai_analyzer import AiSafetyAnalyzer
from safedate.safety.catfish_detector import analyze_catfish

__all__ = [
    "AiSafetyAnalyzer",
    "analyze_catfish",
    "analyze_conversation_quality",
    "analyze_conversation_safety",
    "analyze_interest",
]
