"""
safedate/llm: text-generation clients for the AI second opinion.

Privacy: prompts are never logged. Only provider, model and token counts.
"""

from safedate.llm.base import GenerationError, GenerationResult, TextGenerationClient
from safedate.llm.providers import build_client

__all__ = [
    "GenerationError",
    "GenerationResult",
    "TextGenerationClient",
    "build_client",
]
