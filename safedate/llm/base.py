"""
safedate/llm/base.py
Abstract base class for all text-generation clients.
To add a new backend: subclass TextGenerationClient and implement
generate_content().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional


class GenerationError(RuntimeError):
    """Raised by clients on transport errors, non-2xx or malformed replies."""


@dataclass
class GenerationResult:
    text:  str
    usage: Dict[str, Optional[int]] = field(default_factory=dict)


class TextGenerationClient(ABC):
    """
    All LLM backends implement this interface.
    The safety analyzer calls generate_content() and gets back a
    GenerationResult. The caller never knows which backend is running.
    """

    model: str = ''

    @abstractmethod
    def generate_content(self, prompt: str) -> GenerationResult:
        """
        Send one prompt, return the model's text.
        Raises GenerationError on any failure; the analyzer catches it
        and falls back to keyword heuristics.
        """
        ...

    def is_available(self) -> bool:
        """
        Cheap readiness check, called before analysis so callers can
        skip the AI step up front. Hosted providers override nothing and
        are assumed reachable.
        """
        return True
