"""
safedate/llm/providers.py
Concrete text-generation clients. One class per wire format:

  ollama     : local Ollama server (/api/generate, JSON mode)
  openai     : OpenAI chat completions
  openrouter : OpenRouter (OpenAI-compatible)
  custom     : any OpenAI-compatible endpoint (config.endpoint required)
  anthropic  : Anthropic messages API
  gemini     : Google Generative Language generateContent

All HTTP goes through urllib.request. Every failure surfaces as
GenerationError so the safety analyzer has exactly one thing to catch.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

from safedate.config import PROVIDERS, AIConfig
from safedate.llm.base import GenerationError, GenerationResult, TextGenerationClient

logger = logging.getLogger(__name__)

OPENAI_URL      = 'https://api.openai.com/v1'
OPENROUTER_URL  = 'https://openrouter.ai/api/v1'
ANTHROPIC_URL   = 'https://api.anthropic.com/v1'
GEMINI_URL      = 'https://generativelanguage.googleapis.com/v1beta'
OLLAMA_HOST     = 'http://localhost:11434'

ANTHROPIC_VERSION = '2023-06-01'
MAX_TOKENS        = 1000


class HttpClient(TextGenerationClient):
    """Shared JSON-over-HTTP plumbing."""

    def __init__(self, config: AIConfig):
        self.config      = config
        self.model       = config.resolved_model
        self.timeout_sec = config.timeout_sec
        self.temperature = config.temperature

    def _post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        body = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(
            url,
            data    = body,
            headers = {'Content-Type': 'application/json', **headers},
            method  = 'POST',
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_sec) as resp:
                raw = resp.read().decode('utf-8')
        except urllib.error.HTTPError as e:
            detail = ''
            try:
                detail = e.read().decode('utf-8', errors='replace')[:300]
            except OSError:
                pass
            raise GenerationError(f"{type(self).__name__} API error: {e.code} - {detail}") from e
        except (urllib.error.URLError, OSError) as e:
            raise GenerationError(f"{type(self).__name__} request failed: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise GenerationError(f"{type(self).__name__} returned non-JSON body") from e
        if not isinstance(data, dict):
            raise GenerationError(f"{type(self).__name__} returned unexpected payload")
        return data


# ── OPENAI-COMPATIBLE ────────────────────────────────────────

class OpenAICompatibleClient(HttpClient):
    """openai, openrouter and custom endpoints share the chat-completions shape."""

    def __init__(self, config: AIConfig, base_url: str, extra_headers: Optional[Dict[str, str]] = None):
        super().__init__(config)
        self.base_url      = base_url.rstrip('/')
        self.extra_headers = extra_headers or {}

    def generate_content(self, prompt: str) -> GenerationResult:
        data = self._post_json(
            f"{self.base_url}/chat/completions",
            payload = {
                'model':       self.model,
                'messages':    [{'role': 'user', 'content': prompt}],
                'temperature': self.temperature,
                'max_tokens':  MAX_TOKENS,
            },
            headers = {'Authorization': f"Bearer {self.config.api_key}", **self.extra_headers},
        )
        try:
            text = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Invalid response from {self.base_url}") from e

        usage = data.get('usage') or {}
        return GenerationResult(
            text  = text or '',
            usage = {
                'input_tokens':  usage.get('prompt_tokens'),
                'output_tokens': usage.get('completion_tokens'),
            },
        )


# ── ANTHROPIC ────────────────────────────────────────────────

class AnthropicClient(HttpClient):

    def generate_content(self, prompt: str) -> GenerationResult:
        base = (self.config.endpoint or ANTHROPIC_URL).rstrip('/')
        data = self._post_json(
            f"{base}/messages",
            payload = {
                'model':      self.model,
                'max_tokens': MAX_TOKENS,
                'messages':   [{'role': 'user', 'content': prompt}],
            },
            headers = {
                'x-api-key':         self.config.api_key,
                'anthropic-version': ANTHROPIC_VERSION,
            },
        )
        try:
            text = ''.join(
                block.get('text', '') for block in data['content']
                if block.get('type', 'text') == 'text'
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise GenerationError('Invalid response from Anthropic API') from e

        usage = data.get('usage') or {}
        return GenerationResult(
            text  = text,
            usage = {
                'input_tokens':  usage.get('input_tokens'),
                'output_tokens': usage.get('output_tokens'),
            },
        )


# ── GEMINI ───────────────────────────────────────────────────

class GeminiClient(HttpClient):

    def generate_content(self, prompt: str) -> GenerationResult:
        base  = (self.config.endpoint or GEMINI_URL).rstrip('/')
        model = urllib.parse.quote(self.model, safe='')
        key   = urllib.parse.quote(self.config.api_key, safe='')
        data = self._post_json(
            f"{base}/models/{model}:generateContent?key={key}",
            payload = {
                'contents':         [{'parts': [{'text': prompt}]}],
                'generationConfig': {'temperature': self.temperature, 'maxOutputTokens': MAX_TOKENS},
            },
            headers = {},
        )
        try:
            parts = data['candidates'][0]['content']['parts']
            text  = ''.join(p.get('text', '') for p in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise GenerationError('Invalid response from Gemini API') from e

        meta = data.get('usageMetadata') or {}
        return GenerationResult(
            text  = text,
            usage = {
                'input_tokens':  meta.get('promptTokenCount'),
                'output_tokens': meta.get('candidatesTokenCount'),
            },
        )


# ── OLLAMA ───────────────────────────────────────────────────

class OllamaClient(HttpClient):
    """
    Local Ollama backend. Supports any model pulled via `ollama pull <model>`.
    No API key; the only provider with a real availability ping.
    """

    def __init__(self, config: AIConfig):
        super().__init__(config)
        self.host = (config.endpoint or OLLAMA_HOST).rstrip('/')

    def is_available(self) -> bool:
        """Ping Ollama and confirm the configured model is pulled."""
        models = self.list_available_models()
        available = any(
            m == self.model or m.startswith(self.model.split(':')[0])
            for m in models
        )
        if not available:
            logger.warning(
                f"Model '{self.model}' not found in Ollama at {self.host}. "
                f"Available: {models}. Run: ollama pull {self.model}"
            )
        return available

    def list_available_models(self) -> List[str]:
        """Return locally available Ollama model names ([] if unreachable)."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags", method='GET')
            with urllib.request.urlopen(req, timeout=5) as resp:
                data = json.loads(resp.read().decode())
            return [m['name'] for m in data.get('models', [])]
        except (urllib.error.URLError, OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Ollama not reachable at {self.host}: {e}")
            return []

    def generate_content(self, prompt: str) -> GenerationResult:
        data = self._post_json(
            f"{self.host}/api/generate",
            payload = {
                'model':   self.model,
                'prompt':  prompt,
                'stream':  False,
                'options': {'temperature': self.temperature, 'num_predict': MAX_TOKENS},
                'format':  'json',   # Ollama JSON mode
            },
            headers = {},
        )
        if 'response' not in data:
            raise GenerationError('Invalid response from Ollama')
        return GenerationResult(
            text  = str(data.get('response') or ''),
            usage = {
                'input_tokens':  data.get('prompt_eval_count'),
                'output_tokens': data.get('eval_count'),
            },
        )


# ── FACTORY ──────────────────────────────────────────────────

def build_client(config: AIConfig) -> TextGenerationClient:
    """
    Build the client for config.provider.
    Raises ValueError for unknown providers or a custom provider with no endpoint.
    """
    provider = (config.provider or '').lower()

    if provider == 'ollama':
        return OllamaClient(config)
    if provider == 'openai':
        return OpenAICompatibleClient(config, config.endpoint or OPENAI_URL)
    if provider == 'openrouter':
        return OpenAICompatibleClient(
            config,
            config.endpoint or OPENROUTER_URL,
            extra_headers = {'X-Title': 'safedate'},
        )
    if provider == 'custom':
        if not config.endpoint:
            raise ValueError('Custom endpoint not configured')
        return OpenAICompatibleClient(config, config.endpoint)
    if provider == 'anthropic':
        return AnthropicClient(config)
    if provider == 'gemini':
        return GeminiClient(config)

    raise ValueError(f"Unsupported provider: {config.provider!r} (expected one of {', '.join(PROVIDERS)})")
