"""
safedate/api.py
─────────────────────────────────────────────────────────────────────────────
safedate local HTTP API (FastAPI)

USAGE:
    python -m safedate.api                   # default: port 8765
    python -m safedate.api --port 9000 --config ./safedate_config.json
    uvicorn safedate.api:app --port 8765

ENDPOINTS:
  POST /safety     : pattern-only safety analysis of a message list
  POST /safety/ai  : pattern analysis + AI second opinion (keyword fallback)
  POST /interest   : interest score for a plain-text transcript
  POST /catfish    : realness score for the other person in a transcript
  POST /quality    : coaching score for your own messages in a transcript
  POST /check      : quick check of a single message
  GET  /education  : general tips, red flags, scam warnings
  GET  /health     : server status and configured provider

CORS: localhost-only (127.0.0.1 / ::1). Not exposed to network by default.

PRIVACY NOTE:
  Only /safety/ai makes an outbound call, to the configured provider.
  Message text is never logged.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from safedate.aggregators.risk_aggregator import analyze_conversation_safety
from safedate.config import AIConfig, config_from_env, load_config
from safedate.interest.interest_detector import analyze_interest
from safedate.interest.quality_checker import analyze_conversation_quality
from safedate.llm.base import TextGenerationClient
from safedate.llm.providers import build_client
from safedate.models.record import to_dict
from safedate.safety.ai_analyzer import AiSafetyAnalyzer
from safedate.safety.catfish_detector import analyze_catfish

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ── REQUEST MODELS ──────────────────────────────────────────────────────────
# Messages stay loosely typed: malformed entries are coerced to defaults
# by the analyzers instead of being rejected with a 422.

class SafetyRequest(BaseModel):
    messages: List[Any] = []


class AiSafetyRequest(BaseModel):
    messages: List[Any] = []
    skip_ai:  bool      = False


class TranscriptRequest(BaseModel):
    text: str = ""


class CheckRequest(BaseModel):
    text: str = ""


def _build_app(
    config: Optional[AIConfig]             = None,
    client: Optional[TextGenerationClient] = None,
) -> FastAPI:
    """
    Build and return the FastAPI application instance.
    A prebuilt client takes precedence over config; otherwise a client
    is built from the server config on each AI call. Callers cannot
    change the provider, endpoint or key.
    """
    base_config = config or AIConfig()

    _app = FastAPI(
        title       = "safedate API",
        description = "Dating conversation safety and interest analysis, local API",
        version     = API_VERSION,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:8765",
            "http://127.0.0.1",
            "http://127.0.0.1:8765",
        ],
        allow_methods     = ["GET", "POST", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    def _client_for() -> TextGenerationClient:
        if client is not None:
            return client
        return build_client(base_config)

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.post("/safety", summary="Pattern-only safety analysis")
    def safety(req: SafetyRequest):
        return to_dict(analyze_conversation_safety(req.messages))

    @_app.post("/safety/ai", summary="Safety analysis with AI second opinion")
    def safety_ai(req: AiSafetyRequest):
        try:
            ai_client = None if req.skip_ai else _client_for()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

        try:
            result = AiSafetyAnalyzer(ai_client).analyze_conversation_with_ai(
                req.messages,
                skip_ai = req.skip_ai,
            )
        except Exception as exc:
            logger.exception("AI safety analysis failed")
            raise HTTPException(status_code=500, detail=f"Analysis failed: {exc}")
        return to_dict(result)

    @_app.post("/interest", summary="Interest score for a transcript")
    def interest(req: TranscriptRequest):
        return to_dict(analyze_interest(req.text))

    @_app.post("/catfish", summary="Is the other person who they claim to be?")
    def catfish(req: TranscriptRequest):
        return to_dict(analyze_catfish(req.text))

    @_app.post("/quality", summary="Coaching score for your side of a transcript")
    def quality(req: TranscriptRequest):
        return to_dict(analyze_conversation_quality(req.text))

    @_app.post("/check", summary="Quick single-message check")
    def check(req: CheckRequest):
        return AiSafetyAnalyzer.quick_message_check(req.text)

    @_app.get("/education", summary="Safety education content")
    def education():
        return AiSafetyAnalyzer.safety_education()

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":   "ok",
            "provider": base_config.provider,
            "model":    base_config.resolved_model,
            "version":  API_VERSION,
        }

    return _app


# Module-level app instance, used by `uvicorn safedate.api:app`
app = _build_app(config_from_env(load_config()))


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT: python -m safedate.api
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(
        prog        = "safedate.api",
        description = "safedate API server on localhost",
    )
    parser.add_argument("--port",    type=int, default=8765,
                        help="Port to bind (default: 8765)")
    parser.add_argument("--config",  type=str, default=None,
                        help="Path to safedate_config.json (default: ./safedate_config.json)")
    parser.add_argument("--host",    type=str, default="127.0.0.1",
                        help="Host to bind. Keep 127.0.0.1 on shared networks")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    server_config = config_from_env(load_config(Path(args.config) if args.config else None))
    server_app    = _build_app(config=server_config)

    print(f"""
+--------------------------------------------------+
|   safedate API Server v{API_VERSION}                     |
+--------------------------------------------------+
|  Local:    http://{args.host}:{args.port}
|  Provider: {server_config.provider} ({server_config.resolved_model})
|  Docs:     http://{args.host}:{args.port}/docs
|  Health:   http://{args.host}:{args.port}/health
+--------------------------------------------------+
""")

    uvicorn.run(
        server_app,
        host      = args.host,
        port      = args.port,
        log_level = "info",
    )
