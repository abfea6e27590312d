"""
safedate/cli.py
Command-line interface for safedate.

USAGE:
  safedate safety conversation.json
  safedate safety conversation.json --ai --config ./safedate_config.json
  safedate interest transcript.txt
  safedate catfish transcript.txt
  safedate quality transcript.txt
  safedate check "send me your number on whatsapp"
  safedate tips

INPUT FORMATS:
  safety    JSON list of {text, timestamp, sender} objects, or an object
            with a "messages" list. sender is "user" or "contact"/"match".
  interest, catfish, quality
            Plain text, one "Name: message" line per turn.

Add --json to any command for machine-readable output.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from safedate.aggregators.risk_aggregator import analyze_conversation_safety
from safedate.config import config_from_env, load_config
from safedate.interest.interest_detector import analyze_interest
from safedate.interest.quality_checker import analyze_conversation_quality
from safedate.llm.providers import build_client
from safedate.models.record import to_dict
from safedate.safety.ai_analyzer import AiSafetyAnalyzer
from safedate.safety.catfish_detector import analyze_catfish

logger = logging.getLogger(__name__)

GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'

SEVERITY_COLORS = {'critical': RED, 'high': RED, 'medium': YELLOW, 'low': CYAN}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'safedate',
        description = 'safedate: dating conversation safety and interest analysis',
        formatter_class = argparse.RawDescriptionHelpFormatter,
        epilog = """
NOTE:
  Scores are heuristic. A low risk score is not a guarantee of safety.
  Pattern analysis is fully offline; --ai sends the transcript to the
  configured provider.
        """
    )
    parser.add_argument(
        '--json',
        action  = 'store_true',
        help    = 'Print results as JSON',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    safety = sub.add_parser('safety', help='Analyze a conversation for safety risks')
    safety.add_argument('file', type=Path, help='JSON file with the conversation messages')
    safety.add_argument(
        '--ai',
        action  = 'store_true',
        help    = 'Add an AI second opinion (uses the configured provider)',
    )
    safety.add_argument(
        '--config', '-c',
        type    = Path,
        default = None,
        help    = 'Config file path (default: ./safedate_config.json)',
    )

    interest = sub.add_parser('interest', help='Score interest from a plain-text transcript')
    interest.add_argument('file', type=Path, help='Transcript file, one "Name: message" per line')

    catfish = sub.add_parser('catfish', help='Estimate whether the other person is who they claim to be')
    catfish.add_argument('file', type=Path, help='Transcript file, one "Name: message" per line')

    quality = sub.add_parser('quality', help='Coach your side of a transcript')
    quality.add_argument('file', type=Path, help='Transcript file, one "Name: message" per line')

    check = sub.add_parser('check', help='Quick safety check of a single message')
    check.add_argument('text', help='Message text')

    sub.add_parser('tips', help='Print general safety tips, red flags and scam warnings')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level   = log_level,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
        stream  = sys.stderr,
    )

    handlers = {
        'safety':   _cmd_safety,
        'interest': _cmd_interest,
        'catfish':  _cmd_catfish,
        'quality':  _cmd_quality,
        'check':    _cmd_check,
        'tips':     _cmd_tips,
    }
    return handlers[args.command](args)


# ── COMMANDS ─────────────────────────────────────────────────

def _cmd_safety(args) -> int:
    messages = _load_messages(args.file)
    if messages is None:
        return 1

    if not args.ai:
        check = analyze_conversation_safety(messages)
        if args.json:
            _print(json.dumps(to_dict(check), indent=2, ensure_ascii=False))
            return 0
        _print_safety_check(check)
        return 0

    config = config_from_env(load_config(args.config))
    try:
        client = build_client(config)
    except ValueError as e:
        _print(f"{RED}Error: {e}{RESET}")
        return 1

    if not client.is_available():
        _print(
            f"{YELLOW}⚠ {config.provider} unavailable, running pattern analysis only.{RESET}",
            err=True,
        )
        client = None

    result = AiSafetyAnalyzer(client).analyze_conversation_with_ai(messages)
    if args.json:
        _print(json.dumps(to_dict(result), indent=2, ensure_ascii=False))
        return 0

    _print_safety_check(result.pattern_analysis)
    if result.ai_analysis is not None:
        ai = result.ai_analysis
        source = 'AI' if ai.source == 'ai' else 'keyword fallback'
        _print(f"\n{BOLD}Second opinion ({source}){RESET}")
        _print(f"  Risk        : {_pct(ai.overall_risk)}")
        _print(f"  Trust score : {ai.trust_score:.0f}/100")
        for label, items in (
            ('Concerns', ai.concerns),
            ('Red flags', ai.red_flags),
            ('Positive signals', ai.positive_signals),
        ):
            if items:
                _print(f"  {label}:")
                for item in items:
                    _print(f"    • {item}")

    _print(f"\n{BOLD}Combined risk: {_pct(result.combined_risk)}{RESET}")
    _print(f"\n{BOLD}Recommendations{RESET}")
    for rec in result.final_recommendations:
        _print(f"  {rec}")
    return 0


def _cmd_interest(args) -> int:
    text = _load_transcript(args.file)
    if text is None:
        return 1

    result = analyze_interest(text)
    if args.json:
        _print(json.dumps(to_dict(result), indent=2, ensure_ascii=False))
        return 0

    _print(f"\n{BOLD}{result.emoji} {result.level}: {result.overall_score}/100{RESET}")
    b = result.breakdown
    _print(f"  Response time  : {b.response_time.score:>3}  {b.response_time.details}")
    _print(f"  Message length : {b.message_length.score:>3}  {b.message_length.details}")
    _print(f"  Engagement     : {b.engagement.score:>3}  {b.engagement.details}")
    _print(f"  Sentiment      : {b.sentiment.score:>3}  {b.sentiment.details}")
    _print(f"  Enthusiasm     : {b.enthusiasm.score:>3}  {b.enthusiasm.details}")
    _print(f"\n{BOLD}Recommendations{RESET}")
    for rec in result.recommendations:
        _print(f"  {rec}")
    _print(f"\n{BOLD}Insights{RESET}")
    for insight in result.insights:
        _print(f"  {insight}")
    return 0


def _cmd_catfish(args) -> int:
    text = _load_transcript(args.file)
    if text is None:
        return 1

    result = analyze_catfish(text)
    if args.json:
        _print(json.dumps(to_dict(result), indent=2, ensure_ascii=False))
        return 0

    color = GREEN if result.realness_score >= 65 else YELLOW if result.realness_score >= 45 else RED
    _print(f"\n{BOLD}Realness: {color}{result.realness_score}/100{RESET}{BOLD}  "
           f"catfish risk {result.risk_level}{RESET}")
    b = result.breakdown
    _print(f"  Response patterns    : {b.response_patterns.score:>3}  {b.response_patterns.details}")
    _print(f"  Personal details     : {b.personal_details.score:>3}  {b.personal_details.details}")
    _print(f"  Escalation speed     : {b.escalation_speed.score:>3}  {b.escalation_speed.details}")
    _print(f"  Language consistency : {b.language_consistency.score:>3}  {b.language_consistency.details}")
    _print(f"  Profile alignment    : {b.profile_alignment.score:>3}  {b.profile_alignment.details}")
    for title, items, mark in (
        ('Red flags', result.red_flags, f"{RED}⚠{RESET}"),
        ('Green flags', result.green_flags, f"{GREEN}✓{RESET}"),
    ):
        if items:
            _print(f"\n{BOLD}{title}{RESET}")
            for item in items:
                _print(f"  {mark} {item}")
    _print(f"\n{BOLD}Recommendations{RESET}")
    for rec in result.recommendations:
        _print(f"  • {rec}")
    return 0


def _cmd_quality(args) -> int:
    text = _load_transcript(args.file)
    if text is None:
        return 1

    result = analyze_conversation_quality(text)
    if args.json:
        _print(json.dumps(to_dict(result), indent=2, ensure_ascii=False))
        return 0

    _print(f"\n{BOLD}{result.engagement_level}: {result.overall_score}/100{RESET}"
           f"  ({result.user_message_count} of your messages)")
    b = result.breakdown
    _print(f"  Question asking   : {b.question_asking.score:>3}  {b.question_asking.details}")
    _print(f"  Message length    : {b.message_length.score:>3}  {b.message_length.details}")
    _print(f"  Open-endedness    : {b.open_endedness.score:>3}  {b.open_endedness.details}")
    _print(f"  Response quality  : {b.response_quality.score:>3}  {b.response_quality.details}")
    _print(f"  Conversation flow : {b.conversation_flow.score:>3}  {b.conversation_flow.details}")
    for title, items in (
        ('Strengths', result.strengths),
        ('To improve', result.improvements),
        ('Tips', result.specific_tips),
    ):
        if items:
            _print(f"\n{BOLD}{title}{RESET}")
            for item in items:
                _print(f"  • {item}")
    if result.example_replies:
        _print(f"\n{BOLD}Try instead{RESET}")
        for example in result.example_replies:
            _print(f"  {YELLOW}{example.original}{RESET}")
            _print(f"    → {example.improved}")
    return 0


def _cmd_check(args) -> int:
    result = AiSafetyAnalyzer.quick_message_check(args.text)
    if args.json:
        _print(json.dumps(result, indent=2, ensure_ascii=False))
        return 0

    if result['has_risk']:
        color = SEVERITY_COLORS.get(result['risk_level'], YELLOW)
        _print(f"{color}{BOLD}⚠ {result['risk_level'].upper()} RISK{RESET}")
        for alert in result['alerts']:
            _print(f"  {alert}")
    else:
        _print(f"{GREEN}✓ No risk pattern found{RESET}")
    for tip in result['tips']:
        _print(f"  {tip}")
    return 0


def _cmd_tips(args) -> int:
    education = AiSafetyAnalyzer.safety_education()
    if args.json:
        _print(json.dumps(education, indent=2, ensure_ascii=False))
        return 0

    for title, key in (
        ('Safety tips', 'general_tips'),
        ('Red flags', 'red_flags'),
        ('Scam warnings', 'scam_warnings'),
    ):
        _print(f"\n{BOLD}{title}{RESET}")
        for item in education[key]:
            _print(f"  • {item}")
    return 0


# ── INPUT ────────────────────────────────────────────────────

def _load_transcript(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        _print(f"{RED}Error: cannot read {path}: {e}{RESET}")
        return None


def _load_messages(path: Path) -> Optional[List[Any]]:
    """Read a conversation file. Returns None (after reporting) on failure."""
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError) as e:
        _print(f"{RED}Error: cannot read {path}: {e}{RESET}")
        return None
    except json.JSONDecodeError as e:
        _print(f"{RED}Error: {path} is not valid JSON: {e}{RESET}")
        return None

    if isinstance(data, dict):
        data = data.get('messages')
    if not isinstance(data, list):
        _print(f"{RED}Error: {path} must hold a list of messages{RESET}")
        return None
    return data


# ── PRINT HELPERS ────────────────────────────────────────────

def _print_safety_check(check) -> None:
    status = f"{GREEN}✓ SAFE{RESET}" if check.is_safe else f"{RED}⚠ UNSAFE{RESET}"
    _print(f"\n{BOLD}Safety check:{RESET} {status}  risk {_pct(check.risk_level)}")

    if check.alerts:
        _print(f"\n{BOLD}Alerts ({len(check.alerts)}){RESET}")
        for alert in check.alerts:
            color = SEVERITY_COLORS.get(alert.severity, YELLOW)
            _print(f"  {color}[{alert.severity.upper():<8}]{RESET} {alert.title} ({alert.category})")
            _print(f"             {alert.recommendation}")

    _print(f"\n{BOLD}Tips{RESET}")
    for tip in check.safe_tips:
        _print(f"  {tip}")


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


def _print(msg, err: bool = False):
    print(msg, file=sys.stderr if err else sys.stdout)


if __name__ == '__main__':
    sys.exit(main())
