"""
tests/test_cli.py
Command-line front end. Calls main(argv) directly and reads stdout.
"""

import json
from unittest.mock import MagicMock, patch

from safedate.cli import main
from safedate.llm.base import GenerationError, TextGenerationClient

RISKY = [{'text': 'can you send me money for an emergency', 'timestamp': 0, 'sender': 'match'}]


def _write_json(tmp_path, data, name='conversation.json'):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


class TestSafetyCommand:

    def test_json_output(self, tmp_path, capsys):
        path = _write_json(tmp_path, RISKY)
        assert main(['--json', 'safety', str(path)]) == 0
        body = json.loads(capsys.readouterr().out)
        assert body['is_safe'] is False
        assert body['alerts'][0]['severity'] == 'critical'

    def test_messages_object_accepted(self, tmp_path, capsys):
        path = _write_json(tmp_path, {'messages': []})
        assert main(['--json', 'safety', str(path)]) == 0
        assert json.loads(capsys.readouterr().out)['risk_level'] == 0

    def test_text_output(self, tmp_path, capsys):
        path = _write_json(tmp_path, RISKY)
        assert main(['safety', str(path)]) == 0
        out = capsys.readouterr().out
        assert 'UNSAFE' in out
        assert 'Financial' in out or 'CRITICAL' in out

    def test_bad_json_exits_1(self, tmp_path, capsys):
        path = tmp_path / 'broken.json'
        path.write_text('{oops', encoding='utf-8')
        assert main(['safety', str(path)]) == 1
        assert 'not valid JSON' in capsys.readouterr().out

    def test_missing_file_exits_1(self, tmp_path):
        assert main(['safety', str(tmp_path / 'nope.json')]) == 1

    def test_ai_unknown_provider_exits_1(self, tmp_path, capsys):
        conversation = _write_json(tmp_path, RISKY)
        config       = _write_json(tmp_path, {'provider': 'bogus'}, name='safedate_config.json')
        assert main(['safety', str(conversation), '--ai', '--config', str(config)]) == 1
        assert 'Unsupported provider' in capsys.readouterr().out

    def test_ai_failure_uses_fallback(self, tmp_path, capsys):
        conversation = _write_json(tmp_path, RISKY)
        config       = _write_json(tmp_path, {'provider': 'openai', 'apiKey': 'sk-test-123456'}, name='c.json')
        client = MagicMock(spec=TextGenerationClient)
        client.model = 'mock'
        client.is_available.return_value = True
        client.generate_content.side_effect = GenerationError('down')

        with patch('safedate.cli.build_client', return_value=client):
            assert main(['--json', 'safety', str(conversation), '--ai', '--config', str(config)]) == 0

        body = json.loads(capsys.readouterr().out)
        assert body['ai_analysis']['source'] == 'fallback'
        assert body['combined_risk'] >= body['pattern_analysis']['risk_level']

    def test_ai_unavailable_runs_pattern_only(self, tmp_path, capsys):
        conversation = _write_json(tmp_path, RISKY)
        config       = _write_json(tmp_path, {'provider': 'ollama'}, name='c.json')
        client = MagicMock(spec=TextGenerationClient)
        client.is_available.return_value = False

        with patch('safedate.cli.build_client', return_value=client):
            assert main(['--json', 'safety', str(conversation), '--ai', '--config', str(config)]) == 0

        captured = capsys.readouterr()
        assert json.loads(captured.out)['ai_analysis'] is None
        assert 'unavailable' in captured.err
        client.generate_content.assert_not_called()


def test_interest_command(tmp_path, capsys):
    path = tmp_path / 'chat.txt'
    path.write_text("You: hi\nThem: hey! how are you? 😊\nYou: good\nThem: what are you up to this weekend? 😍",
                    encoding='utf-8')
    assert main(['--json', 'interest', str(path)]) == 0
    body = json.loads(capsys.readouterr().out)
    assert body['breakdown']['engagement']['question_rate'] == 100


SCAM_CHAT = (
    "Me: hi, nice to meet you\n"
    "Them: hello beautiful\n"
    "Them: i need money for an emergency, can you help me"
)


def test_catfish_command_json(tmp_path, capsys):
    path = tmp_path / 'chat.txt'
    path.write_text(SCAM_CHAT, encoding='utf-8')
    assert main(['--json', 'catfish', str(path)]) == 0
    body = json.loads(capsys.readouterr().out)
    assert 'Mentions financial situations or emergencies' in body['red_flags']
    assert set(body['breakdown']) == {
        'response_patterns', 'personal_details', 'escalation_speed',
        'language_consistency', 'profile_alignment',
    }


def test_catfish_command_text(tmp_path, capsys):
    path = tmp_path / 'chat.txt'
    path.write_text(SCAM_CHAT, encoding='utf-8')
    assert main(['catfish', str(path)]) == 0
    out = capsys.readouterr().out
    assert 'Realness' in out
    assert 'Never send money' in out


def test_catfish_missing_file_exits_1(tmp_path, capsys):
    assert main(['catfish', str(tmp_path / 'nope.txt')]) == 1
    assert 'cannot read' in capsys.readouterr().out


def test_quality_command(tmp_path, capsys):
    path = tmp_path / 'chat.txt'
    path.write_text("Them: how was your day?\nMe: cool\nThem: nice\nMe: ok", encoding='utf-8')
    assert main(['--json', 'quality', str(path)]) == 0
    body = json.loads(capsys.readouterr().out)
    assert body['user_message_count'] == 2
    assert body['engagement_level']   == 'Very Poor'
    assert body['example_replies'][0]['original'] == 'cool'


def test_quality_command_text(tmp_path, capsys):
    path = tmp_path / 'chat.txt'
    path.write_text("Them: how was your day?\nMe: cool", encoding='utf-8')
    assert main(['quality', str(path)]) == 0
    out = capsys.readouterr().out
    assert 'Try instead' in out
    assert 'Conversation flow' in out


def test_check_command(capsys):
    assert main(['--json', 'check', 'send me money']) == 0
    body = json.loads(capsys.readouterr().out)
    assert body['has_risk'] is True
    assert body['risk_level'] == 'critical'


def test_check_command_clean(capsys):
    assert main(['check', 'What kind of music do you like?']) == 0
    assert 'No risk pattern found' in capsys.readouterr().out


def test_tips_command(capsys):
    assert main(['tips']) == 0
    out = capsys.readouterr().out
    assert 'Red flags' in out
    assert 'Scam warnings' in out
