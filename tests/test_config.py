"""
tests/test_config.py
AIConfig loading, saving and environment overlay.
"""

import json

from safedate.config import CONFIG_FILENAME, AIConfig, config_from_env, load_config, save_config


def test_defaults():
    config = AIConfig()
    assert config.provider       == 'ollama'
    assert config.resolved_model == 'llama3:8b-instruct'
    assert config.endpoint       is None
    assert config.has_api_key    is False


def test_has_api_key_needs_more_than_ten_chars():
    assert AIConfig(api_key='x' * 10).has_api_key is False
    assert AIConfig(api_key='x' * 11).has_api_key is True


def test_from_dict_accepts_camel_case_and_ignores_unknown_keys():
    config = AIConfig.from_dict({
        'provider':   ' OpenAI ',
        'apiKey':     'sk-abc',
        'timeoutSec': 5,
        'theme':      'dark',
    })
    assert config.provider    == 'openai'
    assert config.api_key     == 'sk-abc'
    assert config.timeout_sec == 5


def test_load_missing_file_returns_defaults(tmp_path):
    assert load_config(tmp_path / CONFIG_FILENAME) == AIConfig()


def test_load_bad_json_returns_defaults(tmp_path, caplog):
    path = tmp_path / CONFIG_FILENAME
    path.write_text('{not json', encoding='utf-8')
    assert load_config(path) == AIConfig()
    assert 'Config load failed' in caplog.text


def test_load_non_object_returns_defaults(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text('[1, 2]', encoding='utf-8')
    assert load_config(path) == AIConfig()


def test_save_then_load(tmp_path):
    path   = tmp_path / CONFIG_FILENAME
    config = AIConfig(provider='anthropic', api_key='ant-123', model='claude-x')
    save_config(config, path)
    assert json.loads(path.read_text(encoding='utf-8'))['provider'] == 'anthropic'
    assert load_config(path) == config


def test_env_overlay():
    base   = AIConfig(provider='openai', model='gpt-x')
    config = config_from_env(base, environ={
        'SAFEDATE_PROVIDER': 'gemini',
        'SAFEDATE_API_KEY':  'gem-key',
        'SAFEDATE_MODEL':    '',
    })
    assert config.provider == 'gemini'
    assert config.api_key  == 'gem-key'
    assert config.model    == 'gpt-x'     # empty env values do not override


def test_env_overlay_without_base():
    config = config_from_env(environ={'SAFEDATE_ENDPOINT': 'http://localhost:9999'})
    assert config.endpoint == 'http://localhost:9999'
    assert config.provider == 'ollama'
