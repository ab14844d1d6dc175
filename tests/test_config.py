"""Tests for CLI configuration module."""

import json
import os

from gsc.config import Config, default_config_path


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.gsc' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()
    assert config.data['timeout'] == 30
    assert config.data['overwrite'] == 'ask'
    assert config.data['json_output'] is False
    assert 'cookie' not in config.data
    assert 'username' not in config.data


def test_config_file_is_private(tmp_path):
    config_path = tmp_path / '.gsc' / 'config.json'
    Config(config_path)

    assert os.stat(config_path).st_mode & 0o777 == 0o600


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file."""
    config_path = tmp_path / '.gsc' / 'config.json'
    config_path.parent.mkdir(parents=True)

    existing_data = {
        'endpoint': 'https://gsc.example.edu/',
        'username': 'alice',
        'overwrite': 'never',
    }
    with open(config_path, 'w') as f:
        json.dump(existing_data, f)

    config = Config(config_path)

    assert config.get_endpoint() == 'https://gsc.example.edu'
    assert config.get_username() == 'alice'
    assert config.get_overwrite_policy() == 'never'
    assert config.get_timeout() == 30


def test_config_handles_corrupted_file(tmp_path):
    """Test that a corrupted config is backed up and replaced by defaults."""
    config_path = tmp_path / '.gsc' / 'config.json'
    config_path.parent.mkdir(parents=True)
    config_path.write_text('{ invalid json }')

    config = Config(config_path)

    assert config.data['timeout'] == 30
    backup = config_path.with_suffix('.json.bak')
    assert backup.read_text() == '{ invalid json }'


def test_cookie_round_trip(temp_config):
    """Test saving and retrieving the session cookie."""
    assert temp_config.get_cookie() is None

    temp_config.set_cookie('session', 'abc=123')

    assert temp_config.get_cookie() == ('session', 'abc=123')
    with open(temp_config.config_path, 'r') as f:
        data = json.load(f)
    assert data['cookie'] == 'session=abc=123'


def test_clear_credentials(logged_in_config):
    logged_in_config.clear_credentials()

    assert logged_in_config.get_username() == ''
    assert logged_in_config.get_cookie() is None
    reloaded = Config(logged_in_config.config_path)
    assert reloaded.get_cookie() is None


def test_select_user_precedence(temp_config):
    temp_config.set_username('alice')
    assert temp_config.select_user() == 'alice'

    temp_config.on_behalf = 'bob'
    assert temp_config.select_user() == 'bob'
    assert temp_config.select_user('carol') == 'carol'


def test_json_override_is_not_saved(temp_config):
    assert temp_config.json_output() is False

    temp_config.json_override = True
    temp_config.set_username('alice')

    assert temp_config.json_output() is True
    assert Config(temp_config.config_path).json_output() is False


def test_default_config_path_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv('GSC_CONFIG', str(tmp_path / 'custom.json'))
    assert default_config_path() == tmp_path / 'custom.json'

    monkeypatch.delenv('GSC_CONFIG')
    assert default_config_path().name == 'config.json'
    assert default_config_path().parent.name == '.gsc'
