import json

import config_handler


def test_load_settings_missing_file(tmp_path, monkeypatch):
    monkeypatch.setattr(config_handler, 'CONFIG_FILE_PATH', tmp_path / 'config.json')
    settings = config_handler.load_settings()
    assert settings == config_handler.DEFAULT_SETTINGS


def test_load_settings_merges_defaults(tmp_path, monkeypatch):
    cfg_path = tmp_path / 'config.json'
    with cfg_path.open('w', encoding='utf-8') as f:
        json.dump({'probe_timeout': 30, 'log_file': ''}, f)
    monkeypatch.setattr(config_handler, 'CONFIG_FILE_PATH', cfg_path)
    settings = config_handler.load_settings()
    assert settings['probe_timeout'] == 30
    assert settings['log_file'] == ''
    for key in config_handler.DEFAULT_SETTINGS:
        assert key in settings


def test_load_settings_ignores_broken_file(tmp_path, monkeypatch):
    cfg_path = tmp_path / 'config.json'
    cfg_path.write_text('{not json', encoding='utf-8')
    monkeypatch.setattr(config_handler, 'CONFIG_FILE_PATH', cfg_path)
    assert config_handler.load_settings() == config_handler.DEFAULT_SETTINGS


def test_defaults_are_not_mutated(tmp_path, monkeypatch):
    cfg_path = tmp_path / 'config.json'
    cfg_path.write_text(json.dumps({'sample_count': 2}), encoding='utf-8')
    monkeypatch.setattr(config_handler, 'CONFIG_FILE_PATH', cfg_path)
    config_handler.load_settings()
    assert config_handler.DEFAULT_SETTINGS['sample_count'] == 5


def test_numeric_strings_are_coerced(tmp_path, monkeypatch):
    cfg_path = tmp_path / 'config.json'
    cfg_path.write_text(json.dumps({'probe_timeout': '30', 'sample_interval': '0.5', 'sample_count': '3'}),
                        encoding='utf-8')
    monkeypatch.setattr(config_handler, 'CONFIG_FILE_PATH', cfg_path)
    settings = config_handler.load_settings()
    assert settings['probe_timeout'] == 30
    assert settings['sample_interval'] == 0.5
    assert settings['sample_count'] == 3


def test_bad_values_fall_back_to_defaults(tmp_path, monkeypatch):
    cfg_path = tmp_path / 'config.json'
    cfg_path.write_text(json.dumps({
        'probe_timeout': 'soon',
        'sample_interval': -1,
        'sample_count': 2.5,
        'default_tmp_dir': 42,
        'log_file': ['x'],
    }), encoding='utf-8')
    monkeypatch.setattr(config_handler, 'CONFIG_FILE_PATH', cfg_path)
    settings = config_handler.load_settings()
    assert settings['probe_timeout'] is None
    assert settings['sample_interval'] == config_handler.DEFAULT_SETTINGS['sample_interval']
    assert settings['sample_count'] == config_handler.DEFAULT_SETTINGS['sample_count']
    assert settings['default_tmp_dir'] == '/tmp'
    assert settings['log_file'] == 'debug_ninja_log.txt'


def test_booleans_are_not_numbers(tmp_path, monkeypatch):
    cfg_path = tmp_path / 'config.json'
    cfg_path.write_text(json.dumps({'sample_count': True, 'probe_timeout': True}), encoding='utf-8')
    monkeypatch.setattr(config_handler, 'CONFIG_FILE_PATH', cfg_path)
    settings = config_handler.load_settings()
    assert settings['sample_count'] == 5
    assert settings['probe_timeout'] is None
