"""Unit tests covering the configuration persistence helpers."""

import json

from core.config import DEFAULT_BASE_URL, AppConfig, ConfigManager, ConnectionOptions
from core.models import UploadMode


def test_config_roundtrip(tmp_path):
    """Persist and reload configuration to ensure the token encryption round-trips."""
    config_path = tmp_path / "config.json"
    key_path = tmp_path / "key.key"
    manager = ConfigManager(config_path=config_path, key_path=key_path)

    options = ConnectionOptions(base_url="https://analyzer.example.com/", timeout=45, download_retries=1)
    config = AppConfig(
        api_token="secret",
        output_dir="/tmp/output",
        upload_mode=UploadMode.MULTIPLE,
        options=options,
    )
    manager.save(config)

    stored = json.loads(config_path.read_text(encoding="utf-8"))
    assert stored["api_token"] != "secret"
    assert stored["upload_mode"] == "multiple"

    loaded = manager.load()
    assert loaded.api_token == "secret"
    assert loaded.output_dir == config.output_dir
    assert loaded.upload_mode == UploadMode.MULTIPLE
    assert loaded.options == options
    assert loaded.options.base_url == "https://analyzer.example.com"


def test_config_loads_defaults_when_missing(tmp_path):
    """Verify loading a missing file yields default configuration values."""
    manager = ConfigManager(config_path=tmp_path / "missing.json", key_path=tmp_path / "key.key")
    config = manager.load()
    assert config.api_token == ""
    assert config.output_dir == ""
    assert config.upload_mode == UploadMode.SINGLE
    assert config.options.base_url == DEFAULT_BASE_URL
    assert config.options.timeout == 30


def test_config_loads_plaintext_backward_compatibility(tmp_path):
    """Ensure hand-written plaintext configs without options can still be read."""
    config_path = tmp_path / "config.json"
    key_path = tmp_path / "key.key"
    key_path.write_bytes(b"test-key" * 4)
    payload = {"api_token": "plain-text-token", "output_dir": "/data"}
    config_path.write_text(json.dumps(payload), encoding="utf-8")

    manager = ConfigManager(config_path=config_path, key_path=key_path)
    config = manager.load()
    assert config.api_token == "plain-text-token"
    assert config.output_dir == "/data"
    assert config.version == 0
    assert config.options.base_url == DEFAULT_BASE_URL


def test_blank_base_url_falls_back_to_default():
    assert ConnectionOptions(base_url="   ").base_url == DEFAULT_BASE_URL
