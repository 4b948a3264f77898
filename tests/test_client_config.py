"""
Tests for the client configuration file
"""
import json

from rosetta_client.config import DEFAULT_CONFIG, Config


def test_creates_default_config(tmp_path):
    """Test a default config file is created"""
    path = tmp_path / "rosetta" / "config.json"
    config = Config(str(path))
    assert path.exists()
    assert config.get_all() == DEFAULT_CONFIG
    assert json.loads(path.read_text()) == DEFAULT_CONFIG


def test_merges_with_defaults(tmp_path):
    """Test stored values are merged over defaults"""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"url": "http://gateway:9000", "network": "mainnet"}))
    config = Config(str(path))
    assert config.url == "http://gateway:9000"
    assert config.get("network") == "mainnet"
    assert config.get("timeout") == DEFAULT_CONFIG["timeout"]


def test_set_persists(tmp_path):
    """Test setting a value writes it to disk"""
    path = tmp_path / "config.json"
    config = Config(str(path))
    config.url = "http://other:8080"
    config.set("blockchain", "ethereum")
    reloaded = Config(str(path))
    assert reloaded.url == "http://other:8080"
    assert reloaded.get("blockchain") == "ethereum"


def test_invalid_file_falls_back_to_defaults(tmp_path):
    """Test a corrupt config file falls back to defaults"""
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert Config(str(path)).get_all() == DEFAULT_CONFIG


def test_reset(tmp_path):
    """Test resetting the configuration"""
    config = Config(str(tmp_path / "config.json"))
    config.set("timeout", 5)
    config.reset()
    assert config.get("timeout") == DEFAULT_CONFIG["timeout"]


def test_keyfile_expands_user(tmp_path):
    """Test the key file path expands ~"""
    config = Config(str(tmp_path / "config.json"))
    config.set("keyfile", "~/keys/rosetta")
    assert "~" not in str(config.keyfile)
