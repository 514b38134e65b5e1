"""Tests for config file handling."""

import json

from farewatch import dom
from farewatch.config import CONFIG_ENV_VAR, apply_config, load_config, save_config


def test_missing_file_gives_defaults(tmp_path) -> None:
    config = load_config(tmp_path / "nope.json")
    assert config == {
        "html_backend": "auto",
        "default_airline": None,
        "log_level": "WARNING",
        "indent": 2,
    }


def test_values_are_kept(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"html_backend": "regex", "default_airline": "DL", "log_level": "debug"}))
    config = load_config(path)
    assert config["html_backend"] == "regex"
    assert config["default_airline"] == "DL"
    assert config["log_level"] == "DEBUG"
    assert config["indent"] == 2


def test_corrupt_file(tmp_path, caplog) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")
    config = load_config(path)
    assert config["html_backend"] == "auto"
    assert "corrupted" in caplog.text


def test_invalid_values_replaced(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"html_backend": "lxml", "log_level": "LOUD", "indent": "wide"}))
    config = load_config(path)
    assert config["html_backend"] == "auto"
    assert config["log_level"] == "WARNING"
    assert config["indent"] == 2


def test_non_object_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]")
    assert load_config(path)["html_backend"] == "auto"


def test_env_var(tmp_path, monkeypatch) -> None:
    path = tmp_path / "other.json"
    path.write_text(json.dumps({"default_airline": "UA"}))
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config()["default_airline"] == "UA"


def test_save_and_load(tmp_path) -> None:
    path = tmp_path / "config.json"
    save_config({"html_backend": "regex", "indent": 4}, path)
    config = load_config(path)
    assert config["html_backend"] == "regex"
    assert config["indent"] == 4


def test_apply_config_sets_backend() -> None:
    query = apply_config({"html_backend": "regex"})
    assert query.name == "regex"
    assert dom.get_document_query() is query
