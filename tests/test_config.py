import pytest

from metamodel.config import (
    ConfigError,
    ConfigManager,
    ConfigValidationError,
    get_config,
    get_config_manager,
)


def test_defaults():
    mgr = get_config_manager()
    assert mgr.get("observability.log_level") == "warning"
    assert mgr.get("observability.log_format") == "json"
    assert mgr.get("output.format") == "json"
    assert mgr.get("output.model_path") == ""
    assert mgr.validate() == []


def test_singleton():
    assert ConfigManager() is get_config_manager()
    assert get_config() is get_config_manager().config


def test_set_validates():
    mgr = get_config_manager()
    mgr.set("output.format", "yaml")
    assert mgr.get("output.format") == "yaml"
    with pytest.raises(ConfigValidationError):
        mgr.set("output.format", "xml")
    with pytest.raises(ConfigError):
        mgr.set("output.nope", "x")
    with pytest.raises(ConfigError):
        mgr.set("output", "x")


def test_environment_overrides_file(tmp_path, monkeypatch):
    p = tmp_path / "metamodel.yaml"
    p.write_text("output:\n  format: yaml\n", encoding="utf-8")
    mgr = get_config_manager()
    mgr.load_from_file(p)
    assert mgr.get("output.format") == "yaml"
    monkeypatch.setenv("METAMODEL_OUTPUT_FORMAT", "text")
    assert mgr.get("output.format") == "text"


def test_invalid_environment_value_is_reported(monkeypatch):
    monkeypatch.setenv("METAMODEL_LOG_LEVEL", "loud")
    errors = get_config_manager().validate()
    assert len(errors) == 1
    assert errors[0].startswith("observability.log_level")


def test_load_defaults_from_working_directory(tmp_path, monkeypatch):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "metamodel.yaml").write_text(
        "observability:\n  log_level: debug\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    mgr = get_config_manager()
    mgr.load_defaults()
    assert mgr.get("observability.log_level") == "debug"
    assert len(mgr.loaded_files) == 1


def test_load_defaults_without_files_is_noop(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    mgr = get_config_manager()
    mgr.load_defaults()
    assert mgr.loaded_files == []


@pytest.mark.parametrize(
    "text",
    [
        "output:\n  colour: red\n",
        "output: yaml\n",
        "- a\n- b\n",
        "output: [unclosed\n",
    ],
)
def test_bad_files_raise(tmp_path, text):
    p = tmp_path / "bad.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        get_config_manager().load_from_file(p)


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        get_config_manager().load_from_file(tmp_path / "absent.yaml")


def test_to_dict_and_yaml():
    cfg = get_config()
    assert cfg.to_dict() == {
        "observability": {"log_level": "warning", "log_format": "json"},
        "output": {"format": "json", "model_path": ""},
    }
    assert "log_level: warning" in cfg.to_yaml()


def test_reset_discards_loaded_state(tmp_path):
    p = tmp_path / "m.yaml"
    p.write_text("output:\n  model_path: model.yaml\n", encoding="utf-8")
    mgr = get_config_manager()
    mgr.load_from_file(p)
    mgr.reset()
    assert mgr.get("output.model_path") == ""
    assert mgr.loaded_files == []
