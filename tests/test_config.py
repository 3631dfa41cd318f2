import json

import pytest

from linear_tui.config import Config, Theme, load_config, load_dotenv_key, save_config


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "nope.json"), environ={})
    assert cfg.api_key == ""
    assert cfg.theme == Theme()
    assert cfg.debug_mode is False


def test_json_file_is_loaded(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"linear_api_key": "from-file", "theme": {"primary_color": "33"}}), encoding="utf-8")
    cfg = load_config(str(path), environ={})
    assert cfg.api_key == "from-file"
    assert cfg.theme.primary_color == "33"
    assert cfg.theme.secondary_color == "135"


def test_yaml_file_is_loaded(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("linear_api_key: yaml-key\ndebug_mode: true\ntheme:\n  text_color: 250\n", encoding="utf-8")
    cfg = load_config(str(path), environ={})
    assert cfg.api_key == "yaml-key"
    assert cfg.debug_mode is True
    assert cfg.theme.text_color == "250"


def test_env_key_overrides_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"linear_api_key": "from-file"}), encoding="utf-8")
    cfg = load_config(str(path), environ={"LINEAR_API_KEY": "from-env", "DEBUG": "1"})
    assert cfg.api_key == "from-env"
    assert cfg.debug_mode is True


def test_dotenv_is_last_resort(tmp_path):
    (tmp_path / ".env").write_text("# comment\nexport LINEAR_API_KEY='dot-env-key'\n", encoding="utf-8")
    assert load_dotenv_key() == "dot-env-key"
    assert load_config(str(tmp_path / "missing.json"), environ={}).api_key == "dot-env-key"

    path = tmp_path / "config.json"
    path.write_text(json.dumps({"linear_api_key": "from-file"}), encoding="utf-8")
    assert load_config(str(path), environ={}).api_key == "from-file"


def test_non_mapping_config_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path), environ={})


def test_save_config_round_trips(tmp_path):
    path = tmp_path / "nested" / "config.json"
    save_config(Config(api_key="k", theme=Theme(primary_color="99"), debug_mode=True), str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["linear_api_key"] == "k"
    assert data["theme"]["primary_color"] == "99"
    assert load_config(str(path), environ={}).theme.primary_color == "99"
