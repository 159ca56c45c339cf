import json

import pytest

from ignite.errors import ConfigError
from ignite.models import config as config_module
from ignite.models.config import Config


def _write(path, data):
    path.write_text(json.dumps(data))
    return path


def test_load_applies_defaults(tmp_path):
    path = _write(tmp_path / "ignition.json", {
        "working_dir": "/srv/game", "start_command": "./start.sh", "stop_command": "./stop.sh",
    })

    config = Config.load(str(path))

    assert config.host == "127.0.0.1"
    assert config.port == 27015
    assert config.admin_role_ids == frozenset()
    assert config.allowed_guild_ids == frozenset()
    assert config.broadcast_channel_id is None
    assert config.join_address is None
    assert config.unrestricted


def test_load_reads_all_fields(tmp_path):
    path = _write(tmp_path / "ignition.json", {
        "working_dir": "/srv/game", "start_command": "a", "stop_command": "b",
        "admin_role_ids": [1, "2"], "server_ids": [3], "host": "10.0.0.5", "port": 27016,
        "broadcast_channel_id": "44", "join_address": "play.example.com:27016",
    })

    config = Config.load(str(path))

    assert config.admin_role_ids == frozenset({1, 2})
    assert config.allowed_guild_ids == frozenset({3})
    assert config.port == 27016
    assert config.broadcast_channel_id == 44
    assert config.join_address == "play.example.com:27016"


@pytest.mark.parametrize("data", [
    {"start_command": "a", "stop_command": "b"},
    {"working_dir": ".", "start_command": 1, "stop_command": "b"},
    {"working_dir": ".", "start_command": "a", "stop_command": "b", "port": 70000},
    {"working_dir": ".", "start_command": "a", "stop_command": "b", "port": "27015"},
    {"working_dir": ".", "start_command": "a", "stop_command": "b", "admin_role_ids": "1"},
    {"working_dir": ".", "start_command": "a", "stop_command": "b", "server_ids": ["abc"]},
    ["not", "an", "object"],
])
def test_invalid_documents_are_rejected(data):
    with pytest.raises(ConfigError):
        Config.from_dict(data)


def test_invalid_json_is_config_error(tmp_path):
    path = tmp_path / "ignition.json"
    path.write_text("{not json")

    with pytest.raises(ConfigError, match="Failed to parse"):
        Config.load(str(path))


def test_missing_custom_path_is_config_error(tmp_path):
    with pytest.raises(ConfigError, match="specified path"):
        Config.load(str(tmp_path / "missing.json"))


def test_search_order_prefers_current_directory(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setattr(config_module.Path, "home", lambda: home)
    monkeypatch.chdir(tmp_path)
    base = {"working_dir": ".", "start_command": "a", "stop_command": "b"}
    (tmp_path / "config").mkdir()
    _write(tmp_path / "config" / "ignition.json", dict(base, host="10.0.0.2"))
    _write(tmp_path / "ignition.json", dict(base, host="10.0.0.1"))

    assert Config.load().host == "10.0.0.1"


def test_search_falls_back_to_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setattr(config_module.Path, "home", lambda: home)
    monkeypatch.chdir(tmp_path)
    (home / ".ignition").mkdir(parents=True)
    _write(home / ".ignition" / "ignition.json",
           {"working_dir": ".", "start_command": "a", "stop_command": "b", "host": "10.0.0.3"})

    assert Config.load().host == "10.0.0.3"


def test_nothing_found_lists_searched_locations(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module.Path, "home", lambda: tmp_path / "home")
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ConfigError, match="ignite init"):
        Config.load()


def test_save_then_load(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module.Path, "home", lambda: tmp_path / "home")
    config = Config(working_dir="/srv", start_command="a", stop_command="b",
                    admin_role_ids=frozenset({5}), allowed_guild_ids=frozenset({6}))

    path = config.save()

    assert path == tmp_path / "home" / ".ignition" / "ignition.json"
    assert json.loads(path.read_text())["server_ids"] == [6]
    assert Config.load(str(path)) == config


def test_config_is_immutable():
    config = Config(working_dir=".", start_command="a", stop_command="b")

    with pytest.raises(AttributeError):
        config.port = 1


def test_both_guild_keys_are_rejected():
    data = {"working_dir": ".", "start_command": "a", "stop_command": "b",
            "server_ids": [1], "allowed_guild_ids": [2]}

    with pytest.raises(ConfigError, match="not both"):
        Config.from_dict(data)


def test_allowed_guild_ids_key_is_accepted():
    data = {"working_dir": ".", "start_command": "a", "stop_command": "b", "allowed_guild_ids": [2]}

    assert Config.from_dict(data).allowed_guild_ids == frozenset({2})
