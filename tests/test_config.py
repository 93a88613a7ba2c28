"""
Tests for configuration loading.
"""
from pathlib import Path

import yaml

from taskboard.config import Config


def test_defaults_when_file_missing(tmp_path):
    db = tmp_path / "nested" / "tasks.db"
    cfg = Config.load(str(tmp_path / "missing.yaml"), environ={"TASKBOARD_DB": str(db)})
    assert cfg.host == "127.0.0.1"
    assert cfg.port == 3000
    assert cfg.log_level == "INFO"
    assert db.parent.is_dir()


def test_load_from_yaml_ignores_unknown_keys(tmp_path):
    path = tmp_path / "taskboard.yaml"
    path.write_text(yaml.safe_dump({
        "db_path": str(tmp_path / "data" / "tasks.db"),
        "port": 8080,
        "unknown": "ignored",
    }))
    cfg = Config.load(str(path), environ={})
    assert cfg.port == 8080
    assert Path(cfg.db_path).parent.is_dir()
    assert not hasattr(cfg, "unknown")


def test_invalid_yaml_falls_back_to_defaults(tmp_path):
    path = tmp_path / "taskboard.yaml"
    path.write_text("port: [unclosed")
    cfg = Config.load(str(path), environ={"TASKBOARD_DB": str(tmp_path / "t.db")})
    assert cfg.port == 3000


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "taskboard.yaml"
    path.write_text(yaml.safe_dump({"port": 8080, "host": "0.0.0.0"}))
    cfg = Config.load(str(path), environ={
        "TASKBOARD_PORT": "9000",
        "TASKBOARD_DB": str(tmp_path / "env.db"),
        "TASKBOARD_LOG_LEVEL": "DEBUG",
    })
    assert cfg.port == 9000
    assert cfg.host == "0.0.0.0"
    assert cfg.db_path == str(tmp_path / "env.db")
    assert cfg.log_level == "DEBUG"


def test_bad_port_in_environment_is_ignored(tmp_path):
    cfg = Config.load(str(tmp_path / "missing.yaml"), environ={"TASKBOARD_PORT": "http", "TASKBOARD_DB": str(tmp_path / "t.db")})
    assert cfg.port == 3000


def test_poll_interval_from_file_and_environment(tmp_path):
    path = tmp_path / "taskboard.yaml"
    path.write_text(yaml.safe_dump({"poll_interval": 2.0, "db_path": str(tmp_path / "t.db")}))
    assert Config.load(str(path), environ={}).poll_interval == 2.0
    cfg = Config.load(str(path), environ={"TASKBOARD_POLL_INTERVAL": "0.25"})
    assert cfg.poll_interval == 0.25
    cfg = Config.load(str(path), environ={"TASKBOARD_POLL_INTERVAL": "often"})
    assert cfg.poll_interval == 2.0
