from __future__ import annotations
import pytest
from pathlib import Path
from bls_import.config.loader import ConfigError, ZeroScorePolicy, load_config


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.total_possible == 30
    assert cfg.zero_score_policy is ZeroScorePolicy.NOT_ATTEMPTED
    assert cfg.user_type == "participant"
    assert cfg.status == "approved"
    assert cfg.database.user == "appuser"
    assert cfg.database.port == 5432


def test_load_config_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("{}\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.total_possible == 30
    assert cfg.zero_score_policy is ZeroScorePolicy.NOT_ATTEMPTED
    assert cfg.assignments_path == "config/pool_assignments.json"
    assert cfg.database.dsn is None


def test_load_config_empty_file(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path).total_possible == 30


def test_load_config_record_policy(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("not_attempted", "record")
    write_config.write_text(text, encoding="utf-8")
    assert load_config(write_config).zero_score_policy is ZeroScorePolicy.RECORD


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("total_possible: [30\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_load_config_rejects_unknown_policy(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("not_attempted", "guess")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_load_config_extra_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_load_config_wrong_type(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("total_possible: 30", "total_possible: thirty")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)
