from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load the YAML config (default config/import.yml)
- Validate it against the bundled JSON schema (unknown keys rejected)
- Apply defaults (total_possible=30, zero_score_policy=not_attempted)
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "ImportSettings",
    "ZeroScorePolicy",
    "DEFAULT_CONFIG_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")

DEFAULT_TOTAL_POSSIBLE = 30
DEFAULT_ASSIGNMENTS_PATH = "config/pool_assignments.json"


class ConfigError(Exception):
    pass


class ZeroScorePolicy(Enum):
    """How an explicit score of 0 is interpreted.

    NOT_ATTEMPTED: 0 is treated like a blank cell and nothing is recorded.
    RECORD: 0 is a genuine score and is recorded; only blank cells are skipped.
    """
    NOT_ATTEMPTED = "not_attempted"
    RECORD = "record"


@dataclass(frozen=True)
class DatabaseConfig:
    """Fallback connection settings. Environment variables take precedence."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportSettings:
    total_possible: int = DEFAULT_TOTAL_POSSIBLE
    zero_score_policy: ZeroScorePolicy = ZeroScorePolicy.NOT_ATTEMPTED
    user_type: str = "participant"
    status: str = "approved"
    assignments_path: str = DEFAULT_ASSIGNMENTS_PATH
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data
            fails validation (wrong types, unknown keys, bad enum values).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ImportSettings:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    flt = data.get("participant_filter") or {}
    return ImportSettings(
        total_possible=data.get("total_possible", DEFAULT_TOTAL_POSSIBLE),
        zero_score_policy=ZeroScorePolicy(data.get("zero_score_policy", "not_attempted")),
        user_type=flt.get("user_type", "participant"),
        status=flt.get("status", "approved"),
        assignments_path=data.get("assignments_path", DEFAULT_ASSIGNMENTS_PATH),
        database=db,
    )
