# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pytest

from bls_import.models.participant import Participant


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """total_possible: 30
zero_score_policy: not_attempted
participant_filter:
  user_type: participant
  status: approved
assignments_path: config/pool_assignments.json
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def participants() -> list[Participant]:
    return [
        Participant(id="p-1", email="john@x.com", name="John Doe", id_number="900101-01-1111",
                    job_position_name="Jururawat", job_position_id="j-1"),
        Participant(id="p-2", email="Jane.Smith@X.com", name="Jane Smith", id_number="870123-45-6789"),
        Participant(id="p-3", email="ali@x.com", name="Ali Bin Abu", id_number="880202-02-2222"),
    ]


@pytest.fixture()
def participants_csv(temp_workdir: Path) -> Path:
    path = temp_workdir / "data" / "participants.csv"
    path.write_text(
        "id,email,name,ic_number,job_position_name,job_position_id\n"
        "p-1,john@x.com,John Doe,900101-01-1111,Jururawat,j-1\n"
        "p-2,jane.smith@x.com,Jane Smith,870123-45-6789,\"Pegawai Perubatan, UD41\",j-2\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def results_csv(temp_workdir: Path) -> Path:
    path = temp_workdir / "data" / "results.csv"
    path.write_text(
        "email,name,ic,pre test,post test\n"
        "john@x.com,John Doe,900101-01-1111,20,25\n"
        "ghost@x.com,Ghost,000000-00-0000,10,12\n"
        "JANE.SMITH@x.com,Jane Smith,870123-45-6789,0,22\n",
        encoding="utf-8",
    )
    return path
