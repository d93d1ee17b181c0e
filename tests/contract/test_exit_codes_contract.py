from __future__ import annotations

from pathlib import Path

from bls_import.cli import main as cli_main
from bls_import.logging.init import reset_logging

"""Exit code contract: 0 success, 2 finished with row errors, 1 fatal."""


def test_exit_code_fatal_missing_config(temp_workdir: Path, results_csv, capsys):
    reset_logging()
    code = cli_main(["import", str(results_csv), "--dry-run"])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_missing_file(write_config, temp_workdir: Path, capsys):
    reset_logging()
    code = cli_main(["import", "data/nope.csv", "--dry-run"])
    assert code == 1
    assert "ERROR file not found:" in capsys.readouterr().out


def test_exit_code_fatal_unsupported_file(write_config, temp_workdir: Path, capsys):
    reset_logging()
    path = temp_workdir / "data" / "results.pdf"
    path.write_bytes(b"%PDF")
    assert cli_main(["import", str(path), "--dry-run"]) == 1
    assert "unsupported file type" in capsys.readouterr().out


def test_exit_code_fatal_dry_run_without_directory(write_config, results_csv, capsys):
    reset_logging()
    assert cli_main(["import", str(results_csv), "--dry-run"]) == 1
    assert "--participants" in capsys.readouterr().out


def test_exit_code_all_success(write_config, results_csv, participants_csv):
    reset_logging()
    assert cli_main(["import", str(results_csv), "--dry-run", "--participants", str(participants_csv)]) == 0


def test_exit_code_partial_failure(write_config, temp_workdir: Path, participants_csv):
    reset_logging()
    path = temp_workdir / "data" / "bad.csv"
    path.write_text("john@x.com,John Doe,900101-01-1111,abc,25\njane.smith@x.com,Jane,1,10,12\n", encoding="utf-8")
    assert cli_main(["import", str(path), "--dry-run", "--participants", str(participants_csv)]) == 2
