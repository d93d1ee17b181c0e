from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from bls_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportSettings, load_config
from bls_import.csvio.parser import UnsupportedFileError, read_source_file
from bls_import.csvio.rows import generate_sample_template, parse_import_rows
from bls_import.db.directory import fetch_participants, load_participants_file
from bls_import.db.questions import QuestionReadError, fetch_questions
from bls_import.db.result_writer import InMemoryResultWriter, PostgresResultWriter, log_write_metrics
from bls_import.logging.init import log_summary, set_debug, setup_logging
from bls_import.models.question import TEST_TYPES
from bls_import.services.orchestrator import ProcessingError, import_rows
from bls_import.services.question_pools import (
    JsonFileAssignmentStore,
    assign_pool,
    build_pools,
    find_pool,
    get_assigned_pool,
)
from bls_import.services.summary import render_summary_line

"""CLI entrypoint.

Commands:
- import FILE    run the reconciliation and print the report + SUMMARY line
- preview FILE   parse only: show validated rows and rejected rows
- template       print the sample results template
- pools ...      list pools, show or change the pool assigned to a test type

Exit codes: 0 success, 2 finished with row errors, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


@contextmanager
def _db_connection(settings: ImportSettings) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor on an autocommit connection.

    Resolution order: DATABASE_URL / PGDSN, then PG* variables, then the
    ``database`` section of the config file. ``.env`` is loaded (with
    override) before this runs.
    """
    import psycopg2

    db_cfg = settings.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    # each result insert stands alone; see db.result_writer
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="bls-import", description="BLS pre/post-test results importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file (YAML)")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import results from a .csv/.xlsx file")
    imp.add_argument("file", type=Path)
    imp.add_argument("--dry-run", action="store_true", help="Do not write results to the database")
    imp.add_argument(
        "--participants",
        type=Path,
        help="Directory export (.csv/.xlsx) to match against instead of the database",
    )

    prev = sub.add_parser("preview", help="Parse a results file and show the rows")
    prev.add_argument("file", type=Path)
    prev.add_argument("--limit", type=int, default=10, help="Rows to show (default 10)")

    sub.add_parser("template", help="Print the sample results template")

    pools = sub.add_parser("pools", help="Question pool assignments")
    pools_sub = pools.add_subparsers(dest="pools_command", required=True)
    pools_sub.add_parser("list", help="List question pools")
    show = pools_sub.add_parser("show", help="Show the pool assigned to a test type")
    show.add_argument("test_type", choices=TEST_TYPES)
    assign = pools_sub.add_parser("assign", help="Assign a pool to a test type ('none' clears it)")
    assign.add_argument("test_type", choices=TEST_TYPES)
    assign.add_argument("pool_id")
    return p.parse_args(argv)


def _read_rows_file(path: Path, logger: Any) -> str | None:
    if not path.exists():
        logger.error(f"file not found: {path}")
        return None
    try:
        return read_source_file(path)
    except (UnsupportedFileError, OSError, ValueError) as e:
        logger.error(f"read: {e}")
        return None


def _cmd_template() -> int:
    print(generate_sample_template(), end="")
    return EXIT_SUCCESS_ALL


def _cmd_preview(args: argparse.Namespace, logger: Any) -> int:
    text = _read_rows_file(args.file, logger)
    if text is None:
        return EXIT_FATAL
    parsed = parse_import_rows(text)
    if parsed.header:
        print(f"HEADER: {parsed.header}")
    for row in parsed.rows[: args.limit]:
        print(
            f"  row {row.row_number}: {row.email} | {row.name} | {row.id_number} "
            f"| pre={row.score_before} post={row.score_after}"
        )
    if len(parsed.rows) > args.limit:
        print(f"  ... {len(parsed.rows) - args.limit} more")
    for err in parsed.row_errors:
        logger.warning(f"Row {err.row_number}: {err.message}")
    logger.info(f"parsed {len(parsed.rows)} valid row(s), {len(parsed.row_errors)} rejected")
    return EXIT_SUCCESS_ALL


def _print_report(report: Any, logger: Any) -> None:
    for email in report.unmatched_emails:
        logger.warning(f"unmatched: {email}")
    for err in report.errors:
        logger.error(err)
    logger.info(
        f"Imported {report.recorded_count} test results for {report.matched_count} participants"
    )
    log_summary(render_summary_line(report)[len("SUMMARY "):])


def _cmd_import(args: argparse.Namespace, settings: ImportSettings, logger: Any) -> int:
    text = _read_rows_file(args.file, logger)
    if text is None:
        return EXIT_FATAL
    parsed = parse_import_rows(text)
    logger.info(f"{args.file.name}: {len(parsed.rows)} valid row(s), {len(parsed.row_errors)} rejected")

    dry_run = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    if dry_run:
        if args.participants is None:
            logger.error("dry run needs --participants (directory export to match against)")
            return EXIT_FATAL
        participants_path = args.participants
        writer = InMemoryResultWriter()
        try:
            report = import_rows(
                parsed,
                lambda: load_participants_file(participants_path),
                writer,
                settings,
                source=args.file.name,
            )
        except ProcessingError as e:
            logger.error(f"processing: {e}")
            return EXIT_FATAL
        logger.info(f"mode=dry-run would_write={len(writer.records)}")
    else:
        try:
            with _db_connection(settings) as cur:
                participants_path = args.participants
                if participants_path is not None:
                    read_directory = lambda: load_participants_file(participants_path)  # noqa: E731
                else:
                    read_directory = lambda: fetch_participants(cur, settings.user_type, settings.status)  # noqa: E731

                report = import_rows(
                    parsed,
                    read_directory,
                    PostgresResultWriter(cur, metrics_callback=log_write_metrics),
                    settings,
                    source=args.file.name,
                )
        except ProcessingError as e:
            logger.error(f"processing: {e}")
            return EXIT_FATAL
        except Exception as e:
            logger.error(f"database: {e}")
            return EXIT_FATAL
        logger.info("mode=live")

    _print_report(report, logger)
    return EXIT_SUCCESS_ALL if report.success else EXIT_PARTIAL_FAILURE


def _cmd_pools(args: argparse.Namespace, settings: ImportSettings, logger: Any) -> int:
    store = JsonFileAssignmentStore(Path(settings.assignments_path))
    if args.pools_command == "assign" and args.pool_id.lower() == "none":
        assign_pool(store, args.test_type, None)
        return EXIT_SUCCESS_ALL

    try:
        with _db_connection(settings) as cur:
            pools = build_pools(fetch_questions(cur))
    except QuestionReadError as e:
        logger.error(f"questions: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    if args.pools_command == "list":
        assignments = store.load()
        for pool in pools:
            marker = "*" if pool.id in (assignments.pre_test, assignments.post_test) else " "
            print(f"{marker} {pool.id}  {pool.name}  ({len(pool.question_ids)} questions)")
        return EXIT_SUCCESS_ALL
    if args.pools_command == "show":
        pool = get_assigned_pool(store, args.test_type, pools)
        print(f"{args.test_type}: {pool.id + '  ' + pool.name if pool else '(none)'}")
        return EXIT_SUCCESS_ALL

    pool = find_pool(pools, args.pool_id)
    if pool is None:
        logger.error(f"unknown pool: {args.pool_id}")
        return EXIT_FATAL
    if not pool.serves(args.test_type):
        logger.error(f"pool {pool.id} is a {pool.test_type} pool, not {args.test_type}")
        return EXIT_FATAL
    assign_pool(store, args.test_type, pool.id)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] from tests must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug()
        logger.debug("debug mode enabled")

    if args.command == "template":
        return _cmd_template()
    if args.command == "preview":
        return _cmd_preview(args, logger)

    _load_env_file(Path(".env"), override=True)
    try:
        settings = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        return _cmd_import(args, settings, logger)
    return _cmd_pools(args, settings, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
