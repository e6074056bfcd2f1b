"""Back up the payroll database.

Default mode shells out to ``mysqldump``. ``--csv`` exports the ledger tables
to one CSV file each through mysql-connector instead, for spreadsheet use.
"""

from __future__ import annotations

import argparse
import csv
import importlib
import logging
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.payroll_system.payroll_system.database.connection import DBConfig, DatabaseConnection
from src.payroll_system.payroll_system.database.mysql_base import db_cursor

logger = logging.getLogger("scripts.backup")

EXPORT_TABLES = (
    "students",
    "fee_payments",
    "teachers",
    "teacher_salaries",
    "teacher_loans",
    "teacher_advances",
)


def dump_sql(db: dict, out_dir: Path, ts: str) -> Path:
    out_file = out_dir / f"{db['database']}_{ts}.sql"
    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        db["database"],
    ]
    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True)
    except FileNotFoundError:
        out_file.unlink(missing_ok=True)
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools or use --csv.")
    return out_file


def export_csv(db: dict, out_dir: Path, ts: str) -> list[Path]:
    conn = DatabaseConnection(DBConfig(**{k: db[k] for k in ("host", "port", "user", "password", "database")}))
    target = out_dir / f"csv_{ts}"
    target.mkdir(parents=True, exist_ok=True)

    written = []
    for table in EXPORT_TABLES:
        with db_cursor(conn, dictionary=False) as (_, cur):
            cur.execute(f"SELECT * FROM `{table}` ORDER BY created_at")
            headers = [d[0] for d in cur.description]
            rows = cur.fetchall()

        path = target / f"{table}.csv"
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            writer.writerows(rows)
        logger.info("%s: %d rows", table, len(rows))
        written.append(path)
    return written


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--csv", action="store_true", help="export tables as CSV instead of mysqldump")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")

    if args.csv:
        paths = export_csv(db, out_dir, ts)
        logger.info("backup created: %d CSV files in %s", len(paths), paths[0].parent)
    else:
        logger.info("backup created: %s", dump_sql(db, out_dir, ts))


if __name__ == "__main__":
    main()
