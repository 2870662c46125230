from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.database.bootstrap import apply_sql_file
from src.class_attendance.class_attendance.database.connection import DatabaseConnection, DBConfig

logger = logging.getLogger("seed_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))

    count = apply_sql_file(conn, REPO_ROOT / "database" / "seed.sql")
    logger.info("seeded %s (%d statements)", conn.config.database, count)


if __name__ == "__main__":
    main()
