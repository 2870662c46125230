from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.database.bootstrap import apply_schema, list_tables
from src.class_attendance.class_attendance.database.connection import DatabaseConnection, DBConfig

logger = logging.getLogger("init_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))

    apply_schema(conn, schema_path=REPO_ROOT / "database" / "schema.sql")
    cfg = conn.config
    logger.info(
        "schema ready -> %s@%s:%s/%s (tables=%d)",
        cfg.user, cfg.host, cfg.port, cfg.database, len(list_tables(conn)),
    )


if __name__ == "__main__":
    main()
