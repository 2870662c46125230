from src.class_attendance.class_attendance.database.bootstrap import (
    SCHEMA_PATH,
    _strip_create_db_and_use,
    iter_sql_statements,
)


def test_splits_on_semicolons_outside_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES ('it\\'s');  \n\nSELECT 1"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        "INSERT INTO t VALUES ('it\\'s')",
        "SELECT 1",
    ]


def test_create_database_and_use_are_removed():
    sql = "CREATE DATABASE IF NOT EXISTS foo;\nUSE foo;\nCREATE TABLE x (id INT);\n"

    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE x (id INT)"]


def test_schema_script_defines_every_table():
    sql = SCHEMA_PATH.read_text(encoding="utf-8")
    statements = list(iter_sql_statements(_strip_create_db_and_use(sql)))

    for table in ("teachers", "classes", "students", "attendances", "attendance_records", "reports"):
        assert any(f"CREATE TABLE IF NOT EXISTS {table}" in s for s in statements), table
