"""
Tests for schema migrations
"""

from sqlalchemy import inspect, text

from authdesk.update_db import get_pending_migrations, apply_migrations, describe

TABLES = {"users", "roles", "permissions", "user_roles", "role_permissions", "user_details"}


class TestMigrations:
    def test_empty_database_needs_every_table(self, engine):
        pending = get_pending_migrations(engine)
        assert {m.table for m in pending if m.kind == "table"} == TABLES
        # sqlite has no schemas
        assert not [m for m in pending if m.kind == "schema"]

    def test_apply_creates_tables(self, engine):
        applied = apply_migrations(engine)
        assert len(applied) == len(TABLES)
        assert set(inspect(engine).get_table_names()) == TABLES
        assert get_pending_migrations(engine) == []

    def test_apply_is_noop_when_up_to_date(self, migrated_engine):
        assert apply_migrations(migrated_engine) == []

    def test_missing_columns_are_added(self, engine):
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE users (id CHAR(32) PRIMARY KEY, user_name VARCHAR(256))"))

        pending = get_pending_migrations(engine)
        missing = {m.column for m in pending if m.kind == "column"}
        assert "full_name" in missing
        assert "email" in missing
        assert "id" not in missing and "user_name" not in missing

        apply_migrations(engine)
        columns = {c["name"] for c in inspect(engine).get_columns("users")}
        assert {"full_name", "email", "security_stamp", "last_login"} <= columns
        assert get_pending_migrations(engine) == []

    def test_describe(self, engine):
        pending = get_pending_migrations(engine)
        assert "table users" in [describe(m) for m in pending]
