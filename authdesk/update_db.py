from collections import namedtuple

from sqlalchemy import inspect, text
from sqlalchemy.schema import CreateSchema

from authdesk.logger import log
from authdesk.models import Base

# kind: "schema" | "table" | "column"
Migration = namedtuple("Migration", ["kind", "schema", "table", "column"])


def describe(m):
    name = ".".join(p for p in (m.schema, m.table, m.column) if p)
    return f"{m.kind} {name}"


def _qualified(conn, schema, table_name):
    prep = conn.dialect.identifier_preparer
    name = prep.quote(table_name)
    return f"{prep.quote_schema(schema)}.{name}" if schema else name


def _table(name):
    for table in Base.metadata.sorted_tables:
        if table.name == name:
            return table
    raise KeyError(name)


def _collect(conn):
    insp = inspect(conn)
    pending = []

    tables = list(Base.metadata.sorted_tables)
    # SQLite translates the schema to None
    schema = conn.schema_for_object(tables[0]) if tables else None

    if schema and not insp.has_schema(schema):
        pending.append(Migration("schema", schema, None, None))
        existing = set()
    else:
        existing = set(insp.get_table_names(schema=schema))

    for table in tables:
        if table.name not in existing:
            pending.append(Migration("table", schema, table.name, None))
            continue

        live_columns = {c["name"] for c in insp.get_columns(table.name, schema=schema)}
        for column in table.columns:
            if column.name not in live_columns:
                pending.append(Migration("column", schema, table.name, column.name))

    return pending


def get_pending_migrations(engine):
    """What the live database is missing compared to the models"""
    with engine.connect() as conn:
        return _collect(conn)


def apply_migrations(engine):
    """
    Brings the database up to the models:
    1. creates the schema,
    2. creates missing tables,
    3. adds missing columns (always nullable, existing rows have no value).
    """
    with engine.begin() as conn:
        pending = _collect(conn)
        if not pending:
            return []

        for m in pending:
            if m.kind == "schema":
                log.info(f"Creating schema '{m.schema}'...")
                conn.execute(CreateSchema(m.schema))

        if any(m.kind in ("schema", "table") for m in pending):
            # checkfirst: only the missing ones get created
            Base.metadata.create_all(bind=conn)

        for m in pending:
            if m.kind != "column":
                continue
            column = _table(m.table).columns[m.column]
            col_type = column.type.compile(dialect=conn.dialect)
            log.info(f"Adding column '{m.column}' to table '{m.table}'...")
            conn.execute(text(
                f"ALTER TABLE {_qualified(conn, m.schema, m.table)} "
                f"ADD COLUMN {conn.dialect.identifier_preparer.quote(m.column)} {col_type}"
            ))

    for m in pending:
        log.info(f"Applied migration: {describe(m)}")
    return pending
