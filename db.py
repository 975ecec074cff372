"""
Postgres storage layer for employee records.

Each employee is one row; ids are store-assigned UUIDs and created_at is set on insert.
Listing filters arrive as typed clauses from list_query and are translated to SQL here.

Connection: DATABASE_URL env var.
"""

import uuid
from contextlib import contextmanager

import psycopg2
import psycopg2.extras

from config import DATABASE_URL
from list_query import AnyContains, Clause, Contains, Equals, Sort

_DDL = """
CREATE TABLE IF NOT EXISTS employees (
    id            UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name          TEXT NOT NULL CHECK (name <> ''),
    age           INTEGER NOT NULL CHECK (age >= 0),
    skills        TEXT NOT NULL CHECK (skills <> ''),
    address       TEXT NOT NULL CHECK (address <> ''),
    designation   TEXT NOT NULL CHECK (designation <> ''),
    profile_image TEXT NOT NULL DEFAULT '',
    created_at    TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS ix_employees_created_at ON employees (created_at);
"""

# API field name -> column. Only names from this map are ever interpolated into SQL.
COLUMNS = {
    "name": "name",
    "age": "age",
    "skills": "skills",
    "address": "address",
    "designation": "designation",
    "profileImage": "profile_image",
    "createdAt": "created_at",
}

_RETURNING = (
    "id::text AS id, name, age, skills, address, designation, "
    'profile_image AS "profileImage", created_at AS "createdAt"'
)


@contextmanager
def _get_conn():
    conn = psycopg2.connect(DATABASE_URL)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    with _get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(_DDL)


def ping() -> None:
    """Round-trip a trivial query; raises if the store is unreachable."""
    with _get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1")


def _valid_id(employee_id: str) -> bool:
    try:
        uuid.UUID(employee_id)
    except ValueError:
        return False
    return True


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _clause_sql(clause: Clause) -> tuple[str, list]:
    if isinstance(clause, Contains):
        return f"{COLUMNS[clause.field]} ILIKE %s", [_like_pattern(clause.text)]
    if isinstance(clause, AnyContains):
        pattern = _like_pattern(clause.text)
        parts = [f"{COLUMNS[f]} ILIKE %s" for f in clause.fields]
        return "(" + " OR ".join(parts) + ")", [pattern] * len(parts)
    if isinstance(clause, Equals):
        return f"{COLUMNS[clause.field]} = %s", [clause.value]
    raise TypeError(f"Unsupported clause: {clause!r}")


def where_sql(clauses: tuple[Clause, ...]) -> tuple[str, list]:
    """AND-combine *clauses* into a WHERE fragment. No clauses -> empty string (match all)."""
    if not clauses:
        return "", []
    parts, params = [], []
    for clause in clauses:
        sql, values = _clause_sql(clause)
        parts.append(sql)
        params.extend(values)
    return " WHERE " + " AND ".join(parts), params


def order_sql(sort: Sort) -> str:
    return f" ORDER BY {COLUMNS[sort.field]} {'DESC' if sort.descending else 'ASC'}"


def find_employees(clauses: tuple[Clause, ...], sort: Sort, skip: int, limit: int) -> list[dict]:
    """Return one page of employees matching *clauses*, ordered by *sort*."""
    where, params = where_sql(clauses)
    query = f"SELECT {_RETURNING} FROM employees{where}{order_sql(sort)} LIMIT %s OFFSET %s"
    with _get_conn() as conn:
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(query, (*params, limit, skip))
            return [dict(r) for r in cur.fetchall()]


def count_employees(clauses: tuple[Clause, ...]) -> int:
    where, params = where_sql(clauses)
    with _get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(f"SELECT count(*) FROM employees{where}", params)
            return cur.fetchone()[0]


def insert_employee(fields: dict) -> dict:
    """Insert a new employee from API-named *fields*. Returns the stored record."""
    names = list(fields)
    columns = ", ".join(COLUMNS[n] for n in names)
    placeholders = ", ".join(["%s"] * len(names))
    with _get_conn() as conn:
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(
                f"INSERT INTO employees ({columns}) VALUES ({placeholders}) RETURNING {_RETURNING}",
                [fields[n] for n in names],
            )
            return dict(cur.fetchone())


def fetch_employee(employee_id: str) -> dict | None:
    """Return a single employee by id, or None if not found."""
    if not _valid_id(employee_id):
        return None
    with _get_conn() as conn:
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(f"SELECT {_RETURNING} FROM employees WHERE id = %s", (employee_id,))
            row = cur.fetchone()
            return dict(row) if row else None


def update_employee(employee_id: str, fields: dict) -> dict | None:
    """
    Replace only the given fields on one employee.
    Returns the updated record, or None if no employee has that id.
    """
    if not fields:
        return fetch_employee(employee_id)
    if not _valid_id(employee_id):
        return None
    assignments = ", ".join(f"{COLUMNS[n]} = %s" for n in fields)
    with _get_conn() as conn:
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(
                f"UPDATE employees SET {assignments} WHERE id = %s RETURNING {_RETURNING}",
                (*fields.values(), employee_id),
            )
            row = cur.fetchone()
            return dict(row) if row else None


def delete_employee(employee_id: str) -> dict | None:
    """Delete one employee. Returns the deleted record, or None if it did not exist."""
    if not _valid_id(employee_id):
        return None
    with _get_conn() as conn:
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(f"DELETE FROM employees WHERE id = %s RETURNING {_RETURNING}", (employee_id,))
            row = cur.fetchone()
            return dict(row) if row else None
