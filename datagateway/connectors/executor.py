"""
Query Executor
Runs one caller-supplied statement and normalizes the driver result
"""
import logging
from typing import Any, List

from sqlalchemy.engine import Connection

from datagateway.schemas import QueryResult

logger = logging.getLogger(__name__)


def execute_statement(conn: Connection, sql: str) -> QueryResult:
    """
    Execute sql verbatim on conn and return a QueryResult.

    The statement is sent to the driver as-is: no bind-parameter parsing,
    no rewriting and no LIMIT injection. Statements that return no rows
    report the affected-row count. Driver errors propagate; the connector
    turns them into QueryResult.error.
    """
    rs = conn.execution_options(no_parameters=True).exec_driver_sql(sql)

    if rs.returns_rows:
        cols = list(rs.keys())
        rows: List[List[Any]] = [list(row) for row in rs]
        conn.commit()
        return QueryResult(columns=cols, rows=rows, row_count=len(rows))

    affected = rs.rowcount if rs.rowcount is not None and rs.rowcount >= 0 else 0
    conn.commit()
    return QueryResult(columns=[], rows=[], row_count=affected)
