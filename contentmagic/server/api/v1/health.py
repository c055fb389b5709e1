"""
Health Check Endpoints.

Liveness of the API process and a deeper database probe used by deployment
checks.
"""

from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from contentmagic.core.database.base import utc_now
from contentmagic.core.logging_config import get_logger
from contentmagic.server.services.deps import SessionDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check() -> Dict[str, Any]:
    return {"status": "ok", "timestamp": utc_now().isoformat()}


@router.get(
    "/database",
    summary="Database Health",
    description="Check the database connection, the expected tables and a simple query.",
    responses={503: {"description": "Database unhealthy"}},
)
async def database_health(session: SessionDep) -> JSONResponse:
    """
    Probe the database.

    Reports three checks (connection, tables, query) and the row count of
    every table. Any failed check turns the response into a 503.
    """
    checks = {"connection": False, "tables": False, "query": False}
    counts: Dict[str, int] = {}
    missing: list[str] = []
    error = None
    expected = sorted(SQLModel.metadata.tables)

    try:
        await session.execute(text("SELECT 1"))
        checks["connection"] = True

        connection = await session.connection()
        existing = await connection.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
        missing = [name for name in expected if name not in existing]
        checks["tables"] = not missing

        for name in expected:
            if name in existing:
                table = SQLModel.metadata.tables[name]
                counts[name] = (await session.execute(select(func.count()).select_from(table))).scalar_one()
        checks["query"] = True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        error = str(e)

    healthy = all(checks.values())
    body: Dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utc_now().isoformat(),
        "checks": checks,
        "tableCounts": counts,
    }
    if missing:
        body["missingTables"] = missing
    if error:
        body["error"] = error
    return JSONResponse(status_code=200 if healthy else 503, content=body)
