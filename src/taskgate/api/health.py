"""Health check endpoint.

Learn: Open route (no token) for load balancers and `taskgate serve`
smoke checks. It round-trips a `SELECT 1` through the app's own engine,
so a healthy answer means the pool can hand out a working connection.
A failed check answers 503 so orchestrators stop routing traffic here;
the body names only the exception class, never the driver's message,
which can carry the database URL.
"""

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from taskgate import __version__

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    engine = request.app.state.engine
    checks = {
        "server": "ok",
        "version": __version__,
        "backend": engine.dialect.name,
    }

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("health.database_unreachable", error=type(e).__name__)
        checks["database"] = f"error: {type(e).__name__}"

    if checks["database"] == "ok":
        return {"status": "healthy", **checks}
    return JSONResponse(status_code=503, content={"status": "degraded", **checks})
