"""Health check endpoints.

Provides Kubernetes-compatible health probes:
- /health: Basic health check
- /health/live: Liveness probe (is the app running?)
- /health/ready: Readiness probe (database reachable, role migration status)

A failed role migration does not make the instance unready: the service keeps
serving on the legacy schema, so readiness reports ``degraded`` instead.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from backoffice import __version__
from backoffice.api.deps import get_db
from backoffice.db.migrations import MigrationReport

router = APIRouter(tags=["health"])


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1")).fetchone()
        return {
            "status": "healthy",
            "dialect": db.get_bind().dialect.name,
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


def check_migration(report: Optional[MigrationReport]) -> Dict[str, Any]:
    """Summarize the startup role migration."""
    if report is None:
        return {"status": "unknown"}
    check = report.to_dict()
    check["migration_status"] = check.pop("status")
    check["status"] = "degraded" if report.degraded else "healthy"
    return check


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.

    Returns 200 if the application is running.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/live")
def liveness_probe():
    """Kubernetes liveness probe. Must not depend on external services."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "alive",
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


@router.get("/health/ready")
def readiness_probe(request: Request, db: Session = Depends(get_db)):
    """
    Kubernetes readiness probe.

    503 when the database is unreachable. A failed role migration is reported
    as ``degraded`` with a 200.
    """
    checks = {
        "database": check_database(db),
        "migration": check_migration(getattr(request.app.state, "migration_report", None)),
    }

    unhealthy = [name for name, check in checks.items() if check["status"] == "unhealthy"]
    if unhealthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "checks": checks,
                "failed": unhealthy,
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    overall = "degraded" if checks["migration"]["status"] == "degraded" else "ready"
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": overall,
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
