import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.app.services.security_lifecycle import SecurityLifecycle
from src.app.services.unit_of_work import UnitOfWork
from src.depends import get_security, get_unit_of_work

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health():
    """Liveness: the process is serving requests"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    security: SecurityLifecycle = Depends(get_security),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Readiness: permissions loaded and the database answers"""
    database = "ok"
    try:
        async with uow:
            await uow.security.ping()
    except Exception as e:
        logger.warning(f"Readiness database ping failed: {type(e).__name__}")
        database = "unavailable"

    is_ready = security.is_ready and database == "ok"
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if is_ready else "not_ready",
            "security": security.state.value,
            "database": database,
        },
    )
