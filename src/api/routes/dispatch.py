from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from src.api.error import raise_for_error
from src.app.handlers.base import Caller, RequestContext
from src.app.services.dispatch_gateway import DispatchGateway
from src.app.services.unit_of_work import UnitOfWork
from src.depends import get_caller, get_gateway, get_request_context, get_unit_of_work

router = APIRouter(tags=["Dispatch"])


@router.post("/dispatch")
async def dispatch(
    body: Any = Body(default=None),
    caller: Caller = Depends(get_caller),
    request: RequestContext = Depends(get_request_context),
    gateway: DispatchGateway = Depends(get_gateway),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Run a business transaction.

    Body: ``{"tx": <positive int>, "params": <string | number | object>}``

    The tx code resolves to a business object and method; the caller's
    profile must hold permission for that pair.

    Returns:
        ``{code, msg, data?}`` with the handler's HTTP-style code

    Raises:
        - 400 INVALID_PARAMETERS: malformed body (with alerts)
        - 401 LOGIN_REQUIRED: no caller profile
        - 403 UNAUTHORIZED: permission denied
        - 404 NOT_FOUND: unknown tx code or missing record
        - 503 SERVICE_UNAVAILABLE: permissions not loaded
    """
    result = await gateway.dispatch(body, caller, request, uow)
    if result.is_err():
        raise_for_error(result.error)

    response = result.value
    return JSONResponse(
        status_code=response.code, content=response.model_dump(mode="json", exclude_none=True)
    )
