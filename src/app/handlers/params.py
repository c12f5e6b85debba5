"""
Transaction params parsing

Handlers receive params as whatever JSON the client sent (null, string,
number or object). These helpers turn them into pydantic commands and
report problems as INVALID_PARAMETERS alerts.
"""

from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.app.errors import Errors
from src.core.result import Result, Return

T = TypeVar("T", bound=BaseModel)


def validation_alerts(error: ValidationError) -> List[str]:
    """One alert per failing field. Input values are never echoed back."""
    alerts = []
    for item in error.errors(include_input=False, include_url=False):
        location = ".".join(str(part) for part in item["loc"]) or "params"
        alerts.append(f"{location}: {item['msg']}")
    return alerts


def parse_params(model: Type[T], params: Any, scalar_field: Optional[str] = None) -> Result[T]:
    """
    Validate params against a command model.

    A bare string or number is accepted for operations that take a single
    value and is bound to ``scalar_field``.
    """
    if params is None:
        data = {}
    elif isinstance(params, dict):
        data = params
    elif scalar_field is not None:
        data = {scalar_field: params}
    else:
        return Return.err(Errors.invalid_parameters(["params must be an object"]))

    try:
        return Return.ok(model.model_validate(data))
    except ValidationError as e:
        return Return.err(Errors.invalid_parameters(validation_alerts(e)))
