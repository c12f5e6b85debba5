import functools
import logging
from typing import Callable, Dict, Mapping, Tuple

from src.app.handlers.base import BusinessHandler, Operation
from src.domain.entities import BusinessObject

logger = logging.getLogger(__name__)


class HandlerResolutionError(Exception):
    """Raised when (object, method) does not resolve to a callable operation"""

    def __init__(self, object_name: str, method_name: str, reason: str):
        self.object_name = object_name
        self.method_name = method_name
        self.reason = reason
        super().__init__(f"{object_name}.{method_name}: {reason}")


class HandlerRegistry:
    """
    Lazily constructed business handlers, one instance per object.

    The set of objects is closed (BusinessObject); each maps to a factory
    registered at startup. The first call for an object builds its handler,
    later calls for any of its methods reuse it. Construction never awaits,
    and inserts use setdefault, so racing requests at worst build a
    duplicate that is dropped.
    """

    def __init__(self, factories: Mapping[BusinessObject, Callable[[], BusinessHandler]]):
        self._factories = dict(factories)
        self._instances: Dict[BusinessObject, BusinessHandler] = {}
        self._operations: Dict[Tuple[BusinessObject, str], Operation] = {}

    def resolve(self, object_name: str, method_name: str) -> Operation:
        try:
            business_object = BusinessObject(object_name)
        except ValueError:
            raise HandlerResolutionError(object_name, method_name, "unknown object") from None

        key = (business_object, method_name)
        operation = self._operations.get(key)
        if operation is not None:
            return operation

        handler = self._instance(business_object)
        fn = type(handler).operations.get(method_name)
        if fn is None:
            raise HandlerResolutionError(object_name, method_name, "unknown method")

        return self._operations.setdefault(key, functools.partial(fn, handler))

    def _instance(self, business_object: BusinessObject) -> BusinessHandler:
        handler = self._instances.get(business_object)
        if handler is not None:
            return handler

        factory = self._factories.get(business_object)
        if factory is None:
            raise HandlerResolutionError(business_object.value, "*", "no handler registered")
        try:
            handler = factory()
        except Exception as e:
            raise HandlerResolutionError(
                business_object.value, "*", f"construction failed: {type(e).__name__}"
            ) from e

        logger.debug(f"Loaded handler for {business_object.value}")
        return self._instances.setdefault(business_object, handler)

    def loaded_objects(self) -> Tuple[BusinessObject, ...]:
        return tuple(self._instances)
