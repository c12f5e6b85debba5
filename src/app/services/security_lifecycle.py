"""
Security Lifecycle

Owns the process-lifetime PermissionIndex and TxRouter and the readiness
state derived from loading them.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from src.app.services.permission_index import PermissionIndex
from src.app.services.tx_router import TxRouter
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SecurityState(str, Enum):
    initializing = "initializing"
    ready = "ready"
    failed = "failed"


class SecurityLifecycle:
    """
    Initializing -> Ready, or Initializing -> Failed.

    Constructed once at startup and shared by the readiness probe and the
    dispatch entry point. A failed load is reported, never retried here.
    """

    def __init__(self):
        self.state = SecurityState.initializing
        self.permissions: Optional[PermissionIndex] = None
        self.router: Optional[TxRouter] = None
        self.error: Optional[BaseException] = None
        self._loaded = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self.state == SecurityState.ready

    async def start(self, uow_factory: Callable[[], UnitOfWork]) -> bool:
        """Load permissions and transaction codes from the store"""
        if self.state != SecurityState.initializing:
            raise RuntimeError(f"Security already started: {self.state.value}")
        try:
            # Rows expire when the unit of work rolls back on exit
            async with uow_factory() as uow:
                permissions = PermissionIndex.load(await uow.security.list_permissions())
                router = TxRouter.load(await uow.security.list_transactions())
        except Exception as e:
            self.error = e
            self.state = SecurityState.failed
            logger.error(f"Security load failed: {type(e).__name__}: {e}")
            return False
        finally:
            self._loaded.set()

        self.permissions = permissions
        self.router = router
        self.state = SecurityState.ready
        logger.info(
            f"Security ready: {len(permissions)} permissions, {len(router)} transactions"
        )
        return True

    async def wait_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait for the initial load to finish. True only if it succeeded."""
        if self.state == SecurityState.initializing:
            try:
                await asyncio.wait_for(self._loaded.wait(), timeout)
            except asyncio.TimeoutError:
                return False
        return self.is_ready
