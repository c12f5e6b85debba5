import logging
from types import MappingProxyType
from typing import Any, Iterable, NamedTuple, Optional

from src.domain.entities import Transaction

logger = logging.getLogger(__name__)


class TxRoute(NamedTuple):
    object_name: str
    method_name: str

    @property
    def key(self) -> str:
        return f"{self.object_name}.{self.method_name}"


def parse_tx(value: Any) -> Optional[int]:
    """Positive integer tx code, or None. Booleans and floats are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


class TxRouter:
    """Immutable mapping from transaction code to (object, method)"""

    __slots__ = ("_routes",)

    def __init__(self, routes=None):
        self._routes = MappingProxyType(dict(routes or {}))

    @classmethod
    def load(cls, rows: Iterable[Transaction]) -> "TxRouter":
        if rows is None:
            raise ValueError("Transaction snapshot is empty")
        routes = {}
        for row in rows:
            tx = parse_tx(row.tx_number)
            if tx is None:
                logger.warning(f"Skipping malformed transaction code: {row.tx_number!r}")
                continue
            routes[tx] = TxRoute(row.object_name, row.method_name)
        return cls(routes)

    def resolve(self, tx: Any) -> Optional[TxRoute]:
        key = parse_tx(tx)
        if key is None:
            return None
        return self._routes.get(key)

    def __len__(self) -> int:
        return len(self._routes)
