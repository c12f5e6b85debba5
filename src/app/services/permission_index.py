from typing import FrozenSet, Iterable, Optional, Tuple

from src.domain.entities import Permission

PermissionKey = Tuple[int, str, str]


class PermissionIndex:
    """
    Immutable set of (profile_id, method_name, object_name) grants.

    Built once from the permission table; lookups are pure and default-deny.
    """

    __slots__ = ("_grants",)

    def __init__(self, grants: FrozenSet[PermissionKey] = frozenset()):
        self._grants = frozenset(grants)

    @classmethod
    def load(cls, rows: Iterable[Permission]) -> "PermissionIndex":
        if rows is None:
            raise ValueError("Permission snapshot is empty")
        return cls(
            frozenset(
                (int(row.profile_id), row.method_name, row.object_name) for row in rows
            )
        )

    def is_allowed(self, role_id: Optional[int], method_name: str, object_name: str) -> bool:
        if role_id is None:
            return False
        return (role_id, method_name, object_name) in self._grants

    def __len__(self) -> int:
        return len(self._grants)
