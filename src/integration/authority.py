"""
Capability checks for administrative and keeper entrypoints.

Components never inherit access control; they are handed a `Policy` and ask it
before acting. Which addresses hold which capability is governance's concern.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Set

from ..core.range_bound.errors import UnauthorizedError

OPERATOR_OPERATE = "operator_operate"
OPERATOR_ADMIN = "operator_admin"
OPERATOR_POLICY = "operator_policy"
OPERATOR_EMERGENCY = "operator_emergency"
PRICE_UPDATE = "price_update"
PRICE_ADMIN = "price_admin"
HEART_ADMIN = "heart_admin"

ALL_CAPABILITIES = (
    OPERATOR_OPERATE,
    OPERATOR_ADMIN,
    OPERATOR_POLICY,
    OPERATOR_EMERGENCY,
    PRICE_UPDATE,
    PRICE_ADMIN,
    HEART_ADMIN,
)


class Policy:
    """Interface for answering "may *caller* exercise *capability*?"."""

    def allows(self, caller: str, capability: str) -> bool:
        raise NotImplementedError

    def require(self, caller: str, capability: str) -> None:
        if not self.allows(caller, capability):
            raise UnauthorizedError(caller, capability)


class OpenPolicy(Policy):
    """Allows everything. Local simulations only."""

    def allows(self, caller: str, capability: str) -> bool:
        return True


class RolePolicy(Policy):
    """Explicit capability -> holders table."""

    def __init__(self, grants: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._grants: Dict[str, Set[str]] = {}
        for capability, holders in (grants or {}).items():
            for holder in holders:
                self.grant(capability, holder)

    def grant(self, capability: str, caller: str) -> None:
        self._grants.setdefault(capability, set()).add(caller)

    def revoke(self, capability: str, caller: str) -> None:
        self._grants.get(capability, set()).discard(caller)

    def allows(self, caller: str, capability: str) -> bool:
        return caller in self._grants.get(capability, ())

    def holders(self, capability: str) -> Set[str]:
        return set(self._grants.get(capability, ()))


OPEN_POLICY = OpenPolicy()
