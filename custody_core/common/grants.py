# custody_core/common/grants.py
from __future__ import annotations

import threading

from custody_core.common.errors import Unauthorized

REGISTRY = "registry"
LEDGER = "ledger"

_LOCK = threading.Lock()
_issued: dict[str, "ComponentGrant"] = {}


class ComponentGrant:
    """
    Opaque capability held by one component.

    Internal hooks (opening balances, batch allocation updates) accept a grant
    instead of trusting a caller-supplied name. Only the owning module holds
    the instance returned by `issue()`.
    """
    __slots__ = ("component",)

    def __init__(self, component: str):
        self.component = component

    def __repr__(self) -> str:
        return f"ComponentGrant({self.component!r})"


def issue(component: str) -> ComponentGrant:
    """
    Issue the grant for `component`. A component name can be issued once per
    process; the owning module does this at import time.
    """
    with _LOCK:
        if component in _issued:
            raise RuntimeError(f"Grant for component {component!r} was already issued.")
        grant = ComponentGrant(component)
        _issued[component] = grant
        return grant


def require(grant: object, component: str) -> None:
    """
    Raise Unauthorized unless `grant` is the instance issued to `component`.
    """
    expected = _issued.get(component)
    if expected is None or grant is not expected:
        raise Unauthorized(
            f"Only the {component} component may call this operation.",
            component=component,
        )
