"""Remote method signatures, argument binding and call dispatch."""

from __future__ import annotations

from .dispatcher import AsyncDispatcher, Dispatcher
from .methods import BoundArgument, MethodSignature, MethodTable, Param

__all__ = [
    "AsyncDispatcher",
    "BoundArgument",
    "Dispatcher",
    "MethodSignature",
    "MethodTable",
    "Param",
]
