"""Runtime layer: instances of compiled types and calls bound to their methods."""

from .binder import (
    BoundCall,
    DynamicInstance,
    MethodSignature,
    bind_method,
    create_instance,
    invoke,
)

__all__ = [
    "BoundCall",
    "DynamicInstance",
    "MethodSignature",
    "bind_method",
    "create_instance",
    "invoke",
]
