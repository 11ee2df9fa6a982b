"""Reference providers: external modules compiled code may import."""

import builtins
import itertools
import socket
from typing import Iterable

from ..models import ModuleReference
from .base import Provider


# Core runtime, networking primitives, sequence operations
DEFAULT_REFERENCES: tuple[ModuleReference, ...] = (
    ModuleReference.from_module(builtins),
    ModuleReference.from_module(socket),
    ModuleReference.from_module(itertools),
)


def as_reference(value: "ModuleReference | str") -> ModuleReference:
    if isinstance(value, ModuleReference):
        return value
    return ModuleReference(name=value)


class ReferenceProvider(Provider[list[ModuleReference]]):
    pass


class DefaultReferenceProvider(ReferenceProvider):
    def provide(self) -> list[ModuleReference]:
        return list(DEFAULT_REFERENCES)


class DefaultWithAdditionalReferenceProvider(ReferenceProvider):
    """Caller references first, then the defaults."""

    def __init__(
        self,
        additional_references: Iterable["ModuleReference | str"],
        default_provider: ReferenceProvider | None = None,
    ) -> None:
        self._additional = tuple(as_reference(r) for r in additional_references)
        self._default_provider = default_provider or DefaultReferenceProvider()

    def provide(self) -> list[ModuleReference]:
        return [*self._additional, *self._default_provider.provide()]

    def __repr__(self) -> str:
        names = [r.name for r in self._additional]
        return f"DefaultWithAdditionalReferenceProvider({names!r})"
