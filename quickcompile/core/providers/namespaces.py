"""Namespace providers: modules bound into every compiled module's globals."""

from typing import Iterable

from .base import Provider


DEFAULT_NAMESPACES: tuple[str, ...] = (
    "io",
    "os",
    "re",
    "json",
    "string",
    "itertools",
    "collections",
)


class NamespaceProvider(Provider[list[str]]):
    pass


class DefaultNamespaceProvider(NamespaceProvider):
    def provide(self) -> list[str]:
        return list(DEFAULT_NAMESPACES)


class DefaultWithAdditionalNamespaceProvider(NamespaceProvider):
    """Caller namespaces first, then the defaults.

    Duplicates are kept; order carries no meaning for imports.
    """

    def __init__(
        self,
        additional_namespaces: Iterable[str],
        default_provider: NamespaceProvider | None = None,
    ) -> None:
        self._additional = tuple(additional_namespaces)
        self._default_provider = default_provider or DefaultNamespaceProvider()

    def provide(self) -> list[str]:
        return [*self._additional, *self._default_provider.provide()]

    def __repr__(self) -> str:
        return f"DefaultWithAdditionalNamespaceProvider({list(self._additional)!r})"
