"""Compilation option providers."""

from ..models import CompilationOptions, OptimizationLevel, OutputKind
from .base import Provider
from .namespaces import NamespaceProvider


DEFAULT_COMPILATION_OPTIONS = CompilationOptions(
    output_kind=OutputKind.DYNAMICALLY_LINKED_LIBRARY,
    check_overflow=True,
    optimization_level=OptimizationLevel.RELEASE,
)


class CompilationOptionProvider(Provider[CompilationOptions]):
    pass


class DefaultCompilationOptionProvider(CompilationOptionProvider):
    """Base options with the usings taken from a namespace provider.

    Args:
        namespace_provider: Supplies the usings on every call
        base: Options to layer the usings onto (library, checked, release
            when omitted)
    """

    def __init__(
        self,
        namespace_provider: NamespaceProvider,
        base: CompilationOptions | None = None,
    ) -> None:
        self._namespace_provider = namespace_provider
        self._base = base or DEFAULT_COMPILATION_OPTIONS

    def provide(self) -> CompilationOptions:
        return self._base.with_usings(self._namespace_provider.provide())
