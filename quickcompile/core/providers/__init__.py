"""Configuration providers, one per compilation input."""

from .base import DiagnosticCallback, Provider
from .source import (
    CodeProvider,
    SyntaxTreeProvider,
    ModuleNameProvider,
    RandomModuleNameProvider,
    FixedModuleNameProvider,
)
from .namespaces import (
    DEFAULT_NAMESPACES,
    NamespaceProvider,
    DefaultNamespaceProvider,
    DefaultWithAdditionalNamespaceProvider,
)
from .references import (
    DEFAULT_REFERENCES,
    ReferenceProvider,
    DefaultReferenceProvider,
    DefaultWithAdditionalReferenceProvider,
    as_reference,
)
from .options import (
    DEFAULT_COMPILATION_OPTIONS,
    CompilationOptionProvider,
    DefaultCompilationOptionProvider,
)

__all__ = [
    "DiagnosticCallback",
    "Provider",
    # Source
    "CodeProvider",
    "SyntaxTreeProvider",
    "ModuleNameProvider",
    "RandomModuleNameProvider",
    "FixedModuleNameProvider",
    # Namespaces
    "DEFAULT_NAMESPACES",
    "NamespaceProvider",
    "DefaultNamespaceProvider",
    "DefaultWithAdditionalNamespaceProvider",
    # References
    "DEFAULT_REFERENCES",
    "ReferenceProvider",
    "DefaultReferenceProvider",
    "DefaultWithAdditionalReferenceProvider",
    "as_reference",
    # Options
    "DEFAULT_COMPILATION_OPTIONS",
    "CompilationOptionProvider",
    "DefaultCompilationOptionProvider",
]
