"""Module emitter: compiles into memory and loads the result.

This is the single pass/fail point of the pipeline. A failed emit is final
for that request; compiling again means assembling a new Compilation.
"""

import io
import logging
from typing import Iterable

from ..core.models import (
    CompilationOptions,
    Diagnostic,
    DiagnosticSeverity,
    ModuleReference,
)
from ..core.providers import (
    CodeProvider,
    DefaultCompilationOptionProvider,
    DefaultNamespaceProvider,
    DefaultReferenceProvider,
    DefaultWithAdditionalNamespaceProvider,
    DefaultWithAdditionalReferenceProvider,
    DiagnosticCallback,
    FixedModuleNameProvider,
    RandomModuleNameProvider,
    SyntaxTreeProvider,
)
from ..toolchain.codegen import Compilation
from .assembler import CompilationProvider, PythonCompilationProvider
from .module import CompilationResult, LoadedModule


logger = logging.getLogger(__name__)

MODULE_INIT_FAILED = "QC5001"


def log_diagnostic(diagnostic: Diagnostic) -> None:
    """Default diagnostics channel."""
    logger.error(str(diagnostic))


def emit(
    compilation: Compilation,
    on_diagnostic: DiagnosticCallback | None = None,
) -> CompilationResult:
    """Emit a compilation into memory and load it.

    Args:
        compilation: Assembled compilation
        on_diagnostic: Receives each blocking diagnostic of a failed emit, in
            emission order (defaults to logging them)

    Returns:
        CompilationResult holding either the module or every diagnostic
    """
    report = on_diagnostic or log_diagnostic
    name = compilation.module_name

    with io.BytesIO() as buffer:
        result = compilation.emit(buffer)

        if not result.success:
            failures = [d for d in result.diagnostics if d.is_blocking]
            logger.info(f"[Emitter] {name}: emit failed with {len(failures)} error(s)")
            for diagnostic in failures:
                report(diagnostic)
            return CompilationResult.failed(result.diagnostics)

        buffer.seek(0)
        image = buffer.read()

    try:
        module = LoadedModule.load(
            image,
            name,
            usings=compilation.options.usings,
            references=compilation.references,
        )
    except Exception as e:
        diagnostic = Diagnostic(
            severity=DiagnosticSeverity.ERROR,
            code=MODULE_INIT_FAILED,
            message=f"Module initialization failed: {type(e).__name__}: {e}",
        )
        logger.info(f"[Emitter] {name}: module body raised {type(e).__name__}")
        report(diagnostic)
        return CompilationResult.failed([diagnostic])

    logger.info(f"[Emitter] {name}: loaded {len(image)} byte image")
    return CompilationResult.succeeded(module)


class MemoryCompiler:
    """Compiles whatever its compilation provider assembles."""

    def __init__(
        self,
        compilation_provider: CompilationProvider,
        on_diagnostic: DiagnosticCallback | None = None,
    ) -> None:
        self._compilation_provider = compilation_provider
        self._on_diagnostic = on_diagnostic

    def compile(self) -> CompilationResult:
        compilation = self._compilation_provider.provide()
        return emit(compilation, self._on_diagnostic)


class DefaultMemoryCompiler(MemoryCompiler):
    """MemoryCompiler wired with every default provider."""

    def __init__(self, code: str, on_diagnostic: DiagnosticCallback | None = None) -> None:
        super().__init__(PythonCompilationProvider.default(code), on_diagnostic)


def compile_source(
    source: str,
    *,
    namespaces: Iterable[str] | None = None,
    references: Iterable[ModuleReference | str] | None = None,
    options: CompilationOptions | None = None,
    module_name: str | None = None,
    on_diagnostic: DiagnosticCallback | None = None,
) -> CompilationResult:
    """Compile source text into a loaded in-memory module.

    Args:
        source: Python source text
        namespaces: Extra modules bound into the module globals, ahead of the
            default namespaces
        references: Extra modules the source may import, ahead of the defaults
        options: Base options (library, checked, release when omitted); their
            usings are replaced by the namespaces
        module_name: Fixed module name; a random one is generated when omitted
        on_diagnostic: Diagnostics channel for failed compiles

    Returns:
        CompilationResult

    Example:
        >>> result = compile_source("class Empty:\\n    pass\\n")
        >>> result.success
        True
    """
    namespace_provider = (
        DefaultWithAdditionalNamespaceProvider(namespaces)
        if namespaces
        else DefaultNamespaceProvider()
    )
    reference_provider = (
        DefaultWithAdditionalReferenceProvider(references)
        if references
        else DefaultReferenceProvider()
    )
    name_provider = (
        FixedModuleNameProvider(module_name) if module_name else RandomModuleNameProvider()
    )
    provider = PythonCompilationProvider(
        SyntaxTreeProvider(),
        CodeProvider(source),
        name_provider,
        reference_provider,
        DefaultCompilationOptionProvider(namespace_provider, base=options),
    )
    return MemoryCompiler(provider, on_diagnostic).compile()
