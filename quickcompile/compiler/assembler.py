"""Compilation assembler: composes the providers into one Compilation.

Steps:
    1. Obtain the source text
    2. Parse it into a SyntaxTree
    3. Obtain the module name (exactly once)
    4. Obtain the references
    5. Obtain the options (which pull the namespaces)
    6. Combine everything under the module name

Semantic and type errors are not classified here; they are left in the
Compilation and surface when it is emitted.
"""

import logging
from dataclasses import dataclass

from ..core.models import CompilationPolicy
from ..core.providers import (
    CodeProvider,
    CompilationOptionProvider,
    DefaultCompilationOptionProvider,
    DefaultNamespaceProvider,
    DefaultReferenceProvider,
    ModuleNameProvider,
    Provider,
    RandomModuleNameProvider,
    ReferenceProvider,
    SyntaxTreeProvider,
)
from ..toolchain.codegen import Compilation
from ..toolchain.syntax import SyntaxTree


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilationUnit:
    source: str
    syntax_tree: SyntaxTree


class CompilationProvider(Provider[Compilation]):
    pass


class PythonCompilationProvider(CompilationProvider):
    def __init__(
        self,
        syntax_tree_provider: SyntaxTreeProvider,
        code_provider: CodeProvider,
        module_name_provider: ModuleNameProvider,
        reference_provider: ReferenceProvider,
        compilation_option_provider: CompilationOptionProvider,
    ) -> None:
        self._syntax_tree_provider = syntax_tree_provider
        self._code_provider = code_provider
        self._module_name_provider = module_name_provider
        self._reference_provider = reference_provider
        self._compilation_option_provider = compilation_option_provider

    @classmethod
    def default(cls, code: str) -> "PythonCompilationProvider":
        return cls(
            SyntaxTreeProvider(),
            CodeProvider(code),
            RandomModuleNameProvider(),
            DefaultReferenceProvider(),
            DefaultCompilationOptionProvider(DefaultNamespaceProvider()),
        )

    def provide(self) -> Compilation:
        code = self._code_provider.provide()
        syntax_tree = self._syntax_tree_provider.with_code(code).provide()

        module_name = self._module_name_provider.provide()
        references = self._reference_provider.provide()
        options = self._compilation_option_provider.provide()

        logger.info(
            f"[Assembler] {module_name}: {len(code)} chars, "
            f"{len(references)} references, {len(options.usings)} usings"
        )

        return Compilation.create(module_name, syntax_tree, references, options)


def assemble(
    provider: CompilationProvider,
) -> tuple[CompilationUnit, CompilationPolicy, Compilation]:
    """Run a compilation provider and expose the unit and policy it fixed.

    Returns:
        Tuple of (unit, policy, compilation)
    """
    compilation = provider.provide()
    tree = compilation.syntax_tree
    unit = CompilationUnit(source=tree.text, syntax_tree=tree)
    return unit, compilation.policy, compilation
