"""Compiler layer: assembles providers into a compilation and emits it.

Pipeline:
    Step 1: PythonCompilationProvider.provide() - Assemble the Compilation
    Step 2: emit() - Generate the image in memory and load it
    Step 3: CompilationResult - Module handle or diagnostics
"""

from .assembler import (
    CompilationProvider,
    CompilationUnit,
    PythonCompilationProvider,
    assemble,
)
from .emitter import (
    DefaultMemoryCompiler,
    MemoryCompiler,
    compile_source,
    emit,
)
from .module import CompilationResult, LoadedModule

__all__ = [
    "CompilationProvider",
    "CompilationUnit",
    "PythonCompilationProvider",
    "assemble",
    "DefaultMemoryCompiler",
    "MemoryCompiler",
    "compile_source",
    "emit",
    "CompilationResult",
    "LoadedModule",
]
