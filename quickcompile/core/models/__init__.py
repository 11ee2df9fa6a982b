"""Data models for quickcompile.

This package contains the Pydantic models shared across the pipeline:
- compilation.py: options, references, diagnostics and the compilation policy
"""

from .compilation import (
    # Options
    OutputKind,
    OptimizationLevel,
    CompilationOptions,
    # References
    ModuleReference,
    # Diagnostics
    DiagnosticSeverity,
    Diagnostic,
    # Policy
    CompilationPolicy,
)

__all__ = [
    # Options
    "OutputKind",
    "OptimizationLevel",
    "CompilationOptions",
    # References
    "ModuleReference",
    # Diagnostics
    "DiagnosticSeverity",
    "Diagnostic",
    # Policy
    "CompilationPolicy",
]
