"""Pydantic models describing compilation policy and its outcome records.

All models here are frozen so the default baselines can be shared between
concurrent compiles without copying.
"""

import importlib.util
from enum import Enum
from types import ModuleType
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Options
# =============================================================================


class OutputKind(str, Enum):
    DYNAMICALLY_LINKED_LIBRARY = "library"


class OptimizationLevel(str, Enum):
    DEBUG = "debug"
    RELEASE = "release"

    @property
    def optimize(self) -> int:
        """The `optimize` argument handed to the builtin compile()."""
        return 1 if self is OptimizationLevel.RELEASE else 0


class CompilationOptions(BaseModel):
    """Options record applied to one compilation.

    The `with_*` helpers return modified copies, mirroring how options are
    layered on top of a shared default.
    """

    model_config = ConfigDict(frozen=True)

    output_kind: OutputKind = OutputKind.DYNAMICALLY_LINKED_LIBRARY
    check_overflow: bool = False
    optimization_level: OptimizationLevel = OptimizationLevel.DEBUG
    usings: tuple[str, ...] = ()
    warnings_as_errors: bool = False

    def with_usings(self, usings: Iterable[str]) -> "CompilationOptions":
        return self.model_copy(update={"usings": tuple(usings)})

    def with_overflow_checks(self, enabled: bool) -> "CompilationOptions":
        return self.model_copy(update={"check_overflow": enabled})

    def with_optimization_level(self, level: OptimizationLevel) -> "CompilationOptions":
        return self.model_copy(update={"optimization_level": OptimizationLevel(level)})

    def with_warnings_as_errors(self, enabled: bool) -> "CompilationOptions":
        return self.model_copy(update={"warnings_as_errors": enabled})


# =============================================================================
# References
# =============================================================================


class ModuleReference(BaseModel):
    """An external module the compiled code is allowed to import."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    location: str | None = None

    @classmethod
    def from_module(cls, module: ModuleType) -> "ModuleReference":
        return cls(name=module.__name__, location=getattr(module, "__file__", None))

    @property
    def top_level(self) -> str:
        return self.name.split(".")[0]

    def resolve(self) -> bool:
        """Whether the referenced module can be found by the import system."""
        try:
            return importlib.util.find_spec(self.name) is not None
        except (ImportError, ValueError):
            return False

    def __str__(self) -> str:
        return self.name


# =============================================================================
# Diagnostics
# =============================================================================


class DiagnosticSeverity(str, Enum):
    HIDDEN = "hidden"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Diagnostic(BaseModel):
    """A problem reported while parsing or generating code."""

    model_config = ConfigDict(frozen=True)

    severity: DiagnosticSeverity
    code: str
    message: str
    line: int | None = None
    column: int | None = None
    is_warning_as_error: bool = False

    @property
    def is_blocking(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR or self.is_warning_as_error

    def promoted(self) -> "Diagnostic":
        """Return this warning reported as an error."""
        if self.severity != DiagnosticSeverity.WARNING:
            return self
        return self.model_copy(
            update={"severity": DiagnosticSeverity.ERROR, "is_warning_as_error": True}
        )

    def __str__(self) -> str:
        location = f"({self.line},{self.column or 0}) " if self.line else ""
        return f"{location}{self.code}: {self.message}"


# =============================================================================
# Policy
# =============================================================================


class CompilationPolicy(BaseModel):
    """Every configuration value one compile needs, fixed before assembly."""

    model_config = ConfigDict(frozen=True)

    module_name: str
    namespaces: tuple[str, ...] = ()
    references: tuple[ModuleReference, ...] = ()
    options: CompilationOptions = CompilationOptions()
