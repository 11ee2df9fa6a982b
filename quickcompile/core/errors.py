"""Exceptions raised by the compile and invoke pipeline.

Every recoverable failure derives from QuickCompileError and is raised to the
immediate caller of the failing operation. Nothing in the pipeline retries.
"""

from typing import Sequence


class QuickCompileError(Exception):
    """Base class for recoverable pipeline failures."""


class ParseFailure(QuickCompileError):
    """Source text could not be turned into a syntax tree at all."""

    def __init__(self, message: str, path: str = "<source>") -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class EmitFailure(QuickCompileError):
    """Code generation produced blocking diagnostics; no module was created."""

    def __init__(self, diagnostics: Sequence) -> None:
        self.diagnostics = list(diagnostics)
        blocking = [d for d in self.diagnostics if d.is_blocking]
        lines = [str(d) for d in blocking] or ["emit failed without diagnostics"]
        super().__init__(
            f"Compilation failed with {len(blocking)} error(s):\n" + "\n".join(lines)
        )


class TypeNotFound(QuickCompileError):
    def __init__(self, type_name: str, module_name: str | None = None) -> None:
        where = f" in module '{module_name}'" if module_name else ""
        super().__init__(f"Type '{type_name}' not found{where}")
        self.type_name = type_name
        self.module_name = module_name


class ConstructionFailure(QuickCompileError):
    def __init__(self, type_name: str, reason: str) -> None:
        super().__init__(f"Cannot construct '{type_name}': {reason}")
        self.type_name = type_name
        self.reason = reason


class MethodNotFound(QuickCompileError):
    def __init__(
        self,
        type_name: str,
        method_name: str,
        signature,
        reason: str | None = None,
    ) -> None:
        message = (
            f"No method '{method_name}' matching {signature.describe()} "
            f"on type '{type_name}'"
        )
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.type_name = type_name
        self.method_name = method_name
        self.signature = signature
        self.reason = reason


class LifetimeError(RuntimeError):
    """A loaded module was released while derived objects were still reachable,
    or something derived from a released module was used.

    This is a programming error, not part of the QuickCompileError taxonomy.
    """
