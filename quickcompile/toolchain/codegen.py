"""Code generation back end: a Compilation and its binary image.

A Compilation bundles one syntax tree with the references and options it is
built under. emit() runs every deferred check, compiles the tree, and writes
the image to a caller-owned binary stream. The image is the interpreter's
magic number followed by the marshalled code object, so it can only be loaded
by the interpreter version that produced it.
"""

import importlib.util
import marshal
import warnings
from dataclasses import dataclass, field
from types import CodeType
from typing import BinaryIO, Iterable

from ..core.models import (
    CompilationOptions,
    CompilationPolicy,
    Diagnostic,
    DiagnosticSeverity,
    ModuleReference,
)
from .checker import check_semantics
from .syntax import (
    SYNTAX_ERROR,
    SYNTAX_WARNING,
    SyntaxTree,
    syntax_error_diagnostic,
    too_complex_diagnostic,
)


UNRESOLVED_REFERENCE = "QC0006"
INVALID_NAMESPACE = "QC0246"

IMAGE_MAGIC = importlib.util.MAGIC_NUMBER


class ImageFormatError(ValueError):
    """Bytes handed to the loader are not an image from this interpreter."""


@dataclass(frozen=True)
class EmitResult:
    success: bool
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)


def _namespace_resolves(name: str) -> bool:
    if not all(part.isidentifier() for part in name.split(".")):
        return False
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


def read_image(image: bytes) -> CodeType:
    """Decode an image written by Compilation.emit back into a code object."""
    if not image.startswith(IMAGE_MAGIC):
        raise ImageFormatError("image does not carry this interpreter's magic number")
    code = marshal.loads(image[len(IMAGE_MAGIC):])
    if not isinstance(code, CodeType):
        raise ImageFormatError("image payload is not a code object")
    return code


class Compilation:
    """One syntax tree ready for code generation."""

    def __init__(
        self,
        module_name: str,
        syntax_tree: SyntaxTree,
        references: Iterable[ModuleReference],
        options: CompilationOptions,
    ) -> None:
        self.syntax_tree = syntax_tree
        self.policy = CompilationPolicy(
            module_name=module_name,
            namespaces=tuple(options.usings),
            references=tuple(references),
            options=options,
        )

    @classmethod
    def create(
        cls,
        module_name: str,
        syntax_tree: SyntaxTree,
        references: Iterable[ModuleReference],
        options: CompilationOptions,
    ) -> "Compilation":
        return cls(module_name, syntax_tree, references, options)

    @property
    def module_name(self) -> str:
        return self.policy.module_name

    @property
    def options(self) -> CompilationOptions:
        return self.policy.options

    @property
    def references(self) -> tuple[ModuleReference, ...]:
        return self.policy.references

    def _allowed_modules(self) -> set[str]:
        allowed = {ref.top_level for ref in self.references}
        allowed.update(name.split(".")[0] for name in self.policy.namespaces)
        return allowed

    def _finalize(self, diagnostics: list[Diagnostic]) -> list[Diagnostic]:
        if not self.options.warnings_as_errors:
            return diagnostics
        return [d.promoted() for d in diagnostics]

    def get_diagnostics(self) -> list[Diagnostic]:
        """Diagnostics known before code generation, in emission order."""
        diagnostics = list(self.syntax_tree.diagnostics)

        for ref in self.references:
            if not ref.resolve():
                diagnostics.append(
                    Diagnostic(
                        severity=DiagnosticSeverity.ERROR,
                        code=UNRESOLVED_REFERENCE,
                        message=f"Referenced module '{ref.name}' could not be found",
                    )
                )

        for name in self.policy.namespaces:
            if not _namespace_resolves(name):
                diagnostics.append(
                    Diagnostic(
                        severity=DiagnosticSeverity.ERROR,
                        code=INVALID_NAMESPACE,
                        message=f"The namespace '{name}' could not be found",
                    )
                )

        if self.syntax_tree.root is not None:
            try:
                diagnostics.extend(
                    check_semantics(
                        self.syntax_tree.root,
                        allowed_modules=self._allowed_modules(),
                        check_overflow=self.options.check_overflow,
                    )
                )
            except (RecursionError, MemoryError) as e:
                diagnostics.append(too_complex_diagnostic(e, "check"))
        return self._finalize(diagnostics)

    def _generate(self) -> tuple[CodeType | None, list[Diagnostic]]:
        diagnostics: list[Diagnostic] = []
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", SyntaxWarning)
            try:
                code = compile(
                    self.syntax_tree.root,
                    self.syntax_tree.path,
                    "exec",
                    dont_inherit=True,
                    optimize=self.options.optimization_level.optimize,
                )
            except SyntaxError as e:
                return None, [syntax_error_diagnostic(e)]
            except (RecursionError, MemoryError) as e:
                return None, [too_complex_diagnostic(e, "compile")]
            except ValueError as e:
                return None, [
                    Diagnostic(
                        severity=DiagnosticSeverity.ERROR,
                        code=SYNTAX_ERROR,
                        message=f"ValueError: {e}",
                    )
                ]
        for w in caught:
            if issubclass(w.category, SyntaxWarning):
                diagnostics.append(
                    Diagnostic(
                        severity=DiagnosticSeverity.WARNING,
                        code=SYNTAX_WARNING,
                        message=str(w.message),
                        line=w.lineno or None,
                    )
                )
        return code, self._finalize(diagnostics)

    def emit(self, stream: BinaryIO) -> EmitResult:
        """Generate the module image into `stream`.

        Nothing is written unless the result is successful.
        """
        diagnostics = self.get_diagnostics()
        if any(d.is_blocking for d in diagnostics):
            return EmitResult(False, tuple(diagnostics))

        code, generated = self._generate()
        diagnostics.extend(generated)
        if code is None or any(d.is_blocking for d in diagnostics):
            return EmitResult(False, tuple(diagnostics))

        try:
            payload = marshal.dumps(code)
        except ValueError as e:
            diagnostics.append(too_complex_diagnostic(e, "emit"))
            return EmitResult(False, tuple(diagnostics))

        stream.write(IMAGE_MAGIC)
        stream.write(payload)
        return EmitResult(True, tuple(diagnostics))


__all__ = [
    "Compilation",
    "EmitResult",
    "ImageFormatError",
    "IMAGE_MAGIC",
    "UNRESOLVED_REFERENCE",
    "read_image",
]
