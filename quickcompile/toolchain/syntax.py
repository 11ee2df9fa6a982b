"""Parsing front end: source text to a syntax tree with diagnostics attached.

Syntax errors do not raise here. They are stored on the tree and reported
when the compilation is emitted, so assembling a compilation always succeeds
for anything that is text.
"""

import ast
import warnings
from dataclasses import dataclass, field

from ..core.errors import ParseFailure
from ..core.models import Diagnostic, DiagnosticSeverity


SYNTAX_ERROR = "QC1001"
SYNTAX_WARNING = "QC1002"
TOO_COMPLEX = "QC8078"

DEFAULT_PATH = "<source>"


@dataclass(frozen=True, eq=False)
class SyntaxTree:
    text: str
    root: ast.Module | None
    path: str = DEFAULT_PATH
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def has_errors(self) -> bool:
        return any(d.is_blocking for d in self.diagnostics)

    def dump(self) -> str:
        if self.root is None:
            return ""
        return ast.dump(self.root, include_attributes=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SyntaxTree):
            return NotImplemented
        return (
            self.text == other.text
            and self.path == other.path
            and self.diagnostics == other.diagnostics
            and self.dump() == other.dump()
        )

    def __hash__(self) -> int:
        return hash((self.text, self.path))


def _decode(text: str | bytes, path: str) -> str:
    if isinstance(text, bytes):
        try:
            return text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseFailure(f"source is not valid UTF-8: {e}", path) from e
    if not isinstance(text, str):
        raise ParseFailure(f"expected source text, got {type(text).__name__}", path)
    return text


def _warning_diagnostic(record: warnings.WarningMessage, code: str) -> Diagnostic:
    return Diagnostic(
        severity=DiagnosticSeverity.WARNING,
        code=code,
        message=str(record.message),
        line=record.lineno or None,
    )


def too_complex_diagnostic(error: Exception, stage: str) -> Diagnostic:
    return Diagnostic(
        severity=DiagnosticSeverity.ERROR,
        code=TOO_COMPLEX,
        message=f"An expression is too long or complex to {stage} ({type(error).__name__})",
    )


def syntax_error_diagnostic(error: SyntaxError) -> Diagnostic:
    return Diagnostic(
        severity=DiagnosticSeverity.ERROR,
        code=SYNTAX_ERROR,
        message=f"{type(error).__name__}: {error.msg}",
        line=error.lineno,
        column=error.offset,
    )


def parse_text(text: str | bytes, path: str = DEFAULT_PATH) -> SyntaxTree:
    """Parse Python source into a SyntaxTree.

    Args:
        text: Source code, as str or UTF-8 bytes
        path: Name used for the tree in diagnostics and tracebacks

    Returns:
        SyntaxTree whose diagnostics hold any syntax errors or warnings

    Raises:
        ParseFailure: If the input is not text at all
    """
    source = _decode(text, path)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", SyntaxWarning)
        try:
            root = ast.parse(source, filename=path)
        except SyntaxError as e:
            return SyntaxTree(source, None, path, (syntax_error_diagnostic(e),))
        except (RecursionError, MemoryError) as e:
            return SyntaxTree(source, None, path, (too_complex_diagnostic(e, "parse"),))
        except ValueError as e:
            # Older interpreters reject null bytes with ValueError
            raise ParseFailure(str(e), path) from e

    diagnostics = tuple(
        _warning_diagnostic(w, SYNTAX_WARNING)
        for w in caught
        if issubclass(w.category, SyntaxWarning)
    )
    return SyntaxTree(source, root, path, diagnostics)
