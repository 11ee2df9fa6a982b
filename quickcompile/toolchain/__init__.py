"""Language toolchain used by the compiler: CPython's own front and back end.

Pipeline:
    parse_text() - Source text to SyntaxTree (syntax errors kept as diagnostics)
    check_semantics() - Deferred checks run at emit time
    Compilation.emit() - Code object written as a binary image
"""

from .syntax import SyntaxTree, parse_text
from .checker import check_semantics
from .codegen import Compilation, EmitResult, ImageFormatError, read_image

__all__ = [
    "SyntaxTree",
    "parse_text",
    "check_semantics",
    "Compilation",
    "EmitResult",
    "ImageFormatError",
    "read_image",
]
