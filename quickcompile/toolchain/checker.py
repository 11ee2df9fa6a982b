"""Semantic pass run at emit time.

CPython accepts a lot that a compiled-library toolchain would reject. This
pass adds the checks a caller expects before a module is handed out: return
values against annotations, imports against the declared references, dead
code, and (in checked mode) constant arithmetic that overflows.
"""

import ast
import math
import operator
import sys
from typing import Iterable

from ..core.models import Diagnostic, DiagnosticSeverity


VOID_RETURNS_VALUE = "QC0127"
LITERAL_TYPE_MISMATCH = "QC0029"
MISSING_RETURN = "QC0161"
UNREACHABLE_CODE = "QC0162"
CONSTANT_OVERFLOW = "QC0220"
UNRESOLVED_IMPORT = "QC0246"
RELATIVE_IMPORT = "QC7001"

SCALAR_TYPES = {
    "int": (int,),
    "float": (int, float),
    "str": (str,),
    "bytes": (bytes,),
    "bool": (bool,),
}

_FOLDABLE = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

# Int folding past this size is skipped; Python ints cannot overflow anyway
_MAX_INT_BITS = 4096


class _NotConstant(Exception):
    pass


def _apply(op: ast.operator, left, right):
    if isinstance(op, ast.Pow) and isinstance(left, int) and isinstance(right, int):
        if abs(right) * max(abs(left), 1).bit_length() > _MAX_INT_BITS:
            raise _NotConstant()
    try:
        return _FOLDABLE[type(op)](left, right)
    except ZeroDivisionError:
        raise _NotConstant()


def _mark_pending(stack: list, known: dict) -> None:
    for pending, expanded in stack:
        if expanded:
            known[pending] = _NotConstant


def _fold(node: ast.expr, known: dict | None = None):
    """Evaluate a numeric constant expression or raise _NotConstant.

    Evaluated in post-order with an explicit stack, so operator chains of any
    length fold without recursion. `known` caches nodes already proven not
    constant, keeping repeated folds over one chain linear.
    """
    known = {} if known is None else known
    values: list = []
    stack: list[tuple[ast.AST, bool]] = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        if known.get(current) is _NotConstant:
            _mark_pending(stack, known)
            raise _NotConstant()
        if isinstance(current, ast.Constant) and type(current.value) in (int, float):
            values.append(current.value)
        elif isinstance(current, ast.UnaryOp) and isinstance(current.op, (ast.USub, ast.UAdd)):
            if expanded:
                value = values.pop()
                values.append(-value if isinstance(current.op, ast.USub) else value)
            else:
                stack.append((current, True))
                stack.append((current.operand, False))
        elif isinstance(current, ast.BinOp) and type(current.op) in _FOLDABLE:
            if expanded:
                right = values.pop()
                left = values.pop()
                values.append(_apply(current.op, left, right))
            else:
                stack.append((current, True))
                stack.append((current.right, False))
                stack.append((current.left, False))
        else:
            known[current] = _NotConstant
            _mark_pending(stack, known)
            raise _NotConstant()
    return values[0]


def _annotation_name(annotation: ast.expr | None) -> str | None:
    if isinstance(annotation, ast.Name):
        return annotation.id
    if isinstance(annotation, ast.Constant):
        if annotation.value is None:
            return "None"
        if isinstance(annotation.value, str):
            return annotation.value.strip()
    return None


# Return annotations under which falling off the end of a function is valid
_NONE_ADMITTING = {"Any", "Optional", "NoReturn", "Never", "object"}


def _annotation_tail(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _admits_none(annotation: ast.expr) -> bool:
    """Whether an implicit `return None` satisfies the annotation."""
    pending = [annotation]
    while pending:
        node = pending.pop()
        if isinstance(node, ast.Constant):
            if node.value is None:
                return True
            if isinstance(node.value, str):
                try:
                    pending.append(ast.parse(node.value.strip(), mode="eval").body)
                except SyntaxError:
                    pass
            continue
        if _annotation_tail(node) in _NONE_ADMITTING:
            return True
        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            pending.extend((node.left, node.right))
        elif isinstance(node, ast.Subscript):
            outer = _annotation_tail(node.value)
            if outer == "Optional":
                return True
            if outer in ("Union", "Annotated"):
                inner = node.slice
                if isinstance(inner, ast.Tuple):
                    pending.extend(inner.elts if outer == "Union" else inner.elts[:1])
                else:
                    pending.append(inner)
    return False


def _is_stub(body: list[ast.stmt]) -> bool:
    """Docstring, pass and ... only."""
    for stmt in body:
        if isinstance(stmt, ast.Pass):
            continue
        if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant):
            if stmt.value.value is Ellipsis or isinstance(stmt.value.value, str):
                continue
        return False
    return True


def _own_nodes(func: ast.FunctionDef | ast.AsyncFunctionDef) -> Iterable[ast.AST]:
    """Walk a function body without descending into nested scopes."""
    scopes = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)
    stack: list[ast.AST] = [n for n in func.body if not isinstance(n, scopes)]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(
            child for child in ast.iter_child_nodes(node) if not isinstance(child, scopes)
        )


class SemanticChecker:
    """Walks a module with an explicit stack, so deeply nested expressions
    are checked without growing the interpreter stack.

    Handlers are looked up as `visit_<NodeType>`; a handler returning False
    keeps the walk out of that node's children.
    """

    def __init__(
        self,
        allowed_modules: Iterable[str] = (),
        check_overflow: bool = False,
    ) -> None:
        self.allowed_modules = set(allowed_modules) | set(sys.stdlib_module_names)
        self.check_overflow = check_overflow
        self.diagnostics: list[Diagnostic] = []
        self._not_constant: dict = {}

    def visit(self, root: ast.AST) -> None:
        stack: list[ast.AST] = [root]
        while stack:
            node = stack.pop()
            handler = getattr(self, f"visit_{type(node).__name__}", None)
            descend = handler(node) if handler is not None else True
            self._check_blocks(node)
            if descend is not False:
                # Reversed so children come off the stack in source order
                stack.extend(reversed(list(ast.iter_child_nodes(node))))

    def _report(
        self,
        node: ast.AST,
        code: str,
        message: str,
        severity: DiagnosticSeverity = DiagnosticSeverity.ERROR,
    ) -> None:
        self.diagnostics.append(
            Diagnostic(
                severity=severity,
                code=code,
                message=message,
                line=getattr(node, "lineno", None),
                column=getattr(node, "col_offset", None),
            )
        )

    # -- imports --------------------------------------------------------------

    def _check_module_name(self, node: ast.AST, name: str) -> None:
        top = name.split(".")[0]
        if top not in self.allowed_modules:
            self._report(
                node,
                UNRESOLVED_IMPORT,
                f"The module '{name}' could not be found (are you missing a reference?)",
            )

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            self._check_module_name(node, alias.name)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if node.level:
            self._report(
                node,
                RELATIVE_IMPORT,
                "Relative imports are not available in a single-module compilation",
            )
            return
        self._check_module_name(node, node.module or "")

    # -- functions ------------------------------------------------------------

    def _check_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        declared = _annotation_name(node.returns)
        own = list(_own_nodes(node))
        if any(isinstance(n, (ast.Yield, ast.YieldFrom)) for n in own):
            return

        returns = sorted(
            (n for n in own if isinstance(n, ast.Return)),
            key=lambda n: (n.lineno, n.col_offset),
        )
        valued = [r for r in returns if r.value is not None]

        if declared == "None":
            for ret in valued:
                if isinstance(ret.value, ast.Constant) and ret.value.value is None:
                    continue
                self._report(
                    ret,
                    VOID_RETURNS_VALUE,
                    f"Since '{node.name}' returns None, a return keyword must not "
                    "be followed by an object expression",
                )
            return

        if declared in SCALAR_TYPES:
            accepted = SCALAR_TYPES[declared]
            for ret in valued:
                if not isinstance(ret.value, ast.Constant):
                    continue
                value = ret.value.value
                # bool is an int subclass but not an acceptable int literal here
                if type(value) not in accepted:
                    self._report(
                        ret,
                        LITERAL_TYPE_MISMATCH,
                        f"Cannot implicitly convert type '{type(value).__name__}' "
                        f"to '{declared}' in '{node.name}'",
                    )

        if (
            node.returns is not None
            and declared != "None"
            and not valued
            and not _admits_none(node.returns)
        ):
            raises = any(isinstance(n, ast.Raise) for n in own)
            if not raises and not _is_stub(node.body):
                self._report(
                    node,
                    MISSING_RETURN,
                    f"'{node.name}': not all code paths return a value",
                )

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._check_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._check_function(node)

    # -- statements -----------------------------------------------------------

    def _check_block(self, body: list[ast.stmt]) -> None:
        for i, stmt in enumerate(body[:-1]):
            if isinstance(stmt, (ast.Return, ast.Raise, ast.Break, ast.Continue)):
                self._report(
                    body[i + 1],
                    UNREACHABLE_CODE,
                    "Unreachable code detected",
                    DiagnosticSeverity.WARNING,
                )
                break

    def _check_blocks(self, node: ast.AST) -> None:
        for name in ("body", "orelse", "finalbody"):
            block = getattr(node, name, None)
            if isinstance(block, list) and block and isinstance(block[0], ast.stmt):
                self._check_block(block)

    # -- expressions ----------------------------------------------------------

    def visit_BinOp(self, node: ast.BinOp) -> bool:
        if not self.check_overflow:
            return True
        try:
            value = _fold(node, self._not_constant)
        except OverflowError:
            value = math.inf
        except _NotConstant:
            return True
        if isinstance(value, float) and math.isinf(value):
            self._report(
                node,
                CONSTANT_OVERFLOW,
                "The operation overflows at compile time in checked mode",
            )
        # Folded as a whole; do not report nested operands again
        return False


def check_semantics(
    root: ast.Module,
    allowed_modules: Iterable[str] = (),
    check_overflow: bool = False,
) -> list[Diagnostic]:
    """Run the semantic pass over a parsed module.

    Args:
        root: Parsed module
        allowed_modules: Top-level module names the source may import in
            addition to the standard library
        check_overflow: Report constant numeric expressions that overflow

    Returns:
        Diagnostics in source order of discovery
    """
    checker = SemanticChecker(allowed_modules, check_overflow)
    checker.visit(root)
    return checker.diagnostics
