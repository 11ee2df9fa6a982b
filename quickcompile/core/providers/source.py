"""Providers for the source text, its syntax tree, and the module name."""

import secrets

from ...toolchain.syntax import DEFAULT_PATH, SyntaxTree, parse_text
from .base import Provider


class CodeProvider(Provider[str]):
    """Returns the source text it was constructed with."""

    def __init__(self, code: str) -> None:
        self._code = code

    def provide(self) -> str:
        return self._code


class SyntaxTreeProvider(Provider[SyntaxTree]):
    """Parses source text into a SyntaxTree.

    The text is supplied late through with_code(), which returns a new
    provider bound to that text, so one unbound instance can be shared.
    """

    def __init__(self, code: str | None = None, path: str = DEFAULT_PATH) -> None:
        self._code = code
        self._path = path

    def with_code(self, code: str) -> "SyntaxTreeProvider":
        return SyntaxTreeProvider(code, self._path)

    def provide(self) -> SyntaxTree:
        if self._code is None:
            raise ValueError("SyntaxTreeProvider has no code; call with_code() first")
        return parse_text(self._code, self._path)


class ModuleNameProvider(Provider[str]):
    pass


class RandomModuleNameProvider(ModuleNameProvider):
    """Returns a fresh random module name on every call.

    This is the one stateful provider: each call yields a different name, so
    it must be called exactly once per compile and the result kept.
    """

    prefix = "qc_"

    def provide(self) -> str:
        return f"{self.prefix}{secrets.token_hex(8)}"


class FixedModuleNameProvider(ModuleNameProvider):
    def __init__(self, name: str) -> None:
        if not name or not all(part.isidentifier() for part in name.split(".")):
            raise ValueError(f"Module name '{name}' is not a valid dotted identifier")
        self._name = name

    def provide(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"FixedModuleNameProvider({self._name!r})"
