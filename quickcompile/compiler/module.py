"""Loaded modules and the outcome of a compile request."""

import importlib
import logging
import types
import weakref
from typing import Iterable, Sequence

from ..core.errors import EmitFailure, LifetimeError
from ..core.models import Diagnostic, ModuleReference
from ..toolchain.codegen import read_image


logger = logging.getLogger(__name__)


def _bind_namespace(namespace: dict, name: str) -> None:
    """Import `name` and bind its top-level package, like `import a.b`."""
    importlib.import_module(name)
    top = name.split(".")[0]
    namespace.setdefault(top, importlib.import_module(top))


class LoadedModule:
    """An executed in-memory module and the image it was loaded from.

    The module owns everything derived from it. Instances and bound calls
    register themselves as dependents; release() refuses to run while any of
    them is still reachable.
    """

    def __init__(
        self,
        name: str,
        image: bytes,
        module: types.ModuleType,
        references: Sequence[ModuleReference] = (),
    ) -> None:
        self._name = name
        self._image = image
        self._module: types.ModuleType | None = module
        self._references = tuple(references)
        self._dependents: weakref.WeakSet = weakref.WeakSet()

    @classmethod
    def load(
        cls,
        image: bytes,
        name: str,
        usings: Iterable[str] = (),
        references: Sequence[ModuleReference] = (),
    ) -> "LoadedModule":
        """Execute an image as a fresh module.

        The module is not registered in sys.modules. Exceptions raised by the
        module body propagate to the caller.
        """
        code = read_image(image)
        module = types.ModuleType(name)
        module.__file__ = code.co_filename
        for ref in references:
            importlib.import_module(ref.name)
        for using in usings:
            _bind_namespace(module.__dict__, using)
        exec(code, module.__dict__)
        return cls(name, image, module, references)

    # -- lifetime -------------------------------------------------------------

    @property
    def is_released(self) -> bool:
        return self._module is None

    def _require_live(self) -> types.ModuleType:
        if self._module is None:
            raise LifetimeError(f"Module '{self._name}' has been released")
        return self._module

    def check_alive(self) -> None:
        self._require_live()

    def register_dependent(self, obj: object) -> None:
        self._require_live()
        self._dependents.add(obj)

    @property
    def dependent_count(self) -> int:
        return len(self._dependents)

    def release(self) -> None:
        if self._module is None:
            return
        if len(self._dependents):
            raise LifetimeError(
                f"Module '{self._name}' still has {len(self._dependents)} "
                "live instance(s) or bound call(s)"
            )
        logger.info(f"[Module] releasing {self._name}")
        self._module = None
        self._image = b""

    def __enter__(self) -> "LoadedModule":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    # -- lookup ---------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def image(self) -> bytes:
        self._require_live()
        return self._image

    @property
    def namespace(self) -> types.ModuleType:
        return self._require_live()

    @property
    def references(self) -> tuple[ModuleReference, ...]:
        return self._references

    def _defined_here(self, obj: object) -> bool:
        return isinstance(obj, type) and getattr(obj, "__module__", None) == self._name

    def get_type(self, type_name: str) -> type | None:
        """Find a class defined in this module by qualified name.

        Accepts "Outer.Inner" as well as the same name prefixed with the
        module name. Returns None when there is no such class.
        """
        module = self._require_live()
        parts = type_name.split(".") if type_name else []
        prefix = self._name.split(".")
        if parts[: len(prefix)] == prefix and len(parts) > len(prefix):
            parts = parts[len(prefix):]
        if not parts:
            return None

        obj: object = module
        for part in parts:
            obj = getattr(obj, part, None)
            if obj is None:
                return None
        if not self._defined_here(obj) or obj.__qualname__ != ".".join(parts):
            return None
        return obj

    def types(self) -> list[type]:
        """Top-level classes defined by the module, in definition order."""
        module = self._require_live()
        return [v for v in vars(module).values() if self._defined_here(v)]

    def __repr__(self) -> str:
        state = "released" if self.is_released else "loaded"
        return f"<LoadedModule {self._name} ({state})>"


class CompilationResult:
    """Either a loaded module or the diagnostics that prevented one."""

    __slots__ = ("_module", "_diagnostics")

    def __init__(
        self,
        module: LoadedModule | None,
        diagnostics: Sequence[Diagnostic] = (),
    ) -> None:
        if module is None and not diagnostics:
            raise ValueError("A failed CompilationResult needs at least one diagnostic")
        if module is not None and diagnostics:
            raise ValueError("A successful CompilationResult carries no diagnostics")
        self._module = module
        self._diagnostics = tuple(diagnostics)

    @classmethod
    def succeeded(cls, module: LoadedModule) -> "CompilationResult":
        return cls(module)

    @classmethod
    def failed(cls, diagnostics: Sequence[Diagnostic]) -> "CompilationResult":
        return cls(None, diagnostics)

    @property
    def success(self) -> bool:
        return self._module is not None

    @property
    def module(self) -> LoadedModule | None:
        return self._module

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return self._diagnostics

    @property
    def blocking_diagnostics(self) -> list[Diagnostic]:
        return [d for d in self._diagnostics if d.is_blocking]

    def unwrap(self) -> LoadedModule:
        if self._module is None:
            raise EmitFailure(self._diagnostics)
        return self._module

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        if self._module is not None:
            return f"CompilationResult(module={self._module.name!r})"
        return f"CompilationResult(errors={len(self.blocking_diagnostics)})"
