"""Dynamic invocation over types defined in a loaded module.

A DynamicInstance holds one default-constructed object of a compiled type.
Methods on it are bound by name and exact signature into BoundCall objects;
all checking happens at bind time, so invoking a BoundCall is a plain call.

Signatures are compared against the method's resolved annotations:
unannotated parameters and returns count as typing.Any, and a return
annotation of None means the method produces no result.
"""

import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any

from ..compiler.module import LoadedModule
from ..core.errors import ConstructionFailure, MethodNotFound, TypeNotFound


logger = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def _normalize_return(annotation: Any) -> Any:
    if annotation is None or annotation is type(None):
        return None
    return annotation


def _type_name(tp: Any) -> str:
    if tp is None:
        return "None"
    if isinstance(tp, type) and not typing.get_args(tp):
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


@dataclass(frozen=True)
class MethodSignature:
    """Parameter types and optional result type requested by a caller."""

    parameters: tuple[Any, ...] = ()
    returns: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "returns", _normalize_return(self.returns))

    @classmethod
    def action(cls, *parameters: Any) -> "MethodSignature":
        return cls(parameters, None)

    @classmethod
    def func(cls, returns: Any, *parameters: Any) -> "MethodSignature":
        return cls(parameters, returns)

    @property
    def has_result(self) -> bool:
        return self.returns is not None

    def describe(self) -> str:
        params = ", ".join(_type_name(p) for p in self.parameters)
        return f"({params}) -> {_type_name(self.returns)}"

    def __str__(self) -> str:
        return self.describe()


def _is_public(name: str) -> bool:
    return not name.startswith("_") or (name.startswith("__") and name.endswith("__"))


def _method_signature(function) -> MethodSignature | str:
    """Signature of an instance method, or the reason it has none we can match."""
    try:
        params = list(inspect.signature(function).parameters.values())[1:]
    except (TypeError, ValueError) as e:
        return f"signature unavailable: {e}"

    for p in params:
        if p.kind not in _POSITIONAL:
            return f"parameter '{p.name}' is not positional"

    try:
        hints = typing.get_type_hints(function)
    except Exception as e:
        return f"annotations could not be resolved: {e}"

    return MethodSignature(
        tuple(hints.get(p.name, Any) for p in params),
        hints.get("return", Any),
    )


class DynamicInstance:
    """A live, default-constructed object of a type from a LoadedModule."""

    def __init__(self, module: LoadedModule, type_name: str) -> None:
        cls = module.get_type(type_name)
        if cls is None:
            raise TypeNotFound(type_name, module.name)

        self._module = module
        self._type_name = type_name
        self._type = cls
        self._object = self._construct(cls, type_name)
        module.register_dependent(self)

    @staticmethod
    def _construct(cls: type, type_name: str) -> object:
        if inspect.isabstract(cls):
            raise ConstructionFailure(type_name, "type is abstract")
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            signature = None
        if signature is not None:
            required = [
                p.name
                for p in signature.parameters.values()
                if p.default is inspect.Parameter.empty
                and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
            ]
            if required:
                raise ConstructionFailure(
                    type_name,
                    f"no parameterless constructor (requires {', '.join(required)})",
                )
        try:
            return cls()
        except Exception as e:
            raise ConstructionFailure(type_name, f"{type(e).__name__}: {e}") from e

    @property
    def module(self) -> LoadedModule:
        return self._module

    @property
    def type(self) -> type:
        return self._type

    @property
    def type_name(self) -> str:
        return self._type_name

    @property
    def target(self) -> object:
        self._module.check_alive()
        return self._object

    def bind(self, method_name: str, signature: MethodSignature) -> "BoundCall":
        """Resolve `method_name` with exactly `signature` on this instance.

        Raises:
            MethodNotFound: No public instance method with that name and
                exact parameter and return types
        """
        def not_found(reason: str) -> MethodNotFound:
            return MethodNotFound(self._type_name, method_name, signature, reason)

        if not _is_public(method_name):
            raise not_found("method is not public")
        try:
            attr = inspect.getattr_static(self._type, method_name)
        except AttributeError:
            raise not_found("no such member") from None
        if not inspect.isfunction(attr):
            raise not_found("member is not an instance method")

        found = _method_signature(attr)
        if isinstance(found, str):
            raise not_found(found)
        if found.parameters != signature.parameters:
            raise not_found(f"declared {found.describe()}")
        if found.returns != signature.returns:
            raise not_found(f"declared {found.describe()}")

        logger.info(f"[Binder] bound {self._type_name}.{method_name}{signature.describe()}")
        return BoundCall(self, method_name, signature, attr.__get__(self._object, self._type))

    # Call shapes -------------------------------------------------------------

    def bind_action(self, method_name: str, *parameter_types: Any) -> "BoundCall":
        return self.bind(method_name, MethodSignature.action(*parameter_types))

    def bind_func(self, method_name: str, returns: Any, *parameter_types: Any) -> "BoundCall":
        return self.bind(method_name, MethodSignature.func(returns, *parameter_types))

    def action(self, method_name: str, *args: Any) -> None:
        """Bind a no-result method using the argument types and call it."""
        self.bind_action(method_name, *(type(a) for a in args))(*args)

    def func(self, method_name: str, returns: Any, *args: Any) -> Any:
        """Bind a method returning `returns` using the argument types and call it."""
        return self.bind_func(method_name, returns, *(type(a) for a in args))(*args)

    def __repr__(self) -> str:
        return f"<DynamicInstance {self._type_name} from {self._module.name}>"


class BoundCall:
    """A method resolved against one instance with a fixed signature."""

    def __init__(
        self,
        instance: DynamicInstance,
        method_name: str,
        signature: MethodSignature,
        function,
    ) -> None:
        self._instance = instance
        self._method_name = method_name
        self._signature = signature
        self._function = function
        instance.module.register_dependent(self)

    @property
    def instance(self) -> DynamicInstance:
        return self._instance

    @property
    def method_name(self) -> str:
        return self._method_name

    @property
    def signature(self) -> MethodSignature:
        return self._signature

    def __call__(self, *args: Any) -> Any:
        # Argument types were fixed at bind time and are not checked again
        self._instance.module.check_alive()
        result = self._function(*args)
        return result if self._signature.has_result else None

    def __repr__(self) -> str:
        return (
            f"<BoundCall {self._instance.type_name}.{self._method_name}"
            f"{self._signature.describe()}>"
        )


def create_instance(module: LoadedModule, type_name: str) -> DynamicInstance:
    """Instantiate a type from `module` with its parameterless constructor.

    Raises:
        TypeNotFound: The module defines no type with that qualified name
        ConstructionFailure: The type cannot be built without arguments
    """
    return DynamicInstance(module, type_name)


def bind_method(
    instance: DynamicInstance,
    method_name: str,
    signature: MethodSignature,
) -> BoundCall:
    return instance.bind(method_name, signature)


def invoke(call: BoundCall, *args: Any) -> Any:
    return call(*args)
