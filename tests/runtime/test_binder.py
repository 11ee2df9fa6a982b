"""Tests for dynamic instances and method binding."""

from typing import Any

import pytest

from quickcompile import compile_source
from quickcompile.core.errors import (
    ConstructionFailure,
    LifetimeError,
    MethodNotFound,
    TypeNotFound,
)
from quickcompile.runtime import (
    BoundCall,
    DynamicInstance,
    MethodSignature,
    bind_method,
    create_instance,
    invoke,
)


class TestMethodSignature:
    def test_action_has_no_result(self):
        signature = MethodSignature.action(str)
        assert signature.parameters == (str,)
        assert not signature.has_result

    def test_func_puts_result_first(self):
        signature = MethodSignature.func(int, str, float)
        assert signature.parameters == (str, float)
        assert signature.returns is int

    def test_none_type_means_no_result(self):
        assert MethodSignature((), type(None)) == MethodSignature.action()

    def test_describe(self):
        assert MethodSignature.func(int, int).describe() == "(int) -> int"
        assert MethodSignature.action().describe() == "() -> None"
        assert MethodSignature.func(Any, Any).describe() == "(Any) -> Any"

    def test_parameters_become_tuple(self):
        assert MethodSignature([int, str], None).parameters == (int, str)


class TestCreateInstance:
    def test_default_constructor(self, calculator_module):
        instance = create_instance(calculator_module, "Calculator")

        assert isinstance(instance, DynamicInstance)
        assert instance.type is calculator_module.get_type("Calculator")
        assert instance.type_name == "Calculator"
        assert instance.target.total == 0
        assert instance.module is calculator_module

    def test_nested_type(self, calculator_module):
        inner = create_instance(calculator_module, "Calculator.Inner")
        assert inner.bind_func("ping", str)() == "pong"

    def test_type_not_found(self, calculator_module):
        with pytest.raises(TypeNotFound) as exc_info:
            create_instance(calculator_module, "Nonexistent.Type")

        assert exc_info.value.type_name == "Nonexistent.Type"
        assert "calc" in str(exc_info.value)

    def test_requires_arguments(self, calculator_module):
        with pytest.raises(ConstructionFailure, match="value"):
            create_instance(calculator_module, "NeedsArgs")

    def test_abstract_type(self, calculator_module):
        with pytest.raises(ConstructionFailure, match="abstract"):
            create_instance(calculator_module, "Shape")

    def test_constructor_raises(self, calculator_module):
        with pytest.raises(ConstructionFailure) as exc_info:
            create_instance(calculator_module, "Exploding")

        assert "boom" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_instances_are_independent(self, calculator_module):
        first = create_instance(calculator_module, "Calculator")
        second = create_instance(calculator_module, "Calculator")

        first.bind_func("add", int, int)(5)
        assert second.target.total == 0


class TestBind:
    """Binding by exact name and signature."""

    @pytest.fixture
    def calculator(self, calculator_module):
        return create_instance(calculator_module, "Calculator")

    def test_func_call(self, calculator):
        square = calculator.bind("square", MethodSignature.func(int, int))

        assert isinstance(square, BoundCall)
        assert square(7) == 49

    def test_state_is_kept_between_calls(self, calculator):
        add = calculator.bind_func("add", int, int)
        add(2)
        assert add(3) == 5
        assert calculator.bind_func("current", int)() == 5

    def test_action_call_returns_none(self, calculator):
        record = calculator.bind_action("record", str)

        assert record("first") is None
        assert calculator.target.log == ["first"]

    def test_multiple_parameters(self, calculator):
        scale = calculator.bind_func("scale", float, float, float)
        assert scale(2.0, 1.5) == 3.0

    def test_wrong_parameter_types(self, calculator):
        with pytest.raises(MethodNotFound) as exc_info:
            calculator.bind("square", MethodSignature.func(int, str))

        assert "declared (int) -> int" in str(exc_info.value)
        assert exc_info.value.method_name == "square"

    def test_wrong_return_type(self, calculator):
        with pytest.raises(MethodNotFound):
            calculator.bind_func("square", float, int)

    def test_result_requested_from_action(self, calculator):
        with pytest.raises(MethodNotFound):
            calculator.bind_func("reset", int)

    def test_action_requested_from_func(self, calculator):
        with pytest.raises(MethodNotFound):
            calculator.bind_action("square", int)

    def test_wrong_arity(self, calculator):
        with pytest.raises(MethodNotFound):
            calculator.bind_func("scale", float, float)

    def test_missing_method(self, calculator):
        with pytest.raises(MethodNotFound, match="no such member"):
            calculator.bind_action("missing")

    def test_private_method(self, calculator):
        with pytest.raises(MethodNotFound, match="not public"):
            calculator.bind_func("_hidden", int)

    def test_static_method_is_not_an_instance_method(self, calculator):
        with pytest.raises(MethodNotFound, match="not an instance method"):
            calculator.bind_func("helper", int, int)

    def test_attribute_is_not_a_method(self, calculator):
        with pytest.raises(MethodNotFound):
            calculator.bind_action("Inner")

    def test_exceptions_from_the_method_propagate(self):
        source = "class Failing:\n    def run(self) -> None:\n        raise KeyError('x')\n"
        instance = create_instance(compile_source(source).unwrap(), "Failing")

        with pytest.raises(KeyError):
            instance.bind_action("run")()


class TestAnnotationResolution:
    def test_postponed_annotations(self):
        source = (
            "from __future__ import annotations\n"
            "\n"
            "class Doubler:\n"
            "    def double(self, x: int) -> int:\n"
            "        return x * 2\n"
        )
        instance = create_instance(compile_source(source).unwrap(), "Doubler")
        assert instance.bind_func("double", int, int)(4) == 8

    def test_unannotated_method_binds_with_any(self):
        source = "class Echo:\n    def echo(self, value):\n        return value\n"
        instance = create_instance(compile_source(source).unwrap(), "Echo")

        assert instance.bind_func("echo", Any, Any)([1]) == [1]
        with pytest.raises(MethodNotFound):
            instance.bind_func("echo", str, str)

    def test_keyword_only_parameters_are_rejected(self):
        source = "class Opts:\n    def run(self, *, flag: bool) -> None:\n        pass\n"
        instance = create_instance(compile_source(source).unwrap(), "Opts")

        with pytest.raises(MethodNotFound, match="not positional"):
            instance.bind_action("run", bool)


class TestShortcuts:
    def test_func_infers_parameter_types(self, calculator_module):
        calculator = create_instance(calculator_module, "Calculator")
        assert calculator.func("square", int, 6) == 36

    def test_action_infers_parameter_types(self, calculator_module):
        calculator = create_instance(calculator_module, "Calculator")
        calculator.action("record", "entry")
        assert calculator.target.log == ["entry"]

    def test_function_api(self, greeter_module):
        instance = create_instance(greeter_module, "Greeter")
        call = bind_method(instance, "greet", MethodSignature.func(str, str))
        assert invoke(call, "Ada") == "Hello, Ada"


class TestBoundCallLifetime:
    def test_release_refused_while_call_is_alive(self, greeter_source):
        module = compile_source(greeter_source).unwrap()
        call = create_instance(module, "Greeter").bind_func("greet", str, str)

        with pytest.raises(LifetimeError):
            module.release()

        assert not module.is_released
        assert call("World") == "Hello, World"

    def test_call_after_release_raises(self, greeter_source):
        module = compile_source(greeter_source).unwrap()
        instance = create_instance(module, "Greeter")
        call = instance.bind_func("greet", str, str)

        # release() refuses while this call is alive, so the released state
        # is only reachable here by clearing the module handle directly
        module._module = None

        with pytest.raises(LifetimeError):
            call("World")
        with pytest.raises(LifetimeError):
            instance.target
