"""Global fixtures for quickcompile tests."""

import pytest

from quickcompile import compile_source


GREETER_SOURCE = '''
class Greeter:
    def greet(self, name: str) -> str:
        return "Hello, " + name
'''

CALCULATOR_SOURCE = '''
import abc


class Calculator:
    def __init__(self):
        self.total = 0
        self.log = []

    def add(self, value: int) -> int:
        self.total += value
        return self.total

    def reset(self) -> None:
        self.total = 0

    def record(self, entry: str) -> None:
        self.log.append(entry)

    def current(self) -> int:
        return self.total

    def square(self, x: int) -> int:
        return x * x

    def scale(self, x: float, factor: float) -> float:
        return x * factor

    def _hidden(self) -> int:
        return 1

    @staticmethod
    def helper(x: int) -> int:
        return x

    class Inner:
        def ping(self) -> str:
            return "pong"


class NeedsArgs:
    def __init__(self, value):
        self.value = value


class Exploding:
    def __init__(self):
        raise RuntimeError("boom")


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float:
        ...
'''

BAD_SOURCE = '''
class Bad:
    def m(self) -> None:
        return 1
'''


@pytest.fixture
def greeter_source():
    return GREETER_SOURCE


@pytest.fixture
def calculator_source():
    return CALCULATOR_SOURCE


@pytest.fixture
def bad_source():
    return BAD_SOURCE


@pytest.fixture
def greeter_module():
    """Compiled Greeter module under a fixed name."""
    return compile_source(GREETER_SOURCE, module_name="greeting").unwrap()


@pytest.fixture
def calculator_module():
    """Compiled Calculator module under a fixed name."""
    return compile_source(CALCULATOR_SOURCE, module_name="calc").unwrap()


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temporary path."""
    path = tmp_path / "config.json"
    monkeypatch.setenv("QUICKCOMPILE_CONFIG", str(path))
    return path
