"""Abstract base class for configuration providers."""

from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from ..models import Diagnostic


T = TypeVar("T")

# Type for diagnostics channel callbacks: receives one blocking diagnostic
DiagnosticCallback = Callable[[Diagnostic], None]


class Provider(ABC, Generic[T]):
    """Supplies one compilation input.

    Providers are pure: calling provide() twice yields equal values. The
    module-name providers are the one exception and document it.
    """

    @abstractmethod
    def provide(self) -> T:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
