"""Abstract state and integrator interfaces.

Integrators only see a ``State``: something that can report its rate of
change and apply an Euler-style update to itself. Nothing here knows about
gravity, masses or geometry.
"""

from abc import ABC, abstractmethod
from typing import Any


class State(ABC):
    """A system with a derivative and an additive progression rule."""

    @abstractmethod
    def derive(self) -> Any:
        """Return the instantaneous rate of change without mutating the state."""
        pass

    @abstractmethod
    def advance(self, duration: float, difference: Any) -> None:
        """Add ``duration * difference`` to this state in place."""
        pass


class ArithmeticState(State):
    """State that also supports the arithmetic multi-stage schemes need.

    The difference returned by ``derive()`` must support
    ``difference * duration``, producing a state delta that can be
    accumulated with ``state += delta``.

    Classes that provide ``derive``, ``advance``, ``copy`` and ``__iadd__``
    count as arithmetic states without inheriting from this class.
    """

    _required_methods = ("derive", "advance", "copy", "__iadd__")

    @classmethod
    def __subclasshook__(cls, C):
        if cls is ArithmeticState:
            for method in cls._required_methods:
                if not any(method in B.__dict__ and B.__dict__[method] is not None for B in C.__mro__):
                    return NotImplemented
            return True
        return NotImplemented

    @abstractmethod
    def copy(self) -> "ArithmeticState":
        """Return an independent clone (no shared buffers)."""
        pass

    @abstractmethod
    def __iadd__(self, delta: "ArithmeticState") -> "ArithmeticState":
        """Accumulate a state delta in place."""
        pass


class Integrator(ABC):
    """Abstract interface for numerical integrators."""

    @abstractmethod
    def step(self, state: State, dt: float) -> None:
        """Progress ``state`` in place by ``dt``.

        Args:
            state: State to advance
            dt: Time step
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this integrator."""
        pass

    @property
    @abstractmethod
    def order(self) -> int:
        """Return the order of accuracy (1 for Euler, 4 for RK4)."""
        pass
