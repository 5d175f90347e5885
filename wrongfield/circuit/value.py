"""
Witness values that may be unknown.

During key generation the circuit is laid out without witnesses.  A Value
is either known (wraps an int) or unknown; every operation over an
unknown operand yields unknown, never a zero placeholder.
"""

from typing import Any, Callable, Optional


class Value:
    """Known-or-unknown witness."""

    __slots__ = ("_inner", "_known")

    def __init__(self, inner: Any = None, known: bool = False):
        self._inner = inner
        self._known = known

    @classmethod
    def known(cls, inner: Any) -> "Value":
        return cls(inner, True)

    @classmethod
    def unknown(cls) -> "Value":
        return cls(None, False)

    @classmethod
    def from_optional(cls, inner: Optional[Any]) -> "Value":
        return cls.unknown() if inner is None else cls.known(inner)

    @property
    def is_known(self) -> bool:
        return self._known

    def map(self, f: Callable[[Any], Any]) -> "Value":
        if not self._known:
            return Value.unknown()
        return Value.known(f(self._inner))

    def zip_with(self, other: "Value", f: Callable[[Any, Any], Any]) -> "Value":
        if not (self._known and other._known):
            return Value.unknown()
        return Value.known(f(self._inner, other._inner))

    def unwrap(self) -> Any:
        if not self._known:
            raise ValueError("unwrap of an unknown Value")
        return self._inner

    def unwrap_or(self, default: Any) -> Any:
        return self._inner if self._known else default

    def __eq__(self, other) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._known == other._known and self._inner == other._inner

    def __hash__(self):
        return hash((self._known, self._inner))

    def __repr__(self) -> str:
        return f"Value({self._inner!r})" if self._known else "Value(unknown)"


def combine_values(values, f: Callable[..., Any]) -> Value:
    """Apply f to the inner values when all are known."""
    values = list(values)
    if not all(v.is_known for v in values):
        return Value.unknown()
    return Value.known(f(*[v.unwrap() for v in values]))
