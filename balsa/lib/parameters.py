"""
Override parameters.

`BalsaParameters` is an immutable builder for typed overrides:

    params = (
        BalsaParameters()
        .string("headerText", "Hello world!")
        .number("currentYear", 2024)
        .color("accent", "#ff0000")
    )

Any object with an `as_parameters()` method returning `BalsaParameters`
satisfies the `AsParameters` protocol and can be passed wherever overrides
are accepted, as can a plain mapping of names to Python values.
"""

from typing import Any, Mapping, Protocol, Self, runtime_checkable
from pydantic import BaseModel, ConfigDict, Field
from balsa.lib.errors import InvalidOverridesError
from balsa.lib.typecheck import color_isValid
from balsa.models.dataModel import TypedValue, VarType


class BalsaParameters(BaseModel):
    """Immutable name → TypedValue map built one value at a time.

    Every builder method returns a new instance; the receiver is unchanged.
    """

    model_config = ConfigDict(frozen=True)

    values: dict[str, TypedValue] = Field(default_factory=dict)

    def _insert(self: Self, name: str, value: TypedValue) -> "BalsaParameters":
        return BalsaParameters(values={**self.values, name: value})

    def string(self: Self, name: str, value: str) -> "BalsaParameters":
        return self._insert(name, TypedValue(type=VarType.STRING, value=value))

    def number(self: Self, name: str, value: int | float) -> "BalsaParameters":
        return self._insert(name, TypedValue(type=VarType.NUMBER, value=value))

    def boolean(self: Self, name: str, value: bool) -> "BalsaParameters":
        return self._insert(name, TypedValue(type=VarType.BOOLEAN, value=value))

    def color(self: Self, name: str, value: str) -> "BalsaParameters":
        """Add a CSS color value.

        Raises:
            ValueError: If `value` is not a valid CSS color
        """
        if not color_isValid(value):
            raise ValueError(f"'{value}' is not a valid CSS color")
        return self._insert(name, TypedValue(type=VarType.COLOR, value=value.strip()))

    def get(self: Self, name: str) -> TypedValue | None:
        return self.values.get(name)

    def names(self: Self) -> list[str]:
        return list(self.values)

    def __contains__(self: Self, name: object) -> bool:
        return name in self.values


@runtime_checkable
class AsParameters(Protocol):
    """Protocol for objects that can supply template overrides."""

    def as_parameters(self: Self) -> BalsaParameters:
        """Transform the object into a parameter list."""
        ...


def parameters_normalize(source: Any) -> dict[str, Any]:
    """Turn any accepted override source into a plain dict.

    Args:
        source: None, a mapping of name to value, a BalsaParameters, or an
            object implementing AsParameters

    Returns:
        A new dict of name → value (TypedValue or plain Python value)

    Raises:
        InvalidOverridesError: For any other kind of source (a TypeError)
    """
    if source is None:
        return {}
    if isinstance(source, BalsaParameters):
        return dict(source.values)
    if isinstance(source, AsParameters):
        return parameters_normalize(source.as_parameters())
    if isinstance(source, Mapping):
        return dict(source)
    raise InvalidOverridesError(sourceType=type(source).__name__)
