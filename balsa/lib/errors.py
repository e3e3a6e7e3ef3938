"""
Exceptions raised by the Balsa pipeline.

Every failure is a deterministic function of the template text and the
overrides, so each exception carries enough context (offset, variable name,
types, cycle) to be reported without re-running anything.

Hierarchy:
    BalsaError
    ├── TemplateSyntaxError
    ├── RegistryError      raised while building the catalogue
    ├── ResolutionError    raised while computing values
    │   └── InvalidOverridesError  (also a TypeError)
    └── RenderError        raised while producing output

Some errors belong to more than one stage: a `TypeMismatchError` may come
from a literal default (catalogue) or from an override (resolution).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


class BalsaError(Exception):
    """Base class for all engine errors."""


class RegistryError(BalsaError):
    """Failure while collecting the variable catalogue."""


class ResolutionError(BalsaError):
    """Failure while resolving variable values."""


class RenderError(BalsaError):
    """Failure while rendering output."""


@dataclass
class TemplateSyntaxError(BalsaError):
    """Malformed placeholder or unterminated delimiter."""

    offset: int
    message: str

    def __str__(self) -> str:
        return f"{self.message} at offset {self.offset}"


@dataclass
class TypeConflictError(RegistryError):
    """Two placeholders declare the same variable with different types."""

    name: str
    existingType: str
    newType: str

    def __str__(self) -> str:
        return (
            f"Variable '{self.name}' declared as '{self.existingType}' "
            f"and later as '{self.newType}'"
        )


@dataclass
class MetadataConflictError(RegistryError):
    """Two placeholders disagree on a metadata field (strict merge policy)."""

    name: str
    key: str
    existing: Any
    new: Any

    def __str__(self) -> str:
        return (
            f"Variable '{self.name}' has conflicting {self.key}: "
            f"{self.existing!r} vs {self.new!r}"
        )


@dataclass
class TypeMismatchError(RegistryError, ResolutionError):
    """A value does not belong to the variable's declared type."""

    name: str
    expectedType: str
    actualType: str
    value: Any = None

    def __str__(self) -> str:
        return (
            f"Variable '{self.name}' expects type '{self.expectedType}' "
            f"but got '{self.actualType}' value {self.value!r}"
        )


@dataclass
class CyclicDefaultError(RegistryError, ResolutionError):
    """Default values reference each other in a loop."""

    cycle: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        path = self.cycle + self.cycle[:1]
        return f"Circular default dependency: {' -> '.join(path)}"


@dataclass
class UnresolvedVariableError(ResolutionError, RenderError):
    """A variable has neither an override nor a default."""

    name: str

    def __str__(self) -> str:
        return f"Variable '{self.name}' has no value: supply an override or a default"


@dataclass
class UndeclaredVariableError(RegistryError, ResolutionError):
    """A `$name` reference or an override names no declared variable."""

    name: str
    offset: Optional[int] = None

    def __str__(self) -> str:
        where = f" at offset {self.offset}" if self.offset is not None else ""
        return f"Reference to undeclared variable '{self.name}'{where}"


@dataclass
class InvalidOverridesError(ResolutionError, TypeError):
    """Overrides were given as something other than a mapping or parameters."""

    sourceType: str

    def __str__(self) -> str:
        return (
            f"Overrides must be a mapping, BalsaParameters or AsParameters, "
            f"not {self.sourceType}"
        )
