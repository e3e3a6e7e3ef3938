"""
dataModel.py

This module defines the data models used throughout the Balsa engine.
The models leverage Pydantic for validation and immutability: every model
produced by parsing is frozen, so a parsed Document and its catalogue can be
shared freely between resolutions.

Features:
- Enum of the supported variable types.
- Typed values and value expressions (literals and `$name` references).
- Placeholder expressions: declarations, editable references, value references.
- Document nodes and the Document itself.
- Catalogue entries for editor UIs.
- Render results.

Usage:
Import these models to build or inspect parsed templates.
"""

import math
from enum import Enum
from typing import Annotated, Any, Iterator, Literal, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)

FROZEN: ConfigDict = ConfigDict(frozen=True)


class VarType(str, Enum):
    """
    Enum of variable types a placeholder may declare.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    COLOR = "color"

    def __str__(self) -> str:
        return self.value


class TypedValue(BaseModel):
    """
    A primitive value tagged with its variable type.

    Attributes:
        type: The value's type.
        value: The Python value. `str` for string and color, `int` or `float`
            for number, `bool` for boolean.
    """

    model_config = FROZEN

    type: VarType
    value: Union[StrictBool, StrictInt, StrictFloat, StrictStr]

    @model_validator(mode="after")
    def value_matchesType(self) -> "TypedValue":
        ok: bool
        if self.type in (VarType.STRING, VarType.COLOR):
            ok = isinstance(self.value, str)
        elif self.type is VarType.NUMBER:
            ok = isinstance(self.value, (int, float)) and not isinstance(
                self.value, bool
            )
            # finite floats only
            if isinstance(self.value, float) and not math.isfinite(self.value):
                ok = False
        else:
            ok = isinstance(self.value, bool)
        if not ok:
            raise ValueError(
                f"value {self.value!r} does not belong to type '{self.type}'"
            )
        return self


class LiteralExpr(BaseModel):
    """A literal default value such as `"Hello"`, `42` or `true`."""

    model_config = FROZEN

    kind: Literal["literal"] = "literal"
    value: TypedValue


class VariableRef(BaseModel):
    """A default that reads another variable: `$name`."""

    model_config = FROZEN

    kind: Literal["ref"] = "ref"
    name: str


ValueExpr = Annotated[Union[LiteralExpr, VariableRef], Field(discriminator="kind")]


class Declaration(BaseModel):
    """
    `{{@ name : type = default }}`.

    Declares a variable and emits nothing at its position.
    """

    model_config = FROZEN

    kind: Literal["declaration"] = "declaration"
    name: str
    type: VarType
    defaultExpr: Optional[ValueExpr] = None


class EditableReference(BaseModel):
    """
    `{{ name, type: T, friendlyName: "...", defaultValue: E }}`.

    Declares or augments a variable's metadata and emits its value.
    """

    model_config = FROZEN

    kind: Literal["editable"] = "editable"
    name: str
    type: Optional[VarType] = None
    friendlyName: Optional[str] = None
    defaultExpr: Optional[ValueExpr] = None


class ValueReference(BaseModel):
    """`{{ $name }}`. Emits the value of a variable declared elsewhere."""

    model_config = FROZEN

    kind: Literal["value"] = "value"
    name: str


Expression = Annotated[
    Union[Declaration, EditableReference, ValueReference],
    Field(discriminator="kind"),
]


class LiteralText(BaseModel):
    """Template text outside any placeholder, kept verbatim."""

    model_config = FROZEN

    kind: Literal["text"] = "text"
    content: str
    offset: int = 0


class Placeholder(BaseModel):
    """
    A parsed `{{ ... }}` span.

    Attributes:
        expr: The parsed expression.
        offset: Offset of the opening `{{` in the template source.
        end: Offset just past the closing `}}`.
    """

    model_config = FROZEN

    kind: Literal["placeholder"] = "placeholder"
    expr: Expression
    offset: int
    end: int


Node = Annotated[Union[LiteralText, Placeholder], Field(discriminator="kind")]


class Document(BaseModel):
    """
    A parsed template: the ordered node sequence plus its source text.
    """

    model_config = FROZEN

    source: str = ""
    nodes: tuple[Node, ...] = ()

    def placeholders(self) -> Iterator[Placeholder]:
        """Iterate over placeholder nodes in document order."""
        for node in self.nodes:
            if isinstance(node, Placeholder):
                yield node


class VariableEntry(BaseModel):
    """
    One editable variable of a template, as shown to an editor.

    Attributes:
        name: Unique variable name.
        type: Declared (or inferred) type.
        friendlyName: Human-readable label, if any placeholder gave one.
        defaultExpr: Default value expression, if any.
        offset: Source offset of the placeholder that introduced the name.
    """

    model_config = FROZEN

    name: str
    type: VarType
    friendlyName: Optional[str] = None
    defaultExpr: Optional[ValueExpr] = None
    offset: int = 0

    @property
    def default(self) -> Any:
        """
        The default in editor-friendly form: the literal Python value, the
        `$name` text of a reference, or None.
        """
        if isinstance(self.defaultExpr, LiteralExpr):
            return self.defaultExpr.value.value
        if isinstance(self.defaultExpr, VariableRef):
            return f"${self.defaultExpr.name}"
        return None

    def record(self) -> dict[str, Any]:
        """Flat JSON-serializable view used by catalogue consumers."""
        return {
            "name": self.name,
            "type": self.type.value,
            "friendlyName": self.friendlyName,
            "default": self.default,
        }


class RenderResult(BaseModel):
    """Result of a render operation.

    Attributes:
        text: The rendered output, empty on failure
        error: Optional error message if rendering failed
        success: Whether rendering succeeded
    """

    text: str
    error: str | None
    success: bool
