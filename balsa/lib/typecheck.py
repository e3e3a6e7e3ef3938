"""
Type checking for defaults and overrides.

Rules:
- string accepts string and color values
- color accepts color values, and string values that are valid CSS colors
- number accepts int and float values, never bool
- boolean accepts bool values only
There is no other conversion: a number is never accepted where a string is
declared, nor a string where a number is declared.
"""

import math
import re
from typing import Any, Final, Pattern
from balsa.lib.errors import TypeMismatchError
from balsa.models.dataModel import TypedValue, VarType

CSS_COLOR_NAMES: Final[frozenset[str]] = frozenset(
    """
    aliceblue antiquewhite aqua aquamarine azure beige bisque black
    blanchedalmond blue blueviolet brown burlywood cadetblue chartreuse
    chocolate coral cornflowerblue cornsilk crimson currentcolor cyan darkblue
    darkcyan darkgoldenrod darkgray darkgreen darkgrey darkkhaki darkmagenta
    darkolivegreen darkorange darkorchid darkred darksalmon darkseagreen
    darkslateblue darkslategray darkslategrey darkturquoise darkviolet deeppink
    deepskyblue dimgray dimgrey dodgerblue firebrick floralwhite forestgreen
    fuchsia gainsboro ghostwhite gold goldenrod gray green greenyellow grey
    honeydew hotpink indianred indigo ivory khaki lavender lavenderblush
    lawngreen lemonchiffon lightblue lightcoral lightcyan lightgoldenrodyellow
    lightgray lightgreen lightgrey lightpink lightsalmon lightseagreen
    lightskyblue lightslategray lightslategrey lightsteelblue lightyellow lime
    limegreen linen magenta maroon mediumaquamarine mediumblue mediumorchid
    mediumpurple mediumseagreen mediumslateblue mediumspringgreen
    mediumturquoise mediumvioletred midnightblue mintcream mistyrose moccasin
    navajowhite navy oldlace olive olivedrab orange orangered orchid
    palegoldenrod palegreen paleturquoise palevioletred papayawhip peachpuff
    peru pink plum powderblue purple rebeccapurple red rosybrown royalblue
    saddlebrown salmon sandybrown seagreen seashell sienna silver skyblue
    slateblue slategray slategrey snow springgreen steelblue tan teal thistle
    tomato transparent turquoise violet wheat white whitesmoke yellow
    yellowgreen
    """.split()
)

# Hex (#rgb, #rgba, #rrggbb, #rrggbbaa) and rgb()/rgba()/hsl()/hsla() forms.
# Channel ranges are not checked.
CSS_COLOR_FUNCTION_RE: Final[Pattern[str]] = re.compile(
    r"#(?:[0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})"
    r"|(?:rgb|hsl)a?\(\s*(?:-?\d+(?:\.\d+)?%?(?:deg)?\s*[,\s]\s*){2,3}[\d.]+%?\s*\)",
    re.I,
)


def color_isValid(text: str) -> bool:
    """True if `text` is a CSS hex, rgb/hsl functional or named color."""
    candidate: str = text.strip()
    return (
        candidate.lower() in CSS_COLOR_NAMES
        or CSS_COLOR_FUNCTION_RE.fullmatch(candidate) is not None
    )


def value_wrap(value: Any) -> TypedValue:
    """Tag a plain Python value with its natural type.

    Raises:
        TypeError: For values that are not str, bool, int or float
        ValueError: For nan and infinite floats
    """
    if isinstance(value, TypedValue):
        return value
    if isinstance(value, bool):
        return TypedValue(type=VarType.BOOLEAN, value=value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"Non-finite number: {value!r}")
        return TypedValue(type=VarType.NUMBER, value=value)
    if isinstance(value, str):
        return TypedValue(type=VarType.STRING, value=value)
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def type_accepts(declared: VarType, actual: VarType) -> bool:
    """Whether a value of type `actual` may stand where `declared` is expected,
    without looking at the value itself."""
    if declared is actual:
        return True
    if declared is VarType.STRING and actual is VarType.COLOR:
        return True
    # string -> color depends on the value; see value_check
    return declared is VarType.COLOR and actual is VarType.STRING


def value_check(name: str, value: TypedValue, declared: VarType) -> TypedValue:
    """Check `value` against the declared type of variable `name`.

    Returns:
        The value retagged with the declared type (a string literal accepted
        as a color becomes a color value)

    Raises:
        TypeMismatchError: If the value does not belong to the declared type
    """
    if value.type is declared:
        return value

    if declared is VarType.STRING and value.type is VarType.COLOR:
        return TypedValue(type=VarType.STRING, value=value.value)

    if (
        declared is VarType.COLOR
        and value.type is VarType.STRING
        and color_isValid(str(value.value))
    ):
        return TypedValue(type=VarType.COLOR, value=str(value.value).strip())

    raise TypeMismatchError(
        name=name,
        expectedType=declared.value,
        actualType=value.type.value,
        value=value.value,
    )


def override_check(name: str, value: Any, declared: VarType) -> TypedValue:
    """Wrap and check a caller-supplied override."""
    try:
        typed: TypedValue = value_wrap(value)
    except TypeError:
        raise TypeMismatchError(
            name=name,
            expectedType=declared.value,
            actualType=type(value).__name__,
            value=value,
        ) from None
    except ValueError:
        raise TypeMismatchError(
            name=name,
            expectedType=declared.value,
            actualType="non-finite number",
            value=value,
        ) from None
    return value_check(name, typed, declared)


def override_fromText(name: str, text: str, declared: VarType) -> TypedValue:
    """Read an override given as text (command line, form field) in the
    declared type's literal syntax.

    Strings and colors are taken as-is; numbers must be numeric literals;
    booleans must be `true` or `false`.

    Raises:
        TypeMismatchError: If the text is not a literal of the declared type
    """
    stripped: str = text.strip()

    if declared is VarType.NUMBER:
        try:
            number: int | float = int(stripped)
        except ValueError:
            try:
                number = float(stripped)
            except ValueError:
                raise TypeMismatchError(
                    name=name, expectedType="number", actualType="string", value=text
                ) from None
        if isinstance(number, float) and not math.isfinite(number):
            raise TypeMismatchError(
                name=name, expectedType="number", actualType="non-finite number", value=text
            )
        return TypedValue(type=VarType.NUMBER, value=number)

    if declared is VarType.BOOLEAN:
        if stripped in ("true", "false"):
            return TypedValue(type=VarType.BOOLEAN, value=stripped == "true")
        raise TypeMismatchError(
            name=name, expectedType="boolean", actualType="string", value=text
        )

    return value_check(name, TypedValue(type=VarType.STRING, value=text), declared)
