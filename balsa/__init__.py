"""
Balsa: an HTML template engine whose placeholders carry editing metadata.

    from balsa import parse, catalogue, render

    document = parse('<h1>{{ headerText : string, friendlyName: "Header text", '
                     'defaultValue: "Hello world!" }}</h1>')
    catalogue(document)                      # one entry: headerText
    render(document)                         # '<h1>Hello world!</h1>'
    render(document, {"headerText": "Hi"})   # '<h1>Hi</h1>'
"""

from typing import Final
from loguru import logger

__version__: Final[str] = "0.1.0"

# Library use is silent until the host enables it: logger.enable("balsa")
logger.disable("balsa")

from balsa.lib.errors import (
    BalsaError,
    CyclicDefaultError,
    InvalidOverridesError,
    MetadataConflictError,
    RegistryError,
    RenderError,
    ResolutionError,
    TemplateSyntaxError,
    TypeConflictError,
    TypeMismatchError,
    UndeclaredVariableError,
    UnresolvedVariableError,
)
from balsa.lib.parameters import AsParameters, BalsaParameters
from balsa.lib.registry import VariableRegistry
from balsa.lib.template import Template, catalogue, parse, render, resolve
from balsa.models.dataModel import (
    Document,
    RenderResult,
    TypedValue,
    VariableEntry,
    VarType,
)

__all__ = [
    "__version__",
    # Pipeline
    "parse",
    "catalogue",
    "resolve",
    "render",
    "Template",
    "VariableRegistry",
    # Overrides
    "BalsaParameters",
    "AsParameters",
    # Models
    "Document",
    "RenderResult",
    "TypedValue",
    "VariableEntry",
    "VarType",
    # Errors
    "BalsaError",
    "RegistryError",
    "ResolutionError",
    "RenderError",
    "TemplateSyntaxError",
    "TypeConflictError",
    "MetadataConflictError",
    "TypeMismatchError",
    "CyclicDefaultError",
    "UnresolvedVariableError",
    "UndeclaredVariableError",
    "InvalidOverridesError",
]
