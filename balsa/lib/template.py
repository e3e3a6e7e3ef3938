"""
Pipeline entry points.

Functions:
- parse(text) → Document
- catalogue(document) → list[VariableEntry]
- resolve(document, overrides) → dict[name, TypedValue]
- render(document, overrides) → str

and the `Template` class, which parses once, keeps its catalogue, and renders
as many times as needed with different overrides:

    template = Template.from_string('<h1>{{ title : string, defaultValue: "Hi" }}</h1>')
    template.variables           # [VariableEntry(name='title', ...)]
    template.render()            # '<h1>Hi</h1>'
    template.render({"title": "Welcome"})
"""

from pathlib import Path
from typing import Any, Optional, Self
from balsa.config.settings import appsettings
from balsa.lib.errors import BalsaError
from balsa.lib.log import LOG
from balsa.lib.parser import document_parse
from balsa.lib.registry import VariableRegistry
from balsa.lib.renderer import Renderer
from balsa.models.dataModel import Document, RenderResult, TypedValue, VariableEntry


def parse(template_text: str) -> Document:
    """Parse template text into an immutable Document.

    Raises:
        TemplateSyntaxError: On malformed placeholders or delimiters
    """
    return document_parse(template_text)


def catalogue(document: Document, **policy: Any) -> list[VariableEntry]:
    """Editable-variable catalogue of a document, without rendering."""
    return VariableRegistry(**policy).collect(document)


def resolve(
    document: Document, overrides: Any = None, **policy: Any
) -> dict[str, TypedValue]:
    """Resolved value of every variable of a document."""
    registry: VariableRegistry = VariableRegistry(**policy)
    return registry.resolve(registry.collect(document), overrides)


def render(document: Document, overrides: Any = None, **policy: Any) -> str:
    """Render a document, replacing defaults with `overrides` where given.

    Raises:
        BalsaError: Any collection, resolution or render failure; output is
            never partial
    """
    return Renderer(document).render(resolve(document, overrides, **policy))


class Template:
    """
    A parsed template with its cached catalogue.

    Attributes:
        document: The parsed Document
        registry: Registry used for collection and resolution
    """

    def __init__(
        self: Self, document: Document, registry: Optional[VariableRegistry] = None
    ) -> None:
        self.document: Document = document
        self.registry: VariableRegistry = registry or VariableRegistry()
        self.renderer: Renderer = Renderer(document)
        self._variables: Optional[list[VariableEntry]] = None

    @classmethod
    def from_string(cls, source: str, **policy: Any) -> "Template":
        return cls(parse(source), VariableRegistry(**policy))

    @classmethod
    def from_file(cls, path: str | Path, **policy: Any) -> "Template":
        """Load and parse a UTF-8 template file.

        Raises:
            ValueError: If the file is larger than `maxTemplateBytes`
            OSError: If the file cannot be read
        """
        template_path: Path = Path(path)
        size: int = template_path.stat().st_size
        if size > appsettings.maxTemplateBytes:
            raise ValueError(
                f"Template too large: {template_path} ({size} bytes, "
                f"limit {appsettings.maxTemplateBytes})"
            )
        LOG(f"Loading template {template_path} ({size} bytes)")
        return cls.from_string(template_path.read_text(encoding="utf-8"), **policy)

    @property
    def variables(self: Self) -> list[VariableEntry]:
        """The catalogue, collected on first access."""
        if self._variables is None:
            self._variables = self.registry.collect(self.document)
        return list(self._variables)

    def catalogue(self: Self) -> list[dict[str, Any]]:
        """The catalogue as plain records for editor UIs."""
        return [entry.record() for entry in self.variables]

    def resolve(self: Self, overrides: Any = None) -> dict[str, TypedValue]:
        return self.registry.resolve(self.variables, overrides)

    def render(self: Self, overrides: Any = None) -> str:
        return self.renderer.render(self.resolve(overrides))

    def render_result(self: Self, overrides: Any = None) -> RenderResult:
        """Render, reporting failure as a value instead of raising.

        Returns:
            RenderResult containing:
                - text: Rendered output if successful, else empty
                - error: Error message if rendering failed
                - success: Whether rendering succeeded
        """
        try:
            return RenderResult(text=self.render(overrides), error=None, success=True)
        except BalsaError as e:
            LOG(f"Render failed: {e}")
            return RenderResult(text="", error=str(e), success=False)
