"""
Variable registry.

Builds the catalogue of a parsed Document and resolves variable values.

Collection walks the placeholders in document order and merges every
declaration and editable reference of a name into one entry. Defaults may
reference other variables (`defaultValue: $other`), declared anywhere in the
document, so values are computed in a second step that follows the
dependency graph: dependencies first, each variable exactly once.

A registry holds only its policy settings; every call works on its own
locals, so one registry (or many) may serve concurrent resolutions.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Literal, Mapping, Optional, Self
from balsa.config.settings import appsettings
from balsa.lib.errors import (
    CyclicDefaultError,
    MetadataConflictError,
    TypeConflictError,
    TypeMismatchError,
    UndeclaredVariableError,
    UnresolvedVariableError,
)
from balsa.lib.log import LOG
from balsa.lib.parameters import parameters_normalize
from balsa.lib.typecheck import override_check, type_accepts, value_check
from balsa.models.dataModel import (
    Declaration,
    Document,
    EditableReference,
    LiteralExpr,
    TypedValue,
    ValueExpr,
    ValueReference,
    VariableEntry,
    VariableRef,
    VarType,
)


@dataclass
class EntryDraft:
    """Mutable entry used while merging placeholders; frozen afterwards."""

    name: str
    type: Optional[VarType]
    friendlyName: Optional[str]
    defaultExpr: Optional[ValueExpr]
    offset: int
    defaultOffset: int


def graph_build(defaults: Mapping[str, Optional[ValueExpr]]) -> dict[str, list[str]]:
    """Dependency graph: an edge `name → other` for each `$other` default.

    Node order follows the mapping's order, which keeps traversal (and so
    error reports and resolution order) deterministic.
    """
    return {
        name: [expr.name] if isinstance(expr, VariableRef) else []
        for name, expr in defaults.items()
    }


def graph_order(graph: Mapping[str, list[str]]) -> list[str]:
    """Depth-first topological sort, dependencies before dependents.

    Edges to names missing from the graph are ignored; undeclared references
    are reported separately.

    Raises:
        CyclicDefaultError: With the members of the first cycle found, in
            traversal order (a self-loop on `c` reports `["c"]`)
    """
    WHITE, GREY, BLACK = 0, 1, 2
    state: dict[str, int] = {name: WHITE for name in graph}
    order: list[str] = []

    for root in graph:
        if state[root] != WHITE:
            continue
        state[root] = GREY
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]

        while stack:
            node, children = stack[-1]
            for child in children:
                child_state: int = state.get(child, BLACK)
                if child_state == GREY:
                    path: list[str] = [name for name, _ in stack]
                    cycle: list[str] = path[path.index(child):]
                    LOG(f"Cycle in default values: {cycle}")
                    raise CyclicDefaultError(cycle=cycle)
                if child_state == WHITE:
                    state[child] = GREY
                    stack.append((child, iter(graph[child])))
                    break
            else:
                stack.pop()
                state[node] = BLACK
                order.append(node)

    return order


class VariableRegistry:
    """
    Collects and resolves the variables of a Document.

    Attributes:
        mergePolicy: "permissive" merges repeated metadata (first label wins,
            last default wins); "strict" rejects any disagreement
        unknownOverrides: "ignore" drops overrides naming no variable;
            "error" raises UndeclaredVariableError
    """

    def __init__(
        self: Self,
        mergePolicy: Optional[Literal["permissive", "strict"]] = None,
        unknownOverrides: Optional[Literal["ignore", "error"]] = None,
    ) -> None:
        self.mergePolicy: str = mergePolicy or appsettings.mergePolicy
        self.unknownOverrides: str = unknownOverrides or appsettings.unknownOverrides

    def collect(self: Self, document: Document) -> list[VariableEntry]:
        """Build the variable catalogue of a document.

        Args:
            document: A parsed Document

        Returns:
            One entry per variable, in order of first appearance

        Raises:
            TypeConflictError: Two placeholders declare different types
            MetadataConflictError: Metadata disagreement under strict policy
            UndeclaredVariableError: A `$name` names no declared variable
            CyclicDefaultError: Defaults reference each other in a loop
            TypeMismatchError: A default does not match its variable's type
        """
        drafts: dict[str, EntryDraft] = self._entries_gather(document)
        self._references_check(document, drafts)

        order: list[str] = graph_order(
            graph_build({name: d.defaultExpr for name, d in drafts.items()})
        )
        finals: dict[str, VariableEntry] = {}
        for name in order:
            finals[name] = self._entry_finalize(drafts[name], finals)

        LOG(f"Collected {len(finals)} variables")
        return [finals[name] for name in drafts]

    def resolve(
        self: Self, entries: list[VariableEntry], overrides: Any = None
    ) -> dict[str, TypedValue]:
        """Compute the value of every variable.

        Args:
            entries: The catalogue, as returned by `collect`
            overrides: Mapping, BalsaParameters or AsParameters of values
                that replace defaults

        Returns:
            name → TypedValue for every entry

        Raises:
            CyclicDefaultError: Defaults reference each other in a loop
            TypeMismatchError: An override does not match its variable's type
            UnresolvedVariableError: A variable has no override and no default
            UndeclaredVariableError: An override or default names no variable
                (overrides only under `unknownOverrides="error"`)
        """
        index: dict[str, VariableEntry] = {entry.name: entry for entry in entries}
        supplied: dict[str, Any] = parameters_normalize(overrides)

        for name in list(supplied):
            if name not in index:
                if self.unknownOverrides == "error":
                    raise UndeclaredVariableError(name=name)
                LOG(f"Ignoring override for undeclared variable '{name}'")
                del supplied[name]

        order: list[str] = graph_order(
            graph_build({name: entry.defaultExpr for name, entry in index.items()})
        )

        resolved: dict[str, TypedValue] = {}
        for name in order:
            entry: VariableEntry = index[name]
            default: Optional[ValueExpr] = entry.defaultExpr

            if name in supplied:
                resolved[name] = override_check(name, supplied[name], entry.type)
            elif isinstance(default, LiteralExpr):
                resolved[name] = value_check(name, default.value, entry.type)
            elif isinstance(default, VariableRef):
                if default.name not in index:
                    raise UndeclaredVariableError(name=default.name)
                resolved[name] = value_check(name, resolved[default.name], entry.type)
            else:
                raise UnresolvedVariableError(name=name)

        LOG(f"Resolved {len(resolved)} variables ({len(supplied)} overridden)")
        return resolved

    def _entries_gather(self: Self, document: Document) -> dict[str, EntryDraft]:
        """Pass 1: create or merge one draft per declared name."""
        drafts: dict[str, EntryDraft] = {}

        for placeholder in document.placeholders():
            expr = placeholder.expr
            if isinstance(expr, ValueReference):
                continue

            friendly: Optional[str] = (
                expr.friendlyName if isinstance(expr, EditableReference) else None
            )
            existing: Optional[EntryDraft] = drafts.get(expr.name)
            if existing is None:
                drafts[expr.name] = EntryDraft(
                    name=expr.name,
                    type=expr.type,
                    friendlyName=friendly,
                    defaultExpr=expr.defaultExpr,
                    offset=placeholder.offset,
                    defaultOffset=placeholder.offset,
                )
                continue

            self._entry_merge(existing, expr, friendly, placeholder.offset)

        return drafts

    def _entry_merge(
        self: Self,
        existing: EntryDraft,
        expr: Declaration | EditableReference,
        friendly: Optional[str],
        offset: int,
    ) -> None:
        if expr.type is not None:
            if existing.type is not None and existing.type is not expr.type:
                raise TypeConflictError(
                    name=existing.name,
                    existingType=existing.type.value,
                    newType=expr.type.value,
                )
            existing.type = expr.type

        if friendly is not None:
            if existing.friendlyName is None:
                existing.friendlyName = friendly
            elif existing.friendlyName != friendly:
                if self.mergePolicy == "strict":
                    raise MetadataConflictError(
                        existing.name, "friendlyName", existing.friendlyName, friendly
                    )
                LOG(
                    f"Keeping first friendlyName of '{existing.name}': "
                    f"{existing.friendlyName!r} (ignoring {friendly!r})"
                )

        if expr.defaultExpr is not None:
            if existing.defaultExpr is not None and existing.defaultExpr != expr.defaultExpr:
                if self.mergePolicy == "strict":
                    raise MetadataConflictError(
                        existing.name, "defaultValue", existing.defaultExpr, expr.defaultExpr
                    )
                LOG(f"Later default of '{existing.name}' at offset {offset} wins")
            existing.defaultExpr = expr.defaultExpr
            existing.defaultOffset = offset

    def _references_check(
        self: Self, document: Document, drafts: Mapping[str, EntryDraft]
    ) -> None:
        """Every `$name`, in a value reference or a default, must be declared."""
        for placeholder in document.placeholders():
            expr = placeholder.expr
            if isinstance(expr, ValueReference) and expr.name not in drafts:
                raise UndeclaredVariableError(name=expr.name, offset=placeholder.offset)

        for draft in drafts.values():
            ref: Optional[ValueExpr] = draft.defaultExpr
            if isinstance(ref, VariableRef) and ref.name not in drafts:
                raise UndeclaredVariableError(name=ref.name, offset=draft.defaultOffset)

    def _entry_finalize(
        self: Self, draft: EntryDraft, finals: Mapping[str, VariableEntry]
    ) -> VariableEntry:
        """Settle the type of a draft and check its default.

        Drafts arrive in dependency order, so a referenced variable is
        already final. An entry that never got an explicit type takes the
        type of its default, or `string` when it has none.
        """
        default: Optional[ValueExpr] = draft.defaultExpr
        var_type: Optional[VarType] = draft.type

        if isinstance(default, LiteralExpr):
            if var_type is None:
                var_type = default.value.type
            default = LiteralExpr(value=value_check(draft.name, default.value, var_type))
        elif isinstance(default, VariableRef):
            ref_type: VarType = finals[default.name].type
            if var_type is None:
                var_type = ref_type
            if not type_accepts(var_type, ref_type):
                raise TypeMismatchError(
                    name=draft.name,
                    expectedType=var_type.value,
                    actualType=ref_type.value,
                    value=f"${default.name}",
                )
        elif var_type is None:
            var_type = VarType.STRING

        return VariableEntry(
            name=draft.name,
            type=var_type,
            friendlyName=draft.friendlyName,
            defaultExpr=default,
            offset=draft.offset,
        )


def variables_collect(document: Document, **policy: Any) -> list[VariableEntry]:
    """Catalogue of `document` using a registry built with `policy`."""
    return VariableRegistry(**policy).collect(document)


def variables_resolve(
    entries: list[VariableEntry], overrides: Any = None, **policy: Any
) -> dict[str, TypedValue]:
    """Resolved values of `entries` using a registry built with `policy`."""
    return VariableRegistry(**policy).resolve(entries, overrides)
