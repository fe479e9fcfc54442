"""
tsdata_shims/syntax.py
══════════════════════

Read-only syntax tree model for type-resolved ESTree dumps.

The parser is an external collaborator: this module only fixes the shape
the checker relies on.

    ┌─────────────────────────────────────────────────────────────────┐
    │  Node model                                                     │
    │    • NodeKind        closed enumeration of ESTree node types    │
    │    • SourceSpan      file / line / column / offsets             │
    │    • SyntaxNode      named child slots, scalar attributes,      │
    │                      non-owning parent back-reference           │
    │    • SyntaxTree      root node + source text of one file        │
    ├─────────────────────────────────────────────────────────────────┤
    │  Traversal                                                      │
    │    • Pre-order iteration (document order)                       │
    │    • Parent chain walking                                       │
    ├─────────────────────────────────────────────────────────────────┤
    │  Predicates                                                     │
    │    • literal null / undefined identifier / type assertions      │
    │    • pattern leaf collection                                    │
    └─────────────────────────────────────────────────────────────────┘

Design Principles
─────────────────
1. **Non-invasive**: nodes are never modified once linked; the parent
   reference is set exactly once, when the parent is constructed.

2. **Strict where the parser contract is strict**: ``require()`` raises
   ``MalformedTreeError`` for an absent child that the grammar guarantees;
   ``child()`` returns None for optional slots.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from tsdata_shims.errors import MalformedTreeError


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — NODE KINDS
# ═══════════════════════════════════════════════════════════════════════════

class NodeKind(Enum):
    """ESTree node types the checker distinguishes. Values are ESTree names."""
    PROGRAM = "Program"
    # statements
    EXPRESSION_STATEMENT = "ExpressionStatement"
    BLOCK_STATEMENT = "BlockStatement"
    VARIABLE_DECLARATION = "VariableDeclaration"
    VARIABLE_DECLARATOR = "VariableDeclarator"
    FUNCTION_DECLARATION = "FunctionDeclaration"
    RETURN_STATEMENT = "ReturnStatement"
    IF_STATEMENT = "IfStatement"
    WHILE_STATEMENT = "WhileStatement"
    DO_WHILE_STATEMENT = "DoWhileStatement"
    FOR_STATEMENT = "ForStatement"
    FOR_IN_STATEMENT = "ForInStatement"
    FOR_OF_STATEMENT = "ForOfStatement"
    SWITCH_STATEMENT = "SwitchStatement"
    SWITCH_CASE = "SwitchCase"
    # expressions
    IDENTIFIER = "Identifier"
    LITERAL = "Literal"
    ARRAY_EXPRESSION = "ArrayExpression"
    OBJECT_EXPRESSION = "ObjectExpression"
    PROPERTY = "Property"
    FUNCTION_EXPRESSION = "FunctionExpression"
    ARROW_FUNCTION_EXPRESSION = "ArrowFunctionExpression"
    CALL_EXPRESSION = "CallExpression"
    NEW_EXPRESSION = "NewExpression"
    MEMBER_EXPRESSION = "MemberExpression"
    ASSIGNMENT_EXPRESSION = "AssignmentExpression"
    UPDATE_EXPRESSION = "UpdateExpression"
    UNARY_EXPRESSION = "UnaryExpression"
    BINARY_EXPRESSION = "BinaryExpression"
    LOGICAL_EXPRESSION = "LogicalExpression"
    CONDITIONAL_EXPRESSION = "ConditionalExpression"
    SEQUENCE_EXPRESSION = "SequenceExpression"
    SPREAD_ELEMENT = "SpreadElement"
    # patterns
    OBJECT_PATTERN = "ObjectPattern"
    ARRAY_PATTERN = "ArrayPattern"
    ASSIGNMENT_PATTERN = "AssignmentPattern"
    REST_ELEMENT = "RestElement"
    # TypeScript
    TS_TYPE_ANNOTATION = "TSTypeAnnotation"
    TS_TYPE_REFERENCE = "TSTypeReference"
    TS_ANY_KEYWORD = "TSAnyKeyword"
    TS_UNION_TYPE = "TSUnionType"
    TS_TYPE_ALIAS_DECLARATION = "TSTypeAliasDeclaration"
    TS_TYPE_PARAMETER_INSTANTIATION = "TSTypeParameterInstantiation"
    TS_AS_EXPRESSION = "TSAsExpression"
    TS_TYPE_ASSERTION = "TSTypeAssertion"
    TS_NON_NULL_EXPRESSION = "TSNonNullExpression"
    # anything the checker does not distinguish
    OTHER = "<other>"

    @classmethod
    def from_estree(cls, type_name: str) -> "NodeKind":
        return _KIND_BY_ESTREE.get(type_name, cls.OTHER)


_KIND_BY_ESTREE: Dict[str, NodeKind] = {
    k.value: k for k in NodeKind if k is not NodeKind.OTHER
}

TYPE_ASSERTION_KINDS: FrozenSet[NodeKind] = frozenset({
    NodeKind.TS_AS_EXPRESSION,
    NodeKind.TS_TYPE_ASSERTION,
})

PATTERN_KINDS: FrozenSet[NodeKind] = frozenset({
    NodeKind.OBJECT_PATTERN,
    NodeKind.ARRAY_PATTERN,
})


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — SOURCE SPANS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """
    A region of source text.

    Lines are 1-based and columns 0-based, as in ESTree ``loc``;
    ``start``/``end`` are character offsets as in ESTree ``range``.
    """
    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0
    start: int = -1
    end: int = -1

    @property
    def has_range(self) -> bool:
        return 0 <= self.start <= self.end

    @property
    def location(self) -> str:
        """``file:line:column`` (column 1-based for display)."""
        return f"{self.file}:{self.line}:{self.column + 1}"

    def __str__(self) -> str:
        return self.location


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — SYNTAX NODES
# ═══════════════════════════════════════════════════════════════════════════

ChildSlot = Union["SyntaxNode", Tuple[Optional["SyntaxNode"], ...], None]


class SyntaxNode:
    """
    One node of the parsed program.

    Children live in named slots (ESTree property names). A slot holds a
    node, ``None``, or a tuple of nodes; array slots may contain ``None``
    for holes (``[a, , b]``). Every other ESTree property is a scalar
    attribute.

    The parent back-reference is assigned when the parent is constructed
    and is only meant for context lookups.
    """

    __slots__ = ("kind", "type_name", "span", "_attrs", "_slots",
                 "_parent", "_field_name")

    def __init__(
        self,
        type_name: str,
        span: Optional[SourceSpan] = None,
        attrs: Optional[Mapping[str, Any]] = None,
        slots: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.type_name = type_name
        self.kind = NodeKind.from_estree(type_name)
        self.span = span or SourceSpan()
        self._attrs: Dict[str, Any] = dict(attrs or {})
        self._slots: Dict[str, ChildSlot] = {}
        self._parent: Optional[SyntaxNode] = None
        self._field_name = ""
        for name, value in (slots or {}).items():
            self._slots[name] = self._adopt(name, value)

    def _adopt(self, name: str, value: Any) -> ChildSlot:
        if value is None:
            return None
        if isinstance(value, SyntaxNode):
            self._link(name, value)
            return value
        items: List[Optional[SyntaxNode]] = []
        for item in value:
            if item is not None:
                self._link(name, item)
            items.append(item)
        return tuple(items)

    def _link(self, name: str, child: "SyntaxNode") -> None:
        if child._parent is not None:
            raise MalformedTreeError(
                f"{child.type_name} already has a parent", child.span, name,
            )
        child._parent = self
        child._field_name = name

    # ── Structure ─────────────────────────────────────────────────────

    @property
    def parent(self) -> Optional[SyntaxNode]:
        return self._parent

    @property
    def field_name(self) -> str:
        """Name of the parent slot holding this node ("" for the root)."""
        return self._field_name

    @property
    def slot_names(self) -> Tuple[str, ...]:
        return tuple(self._slots)

    def has(self, name: str) -> bool:
        """True when slot ``name`` holds a node or a non-empty tuple."""
        return bool(self._slots.get(name))

    def child(self, name: str) -> Optional[SyntaxNode]:
        value = self._slots.get(name)
        if isinstance(value, SyntaxNode):
            return value
        return None

    def require(self, name: str) -> SyntaxNode:
        """Like ``child()`` but a missing node violates the parser contract."""
        value = self.child(name)
        if value is None:
            raise MalformedTreeError(
                f"{self.type_name} is missing required child '{name}'",
                self.span, name,
            )
        return value

    def children(self, name: str) -> Tuple[Optional[SyntaxNode], ...]:
        value = self._slots.get(name)
        if value is None:
            return ()
        if isinstance(value, SyntaxNode):
            return (value,)
        return value

    def require_list(self, name: str) -> Tuple[Optional[SyntaxNode], ...]:
        if name not in self._slots or isinstance(self._slots[name], SyntaxNode):
            raise MalformedTreeError(
                f"{self.type_name} is missing required list '{name}'",
                self.span, name,
            )
        return self.children(name)

    def iter_children(self) -> Iterator[SyntaxNode]:
        """Direct children in slot order, skipping holes."""
        for value in self._slots.values():
            if value is None:
                continue
            if isinstance(value, SyntaxNode):
                yield value
                continue
            for item in value:
                if item is not None:
                    yield item

    # ── Attributes ────────────────────────────────────────────────────

    def attr(self, name: str, default: Any = None) -> Any:
        return self._attrs.get(name, default)

    @property
    def name(self) -> str:
        """Identifier name ("" for non-identifiers)."""
        return self._attrs.get("name", "") or ""

    def is_kind(self, *kinds: NodeKind) -> bool:
        return self.kind in kinds

    def __repr__(self) -> str:
        label = self.name or self._attrs.get("raw", "")
        suffix = f" {label}" if label else ""
        return f"<{self.type_name}{suffix} @ {self.span.line}:{self.span.column}>"


def make_node(
    type_name: str,
    span: Optional[SourceSpan] = None,
    **fields: Any,
) -> SyntaxNode:
    """
    Build a node, routing each keyword to a slot or an attribute.

    Values that are nodes, or sequences made only of nodes and ``None``,
    become child slots. ``None`` becomes an empty slot. Anything else is
    a scalar attribute.

    >>> x = make_node("Identifier", name="x")
    >>> decl = make_node("VariableDeclarator", id=x, init=None)
    >>> decl.child("id") is x
    True
    """
    attrs: Dict[str, Any] = {}
    slots: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None or isinstance(value, SyntaxNode):
            slots[key] = value
        elif _is_node_sequence(value):
            slots[key] = list(value)
        else:
            attrs[key] = value
    return SyntaxNode(type_name, span=span, attrs=attrs, slots=slots)


def _is_node_sequence(value: Any) -> bool:
    if not isinstance(value, (list, tuple)):
        return False
    return all(item is None or isinstance(item, SyntaxNode) for item in value)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — SYNTAX TREE
# ═══════════════════════════════════════════════════════════════════════════

class SyntaxTree:
    """Root node of one source file plus its text."""

    def __init__(
        self,
        root: SyntaxNode,
        source: str = "",
        file: str = "",
    ) -> None:
        self.root = root
        self.source = source
        self.file = file or root.span.file

    def text_of(self, node: SyntaxNode) -> str:
        """
        Verbatim source text of ``node``.

        Falls back to a rendering of the node when the dump carries no
        source text or no offsets for it.
        """
        span = node.span
        if self.source and span.has_range and span.end <= len(self.source):
            return self.source[span.start:span.end]
        return render(node)

    def __iter__(self) -> Iterator[SyntaxNode]:
        return iter_preorder(self.root)

    def __repr__(self) -> str:
        return f"<SyntaxTree {self.file or '<memory>'}>"


def render(node: Optional[SyntaxNode]) -> str:
    """Best-effort source rendering of names, literals and type references."""
    if node is None:
        return ""
    if node.kind is NodeKind.IDENTIFIER:
        return node.name
    if node.kind is NodeKind.LITERAL:
        raw = node.attr("raw")
        return raw if raw is not None else repr(node.attr("value"))
    if node.kind is NodeKind.MEMBER_EXPRESSION:
        return f"{render(node.child('object'))}.{render(node.child('property'))}"
    if node.type_name == "TSQualifiedName":
        return f"{render(node.child('left'))}.{render(node.child('right'))}"
    if node.kind is NodeKind.TS_TYPE_REFERENCE:
        text = render(node.child("typeName"))
        params = node.child("typeArguments") or node.child("typeParameters")
        if params is not None:
            args = ", ".join(render(p) for p in params.children("params"))
            text = f"{text}<{args}>"
        return text
    if node.kind is NodeKind.TS_ANY_KEYWORD:
        return "any"
    return node.type_name


# ═══════════════════════════════════════════════════════════════════════════
#  PART 5 — TRAVERSAL
# ═══════════════════════════════════════════════════════════════════════════

def iter_preorder(root: Optional[SyntaxNode]) -> Iterator[SyntaxNode]:
    """
    Iterate over nodes in pre-order (document order).

    Iterative, so deeply nested trees do not hit the recursion limit.
    """
    if root is None:
        return
    stack: List[SyntaxNode] = [root]
    while stack:
        node = stack.pop()
        yield node
        # Push in reverse so the first slot is processed first (LIFO)
        stack.extend(reversed(list(node.iter_children())))


def iter_parents(node: Optional[SyntaxNode]) -> Iterator[SyntaxNode]:
    """Parents from the immediate one up to the root, excluding ``node``."""
    if node is None:
        return
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def find_ancestor(
    node: SyntaxNode, kinds: Sequence[NodeKind]
) -> Optional[SyntaxNode]:
    for parent in iter_parents(node):
        if parent.kind in kinds:
            return parent
    return None


# ═══════════════════════════════════════════════════════════════════════════
#  PART 6 — PREDICATES
# ═══════════════════════════════════════════════════════════════════════════

def is_null_literal(node: Optional[SyntaxNode]) -> bool:
    if node is None or node.kind is not NodeKind.LITERAL:
        return False
    return node.attr("value") is None and node.attr("raw") == "null"


def is_undefined_identifier(node: Optional[SyntaxNode]) -> bool:
    return (
        node is not None
        and node.kind is NodeKind.IDENTIFIER
        and node.name == "undefined"
    )


def is_type_assertion(node: Optional[SyntaxNode]) -> bool:
    return node is not None and node.kind in TYPE_ASSERTION_KINDS


def has_type_annotation(binding: SyntaxNode) -> bool:
    """True for ``x: T`` style bindings (identifiers and patterns)."""
    return binding.has("typeAnnotation")


def is_identifier_named(node: Optional[SyntaxNode], name: str) -> bool:
    return (
        node is not None
        and node.kind is NodeKind.IDENTIFIER
        and node.name == name
    )


def iter_pattern_leaves(pattern: Optional[SyntaxNode]) -> Iterator[SyntaxNode]:
    """
    Binding identifiers of a destructuring pattern, in source order.

    Walks object and array patterns, default values (the binding side
    only) and rest elements. Holes and computed keys are skipped.
    """
    if pattern is None:
        return
    kind = pattern.kind
    if kind is NodeKind.IDENTIFIER:
        yield pattern
    elif kind is NodeKind.OBJECT_PATTERN:
        for prop in pattern.children("properties"):
            if prop is None:
                continue
            if prop.kind is NodeKind.REST_ELEMENT:
                yield from iter_pattern_leaves(prop.child("argument"))
            else:
                yield from iter_pattern_leaves(prop.child("value"))
    elif kind is NodeKind.ARRAY_PATTERN:
        for element in pattern.children("elements"):
            yield from iter_pattern_leaves(element)
    elif kind is NodeKind.ASSIGNMENT_PATTERN:
        yield from iter_pattern_leaves(pattern.child("left"))
    elif kind is NodeKind.REST_ELEMENT:
        yield from iter_pattern_leaves(pattern.child("argument"))


__all__ = [
    "NodeKind",
    "TYPE_ASSERTION_KINDS",
    "PATTERN_KINDS",
    "SourceSpan",
    "SyntaxNode",
    "SyntaxTree",
    "make_node",
    "render",
    "iter_preorder",
    "iter_parents",
    "find_ancestor",
    "is_null_literal",
    "is_undefined_identifier",
    "is_type_assertion",
    "has_type_annotation",
    "is_identifier_named",
    "iter_pattern_leaves",
]
