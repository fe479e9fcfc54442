# tests/conftest.py
"""
Shared fixtures and tree-building helpers for the tsdata-shims tests.

Trees are built by hand with ``TreeBuilder``: every node gets its own
line so that records can be told apart by location, and nodes built
with ``ts=`` are bound in the builder's ``MappingTypeOracle``.
"""

from __future__ import annotations

from typing import Any, List, Optional

import pytest

from tsdata_shims.checker import analyze
from tsdata_shims.config import RuleConfiguration
from tsdata_shims.diagnostics import DiagnosticRecord
from tsdata_shims.syntax import SourceSpan, SyntaxNode, SyntaxTree, make_node
from tsdata_shims.type_oracle import MappingTypeOracle, ResolvedType, TypeFlag


# ── Resolved types ──────────────────────────────────────────────────────

ANY = ResolvedType.any()
NUMBER = ResolvedType.of(TypeFlag.NUMBER)
STRING = ResolvedType.of(TypeFlag.STRING)
BOOLEAN = ResolvedType.of(TypeFlag.BOOLEAN)
NULL = ResolvedType.of(TypeFlag.NULL)
UNDEFINED = ResolvedType.of(TypeFlag.UNDEFINED)
ANY_ARRAY = ResolvedType.array_of(ANY)
NUMBER_ARRAY = ResolvedType.array_of(NUMBER)
STRING_OR_NUMBER = ResolvedType.union(STRING, NUMBER)


class TreeBuilder:
    """Builds ESTree-shaped nodes and records their types."""

    def __init__(self, file: str = "test.ts") -> None:
        self.file = file
        self.oracle = MappingTypeOracle()
        self._line = 0

    def _span(self) -> SourceSpan:
        self._line += 1
        return SourceSpan(
            file=self.file, line=self._line, column=0,
            end_line=self._line, end_column=1,
        )

    def node(self, type_name: str, ts: Optional[ResolvedType] = None,
             **fields: Any) -> SyntaxNode:
        n = make_node(type_name, span=self._span(), **fields)
        if ts is not None:
            self.oracle.bind(n, ts)
        return n

    # ── leaves ───────────────────────────────────────────────────────

    def ident(self, name: str, ts: Optional[ResolvedType] = None,
              annotation: Optional[SyntaxNode] = None) -> SyntaxNode:
        return self.node("Identifier", ts=ts, name=name,
                         typeAnnotation=annotation)

    def literal(self, value: Any, raw: str,
                ts: Optional[ResolvedType] = None) -> SyntaxNode:
        return self.node("Literal", ts=ts, value=value, raw=raw)

    def null(self) -> SyntaxNode:
        return self.literal(None, "null", ts=NULL)

    def num(self, value: int) -> SyntaxNode:
        return self.literal(value, str(value), ts=NUMBER)

    def string(self, value: str) -> SyntaxNode:
        return self.literal(value, repr(value), ts=STRING)

    def annotation(self, keyword: str = "TSNumberKeyword") -> SyntaxNode:
        return self.node("TSTypeAnnotation",
                         typeAnnotation=self.node(keyword))

    # ── expressions ──────────────────────────────────────────────────

    def as_any(self, expression: SyntaxNode) -> SyntaxNode:
        return self.node("TSAsExpression", ts=ANY, expression=expression,
                         typeAnnotation=self.node("TSAnyKeyword"))

    def call(self, callee: SyntaxNode, *args: SyntaxNode,
             ts: Optional[ResolvedType] = None) -> SyntaxNode:
        return self.node("CallExpression", ts=ts, callee=callee,
                         arguments=list(args), optional=False)

    def new(self, callee: SyntaxNode, *args: SyntaxNode,
            ts: Optional[ResolvedType] = None) -> SyntaxNode:
        return self.node("NewExpression", ts=ts, callee=callee,
                         arguments=list(args))

    def array(self, *elements: Optional[SyntaxNode],
              ts: Optional[ResolvedType] = None) -> SyntaxNode:
        return self.node("ArrayExpression", ts=ts, elements=list(elements))

    # ── statements ───────────────────────────────────────────────────

    def declarator(self, binding: SyntaxNode,
                   init: Optional[SyntaxNode] = None) -> SyntaxNode:
        return self.node("VariableDeclarator", id=binding, init=init,
                         definite=False)

    def declare(self, kind: str, *declarators: SyntaxNode) -> SyntaxNode:
        return self.node("VariableDeclaration", kind=kind,
                         declarations=list(declarators))

    def let(self, name: str, init: Optional[SyntaxNode] = None,
            annotation: Optional[SyntaxNode] = None,
            kind: str = "let") -> SyntaxNode:
        return self.declare(
            kind, self.declarator(self.ident(name, annotation=annotation), init),
        )

    def const(self, name: str, init: SyntaxNode,
              annotation: Optional[SyntaxNode] = None) -> SyntaxNode:
        return self.let(name, init, annotation, kind="const")

    def stmt(self, expression: SyntaxNode) -> SyntaxNode:
        return self.node("ExpressionStatement", expression=expression)

    def block(self, *body: SyntaxNode) -> SyntaxNode:
        return self.node("BlockStatement", body=list(body))

    def program(self, *body: SyntaxNode, source: str = "") -> SyntaxTree:
        root = self.node("Program", body=list(body), sourceType="module")
        return SyntaxTree(root, source=source, file=self.file)


def run(builder: TreeBuilder, tree: SyntaxTree,
        config: Optional[RuleConfiguration] = None) -> List[DiagnosticRecord]:
    return analyze(tree, builder.oracle, config)


def message_ids(records: List[DiagnosticRecord]) -> List[str]:
    return [r.message_id for r in records]


@pytest.fixture
def builder() -> TreeBuilder:
    return TreeBuilder()
