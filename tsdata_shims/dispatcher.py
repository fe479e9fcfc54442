"""
tsdata_shims/dispatcher.py
══════════════════════════

Single-pass traversal that routes every node to the context rules
registered for its kind.

The routing table is closed over ``NodeKind``: every kind is either
mapped to its rules in ``CONTEXT_RULES`` or listed in ``PASSIVE_KINDS``.
Adding a ``NodeKind`` without deciding which of the two it belongs to
fails at import time.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Tuple

from tsdata_shims import rules
from tsdata_shims.errors import MalformedTreeError
from tsdata_shims.rules import Rule, RuleContext
from tsdata_shims.syntax import NodeKind, SyntaxNode, iter_preorder

logger = logging.getLogger(__name__)


_BOOLEAN_TEST: Tuple[Rule, ...] = (rules.boolean_test_is_any,)
_ARGUMENTS: Tuple[Rule, ...] = (rules.passed_argument_is_any,)

CONTEXT_RULES: Dict[NodeKind, Tuple[Rule, ...]] = {
    NodeKind.TS_TYPE_REFERENCE: (rules.type_reference_resolves_to_any,),
    NodeKind.VARIABLE_DECLARATOR: (
        rules.let_without_initial,
        rules.let_initialised_to_nullish,
        rules.initialised_to_any,
        rules.initialised_to_any_array,
        rules.pattern_initialised_to_any,
    ),
    NodeKind.FOR_OF_STATEMENT: (rules.loop_variable_initialised_to_any,),
    NodeKind.RETURN_STATEMENT: (rules.return_any,),
    NodeKind.ARROW_FUNCTION_EXPRESSION: (rules.expression_body_any,),
    NodeKind.CALL_EXPRESSION: _ARGUMENTS,
    NodeKind.NEW_EXPRESSION: _ARGUMENTS,
    NodeKind.ASSIGNMENT_EXPRESSION: (rules.assignment_value_is_any,),
    NodeKind.UPDATE_EXPRESSION: (rules.update_expression_is_any,),
    NodeKind.IF_STATEMENT: _BOOLEAN_TEST,
    NodeKind.WHILE_STATEMENT: _BOOLEAN_TEST,
    NodeKind.DO_WHILE_STATEMENT: _BOOLEAN_TEST,
    NodeKind.FOR_STATEMENT: _BOOLEAN_TEST,
    NodeKind.CONDITIONAL_EXPRESSION: _BOOLEAN_TEST,
    NodeKind.SWITCH_STATEMENT: (rules.switch_discriminant_is_any,),
    NodeKind.SWITCH_CASE: (rules.switch_case_test_is_any,),
}

PASSIVE_KINDS: FrozenSet[NodeKind] = frozenset({
    NodeKind.PROGRAM,
    NodeKind.EXPRESSION_STATEMENT,
    NodeKind.BLOCK_STATEMENT,
    NodeKind.VARIABLE_DECLARATION,
    NodeKind.FUNCTION_DECLARATION,
    NodeKind.FOR_IN_STATEMENT,
    NodeKind.IDENTIFIER,
    NodeKind.LITERAL,
    NodeKind.ARRAY_EXPRESSION,
    NodeKind.OBJECT_EXPRESSION,
    NodeKind.PROPERTY,
    NodeKind.FUNCTION_EXPRESSION,
    NodeKind.MEMBER_EXPRESSION,
    NodeKind.UNARY_EXPRESSION,
    NodeKind.BINARY_EXPRESSION,
    NodeKind.LOGICAL_EXPRESSION,
    NodeKind.SEQUENCE_EXPRESSION,
    NodeKind.SPREAD_ELEMENT,
    NodeKind.OBJECT_PATTERN,
    NodeKind.ARRAY_PATTERN,
    NodeKind.ASSIGNMENT_PATTERN,
    NodeKind.REST_ELEMENT,
    NodeKind.TS_TYPE_ANNOTATION,
    NodeKind.TS_ANY_KEYWORD,
    NodeKind.TS_UNION_TYPE,
    NodeKind.TS_TYPE_ALIAS_DECLARATION,
    NodeKind.TS_TYPE_PARAMETER_INSTANTIATION,
    NodeKind.TS_AS_EXPRESSION,
    NodeKind.TS_TYPE_ASSERTION,
    NodeKind.TS_NON_NULL_EXPRESSION,
    NodeKind.OTHER,
})


def _check_exhaustive() -> None:
    overlap = PASSIVE_KINDS & CONTEXT_RULES.keys()
    missing = set(NodeKind) - PASSIVE_KINDS - CONTEXT_RULES.keys()
    if overlap or missing:
        raise RuntimeError(
            "NodeKind routing is not a partition: "
            f"unrouted={sorted(k.name for k in missing)} "
            f"overlapping={sorted(k.name for k in overlap)}"
        )


_check_exhaustive()


class TraversalDispatcher:
    """
    Walks a tree once in pre-order and applies matching rules.

    Rules run in table order for each node, and nodes are visited in
    document order, so emission order is deterministic.

    Attributes
    ----------
    visited : nodes visited in the last ``run``
    skipped : rule invocations abandoned on a malformed node
    """

    def __init__(self, ctx: RuleContext) -> None:
        self.ctx = ctx
        self.visited = 0
        self.skipped = 0

    def run(self) -> None:
        self.visited = 0
        self.skipped = 0
        for node in iter_preorder(self.ctx.tree.root):
            self.visited += 1
            self.dispatch(node)

    def dispatch(self, node: SyntaxNode) -> None:
        for rule in CONTEXT_RULES.get(node.kind, ()):
            try:
                rule(node, self.ctx)
            except MalformedTreeError as exc:
                self.skipped += 1
                logger.warning(
                    "Skipping %s on %r: %s", rule.__name__, node, exc.message,
                )


__all__ = [
    "CONTEXT_RULES",
    "PASSIVE_KINDS",
    "TraversalDispatcher",
]
