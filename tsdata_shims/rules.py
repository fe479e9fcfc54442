"""
tsdata_shims/rules.py
═════════════════════

Context rules of the ``no-unsafe-any`` checker.

Each rule is a plain function ``rule(node, ctx)`` that receives a node of
the kind it is registered for (see ``dispatcher.CONTEXT_RULES``), checks
the remaining shape constraints itself, and reports at most one record
per anchor through ``ctx.report``.

  ┌────────────────────────────┬───────────────────────────────────────────┐
  │ node kind                  │ rules                                     │
  ├────────────────────────────┼───────────────────────────────────────────┤
  │ TSTypeReference            │ type_reference_resolves_to_any            │
  │ VariableDeclarator         │ let_without_initial, let_initialised_to_  │
  │                            │ nullish, initialised_to_any, initialised_ │
  │                            │ to_any_array, pattern_initialised_to_any  │
  │ ForOfStatement             │ loop_variable_initialised_to_any          │
  │ ReturnStatement / arrow    │ return_any / expression_body_any          │
  │ CallExpression / New…      │ passed_argument_is_any                    │
  │ AssignmentExpression       │ assignment_value_is_any                   │
  │ UpdateExpression           │ update_expression_is_any                  │
  │ if/while/do/for/ternary    │ boolean_test_is_any                       │
  │ SwitchStatement/SwitchCase │ switch_discriminant_is_any / case_test    │
  └────────────────────────────┴───────────────────────────────────────────┘

A ``MalformedTreeError`` escaping a rule means a slot the grammar
guarantees is absent; the dispatcher skips that one invocation.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, Mapping, Optional, Tuple

from tsdata_shims.classifier import TypeClassification, TypeClassifier
from tsdata_shims.config import RuleConfiguration
from tsdata_shims.diagnostics import DiagnosticEmitter, MessageKind
from tsdata_shims.syntax import (
    PATTERN_KINDS,
    NodeKind,
    SyntaxNode,
    SyntaxTree,
    has_type_annotation,
    is_identifier_named,
    is_null_literal,
    is_type_assertion,
    is_undefined_identifier,
    iter_pattern_leaves,
)

MUTABLE_DECLARATION_KINDS: FrozenSet[str] = frozenset({"let", "var"})

LOOP_BINDING_KINDS: FrozenSet[NodeKind] = frozenset({
    NodeKind.FOR_OF_STATEMENT,
    NodeKind.FOR_IN_STATEMENT,
})


@dataclass
class RuleContext:
    """
    Everything a rule may consult during one pass.

    Attributes
    ----------
    tree       : the tree being analysed (for verbatim source text)
    classifier : TypeClassifier bound to the pass's oracle
    emitter    : DiagnosticEmitter feeding the host sink
    config     : RuleConfiguration, read-only
    """
    tree: SyntaxTree
    classifier: TypeClassifier
    emitter: DiagnosticEmitter
    config: RuleConfiguration

    def classify(self, node: Optional[SyntaxNode]) -> TypeClassification:
        return self.classifier.classify(node)

    def report(
        self,
        kind: MessageKind,
        node: SyntaxNode,
        data: Optional[Mapping[str, str]] = None,
        related: Tuple[SyntaxNode, ...] = (),
    ) -> None:
        self.emitter.report(kind, node, data, related)


Rule = Callable[[SyntaxNode, RuleContext], None]


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SHAPE HELPERS
# ═════════════════════════════════════════════════════════════════════════

def _declaration_of(declarator: SyntaxNode) -> Optional[SyntaxNode]:
    parent = declarator.parent
    if parent is None or parent.kind is not NodeKind.VARIABLE_DECLARATION:
        return None
    return parent


def _mutable_declaration_kind(declarator: SyntaxNode) -> Optional[str]:
    """``"let"``/``"var"`` for a declarator of such a declaration."""
    declaration = _declaration_of(declarator)
    if declaration is None:
        return None
    kind = declaration.attr("kind")
    return kind if kind in MUTABLE_DECLARATION_KINDS else None


def _is_loop_binding(declaration: SyntaxNode) -> bool:
    """``for (let x of xs)``: the binding takes its type from ``xs``."""
    parent = declaration.parent
    return (
        parent is not None
        and parent.kind in LOOP_BINDING_KINDS
        and declaration.field_name == "left"
    )


def _is_array_constructor(node: SyntaxNode) -> bool:
    return (
        node.is_kind(NodeKind.CALL_EXPRESSION, NodeKind.NEW_EXPRESSION)
        and is_identifier_named(node.child("callee"), "Array")
    )


def _array_constructor_yields_any(node: SyntaxNode, ctx: RuleContext) -> bool:
    """
    ``Array()`` and ``Array(n)`` build ``any[]``.

    Two or more arguments build an array of their types, and a single
    non-numeric argument builds a one-element array of its type. An
    explicit type argument (``new Array<string>()``) fixes the element type.
    """
    if node.has("typeArguments") or node.has("typeParameters"):
        return False
    args = node.require_list("arguments")
    if not args:
        return True
    if len(args) != 1:
        return False
    arg = args[0]
    if arg is None or arg.kind is NodeKind.SPREAD_ELEMENT:
        return False
    return ctx.classifier.is_numeric_like(arg)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — TYPE REFERENCES
# ═════════════════════════════════════════════════════════════════════════

def type_reference_resolves_to_any(node: SyntaxNode, ctx: RuleContext) -> None:
    if ctx.classify(node) is not TypeClassification.UNSAFE:
        return
    ctx.report(
        MessageKind.TYPE_REFERENCE_RESOLVES_TO_ANY,
        node,
        {"typeName": ctx.tree.text_of(node)},
    )


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — VARIABLE DECLARATORS
# ═════════════════════════════════════════════════════════════════════════

def let_without_initial(node: SyntaxNode, ctx: RuleContext) -> None:
    kind = _mutable_declaration_kind(node)
    if kind is None or node.has("init"):
        return
    declaration = node.parent
    if declaration is not None and _is_loop_binding(declaration):
        return
    if has_type_annotation(node.require("id")):
        return
    ctx.report(
        MessageKind.LET_VARIABLE_WITH_NO_INITIAL_AND_NO_ANNOTATION,
        node,
        {"kind": kind},
    )


def let_initialised_to_nullish(node: SyntaxNode, ctx: RuleContext) -> None:
    kind = _mutable_declaration_kind(node)
    init = node.child("init")
    if kind is None or init is None:
        return
    if has_type_annotation(node.require("id")):
        return
    if is_null_literal(init) or is_undefined_identifier(init):
        ctx.report(
            MessageKind.LET_VARIABLE_INITIALISED_TO_NULLISH_AND_NO_ANNOTATION,
            node,
            {"kind": kind},
        )


def initialised_to_any(node: SyntaxNode, ctx: RuleContext) -> None:
    init = node.child("init")
    if _declaration_of(node) is None or init is None:
        return
    # `x as any` / `<any>x` are explicit and left alone
    if is_type_assertion(init):
        return
    if ctx.classify(init) is not TypeClassification.UNSAFE:
        return

    if not has_type_annotation(node.require("id")):
        ctx.report(
            MessageKind.VARIABLE_DECLARATION_INITIALISED_TO_ANY_WITHOUT_ANNOTATION,
            node,
        )
        return

    if ctx.config.allow_annotation_from_any:
        return
    ctx.report(
        MessageKind.VARIABLE_DECLARATION_INITIALISED_TO_ANY_WITH_ANNOTATION,
        node,
    )


def initialised_to_any_array(node: SyntaxNode, ctx: RuleContext) -> None:
    init = node.child("init")
    if _declaration_of(node) is None or init is None:
        return
    if has_type_annotation(node.require("id")):
        return

    if init.kind is NodeKind.ARRAY_EXPRESSION:
        flagged = not init.children("elements")
    elif _is_array_constructor(init):
        flagged = _array_constructor_yields_any(init, ctx)
    else:
        flagged = False

    if flagged:
        ctx.report(
            MessageKind.VARIABLE_DECLARATION_INITIALISED_TO_ANY_ARRAY_WITHOUT_ANNOTATION,
            node,
        )


def pattern_initialised_to_any(node: SyntaxNode, ctx: RuleContext) -> None:
    binding = node.require("id")
    if binding.kind not in PATTERN_KINDS or not node.has("init"):
        return
    for leaf in iter_pattern_leaves(binding):
        if ctx.classify(leaf) is TypeClassification.UNSAFE:
            ctx.report(
                MessageKind.PATTERN_VARIABLE_DECLARATION_INITIALISED_TO_ANY,
                leaf,
                {"name": leaf.name},
            )


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — VALUE FLOW POSITIONS
# ═════════════════════════════════════════════════════════════════════════

def loop_variable_initialised_to_any(node: SyntaxNode, ctx: RuleContext) -> None:
    left = node.require("left")
    if ctx.classifier.classify_iterated(node.require("right")).is_unsafe:
        ctx.report(MessageKind.LOOP_VARIABLE_INITIALISED_TO_ANY, left)


def return_any(node: SyntaxNode, ctx: RuleContext) -> None:
    argument = node.child("argument")
    if argument is not None and ctx.classify(argument).is_unsafe:
        ctx.report(MessageKind.RETURN_ANY, node)


def expression_body_any(node: SyntaxNode, ctx: RuleContext) -> None:
    """``(x) => expr`` returns ``expr``."""
    body = node.require("body")
    if body.kind is NodeKind.BLOCK_STATEMENT:
        return
    if ctx.classify(body).is_unsafe:
        ctx.report(MessageKind.RETURN_ANY, body)


def passed_argument_is_any(node: SyntaxNode, ctx: RuleContext) -> None:
    for argument in node.require_list("arguments"):
        if argument is None:
            continue
        if ctx.classifier.classify_argument(argument).is_unsafe:
            ctx.report(
                MessageKind.PASSED_ARGUMENT_IS_ANY, node, related=(argument,),
            )


def assignment_value_is_any(node: SyntaxNode, ctx: RuleContext) -> None:
    if ctx.classify(node.require("right")).is_unsafe:
        ctx.report(MessageKind.ASSIGNMENT_VALUE_IS_ANY, node)


def update_expression_is_any(node: SyntaxNode, ctx: RuleContext) -> None:
    if ctx.classify(node.require("argument")).is_unsafe:
        ctx.report(MessageKind.UPDATE_EXPRESSION_IS_ANY, node)


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — TEST POSITIONS
# ═════════════════════════════════════════════════════════════════════════

def boolean_test_is_any(node: SyntaxNode, ctx: RuleContext) -> None:
    # `for (;;)` has no test
    if node.kind is NodeKind.FOR_STATEMENT:
        test = node.child("test")
        if test is None:
            return
    else:
        test = node.require("test")
    if ctx.classify(test).is_unsafe:
        ctx.report(MessageKind.BOOLEAN_TEST_IS_ANY, test)


def switch_discriminant_is_any(node: SyntaxNode, ctx: RuleContext) -> None:
    discriminant = node.require("discriminant")
    if ctx.classify(discriminant).is_unsafe:
        ctx.report(MessageKind.SWITCH_DISCRIMINANT_IS_ANY, discriminant)


def switch_case_test_is_any(node: SyntaxNode, ctx: RuleContext) -> None:
    test = node.child("test")
    if test is None:  # default:
        return
    if ctx.classify(test).is_unsafe:
        ctx.report(MessageKind.SWITCH_CASE_TEST_IS_ANY, test)


__all__ = [
    "Rule",
    "RuleContext",
    "type_reference_resolves_to_any",
    "let_without_initial",
    "let_initialised_to_nullish",
    "initialised_to_any",
    "initialised_to_any_array",
    "pattern_initialised_to_any",
    "loop_variable_initialised_to_any",
    "return_any",
    "expression_body_any",
    "passed_argument_is_any",
    "assignment_value_is_any",
    "update_expression_is_any",
    "boolean_test_is_any",
    "switch_discriminant_is_any",
    "switch_case_test_is_any",
]
