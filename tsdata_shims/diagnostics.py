"""
tsdata_shims/diagnostics.py
═══════════════════════════

Diagnostic model and emitter for the ``no-unsafe-any`` checker.

  ┌──────────────┐   DiagnosticRecord   ┌──────────────────┐   accept()   ┌──────┐
  │ context rule │ ───────────────────► │ DiagnosticEmitter│ ───────────► │ sink │
  └──────────────┘                      │  (de-duplicates) │              └──────┘
                                        └──────────────────┘

``MessageKind`` is the stable wire contract with the host: its values are
the message ids the host sees, and each kind's placeholder set is fixed
by ``MESSAGE_DATA_KEYS``.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Dict,
    FrozenSet,
    Hashable,
    List,
    Mapping,
    Optional,
    Protocol,
    Set,
    Tuple,
    runtime_checkable,
)

from tsdata_shims.syntax import SourceSpan, SyntaxNode

logger = logging.getLogger(__name__)

RULE_ID = "no-unsafe-any"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — MESSAGE KINDS
# ═════════════════════════════════════════════════════════════════════════

class MessageKind(Enum):
    TYPE_REFERENCE_RESOLVES_TO_ANY = "typeReferenceResolvesToAny"
    LET_VARIABLE_WITH_NO_INITIAL_AND_NO_ANNOTATION = (
        "letVariableWithNoInitialAndNoAnnotation"
    )
    LET_VARIABLE_INITIALISED_TO_NULLISH_AND_NO_ANNOTATION = (
        "letVariableInitialisedToNullishAndNoAnnotation"
    )
    VARIABLE_DECLARATION_INITIALISED_TO_ANY_WITHOUT_ANNOTATION = (
        "variableDeclarationInitialisedToAnyWithoutAnnotation"
    )
    VARIABLE_DECLARATION_INITIALISED_TO_ANY_WITH_ANNOTATION = (
        "variableDeclarationInitialisedToAnyWithAnnotation"
    )
    VARIABLE_DECLARATION_INITIALISED_TO_ANY_ARRAY_WITHOUT_ANNOTATION = (
        "variableDeclarationInitialisedToAnyArrayWithoutAnnotation"
    )
    PATTERN_VARIABLE_DECLARATION_INITIALISED_TO_ANY = (
        "patternVariableDeclarationInitialisedToAny"
    )
    LOOP_VARIABLE_INITIALISED_TO_ANY = "loopVariableInitialisedToAny"
    RETURN_ANY = "returnAny"
    PASSED_ARGUMENT_IS_ANY = "passedArgumentIsAny"
    ASSIGNMENT_VALUE_IS_ANY = "assignmentValueIsAny"
    UPDATE_EXPRESSION_IS_ANY = "updateExpressionIsAny"
    BOOLEAN_TEST_IS_ANY = "booleanTestIsAny"
    SWITCH_DISCRIMINANT_IS_ANY = "switchDiscriminantIsAny"
    SWITCH_CASE_TEST_IS_ANY = "switchCaseTestIsAny"

    @property
    def template(self) -> str:
        return MESSAGES[self]

    @property
    def data_keys(self) -> FrozenSet[str]:
        return MESSAGE_DATA_KEYS.get(self, frozenset())


MESSAGES: Dict[MessageKind, str] = {
    MessageKind.TYPE_REFERENCE_RESOLVES_TO_ANY:
        "Referenced type {typeName} resolves to `any`.",
    MessageKind.LET_VARIABLE_WITH_NO_INITIAL_AND_NO_ANNOTATION:
        "Variable declared with {kind} with no initial value is implicitly "
        "typed as `any`.",
    MessageKind.LET_VARIABLE_INITIALISED_TO_NULLISH_AND_NO_ANNOTATION:
        "Variable declared with {kind} and initialised to `null` or "
        "`undefined` is implicitly typed as `any`. Add an explicit type "
        "annotation.",
    MessageKind.VARIABLE_DECLARATION_INITIALISED_TO_ANY_WITHOUT_ANNOTATION:
        "Variable declaration is initialised to `any` without an assertion "
        "or a type annotation.",
    MessageKind.VARIABLE_DECLARATION_INITIALISED_TO_ANY_WITH_ANNOTATION:
        "Variable declaration is initialised to `any` with an explicit type "
        "annotation, which is unsafe. Prefer explicit type narrowing via "
        "type guards.",
    MessageKind.VARIABLE_DECLARATION_INITIALISED_TO_ANY_ARRAY_WITHOUT_ANNOTATION:
        "Variable declaration is initialised to `any[]` without a type "
        "annotation. Add an explicit element type.",
    MessageKind.PATTERN_VARIABLE_DECLARATION_INITIALISED_TO_ANY:
        "Destructured variable {name} is initialised to `any`.",
    MessageKind.LOOP_VARIABLE_INITIALISED_TO_ANY:
        "Loop variable is initialised to `any`.",
    MessageKind.RETURN_ANY:
        "The type of the return is `any`.",
    MessageKind.PASSED_ARGUMENT_IS_ANY:
        "The passed argument is `any`.",
    MessageKind.ASSIGNMENT_VALUE_IS_ANY:
        "The value being assigned is `any`.",
    MessageKind.UPDATE_EXPRESSION_IS_ANY:
        "The operand of the update expression is `any`.",
    MessageKind.BOOLEAN_TEST_IS_ANY:
        "The condition of the test is `any`.",
    MessageKind.SWITCH_DISCRIMINANT_IS_ANY:
        "The switch discriminant is `any`.",
    MessageKind.SWITCH_CASE_TEST_IS_ANY:
        "The switch case test is `any`.",
}

MESSAGE_DATA_KEYS: Dict[MessageKind, FrozenSet[str]] = {
    MessageKind.TYPE_REFERENCE_RESOLVES_TO_ANY: frozenset({"typeName"}),
    MessageKind.LET_VARIABLE_WITH_NO_INITIAL_AND_NO_ANNOTATION:
        frozenset({"kind"}),
    MessageKind.LET_VARIABLE_INITIALISED_TO_NULLISH_AND_NO_ANNOTATION:
        frozenset({"kind"}),
    MessageKind.PATTERN_VARIABLE_DECLARATION_INITIALISED_TO_ANY:
        frozenset({"name"}),
}


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — DIAGNOSTIC RECORD
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DiagnosticRecord:
    """
    A single finding.

    Attributes
    ----------
    message_kind : MessageKind
    node         : anchor node the host highlights
    data         : placeholder values for the message template
    related      : offending sub-expressions, when they differ from the
                   anchor (e.g. the ``any`` argument of a call)
    rule_id      : always ``no-unsafe-any``
    """
    message_kind: MessageKind
    node: SyntaxNode
    data: Mapping[str, str] = field(default_factory=dict)
    related: Tuple[SyntaxNode, ...] = ()
    rule_id: str = RULE_ID

    def __post_init__(self) -> None:
        expected = self.message_kind.data_keys
        if set(self.data) != expected:
            raise ValueError(
                f"{self.message_kind.value} expects data keys "
                f"{sorted(expected)}, got {sorted(self.data)}"
            )

    @property
    def message_id(self) -> str:
        return self.message_kind.value

    @property
    def message(self) -> str:
        return self.message_kind.template.format(**self.data)

    @property
    def location(self) -> SourceSpan:
        return self.node.span

    @property
    def secondary(self) -> Tuple[SourceSpan, ...]:
        return tuple(n.span for n in self.related)

    @property
    def dedup_key(self) -> Hashable:
        return (
            id(self.node),
            self.message_kind,
            tuple(sorted(self.data.items())),
            tuple(id(n) for n in self.related),
        )

    def to_json(self) -> Dict[str, Any]:
        loc = self.location
        result: Dict[str, Any] = {
            "file": loc.file,
            "line": loc.line,
            "column": loc.column + 1,
            "endLine": loc.end_line,
            "endColumn": loc.end_column + 1,
            "ruleId": self.rule_id,
            "messageId": self.message_id,
            "message": self.message,
        }
        if self.data:
            result["data"] = dict(self.data)
        if self.secondary:
            result["related"] = [
                {"line": s.line, "column": s.column + 1} for s in self.secondary
            ]
        return result

    def to_json_str(self) -> str:
        return json.dumps(self.to_json(), sort_keys=True)

    def to_gcc_format(self) -> str:
        """GCC-style: file:line:col: warning: message [ruleId/messageId]."""
        return (
            f"{self.location}: warning: {self.message} "
            f"[{self.rule_id}/{self.message_id}]"
        )


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SINKS AND EMITTER
# ═════════════════════════════════════════════════════════════════════════

@runtime_checkable
class DiagnosticSink(Protocol):
    def accept(self, record: DiagnosticRecord) -> None: ...


class ListSink:
    """Collects records in arrival order."""

    def __init__(self) -> None:
        self.records: List[DiagnosticRecord] = []

    def accept(self, record: DiagnosticRecord) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)


class DiagnosticEmitter:
    """
    Forwards records to a sink, dropping exact repeats.

    Two records are the same when they share anchor node, message kind,
    data and related nodes. Emission is fire-and-forget.
    """

    def __init__(self, sink: DiagnosticSink) -> None:
        self.sink = sink
        self._seen: Set[Hashable] = set()
        self.emitted = 0
        self.duplicates = 0

    def emit(self, record: DiagnosticRecord) -> bool:
        key = record.dedup_key
        if key in self._seen:
            self.duplicates += 1
            logger.debug("Dropping duplicate %s at %s",
                         record.message_id, record.location)
            return False
        self._seen.add(key)
        self.emitted += 1
        self.sink.accept(record)
        return True

    def report(
        self,
        kind: MessageKind,
        node: SyntaxNode,
        data: Optional[Mapping[str, str]] = None,
        related: Tuple[SyntaxNode, ...] = (),
    ) -> bool:
        """Build a record and emit it."""
        return self.emit(DiagnosticRecord(
            message_kind=kind,
            node=node,
            data=dict(data or {}),
            related=related,
        ))


__all__ = [
    "RULE_ID",
    "MessageKind",
    "MESSAGES",
    "MESSAGE_DATA_KEYS",
    "DiagnosticRecord",
    "DiagnosticSink",
    "ListSink",
    "DiagnosticEmitter",
]
