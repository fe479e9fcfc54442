# tests/test_diagnostics.py
"""
Tests for message kinds, diagnostic records and the de-duplicating emitter.
"""

import json
from unittest.mock import MagicMock

import pytest

from tsdata_shims.diagnostics import (
    MESSAGE_DATA_KEYS,
    MESSAGES,
    RULE_ID,
    DiagnosticEmitter,
    DiagnosticRecord,
    DiagnosticSink,
    ListSink,
    MessageKind,
)
from tsdata_shims.syntax import SourceSpan, make_node


EXPECTED_IDS = [
    "typeReferenceResolvesToAny",
    "letVariableWithNoInitialAndNoAnnotation",
    "letVariableInitialisedToNullishAndNoAnnotation",
    "variableDeclarationInitialisedToAnyWithoutAnnotation",
    "variableDeclarationInitialisedToAnyWithAnnotation",
    "variableDeclarationInitialisedToAnyArrayWithoutAnnotation",
    "patternVariableDeclarationInitialisedToAny",
    "loopVariableInitialisedToAny",
    "returnAny",
    "passedArgumentIsAny",
    "assignmentValueIsAny",
    "updateExpressionIsAny",
    "booleanTestIsAny",
    "switchDiscriminantIsAny",
    "switchCaseTestIsAny",
]


def _ident(name="x", line=1, column=0):
    return make_node("Identifier", span=SourceSpan("a.ts", line, column, line,
                                                   column + len(name)),
                     name=name)


class TestMessageKind:

    def test_wire_ids(self):
        assert [k.value for k in MessageKind] == EXPECTED_IDS

    @pytest.mark.parametrize("kind", list(MessageKind))
    def test_every_kind_has_a_template(self, kind):
        assert kind in MESSAGES
        placeholders = {
            part.split("}")[0] for part in kind.template.split("{")[1:]
        }
        assert placeholders == set(kind.data_keys)

    def test_data_keys(self):
        assert MESSAGE_DATA_KEYS[MessageKind.TYPE_REFERENCE_RESOLVES_TO_ANY] == {"typeName"}
        assert MessageKind.RETURN_ANY.data_keys == frozenset()
        assert MESSAGE_DATA_KEYS[
            MessageKind.PATTERN_VARIABLE_DECLARATION_INITIALISED_TO_ANY
        ] == {"name"}


class TestDiagnosticRecord:

    def test_message_formatting(self):
        record = DiagnosticRecord(
            MessageKind.LET_VARIABLE_WITH_NO_INITIAL_AND_NO_ANNOTATION,
            _ident(), {"kind": "var"},
        )
        assert record.message.startswith("Variable declared with var ")
        assert record.message_id == "letVariableWithNoInitialAndNoAnnotation"
        assert record.rule_id == RULE_ID

    def test_missing_data_key(self):
        with pytest.raises(ValueError):
            DiagnosticRecord(MessageKind.TYPE_REFERENCE_RESOLVES_TO_ANY, _ident())

    def test_unexpected_data_key(self):
        with pytest.raises(ValueError):
            DiagnosticRecord(MessageKind.RETURN_ANY, _ident(), {"name": "x"})

    def test_to_json(self):
        arg = _ident("a", line=2, column=6)
        call = make_node("CallExpression",
                         span=SourceSpan("a.ts", 2, 0, 2, 8),
                         callee=_ident("f", line=2), arguments=[arg])
        record = DiagnosticRecord(MessageKind.PASSED_ARGUMENT_IS_ANY, call,
                                  related=(arg,))
        data = json.loads(record.to_json_str())
        assert data["file"] == "a.ts"
        assert data["line"] == 2
        assert data["column"] == 1
        assert data["endColumn"] == 9
        assert data["ruleId"] == "no-unsafe-any"
        assert data["messageId"] == "passedArgumentIsAny"
        assert data["related"] == [{"line": 2, "column": 7}]
        assert "data" not in data

    def test_to_gcc_format(self):
        record = DiagnosticRecord(MessageKind.RETURN_ANY, _ident(line=4))
        assert record.to_gcc_format() == (
            "a.ts:4:1: warning: The type of the return is `any`. "
            "[no-unsafe-any/returnAny]"
        )

    def test_secondary_spans(self):
        arg = _ident("a", line=3)
        record = DiagnosticRecord(MessageKind.PASSED_ARGUMENT_IS_ANY,
                                  _ident("f"), related=(arg,))
        assert record.secondary == (arg.span,)


class TestDiagnosticEmitter:

    def test_duplicate_is_dropped(self):
        sink = ListSink()
        emitter = DiagnosticEmitter(sink)
        node = _ident()
        assert emitter.report(MessageKind.RETURN_ANY, node)
        assert not emitter.report(MessageKind.RETURN_ANY, node)
        assert len(sink) == 1
        assert emitter.emitted == 1
        assert emitter.duplicates == 1

    def test_different_kind_same_node(self):
        sink = ListSink()
        emitter = DiagnosticEmitter(sink)
        node = _ident()
        emitter.report(MessageKind.RETURN_ANY, node)
        emitter.report(MessageKind.BOOLEAN_TEST_IS_ANY, node)
        assert len(sink) == 2

    def test_different_data_same_node(self):
        sink = ListSink()
        emitter = DiagnosticEmitter(sink)
        node = _ident()
        kind = MessageKind.PATTERN_VARIABLE_DECLARATION_INITIALISED_TO_ANY
        emitter.report(kind, node, {"name": "a"})
        emitter.report(kind, node, {"name": "b"})
        assert len(sink) == 2

    def test_same_span_different_related(self):
        sink = ListSink()
        emitter = DiagnosticEmitter(sink)
        call = _ident("f")
        first, second = _ident("a"), _ident("a")
        emitter.report(MessageKind.PASSED_ARGUMENT_IS_ANY, call, related=(first,))
        emitter.report(MessageKind.PASSED_ARGUMENT_IS_ANY, call, related=(second,))
        assert len(sink) == 2

    def test_equal_nodes_at_distinct_identity_are_distinct(self):
        sink = ListSink()
        emitter = DiagnosticEmitter(sink)
        emitter.report(MessageKind.RETURN_ANY, _ident())
        emitter.report(MessageKind.RETURN_ANY, _ident())
        assert len(sink) == 2

    def test_custom_sink(self):
        sink = MagicMock()
        emitter = DiagnosticEmitter(sink)
        emitter.report(MessageKind.RETURN_ANY, _ident())
        sink.accept.assert_called_once()
        record = sink.accept.call_args[0][0]
        assert record.message_kind is MessageKind.RETURN_ANY

    def test_list_sink_is_a_sink(self):
        assert isinstance(ListSink(), DiagnosticSink)
