# tests/test_classifier.py
"""
Tests for TypeClassifier: classification, oracle failures, spreads and
for-of element types.
"""

import logging
from unittest.mock import MagicMock

import pytest

from tsdata_shims.classifier import TypeClassification, TypeClassifier, classify_type
from tsdata_shims.errors import OracleResolutionError
from tsdata_shims.syntax import make_node
from tsdata_shims.type_oracle import MappingTypeOracle, ResolvedType, TypeFlag
from tests.conftest import ANY, ANY_ARRAY, NUMBER, NUMBER_ARRAY, STRING_OR_NUMBER


class TestClassifyType:

    @pytest.mark.parametrize("resolved,expected", [
        (ANY, TypeClassification.UNSAFE),
        (ANY_ARRAY, TypeClassification.UNSAFE_ARRAY),
        (ResolvedType.array_of(ANY, readonly=True), TypeClassification.UNSAFE_ARRAY),
        (NUMBER, TypeClassification.SAFE),
        (NUMBER_ARRAY, TypeClassification.SAFE),
        (ResolvedType.array_of(ANY_ARRAY), TypeClassification.SAFE),
        (ResolvedType.of(TypeFlag.UNKNOWN), TypeClassification.SAFE),
        (ResolvedType.reference("Map<string, any>"), TypeClassification.SAFE),
        (None, TypeClassification.SAFE),
    ])
    def test_classification(self, resolved, expected):
        assert classify_type(resolved) is expected

    def test_is_unsafe(self):
        assert TypeClassification.UNSAFE.is_unsafe
        assert TypeClassification.UNSAFE_ARRAY.is_unsafe
        assert not TypeClassification.SAFE.is_unsafe


class TestTypeClassifier:

    def _bound(self, ts):
        oracle = MappingTypeOracle()
        node = make_node("Identifier", name="x")
        oracle.bind(node, ts)
        return TypeClassifier(oracle), node

    def test_classify_node(self):
        classifier, node = self._bound(ANY)
        assert classifier.classify(node) is TypeClassification.UNSAFE

    def test_repeated_queries_agree(self):
        classifier, node = self._bound(ANY_ARRAY)
        assert classifier.classify(node) is classifier.classify(node)

    def test_missing_type_is_safe(self, caplog):
        classifier = TypeClassifier(MappingTypeOracle())
        with caplog.at_level(logging.DEBUG, logger="tsdata_shims.classifier"):
            result = classifier.classify(make_node("Identifier", name="x"))
        assert result is TypeClassification.SAFE
        assert classifier.failures == 1
        assert "Type unavailable" in caplog.text

    def test_oracle_exception_is_contained(self):
        oracle = MagicMock()
        oracle.resolve_type.side_effect = RuntimeError("checker crashed")
        classifier = TypeClassifier(oracle)
        assert classifier.classify(make_node("Identifier")) is TypeClassification.SAFE
        assert classifier.failures == 1

    def test_resolution_error_from_mock_oracle(self):
        oracle = MagicMock()
        oracle.resolve_type.side_effect = OracleResolutionError("no type")
        classifier = TypeClassifier(oracle)
        assert classifier.resolve(make_node("Identifier")) is None

    def test_none_node(self):
        oracle = MagicMock()
        classifier = TypeClassifier(oracle)
        assert classifier.classify(None) is TypeClassification.SAFE
        oracle.resolve_type.assert_not_called()

    def test_spread_argument_uses_operand(self):
        oracle = MappingTypeOracle()
        operand = make_node("Identifier", name="xs")
        spread = make_node("SpreadElement", argument=operand)
        oracle.bind(operand, ANY)
        classifier = TypeClassifier(oracle)
        assert classifier.classify_argument(spread) is TypeClassification.UNSAFE

    @pytest.mark.parametrize("iterated,expected", [
        (ANY, TypeClassification.UNSAFE),
        (ANY_ARRAY, TypeClassification.UNSAFE),
        (ResolvedType.array_of(ANY_ARRAY), TypeClassification.UNSAFE_ARRAY),
        (NUMBER_ARRAY, TypeClassification.SAFE),
        (NUMBER, TypeClassification.SAFE),
    ])
    def test_classify_iterated(self, iterated, expected):
        classifier, node = self._bound(iterated)
        assert classifier.classify_iterated(node) is expected

    @pytest.mark.parametrize("ts,expected", [
        (NUMBER, True),
        (STRING_OR_NUMBER, False),
        (ANY, False),
    ])
    def test_is_numeric_like(self, ts, expected):
        classifier, node = self._bound(ts)
        assert classifier.is_numeric_like(node) is expected
