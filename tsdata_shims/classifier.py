"""
tsdata_shims/classifier.py
══════════════════════════

Reduces resolved types to the three-valued ``TypeClassification``.

    UNSAFE        the type is exactly ``any``
    UNSAFE_ARRAY  an array / readonly array whose element is exactly ``any``
    SAFE          everything else, including unresolvable nodes

The classifier is a pure function of the oracle's answers: nothing is
cached, and a node the oracle cannot resolve is reported as SAFE so the
checker never reports on information it does not have.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from tsdata_shims.errors import OracleResolutionError
from tsdata_shims.syntax import NodeKind, SyntaxNode
from tsdata_shims.type_oracle import TypeDescriptor, TypeOracle

logger = logging.getLogger(__name__)


class TypeClassification(Enum):
    UNSAFE = "unsafe"
    UNSAFE_ARRAY = "unsafeArray"
    SAFE = "safe"

    @property
    def is_unsafe(self) -> bool:
        """True for both UNSAFE and UNSAFE_ARRAY."""
        return self is not TypeClassification.SAFE


def classify_type(resolved: Optional[TypeDescriptor]) -> TypeClassification:
    """Classify an already resolved type."""
    if resolved is None:
        return TypeClassification.SAFE
    if resolved.is_any():
        return TypeClassification.UNSAFE
    if resolved.is_array():
        element = resolved.element_type()
        if element is not None and element.is_any():
            return TypeClassification.UNSAFE_ARRAY
    return TypeClassification.SAFE


class TypeClassifier:
    """
    Classifies syntax nodes through a ``TypeOracle``.

    Usage
    -----
    >>> classifier = TypeClassifier(oracle)
    >>> classifier.classify(init_node)
    <TypeClassification.UNSAFE: 'unsafe'>
    """

    def __init__(self, oracle: TypeOracle) -> None:
        self.oracle = oracle
        self.failures = 0

    def resolve(self, node: Optional[SyntaxNode]) -> Optional[TypeDescriptor]:
        """
        Resolve ``node`` or return None.

        Oracle failures never escape: they degrade this single query.
        """
        if node is None:
            return None
        try:
            return self.oracle.resolve_type(node)
        except OracleResolutionError as exc:
            self.failures += 1
            logger.debug("Type unavailable for %r: %s", node, exc.message)
        except Exception as exc:
            self.failures += 1
            logger.debug("Oracle failed for %r: %s", node, exc)
        return None

    def classify(self, node: Optional[SyntaxNode]) -> TypeClassification:
        return classify_type(self.resolve(node))

    def classify_argument(self, node: Optional[SyntaxNode]) -> TypeClassification:
        """Spread arguments are classified by their operand (``...xs``)."""
        if node is not None and node.kind is NodeKind.SPREAD_ELEMENT:
            return self.classify(node.require("argument"))
        return self.classify(node)

    def classify_iterated(self, node: Optional[SyntaxNode]) -> TypeClassification:
        """
        Classify what a ``for-of`` over ``node`` binds.

        Iterating ``any`` yields ``any``; iterating ``T[]`` yields ``T``.
        """
        resolved = self.resolve(node)
        if resolved is None:
            return TypeClassification.SAFE
        if resolved.is_any():
            return TypeClassification.UNSAFE
        if resolved.is_array():
            return classify_type(resolved.element_type())
        return TypeClassification.SAFE

    def is_numeric_like(self, node: Optional[SyntaxNode]) -> bool:
        resolved = self.resolve(node)
        return resolved is not None and resolved.is_numeric_like()


__all__ = [
    "TypeClassification",
    "TypeClassifier",
    "classify_type",
]
