"""
tsdata_shims — ``no-unsafe-any`` checker for type-resolved ESTree dumps
=======================================================================

This package flags every place where a value typed as the unsafe ``any``
type (or ``any[]``) flows silently into a typed context: declarations,
destructuring, loops, returns, call arguments, assignments, updates,
conditions and switches.

Core modules
------------
syntax
    Read-only node model, spans, traversal and shape predicates.
type_oracle
    ``TypeOracle`` / ``TypeDescriptor`` protocols and ``ResolvedType``.
classifier
    Reduces resolved types to UNSAFE / UNSAFE_ARRAY / SAFE.
rules
    One function per syntactic context.
dispatcher
    Closed ``NodeKind`` routing table and the single pre-order pass.
diagnostics
    ``MessageKind`` wire enumeration, records, sinks, de-duplicating emitter.
config
    ``RuleConfiguration``.
dump
    JSON dump loader (tree + per-node types + source text).
checker
    ``analyze()``, multi-file runner and the command line.

Quick start
-----------
>>> from tsdata_shims import analyze, load_dump
>>> for dump_file in load_dump("app.ts.json"):
...     for record in analyze(dump_file.tree, dump_file.oracle):
...         print(record.to_gcc_format())
"""

from __future__ import annotations

import logging
from typing import List

from tsdata_shims.checker import (
    CheckerRunner,
    CheckerRunResults,
    PassStats,
    analyze,
    run_dumps,
)
from tsdata_shims.classifier import TypeClassification, TypeClassifier, classify_type
from tsdata_shims.config import RuleConfiguration
from tsdata_shims.diagnostics import (
    RULE_ID,
    DiagnosticEmitter,
    DiagnosticRecord,
    DiagnosticSink,
    ListSink,
    MessageKind,
)
from tsdata_shims.dump import DumpFile, decode_dump, load_dump
from tsdata_shims.errors import (
    ConfigurationError,
    DumpFormatError,
    MalformedTreeError,
    OracleResolutionError,
    ShimsError,
)
from tsdata_shims.syntax import NodeKind, SourceSpan, SyntaxNode, SyntaxTree, make_node
from tsdata_shims.type_oracle import (
    MappingTypeOracle,
    ResolvedType,
    TypeDescriptor,
    TypeFlag,
    TypeOracle,
)

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__author__ = "tsdata-shims contributors"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__: List[str] = [
    # host interface
    "analyze",
    "CheckerRunner",
    "CheckerRunResults",
    "PassStats",
    "run_dumps",
    "RuleConfiguration",
    # diagnostics
    "RULE_ID",
    "MessageKind",
    "DiagnosticRecord",
    "DiagnosticSink",
    "DiagnosticEmitter",
    "ListSink",
    # types
    "TypeClassification",
    "TypeClassifier",
    "classify_type",
    "TypeOracle",
    "TypeDescriptor",
    "TypeFlag",
    "ResolvedType",
    "MappingTypeOracle",
    # trees
    "NodeKind",
    "SourceSpan",
    "SyntaxNode",
    "SyntaxTree",
    "make_node",
    "DumpFile",
    "decode_dump",
    "load_dump",
    # errors
    "ShimsError",
    "OracleResolutionError",
    "MalformedTreeError",
    "ConfigurationError",
    "DumpFormatError",
]
