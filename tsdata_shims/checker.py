"""
tsdata_shims/checker.py
═══════════════════════

Host-facing surface of the ``no-unsafe-any`` checker.

  ┌─────────────────────────────────────────────────────────┐
  │                   CheckerRunner                         │
  │   for each DumpFile:                                    │
  │  ┌───────────────────────────────────────────────────┐  │
  │  │ analyze(tree, oracle, config)                     │  │
  │  │   TraversalDispatcher ─► rules ─► TypeClassifier  │  │
  │  │                           │            │          │  │
  │  │                           ▼            ▼          │  │
  │  │                 DiagnosticEmitter   TypeOracle    │  │
  │  └───────────────────────────┬───────────────────────┘  │
  │                              ▼                          │
  │              CheckerRunResults (JSON / GCC / summary)   │
  └─────────────────────────────────────────────────────────┘

``analyze`` is the whole contract: deterministic, configuration passed
explicitly, records returned in document order.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

import logging
import sys
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import (
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
)

from tsdata_shims.classifier import TypeClassifier
from tsdata_shims.config import RuleConfiguration
from tsdata_shims.diagnostics import (
    DiagnosticEmitter,
    DiagnosticRecord,
    DiagnosticSink,
    ListSink,
    MessageKind,
)
from tsdata_shims.dispatcher import TraversalDispatcher
from tsdata_shims.dump import DumpFile, load_dump
from tsdata_shims.errors import ConfigurationError, DumpFormatError
from tsdata_shims.rules import RuleContext
from tsdata_shims.syntax import SyntaxTree
from tsdata_shims.type_oracle import TypeOracle

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SINGLE PASS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class PassStats:
    """Counters for one ``analyze`` pass."""
    nodes_visited: int = 0
    diagnostics: int = 0
    duplicates: int = 0
    oracle_failures: int = 0
    skipped_rules: int = 0
    elapsed_ms: float = 0.0


def analyze(
    tree: SyntaxTree,
    oracle: TypeOracle,
    config: Optional[RuleConfiguration] = None,
    sink: Optional[DiagnosticSink] = None,
    stats: Optional[PassStats] = None,
) -> List[DiagnosticRecord]:
    """
    Run the checker over one tree.

    Parameters
    ----------
    tree   : SyntaxTree to analyse (never modified)
    oracle : TypeOracle answering for ``tree``'s nodes
    config : RuleConfiguration (defaults apply when None)
    sink   : optional extra sink receiving records as they are emitted
    stats  : optional PassStats filled in place

    Returns
    -------
    The emitted records in traversal order.
    """
    config = config or RuleConfiguration()
    collected = ListSink()
    emitter = DiagnosticEmitter(_FanOut(collected, sink) if sink else collected)
    classifier = TypeClassifier(oracle)
    dispatcher = TraversalDispatcher(RuleContext(
        tree=tree, classifier=classifier, emitter=emitter, config=config,
    ))

    t0 = time.monotonic()
    dispatcher.run()
    elapsed_ms = (time.monotonic() - t0) * 1000.0

    if stats is not None:
        stats.nodes_visited = dispatcher.visited
        stats.diagnostics = emitter.emitted
        stats.duplicates = emitter.duplicates
        stats.oracle_failures = classifier.failures
        stats.skipped_rules = dispatcher.skipped
        stats.elapsed_ms = elapsed_ms

    logger.debug(
        "%s: %d nodes, %d diagnostics, %d oracle misses, %d skipped rules",
        tree.file or "<memory>", dispatcher.visited, emitter.emitted,
        classifier.failures, dispatcher.skipped,
    )
    return list(collected.records)


class _FanOut:
    def __init__(self, *sinks: DiagnosticSink) -> None:
        self.sinks = sinks

    def accept(self, record: DiagnosticRecord) -> None:
        for sink in self.sinks:
            sink.accept(record)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — MULTI-FILE RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running the checker over several files.

    Attributes
    ----------
    diagnostics         : all records, file by file in input order
    diagnostics_by_file : records grouped by file
    stats               : PassStats per file
    """
    diagnostics: List[DiagnosticRecord] = field(default_factory=list)
    diagnostics_by_file: Dict[str, List[DiagnosticRecord]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, PassStats] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_kind(self, kind: MessageKind) -> List[DiagnosticRecord]:
        return [d for d in self.diagnostics if d.message_kind is kind]

    def by_file(self, file: str) -> List[DiagnosticRecord]:
        return list(self.diagnostics_by_file.get(file, []))

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"no-unsafe-any: {self.total_count} diagnostics in "
            f"{len(self.stats)} file(s)",
        ]
        counts: Dict[str, int] = defaultdict(int)
        for d in self.diagnostics:
            counts[d.message_id] += 1
        for message_id in sorted(counts):
            lines.append(f"  {message_id}: {counts[message_id]}")
        for file, st in self.stats.items():
            lines.append(
                f"  {file}: {st.diagnostics} findings, "
                f"{st.oracle_failures} untyped nodes ({st.elapsed_ms:.1f}ms)"
            )
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs ``analyze`` over dump files.

    Usage
    -----
    >>> runner = CheckerRunner(RuleConfiguration(allow_annotation_from_any=True))
    >>> results = runner.run_files(load_dump("app.ts.json"))
    >>> print(results.summary())

    Parameters
    ----------
    config   : RuleConfiguration shared by every pass
    suppress : message ids dropped from the results
    """

    def __init__(
        self,
        config: Optional[RuleConfiguration] = None,
        suppress: Optional[Iterable[str]] = None,
    ) -> None:
        self.config = config or RuleConfiguration()
        self.suppressed: Set[MessageKind] = set()
        for message_id in suppress or ():
            try:
                self.suppressed.add(MessageKind(message_id))
            except ValueError:
                raise ConfigurationError(
                    f"cannot suppress unknown message id '{message_id}'"
                ) from None
        for warning in self.config.validate():
            logger.warning("RuleConfiguration: %s", warning)

    def run_file(self, dump_file: DumpFile) -> List[DiagnosticRecord]:
        return self.run_files([dump_file]).diagnostics

    def run_files(self, files: Sequence[DumpFile]) -> CheckerRunResults:
        results = CheckerRunResults()
        for dump_file in files:
            stats = PassStats()
            records = [
                r for r in analyze(
                    dump_file.tree, dump_file.oracle, self.config, stats=stats,
                )
                if r.message_kind not in self.suppressed
            ]
            results.diagnostics.extend(records)
            results.diagnostics_by_file[dump_file.file].extend(records)
            results.stats[dump_file.file] = stats
        logger.info("Checked %d file(s): %d diagnostics",
                    len(files), results.total_count)
        return results


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — COMMAND LINE
# ═════════════════════════════════════════════════════════════════════════

def run_dumps(
    dump_paths: Sequence[str],
    config: Optional[RuleConfiguration] = None,
    output: str = "json",
    suppress: Optional[Sequence[str]] = None,
) -> int:
    """
    Check dump files and write results to stdout.

    Returns
    -------
    Exit code (0 = clean, 1 = diagnostics reported)
    """
    files: List[DumpFile] = []
    for path in dump_paths:
        files.extend(load_dump(path))

    runner = CheckerRunner(config, suppress=suppress)
    results = runner.run_files(files)

    if output == "json":
        for record in results.diagnostics:
            sys.stdout.write(record.to_json_str() + "\n")
    elif output == "gcc":
        for record in results.diagnostics:
            sys.stdout.write(record.to_gcc_format() + "\n")
    else:
        sys.stdout.write(results.summary() + "\n")

    return 1 if results.total_count else 0


def _list_messages() -> None:
    for kind in MessageKind:
        keys = ", ".join(sorted(kind.data_keys)) or "-"
        print(f"  {kind.value}")
        print(f"      {kind.template}")
        print(f"      data: {keys}")


def _main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``python -m tsdata_shims``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="no-unsafe-any checker for type-resolved ESTree dumps",
        prog="tsdata-shims",
    )
    parser.add_argument("dump_files", nargs="*", help="Path(s) to .json dumps")
    parser.add_argument(
        "--config", default=None,
        help="JSON file holding the rule options",
    )
    parser.add_argument(
        "--allow-annotation-from-any", action="store_true", default=None,
        help="Do not report annotated declarations initialised from any",
    )
    parser.add_argument(
        "--output", choices=["json", "gcc", "summary"],
        default="json", help="Output format",
    )
    parser.add_argument(
        "--suppress", action="append", default=None, metavar="MESSAGE_ID",
        help="Message id to drop from the output (repeatable)",
    )
    parser.add_argument(
        "--list-messages", action="store_true",
        help="List message ids and exit",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.list_messages:
        _list_messages()
        return 0
    if not args.dump_files:
        parser.error("at least one dump file is required")

    try:
        config = (
            RuleConfiguration.from_json_file(args.config)
            if args.config else RuleConfiguration()
        )
        config = config.merged(
            allow_annotation_from_any=args.allow_annotation_from_any,
        )
        return run_dumps(
            args.dump_files,
            config=config,
            output=args.output,
            suppress=args.suppress,
        )
    except (ConfigurationError, DumpFormatError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 2


__all__ = [
    "PassStats",
    "analyze",
    "CheckerRunResults",
    "CheckerRunner",
    "run_dumps",
]
