"""
tsdata_shims/dump.py
════════════════════

Loader for type-resolved ESTree dumps.

A dump is what a front end (typescript-estree plus the TypeScript type
checker) writes for the checker to consume:

    {
      "file":   "src/app.ts",
      "source": "let x;\\n...",
      "ast":    { "type": "Program", "body": [...],
                  "loc": {...}, "range": [0, 42],
                  "tsType": {"flags": ["any"]} }
    }

A dump file may also hold a list of such objects, or ``{"files": [...]}``.
Every node may carry ``tsType``; nodes without one make the oracle raise
``OracleResolutionError`` when queried.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Union

from tsdata_shims.errors import DumpFormatError
from tsdata_shims.syntax import SourceSpan, SyntaxNode, SyntaxTree
from tsdata_shims.type_oracle import MappingTypeOracle, ResolvedType

logger = logging.getLogger(__name__)

# ESTree bookkeeping keys that are neither children nor attributes
_RESERVED_KEYS = frozenset({"type", "loc", "range", "tsType", "parent"})


@dataclass
class DumpFile:
    """One analysed source file: its tree and the oracle answering for it."""
    tree: SyntaxTree
    oracle: MappingTypeOracle

    @property
    def file(self) -> str:
        return self.tree.file


class _Decoder:
    def __init__(self, file: str) -> None:
        self.file = file
        self.oracle = MappingTypeOracle()
        self.nodes = 0

    def node(self, data: Mapping[str, Any], path: str) -> SyntaxNode:
        type_name = data.get("type")
        if not isinstance(type_name, str):
            raise DumpFormatError(f"{self.file}: node at {path} has no 'type'")

        attrs: Dict[str, Any] = {}
        slots: Dict[str, Any] = {}
        for key, value in data.items():
            if key in _RESERVED_KEYS:
                continue
            if _is_node(value):
                slots[key] = self.node(value, f"{path}.{key}")
            elif value is None:
                slots[key] = None
            elif _is_node_list(value):
                slots[key] = [
                    None if item is None else self.node(item, f"{path}.{key}[{i}]")
                    for i, item in enumerate(value)
                ]
            else:
                attrs[key] = value

        node = SyntaxNode(
            type_name, span=self.span(data), attrs=attrs, slots=slots,
        )
        self.nodes += 1

        ts_type = data.get("tsType")
        if ts_type is not None:
            try:
                self.oracle.bind(node, ResolvedType.from_json(ts_type))
            except (ValueError, TypeError, AttributeError) as exc:
                raise DumpFormatError(
                    f"{self.file}: bad tsType at {path}: {exc}",
                    node.span, exc,
                ) from exc
        return node

    def span(self, data: Mapping[str, Any]) -> SourceSpan:
        loc = data.get("loc") or {}
        start = loc.get("start") or {}
        end = loc.get("end") or {}
        rng = data.get("range") or (-1, -1)
        try:
            return SourceSpan(
                file=self.file,
                line=int(start.get("line", 0)),
                column=int(start.get("column", 0)),
                end_line=int(end.get("line", 0)),
                end_column=int(end.get("column", 0)),
                start=int(rng[0]),
                end=int(rng[1]),
            )
        except (TypeError, ValueError, IndexError) as exc:
            raise DumpFormatError(f"{self.file}: bad loc/range: {exc}") from exc


def _is_node(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("type"), str)


def _is_node_list(value: Any) -> bool:
    return isinstance(value, list) and all(
        item is None or _is_node(item) for item in value
    )


def decode_file(entry: Mapping[str, Any], default_file: str = "") -> DumpFile:
    """Decode one ``{"file", "source", "ast"}`` object."""
    if not isinstance(entry, dict) or "ast" not in entry:
        raise DumpFormatError(f"{default_file or '<dump>'}: missing 'ast'")
    file = entry.get("file") or default_file
    decoder = _Decoder(file)
    root = decoder.node(entry["ast"], "ast")
    logger.debug("Decoded %s: %d nodes, %d typed",
                 file, decoder.nodes, len(decoder.oracle))
    return DumpFile(
        tree=SyntaxTree(root, source=entry.get("source", "") or "", file=file),
        oracle=decoder.oracle,
    )


def _entries(data: Any) -> Iterator[Any]:
    if isinstance(data, list):
        yield from data
    elif isinstance(data, dict) and "files" in data:
        yield from data["files"]
    else:
        yield data


def decode_dump(data: Any, default_file: str = "") -> List[DumpFile]:
    return [decode_file(entry, default_file) for entry in _entries(data)]


def load_dump(path: Union[str, Path]) -> List[DumpFile]:
    """
    Read a dump file from disk.

    Raises DumpFormatError for unreadable files, invalid JSON and
    structurally invalid trees.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise DumpFormatError(f"cannot read dump {path}: {exc}", cause=exc) from exc
    files = decode_dump(data, default_file=str(path))
    logger.info("Loaded %d file(s) from %s", len(files), path)
    return files


__all__ = [
    "DumpFile",
    "decode_file",
    "decode_dump",
    "load_dump",
]
