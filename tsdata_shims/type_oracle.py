"""
tsdata_shims/type_oracle.py
═══════════════════════════

Narrow capability interface over an external type checker.

The checker never computes types. It asks a ``TypeOracle`` for the
resolved type of a node and inspects the answer only through the
``TypeDescriptor`` protocol:

    is_any()          — exactly the unsafe ``any`` type
    is_array()        — array / readonly array / Array<T> / ReadonlyArray<T>
    element_type()    — element descriptor of an array type
    is_numeric_like() — number / bigint / numeric literal / numeric enum

``ResolvedType`` is the concrete descriptor used by the dump loader and
the tests. Types are modelled as a small term algebra:

    τ ::= flags                       (primitive / keyword type)
        | array(τ) | readonly_array(τ)
        | union(τ_1, …, τ_n)
        | reference(name)             (anything else, opaque)

Union types follow the type system being modelled: a union containing
``any`` has already been collapsed to ``any`` by the oracle, so a
``union`` descriptor is never ``any``.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from tsdata_shims.errors import OracleResolutionError
from tsdata_shims.syntax import SyntaxNode


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DESCRIPTOR PROTOCOLS
# ═════════════════════════════════════════════════════════════════════════

@runtime_checkable
class TypeDescriptor(Protocol):
    """What the checker may ask about a resolved type."""

    def is_any(self) -> bool: ...

    def is_array(self) -> bool: ...

    def element_type(self) -> Optional["TypeDescriptor"]: ...

    def is_numeric_like(self) -> bool: ...


@runtime_checkable
class TypeOracle(Protocol):
    """Resolves syntax nodes to types. Raises OracleResolutionError."""

    def resolve_type(self, node: SyntaxNode) -> TypeDescriptor: ...


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — TYPE FLAGS
# ═════════════════════════════════════════════════════════════════════════

class TypeFlag(Enum):
    """Discriminants of a resolved type. Values are the dump spellings."""
    ANY = "any"
    UNKNOWN = "unknown"
    NEVER = "never"
    VOID = "void"
    UNDEFINED = "undefined"
    NULL = "null"
    BOOLEAN = "boolean"
    BOOLEAN_LITERAL = "booleanLiteral"
    NUMBER = "number"
    NUMBER_LITERAL = "numberLiteral"
    BIGINT = "bigint"
    BIGINT_LITERAL = "bigintLiteral"
    ENUM_LITERAL = "enumLiteral"
    STRING = "string"
    STRING_LITERAL = "stringLiteral"
    ES_SYMBOL = "esSymbol"
    OBJECT = "object"
    ARRAY = "array"
    READONLY_ARRAY = "readonlyArray"
    TUPLE = "tuple"
    UNION = "union"
    INTERSECTION = "intersection"
    TYPE_PARAMETER = "typeParameter"


NUMERIC_FLAGS: FrozenSet[TypeFlag] = frozenset({
    TypeFlag.NUMBER,
    TypeFlag.NUMBER_LITERAL,
    TypeFlag.BIGINT,
    TypeFlag.BIGINT_LITERAL,
})

ARRAY_FLAGS: FrozenSet[TypeFlag] = frozenset({
    TypeFlag.ARRAY,
    TypeFlag.READONLY_ARRAY,
})


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CONCRETE DESCRIPTOR
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ResolvedType:
    """
    A resolved type as recorded in a dump.

    Attributes
    ----------
    flags   : TypeFlag set describing the type
    element : element type for array / readonly array types
    types   : constituents for union types
    name    : display name (``"number"``, ``"Map<string, any>"``, …)
    numeric_enum : enum literal whose value is a number
    """
    flags: FrozenSet[TypeFlag] = frozenset()
    element: Optional[ResolvedType] = None
    types: Tuple[ResolvedType, ...] = ()
    name: str = ""
    numeric_enum: bool = False

    # ── TypeDescriptor ───────────────────────────────────────────────

    def is_any(self) -> bool:
        return TypeFlag.ANY in self.flags

    def is_array(self) -> bool:
        return bool(self.flags & ARRAY_FLAGS) and self.element is not None

    def element_type(self) -> Optional[ResolvedType]:
        if not self.is_array():
            return None
        return self.element

    def is_numeric_like(self) -> bool:
        if TypeFlag.UNION in self.flags:
            return bool(self.types) and all(
                t.is_numeric_like() for t in self.types
            )
        if self.flags & NUMERIC_FLAGS:
            return True
        return TypeFlag.ENUM_LITERAL in self.flags and self.numeric_enum

    # ── Constructors ─────────────────────────────────────────────────

    @classmethod
    def of(cls, *flags: TypeFlag, name: str = "") -> ResolvedType:
        return cls(flags=frozenset(flags), name=name or _default_name(flags))

    @classmethod
    def any(cls) -> ResolvedType:
        return cls.of(TypeFlag.ANY)

    @classmethod
    def array_of(cls, element: ResolvedType, readonly: bool = False) -> ResolvedType:
        flag = TypeFlag.READONLY_ARRAY if readonly else TypeFlag.ARRAY
        prefix = "readonly " if readonly else ""
        return cls(
            flags=frozenset({flag, TypeFlag.OBJECT}),
            element=element,
            name=f"{prefix}{_wrap(element)}[]",
        )

    @classmethod
    def union(cls, *types: ResolvedType) -> ResolvedType:
        """Union with the ``any`` absorption the type system performs."""
        if any(t.is_any() for t in types):
            return cls.any()
        if len(types) == 1:
            return types[0]
        return cls(
            flags=frozenset({TypeFlag.UNION}),
            types=tuple(types),
            name=" | ".join(t.name for t in types),
        )

    @classmethod
    def reference(cls, name: str) -> ResolvedType:
        return cls(flags=frozenset({TypeFlag.OBJECT}), name=name)

    # ── Dump codec ───────────────────────────────────────────────────

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> ResolvedType:
        """
        Decode a ``tsType`` object from a dump.

        Unknown flag spellings raise ``ValueError``.
        """
        flags = frozenset(TypeFlag(f) for f in data.get("flags", ()))
        element_data = data.get("elementType")
        element = cls.from_json(element_data) if element_data else None
        types = tuple(cls.from_json(t) for t in data.get("types", ()))
        return cls(
            flags=flags,
            element=element,
            types=types,
            name=data.get("name", "") or _default_name(flags),
            numeric_enum=bool(data.get("numericEnum", False)),
        )

    def to_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "flags": sorted(f.value for f in self.flags),
            "name": self.name,
        }
        if self.element is not None:
            result["elementType"] = self.element.to_json()
        if self.types:
            result["types"] = [t.to_json() for t in self.types]
        if self.numeric_enum:
            result["numericEnum"] = True
        return result

    def __str__(self) -> str:
        return self.name or "<type>"


def _default_name(flags: Iterable[TypeFlag]) -> str:
    names = sorted(f.value for f in flags)
    return names[0] if len(names) == 1 else ""


def _wrap(t: ResolvedType) -> str:
    if TypeFlag.UNION in t.flags:
        return f"({t.name})"
    return t.name


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — MAPPING ORACLE
# ═════════════════════════════════════════════════════════════════════════

class MappingTypeOracle:
    """
    Oracle backed by an explicit node → type table.

    Keys are node identities; nodes are immutable and outlive the pass,
    so identity is a stable query key.

    >>> oracle = MappingTypeOracle()
    >>> oracle.bind(node, ResolvedType.any())
    >>> oracle.resolve_type(node).is_any()
    True
    """

    def __init__(self) -> None:
        self._types: Dict[int, ResolvedType] = {}
        self._nodes: Dict[int, SyntaxNode] = {}

    def bind(self, node: SyntaxNode, resolved: ResolvedType) -> None:
        self._types[id(node)] = resolved
        # keep the node alive so its id cannot be recycled
        self._nodes[id(node)] = node

    def resolve_type(self, node: SyntaxNode) -> ResolvedType:
        try:
            return self._types[id(node)]
        except KeyError:
            raise OracleResolutionError(
                f"no resolved type for {node.type_name}", node.span,
            ) from None

    def __contains__(self, node: object) -> bool:
        return id(node) in self._types

    def __len__(self) -> int:
        return len(self._types)


__all__ = [
    "TypeDescriptor",
    "TypeOracle",
    "TypeFlag",
    "NUMERIC_FLAGS",
    "ARRAY_FLAGS",
    "ResolvedType",
    "MappingTypeOracle",
]
