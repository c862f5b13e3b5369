"""
Decoded type tree for Itanium-mangled symbols.
The decoder in itanium.py builds these; formatter.py renders them.
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class BasicType:
    name: str


@dataclass(frozen=True)
class NamedType:
    name: str


@dataclass(frozen=True)
class QualifiedType:
    base: "TypeNode"
    is_const: bool = False
    is_volatile: bool = False
    is_restrict: bool = False
    pointers: int = 0
    is_reference: bool = False
    is_rvalue_reference: bool = False


@dataclass(frozen=True)
class ArrayType:
    element: "TypeNode"
    # Outer-to-inner, already flattened
    dimensions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionPointerType:
    return_type: Optional["TypeNode"]
    parameters: Tuple["TypeNode", ...] = ()


@dataclass(frozen=True)
class MemberFunctionPointerType:
    class_type: "TypeNode"
    return_type: Optional["TypeNode"]
    parameters: Tuple["TypeNode", ...] = ()
    is_const: bool = False


@dataclass(frozen=True)
class MemberPointerType:
    class_type: "TypeNode"
    member_type: "TypeNode"


@dataclass(frozen=True)
class TemplateType:
    base: str
    args: Tuple["TypeNode", ...] = ()


TypeNode = Union[
    BasicType,
    NamedType,
    QualifiedType,
    ArrayType,
    FunctionPointerType,
    MemberFunctionPointerType,
    MemberPointerType,
    TemplateType,
]

# Rendered in place of a T_/S_ back-reference that points at nothing
PLACEHOLDER = NamedType("_")


@dataclass
class EncodedName:
    """
    Result of decoding a <name> production.

    `name` is the full display string, `base` the same string without the
    template arguments of the last component, and `scope` everything before
    the last component (empty for unscoped names).
    """
    name: str = ""
    rest: str = ""
    is_const_method: bool = False
    template_args: Tuple[TypeNode, ...] = ()
    scope: str = ""
    base: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.name
