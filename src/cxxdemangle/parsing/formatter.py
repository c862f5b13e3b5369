"""
Renders decoded type trees back into C++ source syntax.
"""
from typing import Optional, Sequence

from .nodes import (
    ArrayType,
    BasicType,
    FunctionPointerType,
    MemberFunctionPointerType,
    MemberPointerType,
    NamedType,
    QualifiedType,
    TemplateType,
    TypeNode,
)

VOID = BasicType("void")


def format_type(node: TypeNode) -> str:
    if isinstance(node, (BasicType, NamedType)):
        return node.name

    if isinstance(node, QualifiedType):
        return _format_qualified(node)

    if isinstance(node, ArrayType):
        dims = "".join(f"[{d}]" for d in node.dimensions)
        return f"{format_type(node.element)}{dims}"

    if isinstance(node, FunctionPointerType):
        return f"{_format_return(node.return_type)}(*)({format_parameters(node.parameters)})"

    if isinstance(node, MemberFunctionPointerType):
        result = (
            f"{_format_return(node.return_type)}"
            f"({format_type(node.class_type)}::*)({format_parameters(node.parameters)})"
        )
        return result + " const" if node.is_const else result

    if isinstance(node, MemberPointerType):
        return f"{format_type(node.member_type)} {format_type(node.class_type)}::**"

    if isinstance(node, TemplateType):
        return node.base + format_template_args(node.args)

    raise TypeError(f"Cannot format {type(node).__name__}")


def _format_qualified(node: QualifiedType) -> str:
    parts = []
    if node.is_const:
        parts.append("const ")
    if node.is_volatile:
        parts.append("volatile ")

    parts.append(format_type(node.base))

    # (*) and (Class::*) already spell out the pointer
    if not isinstance(node.base, (FunctionPointerType, MemberFunctionPointerType, MemberPointerType)):
        parts.append("*" * node.pointers)

    if node.is_restrict:
        parts.append(" restrict")
    if node.is_reference:
        parts.append("&")
    elif node.is_rvalue_reference:
        parts.append("&&")

    return "".join(parts)


def _format_return(return_type: Optional[TypeNode]) -> str:
    return f"{format_type(return_type)} " if return_type is not None else ""


def format_template_args(args: Sequence[TypeNode]) -> str:
    if not args:
        return ""
    return "<" + ", ".join(format_type(a) for a in args) + ">"


def format_parameters(params: Sequence[TypeNode]) -> str:
    """
    Join a parameter list. A lone unqualified `void` means "no parameters"
    and renders as an empty list.
    """
    if len(params) == 1 and params[0] == VOID:
        return ""
    return ", ".join(format_type(p) for p in params)


def format_signature(
    name: str,
    params: Sequence[TypeNode],
    return_type: Optional[TypeNode] = None,
    is_const_method: bool = False,
) -> str:
    """
    Final assembly: `[<return> ]<name>(<params>)[ const]`.
    """
    signature = f"{_format_return(return_type)}{name}({format_parameters(params)})"
    if is_const_method:
        signature += " const"
    return signature
