"""
Itanium C++ ABI demangler (the scheme used by GCC and Clang).

Recursive-descent decoder over the mangled encoding. Every decode step takes
the unconsumed input and returns what it decoded plus the new remainder.
Malformed input never raises: a production that cannot be decoded yields
None (skipped by the caller) or, for back-references with no referent, the
`_` placeholder.

Reference: https://itanium-cxx-abi.github.io/cxx-abi/abi.html#mangling
"""
import logging
import re
from typing import List, Optional, Tuple

from .formatter import format_signature, format_template_args, format_type
from .nodes import (
    PLACEHOLDER,
    ArrayType,
    BasicType,
    EncodedName,
    FunctionPointerType,
    MemberFunctionPointerType,
    MemberPointerType,
    NamedType,
    QualifiedType,
    TemplateType,
    TypeNode,
)

log = logging.getLogger(__name__)

MANGLING_PREFIX = "_Z"

BASIC_TYPES = {
    "v": "void",
    "w": "wchar_t",
    "b": "bool",
    "c": "char",
    "a": "signed char",
    "h": "unsigned char",
    "s": "short",
    "t": "unsigned short",
    "i": "int",
    "j": "unsigned int",
    "l": "long",
    "m": "unsigned long",
    "x": "long long",
    "y": "unsigned long long",
    "n": "__int128",
    "o": "unsigned __int128",
    "f": "float",
    "d": "double",
    "e": "long double",
    "g": "__float128",
    "z": "...",
}

# Two-letter builtins introduced by 'D'
EXTENDED_TYPES = {
    "Dn": "decltype(nullptr)",
    "Da": "auto",
    "Dc": "decltype(auto)",
    "Di": "char32_t",
    "Ds": "char16_t",
    "Du": "char8_t",
    "Dd": "decimal64",
    "De": "decimal128",
    "Df": "decimal32",
    "Dh": "half",
}

OPERATORS = {
    "nw": "operator new",
    "na": "operator new[]",
    "dl": "operator delete",
    "da": "operator delete[]",
    "aw": "operator co_await",
    "ps": "operator+",
    "ng": "operator-",
    "ad": "operator&",
    "de": "operator*",
    "co": "operator~",
    "pl": "operator+",
    "mi": "operator-",
    "ml": "operator*",
    "dv": "operator/",
    "rm": "operator%",
    "an": "operator&",
    "or": "operator|",
    "eo": "operator^",
    "aS": "operator=",
    "pL": "operator+=",
    "mI": "operator-=",
    "mL": "operator*=",
    "dV": "operator/=",
    "rM": "operator%=",
    "aN": "operator&=",
    "oR": "operator|=",
    "eO": "operator^=",
    "ls": "operator<<",
    "rs": "operator>>",
    "lS": "operator<<=",
    "rS": "operator>>=",
    "eq": "operator==",
    "ne": "operator!=",
    "lt": "operator<",
    "gt": "operator>",
    "le": "operator<=",
    "ge": "operator>=",
    "ss": "operator<=>",
    "nt": "operator!",
    "aa": "operator&&",
    "oo": "operator||",
    "pp": "operator++",
    "mm": "operator--",
    "cm": "operator,",
    "pm": "operator->*",
    "pt": "operator->",
    "cl": "operator()",
    "ix": "operator[]",
    "qu": "operator?",
}

STD_ABBREVIATIONS = {
    "a": "std::allocator",
    "b": "std::basic_string",
    "s": "std::basic_string<char, std::char_traits<char>, std::allocator<char>>",
    "i": "std::basic_istream<char, std::char_traits<char>>",
    "o": "std::basic_ostream<char, std::char_traits<char>>",
    "d": "std::basic_iostream<char, std::char_traits<char>>",
}

SPECIAL_NAMES = {
    "TV": "vtable for ",
    "TT": "VTT for ",
    "TI": "typeinfo for ",
    "TS": "typeinfo name for ",
    "TC": "construction vtable for ",
    "GV": "guard variable for ",
    "TH": "TLS init function for ",
    "TW": "TLS wrapper function for ",
}

# Suffix c++ uses to spell an integer literal of that type
LITERAL_SUFFIXES = {
    "i": "",
    "j": "u",
    "l": "l",
    "m": "ul",
    "x": "ll",
    "y": "ull",
}

CONSTRUCTORS = ("C1", "C2", "C3")
DESTRUCTORS = ("D0", "D1", "D2")
ANONYMOUS_NAMESPACE = "_GLOBAL__N_1"

# ASCII digits only, unlike str.isdigit() which also accepts "²"
RE_LENGTH = re.compile(r"[0-9]+")
# <seq-id> is base 36 over [0-9A-Z]; empty means index 0
RE_SEQ_ID = re.compile(r"([0-9A-Z]*)_")


class _Context:
    """
    Per-call decode state: the substitution table and the template-parameter
    table. Never shared between demangle() calls.
    """
    def __init__(self, substitutions: Optional[List[TypeNode]] = None,
                 template_params: Optional[List[TypeNode]] = None):
        self.substitutions: List[TypeNode] = list(substitutions or [])
        self.template_params: List[TypeNode] = list(template_params or [])

    def fork(self) -> "_Context":
        return _Context(self.substitutions, self.template_params)

    def lookup_substitution(self, index: int) -> TypeNode:
        if index < len(self.substitutions):
            return self.substitutions[index]
        log.debug("Substitution S%d has no referent (table size %d)", index, len(self.substitutions))
        return PLACEHOLDER

    def lookup_template_param(self, index: int) -> TypeNode:
        if index < len(self.template_params):
            return self.template_params[index]
        log.debug("Template parameter T%d has no referent (table size %d)", index, len(self.template_params))
        return PLACEHOLDER


def is_mangled(name: str) -> bool:
    """Check if the name is an Itanium ABI mangled name."""
    return name.startswith(MANGLING_PREFIX)


def demangle(name: str) -> str:
    """
    Demangle an Itanium ABI symbol into a C++ signature.
    Unmangled names are returned unchanged, and malformed encodings degrade
    to partial output instead of raising.
    """
    if not is_mangled(name):
        return name

    # A '.' starts a vendor suffix (.constprop.0, .cold, ...), which is dropped
    encoding = name[len(MANGLING_PREFIX):].split(".", 1)[0]

    try:
        return _demangle_encoding(encoding)
    except RecursionError:
        log.warning("Nesting too deep to demangle %s", name)
        return name


def _demangle_encoding(encoding: str) -> str:
    special = SPECIAL_NAMES.get(encoding[:2])
    if special is not None:
        return special + _demangle_special_operand(encoding[2:])

    encoded = parse_name(encoding, _Context())

    ctx = _Context(template_params=list(encoded.template_args))
    if encoded.scope:
        ctx.substitutions.append(NamedType(encoded.scope))
    ctx.substitutions.extend(ctx.template_params)

    rest = encoded.rest
    return_type = None
    # Only template functions encode their return type
    if ctx.template_params and rest:
        return_type, rest = parse_type(rest, ctx)

    params, _ = parse_parameter_list(rest, ctx)
    return format_signature(encoded.name, params, return_type, encoded.is_const_method)


def _demangle_special_operand(operand: str) -> str:
    encoded = parse_name(operand, _Context())
    if not encoded.is_empty:
        return encoded.name

    # typeinfo for builtins and compound types (_ZTIi, _ZTIPKc)
    node, _ = parse_type(operand, _Context())
    return format_type(node) if node is not None else ""


# --- NAMES ---

def parse_source_name(s: str) -> Tuple[str, str]:
    """
    Parse a length-prefixed identifier such as `4test`.
    Returns ("", s) if s does not start with a length.
    """
    match = RE_LENGTH.match(s)
    if not match:
        return "", s

    length = int(match.group())
    start = match.end()
    identifier = s[start:start + length]
    if identifier == ANONYMOUS_NAMESPACE:
        identifier = "(anonymous namespace)"
    return identifier, s[start + length:]


def _has_length(s: str) -> bool:
    return RE_LENGTH.match(s) is not None


def _unqualified(name: str) -> str:
    """
    Last component of a qualified name without its template arguments,
    e.g. `allocator` for `std::allocator<char>`.
    """
    if name.endswith(">"):
        depth = 0
        for i in range(len(name) - 1, -1, -1):
            if name[i] == ">":
                depth += 1
            elif name[i] == "<":
                depth -= 1
                if depth == 0:
                    name = name[:i]
                    break
    return name.rsplit("::", 1)[-1]


def _parse_seq_id(s: str) -> Tuple[Optional[int], str]:
    match = RE_SEQ_ID.match(s)
    if not match:
        return None, s
    digits = match.group(1)
    return (int(digits, 36) if digits else 0), s[match.end():]


def _parse_segment(s: str, ctx: _Context, class_name: str) -> Tuple[str, str]:
    """
    Decode one component of a name: constructor, destructor, operator or
    plain identifier. `class_name` is the previous component, which ctors
    and dtors are named after.
    """
    head = s[:2]

    if head in CONSTRUCTORS:
        return class_name, s[2:]

    if head in DESTRUCTORS:
        return ("~" + class_name if class_name else ""), s[2:]

    if head == "cv":
        # Cast target is decoded to stay in sync, but not rendered
        _, rest = parse_type(s[2:], ctx)
        return "operator", rest

    if head == "li":
        # Rendered with its suffix (operator"" _km), not as a bare operator""
        suffix, rest = parse_source_name(s[2:])
        return ('operator"" ' + suffix if suffix else 'operator""'), rest

    if head in OPERATORS:
        return OPERATORS[head], s[2:]

    return parse_source_name(s)


def _parse_abi_tags(s: str) -> Tuple[str, str]:
    tags = ""
    while s[:1] == "B" and _has_length(s[1:]):
        tag, s = parse_source_name(s[1:])
        tags += f"[abi:{tag}]"
    return tags, s


def parse_name(s: str, ctx: _Context) -> EncodedName:
    if s.startswith("N"):
        return _parse_nested_name(s[1:], ctx)
    return _parse_unscoped_name(s, ctx)


def _parse_unscoped_name(s: str, ctx: _Context) -> EncodedName:
    scope = ""
    if s.startswith("St"):
        scope, s = "std", s[2:]
    elif s.startswith("L") and _has_length(s[1:]):
        # Internal linkage (file-static) names
        s = s[1:]

    segment, s = _parse_segment(s, ctx, "")
    if not segment:
        return EncodedName(rest=s)

    tags, s = _parse_abi_tags(s)
    base = (scope + "::" if scope else "") + segment + tags

    args: Tuple[TypeNode, ...] = ()
    if s.startswith("I"):
        args, s = parse_template_args(s, ctx)

    return EncodedName(
        name=base + format_template_args(args),
        rest=s,
        template_args=args,
        scope=scope,
        base=base,
    )


def _parse_nested_name(s: str, ctx: _Context) -> EncodedName:
    """
    N [<CV-qualifiers>] [<ref-qualifier>] <prefix> <unqualified-name> E
    """
    is_const = False
    if s.startswith("r"):
        s = s[1:]
    if s.startswith("V"):
        s = s[1:]
    if s.startswith("K"):
        is_const, s = True, s[1:]
    if s[:1] in ("R", "O"):
        s = s[1:]

    components: List[str] = []
    last_plain = ""
    last_base = ""
    args: Tuple[TypeNode, ...] = ()

    if s.startswith("St"):
        components.append("std")
        s = s[2:]
    elif s.startswith("S"):
        prefix, s = _parse_substitution_prefix(s[1:], ctx)
        if prefix:
            components.append(prefix)
            last_plain = _unqualified(prefix)

    while s and s[0] != "E":
        if s[0] == "I":
            if not components:
                break
            last_base = components[-1]
            args, s = parse_template_args(s, ctx, scope="::".join(components[:-1]))
            components[-1] += format_template_args(args)
            continue

        if s[0] == "B" and components:
            tags, s = _parse_abi_tags(s)
            if tags:
                components[-1] += tags
                continue

        segment, s = _parse_segment(s, ctx, last_plain)
        if not segment:
            break
        components.append(segment)
        last_plain = segment
        args = ()

    if s.startswith("E"):
        s = s[1:]

    name = "::".join(components)
    base = name
    if args:
        base = "::".join(components[:-1] + [last_base])

    return EncodedName(
        name=name,
        rest=s,
        is_const_method=is_const,
        template_args=args,
        scope="::".join(components[:-1]),
        base=base,
    )


def _parse_substitution_prefix(s: str, ctx: _Context) -> Tuple[str, str]:
    """A substitution starting a nested name, e.g. the S_ in NS_3fooE."""
    index, rest = _parse_seq_id(s)
    if index is not None:
        return format_type(ctx.lookup_substitution(index)), rest

    abbreviation = STD_ABBREVIATIONS.get(s[:1])
    if abbreviation is not None:
        return abbreviation, s[1:]

    return "", s


# --- TEMPLATE ARGUMENTS ---

def parse_template_args(s: str, ctx: _Context, scope: str = "") -> Tuple[Tuple[TypeNode, ...], str]:
    """
    Parse an I...E template argument list; `s` starts at the 'I'.

    A digit after the 'I' selects the length-prefixed identifier grammar,
    anything else the full type grammar. Types decoded here get their own
    substitution scope, seeded from the current one plus `scope`, the
    enclosing prefix of the name being instantiated (so the S_ in
    NSt3__16vectorIiNS_9allocatorIiEEEE is std::__1).
    """
    s = s[1:]
    raw = _has_length(s)
    arg_ctx = ctx.fork()
    if scope:
        arg_ctx.substitutions.append(NamedType(scope))
    args, s = _parse_template_arg_list(s, arg_ctx, raw)
    return tuple(args), s


def _parse_template_arg_list(s: str, ctx: _Context, raw: bool) -> Tuple[List[TypeNode], str]:
    args: List[TypeNode] = []
    while s and s[0] != "E":
        if raw and _has_length(s):
            identifier, s = parse_source_name(s)
            if identifier:
                args.append(NamedType(identifier))
            continue

        if s[0] == "J":
            # Argument pack, flattened into the enclosing list
            pack, s = _parse_template_arg_list(s[1:], ctx, raw)
            args.extend(pack)
            continue

        if s[0] == "L":
            node, s = _parse_literal(s[1:], ctx)
        else:
            node, s = parse_type(s, ctx)
        if node is not None:
            args.append(node)

    return args, s[1:]


def _parse_literal(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    """
    L <type> <value> E, e.g. Li5E -> 5, Lm8E -> 8ul, Lb1E -> true.
    L_Z <encoding> E refers to an entity such as a function or variable.
    """
    if s.startswith("_Z"):
        encoded = parse_name(s[2:], ctx)
        rest = encoded.rest
        return NamedType(encoded.name), (rest[1:] if rest.startswith("E") else rest)

    code = s[:1]
    if code in BASIC_TYPES:
        type_name, s = BASIC_TYPES[code], s[1:]
    else:
        node, s = parse_type(s, ctx)
        type_name = format_type(node) if node is not None else ""

    end = s.find("E")
    if end < 0:
        value, s = s, ""
    else:
        value, s = s[:end], s[end + 1:]

    if value.startswith("n"):
        value = "-" + value[1:]

    if code == "b" and value in ("0", "1"):
        return NamedType("true" if value == "1" else "false"), s
    if code in LITERAL_SUFFIXES:
        return NamedType(value + LITERAL_SUFFIXES[code]), s
    return NamedType(f"({type_name}){value}"), s


# --- TYPES ---

def parse_parameter_list(s: str, ctx: _Context, terminated: bool = False) -> Tuple[List[TypeNode], str]:
    """
    Decode types until the input runs out or, for nested function
    signatures (`terminated`), until the closing 'E', which is consumed.
    """
    params: List[TypeNode] = []
    while s:
        if terminated and s[0] == "E":
            return params, s[1:]
        node, s = parse_type(s, ctx)
        if node is not None:
            params.append(node)
    return params, s


def parse_type(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    """
    Decode exactly one type. Always consumes at least one character of a
    non-empty input.
    """
    is_const = is_volatile = is_restrict = False
    is_reference = is_rvalue_reference = False
    pointers = 0

    while s and s[0] in "ROrVKP":
        code, s = s[0], s[1:]
        if code == "R":
            is_reference = True
        elif code == "O":
            is_rvalue_reference = True
        elif code == "r":
            is_restrict = True
        elif code == "V":
            is_volatile = True
        elif code == "K":
            is_const = True
        else:
            pointers += 1

    node, s = _parse_unqualified_type(s, ctx)
    if node is None:
        return None, s

    if not (is_const or is_volatile or is_restrict or pointers or is_reference or is_rvalue_reference):
        return node, s

    return QualifiedType(
        base=node,
        is_const=is_const,
        is_volatile=is_volatile,
        is_restrict=is_restrict,
        pointers=pointers,
        is_reference=is_reference,
        is_rvalue_reference=is_rvalue_reference,
    ), s


def _parse_unqualified_type(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    code = s[:1]
    if not code:
        return None, s

    if code in BASIC_TYPES:
        return BasicType(BASIC_TYPES[code]), s[1:]

    if s[:2] in EXTENDED_TYPES:
        return BasicType(EXTENDED_TYPES[s[:2]]), s[2:]

    if code == "A":
        return _parse_array(s[1:], ctx)

    if code == "F":
        return _parse_function(s[1:], ctx)

    if code == "M":
        return _parse_member_pointer(s[1:], ctx)

    if code == "T":
        return _parse_template_param(s[1:], ctx)

    if code == "S":
        return _parse_substitution(s[1:], ctx)

    if code == "u":
        # Vendor extended type
        identifier, rest = parse_source_name(s[1:])
        return (NamedType(identifier) if identifier else None), rest

    if code == "N" or _has_length(s):
        return _parse_named_type(s, ctx)

    log.debug("Skipping unrecognised type code %r", code)
    return None, s[1:]


def _parse_array(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    """A <dimension> _ <element type>; `s` starts after the 'A'."""
    match = RE_LENGTH.match(s)
    dimension = match.group() if match else ""
    s = s[len(dimension):]

    if not s.startswith("_"):
        log.debug("Array dimension %r not followed by '_'", dimension)
        return None, s

    element, s = parse_type(s[1:], ctx)
    if element is None:
        return None, s

    # int[2][3] is stored as one array with two dimensions
    if isinstance(element, ArrayType):
        return ArrayType(element.element, (dimension,) + element.dimensions), s
    return ArrayType(element, (dimension,)), s


def _parse_function(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    """F [Y] <return type> <parameter types> E; `s` starts after the 'F'."""
    if s.startswith("Y"):
        s = s[1:]
    return_type, s = parse_type(s, ctx)
    params, s = parse_parameter_list(s, ctx, terminated=True)
    return FunctionPointerType(return_type, tuple(params)), s


def _parse_member_pointer(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    """M <class type> <member type>; `s` starts after the 'M'."""
    class_type, s = parse_type(s, ctx)
    if class_type is None:
        return None, s

    is_const = False
    if s.startswith("KF"):
        is_const, s = True, s[1:]

    if s.startswith("F"):
        function, s = _parse_function(s[1:], ctx)
        return MemberFunctionPointerType(
            class_type=class_type,
            return_type=function.return_type,
            parameters=function.parameters,
            is_const=is_const,
        ), s

    member_type, s = parse_type(s, ctx)
    if member_type is None:
        return None, s
    return MemberPointerType(class_type, member_type), s


def _parse_template_param(s: str, ctx: _Context) -> Tuple[TypeNode, str]:
    index, rest = _parse_seq_id(s)
    if index is None:
        log.debug("Malformed template parameter reference at %r", s[:8])
        return PLACEHOLDER, s
    return ctx.lookup_template_param(index), rest


def _parse_substitution(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    """
    S_ / S<seq-id>_ back-references and the std:: forms; `s` starts after
    the 'S'. Everything except a bare back-reference is substitutable.
    """
    index, rest = _parse_seq_id(s)
    if index is not None:
        node = ctx.lookup_substitution(index)
        s = rest
        if not s.startswith("I"):
            return node, s
    elif s.startswith("t") or _has_length(s):
        encoded = parse_name(s[1:] if s.startswith("t") else s, ctx)
        s = encoded.rest
        if encoded.is_empty:
            return None, s
        if encoded.template_args:
            node = TemplateType("std::" + encoded.base, encoded.template_args)
        else:
            node = NamedType("std::" + encoded.name)
    elif s[:1] in STD_ABBREVIATIONS:
        node, s = NamedType(STD_ABBREVIATIONS[s[0]]), s[1:]
    else:
        log.debug("Unknown substitution code %r", s[:1])
        return None, s

    if s.startswith("I"):
        args, s = parse_template_args(s, ctx)
        node = TemplateType(format_type(node), args)

    ctx.substitutions.append(node)
    return node, s


def _parse_named_type(s: str, ctx: _Context) -> Tuple[Optional[TypeNode], str]:
    encoded = parse_name(s, ctx)
    if encoded.is_empty:
        # Always consume something so callers' loops terminate
        return None, (encoded.rest if len(encoded.rest) < len(s) else s[1:])

    if encoded.template_args:
        node = TemplateType(encoded.base, encoded.template_args)
    else:
        node = NamedType(encoded.name)
    ctx.substitutions.append(node)
    return node, encoded.rest
