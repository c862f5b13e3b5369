"""Unit tests for signature formatting (formatter.py)."""
import pytest
from cxxdemangle.parsing.formatter import (
    format_parameters,
    format_signature,
    format_template_args,
    format_type,
)
from cxxdemangle.parsing.nodes import (
    PLACEHOLDER,
    ArrayType,
    BasicType,
    FunctionPointerType,
    MemberFunctionPointerType,
    MemberPointerType,
    NamedType,
    QualifiedType,
    TemplateType,
)

INT = BasicType("int")
CHAR = BasicType("char")
VOID = BasicType("void")
FOO = NamedType("Foo")


class TestFormatQualified:
    """Qualifier order: cv prefix, base, pointers, restrict, reference."""

    def test_const_char_pointer_restrict(self):
        node = QualifiedType(CHAR, is_const=True, pointers=1, is_restrict=True)
        assert format_type(node) == "const char* restrict"

    def test_const_volatile_reference(self):
        node = QualifiedType(INT, is_const=True, is_volatile=True, is_reference=True)
        assert format_type(node) == "const volatile int&"

    def test_rvalue_reference(self):
        assert format_type(QualifiedType(FOO, is_rvalue_reference=True)) == "Foo&&"

    def test_pointer_run(self):
        assert format_type(QualifiedType(INT, pointers=3)) == "int***"

    def test_placeholder_keeps_qualifiers(self):
        assert format_type(QualifiedType(PLACEHOLDER, is_const=True, is_reference=True)) == "const _&"


class TestFormatCompound:
    """Arrays, function pointers, member pointers and templates."""

    def test_array_dimensions(self):
        assert format_type(ArrayType(INT, ("10",))) == "int[10]"
        assert format_type(ArrayType(INT, ("2", "3"))) == "int[2][3]"

    def test_function_pointer(self):
        assert format_type(FunctionPointerType(VOID, (INT,))) == "void (*)(int)"

    def test_function_pointer_absorbs_pointer_count(self):
        node = QualifiedType(FunctionPointerType(VOID, (VOID,)), pointers=1)
        assert format_type(node) == "void (*)()"

    def test_member_function_pointer(self):
        assert format_type(MemberFunctionPointerType(FOO, INT, (VOID,))) == "int (Foo::*)()"
        assert format_type(MemberFunctionPointerType(FOO, INT, (INT, CHAR), is_const=True)) == \
            "int (Foo::*)(int, char) const"

    def test_member_data_pointer(self):
        assert format_type(MemberPointerType(FOO, INT)) == "int Foo::**"

    def test_template_type(self):
        assert format_type(TemplateType("std::vector", (INT,))) == "std::vector<int>"
        nested = TemplateType("std::vector", (INT, TemplateType("std::allocator", (INT,))))
        assert format_type(nested) == "std::vector<int, std::allocator<int>>"

    def test_template_type_without_args(self):
        assert format_type(TemplateType("std::allocator", ())) == "std::allocator"
        assert format_template_args(()) == ""

    def test_unknown_node_raises(self):
        with pytest.raises(TypeError):
            format_type(object())


class TestFormatParameters:
    """Parameter list joining and void elision."""

    def test_empty(self):
        assert format_parameters([]) == ""

    def test_lone_void_is_elided(self):
        assert format_parameters([VOID]) == ""

    def test_void_pointer_is_kept(self):
        assert format_parameters([QualifiedType(VOID, pointers=1)]) == "void*"

    def test_join(self):
        assert format_parameters([INT, CHAR, FOO]) == "int, char, Foo"


class TestFormatSignature:
    """Final assembly of name, return type and const suffix."""

    def test_plain(self):
        assert format_signature("doThing", [VOID]) == "doThing()"

    def test_return_type(self):
        assert format_signature("max<int>", [INT, INT], return_type=INT) == "int max<int>(int, int)"

    def test_const_method(self):
        assert format_signature("Vector::size", [VOID], is_const_method=True) == "Vector::size() const"

    def test_empty_name(self):
        assert format_signature("", []) == "()"
