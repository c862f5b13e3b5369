"""
Unit tests for stream demangling (mapper.py).
Ensures every mangled token in a text blob is rewritten in place and all
other text passes through untouched.
"""
import pytest
from cxxdemangle.parsing.mapper import demangle_stream, demangle_symbol


class TestDemangleSymbol:
    """Test single-symbol demangling with vendor suffix handling."""

    def test_plain(self):
        assert demangle_symbol("_Z5isInti") == "isInt(int)"

    def test_suffix_dropped_by_default(self):
        assert demangle_symbol("_Z5isInti.cold") == "isInt(int)"

    def test_suffix_kept_as_clone(self):
        assert demangle_symbol("_Z5isInti.constprop.0", keep_vendor_suffix=True) == \
            "isInt(int) [clone .constprop.0]"

    def test_unmangled_passthrough(self):
        assert demangle_symbol("main") == "main"

    def test_unmangled_dotted_name_kept_with_suffix_option(self):
        assert demangle_symbol("main.cpp", keep_vendor_suffix=True) == "main.cpp"
        assert demangle_symbol(".LBB0_1", keep_vendor_suffix=True) == ".LBB0_1"


class TestDemangleStream:
    """Test the demangle_stream function."""

    def test_label(self):
        assert demangle_stream("_Z7addNumsii:") == "addNums(int, int):"

    def test_call_operand(self):
        assert demangle_stream("\tcall\t_Z3foov@PLT") == "\tcall\tfoo()@PLT"

    def test_macos_extra_underscore(self):
        assert demangle_stream("\tbl\t__Z3foov") == "\tbl\tfoo()"

    def test_vendor_suffix(self):
        assert demangle_stream("_Z3foov.cold:") == "foo():"
        assert demangle_stream("_Z3foov.cold:", keep_vendor_suffix=True) == "foo() [clone .cold]:"

    def test_multiline_input(self):
        input_asm = "_Z3foov:\n\tpush rbp\n\tcall _Z3barv\n"
        result = demangle_stream(input_asm)
        assert result == "foo():\n\tpush rbp\n\tcall bar()\n"

    def test_non_symbol_text_unchanged(self):
        text = "\tmov eax, 1\n.LBB0_1:\n\tjmp .LBB0_1\n"
        assert demangle_stream(text) == text

    def test_embedded_marker_not_matched(self):
        assert demangle_stream("foo_Z3barv") == "foo_Z3barv"

    def test_empty_input(self):
        assert demangle_stream("") == ""
