"""Unit tests for demangled signature highlighting."""
import pytest
from rich.text import Text
from cxxdemangle.utils.highlighter import highlight_signature


def _styled(text: Text, style: str) -> list:
    return [text.plain[span.start:span.end] for span in text.spans if span.style == style]


class TestHighlightSignature:
    """Test rich styling of demangled output."""

    def test_plain_text_is_preserved(self):
        signature = "Number::operator+(const Number&)"
        assert highlight_signature(signature).plain == signature

    def test_operator(self):
        text = highlight_signature("Number::operator+(const Number&)")
        assert _styled(text, "bold magenta") == ["operator+"]

    def test_call_operator(self):
        text = highlight_signature("Functor::operator()(int)")
        assert _styled(text, "bold magenta") == ["operator()"]

    def test_keywords(self):
        text = highlight_signature("strcpy(const char* restrict, char* restrict)")
        assert _styled(text, "blue") == ["const", "char", "restrict", "char", "restrict"]

    def test_scope(self):
        text = highlight_signature("outer::inner::function()")
        assert _styled(text, "dim") == ["outer::", "inner::"]

    def test_array_dimensions(self):
        text = highlight_signature("grid(int[2][3])")
        assert _styled(text, "cyan") == ["2", "3"]

    def test_special_name(self):
        text = highlight_signature("vtable for Foo")
        assert _styled(text, "italic yellow") == ["vtable for"]

    def test_empty(self):
        assert highlight_signature("").plain == ""
