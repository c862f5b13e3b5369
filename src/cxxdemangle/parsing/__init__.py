import re
from .itanium import demangle, is_mangled
from .mapper import demangle_stream, demangle_symbol

# --- AESTHETIC CLEANUP PATTERNS ---
RE_STL_VERSIONING = re.compile(r"std::__[1-9]::")
RE_ABI_TAGS = re.compile(r"\[abi:[a-zA-Z0-9]+\]")

def simplify_symbols(text: str) -> str:
    text = RE_STL_VERSIONING.sub("std::", text)
    text = RE_ABI_TAGS.sub("", text)
    return text

def process_text(text: str, simplify: bool = False, keep_vendor_suffix: bool = False) -> str:
    """
    Pipeline: Raw text -> Demangled -> (optionally) Simplified
    """
    demangled = demangle_stream(text, keep_vendor_suffix=keep_vendor_suffix)
    if simplify:
        return simplify_symbols(demangled)
    return demangled
