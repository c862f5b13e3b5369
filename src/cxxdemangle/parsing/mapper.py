import logging
import re

from .itanium import demangle, is_mangled

log = logging.getLogger(__name__)

# A mangled symbol anywhere in text: labels, call operands, symbol tables.
# Mach-O adds one more leading underscore (__Z3foov).
RE_MANGLED_SYMBOL = re.compile(r"(?<![A-Za-z0-9_$])_?(_Z[A-Za-z0-9_$]+)((?:\.[A-Za-z0-9_$]+)*)")


def demangle_symbol(symbol: str, keep_vendor_suffix: bool = False) -> str:
    """
    Demangle one symbol. With `keep_vendor_suffix`, a suffix such as `.cold`
    is kept after the signature as ` [clone .cold]`, the way c++filt shows it.
    """
    if keep_vendor_suffix and is_mangled(symbol) and "." in symbol:
        encoding, suffix = symbol.split(".", 1)
        return f"{demangle(encoding)} [clone .{suffix}]"
    return demangle(symbol)


def demangle_stream(text: str, keep_vendor_suffix: bool = False) -> str:
    """
    Demangles every mangled symbol in a block of text.
    This converts _Z7addNumsii -> addNums(int, int) in place and leaves all
    other text byte-for-byte unchanged.
    """
    count = 0

    def _replace(match: re.Match) -> str:
        nonlocal count
        count += 1
        return demangle_symbol(match.group(1) + match.group(2), keep_vendor_suffix)

    result = RE_MANGLED_SYMBOL.sub(_replace, text)
    log.debug("Demangled %d symbols", count)
    return result
