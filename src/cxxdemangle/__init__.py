from .parsing import demangle, demangle_stream, is_mangled, process_text, simplify_symbols

__all__ = ["demangle", "demangle_stream", "is_mangled", "process_text", "simplify_symbols"]
