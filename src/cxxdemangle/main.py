import sys
import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .parsing import process_text, simplify_symbols
from .parsing.mapper import demangle_symbol
from .utils.config import ConfigManager
from .utils.highlighter import highlight_signature
from .utils.log import setup_logging

# Theme Colors (Mosaic)
C_ACCENT1 = "#45d3ee" # Cyan
C_ACCENT3 = "#94bfc1" # Teal


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(description="cxxdemangle: Itanium C++ ABI demangler")
    parser.add_argument("symbols", nargs="*", help="Mangled symbols to demangle (reads stdin if omitted)")
    parser.add_argument("--table", action="store_true", help="Show a table of mangled and demangled names")
    parser.add_argument("--simplify", dest="simplify", action="store_true", default=None,
                        help="Drop std::__1:: inline namespaces and [abi:...] tags")
    parser.add_argument("--no-simplify", dest="simplify", action="store_false",
                        help="Keep inline namespaces and ABI tags")
    parser.add_argument("--config", help="Path to an alternate config.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log decoding details to stderr")
    return parser


def _render_table(symbols: List[str], results: List[str], style: str) -> Table:
    table = Table(
        title="Demangled Symbols",
        title_style=f"bold {C_ACCENT3}",
        header_style=f"bold {C_ACCENT1}",
        box=None,
        expand=True,
    )
    table.add_column("Mangled", style=style, no_wrap=True)
    table.add_column("Demangled")

    for symbol, result in zip(symbols, results):
        table.add_row(symbol, highlight_signature(result))
    return table


def run(argv: Optional[List[str]] = None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.config and not Path(args.config).is_file():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    config = ConfigManager(Path(args.config) if args.config else None)
    simplify = config.get("simplify", False) if args.simplify is None else args.simplify
    keep_suffix = not config.get("strip_vendor_suffix", True)

    try:
        if not args.symbols:
            # c++filt mode: rewrite whatever comes in on stdin
            for line in sys.stdin:
                sys.stdout.write(process_text(line, simplify=simplify, keep_vendor_suffix=keep_suffix))
            return

        results = []
        for symbol in args.symbols:
            result = demangle_symbol(symbol, keep_vendor_suffix=keep_suffix)
            results.append(simplify_symbols(result) if simplify else result)

        if args.table:
            Console().print(_render_table(args.symbols, results, config.get("table_style", "dim")))
        else:
            for result in results:
                print(result)
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    run()
