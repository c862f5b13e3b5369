import re

from rich.text import Text

KEYWORDS = re.compile(
    r"\b("
    r"const|volatile|restrict|unsigned|signed"
    r"|void|bool|char|wchar_t|char8_t|char16_t|char32_t|short|int|long|float|double"
    r"|__int128|__float128|auto|decltype"
    r")\b",
)

OPERATORS = re.compile(r"\boperator(?:\s*(?:new|delete)(?:\[\])?|\"\"\s*\w*|[^\w\s(]+|\(\))?")

SCOPES = re.compile(r"[A-Za-z_~(][\w ()]*?::")

SPECIAL_PREFIXES = re.compile(
    r"^(vtable for|VTT for|typeinfo for|typeinfo name for|construction vtable for"
    r"|guard variable for|TLS init function for|TLS wrapper function for) "
)

NUMBERS = re.compile(r"\[(\d+)\]")


def highlight_signature(signature: str) -> Text:
    """
    Apply syntax highlighting to a demangled signature.

    Custom rules applied via Rich Text styling:
      - Scopes (ns::, Class::) -> DIM
      - Builtin keywords and cv-qualifiers -> BLUE
      - Operator names (operator+, operator new) -> MAGENTA / bold
      - Array dimensions -> CYAN
      - Special-name phrases (vtable for ...) -> YELLOW / italic

    Later rules win where they overlap.
    """
    text = Text(signature)

    for m in SCOPES.finditer(signature):
        text.stylize("dim", m.start(), m.end())

    for m in KEYWORDS.finditer(signature):
        text.stylize("blue", m.start(), m.end())

    for m in OPERATORS.finditer(signature):
        text.stylize("bold magenta", m.start(), m.end())

    for m in NUMBERS.finditer(signature):
        text.stylize("cyan", m.start(1), m.end(1))

    special = SPECIAL_PREFIXES.match(signature)
    if special:
        text.stylize("italic yellow", special.start(1), special.end(1))

    return text
