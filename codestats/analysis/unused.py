"""Word-level scan for imports, callables and constants that nothing in the file references."""

import re

from ..models import Callable, ExtractionResult, UnusedItem
from ..parsers.text_utils import CommentStyle, strip_code, word_pattern

# Names that are only ever referenced inside annotations
TYPING_NAMES = frozenset({
    "Dict", "List", "Set", "Tuple", "Optional", "Union", "Any", "Type", "Callable",
    "Iterator", "Generator", "Sequence", "Mapping", "Iterable", "ClassVar", "Final",
    "Literal", "TypeVar", "Generic", "Protocol", "Awaitable", "Coroutine",
    "AsyncIterator", "AsyncGenerator", "NamedTuple", "TypedDict", "Annotated",
    "TypeAlias", "Self",
    "FC", "ReactNode", "PropsWithChildren", "ComponentType", "CSSProperties",
    "MouseEvent", "ChangeEvent", "FormEvent",
})
TYPING_MODULE_RE = re.compile(r"^typing|^types$|^collections\.abc|^__future__$")

CONSTRUCTORS = frozenset({"__init__", "constructor", "__construct"})
DECLARATION_RE = re.compile(r"(?:async\s+function|function|def)\s+[\w$#]+")
DEFINE_CALL_RE = re.compile(r"\bdefine\s*\(")


def call_pattern(name: str) -> re.Pattern:
    """``name(`` called bare or through ``self.``/``this.``/``$this->``/``::``."""
    return re.compile(r"(?:self\.|this\.|\$this->|::|(?<![\w$#]))" + re.escape(name) + r"\s*\(")


def detect_unused(lines: list[str], extraction: ExtractionResult, style: CommentStyle) -> list[UnusedItem]:
    """Imports, callables and module-level constants with no reference elsewhere in the file."""
    code_lines = strip_code(lines, style)
    unused = _unused_imports(code_lines, extraction)
    unused.extend(_unused_callables(lines, extraction))
    unused.extend(_unused_globals(lines, code_lines, extraction))
    return unused


def _unused_imports(code_lines: list[str], extraction: ExtractionResult) -> list[UnusedItem]:
    import_lines: set[int] = set()
    for imp in extraction.imports:
        import_lines.update(range(imp.line_number, imp.end_line_number + 1))
    text = "\n".join(code for n, code in enumerate(code_lines, start=1) if n not in import_lines)

    unused = []
    for imp in extraction.imports:
        if TYPING_MODULE_RE.match(imp.module):
            continue
        for name in imp.names:
            if name == "*" or len(name) <= 1 or name in TYPING_NAMES:
                continue
            if not word_pattern(name).search(text):
                unused.append(UnusedItem(name=name, kind="import", line_number=imp.line_number))
    return unused


def _unused_callables(lines: list[str], extraction: ExtractionResult) -> list[UnusedItem]:
    candidates: list[Callable] = list(extraction.callables)
    for type_decl in extraction.types:
        candidates.extend(type_decl.methods)

    unused = []
    for func in candidates:
        name = func.name
        if name in CONSTRUCTORS or name.startswith("__") or not func.line_number:
            continue
        # The declaration line itself never counts as a use
        text = "\n".join(line for n, line in enumerate(lines, start=1) if n != func.line_number)
        if call_pattern(name).search(text):
            continue
        if word_pattern(name).search(DECLARATION_RE.sub("", text)):
            continue
        unused.append(UnusedItem(name=name, kind="callable", line_number=func.line_number))
    return unused


def _unused_globals(lines: list[str], code_lines: list[str], extraction: ExtractionResult) -> list[UnusedItem]:
    unused = []
    for constant in extraction.globals:
        pattern = word_pattern(constant.name)
        # define('NAME', ...) keeps the name inside a string literal
        declared = next(
            (
                n
                for n, code in enumerate(code_lines)
                if pattern.search(code) or (DEFINE_CALL_RE.search(code) and pattern.search(lines[n]))
            ),
            None,
        )
        if declared is None:
            continue
        text = "\n".join(code for n, code in enumerate(code_lines) if n != declared)
        if not pattern.search(text):
            unused.append(UnusedItem(name=constant.name, kind="variable", line_number=declared + 1))
    return unused
