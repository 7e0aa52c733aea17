"""Line-oriented text helpers shared by the heuristic extractors.

Nothing here understands a grammar. Scope is reconstructed from raw text with
explicit counters (indentation width, brace depth), and comment/string content
is blanked out first so that delimiters inside literals do not disturb them.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class CommentStyle:
    """Comment and literal conventions of one language family."""
    line_comments: tuple[str, ...] = ()
    block: tuple[str, str] | None = None
    quotes: str = "\"'"
    triple_quotes: bool = False
    template_quotes: bool = False
    hash_attributes: bool = False  # PHP 8 ``#[Attr]`` is not a comment


PYTHON_STYLE = CommentStyle(line_comments=("#",), triple_quotes=True)
C_STYLE = CommentStyle(line_comments=("//",), block=("/*", "*/"), template_quotes=True)
PHP_STYLE = CommentStyle(line_comments=("//", "#"), block=("/*", "*/"), hash_attributes=True)
CSS_STYLE = CommentStyle(block=("/*", "*/"))
MARKUP_STYLE = CommentStyle(block=("<!--", "-->"), quotes="")

# Literal-type names per family: bool, int, float, str, list, map, tuple, unknown
LITERAL_TYPE_NAMES: dict[str, tuple[str, ...]] = {
    "python": ("bool", "int", "float", "str", "list", "dict", "tuple", "Any"),
    "javascript": ("boolean", "number", "number", "string", "array", "object", "array", "any"),
    "php": ("bool", "int", "float", "string", "array", "array", "array", "mixed"),
}

# Only newlines end a line; form feeds and Unicode separators stay inside it
LINE_BREAK_RE = re.compile(r"\r?\n")

_INT_RE = re.compile(r"^-?\d[\d_]*$")
_FLOAT_RE = re.compile(r"^-?\d[\d_]*\.\d+(?:[eE][-+]?\d+)?$")


def split_lines(code: str) -> list[str]:
    """Split source text into lines; a trailing newline does not start an extra line."""
    if not code:
        return []
    lines = LINE_BREAK_RE.split(code)
    if lines[-1] == "":
        lines.pop()
    return lines


def strip_code(lines: list[str], style: CommentStyle) -> list[str]:
    """Blank out comments and literal contents, keeping one output line per input line.

    Comments are removed; string literals keep their delimiters with the
    content dropped (``"a{b"`` becomes ``""``). Multi-line literals and block
    comments carry their state across lines. Characters outside literals are
    copied unchanged, so no brace is ever introduced.
    """
    result: list[str] = []
    in_block = False
    in_string: str | None = None

    for line in lines:
        out: list[str] = []
        i = 0
        n = len(line)
        if in_block or in_string:
            # Keep the indentation of continuation lines
            i = get_indent(line)
            out.append(line[:i])

        while i < n:
            if in_block:
                end = line.find(style.block[1], i)
                if end == -1:
                    i = n
                else:
                    i = end + len(style.block[1])
                    in_block = False
                continue

            if in_string:
                j = i
                while j < n:
                    if line[j] == "\\":
                        j += 2
                        continue
                    if line.startswith(in_string, j):
                        break
                    j += 1
                if j < n:
                    out.append(in_string)
                    i = j + len(in_string)
                    in_string = None
                else:
                    i = n
                continue

            if style.block and line.startswith(style.block[0], i):
                in_block = True
                i += len(style.block[0])
                continue

            if _starts_line_comment(line, i, style):
                break

            if style.triple_quotes and line.startswith(('"""', "'''"), i):
                in_string = line[i:i + 3]
                out.append(in_string)
                i += 3
                continue

            ch = line[i]
            if ch in style.quotes or (ch == "`" and style.template_quotes):
                in_string = ch
                out.append(ch)
                i += 1
                continue

            out.append(ch)
            i += 1

        # Only triple-quoted and template literals may span lines
        if in_string and len(in_string) == 1 and in_string != "`":
            in_string = None
        result.append("".join(out))

    return result


def _starts_line_comment(line: str, i: int, style: CommentStyle) -> bool:
    for prefix in style.line_comments:
        if line.startswith(prefix, i):
            if prefix == "#" and style.hash_attributes and line.startswith("#[", i):
                return False
            return True
    return False


def line_comment_index(line: str, style: CommentStyle) -> int:
    """Position where a trailing line comment starts, ignoring quoted text; -1 if none."""
    quote: str | None = None
    i = 0
    while i < len(line):
        ch = line[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in style.quotes or (ch == "`" and style.template_quotes):
            quote = ch
        elif _starts_line_comment(line, i, style):
            return i
        i += 1
    return -1


def strip_line_comment(line: str, style: CommentStyle) -> str:
    """``line`` without its trailing comment."""
    idx = line_comment_index(line, style)
    return (line if idx == -1 else line[:idx]).rstrip()


def match_paren(text: str, open_index: int, pair: str = "()") -> int:
    """Index of the bracket closing the one at ``open_index``; -1 when unbalanced."""
    depth = 0
    quote: str | None = None
    prev = ""
    for i in range(open_index, len(text)):
        ch = text[i]
        if quote:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in "\"'`":
            quote = ch
        elif ch == pair[0]:
            depth += 1
        elif ch == pair[1]:
            depth -= 1
            if depth == 0:
                return i
        prev = ch
    return -1


def get_indent(line: str) -> int:
    """Width of the leading whitespace."""
    return len(line) - len(line.lstrip())


def indented_block_end(lines: list[str], start: int, scan_from: int | None = None) -> int:
    """Index of the last line of the indentation body belonging to ``lines[start]``.

    The body is every line after the header indented deeper than the header;
    it stops at the first non-blank line at or below the header's indentation.
    Trailing blank lines are not part of the body.
    """
    base = get_indent(lines[start])
    end = start
    first = start + 1 if scan_from is None else scan_from
    for i in range(first, len(lines)):
        if not lines[i].strip():
            continue
        if get_indent(lines[i]) <= base:
            break
        end = i
    return max(end, first - 1)


def brace_block_end(code_lines: list[str], start: int) -> int:
    """Index of the line where the brace body opened at or after ``start`` closes.

    ``code_lines`` must already be stripped of comments and literals. The
    body ends when depth returns to zero after having gone positive. Braces
    inside parentheses (object defaults, destructured parameters) are not
    counted. A declaration that ends with ``;`` or is an expression-bodied
    arrow before any brace opens is a one-line span.
    """
    depth = 0
    parens = 0
    started = False
    for i in range(start, len(code_lines)):
        line = code_lines[i]
        for ch in line:
            if ch == "(":
                parens += 1
            elif ch == ")":
                parens = max(parens - 1, 0)
            elif parens:
                continue
            elif ch == "{":
                depth += 1
                started = True
            elif ch == "}":
                depth -= 1
        if started and depth <= 0:
            return i
        if not started:
            stripped = line.strip()
            if stripped.endswith(";"):
                return i
            if i == start and "=>" in stripped and not stripped.endswith(("=>", "(", ",")):
                return i
    return len(code_lines) - 1


def brace_depths(code_lines: list[str]) -> list[int]:
    """Brace depth at the start of every line of a stripped file."""
    depths: list[int] = []
    depth = 0
    for line in code_lines:
        depths.append(depth)
        depth += line.count("{") - line.count("}")
        depth = max(depth, 0)
    return depths


def collect_header(
    code_lines: list[str],
    lines: list[str],
    start: int,
    style: CommentStyle | None = None,
    max_lines: int = 20,
) -> tuple[str, int]:
    """Join a declaration header whose parameter list spans several lines.

    Parentheses are counted on the stripped copy; the returned text is taken
    from the original lines, minus their line comments when ``style`` is
    given. Returns the joined header and the index of its last line.
    """
    depth = 0
    opened = False
    end = start
    limit = min(len(code_lines), start + max_lines)
    for i in range(start, limit):
        for ch in code_lines[i]:
            if ch == "(":
                depth += 1
                opened = True
            elif ch == ")":
                depth -= 1
        end = i
        if not opened or depth <= 0:
            break
    if opened and depth > 0:
        # Unbalanced header, keep only the first line
        end = start
    parts = lines[start:end + 1]
    if style is not None:
        parts = [strip_line_comment(part, style) for part in parts]
    return " ".join(part.strip() for part in parts), end


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on ``sep`` where it is not nested in brackets or quotes."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    prev = ""

    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote and prev != "\\":
                quote = None
        elif ch in "\"'`":
            quote = ch
            current.append(ch)
        elif ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth -= 1
            elif ch == "<" and (prev.isalnum() or prev == "_"):
                depth += 1
            elif ch == ">" and prev not in "=-" and depth > 0:
                depth -= 1
            current.append(ch)
        prev = ch

    if "".join(current).strip():
        parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def find_top_level(text: str, target: str) -> int:
    """Index of the first top-level ``target`` character, or -1.

    For ``=`` the comparison and arrow operators (``==``, ``=>``, ``<=``,
    ``>=``, ``!=``) are skipped.
    """
    depth = 0
    quote: str | None = None
    prev = ""
    for i, ch in enumerate(text):
        if quote:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in "\"'`":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "<" and (prev.isalnum() or prev == "_"):
            depth += 1
        elif ch == ">" and prev not in "=-" and depth > 0:
            depth -= 1
        elif ch == target and depth == 0:
            if target == "=":
                nxt = text[i + 1] if i + 1 < len(text) else ""
                if (nxt and nxt in "=>") or (prev and prev in "=<>!"):
                    prev = ch
                    continue
            return i
        prev = ch
    return -1


def split_name_type_default(part: str, unknown: str) -> tuple[str, str, str | None]:
    """Split ``name: type = default`` into its three pieces."""
    default = None
    main = part.strip()
    eq = find_top_level(main, "=")
    if eq > -1:
        default = main[eq + 1:].strip()
        main = main[:eq].strip()
    colon = find_top_level(main, ":")
    if colon > -1:
        type_text = main[colon + 1:].strip()
        return main[:colon].strip(), type_text or unknown, default
    return main, unknown, default


def collect_decorators(lines: list[str], index: int, prefixes: tuple[str, ...] = ("@",)) -> list[str]:
    """Decorator lines directly above ``lines[index]``; blank lines are skipped."""
    decorators: list[str] = []
    for j in range(index - 1, -1, -1):
        prev = lines[j].strip()
        if prev.startswith(prefixes):
            decorators.insert(0, prev)
        elif prev == "":
            continue
        else:
            break
    return decorators


def infer_literal_type(value: str, family: str) -> str:
    """Coarse type of a literal from its spelling."""
    names = LITERAL_TYPE_NAMES.get(family, LITERAL_TYPE_NAMES["python"])
    v = value.strip().rstrip(";").strip()
    if v in ("True", "False", "true", "false", "TRUE", "FALSE"):
        return names[0]
    if _INT_RE.match(v):
        return names[1]
    if _FLOAT_RE.match(v):
        return names[2]
    if v[:1] in ("'", '"', "`") or v[:2] in ('f"', "f'", 'r"', "r'", 'b"', "b'"):
        return names[3]
    if v.startswith("[") or v.startswith("array("):
        return names[4]
    if v.startswith("{"):
        return names[5]
    if v.startswith("("):
        return names[6]
    return names[7]


def word_pattern(name: str) -> re.Pattern:
    """Regex matching ``name`` as a whole identifier (``$`` counts as a word char)."""
    return re.compile(r"(?<![\w$])" + re.escape(name) + r"(?![\w$])")
